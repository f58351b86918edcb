"""
核心类型定义

集中定义所有 core 模块使用的数据类型和枚举
遵循原则：
- 只导入标准库（异常除外）
- 纯数据类型，不包含业务逻辑
- 每次评估都重新构造，不可变
"""
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, Generic, Optional, TypeVar, Union

from hedge_broker.core.exceptions import DomainError, InvalidConfigError


# ========== 枚举 ==========

class OrderSide(str, Enum):
    """对冲交易方向（sell = 加深空头，buy = 回补空头）"""
    BUY = "buy"
    SELL = "sell"


class TransferDirection(str, Enum):
    """保证金划转方向"""
    DEPOSIT = "deposit"
    WITHDRAW = "withdraw"


class BandPosition(Enum):
    """数值相对安全区间的位置"""
    BELOW = "below"
    WITHIN = "within"
    ABOVE = "above"


# ========== 配置 ==========

@dataclass(frozen=True)
class BandConfig:
    """
    安全区间配置

    shorting_*: 空头敞口 / 负债 的比例区间
    leverage_*: 负债 / 保证金 的杠杆区间
    """
    shorting_low_bound: float = 0.98
    shorting_high_bound: float = 1.00
    leverage_low_bound: float = 1.8
    leverage_high_bound: float = 2.25

    def __post_init__(self):
        for name in ("shorting_low_bound", "shorting_high_bound",
                     "leverage_low_bound", "leverage_high_bound"):
            value = getattr(self, name)
            if not value > 0:
                raise InvalidConfigError(name, value, "> 0")

        if self.shorting_low_bound > self.shorting_high_bound:
            raise InvalidConfigError(
                "shorting_low_bound", self.shorting_low_bound,
                f"<= shorting_high_bound ({self.shorting_high_bound})"
            )
        if self.leverage_low_bound > self.leverage_high_bound:
            raise InvalidConfigError(
                "leverage_low_bound", self.leverage_low_bound,
                f"<= leverage_high_bound ({self.leverage_high_bound})"
            )


DEFAULT_BANDS = BandConfig()


# ========== 输入快照 ==========

@dataclass(frozen=True)
class HedgeInput:
    """对冲计算输入快照"""
    usd_liability: float
    usd_exposure: float
    btc_price: float


@dataclass(frozen=True)
class RebalanceInput:
    """保证金计算输入快照"""
    usd_liability: float
    usd_collateral: float
    btc_price: float


# ========== 决策 ==========

@dataclass(frozen=True)
class HedgeDecision:
    """
    对冲决策

    buy_or_sell 为 None 表示无需交易，此时 btc_amount 必须为 0
    """
    buy_or_sell: Optional[OrderSide] = None
    btc_amount: float = 0.0
    metadata: Dict[str, Any] = field(default_factory=dict, compare=False)

    def __post_init__(self):
        _check_amount(self.buy_or_sell, self.btc_amount)

    @property
    def is_needed(self) -> bool:
        return self.buy_or_sell is not None


@dataclass(frozen=True)
class RebalanceDecision:
    """
    保证金决策

    deposit_or_withdraw 为 None 表示无需划转，此时 btc_amount 必须为 0
    """
    deposit_or_withdraw: Optional[TransferDirection] = None
    btc_amount: float = 0.0
    metadata: Dict[str, Any] = field(default_factory=dict, compare=False)

    def __post_init__(self):
        _check_amount(self.deposit_or_withdraw, self.btc_amount)

    @property
    def is_needed(self) -> bool:
        return self.deposit_or_withdraw is not None


def _check_amount(action: Optional[Enum], btc_amount: float):
    if btc_amount < 0:
        raise ValueError(f"btc_amount must be non-negative, got {btc_amount}")
    if action is None and btc_amount != 0:
        raise ValueError(f"btc_amount must be 0 without an action, got {btc_amount}")
    if action is not None and btc_amount == 0:
        raise ValueError(f"{action.value} requires a positive btc_amount")


# ========== 结果类型 ==========

T = TypeVar("T")


@dataclass(frozen=True)
class Ok(Generic[T]):
    """评估成功"""
    value: T

    @property
    def is_ok(self) -> bool:
        return True

    def unwrap(self) -> T:
        return self.value


@dataclass(frozen=True)
class Err:
    """评估失败（前置条件不满足）"""
    error: DomainError

    @property
    def is_ok(self) -> bool:
        return False

    def unwrap(self):
        raise self.error


Result = Union[Ok[T], Err]
