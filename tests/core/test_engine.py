#!/usr/bin/env python3
"""
测试 engine.py 和核心类型

重点测试：
1. 安全区间注入
2. Ok / Err 结果类型
3. 决策不变量
"""

import pytest

from hedge_broker.core.engine import ExposureEngine
from hedge_broker.core.exceptions import DomainError, ErrorKind, InvalidConfigError
from hedge_broker.core.types import (
    DEFAULT_BANDS,
    BandConfig,
    Err,
    HedgeDecision,
    HedgeInput,
    Ok,
    OrderSide,
    RebalanceDecision,
    RebalanceInput,
    TransferDirection,
)


@pytest.fixture
def engine():
    """默认区间引擎"""
    return ExposureEngine()


class TestHedgeResult:
    """对冲决策结果"""

    def test_ok_result(self, engine):
        result = engine.is_order_needed(HedgeInput(usd_liability=1000, usd_exposure=500, btc_price=10000))
        assert isinstance(result, Ok)
        assert result.is_ok
        assert result.unwrap().buy_or_sell == OrderSide.SELL
        assert result.unwrap().btc_amount == 0.048

    def test_err_result_does_not_raise(self, engine):
        result = engine.is_order_needed(HedgeInput(usd_liability=1000, usd_exposure=500, btc_price=0))
        assert isinstance(result, Err)
        assert not result.is_ok
        assert result.error.kind == ErrorKind.NON_POSITIVE_PRICE

    def test_unwrap_err_raises(self, engine):
        result = engine.is_order_needed(HedgeInput(usd_liability=-1, usd_exposure=0, btc_price=10000))
        with pytest.raises(DomainError):
            result.unwrap()


class TestRebalanceResult:
    """保证金决策结果"""

    def test_ok_result(self, engine):
        result = engine.is_rebalance_needed(RebalanceInput(usd_liability=1000, usd_collateral=800, btc_price=10000))
        assert result.is_ok
        assert result.value.deposit_or_withdraw == TransferDirection.WITHDRAW

    def test_err_result(self, engine):
        result = engine.is_rebalance_needed(RebalanceInput(usd_liability=1000, usd_collateral=-1, btc_price=10000))
        assert not result.is_ok
        assert result.error.kind == ErrorKind.NEGATIVE_COLLATERAL


class TestInjectedBands:
    """区间在构造时注入，不影响其他实例"""

    def test_default_bands(self, engine):
        assert engine.bands == DEFAULT_BANDS
        assert engine.bands.shorting_low_bound == 0.98
        assert engine.bands.shorting_high_bound == 1.00
        assert engine.bands.leverage_low_bound == 1.8
        assert engine.bands.leverage_high_bound == 2.25

    def test_custom_bands_change_decision(self, engine):
        wide = ExposureEngine(BandConfig(shorting_low_bound=0.5, shorting_high_bound=1.5))
        snapshot = HedgeInput(usd_liability=1000, usd_exposure=700, btc_price=10000)

        assert wide.is_order_needed(snapshot).unwrap().buy_or_sell is None
        assert engine.is_order_needed(snapshot).unwrap().buy_or_sell == OrderSide.SELL

    def test_custom_leverage_band(self):
        engine = ExposureEngine(BandConfig(leverage_low_bound=1.0, leverage_high_bound=3.0))
        result = engine.is_rebalance_needed(RebalanceInput(usd_liability=1000, usd_collateral=800, btc_price=10000))
        assert result.unwrap().deposit_or_withdraw is None


class TestBandConfigValidation:
    """区间配置校验"""

    def test_inverted_shorting_band(self):
        with pytest.raises(InvalidConfigError) as exc_info:
            BandConfig(shorting_low_bound=1.1, shorting_high_bound=1.0)
        assert exc_info.value.details["field"] == "shorting_low_bound"

    def test_inverted_leverage_band(self):
        with pytest.raises(InvalidConfigError):
            BandConfig(leverage_low_bound=3.0, leverage_high_bound=2.0)

    @pytest.mark.parametrize("field", [
        "shorting_low_bound", "shorting_high_bound",
        "leverage_low_bound", "leverage_high_bound",
    ])
    def test_non_positive_edge(self, field):
        with pytest.raises(InvalidConfigError):
            BandConfig(**{field: 0.0})

    def test_bands_are_immutable(self):
        with pytest.raises(AttributeError):
            DEFAULT_BANDS.shorting_low_bound = 0.5


class TestDecisionInvariants:
    """btc_amount 为 0 当且仅当无操作"""

    def test_action_requires_amount(self):
        with pytest.raises(ValueError):
            HedgeDecision(buy_or_sell=OrderSide.BUY, btc_amount=0.0)

    def test_no_action_requires_zero_amount(self):
        with pytest.raises(ValueError):
            RebalanceDecision(deposit_or_withdraw=None, btc_amount=0.1)

    def test_negative_amount(self):
        with pytest.raises(ValueError):
            RebalanceDecision(deposit_or_withdraw=TransferDirection.DEPOSIT, btc_amount=-0.1)

    def test_equality_ignores_metadata(self):
        a = HedgeDecision(OrderSide.SELL, 0.1, metadata={"ratio": 0.5})
        b = HedgeDecision(OrderSide.SELL, 0.1)
        assert a == b

    def test_enum_values(self):
        assert OrderSide.SELL.value == "sell"
        assert OrderSide.BUY == "buy"
        assert TransferDirection.DEPOSIT.value == "deposit"
        assert TransferDirection.WITHDRAW == "withdraw"
