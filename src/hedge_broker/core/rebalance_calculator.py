#!/usr/bin/env python3
"""
保证金再平衡计算器 - 纯函数

根据美元负债和已抵押的保证金，决定是否需要追加（deposit）
或提取（withdraw）保证金，使杠杆 = 负债 / 保证金 保持在安全区间内。
零依赖，100%可测试。
"""

from hedge_broker.core.band_calculator import (
    round_to_satoshi,
    snap_to_band,
    validate_non_negative,
    validate_price,
)
from hedge_broker.core.exceptions import ErrorKind
from hedge_broker.core.types import (
    DEFAULT_BANDS,
    BandConfig,
    BandPosition,
    RebalanceDecision,
    TransferDirection,
)


def evaluate_rebalance(
    usd_liability: float,
    usd_collateral: float,
    btc_price: float,
    bands: BandConfig = DEFAULT_BANDS
) -> RebalanceDecision:
    """
    计算保证金划转

    Args:
        usd_liability: 仓位需要承担的美元负债（>= 0）
        usd_collateral: 当前保证金的美元价值（>= 0）
        btc_price: BTC 现价（> 0）
        bands: 安全区间配置

    Returns:
        RebalanceDecision（deposit_or_withdraw 为 None 表示无需划转）

    Raises:
        DomainError: 价格非正、负债或保证金为负、输入非有限数

    Logic:
        杠杆区间换算成保证金区间 [负债 / high, 负债 / low]，不做除以保证金的运算：
        - 保证金不足（杠杆过高，含保证金为 0）-> 贴到 负债 / high，deposit 差额
        - 保证金过多（杠杆过低，含负债为 0）-> 贴到 负债 / low，withdraw 差额
        - 区间内（含边界）-> 不操作

    Examples:
        >>> evaluate_rebalance(1000, 0, 10000)
        RebalanceDecision(deposit_or_withdraw=<TransferDirection.DEPOSIT: 'deposit'>, btc_amount=0.04444444, ...)

        >>> evaluate_rebalance(1000, 500, 10000)
        RebalanceDecision(deposit_or_withdraw=None, btc_amount=0.0, ...)
    """
    btc_price = validate_price(btc_price)
    usd_liability = validate_non_negative("usd_liability", usd_liability, ErrorKind.NEGATIVE_LIABILITY)
    usd_collateral = validate_non_negative("usd_collateral", usd_collateral, ErrorKind.NEGATIVE_COLLATERAL)

    # 负债为 0 时区间退化为 [0, 0]：无保证金则不操作，有保证金则全部提取
    lower = usd_liability / bands.leverage_high_bound
    upper = usd_liability / bands.leverage_low_bound
    position, target = snap_to_band(usd_collateral, lower, upper)

    metadata = {
        "leverage": usd_liability / usd_collateral if usd_collateral > 0 else None,
        "target_usd": target,
        "position": position.value,
    }

    if position == BandPosition.WITHIN:
        return RebalanceDecision(metadata=metadata)

    if position == BandPosition.BELOW:
        direction = TransferDirection.DEPOSIT
        delta_usd = target - usd_collateral
    else:
        direction = TransferDirection.WITHDRAW
        delta_usd = usd_collateral - target

    btc_amount = round_to_satoshi(delta_usd / btc_price)
    metadata["delta_usd"] = delta_usd

    if btc_amount == 0:
        return RebalanceDecision(metadata=metadata)

    return RebalanceDecision(
        deposit_or_withdraw=direction,
        btc_amount=btc_amount,
        metadata=metadata
    )
