#!/usr/bin/env python3
"""
对冲订单计算器 - 纯函数

根据美元负债和当前空头敞口，决定是否需要加空（sell）或回补（buy），
以及交易多少 BTC。
零依赖，100%可测试。
"""

from hedge_broker.core.band_calculator import (
    round_to_satoshi,
    snap_to_band,
    validate_finite,
    validate_non_negative,
    validate_price,
)
from hedge_broker.core.exceptions import ErrorKind
from hedge_broker.core.types import (
    DEFAULT_BANDS,
    BandConfig,
    BandPosition,
    HedgeDecision,
    OrderSide,
)


def evaluate_hedge(
    usd_liability: float,
    usd_exposure: float,
    btc_price: float,
    bands: BandConfig = DEFAULT_BANDS
) -> HedgeDecision:
    """
    计算对冲订单

    Args:
        usd_liability: 需要对冲的美元负债（>= 0）
        usd_exposure: 当前空头仓位的美元价值（可以为负，表示反向过度修正）
        btc_price: BTC 现价（> 0）
        bands: 安全区间配置

    Returns:
        HedgeDecision（buy_or_sell 为 None 表示无需交易）

    Raises:
        DomainError: 价格非正、负债为负或输入非有限数

    Logic:
        - 敞口区间 = [low * 负债, high * 负债]
        - 敞口不足 -> 目标贴到下边界，sell 差额（加深空头）
        - 敞口过多 -> 目标贴到上边界，buy 差额（回补空头）
        - 区间内（含边界）-> 不操作
        - 负债为 0 -> 不操作

    Examples:
        >>> evaluate_hedge(100, 0, 10000)
        HedgeDecision(buy_or_sell=<OrderSide.SELL: 'sell'>, btc_amount=0.0098, ...)

        >>> evaluate_hedge(1000, 2000, 10000)
        HedgeDecision(buy_or_sell=<OrderSide.BUY: 'buy'>, btc_amount=0.1, ...)
    """
    btc_price = validate_price(btc_price)
    usd_liability = validate_non_negative("usd_liability", usd_liability, ErrorKind.NEGATIVE_LIABILITY)
    usd_exposure = validate_finite("usd_exposure", usd_exposure)

    if usd_liability == 0:
        return HedgeDecision(metadata={"reason": "no liability to hedge"})

    lower = bands.shorting_low_bound * usd_liability
    upper = bands.shorting_high_bound * usd_liability
    position, target = snap_to_band(usd_exposure, lower, upper)

    metadata = {
        "ratio": usd_exposure / usd_liability,
        "target_usd": target,
        "position": position.value,
    }

    if position == BandPosition.WITHIN:
        return HedgeDecision(metadata=metadata)

    # 敞口不足 -> 加空；敞口过多 -> 回补
    if position == BandPosition.BELOW:
        side = OrderSide.SELL
        delta_usd = target - usd_exposure
    else:
        side = OrderSide.BUY
        delta_usd = usd_exposure - target

    btc_amount = round_to_satoshi(delta_usd / btc_price)
    metadata["delta_usd"] = delta_usd

    # 不足 1 聪的差额无法下单
    if btc_amount == 0:
        return HedgeDecision(metadata=metadata)

    return HedgeDecision(buy_or_sell=side, btc_amount=btc_amount, metadata=metadata)
