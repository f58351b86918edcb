#!/usr/bin/env python3
"""
区间计算器 - 纯函数

判断数值是否落在安全区间内，并给出贴边目标值；
聪（satoshi）精度换算。两个计算器共用，保证舍入规则一致。
零依赖，100%可测试。
"""

import math
from typing import Tuple

from hedge_broker.core.exceptions import DomainError, ErrorKind
from hedge_broker.core.types import BandPosition

SATS_PER_BTC = 10 ** 8


def btc_to_sats(btc: float) -> int:
    """
    BTC 转换为整数聪（四舍五入，0.5 向上）

    Examples:
        >>> btc_to_sats(0.0098)
        980000

        >>> btc_to_sats(0.1)
        10000000
    """
    return math.floor(btc * SATS_PER_BTC + 0.5)


def sats_to_btc(sats: int) -> float:
    """
    聪转换为 BTC

    Examples:
        >>> sats_to_btc(4800000)
        0.048
    """
    return sats / SATS_PER_BTC


def round_to_satoshi(btc: float) -> float:
    """
    BTC 数量舍入到聪精度（交易所按整数聪下单）

    Examples:
        >>> round_to_satoshi(0.0444444444)
        0.04444444
    """
    return sats_to_btc(btc_to_sats(btc))


def locate_in_band(value: float, lower: float, upper: float) -> BandPosition:
    """
    判断数值相对区间 [lower, upper] 的位置（两端都包含）

    Examples:
        >>> locate_in_band(980.0, 980.0, 1000.0)
        <BandPosition.WITHIN: 'within'>

        >>> locate_in_band(500.0, 980.0, 1000.0)
        <BandPosition.BELOW: 'below'>
    """
    if value < lower:
        return BandPosition.BELOW
    if value > upper:
        return BandPosition.ABOVE
    return BandPosition.WITHIN


def snap_to_band(value: float, lower: float, upper: float) -> Tuple[BandPosition, float]:
    """
    计算贴边目标值

    区间外的值贴到最近的边界（不是中点），区间内的值保持不变。
    贴近边即可避免下一轮立刻反向修正。

    Returns:
        (position, target)

    Examples:
        >>> snap_to_band(500.0, 980.0, 1000.0)
        (<BandPosition.BELOW: 'below'>, 980.0)

        >>> snap_to_band(2000.0, 980.0, 1000.0)
        (<BandPosition.ABOVE: 'above'>, 1000.0)

        >>> snap_to_band(990.0, 980.0, 1000.0)
        (<BandPosition.WITHIN: 'within'>, 990.0)
    """
    position = locate_in_band(value, lower, upper)

    if position == BandPosition.BELOW:
        return position, lower
    if position == BandPosition.ABOVE:
        return position, upper
    return position, value


# ========== 前置条件检查 ==========
# 输入统一换算为 float（Decimal / int 也可传入），返回换算后的值

def validate_finite(field: str, value: float) -> float:
    """NaN / inf 一律拒绝"""
    value = float(value)
    if not math.isfinite(value):
        raise DomainError(ErrorKind.NON_FINITE_INPUT, field, value)
    return value


def validate_price(btc_price: float) -> float:
    """价格必须为正的有限数"""
    btc_price = validate_finite("btc_price", btc_price)
    if btc_price <= 0:
        raise DomainError(ErrorKind.NON_POSITIVE_PRICE, "btc_price", btc_price)
    return btc_price


def validate_non_negative(field: str, value: float, kind: ErrorKind) -> float:
    """负债、保证金不能为负"""
    value = validate_finite(field, value)
    if value < 0:
        raise DomainError(kind, field, value)
    return value
