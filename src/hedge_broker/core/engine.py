#!/usr/bin/env python3
"""
敞口再平衡引擎

两个纯计算器的无状态外壳：
- 安全区间在构造时注入（不使用全局变量）
- 前置条件错误以 Err 返回，不抛异常
"""

import logging

from hedge_broker.core.exceptions import DomainError
from hedge_broker.core.hedge_calculator import evaluate_hedge
from hedge_broker.core.rebalance_calculator import evaluate_rebalance
from hedge_broker.core.types import (
    DEFAULT_BANDS,
    BandConfig,
    Err,
    HedgeDecision,
    HedgeInput,
    Ok,
    RebalanceDecision,
    RebalanceInput,
    Result,
)

logger = logging.getLogger(__name__)


class ExposureEngine:
    """
    敞口再平衡引擎

    不持有可变状态，可以被任意多个调用方并发使用。
    调用方需保证：同一组负债/敞口同一时间最多只有一次执行在进行中。
    """

    def __init__(self, bands: BandConfig = DEFAULT_BANDS):
        self.bands = bands

    def is_order_needed(self, data: HedgeInput) -> Result[HedgeDecision]:
        """对冲订单决策"""
        try:
            decision = evaluate_hedge(
                usd_liability=data.usd_liability,
                usd_exposure=data.usd_exposure,
                btc_price=data.btc_price,
                bands=self.bands
            )
        except DomainError as e:
            logger.debug(f"Hedge evaluation rejected: {e}")
            return Err(e)
        return Ok(decision)

    def is_rebalance_needed(self, data: RebalanceInput) -> Result[RebalanceDecision]:
        """保证金划转决策"""
        try:
            decision = evaluate_rebalance(
                usd_liability=data.usd_liability,
                usd_collateral=data.usd_collateral,
                btc_price=data.btc_price,
                bands=self.bands
            )
        except DomainError as e:
            logger.debug(f"Rebalance evaluation rejected: {e}")
            return Err(e)
        return Ok(decision)
