#!/usr/bin/env python3
"""
Mock Exchange - 模拟交易所实现
用于模拟盘和开发，避免真实下单
"""

import logging
from datetime import datetime

from hedge_broker.core.band_calculator import btc_to_sats, sats_to_btc
from hedge_broker.core.exceptions import ExecutionError
from hedge_broker.core.types import OrderSide, TransferDirection
from .interface import BrokerExchange, LiabilitySource

logger = logging.getLogger(__name__)


class MockExchange(BrokerExchange):
    """
    模拟交易所

    仓位和保证金按整数聪记账，按当前价格折算美元
    """

    def __init__(self, config: dict):
        super().__init__(config)
        self.btc_price = float(config.get("btc_price", 10000.0))
        self.short_sats = btc_to_sats(config.get("short_btc", 0.0))
        self.collateral_sats = btc_to_sats(config.get("collateral_btc", 0.0))
        self.orders = {}
        self.transfers = {}

    async def get_btc_price(self) -> float:
        return self.btc_price

    async def get_usd_exposure(self) -> float:
        return sats_to_btc(self.short_sats) * self.btc_price

    async def get_usd_collateral(self) -> float:
        return sats_to_btc(self.collateral_sats) * self.btc_price

    async def place_market_order(self, side: OrderSide, btc_amount: float) -> str:
        sats = btc_to_sats(btc_amount)
        if sats <= 0:
            raise ExecutionError("Order size must be at least 1 sat", {"btc_amount": btc_amount})

        order_id = f"mock_{side.value}_market_{len(self.orders)}"
        self.orders[order_id] = {
            "side": side.value,
            "sats": sats,
            "price": self.btc_price,
            "status": "filled",
            "filled_at": datetime.now()
        }

        # sell 加深空头，buy 回补
        self.short_sats += sats if side == OrderSide.SELL else -sats

        logger.info(f"[MockExchange] market order filled: {order_id} - {side.value} {sats_to_btc(sats):.8f} BTC")
        return order_id

    async def transfer_collateral(self, direction: TransferDirection, btc_amount: float) -> str:
        sats = btc_to_sats(btc_amount)
        if sats <= 0:
            raise ExecutionError("Transfer size must be at least 1 sat", {"btc_amount": btc_amount})

        if direction == TransferDirection.WITHDRAW and sats > self.collateral_sats:
            raise ExecutionError(
                "Insufficient collateral",
                {"requested_sats": sats, "available_sats": self.collateral_sats}
            )

        transfer_id = f"mock_{direction.value}_{len(self.transfers)}"
        self.transfers[transfer_id] = {
            "direction": direction.value,
            "sats": sats,
            "created_at": datetime.now()
        }
        self.collateral_sats += sats if direction == TransferDirection.DEPOSIT else -sats

        logger.info(f"[MockExchange] collateral {direction.value}: {transfer_id} - {sats_to_btc(sats):.8f} BTC")
        return transfer_id

    def set_price(self, btc_price: float):
        """设置价格（模拟行情变化）"""
        self.btc_price = btc_price


class StaticLiabilitySource(LiabilitySource):
    """固定负债（模拟盘使用）"""

    def __init__(self, usd_liability: float):
        self.usd_liability = usd_liability

    async def get_usd_liability(self) -> float:
        return self.usd_liability
