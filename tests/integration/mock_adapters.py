#!/usr/bin/env python3
"""
Mock adapters for integration testing

这些mock adapters模拟真实的I/O操作，用于测试BrokerBot的协调逻辑
"""

import asyncio
from typing import List, Optional

from hedge_broker.core.exceptions import ExecutionError
from hedge_broker.core.types import OrderSide, TransferDirection
from hedge_broker.exchanges.interface import BrokerExchange, LiabilitySource


class MockExchangeClient(BrokerExchange):
    """
    模拟交易所客户端

    直接以美元记账，记录所有订单和划转
    """

    def __init__(self, btc_price: float = 10000.0, usd_exposure: float = 0.0, usd_collateral: float = 0.0):
        super().__init__({"name": "test"})
        self.btc_price = btc_price
        self.usd_exposure = usd_exposure
        self.usd_collateral = usd_collateral
        self.orders: List[tuple] = []
        self.transfers: List[tuple] = []

        # 故障注入
        self.fail_orders = False
        self.fail_transfers = False
        self.fail_price = False

        # 用于并发测试：设置后 get_btc_price 会等待
        self.price_gate: Optional[asyncio.Event] = None
        self.price_requested = asyncio.Event()

    async def get_btc_price(self) -> float:
        self.price_requested.set()
        if self.price_gate is not None:
            await self.price_gate.wait()
        if self.fail_price:
            raise ConnectionError("price feed unavailable")
        return self.btc_price

    async def get_usd_exposure(self) -> float:
        return self.usd_exposure

    async def get_usd_collateral(self) -> float:
        return self.usd_collateral

    async def place_market_order(self, side: OrderSide, btc_amount: float) -> str:
        if self.fail_orders:
            raise ExecutionError("order rejected", {"side": side.value})

        self.orders.append((side, btc_amount))
        usd = btc_amount * self.btc_price
        self.usd_exposure += usd if side == OrderSide.SELL else -usd
        return f"ORDER-{len(self.orders)}"

    async def transfer_collateral(self, direction: TransferDirection, btc_amount: float) -> str:
        if self.fail_transfers:
            raise ExecutionError("transfer rejected", {"direction": direction.value})

        self.transfers.append((direction, btc_amount))
        usd = btc_amount * self.btc_price
        self.usd_collateral += usd if direction == TransferDirection.DEPOSIT else -usd
        return f"TRANSFER-{len(self.transfers)}"


class MockLiabilitySource(LiabilitySource):
    """模拟负债来源"""

    def __init__(self, usd_liability: float = 0.0):
        self.usd_liability = usd_liability
        self.fail = False

    async def get_usd_liability(self) -> float:
        if self.fail:
            raise ConnectionError("database unavailable")
        return self.usd_liability


class MockPlugin:
    """记录所有回调"""

    def __init__(self):
        self.decisions = []
        self.actions = []
        self.errors = []
        self.reports = []

    async def on_decision(self, **kwargs):
        self.decisions.append(kwargs)

    async def on_action(self, **kwargs):
        self.actions.append(kwargs)

    async def on_error(self, **kwargs):
        self.errors.append(kwargs)

    async def on_report(self, **kwargs):
        self.reports.append(kwargs)
