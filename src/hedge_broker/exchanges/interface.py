#!/usr/bin/env python3
"""
外部协作方接口 - 纯接口定义

引擎本身不做 I/O；负债、敞口、保证金、价格以及下单/划转
都通过这里定义的接口由外部实现提供
"""

from abc import ABC, abstractmethod

from hedge_broker.core.types import OrderSide, TransferDirection


class BrokerExchange(ABC):
    """衍生品交易所接口（持有 BTC 空头仓位）"""

    def __init__(self, config: dict):
        """
        Args:
            config: 交易所配置
                {
                    "name": "mock",
                    ...
                }
        """
        self.config = config
        self.name = config["name"]

    @abstractmethod
    async def get_btc_price(self) -> float:
        """
        获取 BTC 现价

        Returns:
            美元价格（> 0）
        """
        pass

    @abstractmethod
    async def get_usd_exposure(self) -> float:
        """
        获取空头仓位的美元名义价值

        Returns:
            正数表示空头，负数表示反向（多头）
        """
        pass

    @abstractmethod
    async def get_usd_collateral(self) -> float:
        """
        获取已抵押保证金的美元价值

        Returns:
            保证金美元价值（>= 0）
        """
        pass

    @abstractmethod
    async def place_market_order(self, side: OrderSide, btc_amount: float) -> str:
        """
        下市价单

        Args:
            side: sell 加深空头，buy 回补空头
            btc_amount: BTC 数量（聪精度）

        Returns:
            订单ID
        """
        pass

    @abstractmethod
    async def transfer_collateral(self, direction: TransferDirection, btc_amount: float) -> str:
        """
        划转保证金

        Args:
            direction: deposit 追加，withdraw 提取
            btc_amount: BTC 数量（聪精度）

        Returns:
            划转ID
        """
        pass


class LiabilitySource(ABC):
    """美元负债来源（所有 USD 钱包余额之和）"""

    @abstractmethod
    async def get_usd_liability(self) -> float:
        """
        Returns:
            美元负债（>= 0）
        """
        pass
