"""
Exchange integration modules - 统一入口
"""

from .interface import BrokerExchange, LiabilitySource
from .mock import MockExchange, StaticLiabilitySource


def create_exchange(config: dict) -> BrokerExchange:
    """
    工厂函数：根据配置创建交易所实例

    Args:
        config: 交易所配置
            {
                "name": "mock",
                "btc_price": 10000.0,
                "short_btc": 0.0,
                "collateral_btc": 0.0
            }

    Returns:
        BrokerExchange实例

    Examples:
        >>> exchange = create_exchange({"name": "mock", "btc_price": 10000.0})
    """
    name = config.get("name", "").lower()

    if name == "mock":
        return MockExchange(config)
    raise ValueError(f"Unknown exchange: {name}")


__all__ = [
    'BrokerExchange',
    'LiabilitySource',
    'MockExchange',
    'StaticLiabilitySource',
    'create_exchange',
]
