"""
Core module - Exposure rebalancing engine
All calculators here are stateless and have no side effects
"""

from .band_calculator import round_to_satoshi, btc_to_sats, sats_to_btc
from .engine import ExposureEngine
from .hedge_calculator import evaluate_hedge
from .rebalance_calculator import evaluate_rebalance
from .types import (
    DEFAULT_BANDS,
    BandConfig,
    HedgeDecision,
    HedgeInput,
    OrderSide,
    RebalanceDecision,
    RebalanceInput,
    TransferDirection,
)

__all__ = [
    "DEFAULT_BANDS",
    "BandConfig",
    "ExposureEngine",
    "HedgeDecision",
    "HedgeInput",
    "OrderSide",
    "RebalanceDecision",
    "RebalanceInput",
    "TransferDirection",
    "btc_to_sats",
    "evaluate_hedge",
    "evaluate_rebalance",
    "round_to_satoshi",
    "sats_to_btc",
]
