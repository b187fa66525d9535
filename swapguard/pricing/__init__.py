"""
Pricing Module.

Turns live pool state into a large-trade classification:
- Reserve estimation from sqrt price and liquidity
- Basis-point threshold over the sold-side reserve
"""

from .reserves import ReserveEstimate, ReserveEstimator
from .threshold import ThresholdEvaluator, TradeClassification

__all__ = [
    "ReserveEstimate",
    "ReserveEstimator",
    "ThresholdEvaluator",
    "TradeClassification",
]
