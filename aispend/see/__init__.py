"""
See Module - Unified Spend Aggregation

Aggregate AI API spend across all connected providers into a single view.
"""

from aispend.see.aggregator import SpendAggregator, aggregate_usage
from aispend.see.models import (
    DEFAULT_SUBSCRIPTIONS,
    DailySpendRow,
    SpendSummary,
    Subscription,
)

__all__ = [
    "SpendAggregator",
    "aggregate_usage",
    "DEFAULT_SUBSCRIPTIONS",
    "DailySpendRow",
    "SpendSummary",
    "Subscription",
]
