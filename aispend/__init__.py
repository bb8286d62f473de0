"""
aispend - AI API Spend Tracker

Pull usage from AI providers' billing APIs and combine it with
subscriptions into one monthly figure.
"""

__version__ = "0.1.0"

from aispend.connect import PROVIDER_FETCHERS, SUPPORTED_PROVIDERS, UsageResult
from aispend.see import SpendAggregator, SpendSummary, Subscription, aggregate_usage

__all__ = [
    "PROVIDER_FETCHERS",
    "SUPPORTED_PROVIDERS",
    "UsageResult",
    "SpendAggregator",
    "SpendSummary",
    "Subscription",
    "aggregate_usage",
]
