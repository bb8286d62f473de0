"""
Configuration module for aispend.
"""

from aispend.config.model_pricing import (
    DEFAULT_PRICING,
    FALLBACK_PRICE,
    MODEL_PRICING,
    PriceEntry,
    get_price,
    list_prices,
)
from aispend.config.settings import Settings, load_credentials, load_settings

__all__ = [
    "DEFAULT_PRICING",
    "FALLBACK_PRICE",
    "MODEL_PRICING",
    "PriceEntry",
    "get_price",
    "list_prices",
    "Settings",
    "load_credentials",
    "load_settings",
]
