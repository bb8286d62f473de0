"""
Connect Module - AI Provider Usage Integrations

Fetch API usage and spend from Anthropic, OpenAI, Google, Minimax,
Mistral, Groq, Together AI and Replicate.
"""

from typing import Awaitable, Callable, Optional

import httpx

from aispend.connect import anthropic, mistral, openai, replicate, together
from aispend.connect.base import DayRecord, UsageBuckets, UsageRecord, UsageResult
from aispend.connect.unsupported import (
    fetch_google_usage,
    fetch_groq_usage,
    fetch_minimax_usage,
)

UsageFetcher = Callable[[str, Optional[httpx.AsyncClient]], Awaitable[UsageResult]]

# Dispatch order is the order results are returned in
PROVIDER_FETCHERS: dict[str, UsageFetcher] = {
    "anthropic": anthropic.fetch_usage,
    "openai": openai.fetch_usage,
    "google": fetch_google_usage,
    "minimax": fetch_minimax_usage,
    "mistral": mistral.fetch_usage,
    "groq": fetch_groq_usage,
    "together": together.fetch_usage,
    "replicate": replicate.fetch_usage,
}

PROVIDER_NAMES = {
    "anthropic": "Anthropic",
    "openai": "OpenAI",
    "google": "Google (Gemini)",
    "minimax": "Minimax",
    "mistral": "Mistral",
    "groq": "Groq",
    "together": "Together AI",
    "replicate": "Replicate",
}

SUPPORTED_PROVIDERS = list(PROVIDER_FETCHERS)

__all__ = [
    "DayRecord",
    "UsageBuckets",
    "UsageFetcher",
    "UsageRecord",
    "UsageResult",
    "PROVIDER_FETCHERS",
    "PROVIDER_NAMES",
    "SUPPORTED_PROVIDERS",
]
