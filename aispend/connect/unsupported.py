"""
Providers without a usable public usage API.

These fetchers make no network call and always return an explanatory
error, so users know to track the spend manually.
"""

from typing import Optional

import httpx

from aispend.connect.base import UsageResult, error_result

UNSUPPORTED_MESSAGES = {
    "google": "Google Vertex AI usage requires Cloud Console access. Coming soon.",
    "minimax": "Minimax usage API integration coming soon.",
    "groq": "Groq usage API not available. Track manually via console.groq.com.",
}


async def fetch_google_usage(
    api_key: str,
    client: Optional[httpx.AsyncClient] = None,
) -> UsageResult:
    return error_result("google", UNSUPPORTED_MESSAGES["google"])


async def fetch_minimax_usage(
    api_key: str,
    client: Optional[httpx.AsyncClient] = None,
) -> UsageResult:
    return error_result("minimax", UNSUPPORTED_MESSAGES["minimax"])


async def fetch_groq_usage(
    api_key: str,
    client: Optional[httpx.AsyncClient] = None,
) -> UsageResult:
    return error_result("groq", UNSUPPORTED_MESSAGES["groq"])
