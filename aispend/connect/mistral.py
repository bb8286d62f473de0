"""
Mistral usage fetcher - aggregate spend only.
"""

from typing import Optional

import httpx

from aispend.connect.base import UsageResult, fetch_total_spend

PROVIDER = "mistral"
DISPLAY_NAME = "Mistral"

USAGE_URL = "https://api.mistral.ai/v1/usage"


async def fetch_usage(
    api_key: str,
    client: Optional[httpx.AsyncClient] = None,
) -> UsageResult:
    return await fetch_total_spend(
        PROVIDER,
        DISPLAY_NAME,
        USAGE_URL,
        headers={"Authorization": f"Bearer {api_key}"},
        fields=("total_cost",),
        client=client,
    )
