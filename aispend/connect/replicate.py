"""
Replicate usage fetcher - account billing endpoint, aggregate spend only.
"""

from typing import Optional

import httpx

from aispend.connect.base import UsageResult, fetch_total_spend

PROVIDER = "replicate"
DISPLAY_NAME = "Replicate"

BILLING_URL = "https://api.replicate.com/v1/account/billing"


async def fetch_usage(
    api_key: str,
    client: Optional[httpx.AsyncClient] = None,
) -> UsageResult:
    """Replicate uses ``Token`` rather than ``Bearer`` auth."""
    return await fetch_total_spend(
        PROVIDER,
        DISPLAY_NAME,
        BILLING_URL,
        headers={"Authorization": f"Token {api_key}"},
        fields=("spend", "total"),
        client=client,
        credential_label="API token",
    )
