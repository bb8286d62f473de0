"""
Anthropic usage fetcher - Admin usage API with per-model, per-day breakdown.
"""

import logging
from datetime import datetime
from typing import Optional

import httpx

from aispend.config.model_pricing import get_price
from aispend.connect.base import (
    UsageBuckets,
    UsageResult,
    error_result,
    http_client,
    iso_date,
    network_error,
    usage_window,
)
from aispend.cost import calculate_cost, token_count

logger = logging.getLogger(__name__)

PROVIDER = "anthropic"
DISPLAY_NAME = "Anthropic"

USAGE_URL = "https://api.anthropic.com/v1/admin/usage"
API_VERSION = "2023-06-01"

ADMIN_REQUIRED = (
    "API key needs admin permissions. Check console.anthropic.com → Settings → API Keys."
)


def parse_usage(data: dict) -> UsageResult:
    """Convert an admin usage payload into a UsageResult."""
    buckets = UsageBuckets()

    for item in data.get("data") or []:
        model = item.get("model") or "unknown"
        input_tokens = token_count(item.get("input_tokens"))
        output_tokens = token_count(item.get("output_tokens"))

        cost = calculate_cost(input_tokens, output_tokens, get_price(PROVIDER, model))
        buckets.add(model, cost, input_tokens + output_tokens, date=item.get("date"))

    return buckets.to_result(PROVIDER)


async def fetch_usage(
    api_key: str,
    client: Optional[httpx.AsyncClient] = None,
    now: Optional[datetime] = None,
) -> UsageResult:
    """Fetch the last 30 days of Anthropic usage. Requires an admin key."""
    start, end = usage_window(now)

    try:
        async with http_client(client) as http:
            response = await http.get(
                USAGE_URL,
                params={"start_date": iso_date(start), "end_date": iso_date(end)},
                headers={
                    "x-api-key": api_key,
                    "anthropic-version": API_VERSION,
                },
            )

            if not response.is_success:
                logger.warning(
                    "Anthropic usage request failed: HTTP %s %s",
                    response.status_code,
                    response.text[:200],
                )
                return error_result(PROVIDER, ADMIN_REQUIRED)

            return parse_usage(response.json())

    except Exception as e:
        logger.warning("Anthropic fetch error: %s", e)
        return network_error(PROVIDER, DISPLAY_NAME)
