"""
OpenAI usage fetcher.

Tries the organization usage API (daily buckets, per-model results) first
and falls back to the legacy dashboard billing endpoint, which only reports
an aggregate total in cents.
"""

import logging
from datetime import datetime, timezone
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

PROVIDER = "openai"
DISPLAY_NAME = "OpenAI"

USAGE_URL = "https://api.openai.com/v1/organization/usage/completions"
LEGACY_BILLING_URL = "https://api.openai.com/dashboard/billing/usage"

ADMIN_REQUIRED = (
    "API key needs org admin permissions. Check platform.openai.com → Settings → API Keys."
)


def parse_usage(data: dict) -> UsageResult:
    """Convert an organization usage payload (1d buckets) into a UsageResult."""
    buckets = UsageBuckets()

    for bucket in data.get("data") or []:
        date = iso_date(datetime.fromtimestamp(bucket["start_time"], tz=timezone.utc))
        day_cost = 0.0

        for result in bucket.get("results") or []:
            model = result.get("model_id") or result.get("model") or "unknown"
            input_tokens = token_count(result.get("input_tokens"))
            output_tokens = token_count(result.get("output_tokens"))

            cost = calculate_cost(input_tokens, output_tokens, get_price(PROVIDER, model))
            buckets.add(model, cost, input_tokens + output_tokens)
            day_cost += cost

        if day_cost > 0:
            buckets.add_day(date, day_cost)

    return buckets.to_result(PROVIDER)


def parse_legacy_usage(data: dict) -> UsageResult:
    """Legacy billing reports total_usage in cents, with no breakdown."""
    total_cents = data.get("total_usage") or 0
    return UsageResult(provider=PROVIDER, total_cost=total_cents / 100)


async def fetch_usage(
    api_key: str,
    client: Optional[httpx.AsyncClient] = None,
    now: Optional[datetime] = None,
) -> UsageResult:
    """Fetch the last 30 days of OpenAI usage. Requires an org admin key."""
    start, end = usage_window(now)
    headers = {"Authorization": f"Bearer {api_key}"}

    try:
        async with http_client(client) as http:
            response = await http.get(
                USAGE_URL,
                params={"start_time": int(start.timestamp()), "bucket_width": "1d"},
                headers=headers,
            )

            if response.is_success:
                return parse_usage(response.json())

            logger.warning(
                "OpenAI usage API failed (HTTP %s), trying legacy billing endpoint",
                response.status_code,
            )

            legacy = await http.get(
                LEGACY_BILLING_URL,
                params={"start_date": iso_date(start), "end_date": iso_date(end)},
                headers=headers,
            )

            if not legacy.is_success:
                logger.warning("OpenAI legacy billing failed: HTTP %s", legacy.status_code)
                return error_result(PROVIDER, ADMIN_REQUIRED)

            return parse_legacy_usage(legacy.json())

    except Exception as e:
        logger.warning("OpenAI fetch error: %s", e)
        return network_error(PROVIDER, DISPLAY_NAME)
