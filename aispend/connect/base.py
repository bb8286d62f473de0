"""
Shared result model and helpers for provider usage fetchers.

Every fetcher is an async function ``fetch_usage(api_key, client=None)``
that always returns a UsageResult for its provider. Failures are reported
in ``UsageResult.error`` instead of being raised.
"""

import logging
from contextlib import asynccontextmanager
from dataclasses import dataclass, field
from datetime import datetime, timedelta, timezone
from typing import AsyncIterator, Optional, Sequence

import httpx

from aispend.config.settings import DEFAULT_HTTP_TIMEOUT

logger = logging.getLogger(__name__)

USAGE_WINDOW_DAYS = 30


@dataclass
class UsageRecord:
    """Cost and token totals for one model."""
    model: str
    cost: float = 0.0
    tokens: int = 0  # input + output


@dataclass
class DayRecord:
    """Cost for one calendar day (YYYY-MM-DD)."""
    date: str
    cost: float = 0.0


@dataclass
class UsageResult:
    """Usage for one provider over the trailing window."""
    provider: str
    total_cost: float = 0.0
    by_model: list[UsageRecord] = field(default_factory=list)
    by_day: list[DayRecord] = field(default_factory=list)
    error: Optional[str] = None

    @property
    def ok(self) -> bool:
        return self.error is None

    @property
    def total_tokens(self) -> int:
        return sum(m.tokens for m in self.by_model)

    def to_dict(self) -> dict:
        """Convert to dictionary for JSON serialization."""
        data = {
            "provider": self.provider,
            "total_cost": self.total_cost,
            "by_model": [
                {"model": m.model, "cost": m.cost, "tokens": m.tokens}
                for m in self.by_model
            ],
            "by_day": [
                {"date": d.date, "cost": d.cost}
                for d in self.by_day
            ],
        }
        if self.error is not None:
            data["error"] = self.error
        return data


class UsageBuckets:
    """
    Accumulates raw usage entries into per-model and per-day buckets.

    The first occurrence of a key creates its record; later occurrences add
    to it in place, so output order is first-seen order.
    """

    def __init__(self):
        self._models: dict[str, UsageRecord] = {}
        self._days: dict[str, DayRecord] = {}
        self.total_cost = 0.0

    def add_model(self, model: str, cost: float, tokens: int) -> None:
        record = self._models.get(model)
        if record is None:
            self._models[model] = UsageRecord(model=model, cost=cost, tokens=tokens)
        else:
            record.cost += cost
            record.tokens += tokens

    def add_day(self, date: str, cost: float) -> None:
        record = self._days.get(date)
        if record is None:
            self._days[date] = DayRecord(date=date, cost=cost)
        else:
            record.cost += cost

    def add(
        self,
        model: str,
        cost: float,
        tokens: int,
        date: Optional[str] = None,
    ) -> None:
        """Record one usage entry against its model, the total and (if dated) its day."""
        self.add_model(model, cost, tokens)
        self.total_cost += cost
        if date:
            self.add_day(date, cost)

    def to_result(self, provider: str) -> UsageResult:
        return UsageResult(
            provider=provider,
            total_cost=self.total_cost,
            by_model=list(self._models.values()),
            by_day=list(self._days.values()),
        )


def error_result(provider: str, message: str) -> UsageResult:
    """A result carrying only an error: zero cost and empty buckets."""
    return UsageResult(provider=provider, error=message)


def network_error(provider: str, display_name: str) -> UsageResult:
    return error_result(provider, f"Network error fetching {display_name} usage.")


def usage_window(now: Optional[datetime] = None) -> tuple[datetime, datetime]:
    """Trailing usage window as (start, end) in UTC."""
    end = now or datetime.now(timezone.utc)
    return end - timedelta(days=USAGE_WINDOW_DAYS), end


def iso_date(value: datetime) -> str:
    return value.strftime("%Y-%m-%d")


@asynccontextmanager
async def http_client(
    client: Optional[httpx.AsyncClient] = None,
    timeout: float = DEFAULT_HTTP_TIMEOUT,
) -> AsyncIterator[httpx.AsyncClient]:
    """
    Use the given client, or open a short-lived one for this fetch.

    ``timeout`` only applies to an owned client. SpendAggregator passes a
    client built with the configured AISPEND_HTTP_TIMEOUT.
    """
    if client is not None:
        yield client
        return

    async with httpx.AsyncClient(timeout=timeout) as owned:
        yield owned


async def fetch_total_spend(
    provider: str,
    display_name: str,
    url: str,
    headers: dict[str, str],
    fields: Sequence[str],
    client: Optional[httpx.AsyncClient] = None,
    credential_label: str = "API key",
) -> UsageResult:
    """
    Fetch an endpoint that only reports aggregate spend.

    The first truthy field in ``fields`` becomes total_cost; the
    per-model and per-day buckets stay empty.
    """
    try:
        async with http_client(client) as http:
            response = await http.get(url, headers=headers)

            if not response.is_success:
                logger.warning("%s usage request failed: HTTP %s", provider, response.status_code)
                return error_result(
                    provider,
                    f"Could not fetch {display_name} usage. Check your {credential_label}.",
                )

            data = response.json()

        total = 0.0
        for name in fields:
            if data.get(name):
                total = float(data[name])
                break

        return UsageResult(provider=provider, total_cost=total)

    except Exception as e:
        logger.warning("Error fetching %s usage: %s", provider, e)
        return network_error(provider, display_name)
