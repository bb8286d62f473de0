"""
Data models for combined spend reporting.
"""

from dataclasses import dataclass, field
from typing import Optional

from aispend.connect.base import UsageResult


@dataclass(frozen=True)
class Subscription:
    """A flat monthly fee (e.g. a chat plan or coding assistant seat)."""
    name: str
    monthly_cost: float
    enabled: bool = False


DEFAULT_SUBSCRIPTIONS = [
    Subscription("Anthropic Max", 100.0),
    Subscription("Anthropic Pro", 20.0),
    Subscription("OpenAI Pro", 200.0),
    Subscription("OpenAI Plus", 20.0),
    Subscription("Claude Pro (via Claude.ai)", 20.0),
    Subscription("Cursor Pro", 20.0),
    Subscription("GitHub Copilot", 10.0),
]


@dataclass
class DailySpendRow:
    """One day of spend across the providers that report daily data."""
    date: str
    by_provider: dict[str, float]

    @property
    def total(self) -> float:
        return sum(self.by_provider.values())


@dataclass
class SpendSummary:
    """API usage plus subscriptions, combined into one monthly figure."""
    results: list[UsageResult] = field(default_factory=list)
    subscriptions: list[Subscription] = field(default_factory=list)
    manual_spend: dict[str, float] = field(default_factory=dict)

    @property
    def fetched_api_cost(self) -> float:
        return sum(r.total_cost for r in self.results)

    @property
    def manual_api_cost(self) -> float:
        return sum(self.manual_spend.values())

    @property
    def api_cost(self) -> float:
        return self.fetched_api_cost + self.manual_api_cost

    @property
    def subscription_cost(self) -> float:
        return sum(s.monthly_cost for s in self.subscriptions if s.enabled)

    @property
    def total_cost(self) -> float:
        return self.api_cost + self.subscription_cost

    @property
    def providers_with_errors(self) -> list[str]:
        return [r.provider for r in self.results if not r.ok]

    @property
    def daily_providers(self) -> list[str]:
        """Providers that reported a per-day breakdown, in result order."""
        return [r.provider for r in self.results if r.by_day]

    def daily_rows(self, limit: Optional[int] = 14) -> list[DailySpendRow]:
        """
        Daily spend table, newest day first.

        Each row has one column per provider in ``daily_providers``; days a
        provider didn't report count as 0.
        """
        daily = [r for r in self.results if r.by_day]
        costs = {r.provider: {d.date: d.cost for d in r.by_day} for r in daily}

        dates = sorted({d.date for r in daily for d in r.by_day}, reverse=True)
        if limit is not None:
            dates = dates[:limit]

        return [
            DailySpendRow(
                date=date,
                by_provider={r.provider: costs[r.provider].get(date, 0.0) for r in daily},
            )
            for date in dates
        ]

    def to_dict(self) -> dict:
        """Convert to dictionary for JSON serialization."""
        return {
            "totals": {
                "cost": round(self.total_cost, 2),
                "api": round(self.api_cost, 2),
                "api_fetched": round(self.fetched_api_cost, 2),
                "api_manual": round(self.manual_api_cost, 2),
                "subscriptions": round(self.subscription_cost, 2),
            },
            "by_provider": [
                {
                    "provider": r.provider,
                    "cost": round(r.total_cost, 2),
                    "tokens": r.total_tokens,
                    "error": r.error,
                }
                for r in self.results
            ],
            "subscriptions": [
                {"name": s.name, "monthly_cost": s.monthly_cost}
                for s in self.subscriptions
                if s.enabled
            ],
            "daily": [
                {
                    "date": row.date,
                    "by_provider": {p: round(c, 2) for p, c in row.by_provider.items()},
                    "total": round(row.total, 2),
                }
                for row in self.daily_rows()
            ],
            "errors": self.providers_with_errors,
        }
