"""
Spend Aggregator - Unified view across all providers.
"""

import asyncio
import logging
from collections.abc import Mapping
from typing import Optional

import httpx

from aispend.config.settings import DEFAULT_HTTP_TIMEOUT
from aispend.connect import PROVIDER_FETCHERS, UsageFetcher, UsageResult
from aispend.see.models import SpendSummary, Subscription

logger = logging.getLogger(__name__)


class SpendAggregator:
    """Fetches usage from every provider with a credential, concurrently."""

    def __init__(
        self,
        fetchers: Optional[Mapping[str, UsageFetcher]] = None,
        timeout: float = DEFAULT_HTTP_TIMEOUT,
        client: Optional[httpx.AsyncClient] = None,
    ):
        self.fetchers = dict(PROVIDER_FETCHERS if fetchers is None else fetchers)
        self.timeout = timeout
        self._client = client

    def select_providers(self, credentials: Mapping[str, str]) -> list[tuple[str, str]]:
        """
        (provider, key) pairs to dispatch, in fetcher order.

        Empty or non-string keys are skipped.
        """
        if not isinstance(credentials, Mapping):
            raise TypeError(
                f"credentials must be a mapping of provider to key, got {type(credentials).__name__}"
            )

        unknown = set(credentials) - set(self.fetchers)
        if unknown:
            logger.debug("Ignoring credentials for unsupported providers: %s", sorted(unknown))

        selected = []
        for provider in self.fetchers:
            api_key = credentials.get(provider)
            if isinstance(api_key, str) and api_key:
                selected.append((provider, api_key))
        return selected

    async def aggregate(self, credentials: Mapping[str, str]) -> list[UsageResult]:
        """
        Fetch usage for each provider with a non-empty credential.

        Returns one result per dispatched provider, in dispatch order. Fetchers
        report their own failures in ``UsageResult.error``.
        """
        selected = self.select_providers(credentials)
        if not selected:
            return []

        if self._client is not None:
            return await self._gather(selected, self._client)

        async with httpx.AsyncClient(timeout=self.timeout) as client:
            return await self._gather(selected, client)

    async def _gather(
        self,
        selected: list[tuple[str, str]],
        client: httpx.AsyncClient,
    ) -> list[UsageResult]:
        logger.info("Fetching usage for %s", ", ".join(p for p, _ in selected))
        results = await asyncio.gather(*(
            self.fetchers[provider](api_key, client)
            for provider, api_key in selected
        ))
        return list(results)

    def get_summary(
        self,
        results: list[UsageResult],
        subscriptions: Optional[list[Subscription]] = None,
        manual_spend: Optional[Mapping[str, float]] = None,
    ) -> SpendSummary:
        """Combine fetched usage with subscriptions and manually entered spend."""
        return SpendSummary(
            results=list(results),
            subscriptions=list(subscriptions or []),
            manual_spend=dict(manual_spend or {}),
        )


async def aggregate_usage(
    credentials: Mapping[str, str],
    timeout: float = DEFAULT_HTTP_TIMEOUT,
) -> list[UsageResult]:
    """Fetch usage for all providers with credentials using the default fetchers."""
    return await SpendAggregator(timeout=timeout).aggregate(credentials)
