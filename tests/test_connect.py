"""
Tests for provider usage fetchers, with HTTP stubbed by httpx.MockTransport.
"""

import httpx
import pytest

from aispend.connect import anthropic, mistral, openai, replicate, together
from aispend.connect.base import UsageBuckets, http_client
from aispend.connect.unsupported import (
    UNSUPPORTED_MESSAGES,
    fetch_google_usage,
    fetch_groq_usage,
    fetch_minimax_usage,
)
from conftest import fail_on_request, mock_client

# 2025-01-01 and 2025-01-02 00:00 UTC
JAN_1 = 1735689600
JAN_2 = 1735776000


def assert_error_only(result, provider):
    assert result.provider == provider
    assert result.error
    assert result.ok is False
    assert result.total_cost == 0
    assert result.by_model == []
    assert result.by_day == []


def connect_error(request):
    raise httpx.ConnectError("connection refused", request=request)


class TestUsageBuckets:
    """Tests for the bucket merge policy."""

    def test_first_seen_order_and_accumulation(self):
        buckets = UsageBuckets()
        buckets.add("b", 1.0, 10, date="2025-01-02")
        buckets.add("a", 2.0, 20, date="2025-01-01")
        buckets.add("b", 0.5, 5, date="2025-01-01")

        result = buckets.to_result("test")
        assert [m.model for m in result.by_model] == ["b", "a"]
        assert result.by_model[0].cost == pytest.approx(1.5)
        assert result.by_model[0].tokens == 15
        assert [d.date for d in result.by_day] == ["2025-01-02", "2025-01-01"]
        assert result.by_day[1].cost == pytest.approx(2.5)
        assert result.total_cost == pytest.approx(3.5)

    def test_undated_entries_skip_day_buckets(self):
        buckets = UsageBuckets()
        buckets.add("a", 1.0, 10)

        result = buckets.to_result("test")
        assert result.total_cost == 1.0
        assert result.by_day == []


class TestHttpClient:
    """Tests for the shared client helper."""

    @pytest.mark.asyncio
    async def test_owned_client_uses_given_timeout(self):
        async with http_client(timeout=5.0) as client:
            assert client.timeout.read == 5.0
            assert client.timeout.connect == 5.0

    @pytest.mark.asyncio
    async def test_passes_through_existing_client(self):
        async with mock_client(fail_on_request) as existing:
            async with http_client(existing, timeout=1.0) as client:
                assert client is existing


class TestAnthropic:
    """Tests for the Anthropic admin usage fetcher."""

    HAIKU_PAYLOAD = {
        "data": [
            {"model": "claude-3-haiku", "input_tokens": 2000, "output_tokens": 1000, "date": "2025-01-15"},
            {"model": "claude-3-haiku", "input_tokens": 1000, "output_tokens": 500, "date": "2025-01-15"},
        ]
    }

    @pytest.mark.asyncio
    async def test_merges_items_for_same_model(self, fixed_now):
        seen = []

        def handler(request):
            seen.append(request)
            return httpx.Response(200, json=self.HAIKU_PAYLOAD)

        async with mock_client(handler) as client:
            result = await anthropic.fetch_usage("sk-ant-admin", client, now=fixed_now)

        assert result.ok
        assert result.total_cost == pytest.approx(0.002625)
        assert len(result.by_model) == 1
        assert result.by_model[0].model == "claude-3-haiku"
        assert result.by_model[0].cost == pytest.approx(0.002625)
        assert result.by_model[0].tokens == 4500
        assert len(result.by_day) == 1
        assert result.by_day[0].date == "2025-01-15"
        assert result.by_day[0].cost == pytest.approx(0.002625)

        request = seen[0]
        assert request.url.path == "/v1/admin/usage"
        assert request.url.params["start_date"] == "2025-01-01"
        assert request.url.params["end_date"] == "2025-01-31"
        assert request.headers["x-api-key"] == "sk-ant-admin"
        assert request.headers["anthropic-version"] == "2023-06-01"

    @pytest.mark.asyncio
    async def test_unknown_model_and_missing_fields(self, fixed_now):
        payload = {"data": [{"input_tokens": 1000}, {"model": "claude-next", "output_tokens": 1000}]}

        async with mock_client(lambda r: httpx.Response(200, json=payload)) as client:
            result = await anthropic.fetch_usage("key", client, now=fixed_now)

        assert [m.model for m in result.by_model] == ["unknown", "claude-next"]
        # provider default: 0.003 in / 0.015 out
        assert result.by_model[0].cost == pytest.approx(0.003)
        assert result.by_model[1].cost == pytest.approx(0.015)
        assert result.by_day == []
        assert result.total_cost == pytest.approx(0.018)

    @pytest.mark.asyncio
    async def test_fractional_token_strings(self, fixed_now):
        payload = {"data": [{"model": "claude-3-haiku", "input_tokens": "2000.0", "output_tokens": 1000.4}]}

        async with mock_client(lambda r: httpx.Response(200, json=payload)) as client:
            result = await anthropic.fetch_usage("key", client, now=fixed_now)

        assert result.ok
        assert result.by_model[0].tokens == 3000
        assert result.total_cost == pytest.approx(0.00175)

    @pytest.mark.asyncio
    async def test_empty_payload(self, fixed_now):
        async with mock_client(lambda r: httpx.Response(200, json={})) as client:
            result = await anthropic.fetch_usage("key", client, now=fixed_now)

        assert result.ok
        assert result.total_cost == 0
        assert result.by_model == []

    @pytest.mark.asyncio
    async def test_non_success_asks_for_admin_key(self, fixed_now):
        async with mock_client(lambda r: httpx.Response(403, text="forbidden")) as client:
            result = await anthropic.fetch_usage("key", client, now=fixed_now)

        assert_error_only(result, "anthropic")
        assert result.error == anthropic.ADMIN_REQUIRED

    @pytest.mark.asyncio
    async def test_transport_error(self, fixed_now):
        async with mock_client(connect_error) as client:
            result = await anthropic.fetch_usage("key", client, now=fixed_now)

        assert_error_only(result, "anthropic")
        assert result.error == "Network error fetching Anthropic usage."

    @pytest.mark.asyncio
    async def test_malformed_json(self, fixed_now):
        async with mock_client(lambda r: httpx.Response(200, content=b"<html>")) as client:
            result = await anthropic.fetch_usage("key", client, now=fixed_now)

        assert_error_only(result, "anthropic")
        assert result.error == "Network error fetching Anthropic usage."

    def test_merging_twice_doubles_totals(self):
        once = anthropic.parse_usage(self.HAIKU_PAYLOAD)
        twice = anthropic.parse_usage({"data": self.HAIKU_PAYLOAD["data"] * 2})

        assert twice.total_cost == pytest.approx(once.total_cost * 2)
        assert [m.model for m in twice.by_model] == [m.model for m in once.by_model]
        assert twice.by_model[0].tokens == once.by_model[0].tokens * 2
        assert [d.date for d in twice.by_day] == [d.date for d in once.by_day]
        assert twice.by_day[0].cost == pytest.approx(once.by_day[0].cost * 2)


class TestOpenAI:
    """Tests for the OpenAI usage fetcher and its legacy fallback."""

    USAGE_PAYLOAD = {
        "data": [
            {
                "start_time": JAN_1,
                "results": [
                    {"model_id": "gpt-4o", "input_tokens": 1000, "output_tokens": 1000},
                    {"model_id": "gpt-4o-mini", "input_tokens": 10000, "output_tokens": 0},
                ],
            },
            {"start_time": JAN_2, "results": []},
            {
                "start_time": JAN_2 + 86400,
                "results": [{"model_id": "gpt-4o", "input_tokens": 2000, "output_tokens": 0}],
            },
        ]
    }

    @pytest.mark.asyncio
    async def test_usage_api_buckets(self, fixed_now):
        seen = []

        def handler(request):
            seen.append(request)
            return httpx.Response(200, json=self.USAGE_PAYLOAD)

        async with mock_client(handler) as client:
            result = await openai.fetch_usage("sk-admin", client, now=fixed_now)

        assert result.ok
        assert [m.model for m in result.by_model] == ["gpt-4o", "gpt-4o-mini"]
        assert result.by_model[0].cost == pytest.approx(0.0125 + 0.005)
        assert result.by_model[0].tokens == 4000
        assert result.by_model[1].cost == pytest.approx(0.0015)

        # empty bucket for Jan 2 is not recorded
        assert [d.date for d in result.by_day] == ["2025-01-01", "2025-01-03"]
        assert result.by_day[0].cost == pytest.approx(0.014)
        assert result.total_cost == pytest.approx(0.019)

        assert len(seen) == 1
        request = seen[0]
        assert request.url.path == "/v1/organization/usage/completions"
        assert request.url.params["start_time"] == str(JAN_1)
        assert request.url.params["bucket_width"] == "1d"
        assert request.headers["authorization"] == "Bearer sk-admin"

    @pytest.mark.asyncio
    async def test_legacy_fallback_in_cents(self, fixed_now):
        paths = []

        def handler(request):
            paths.append(request.url.path)
            if request.url.path == "/dashboard/billing/usage":
                assert request.url.params["start_date"] == "2025-01-01"
                assert request.url.params["end_date"] == "2025-01-31"
                return httpx.Response(200, json={"total_usage": 1234})
            return httpx.Response(401, json={"error": "insufficient permissions"})

        async with mock_client(handler) as client:
            result = await openai.fetch_usage("sk-key", client, now=fixed_now)

        assert paths == ["/v1/organization/usage/completions", "/dashboard/billing/usage"]
        assert result.ok
        assert result.total_cost == pytest.approx(12.34)
        assert result.by_model == []
        assert result.by_day == []

    @pytest.mark.asyncio
    async def test_legacy_missing_total(self, fixed_now):
        def handler(request):
            if request.url.path == "/dashboard/billing/usage":
                return httpx.Response(200, json={})
            return httpx.Response(404)

        async with mock_client(handler) as client:
            result = await openai.fetch_usage("sk-key", client, now=fixed_now)

        assert result.ok
        assert result.total_cost == 0

    @pytest.mark.asyncio
    async def test_both_endpoints_fail(self, fixed_now):
        async with mock_client(lambda r: httpx.Response(403)) as client:
            result = await openai.fetch_usage("sk-key", client, now=fixed_now)

        assert_error_only(result, "openai")
        assert result.error == openai.ADMIN_REQUIRED

    @pytest.mark.asyncio
    async def test_transport_error_does_not_fall_back(self, fixed_now):
        calls = []

        def handler(request):
            calls.append(request.url.path)
            raise httpx.ReadTimeout("timed out", request=request)

        async with mock_client(handler) as client:
            result = await openai.fetch_usage("sk-key", client, now=fixed_now)

        assert calls == ["/v1/organization/usage/completions"]
        assert_error_only(result, "openai")
        assert result.error == "Network error fetching OpenAI usage."

    def test_model_field_fallbacks(self):
        result = openai.parse_usage({
            "data": [{
                "start_time": JAN_1,
                "results": [
                    {"model": "gpt-4", "input_tokens": 1000},
                    {"input_tokens": 1000},
                ],
            }]
        })
        assert [m.model for m in result.by_model] == ["gpt-4", "unknown"]
        assert result.by_model[1].cost == pytest.approx(0.01)


class TestAggregateSpendProviders:
    """Tests for providers that only report a total."""

    @pytest.mark.asyncio
    @pytest.mark.parametrize("module,host", [
        (mistral, "api.mistral.ai"),
        (together, "api.together.xyz"),
    ])
    async def test_total_cost(self, module, host):
        seen = []

        def handler(request):
            seen.append(request)
            return httpx.Response(200, json={"total_cost": 4.5})

        async with mock_client(handler) as client:
            result = await module.fetch_usage("secret", client)

        assert result.ok
        assert result.provider == module.PROVIDER
        assert result.total_cost == 4.5
        assert result.by_model == []
        assert result.by_day == []
        assert seen[0].url.host == host
        assert seen[0].headers["authorization"] == "Bearer secret"

    @pytest.mark.asyncio
    async def test_missing_total_defaults_to_zero(self):
        async with mock_client(lambda r: httpx.Response(200, json={"object": "usage"})) as client:
            result = await mistral.fetch_usage("secret", client)

        assert result.ok
        assert result.total_cost == 0

    @pytest.mark.asyncio
    async def test_non_success(self):
        async with mock_client(lambda r: httpx.Response(401)) as client:
            result = await together.fetch_usage("secret", client)

        assert_error_only(result, "together")
        assert result.error == "Could not fetch Together AI usage. Check your API key."

    @pytest.mark.asyncio
    async def test_transport_error(self):
        async with mock_client(connect_error) as client:
            result = await mistral.fetch_usage("secret", client)

        assert_error_only(result, "mistral")
        assert result.error == "Network error fetching Mistral usage."

    @pytest.mark.asyncio
    async def test_replicate_token_auth_and_fields(self):
        seen = []

        def handler(request):
            seen.append(request)
            return httpx.Response(200, json={"total": 7})

        async with mock_client(handler) as client:
            result = await replicate.fetch_usage("r8_secret", client)

        assert result.total_cost == 7.0
        assert seen[0].url.path == "/v1/account/billing"
        assert seen[0].headers["authorization"] == "Token r8_secret"

    @pytest.mark.asyncio
    async def test_replicate_prefers_spend(self):
        payload = {"spend": 3.25, "total": 7}
        async with mock_client(lambda r: httpx.Response(200, json=payload)) as client:
            result = await replicate.fetch_usage("r8_secret", client)

        assert result.total_cost == 3.25

    @pytest.mark.asyncio
    async def test_replicate_non_success(self):
        async with mock_client(lambda r: httpx.Response(500)) as client:
            result = await replicate.fetch_usage("r8_secret", client)

        assert_error_only(result, "replicate")
        assert result.error == "Could not fetch Replicate usage. Check your API token."


class TestUnsupportedProviders:
    """Tests for placeholder fetchers."""

    @pytest.mark.asyncio
    @pytest.mark.parametrize("provider,fetcher", [
        ("google", fetch_google_usage),
        ("minimax", fetch_minimax_usage),
        ("groq", fetch_groq_usage),
    ])
    async def test_no_request_and_fixed_error(self, provider, fetcher):
        async with mock_client(fail_on_request) as client:
            result = await fetcher("any-key", client)

        assert_error_only(result, provider)
        assert result.error == UNSUPPORTED_MESSAGES[provider]

    @pytest.mark.asyncio
    async def test_works_without_client(self):
        result = await fetch_groq_usage("gsk_key")
        assert result.error == UNSUPPORTED_MESSAGES["groq"]
