"""Shared fixtures: stubbed HTTP transports and a fixed clock."""

from datetime import datetime, timezone

import httpx
import pytest

from aispend.config.settings import CREDENTIAL_ENV_VARS

# 2025-01-31T00:00:00Z; the 30-day window starts 2025-01-01
FIXED_NOW = datetime(2025, 1, 31, tzinfo=timezone.utc)


def mock_client(handler) -> httpx.AsyncClient:
    """AsyncClient whose requests are answered by ``handler(request)``."""
    return httpx.AsyncClient(transport=httpx.MockTransport(handler))


def fail_on_request(request: httpx.Request) -> httpx.Response:
    raise AssertionError(f"unexpected request to {request.url}")


@pytest.fixture
def fixed_now():
    return FIXED_NOW


@pytest.fixture
def clean_env(monkeypatch):
    """Remove provider credentials and aispend settings from the environment."""
    for names in CREDENTIAL_ENV_VARS.values():
        for name in names:
            monkeypatch.delenv(name, raising=False)
    monkeypatch.delenv("AISPEND_HTTP_TIMEOUT", raising=False)
    monkeypatch.delenv("AISPEND_LOG_LEVEL", raising=False)
