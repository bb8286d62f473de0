"""
Runtime settings loaded from the environment (and a local .env file).
"""

import os
from dataclasses import dataclass, field
from typing import Optional

from dotenv import load_dotenv

# Environment variables checked for each provider, first match wins
CREDENTIAL_ENV_VARS = {
    "anthropic": ("ANTHROPIC_ADMIN_KEY", "ANTHROPIC_API_KEY"),
    "openai": ("OPENAI_ADMIN_KEY", "OPENAI_API_KEY"),
    "google": ("GOOGLE_API_KEY",),
    "minimax": ("MINIMAX_API_KEY",),
    "mistral": ("MISTRAL_API_KEY",),
    "groq": ("GROQ_API_KEY",),
    "together": ("TOGETHER_API_KEY",),
    "replicate": ("REPLICATE_API_TOKEN",),
}

DEFAULT_HTTP_TIMEOUT = 30.0
DEFAULT_LOG_LEVEL = "WARNING"


@dataclass
class Settings:
    """Process settings. Credentials are kept in memory only."""
    http_timeout: float = DEFAULT_HTTP_TIMEOUT
    log_level: str = DEFAULT_LOG_LEVEL
    credentials: dict[str, str] = field(default_factory=dict)

    def __repr__(self) -> str:
        return (
            f"Settings(http_timeout={self.http_timeout!r}, log_level={self.log_level!r}, "
            f"credentials=<{len(self.credentials)} providers>)"
        )


def load_credentials(environ: Optional[dict] = None) -> dict[str, str]:
    """Collect provider credentials from environment variables."""
    environ = os.environ if environ is None else environ
    credentials = {}
    for provider, names in CREDENTIAL_ENV_VARS.items():
        for name in names:
            value = environ.get(name, "").strip()
            if value:
                credentials[provider] = value
                break
    return credentials


def load_settings(dotenv: bool = True, environ: Optional[dict] = None) -> Settings:
    """Build Settings from the environment, reading .env first if present."""
    if dotenv and environ is None:
        load_dotenv()
    environ = os.environ if environ is None else environ

    timeout_raw = environ.get("AISPEND_HTTP_TIMEOUT", "")
    try:
        http_timeout = float(timeout_raw) if timeout_raw else DEFAULT_HTTP_TIMEOUT
    except ValueError:
        raise ValueError(f"AISPEND_HTTP_TIMEOUT must be a number, got {timeout_raw!r}") from None

    return Settings(
        http_timeout=http_timeout,
        log_level=environ.get("AISPEND_LOG_LEVEL", DEFAULT_LOG_LEVEL).upper(),
        credentials=load_credentials(environ),
    )
