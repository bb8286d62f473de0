"""
Model Pricing Reference Data

Prices are USD per 1,000 tokens.
Last updated: January 2025
Prices are approximate and do not include batch or cache discounts.
"""

from dataclasses import dataclass


@dataclass(frozen=True)
class PriceEntry:
    """Input/output price for one model, per 1K tokens."""
    input: float
    output: float

    def __post_init__(self):
        if self.input < 0 or self.output < 0:
            raise ValueError(f"Prices must be non-negative, got {self.input}/{self.output}")


# Model pricing by provider
MODEL_PRICING: dict[str, dict[str, PriceEntry]] = {
    "anthropic": {
        "claude-3-opus": PriceEntry(input=0.015, output=0.075),
        "claude-3-sonnet": PriceEntry(input=0.003, output=0.015),
        "claude-3-haiku": PriceEntry(input=0.00025, output=0.00125),
        "claude-3-5-sonnet": PriceEntry(input=0.003, output=0.015),
        "claude-sonnet-4-5": PriceEntry(input=0.003, output=0.015),
        "claude-opus-4-5": PriceEntry(input=0.015, output=0.075),
        "claude-haiku-4-5": PriceEntry(input=0.0008, output=0.004),
    },
    "openai": {
        "gpt-4": PriceEntry(input=0.03, output=0.06),
        "gpt-4-turbo": PriceEntry(input=0.01, output=0.03),
        "gpt-4o": PriceEntry(input=0.0025, output=0.01),
        "gpt-4o-mini": PriceEntry(input=0.00015, output=0.0006),
        "gpt-3.5-turbo": PriceEntry(input=0.0005, output=0.0015),
        "o1": PriceEntry(input=0.015, output=0.06),
        "o1-mini": PriceEntry(input=0.003, output=0.012),
    },
    "google": {
        "gemini-1.5-pro": PriceEntry(input=0.00125, output=0.005),
        "gemini-1.5-flash": PriceEntry(input=0.000075, output=0.0003),
        "gemini-2.0-flash": PriceEntry(input=0.0001, output=0.0004),
    },
    "mistral": {
        "mistral-large": PriceEntry(input=0.002, output=0.006),
        "mistral-small": PriceEntry(input=0.0002, output=0.0006),
        "codestral": PriceEntry(input=0.0003, output=0.0009),
    },
    "groq": {
        "llama-3.1-70b": PriceEntry(input=0.00059, output=0.00079),
        "llama-3.1-8b": PriceEntry(input=0.00005, output=0.00008),
        "mixtral-8x7b": PriceEntry(input=0.00024, output=0.00024),
    },
}

# Used when a model isn't in the table. Mid/high tier for each provider so
# unknown models are not underestimated.
DEFAULT_PRICING: dict[str, PriceEntry] = {
    "anthropic": PriceEntry(input=0.003, output=0.015),
    "openai": PriceEntry(input=0.01, output=0.03),
    "google": PriceEntry(input=0.00125, output=0.005),
    "mistral": PriceEntry(input=0.002, output=0.006),
    "groq": PriceEntry(input=0.00059, output=0.00079),
}

FALLBACK_PRICE = PriceEntry(input=0.01, output=0.03)


def get_price(provider: str, model: str) -> PriceEntry:
    """
    Get the per-1K-token price for a model.

    Args:
        provider: Provider id (e.g. "anthropic")
        model: Model name as reported by the provider

    Returns:
        The tabulated entry, the provider default for unknown models,
        or FALLBACK_PRICE for providers without a price table.
    """
    provider_lower = provider.lower()
    if provider_lower not in MODEL_PRICING:
        return DEFAULT_PRICING.get(provider_lower, FALLBACK_PRICE)

    models = MODEL_PRICING[provider_lower]
    model_lower = (model or "").lower()
    if model_lower in models:
        return models[model_lower]

    # Dated snapshots like "claude-3-haiku-20240307" or "gpt-4o-2024-08-06"
    matches = [name for name in models if model_lower.startswith(name + "-")]
    if matches:
        return models[max(matches, key=len)]

    return DEFAULT_PRICING.get(provider_lower, FALLBACK_PRICE)


def list_prices(provider: str | None = None) -> dict[str, dict[str, PriceEntry]]:
    """Get the pricing table, optionally for a single provider."""
    if provider is None:
        return {name: dict(models) for name, models in MODEL_PRICING.items()}

    provider_lower = provider.lower()
    return {provider_lower: dict(MODEL_PRICING.get(provider_lower, {}))}
