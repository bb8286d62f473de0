"""Token cost calculation."""

from typing import Any

from aispend.config.model_pricing import PriceEntry


def token_count(value: Any) -> int:
    """Normalize a raw token count. Missing, unparseable or negative counts become 0."""
    if value is None:
        return 0
    try:
        count = round(float(value))
    except (TypeError, ValueError, OverflowError):
        return 0
    return count if count > 0 else 0


def calculate_cost(input_tokens: Any, output_tokens: Any, price: PriceEntry) -> float:
    """Cost in USD for a number of input and output tokens at a per-1K price."""
    input_tokens = token_count(input_tokens)
    output_tokens = token_count(output_tokens)
    return (input_tokens / 1000 * price.input) + (output_tokens / 1000 * price.output)
