"""Pricing tiers and cost calculation."""

from dataclasses import dataclass

from ctxmap.types.turns import Usage


@dataclass(frozen=True)
class PricingRates:
    """USD per 1M tokens."""
    input: float
    output: float
    cache_creation: float
    cache_read: float


# Per 1M tokens
PRICING: dict[str, PricingRates] = {
    "opus":   PricingRates(input=15.00, output=75.00, cache_creation=18.75, cache_read=1.50),
    "sonnet": PricingRates(input=3.00,  output=15.00, cache_creation=3.75,  cache_read=0.30),
    "haiku":  PricingRates(input=0.25,  output=1.25,  cache_creation=0.30,  cache_read=0.03),
}

DEFAULT_TIER = "opus"
DEFAULT_PRICING = PRICING[DEFAULT_TIER]


def get_pricing(tier: str) -> PricingRates:
    """Look up a pricing tier by name (case-insensitive)."""
    try:
        return PRICING[tier.lower()]
    except KeyError:
        raise ValueError(
            f"Unknown pricing tier {tier!r} (expected one of: {', '.join(PRICING)})"
        ) from None


def calculate_cost(usage: Usage, rates: PricingRates = DEFAULT_PRICING) -> float:
    """Calculate cost in USD for the given usage. Not rounded."""
    return (
        usage.input_tokens / 1_000_000 * rates.input
        + usage.output_tokens / 1_000_000 * rates.output
        + usage.cache_creation_tokens / 1_000_000 * rates.cache_creation
        + usage.cache_read_tokens / 1_000_000 * rates.cache_read
    )
