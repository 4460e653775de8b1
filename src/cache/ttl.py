# src/cache/ttl.py - v1
"""TTL policy by content volatility (seconds)."""

from __future__ import annotations

HOUR = 3600
DAY = 24 * HOUR

TTL_POLICY: dict[str, int] = {
    "text_description": 24 * HOUR,
    "marketing_copy": 12 * HOUR,
    "product_image": 7 * DAY,
    "image_analysis": 2 * HOUR,
    "market_research": 4 * HOUR,  # vision + research composite
    "crop_market_lookup": 1 * HOUR,
    "market": 4 * HOUR,
    "weather": 3 * HOUR,
    "price": 2 * HOUR,
    "trade": 12 * HOUR,
}


def ttl_for(kind: str) -> int:
    """Return the TTL for a capability, analysis sub-type or facet.

    Raises:
        KeyError: If kind has no documented TTL.
    """
    try:
        return TTL_POLICY[kind]
    except KeyError:
        raise KeyError(f"No TTL policy for {kind!r}") from None
