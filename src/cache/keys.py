# src/cache/keys.py - v1
"""Deterministic cache keys from capability requests.

The payload is serialized canonically (sorted keys at every level, compact
separators) before hashing, so field order never changes the key.
"""

from __future__ import annotations

import hashlib
import json
from datetime import date, datetime
from typing import Any

from sproutintel.cache.models import CacheNamespace

# Capability (or sub-capability) to cache namespace.
NAMESPACES: dict[str, CacheNamespace] = {
    "text_description": "text_generation",
    "marketing_copy": "text_generation",
    "product_image": "image",
    "image_analysis": "image_analysis",
    "crop_market_lookup": "market_analysis",
    "location_intelligence": "market_analysis",
}


def canonical_json(payload: Any) -> str:
    """Serialize payload with sorted keys and no insignificant whitespace."""
    return json.dumps(
        payload,
        sort_keys=True,
        separators=(",", ":"),
        ensure_ascii=False,
        default=_json_default,
    )


def build_cache_key(
    capability: str,
    payload: dict[str, Any],
    caller_tier: str = "any",
    sub_type: str | None = None,
    prefix: str = "sproutintel",
) -> str:
    """Build the cache key for one request.

    Args:
        capability: Capability kind (or sub-capability such as a facet lookup).
        payload: Request payload; nested dicts are canonicalized too.
        caller_tier: Entitlement tier of the caller.
        sub_type: Analysis sub-type or facet name, if any.
        prefix: Deployment-wide key prefix.

    Returns:
        ``{prefix}:{namespace}:{capability}:{sha256}``.
    """
    namespace = NAMESPACES.get(capability, "text_generation")
    material = canonical_json(
        {
            "capability": capability,
            "payload": payload,
            "tier": caller_tier,
            "sub_type": sub_type,
        }
    )
    digest = hashlib.sha256(material.encode("utf-8")).hexdigest()
    return f"{prefix}:{namespace}:{capability}:{digest}"


def namespace_for(capability: str) -> CacheNamespace:
    return NAMESPACES.get(capability, "text_generation")


def _json_default(obj: Any) -> Any:
    if isinstance(obj, (datetime, date)):
        return obj.isoformat()
    if isinstance(obj, (set, frozenset)):
        return sorted(obj, key=str)
    raise TypeError(f"Object of type {type(obj).__name__} is not JSON serializable")
