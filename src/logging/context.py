# src/logging/context.py - v1
"""Contextual logging support: attach request_id, capability, tier and facet to log records."""

from __future__ import annotations

import contextvars
from dataclasses import dataclass
from typing import Any

# Context variables for structured logging, set per capability request.
_request_id: contextvars.ContextVar[str | None] = contextvars.ContextVar(
    "request_id", default=None
)
_capability: contextvars.ContextVar[str | None] = contextvars.ContextVar(
    "capability", default=None
)
_caller_tier: contextvars.ContextVar[str | None] = contextvars.ContextVar(
    "caller_tier", default=None
)
_facet: contextvars.ContextVar[str | None] = contextvars.ContextVar(
    "facet", default=None
)


@dataclass
class LogContext:
    """Immutable snapshot of current logging context."""

    request_id: str | None = None
    capability: str | None = None
    caller_tier: str | None = None
    facet: str | None = None

    def as_dict(self) -> dict[str, Any]:
        """Return non-None fields as dict for JSON log injection."""
        return {k: v for k, v in self.__dict__.items() if v is not None}


def get_context() -> LogContext:
    """Snapshot current context variables."""
    return LogContext(
        request_id=_request_id.get(),
        capability=_capability.get(),
        caller_tier=_caller_tier.get(),
        facet=_facet.get(),
    )


def set_request_context(request_id: str, capability: str, caller_tier: str) -> None:
    """Set request-level context (called once per capability request)."""
    _request_id.set(request_id)
    _capability.set(capability)
    _caller_tier.set(caller_tier)


def set_facet_context(facet: str | None) -> None:
    """Set the intelligence facet being resolved (inside its own task)."""
    _facet.set(facet)


def clear_context() -> None:
    """Reset all context variables."""
    _request_id.set(None)
    _capability.set(None)
    _caller_tier.set(None)
    _facet.set(None)
