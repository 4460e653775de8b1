# src/providers/guard.py - v1
"""Timeout, classification and retry wrapper for provider calls.

Every outbound provider call goes through guarded_call. Retries are off
by default; failures surface as ProviderTimeout or ProviderError chained
from the original exception.
"""

from __future__ import annotations

import asyncio
import logging
import random
from dataclasses import dataclass
from typing import Any, Awaitable, Callable, TypeVar

import httpx

from sproutintel.core.errors import ProviderError, ProviderTimeout

logger = logging.getLogger(__name__)

T = TypeVar("T")

RETRYABLE_ERRORS: frozenset[str] = frozenset({"rate_limit", "timeout", "server_error"})


@dataclass(frozen=True)
class RetryConfig:
    """Retry policy for retryable provider failures."""

    max_retries: int = 0
    base_delay_s: float = 1.0
    backoff_factor: float = 2.0
    jitter: bool = True


def classify_error(error: BaseException) -> str:
    """Classify an exception into rate_limit, timeout, server_error or unknown."""
    if isinstance(error, ProviderError) and error.error_type != "unknown":
        return error.error_type
    if isinstance(error, TimeoutError):
        return "timeout"

    msg = str(error).lower()
    name = type(error).__name__.lower()

    if (
        "429" in msg
        or any(marker in msg for marker in ("rate limit", "rate_limit", "ratelimit"))
        or "ratelimit" in name
    ):
        return "rate_limit"
    if "timeout" in name or "timed out" in msg or "timeout" in msg:
        return "timeout"
    if any(c in msg for c in ("500", "502", "503", "504", "server")):
        return "server_error"
    return "unknown"


def raise_for_status(
    provider: str, response: httpx.Response, error_cls: type[ProviderError] = ProviderError
) -> None:
    """Translate a non-2xx HTTP response into a classified ProviderError."""
    if response.is_success:
        return
    status = response.status_code
    if status == 429:
        error_type = "rate_limit"
    elif status >= 500:
        error_type = "server_error"
    else:
        error_type = "unknown"
    raise error_cls(provider, f"HTTP {status}: {response.text[:200]}", error_type)


def _compute_delay(config: RetryConfig, attempt: int) -> float:
    """Delay before retry number attempt (0-based)."""
    delay = config.base_delay_s * (config.backoff_factor ** attempt)
    if config.jitter:
        delay *= 0.5 + random.random()  # noqa: S311
    return delay


async def guarded_call(
    fn: Callable[..., Awaitable[T]],
    *args: Any,
    provider: str,
    timeout_s: float,
    retry: RetryConfig | None = None,
    **kwargs: Any,
) -> T:
    """Await fn(*args, **kwargs) under a timeout with optional retries.

    Args:
        fn: Provider coroutine function.
        provider: Provider name used in errors and logs.
        timeout_s: Per-attempt timeout in seconds.
        retry: Retry policy; None means a single attempt.

    Raises:
        ProviderTimeout: The last attempt exceeded timeout_s.
        ProviderError: The last attempt failed for any other reason.
    """
    config = retry or RetryConfig()
    attempts = 0

    while True:
        try:
            return await asyncio.wait_for(fn(*args, **kwargs), timeout=timeout_s)
        except Exception as e:
            error_type = classify_error(e)
            attempts += 1

            if error_type not in RETRYABLE_ERRORS or attempts > config.max_retries:
                logger.warning(
                    "Provider '%s' failed (%s) after %d attempt(s): %s",
                    provider, error_type, attempts, e,
                )
                if isinstance(e, ProviderError):
                    raise
                if error_type == "timeout":
                    raise ProviderTimeout(provider, timeout_s) from e
                raise ProviderError(provider, str(e) or type(e).__name__, error_type) from e

            delay = _compute_delay(config, attempts - 1)
            logger.warning(
                "Provider '%s': %s (attempt %d/%d), retrying in %.1fs",
                provider, error_type, attempts, config.max_retries, delay,
            )
            await asyncio.sleep(delay)
