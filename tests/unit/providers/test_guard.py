# tests/unit/providers/test_guard.py - v1
"""Tests for providers/guard.py."""

from __future__ import annotations

import asyncio

import httpx
import pytest

from sproutintel.core.errors import ProviderError, ProviderTimeout, UploadFailed
from sproutintel.providers.guard import (
    RetryConfig,
    _compute_delay,
    classify_error,
    guarded_call,
    raise_for_status,
)

NO_WAIT = RetryConfig(max_retries=2, base_delay_s=0.0, jitter=False)


class _Flaky:
    """Coroutine that fails a fixed number of times before succeeding."""

    def __init__(self, failures: int, error: Exception) -> None:
        self.failures = failures
        self.error = error
        self.calls = 0

    async def __call__(self, value: str = "ok") -> str:
        self.calls += 1
        if self.calls <= self.failures:
            raise self.error
        return value


class TestClassifyError:
    @pytest.mark.parametrize(
        "error,expected",
        [
            (Exception("HTTP 429 Too Many Requests"), "rate_limit"),
            (Exception("rate limit exceeded"), "rate_limit"),
            (Exception("code=rate_limit_exceeded"), "rate_limit"),
            (Exception("could not generate content"), "unknown"),
            (Exception("prompt blocked by moderate safety filter"), "unknown"),
            (TimeoutError(), "timeout"),
            (Exception("request timed out"), "timeout"),
            (Exception("HTTP 503 Service Unavailable"), "server_error"),
            (Exception("invalid api key"), "unknown"),
            (ProviderError("x", "boom", "parse_error"), "parse_error"),
        ],
    )
    def test_classification(self, error, expected):
        assert classify_error(error) == expected


class TestRaiseForStatus:
    def test_success_passes(self):
        raise_for_status("unsplash", httpx.Response(200))

    @pytest.mark.parametrize("status,expected", [(429, "rate_limit"), (502, "server_error"), (401, "unknown")])
    def test_error_types(self, status, expected):
        with pytest.raises(ProviderError) as exc:
            raise_for_status("unsplash", httpx.Response(status, text="nope"))
        assert exc.value.error_type == expected
        assert exc.value.provider == "unsplash"

    def test_custom_error_class(self):
        with pytest.raises(UploadFailed):
            raise_for_status("cloudinary", httpx.Response(400), error_cls=UploadFailed)


class TestComputeDelay:
    def test_exponential_without_jitter(self):
        config = RetryConfig(base_delay_s=1.0, backoff_factor=2.0, jitter=False)
        assert [_compute_delay(config, n) for n in range(3)] == [1.0, 2.0, 4.0]

    def test_jitter_bounds(self):
        config = RetryConfig(base_delay_s=1.0)
        assert all(0.5 <= _compute_delay(config, 0) <= 1.5 for _ in range(20))


class TestGuardedCall:
    @pytest.mark.asyncio
    async def test_passes_arguments(self):
        fn = _Flaky(0, Exception())
        assert await guarded_call(fn, "hello", provider="p", timeout_s=1.0) == "hello"

    @pytest.mark.asyncio
    async def test_no_retry_by_default(self):
        fn = _Flaky(1, Exception("HTTP 503"))
        with pytest.raises(ProviderError) as exc:
            await guarded_call(fn, provider="gemini", timeout_s=1.0)
        assert fn.calls == 1
        assert exc.value.error_type == "server_error"
        assert isinstance(exc.value.__cause__, Exception)

    @pytest.mark.asyncio
    async def test_retries_retryable(self):
        fn = _Flaky(2, Exception("HTTP 429"))
        assert await guarded_call(fn, provider="p", timeout_s=1.0, retry=NO_WAIT) == "ok"
        assert fn.calls == 3

    @pytest.mark.asyncio
    async def test_does_not_retry_unknown(self):
        fn = _Flaky(1, Exception("bad request"))
        with pytest.raises(ProviderError):
            await guarded_call(fn, provider="p", timeout_s=1.0, retry=NO_WAIT)
        assert fn.calls == 1

    @pytest.mark.asyncio
    async def test_provider_error_reraised_unchanged(self):
        original = UploadFailed("cloudinary", "rejected")
        fn = _Flaky(1, original)
        with pytest.raises(UploadFailed) as exc:
            await guarded_call(fn, provider="cloudinary", timeout_s=1.0)
        assert exc.value is original

    @pytest.mark.asyncio
    async def test_timeout(self):
        async def hang() -> None:
            await asyncio.sleep(5)

        with pytest.raises(ProviderTimeout) as exc:
            await guarded_call(hang, provider="perplexity", timeout_s=0.01)
        assert exc.value.error_type == "timeout"
        assert exc.value.timeout_s == 0.01
