"""
Base client for all upstream genome data services.

Provides: rate limiting, retry with exponential backoff, structured logging,
and the error taxonomy shared by every client.
"""

import asyncio
import logging
import time
from abc import ABC, abstractmethod
from datetime import datetime, timezone
from email.utils import parsedate_to_datetime
from typing import Any

import aiohttp
from pydantic import BaseModel

from genome_scout.constants import (
    DEFAULT_MAX_POST_RETRIES,
    DEFAULT_MAX_RETRIES,
    DEFAULT_TIMEOUT,
)

logger = logging.getLogger("genome_scout.data_sources")


# ---------------------------------------------------------------------------
# Configuration
# ---------------------------------------------------------------------------


class RetryConfig(BaseModel):
    """Retry behaviour for failed requests."""

    max_retries: int = DEFAULT_MAX_RETRIES
    max_post_retries: int = DEFAULT_MAX_POST_RETRIES  # POSTs are not idempotent
    base_delay: float = 1.0  # seconds
    max_delay: float = 30.0  # seconds
    backoff_factor: float = 2.0
    retryable_status_codes: set[int] = {429, 500, 502, 503, 504}


class RateLimitConfig(BaseModel):
    """Token-bucket rate limiter settings."""

    requests_per_second: float = 3.0  # NCBI's keyless quota, per limiter
    burst: int = 5


class ClientConfig(BaseModel):
    """Top-level config aggregating retry and rate limit."""

    retry: RetryConfig = RetryConfig()
    rate_limit: RateLimitConfig = RateLimitConfig()
    timeout_seconds: float = DEFAULT_TIMEOUT


# ---------------------------------------------------------------------------
# Rate limiter (async token bucket)
# ---------------------------------------------------------------------------


class TokenBucketRateLimiter:
    """
    Async token-bucket rate limiter.

    Allows `burst` requests immediately, then refills at
    `requests_per_second`.  Callers await `acquire()` before
    making a request; it sleeps only when the bucket is empty.
    """

    def __init__(self, config: RateLimitConfig):
        self.rate = config.requests_per_second
        self.max_tokens = config.burst
        self.tokens = float(config.burst)
        self.last_refill = time.monotonic()
        self._lock = asyncio.Lock()

    async def acquire(self) -> None:
        async with self._lock:
            now = time.monotonic()
            elapsed = now - self.last_refill
            self.tokens = min(self.max_tokens, self.tokens + elapsed * self.rate)
            self.last_refill = now

            if self.tokens < 1.0:
                wait = (1.0 - self.tokens) / self.rate
                logger.debug("Rate limiter: sleeping %.2fs", wait)
                await asyncio.sleep(wait)
                self.tokens = 0.0
                self.last_refill = time.monotonic()
            else:
                self.tokens -= 1.0


# ---------------------------------------------------------------------------
# Request context (for structured logging)
# ---------------------------------------------------------------------------


class RequestContext(BaseModel):
    """Metadata attached to every outgoing request for logging."""

    source: str  # e.g. "ucsc", "clinvar"
    method: str  # e.g. "list_chromosomes"
    params: dict[str, Any] = {}


# ---------------------------------------------------------------------------
# Exceptions
# ---------------------------------------------------------------------------


class DataSourceError(Exception):
    """Base exception for data source failures."""

    def __init__(self, source: str, message: str, status_code: int | None = None):
        self.source = source
        self.status_code = status_code
        super().__init__(f"[{source}] {message}")


class NetworkError(DataSourceError):
    """Transport failure or timeout reaching an upstream."""

    pass


class UpstreamStatusError(DataSourceError):
    """Upstream answered with a non-success HTTP status.

    The response body is kept verbatim on ``body`` and in the message.
    """

    def __init__(self, source: str, status_code: int, body: str):
        self.body = body
        super().__init__(source, f"HTTP {status_code}: {body}", status_code=status_code)


class UpstreamFormatError(DataSourceError):
    """Response decoded but lacks an expected field or shape."""

    pass


class NotFoundError(DataSourceError):
    """A well-formed response saying the requested entity does not exist."""

    pass


class ValidationError(DataSourceError):
    """Caller-supplied coordinates or alleles are malformed."""

    pass


# ---------------------------------------------------------------------------
# Base client
# ---------------------------------------------------------------------------


class BaseClient(ABC):
    """
    Abstract base for the UCSC, Clinical Tables, E-utilities and
    prediction-backend clients.

    Subclasses implement `_source_name` and their own typed methods that
    call `_rest_get()` or `_post_json()`.
    """

    def __init__(self, config: ClientConfig | None = None):
        self.config = config or ClientConfig()
        self.rate_limiter = TokenBucketRateLimiter(self.config.rate_limit)
        self._session: aiohttp.ClientSession | None = None

    @property
    @abstractmethod
    def _source_name(self) -> str:
        """Identifier for this data source, e.g. 'ucsc'."""
        ...

    # -- Session management --------------------------------------------------

    async def _get_session(self) -> aiohttp.ClientSession:
        if self._session is None or self._session.closed:
            timeout = aiohttp.ClientTimeout(total=self.config.timeout_seconds)
            self._session = aiohttp.ClientSession(timeout=timeout)
        return self._session

    async def close(self) -> None:
        if self._session and not self._session.closed:
            await self._session.close()

    async def __aenter__(self):
        return self

    async def __aexit__(self, *exc):
        await self.close()

    # -- Core request with retry + rate limiting -----------------------------

    def _backoff(self, attempt: int) -> float:
        return min(
            self.config.retry.base_delay * (self.config.retry.backoff_factor**attempt),
            self.config.retry.max_delay,
        )

    def _retry_after_delay(self, retry_after: str | None, attempt: int) -> float:
        """Seconds to wait for a 429, from delay-seconds or an HTTP-date.

        Falls back to exponential backoff when the header is absent or
        unparseable. Never longer than ``max_delay``.
        """
        if not retry_after:
            return self._backoff(attempt)
        try:
            delay = float(retry_after)
        except ValueError:
            try:
                retry_at = parsedate_to_datetime(retry_after)
            except (TypeError, ValueError):
                logger.debug("Unparseable Retry-After %r, backing off", retry_after)
                return self._backoff(attempt)
            if retry_at.tzinfo is None:
                retry_at = retry_at.replace(tzinfo=timezone.utc)
            delay = (retry_at - datetime.now(timezone.utc)).total_seconds()
        return min(max(delay, 0.0), self.config.retry.max_delay)

    async def _request(
        self,
        method: str,
        url: str,
        *,
        params: dict[str, Any] | None = None,
        json_body: dict[str, Any] | None = None,
        headers: dict[str, str] | None = None,
        context: RequestContext | None = None,
    ) -> Any:
        """
        Make an HTTP request with rate limiting and retry, returning decoded JSON.

        Parameters
        ----------
        method : str
            HTTP method, "GET" or "POST".
        url : str
            Full URL.
        params : dict, optional
            Query string parameters.
        json_body : dict, optional
            JSON body (for POST).
        headers : dict, optional
            Additional HTTP headers.
        context : RequestContext, optional
            Logging context.

        Raises
        ------
        UpstreamStatusError
            Non-retryable status, or retryable status once retries run out.
        NetworkError
            Timeout or connection failure once retries run out.
        UpstreamFormatError
            The body is not valid JSON.
        """
        ctx = context or RequestContext(source=self._source_name, method="unknown")
        is_get = method.upper() == "GET"
        max_retries = (
            self.config.retry.max_retries if is_get else self.config.retry.max_post_retries
        )

        last_error: DataSourceError | None = None
        start = time.monotonic()

        for attempt in range(max_retries + 1):
            try:
                await self.rate_limiter.acquire()
                session = await self._get_session()

                logger.info(
                    "Request [%s.%s] attempt=%d url=%s",
                    ctx.source,
                    ctx.method,
                    attempt + 1,
                    url,
                )

                if is_get:
                    resp = await session.get(url, params=params, headers=headers)
                else:
                    resp = await session.post(
                        url, json=json_body, params=params, headers=headers
                    )

                # --- Handle HTTP errors ---
                if resp.status in self.config.retry.retryable_status_codes:
                    body = await resp.text()
                    logger.warning(
                        "Retryable %d from %s.%s: %s",
                        resp.status,
                        ctx.source,
                        ctx.method,
                        body[:200],
                    )
                    last_error = UpstreamStatusError(ctx.source, resp.status, body)
                    if attempt >= max_retries:
                        break
                    if resp.status == 429:
                        # Respect Retry-After header if present
                        await asyncio.sleep(
                            self._retry_after_delay(
                                resp.headers.get("Retry-After"), attempt
                            )
                        )
                        continue
                    await asyncio.sleep(self._backoff(attempt))
                    continue

                if resp.status >= 400:
                    body = await resp.text()
                    raise UpstreamStatusError(ctx.source, resp.status, body)

                # --- Success ---
                try:
                    data = await resp.json(content_type=None)
                except ValueError as e:
                    raise UpstreamFormatError(
                        ctx.source, f"Response is not valid JSON: {e}"
                    ) from e

                logger.info(
                    "Success [%s.%s] elapsed=%.2fs",
                    ctx.source,
                    ctx.method,
                    time.monotonic() - start,
                )
                return data

            except asyncio.TimeoutError:
                elapsed = time.monotonic() - start
                last_error = NetworkError(ctx.source, f"Timeout after {elapsed:.1f}s")
                logger.warning(
                    "Timeout [%s.%s] attempt=%d elapsed=%.1fs",
                    ctx.source,
                    ctx.method,
                    attempt + 1,
                    elapsed,
                )

            except aiohttp.ClientError as e:
                last_error = NetworkError(ctx.source, f"Connection error: {e}")
                logger.warning(
                    "Connection error [%s.%s] attempt=%d: %s",
                    ctx.source,
                    ctx.method,
                    attempt + 1,
                    e,
                )

            # Exponential backoff before next attempt
            if attempt < max_retries:
                await asyncio.sleep(self._backoff(attempt))

        logger.error(
            "All retries exhausted [%s.%s] after %.1fs: %s",
            ctx.source,
            ctx.method,
            time.monotonic() - start,
            last_error,
        )
        assert last_error is not None
        raise last_error

    # -- Convenience methods for subclasses ----------------------------------

    async def _rest_get(
        self,
        url: str,
        params: dict[str, Any],
        *,
        context: RequestContext | None = None,
    ) -> Any:
        """Convenience wrapper for REST GET requests."""
        return await self._request("GET", url, params=params, context=context)

    async def _post_json(
        self,
        url: str,
        json_body: dict[str, Any],
        *,
        context: RequestContext | None = None,
    ) -> Any:
        """Convenience wrapper for JSON POST requests."""
        return await self._request(
            "POST",
            url,
            json_body=json_body,
            headers={"Content-Type": "application/json"},
            context=context,
        )
