"""
Shared httpx plumbing for provider clients.

Every provider call goes through :meth:`BaseHTTPClient._request`. Throttling
(429), 5xx responses and transport failures are retried with jittered
exponential backoff; whatever is left is raised as a ShortsBot exception so
services only ever catch ``ShortsBotException``. Calls that must not be
repeated, such as token grants and uploads, pass ``retry=False`` and get a
single attempt.
"""

import asyncio
import logging
import random
import time
from abc import ABC, abstractmethod
from datetime import UTC, datetime
from email.utils import parsedate_to_datetime
from typing import Any

import httpx

from shortsbot.core.config import Settings, get_settings
from shortsbot.core.exceptions import ExternalServiceError, RateLimitError

logger = logging.getLogger(__name__)

ERROR_BODY_MAX_LENGTH = 500


def parse_retry_after(value: str | None, now: datetime | None = None) -> float | None:
    """
    Seconds to wait according to a ``Retry-After`` header.

    Both forms allowed by RFC 9110 are accepted: delta-seconds and an
    HTTP-date. Dates in the past give 0.

    Args:
        value: Raw header value
        now: Reference time for HTTP-dates (defaults to the current UTC time)

    Returns:
        Non-negative delay in seconds, or None when the header is absent or
        cannot be parsed
    """
    if not value or not value.strip():
        return None
    value = value.strip()

    try:
        seconds = float(value)
    except ValueError:
        pass
    else:
        return seconds if seconds > 0 else 0.0

    try:
        when = parsedate_to_datetime(value)
    except (TypeError, ValueError):
        return None
    if when.tzinfo is None:
        when = when.replace(tzinfo=UTC)
    remaining = (when - (now or datetime.now(UTC))).total_seconds()
    return max(0.0, remaining)


class BaseHTTPClient(ABC):
    """
    Base class for provider API clients.

    Subclasses supply ``service_name`` and ``_get_headers()`` and build their
    calls on :meth:`_request`. The underlying ``httpx.AsyncClient`` is
    released with :meth:`aclose`.
    """

    def __init__(
        self,
        base_url: str,
        api_key: str | None = None,
        settings: Settings | None = None,
        max_retries: int = 3,
        backoff_base: float = 1.0,
        backoff_cap: float = 30.0,
        timeout: float = 60.0,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        """
        Args:
            base_url: Base URL for relative request paths
            api_key: Provider API key, if the provider uses one
            settings: Application settings instance
            max_retries: Attempts per retryable call (at least 1)
            backoff_base: First backoff delay in seconds
            backoff_cap: Upper bound for any single wait, Retry-After included
            timeout: Default request timeout in seconds
            transport: Optional httpx transport (used by tests)
        """
        self._base_url = base_url.rstrip("/")
        self._api_key = api_key
        self._settings = settings or get_settings()
        self._max_retries = max(1, max_retries)
        self._backoff_base = backoff_base
        self._backoff_cap = backoff_cap
        self._timeout = timeout
        self._client = httpx.AsyncClient(
            base_url=self._base_url,
            timeout=httpx.Timeout(timeout),
            transport=transport,
        )

    @property
    @abstractmethod
    def service_name(self) -> str:
        """Provider name used in logs and error messages."""

    @abstractmethod
    def _get_headers(self) -> dict[str, str]:
        """Headers sent with every request."""

    async def aclose(self) -> None:
        """Release pooled connections."""
        await self._client.aclose()

    def _backoff_delay(self, attempt: int) -> float:
        """Jittered exponential delay after the given 1-based attempt."""
        delay = min(self._backoff_base * (2 ** (attempt - 1)), self._backoff_cap)
        return delay + delay * (0.1 + 0.2 * random.random())

    async def _wait_before_retry(
        self,
        attempt: int,
        reason: str,
        retry_after: float | None = None,
    ) -> None:
        delay = self._backoff_delay(attempt) if retry_after is None else retry_after
        delay = min(delay, self._backoff_cap)
        logger.warning(
            f"{self.service_name} {reason}, retrying in {delay:.2f}s",
            extra={"attempt": attempt, "max_retries": self._max_retries},
        )
        await asyncio.sleep(delay)

    def _status_error(self, response: httpx.Response) -> ExternalServiceError:
        return ExternalServiceError(
            service=self.service_name,
            message=f"{self.service_name} API error: {response.status_code}",
            original_error=response.text[:ERROR_BODY_MAX_LENGTH],
            status_code=response.status_code,
        )

    async def _request(
        self,
        method: str,
        path: str,
        *,
        headers: dict[str, str] | None = None,
        params: dict[str, Any] | None = None,
        json_data: dict[str, Any] | None = None,
        data: dict[str, Any] | None = None,
        content: bytes | None = None,
        timeout: float | None = None,
        allow_client_errors: bool = False,
        retry: bool = True,
    ) -> httpx.Response:
        """
        Send a request, retrying transient failures.

        Args:
            method: HTTP method
            path: Path relative to the base URL, or an absolute URL
            headers: Extra headers merged over the defaults
            params: Query parameters
            json_data: JSON body
            data: Form body
            content: Raw body
            timeout: Per-call timeout override
            allow_client_errors: Return 4xx responses (other than 429) to the
                caller instead of raising
            retry: False for calls that must be attempted exactly once

        Returns:
            The final response

        Raises:
            RateLimitError: Still throttled on the last attempt
            ExternalServiceError: Transport failure or 5xx on the last
                attempt, or a 4xx when ``allow_client_errors`` is False
        """
        if path.startswith(("http://", "https://")):
            url = path
        else:
            url = f"{self._base_url}/{path.lstrip('/')}"
        request_headers = {**self._get_headers(), **(headers or {})}
        attempts = self._max_retries if retry else 1

        attempt = 0
        while True:
            attempt += 1
            last_attempt = attempt >= attempts
            started = time.monotonic()

            try:
                response = await self._client.request(
                    method,
                    url,
                    headers=request_headers,
                    params=params,
                    json=json_data,
                    data=data,
                    content=content,
                    timeout=timeout or self._timeout,
                )
            except httpx.RequestError as e:
                if last_attempt:
                    logger.error(
                        f"{self.service_name} request failed",
                        extra={"url": url, "attempt": attempt, "error": str(e)},
                    )
                    raise ExternalServiceError(
                        service=self.service_name,
                        message=f"{self.service_name} request failed: {type(e).__name__}",
                        original_error=str(e),
                    ) from e
                await self._wait_before_retry(attempt, type(e).__name__)
                continue

            logger.info(
                f"{self.service_name} {method} {response.status_code}",
                extra={
                    "url": url,
                    "status_code": response.status_code,
                    "elapsed_ms": int((time.monotonic() - started) * 1000),
                    "attempt": attempt,
                },
            )

            if response.status_code == 429:
                retry_after = parse_retry_after(response.headers.get("Retry-After"))
                if last_attempt:
                    raise RateLimitError(
                        message=f"{self.service_name} rate limit exceeded",
                        retry_after=int(retry_after) if retry_after else None,
                    )
                await self._wait_before_retry(attempt, "rate limited", retry_after)
                continue

            if response.status_code >= 500:
                if last_attempt:
                    raise self._status_error(response)
                await self._wait_before_retry(attempt, f"returned {response.status_code}")
                continue

            if response.status_code >= 400 and not allow_client_errors:
                logger.error(
                    f"{self.service_name} rejected the request",
                    extra={
                        "status_code": response.status_code,
                        "error": response.text[:ERROR_BODY_MAX_LENGTH],
                    },
                )
                raise self._status_error(response)

            return response
