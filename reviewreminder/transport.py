"""
Async HTTP Transport for the review reminder.

Handles async HTTP communication with retry logic and error handling
using the httpx async client.
"""

import asyncio
import random
import time
from collections.abc import Callable, Coroutine
from dataclasses import dataclass, field
from typing import Any

import httpx

from reviewreminder.exceptions import TransportError
from reviewreminder.logging import log_http_request, log_http_response


@dataclass
class RetryConfig:
    """Configuration for automatic retry behavior."""

    max_retries: int = 2
    backoff_factor: float = 2.0
    retry_on: list[int] = field(default_factory=lambda: [429, 502, 503, 504])
    respect_retry_after: bool = True
    max_backoff: float = 30.0  # Maximum backoff time in seconds
    jitter: float = 0.1  # Jitter factor (0.1 = ±10%)


def error_message(url: str, status: int, response: Any) -> str:
    """Build the message carried by a TransportError."""
    message = response or f"{status} Network Error"
    return f"Got '{message}' message for '{url}' request"


class AsyncHTTPTransport:
    """
    Async HTTP transport layer with retry logic.

    Handles:
    - Exponential backoff with jitter for retries
    - Retry-After header respect for rate limiting
    - Error responses turned into TransportError
    """

    def __init__(
        self,
        base_url: str = "",
        headers: dict[str, str] | None = None,
        timeout: float = 30.0,
        retry_config: RetryConfig | None = None,
        http_transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        """
        Initialize async HTTP transport.

        Args:
            base_url: Base URL for API requests (e.g., "https://gitlab.com/api/v4")
            headers: Headers sent with every request
            timeout: Request timeout in seconds
            retry_config: Configuration for retry behavior
            http_transport: Custom httpx transport (used by tests)
        """
        self.base_url = base_url.rstrip("/")
        self.timeout = timeout
        self.retry_config = retry_config or RetryConfig()

        self._client = httpx.AsyncClient(
            base_url=self.base_url,
            timeout=timeout,
            headers={"Content-Type": "application/json", **(headers or {})},
            transport=http_transport,
        )

    async def close(self) -> None:
        """Close the HTTP client."""
        await self._client.aclose()

    async def __aenter__(self) -> "AsyncHTTPTransport":
        return self

    async def __aexit__(self, *args: Any) -> None:
        await self.close()

    async def get(self, path: str, params: dict[str, Any] | None = None) -> Any:
        """
        Make a GET request.

        Args:
            path: API path relative to the base URL, or an absolute URL
            params: Query parameters

        Returns:
            Parsed JSON response

        Raises:
            TransportError: On network errors or error statuses
        """
        async def make_request() -> httpx.Response:
            log_http_request("GET", path, headers=dict(self._client.headers))
            return await self._client.get(path, params=params)

        return await self._execute_with_retry(path, make_request)

    async def get_all(self, path: str, params: dict[str, Any] | None = None) -> list[Any]:
        """
        GET every page of a paginated list endpoint.

        Follows the ``X-Next-Page`` header until it is empty.

        Args:
            path: API path relative to the base URL
            params: Query parameters sent with every page

        Returns:
            Items of all pages, in page order

        Raises:
            TransportError: On network errors or error statuses
        """
        items: list[Any] = []
        page = "1"
        while page:
            page_params = {**(params or {}), "page": page}

            async def make_request() -> httpx.Response:
                log_http_request("GET", path, headers=dict(self._client.headers))
                return await self._client.get(path, params=page_params)

            response = await self._send_with_retry(path, make_request)
            items.extend(self._parse_body(response) or [])
            page = response.headers.get("X-Next-Page", "").strip()

        return items

    async def post(self, path: str, body: dict[str, Any]) -> Any:
        """
        Make a POST request with a JSON body.

        Args:
            path: API path relative to the base URL, or an absolute URL
            body: JSON body

        Returns:
            Parsed JSON response, or the raw text when the body is not JSON

        Raises:
            TransportError: On network errors or error statuses
        """
        async def make_request() -> httpx.Response:
            log_http_request("POST", path, body=body)
            return await self._client.post(path, json=body)

        return await self._execute_with_retry(path, make_request)

    async def _execute_with_retry(
        self,
        url: str,
        request_fn: Callable[[], Coroutine[Any, Any, httpx.Response]],
    ) -> Any:
        """Execute a request with retries and return its parsed body."""
        return self._parse_body(await self._send_with_retry(url, request_fn))

    async def _send_with_retry(
        self,
        url: str,
        request_fn: Callable[[], Coroutine[Any, Any, httpx.Response]],
    ) -> httpx.Response:
        """
        Execute a request with automatic retry on retryable errors.

        Args:
            url: Request URL, used in error messages
            request_fn: Async function that makes the HTTP request

        Returns:
            The first successful response

        Raises:
            TransportError: On non-retryable errors or after max retries
        """
        for attempt in range(self.retry_config.max_retries + 1):
            started = time.monotonic()
            try:
                response = await request_fn()
            except httpx.RequestError as e:
                # Network errors are retryable
                if attempt >= self.retry_config.max_retries:
                    raise TransportError(error_message(url, 500, str(e)), 500, url) from e

                await asyncio.sleep(self._get_backoff_time(attempt, None))
                continue

            log_http_response(response.status_code, url, (time.monotonic() - started) * 1000)

            if response.status_code < 400:
                return response

            if not self._should_retry(response.status_code, attempt):
                raise self._parse_error_response(url, response)

            retry_after = response.headers.get("Retry-After")
            await asyncio.sleep(self._get_backoff_time(attempt, retry_after))

        raise TransportError(error_message(url, 500, "Request failed with no error details"), 500, url)

    def _should_retry(self, status_code: int, attempt: int) -> bool:
        """Determine if a request should be retried."""
        if attempt >= self.retry_config.max_retries:
            return False

        return status_code in self.retry_config.retry_on

    def _get_backoff_time(self, attempt: int, retry_after: str | None) -> float:
        """
        Calculate backoff time for retry.

        Uses exponential backoff with jitter, respecting Retry-After header
        if present.

        Args:
            attempt: Current attempt number (0-indexed)
            retry_after: Value of Retry-After header (if present)

        Returns:
            Time to wait in seconds
        """
        if retry_after and self.retry_config.respect_retry_after:
            try:
                return min(float(retry_after), self.retry_config.max_backoff)
            except ValueError:
                pass  # Fall through to exponential backoff

        base_wait = self.retry_config.backoff_factor ** attempt

        jitter_range = base_wait * self.retry_config.jitter
        wait_time = base_wait + random.uniform(-jitter_range, jitter_range)

        return min(wait_time, self.retry_config.max_backoff)

    @staticmethod
    def _parse_body(response: httpx.Response) -> Any:
        if not response.content:
            return None
        try:
            return response.json()
        except ValueError:
            # Incoming webhooks answer with plain "ok"
            return response.text

    def _parse_error_response(self, url: str, response: httpx.Response) -> TransportError:
        """Turn an error response into a TransportError."""
        try:
            payload: Any = response.json()
        except ValueError:
            payload = response.text

        if isinstance(payload, dict):
            payload = payload.get("message") or payload.get("error") or payload

        return TransportError(
            error_message(url, response.status_code, payload),
            response.status_code,
            url,
        )
