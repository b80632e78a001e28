"""
Tests for the async HTTP transport: response parsing, errors and retries.
"""

import asyncio
from typing import Any

import httpx
import pytest
from hypothesis import given, settings
from hypothesis import strategies as st

from reviewreminder.exceptions import TransportError
from reviewreminder.transport import AsyncHTTPTransport, RetryConfig, error_message

NO_WAIT = RetryConfig(max_retries=1, backoff_factor=1.0, jitter=0.0, max_backoff=0.0)


def make_transport(handler: Any, retry_config: RetryConfig = NO_WAIT) -> AsyncHTTPTransport:
    return AsyncHTTPTransport(
        base_url="https://gitlab.example.com/api/v4",
        headers={"PRIVATE-TOKEN": "test-token"},
        retry_config=retry_config,
        http_transport=httpx.MockTransport(handler),
    )


def get(transport: AsyncHTTPTransport, path: str, **kwargs: Any) -> Any:
    async def go() -> Any:
        async with transport:
            return await transport.get(path, **kwargs)

    return asyncio.run(go())


@given(
    backoff_factor=st.floats(min_value=1.1, max_value=5.0),
    attempt=st.integers(min_value=0, max_value=4),
)
@settings(max_examples=100)
def test_exponential_backoff_timing(backoff_factor: float, attempt: int) -> None:
    """The wait before retry N is about factor**N, within the jitter band."""
    transport = AsyncHTTPTransport(
        retry_config=RetryConfig(backoff_factor=backoff_factor, jitter=0.1, max_backoff=1000.0),
    )

    actual = transport._get_backoff_time(attempt, None)

    expected = backoff_factor ** attempt
    assert expected * 0.9 - 1e-9 <= actual <= expected * 1.1 + 1e-9


@given(retry_after=st.integers(min_value=1, max_value=120))
@settings(max_examples=100)
def test_retry_after_is_respected_up_to_max_backoff(retry_after: int) -> None:
    transport = AsyncHTTPTransport(retry_config=RetryConfig(max_backoff=30.0))

    assert transport._get_backoff_time(0, str(retry_after)) == min(retry_after, 30.0)


def test_error_message_falls_back_to_status() -> None:
    assert error_message("/x", 502, None) == "Got '502 Network Error' message for '/x' request"
    assert error_message("/x", 404, "Not found") == "Got 'Not found' message for '/x' request"


def test_json_response_and_request_shape() -> None:
    seen: list[httpx.Request] = []

    def handler(request: httpx.Request) -> httpx.Response:
        seen.append(request)
        return httpx.Response(200, json=[{"iid": 1}])

    result = get(make_transport(handler), "/projects/1/merge_requests", params={"state": "opened"})

    assert result == [{"iid": 1}]
    assert str(seen[0].url) == "https://gitlab.example.com/api/v4/projects/1/merge_requests?state=opened"
    assert seen[0].headers["PRIVATE-TOKEN"] == "test-token"


def test_plain_text_response() -> None:
    def handler(request: httpx.Request) -> httpx.Response:
        return httpx.Response(200, text="ok")

    transport = make_transport(handler)

    async def go() -> Any:
        async with transport:
            return await transport.post("https://chat.example.com/hooks/abc", {"text": "hi"})

    assert asyncio.run(go()) == "ok"


def test_empty_response_is_none() -> None:
    assert get(make_transport(lambda request: httpx.Response(204)), "/projects/1") is None


def test_error_status_raises_transport_error() -> None:
    def handler(request: httpx.Request) -> httpx.Response:
        return httpx.Response(404, json={"message": "404 Project Not Found"})

    with pytest.raises(TransportError) as exc_info:
        get(make_transport(handler), "/projects/1")

    assert exc_info.value.status == 404
    assert exc_info.value.message == "Got '404 Project Not Found' message for '/projects/1' request"
    assert str(exc_info.value) == f"[404] {exc_info.value.message}"


def test_client_errors_are_not_retried() -> None:
    calls = []

    def handler(request: httpx.Request) -> httpx.Response:
        calls.append(request)
        return httpx.Response(401, json={"error": "invalid_token"})

    with pytest.raises(TransportError, match="invalid_token"):
        get(make_transport(handler), "/projects/1")

    assert len(calls) == 1


def test_retryable_status_then_success() -> None:
    responses = [
        httpx.Response(503, headers={"Retry-After": "0"}, text="busy"),
        httpx.Response(200, json={"id": 1}),
    ]

    assert get(make_transport(lambda request: responses.pop(0)), "/projects/1") == {"id": 1}
    assert responses == []


def test_retries_are_exhausted() -> None:
    calls = []

    def handler(request: httpx.Request) -> httpx.Response:
        calls.append(request)
        return httpx.Response(502, text="Bad Gateway")

    with pytest.raises(TransportError) as exc_info:
        get(make_transport(handler), "/projects/1")

    assert exc_info.value.status == 502
    assert "Bad Gateway" in exc_info.value.message
    assert len(calls) == 2


def test_network_error_becomes_status_500() -> None:
    def handler(request: httpx.Request) -> httpx.Response:
        raise httpx.ConnectError("connection refused", request=request)

    with pytest.raises(TransportError) as exc_info:
        get(make_transport(handler), "/projects/1")

    assert exc_info.value.status == 500
    assert exc_info.value.url == "/projects/1"
    assert "connection refused" in exc_info.value.message


def test_get_all_follows_next_page_header() -> None:
    pages = {
        "1": httpx.Response(200, json=[1, 2], headers={"X-Next-Page": "2"}),
        "2": httpx.Response(200, json=[3], headers={"X-Next-Page": ""}),
    }
    seen = []

    def handler(request: httpx.Request) -> httpx.Response:
        seen.append(dict(request.url.params))
        return pages[request.url.params["page"]]

    async def go() -> Any:
        async with make_transport(handler) as transport:
            return await transport.get_all("/projects/1/merge_requests", params={"state": "opened"})

    assert asyncio.run(go()) == [1, 2, 3]
    assert seen == [{"state": "opened", "page": "1"}, {"state": "opened", "page": "2"}]


def test_get_all_retries_a_single_page() -> None:
    responses = [
        httpx.Response(200, json=["a"], headers={"X-Next-Page": "2"}),
        httpx.Response(503, headers={"Retry-After": "0"}, text="busy"),
        httpx.Response(200, json=["b"]),
    ]

    async def go() -> Any:
        async with make_transport(lambda request: responses.pop(0)) as transport:
            return await transport.get_all("/projects/1/merge_requests")

    assert asyncio.run(go()) == ["a", "b"]
    assert responses == []
