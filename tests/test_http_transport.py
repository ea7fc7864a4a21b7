from __future__ import annotations

import asyncio
import json

import httpx
import pytest

from primesummarizer.modules.summarize.domain.errors import (
    RequestCancelledError,
    ServerError,
    TransportError,
)
from primesummarizer.modules.summarize.domain.models import (
    CancellationToken,
    Credentials,
    FormatOptions,
    SubmissionRequest,
)
from primesummarizer.modules.summarize.infrastructure.http_transport import HttpSummarizeTransport

ENDPOINT = "https://summarizer.test/summarize"


def make_request(credentials: Credentials | None = None) -> SubmissionRequest:
    return SubmissionRequest(
        raw_text=" Some text to summarize ",
        normalized_text="Some text to summarize",
        options=FormatOptions(trim=True),
        credentials=credentials,
    )


def make_transport(handler) -> HttpSummarizeTransport:
    client = httpx.AsyncClient(transport=httpx.MockTransport(handler))
    return HttpSummarizeTransport(ENDPOINT, client=client)


@pytest.mark.asyncio
async def test_posts_json_body_and_returns_payload() -> None:
    seen: list[httpx.Request] = []

    def handler(request: httpx.Request) -> httpx.Response:
        seen.append(request)
        return httpx.Response(200, json={"summary": "Short", "highlights": ["a"]})

    transport = make_transport(handler)
    credentials = Credentials(provider="openai", model="gpt-4o-mini", api_key="sk-test")
    payload = await transport.send(make_request(credentials), CancellationToken())

    assert payload == {"summary": "Short", "highlights": ["a"]}
    sent = seen[0]
    assert sent.method == "POST"
    assert str(sent.url) == ENDPOINT
    assert sent.headers["content-type"] == "application/json"
    assert json.loads(sent.content) == {
        "text": "Some text to summarize",
        "provider": "openai",
        "model": "gpt-4o-mini",
        "api_key": "sk-test",
    }


@pytest.mark.asyncio
async def test_body_has_only_text_without_credentials() -> None:
    bodies: list[dict] = []

    def handler(request: httpx.Request) -> httpx.Response:
        bodies.append(json.loads(request.content))
        return httpx.Response(200, json={"result": "ok"})

    await make_transport(handler).send(make_request(), CancellationToken())
    assert bodies == [{"text": "Some text to summarize"}]


@pytest.mark.asyncio
async def test_non_2xx_raises_server_error() -> None:
    def handler(request: httpx.Request) -> httpx.Response:
        return httpx.Response(503, text="down for maintenance")

    with pytest.raises(ServerError) as excinfo:
        await make_transport(handler).send(make_request(), CancellationToken())

    error = excinfo.value
    assert error.status_code == 503
    assert error.status_text == "Service Unavailable"
    assert error.info.message == "API error: 503 Service Unavailable"


@pytest.mark.asyncio
async def test_network_failure_raises_transport_error() -> None:
    def handler(request: httpx.Request) -> httpx.Response:
        raise httpx.ConnectError("connection refused", request=request)

    with pytest.raises(TransportError) as excinfo:
        await make_transport(handler).send(make_request(), CancellationToken())
    assert not isinstance(excinfo.value, RequestCancelledError)
    assert "connection refused" in excinfo.value.message


@pytest.mark.asyncio
async def test_non_json_body_raises_transport_error() -> None:
    def handler(request: httpx.Request) -> httpx.Response:
        return httpx.Response(200, text="<html>oops</html>")

    with pytest.raises(TransportError):
        await make_transport(handler).send(make_request(), CancellationToken())


@pytest.mark.asyncio
async def test_cancelling_token_aborts_request() -> None:
    started = asyncio.Event()

    async def handler(request: httpx.Request) -> httpx.Response:
        started.set()
        await asyncio.sleep(30)
        return httpx.Response(200, json={"summary": "never"})

    token = CancellationToken()
    task = asyncio.create_task(make_transport(handler).send(make_request(), token))
    await asyncio.wait_for(started.wait(), timeout=1)
    token.cancel()

    with pytest.raises(RequestCancelledError) as excinfo:
        await asyncio.wait_for(task, timeout=1)
    assert excinfo.value.info.message == "Request cancelled."


@pytest.mark.asyncio
async def test_already_cancelled_token_skips_network() -> None:
    calls: list[httpx.Request] = []

    def handler(request: httpx.Request) -> httpx.Response:
        calls.append(request)
        return httpx.Response(200, json={})

    token = CancellationToken()
    token.cancel()
    with pytest.raises(RequestCancelledError):
        await make_transport(handler).send(make_request(), token)
    assert calls == []
