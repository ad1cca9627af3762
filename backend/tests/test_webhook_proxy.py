"""
Tests for the webhook relay service.
"""
import asyncio

import httpx
import pytest

from meunps.services.webhook_proxy import (
    WebhookProxy,
    WebhookTimeoutError,
    WebhookTransportError,
    is_valid_webhook_url,
)

TARGET = "https://hooks.example.com/nps"


def forward(proxy, headers=None, payload=None):
    return asyncio.run(proxy.forward(TARGET, headers or {}, payload))


@pytest.mark.parametrize("url,valid", [
    ("https://hooks.example.com/x", True),
    ("http://localhost:8080/hook", True),
    ("ftp://example.com", False),
    ("not a url", False),
    (None, False),
])
def test_is_valid_webhook_url(url, valid):
    assert is_valid_webhook_url(url) is valid


def test_forwards_json_with_default_headers():
    seen = {}

    def handler(request):
        seen["headers"] = request.headers
        seen["body"] = request.content
        return httpx.Response(200, json={"ok": True})

    proxy = WebhookProxy(transport=httpx.MockTransport(handler))
    result = forward(proxy, headers={"X-Token": "abc"}, payload={"score": 9})

    assert result.ok is True
    assert result.status_code == 200
    assert result.data == {"ok": True}
    assert seen["headers"]["user-agent"] == "MeuNPS-Webhook-Proxy/1.0"
    assert seen["headers"]["content-type"] == "application/json"
    assert seen["headers"]["x-token"] == "abc"
    assert seen["body"] == b'{"score": 9}'


def test_caller_headers_override_defaults():
    seen = {}

    def handler(request):
        seen["user_agent"] = request.headers["user-agent"]
        return httpx.Response(204)

    proxy = WebhookProxy(transport=httpx.MockTransport(handler))
    forward(proxy, headers={"User-Agent": "custom"})

    assert seen["user_agent"] == "custom"


def test_non_json_body_is_wrapped():
    proxy = WebhookProxy(transport=httpx.MockTransport(lambda request: httpx.Response(500, text="boom")))

    result = forward(proxy)

    assert result.ok is False
    assert result.status_code == 500
    assert result.data == {"message": "boom"}


def test_timeout_is_reported():
    def handler(request):
        raise httpx.ReadTimeout("timed out", request=request)

    proxy = WebhookProxy(timeout_seconds=30, transport=httpx.MockTransport(handler))

    with pytest.raises(WebhookTimeoutError, match=r"Webhook request timed out \(30s\)"):
        forward(proxy)


def test_deadline_covers_a_slowly_streamed_body(monkeypatch):
    """A target trickling bytes under the read timeout is still cut off."""
    for name in ("HTTP_PROXY", "http_proxy", "ALL_PROXY", "all_proxy"):
        monkeypatch.delenv(name, raising=False)

    async def scenario():
        async def handle(reader, writer):
            await reader.readuntil(b"\r\n\r\n")
            writer.write(b"HTTP/1.1 200 OK\r\nContent-Type: text/plain\r\nContent-Length: 20\r\n\r\n")
            await writer.drain()
            try:
                for _ in range(20):
                    await asyncio.sleep(0.2)
                    writer.write(b"x")
                    await writer.drain()
            except ConnectionError:
                pass
            finally:
                writer.close()

        server = await asyncio.start_server(handle, "127.0.0.1", 0)
        port = server.sockets[0].getsockname()[1]
        proxy = WebhookProxy(timeout_seconds=0.5)
        loop = asyncio.get_running_loop()
        started = loop.time()
        try:
            with pytest.raises(WebhookTimeoutError, match="timed out"):
                await proxy.forward(f"http://127.0.0.1:{port}/hook", {}, {"score": 9})
        finally:
            server.close()
        return loop.time() - started

    elapsed = asyncio.run(scenario())

    assert elapsed < 2


def test_connection_error_is_reported():
    def handler(request):
        raise httpx.ConnectError("connection refused", request=request)

    proxy = WebhookProxy(transport=httpx.MockTransport(handler))

    with pytest.raises(WebhookTransportError, match="connection refused"):
        forward(proxy)
