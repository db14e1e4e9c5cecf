"""
tests/unit/test_gateway.py

Tests for OllamaGateway against an in-process httpx transport.

Verifies:
✔ Chat request shape: URL, body fields, placeholder bearer token
✔ choices[0].message.content is returned
✔ Missing/empty content → MalformedResponse
✔ Timeout / connection failure / HTTP errors map to the error taxonomy
✔ Cancellation before dispatch and mid-flight → RequestCancelled
✔ probe() never raises and reports reachability + model presence
"""

import asyncio
import json

import httpx
import pytest

from inference import (
    BackendConfig,
    BackendTimeout,
    BackendUnreachable,
    CancellationToken,
    MalformedResponse,
    ModelUnavailable,
    OllamaGateway,
    RequestCancelled,
)


def completion(content):
    return {
        "choices": [
            {"message": {"role": "assistant", "content": content}, "finish_reason": "stop"}
        ],
        "usage": {"prompt_tokens": 10, "completion_tokens": 3, "total_tokens": 13},
    }


def make_gateway(handler, **config):
    return OllamaGateway(BackendConfig(**config), transport=httpx.MockTransport(handler))


class TestComplete:
    @pytest.mark.asyncio
    async def test_request_shape(self):
        seen = {}

        def handler(request: httpx.Request):
            seen["url"] = str(request.url)
            seen["auth"] = request.headers.get("Authorization")
            seen["body"] = json.loads(request.content)
            return httpx.Response(200, json=completion("ok"))

        gateway = make_gateway(handler, temperature=0.3, max_tokens=200)
        await gateway.complete("system text", "user text")

        assert seen["url"] == "http://localhost:11434/v1/chat/completions"
        assert seen["auth"] == "Bearer ollama"
        body = seen["body"]
        assert body["model"] == "gpt-oss:20b"
        assert body["messages"] == [
            {"role": "system", "content": "system text"},
            {"role": "user", "content": "user text"},
        ]
        assert body["temperature"] == 0.3
        assert body["max_tokens"] == 200
        assert body["stream"] is False

    @pytest.mark.asyncio
    async def test_returns_message_content(self):
        gateway = make_gateway(lambda r: httpx.Response(200, json=completion("hola")))
        assert await gateway.complete("s", "u") == "hola"

    @pytest.mark.asyncio
    async def test_call_config_overrides_gateway_config(self):
        seen = {}

        def handler(request):
            seen["body"] = json.loads(request.content)
            return httpx.Response(200, json=completion("ok"))

        gateway = make_gateway(handler)
        override = gateway.config.with_overrides(model_name="llama3:8b", temperature=1.5)
        await gateway.complete("s", "u", config=override)

        assert seen["body"]["model"] == "llama3:8b"
        assert seen["body"]["temperature"] == 1.5

    @pytest.mark.asyncio
    @pytest.mark.parametrize(
        "payload",
        [
            {},
            {"choices": []},
            {"choices": [{"message": {"role": "assistant"}}]},
            {"choices": [{"message": {"role": "assistant", "content": ""}}]},
            {"choices": [{"finish_reason": "stop"}]},
        ],
    )
    async def test_missing_content_is_malformed(self, payload):
        gateway = make_gateway(lambda r: httpx.Response(200, json=payload))
        with pytest.raises(MalformedResponse):
            await gateway.complete("s", "u")

    @pytest.mark.asyncio
    async def test_non_json_body_is_malformed(self):
        gateway = make_gateway(lambda r: httpx.Response(200, text="<html>oops</html>"))
        with pytest.raises(MalformedResponse):
            await gateway.complete("s", "u")

    @pytest.mark.asyncio
    async def test_timeout(self):
        def handler(request):
            raise httpx.ReadTimeout("timed out", request=request)

        gateway = make_gateway(handler, timeout_ms=100)
        with pytest.raises(BackendTimeout):
            await gateway.complete("s", "u")

    @pytest.mark.asyncio
    async def test_connection_refused_is_unreachable(self):
        def handler(request):
            raise httpx.ConnectError("connection refused", request=request)

        gateway = make_gateway(handler)
        with pytest.raises(BackendUnreachable):
            await gateway.complete("s", "u")

    @pytest.mark.asyncio
    async def test_404_is_model_unavailable(self):
        gateway = make_gateway(
            lambda r: httpx.Response(404, json={"error": {"message": "model not found"}})
        )
        with pytest.raises(ModelUnavailable) as exc_info:
            await gateway.complete("s", "u")
        assert exc_info.value.status_code == 404

    @pytest.mark.asyncio
    async def test_server_error_is_unreachable_with_status(self):
        gateway = make_gateway(lambda r: httpx.Response(500, text="boom"))
        with pytest.raises(BackendUnreachable) as exc_info:
            await gateway.complete("s", "u")
        assert exc_info.value.status_code == 500
        assert exc_info.value.kind == "unreachable"

    @pytest.mark.asyncio
    async def test_unparseable_base_url_is_unreachable(self):
        calls = []
        gateway = make_gateway(lambda r: calls.append(r), base_url="http://[::1/v1")

        with pytest.raises(BackendUnreachable):
            await gateway.complete("s", "u")
        assert calls == []

    @pytest.mark.asyncio
    async def test_timeout_bounds_whole_exchange(self):
        async def stalled_handler(request):
            await asyncio.sleep(10)
            return httpx.Response(200, json=completion("too late"))

        gateway = make_gateway(stalled_handler, timeout_ms=100)
        with pytest.raises(BackendTimeout):
            await asyncio.wait_for(gateway.complete("s", "u"), timeout=2)


class TestCancellation:
    @pytest.mark.asyncio
    async def test_cancelled_before_dispatch_sends_nothing(self):
        calls = []

        def handler(request):
            calls.append(request)
            return httpx.Response(200, json=completion("ok"))

        token = CancellationToken()
        token.cancel()
        gateway = make_gateway(handler)

        with pytest.raises(RequestCancelled):
            await gateway.complete("s", "u", cancel_token=token)
        assert calls == []

    @pytest.mark.asyncio
    async def test_cancelled_mid_flight(self):
        async def slow_handler(request):
            await asyncio.sleep(10)
            return httpx.Response(200, json=completion("too late"))

        token = CancellationToken()
        asyncio.get_running_loop().call_later(0.05, token.cancel)
        gateway = make_gateway(slow_handler)

        with pytest.raises(RequestCancelled):
            await asyncio.wait_for(gateway.complete("s", "u", cancel_token=token), timeout=2)

    @pytest.mark.asyncio
    async def test_token_unused_when_request_finishes_first(self):
        token = CancellationToken()
        gateway = make_gateway(lambda r: httpx.Response(200, json=completion("done")))
        assert await gateway.complete("s", "u", cancel_token=token) == "done"
        assert not token.cancelled


class TestProbe:
    @pytest.mark.asyncio
    async def test_ready_when_model_listed(self):
        seen = {}

        def handler(request):
            seen["url"] = str(request.url)
            return httpx.Response(200, json={"models": [{"name": "gpt-oss:20b"}]})

        status = await make_gateway(handler).probe()

        assert seen["url"] == "http://localhost:11434/api/tags"
        assert status.server_reachable is True
        assert status.model_available is True
        assert status.ready

    @pytest.mark.asyncio
    async def test_family_substring_match(self):
        handler = lambda r: httpx.Response(200, json={"models": [{"name": "gpt-oss:120b"}]})
        status = await make_gateway(handler).probe()
        assert status.model_available is True

    @pytest.mark.asyncio
    async def test_reachable_without_model(self):
        handler = lambda r: httpx.Response(200, json={"models": [{"name": "llama3:8b"}]})
        status = await make_gateway(handler).probe()

        assert status.server_reachable is True
        assert status.model_available is False
        assert "ollama pull gpt-oss:20b" in status.diagnostic

    @pytest.mark.asyncio
    async def test_connection_error_never_raises(self):
        def handler(request):
            raise httpx.ConnectError("refused", request=request)

        status = await make_gateway(handler).probe()
        assert status.server_reachable is False
        assert status.model_available is False
        assert status.diagnostic

    @pytest.mark.asyncio
    async def test_timeout_never_raises(self):
        def handler(request):
            raise httpx.ConnectTimeout("slow", request=request)

        status = await make_gateway(handler).probe()
        assert status.server_reachable is False

    @pytest.mark.asyncio
    async def test_http_error_is_unreachable(self):
        status = await make_gateway(lambda r: httpx.Response(503)).probe()
        assert status.server_reachable is False

    @pytest.mark.asyncio
    async def test_status_check_uses_given_config(self):
        handler = lambda r: httpx.Response(200, json={"models": [{"name": "gpt-oss:20b"}]})
        gateway = make_gateway(handler)

        status = await gateway.probe(gateway.config.with_overrides(model_name="llama3:8b"))

        assert status.server_reachable is True
        assert status.model_available is False
        assert "ollama pull llama3:8b" in status.diagnostic
        assert (await gateway.probe()).model_available is True

    @pytest.mark.asyncio
    async def test_unparseable_base_url_never_raises(self):
        gateway = make_gateway(lambda r: httpx.Response(200), base_url="http://[::1/v1")
        status = await gateway.probe()
        assert status.server_reachable is False
        assert "Invalid Ollama URL" in status.diagnostic

    @pytest.mark.asyncio
    async def test_garbage_listing_is_unreachable(self):
        status = await make_gateway(lambda r: httpx.Response(200, text="not json")).probe()
        assert status.server_reachable is False
