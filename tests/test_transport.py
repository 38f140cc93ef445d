"""Tests for AdapterTransport over httpx.MockTransport."""

from __future__ import annotations

import json

import httpx
import pytest

from gateway.services.errors import RequestTimeoutError, TransportError, UpstreamError
from gateway.services.models import RequestDescriptor
from gateway.services.transport import AdapterTransport, decode_body
from tests.fakes import make_descriptor


def raising_transport(error_factory) -> httpx.MockTransport:
    def handler(request: httpx.Request) -> httpx.Response:
        raise error_factory(request)

    return httpx.MockTransport(handler)


class TestHeaders:
    def test_merge_order(self):
        descriptor = make_descriptor(
            headers={"Content-Type": "text/plain", "X-Client": "gw"},
            auth={"type": "bearer", "token": "t"},
        )
        transport = AdapterTransport(descriptor)

        assert transport.headers["content-type"] == "text/plain"
        assert transport.headers["x-client"] == "gw"
        assert transport.headers["authorization"] == "Bearer t"

    def test_auth_overrides_static_header(self):
        descriptor = make_descriptor(
            headers={"Authorization": "static"},
            auth={"type": "bearer", "token": "t"},
        )
        assert AdapterTransport(descriptor).headers["authorization"] == "Bearer t"

    @pytest.mark.asyncio
    async def test_headers_sent_upstream(self, upstream):
        upstream.add("GET", "/ping", 200, {"pong": True})
        descriptor = make_descriptor(auth={"type": "api_key", "key": "secret"})
        transport = AdapterTransport(descriptor, upstream.transport)

        await transport.send(
            RequestDescriptor(method="GET", path="/ping", headers={"X-Trace": "1"})
        )
        await transport.close()

        sent = upstream.requests[0]
        assert sent.headers["content-type"] == "application/json"
        assert sent.headers["x-api-key"] == "secret"
        assert sent.headers["x-trace"] == "1"


class TestSend:
    @pytest.mark.asyncio
    async def test_success_decodes_json(self, upstream):
        upstream.add("GET", "/items", 200, {"items": [1, 2]})
        transport = AdapterTransport(make_descriptor(), upstream.transport)

        response = await transport.send(
            RequestDescriptor(method="GET", path="/items", params={"page": "2"})
        )

        assert response.status_code == 200
        assert response.data == {"items": [1, 2]}
        assert upstream.requests[0].url.params["page"] == "2"
        assert str(upstream.requests[0].url).startswith("http://upstream.test/items")

    @pytest.mark.asyncio
    async def test_body_sent_as_json(self, upstream):
        upstream.add_handler(
            "POST", "/items", lambda request: (201, json.loads(request.content))
        )
        transport = AdapterTransport(make_descriptor(), upstream.transport)

        response = await transport.send(
            RequestDescriptor(method="POST", path="/items", body={"name": "x"})
        )

        assert response.status_code == 201
        assert response.data == {"name": "x"}

    @pytest.mark.asyncio
    async def test_non_2xx_raises_upstream_error(self, upstream):
        upstream.add("GET", "/broken", 503, "try later")
        transport = AdapterTransport(make_descriptor(), upstream.transport)

        with pytest.raises(UpstreamError) as exc_info:
            await transport.send(RequestDescriptor(method="GET", path="/broken"))

        assert exc_info.value.status_code == 503
        assert exc_info.value.body == "try later"
        assert exc_info.value.adapter_name == "svc"

    @pytest.mark.asyncio
    async def test_client_is_reused_until_closed(self, upstream):
        upstream.add("GET", "/ping", 200, {})
        transport = AdapterTransport(make_descriptor(), upstream.transport)

        await transport.send(RequestDescriptor(method="GET", path="/ping"))
        client = transport._client
        await transport.send(RequestDescriptor(method="GET", path="/ping"))
        assert transport._client is client

        await transport.close()
        assert transport._client is None


class TestErrorMapping:
    @pytest.mark.parametrize(
        "factory,error_type,code",
        [
            (lambda r: httpx.ConnectTimeout("slow", request=r), RequestTimeoutError, "ETIMEDOUT"),
            (lambda r: httpx.PoolTimeout("pool", request=r), RequestTimeoutError, "ETIMEDOUT"),
            (lambda r: httpx.ReadTimeout("slow", request=r), RequestTimeoutError, "ECONNABORTED"),
            (
                lambda r: httpx.ConnectError("Connection refused", request=r),
                TransportError,
                "ECONNREFUSED",
            ),
            (
                lambda r: httpx.ConnectError(
                    "[Errno -2] Name or service not known", request=r
                ),
                TransportError,
                "ENOTFOUND",
            ),
            (
                lambda r: httpx.RemoteProtocolError("Server disconnected", request=r),
                TransportError,
                "ECONNRESET",
            ),
            (lambda r: httpx.ReadError("reset", request=r), TransportError, "ECONNRESET"),
            (lambda r: httpx.CloseError("closed", request=r), TransportError, "ENETUNREACH"),
            (lambda r: httpx.UnsupportedProtocol("nope", request=r), TransportError, None),
        ],
    )
    @pytest.mark.asyncio
    async def test_request_errors_map_to_codes(self, factory, error_type, code):
        transport = AdapterTransport(make_descriptor(), raising_transport(factory))

        with pytest.raises(error_type) as exc_info:
            await transport.send(RequestDescriptor(method="GET", path="/x"))

        assert exc_info.value.code == code
        assert exc_info.value.adapter_name == "svc"

    @pytest.mark.asyncio
    async def test_timeout_message_names_limit(self):
        transport = AdapterTransport(
            make_descriptor(timeout=2.5),
            raising_transport(lambda r: httpx.ReadTimeout("slow", request=r)),
        )

        with pytest.raises(RequestTimeoutError, match="timed out after 2.5s"):
            await transport.send(RequestDescriptor(method="GET", path="/x"))


class TestDecodeBody:
    def test_json(self):
        assert decode_body(httpx.Response(200, json={"a": 1})) == {"a": 1}

    def test_text(self):
        assert decode_body(httpx.Response(200, text="plain")) == "plain"

    def test_empty(self):
        assert decode_body(httpx.Response(204)) is None
