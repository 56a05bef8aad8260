"""Tests for the async data API client and response decoding."""

import asyncio

import httpx
import pytest

from collectors.api_client import (
    ARRAY, UNRECOGNIZED, AsyncDataClient, RequestError, decode_rows,
)


class TestDecodeRows:
    def test_bare_array(self):
        decoded = decode_rows([{"a": 1}, {"a": 2}])
        assert decoded.shape == ARRAY
        assert decoded.rows == [{"a": 1}, {"a": 2}]
        assert decoded.recognized

    @pytest.mark.parametrize("key", ["data", "results", "positions"])
    def test_known_envelopes(self, key):
        decoded = decode_rows({key: [{"x": 1}], "count": 1})
        assert decoded.shape == key
        assert decoded.rows == [{"x": 1}]

    def test_data_key_wins_over_later_keys(self):
        decoded = decode_rows({"results": [1], "data": [2]})
        assert decoded.shape == "data"
        assert decoded.rows == [2]

    @pytest.mark.parametrize("payload", [
        None, "oops", 42, {}, {"error": "bad user"}, {"data": {"nested": []}},
    ])
    def test_unrecognized_shapes_decode_empty(self, payload):
        decoded = decode_rows(payload)
        assert decoded.shape == UNRECOGNIZED
        assert decoded.rows == []
        assert not decoded.recognized

    def test_empty_array_is_recognized(self):
        assert decode_rows([]).recognized


class TestGetJson:
    def _fetch(self, make_client, handler, path="/positions", params=None):
        async def go():
            async with make_client(handler) as client:
                return await client.get_json(path, params=params)
        return asyncio.run(go())

    def test_returns_parsed_json_and_sends_params(self, make_client):
        seen = {}

        def handler(request):
            seen["path"] = request.url.path
            seen["params"] = dict(request.url.params)
            return httpx.Response(200, json=[{"ok": True}])

        data = self._fetch(make_client, handler, params={"user": "0xabc", "limit": 5})
        assert data == [{"ok": True}]
        assert seen["path"] == "/positions"
        assert seen["params"] == {"user": "0xabc", "limit": "5"}

    @pytest.mark.parametrize("status", [400, 404, 429, 500, 503])
    def test_http_error_carries_status(self, make_client, status):
        with pytest.raises(RequestError) as exc:
            self._fetch(make_client, lambda r: httpx.Response(status, json={}))
        assert exc.value.status == status
        assert exc.value.path == "/positions"
        assert str(status) in str(exc.value)

    def test_transport_error_has_no_status(self, make_client):
        def handler(request):
            raise httpx.ConnectError("connection refused", request=request)

        with pytest.raises(RequestError) as exc:
            self._fetch(make_client, handler)
        assert exc.value.status is None

    def test_invalid_json_is_a_request_error(self, make_client):
        with pytest.raises(RequestError) as exc:
            self._fetch(make_client, lambda r: httpx.Response(200, text="<html>"))
        assert exc.value.status == 200

    def test_no_retries(self, make_client):
        calls = []

        def handler(request):
            calls.append(request)
            return httpx.Response(503)

        with pytest.raises(RequestError):
            self._fetch(make_client, handler)
        assert len(calls) == 1


class TestRateLimit:
    def test_bucket_spends_tokens(self):
        client = AsyncDataClient(
            base_url="https://data-api.test", requests_per_second=1, burst=3,
            transport=httpx.MockTransport(lambda r: httpx.Response(200, json=[])))

        async def go():
            await client.get_json("/a")
            await client.get_json("/b")
            await client.aclose()

        asyncio.run(go())
        assert client.request_count == 2
        assert client.tokens < 3.0

    def test_waits_when_bucket_is_empty(self):
        client = AsyncDataClient(
            base_url="https://data-api.test", requests_per_second=50, burst=1,
            transport=httpx.MockTransport(lambda r: httpx.Response(200, json=[])))

        async def go():
            loop = asyncio.get_running_loop()
            start = loop.time()
            for _ in range(3):
                await client.get_json("/x")
            elapsed = loop.time() - start
            await client.aclose()
            return elapsed

        # burst of 1 at 50 rps: the 2nd and 3rd calls wait ~20ms each
        assert asyncio.run(go()) >= 0.03
