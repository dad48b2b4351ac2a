# tests/test_aiohttp_fetcher.py
from __future__ import annotations

import asyncio
import gc
import socket
import warnings

import pytest
from aiohttp import web
from aiohttp import test_utils

from apache_multiport.adapters.http.aiohttp_fetcher import AiohttpFetcher, build_headers
from apache_multiport.domain.errors import FetchError
from apache_multiport.domain.models import Endpoint
from tests.fakes import STATUS_DOC


def _app() -> web.Application:
    async def status(request: web.Request) -> web.Response:
        return web.Response(text=STATUS_DOC)

    async def echo(request: web.Request) -> web.Response:
        lines = [f"Host: {request.host}", f"X-Probe: {request.headers.get('X-Probe', '')}"]
        return web.Response(text="\n".join(lines))

    async def broken(request: web.Request) -> web.Response:
        return web.Response(status=500, text="boom")

    app = web.Application()
    app.router.add_get("/server-status", status)
    app.router.add_get("/echo", echo)
    app.router.add_get("/broken", broken)
    return app


def _free_port() -> int:
    with socket.socket() as s:
        s.bind(("127.0.0.1", 0))
        return s.getsockname()[1]


def test_build_headers_splits_on_first_colon() -> None:
    h = build_headers(["X-Forwarded-For:  10.0.0.1 ", "X-Time: 12:30", "X-Empty"])
    assert h["X-Forwarded-For"] == "10.0.0.1"
    assert h["X-Time"] == "12:30"
    assert h["X-Empty"] == ""


def test_build_headers_later_key_wins() -> None:
    h = build_headers(["Accept: text/plain", "accept: */*"])
    assert h.getall("Accept") == ["*/*"]


def test_build_headers_blank_host_is_dropped() -> None:
    h = build_headers(["host: vhost.example", "HOST:"])
    assert "Host" not in h


@pytest.mark.asyncio
async def test_fetch_returns_body() -> None:
    fetcher = AiohttpFetcher()
    async with test_utils.TestServer(_app()) as server:
        try:
            body = await fetcher.fetch(Endpoint(server.host, server.port, "/server-status"))
        finally:
            await fetcher.close()
    assert "Scoreboard: _S_R__W_K_." in body


@pytest.mark.asyncio
async def test_fetch_host_header_overrides_virtual_host() -> None:
    fetcher = AiohttpFetcher()
    ep_headers = ("host: status.example", "X-Probe: yes")
    async with test_utils.TestServer(_app()) as server:
        try:
            body = await fetcher.fetch(Endpoint(server.host, server.port, "/echo", ep_headers))
        finally:
            await fetcher.close()
    assert "Host: status.example" in body
    assert "X-Probe: yes" in body


@pytest.mark.asyncio
async def test_fetch_non_200_is_error() -> None:
    fetcher = AiohttpFetcher()
    async with test_utils.TestServer(_app()) as server:
        try:
            with pytest.raises(FetchError) as ei:
                await fetcher.fetch(Endpoint(server.host, server.port, "/broken"))
        finally:
            await fetcher.close()
    assert ei.value.status == 500
    assert ei.value.stage == "fetch"


@pytest.mark.asyncio
async def test_fetch_connection_refused_is_error() -> None:
    fetcher = AiohttpFetcher()
    try:
        with pytest.raises(FetchError) as ei:
            await fetcher.fetch(Endpoint("127.0.0.1", _free_port(), "/server-status"))
    finally:
        await fetcher.close()
    assert ei.value.status is None


async def _short_body(reader: asyncio.StreamReader, writer: asyncio.StreamWriter) -> None:
    await reader.readuntil(b"\r\n\r\n")
    writer.write(b"HTTP/1.1 200 OK\r\nContent-Length: 100\r\nContent-Type: text/plain\r\n\r\nBusy")
    await writer.drain()
    writer.close()


@pytest.mark.asyncio
async def test_fetch_truncated_body_is_error() -> None:
    server = await asyncio.start_server(_short_body, "127.0.0.1", 0)
    port = server.sockets[0].getsockname()[1]
    fetcher = AiohttpFetcher()
    try:
        with pytest.raises(FetchError) as ei:
            await fetcher.fetch(Endpoint("127.0.0.1", port, "/server-status"))
    finally:
        await fetcher.close()
        server.close()
        await server.wait_closed()
    assert ei.value.status is None
    assert ei.value.__cause__ is not None


def test_fetcher_reused_across_event_loops() -> None:
    fetcher = AiohttpFetcher()

    async def once(close: bool) -> str:
        async with test_utils.TestServer(_app()) as server:
            try:
                return await fetcher.fetch(Endpoint(server.host, server.port, "/server-status"))
            finally:
                if close:
                    await fetcher.close()

    with warnings.catch_warnings(record=True) as caught:
        warnings.simplefilter("always")
        first = asyncio.run(once(close=False))
        second = asyncio.run(once(close=True))
        gc.collect()

    assert first == second
    assert not [w for w in caught if "Unclosed" in str(w.message)]
