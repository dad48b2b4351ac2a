# /apache_multiport/adapters/http/aiohttp_fetcher.py
from __future__ import annotations

import asyncio
import logging
from collections.abc import Iterable

import aiohttp
from multidict import CIMultiDict

from apache_multiport.domain.errors import FetchError
from apache_multiport.domain.models import Endpoint

LOG = logging.getLogger("adapter.http_fetcher")


def build_headers(raw_headers: Iterable[str]) -> CIMultiDict[str]:
    """Turn "Key: Value" strings into request headers.

    Keys and values are stripped; a later header replaces an earlier one with
    the same key. "Host" lands in the mapping too, where aiohttp uses it as
    the request's virtual host instead of the URL's netloc.
    """
    headers: CIMultiDict[str] = CIMultiDict()
    for raw in raw_headers:
        key, _, value = raw.partition(":")
        key, value = key.strip(), value.strip()
        if not key:
            continue
        if key.lower() == "host":
            if value:
                headers["Host"] = value
            else:
                headers.popall("Host", None)  # fall back to the URL host
        else:
            headers[key] = value
    return headers


class AiohttpFetcher:
    """
    Shared-session aiohttp fetcher.
    The CLI runs each poll cycle under asyncio.run (new loop per call). The
    connector never pools connections, so a session left behind by a previous
    loop holds no sockets and can be detached instead of awaited closed.
    """

    def __init__(self) -> None:
        self._session: aiohttp.ClientSession | None = None
        self._loop: asyncio.AbstractEventLoop | None = None  # track owning loop

    async def _ensure_session(self) -> aiohttp.ClientSession:
        loop = asyncio.get_running_loop()
        if self._loop is not None and self._loop is not loop:
            if self._session is not None:
                self._session.detach()
            self._session = None
            self._loop = None

        if self._session is None or self._session.closed:
            # one request per port per cycle: no keep-alive, no custom timeout
            self._session = aiohttp.ClientSession(
                connector=aiohttp.TCPConnector(force_close=True),
                raise_for_status=False,
            )
            self._loop = loop

        return self._session

    async def fetch(self, endpoint: Endpoint) -> str:
        url = endpoint.url
        headers = build_headers(endpoint.headers)
        sess = await self._ensure_session()

        LOG.info("fetching", extra={"extra": {"url": url, "port": endpoint.port}})
        try:
            async with sess.get(url, headers=headers) as resp:
                if resp.status != 200:
                    raise FetchError(
                        f"HTTP status error: {resp.status}", url=url, status=resp.status
                    )
                body = await resp.read()
        except (TimeoutError, aiohttp.ClientError) as e:
            raise FetchError(f"{type(e).__name__}: {e}", url=url) from e

        LOG.debug("fetched", extra={"extra": {"url": url, "bytes": len(body)}})
        return body.decode("utf-8", errors="replace")

    async def close(self) -> None:
        if self._session and not self._session.closed:
            await self._session.close()
        self._session = None
        self._loop = None
