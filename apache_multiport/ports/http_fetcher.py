# /apache_multiport/ports/http_fetcher.py
from __future__ import annotations

from typing import Protocol

from apache_multiport.domain.models import Endpoint


class HTTPFetcherPort(Protocol):
    async def fetch(self, endpoint: Endpoint) -> str:
        """GET the endpoint's status page; return the body text or raise FetchError."""
