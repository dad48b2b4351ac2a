# /apache_multiport/domain/poll_service.py
from __future__ import annotations

import asyncio
import logging
from collections.abc import Sequence

from apache_multiport.domain.errors import PollError, PortError
from apache_multiport.domain.models import Endpoint, MetricSet, PortResult
from apache_multiport.domain.parsers import parse_scoreboard, parse_status
from apache_multiport.ports.http_fetcher import HTTPFetcherPort

LOG = logging.getLogger("poll_service")


class PollService:
    """Runs one poll cycle: fetch every port concurrently, parse, merge or fail."""

    def __init__(self, fetcher: HTTPFetcherPort, *, namespace: str) -> None:
        self.fetcher = fetcher
        self.namespace = namespace

    # --- per-port worker ---

    async def collect_port(self, endpoint: Endpoint) -> PortResult:
        result = PortResult(port=endpoint.port)
        stage = "fetch"
        try:
            document = await self.fetcher.fetch(endpoint)
            stage = "status"
            metrics = parse_status(document)
            stage = "scoreboard"
            result.metrics = parse_scoreboard(document, metrics)
        except Exception as e:
            result.error = PortError(endpoint.port, e, stage)
            LOG.warning(
                "port.failed",
                extra={
                    "extra": {
                        "port": endpoint.port,
                        "stage": stage,
                        "error": type(e).__name__,
                        "detail": str(e),
                    }
                },
                exc_info=not isinstance(e, PollError),
            )
        return result

    async def _post_result(self, endpoint: Endpoint, queue: asyncio.Queue[PortResult]) -> None:
        # collect_port never raises, so every worker posts exactly once
        queue.put_nowait(await self.collect_port(endpoint))

    def _key(self, port: int, name: str) -> str:
        return f"{self.namespace}.{port}.{name}"

    # --- primary entrypoint ---

    async def poll(self, endpoints: Sequence[Endpoint]) -> MetricSet:
        """Return `<namespace>.<port>.<Category>.<Name>` -> value for all ports.

        Raises the first PortError drained from the queue; metrics gathered from
        other ports are dropped. Every worker is drained before returning.
        """
        queue: asyncio.Queue[PortResult] = asyncio.Queue(maxsize=len(endpoints))
        stats: MetricSet = {}
        error: PortError | None = None

        async with asyncio.TaskGroup() as tg:
            for ep in endpoints:
                tg.create_task(self._post_result(ep, queue))

            for _ in range(len(endpoints)):
                res = await queue.get()
                if error is not None:
                    continue
                if res.error is not None:
                    error = res.error
                    stats.clear()
                    continue
                for name, value in res.metrics.items():
                    stats[self._key(res.port, name)] = value

        if error is not None:
            raise error

        LOG.info("poll.done", extra={"extra": {"ports": len(endpoints), "metrics": len(stats)}})
        return stats
