# /apache_multiport/adapters/cli/main.py
"""
Command-line entry: print graph definitions or one poll cycle's metric values.
"""
from __future__ import annotations

import argparse
import asyncio
import logging
import sys
from collections.abc import Sequence
from typing import TextIO

from apache_multiport.adapters.http.aiohttp_fetcher import AiohttpFetcher
from apache_multiport.adapters.plugin.mackerel_output import write_definitions, write_values
from apache_multiport.adapters.system.logging_cfg import configure_logger
from apache_multiport.config import Settings, settings
from apache_multiport.domain.errors import PollError
from apache_multiport.domain.models import Endpoint, MetricSet
from apache_multiport.domain.poll_service import PollService
from apache_multiport.ports.http_fetcher import HTTPFetcherPort

LOG = logging.getLogger("adapter.cli")


def build_parser(cfg: Settings) -> argparse.ArgumentParser:
    p = argparse.ArgumentParser(
        prog="apache2-multiport-metrics",
        description="Get metrics from apache2 running at multi ports.",
    )
    p.add_argument("--http_host", default=cfg.HOST, help="host the instances listen on")
    p.add_argument(
        "--http_port", type=int, action="append", default=None,
        help="port of one instance (repeatable)",
    )
    p.add_argument("--status_page", default=cfg.STATUS_PAGE, help="status page path")
    p.add_argument(
        "--header", action="append", default=None,
        help='extra request header "Key: Value" (repeatable)',
    )
    p.add_argument("--namespace", default=cfg.NAMESPACE, help="metric key prefix")
    p.add_argument(
        "--meta", action="store_true", default=cfg.PLUGIN_META,
        help="print graph definitions instead of values",
    )
    return p


def endpoints_from_args(args: argparse.Namespace, cfg: Settings) -> list[Endpoint]:
    ports = args.http_port or cfg.PORTS
    headers = tuple(args.header if args.header is not None else cfg.HEADERS)
    return [Endpoint(host=args.http_host, port=p, path=args.status_page, headers=headers) for p in ports]


async def poll_once(
    endpoints: Sequence[Endpoint], namespace: str, fetcher: HTTPFetcherPort | None = None
) -> MetricSet:
    if fetcher is not None:
        return await PollService(fetcher, namespace=namespace).poll(endpoints)

    own = AiohttpFetcher()
    try:
        return await PollService(own, namespace=namespace).poll(endpoints)
    finally:
        await own.close()


def main(
    argv: Sequence[str] | None = None,
    *,
    fetcher: HTTPFetcherPort | None = None,
    out: TextIO | None = None,
) -> int:
    cfg = settings
    configure_logger(cfg.LOG_LEVEL)
    args = build_parser(cfg).parse_args(argv)
    out = out or sys.stdout

    if args.meta:
        write_definitions(out, args.namespace)
        return 0

    endpoints = endpoints_from_args(args, cfg)
    try:
        stats = asyncio.run(poll_once(endpoints, args.namespace, fetcher))
    except PollError as e:
        LOG.error("poll.failed", extra={"extra": {"stage": e.stage, "detail": str(e)}})
        return 1

    write_values(out, stats)
    return 0


def run() -> None:
    sys.exit(main())


if __name__ == "__main__":
    run()
