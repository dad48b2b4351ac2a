# /apache_multiport/domain/parsers.py
"""Parsers for the `server-status?auto` text export.

Both parsers write into the same per-port metric set: `parse_status` creates
it and `parse_scoreboard` extends it with one counter per scoreboard symbol.
"""
from __future__ import annotations

import logging

from apache_multiport.domain.errors import (
    ScoreboardMissingError,
    StatusMissingError,
    StatusParseError,
)
from apache_multiport.domain.models import MetricSet

LOG = logging.getLogger("domain.parsers")

STATUS_KEYS: dict[str, str] = {
    "Total Accesses": "Req.requests",
    "Total kBytes": "Bytes.bytes_sent",
    "CPULoad": "Cpu.cpu_load",
    "BusyWorkers": "Workers.busy_workers",
    "IdleWorkers": "Workers.idle_workers",
}

SCOREBOARD_MARKER = "Scoreboard"
SCOREBOARD_PREFIX = "Scoreboard.score-"


def parse_status(document: str, metrics: MetricSet | None = None) -> MetricSet:
    """Collect the recognized `Key: value` lines of *document* into *metrics*.

    Unknown keys are skipped. A recognized key with a non-numeric value fails
    the whole parse, and so does a document without any recognized key.
    """
    out: MetricSet = {} if metrics is None else metrics
    found = 0
    for line in document.split("\n"):
        key, _, raw = line.partition(":")
        name = STATUS_KEYS.get(key)
        if name is None:
            continue
        try:
            out[name] = float(raw.strip())
        except ValueError as e:
            raise StatusParseError(key, raw.strip()) from e
        found += 1

    if not found:
        raise StatusMissingError()
    return out


def parse_scoreboard(document: str, metrics: MetricSet) -> MetricSet:
    """Count each character of the first scoreboard line into *metrics*."""
    for line in document.split("\n"):
        if SCOREBOARD_MARKER not in line:
            continue
        _, _, board = line.partition(":")
        for ch in board.strip():
            name = f"{SCOREBOARD_PREFIX}{ch}"
            metrics[name] = metrics.get(name, 0.0) + 1.0
        LOG.debug("scoreboard.parsed", extra={"extra": {"slots": len(board.strip())}})
        return metrics

    raise ScoreboardMissingError()
