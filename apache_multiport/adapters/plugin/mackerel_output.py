# /apache_multiport/adapters/plugin/mackerel_output.py
from __future__ import annotations

import json
import time
from collections.abc import Mapping
from typing import TextIO

from apache_multiport.domain.graphdef import graph_definitions

META_HEADER = "# mackerel-agent-plugin"


def format_values(stats: Mapping[str, float], now: int | None = None) -> list[str]:
    """Every metric as-is: no filtering against the graph registry, no deltas."""
    ts = int(time.time()) if now is None else now
    return [f"{key}\t{stats[key]:f}\t{ts}" for key in sorted(stats)]


def format_definitions(namespace: str) -> str:
    graphs = {
        name: graph.model_dump(exclude_none=True)
        for name, graph in graph_definitions(namespace).items()
    }
    return json.dumps({"graphs": graphs})


def write_values(out: TextIO, stats: Mapping[str, float], now: int | None = None) -> None:
    for line in format_values(stats, now):
        out.write(line + "\n")


def write_definitions(out: TextIO, namespace: str) -> None:
    out.write(META_HEADER + "\n")
    out.write(format_definitions(namespace) + "\n")
