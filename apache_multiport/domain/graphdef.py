# /apache_multiport/domain/graphdef.py
"""Graph definitions published to the monitoring agent.

Built once at import and never mutated; the plugin output adapter is the only
reader. Keys are `<Category>` and are rendered as `<namespace>.*.<Category>`.
"""
from __future__ import annotations

from types import MappingProxyType

from pydantic import BaseModel, ConfigDict

from apache_multiport.domain.parsers import SCOREBOARD_PREFIX


class MetricDef(BaseModel):
    model_config = ConfigDict(frozen=True)

    name: str
    label: str
    diff: bool = False
    stacked: bool = False
    type: str | None = None


class GraphDef(BaseModel):
    model_config = ConfigDict(frozen=True)

    label: str
    unit: str
    metrics: tuple[MetricDef, ...]


def _score(symbol: str, label: str, *, name: str | None = None) -> MetricDef:
    return MetricDef(name=name or f"score-{symbol}", label=label, stacked=True)


GRAPHS: MappingProxyType[str, GraphDef] = MappingProxyType(
    {
        "Workers": GraphDef(
            label="Apache Workers",
            unit="integer",
            metrics=(
                MetricDef(name="busy_workers", label="Busy Workers", stacked=True),
                MetricDef(name="idle_workers", label="Idle Workers", stacked=True),
            ),
        ),
        "Bytes": GraphDef(
            label="Apache Bytes",
            unit="bytes",
            metrics=(MetricDef(name="bytes_sent", label="Bytes Sent", diff=True, type="uint64"),),
        ),
        "Cpu": GraphDef(
            label="Apache CPU Load",
            unit="float",
            metrics=(MetricDef(name="cpu_load", label="CPU Load"),),
        ),
        "Req": GraphDef(
            label="Apache Requests",
            unit="integer",
            metrics=(MetricDef(name="requests", label="Requests", diff=True, type="uint64"),),
        ),
        "Scoreboard": GraphDef(
            label="Apache Scoreboard",
            unit="integer",
            metrics=(
                _score("_", "Waiting for connection"),
                _score("S", "Starting up"),
                _score("R", "Reading request"),
                # published name; the parser emits score-W
                _score("W", "Sending reply", name="scpre-W"),
                _score("K", "Keepalive"),
                _score("D", "DNS lookup"),
                _score("C", "Closing connection"),
                _score("L", "Logging"),
                _score("G", "Gracefully finishing"),
                _score("I", "Idle cleanup"),
                _score(".", "Open slot"),
            ),
        ),
    }
)


def graph_definitions(namespace: str) -> dict[str, GraphDef]:
    return {f"{namespace}.*.{category}": graph for category, graph in GRAPHS.items()}


def orphaned_scoreboard_metrics() -> list[str]:
    """Scoreboard metric names the parser can never emit."""
    prefix = SCOREBOARD_PREFIX.split(".", 1)[1]
    return [m.name for m in GRAPHS["Scoreboard"].metrics if not m.name.startswith(prefix)]
