# /apache_multiport/domain/models.py
from __future__ import annotations

from dataclasses import dataclass, field

from apache_multiport.domain.errors import PortError

# "Category.Name" -> value, e.g. "Workers.busy_workers" or "Scoreboard.score-_"
MetricSet = dict[str, float]


@dataclass(frozen=True, slots=True)
class Endpoint:
    host: str
    port: int
    path: str
    headers: tuple[str, ...] = ()  # raw "Key: Value" strings, caller order

    @property
    def url(self) -> str:
        return f"http://{self.host}:{self.port}{self.path}"


@dataclass(slots=True)
class PortResult:
    port: int
    metrics: MetricSet = field(default_factory=dict)
    error: PortError | None = None

    @property
    def ok(self) -> bool:
        return self.error is None
