# /apache_multiport/domain/errors.py
from __future__ import annotations


class PollError(Exception):
    """Base for every failure of a poll cycle."""

    stage: str = "poll"


class FetchError(PollError):
    stage = "fetch"

    def __init__(self, message: str, *, url: str, status: int | None = None) -> None:
        super().__init__(message)
        self.url = url
        self.status = status


class StatusParseError(PollError):
    stage = "status"

    def __init__(self, key: str, raw: str) -> None:
        super().__init__(f"invalid numeric value for {key!r}: {raw!r}")
        self.key = key
        self.raw = raw


class StatusMissingError(PollError):
    stage = "status"

    def __init__(self) -> None:
        super().__init__("status data not found")


class ScoreboardMissingError(PollError):
    stage = "scoreboard"

    def __init__(self) -> None:
        super().__init__("scoreboard data not found")


class PortError(PollError):
    """A failure of one port's worker, tagged with the port it came from."""

    def __init__(self, port: int, cause: Exception, stage: str | None = None) -> None:
        super().__init__(f"failed at port={port}: {cause}")
        self.port = port
        self.cause = cause
        self._stage = stage or getattr(cause, "stage", PollError.stage)

    @property
    def stage(self) -> str:  # type: ignore[override]
        return self._stage
