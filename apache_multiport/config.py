# /apache_multiport/config.py
from __future__ import annotations

import os

from pydantic import BaseModel, Field, field_validator


def _env_list(name: str, default: str, sep: str) -> list[str]:
    return [p.strip() for p in os.getenv(name, default).split(sep) if p.strip()]


class Settings(BaseModel):
    # Target instances
    HOST: str = Field(default_factory=lambda: os.getenv("APACHE_HOST", "127.0.0.1"))
    PORTS: list[int] = Field(default_factory=lambda: [int(p) for p in _env_list("APACHE_PORTS", "80", ",")])
    STATUS_PAGE: str = Field(
        default_factory=lambda: os.getenv("APACHE_STATUS_PAGE", "/server-status?auto")
    )
    HEADERS: list[str] = Field(default_factory=lambda: _env_list("APACHE_HEADERS", "", ";"))

    # Output
    NAMESPACE: str = Field(default_factory=lambda: os.getenv("METRIC_NAMESPACE", "apache2"))
    PLUGIN_META: bool = Field(
        default_factory=lambda: os.getenv("MACKEREL_AGENT_PLUGIN_META", "") != ""
    )
    LOG_LEVEL: str = Field(default_factory=lambda: os.getenv("LOG_LEVEL", "WARNING").upper())

    @field_validator("PORTS")
    @classmethod
    def _ports_in_range(cls, ports: list[int]) -> list[int]:
        bad = [p for p in ports if p < 1 or p > 65535]
        if bad:
            raise ValueError(f"invalid port(s): {bad}")
        return ports


settings = Settings()
