# tests/test_cli.py
from __future__ import annotations

import io

from apache_multiport.adapters.cli.main import build_parser, endpoints_from_args, main
from apache_multiport.config import Settings
from tests.fakes import STATUS_DOC, FakeFetcher


def test_endpoints_from_flags() -> None:
    cfg = Settings(PORTS=[80], HEADERS=["X-A: 1"])
    args = build_parser(cfg).parse_args(
        ["--http_host", "10.0.0.5", "--http_port", "8080", "--http_port", "8081", "--header", "Host: v"]
    )
    eps = endpoints_from_args(args, cfg)
    assert [e.port for e in eps] == [8080, 8081]
    assert all(e.host == "10.0.0.5" and e.headers == ("Host: v",) for e in eps)


def test_endpoints_fall_back_to_settings() -> None:
    cfg = Settings(PORTS=[80, 81], HEADERS=["X-A: 1"], STATUS_PAGE="/status")
    eps = endpoints_from_args(build_parser(cfg).parse_args([]), cfg)
    assert [(e.port, e.path, e.headers) for e in eps] == [(80, "/status", ("X-A: 1",)), (81, "/status", ("X-A: 1",))]


def test_main_prints_values() -> None:
    out = io.StringIO()
    rc = main(["--http_port", "80", "--namespace", "web"], fetcher=FakeFetcher({80: STATUS_DOC}), out=out)
    assert rc == 0
    keys = [line.split("\t")[0] for line in out.getvalue().splitlines()]
    assert "web.80.Workers.idle_workers" in keys
    assert "web.80.Scoreboard.score-_" in keys


def test_main_fails_on_port_error() -> None:
    out = io.StringIO()
    fetcher = FakeFetcher({80: STATUS_DOC, 81: 500})
    rc = main(["--http_port", "80", "--http_port", "81"], fetcher=fetcher, out=out)
    assert rc == 1
    assert out.getvalue() == ""


def test_main_meta() -> None:
    out = io.StringIO()
    assert main(["--meta"], out=out) == 0
    assert out.getvalue().startswith("# mackerel-agent-plugin\n")


def test_main_unexpected_worker_error_exits_1() -> None:
    out = io.StringIO()
    fetcher = FakeFetcher({80: RuntimeError("boom"), 81: STATUS_DOC})
    assert main(["--http_port", "80", "--http_port", "81"], fetcher=fetcher, out=out) == 1
    assert out.getvalue() == ""
