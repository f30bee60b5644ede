"""Host runtime: executors, chart refresh, polling and the ``python -m app`` entry point."""

from __future__ import annotations

import json
import logging
import time as real_time
from pathlib import Path
from types import SimpleNamespace

import pytest

from app import host, poll
from app.executor import FileQueryExecutor
from core.facets.config import WidgetConfig, WidgetSettings
from core.facets.errors import QueryExecutionError
from tests.conftest import get_test_logger
from tests.helpers import FailingQueryExecutor, FakeQueryExecutor, write_results

logger = get_test_logger(__name__)
logger.info("Starting tests for app module")


class FakeClock:
    """Wall and monotonic clock advanced only by ``sleep``."""

    def __init__(self, start: float) -> None:
        self.now = start
        self.slept = 0.0

    def time(self) -> float:
        return self.now

    def monotonic(self) -> float:
        return self.now

    def sleep(self, seconds: float) -> None:
        self.slept += seconds
        self.now += seconds


def _patch_clock(monkeypatch: pytest.MonkeyPatch, start: float) -> FakeClock:
    clock = FakeClock(start)
    fake_time = SimpleNamespace(
        time=clock.time,
        monotonic=clock.monotonic,
        sleep=clock.sleep,
        strftime=real_time.strftime,
        localtime=real_time.localtime,
    )
    monkeypatch.setattr(poll, "time", fake_time)
    return clock


def test_file_executor_accepts_both_shapes(tmp_path: Path, session_rows) -> None:
    wrapped = write_results({"data": session_rows}, tmp_path / "wrapped.json")
    bare = write_results(session_rows, tmp_path / "bare.json")
    assert FileQueryExecutor(wrapped).execute("q", 1) == session_rows
    assert FileQueryExecutor(bare).execute("q", 1) == session_rows


@pytest.mark.parametrize(
    "content, match",
    [
        ({"error": "NRQL Syntax Error"}, "NRQL Syntax Error"),
        ({"data": {"not": "a list"}}, "row list"),
        ("not json", "Unable to read"),
    ],
)
def test_file_executor_errors(tmp_path: Path, content, match) -> None:
    path = tmp_path / "result.json"
    if isinstance(content, str):
        path.write_text(content, encoding="utf-8")
    else:
        write_results(content, path)
    with pytest.raises(QueryExecutionError, match=match):
        FileQueryExecutor(path).execute("q", 1)


def test_file_executor_missing_file(tmp_path: Path) -> None:
    with pytest.raises(QueryExecutionError, match="does not exist"):
        FileQueryExecutor(tmp_path / "absent.json").execute("q", 1)


def test_refresh_chart_runs_query_for_valid_config(widget_config, session_rows) -> None:
    executor = FakeQueryExecutor(session_rows)
    state = host.refresh_chart(widget_config, executor)
    assert state.ok
    assert [record.metadata.name for record in state.series] == ["s1", "s2"]
    assert executor.calls == [(widget_config.query, 1234567)]


def test_invalid_config_never_reaches_executor(widget_config) -> None:
    executor = FakeQueryExecutor([])
    config = WidgetConfig(widget_config.data_source_id, widget_config.query, "duration", widget_config.y_field)
    state = host.refresh_chart(config, executor)
    assert state.kind == "error"
    assert state.message == "xAxis does not match query attribute"
    assert executor.calls == []


def test_missing_config_gives_empty_state() -> None:
    executor = FakeQueryExecutor([])
    state = host.refresh_chart(WidgetConfig(), executor)
    payload = state.to_dict()
    assert payload["state"] == "empty"
    assert payload["error"] == "MissingConfig"
    assert "FACET sessionId" in payload["example_query"]
    assert executor.calls == []


def test_query_failure_becomes_error_state(widget_config, caplog: pytest.LogCaptureFixture) -> None:
    executor = FailingQueryExecutor("NRQL Syntax Error: Error at line 1")
    with caplog.at_level(logging.WARNING, logger="app.host"):
        state = host.refresh_chart(widget_config, executor)
    assert executor.calls == 1
    assert state.kind == "error"
    assert state.error == "QueryExecutionError"
    assert state.message == "NRQL Syntax Error: Error at line 1"
    assert "NRQL Syntax Error" in caplog.text


def test_conflicting_batches_surface_as_error_state(widget_config, session_rows) -> None:
    duplicated = session_rows + [session_rows[1]]
    assert host.refresh_chart(widget_config, FakeQueryExecutor(duplicated)).error == "FieldConflict"
    state = host.refresh_chart(widget_config, FakeQueryExecutor(duplicated), conflict_policy="overwrite")
    assert state.ok


def test_poll_loop_aligns_to_wall_clock(monkeypatch: pytest.MonkeyPatch, widget_config, session_rows) -> None:
    clock = _patch_clock(monkeypatch, start=100.0)
    settings = WidgetSettings(widget=widget_config)
    executor = FakeQueryExecutor(session_rows)

    payloads = list(poll.iter_polls(settings, executor, interval_s=60, cycles=3, sync=True))

    assert [payload["scheduled_start"] for payload in payloads] == [120.0, 180.0, 240.0]
    assert [payload["start_delay_s"] for payload in payloads] == [0.0, 0.0, 0.0]
    assert all(payload["chart"]["state"] == "chart" for payload in payloads)
    assert len(executor.calls) == 3
    assert clock.now == 240.0


def test_poll_loop_without_sync_sleeps_between_ticks(
    monkeypatch: pytest.MonkeyPatch, widget_config, session_rows
) -> None:
    _patch_clock(monkeypatch, start=100.0)
    settings = WidgetSettings(widget=widget_config)

    payloads = list(
        poll.iter_polls(settings, FakeQueryExecutor(session_rows), interval_s=30, cycles=2, sync=False)
    )

    assert [payload["started_at"] for payload in payloads] == [100.0, 130.0]
    assert all(payload["scheduled_start"] is None for payload in payloads)


def test_each_tick_reflects_latest_result(monkeypatch: pytest.MonkeyPatch, widget_config, session_rows) -> None:
    _patch_clock(monkeypatch, start=0.0)
    settings = WidgetSettings(widget=widget_config)
    executor = FakeQueryExecutor(session_rows, session_rows[:2])

    payloads = list(poll.iter_polls(settings, executor, interval_s=10, cycles=2, sync=False))

    assert len(payloads[0]["chart"]["series"]) == 2
    assert len(payloads[1]["chart"]["series"]) == 1


def test_poll_loop_prints_json(monkeypatch: pytest.MonkeyPatch, capsys, widget_config, session_rows) -> None:
    _patch_clock(monkeypatch, start=0.0)
    poll.poll_loop(WidgetSettings(widget=widget_config), FakeQueryExecutor(session_rows), cycles=1, sync=False)
    printed = json.loads(capsys.readouterr().out)
    assert printed["chart"]["state"] == "chart"


def test_main_validate(monkeypatch: pytest.MonkeyPatch, capsys, config_file: Path) -> None:
    from app import __main__ as app_main

    monkeypatch.setattr(app_main, "_configure_logging", lambda: None)
    assert app_main.main(["--config", str(config_file), "validate"]) == 0
    payload = json.loads(capsys.readouterr().out)
    assert payload["ok"] is True
    assert payload["config"]["xField"] == "timeSinceLoad"


def test_main_validate_reports_invalid_config(monkeypatch: pytest.MonkeyPatch, capsys, config_file: Path) -> None:
    from app import __main__ as app_main

    config_file.write_text(
        config_file.read_text(encoding="utf-8").replace("x_field: timeSinceLoad", "x_field: duration"),
        encoding="utf-8",
    )
    monkeypatch.setattr(app_main, "_configure_logging", lambda: None)
    assert app_main.main(["--config", str(config_file), "validate"]) == 2
    assert json.loads(capsys.readouterr().out)["error"] == "AxisMismatch"


def test_main_poll_once_reads_results_file(monkeypatch: pytest.MonkeyPatch, capsys, config_file: Path) -> None:
    from app import __main__ as app_main

    monkeypatch.setattr(app_main, "_configure_logging", lambda: None)
    assert app_main.main(["--config", str(config_file), "poll-once"]) == 0
    payload = json.loads(capsys.readouterr().out)
    assert payload["chart"]["state"] == "chart"
    assert [series["metadata"]["name"] for series in payload["chart"]["series"]] == ["s1", "s2"]


def test_load_widget_settings_uses_default_config(project_root: Path) -> None:
    from app import settings as app_settings
    from core.facets.config import DEFAULT_CONFIG_PATH

    loaded = app_settings.load_widget_settings()
    assert loaded.source == DEFAULT_CONFIG_PATH
    assert DEFAULT_CONFIG_PATH == project_root / "config" / "widget.yaml"
    assert app_settings.build_executor(loaded).path == project_root / "data" / "results" / "latest.json"
