"""Shared pytest configuration and fixtures for altaxis."""

from __future__ import annotations

import logging
import textwrap
from pathlib import Path
from typing import Any, Dict, Iterable, List

import pytest

from core.facets.config import WidgetConfig, WidgetSettings, load_settings
from tests.helpers import X_FIELD, Y_FIELD, build_session_rows, ensure_directory, write_results

LOGS_ROOT = Path(__file__).resolve().parents[1] / "logs" / "tests"
SESSION_LOG = LOGS_ROOT / "pytest.session.log"
_MODULE_HANDLERS: Dict[str, logging.Handler] = {}

FACET_QUERY = "FROM MobileRequest SELECT latest(memUsageMb), latest(timeSinceLoad) FACET sessionId TIMESERIES"


def _initialise_logging() -> None:
    LOGS_ROOT.mkdir(parents=True, exist_ok=True)
    (LOGS_ROOT / ".gitkeep").touch(exist_ok=True)

    handler = logging.FileHandler(SESSION_LOG, mode="w", encoding="utf-8")
    formatter = logging.Formatter("%(asctime)s %(levelname)s %(name)s %(message)s")
    handler.setFormatter(formatter)

    root = logging.getLogger()
    root.setLevel(logging.INFO)
    for existing in list(root.handlers):
        root.removeHandler(existing)
    root.addHandler(handler)


def get_test_logger(module_name: str) -> logging.Logger:
    """Return a logger writing into ``logs/tests/<module>.log``."""
    normalised = module_name.replace("tests.", "")
    logger = logging.getLogger(f"tests.{normalised}")
    logger.setLevel(logging.INFO)
    if normalised not in _MODULE_HANDLERS:
        log_path = LOGS_ROOT / f"{normalised}.log"
        log_path.parent.mkdir(parents=True, exist_ok=True)
        handler = logging.FileHandler(log_path, mode="a", encoding="utf-8")
        handler.setFormatter(logging.Formatter("%(asctime)s %(levelname)s %(message)s"))
        logger.addHandler(handler)
        _MODULE_HANDLERS[normalised] = handler
    return logger


@pytest.hookimpl(tryfirst=True)
def pytest_configure(config: pytest.Config) -> None:  # noqa: D401 - pytest hook
    _initialise_logging()


@pytest.hookimpl(hookwrapper=True)
def pytest_runtest_makereport(item: pytest.Item, call: pytest.CallInfo[None]) -> Iterable[pytest.TestReport]:
    outcome = yield
    report = outcome.get_result()
    if report.outcome != "failed":
        return
    module = getattr(item, "module", None)
    module_name = getattr(module, "__name__", "tests")
    target = LOGS_ROOT / f"{module_name.split('.')[-1]}.log"
    target.parent.mkdir(parents=True, exist_ok=True)
    with target.open("a", encoding="utf-8") as handle:
        handle.write("\n=== TEST FAILURE ===\n")
        handle.write(f"nodeid: {item.nodeid}\n")
        handle.write(f"phase: {report.when}\n")
        handle.write(str(report.longrepr))
        handle.write("\n")


@pytest.fixture(scope="session")
def project_root() -> Path:
    return Path(__file__).resolve().parents[1]


@pytest.fixture(scope="session")
def logs_dir() -> Path:
    _initialise_logging()
    return LOGS_ROOT


@pytest.fixture
def widget_config() -> WidgetConfig:
    return WidgetConfig(data_source_id=1234567, query=FACET_QUERY, x_field=X_FIELD, y_field=Y_FIELD)


@pytest.fixture
def session_rows() -> List[Dict[str, Any]]:
    return build_session_rows()


@pytest.fixture
def results_file(tmp_path: Path, session_rows: List[Dict[str, Any]]) -> Path:
    return write_results({"data": session_rows}, tmp_path / "results" / "latest.json")


@pytest.fixture
def config_file(tmp_path: Path, results_file: Path) -> Path:
    """Write a complete widget configuration pointing at ``results_file``."""
    path = ensure_directory(tmp_path / "config" / "widget.yaml")
    path.write_text(
        textwrap.dedent(
            f"""
            widget:
              data_source_id: 1234567
              query: "{FACET_QUERY}"
              x_field: {X_FIELD}
              y_field: {Y_FIELD}
            polling:
              interval_s: 30
              sync_to_wall_clock: false
            executor:
              results_path: ../results/latest.json
            display:
              locale: de
            transform:
              conflict_policy: error
            """
        ).lstrip(),
        encoding="utf-8",
    )
    return path


@pytest.fixture
def widget_settings(config_file: Path) -> WidgetSettings:
    return load_settings(config_file)


@pytest.fixture(autouse=True)
def clear_widget_env(monkeypatch: pytest.MonkeyPatch) -> None:
    for key in ("ALTAXIS_CONFIG", "ALTAXIS_ACCOUNT_ID"):
        monkeypatch.delenv(key, raising=False)


__all__ = [
    "FACET_QUERY",
    "get_test_logger",
]
