"""Centralised paths and logging for the altaxis host runtime."""
from __future__ import annotations

import logging
from logging.handlers import RotatingFileHandler
from pathlib import Path
from typing import Iterable, Optional

from core.facets.config import WidgetSettings, load_settings
from .executor import FileQueryExecutor, QueryExecutor

BASE_DIR = Path(__file__).resolve().parents[1]
LOG_DIR = BASE_DIR / "logs"
LOG_FILE = LOG_DIR / "altaxis.log"
DEFAULT_RESULTS_FILE = BASE_DIR / "data" / "results" / "latest.json"


def _ensure_directories(paths: Iterable[Path]) -> None:
    for path in paths:
        path.mkdir(parents=True, exist_ok=True)


def setup_logging(level: int = logging.INFO) -> None:
    """Configure a rotating file logger plus console echo."""
    _ensure_directories((LOG_DIR,))

    handler = RotatingFileHandler(
        LOG_FILE,
        maxBytes=1_000_000,
        backupCount=3,
        encoding="utf-8",
    )
    console_handler = logging.StreamHandler()
    logging.basicConfig(
        level=level,
        format="%(asctime)s %(levelname)s %(name)s %(message)s",
        handlers=[handler, console_handler],
        force=True,
    )


def load_widget_settings(path: Optional[Path | str] = None) -> WidgetSettings:
    return load_settings(path)


def build_executor(settings: WidgetSettings) -> QueryExecutor:
    return FileQueryExecutor(settings.results_path or DEFAULT_RESULTS_FILE)
