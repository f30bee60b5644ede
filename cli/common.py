from __future__ import annotations

import json
import logging
from pathlib import Path
from typing import Any, Optional

import typer
from rich.console import Console

from core.facets.config import ConfigurationError, WidgetSettings, load_settings

from . import APP_ROOT

_CONSOLE = Console()
LOG_DIR = APP_ROOT / "logs" / "cli"


def console() -> Console:
    return _CONSOLE


def configure_logging(name: str) -> None:
    LOG_DIR.mkdir(parents=True, exist_ok=True)
    log_path = LOG_DIR / f"{name}.log"
    logging.basicConfig(
        level=logging.INFO,
        format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
        handlers=[
            logging.FileHandler(log_path, encoding="utf-8"),
            logging.StreamHandler(),
        ],
    )


def print_json(payload: Any) -> None:
    console().print_json(json.dumps(payload, default=str))


def load_or_exit(config: Optional[Path]) -> WidgetSettings:
    """Load widget settings, turning configuration errors into exit code 1."""
    try:
        return load_settings(config)
    except ConfigurationError as exc:
        console().print(f"[red]Configuration error:[/] {exc}")
        raise typer.Exit(code=1) from exc
