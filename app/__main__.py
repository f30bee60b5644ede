"""Command line entry point for validating the widget and polling its chart payload."""
from __future__ import annotations

import argparse
import json
import logging
import sys
from typing import Dict, Optional

from dotenv import load_dotenv

from core.facets.validation import validate_config

from . import settings
from .poll import poll_loop, poll_once

load_dotenv()

LOGGER = logging.getLogger(__name__)


def _configure_logging() -> None:
    settings.setup_logging()


def _print_json(payload: Dict[str, object]) -> None:
    json.dump(payload, sys.stdout, indent=2, sort_keys=True, default=str)
    sys.stdout.write("\n")


def _run_validate(config_path: Optional[str]) -> Dict[str, object]:
    _configure_logging()
    widget_settings = settings.load_widget_settings(config_path)
    result = validate_config(widget_settings.widget)
    return {"config": widget_settings.widget.to_dict(), **result.to_dict()}


def _run_poll_once(config_path: Optional[str]) -> Dict[str, object]:
    _configure_logging()
    widget_settings = settings.load_widget_settings(config_path)
    return poll_once(widget_settings, settings.build_executor(widget_settings))


def _run_poll_loop(config_path: Optional[str], minutes: Optional[float], cycles: Optional[int]) -> None:
    _configure_logging()
    widget_settings = settings.load_widget_settings(config_path)
    interval_s = max(1, int(minutes * 60)) if minutes else None
    poll_loop(
        widget_settings,
        settings.build_executor(widget_settings),
        interval_s=interval_s,
        cycles=cycles,
    )


def main(argv: list[str] | None = None) -> int:
    parser = argparse.ArgumentParser(prog="python -m app")
    parser.add_argument("--config", default=None, help="Widget configuration (YAML or JSON)")
    subparsers = parser.add_subparsers(dest="command", required=True)

    subparsers.add_parser("validate")
    subparsers.add_parser("poll-once")

    poll_loop_parser = subparsers.add_parser("poll-loop")
    poll_loop_parser.add_argument("--minutes", type=float, default=None)
    poll_loop_parser.add_argument("--cycles", type=int, default=1)

    args = parser.parse_args(argv)

    try:
        if args.command == "validate":
            result = _run_validate(args.config)
            _print_json(result)
            return 0 if result["ok"] else 2
        if args.command == "poll-once":
            _print_json(_run_poll_once(args.config))
        elif args.command == "poll-loop":
            cycles = args.cycles if args.cycles and args.cycles > 0 else None
            _run_poll_loop(args.config, minutes=args.minutes, cycles=cycles)
        else:  # pragma: no cover
            parser.error(f"Unknown command {args.command}")
    except Exception as exc:  # pragma: no cover - runtime failures
        logging.getLogger(__name__).exception("Command failed: %s", exc)
        sys.stderr.write(f"Error: {exc}\n")
        return 1
    return 0


if __name__ == "__main__":  # pragma: no cover
    raise SystemExit(main())
