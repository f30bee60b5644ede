"""Polling loop that refreshes the chart payload on a wall-clock aligned interval."""
from __future__ import annotations

import json
import logging
import math
import time
from datetime import datetime, timezone
from typing import Dict, Iterator, Optional

from core.facets.config import WidgetSettings

from .executor import QueryExecutor
from .host import refresh_chart

LOGGER = logging.getLogger(__name__)


def _ceil_to_interval(timestamp: float, interval_seconds: int) -> float:
    if interval_seconds <= 0:
        raise ValueError("interval_seconds must be greater than zero")
    return math.ceil(timestamp / interval_seconds) * interval_seconds


def _sleep_until(target_wall_time: float) -> None:
    remaining = target_wall_time - time.time()
    if remaining <= 0:
        return

    target_monotonic = time.monotonic() + remaining
    while True:
        remaining = target_monotonic - time.monotonic()
        if remaining <= 0:
            break
        time.sleep(min(remaining, 0.5))


def _format_wall_time(timestamp: Optional[float]) -> str:
    if timestamp is None:
        return "-"
    return time.strftime("%H:%M:%S", time.localtime(timestamp))


def _to_iso(timestamp: Optional[float]) -> Optional[str]:
    if timestamp is None:
        return None
    return datetime.fromtimestamp(timestamp, tz=timezone.utc).astimezone().isoformat()


def poll_once(
    settings: WidgetSettings,
    executor: QueryExecutor,
    scheduled_wall_time: Optional[float] = None,
) -> Dict[str, object]:
    """Run the query once and return the chart state with tick timing."""
    actual_start = time.time()
    start_delay = None
    if scheduled_wall_time is not None:
        start_delay = actual_start - scheduled_wall_time

    state = refresh_chart(settings.widget, executor, conflict_policy=settings.conflict_policy)

    payload: Dict[str, object] = {
        "chart": state.to_dict(),
        "started_at": actual_start,
        "started_at_iso": _to_iso(actual_start),
        "scheduled_start": scheduled_wall_time,
        "scheduled_start_iso": _to_iso(scheduled_wall_time),
        "start_delay_s": start_delay,
    }
    return payload


def iter_polls(
    settings: WidgetSettings,
    executor: QueryExecutor,
    *,
    interval_s: Optional[int] = None,
    cycles: Optional[int] = 1,
    sync: Optional[bool] = None,
    sync_tolerance_s: Optional[float] = None,
    max_drift_s: Optional[float] = None,
) -> Iterator[Dict[str, object]]:
    """Yield one ``poll_once`` payload per tick, aligned to the wall clock if requested.

    Each payload supersedes the previous one; nothing is carried across ticks.
    Unset keyword arguments fall back to ``settings.polling``.
    """
    polling = settings.polling
    interval_s = max(1, int(interval_s if interval_s is not None else polling.interval_s))
    sync = polling.sync_to_wall_clock if sync is None else sync
    sync_tolerance_s = polling.sync_tolerance_s if sync_tolerance_s is None else sync_tolerance_s
    max_drift_s = polling.sync_max_drift_s if max_drift_s is None else max_drift_s
    executed = 0

    next_run = time.time()
    if sync:
        next_run = _ceil_to_interval(next_run, interval_s)
        LOGGER.info("First poll scheduled for %s (interval %ds)", _format_wall_time(next_run), interval_s)

    while cycles is None or executed < cycles:
        scheduled = next_run if sync else None

        if scheduled is not None:
            wait_time = scheduled - time.time()
            if wait_time > sync_tolerance_s:
                LOGGER.info(
                    "Sleeping %.2fs to align with %s", wait_time, _format_wall_time(scheduled)
                )
                _sleep_until(scheduled)

        payload = poll_once(settings, executor, scheduled_wall_time=scheduled)

        start_delay = payload.get("start_delay_s")
        if scheduled is not None and start_delay is not None:
            LOGGER.debug(
                "Poll started at %s (scheduled %s, drift %+0.3fs)",
                _format_wall_time(payload.get("started_at")),
                _format_wall_time(scheduled),
                start_delay,
            )
            if abs(start_delay) > max_drift_s:
                LOGGER.warning(
                    "Start drift %.3fs exceeds configured max %.3fs (scheduled %s)",
                    start_delay,
                    max_drift_s,
                    _format_wall_time(scheduled),
                )

        yield payload
        executed += 1
        if cycles is not None and executed >= cycles:
            break

        if sync and scheduled is not None:
            next_run += interval_s
            while next_run <= time.time():
                next_run += interval_s
        else:
            next_run = time.time() + interval_s
            _sleep_until(next_run)


def poll_loop(
    settings: WidgetSettings,
    executor: QueryExecutor,
    *,
    interval_s: Optional[int] = None,
    cycles: Optional[int] = 1,
    sync: Optional[bool] = None,
) -> None:
    """Print every tick payload as JSON until ``cycles`` ticks have run."""
    for payload in iter_polls(settings, executor, interval_s=interval_s, cycles=cycles, sync=sync):
        print(json.dumps(payload, indent=2, sort_keys=True, default=str))
