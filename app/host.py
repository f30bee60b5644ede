"""Run one chart refresh: validate, execute, transform, and log the outcome."""
from __future__ import annotations

import logging
from typing import Optional

from core.facets.alignment import CONFLICT_ERROR
from core.facets.config import WidgetConfig
from core.facets.errors import QueryExecutionError
from core.facets.pipeline import STATE_CHART, STATE_EMPTY, ChartState, chart_from_rows
from core.facets.validation import validate_config

from .executor import QueryExecutor

LOGGER = logging.getLogger(__name__)


def log_chart_state(state: ChartState, logger: Optional[logging.Logger] = None) -> None:
    """Log a chart state the same way wherever it was produced."""
    log = logger or LOGGER
    if state.kind == STATE_CHART:
        log.debug("Chart ready with %d series", len(state.series))
    elif state.kind == STATE_EMPTY:
        log.info("Widget not configured: %s", state.message)
    else:
        log.warning("Chart error (%s): %s", state.error, state.message)


def refresh_chart(
    config: WidgetConfig,
    executor: QueryExecutor,
    *,
    conflict_policy: str = CONFLICT_ERROR,
) -> ChartState:
    result = validate_config(config)
    if result.error is not None:
        state = ChartState.from_error(result.error)
    else:
        try:
            rows = executor.execute(config.query, config.data_source_id)
        except QueryExecutionError as exc:
            state = ChartState.from_error(exc)
        else:
            state = chart_from_rows(config, rows, conflict_policy=conflict_policy)
    log_chart_state(state)
    return state


__all__ = ["log_chart_state", "refresh_chart"]
