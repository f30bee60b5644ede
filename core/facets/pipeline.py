"""Compose validation and transformation into a single chart state."""
from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Dict, Iterable, List, Optional

from .alignment import CONFLICT_ERROR
from .errors import EXAMPLE_QUERY, PLACEHOLDER_EMPTY, ChartError
from .models import SeriesRecord
from .transform import transform_rows
from .validation import ConfigLike, as_config, validate_config

STATE_CHART = "chart"
STATE_EMPTY = PLACEHOLDER_EMPTY
STATE_ERROR = "error"


@dataclass
class ChartState:
    """What the host should show: the chart, the empty-state panel or the error panel."""

    kind: str
    message: Optional[str] = None
    series: List[SeriesRecord] = field(default_factory=list)
    error: Optional[str] = None

    @classmethod
    def from_error(cls, exc: ChartError) -> "ChartState":
        kind = STATE_EMPTY if exc.placeholder == PLACEHOLDER_EMPTY else STATE_ERROR
        return cls(kind=kind, message=exc.message, error=type(exc).__name__)

    @property
    def ok(self) -> bool:
        return self.kind == STATE_CHART

    def to_dict(self) -> Dict[str, Any]:
        payload: Dict[str, Any] = {
            "state": self.kind,
            "message": self.message,
            "error": self.error,
            "series": [record.to_payload() for record in self.series],
        }
        if self.kind == STATE_EMPTY:
            payload["example_query"] = EXAMPLE_QUERY
        return payload


def chart_from_rows(
    config: ConfigLike,
    raw_rows: Optional[Iterable[Any]],
    *,
    conflict_policy: str = CONFLICT_ERROR,
) -> ChartState:
    """Transform rows for an already validated config."""
    cfg = as_config(config)
    try:
        series = transform_rows(raw_rows, cfg.x_field, cfg.y_field, conflict_policy=conflict_policy)
    except ChartError as exc:
        return ChartState.from_error(exc)
    return ChartState(kind=STATE_CHART, series=series)


def prepare_chart(
    config: ConfigLike,
    raw_rows: Optional[Iterable[Any]],
    *,
    conflict_policy: str = CONFLICT_ERROR,
) -> ChartState:
    result = validate_config(config)
    if result.error is not None:
        return ChartState.from_error(result.error)
    return chart_from_rows(config, raw_rows, conflict_policy=conflict_policy)


__all__ = [
    "STATE_CHART",
    "STATE_EMPTY",
    "STATE_ERROR",
    "ChartState",
    "chart_from_rows",
    "prepare_chart",
]
