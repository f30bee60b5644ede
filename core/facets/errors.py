"""Error taxonomy for the facet chart pipeline."""
from __future__ import annotations

from typing import Optional

EMPTY_STATE_MESSAGE = (
    "Please provide at least one NRQL query & account ID pair. "
    "Then input the attribute names of the attributes you wish to be the x and y axis"
)
EXAMPLE_QUERY = (
    "FROM MobileRequest SELECT latest(memUsageMb), latest(timeSinceLoad) FACET sessionId TIMESERIES"
)

PLACEHOLDER_EMPTY = "empty"
PLACEHOLDER_ERROR = "error"


class ChartError(Exception):
    """Base class for every error the chart pipeline can surface to a placeholder."""

    placeholder = PLACEHOLDER_ERROR

    def __init__(self, message: str) -> None:
        super().__init__(message)
        self.message = message


class ConfigError(ChartError):
    """Raised (or returned) when the widget configuration is unusable."""


class MissingConfig(ConfigError):
    """One of data source, query, x field or y field is empty."""

    placeholder = PLACEHOLDER_EMPTY

    def __init__(self, missing: Optional[list[str]] = None) -> None:
        super().__init__(EMPTY_STATE_MESSAGE)
        self.missing = list(missing or [])


class AxisMismatch(ConfigError):
    def __init__(self, axis: str) -> None:
        if axis not in {"x", "y"}:
            raise ValueError(f"axis must be 'x' or 'y', got {axis!r}")
        super().__init__(f"{axis}Axis does not match query attribute")
        self.axis = axis


class MissingFacet(ConfigError):
    def __init__(self) -> None:
        super().__init__("NRQL query must include a FACET")


class QueryExecutionError(ChartError):
    """Failure reported by the query executor; the message is surfaced as-is."""


class MalformedRow(ChartError):
    """A raw row does not carry the metadata shape the transformer relies on."""


class FieldConflict(ChartError):
    """A series received the same axis field from more than one row batch."""

    def __init__(self, field: str, identity: Optional[str] = None) -> None:
        where = f" in series '{identity}'" if identity is not None else ""
        super().__init__(f"Field '{field}' supplied by more than one row batch{where}")
        self.field = field
        self.identity = identity


__all__ = [
    "EMPTY_STATE_MESSAGE",
    "EXAMPLE_QUERY",
    "PLACEHOLDER_EMPTY",
    "PLACEHOLDER_ERROR",
    "ChartError",
    "ConfigError",
    "MissingConfig",
    "AxisMismatch",
    "MissingFacet",
    "QueryExecutionError",
    "MalformedRow",
    "FieldConflict",
]
