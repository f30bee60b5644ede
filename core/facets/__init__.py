"""Faceted query results reshaped into alternate-axis line chart series."""
from __future__ import annotations

from .alignment import CONFLICT_ERROR, CONFLICT_OVERWRITE, BatchKind, RowBatch, align_fields, classify_batch
from .config import ConfigurationError, PollingConfig, WidgetConfig, WidgetSettings, load_settings
from .errors import (
    AxisMismatch,
    ChartError,
    ConfigError,
    FieldConflict,
    MalformedRow,
    MissingConfig,
    MissingFacet,
    QueryExecutionError,
)
from .grouping import group_rows, series_identity
from .models import GroupDescriptor, RawRow, RowMetadata, SeriesMetadata, SeriesRecord, parse_rows
from .pipeline import ChartState, chart_from_rows, prepare_chart
from .ticks import format_tick
from .transform import UNKNOWN_UNIT, derive_metadata, transform_rows
from .validation import ValidationResult, ensure_valid, validate_config

__all__ = [
    "CONFLICT_ERROR",
    "CONFLICT_OVERWRITE",
    "BatchKind",
    "RowBatch",
    "align_fields",
    "classify_batch",
    "ConfigurationError",
    "PollingConfig",
    "WidgetConfig",
    "WidgetSettings",
    "load_settings",
    "AxisMismatch",
    "ChartError",
    "ConfigError",
    "FieldConflict",
    "MalformedRow",
    "MissingConfig",
    "MissingFacet",
    "QueryExecutionError",
    "group_rows",
    "series_identity",
    "GroupDescriptor",
    "RawRow",
    "RowMetadata",
    "SeriesMetadata",
    "SeriesRecord",
    "parse_rows",
    "ChartState",
    "chart_from_rows",
    "prepare_chart",
    "format_tick",
    "UNKNOWN_UNIT",
    "derive_metadata",
    "transform_rows",
    "ValidationResult",
    "ensure_valid",
    "validate_config",
]
