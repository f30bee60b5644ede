"""Shared helper utilities for the altaxis test-suite."""

from .data import X_FIELD, Y_FIELD, build_flat_row, build_row, build_session_rows, write_results
from .fs import ensure_directory
from .mocks import FailingQueryExecutor, FakeQueryExecutor

__all__ = [
    "X_FIELD",
    "Y_FIELD",
    "build_flat_row",
    "build_row",
    "build_session_rows",
    "write_results",
    "ensure_directory",
    "FailingQueryExecutor",
    "FakeQueryExecutor",
]
