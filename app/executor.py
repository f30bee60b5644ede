"""Query executors delivering raw faceted rows to the chart pipeline."""
from __future__ import annotations

import json
import logging
from pathlib import Path
from typing import Any, Dict, List, Optional, Protocol

from core.facets.errors import QueryExecutionError

LOGGER = logging.getLogger(__name__)


class QueryExecutor(Protocol):  # pragma: no cover - structural only
    def execute(self, query: str, data_source_id: Optional[int]) -> List[Dict[str, Any]]:
        ...


class FileQueryExecutor:
    """Serve a captured query result from disk.

    The file holds either the row list itself or an object with a ``data``
    list (the shape returned by the query API). It is re-read on every call so
    a collector can refresh it between poll ticks.
    """

    def __init__(self, path: Path | str) -> None:
        self.path = Path(path)

    def execute(self, query: str, data_source_id: Optional[int]) -> List[Dict[str, Any]]:
        LOGGER.debug("Loading results for data source %s from %s", data_source_id, self.path)
        if not self.path.exists():
            raise QueryExecutionError(f"Result file {self.path} does not exist")
        try:
            with self.path.open("r", encoding="utf-8") as handle:
                payload = json.load(handle)
        except (OSError, json.JSONDecodeError) as exc:
            raise QueryExecutionError(f"Unable to read results from {self.path}: {exc}") from exc

        if isinstance(payload, dict):
            if payload.get("error"):
                raise QueryExecutionError(str(payload["error"]))
            payload = payload.get("data")
        if not isinstance(payload, list):
            raise QueryExecutionError(f"Result file {self.path} does not contain a row list")
        return payload


__all__ = ["QueryExecutor", "FileQueryExecutor"]
