"""Tabular export of transformed series for offline inspection."""
from __future__ import annotations

from pathlib import Path
from typing import Iterable, List

import pandas as pd

from .models import SeriesRecord

SERIES_COLUMN = "series"


def records_to_frame(records: Iterable[SeriesRecord]) -> pd.DataFrame:
    """Flatten series records into one row per point, keyed by series name."""
    rows: List[dict] = []
    for record in records:
        for position, point in enumerate(record.data):
            rows.append({SERIES_COLUMN: record.metadata.name, "position": position, **point})
    if not rows:
        return pd.DataFrame(columns=[SERIES_COLUMN, "position", "x", "y"])
    frame = pd.DataFrame(rows)
    leading = [SERIES_COLUMN, "position", "x", "y"]
    cols = [col for col in leading if col in frame.columns]
    cols += [col for col in frame.columns if col not in leading]
    return frame.loc[:, cols]


def write_frame(frame: pd.DataFrame, path: Path | str) -> Path:
    out_path = Path(path)
    suffix = out_path.suffix.lower()
    if suffix not in {".csv", ".json"}:
        raise ValueError(f"Unsupported export format '{suffix}'; use .csv or .json")
    out_path.parent.mkdir(parents=True, exist_ok=True)
    if suffix == ".csv":
        frame.to_csv(out_path, index=False)
    else:
        frame.to_json(out_path, orient="records", indent=2)
    return out_path


__all__ = ["SERIES_COLUMN", "records_to_frame", "write_frame"]
