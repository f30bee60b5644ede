"""Reshape faceted executor rows into renderer-ready series records."""
from __future__ import annotations

from typing import Any, Iterable, List, Optional, Sequence

from .alignment import CONFLICT_ERROR, align_fields
from .grouping import group_rows
from .models import RawRow, SeriesMetadata, SeriesRecord, parse_rows

UNKNOWN_UNIT = "UNKNOWN"


def derive_metadata(rows: Sequence[RawRow], identity: str) -> SeriesMetadata:
    """Build a fresh metadata record for a series from its first row."""
    source = rows[0].metadata
    payload = source.model_dump()
    units = dict(payload.get("units_data") or {})
    units["x"] = UNKNOWN_UNIT
    payload.update(name=identity, units_data=units, tooltip=None)
    return SeriesMetadata.model_validate(payload)


def transform_rows(
    rows: Optional[Iterable[Any]],
    x_field: str,
    y_field: str,
    *,
    conflict_policy: str = CONFLICT_ERROR,
) -> List[SeriesRecord]:
    """Group rows by facet value and align the two axis fields per group.

    ``rows`` may hold raw executor mappings or :class:`RawRow` objects.
    Records come back in the order their facet value was first seen.
    """
    parsed = parse_rows(rows)
    records: List[SeriesRecord] = []
    for identity, members in group_rows(parsed).items():
        points = align_fields(
            members,
            x_field,
            y_field,
            conflict_policy=conflict_policy,
            identity=identity,
        )
        records.append(SeriesRecord(metadata=derive_metadata(members, identity), data=points))
    return records


__all__ = ["UNKNOWN_UNIT", "derive_metadata", "transform_rows"]
