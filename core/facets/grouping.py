"""Partition executor rows into one ordered group per facet value."""
from __future__ import annotations

from typing import Dict, List, Sequence

from .errors import MalformedRow
from .models import RawRow

SERIES_GROUP_INDEX = 1


def series_identity(row: RawRow) -> str:
    """Return the facet value identifying the series a row belongs to.

    The first grouping key of a multi-function faceted result names the
    aggregate function; the second one carries the facet value.
    """
    groups = row.metadata.groups
    if len(groups) <= SERIES_GROUP_INDEX:
        raise MalformedRow(
            f"Row carries {len(groups)} grouping key(s); "
            f"at least {SERIES_GROUP_INDEX + 1} are required to identify its series"
        )
    return groups[SERIES_GROUP_INDEX].value


def group_rows(rows: Sequence[RawRow]) -> Dict[str, List[RawRow]]:
    """Group rows by identity, keeping first-seen identity order and input order within groups."""
    grouped: Dict[str, List[RawRow]] = {}
    for row in rows:
        grouped.setdefault(series_identity(row), []).append(row)
    return grouped


__all__ = ["SERIES_GROUP_INDEX", "series_identity", "group_rows"]
