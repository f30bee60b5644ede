"""Merge per-field row batches of one series into x/y aligned points.

A multi-function faceted query returns one batch per (function, facet value)
pair, so each batch of a series carries one of the two axis fields. Batches
are tagged by the field they carry and merged positionally into an
accumulator seeded by the first useful batch.
"""
from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Any, Dict, List, Optional, Sequence, Tuple

from .errors import FieldConflict
from .models import RawRow

CONFLICT_ERROR = "error"
CONFLICT_OVERWRITE = "overwrite"
CONFLICT_POLICIES = frozenset({CONFLICT_ERROR, CONFLICT_OVERWRITE})

Point = Dict[str, Any]


class BatchKind(str, Enum):
    X_ONLY = "x_only"
    Y_ONLY = "y_only"
    BOTH = "both"
    NEITHER = "neither"


@dataclass(frozen=True)
class RowBatch:
    kind: BatchKind
    points: Tuple[Point, ...] = ()

    def fields(self, x_field: str, y_field: str) -> Tuple[str, ...]:
        if self.kind is BatchKind.X_ONLY:
            return (x_field,)
        if self.kind is BatchKind.Y_ONLY:
            return (y_field,)
        if self.kind is BatchKind.BOTH:
            return (x_field, y_field)
        return ()


def _carries(point: Point, field: str) -> bool:
    return point.get(field) is not None


def classify_batch(points: Sequence[Point], x_field: str, y_field: str) -> RowBatch:
    """Tag a batch by the axis fields present on its first point."""
    if not points:
        return RowBatch(BatchKind.NEITHER)
    first = points[0]
    has_x = x_field in first
    has_y = y_field in first
    if has_x and has_y:
        kind = BatchKind.BOTH
    elif has_x:
        kind = BatchKind.X_ONLY
    elif has_y:
        kind = BatchKind.Y_ONLY
    else:
        kind = BatchKind.NEITHER
    return RowBatch(kind, tuple(points))


def _seed(batch: RowBatch, x_field: str, y_field: str) -> List[Point]:
    seed_field = x_field if batch.kind is BatchKind.X_ONLY else y_field
    return [dict(point) for point in batch.points if _carries(point, seed_field)]


def _copy_positional(accumulator: List[Point], points: Sequence[Point], field: str) -> None:
    source = [point for point in points if _carries(point, field)]
    for target, supplier in zip(accumulator, source):
        target[field] = supplier[field]


def _with_axes(point: Point, x_field: str, y_field: str) -> Point:
    point["x"] = point.get(x_field)
    point["y"] = point.get(y_field)
    return point


def align_fields(
    rows: Sequence[RawRow],
    x_field: str,
    y_field: str,
    *,
    conflict_policy: str = CONFLICT_ERROR,
    identity: Optional[str] = None,
) -> List[Point]:
    """Fold the batches of one series into points carrying ``x`` and ``y``.

    Args:
        rows: Rows of a single series, in arrival order.
        x_field: Field mirrored into ``x``.
        y_field: Field mirrored into ``y``.
        conflict_policy: ``"error"`` raises :class:`FieldConflict` when a field
            arrives from a second batch; ``"overwrite"`` lets the later batch win.
        identity: Series identity, used in conflict messages only.

    Returns:
        New point dicts; the input rows are left untouched.
    """
    if conflict_policy not in CONFLICT_POLICIES:
        raise ValueError(f"Unknown conflict policy {conflict_policy!r}")

    accumulator: List[Point] = []
    supplied: set[str] = set()

    for row in rows:
        batch = classify_batch(row.data, x_field, y_field)
        if batch.kind is BatchKind.NEITHER:
            continue

        if not accumulator:
            accumulator = _seed(batch, x_field, y_field)
            if accumulator:
                supplied.update(batch.fields(x_field, y_field))
            continue

        # once seeded, a batch contributes x when it has it and y otherwise
        field = y_field if batch.kind is BatchKind.Y_ONLY else x_field
        if not any(_carries(point, field) for point in batch.points):
            continue
        if conflict_policy == CONFLICT_ERROR and field in supplied:
            raise FieldConflict(field, identity)
        _copy_positional(accumulator, batch.points, field)
        supplied.add(field)

    return [_with_axes(point, x_field, y_field) for point in accumulator]


__all__ = [
    "CONFLICT_ERROR",
    "CONFLICT_OVERWRITE",
    "CONFLICT_POLICIES",
    "BatchKind",
    "RowBatch",
    "classify_batch",
    "align_fields",
]
