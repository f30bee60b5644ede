"""Pydantic models for executor rows and renderer-ready series."""
from __future__ import annotations

from typing import Any, Dict, Iterable, List, Mapping, Optional

from pydantic import AliasChoices, BaseModel, ConfigDict, Field, ValidationError, field_validator, model_validator

from .errors import MalformedRow


class GroupDescriptor(BaseModel):
    """One grouping key of a faceted result (``groups[1]`` is the facet value)."""

    model_config = ConfigDict(extra="allow")

    value: str
    name: Optional[str] = None
    type: Optional[str] = None

    @field_validator("value", mode="before")
    @classmethod
    def _stringify(cls, value: Any) -> Any:
        if value is None or isinstance(value, str):
            return value
        return str(value)


class RowMetadata(BaseModel):
    model_config = ConfigDict(extra="allow", populate_by_name=True)

    groups: List[GroupDescriptor] = Field(default_factory=list)
    units_data: Dict[str, Any] = Field(
        default_factory=dict,
        validation_alias=AliasChoices("units_data", "unitsMetadata"),
        serialization_alias="unitsMetadata",
    )
    name: Optional[str] = None
    tooltip: Optional[Any] = None


class RawRow(BaseModel):
    """A batch of points returned by the query executor for one facet/function pair.

    Executors may also deliver the flat ``{"fields": {...}, "metadata": {...}}``
    shape, which is read as a single-point batch. ``groups`` and
    ``unitsMetadata`` given at the top level are folded into ``metadata``.
    """

    model_config = ConfigDict(extra="allow")

    metadata: RowMetadata
    data: List[Dict[str, Any]] = Field(default_factory=list)

    @model_validator(mode="before")
    @classmethod
    def _normalise_shape(cls, value: Any) -> Any:
        if not isinstance(value, Mapping):
            return value
        working = dict(value)
        if "fields" in working and "data" not in working:
            fields = working.pop("fields")
            working["data"] = [fields] if fields is not None else []
        if "metadata" not in working and "groups" in working:
            working["metadata"] = {
                "groups": working.pop("groups"),
                "unitsMetadata": working.pop("unitsMetadata", working.pop("units_data", {})),
            }
        return working

    @property
    def groups(self) -> List[GroupDescriptor]:
        return self.metadata.groups


class SeriesMetadata(RowMetadata):
    """Metadata handed to the renderer; a fresh record per series."""

    model_config = ConfigDict(extra="allow", populate_by_name=True, frozen=True)

    name: str


class SeriesRecord(BaseModel):
    metadata: SeriesMetadata
    data: List[Dict[str, Any]] = Field(default_factory=list)

    def to_payload(self) -> Dict[str, Any]:
        """Return the ``{metadata, data}`` mapping the line chart renderer consumes."""
        return self.model_dump(by_alias=True)


def parse_rows(payload: Optional[Iterable[Any]]) -> List[RawRow]:
    """Validate executor output into :class:`RawRow` objects.

    Raises:
        MalformedRow: if the payload or any row does not have the expected shape.
    """
    if payload is None:
        return []
    if isinstance(payload, (Mapping, str, bytes)):
        raise MalformedRow(f"Expected a sequence of rows, got {type(payload).__name__}")

    rows: List[RawRow] = []
    for index, item in enumerate(payload):
        if isinstance(item, RawRow):
            rows.append(item)
            continue
        try:
            rows.append(RawRow.model_validate(item))
        except ValidationError as exc:
            first = exc.errors()[0]
            location = ".".join(str(part) for part in first.get("loc", ()))
            detail = f"{location}: {first['msg']}" if location else first["msg"]
            raise MalformedRow(f"Row {index} is malformed ({detail})") from exc
    return rows


__all__ = [
    "GroupDescriptor",
    "RowMetadata",
    "RawRow",
    "SeriesMetadata",
    "SeriesRecord",
    "parse_rows",
]
