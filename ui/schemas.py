"""Pydantic models for the chart API."""

from __future__ import annotations

from typing import Any, Dict, List, Optional

from pydantic import AliasChoices, BaseModel, Field


class WidgetConfigModel(BaseModel):
    data_source_id: Optional[int] = Field(
        None, validation_alias=AliasChoices("data_source_id", "dataSourceId", "accountId")
    )
    query: str = Field("", validation_alias=AliasChoices("query", "nrql"))
    x_field: str = Field("", validation_alias=AliasChoices("x_field", "xField", "xAxis"))
    y_field: str = Field("", validation_alias=AliasChoices("y_field", "yField", "yAxis"))


class TransformRequest(BaseModel):
    config: WidgetConfigModel
    data: List[Dict[str, Any]] = Field(default_factory=list, description="Raw executor rows")


class ChartResponse(BaseModel):
    state: str = Field(..., description="chart, empty or error")
    message: Optional[str] = None
    error: Optional[str] = None
    example_query: Optional[str] = None
    series: List[Dict[str, Any]] = Field(default_factory=list)


class TickResponse(BaseModel):
    locale: str
    ticks: List[str] = Field(default_factory=list)
