"""FastAPI application serving chart-ready series to the line chart front-end."""

from __future__ import annotations

import asyncio
import logging
import webbrowser
from typing import List, Optional

from fastapi import APIRouter, FastAPI, HTTPException, Query
from fastapi.responses import JSONResponse
from uvicorn import Config, Server

from app.executor import QueryExecutor
from app.host import log_chart_state, refresh_chart
from app.settings import build_executor, load_widget_settings
from core.facets.alignment import CONFLICT_ERROR
from core.facets.config import ConfigurationError, WidgetConfig, WidgetSettings
from core.facets.pipeline import prepare_chart
from core.facets.ticks import DEFAULT_LOCALE, format_tick

from .schemas import ChartResponse, TickResponse, TransformRequest

LOGGER = logging.getLogger(__name__)

router = APIRouter()


def configure(settings: WidgetSettings, executor: Optional[QueryExecutor] = None) -> None:
    """Bind widget settings (and optionally a custom executor) to the app."""
    app.state.settings = settings
    app.state.executor = executor or build_executor(settings)


def _current_settings() -> WidgetSettings:
    settings = getattr(app.state, "settings", None)
    if settings is None:
        try:
            configure(load_widget_settings())
        except ConfigurationError as exc:
            LOGGER.warning("Chart API has no usable configuration: %s", exc)
            raise HTTPException(status_code=503, detail=str(exc)) from exc
        settings = app.state.settings
    return settings


def _parse_values(raw: str) -> List[float]:
    values: List[float] = []
    for chunk in raw.split(","):
        chunk = chunk.strip()
        if not chunk:
            continue
        try:
            values.append(float(chunk))
        except ValueError as exc:
            raise HTTPException(status_code=422, detail=f"Tick value {chunk!r} is not numeric") from exc
    return values


@router.get("/api/health", response_class=JSONResponse)
async def api_health() -> JSONResponse:
    return JSONResponse({"status": "ok"})


@router.get("/api/chart", response_model=ChartResponse)
async def api_chart() -> ChartResponse:
    settings = _current_settings()
    state = refresh_chart(
        settings.widget,
        app.state.executor,
        conflict_policy=settings.conflict_policy,
    )
    return ChartResponse(**state.to_dict())


@router.post("/api/transform", response_model=ChartResponse)
async def api_transform(request: TransformRequest) -> ChartResponse:
    settings = getattr(app.state, "settings", None)
    conflict_policy = settings.conflict_policy if settings is not None else CONFLICT_ERROR
    config = WidgetConfig(**request.config.model_dump())
    state = prepare_chart(config, request.data, conflict_policy=conflict_policy)
    log_chart_state(state, LOGGER)
    return ChartResponse(**state.to_dict())


@router.get("/api/ticks", response_model=TickResponse)
async def api_ticks(
    values: str = Query(..., description="Comma separated numeric tick values"),
    locale: Optional[str] = Query(None),
) -> TickResponse:
    if locale is None:
        settings = getattr(app.state, "settings", None)
        locale = settings.locale if settings is not None else DEFAULT_LOCALE
    ticks = [format_tick(value, locale) for value in _parse_values(values)]
    return TickResponse(locale=locale, ticks=ticks)


app = FastAPI(title="altaxis chart API")
app.include_router(router)


def start_ui(
    host: str,
    port: int,
    open_browser: bool = True,
    settings: Optional[WidgetSettings] = None,
) -> None:
    """Start the FastAPI server via uvicorn."""
    if settings is not None:
        configure(settings)

    config = Config(app=app, host=host, port=port, log_level="info")
    server = Server(config=config)

    if open_browser:
        url = f"http://{host}:{port}/api/chart"

        def _open() -> None:
            webbrowser.open(url)

        loop = asyncio.new_event_loop()
        asyncio.set_event_loop(loop)
        loop.call_later(1.0, _open)
        loop.run_until_complete(server.serve())
        return

    asyncio.run(server.serve())
