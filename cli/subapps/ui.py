from __future__ import annotations

from pathlib import Path
from typing import Optional

import typer

from ..common import console, load_or_exit

ui_app = typer.Typer(help="Launch the altaxis chart API")


@ui_app.command("start")
def start_ui(
    host: str = typer.Option("127.0.0.1", "--host", "-h"),
    port: int = typer.Option(8090, "--port", "-p"),
    open_browser: bool = typer.Option(True, "--open/--no-open", help="Open browser automatically"),
    config: Optional[Path] = typer.Option(None, "--config", "-c", help="Widget configuration file"),
) -> None:
    """Start the FastAPI chart server."""
    from ui.server import start_ui as run_server

    settings = load_or_exit(config)
    console().print(f"Starting chart API on http://{host}:{port}")

    try:
        run_server(host, port, open_browser=open_browser, settings=settings)
    except KeyboardInterrupt:
        console().print("Shutting down")
