from __future__ import annotations

import typer

from .common import configure_logging
from .subapps.chart import chart_app
from .subapps.ui import ui_app

app = typer.Typer(help="altaxis command line interface: facet chart pipeline tools")
app.add_typer(chart_app, name="chart")
app.add_typer(ui_app, name="ui")


@app.callback()
def main() -> None:
    configure_logging("cli")


if __name__ == "__main__":
    app()
