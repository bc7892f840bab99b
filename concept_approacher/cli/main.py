# concept_approacher/cli/main.py

from __future__ import annotations

from typing import Optional

import typer

from concept_approacher.cli import learn_cli, query_cli
from concept_approacher.cli.common import configure_logging
from concept_approacher.config.settings import get_settings

app = typer.Typer(help="CLI tools for concept-overlap similarity scoring.")

app.add_typer(query_cli.app, name="query")
app.add_typer(learn_cli.app, name="learn")


@app.callback()
def main(
    log_level: Optional[str] = typer.Option(
        None,
        "--log-level",
        help="Log level (DEBUG, INFO, WARNING, ...). Defaults to settings.LOG_LEVEL.",
    ),
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Shortcut for --log-level DEBUG."),
) -> None:
    level = "DEBUG" if verbose else (log_level or get_settings().LOG_LEVEL)
    configure_logging(level)


if __name__ == "__main__":
    app()
