# concept_approacher/cli/common.py

from __future__ import annotations

import logging
from pathlib import Path
from typing import Optional

import typer
from rich.console import Console
from rich.markup import escape

from concept_approacher.api.engine import ApproacherEngine
from concept_approacher.config.settings import get_settings
from concept_approacher.graph.store import StoreInitializationError

console = Console()


# ---------------------------------------------------------------------------
# Shared options
# ---------------------------------------------------------------------------

CORPUS_OPTION = typer.Option(
    None,
    "--corpus",
    "-c",
    help="Corpus file ('ID.[key:value,...]' per line). Defaults to settings.corpus_path.",
)

PARAMS_OPTION = typer.Option(
    None,
    "--params",
    "-p",
    help="Parameter file ('name=value' per line). Defaults to settings.params_path.",
)

STORE_OPTION = typer.Option(
    None,
    "--store",
    "-s",
    help="Pickled store snapshot to load instead of the corpus.",
)


def configure_logging(level: str) -> None:
    logging.basicConfig(
        level=level.upper(),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
        force=True,
    )


def open_engine(
    corpus: Optional[Path],
    params: Optional[Path],
    store: Optional[Path],
    require_store: bool = True,
) -> ApproacherEngine:
    """
    Build an engine, load its weights and (optionally) populate the store.

    Storage failures are reported in red and end the command with exit code 1.
    """
    if params is not None and not params.exists():
        console.print(f"[yellow]Parameter file not found, using default weights:[/yellow] {params}")

    engine = ApproacherEngine.from_settings(get_settings(), params_path=params)

    if not require_store:
        return engine

    if store is not None and not store.exists():
        console.print(f"[red]Store snapshot not found:[/red] {store}")
        raise typer.Exit(code=1)

    try:
        engine.initialize_store(corpus_path=corpus, snapshot_path=store)
    except StoreInitializationError as exc:
        console.print(f"[red]Could not initialize the concept store:[/red] {escape(str(exc))}")
        raise typer.Exit(code=1)

    return engine
