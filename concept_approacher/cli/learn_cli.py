from __future__ import annotations

from pathlib import Path
from typing import Optional

import typer
from rich.table import Table

from concept_approacher.api.engine import ApproacherEngine
from concept_approacher.cli.common import (
    CORPUS_OPTION,
    PARAMS_OPTION,
    STORE_OPTION,
    console,
    open_engine,
)
from concept_approacher.scoring.params import LEVELS, param_key

app = typer.Typer(
    help="Evaluate and tune the overlap weight table on labeled samples."
)


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------

def _load_samples(engine: ApproacherEngine, samples: Path) -> int:
    if not samples.exists():
        console.print(f"[red]Sample file not found:[/red] {samples}")
        raise typer.Exit(code=1)

    try:
        count = engine.load_training_samples(samples)
    except ValueError as exc:
        console.print(f"[red]Invalid sample file:[/red] {exc}")
        raise typer.Exit(code=1)

    if count == 0:
        console.print(f"[yellow]No valid training samples in {samples}.[/yellow]")
    return count


def _params_table(engine: ApproacherEngine) -> Table:
    tbl = Table(show_header=True, header_style="bold")
    tbl.add_column("A \\ B", justify="right")
    for b in LEVELS:
        tbl.add_column(str(b), justify="right")

    for a in LEVELS:
        tbl.add_row(str(a), *(f"{engine.params[param_key(a, b)]:.3f}" for b in LEVELS))

    return tbl


# ---------------------------------------------------------------------------
# Commands
# ---------------------------------------------------------------------------

@app.command("train")
def train(
    samples: Path = typer.Argument(..., help="JSON list of {a, b, expected, confidence} samples."),
    iterations: Optional[int] = typer.Option(
        None,
        "--iterations",
        "-n",
        min=0,
        help="Optimization rounds. Defaults to settings.OPTIMIZER_ITERATIONS.",
    ),
    learning_rate: Optional[float] = typer.Option(
        None,
        "--learning-rate",
        "-r",
        help="Gradient step size. Defaults to settings.LEARNING_RATE.",
    ),
    save: bool = typer.Option(
        True,
        "--save/--no-save",
        help="Write the tuned weights back to the parameter file.",
    ),
    corpus: Optional[Path] = CORPUS_OPTION,
    params: Optional[Path] = PARAMS_OPTION,
    store: Optional[Path] = STORE_OPTION,
) -> None:
    """
    Tune the weight table on labeled samples.
    """
    engine = open_engine(corpus, params, store)
    if _load_samples(engine, samples) == 0:
        raise typer.Exit(code=1)

    result = engine.optimize(max_iterations=iterations, learning_rate=learning_rate)

    console.print(f"Rounds: {result.iterations}")
    console.print(f"Initial score: {result.initial_score:.6f}")
    console.print(f"[bold green]Best score: {result.best_score:.6f}[/bold green]")
    console.print(_params_table(engine))

    if save:
        path = engine.save_parameters(params)
        console.print(f"[green]Saved parameters to[/green] {path}")


@app.command("evaluate")
def evaluate(
    samples: Path = typer.Argument(..., help="JSON list of {a, b, expected, confidence} samples."),
    corpus: Optional[Path] = CORPUS_OPTION,
    params: Optional[Path] = PARAMS_OPTION,
    store: Optional[Path] = STORE_OPTION,
) -> None:
    """
    Score the current weight table on labeled samples (1.0 = perfect fit).
    """
    engine = open_engine(corpus, params, store)
    count = _load_samples(engine, samples)

    console.print(f"Samples: {count}")
    console.print(f"[bold]Score: {engine.evaluate():.6f}[/bold]")


@app.command("params")
def show_params(
    params: Optional[Path] = PARAMS_OPTION,
) -> None:
    """
    Show the weight table (defaults overwritten by the parameter file).
    """
    engine = open_engine(None, params, None, require_store=False)
    console.print(_params_table(engine))
