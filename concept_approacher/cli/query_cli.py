from __future__ import annotations

from pathlib import Path
from typing import Optional

import typer
from rich.markup import escape
from rich.table import Table

from concept_approacher.cli.common import (
    CORPUS_OPTION,
    PARAMS_OPTION,
    STORE_OPTION,
    console,
    open_engine,
)
from concept_approacher.nlp.features import format_features, parse_features

app = typer.Typer(
    help="Match and score feature lists against a concept corpus."
)


# ---------------------------------------------------------------------------
# Commands
# ---------------------------------------------------------------------------

@app.command("score")
def score(
    features_a: str = typer.Argument(..., help="Object A, e.g. 'color:red, fruit'."),
    features_b: str = typer.Argument(..., help="Object B, same format as A."),
    fuzzy: Optional[bool] = typer.Option(
        None,
        "--fuzzy/--exact",
        help="Fuzzy (recursive) or exact matching. Defaults to settings.USE_FUZZY_MATCHING.",
    ),
    threshold: Optional[float] = typer.Option(
        None,
        "--threshold",
        "-t",
        min=0.0,
        max=1.0,
        help="Minimum string similarity for a fuzzy match.",
    ),
    depth: Optional[int] = typer.Option(
        None,
        "--depth",
        "-d",
        min=1,
        help="Maximum recursion depth for fuzzy matching (1 = no substitution).",
    ),
    corpus: Optional[Path] = CORPUS_OPTION,
    params: Optional[Path] = PARAMS_OPTION,
    store: Optional[Path] = STORE_OPTION,
) -> None:
    """
    Score the similarity of two objects and show the overlap breakdown.
    """
    a = parse_features(features_a)
    b = parse_features(features_b)
    if not a or not b:
        console.print("[red]Both objects need at least one feature.[/red]")
        raise typer.Exit(code=1)

    engine = open_engine(corpus, params, store)
    report = engine.compare(a, b, use_fuzzy=fuzzy, threshold=threshold, max_depth=depth)

    mode = f"fuzzy (threshold={report.threshold}, depth={report.max_depth})" if report.fuzzy else "exact"
    console.print(f"[bold]A:[/bold] {escape(report.features_a)}")
    console.print(f"[bold]B:[/bold] {escape(report.features_b)}")
    console.print(f"Matching: {mode}")
    console.print(
        f"Concepts matched: A={report.matches_a}, B={report.matches_b}, "
        f"shared={report.shared_matches}"
    )

    if report.overlap:
        tbl = Table(show_header=True, header_style="bold")
        tbl.add_column("Level A", justify="right")
        tbl.add_column("Level B", justify="right")
        tbl.add_column("Concepts", justify="right")
        tbl.add_column("Weight", justify="right")
        for bucket in report.overlap:
            tbl.add_row(
                str(bucket.level_a),
                str(bucket.level_b),
                str(bucket.count),
                f"{bucket.weight:.3f}",
            )
        console.print(tbl)

    console.print(f"Partial A->B: {report.partial_a_to_b:.4f}")
    console.print(f"Partial B->A: {report.partial_b_to_a:.4f}")
    console.print(f"[bold green]Similarity: {report.similarity:.4f}[/bold green]")


@app.command("match")
def match(
    features: str = typer.Argument(..., help="Feature list, e.g. 'color:red, fruit'."),
    fuzzy: Optional[bool] = typer.Option(
        None,
        "--fuzzy/--exact",
        help="Fuzzy (recursive) or exact matching. Defaults to settings.USE_FUZZY_MATCHING.",
    ),
    threshold: Optional[float] = typer.Option(None, "--threshold", "-t", min=0.0, max=1.0),
    depth: Optional[int] = typer.Option(None, "--depth", "-d", min=1),
    corpus: Optional[Path] = CORPUS_OPTION,
    params: Optional[Path] = PARAMS_OPTION,
    store: Optional[Path] = STORE_OPTION,
) -> None:
    """
    List the concepts a feature list matches.
    """
    parsed = parse_features(features)
    if not parsed:
        console.print("[red]No features given.[/red]")
        raise typer.Exit(code=1)

    engine = open_engine(corpus, params, store)
    matches = engine.find_matches(parsed, use_fuzzy=fuzzy, threshold=threshold, max_depth=depth)

    if not matches:
        console.print(f"[yellow]No concepts match {escape(format_features(parsed))}.[/yellow]")
        return

    tbl = Table(show_header=True, header_style="bold")
    tbl.add_column("Concept", justify="right")
    tbl.add_column("Matches", justify="right")
    tbl.add_column("Input features")
    tbl.add_column("Concept features")

    for summary in engine.summarize_matches(matches):
        matched = ",".join(str(parsed[i]) for i in summary.matched_indices)
        tbl.add_row(
            str(summary.concept_id),
            f"{summary.match_count}/{len(parsed)}",
            escape(matched),
            escape(summary.features),
        )

    console.print(tbl)


@app.command("lookup")
def lookup(
    value: str = typer.Argument(..., help="Feature value to look up."),
    key: Optional[str] = typer.Option(
        None,
        "--key",
        "-k",
        help="Only concepts holding the value under this key.",
    ),
    corpus: Optional[Path] = CORPUS_OPTION,
    store: Optional[Path] = STORE_OPTION,
) -> None:
    """
    Show the concepts holding a given feature value.
    """
    engine = open_engine(corpus, None, store)
    concepts = engine.lookup(value, key=key)

    if not concepts:
        what = f"{key}:{value}" if key else value
        console.print(f"[yellow]No concepts with '{escape(what)}'.[/yellow]")
        return

    tbl = Table(show_header=True, header_style="bold")
    tbl.add_column("Concept", justify="right")
    tbl.add_column("Features")
    for concept in concepts:
        tbl.add_row(str(concept.id), escape(format_features(concept.features)))

    console.print(tbl)


@app.command("stats")
def stats(
    corpus: Optional[Path] = CORPUS_OPTION,
    store: Optional[Path] = STORE_OPTION,
) -> None:
    """
    Show basic statistics of the loaded concept store.
    """
    engine = open_engine(corpus, None, store)
    statistics = engine.statistics()

    tbl = Table(show_header=True, header_style="bold")
    tbl.add_column("Metric")
    tbl.add_column("Value", justify="right")
    tbl.add_row("Concepts", str(statistics["concepts"]))
    tbl.add_row("Features", str(statistics["features"]))
    tbl.add_row("Distinct values", str(statistics["distinct_values"]))

    console.print(tbl)


@app.command("snapshot")
def snapshot(
    out: Path = typer.Argument(..., help="Where to write the pickled store."),
    overwrite: bool = typer.Option(
        True,
        "--overwrite/--no-overwrite",
        help="Replace an existing snapshot file.",
    ),
    corpus: Optional[Path] = CORPUS_OPTION,
) -> None:
    """
    Load the corpus and save the resulting store as a snapshot.
    """
    engine = open_engine(corpus, None, None)

    try:
        path = engine.save_snapshot(out, overwrite=overwrite)
    except FileExistsError as exc:
        console.print(f"[red]{exc}[/red]")
        raise typer.Exit(code=1)

    console.print(f"[green]Saved {engine.store.count()} concepts to[/green] {path}")
