# tests/test_cli.py

import json
from pathlib import Path

from typer.testing import CliRunner

from concept_approacher.cli.main import app as cli_app

runner = CliRunner()


def write_corpus(tmp_path: Path) -> Path:
    corpus = tmp_path / "corpus.txt"
    corpus.write_text(
        "1.[color:red,kind:fruit]\n"
        "2.[color:blue,kind:fruit]\n"
        "3.[shape:round,color:green]\n",
        encoding="utf-8",
    )
    return corpus


def write_samples(tmp_path: Path) -> Path:
    samples = tmp_path / "samples.json"
    samples.write_text(
        json.dumps([{"a": "red", "b": "red", "expected": 1.0, "confidence": 1.0}]),
        encoding="utf-8",
    )
    return samples


def test_query_score(tmp_path):
    corpus = write_corpus(tmp_path)

    result = runner.invoke(cli_app, ["query", "score", "red", "red", "--corpus", str(corpus)])

    assert result.exit_code == 0, result.output
    assert "Similarity: 2.0000" in result.stdout
    assert "[red]" in result.stdout


def test_query_score_disjoint_objects(tmp_path):
    corpus = write_corpus(tmp_path)

    result = runner.invoke(
        cli_app,
        ["query", "score", "color:red", "color:blue", "--exact", "--corpus", str(corpus)],
    )

    assert result.exit_code == 0, result.output
    assert "Similarity: 0.0000" in result.stdout


def test_query_score_missing_corpus_exits_with_error(tmp_path):
    result = runner.invoke(
        cli_app,
        ["query", "score", "red", "red", "--corpus", str(tmp_path / "missing.txt")],
    )

    assert result.exit_code == 1
    assert "Could not initialize the concept store" in result.stdout


def test_query_match_fuzzy(tmp_path):
    corpus = write_corpus(tmp_path)

    result = runner.invoke(
        cli_app,
        ["query", "match", "redd", "--fuzzy", "--threshold", "0.75", "--depth", "1", "--corpus", str(corpus)],
    )

    assert result.exit_code == 0, result.output
    assert "color:red,kind:fruit" in result.stdout


def test_query_lookup_and_stats(tmp_path):
    corpus = write_corpus(tmp_path)

    lookup = runner.invoke(cli_app, ["query", "lookup", "fruit", "--corpus", str(corpus)])
    assert lookup.exit_code == 0, lookup.output
    assert "color:blue,kind:fruit" in lookup.stdout

    missing = runner.invoke(cli_app, ["query", "lookup", "fruit", "--key", "color", "--corpus", str(corpus)])
    assert missing.exit_code == 0, missing.output
    assert "No concepts" in missing.stdout

    stats = runner.invoke(cli_app, ["query", "stats", "--corpus", str(corpus)])
    assert stats.exit_code == 0, stats.output
    assert "Concepts" in stats.stdout
    assert "Distinct values" in stats.stdout


def test_query_snapshot_then_load(tmp_path):
    corpus = write_corpus(tmp_path)
    out = tmp_path / "store.gpickle"

    saved = runner.invoke(cli_app, ["query", "snapshot", str(out), "--corpus", str(corpus)])
    assert saved.exit_code == 0, saved.output
    assert out.exists()

    stats = runner.invoke(cli_app, ["query", "stats", "--store", str(out)])
    assert stats.exit_code == 0, stats.output
    assert "Concepts" in stats.stdout


def test_learn_train_writes_parameters(tmp_path):
    corpus = write_corpus(tmp_path)
    samples = write_samples(tmp_path)
    params = tmp_path / "tuned.txt"

    result = runner.invoke(
        cli_app,
        [
            "learn", "train", str(samples),
            "--iterations", "3",
            "--learning-rate", "1.0",
            "--corpus", str(corpus),
            "--params", str(params),
        ],
    )

    assert result.exit_code == 0, result.output
    assert "Best score" in result.stdout
    assert params.exists()
    assert "p55=" in params.read_text(encoding="utf-8")


def test_learn_train_no_save(tmp_path):
    corpus = write_corpus(tmp_path)
    samples = write_samples(tmp_path)
    params = tmp_path / "tuned.txt"

    result = runner.invoke(
        cli_app,
        [
            "learn", "train", str(samples),
            "--iterations", "1",
            "--no-save",
            "--corpus", str(corpus),
            "--params", str(params),
        ],
    )

    assert result.exit_code == 0, result.output
    assert not params.exists()


def test_learn_evaluate(tmp_path):
    corpus = write_corpus(tmp_path)
    samples = write_samples(tmp_path)

    result = runner.invoke(cli_app, ["learn", "evaluate", str(samples), "--corpus", str(corpus)])

    assert result.exit_code == 0, result.output
    assert "Score: 0.500000" in result.stdout


def test_learn_params_shows_default_grid():
    result = runner.invoke(cli_app, ["learn", "params"])

    assert result.exit_code == 0, result.output
    assert "2.000" in result.stdout
    assert "1.500" in result.stdout


def test_query_stats_empty_snapshot_exits_with_error(tmp_path):
    snapshot = tmp_path / "empty.gpickle"
    snapshot.write_bytes(b"")

    result = runner.invoke(cli_app, ["query", "stats", "--store", str(snapshot)])

    assert result.exit_code == 1
    assert "Could not initialize the concept store" in result.stdout


def test_query_score_uses_given_parameter_file(tmp_path):
    corpus = write_corpus(tmp_path)
    params = tmp_path / "weights.txt"
    params.write_text("p55=1.5\n", encoding="utf-8")

    result = runner.invoke(
        cli_app,
        ["query", "score", "red", "red", "--corpus", str(corpus), "--params", str(params)],
    )

    assert result.exit_code == 0, result.output
    assert "Similarity: 1.5000" in result.stdout
