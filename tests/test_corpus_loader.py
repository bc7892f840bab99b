# tests/test_corpus_loader.py

import pytest

from concept_approacher.graph.store import ConceptStore
from concept_approacher.ingest import load_corpus, load_corpus_file, parse_corpus_line
from concept_approacher.ingest.corpus_loader import MalformedCorpusLineError
from concept_approacher.models.concept import Feature


def test_parse_corpus_line_basic():
    parsed = parse_corpus_line("7.[color:red, kind : fruit]")

    assert parsed.source_id == 7
    assert parsed.features == [
        Feature(key="color", value="red"),
        Feature(key="kind", value="fruit"),
    ]


@pytest.mark.parametrize(
    "line",
    [
        "no delimiter [color:red]",
        "x.[color:red]",
        "3.[color:blue",
        "4.color:blue]",
    ],
)
def test_parse_corpus_line_rejects_malformed_lines(line):
    with pytest.raises(MalformedCorpusLineError):
        parse_corpus_line(line)


def test_parse_corpus_line_skips_bad_features():
    parsed = parse_corpus_line("4.[bogus, :nokey, novalue:, shape:round]")
    assert parsed.features == [Feature(key="shape", value="round")]


def test_load_corpus_reports_what_was_skipped():
    lines = [
        "1.[color:red,kind:fruit]",
        "",
        "no dot here",
        "x.[a:b]",
        "3.[color:blue",
        "4.[bogus, :nokey, novalue:]",
        "5.[ shape : round ]",
    ]
    store = ConceptStore()

    report = load_corpus(lines, store)

    assert report.loaded == 2
    assert report.skipped_lines == 3
    assert report.dropped_empty == 1
    assert store.count() == 2


def test_store_assigns_its_own_ids():
    store = ConceptStore()
    load_corpus(["10.[color:red]", "20.[shape:round]"], store)

    assert [c.id for c in store.get_all()] == [1, 2]
    assert store.get_by_id(2).features == (Feature(key="shape", value="round"),)


def test_load_corpus_file(tmp_path):
    path = tmp_path / "corpus.txt"
    path.write_text("1.[color:red,kind:fruit]\r\n2.[color:blue,kind:fruit]\r\n", encoding="utf-8")
    store = ConceptStore()

    report = load_corpus_file(path, store)

    assert report.loaded == 2
    assert store.distinct_values() == ["blue", "fruit", "red"]


def test_load_corpus_file_missing_raises(tmp_path):
    with pytest.raises(FileNotFoundError):
        load_corpus_file(tmp_path / "nope.txt", ConceptStore())
