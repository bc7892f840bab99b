# concept_approacher/ingest/__init__.py

"""
Corpus ingestion: 'ID.[key:value,...]' lines -> concepts in a ConceptStore.
"""

from .corpus_loader import CorpusLoadReport, load_corpus, load_corpus_file, parse_corpus_line

__all__ = ["CorpusLoadReport", "load_corpus", "load_corpus_file", "parse_corpus_line"]
