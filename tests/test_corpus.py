"""
Corpus chunking tests.
"""

import pytest

from mediphant_server.core.errors import EmptyCorpusError
from mediphant_server.corpus.chunker import chunk_corpus, load_corpus


class TestChunkCorpus:
    """Line-level chunking rules."""

    def test_one_line_one_chunk_in_order(self):
        text = "First fact.\nSecond fact.\nThird fact.\n"
        chunks = chunk_corpus(text)

        assert [c.text for c in chunks] == ["First fact.", "Second fact.", "Third fact."]
        assert [c.ordinal for c in chunks] == [0, 1, 2]
        assert [c.id for c in chunks] == ["chunk-0", "chunk-1", "chunk-2"]

    def test_skips_blank_heading_and_markup_lines(self):
        text = "# Title\n\n   \n---\n## Section\nReal content here.\n```\nMore content.\n"
        chunks = chunk_corpus(text, source_ref="notes.md")

        assert [c.text for c in chunks] == ["Real content here.", "More content."]
        assert [c.ordinal for c in chunks] == [0, 1]
        assert all(c.source_ref == "notes.md" for c in chunks)

    def test_strips_surrounding_whitespace(self):
        chunks = chunk_corpus("   padded line   \n")
        assert chunks[0].text == "padded line"

    def test_empty_corpus_raises(self):
        with pytest.raises(EmptyCorpusError):
            chunk_corpus("# Only a heading\n\n---\n")

    def test_chunks_are_immutable(self):
        chunk = chunk_corpus("Some text.")[0]
        with pytest.raises(Exception):
            chunk.text = "changed"


class TestLoadCorpus:

    def test_packaged_corpus_has_five_chunks(self):
        chunks = load_corpus()

        assert len(chunks) == 5
        assert chunks[0].text.startswith("Medication adherence improves outcomes in diabetes")
        assert chunks[0].source_ref == "corpus.md"

    def test_custom_path(self, tmp_path):
        corpus = tmp_path / "custom.md"
        corpus.write_text("# Heading\nAlpha line.\nBeta line.\n", encoding="utf-8")

        chunks = load_corpus(str(corpus))

        assert [c.text for c in chunks] == ["Alpha line.", "Beta line."]
        assert chunks[0].source_ref == "custom.md"
