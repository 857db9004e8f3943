"""
Corpus Chunker

Splits the corpus document into line-level chunks: one non-empty content line
becomes exactly one chunk, in document order. Headings and lines made only of
markup characters are skipped. There is no overlap and no merging.
"""

from __future__ import annotations

from pathlib import Path
from typing import List, Optional

from .models import Chunk
from ..core.errors import EmptyCorpusError

DEFAULT_CORPUS_PATH = Path(__file__).parent / "corpus.md"


def _is_content_line(line: str) -> bool:
    if not line:
        return False
    if line.startswith("#"):
        return False
    # Rules, fences and similar markup carry no retrievable text
    return any(ch.isalnum() for ch in line)


def chunk_corpus(text: str, source_ref: str = "corpus.md") -> List[Chunk]:
    """
    Split raw corpus text into ordered chunks.

    Parameters
    ----------
    text : str
        Raw corpus document.

    source_ref : str
        Document name recorded on every chunk.

    Returns
    -------
    List[Chunk]
        Chunks with contiguous zero-based ordinals and ids `chunk-<ordinal>`.

    Raises
    ------
    EmptyCorpusError
        If no content line remains.
    """
    lines = [raw.strip() for raw in text.splitlines()]
    content = [line for line in lines if _is_content_line(line)]

    if not content:
        raise EmptyCorpusError(f"No chunks created from {source_ref}")

    return [
        Chunk(
            id=f"chunk-{ordinal}",
            text=line,
            source_ref=source_ref,
            ordinal=ordinal,
        )
        for ordinal, line in enumerate(content)
    ]


def load_corpus(path: Optional[str] = None) -> List[Chunk]:
    """Read and chunk the corpus at `path` (the packaged corpus by default)."""
    corpus_path = Path(path) if path else DEFAULT_CORPUS_PATH
    text = corpus_path.read_text(encoding="utf-8")
    return chunk_corpus(text, source_ref=corpus_path.name)
