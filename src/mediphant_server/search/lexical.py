"""
Lexical Fallback Search

Dependency-free relevance scoring over a fixed corpus snapshot. Used whenever
the vector path is unavailable.

Scoring
-------
Query and chunk text are lowercased and split on whitespace. A query term
matches a chunk when it is a substring of some chunk term, or some chunk term
is a substring of it. The chunk score is

    matched query terms / total query terms

Chunks scoring zero are dropped; the rest are ordered by score descending,
then corpus ordinal ascending, and the first `top_k` are returned. A query
with no terms matches nothing.
"""

from __future__ import annotations

from typing import List, Sequence, Tuple

from .models import MAX_MATCHES, SearchMatch
from ..corpus.models import Chunk


def tokenize(text: str) -> List[str]:
    return text.lower().split()


def _term_matches(query_term: str, chunk_terms: Sequence[str]) -> bool:
    return any(
        query_term in chunk_term or chunk_term in query_term
        for chunk_term in chunk_terms
    )


class LexicalFallbackSearch:
    """
    In-memory scorer over an immutable chunk snapshot.

    Chunk tokens are computed once at construction; `search` is pure and
    safe to call concurrently.
    """

    def __init__(self, chunks: Sequence[Chunk]) -> None:
        self._entries: Tuple[Tuple[Chunk, Tuple[str, ...]], ...] = tuple(
            (chunk, tuple(tokenize(chunk.text)))
            for chunk in sorted(chunks, key=lambda c: c.ordinal)
        )

    def __len__(self) -> int:
        return len(self._entries)

    def score(self, query: str, chunk: Chunk) -> float:
        """Return the relevance of `chunk` for `query` in [0, 1]."""
        return self._score(tokenize(query), tokenize(chunk.text))

    def search(self, query: str, top_k: int = MAX_MATCHES) -> List[SearchMatch]:
        query_terms = tokenize(query)
        if not query_terms:
            return []

        scored = []
        for chunk, chunk_terms in self._entries:
            score = self._score(query_terms, chunk_terms)
            if score > 0:
                scored.append((score, chunk))

        scored.sort(key=lambda item: (-item[0], item[1].ordinal))

        return [
            SearchMatch(text=chunk.text, score=score)
            for score, chunk in scored[:top_k]
        ]

    @staticmethod
    def _score(query_terms: Sequence[str], chunk_terms: Sequence[str]) -> float:
        if not query_terms:
            return 0.0
        matched = sum(1 for term in query_terms if _term_matches(term, chunk_terms))
        return matched / len(query_terms)
