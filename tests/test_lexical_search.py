"""
Lexical fallback search tests, run against the packaged five-line corpus.
"""

import pytest

from mediphant_server.corpus.chunker import chunk_corpus, load_corpus
from mediphant_server.search.lexical import LexicalFallbackSearch

DIABETES_LINE = (
    "Medication adherence improves outcomes in diabetes; "
    "missed doses are a leading cause of poor control."
)


@pytest.fixture
def chunks():
    return load_corpus()


@pytest.fixture
def search(chunks):
    return LexicalFallbackSearch(chunks)


class TestScoring:

    def test_full_match_scores_one_and_ranks_first(self, search, chunks):
        matches = search.search("medication adherence diabetes")

        assert matches[0].text == DIABETES_LINE
        assert matches[0].score == 1.0
        assert search.score("medication adherence diabetes", chunks[0]) == 1.0

    def test_partial_match_ratio(self, search):
        matches = search.search("medication zzxxyy")

        relevant = next(m for m in matches if "medication" in m.text.lower())
        assert relevant.score == 0.5

    def test_score_is_matched_over_total_terms(self, search, chunks):
        # "list" matches "list;", "reconcile" matches exactly, "zzz" matches nothing
        assert search.score("list reconcile zzz", chunks[1]) == pytest.approx(2 / 3)

    def test_substring_match_is_bidirectional(self):
        search = LexicalFallbackSearch(chunk_corpus("Anticoagulants need care daily\nOther text\n"))

        # query term inside chunk term
        assert [m.text for m in search.search("coagul")] == ["Anticoagulants need care daily"]
        # chunk term inside query term
        assert [m.text for m in search.search("careful")] == ["Anticoagulants need care daily"]

    def test_case_insensitive(self, search):
        assert search.search("MEDICATION") == search.search("medication")
        assert search.search("Medication") == search.search("medication")


class TestRanking:

    def test_no_match_returns_empty(self, search):
        assert search.search("zzxxyy nonexistent") == []

    def test_at_most_three_matches(self, search):
        assert len(search.search("medication")) <= 3
        assert len(search.search("a")) == 3

    def test_sorted_descending_with_ordinal_tie_break(self):
        corpus = chunk_corpus(
            "beta only\n"
            "alpha beta\n"
            "gamma\n"
            "alpha beta again\n"
        )
        search = LexicalFallbackSearch(corpus)

        matches = search.search("alpha beta")

        assert [m.text for m in matches] == ["alpha beta", "alpha beta again", "beta only"]
        assert [m.score for m in matches] == [1.0, 1.0, 0.5]

    def test_scores_never_increase(self, search):
        for query in ("medication list", "pill organizer reminders", "consult clinician"):
            scores = [m.score for m in search.search(query)]
            assert scores == sorted(scores, reverse=True)
            assert all(0 < s <= 1 for s in scores)

    def test_idempotent(self, search):
        first = search.search("medication list reconcile")
        second = search.search("medication list reconcile")
        assert first == second
        assert first[0].text.startswith("Keep an up-to-date medication list")


class TestEmptyQuery:

    @pytest.mark.parametrize("query", ["", "   ", "\t\n"])
    def test_empty_or_whitespace_query_matches_nothing(self, search, query):
        assert search.search(query) == []
