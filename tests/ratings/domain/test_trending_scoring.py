"""Tests for trending score and ranking."""

import math

import pytest
from ratings.trending.scoring import Candidate, TrendingWeights, rank, score

WEIGHTS = TrendingWeights()


def _candidate(entity_id, recent, average=4.0, total=10):
    return Candidate(entity_id=entity_id, average_rating=average, total_reviews=total, recent_review_count=recent)


class TestScore:
    def test_formula(self):
        expected = 3 * 2 + 4.5 * 10 + math.log10(100) * 5
        assert score(3, 4.5, 99, WEIGHTS) == pytest.approx(expected)

    def test_volume_term_is_log_scaled(self):
        small = score(1, 4.0, 9, WEIGHTS)
        large = score(1, 4.0, 999, WEIGHTS)
        assert large - small == pytest.approx(10.0)

    def test_custom_weights(self):
        weights = TrendingWeights(recency=1.0, quality=0.0, volume=0.0)
        assert score(7, 5.0, 1000, weights) == 7.0


class TestRank:
    def test_excludes_entities_without_recent_reviews(self):
        ranked = rank([_candidate("quiet", 0, average=5.0, total=500), _candidate("busy", 1, average=2.0)], WEIGHTS, 50)
        assert [r.candidate.entity_id for r in ranked] == ["busy"]

    def test_sorted_by_descending_score_with_contiguous_ranks(self):
        ranked = rank([_candidate("a", 1), _candidate("b", 10), _candidate("c", 5)], WEIGHTS, 50)
        assert [r.candidate.entity_id for r in ranked] == ["b", "c", "a"]
        assert [r.rank for r in ranked] == [1, 2, 3]
        assert all(ranked[i].score >= ranked[i + 1].score for i in range(len(ranked) - 1))

    def test_ties_broken_by_ascending_entity_id(self):
        ranked = rank([_candidate("zeta", 2), _candidate("alpha", 2), _candidate("mid", 2)], WEIGHTS, 50)
        assert [r.candidate.entity_id for r in ranked] == ["alpha", "mid", "zeta"]

    def test_truncated_to_cap(self):
        ranked = rank([_candidate(f"e{i:02d}", i + 1) for i in range(60)], WEIGHTS, 50)
        assert len(ranked) == 50
        assert ranked[0].candidate.entity_id == "e59"
        assert ranked[-1].rank == 50

    def test_empty_input(self):
        assert rank([], WEIGHTS, 50) == []
