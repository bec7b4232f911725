from __future__ import annotations

import math
import sys

from pathlib import Path

import numpy as np
import pytest

repo_root = Path(__file__).resolve().parents[1]
if str(repo_root) not in sys.path:
    sys.path.insert(0, str(repo_root))

from src.access.errors import InvalidEmbeddingError
from src.access.matcher import CosineMatcher, MatcherConfig
from src.access.record import EmbeddingRecord


def _rec(rid: str, emb, decision: bool = True) -> EmbeddingRecord:
    return EmbeddingRecord(id=rid, embedding=emb, decision=decision)


def test_similarity_basic():
    m = CosineMatcher()
    assert m.similarity([1, 0, 0], [1, 0, 0]) == pytest.approx(1.0)
    assert m.similarity([1, 0, 0], [0, 1, 0]) == pytest.approx(0.0)
    assert m.similarity([1, 0], [-1, 0]) == pytest.approx(-1.0)
    assert m.similarity([1, 1], [2, 2]) == pytest.approx(1.0)
    assert m.similarity(np.array([3.0, 4.0]), [4.0, 3.0]) == pytest.approx(24.0 / 25.0)


@pytest.mark.parametrize(
    "a,b",
    [
        ([1, 0], [1, 0, 0]),
        ([], []),
        ([0, 0, 0], [1, 0, 0]),
        ([1, 0], [float("nan"), 1]),
        ([1, 0], [math.inf, 1]),
    ],
)
def test_similarity_invalid_input_raises(a, b):
    with pytest.raises(InvalidEmbeddingError):
        CosineMatcher().similarity(a, b)


def test_default_threshold():
    assert CosineMatcher().threshold == 0.9


def test_threshold_is_strict():
    # cos([1,0,0,0], [9,3,3,1]) = 9 / 10 = 0.9 exactly
    stored = [_rec("a", [9, 3, 3, 1])]
    query = [1, 0, 0, 0]
    assert CosineMatcher().similarity(query, stored[0].embedding) == 0.9

    assert CosineMatcher(MatcherConfig(threshold=0.9)).find_match(query, stored) is None
    assert CosineMatcher(MatcherConfig(threshold=0.8999999)).find_match(query, stored) is stored[0]


def test_similarity_just_above_threshold_matches_by_default():
    # (9 + 1e-6) / 10 ~= 0.9000001
    stored = [_rec("a", [9, 3, 3, 1])]
    query = [1.0, 1e-6 / 3, 0.0, 0.0]
    sim = CosineMatcher().similarity(query, stored[0].embedding)
    assert 0.9 < sim < 0.9000002
    assert CosineMatcher().find_match(query, stored) is stored[0]


def test_huge_and_tiny_vectors_stay_finite():
    m = CosineMatcher()
    assert m.similarity([1e200] * 3, [1e200] * 3) == pytest.approx(1.0)
    assert m.similarity([1e200, 0.0], [0.0, 1e200]) == pytest.approx(0.0)
    assert m.similarity([1e-200] * 3, [2e-200] * 3) == pytest.approx(1.0)
    assert m.similarity([1e200, 1e200], [1.0, 1.0]) == pytest.approx(1.0)
    assert m.find_match([1e200] * 3, [_rec("big", [1e200] * 3)]).id == "big"


def test_stops_scanning_at_first_hit(caplog: pytest.LogCaptureFixture):
    records = [_rec("hit", [1.0, 0.0, 0.0]), _rec("short", [1.0, 0.0])]
    with caplog.at_level("WARNING"):
        assert CosineMatcher().find_match([1.0, 0.0, 0.0], records) is records[0]
    assert not any("short" in r.getMessage() for r in caplog.records)


def test_first_match_wins_over_best_match():
    first = _rec("first", [1.0, 0.2, 0.0], decision=False)
    best = _rec("best", [1.0, 0.0, 0.0], decision=True)
    query = [1.0, 0.0, 0.0]
    m = CosineMatcher()

    assert m.similarity(query, first.embedding) > 0.9
    assert m.similarity(query, best.embedding) > m.similarity(query, first.embedding)
    assert m.find_match(query, [first, best]) is first
    assert m.find_match(query, [best, first]) is best


def test_no_match_returns_none():
    records = [_rec("a1", [1, 0, 0])]
    assert CosineMatcher().find_match([0, 1, 0], records) is None
    assert CosineMatcher().find_match([0, 1, 0], []) is None


def test_incompatible_records_are_skipped(caplog: pytest.LogCaptureFixture):
    records = [
        _rec("short", [1.0, 0.0]),
        _rec("zero", [0.0, 0.0, 0.0]),
        _rec("ok", [1.0, 0.0, 0.0]),
    ]
    with caplog.at_level("WARNING"):
        match = CosineMatcher().find_match([1.0, 0.0, 0.0], records)
    assert match is records[2]
    messages = " ".join(r.getMessage() for r in caplog.records)
    assert "short" in messages and "zero" in messages


@pytest.mark.parametrize("query", [[], [0.0, 0.0, 0.0], [float("nan"), 1.0, 0.0]])
def test_invalid_query_raises(query):
    with pytest.raises(InvalidEmbeddingError):
        CosineMatcher().find_match(query, [_rec("a1", [1, 0, 0])])


def test_find_match_with_score():
    rec, sim = CosineMatcher().find_match_with_score([1, 0, 0], [_rec("a1", [1, 0, 0])])
    assert rec is not None and rec.id == "a1"
    assert sim == pytest.approx(1.0)


def test_rank_orders_best_first_and_skips_incompatible():
    records = [_rec("a", [1, 1, 0]), _rec("b", [1, 0, 0]), _rec("c", [1, 2, 0]), _rec("d", [1, 0])]
    ranked = CosineMatcher().rank([1, 0, 0], records, topk=3)
    assert [r.id for r, _ in ranked] == ["b", "a", "c"]
    assert ranked[0][1] == pytest.approx(1.0)
