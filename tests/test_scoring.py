"""Tests for dimension scoring, level classification and catalog helpers."""

import pytest

from config import DIMENSIONS, QUESTIONS, Dimension, Question
from scoring import (AnswerSet, classify, compute_dimension_scores,
                     overall_score, questions_by_dimension, radar_series,
                     validate_catalog)


def ids_for(dimension):
    return [q.id for q in QUESTIONS if q.dimension == dimension]


class TestCatalog:
    """The static question catalog."""

    def test_twenty_questions_four_per_dimension(self):
        assert len(QUESTIONS) == 20
        for dim in DIMENSIONS:
            assert len(ids_for(dim)) == 4

    def test_ids_are_unique(self):
        assert len({q.id for q in QUESTIONS}) == len(QUESTIONS)

    def test_catalog_has_no_problems(self):
        assert validate_catalog(QUESTIONS) == []

    def test_validate_catalog_reports_problems(self):
        catalog = (
            Question("X1", Dimension.PRODUCT, "Something?"),
            Question("X1", Dimension.MARKET, "Something else?"),
            Question("X2", "finance", "Unknown dimension?"),
            Question("X3", Dimension.SECURITY, "   "),
        )
        problems = validate_catalog(catalog)
        assert len(problems) == 3
        assert any("Duplicate" in p and "X1" in p for p in problems)
        assert any("X2" in p and "finance" in p for p in problems)
        assert any("X3" in p for p in problems)

    def test_questions_by_dimension_keeps_display_order(self):
        groups = questions_by_dimension()
        assert list(groups) == list(DIMENSIONS)
        assert [q.id for q in groups[Dimension.PRODUCT]] == ["P1", "P2", "P3", "P4"]

    def test_questions_by_dimension_has_entry_for_empty_dimension(self):
        groups = questions_by_dimension(QUESTIONS[:4])
        assert groups[Dimension.MARKET] == []


class TestClassify:
    """Level bands are inclusive on their upper bound."""

    @pytest.mark.parametrize(
        "score, label",
        [
            (0, "Not yet assessed"),
            (0.5, "Critical"),
            (1.5, "Critical"),
            (1.51, "Weak"),
            (2.5, "Weak"),
            (2.51, "Moderate"),
            (3.5, "Moderate"),
            (3.75, "Good"),
            (4.5, "Good"),
            (4.51, "Very good"),
            (5, "Very good"),
        ],
    )
    def test_boundaries(self, score, label):
        assert classify(score) == label


class TestComputeDimensionScores:
    """Per-dimension averages."""

    def test_defaults_score_three_everywhere(self):
        scores = compute_dimension_scores(AnswerSet())
        assert scores == {dim: 3.0 for dim in DIMENSIONS}
        assert all(classify(s) == "Moderate" for s in scores.values())

    def test_all_product_at_five(self):
        answers = AnswerSet()
        for qid in ids_for(Dimension.PRODUCT):
            answers.set_answer(qid, 5)
        scores = compute_dimension_scores(answers)
        assert scores[Dimension.PRODUCT] == 5.0
        assert classify(scores[Dimension.PRODUCT]) == "Very good"
        for dim in DIMENSIONS:
            if dim != Dimension.PRODUCT:
                assert scores[dim] == 3.0
                assert classify(scores[dim]) == "Moderate"

    def test_one_security_question_at_one(self):
        answers = AnswerSet()
        answers.set_answer("S1", 1)
        scores = compute_dimension_scores(answers)
        assert scores[Dimension.SECURITY] == 2.5
        assert classify(scores[Dimension.SECURITY]) == "Weak"

    def test_rounds_to_two_decimals(self):
        catalog = (
            Question("A", Dimension.MARKET, "a"),
            Question("B", Dimension.MARKET, "b"),
            Question("C", Dimension.MARKET, "c"),
        )
        scores = compute_dimension_scores({"A": 1, "B": 1, "C": 2}, catalog)
        assert scores[Dimension.MARKET] == 1.33

    def test_missing_answer_counts_as_zero(self):
        answers = AnswerSet().to_dict()
        del answers["M1"]
        scores = compute_dimension_scores(answers)
        assert scores[Dimension.MARKET] == 2.25

    def test_dimension_without_questions_scores_zero(self):
        catalog = [q for q in QUESTIONS if q.dimension != Dimension.CERTIFICATIONS]
        scores = compute_dimension_scores(AnswerSet(), catalog)
        assert scores[Dimension.CERTIFICATIONS] == 0.0
        assert classify(scores[Dimension.CERTIFICATIONS]) == "Not yet assessed"

    def test_empty_catalog(self):
        assert compute_dimension_scores({}, ()) == {dim: 0.0 for dim in DIMENSIONS}

    def test_idempotent(self):
        answers = AnswerSet()
        answers.set_answer("D2", 4)
        assert compute_dimension_scores(answers) == compute_dimension_scores(answers)

    def test_scores_stay_in_scale(self):
        answers = AnswerSet()
        for i, q in enumerate(QUESTIONS):
            answers.set_answer(q.id, i % 5 + 1)
        for score in compute_dimension_scores(answers).values():
            assert 1 <= score <= 5

    @pytest.mark.parametrize("qid", ["P2", "M3", "D1", "S4", "C2"])
    def test_raising_one_answer_moves_only_its_dimension(self, qid):
        answers = AnswerSet()
        before = compute_dimension_scores(answers)
        answers.set_answer(qid, 4)
        after = compute_dimension_scores(answers)
        dim = next(q.dimension for q in QUESTIONS if q.id == qid)
        assert after[dim] > before[dim]
        for other in DIMENSIONS:
            if other != dim:
                assert after[other] == before[other]


class TestSummaries:
    """Overall score and the radar series handed to the charts."""

    def test_overall_score(self):
        answers = AnswerSet()
        for qid in ids_for(Dimension.PRODUCT):
            answers.set_answer(qid, 5)
        assert overall_score(answers.dimension_scores()) == 3.4

    def test_overall_score_empty(self):
        assert overall_score({}) == 0.0

    def test_radar_series_is_aligned(self):
        answers = AnswerSet()
        answers.set_answer("S1", 1)
        series = radar_series(answers)
        assert series.names == [
            "Product",
            "Market",
            "Documentation",
            "Security",
            "Certifications",
        ]
        assert series.values == [3.0, 3.0, 3.0, 2.5, 3.0]
        assert series.labels == ["Moderate", "Moderate", "Moderate", "Weak", "Moderate"]
