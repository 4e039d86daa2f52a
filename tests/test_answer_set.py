"""Tests for AnswerSet updates and validation."""

import pytest

from config import DEFAULT_SCORE, QUESTIONS, Dimension
from scoring import AnswerSet, InvalidScore, ReadinessError, UnknownQuestion


@pytest.fixture
def answers():
    return AnswerSet()


class TestDefaults:
    def test_every_question_starts_at_default(self, answers):
        assert len(answers) == len(QUESTIONS)
        assert set(answers) == {q.id for q in QUESTIONS}
        assert all(answers[q.id] == DEFAULT_SCORE for q in QUESTIONS)


class TestSetAnswer:
    def test_replaces_exactly_one_entry(self, answers):
        before = answers.to_dict()
        answers.set_answer("M2", 5)
        after = answers.to_dict()
        assert after["M2"] == 5
        del before["M2"], after["M2"]
        assert before == after

    def test_scores_recomputed_on_read(self, answers):
        assert answers.dimension_scores()[Dimension.MARKET] == 3.0
        answers.set_answer("M2", 5)
        assert answers.dimension_scores()[Dimension.MARKET] == 3.5
        assert answers.levels()[Dimension.MARKET] == "Moderate"

    @pytest.mark.parametrize("value", [0, 6, -1, 3.5, 3.0, "3", None, True])
    def test_invalid_score_rejected(self, answers, value):
        before = answers.to_dict()
        with pytest.raises(InvalidScore) as excinfo:
            answers.set_answer("P1", value)
        assert excinfo.value.question_id == "P1"
        assert answers.to_dict() == before

    def test_unknown_question_rejected(self, answers):
        before = answers.to_dict()
        with pytest.raises(UnknownQuestion) as excinfo:
            answers.set_answer("Z9", 3)
        assert excinfo.value.question_id == "Z9"
        assert answers.to_dict() == before

    def test_errors_share_a_base(self):
        assert issubclass(InvalidScore, ReadinessError)
        assert issubclass(UnknownQuestion, ReadinessError)
        assert issubclass(ReadinessError, ValueError)

    @pytest.mark.parametrize("value", [1, 2, 3, 4, 5])
    def test_whole_scale_accepted(self, answers, value):
        answers.set_answer("C4", value)
        assert answers["C4"] == value


class TestSerialization:
    def test_round_trip_through_plain_dict(self, answers):
        answers.set_answer("D3", 1)
        restored = AnswerSet.from_dict(answers.to_dict())
        assert restored.to_dict() == answers.to_dict()

    def test_partial_payload_keeps_defaults(self):
        restored = AnswerSet.from_dict({"S2": 4})
        assert restored["S2"] == 4
        assert restored["S1"] == DEFAULT_SCORE

    def test_none_payload_gives_defaults(self):
        assert AnswerSet.from_dict(None).to_dict() == AnswerSet().to_dict()

    def test_bad_payload_raises(self):
        with pytest.raises(InvalidScore):
            AnswerSet.from_dict({"S2": 9})
        with pytest.raises(UnknownQuestion):
            AnswerSet.from_dict({"Q0": 2})
