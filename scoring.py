# scoring.py

import logging
import numbers
from collections.abc import Mapping
from typing import NamedTuple

import pandas as pd

from config import (DEFAULT_SCORE, DIMENSION_LABELS, DIMENSIONS, LEVEL_BANDS,
                    NOT_ASSESSED, QUESTIONS, SCALE_MAX, SCALE_MIN)

logger = logging.getLogger(__name__)


# ----------- Errors -------------
class ReadinessError(ValueError):
    """Base class for rejected answer updates."""


class UnknownQuestion(ReadinessError):
    def __init__(self, question_id):
        self.question_id = question_id
        super().__init__(f"Unknown question id: {question_id!r}")


class InvalidScore(ReadinessError):
    def __init__(self, question_id, value):
        self.question_id = question_id
        self.value = value
        super().__init__(
            f"Invalid score {value!r} for question {question_id}: "
            f"expected an integer in [{SCALE_MIN}, {SCALE_MAX}]"
        )


# ----------- Catalog helpers -------------
def validate_catalog(catalog=QUESTIONS) -> list:
    """
    Check the sanity of a question catalog.

    Returns a list of human-readable problems (duplicate ids, unknown
    dimensions, empty question text). An empty list means the catalog is sound.
    """
    problems = []
    seen = set()
    for q in catalog:
        if q.id in seen:
            problems.append(f"Duplicate question id: {q.id}")
        seen.add(q.id)
        if q.dimension not in DIMENSIONS:
            problems.append(f"Question {q.id} has unknown dimension: {q.dimension!r}")
        if not (q.text or "").strip():
            problems.append(f"Question {q.id} has no text")
    return problems


def questions_by_dimension(catalog=QUESTIONS):
    """Group questions by dimension, in display order, keeping catalog order within each."""
    groups = {dim: [] for dim in DIMENSIONS}
    for q in catalog:
        groups.setdefault(q.dimension, []).append(q)
    return groups


# ----------- Scoring & classification -------------
def compute_dimension_scores(answers, catalog=QUESTIONS):
    """
    Compute the average score of every dimension.

    Args:
        answers (Mapping): question id -> score. A missing id counts as 0.
        catalog (Sequence[Question]): questions to aggregate over.

    Returns:
        dict: mapping of Dimension to its mean score rounded to 2 decimals
            (pandas rounding, half-to-even). A dimension with no questions scores 0.0.
    """
    # group on the plain string value so the index never depends on enum hashing
    df = pd.DataFrame(
        [
            {
                "id": q.id,
                "dimension": str(getattr(q.dimension, "value", q.dimension)),
                "value": answers.get(q.id) or 0,
            }
            for q in catalog
        ],
        columns=["id", "dimension", "value"],
    )
    df["value"] = df["value"].astype(float)
    means = df.groupby("dimension")["value"].mean().round(2)
    return {dim: float(means.get(dim.value, 0.0)) for dim in DIMENSIONS}


def overall_score(dimension_scores):
    """Mean of the dimension scores, rounded to 2 decimals; 0.0 when there are none."""
    if not dimension_scores:
        return 0.0
    return round(float(pd.Series(list(dimension_scores.values()), dtype=float).mean()), 2)


def classify(score):
    """
    Map a score in [0, 5] to its level label.

    0 means "not yet assessed"; every other band is inclusive on its upper bound,
    so 1.5 is "Critical" and 2.5 is "Weak".
    """
    if score == 0:
        return NOT_ASSESSED
    for upper, label, _ in LEVEL_BANDS:
        if score <= upper:
            return label
    return LEVEL_BANDS[-1][1]


class RadarSeries(NamedTuple):
    names: list
    values: list
    labels: list


def radar_series(answers, catalog=QUESTIONS) -> RadarSeries:
    """Display names, scores and level labels, aligned in dimension display order."""
    scores = compute_dimension_scores(answers, catalog)
    return RadarSeries(
        names=[DIMENSION_LABELS[d] for d in DIMENSIONS],
        values=[scores[d] for d in DIMENSIONS],
        labels=[classify(scores[d]) for d in DIMENSIONS],
    )


# ----------- Answer state -------------
def _checked_score(question_id, value):
    if isinstance(value, bool) or not isinstance(value, numbers.Integral):
        raise InvalidScore(question_id, value)
    if not SCALE_MIN <= int(value) <= SCALE_MAX:
        raise InvalidScore(question_id, value)
    return int(value)


class AnswerSet(Mapping):
    """
    The user's answers: one integer score in [1, 5] per catalog question.

    Every question starts at DEFAULT_SCORE. The only way to change a score is
    `set_answer`, which validates before touching state, so a rejected update
    leaves the set exactly as it was. Dimension scores are never stored; they are
    recomputed from the answers on every read.
    """

    def __init__(self, catalog=QUESTIONS, default=DEFAULT_SCORE):
        self._catalog = tuple(catalog)
        self._scores = {q.id: default for q in self._catalog}

    def __getitem__(self, question_id):
        return self._scores[question_id]

    def __iter__(self):
        return iter(self._scores)

    def __len__(self):
        return len(self._scores)

    def __repr__(self):
        return f"AnswerSet({self._scores!r})"

    @property
    def catalog(self):
        return self._catalog

    def set_answer(self, question_id, score):
        """
        Replace the score of one question.

        Raises:
            UnknownQuestion: `question_id` is not in the catalog.
            InvalidScore: `score` is not an integer in [1, 5].
        """
        if question_id not in self._scores:
            raise UnknownQuestion(question_id)
        self._scores[question_id] = _checked_score(question_id, score)
        logger.debug("Answer %s set to %s", question_id, score)

    def dimension_scores(self):
        return compute_dimension_scores(self._scores, self._catalog)

    def levels(self):
        return {dim: classify(score) for dim, score in self.dimension_scores().items()}

    def to_dict(self):
        return dict(self._scores)

    @classmethod
    def from_dict(cls, data, catalog=QUESTIONS):
        """
        Rebuild an AnswerSet from a plain mapping (e.g. a dcc.Store payload).

        Ids absent from `data` keep the default score. Any unknown id or invalid
        score raises, exactly as `set_answer` would.
        """
        answers = cls(catalog)
        for qid, value in (data or {}).items():
            answers.set_answer(qid, value)
        return answers
