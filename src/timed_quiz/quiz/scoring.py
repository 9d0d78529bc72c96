"""Pure scoring of an answer map against a catalog's answer key."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Sequence, Tuple

from .models import AnswerMap, Catalog, Question, QuestionKind, QuestionResult

__all__ = [
    "PASS_THRESHOLD",
    "ScoreReport",
    "is_correct",
    "score",
]

# Minimum percentage required to pass. Overridable per run via
# ``[quiz] pass_threshold`` in quiz.toml.
PASS_THRESHOLD = 51.0


@dataclass(frozen=True)
class ScoreReport:
    """Per-question results plus the aggregate outcome."""

    results: Tuple[QuestionResult, ...]
    correct_count: int
    total: int
    percentage: float
    passed: bool


def is_correct(question: Question, selected: Sequence[str]) -> bool:
    if question.kind is QuestionKind.SINGLE_CHOICE:
        return (
            len(selected) == 1 and selected[0] in question.correct_answer_ids
        )
    # Selection order never matters for multiple choice.
    return sorted(selected) == sorted(question.correct_answer_ids)


def score(
    catalog: Catalog,
    answers: AnswerMap,
    *,
    pass_threshold: float = PASS_THRESHOLD,
) -> ScoreReport:
    """Score ``answers`` against ``catalog``.

    Results are returned in catalog order, one per question. Unanswered
    questions count as incorrect. An empty catalog scores 0% and does not
    pass.
    """

    results = []
    for question in catalog:
        selected = tuple(answers.get(question.id, ()))
        results.append(
            QuestionResult(
                question=question,
                user_selected_answers=selected,
                is_correct=is_correct(question, selected),
            )
        )
    correct_count = sum(1 for result in results if result.is_correct)
    total = len(results)
    percentage = (100.0 * correct_count / total) if total else 0.0
    return ScoreReport(
        results=tuple(results),
        correct_count=correct_count,
        total=total,
        percentage=percentage,
        passed=bool(total) and percentage >= pass_threshold,
    )
