"""Index arithmetic and derived per-question status.

These helpers are pure; the session reducer composes them. Navigation never
wraps around and never leaves ``[0, total - 1]``.
"""

from __future__ import annotations

from typing import Sequence

from .models import (
    AnswerMap,
    Catalog,
    QuestionResult,
    QuestionStatus,
    SessionStatus,
)

__all__ = [
    "clamp_index",
    "next_index",
    "previous_index",
    "question_status",
]


def clamp_index(index: int, total: int) -> int:
    if total <= 0:
        return 0
    return max(0, min(index, total - 1))


def next_index(index: int, total: int) -> int:
    return clamp_index(index + 1, total)


def previous_index(index: int, total: int) -> int:
    return clamp_index(index - 1, total)


def question_status(
    question_id: str,
    *,
    status: SessionStatus,
    catalog: Catalog,
    answers: AnswerMap,
    results: Sequence[QuestionResult],
) -> QuestionStatus:
    """Return the display status of ``question_id``.

    Before the quiz ends a question is ``ANSWERED`` when it has a non-empty
    selection. Afterwards the cached scoring result is authoritative; the
    status is never recomputed from the answer map.
    """

    if not any(question.id == question_id for question in catalog):
        return QuestionStatus.UNANSWERED
    if not status.is_terminal:
        if answers.get(question_id):
            return QuestionStatus.ANSWERED
        return QuestionStatus.UNANSWERED
    for result in results:
        if result.id == question_id:
            if result.is_correct:
                return QuestionStatus.CORRECT
            return QuestionStatus.INCORRECT
    return QuestionStatus.INCORRECT
