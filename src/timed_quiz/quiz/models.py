"""Immutable domain types shared by the quiz session engine.

Questions and answer options are frozen dataclasses so a catalog can be
shared by reference for the lifetime of a session without defensive copies.
Construction validates the answer-key invariants eagerly; a malformed
question is rejected with :class:`CatalogError` before any session sees it.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Mapping, Optional, Tuple

__all__ = [
    "AnswerMap",
    "AnswerOption",
    "Catalog",
    "CatalogError",
    "Question",
    "QuestionKind",
    "QuestionResult",
    "QuestionStatus",
    "SessionStatus",
]


class CatalogError(RuntimeError):
    """Raised when a question or catalog violates its invariants."""


class QuestionKind(Enum):
    """How selections for a question are recorded and scored."""

    SINGLE_CHOICE = "single_choice"
    MULTIPLE_CHOICE = "multiple_choice"

    @classmethod
    def from_value(cls, value: object) -> "QuestionKind":
        if isinstance(value, QuestionKind):
            return value
        normalized = str(value or "").strip().lower().replace("-", "_")
        for member in cls:
            if member.value == normalized:
                return member
        expected = ", ".join(member.value for member in cls)
        raise CatalogError(
            f"Unknown question kind '{value}'. Expected one of: {expected}."
        )


class SessionStatus(Enum):
    """Lifecycle states of a quiz session."""

    NOT_STARTED = "not_started"
    IN_PROGRESS = "in_progress"
    SUBMITTED = "submitted"
    TIMED_OUT = "timed_out"

    @property
    def is_terminal(self) -> bool:
        return self in (SessionStatus.SUBMITTED, SessionStatus.TIMED_OUT)


class QuestionStatus(Enum):
    """Per-question display status derived from the session."""

    UNANSWERED = "unanswered"
    ANSWERED = "answered"
    CORRECT = "correct"
    INCORRECT = "incorrect"


@dataclass(frozen=True)
class AnswerOption:
    """A selectable option of a question."""

    id: str
    text: str


@dataclass(frozen=True)
class Question:
    """Immutable quiz question with its answer key."""

    id: str
    text: str
    options: Tuple[AnswerOption, ...]
    kind: QuestionKind
    correct_answer_ids: frozenset[str]
    explanation: Optional[str] = None

    def __post_init__(self) -> None:
        if not self.id:
            raise CatalogError("Question id must be a non-empty string.")
        if isinstance(self.correct_answer_ids, str):
            raise CatalogError(
                f"Question '{self.id}' must list its correct answer ids."
            )
        object.__setattr__(self, "options", tuple(self.options))
        object.__setattr__(
            self, "correct_answer_ids", frozenset(self.correct_answer_ids)
        )
        if not self.options:
            raise CatalogError(f"Question '{self.id}' has no options.")
        option_ids = [option.id for option in self.options]
        if len(set(option_ids)) != len(option_ids):
            raise CatalogError(
                f"Question '{self.id}' has duplicate option ids."
            )
        unknown = sorted(self.correct_answer_ids - set(option_ids))
        if unknown:
            raise CatalogError(
                f"Question '{self.id}' marks unknown option(s) as correct: "
                f"{', '.join(unknown)}."
            )
        count = len(self.correct_answer_ids)
        if self.kind is QuestionKind.SINGLE_CHOICE and count != 1:
            raise CatalogError(
                f"Single-choice question '{self.id}' must have exactly one "
                f"correct answer, found {count}."
            )
        if self.kind is QuestionKind.MULTIPLE_CHOICE and count == 0:
            raise CatalogError(
                f"Multiple-choice question '{self.id}' must have at least "
                "one correct answer."
            )

    def option_for(self, option_id: str) -> Optional[AnswerOption]:
        for option in self.options:
            if option.id == option_id:
                return option
        return None

    def has_option(self, option_id: str) -> bool:
        return self.option_for(option_id) is not None


@dataclass(frozen=True)
class QuestionResult:
    """Scored outcome for a single catalog question."""

    question: Question
    user_selected_answers: Tuple[str, ...]
    is_correct: bool

    @property
    def id(self) -> str:
        return self.question.id

    @property
    def text(self) -> str:
        return self.question.text

    @property
    def explanation(self) -> Optional[str]:
        return self.question.explanation


Catalog = Tuple[Question, ...]
AnswerMap = Mapping[str, Tuple[str, ...]]
