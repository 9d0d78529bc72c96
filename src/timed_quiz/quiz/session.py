"""Quiz session state machine.

The session is modelled as an immutable :class:`SessionState` value and a
pure reducer, :func:`apply_command`, that maps ``(state, command)`` to the
next state. Commands that are not valid for the current state return the
input state unchanged instead of raising.

:class:`QuizSession` wraps the reducer for interactive hosts. It owns the
countdown timer for the running attempt, notifies listeners about changes
and terminal transitions, and logs the lifecycle.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field, replace
from types import MappingProxyType
from typing import Callable, Dict, List, Literal, Mapping, Optional, Tuple

from . import navigation
from .models import (
    Catalog,
    Question,
    QuestionKind,
    QuestionResult,
    QuestionStatus,
    SessionStatus,
)
from .scoring import PASS_THRESHOLD, score
from .timer import CountdownTimer, Ticker

__all__ = [
    "DEFAULT_DURATION_SECONDS",
    "CommandType",
    "QuizSession",
    "SessionCommand",
    "SessionState",
    "apply_command",
    "initial_state",
]

DEFAULT_DURATION_SECONDS = 600

CommandType = Literal[
    "start",
    "select",
    "next",
    "prev",
    "submit",
    "expire",
    "tick",
    "review",
    "overview",
    "retake",
]

TerminalListener = Callable[[SessionStatus], None]
ChangeListener = Callable[["SessionState"], None]
TickerFactory = Callable[[], Ticker]


@dataclass(frozen=True)
class SessionCommand:
    """A single command delivered to the session."""

    type: CommandType
    question_id: Optional[str] = None
    option_id: Optional[str] = None
    index: Optional[int] = None


@dataclass(frozen=True)
class SessionState:
    """Snapshot of a quiz attempt.

    ``answers`` is never mutated in place; every change produces a new
    dictionary and a new state.
    """

    status: SessionStatus = SessionStatus.NOT_STARTED
    answers: Dict[str, Tuple[str, ...]] = field(default_factory=dict)
    current_index: int = 0
    time_remaining: int = DEFAULT_DURATION_SECONDS
    results: Tuple[QuestionResult, ...] = ()
    correct_count: int = 0
    score_percentage: float = 0.0
    passed: bool = False
    is_reviewing: bool = False


def initial_state(duration: int = DEFAULT_DURATION_SECONDS) -> SessionState:
    return SessionState(time_remaining=duration)


def apply_command(
    state: SessionState,
    command: SessionCommand,
    catalog: Catalog,
    *,
    duration: int = DEFAULT_DURATION_SECONDS,
    pass_threshold: float = PASS_THRESHOLD,
) -> SessionState:
    """Return the state that follows ``state`` after ``command``.

    The same object is returned when the command is ignored.
    """

    kind = command.type
    status = state.status
    if kind == "start":
        if status is not SessionStatus.NOT_STARTED:
            return state
        return _started(duration)
    if kind == "retake":
        return _started(duration)
    if kind == "select":
        return _select(state, command, catalog)
    if kind in ("submit", "expire"):
        if status is not SessionStatus.IN_PROGRESS:
            return state
        final = (
            SessionStatus.SUBMITTED
            if kind == "submit"
            else SessionStatus.TIMED_OUT
        )
        return _finish(state, final, catalog, pass_threshold)
    if kind == "tick":
        if status is not SessionStatus.IN_PROGRESS:
            return state
        remaining = max(0, state.time_remaining - 1)
        if remaining == 0:
            # Running out of time finishes the attempt like an expire.
            return _finish(
                replace(state, time_remaining=0),
                SessionStatus.TIMED_OUT,
                catalog,
                pass_threshold,
            )
        return replace(state, time_remaining=remaining)
    if kind in ("next", "prev"):
        if status is SessionStatus.NOT_STARTED:
            return state
        if kind == "next":
            move = navigation.next_index
        else:
            move = navigation.previous_index
        index = move(state.current_index, len(catalog))
        if index == state.current_index:
            return state
        return replace(state, current_index=index)
    if kind == "review":
        return _review(state, command.index, len(catalog))
    if kind == "overview":
        if not status.is_terminal or not state.is_reviewing:
            return state
        return replace(state, is_reviewing=False)
    return state


def _started(duration: int) -> SessionState:
    return replace(initial_state(duration), status=SessionStatus.IN_PROGRESS)


def _select(
    state: SessionState, command: SessionCommand, catalog: Catalog
) -> SessionState:
    if state.status is not SessionStatus.IN_PROGRESS:
        return state
    question = _find_question(catalog, command.question_id)
    option_id = command.option_id
    if question is None or option_id is None:
        return state
    if not question.has_option(option_id):
        return state
    existing = state.answers.get(question.id, ())
    if question.kind is QuestionKind.SINGLE_CHOICE:
        selection: Tuple[str, ...] = (option_id,)
    elif option_id in existing:
        selection = tuple(item for item in existing if item != option_id)
    else:
        selection = existing + (option_id,)
    answers = dict(state.answers)
    answers[question.id] = selection
    return replace(state, answers=answers)


def _finish(
    state: SessionState,
    final: SessionStatus,
    catalog: Catalog,
    pass_threshold: float,
) -> SessionState:
    report = score(catalog, state.answers, pass_threshold=pass_threshold)
    return replace(
        state,
        status=final,
        results=report.results,
        correct_count=report.correct_count,
        score_percentage=report.percentage,
        passed=report.passed,
        is_reviewing=False,
    )


def _review(
    state: SessionState, index: Optional[int], total: int
) -> SessionState:
    if state.status is SessionStatus.NOT_STARTED or index is None:
        return state
    if not 0 <= index < total:
        return state
    reviewing = state.is_reviewing or state.status.is_terminal
    if index == state.current_index and reviewing == state.is_reviewing:
        return state
    return replace(state, current_index=index, is_reviewing=reviewing)


def _find_question(
    catalog: Catalog, question_id: Optional[str]
) -> Optional[Question]:
    if question_id is None:
        return None
    for question in catalog:
        if question.id == question_id:
            return question
    return None


class QuizSession:
    """Interactive wrapper around :func:`apply_command`.

    ``ticker_factory`` supplies a fresh :class:`~timed_quiz.quiz.timer.Ticker`
    for every attempt. Without one the session is untimed and only advances
    its clock through explicit ``tick`` commands.
    """

    def __init__(
        self,
        catalog: Catalog,
        *,
        duration_seconds: int = DEFAULT_DURATION_SECONDS,
        pass_threshold: float = PASS_THRESHOLD,
        ticker_factory: Optional[TickerFactory] = None,
        logger: Optional[logging.Logger] = None,
    ) -> None:
        if duration_seconds < 0:
            raise ValueError("duration_seconds must be >= 0")
        self._catalog: Catalog = tuple(catalog)
        self._duration = duration_seconds
        self._pass_threshold = pass_threshold
        self._ticker_factory = ticker_factory
        self._logger = logger or logging.getLogger("timed_quiz.session")
        self._state = initial_state(duration_seconds)
        self._timer: Optional[CountdownTimer] = None
        self._terminal_listeners: List[TerminalListener] = []
        self._change_listeners: List[ChangeListener] = []

    def __enter__(self) -> "QuizSession":
        return self

    def __exit__(self, *exc_info: object) -> None:
        self.close()

    # Listeners -------------------------------------------------------

    def add_terminal_listener(self, listener: TerminalListener) -> None:
        self._terminal_listeners.append(listener)

    def add_change_listener(self, listener: ChangeListener) -> None:
        self._change_listeners.append(listener)

    # Commands --------------------------------------------------------

    def dispatch(self, command: SessionCommand) -> SessionState:
        previous = self._state
        state = apply_command(
            previous,
            command,
            self._catalog,
            duration=self._duration,
            pass_threshold=self._pass_threshold,
        )
        if state is previous:
            self._logger.debug(
                "Ignored session command",
                extra={
                    "command": command.type,
                    "status": previous.status.value,
                },
            )
            return state
        self._state = state
        if command.type in ("start", "retake"):
            self._logger.info(
                "Quiz started",
                extra={
                    "question_count": len(self._catalog),
                    "duration_seconds": self._duration,
                    "retake": command.type == "retake",
                },
            )
            self._notify_change()
            self._replace_timer()
        elif state.status.is_terminal and not previous.status.is_terminal:
            self._stop_timer()
            self._logger.info(
                "Quiz finished",
                extra={
                    "status": state.status.value,
                    "correct_count": state.correct_count,
                    "question_count": len(self._catalog),
                    "score_percentage": round(state.score_percentage, 2),
                    "passed": state.passed,
                    "time_remaining": state.time_remaining,
                },
            )
            for listener in list(self._terminal_listeners):
                listener(state.status)
            self._notify_change()
        else:
            self._notify_change()
        return self._state

    def start(self) -> None:
        self.dispatch(SessionCommand("start"))

    def select_answer(self, question_id: str, option_id: str) -> None:
        self.dispatch(
            SessionCommand(
                "select", question_id=question_id, option_id=option_id
            )
        )

    def next(self) -> None:
        self.dispatch(SessionCommand("next"))

    def previous(self) -> None:
        self.dispatch(SessionCommand("prev"))

    def submit(self) -> None:
        self.dispatch(SessionCommand("submit"))

    def expire(self) -> None:
        self.dispatch(SessionCommand("expire"))

    def tick(self) -> None:
        self.dispatch(SessionCommand("tick"))

    def select_for_review(self, index: int) -> None:
        self.dispatch(SessionCommand("review", index=index))

    def back_to_overview(self) -> None:
        self.dispatch(SessionCommand("overview"))

    def retake(self) -> None:
        self.dispatch(SessionCommand("retake"))

    def close(self) -> None:
        """Stop the countdown; safe to call repeatedly."""

        self._stop_timer()

    # Queries ---------------------------------------------------------

    @property
    def catalog(self) -> Catalog:
        return self._catalog

    @property
    def snapshot(self) -> SessionState:
        return self._state

    @property
    def status(self) -> SessionStatus:
        return self._state.status

    @property
    def current_index(self) -> int:
        return self._state.current_index

    @property
    def current_question(self) -> Optional[Question]:
        if not self._catalog:
            return None
        return self._catalog[self._state.current_index]

    @property
    def answers(self) -> Mapping[str, Tuple[str, ...]]:
        return MappingProxyType(self._state.answers)

    @property
    def time_remaining(self) -> int:
        return self._state.time_remaining

    @property
    def duration(self) -> int:
        return self._duration

    @property
    def pass_threshold(self) -> float:
        return self._pass_threshold

    @property
    def score_percentage(self) -> float:
        return self._state.score_percentage

    @property
    def passed(self) -> bool:
        return self._state.passed

    @property
    def correct_count(self) -> int:
        return self._state.correct_count

    @property
    def results(self) -> Tuple[QuestionResult, ...]:
        return self._state.results

    @property
    def is_reviewing(self) -> bool:
        return self._state.is_reviewing

    @property
    def timer(self) -> Optional[CountdownTimer]:
        return self._timer

    def selection_for(self, question_id: str) -> Tuple[str, ...]:
        return self._state.answers.get(question_id, ())

    def question_status(self, question_id: str) -> QuestionStatus:
        state = self._state
        return navigation.question_status(
            question_id,
            status=state.status,
            catalog=self._catalog,
            answers=state.answers,
            results=state.results,
        )

    def answered_count(self) -> int:
        answers = self._state.answers
        return sum(1 for selection in answers.values() if selection)

    # Internals -------------------------------------------------------

    def _notify_change(self) -> None:
        for listener in list(self._change_listeners):
            listener(self._state)

    def _replace_timer(self) -> None:
        self._stop_timer()
        if self._ticker_factory is None:
            return

        def is_current() -> bool:
            return (
                self._timer is timer
                and self._state.status is SessionStatus.IN_PROGRESS
            )

        def on_tick(_remaining: int) -> None:
            if is_current():
                self.tick()

        def on_expire() -> None:
            if self._timer is timer:
                self.expire()

        timer = CountdownTimer(
            self._duration,
            ticker=self._ticker_factory(),
            on_tick=on_tick,
            on_expire=on_expire,
            is_active=is_current,
        )
        self._timer = timer
        timer.start()

    def _stop_timer(self) -> None:
        if self._timer is not None:
            self._timer.stop()
