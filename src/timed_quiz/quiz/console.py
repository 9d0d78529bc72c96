"""Rich-powered console runner for a timed quiz.

The loop renders the session, reads one command per prompt from an injected
input provider and forwards it to a :class:`QuizSession`. Time spent waiting
for input is converted into countdown ticks by a :class:`PollingTicker`, so a
quiz that runs out of time is submitted on the next prompt.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Callable, Literal, Optional

from rich.console import Console
from rich.panel import Panel
from rich.text import Text

from .models import Catalog, SessionStatus
from .render import (
    render_progress,
    render_question,
    render_results,
    render_review,
    render_timer,
)
from .scoring import PASS_THRESHOLD
from .session import DEFAULT_DURATION_SECONDS, QuizSession, SessionState
from .timer import PollingTicker

InputProvider = Callable[[], str]
ConsoleCommandType = Literal[
    "select",
    "next",
    "prev",
    "submit",
    "quit",
    "review",
    "overview",
    "retake",
]


@dataclass(frozen=True)
class ConsoleCommand:
    """Normalized command parsed from console input."""

    type: ConsoleCommandType
    argument: Optional[str] = None


def parse_console_command(raw: Optional[str]) -> Optional[ConsoleCommand]:
    """Parse raw user input into a structured command."""

    if raw is None:
        return None
    text = raw.strip()
    if not text:
        return None
    head, _, rest = text.partition(" ")
    lowered = head.lower()
    rest = rest.strip()
    if lowered in {"n", "next"}:
        return ConsoleCommand("next")
    if lowered in {"p", "prev", "previous"}:
        return ConsoleCommand("prev")
    if lowered in {"s", "submit"}:
        return ConsoleCommand("submit")
    if lowered in {"q", "quit", "exit"}:
        return ConsoleCommand("quit")
    if lowered in {"o", "overview", "back"}:
        return ConsoleCommand("overview")
    if lowered == "retake":
        return ConsoleCommand("retake")
    if lowered in {"r", "review"}:
        return ConsoleCommand("review", rest) if rest.isdigit() else None
    # Escape hatch for option ids that collide with command keywords.
    if lowered == "pick":
        return ConsoleCommand("select", rest) if rest else None
    if rest:
        return None
    return ConsoleCommand("select", head)


def run_console_session(
    catalog: Catalog,
    console: Console,
    input_provider: InputProvider,
    *,
    duration_seconds: int = DEFAULT_DURATION_SECONDS,
    pass_threshold: float = PASS_THRESHOLD,
    ticker: Optional[PollingTicker] = None,
    logger: Optional[logging.Logger] = None,
    on_terminal: Optional[Callable[[SessionStatus], None]] = None,
) -> SessionState:
    """Run an interactive quiz and return the final session snapshot."""

    polling = ticker or PollingTicker()
    session = QuizSession(
        catalog,
        duration_seconds=duration_seconds,
        pass_threshold=pass_threshold,
        ticker_factory=lambda: polling,
        logger=logger,
    )
    if not session.catalog:
        console.print(
            Panel(
                "Question catalog is empty.",
                title="Quiz",
                border_style="yellow",
            )
        )
        return session.snapshot
    if on_terminal is not None:
        session.add_terminal_listener(on_terminal)

    with session:
        session.start()
        while True:
            polling.poll()
            _render(console, session)
            try:
                raw = input_provider()
            except (EOFError, KeyboardInterrupt, StopIteration):
                console.print("\n[bold yellow]Session interrupted.[/]")
                break
            polling.poll()
            command = parse_console_command(raw)
            if command is None:
                console.print("[red]Unrecognized command. Try again.[/]")
                continue
            if _apply_command(command, session, console) == "quit":
                break
    return session.snapshot


def _apply_command(
    command: ConsoleCommand,
    session: QuizSession,
    console: Console,
) -> Optional[str]:
    terminal = session.status.is_terminal
    if command.type == "quit":
        if not terminal:
            console.print("\n[bold yellow]Ending quiz without submission.[/]")
        return "quit"
    if command.type == "select":
        question = session.current_question
        option_id = command.argument or ""
        if terminal:
            console.print("[yellow]The quiz is over; answers are locked.[/]")
        elif question is None or not question.has_option(option_id):
            console.print(
                "[red]'%s' is not a valid option for this question.[/red]"
                % option_id,
            )
        else:
            session.select_answer(question.id, option_id)
        return None
    if command.type == "next":
        session.next()
    elif command.type == "prev":
        session.previous()
    elif command.type == "submit":
        session.submit()
    elif command.type == "review" and command.argument:
        session.select_for_review(int(command.argument) - 1)
    elif command.type == "overview":
        session.back_to_overview()
    elif command.type == "retake":
        session.retake()
    return None


def _render(console: Console, session: QuizSession) -> None:
    console.print()
    if session.status is SessionStatus.IN_PROGRESS:
        console.rule(render_timer(session))
        console.print(render_progress(session))
        console.print(render_question(session))
        console.print(
            Text(
                f"Answered {session.answered_count()}/{len(session.catalog)}"
                " | "
                "Commands: <option id>, n (next), p (prev), s (submit), "
                "q (quit)",
                style="dim",
            )
        )
        return
    if session.is_reviewing:
        console.print(render_progress(session))
        console.print(render_review(session))
        hint = "Commands: n, p, o (overview), retake, q"
    else:
        console.print(render_results(session))
        hint = "Commands: r <number> (review), retake, q"
    console.print(Text(hint, style="dim"))

