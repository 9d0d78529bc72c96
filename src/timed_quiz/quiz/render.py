"""Rich renderables for the quiz screens.

Both the console runner and the Textual app project a
:class:`~timed_quiz.quiz.session.QuizSession` through these helpers; none of
them mutate the session.
"""

from __future__ import annotations

from rich import box
from rich.console import Group, RenderableType
from rich.panel import Panel
from rich.table import Table
from rich.text import Text

from .models import Question, QuestionKind, QuestionStatus, SessionStatus
from .session import QuizSession
from .timer import format_time

__all__ = [
    "STATUS_MARKERS",
    "TIME_UP_MESSAGE",
    "render_progress",
    "render_question",
    "render_results",
    "render_review",
    "render_timer",
    "sidebar_label",
]

STATUS_MARKERS = {
    QuestionStatus.UNANSWERED: ("○", "dim"),
    QuestionStatus.ANSWERED: ("●", "cyan"),
    QuestionStatus.CORRECT: ("✓", "bold green"),
    QuestionStatus.INCORRECT: ("✗", "bold red"),
}

TIME_UP_MESSAGE = "Time is up! Your quiz was submitted automatically."


def render_timer(session: QuizSession) -> Text:
    remaining = session.time_remaining
    style = "bold red" if remaining <= 60 else "bold"
    return Text.assemble(
        ("Time left ", "dim"), (format_time(remaining), style)
    )


def render_progress(session: QuizSession) -> Text:
    """One status marker per question, the current one underlined."""

    progress = Text()
    for position, question in enumerate(session.catalog):
        marker, style = STATUS_MARKERS[session.question_status(question.id)]
        if position == session.current_index:
            style = f"{style} underline"
        progress.append(marker, style=style)
        progress.append(" ")
    return progress


def sidebar_label(session: QuizSession, position: int) -> str:
    question = session.catalog[position]
    marker, _ = STATUS_MARKERS[session.question_status(question.id)]
    return f"{marker} Question {position + 1}"


def render_question(session: QuizSession) -> RenderableType:
    """Render the current question for answering."""

    question = session.current_question
    if question is None:
        return Text("No questions loaded.", style="yellow")
    selected = session.selection_for(question.id)
    header = Text.assemble(
        (f"Question {session.current_index + 1}", "bold cyan"),
        (f" / {len(session.catalog)}", "dim"),
    )
    options = Table(show_header=False, box=box.SIMPLE, expand=True)
    options.add_column("Key", justify="center", style="cyan")
    options.add_column("Option")
    for option in question.options:
        chosen = option.id in selected
        row = Text("● " if chosen else "  ")
        row += Text(option.text, style="bold green" if chosen else "")
        options.add_row(option.id, row)
    return Group(
        header,
        Text(question.text, style="bold"),
        Text(_kind_hint(question), style="dim italic"),
        options,
    )


def render_results(session: QuizSession) -> RenderableType:
    """Render the results overview shown after the quiz ends."""

    passed = session.passed
    accent = "green" if passed else "red"
    parts: list[RenderableType] = []
    if session.status is SessionStatus.TIMED_OUT:
        parts.append(Panel(TIME_UP_MESSAGE, border_style="red"))
    if passed:
        verdict = "Congratulations, you passed!"
    else:
        verdict = "Sorry, you did not pass."
    parts.append(Text(verdict, style=f"bold {accent}"))
    parts.append(
        Text(
            f"You answered {session.correct_count} of {len(session.catalog)} "
            "questions correctly."
        )
    )
    parts.append(
        Text.assemble(
            ("Final score: ", "bold"),
            (f"{session.score_percentage:.2f}%", f"bold {accent}"),
        )
    )
    table = Table(title="Review", box=box.SIMPLE, expand=True)
    table.add_column("#", justify="right")
    table.add_column("Question", overflow="fold")
    table.add_column("Result", justify="center")
    for position, result in enumerate(session.results, start=1):
        marker = "✓" if result.is_correct else "✗"
        style = "green" if result.is_correct else "red"
        table.add_row(str(position), result.text, Text(marker, style=style))
    parts.append(table)
    return Panel(Group(*parts), title="Quiz Results", border_style=accent)


def render_review(session: QuizSession) -> RenderableType:
    """Render the current question annotated with the scored outcome."""

    question = session.current_question
    if question is None:
        return Text("No questions loaded.", style="yellow")
    status = session.question_status(question.id)
    selected = session.selection_for(question.id)
    options = Table(show_header=False, box=box.SIMPLE, expand=True)
    options.add_column("Key", justify="center", style="cyan")
    options.add_column("Option")
    options.add_column("", justify="right")
    for option in question.options:
        is_key = option.id in question.correct_answer_ids
        chosen = option.id in selected
        style = "green" if is_key else ("red" if chosen else "")
        note = []
        if chosen:
            note.append("your answer")
        if is_key:
            note.append("correct")
        options.add_row(
            option.id, Text(option.text, style=style), Text(", ".join(note))
        )
    marker, marker_style = STATUS_MARKERS[status]
    parts: list[RenderableType] = [
        Text.assemble(
            (f"Question {session.current_index + 1}", "bold cyan"),
            (f" / {len(session.catalog)} ", "dim"),
            (marker, marker_style),
        ),
        Text(question.text, style="bold"),
        options,
    ]
    if question.explanation:
        correct = status is QuestionStatus.CORRECT
        parts.append(
            Panel(
                question.explanation,
                title="Explanation",
                border_style="green" if correct else "red",
            )
        )
    return Group(*parts)


def _kind_hint(question: Question) -> str:
    if question.kind is QuestionKind.MULTIPLE_CHOICE:
        return "Select all that apply."
    return "Select one answer."
