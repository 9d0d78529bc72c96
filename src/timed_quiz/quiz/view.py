"""Textual front end for a timed quiz session."""

from __future__ import annotations

import logging
from typing import Callable, Optional

from rich.console import RenderableType
from rich.text import Text
from textual.app import App, ComposeResult
from textual.containers import Horizontal, Vertical, VerticalScroll
from textual.css.query import NoMatches
from textual.timer import Timer
from textual.widgets import Button, Static

from .models import Catalog, SessionStatus
from .render import (
    TIME_UP_MESSAGE,
    render_question,
    render_results,
    render_review,
    render_timer,
    sidebar_label,
)
from .scoring import PASS_THRESHOLD
from .session import DEFAULT_DURATION_SECONDS, QuizSession, TickerFactory
from .timer import TickCallback, format_time

__all__ = ["QuizApp", "TextualTicker"]


class TextualTicker:
    """Ticker backed by ``set_interval`` on a Textual app or widget."""

    def __init__(self, host: App, interval: float = 1.0) -> None:
        self._host = host
        self._interval = interval
        self._timer: Optional[Timer] = None

    @property
    def running(self) -> bool:
        return self._timer is not None

    def start(self, callback: TickCallback) -> None:
        self.stop()
        self._timer = self._host.set_interval(self._interval, callback)

    def stop(self) -> None:
        if self._timer is not None:
            self._timer.stop()
            self._timer = None


class QuizApp(App):
    CSS_PATH = None
    CSS = """
#timer { height: 1; content-align: right middle; padding: 0 2; }
#sidebar { width: 24; border-right: solid $accent; }
#sidebar Button { width: 100%; min-width: 0; }
#main { padding: 0 2; }
#stage { height: 1fr; }
#nav { height: 3; }
"""
    BINDINGS = [
        ("enter", "begin", "Start"),
        ("n", "next", "Next"),
        ("p", "prev", "Prev"),
        ("s", "submit", "Submit"),
        ("o", "overview", "Overview"),
        ("r", "retake", "Retake"),
        ("q", "quit", "Quit"),
    ] + [
        (str(key), f"choose({key - 1})", f"Option {key}")
        for key in range(1, 10)
    ]

    def __init__(
        self,
        catalog: Catalog,
        *,
        duration_seconds: int = DEFAULT_DURATION_SECONDS,
        pass_threshold: float = PASS_THRESHOLD,
        ticker_factory: Optional[TickerFactory] = None,
        logger: Optional[logging.Logger] = None,
        on_terminal: Optional[Callable[[SessionStatus], None]] = None,
    ) -> None:
        super().__init__()
        self.session = QuizSession(
            catalog,
            duration_seconds=duration_seconds,
            pass_threshold=pass_threshold,
            ticker_factory=ticker_factory or (lambda: TextualTicker(self)),
            logger=logger,
        )
        self._on_terminal = on_terminal
        self._view_ready = False
        self.session.add_change_listener(lambda _state: self._refresh_view())
        self.session.add_terminal_listener(self._handle_terminal)

    def compose(self) -> ComposeResult:
        yield Static("", id="timer")
        with Horizontal():
            with VerticalScroll(id="sidebar"):
                for position in range(len(self.session.catalog)):
                    yield Button(
                        sidebar_label(self.session, position),
                        id=f"goto-{position}",
                    )
            with Vertical(id="main"):
                yield Static(self.stage_renderable(), id="stage")
                with Horizontal(id="nav"):
                    yield Button("Start", id="start", variant="primary")
                    yield Button("Prev", id="prev")
                    yield Button("Next", id="next")
                    yield Button("Submit", id="submit", variant="success")
                    yield Button("Overview", id="overview")
                    yield Button("Retake", id="retake", variant="primary")

    def on_mount(self) -> None:
        self._view_ready = True
        self._refresh_view()
        if self.session.catalog:
            self.query_one("#start", Button).focus()

    def on_unmount(self) -> None:
        self._view_ready = False
        self.session.close()

    # Pure helpers (testable without running the app)

    def intro_text(self) -> str:
        total = len(self.session.catalog)
        if not total:
            return "No questions loaded."
        return (
            f"Test your knowledge! {total} question(s), "
            f"{format_time(self.session.duration)} to answer them. "
            "Press Enter or Start to begin."
        )

    def stage_renderable(self) -> RenderableType:
        status = self.session.status
        if status is SessionStatus.NOT_STARTED:
            return Text(self.intro_text(), style="bold")
        if status is SessionStatus.IN_PROGRESS:
            return render_question(self.session)
        if self.session.is_reviewing:
            return render_review(self.session)
        return render_results(self.session)

    def choose(self, position: int) -> bool:
        """Select the option at ``position`` of the current question."""

        question = self.session.current_question
        if self.session.status is not SessionStatus.IN_PROGRESS:
            return False
        if question is None:
            return False
        if not 0 <= position < len(question.options):
            return False
        self.session.select_answer(question.id, question.options[position].id)
        return True

    def visible_buttons(self) -> set[str]:
        status = self.session.status
        if status is SessionStatus.NOT_STARTED:
            return {"start"} if self.session.catalog else set()
        if status is SessionStatus.IN_PROGRESS:
            return {"prev", "next", "submit"}
        if self.session.is_reviewing:
            return {"prev", "next", "overview", "retake"}
        return {"retake"}

    # Actions

    def action_begin(self) -> None:
        if self.session.catalog:
            self.session.start()

    def action_next(self) -> None:
        self.session.next()

    def action_prev(self) -> None:
        self.session.previous()

    def action_submit(self) -> None:
        self.session.submit()

    def action_overview(self) -> None:
        self.session.back_to_overview()

    def action_retake(self) -> None:
        if self.session.status.is_terminal:
            self.session.retake()

    def action_choose(self, position: int) -> None:
        self.choose(position)

    def on_button_pressed(self, event: Button.Pressed) -> None:
        bid = event.button.id or ""
        if bid.startswith("goto-"):
            self.session.select_for_review(int(bid.split("-", 1)[1]))
            return
        handlers = {
            "start": self.action_begin,
            "prev": self.action_prev,
            "next": self.action_next,
            "submit": self.action_submit,
            "overview": self.action_overview,
            "retake": self.action_retake,
        }
        handler = handlers.get(bid)
        if handler is not None:
            handler()

    # Internals

    def _handle_terminal(self, status: SessionStatus) -> None:
        if self._on_terminal is not None:
            self._on_terminal(status)
        if self._view_ready and status is SessionStatus.TIMED_OUT:
            self.notify(TIME_UP_MESSAGE, severity="warning")

    def _refresh_view(self) -> None:
        if not self._view_ready:
            return
        try:
            stage = self.query_one("#stage", Static)
            timer = self.query_one("#timer", Static)
        except NoMatches:
            return
        stage.update(self.stage_renderable())
        if self.session.status is SessionStatus.IN_PROGRESS:
            timer.update(render_timer(self.session))
        else:
            timer.update("")
        for position in range(len(self.session.catalog)):
            button = self.query_one(f"#goto-{position}", Button)
            button.label = sidebar_label(self.session, position)
        visible = self.visible_buttons()
        for bid in ("start", "prev", "next", "submit", "overview", "retake"):
            self.query_one(f"#{bid}", Button).display = bid in visible
