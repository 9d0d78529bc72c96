from .catalog import (
    build_catalog,
    load_catalog,
    read_jsonl,
    sample_catalog,
    write_jsonl,
)
from .models import (
    AnswerOption,
    CatalogError,
    Question,
    QuestionKind,
    QuestionResult,
    QuestionStatus,
    SessionStatus,
)
from .scoring import PASS_THRESHOLD, ScoreReport, score
from .session import (
    DEFAULT_DURATION_SECONDS,
    QuizSession,
    SessionCommand,
    SessionState,
    apply_command,
    initial_state,
)
from .timer import AsyncioTicker, CountdownTimer, PollingTicker, format_time
from .console import run_console_session

__all__ = [
    "build_catalog",
    "load_catalog",
    "read_jsonl",
    "sample_catalog",
    "write_jsonl",
    "AnswerOption",
    "CatalogError",
    "Question",
    "QuestionKind",
    "QuestionResult",
    "QuestionStatus",
    "SessionStatus",
    "PASS_THRESHOLD",
    "ScoreReport",
    "score",
    "DEFAULT_DURATION_SECONDS",
    "QuizSession",
    "SessionCommand",
    "SessionState",
    "apply_command",
    "initial_state",
    "AsyncioTicker",
    "CountdownTimer",
    "PollingTicker",
    "format_time",
    "run_console_session",
]
