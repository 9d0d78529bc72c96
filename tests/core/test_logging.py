from __future__ import annotations

import json
import logging
from pathlib import Path

import pytest

from timed_quiz.core import logging as core_logging


def _close(logger: logging.Logger) -> None:
    for handler in list(logger.handlers):
        handler.close()
        logger.removeHandler(handler)


def test_configure_logger_writes_json(tmp_path):
    log_dir = tmp_path / "logs"
    logger, log_path = core_logging.configure_logger(
        "timed_quiz.test",
        log_dir=log_dir,
        level="INFO",
        filename="test.log",
    )

    logger.info("Quiz started", extra={"question_count": 3})
    logger.debug("hidden at INFO")

    class _Helper:
        def __repr__(self):  # noqa: D401
            return "helper"

    try:
        raise ValueError("boom")
    except ValueError:
        logger.exception(
            "with error",
            extra={
                "answers": {"q1": ("a", "b")},
                "path": Path(log_dir),
                "obj": _Helper(),
            },
        )
    for handler in logger.handlers:
        handler.flush()

    assert log_path == log_dir / "test.log"
    lines = log_path.read_text(encoding="utf-8").strip().splitlines()
    assert len(lines) == 2
    first = json.loads(lines[0])
    assert first["message"] == "Quiz started"
    assert first["level"] == "INFO"
    assert first["logger"] == "timed_quiz.test"
    assert first["extra"] == {"question_count": 3}

    payload = json.loads(lines[-1])
    assert "ValueError: boom" in payload["exception"]
    assert payload["extra"]["answers"] == {"q1": ["a", "b"]}
    assert payload["extra"]["path"] == str(log_dir)
    assert payload["extra"]["obj"] == "helper"

    _close(logger)


def test_configure_logger_default_filename_and_reuse(tmp_path):
    logger, path = core_logging.configure_logger(
        "timed_quiz.test_reuse", log_dir=tmp_path / "logs"
    )
    again, second_path = core_logging.configure_logger(
        "timed_quiz.test_reuse", log_dir=tmp_path / "other", level="ERROR"
    )

    assert again is logger
    assert path.name == "quiz.log"
    assert second_path == path
    file_handlers = [
        handler
        for handler in logger.handlers
        if getattr(handler, "_timed_quiz_file", False)
    ]
    assert len(file_handlers) == 1
    assert file_handlers[0].level == logging.ERROR

    _close(logger)


def test_configure_logger_toggles_console_handler(tmp_path):
    def console_handlers(logger):
        return [
            handler
            for handler in logger.handlers
            if getattr(handler, "_timed_quiz_console", False)
        ]

    logger, _ = core_logging.configure_logger(
        "timed_quiz.test_verbose",
        log_dir=tmp_path / "logs",
        verbose=True,
        filename="verbose.log",
    )
    assert len(console_handlers(logger)) == 1

    core_logging.configure_logger(
        "timed_quiz.test_verbose",
        log_dir=tmp_path / "logs",
        verbose=False,
        filename="verbose.log",
    )
    assert console_handlers(logger) == []

    _close(logger)


def test_unknown_level_falls_back_to_info(tmp_path):
    logger, _ = core_logging.configure_logger(
        "timed_quiz.test_level", log_dir=tmp_path / "logs", level="chatty"
    )

    assert all(handler.level == logging.INFO for handler in logger.handlers)

    _close(logger)


def test_unwritable_log_dir_falls_back(tmp_path, monkeypatch):
    fallback = tmp_path / "fallback"
    real_mkdir = Path.mkdir

    def guarded_mkdir(self, *args, **kwargs):
        if self.name == "locked":
            raise PermissionError("denied")
        return real_mkdir(self, *args, **kwargs)

    monkeypatch.setattr(Path, "mkdir", guarded_mkdir)
    monkeypatch.setattr(core_logging, "_fallback_log_dir", lambda: fallback)

    logger, path = core_logging.configure_logger(
        "timed_quiz.test_fallback", log_dir=tmp_path / "locked"
    )

    assert path == fallback / "quiz.log"

    _close(logger)


def test_json_formatter_omits_empty_extra():
    record = logging.LogRecord(
        "timed_quiz", logging.WARNING, __file__, 1, "plain %s", ("text",), None
    )

    payload = json.loads(core_logging.JsonLogFormatter().format(record))

    assert payload["message"] == "plain text"
    assert payload["level"] == "WARNING"
    assert "extra" not in payload
    assert "exception" not in payload


@pytest.mark.parametrize(
    ("value", "expected"),
    [
        (None, None),
        (frozenset({"a"}), ["a"]),
        ({1: Path("x")}, {"1": "x"}),
    ],
)
def test_jsonable_conversions(value, expected):
    assert core_logging._jsonable(value) == expected
