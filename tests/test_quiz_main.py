from __future__ import annotations

import io
import logging

import pytest
from rich.console import Console

from fixtures import three_question_records
from timed_quiz.quiz import _main


@pytest.fixture
def scripted_console(monkeypatch):
    """Replace the Rich console used by ``quiz play`` with a scripted one."""

    consoles = []

    def factory(commands):
        iterator = iter(commands)

        class ScriptedConsole(Console):
            def __init__(self, *args, **kwargs):
                super().__init__(record=True, width=100, file=io.StringIO())
                consoles.append(self)

            def input(self, *args, **kwargs):  # noqa: A003
                return next(iterator)

        monkeypatch.setattr(_main, "Console", ScriptedConsole)
        return consoles

    yield factory
    logger = logging.getLogger("timed_quiz")
    for handler in list(logger.handlers):
        handler.close()
        logger.removeHandler(handler)


def test_check_main_lists_questions(workspace, capsys):
    path = workspace.write_jsonl("bank.jsonl", three_question_records())

    code = _main.check_main([str(path)])

    out = capsys.readouterr().out
    assert code == 0
    assert "q2" in out
    assert "multiple_choice" in out
    assert "3 question(s) OK." in out


def test_check_main_reports_invalid_catalog(workspace, capsys):
    path = workspace.write_jsonl("bank.jsonl", [{"id": "q1"}])

    code = _main.check_main([str(path)])

    assert code == 2
    assert "missing its text" in capsys.readouterr().err


def test_check_main_reports_unreadable_catalog(tmp_path, capsys):
    path = tmp_path / "bank.json"
    path.write_bytes(b"\xff\xfe\x00")

    code = _main.check_main([str(path)])

    assert code == 2
    assert "Cannot read catalog" in capsys.readouterr().err


def test_check_main_empty_catalog(workspace, capsys):
    path = workspace.write_json("empty.json", [])

    assert _main.check_main([str(path)]) == 1
    assert "Catalog is empty." in capsys.readouterr().out


def test_play_main_runs_console_session(workspace, tmp_path, scripted_console):
    path = workspace.write_jsonl("bank.jsonl", three_question_records())
    consoles = scripted_console(["a", "n", "a", "c", "n", "b", "s", "q"])
    home = tmp_path / "ws"

    code = _main.play_main([str(path), "--workspace", str(home)])

    assert code == 0
    rendered = consoles[0].export_text()
    assert "Final score: 100.00%" in rendered
    log_text = (home / "logs" / "quiz.log").read_text(encoding="utf-8")
    assert "Quiz finished" in log_text


def test_play_main_uses_configured_catalog(
    workspace, tmp_path, scripted_console
):
    home = tmp_path / "ws"
    catalog = workspace.write_jsonl("bank.jsonl", three_question_records())
    workspace.write_config(
        "ws/config/quiz.toml", quiz={"catalog": str(catalog)}
    )
    consoles = scripted_console(["q"])

    code = _main.play_main(["--workspace", str(home)])

    assert code == 0
    assert "Question 1" in consoles[0].export_text()


def test_play_main_without_catalog(tmp_path, capsys):
    code = _main.play_main(["--workspace", str(tmp_path / "ws")])

    assert code == 2
    assert "no catalog given" in capsys.readouterr().err


def test_play_main_rejects_bad_config(tmp_path, capsys):
    with pytest.raises(SystemExit) as excinfo:
        _main.play_main(
            ["--workspace", str(tmp_path / "ws"), "--duration", "0"]
        )

    assert excinfo.value.code == 2
    assert "positive integer" in capsys.readouterr().err


def test_run_main_refuses_empty_catalog(workspace, tmp_path, capsys):
    path = workspace.write_json("empty.json", {"questions": []})

    code = _main.run_main([str(path), "--workspace", str(tmp_path / "ws")])

    assert code == 1
    assert "Question catalog is empty." in capsys.readouterr().err
