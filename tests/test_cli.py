from __future__ import annotations

import sys

import pytest

from fixtures import three_question_records
from timed_quiz import cli


@pytest.fixture(autouse=True)
def reset_metadata(monkeypatch):
    """Ensure metadata.version is controllable during tests."""

    def fake_version(name: str) -> str:
        assert name == "timed-quiz"
        return "0.0-test"

    monkeypatch.setattr(cli.metadata, "version", fake_version)
    yield


def test_version_command_handles_missing_package(monkeypatch, capsys):
    def missing(name: str) -> str:
        raise cli.metadata.PackageNotFoundError(name)

    monkeypatch.setattr(cli.metadata, "version", missing)
    code = cli.main(["version"])
    captured = capsys.readouterr()
    assert code == 0
    assert captured.out.strip() == "unknown"


@pytest.mark.parametrize("flag", ["version", "--version", "-V"])
def test_version_aliases(flag, capsys):
    assert cli.main([flag]) == 0
    assert capsys.readouterr().out.strip() == "0.0-test"


def test_no_args_prints_usage_and_returns_error(capsys):
    code = cli.main([])
    captured = capsys.readouterr()
    assert code == 2
    assert "Usage: quiz" in captured.out
    assert "Available commands:" in captured.out


def test_help_flag_and_command_show_usage(capsys):
    assert cli.main(["--help"]) == 0
    assert "Usage: quiz" in capsys.readouterr().out
    assert cli.main(["help"]) == 0
    assert "Usage: quiz" in capsys.readouterr().out


def test_list_outputs_command_table(capsys):
    code = cli.main(["list"])
    captured = capsys.readouterr()
    assert code == 0
    for name in ("init", "check", "play", "run"):
        assert f"  {name}" in captured.out
    assert "(TUI)" in captured.out


def test_help_known_command(capsys):
    code = cli.main(["help", "play"])
    captured = capsys.readouterr()
    assert code == 0
    assert "play:" in captured.out
    assert "Run `quiz play --help`" in captured.out


def test_help_unknown_command(capsys):
    code = cli.main(["help", "nope"])
    captured = capsys.readouterr()
    assert code == 2
    assert "Unknown command 'nope'." in captured.err


def test_unknown_command(capsys):
    code = cli.main(["bogus"])
    captured = capsys.readouterr()
    assert code == 2
    assert "Unknown command 'bogus'." in captured.err
    assert "Available commands:" in captured.err


def test_check_command_dispatches(workspace, capsys):
    path = workspace.write_jsonl("bank.jsonl", three_question_records())

    code = cli.main(["check", str(path)])

    captured = capsys.readouterr()
    assert code == 0
    assert "3 question(s) OK." in captured.out


def test_subcommand_help_exit_is_normalized(capsys):
    code = cli.main(["check", "--help"])

    captured = capsys.readouterr()
    assert code == 0
    assert "quiz check" in captured.out


def test_invoke_main_restores_argv():
    seen = []
    original = list(sys.argv)

    def target(argv):
        seen.append((list(argv), list(sys.argv)))
        return 5

    assert cli._invoke_main(target, "quiz fake", ["--x"]) == 5
    assert seen == [(["--x"], ["quiz fake", "--x"])]
    assert sys.argv == original


def test_invoke_main_without_argv_parameter():
    assert cli._invoke_main(lambda: None, "quiz fake", ["ignored"]) == 0


@pytest.mark.parametrize(
    ("code", "expected"),
    [(None, 0), (3, 3), ("fatal", 1)],
)
def test_system_exit_codes_are_normalized(code, expected, capsys):
    def target(argv):
        raise SystemExit(code)

    assert cli._invoke_main(target, "quiz fake", []) == expected
    if isinstance(code, str):
        assert "fatal" in capsys.readouterr().err
