from __future__ import annotations

import sys
from pathlib import Path

import pytest

TESTS_DIR = Path(__file__).resolve().parent
ROOT = TESTS_DIR.parent
for extra in (TESTS_DIR, ROOT / "src"):
    path_str = str(extra)
    if path_str not in sys.path:
        sys.path.insert(0, path_str)

from fixtures import (  # noqa: E402
    FakeClock,
    ManualTicker,
    WorkspaceBuilder,
    three_question_catalog,
)
from timed_quiz.core import workspace as workspace_mod  # noqa: E402
from timed_quiz.quiz import config as quiz_config  # noqa: E402
from timed_quiz.quiz.models import Catalog  # noqa: E402


@pytest.fixture(autouse=True)
def _isolate_environment(
    tmp_path: Path, monkeypatch: pytest.MonkeyPatch
) -> None:
    """Keep tests away from the real ~/.timed-quiz and user config."""

    monkeypatch.setenv(workspace_mod.WORKSPACE_ENV, str(tmp_path / "home"))
    monkeypatch.delenv(quiz_config.CONFIG_ENV, raising=False)


@pytest.fixture
def workspace(tmp_path: Path) -> WorkspaceBuilder:
    """Provide a helper bound to pytest's per-test tmp directory."""

    return WorkspaceBuilder(tmp_path)


@pytest.fixture
def catalog() -> Catalog:
    return three_question_catalog()


@pytest.fixture
def ticker() -> ManualTicker:
    return ManualTicker()


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock()
