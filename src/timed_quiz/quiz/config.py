"""Configuration loader for quiz runs.

Values are layered CLI overrides > ``quiz.toml`` > built-in defaults. The
TOML file is looked up via ``--config``, then ``TIMED_QUIZ_CONFIG``, then the
workspace ``config/`` directory; a missing default file is not an error.
"""

from __future__ import annotations

import copy
import os
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Dict, Mapping, Optional

from timed_quiz.core import config as core_config
from timed_quiz.core import workspace as workspace_mod

from .scoring import PASS_THRESHOLD
from .session import DEFAULT_DURATION_SECONDS

__all__ = [
    "CONFIG_ENV",
    "CONFIG_FILENAME",
    "ConfigOverrides",
    "LoadResult",
    "QuizConfig",
    "QuizConfigError",
    "config_template",
    "default_tree",
    "load_config",
]

CONFIG_FILENAME = "quiz.toml"
CONFIG_ENV = "TIMED_QUIZ_CONFIG"

_LOG_LEVELS = ("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL")

_DEFAULTS: Dict[str, Any] = {
    "quiz": {
        "duration_seconds": DEFAULT_DURATION_SECONDS,
        "pass_threshold": PASS_THRESHOLD,
        "catalog": None,
    },
    "logging": {
        "level": "INFO",
        "verbose": False,
    },
}

_CONFIG_TEMPLATE = """
# timed-quiz configuration

[quiz]
# Total time for one attempt, in seconds
duration_seconds = {duration}
# Minimum percentage (0-100) required to pass
pass_threshold = {threshold}
# Default catalog used when `quiz play`/`quiz run` get no path
# catalog = "~/.timed-quiz/catalogs/sample.jsonl"

[logging]
# DEBUG, INFO, WARNING, ERROR or CRITICAL
level = "INFO"
# Mirror log records to stderr
verbose = false
"""


class QuizConfigError(RuntimeError):
    """Raised when quiz configuration parsing or validation fails."""


@dataclass(frozen=True)
class QuizConfig:
    """Fully resolved settings for a quiz run."""

    duration_seconds: int
    pass_threshold: float
    catalog: Optional[Path]
    log_level: str
    verbose: bool


@dataclass(frozen=True)
class ConfigOverrides:
    """CLI-provided values that win over the config file."""

    duration_seconds: Optional[int] = None
    pass_threshold: Optional[float] = None
    catalog: Optional[Path] = None
    log_level: Optional[str] = None
    verbose: Optional[bool] = None


@dataclass(frozen=True)
class LoadResult:
    """Loaded configuration plus the workspace it was resolved against."""

    config: QuizConfig
    layout: workspace_mod.WorkspaceLayout
    config_path: Optional[Path]


def default_tree() -> Dict[str, Any]:
    return copy.deepcopy(_DEFAULTS)


def config_template() -> str:
    return (
        _CONFIG_TEMPLATE.format(
            duration=DEFAULT_DURATION_SECONDS, threshold=PASS_THRESHOLD
        ).strip()
        + "\n"
    )


def load_config(
    *,
    config_path: Optional[Path] = None,
    overrides: Optional[ConfigOverrides] = None,
    env: Optional[Mapping[str, str]] = None,
    workspace_path: Optional[Path] = None,
) -> LoadResult:
    """Resolve the effective configuration for a run."""

    overrides = overrides or ConfigOverrides()
    env_map = os.environ if env is None else env
    try:
        layout = workspace_mod.ensure_workspace(
            env=env_map, path=workspace_path
        )
    except workspace_mod.WorkspaceError as exc:
        raise QuizConfigError(str(exc)) from exc

    explicit = config_path
    if explicit is None and env_map.get(CONFIG_ENV):
        explicit = Path(env_map[CONFIG_ENV])
    if explicit is not None:
        requested = explicit.expanduser().absolute()
        if not requested.exists():
            raise QuizConfigError(f"Config file not found: {requested}")
    else:
        requested = layout.path_for("config") / CONFIG_FILENAME

    tree = default_tree()
    loaded_path: Optional[Path] = None
    try:
        merged = core_config.merge_toml_file(tree, requested)
    except core_config.TomlConfigError as exc:
        raise QuizConfigError(str(exc)) from exc
    if merged:
        loaded_path = requested
        _anchor_catalog(tree, requested.absolute().parent)

    _apply_overrides(tree, overrides)
    return LoadResult(
        config=_build_config(tree),
        layout=layout,
        config_path=loaded_path,
    )


def _anchor_catalog(tree: Dict[str, Any], base: Path) -> None:
    # Relative catalog paths in a config file are relative to that file.
    quiz = tree["quiz"]
    value = quiz.get("catalog") if isinstance(quiz, Mapping) else None
    if not isinstance(value, str) or not value.strip():
        return
    if not Path(value).expanduser().is_absolute():
        quiz["catalog"] = str(base / value)


def _apply_overrides(tree: Dict[str, Any], overrides: ConfigOverrides) -> None:
    quiz = tree["quiz"]
    logging_section = tree["logging"]
    if overrides.duration_seconds is not None:
        quiz["duration_seconds"] = overrides.duration_seconds
    if overrides.pass_threshold is not None:
        quiz["pass_threshold"] = overrides.pass_threshold
    if overrides.catalog is not None:
        quiz["catalog"] = str(overrides.catalog)
    if overrides.log_level is not None:
        logging_section["level"] = overrides.log_level
    if overrides.verbose is not None:
        logging_section["verbose"] = overrides.verbose


def _build_config(tree: Mapping[str, Any]) -> QuizConfig:
    quiz = tree["quiz"]
    logging_section = tree["logging"]
    if not isinstance(quiz, Mapping):
        raise QuizConfigError("[quiz] must be a table.")
    if not isinstance(logging_section, Mapping):
        raise QuizConfigError("[logging] must be a table.")
    return QuizConfig(
        duration_seconds=_require_positive_int(
            quiz.get("duration_seconds"), field="quiz.duration_seconds"
        ),
        pass_threshold=_require_percentage(
            quiz.get("pass_threshold"), field="quiz.pass_threshold"
        ),
        catalog=_coerce_optional_path(
            quiz.get("catalog"), field="quiz.catalog"
        ),
        log_level=_require_level(logging_section.get("level")),
        verbose=_require_bool(
            logging_section.get("verbose"), field="logging.verbose"
        ),
    )


def _require_positive_int(value: Any, *, field: str) -> int:
    if isinstance(value, bool) or not isinstance(value, int) or value <= 0:
        raise QuizConfigError(f"'{field}' must be a positive integer.")
    return value


def _require_percentage(value: Any, *, field: str) -> float:
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        raise QuizConfigError(f"'{field}' must be a number.")
    number = float(value)
    if not 0.0 <= number <= 100.0:
        raise QuizConfigError(f"'{field}' must be between 0 and 100.")
    return number


def _require_bool(value: Any, *, field: str) -> bool:
    if not isinstance(value, bool):
        raise QuizConfigError(f"'{field}' must be a boolean.")
    return value


def _require_level(value: Any) -> str:
    level = str(value or "").strip().upper()
    if level not in _LOG_LEVELS:
        raise QuizConfigError(
            "logging.level must be one of " + ", ".join(_LOG_LEVELS) + "."
        )
    return level


def _coerce_optional_path(value: Any, *, field: str) -> Optional[Path]:
    if value is None:
        return None
    if not isinstance(value, str) or not value.strip():
        raise QuizConfigError(
            f"'{field}' must be a non-empty string when set."
        )
    return Path(value).expanduser()
