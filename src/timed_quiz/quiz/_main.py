"""Command handlers for ``quiz check``, ``quiz play`` and ``quiz run``."""

from __future__ import annotations

import argparse
import sys
from pathlib import Path
from typing import Optional, Sequence

from rich import box
from rich.console import Console
from rich.table import Table

from timed_quiz.core.logging import configure_logger

from .catalog import load_catalog
from .config import ConfigOverrides, LoadResult, QuizConfigError, load_config
from .console import run_console_session
from .models import Catalog, CatalogError


def _build_parser(prog: str, description: str) -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog=prog, description=description)
    parser.add_argument(
        "catalog",
        nargs="?",
        type=Path,
        help="Question catalog (.jsonl, .json or .toml). Defaults to "
        "[quiz] catalog from quiz.toml.",
    )
    parser.add_argument(
        "--config",
        type=Path,
        help="Path to quiz.toml (defaults to the workspace config directory).",
    )
    parser.add_argument(
        "--workspace",
        type=Path,
        help="Override the workspace root (defaults to TIMED_QUIZ_HOME or "
        "~/.timed-quiz).",
    )
    parser.add_argument(
        "--duration",
        type=int,
        help="Total quiz time in seconds.",
    )
    parser.add_argument(
        "--pass-threshold",
        type=float,
        help="Minimum percentage required to pass.",
    )
    parser.add_argument("--log-level", help="Logging level for the run.")
    parser.add_argument(
        "--verbose",
        action="store_true",
        default=None,
        help="Mirror log records to stderr.",
    )
    return parser


def _load(
    parser: argparse.ArgumentParser, args: argparse.Namespace
) -> LoadResult:
    overrides = ConfigOverrides(
        duration_seconds=args.duration,
        pass_threshold=args.pass_threshold,
        catalog=args.catalog,
        log_level=args.log_level,
        verbose=args.verbose,
    )
    try:
        return load_config(
            config_path=args.config,
            overrides=overrides,
            workspace_path=args.workspace,
        )
    except QuizConfigError as exc:
        parser.error(str(exc))


def _read_catalog(path: Optional[Path]) -> Optional[Catalog]:
    if path is None:
        sys.stderr.write(
            "Error: no catalog given. Pass a path or set [quiz] catalog in "
            "quiz.toml.\n"
        )
        return None
    try:
        return load_catalog(path)
    except CatalogError as exc:
        sys.stderr.write(f"Error: {exc}\n")
        return None


def check_main(argv: Sequence[str] | None = None) -> int:
    """Validate a catalog and print its questions."""

    parser = argparse.ArgumentParser(
        prog="quiz check",
        description="Validate a question catalog and summarize it.",
    )
    parser.add_argument("catalog", type=Path)
    args = parser.parse_args(list(argv) if argv is not None else None)

    catalog = _read_catalog(args.catalog)
    if catalog is None:
        return 2
    console = Console()
    if not catalog:
        console.print("[yellow]Catalog is empty.[/]")
        return 1
    table = Table(title=str(args.catalog), box=box.SIMPLE)
    table.add_column("#", justify="right")
    table.add_column("Id")
    table.add_column("Kind")
    table.add_column("Options", justify="right")
    table.add_column("Correct")
    for position, question in enumerate(catalog, start=1):
        table.add_row(
            str(position),
            question.id,
            question.kind.value,
            str(len(question.options)),
            ", ".join(sorted(question.correct_answer_ids)),
        )
    console.print(table)
    console.print(f"{len(catalog)} question(s) OK.")
    return 0


def play_main(argv: Sequence[str] | None = None) -> int:
    """Run a quiz in the plain Rich console."""

    parser = _build_parser(
        "quiz play", "Take a timed quiz in the terminal (line-based)."
    )
    args = parser.parse_args(list(argv) if argv is not None else None)
    result = _load(parser, args)
    config = result.config
    catalog = _read_catalog(config.catalog)
    if catalog is None:
        return 2

    logger, _ = configure_logger(
        "timed_quiz",
        log_dir=result.layout.path_for("logs"),
        level=config.log_level,
        verbose=config.verbose,
    )
    logger.debug("quiz play invoked", extra={"catalog": str(config.catalog)})
    console = Console()
    run_console_session(
        catalog,
        console,
        lambda: console.input("[bold]> [/]"),
        duration_seconds=config.duration_seconds,
        pass_threshold=config.pass_threshold,
        logger=logger.getChild("session"),
    )
    return 0 if catalog else 1


def run_main(argv: Sequence[str] | None = None) -> int:
    """Run a quiz in the full-screen Textual app."""

    parser = _build_parser("quiz run", "Take a timed quiz in a Textual TUI.")
    args = parser.parse_args(list(argv) if argv is not None else None)
    result = _load(parser, args)
    config = result.config
    catalog = _read_catalog(config.catalog)
    if catalog is None:
        return 2
    if not catalog:
        sys.stderr.write("Question catalog is empty.\n")
        return 1

    logger, _ = configure_logger(
        "timed_quiz",
        log_dir=result.layout.path_for("logs"),
        level=config.log_level,
        verbose=False,
    )
    logger.debug("quiz run invoked", extra={"catalog": str(config.catalog)})

    from .view import QuizApp

    app = QuizApp(
        catalog,
        duration_seconds=config.duration_seconds,
        pass_threshold=config.pass_threshold,
        logger=logger.getChild("session"),
    )
    app.run()
    return 0
