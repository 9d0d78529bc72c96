"""CLI entry point for ``quiz init``."""

from __future__ import annotations

import argparse
import sys
from pathlib import Path
from typing import Mapping, Sequence

from timed_quiz.core import config as core_config
from timed_quiz.core import workspace as workspace_mod
from timed_quiz.quiz import catalog as catalog_mod
from timed_quiz.quiz import config as quiz_config

SAMPLE_FILENAME = "sample.jsonl"


def _build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="quiz init",
        description=(
            "Bootstrap the timed-quiz workspace and write the default "
            "quiz.toml template."
        ),
    )
    parser.add_argument(
        "--path",
        type=Path,
        help="Override the workspace root (defaults to TIMED_QUIZ_HOME or "
        "~/.timed-quiz).",
    )
    parser.add_argument(
        "--overwrite",
        action="store_true",
        help="Replace an existing quiz.toml with the template.",
    )
    parser.add_argument(
        "--sample",
        action="store_true",
        help=f"Also write a sample catalog to catalogs/{SAMPLE_FILENAME}.",
    )
    parser.add_argument(
        "--quiet",
        action="store_true",
        help="Suppress informational output on success.",
    )
    return parser


def _format_created(created: Mapping[str, bool], key: str) -> str:
    return "created" if created.get(key, False) else "exists"


def main(argv: Sequence[str] | None = None) -> int:
    parser = _build_parser()
    args = parser.parse_args(list(argv) if argv is not None else None)

    try:
        layout = workspace_mod.ensure_workspace(path=args.path)
    except workspace_mod.WorkspaceError as exc:
        sys.stderr.write(f"Error: {exc}\n")
        return 2

    config_path = layout.path_for("config") / quiz_config.CONFIG_FILENAME
    try:
        core_config.write_toml_template(
            config_path,
            template=quiz_config.config_template(),
            overwrite=args.overwrite,
        )
        config_status = "written"
    except core_config.TomlConfigError:
        config_status = "kept existing"

    lines = [
        "Workspace ready at {0} ({1})".format(
            layout.home, _format_created(layout.created, "home")
        )
    ]
    width = max(len(name) for name in layout.directories)
    for name, directory in layout.items():
        status = _format_created(layout.created, name)
        lines.append(f"  {name.ljust(width)}  {directory} ({status})")
    lines.append(f"Config: {config_path} ({config_status})")

    if args.sample:
        sample_path = layout.path_for("catalogs") / SAMPLE_FILENAME
        catalog_mod.write_jsonl(
            sample_path,
            catalog_mod.catalog_to_records(catalog_mod.sample_catalog()),
        )
        lines.append(f"Sample catalog: {sample_path}")

    if not args.quiet:
        sys.stdout.write("\n".join(lines) + "\n")
    return 0


if __name__ == "__main__":  # pragma: no cover - module CLI guard
    raise SystemExit(main())
