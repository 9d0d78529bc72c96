"""TOML helpers shared by the quiz configuration and catalog loaders."""

from __future__ import annotations

import tomllib
from pathlib import Path
from typing import Any, List, Mapping, MutableMapping

__all__ = [
    "TomlConfigError",
    "load_toml",
    "load_toml_tables",
    "merge_defaults",
    "merge_toml_file",
    "write_toml_template",
]


class TomlConfigError(RuntimeError):
    """Raised when a TOML document cannot be read or merged."""


def load_toml(path: Path) -> Mapping[str, Any]:
    """Parse the TOML document at ``path``.

    Missing or unreadable files, bad encodings and syntax errors all surface
    as :class:`TomlConfigError`.
    """

    try:
        with path.open("rb") as handle:
            return tomllib.load(handle)
    except FileNotFoundError as exc:
        raise TomlConfigError(f"Config file not found: {path}") from exc
    except (OSError, UnicodeDecodeError) as exc:
        raise TomlConfigError(f"Cannot read {path}: {exc}") from exc
    except tomllib.TOMLDecodeError as exc:
        raise TomlConfigError(f"Failed to parse TOML {path}: {exc}") from exc


def load_toml_tables(path: Path, key: str) -> List[Mapping[str, Any]]:
    """Return the ``[[key]]`` array of tables stored in ``path``.

    A document without ``key`` yields an empty list.
    """

    document = load_toml(path)
    tables = document.get(key, [])
    if not isinstance(tables, list):
        raise TomlConfigError(
            f"'{key}' in {path} must be an array of tables, found "
            f"{type(tables).__name__}."
        )
    return tables


def merge_defaults(
    base: MutableMapping[str, Any],
    override: Mapping[str, Any],
    *,
    path: str = "",
) -> None:
    """Merge ``override`` into ``base`` in place, rejecting unknown keys."""

    for key, value in override.items():
        dotted = path + key
        if key not in base:
            raise TomlConfigError(f"Unknown configuration key '{dotted}'.")
        target = base[key]
        if not isinstance(target, MutableMapping):
            base[key] = value
        elif isinstance(value, Mapping):
            merge_defaults(target, value, path=dotted + ".")
        else:
            raise TomlConfigError(
                f"Expected table for '{dotted}', found "
                f"{type(value).__name__}."
            )


def merge_toml_file(base: MutableMapping[str, Any], path: Path) -> bool:
    """Layer the document at ``path`` over ``base``.

    Returns ``False`` without touching ``base`` when the file is absent.
    """

    if not path.exists():
        return False
    merge_defaults(base, load_toml(path))
    return True


def write_toml_template(
    path: Path,
    *,
    template: str,
    overwrite: bool = False,
    mode: int = 0o600,
) -> Path:
    """Write ``template`` to ``path``, refusing to clobber unless asked."""

    path.parent.mkdir(parents=True, exist_ok=True)
    if path.exists() and not overwrite:
        raise TomlConfigError(f"Config already exists: {path}")
    path.write_text(template, encoding="utf-8")
    try:
        path.chmod(mode)
    except PermissionError:  # pragma: no cover - depends on filesystem
        pass
    return path
