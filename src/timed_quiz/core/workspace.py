"""Resolution of the on-disk workspace used by the quiz CLI."""

from __future__ import annotations

import os
import tempfile
from dataclasses import dataclass
from pathlib import Path
from types import MappingProxyType
from typing import Mapping, MutableMapping

WORKSPACE_ENV = "TIMED_QUIZ_HOME"
DEFAULT_WORKSPACE = Path.home() / ".timed-quiz"

_SUBDIRS = {
    "config": "config",
    "logs": "logs",
    "catalogs": "catalogs",
}


class WorkspaceError(RuntimeError):
    """Raised when the workspace layout cannot be prepared."""


@dataclass(frozen=True)
class WorkspaceLayout:
    """Resolved workspace directories and whether each was just created."""

    home: Path
    directories: Mapping[str, Path]
    created: Mapping[str, bool]

    def path_for(self, key: str) -> Path:
        try:
            return self.directories[key]
        except KeyError as exc:
            raise WorkspaceError(
                f"Unknown workspace directory '{key}'."
            ) from exc

    def items(self) -> tuple[tuple[str, Path], ...]:
        return tuple(self.directories.items())


def ensure_workspace(
    *,
    env: Mapping[str, str] | None = None,
    path: Path | None = None,
    create: bool = True,
) -> WorkspaceLayout:
    """Return the workspace layout, creating directories when ``create``.

    An explicit ``path`` wins over ``TIMED_QUIZ_HOME``; without either the
    default home is used, falling back to the temp directory when it is not
    writable.
    """

    env_map = os.environ if env is None else env
    base, explicit = _resolve_base(env_map, path)
    candidates = [base]
    if create and not explicit:
        candidates.append(Path(tempfile.gettempdir()) / "timed-quiz")

    error: Exception | None = None
    for candidate in candidates:
        try:
            return _materialize(candidate, create=create)
        except PermissionError as exc:
            error = exc
    raise WorkspaceError(f"Unable to prepare workspace at {base}") from error


def _resolve_base(
    env: Mapping[str, str], override: Path | None
) -> tuple[Path, bool]:
    if override is not None:
        return override.expanduser().absolute(), True
    custom = (env.get(WORKSPACE_ENV) or "").strip()
    if custom:
        return Path(custom).expanduser().absolute(), True
    return DEFAULT_WORKSPACE, False


def _materialize(base: Path, *, create: bool) -> WorkspaceLayout:
    if base.exists() and not base.is_dir():
        raise WorkspaceError(
            f"Configured workspace exists and is not a directory: {base}"
        )
    created: MutableMapping[str, bool] = {
        "home": _ensure_dir(base) if create else False
    }
    directories: MutableMapping[str, Path] = {}
    for key, relative in _SUBDIRS.items():
        candidate = base / relative
        if candidate.exists() and not candidate.is_dir():
            raise WorkspaceError(
                f"Expected workspace directory for '{key}' but found a file: "
                f"{candidate}"
            )
        created[key] = _ensure_dir(candidate) if create else False
        directories[key] = candidate
    return WorkspaceLayout(
        home=base,
        directories=MappingProxyType(dict(directories)),
        created=MappingProxyType(dict(created)),
    )


def _ensure_dir(path: Path) -> bool:
    existed = path.exists()
    path.mkdir(parents=True, exist_ok=True)
    try:
        path.chmod(0o700)
    except (PermissionError, NotImplementedError):  # pragma: no cover
        pass
    return not existed
