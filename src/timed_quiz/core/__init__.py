"""Shared configuration, logging and workspace helpers."""

from __future__ import annotations

from .config import (
    TomlConfigError,
    load_toml,
    load_toml_tables,
    merge_defaults,
    merge_toml_file,
    write_toml_template,
)
from .logging import JsonLogFormatter, configure_logger
from .workspace import (
    WORKSPACE_ENV,
    WorkspaceError,
    WorkspaceLayout,
    ensure_workspace,
)

__all__ = [
    "TomlConfigError",
    "load_toml",
    "load_toml_tables",
    "merge_defaults",
    "merge_toml_file",
    "write_toml_template",
    "JsonLogFormatter",
    "configure_logger",
    "WORKSPACE_ENV",
    "WorkspaceError",
    "WorkspaceLayout",
    "ensure_workspace",
]
