"""Shared testing fixtures for the timed_quiz test suite."""

from .catalogs import (  # noqa: F401
    question_record,
    three_question_catalog,
    three_question_records,
)
from .ticker import FakeClock, ManualTicker  # noqa: F401
from .workspace import WorkspaceBuilder, build_tree  # noqa: F401

__all__ = [
    "FakeClock",
    "ManualTicker",
    "WorkspaceBuilder",
    "build_tree",
    "question_record",
    "three_question_catalog",
    "three_question_records",
]
