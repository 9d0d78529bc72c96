"""Loading and validating question catalogs.

Catalogs are authored as JSON Lines, JSON or TOML. Every record is converted
into an immutable :class:`~timed_quiz.quiz.models.Question`, so invariant
violations surface here, at load time, instead of in the middle of a session.
"""

from __future__ import annotations

import json
from pathlib import Path
from typing import Any, Iterable, List, Mapping, Sequence

from timed_quiz.core import config as core_config

from .models import (
    AnswerOption,
    Catalog,
    CatalogError,
    Question,
    QuestionKind,
)

__all__ = [
    "SUPPORTED_SUFFIXES",
    "build_catalog",
    "build_question",
    "catalog_to_records",
    "load_catalog",
    "read_jsonl",
    "sample_catalog",
    "write_jsonl",
]

SUPPORTED_SUFFIXES = (".jsonl", ".json", ".toml")


def read_jsonl(path: Path) -> List[dict]:
    data: List[dict] = []
    with Path(path).open("r", encoding="utf-8") as fh:
        for lineno, line in enumerate(fh, start=1):
            line = line.strip()
            if not line:
                continue
            try:
                data.append(json.loads(line))
            except json.JSONDecodeError as exc:
                raise CatalogError(
                    f"{path}:{lineno}: invalid JSON ({exc.msg})."
                ) from exc
    return data


def write_jsonl(path: Path, records: Sequence[dict]) -> None:
    p = Path(path)
    p.parent.mkdir(parents=True, exist_ok=True)
    with p.open("w", encoding="utf-8") as fh:
        for rec in records:
            fh.write(json.dumps(rec, ensure_ascii=False))
            fh.write("\n")


def load_catalog(path: Path) -> Catalog:
    """Read and validate the catalog stored at ``path``."""

    source = Path(path).expanduser()
    if not source.is_file():
        raise CatalogError(f"Catalog file not found: {source}")
    suffix = source.suffix.lower()
    if suffix not in SUPPORTED_SUFFIXES:
        expected = ", ".join(SUPPORTED_SUFFIXES)
        raise CatalogError(
            f"Unsupported catalog format '{suffix}'. Expected one of: "
            f"{expected}."
        )
    try:
        records = _read_records(source, suffix)
    except (OSError, UnicodeDecodeError) as exc:
        raise CatalogError(f"Cannot read catalog {source}: {exc}") from exc
    if not isinstance(records, list):
        raise CatalogError(
            f"Catalog {source} must contain a list of questions."
        )
    return build_catalog(records)


def build_catalog(records: Iterable[Mapping[str, Any]]) -> Catalog:
    """Convert raw question mappings into a validated catalog."""

    questions: List[Question] = []
    seen: set[str] = set()
    for position, record in enumerate(records, start=1):
        question = build_question(record, position=position)
        if question.id in seen:
            raise CatalogError(f"Duplicate question id '{question.id}'.")
        seen.add(question.id)
        questions.append(question)
    return tuple(questions)


def build_question(
    record: Mapping[str, Any], *, position: int = 0
) -> Question:
    if not isinstance(record, Mapping):
        raise CatalogError(
            f"Question #{position} must be a table/object, found "
            f"{type(record).__name__}."
        )
    identifier = str(record.get("id") or "").strip()
    if not identifier:
        raise CatalogError(f"Question #{position} is missing an 'id'.")
    text = str(record.get("text") or "").strip()
    if not text:
        raise CatalogError(f"Question '{identifier}' is missing its text.")
    options = tuple(_iter_options(record.get("options"), identifier))
    kind = QuestionKind.from_value(record.get("kind", "single_choice"))
    correct = record.get("correct_answers")
    if isinstance(correct, str) or not isinstance(correct, Iterable):
        raise CatalogError(
            f"Question '{identifier}' must list 'correct_answers'."
        )
    explanation = record.get("explanation")
    return Question(
        id=identifier,
        text=text,
        options=options,
        kind=kind,
        correct_answer_ids=frozenset(str(item) for item in correct),
        explanation=str(explanation).strip() if explanation else None,
    )


def catalog_to_records(catalog: Catalog) -> List[dict]:
    records: List[dict] = []
    for question in catalog:
        record: dict = {
            "id": question.id,
            "text": question.text,
            "kind": question.kind.value,
            "options": [
                {"id": option.id, "text": option.text}
                for option in question.options
            ],
            "correct_answers": sorted(question.correct_answer_ids),
        }
        if question.explanation:
            record["explanation"] = question.explanation
        records.append(record)
    return records


def _read_records(source: Path, suffix: str) -> Any:
    if suffix == ".jsonl":
        return read_jsonl(source)
    if suffix == ".json":
        return _read_json(source)
    try:
        return core_config.load_toml_tables(source, "questions")
    except core_config.TomlConfigError as exc:
        raise CatalogError(str(exc)) from exc


def _read_json(path: Path) -> Any:
    try:
        data = json.loads(path.read_text(encoding="utf-8"))
    except json.JSONDecodeError as exc:
        raise CatalogError(f"Failed to parse catalog JSON: {exc}") from exc
    if isinstance(data, Mapping):
        return data.get("questions", [])
    return data


def _iter_options(field: Any, question_id: str) -> Iterable[AnswerOption]:
    if isinstance(field, (str, bytes)) or not isinstance(field, Iterable):
        raise CatalogError(f"Question '{question_id}' must list 'options'.")
    options: List[AnswerOption] = []
    for item in field:
        if not isinstance(item, Mapping):
            raise CatalogError(
                f"Options of question '{question_id}' must be tables with "
                "'id' and 'text'."
            )
        option_id = str(item.get("id") or "").strip()
        if not option_id:
            raise CatalogError(
                f"An option of question '{question_id}' is missing its 'id'."
            )
        options.append(AnswerOption(option_id, str(item.get("text", ""))))
    return options


_SAMPLE_RECORDS: List[dict] = [
    {
        "id": "capital-fr",
        "text": "What is the capital of France?",
        "kind": "single_choice",
        "options": [
            {"id": "a", "text": "Paris"},
            {"id": "b", "text": "Lyon"},
            {"id": "c", "text": "Marseille"},
        ],
        "correct_answers": ["a"],
        "explanation": "Paris has been the capital of France since 987.",
    },
    {
        "id": "primes",
        "text": "Which of these numbers are prime?",
        "kind": "multiple_choice",
        "options": [
            {"id": "a", "text": "2"},
            {"id": "b", "text": "9"},
            {"id": "c", "text": "11"},
            {"id": "d", "text": "15"},
        ],
        "correct_answers": ["a", "c"],
        "explanation": "2 and 11 are only divisible by 1 and themselves.",
    },
    {
        "id": "python-none",
        "text": "Which value does a Python function return without a "
        "return statement?",
        "kind": "single_choice",
        "options": [
            {"id": "a", "text": "0"},
            {"id": "b", "text": "None"},
            {"id": "c", "text": "False"},
        ],
        "correct_answers": ["b"],
    },
]


def sample_catalog() -> Catalog:
    """Small built-in catalog written by ``quiz init --sample``."""

    return build_catalog(_SAMPLE_RECORDS)
