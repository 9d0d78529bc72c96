from __future__ import annotations

import pytest

from fixtures import question_record, three_question_records
from timed_quiz.quiz import catalog as catalog_mod
from timed_quiz.quiz.models import CatalogError, QuestionKind


def test_load_catalog_from_jsonl(workspace) -> None:
    path = workspace.write_jsonl("bank.jsonl", three_question_records())

    catalog = catalog_mod.load_catalog(path)

    assert [question.id for question in catalog] == ["q1", "q2", "q3"]
    assert catalog[1].kind is QuestionKind.MULTIPLE_CHOICE
    assert catalog[1].correct_answer_ids == frozenset({"a", "c"})
    assert catalog[0].explanation == "A is right."
    assert catalog[2].explanation is None


def test_load_catalog_from_json_object_and_list(workspace) -> None:
    records = three_question_records()
    wrapped = workspace.write_json("wrapped.json", {"questions": records})
    bare = workspace.write_json("bare.json", records)

    assert catalog_mod.load_catalog(wrapped) == catalog_mod.load_catalog(bare)


def test_load_catalog_from_toml(workspace) -> None:
    path = workspace.write(
        "bank.toml",
        """
[[questions]]
id = "t1"
text = "Pick B"
correct_answers = ["b"]
options = [
  { id = "a", text = "A" },
  { id = "b", text = "B" },
]

[[questions]]
id = "t2"
text = "Pick A and B"
kind = "multiple_choice"
correct_answers = ["a", "b"]
options = [
  { id = "a", text = "A" },
  { id = "b", text = "B" },
]
""",
    )

    catalog = catalog_mod.load_catalog(path)

    assert [question.id for question in catalog] == ["t1", "t2"]
    assert catalog[0].kind is QuestionKind.SINGLE_CHOICE
    assert catalog[1].kind is QuestionKind.MULTIPLE_CHOICE


def test_load_catalog_reports_missing_file(tmp_path) -> None:
    with pytest.raises(CatalogError, match="not found"):
        catalog_mod.load_catalog(tmp_path / "missing.jsonl")


def test_load_catalog_rejects_unknown_suffix(workspace) -> None:
    path = workspace.write("bank.yaml", "questions: []")

    with pytest.raises(CatalogError, match="Unsupported catalog format"):
        catalog_mod.load_catalog(path)


def test_read_jsonl_reports_line_number(workspace) -> None:
    path = workspace.write("bad.jsonl", '{"id": "q1"}\n\n{oops}\n')

    with pytest.raises(CatalogError, match=r"bad.jsonl:3"):
        catalog_mod.read_jsonl(path)


def test_load_catalog_requires_a_list(workspace) -> None:
    path = workspace.write_json("scalar.json", {"questions": "nope"})

    with pytest.raises(CatalogError, match="list of questions"):
        catalog_mod.load_catalog(path)


@pytest.mark.parametrize("name", ["bank.jsonl", "bank.json", "bank.toml"])
def test_load_catalog_reports_undecodable_bytes(tmp_path, name) -> None:
    path = tmp_path / name
    path.write_bytes(b"\xff\xfe\x00garbage\n")

    with pytest.raises(CatalogError, match="Cannot read"):
        catalog_mod.load_catalog(path)


def test_load_catalog_toml_questions_must_be_tables(workspace) -> None:
    path = workspace.write("bank.toml", 'questions = "nope"\n')

    with pytest.raises(CatalogError, match="array of tables"):
        catalog_mod.load_catalog(path)


def test_build_catalog_rejects_duplicate_ids() -> None:
    records = [question_record("q1"), question_record("q1")]

    with pytest.raises(CatalogError, match="Duplicate question id 'q1'"):
        catalog_mod.build_catalog(records)


@pytest.mark.parametrize(
    ("record", "message"),
    [
        ({"text": "?", "options": []}, "missing an 'id'"),
        ({"id": "q", "options": []}, "missing its text"),
        ({"id": "q", "text": "?", "correct_answers": ["a"]}, "'options'"),
        (
            {"id": "q", "text": "?", "options": [{"id": "a", "text": "A"}]},
            "'correct_answers'",
        ),
        (
            {
                "id": "q",
                "text": "?",
                "options": [{"id": "a", "text": "A"}],
                "correct_answers": "a",
            },
            "'correct_answers'",
        ),
        (
            {
                "id": "q",
                "text": "?",
                "options": [{"text": "A"}],
                "correct_answers": ["a"],
            },
            "missing its 'id'",
        ),
    ],
)
def test_build_question_validation(record, message) -> None:
    with pytest.raises(CatalogError, match=message):
        catalog_mod.build_question(record, position=1)


def test_build_question_rejects_non_mapping() -> None:
    with pytest.raises(CatalogError, match="Question #4"):
        catalog_mod.build_question(["not", "a", "table"], position=4)


def test_catalog_records_reload_unchanged(tmp_path) -> None:
    catalog = catalog_mod.sample_catalog()
    path = tmp_path / "sample.jsonl"

    catalog_mod.write_jsonl(path, catalog_mod.catalog_to_records(catalog))

    assert catalog_mod.load_catalog(path) == catalog


def test_sample_catalog_mixes_question_kinds() -> None:
    kinds = {question.kind for question in catalog_mod.sample_catalog()}

    assert kinds == {QuestionKind.SINGLE_CHOICE, QuestionKind.MULTIPLE_CHOICE}
