from __future__ import annotations

import json
import logging

import pytest

from fixtures import question_record
from timed_quiz.quiz.questions import (
    QuestionBank,
    QuestionFormatError,
    QuestionLoadError,
    bundled_questions_path,
    load_question_bank,
    load_question_bank_or_empty,
    parse_questions,
)


def test_parse_builds_ordered_category_index() -> None:
    bank = parse_questions(
        [
            question_record("History", "Rome"),
            question_record("Art", "Baroque"),
            question_record("History", "Egypt"),
            question_record("History", "Rome"),
        ]
    )
    assert list(bank.categories) == ["History", "Art"]
    assert bank.topics_for("History") == ("Rome", "Egypt")
    assert bank.topics_for("Missing") == ()
    assert len(bank) == 4
    assert len(bank.questions_for("History", "Rome")) == 2
    assert bank.questions_for("Art", "Rome") == []


def test_question_is_immutable() -> None:
    bank = parse_questions([question_record(options=["x", "y"], correct=0)])
    question = bank.questions[0]
    assert question.options == ("x", "y")
    assert question.is_correct(0)
    with pytest.raises(AttributeError):
        question.correct = 1  # type: ignore[misc]


@pytest.mark.parametrize(
    "payload, message",
    [
        ({"category": "x"}, "JSON array"),
        (["nope"], "not an object"),
        ([{"category": "c", "topic": "t"}], "missing"),
        ([{**question_record(), "options": "abc"}], "must be a list"),
        ([{**question_record(), "options": []}], "no options"),
        ([question_record(correct="1")], "integer index"),
        ([question_record(correct=True)], "integer index"),
        ([question_record(correct=3)], "out of range"),
        ([question_record(correct=-1)], "out of range"),
    ],
)
def test_parse_rejects_malformed_records(payload, message) -> None:
    with pytest.raises(QuestionFormatError, match=message):
        parse_questions(payload)


def test_load_question_bank_from_file(workspace) -> None:
    path = workspace.write_questions(
        [question_record("Music", "Jazz"), question_record("Music", "Rock")]
    )
    bank = load_question_bank(path)
    assert bank.topics_for("Music") == ("Jazz", "Rock")


def test_load_question_bank_missing_file(tmp_path) -> None:
    with pytest.raises(QuestionLoadError, match="Unable to read"):
        load_question_bank(tmp_path / "absent.json")


def test_load_question_bank_invalid_json(workspace) -> None:
    path = workspace.write("broken.json", "[{")
    with pytest.raises(QuestionLoadError, match="not valid JSON"):
        load_question_bank(path)


def test_load_or_empty_logs_and_degrades(tmp_path, caplog) -> None:
    logger = logging.getLogger("timed_quiz.test_questions")
    with caplog.at_level(logging.ERROR, logger=logger.name):
        bank = load_question_bank_or_empty(tmp_path / "absent.json", logger)
    assert isinstance(bank, QuestionBank)
    assert len(bank) == 0
    assert dict(bank.categories) == {}
    record = caplog.records[-1]
    assert record.event == "questions_load_failed"
    assert record.exc_info is not None


def test_load_or_empty_returns_bank(workspace) -> None:
    path = workspace.write_questions([question_record()])
    bank = load_question_bank_or_empty(path)
    assert len(bank) == 1


def test_bundled_questions_are_valid() -> None:
    path = bundled_questions_path()
    raw = json.loads(path.read_text(encoding="utf-8"))
    bank = load_question_bank(path)
    assert len(bank) == len(raw)
    assert bank.categories
    for category, topics in bank.categories.items():
        for topic in topics:
            assert bank.questions_for(category, topic)


def test_load_question_bank_rejects_non_utf8(workspace) -> None:
    path = workspace.write("latin.json", b"[\xff\xfe]")
    with pytest.raises(QuestionLoadError, match="Unable to read"):
        load_question_bank(path)


def test_load_or_empty_degrades_on_non_utf8(workspace) -> None:
    path = workspace.write("latin.json", b"[\xff\xfe]")
    bank = load_question_bank_or_empty(path)
    assert len(bank) == 0
