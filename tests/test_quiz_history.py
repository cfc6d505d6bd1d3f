from __future__ import annotations

import json

import pytest

from timed_quiz.quiz.history import HistoryError, HistoryStore, TestResult


def make_result(**overrides) -> TestResult:
    data = {
        "category": "Science",
        "topic": "Chemistry",
        "score": 2,
        "total": 3,
        "date": "2024-05-17",
    }
    data.update(overrides)
    return TestResult(**data)


def test_load_missing_file_returns_empty(tmp_path) -> None:
    store = HistoryStore(tmp_path / "history")
    assert store.load() == []
    assert not store.path.exists()


def test_append_keeps_existing_records_in_order(tmp_path) -> None:
    store = HistoryStore(tmp_path / "history")
    first = make_result(score=1)
    second = make_result(topic="Astronomy", score=3, total=4)
    store.append(first)
    store.append(second)
    store.append(first)

    assert store.load() == [first, second, first]
    payload = json.loads(store.path.read_text(encoding="utf-8"))
    assert payload[1] == {
        "category": "Science",
        "topic": "Astronomy",
        "score": 3,
        "total": 4,
        "date": "2024-05-17",
    }
    assert not list(store.path.parent.glob("*.tmp"))


def test_corrupt_file_raises(tmp_path) -> None:
    store = HistoryStore(tmp_path)
    store.path.write_text("not json", encoding="utf-8")
    with pytest.raises(HistoryError, match="Failed to parse"):
        store.load()


def test_non_list_payload_raises(tmp_path) -> None:
    store = HistoryStore(tmp_path)
    store.path.write_text('{"score": 1}', encoding="utf-8")
    with pytest.raises(HistoryError, match="JSON array"):
        store.load()


def test_record_missing_field_raises(tmp_path) -> None:
    store = HistoryStore(tmp_path)
    store.path.write_text('[{"category": "x"}]', encoding="utf-8")
    with pytest.raises(HistoryError, match="missing required field"):
        store.load()


def test_record_with_bad_number_raises() -> None:
    with pytest.raises(HistoryError, match="Malformed"):
        TestResult.from_dict(
            {
                "category": "c",
                "topic": "t",
                "score": "many",
                "total": 1,
                "date": "2024-01-01",
            }
        )


def test_ratio_handles_zero_total() -> None:
    assert make_result(total=0).ratio == 0.0
    assert make_result(score=3, total=4).ratio == pytest.approx(0.75)


def test_non_utf8_file_raises(tmp_path) -> None:
    store = HistoryStore(tmp_path)
    store.path.write_bytes(b"[\xff]")
    with pytest.raises(HistoryError, match="Failed to parse"):
        store.load()
    with pytest.raises(HistoryError):
        store.append(make_result())
