"""Append-only score history kept as a JSON array in the workspace."""

from __future__ import annotations

import json
import os
import tempfile
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Mapping, MutableMapping

__all__ = [
    "HISTORY_FILENAME",
    "HistoryError",
    "HistoryStore",
    "TestResult",
]

HISTORY_FILENAME = "results.json"


class HistoryError(RuntimeError):
    """Raised when the history file cannot be read or written."""


@dataclass(frozen=True)
class TestResult:
    """Summary of one finished session."""

    __test__ = False  # keep pytest from collecting this as a test class

    category: str
    topic: str
    score: int
    total: int
    date: str

    @property
    def ratio(self) -> float:
        if self.total <= 0:
            return 0.0
        return self.score / self.total

    def to_dict(self) -> MutableMapping[str, Any]:
        return {
            "category": self.category,
            "topic": self.topic,
            "score": self.score,
            "total": self.total,
            "date": self.date,
        }

    @classmethod
    def from_dict(cls, payload: Mapping[str, Any]) -> "TestResult":
        try:
            return cls(
                category=str(payload["category"]),
                topic=str(payload["topic"]),
                score=int(payload["score"]),
                total=int(payload["total"]),
                date=str(payload["date"]),
            )
        except KeyError as exc:
            raise HistoryError(
                f"History record missing required field: {exc}"
            ) from exc
        except (TypeError, ValueError) as exc:
            raise HistoryError(f"Malformed history record: {exc}") from exc


class HistoryStore:
    """Read and append :class:`TestResult` records under ``root``."""

    def __init__(self, root: Path, filename: str = HISTORY_FILENAME) -> None:
        self._path = Path(root) / filename

    @property
    def path(self) -> Path:
        return self._path

    def load(self) -> list[TestResult]:
        if not self._path.is_file():
            return []
        try:
            payload = json.loads(self._path.read_text(encoding="utf-8"))
        except (json.JSONDecodeError, UnicodeDecodeError) as exc:
            raise HistoryError(
                f"Failed to parse history file: {self._path}"
            ) from exc
        except OSError as exc:
            raise HistoryError(
                f"Unable to read history file {self._path}: {exc}"
            ) from exc
        if not isinstance(payload, list):
            raise HistoryError(
                f"History file must hold a JSON array: {self._path}"
            )
        return [TestResult.from_dict(item) for item in payload]

    def append(self, result: TestResult) -> None:
        records = [item.to_dict() for item in self.load()]
        records.append(result.to_dict())
        try:
            _atomic_write_json(self._path, records)
        except OSError as exc:
            raise HistoryError(
                f"Unable to write history file {self._path}: {exc}"
            ) from exc


def _atomic_write_json(path: Path, payload: Any) -> None:
    path.parent.mkdir(parents=True, exist_ok=True)
    handle = tempfile.NamedTemporaryFile(
        "w",
        delete=False,
        encoding="utf-8",
        dir=str(path.parent),
        suffix=".tmp",
    )
    try:
        json.dump(payload, handle, indent=2, ensure_ascii=False)
        handle.flush()
        os.fsync(handle.fileno())
    finally:
        handle.close()
    os.replace(handle.name, path)
    try:
        path.chmod(0o600)
    except PermissionError:  # pragma: no cover - depends on filesystem
        pass
