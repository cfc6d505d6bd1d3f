"""Question records and the category/topic index built from them.

Questions arrive as a JSON array of objects with ``category``, ``topic``,
``question``, ``options`` and a zero-based ``correct`` index. The bank is
parsed once and never mutated; sessions narrow it with
:meth:`QuestionBank.questions_for`.
"""

from __future__ import annotations

import json
import logging
from collections.abc import Iterable, Mapping, Sequence
from dataclasses import dataclass, field
from importlib import resources
from pathlib import Path
from types import MappingProxyType

__all__ = [
    "Question",
    "QuestionBank",
    "QuestionFormatError",
    "QuestionLoadError",
    "bundled_questions_path",
    "load_question_bank",
    "load_question_bank_or_empty",
    "parse_questions",
]

_REQUIRED_FIELDS = ("category", "topic", "question", "options", "correct")


class QuestionLoadError(RuntimeError):
    """Raised when the question file cannot be read or decoded."""


class QuestionFormatError(QuestionLoadError):
    """Raised when a question record does not match the expected shape."""


@dataclass(frozen=True)
class Question:
    """One multiple-choice question."""

    category: str
    topic: str
    question: str
    options: tuple[str, ...]
    correct: int

    def is_correct(self, index: int) -> bool:
        return index == self.correct


@dataclass(frozen=True)
class QuestionBank:
    """Immutable question list plus its category -> topics index."""

    questions: tuple[Question, ...] = ()
    categories: Mapping[str, tuple[str, ...]] = field(
        default_factory=lambda: MappingProxyType({})
    )

    @classmethod
    def from_questions(cls, questions: Iterable[Question]) -> "QuestionBank":
        items = tuple(questions)
        index: dict[str, list[str]] = {}
        for item in items:
            topics = index.setdefault(item.category, [])
            if item.topic not in topics:
                topics.append(item.topic)
        return cls(
            questions=items,
            categories=MappingProxyType(
                {name: tuple(topics) for name, topics in index.items()}
            ),
        )

    def __len__(self) -> int:
        return len(self.questions)

    def topics_for(self, category: str) -> tuple[str, ...]:
        return self.categories.get(category, ())

    def questions_for(self, category: str, topic: str) -> list[Question]:
        return [
            q
            for q in self.questions
            if q.category == category and q.topic == topic
        ]


def parse_questions(payload: object) -> QuestionBank:
    """Validate a decoded JSON payload and build a :class:`QuestionBank`."""

    if not isinstance(payload, list):
        raise QuestionFormatError(
            "Question file must contain a JSON array, found "
            f"{type(payload).__name__}."
        )
    return QuestionBank.from_questions(
        _parse_record(item, position) for position, item in enumerate(payload)
    )


def _parse_record(item: object, position: int) -> Question:
    if not isinstance(item, Mapping):
        raise QuestionFormatError(f"Question #{position} is not an object.")
    missing = [name for name in _REQUIRED_FIELDS if name not in item]
    if missing:
        raise QuestionFormatError(
            f"Question #{position} is missing: {', '.join(missing)}."
        )
    options = item["options"]
    if isinstance(options, (str, bytes)) or not isinstance(options, Sequence):
        raise QuestionFormatError(
            f"Question #{position} options must be a list."
        )
    if not options:
        raise QuestionFormatError(f"Question #{position} has no options.")
    correct = item["correct"]
    if isinstance(correct, bool) or not isinstance(correct, int):
        raise QuestionFormatError(
            f"Question #{position} 'correct' must be an integer index."
        )
    if not 0 <= correct < len(options):
        raise QuestionFormatError(
            f"Question #{position} 'correct' index {correct} is out of range "
            f"for {len(options)} option(s)."
        )
    return Question(
        category=str(item["category"]),
        topic=str(item["topic"]),
        question=str(item["question"]),
        options=tuple(str(option) for option in options),
        correct=correct,
    )


def load_question_bank(path: Path) -> QuestionBank:
    try:
        text = Path(path).read_text(encoding="utf-8")
    except (OSError, UnicodeDecodeError) as exc:
        raise QuestionLoadError(
            f"Unable to read question file {path}: {exc}"
        ) from exc
    try:
        payload = json.loads(text)
    except json.JSONDecodeError as exc:
        raise QuestionLoadError(
            f"Question file {path} is not valid JSON: {exc}"
        ) from exc
    return parse_questions(payload)


def load_question_bank_or_empty(
    path: Path, logger: logging.Logger | None = None
) -> QuestionBank:
    """Load ``path`` or degrade to an empty bank after logging the failure.

    An empty bank leaves nothing to select, so a session can never start.
    """

    log = logger or logging.getLogger(__name__)
    try:
        bank = load_question_bank(path)
    except QuestionLoadError:
        log.exception(
            "Failed to load questions",
            extra={"event": "questions_load_failed", "path": str(path)},
        )
        return QuestionBank()
    log.info(
        "Loaded %d question(s) across %d categories",
        len(bank),
        len(bank.categories),
        extra={"event": "questions_loaded", "path": str(path)},
    )
    return bank


def bundled_questions_path() -> Path:
    """Path of the sample question file shipped with the package."""

    resource = resources.files("timed_quiz.quiz").joinpath(
        "data/questions.json"
    )
    return Path(str(resource))
