from __future__ import annotations

import sys
from datetime import date
from pathlib import Path
from typing import Callable

import pytest

TESTS_DIR = Path(__file__).resolve().parent
if str(TESTS_DIR) not in sys.path:
    sys.path.insert(0, str(TESTS_DIR))

# Ensure src/ is importable without an editable install
ROOT = TESTS_DIR.parent
SRC = str(ROOT / "src")
if SRC not in sys.path:
    sys.path.insert(0, SRC)

from fixtures import (  # noqa: E402
    ManualScheduler,
    RecordingNavigator,
    WorkspaceBuilder,
    question_record,
)

from timed_quiz.core import workspace as workspace_mod  # noqa: E402
from timed_quiz.quiz.config import QuizSettings  # noqa: E402
from timed_quiz.quiz.controller import QuizController  # noqa: E402
from timed_quiz.quiz.history import HistoryStore  # noqa: E402
from timed_quiz.quiz.questions import QuestionBank, parse_questions  # noqa: E402

FIXED_DAY = date(2024, 5, 17)


@pytest.fixture(autouse=True)
def _isolate_workspace(
    tmp_path: Path, monkeypatch: pytest.MonkeyPatch
) -> None:
    """Never touch the real ~/.timed-quiz during tests."""

    monkeypatch.setenv(workspace_mod.WORKSPACE_ENV, str(tmp_path / "home"))
    monkeypatch.delenv("TIMED_QUIZ_CONFIG", raising=False)
    for suffix in (
        "QUESTIONS",
        "QUESTION_SECONDS",
        "REVEAL_SECONDS",
        "FINISH_OFFSET",
        "LOG_LEVEL",
    ):
        monkeypatch.delenv(f"TIMED_QUIZ_{suffix}", raising=False)


@pytest.fixture
def workspace(tmp_path: Path) -> WorkspaceBuilder:
    """Provide a helper bound to pytest's per-test tmp directory."""

    return WorkspaceBuilder(tmp_path)


@pytest.fixture
def scheduler() -> ManualScheduler:
    return ManualScheduler()


@pytest.fixture
def navigator() -> RecordingNavigator:
    return RecordingNavigator()


@pytest.fixture
def history(tmp_path: Path) -> HistoryStore:
    return HistoryStore(tmp_path / "history")


@pytest.fixture
def bank() -> QuestionBank:
    """Three chemistry questions, one astronomy question, one Python one."""

    return parse_questions(
        [
            question_record("Science", "Chemistry", correct=1),
            question_record("Science", "Chemistry", correct=0),
            question_record("Science", "Chemistry", correct=2),
            question_record("Science", "Astronomy", correct=0),
            question_record("Programming", "Python", correct=1),
        ]
    )


@pytest.fixture
def make_controller(
    bank: QuestionBank,
    scheduler: ManualScheduler,
    history: HistoryStore,
    navigator: RecordingNavigator,
) -> Callable[..., QuizController]:
    def _make(**kwargs) -> QuizController:
        kwargs.setdefault("settings", QuizSettings())
        kwargs.setdefault("today", lambda: FIXED_DAY)
        return QuizController(
            kwargs.pop("bank", bank),
            scheduler=scheduler,
            history=history,
            navigator=navigator,
            **kwargs,
        )

    return _make
