from ._main import categories_main, history_main, play_main
from .config import (
    ConfigOverrides,
    LoadResult,
    QuizConfigError,
    QuizSettings,
    load_config,
    write_config_template,
)
from .controller import (
    Navigator,
    QuizController,
    QuizUnavailableError,
    SessionPhase,
    SessionState,
)
from .history import HistoryError, HistoryStore, TestResult
from .questions import (
    Question,
    QuestionBank,
    QuestionFormatError,
    QuestionLoadError,
    bundled_questions_path,
    load_question_bank,
    load_question_bank_or_empty,
    parse_questions,
)
from .report import render_categories, render_history
from .scheduler import Scheduler, TextualScheduler
from .view import QuizApp, QuizScreen, ScoresScreen, UnavailableDialog

__all__ = [
    "categories_main",
    "history_main",
    "play_main",
    "ConfigOverrides",
    "LoadResult",
    "QuizConfigError",
    "QuizSettings",
    "load_config",
    "write_config_template",
    "Navigator",
    "QuizController",
    "QuizUnavailableError",
    "SessionPhase",
    "SessionState",
    "HistoryError",
    "HistoryStore",
    "TestResult",
    "Question",
    "QuestionBank",
    "QuestionFormatError",
    "QuestionLoadError",
    "bundled_questions_path",
    "load_question_bank",
    "load_question_bank_or_empty",
    "parse_questions",
    "render_categories",
    "render_history",
    "Scheduler",
    "TextualScheduler",
    "QuizApp",
    "QuizScreen",
    "ScoresScreen",
    "UnavailableDialog",
]
