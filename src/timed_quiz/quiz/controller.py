"""Timer-driven quiz session controller.

The controller owns every piece of session state and is the only thing that
mutates it. Input comes from three places: the user (``select_*``,
``start``, ``answer``, ``reset``, ``abandon``), a once-per-second countdown
tick, and the end of the reveal window that follows each answer or timeout.
Timers are created through a :class:`~timed_quiz.quiz.scheduler.Scheduler`
and their handles are kept on the state so every transition that ends a
timer's validity can cancel it.

Phases::

    IDLE --start--> AWAITING_ANSWER --answer/timeout--> REVEALING
    REVEALING --reveal window, more questions--> AWAITING_ANSWER
    REVEALING --reveal window, last question--> FINISHED
    AWAITING_ANSWER/REVEALING --abandon--> IDLE
"""

from __future__ import annotations

import enum
import logging
from dataclasses import dataclass, field
from datetime import date
from typing import Any, Callable, Optional, Protocol

from .config import QuizSettings
from .history import HistoryError, HistoryStore, TestResult
from .questions import Question, QuestionBank
from .scheduler import Scheduler

__all__ = [
    "Navigator",
    "QuizController",
    "QuizUnavailableError",
    "SessionPhase",
    "SessionState",
]

TICK_SECONDS = 1.0


class QuizUnavailableError(RuntimeError):
    """Raised when no questions match the selected category and topic."""

    def __init__(self, category: str, topic: str) -> None:
        super().__init__(
            f"No questions available for category '{category}' and topic "
            f"'{topic}'."
        )
        self.category = category
        self.topic = topic


class Navigator(Protocol):
    """Receives the two directives the controller emits."""

    def to_menu(self) -> None:
        ...

    def to_results(self) -> None:
        ...


class SessionPhase(enum.Enum):
    IDLE = "idle"
    AWAITING_ANSWER = "awaiting_answer"
    REVEALING = "revealing"
    FINISHED = "finished"


@dataclass
class SessionState:
    """Mutable state of the current selection and session."""

    category: str = ""
    topic: str = ""
    started: bool = False
    index: int = 0
    score: int = 0
    time_left: int = 0
    timer_running: bool = False
    answered: bool = False
    selected: Optional[int] = None
    revealed_correct: Optional[int] = None
    timed_out: bool = False
    questions: list[Question] = field(default_factory=list)
    result: Optional[TestResult] = None
    tick_handle: Any = None
    reveal_handle: Any = None

    @property
    def total(self) -> int:
        return len(self.questions)

    @property
    def current(self) -> Question:
        return self.questions[self.index]

    @property
    def phase(self) -> SessionPhase:
        if self.started:
            if self.answered:
                return SessionPhase.REVEALING
            return SessionPhase.AWAITING_ANSWER
        if self.result is not None:
            return SessionPhase.FINISHED
        return SessionPhase.IDLE

    def clear_answer(self) -> None:
        self.answered = False
        self.selected = None
        self.revealed_correct = None
        self.timed_out = False


class QuizController:
    """Drive one quiz session at a time over a loaded question bank."""

    def __init__(
        self,
        bank: QuestionBank,
        *,
        scheduler: Scheduler,
        history: HistoryStore,
        navigator: Navigator,
        settings: QuizSettings | None = None,
        today: Callable[[], date] = date.today,
        logger: logging.Logger | None = None,
        on_change: Callable[[], None] | None = None,
    ) -> None:
        self.bank = bank
        self.settings = settings or QuizSettings()
        self.state = SessionState(time_left=self.settings.question_seconds)
        self.on_change = on_change
        self._scheduler = scheduler
        self._history = history
        self._navigator = navigator
        self._today = today
        self._logger = logger or logging.getLogger(__name__)
        self._offset_warned = False

    # Selection -----------------------------------------------------------

    @property
    def categories(self) -> tuple[str, ...]:
        return tuple(self.bank.categories)

    def topics(self) -> tuple[str, ...]:
        return self.bank.topics_for(self.state.category)

    def select_category(self, category: str) -> None:
        if self.state.started:
            return
        self.state.category = category
        if self.state.topic not in self.bank.topics_for(category):
            self.state.topic = ""
        self._changed()

    def select_topic(self, topic: str) -> None:
        if self.state.started:
            return
        self.state.topic = topic
        self._changed()

    def leave(self) -> None:
        """Go back to the menu from the selection view."""

        if self.state.started:
            self.abandon()
            return
        self._navigator.to_menu()

    # Session -------------------------------------------------------------

    def start(self) -> None:
        """Begin a session over the selected category and topic.

        Raises :class:`QuizUnavailableError` and leaves the state untouched
        when the selection matches no questions.
        """

        state = self.state
        if state.started:
            return
        questions = self.bank.questions_for(state.category, state.topic)
        if not questions:
            self._logger.info(
                "No questions for selection",
                extra={
                    "event": "session_unavailable",
                    "category": state.category,
                    "topic": state.topic,
                },
            )
            raise QuizUnavailableError(state.category, state.topic)

        state.questions = questions
        state.result = None
        state.started = True
        self._restart_run()
        self._logger.info(
            "Session started",
            extra={
                "event": "session_started",
                "category": state.category,
                "topic": state.topic,
                "total": state.total,
            },
        )
        self._changed()

    def answer(self, index: int) -> bool:
        """Lock in ``index`` for the current question.

        Returns ``False`` when no answer is expected right now (idle, or the
        question is already revealing).
        """

        state = self.state
        if state.phase is not SessionPhase.AWAITING_ANSWER:
            return False
        question = state.current
        if not 0 <= index < len(question.options):
            raise ValueError(
                f"Option {index} out of range for {len(question.options)} "
                "option(s)."
            )
        self._stop_ticker()
        state.answered = True
        state.selected = index
        correct = question.is_correct(index)
        if correct:
            state.score += 1
        else:
            state.revealed_correct = question.correct
        self._logger.debug(
            "Answer recorded",
            extra={
                "event": "answer",
                "question": state.index,
                "selected": index,
                "correct": correct,
            },
        )
        self._schedule_reveal()
        self._changed()
        return True

    def reset(self) -> None:
        """Restart the active question set from the first question."""

        if not self.state.started:
            return
        self._cancel_reveal()
        self._stop_ticker()
        self._restart_run()
        self._logger.info("Session reset", extra={"event": "session_reset"})
        self._changed()

    def abandon(self) -> None:
        """Drop the running session without saving a result."""

        state = self.state
        if not state.started:
            return
        self.teardown()
        state.started = False
        state.questions = []
        state.index = 0
        state.score = 0
        state.time_left = self.settings.question_seconds
        state.clear_answer()
        self._logger.info(
            "Session abandoned", extra={"event": "session_abandoned"}
        )
        self._changed()
        self._navigator.to_menu()

    def teardown(self) -> None:
        """Cancel every outstanding timer."""

        self._cancel_reveal()
        self._stop_ticker()

    # Timer callbacks -----------------------------------------------------

    def tick(self) -> None:
        state = self.state
        if not (state.started and state.timer_running):
            return
        state.time_left = max(state.time_left - 1, 0)
        if state.time_left == 0 and not state.answered:
            self._time_out()
        self._changed()

    def advance(self) -> None:
        """End the reveal window: next question or finish."""

        state = self.state
        state.reveal_handle = None
        if not state.started:
            return
        if state.index + 1 < state.total:
            state.index += 1
            state.time_left = self.settings.question_seconds
            state.clear_answer()
            self._start_ticker()
            self._changed()
            return
        self.finish()

    def finish(self) -> Optional[TestResult]:
        """Persist the running session's result and show the results.

        Does nothing unless a session is running.
        """

        state = self.state
        if not state.started:
            return None
        self.teardown()
        state.started = False
        offset = self.settings.finish_offset
        if offset and not self._offset_warned:
            self._offset_warned = True
            self._logger.warning(
                "Persisting score with a finish offset of %d",
                offset,
                extra={"event": "finish_offset", "offset": offset},
            )
        result = TestResult(
            category=state.category,
            topic=state.topic,
            score=state.score + offset,
            total=state.total,
            date=self._today().isoformat(),
        )
        try:
            self._history.append(result)
        except HistoryError:
            self._logger.exception(
                "Failed to save result",
                extra={"event": "history_write_failed"},
            )
        state.result = result
        self._logger.info(
            "Session finished",
            extra={"event": "session_finished", **result.to_dict()},
        )
        self._changed()
        self._navigator.to_results()
        return result

    # Internals -----------------------------------------------------------

    def _restart_run(self) -> None:
        state = self.state
        state.index = 0
        state.score = 0
        state.time_left = self.settings.question_seconds
        state.clear_answer()
        self._start_ticker()

    def _time_out(self) -> None:
        state = self.state
        self._stop_ticker()
        state.answered = True
        state.timed_out = True
        state.revealed_correct = state.current.correct
        self._logger.debug(
            "Question timed out",
            extra={"event": "timeout", "question": state.index},
        )
        self._schedule_reveal()

    def _start_ticker(self) -> None:
        state = self.state
        if state.tick_handle is not None:
            self._scheduler.cancel(state.tick_handle)
        state.timer_running = True
        state.tick_handle = self._scheduler.call_every(TICK_SECONDS, self.tick)

    def _stop_ticker(self) -> None:
        state = self.state
        state.timer_running = False
        if state.tick_handle is not None:
            self._scheduler.cancel(state.tick_handle)
            state.tick_handle = None

    def _schedule_reveal(self) -> None:
        self._cancel_reveal()
        self.state.reveal_handle = self._scheduler.call_later(
            self.settings.reveal_seconds, self.advance
        )

    def _cancel_reveal(self) -> None:
        if self.state.reveal_handle is not None:
            self._scheduler.cancel(self.state.reveal_handle)
            self.state.reveal_handle = None

    def _changed(self) -> None:
        if self.on_change is not None:
            self.on_change()
