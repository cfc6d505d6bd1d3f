from __future__ import annotations

import asyncio
import logging
from datetime import date
from pathlib import Path
from typing import Callable, List, Optional

from rich.text import Text
from textual.app import App, ComposeResult
from textual.containers import Horizontal, Vertical
from textual.screen import ModalScreen, Screen
from textual.widgets import Button, DataTable, Footer, Label, Select, Static

from .config import QuizSettings
from .controller import QuizController, QuizUnavailableError, SessionState
from .history import HistoryError, HistoryStore
from .questions import QuestionBank, load_question_bank_or_empty
from .scheduler import TextualScheduler

TIMER_BANDS = ("ok", "warn", "danger")


def timer_band(seconds: int) -> str:
    """Colour band for the countdown: ok > 20s, warn > 10s, else danger."""
    if seconds <= 10:
        return "danger"
    if seconds <= 20:
        return "warn"
    return "ok"


def option_state(
    index: int,
    *,
    correct: int,
    selected: Optional[int],
    revealed: Optional[int],
) -> Optional[str]:
    """Return ``"correct"``, ``"incorrect"`` or ``None`` for an option.

    The picked option shows whether it was right; after a wrong pick or a
    timeout the revealed correct option is highlighted too.
    """
    if selected == index:
        return "correct" if index == correct else "incorrect"
    if revealed == index:
        return "correct"
    return None


class MenuScreen(Screen):
    BINDINGS = [("q", "app.quit", "Quit")]

    def compose(self) -> ComposeResult:
        with Vertical(id="menu"):
            yield Static("Timed Quiz", id="menu-title")
            yield Button("Take a test", id="play", variant="success")
            yield Button("Scores", id="scores", variant="primary")
            yield Button("Quit", id="quit")
        yield Footer()

    def on_button_pressed(self, event: Button.Pressed) -> None:
        bid = event.button.id or ""
        if bid == "play":
            self.app.open_quiz()  # type: ignore[attr-defined]
        elif bid == "scores":
            self.app.open_scores()  # type: ignore[attr-defined]
        elif bid == "quit":
            self.app.exit()


class UnavailableDialog(ModalScreen):
    """Blocking notice shown when a selection has no questions."""

    def __init__(self, message: str) -> None:
        super().__init__()
        self.message = message

    def compose(self) -> ComposeResult:
        with Vertical(id="dialog"):
            yield Static("No questions available", id="dialog-title")
            yield Static(self.message, id="dialog-message")
            yield Button("OK", id="dialog-ok", variant="primary")

    def on_button_pressed(self, event: Button.Pressed) -> None:
        event.stop()
        self.dismiss()


class QuizScreen(Screen):
    """Category/topic selection followed by the timed question loop."""

    BINDINGS = [
        ("1", "answer(0)", "Option 1"),
        ("2", "answer(1)", "Option 2"),
        ("3", "answer(2)", "Option 3"),
        ("4", "answer(3)", "Option 4"),
    ]

    def __init__(
        self, controller_factory: Callable[["QuizScreen"], QuizController]
    ) -> None:
        super().__init__()
        self.controller = controller_factory(self)
        self.controller.on_change = self.refresh_view
        self._option_buttons: List[Button] = []
        self._rendered_key: Optional[tuple[int, int]] = None

    def compose(self) -> ComposeResult:
        controller = self.controller
        with Vertical(id="setup"):
            yield Static("Choose a test", classes="heading")
            yield Label("Category")
            yield Select(
                [(name, name) for name in controller.categories],
                prompt="Select a category",
                id="category",
            )
            yield Label("Topic")
            yield Select([], prompt="Select a topic", id="topic")
            with Horizontal(classes="actions"):
                yield Button("Back to menu", id="back")
                yield Button("Start test", id="start", variant="success")
        with Vertical(id="session"):
            with Horizontal(id="status"):
                yield Static("", id="progress")
                yield Static("", id="score")
                yield Static("", id="timer")
            yield Static("", id="question")
            yield Vertical(id="options")
            with Horizontal(classes="actions"):
                yield Button("Reset test", id="reset", variant="error")
                yield Button("Cancel and return to menu", id="cancel")
        yield Footer()

    def on_mount(self) -> None:
        self.refresh_view()

    def on_unmount(self) -> None:
        self.controller.teardown()

    def on_select_changed(self, event: Select.Changed) -> None:
        value = event.value if isinstance(event.value, str) else ""
        if event.select.id == "category":
            self.controller.select_category(value)
            topics = self.query_one("#topic", Select)
            topics.set_options(
                [(name, name) for name in self.controller.topics()]
            )
        elif event.select.id == "topic":
            self.controller.select_topic(value)

    def on_button_pressed(self, event: Button.Pressed) -> None:
        button = event.button
        if button.has_class("option"):
            self.action_answer(int(button.name or 0))
            return
        bid = button.id or ""
        if bid == "start":
            self.start_session()
        elif bid == "back":
            self.controller.leave()
        elif bid == "reset":
            self.controller.reset()
        elif bid == "cancel":
            self.controller.abandon()

    def action_answer(self, index: int) -> None:
        state = self.controller.state
        if not state.started or index >= len(state.current.options):
            return
        self.controller.answer(index)

    def start_session(self) -> None:
        try:
            self.controller.start()
        except QuizUnavailableError:
            self.app.push_screen(
                UnavailableDialog(
                    "There are no questions for this category and topic. "
                    "Pick another selection."
                )
            )

    def refresh_view(self) -> None:
        if not self.is_attached:
            return
        state = self.controller.state
        self.query_one("#setup").display = not state.started
        self.query_one("#session").display = state.started
        if not state.started:
            self._rendered_key = None
            return

        question = state.current
        self.query_one("#progress", Static).update(
            f"Question {state.index + 1} of {state.total}"
        )
        self.query_one("#score", Static).update(f"Score: {state.score}")
        timer = self.query_one("#timer", Static)
        timer.update(f"{state.time_left}s")
        band = timer_band(state.time_left)
        for name in TIMER_BANDS:
            timer.set_class(name == band, f"timer-{name}")
        self.query_one("#question", Static).update(Text(question.question))
        self._sync_options(state)

    def _sync_options(self, state: SessionState) -> None:
        key = (state.index, id(state.current))
        if key != self._rendered_key:
            self._rendered_key = key
            container = self.query_one("#options", Vertical)
            container.remove_children()
            self._option_buttons = [
                Button(Text(text), name=str(idx), classes="option")
                for idx, text in enumerate(state.current.options)
            ]
            container.mount(*self._option_buttons)
        correct = state.current.correct
        for idx, button in enumerate(self._option_buttons):
            mark = option_state(
                idx,
                correct=correct,
                selected=state.selected,
                revealed=state.revealed_correct,
            )
            button.set_class(mark == "correct", "correct")
            button.set_class(mark == "incorrect", "incorrect")
            button.disabled = state.answered


class ScoresScreen(Screen):
    BINDINGS = [("escape", "app.pop_screen", "Back")]

    def __init__(self, history: HistoryStore) -> None:
        super().__init__()
        self.history = history

    def compose(self) -> ComposeResult:
        with Vertical(id="scores-view"):
            yield Static("Score History", classes="heading")
            yield Static("", id="scores-message")
            yield DataTable(id="scores-table")
            yield Button("Back to menu", id="scores-back")
        yield Footer()

    def on_mount(self) -> None:
        table = self.query_one("#scores-table", DataTable)
        table.add_columns("Date", "Category", "Topic", "Score")
        message = self.query_one("#scores-message", Static)
        try:
            results = self.history.load()
        except HistoryError as exc:
            message.update(f"Could not read history: {exc}")
            return
        if not results:
            message.update("No results saved yet.")
            return
        for result in reversed(results):
            table.add_row(
                result.date,
                result.category,
                result.topic,
                f"{result.score}/{result.total}",
            )

    def on_button_pressed(self, event: Button.Pressed) -> None:
        if event.button.id == "scores-back":
            self.app.pop_screen()


class QuizApp(App):
    CSS = """
.heading { text-style: bold; content-align: center middle; width: 100%; }
#menu { align: center middle; }
#menu Button { width: 30; margin: 1 0; }
.actions { height: auto; margin-top: 1; }
.actions Button { margin: 0 1; }
#session { display: none; }
#status { height: 3; }
#status Static { width: 1fr; padding: 1; }
#question { margin: 1 0; text-style: bold; }
#options { height: auto; }
#options Button { width: 100%; margin-bottom: 1; }
Button.correct { background: $success; }
Button.incorrect { background: $error; }
.timer-ok { background: $success; }
.timer-warn { background: $warning; }
.timer-danger { background: $error; }
UnavailableDialog { align: center middle; }
#dialog { width: 60; height: auto; border: thick $error; padding: 1 2; }
#dialog-title { text-style: bold; }
"""
    TITLE = "Timed Quiz"

    def __init__(
        self,
        questions_path: Path,
        *,
        history: HistoryStore,
        settings: Optional[QuizSettings] = None,
        logger: Optional[logging.Logger] = None,
        bank: Optional[QuestionBank] = None,
        today: Callable[[], date] = date.today,
    ) -> None:
        super().__init__()
        self.questions_path = questions_path
        self.history = history
        self.settings = settings or QuizSettings()
        self.logger = logger or logging.getLogger(__name__)
        self.bank = bank if bank is not None else QuestionBank()
        self.bank_loaded = bank is not None
        self._today = today

    def on_mount(self) -> None:
        self.push_screen(MenuScreen())
        if not self.bank_loaded:
            self.run_worker(self._load_bank(), exclusive=True, group="questions")

    async def _load_bank(self) -> None:
        self.bank = await asyncio.to_thread(
            load_question_bank_or_empty, self.questions_path, self.logger
        )
        self.bank_loaded = True

    def build_controller(self, screen: QuizScreen) -> QuizController:
        return QuizController(
            self.bank,
            scheduler=TextualScheduler(screen),
            history=self.history,
            navigator=self,
            settings=self.settings,
            today=self._today,
            logger=self.logger,
        )

    def open_quiz(self) -> None:
        if not self.bank_loaded:
            self.notify("Questions are still loading.")
            return
        self.push_screen(QuizScreen(self.build_controller))

    def open_scores(self) -> None:
        self.push_screen(ScoresScreen(self.history))

    # Navigator
    def to_menu(self) -> None:
        if isinstance(self.screen, (QuizScreen, ScoresScreen)):
            self.pop_screen()

    def to_results(self) -> None:
        self.switch_screen(ScoresScreen(self.history))
