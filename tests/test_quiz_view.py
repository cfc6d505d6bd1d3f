from __future__ import annotations

import asyncio
from datetime import date

import pytest
from textual.widgets import Button, Select

from fixtures import RecordingNavigator
from timed_quiz.quiz.config import QuizSettings
from timed_quiz.quiz.controller import QuizController
from timed_quiz.quiz.history import HistoryStore, TestResult
from timed_quiz.quiz.view import (
    MenuScreen,
    QuizApp,
    QuizScreen,
    ScoresScreen,
    UnavailableDialog,
    option_state,
    timer_band,
)


@pytest.mark.parametrize(
    "seconds, band",
    [(30, "ok"), (21, "ok"), (20, "warn"), (11, "warn"), (10, "danger"),
     (0, "danger")],
)
def test_timer_band_thresholds(seconds, band):
    assert timer_band(seconds) == band


def test_option_state_marks_pick_and_reveal():
    # Correct pick.
    assert option_state(1, correct=1, selected=1, revealed=None) == "correct"
    # Wrong pick plus the revealed right answer.
    assert option_state(2, correct=1, selected=2, revealed=1) == "incorrect"
    assert option_state(1, correct=1, selected=2, revealed=1) == "correct"
    assert option_state(0, correct=1, selected=2, revealed=1) is None
    # Timeout highlights only the right answer.
    assert option_state(1, correct=1, selected=None, revealed=1) == "correct"
    assert option_state(0, correct=1, selected=None, revealed=None) is None


def test_quiz_app_initial_state(tmp_path, bank):
    app = QuizApp(
        tmp_path / "questions.json",
        history=HistoryStore(tmp_path / "history"),
        bank=bank,
    )
    assert app.bank_loaded is True
    assert app.settings.question_seconds == 30

    pending = QuizApp(
        tmp_path / "questions.json",
        history=HistoryStore(tmp_path / "history"),
    )
    assert pending.bank_loaded is False
    assert len(pending.bank) == 0


def test_screen_wires_controller_refresh(bank, scheduler, history):
    def factory(screen):
        return QuizController(
            bank,
            scheduler=scheduler,
            history=history,
            navigator=RecordingNavigator(),
        )

    screen = QuizScreen(factory)
    assert screen.controller.on_change == screen.refresh_view
    # Not mounted yet, so refreshing is a no-op.
    screen.refresh_view()


def _app(tmp_path, bank, **kwargs) -> QuizApp:
    return QuizApp(
        tmp_path / "questions.json",
        history=HistoryStore(tmp_path / "history"),
        bank=bank,
        today=lambda: date(2024, 5, 17),
        **kwargs,
    )


def test_headless_session_flow(tmp_path, bank):
    async def scenario():
        app = _app(tmp_path, bank)
        async with app.run_test(size=(100, 40)) as pilot:
            assert isinstance(app.screen, MenuScreen)
            app.open_quiz()
            await pilot.pause()
            screen = app.screen
            assert isinstance(screen, QuizScreen)
            assert screen.query_one("#setup").display is True
            assert screen.query_one("#session").display is False

            screen.query_one("#category", Select).value = "Science"
            await pilot.pause()
            screen.query_one("#topic", Select).value = "Chemistry"
            await pilot.pause()
            assert screen.controller.state.topic == "Chemistry"

            screen.start_session()
            await pilot.pause()
            assert screen.query_one("#session").display is True
            options = list(screen.query("#options Button").results(Button))
            assert len(options) == 3

            screen.action_answer(2)
            await pilot.pause()
            assert options[2].has_class("incorrect")
            assert options[1].has_class("correct")
            assert all(button.disabled for button in options)
            assert screen.controller.state.score == 0

            screen.controller.abandon()
            await pilot.pause()
            assert isinstance(app.screen, MenuScreen)

    asyncio.run(scenario())


def test_headless_unavailable_selection(tmp_path, bank):
    async def scenario():
        app = _app(tmp_path, bank)
        async with app.run_test(size=(100, 40)) as pilot:
            app.open_quiz()
            await pilot.pause()
            screen = app.screen
            screen.controller.select_category("Science")
            screen.controller.select_topic("Geology")
            screen.start_session()
            await pilot.pause()
            assert isinstance(app.screen, UnavailableDialog)
            app.screen.query_one("#dialog-ok", Button).press()
            await pilot.pause()
            assert app.screen is screen
            assert screen.controller.state.started is False

    asyncio.run(scenario())


def test_headless_finish_shows_scores(tmp_path, bank):
    async def scenario():
        app = _app(tmp_path, bank, settings=QuizSettings(reveal_seconds=0.2))
        async with app.run_test(size=(100, 40)) as pilot:
            app.open_quiz()
            await pilot.pause()
            screen = app.screen
            screen.controller.select_category("Science")
            screen.controller.select_topic("Astronomy")
            screen.start_session()
            await pilot.pause()
            screen.controller.answer(0)
            assert isinstance(app.screen, QuizScreen)
            await pilot.pause(0.6)
            await pilot.pause()
            assert isinstance(app.screen, ScoresScreen)
            assert app.history.load() == [
                TestResult("Science", "Astronomy", 2, 1, "2024-05-17")
            ]

    asyncio.run(scenario())
