"""Argument parsing and entry points for the quiz subcommands."""

import argparse
import sys
from pathlib import Path
from typing import Optional, Sequence

from rich.console import Console

from ..core.logging import configure_logger
from .config import ConfigOverrides, LoadResult, QuizConfigError, load_config
from .history import HistoryError, HistoryStore
from .questions import QuestionLoadError, load_question_bank
from .report import render_categories, render_history
from .view import QuizApp


def _add_common_options(parser: argparse.ArgumentParser) -> None:
    parser.add_argument(
        "--config",
        type=Path,
        help="Path to quiz.toml (defaults to the workspace config directory).",
    )
    parser.add_argument(
        "--workspace",
        type=Path,
        help="Override the workspace root (defaults to TIMED_QUIZ_HOME).",
    )
    parser.add_argument(
        "--questions",
        type=Path,
        help="JSON question file (defaults to the bundled sample set).",
    )


def build_play_parser() -> argparse.ArgumentParser:
    p = argparse.ArgumentParser(
        prog="quiz play",
        description="Pick a category and topic and answer timed questions.",
        formatter_class=argparse.ArgumentDefaultsHelpFormatter,
    )
    _add_common_options(p)
    p.add_argument(
        "--seconds",
        type=int,
        help="Countdown per question (overrides config).",
    )
    p.add_argument(
        "--reveal-seconds",
        type=float,
        help="How long answers stay revealed before advancing.",
    )
    p.add_argument(
        "--finish-offset",
        type=int,
        help="Points added to the saved score (config default is 1).",
    )
    p.add_argument("--log-level", help="File log level (e.g. DEBUG).")
    p.add_argument(
        "--verbose",
        action="store_true",
        help="Also echo log records to stderr.",
    )
    return p


def build_history_parser() -> argparse.ArgumentParser:
    p = argparse.ArgumentParser(
        prog="quiz history",
        description="Show saved quiz results.",
    )
    _add_common_options(p)
    p.add_argument(
        "--limit",
        type=int,
        default=0,
        help="Only show the most recent N results (0 = all).",
    )
    return p


def build_categories_parser() -> argparse.ArgumentParser:
    p = argparse.ArgumentParser(
        prog="quiz categories",
        description="List categories and topics in the question file.",
    )
    _add_common_options(p)
    return p


def _load(
    parser: argparse.ArgumentParser,
    args: argparse.Namespace,
    **overrides: object,
) -> LoadResult:
    try:
        return load_config(
            config_path=args.config,
            workspace_path=args.workspace,
            overrides=ConfigOverrides(
                questions_path=args.questions,
                **overrides,  # type: ignore[arg-type]
            ),
        )
    except QuizConfigError as exc:
        parser.error(str(exc))
        raise  # pragma: no cover - parser.error exits


def play_main(argv: Optional[Sequence[str]] = None) -> int:
    parser = build_play_parser()
    args = parser.parse_args(list(argv) if argv is not None else None)
    loaded = _load(
        parser,
        args,
        question_seconds=args.seconds,
        reveal_seconds=args.reveal_seconds,
        finish_offset=args.finish_offset,
        log_level=args.log_level,
    )
    logger, log_path = configure_logger(
        "timed_quiz.play",
        log_dir=loaded.layout.path_for("logs"),
        level=loaded.log_level,
        verbose=bool(args.verbose),
        capture_warnings=True,
    )
    logger.debug(
        "quiz play invoked",
        extra={
            "event": "cli",
            "questions": loaded.questions_path,
            "config": loaded.config_path,
        },
    )
    app = QuizApp(
        loaded.questions_path,
        history=HistoryStore(loaded.layout.path_for("history")),
        settings=loaded.settings,
        logger=logger,
    )
    app.run()
    sys.stdout.write(f"Log file: {log_path}\n")
    return 0


def history_main(argv: Optional[Sequence[str]] = None) -> int:
    parser = build_history_parser()
    args = parser.parse_args(list(argv) if argv is not None else None)
    loaded = _load(parser, args)
    store = HistoryStore(loaded.layout.path_for("history"))
    try:
        results = store.load()
    except HistoryError as exc:
        sys.stderr.write(f"Error: {exc}\n")
        return 1
    render_history(Console(), results, limit=max(int(args.limit), 0))
    return 0


def categories_main(argv: Optional[Sequence[str]] = None) -> int:
    parser = build_categories_parser()
    args = parser.parse_args(list(argv) if argv is not None else None)
    loaded = _load(parser, args)
    try:
        bank = load_question_bank(loaded.questions_path)
    except QuestionLoadError as exc:
        sys.stderr.write(f"Error: {exc}\n")
        return 1
    render_categories(Console(), bank)
    return 0
