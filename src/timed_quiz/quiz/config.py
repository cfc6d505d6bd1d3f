"""Settings loader for quiz sessions.

Precedence is CLI overrides > ``TIMED_QUIZ_*`` environment variables >
``quiz.toml`` > built-in defaults. The TOML file lives in the workspace
``config`` directory unless ``--config`` or ``TIMED_QUIZ_CONFIG`` points
elsewhere.
"""

from __future__ import annotations

import logging
import os
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Mapping, MutableMapping, Optional

from timed_quiz.core import config as core_config
from timed_quiz.core import workspace as workspace_mod

from .questions import bundled_questions_path

CONFIG_FILENAME = "quiz.toml"
CONFIG_ENV = "TIMED_QUIZ_CONFIG"
ENV_PREFIX = "TIMED_QUIZ_"
TEMPLATE_FILENAME = "template.toml"

QUESTION_SECONDS = 30
REVEAL_SECONDS = 3
FINISH_OFFSET = 1


class QuizConfigError(RuntimeError):
    """Raised when configuration parsing or validation fails."""


@dataclass(frozen=True)
class QuizSettings:
    """Timing and scoring knobs consumed by the session controller."""

    question_seconds: int = QUESTION_SECONDS
    reveal_seconds: float = REVEAL_SECONDS
    # Added to the correct-answer count when a result is persisted.
    finish_offset: int = FINISH_OFFSET


@dataclass(frozen=True)
class ConfigOverrides:
    questions_path: Optional[Path] = None
    question_seconds: Optional[int] = None
    reveal_seconds: Optional[float] = None
    finish_offset: Optional[int] = None
    log_level: Optional[str] = None


@dataclass(frozen=True)
class LoadResult:
    """Resolved settings plus the paths the caller needs."""

    settings: QuizSettings
    questions_path: Path
    log_level: str
    layout: workspace_mod.WorkspaceLayout
    config_path: Optional[Path]


def load_config(
    *,
    config_path: Optional[Path] = None,
    overrides: Optional[ConfigOverrides] = None,
    env: Optional[Mapping[str, str]] = None,
    workspace_path: Optional[Path] = None,
) -> LoadResult:
    overrides = overrides or ConfigOverrides()
    env_map = os.environ if env is None else env

    try:
        layout = workspace_mod.ensure_workspace(env=env_map, path=workspace_path)
    except workspace_mod.WorkspaceError as exc:
        raise QuizConfigError(str(exc)) from exc

    table = _default_table()
    requested = _resolve_config_path(config_path, env_map, layout)
    loaded_path: Optional[Path] = None
    if requested.exists():
        try:
            core_config.merge_defaults(table, core_config.load_toml(requested))
        except core_config.TomlConfigError as exc:
            raise QuizConfigError(str(exc)) from exc
        loaded_path = requested
    elif config_path is not None or (env_map.get(CONFIG_ENV) or "").strip():
        raise QuizConfigError(f"Config file not found: {requested}")

    questions_path = _pick_first(
        overrides.questions_path,
        _env_path(env_map, "QUESTIONS"),
        _optional_path(table["questions"]["path"]),
    )
    settings = QuizSettings(
        question_seconds=_positive_int(
            "timing.question_seconds",
            _pick_first(
                overrides.question_seconds,
                _env_number(env_map, "QUESTION_SECONDS", int),
                table["timing"]["question_seconds"],
            ),
        ),
        reveal_seconds=_positive_float(
            "timing.reveal_seconds",
            _pick_first(
                overrides.reveal_seconds,
                _env_number(env_map, "REVEAL_SECONDS", float),
                table["timing"]["reveal_seconds"],
            ),
        ),
        finish_offset=_non_negative_int(
            "scoring.finish_offset",
            _pick_first(
                overrides.finish_offset,
                _env_number(env_map, "FINISH_OFFSET", int),
                table["scoring"]["finish_offset"],
            ),
        ),
    )
    log_level = _log_level(
        _pick_first(
            overrides.log_level,
            (env_map.get(f"{ENV_PREFIX}LOG_LEVEL") or "").strip() or None,
            table["logging"]["level"],
        )
    )
    return LoadResult(
        settings=settings,
        questions_path=questions_path or bundled_questions_path(),
        log_level=log_level,
        layout=layout,
        config_path=loaded_path,
    )


def write_config_template(path: Path, *, overwrite: bool = False) -> Path:
    try:
        return core_config.write_packaged_template(
            __package__ or "timed_quiz.quiz",
            TEMPLATE_FILENAME,
            path,
            overwrite=overwrite,
        )
    except core_config.TomlConfigError as exc:
        raise QuizConfigError(str(exc)) from exc


def _default_table() -> MutableMapping[str, MutableMapping[str, Any]]:
    return {
        "questions": {"path": ""},
        "timing": {
            "question_seconds": QUESTION_SECONDS,
            "reveal_seconds": REVEAL_SECONDS,
        },
        "scoring": {"finish_offset": FINISH_OFFSET},
        "logging": {"level": "INFO"},
    }


def _resolve_config_path(
    config_path: Optional[Path],
    env_map: Mapping[str, str],
    layout: workspace_mod.WorkspaceLayout,
) -> Path:
    if config_path is not None:
        return config_path.expanduser()
    candidate = (env_map.get(CONFIG_ENV) or "").strip()
    if candidate:
        return Path(candidate).expanduser()
    return layout.path_for("config") / CONFIG_FILENAME


def _pick_first(*values: Any) -> Any:
    for value in values:
        if value is not None:
            return value
    return None


def _optional_path(value: object) -> Optional[Path]:
    if not value:
        return None
    return Path(str(value)).expanduser()


def _env_path(env_map: Mapping[str, str], suffix: str) -> Optional[Path]:
    return _optional_path((env_map.get(ENV_PREFIX + suffix) or "").strip())


def _env_number(env_map: Mapping[str, str], suffix: str, kind: type) -> Any:
    raw = (env_map.get(ENV_PREFIX + suffix) or "").strip()
    if not raw:
        return None
    try:
        return kind(raw)
    except ValueError as exc:
        raise QuizConfigError(
            f"{ENV_PREFIX}{suffix} must be a number, got '{raw}'."
        ) from exc


def _positive_int(name: str, value: Any) -> int:
    if isinstance(value, bool) or not isinstance(value, int) or value <= 0:
        raise QuizConfigError(f"{name} must be a positive integer.")
    return value


def _positive_float(name: str, value: Any) -> float:
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        raise QuizConfigError(f"{name} must be a number.")
    if value <= 0:
        raise QuizConfigError(f"{name} must be greater than zero.")
    return float(value)


def _non_negative_int(name: str, value: Any) -> int:
    if isinstance(value, bool) or not isinstance(value, int) or value < 0:
        raise QuizConfigError(f"{name} must be a non-negative integer.")
    return value


def _log_level(value: str) -> str:
    normalized = str(value).strip().upper()
    if not isinstance(logging.getLevelName(normalized), int):
        raise QuizConfigError(f"Unknown log level '{value}'.")
    return normalized
