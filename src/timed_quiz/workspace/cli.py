"""``quiz init``: create the workspace and the default quiz.toml."""

from __future__ import annotations

import argparse
import sys
from pathlib import Path
from typing import Mapping, Sequence

from timed_quiz.core import workspace as workspace_mod
from timed_quiz.quiz.config import (
    CONFIG_FILENAME,
    QuizConfigError,
    write_config_template,
)


def _build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="quiz init",
        description=(
            "Create the timed-quiz workspace (config, logs, history) and "
            "write a quiz.toml template."
        ),
    )
    parser.add_argument(
        "--path",
        type=Path,
        help="Override the workspace root (defaults to TIMED_QUIZ_HOME or "
        "~/.timed-quiz).",
    )
    parser.add_argument(
        "--force",
        action="store_true",
        help="Overwrite an existing quiz.toml with the template.",
    )
    parser.add_argument(
        "--quiet",
        action="store_true",
        help="Suppress informational output on success.",
    )
    return parser


def _status(created: Mapping[str, bool], key: str) -> str:
    return "created" if created.get(key, False) else "exists"


def main(argv: Sequence[str] | None = None) -> int:
    parser = _build_parser()
    args = parser.parse_args(list(argv) if argv is not None else None)

    try:
        layout = workspace_mod.ensure_workspace(path=args.path)
    except workspace_mod.WorkspaceError as exc:
        sys.stderr.write(f"Error: {exc}\n")
        return 2

    config_path = layout.path_for("config") / CONFIG_FILENAME
    if config_path.exists() and not args.force:
        config_status = "exists"
    else:
        try:
            write_config_template(config_path, overwrite=args.force)
        except QuizConfigError as exc:
            sys.stderr.write(f"Error: {exc}\n")
            return 2
        config_status = "written"

    if args.quiet:
        return 0

    home_status = _status(layout.created, "home")
    lines = [f"Workspace ready at {layout.home} ({home_status})"]
    width = max(len(name) for name in layout.directories)
    for name, directory in layout.items():
        status = _status(layout.created, name)
        lines.append(f"  {name.ljust(width)}  {directory} ({status})")
    lines.append(f"Config: {config_path} ({config_status})")
    sys.stdout.write("\n".join(lines) + "\n")
    return 0


if __name__ == "__main__":  # pragma: no cover - module CLI guard
    raise SystemExit(main())
