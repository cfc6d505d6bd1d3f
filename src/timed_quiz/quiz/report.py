"""Rich renderers for the non-interactive ``history`` and ``categories``
commands."""

from __future__ import annotations

from collections.abc import Sequence

from rich import box
from rich.console import Console
from rich.panel import Panel
from rich.table import Table
from rich.text import Text
from rich.tree import Tree

from .history import TestResult
from .questions import QuestionBank


def ratio_style(ratio: float) -> str:
    if ratio >= 0.8:
        return "bold green"
    if ratio >= 0.5:
        return "yellow"
    return "red"


def render_history(
    console: Console,
    results: Sequence[TestResult],
    *,
    limit: int = 0,
) -> None:
    """Print saved results, newest last, optionally only the last ``limit``."""

    if not results:
        console.print(
            Panel(
                "No results saved yet. Play a quiz first.",
                title="Score History",
                border_style="yellow",
            )
        )
        return

    shown = list(results[-limit:]) if limit > 0 else list(results)
    table = Table(title="Score History", box=box.SIMPLE, expand=False)
    table.add_column("#", justify="right", style="dim")
    table.add_column("Date")
    table.add_column("Category")
    table.add_column("Topic")
    table.add_column("Score", justify="right")
    table.add_column("%", justify="right")

    offset = len(results) - len(shown)
    for idx, result in enumerate(shown, start=offset + 1):
        percent = Text(
            f"{result.ratio * 100:.0f}%", style=ratio_style(result.ratio)
        )
        table.add_row(
            str(idx),
            result.date,
            result.category,
            result.topic,
            f"{result.score}/{result.total}",
            percent,
        )
    console.print(table)


def render_categories(console: Console, bank: QuestionBank) -> None:
    if not bank.categories:
        console.print(
            Panel(
                "Question bank is empty.",
                title="Categories",
                border_style="yellow",
            )
        )
        return
    tree = Tree(Text("Categories", style="bold magenta"))
    for category, topics in bank.categories.items():
        branch = tree.add(Text(category, style="bold cyan"))
        for topic in topics:
            count = len(bank.questions_for(category, topic))
            branch.add(Text.assemble(topic, (f"  ({count})", "dim")))
    console.print(tree)
