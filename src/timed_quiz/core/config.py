"""TOML loading and table merging shared by timed-quiz commands."""

from __future__ import annotations

import tomllib
from importlib import resources
from pathlib import Path
from typing import Any, Mapping, MutableMapping

__all__ = [
    "TomlConfigError",
    "load_toml",
    "merge_defaults",
    "write_packaged_template",
]


class TomlConfigError(RuntimeError):
    """Raised when TOML config IO or validation fails."""


def load_toml(path: Path) -> Mapping[str, Any]:
    """Parse the TOML document at ``path``.

    Missing files and syntax errors both become :class:`TomlConfigError` so
    each command can wrap them in its own exception type.
    """

    try:
        with path.open("rb") as handle:
            return tomllib.load(handle)
    except FileNotFoundError as exc:
        raise TomlConfigError(f"Config file not found: {path}") from exc
    except tomllib.TOMLDecodeError as exc:
        raise TomlConfigError(f"Failed to parse config TOML: {exc}") from exc


def merge_defaults(
    base: MutableMapping[str, Any],
    override: Mapping[str, Any],
    *,
    path: str = "",
) -> None:
    """Merge ``override`` into ``base`` in place.

    Keys absent from ``base`` are rejected, nested tables must stay tables,
    and scalar defaults that are not ``None`` pin the accepted type (an
    ``int`` default accepts ints but not bools or strings).
    """

    for key, value in override.items():
        dotted = f"{path}{key}"
        if key not in base:
            raise TomlConfigError(f"Unknown configuration key '{dotted}'.")
        current = base[key]
        if isinstance(current, MutableMapping):
            if not isinstance(value, Mapping):
                raise TomlConfigError(
                    f"Expected table for '{dotted}', found "
                    f"{type(value).__name__}."
                )
            merge_defaults(current, value, path=f"{dotted}.")
            continue
        if current is not None and not _same_kind(current, value):
            raise TomlConfigError(
                f"Expected {type(current).__name__} for '{dotted}', found "
                f"{type(value).__name__}."
            )
        base[key] = value


def write_packaged_template(
    package: str,
    filename: str,
    target: Path,
    *,
    overwrite: bool = False,
    mode: int = 0o600,
) -> Path:
    """Copy a TOML template shipped inside ``package`` to ``target``."""

    try:
        text = resources.files(package).joinpath(filename).read_text(
            encoding="utf-8"
        )
    except (FileNotFoundError, ModuleNotFoundError) as exc:
        raise TomlConfigError(
            f"Template '{filename}' not found in package '{package}'."
        ) from exc
    target.parent.mkdir(parents=True, exist_ok=True)
    if target.exists() and not overwrite:
        raise TomlConfigError(f"Config already exists: {target}")
    target.write_text(text, encoding="utf-8")
    try:
        target.chmod(mode)
    except PermissionError:  # pragma: no cover - depends on filesystem
        pass
    return target


def _same_kind(default: Any, value: Any) -> bool:
    if isinstance(default, bool) or isinstance(value, bool):
        return isinstance(default, bool) and isinstance(value, bool)
    if isinstance(default, (int, float)):
        return isinstance(value, (int, float))
    return isinstance(value, type(default))
