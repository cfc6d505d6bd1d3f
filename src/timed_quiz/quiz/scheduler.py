"""Cancellable deferred callbacks used by the session controller."""

from __future__ import annotations

from typing import Any, Callable, Protocol

from textual.message_pump import MessagePump

Action = Callable[[], None]


class Scheduler(Protocol):
    """Schedule callbacks and cancel them through the returned handle."""

    def call_later(self, delay: float, action: Action) -> Any:
        ...

    def call_every(self, interval: float, action: Action) -> Any:
        ...

    def cancel(self, handle: Any) -> None:
        ...


class TextualScheduler:
    """Run controller callbacks on a Textual app or screen timer."""

    def __init__(self, pump: MessagePump) -> None:
        self._pump = pump

    def call_later(self, delay: float, action: Action) -> Any:
        return self._pump.set_timer(delay, action)

    def call_every(self, interval: float, action: Action) -> Any:
        return self._pump.set_interval(interval, action)

    def cancel(self, handle: Any) -> None:
        if handle is not None:
            handle.stop()
