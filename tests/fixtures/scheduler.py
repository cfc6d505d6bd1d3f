"""Deterministic stand-in for the Textual timer scheduler."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Callable, List, Optional


@dataclass
class ScheduledCall:
    due: float
    action: Callable[[], None]
    interval: Optional[float] = None
    cancelled: bool = False

    @property
    def repeating(self) -> bool:
        return self.interval is not None


class ManualScheduler:
    """Fake clock: callbacks only fire when ``advance`` moves time forward."""

    def __init__(self) -> None:
        self.now = 0.0
        self.calls: List[ScheduledCall] = []

    def call_later(
        self, delay: float, action: Callable[[], None]
    ) -> ScheduledCall:
        return self._add(ScheduledCall(self.now + delay, action))

    def call_every(
        self, interval: float, action: Callable[[], None]
    ) -> ScheduledCall:
        return self._add(ScheduledCall(self.now + interval, action, interval))

    def cancel(self, handle: ScheduledCall) -> None:
        handle.cancelled = True

    def pending(self) -> List[ScheduledCall]:
        return [call for call in self.calls if not call.cancelled]

    def advance(self, seconds: float) -> None:
        target = self.now + seconds
        while True:
            due = [
                call
                for call in self.pending()
                if call.due <= target + 1e-9
            ]
            if not due:
                break
            call = min(due, key=lambda item: item.due)
            self.now = call.due
            if call.repeating:
                call.due += call.interval  # type: ignore[operator]
            else:
                call.cancelled = True
            call.action()
        self.now = target

    def _add(self, call: ScheduledCall) -> ScheduledCall:
        self.calls.append(call)
        return call
