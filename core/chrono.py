# core/chrono.py
from __future__ import annotations
from typing import Callable, Optional, Protocol
import time

from PySide6.QtCore import QObject, QTimer


def monotonic_ms() -> float:
    """Default clock: monotonic milliseconds."""
    return time.monotonic() * 1000.0


class DeferredCall(Protocol):
    def cancel(self) -> None: ...

    @property
    def active(self) -> bool: ...


class Scheduler(Protocol):
    def call_later(self, delay_ms: int, fn: Callable[[], None]) -> DeferredCall: ...


class QtDeferredCall:
    """Single-shot QTimer wrapper that can be cancelled before it fires."""

    def __init__(self, delay_ms: int, fn: Callable[[], None], parent: Optional[QObject] = None):
        self._fn = fn
        self._fired = False
        self._cancelled = False
        self._timer = QTimer(parent)
        self._timer.setSingleShot(True)
        self._timer.setInterval(max(0, int(delay_ms)))
        self._timer.timeout.connect(self._on_timeout)
        self._timer.start()

    @property
    def active(self) -> bool:
        return not (self._fired or self._cancelled) and self._timer.isActive()

    def cancel(self) -> None:
        if self._fired or self._cancelled:
            return
        self._cancelled = True
        self._timer.stop()
        self._timer.deleteLater()

    def _on_timeout(self):
        if self._fired or self._cancelled:
            return
        self._fired = True
        self._timer.deleteLater()
        self._fn()


class QtScheduler:
    """Scheduler backed by the Qt event loop."""

    def __init__(self, parent: Optional[QObject] = None):
        self._parent = parent

    def call_later(self, delay_ms: int, fn: Callable[[], None]) -> QtDeferredCall:
        return QtDeferredCall(delay_ms, fn, self._parent)
