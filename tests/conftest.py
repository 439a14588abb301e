from __future__ import annotations

import copy
import random

import pytest

from app.state import Progress
from services.adaptive_engine import AdaptiveEngine
from services.session import SessionOrchestrator
from services.typing_engine import TypingMetrics


class FakeClock:
    """Millisecond clock advanced by hand."""

    def __init__(self, start: float = 1_000.0) -> None:
        self.now = start

    def __call__(self) -> float:
        return self.now

    def advance(self, ms: float) -> None:
        self.now += ms


class MemoryProgressStore:
    def __init__(self, progress: Progress | None = None, fail_saves: bool = False) -> None:
        self.saved = copy.deepcopy(progress)
        self.fail_saves = fail_saves
        self.save_count = 0

    def load(self) -> Progress | None:
        return copy.deepcopy(self.saved)

    def save(self, progress: Progress) -> bool:
        self.save_count += 1
        if self.fail_saves:
            return False
        self.saved = copy.deepcopy(progress)
        return True


class ManualCall:
    def __init__(self, delay_ms: int, fn) -> None:
        self.delay_ms = delay_ms
        self.fn = fn
        self.cancelled = False
        self.fired = False

    @property
    def active(self) -> bool:
        return not (self.cancelled or self.fired)

    def cancel(self) -> None:
        self.cancelled = True

    def fire(self) -> None:
        if self.active:
            self.fired = True
            self.fn()


class ManualScheduler:
    def __init__(self) -> None:
        self.calls: list[ManualCall] = []

    def call_later(self, delay_ms: int, fn) -> ManualCall:
        call = ManualCall(delay_ms, fn)
        self.calls.append(call)
        return call

    @property
    def pending(self) -> list[ManualCall]:
        return [c for c in self.calls if c.active]


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock()


@pytest.fixture
def store() -> MemoryProgressStore:
    return MemoryProgressStore()


@pytest.fixture
def engine(store: MemoryProgressStore) -> AdaptiveEngine:
    return AdaptiveEngine(store, rng=random.Random(1234))


@pytest.fixture
def scheduler() -> ManualScheduler:
    return ManualScheduler()


@pytest.fixture
def session(engine: AdaptiveEngine, clock: FakeClock, scheduler: ManualScheduler) -> SessionOrchestrator:
    return SessionOrchestrator(engine, metrics=TypingMetrics(clock), scheduler=scheduler)
