# services/typing_engine.py
from __future__ import annotations
from typing import Callable, Dict, List, Optional

from app.calculation import compute_accuracy, compute_wpm, mean_interval, round_half_up
from app.state import KeyStat, Metrics, SessionStats
from core.chrono import monotonic_ms


class TypingMetrics:
    """
    Per-session keystroke recorder.
    Tracks counts, per-key hits/errors (keyed by the expected character)
    and the gaps between consecutive keystrokes.
    """

    def __init__(self, clock: Callable[[], float] = monotonic_ms):
        self._clock = clock
        self.init("")

    def init(self, text: str):
        self._text = text or ""
        self._start = self._clock()
        self._prev: Optional[float] = None
        self._typed = 0
        self._correct = 0
        self._errors = 0
        self._per_key: Dict[str, KeyStat] = {}
        self._intervals: List[float] = []
        self._finished = False

    @property
    def expected_text(self) -> str:
        return self._text

    @property
    def typed_count(self) -> int:
        return self._typed

    @property
    def correct_count(self) -> int:
        return self._correct

    @property
    def error_count(self) -> int:
        return self._errors

    @property
    def finished(self) -> bool:
        return self._finished

    def record_key(self, typed_char: str, expected_char: str) -> Metrics:
        if self._finished:
            return Metrics(wpm=0, accuracy=0, reaction=0)
        now = self._clock()
        if self._prev is not None:
            self._intervals.append(max(0.0, now - self._prev))
        self._prev = now

        self._typed += 1
        stat = self._per_key.setdefault(expected_char, KeyStat())
        stat.hits += 1
        if typed_char == expected_char:
            self._correct += 1
        else:
            self._errors += 1
            stat.errors += 1

        reaction = self._intervals[-1] if self._intervals else 0
        return Metrics(
            wpm=compute_wpm(self._correct + self._errors, now - self._start),
            accuracy=compute_accuracy(self._correct, self._typed),
            reaction=round_half_up(reaction),
        )

    def finish(self):
        self._finished = True

    def get_stats(self) -> SessionStats:
        now = self._clock()
        return SessionStats(
            wpm=compute_wpm(self._correct + self._errors, now - self._start),
            accuracy=compute_accuracy(self._correct, self._typed),
            reaction=mean_interval(self._intervals),
            per_key_stats={k: KeyStat(v.hits, v.errors) for k, v in self._per_key.items()},
            duration_ms=max(0.0, now - self._start),
            typed_count=self._typed,
        )
