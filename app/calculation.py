from typing import List, Sequence
import math

MS_PER_MINUTE = 60000.0
CHARS_PER_WORD = 5.0


def round_half_up(value: float) -> int:
    """Round .5 away from zero for positive values (JS Math.round semantics)."""
    return int(math.floor(value + 0.5))


def compute_wpm(total_chars: int, elapsed_ms: float) -> int:
    """
    WPM = (chars typed / 5) / elapsed minutes.
    Counts correct and incorrect characters alike. Zero elapsed time gives 0.
    """
    minutes = elapsed_ms / MS_PER_MINUTE
    if minutes <= 0:
        return 0
    return max(0, round_half_up((total_chars / CHARS_PER_WORD) / minutes))


def compute_accuracy(correct: int, typed: int) -> int:
    if typed <= 0:
        return 100
    return min(100, max(0, round_half_up(correct / typed * 100.0)))


def mean_interval(intervals: Sequence[float]) -> int:
    if not intervals:
        return 0
    return round_half_up(sum(intervals) / len(intervals))


def smooth(values: List[float], factor: float = 0.25) -> List[float]:
    """Exponential smoothing used for the summary WPM curve."""
    out, last = [], None
    for v in values:
        last = v if last is None else last + factor * (v - last)
        out.append(last)
    return out
