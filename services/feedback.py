# services/feedback.py
from __future__ import annotations
from dataclasses import dataclass
from typing import List, Sequence

from app.config import DEFAULT_CONFIG, TutorConfig
from app.state import SessionStats


@dataclass(frozen=True)
class Badge:
    id: str
    label: str
    metric: str  # "wpm" or "accuracy"
    threshold: int

    def earned_by(self, stats: SessionStats) -> bool:
        return getattr(stats, self.metric) >= self.threshold


def badge_catalogue(config: TutorConfig = DEFAULT_CONFIG) -> List[Badge]:
    return [
        Badge("wpm50", f"🏅 {config.wpm_badge} WPM Club!", "wpm", config.wpm_badge),
        Badge("acc90", f"🎯 {config.accuracy_badge}% Accuracy Achieved!", "accuracy", config.accuracy_badge),
    ]


CAUSTIC_MESSAGES: List[str] = [
    "Omo, you dey slow like snail—try small jare!",
    "Accuracy don fall o—no dull yourself abeg!",
    "No b slack, make those keystrokes sharp sharp!",
]


class CausticFeedback:
    """Hands out stagnation remarks in a fixed rotation."""

    def __init__(self, messages: Sequence[str] = CAUSTIC_MESSAGES):
        if not messages:
            raise ValueError("at least one message is required")
        self._messages = list(messages)
        self._next = 0

    def next_message(self) -> str:
        msg = self._messages[self._next % len(self._messages)]
        self._next += 1
        return msg
