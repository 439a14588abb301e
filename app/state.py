from __future__ import annotations
from dataclasses import dataclass, field
from typing import Any, Dict, List


@dataclass
class KeyStat:
    hits: int = 0
    errors: int = 0

    @property
    def error_rate(self) -> float:
        return self.errors / self.hits if self.hits else 0.0


@dataclass(frozen=True)
class Lesson:
    level: str
    index: int
    text: str

    @property
    def title(self) -> str:
        return f"Lesson {self.index + 1}"


@dataclass(frozen=True)
class Metrics:
    """Live metrics returned for every keystroke."""
    wpm: int = 0
    accuracy: int = 0
    reaction: int = 0


@dataclass
class SessionStats:
    """Final statistics for one lesson or drill attempt."""
    wpm: int
    accuracy: int
    reaction: int
    per_key_stats: Dict[str, KeyStat] = field(default_factory=dict)
    duration_ms: float = 0.0
    typed_count: int = 0


@dataclass
class HistoryEntry:
    wpm: int
    accuracy: int


def default_badges() -> Dict[str, bool]:
    return {"wpm50": False, "acc90": False}


@dataclass
class Progress:
    """
    Learner state that survives across sessions.
    Serialised with to_dict()/from_dict() so any key-value store can hold it.
    """
    current_level: str
    current_index: int = 0
    badges: Dict[str, bool] = field(default_factory=default_badges)
    history: List[HistoryEntry] = field(default_factory=list)
    error_rates: Dict[str, KeyStat] = field(default_factory=dict)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "currentLevel": self.current_level,
            "currentIndex": self.current_index,
            "badges": dict(self.badges),
            "history": [{"wpm": h.wpm, "accuracy": h.accuracy} for h in self.history],
            "errorRates": {
                k: {"hits": v.hits, "errors": v.errors} for k, v in self.error_rates.items()
            },
        }

    @classmethod
    def from_dict(cls, d: Dict[str, Any], default_level: str, history_limit: int = 5) -> "Progress":
        """
        Build Progress from stored data, defaulting any missing or malformed part.
        Only the newest ``history_limit`` history entries are kept.
        """
        level = d.get("currentLevel")
        index = d.get("currentIndex")
        badges = default_badges()
        raw_badges = d.get("badges")
        if isinstance(raw_badges, dict):
            badges.update({str(k): bool(v) for k, v in raw_badges.items()})

        history: List[HistoryEntry] = []
        for item in d.get("history") or []:
            if isinstance(item, dict) and "wpm" in item and "accuracy" in item:
                history.append(HistoryEntry(wpm=int(item["wpm"]), accuracy=int(item["accuracy"])))
        history = history[max(0, len(history) - history_limit):]

        error_rates: Dict[str, KeyStat] = {}
        raw_rates = d.get("errorRates")
        if isinstance(raw_rates, dict):
            for key, data in raw_rates.items():
                if not isinstance(data, dict):
                    continue
                hits = max(0, int(data.get("hits", 0)))
                errors = min(hits, max(0, int(data.get("errors", 0))))
                error_rates[str(key)] = KeyStat(hits=hits, errors=errors)

        return cls(
            current_level=level if isinstance(level, str) else default_level,
            current_index=index if isinstance(index, int) and not isinstance(index, bool) else 0,
            badges=badges,
            history=history,
            error_rates=error_rates,
        )
