# services/adaptive_engine.py
from __future__ import annotations
from typing import Dict, List, Mapping, Optional, Protocol, Sequence
import logging
import random

from app import curriculum
from app.config import DEFAULT_CONFIG, TutorConfig
from app.errors import TutorError
from app.state import HistoryEntry, KeyStat, Lesson, Progress, SessionStats
from services.feedback import Badge, badge_catalogue
from services.weakkeys import MUSCLE_MEMORY_ROUTINE, generate_drill, high_error_keys

logger = logging.getLogger(__name__)


class ProgressStore(Protocol):
    def load(self) -> Optional[Progress]: ...

    def save(self, progress: Progress) -> bool: ...


def default_progress() -> Progress:
    first = curriculum.first_lesson()
    return Progress(current_level=first.level, current_index=first.index)


class AdaptiveEngine:
    """
    Owns the learner's Progress and every decision made from it:
      - curriculum movement toward the 80-90 % accuracy band
      - cross-session per-key error accumulation and drill generation
      - bounded session history and stagnation detection
      - one-time badges
    Every mutation is written through to the store immediately.
    """

    def __init__(
        self,
        store: ProgressStore,
        config: TutorConfig = DEFAULT_CONFIG,
        rng: Optional[random.Random] = None,
    ):
        self.store = store
        self.config = config
        self.rng = rng or random.Random()
        self.progress = self._load()

    # ---------------- persistence ----------------
    def _load(self) -> Progress:
        progress = self.store.load()
        if progress is None:
            return default_progress()
        limit = self.config.history_limit
        if len(progress.history) > limit:
            progress.history = progress.history[len(progress.history) - limit:]
        if curriculum.find_lesson(progress.current_level, progress.current_index) is None:
            logger.warning(
                "Stored lesson (%s, %s) does not exist; starting from the first lesson",
                progress.current_level, progress.current_index,
            )
            first = curriculum.first_lesson()
            progress.current_level = first.level
            progress.current_index = first.index
        return progress

    def save(self) -> bool:
        ok = self.store.save(self.progress)
        if not ok:
            logger.warning("Progress not persisted; continuing with in-memory state")
        return ok

    # ---------------- curriculum ----------------
    def get_lesson_list(self) -> Dict[str, List[Lesson]]:
        return curriculum.group_by_level()

    def get_current_lesson(self) -> Lesson:
        lesson = curriculum.find_lesson(self.progress.current_level, self.progress.current_index)
        if lesson is None:
            raise TutorError(
                f"No lesson at {self.progress.current_level} #{self.progress.current_index}"
            )
        return lesson

    def set_lesson(self, level: str, index: int):
        if curriculum.find_lesson(level, index) is None:
            raise ValueError(f"Unknown lesson: {level} #{index}")
        self.progress.current_level = level
        self.progress.current_index = index
        self.save()

    def choose_next_lesson(self, accuracy: float) -> Lesson:
        """
        Move toward the target accuracy band:
        above the band advances, below retreats, inside repeats.
        The ends of the curriculum absorb the move.
        """
        level = self.progress.current_level
        index = self.progress.current_index
        level_idx = curriculum.LEVEL_ORDER.index(level)

        if accuracy > self.config.advance_above:
            if index < len(curriculum.lessons_in_level(level)) - 1:
                index += 1
            elif level_idx < len(curriculum.LEVEL_ORDER) - 1:
                level = curriculum.LEVEL_ORDER[level_idx + 1]
                index = 0
        elif accuracy < self.config.retreat_below:
            if index > 0:
                index -= 1
            elif level_idx > 0:
                level = curriculum.LEVEL_ORDER[level_idx - 1]
                index = len(curriculum.lessons_in_level(level)) - 1

        if (level, index) != (self.progress.current_level, self.progress.current_index):
            logger.info("Accuracy %s%%: moving to %s lesson %d", accuracy, level, index + 1)
        self.progress.current_level = level
        self.progress.current_index = index
        self.save()
        return self.get_current_lesson()

    # ---------------- accumulation ----------------
    def accumulate_key_stats(self, per_key_stats: Mapping[str, KeyStat]):
        rates = self.progress.error_rates
        for key, stat in per_key_stats.items():
            total = rates.setdefault(key, KeyStat())
            total.hits += stat.hits
            total.errors += stat.errors
        self.save()

    def update_history(self, stats: SessionStats):
        history = self.progress.history
        history.append(HistoryEntry(wpm=stats.wpm, accuracy=stats.accuracy))
        while len(history) > self.config.history_limit:
            history.pop(0)
        self.save()

    def is_stagnant(self) -> bool:
        """
        True when each of the last three session-to-session changes moved
        WPM and accuracy by less than two points. Deltas are computed across
        the whole history and only the trailing ones are examined, so a
        three-entry history yields two deltas and both must qualify.
        """
        h = self.progress.history
        window = self.config.stagnation_window
        if len(h) < window:
            return False
        deltas = [(h[i].wpm - h[i - 1].wpm, h[i].accuracy - h[i - 1].accuracy) for i in range(1, len(h))]
        limit = self.config.stagnation_delta
        return all(abs(dw) < limit and abs(da) < limit for dw, da in deltas[-window:])

    # ---------------- drills ----------------
    def get_high_error_keys(self, threshold: Optional[float] = None) -> List[str]:
        if threshold is None:
            threshold = self.config.error_threshold
        return high_error_keys(self.progress.error_rates, threshold, self.config.min_hits)

    def generate_drill(self, keys: Sequence[str]) -> str:
        return generate_drill(
            keys,
            self.rng,
            clusters=self.config.drill_clusters,
            size=self.config.drill_cluster_size,
        )

    def get_muscle_memory_routine(self) -> str:
        return MUSCLE_MEMORY_ROUTINE

    # ---------------- badges ----------------
    def award_badges(self, stats: SessionStats) -> List[Badge]:
        """Award every badge not yet held whose threshold the session met."""
        awarded = []
        badges = self.progress.badges
        for badge in badge_catalogue(self.config):
            if not badges.get(badge.id, False) and badge.earned_by(stats):
                badges[badge.id] = True
                awarded.append(badge)
        if awarded:
            logger.info("Badges earned: %s", ", ".join(b.id for b in awarded))
        self.save()
        return awarded
