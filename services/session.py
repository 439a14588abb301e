# services/session.py
from __future__ import annotations
from dataclasses import dataclass, field
from enum import Enum
from typing import Callable, List, Optional
import logging

from app.state import Lesson, Metrics, SessionStats
from app.validation import normalize_keystroke
from core.chrono import DeferredCall, Scheduler
from services.adaptive_engine import AdaptiveEngine
from services.feedback import Badge, CausticFeedback
from services.typing_engine import TypingMetrics

logger = logging.getLogger(__name__)

DRILL_HEADER = "Drill Session"


class SessionState(Enum):
    IDLE = "idle"
    ACTIVE = "active"
    COMPLETED = "completed"


class NextAction(Enum):
    START_DRILL = "start_drill"
    REPEAT_LESSON = "repeat_lesson"
    LESSON_COMPLETE = "lesson_complete"


@dataclass
class CompletionResult:
    stats: SessionStats
    badges: List[Badge] = field(default_factory=list)
    stagnation_message: Optional[str] = None
    next_action: NextAction = NextAction.LESSON_COMPLETE
    drill_text: Optional[str] = None
    was_drill: bool = False
    lesson: Optional[Lesson] = None  # the lesson practised (or returned to after a drill)


@dataclass
class KeystrokeResult:
    position: int  # index of the character just typed
    correct: bool
    metrics: Metrics
    completion: Optional[CompletionResult] = None


def lesson_header(lesson: Lesson) -> str:
    return f"{lesson.level} — Lesson {lesson.index + 1}"


class SessionOrchestrator:
    """
    Drives one lesson/drill at a time:
      start_session -> record_keystroke ... -> complete_session -> next action.
    The presentation layer feeds it key events and renders the results it returns.
    """

    def __init__(
        self,
        engine: AdaptiveEngine,
        metrics: Optional[TypingMetrics] = None,
        scheduler: Optional[Scheduler] = None,
        caustic: Optional[CausticFeedback] = None,
        on_session_started: Optional[Callable[[str, str], None]] = None,
        on_completed: Optional[Callable[[CompletionResult], None]] = None,
    ):
        self.engine = engine
        self.metrics = metrics or TypingMetrics()
        self.scheduler = scheduler
        self.caustic = caustic or CausticFeedback()
        self.on_session_started = on_session_started
        self.on_completed = on_completed

        self.state = SessionState.IDLE
        self.in_drill = False
        self.text = ""
        self.header = ""
        self.position = 0
        self.marks: List[bool] = []
        self._pending: Optional[DeferredCall] = None
        self.last_completion: Optional[CompletionResult] = None

    # ---------------- queries ----------------
    def get_current_lesson(self) -> Lesson:
        return self.engine.get_current_lesson()

    def get_lesson_list(self):
        return self.engine.get_lesson_list()

    @property
    def has_pending_drill(self) -> bool:
        return self._pending is not None and self._pending.active

    # ---------------- lifecycle ----------------
    def start_session(self, text: Optional[str] = None) -> str:
        """
        Start the current curriculum lesson, or a drill when ``text`` is given.
        Supersedes any drill start still waiting on the scheduler.
        """
        self.cancel_pending()
        if text:
            self.text = text
            self.in_drill = True
            self.header = DRILL_HEADER
        else:
            lesson = self.engine.get_current_lesson()
            self.text = lesson.text
            self.in_drill = False
            self.header = lesson_header(lesson)
        self.position = 0
        self.marks = []
        self.metrics.init(self.text)
        self.state = SessionState.ACTIVE
        logger.debug("Session started: %s", self.header)
        if self.on_session_started is not None:
            self.on_session_started(self.header, self.text)
        return self.header

    def start_drill(self, text: str) -> str:
        return self.start_session(text)

    def start_muscle_memory_routine(self) -> str:
        return self.start_session(self.engine.get_muscle_memory_routine())

    def select_lesson(self, level: str, index: int) -> str:
        self.engine.set_lesson(level, index)
        return self.start_session()

    def advance(self) -> Optional[str]:
        """Load the current lesson after a 'lesson complete' pause."""
        if self.state is not SessionState.COMPLETED:
            return None
        return self.start_session()

    def cancel_pending(self):
        if self._pending is not None:
            self._pending.cancel()
            self._pending = None

    # ---------------- input ----------------
    def record_keystroke(self, typed) -> Optional[KeystrokeResult]:
        ch = normalize_keystroke(typed)
        if ch is None:
            return None
        if self.state is not SessionState.ACTIVE or self.position >= len(self.text):
            return None

        expected = self.text[self.position]
        metrics = self.metrics.record_key(ch, expected)
        correct = ch == expected
        result = KeystrokeResult(position=self.position, correct=correct, metrics=metrics)
        self.marks.append(correct)
        self.position += 1

        if self.position >= len(self.text):
            result.completion = self.complete_session()
        return result

    # ---------------- completion ----------------
    def complete_session(self) -> Optional[CompletionResult]:
        """
        Finish the active session and apply the completion policy.
        Outside an active session, or before any keystroke, nothing is
        recorded and the previous result (or None) is returned instead.
        """
        if self.state is not SessionState.ACTIVE or self.metrics.typed_count == 0:
            return self.last_completion
        self.metrics.finish()
        stats = self.metrics.get_stats()
        engine = self.engine
        engine.update_history(stats)
        engine.accumulate_key_stats(stats.per_key_stats)

        was_drill = self.in_drill
        result = CompletionResult(stats=stats, was_drill=was_drill)
        result.badges = engine.award_badges(stats)
        if engine.is_stagnant():
            result.stagnation_message = self.caustic.next_message()

        weak = engine.get_high_error_keys()
        if weak and not was_drill:
            drill = engine.generate_drill(weak)
            result.next_action = NextAction.START_DRILL
            result.drill_text = drill
            result.lesson = engine.get_current_lesson()
            self.state = SessionState.COMPLETED
            self._schedule_drill(drill)
        elif was_drill:
            self.in_drill = False
            result.next_action = NextAction.REPEAT_LESSON
            result.lesson = engine.get_current_lesson()
            self.state = SessionState.COMPLETED
        else:
            result.lesson = engine.choose_next_lesson(stats.accuracy)
            result.next_action = NextAction.LESSON_COMPLETE
            self.state = SessionState.COMPLETED
        self.last_completion = result

        if self.on_completed is not None:
            self.on_completed(result)
        if result.next_action is NextAction.REPEAT_LESSON:
            self.start_session()
        return result

    def _schedule_drill(self, drill: str):
        self.cancel_pending()
        if self.scheduler is None:
            return
        logger.debug("Drill scheduled in %d ms", self.engine.config.drill_delay_ms)
        self._pending = self.scheduler.call_later(
            self.engine.config.drill_delay_ms,
            lambda: self._fire_drill(drill),
        )

    def _fire_drill(self, drill: str):
        self._pending = None
        self.start_session(drill)
