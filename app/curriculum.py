# app/curriculum.py
from __future__ import annotations
from typing import Dict, List, Optional

from app.state import Lesson

LEVEL_ORDER: List[str] = ["Beginner", "Intermediate", "Advanced", "Master"]


# -------- Built-in lessons --------
LESSONS: List[Lesson] = [
    Lesson("Beginner", 0, "asdf jkl; asdf jkl; asdf jkl;"),
    Lesson("Beginner", 1, "The quick brown fox jumps over the lazy dog."),
    Lesson("Beginner", 2, "Home row practice: ask fad glad jalk flak."),
    Lesson("Beginner", 3, "Typing is fun. Keep your fingers on the home row."),
    Lesson("Beginner", 4, "Practice makes perfect. Focus on accuracy."),
    Lesson(
        "Intermediate", 0,
        "Success comes from practice and patience. Keep typing without looking "
        "at your keyboard and soon it becomes second nature.",
    ),
    Lesson(
        "Intermediate", 1,
        "Typing speed and accuracy improve when you relax your hands and "
        "maintain a consistent rhythm.",
    ),
    Lesson(
        "Intermediate", 2,
        "Each finger has its own responsibility on the keyboard, so assign "
        "every key to the nearest finger.",
    ),
    Lesson(
        "Intermediate", 3,
        "Learning to type well is like playing a musical instrument: you must "
        "train your muscle memory.",
    ),
    Lesson(
        "Intermediate", 4,
        "Confidence grows with each correct keystroke. Keep going even when "
        "mistakes happen.",
    ),
    Lesson(
        "Advanced", 0,
        "Advanced typists can handle complex sentences with punctuation and "
        "numbers such as 12345, 67890. They rarely glance at the keyboard.",
    ),
    Lesson(
        "Advanced", 1,
        "Focus on maintaining posture while typing. Sit upright, keep your "
        "wrists elevated, and breathe evenly to sustain longer sessions.",
    ),
    Lesson(
        "Advanced", 2,
        "When errors occur, slow down briefly and refocus on accuracy before "
        "returning to your usual pace.",
    ),
    Lesson(
        "Advanced", 3,
        "Typing at high speeds requires that you anticipate upcoming words and "
        "move your fingers ahead of time.",
    ),
    Lesson(
        "Advanced", 4,
        "Break down long words into syllables to distribute the typing load "
        "evenly across your fingers.",
    ),
    Lesson(
        "Master", 0,
        "Master typists can write code, compose essays, and chat rapidly "
        "without any conscious thought of where each key lies.",
    ),
    Lesson(
        "Master", 1,
        "Precision is key: hitting the correct key every time is more valuable "
        "than raw speed; accuracy leads to efficiency.",
    ),
    Lesson(
        "Master", 2,
        "Typing mindfully reduces mistakes. Cultivate awareness of each "
        "finger's movement until typing becomes meditative.",
    ),
    Lesson(
        "Master", 3,
        "Incorporate numbers (1234567890) and symbols (!@#$%^&*) into your "
        "practice to become truly versatile.",
    ),
    Lesson(
        "Master", 4,
        "Continue challenging yourself with unfamiliar passages, such as legal "
        "documents or poetry, to refine your skills.",
    ),
]


# -------- lookups --------
def lessons_in_level(level: str) -> List[Lesson]:
    return [lesson for lesson in LESSONS if lesson.level == level]


def find_lesson(level: str, index: int) -> Optional[Lesson]:
    for lesson in LESSONS:
        if lesson.level == level and lesson.index == index:
            return lesson
    return None


def first_lesson() -> Lesson:
    return LESSONS[0]


def group_by_level() -> Dict[str, List[Lesson]]:
    """Map level name -> lessons, in level order and catalogue order."""
    grouped: Dict[str, List[Lesson]] = {}
    for lesson in LESSONS:
        grouped.setdefault(lesson.level, []).append(lesson)
    return {level: grouped[level] for level in LEVEL_ORDER if level in grouped}
