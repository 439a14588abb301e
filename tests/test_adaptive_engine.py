import random

import pytest

from app.curriculum import LEVEL_ORDER, LESSONS
from app.errors import TutorError
from app.state import HistoryEntry, KeyStat, Progress, SessionStats
from services.adaptive_engine import AdaptiveEngine

from conftest import MemoryProgressStore


def _stats(wpm: int, accuracy: int) -> SessionStats:
    return SessionStats(wpm=wpm, accuracy=accuracy, reaction=0)


def _at(engine: AdaptiveEngine, level: str, index: int) -> None:
    engine.set_lesson(level, index)


def _position(engine: AdaptiveEngine) -> tuple[str, int]:
    return (engine.progress.current_level, engine.progress.current_index)


def test_defaults_when_store_is_empty(engine) -> None:
    assert _position(engine) == ("Beginner", 0)
    assert engine.progress.badges == {"wpm50": False, "acc90": False}
    assert engine.progress.history == []
    assert engine.progress.error_rates == {}


def test_invalid_stored_lesson_falls_back_to_first() -> None:
    store = MemoryProgressStore(Progress(current_level="Expert", current_index=9))
    engine = AdaptiveEngine(store)
    assert _position(engine) == ("Beginner", 0)


def test_advance_within_level(engine) -> None:
    engine.choose_next_lesson(95)
    assert _position(engine) == ("Beginner", 1)


def test_advance_rolls_into_next_level(engine) -> None:
    _at(engine, "Beginner", 4)
    lesson = engine.choose_next_lesson(95)
    assert _position(engine) == ("Intermediate", 0)
    assert lesson.level == "Intermediate"


def test_advance_stays_at_top_of_curriculum(engine) -> None:
    _at(engine, "Master", 4)
    engine.choose_next_lesson(95)
    assert _position(engine) == ("Master", 4)


def test_retreat_rolls_back_to_last_lesson_of_previous_level(engine) -> None:
    _at(engine, "Intermediate", 0)
    engine.choose_next_lesson(70)
    assert _position(engine) == ("Beginner", 4)


def test_retreat_within_level(engine) -> None:
    _at(engine, "Advanced", 3)
    engine.choose_next_lesson(10)
    assert _position(engine) == ("Advanced", 2)


def test_retreat_stays_at_bottom_of_curriculum(engine) -> None:
    engine.choose_next_lesson(0)
    assert _position(engine) == ("Beginner", 0)


@pytest.mark.parametrize("accuracy", [80, 85, 90])
def test_target_band_repeats_lesson(engine, accuracy) -> None:
    _at(engine, "Advanced", 2)
    engine.choose_next_lesson(accuracy)
    assert _position(engine) == ("Advanced", 2)


def test_moves_are_persisted(engine, store) -> None:
    engine.choose_next_lesson(95)
    assert store.saved.current_index == 1


def test_set_lesson_rejects_unknown_lesson(engine) -> None:
    with pytest.raises(ValueError):
        engine.set_lesson("Beginner", 5)
    assert _position(engine) == ("Beginner", 0)


def test_lesson_list_groups_by_level_in_order(engine) -> None:
    grouped = engine.get_lesson_list()
    assert list(grouped) == LEVEL_ORDER
    assert [lesson.index for lesson in grouped["Master"]] == [0, 1, 2, 3, 4]
    assert sum(len(v) for v in grouped.values()) == len(LESSONS)


def test_current_lesson_matches_pointer(engine) -> None:
    _at(engine, "Intermediate", 3)
    lesson = engine.get_current_lesson()
    assert (lesson.level, lesson.index) == ("Intermediate", 3)
    assert lesson.text.startswith("Learning to type well")


def test_accumulate_key_stats_is_additive(engine, store) -> None:
    session = {"a": KeyStat(3, 1), "b": KeyStat(2, 0)}
    engine.accumulate_key_stats(session)
    engine.accumulate_key_stats(session)
    assert engine.progress.error_rates == {"a": KeyStat(6, 2), "b": KeyStat(4, 0)}
    assert store.saved.error_rates["a"] == KeyStat(6, 2)
    # the session map itself is left untouched
    assert session["a"] == KeyStat(3, 1)


def test_history_keeps_five_most_recent(engine) -> None:
    for i in range(7):
        engine.update_history(_stats(wpm=i, accuracy=90))
    assert [h.wpm for h in engine.progress.history] == [2, 3, 4, 5, 6]


def test_not_stagnant_with_short_history(engine) -> None:
    engine.update_history(_stats(50, 80))
    engine.update_history(_stats(50, 80))
    assert engine.is_stagnant() is False


def test_stagnant_when_last_three_deltas_are_small(engine) -> None:
    for wpm, acc in [(50, 80), (51, 81), (50, 80), (51, 81)]:
        engine.update_history(_stats(wpm, acc))
    assert engine.is_stagnant() is True


def test_three_entries_examine_both_deltas(engine) -> None:
    for wpm, acc in [(50, 80), (51, 81), (50, 80)]:
        engine.update_history(_stats(wpm, acc))
    assert engine.is_stagnant() is True


def test_old_jumps_outside_window_are_ignored(engine) -> None:
    for wpm, acc in [(10, 50), (50, 80), (51, 81), (50, 80), (51, 81)]:
        engine.update_history(_stats(wpm, acc))
    assert engine.is_stagnant() is True


def test_not_stagnant_if_any_recent_delta_is_large(engine) -> None:
    for wpm, acc in [(50, 80), (51, 81), (55, 80), (56, 81)]:
        engine.update_history(_stats(wpm, acc))
    assert engine.is_stagnant() is False


def test_delta_of_exactly_two_breaks_stagnation(engine) -> None:
    engine.progress.history = [HistoryEntry(50, 80), HistoryEntry(50, 80), HistoryEntry(50, 82)]
    assert engine.is_stagnant() is False


def test_high_error_keys_need_hit_floor_and_rate(engine) -> None:
    engine.progress.error_rates = {
        "q": KeyStat(hits=4, errors=4),
        "z": KeyStat(hits=10, errors=2),
        "m": KeyStat(hits=10, errors=1),
        "p": KeyStat(hits=20, errors=3),
    }
    assert engine.get_high_error_keys(0.15) == ["z", "p"]
    assert engine.get_high_error_keys() == ["z", "p"]
    assert engine.get_high_error_keys(0.1) == ["z", "m", "p"]


def test_generate_drill_shape(engine) -> None:
    for _ in range(20):
        drill = engine.generate_drill(["a", "s"])
        tokens = drill.split(" ")
        assert len(tokens) == 10
        assert all(len(t) == 4 and set(t) <= {"a", "s"} for t in tokens)


def test_generate_drill_empty(engine) -> None:
    assert engine.generate_drill([]) == ""


def test_generate_drill_is_reproducible_with_seeded_rng(store) -> None:
    a = AdaptiveEngine(store, rng=random.Random(42)).generate_drill(["a", "s", "d"])
    b = AdaptiveEngine(store, rng=random.Random(42)).generate_drill(["a", "s", "d"])
    assert a == b


def test_muscle_memory_routine_is_fixed(engine) -> None:
    assert engine.get_muscle_memory_routine() == "asdf jkl; fdsa ;lkj asdfg hjkl; gfdsa ;lkjh"


def test_badges_are_awarded_once(engine, store) -> None:
    first = engine.award_badges(_stats(55, 95))
    assert sorted(b.id for b in first) == ["acc90", "wpm50"]
    assert store.saved.badges == {"wpm50": True, "acc90": True}
    assert engine.award_badges(_stats(60, 99)) == []
    assert engine.progress.badges["wpm50"] is True


def test_badges_below_threshold(engine) -> None:
    assert engine.award_badges(_stats(49, 89)) == []
    assert engine.progress.badges == {"wpm50": False, "acc90": False}


def test_failed_saves_keep_in_memory_state() -> None:
    store = MemoryProgressStore(fail_saves=True)
    engine = AdaptiveEngine(store)
    engine.choose_next_lesson(95)
    engine.update_history(_stats(30, 95))
    assert _position(engine) == ("Beginner", 1)
    assert len(engine.progress.history) == 1
    assert store.saved is None


def test_oversized_stored_history_is_trimmed_on_load() -> None:
    history = [HistoryEntry(wpm=w, accuracy=90) for w in range(10, 18)]
    store = MemoryProgressStore(Progress(current_level="Beginner", history=history))
    engine = AdaptiveEngine(store)
    assert [h.wpm for h in engine.progress.history] == [13, 14, 15, 16, 17]


def test_missing_current_lesson_raises_tutor_error(engine) -> None:
    engine.progress.current_index = 99
    with pytest.raises(TutorError):
        engine.get_current_lesson()
