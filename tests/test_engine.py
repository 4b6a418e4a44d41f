"""End-to-end tests of the progress engine."""
from datetime import timedelta

import pytest

from n3_chronos.engine import ProgressEngine, open_engine
from n3_chronos.models import QuizAnswer
from n3_chronos.store import MemoryStore


class FakeClock:
    def __init__(self, now):
        self.now = now

    def __call__(self):
        return self.now

    def advance(self, **kwargs):
        self.now += timedelta(**kwargs)


class ReadOnlyStore(MemoryStore):
    """Every write fails, as if the disk were full."""

    def save(self, key, value):
        return False


@pytest.fixture
def clock(now):
    return FakeClock(now)


@pytest.fixture
def engine(store, chapters, clock):
    return ProgressEngine(store, chapters, clock=clock)


def notification_ids(engine):
    return [n.id for n in engine.sink.notifications]


def test_fresh_engine_defaults(engine):
    assert engine.user_progress.level == 1
    assert engine.user_progress.xp_to_next_level == 250
    assert engine.user_stats.is_new_user
    assert engine.due_items() == []
    assert engine.lookup("v1") is None
    assert engine.get_progress_item("v1").srs_level == 0


def test_finish_assessment_seeds_ledger(engine, now):
    assert engine.finish_assessment([
        {"itemId": "a", "correct": True},
        {"itemId": "b", "correct": False},
    ])
    a, b = engine.lookup("a"), engine.lookup("b")
    assert a.srs_level == 4
    assert a.next_review == now + timedelta(days=14)
    assert b.srs_level == 0
    assert b.next_review == now
    assert (b.history.correct, b.history.incorrect) == (0, 1)
    assert not engine.user_stats.is_new_user
    assert engine.user_stats.streak == 1
    assert engine.user_stats.last_login == now


def test_finish_assessment_runs_once(engine):
    engine.finish_assessment([QuizAnswer("v1", True)])
    assert not engine.finish_assessment([QuizAnswer("v1", False)])
    assert engine.lookup("v1").srs_level == 4


def test_finish_assessment_rejects_malformed_results(engine):
    with pytest.raises(ValueError):
        engine.finish_assessment([{"correct": True}])
    assert engine.user_stats.is_new_user
    assert len(engine.ledger) == 0


def test_record_outcome_awards_xp_on_correct(engine):
    engine.record_outcome("v1", True)
    engine.record_outcome("v1", False)
    assert engine.user_progress.xp == 10
    item = engine.lookup("v1")
    assert (item.history.correct, item.history.incorrect) == (1, 1)
    assert item.srs_level == 0


def test_record_quiz_result(engine):
    engine.record_quiz_result(2, 3, [
        QuizAnswer("v1", True),
        QuizAnswer("v2", True),
        QuizAnswer("g1", False),
    ])
    # 2 * 5 for the score, 10 per promoted item
    assert engine.user_progress.xp == 30
    assert engine.lookup("v1").srs_level == 1
    assert engine.lookup("g1").history.incorrect == 1
    assert engine.user_stats.achievements == ["FIRST_STEP"]
    assert notification_ids(engine) == ["FIRST_STEP"]


def test_quiz_with_no_correct_answers_earns_nothing(engine):
    engine.record_quiz_result(0, 2, [QuizAnswer("v1", False), QuizAnswer("v2", False)])
    assert engine.user_progress.xp == 0
    assert engine.user_stats.achievements == []


def test_perfect_quiz_unlocks_once(engine):
    answers = [QuizAnswer("v1", True), QuizAnswer("v2", True)]
    engine.record_quiz_result(2, 2, answers)
    engine.record_quiz_result(2, 2, answers)
    assert engine.user_stats.achievements.count("PERFECT_QUIZ") == 1
    assert engine.user_stats.achievements.count("FIRST_STEP") == 1
    assert notification_ids(engine).count("PERFECT_QUIZ") == 1


def test_practice_awards_small_xp_without_touching_ledger(engine):
    engine.record_practice_result(True)
    engine.record_practice_result(False)
    assert engine.user_progress.xp == 2
    assert len(engine.ledger) == 0


def test_award_xp_notifies_each_level(engine):
    assert engine.award_xp(250 + 275 + 302 + 332) == [2, 3, 4, 5]
    names = [n.name for n in engine.sink.notifications]
    assert names[:4] == [f"Reached level {n}!" for n in (2, 3, 4, 5)]
    assert "LEVEL_5" in engine.user_stats.achievements
    assert names[4] == "Explorer"


def test_level_up_during_perfect_quiz_checks_quiz_achievements(engine):
    engine.user_progress.xp = 245
    engine.record_quiz_result(1, 1, [QuizAnswer("v1", True)])
    assert engine.user_progress.level == 2
    assert sorted(engine.user_stats.achievements) == ["FIRST_STEP", "PERFECT_QUIZ"]


def test_manual_status_and_item_status(engine):
    engine.manual_set_status("v1", "mastered")
    assert engine.item_status("v1") == "mastered"
    assert engine.item_status("v2") == "new"
    engine.manual_set_status("v1", "review")
    assert engine.get_progress_item("v1").srs_level == 5


def test_due_items_follow_the_clock(engine, clock):
    engine.record_outcome("v1", True)
    engine.record_outcome("g1", False)
    assert [i.id for i in engine.due_items()] == ["g1"]
    clock.advance(days=1)
    assert [i.id for i in engine.review_items()] == ["g1", "v1"]


def test_chapter_unlock_through_engine(engine):
    first, second = engine.chapters
    assert engine.is_unlocked(first)
    assert not engine.is_unlocked(second)
    for item_id in ("v1", "v2", "g1"):
        engine.manual_set_status(item_id, "mastered")
    assert engine.chapter_progress(first).percentage == 0.75
    assert engine.is_unlocked(second)


def test_set_curriculum_drops_stale_items_from_views(engine, chapters):
    engine.record_outcome("v3", False)
    assert [i.id for i in engine.due_items()] == ["v3"]
    engine.set_curriculum(chapters[:1])
    assert engine.due_items() == []
    assert engine.lookup("v3") is not None


def test_daily_login_skipped_for_new_user(engine):
    assert engine.check_daily_login() == "skipped"
    assert engine.user_stats.streak == 0


def test_daily_login_streak_unlocks_streak_achievement(engine, clock):
    engine.finish_assessment([])
    assert engine.check_daily_login() == "unchanged"
    clock.advance(days=1)
    assert engine.check_daily_login() == "continued"
    clock.advance(days=1)
    assert engine.check_daily_login() == "continued"
    assert engine.user_stats.streak == 3
    assert "STREAK_3" in engine.user_stats.achievements
    clock.advance(days=3)
    assert engine.check_daily_login() == "reset"
    assert engine.user_stats.streak == 1
    assert engine.user_stats.achievements.count("STREAK_3") == 1


def test_performance_snapshot(engine):
    engine.record_quiz_result(1, 2, [QuizAnswer("v1", True), QuizAnswer("k1", False)])
    data = engine.performance_snapshot()
    assert data.overall_accuracy == 50.0
    assert data.skill_accuracy["vocabulary"] == 100.0
    assert [w.item.id for w in data.weakest_items] == ["k1"]


def test_summary(engine):
    engine.record_outcome("g1", False)
    summary = engine.summary()
    assert summary["level"] == 1
    assert summary["due"] == 1
    assert summary["tracked"] == 1


def test_state_survives_reopen(tmp_db, chapters, clock):
    engine = open_engine(tmp_db, chapters, clock=clock)
    engine.finish_assessment([QuizAnswer("v1", True)])
    engine.record_quiz_result(1, 1, [QuizAnswer("v2", True)])

    reopened = open_engine(tmp_db, chapters, clock=clock)
    assert reopened.lookup("v1").srs_level == 4
    assert reopened.lookup("v2").srs_level == 1
    assert reopened.user_progress.xp == 15
    assert not reopened.user_stats.is_new_user
    assert reopened.user_stats.achievements == engine.user_stats.achievements


def test_failed_writes_do_not_block_in_memory_state(chapters, clock):
    engine = ProgressEngine(ReadOnlyStore(), chapters, clock=clock)
    engine.record_quiz_result(1, 1, [QuizAnswer("v1", True)])
    assert engine.lookup("v1").srs_level == 1
    assert engine.user_progress.xp == 15
    assert "FIRST_STEP" in engine.user_stats.achievements


def test_explicit_now_overrides_clock(engine, now):
    later = now + timedelta(days=3)
    engine.record_outcome("v1", True, now=later)
    assert engine.lookup("v1").next_review == later + timedelta(days=1)
    assert engine.due_items() == []
    assert [i.id for i in engine.due_items(now=later + timedelta(days=1))] == ["v1"]
    assert engine.item_status("v1", now=later + timedelta(days=1)) == "review"
    assert engine.get_progress_item("v2", now=later).next_review == later
    engine.manual_set_status("v2", "review", now=later)
    assert engine.lookup("v2").next_review == later


def test_quiz_and_assessment_accept_explicit_now(engine, now):
    later = now + timedelta(days=2)
    engine.finish_assessment([QuizAnswer("a", True)], now=later)
    assert engine.user_stats.last_login == later
    assert engine.lookup("a").next_review == later + timedelta(days=14)
    engine.record_quiz_result(0, 1, [QuizAnswer("v1", False)], now=later)
    assert engine.lookup("v1").next_review == later
    assert engine.check_daily_login(now=later + timedelta(days=1)) == "continued"
    assert engine.user_stats.streak == 2
