"""Progress engine: the single owner of a learner's persisted state.

UI code talks to one ProgressEngine instance. It holds the item ledger,
level/XP progress and streak/achievement stats in memory, writes each of
them back to the store after every change, and derives the views the UI
renders (chapter progress, unlock state, due items, analytics).
"""
import logging
from datetime import datetime
from typing import Callable

from n3_chronos.achievements import ACHIEVEMENTS, evaluate_achievements, level_up_achievement
from n3_chronos.analytics import performance_snapshot
from n3_chronos.chapters import chapter_progress, is_chapter_unlocked
from n3_chronos.curriculum import build_item_map
from n3_chronos.ledger import ItemLedger
from n3_chronos.leveling import (
    XP_FOR_LEVEL_UP, XP_FOR_PRACTICE_CORRECT, XP_FOR_QUIZ_CORRECT_ANSWER,
    apply_xp, load_user_progress, save_user_progress,
)
from n3_chronos.models import (
    Achievement, Chapter, ChapterProgress, LearningItem, PerformanceData,
    ProgressItem, QuizAnswer, QuizScore,
)
from n3_chronos.notifications import NotificationSink
from n3_chronos.stats import add_achievements, check_daily_login, load_user_stats, save_user_stats
from n3_chronos.store import SqliteStore

logger = logging.getLogger(__name__)


def _as_answer(result) -> QuizAnswer:
    if isinstance(result, QuizAnswer):
        return result
    if isinstance(result, dict):
        item_id = result.get("item_id", result.get("itemId"))
        if item_id is None or "correct" not in result:
            raise ValueError(f"Malformed quiz result: {result!r}")
        return QuizAnswer(str(item_id), bool(result["correct"]))
    raise TypeError(f"Expected QuizAnswer or dict, got {type(result).__name__}")


class ProgressEngine:
    def __init__(
        self,
        store,
        chapters: list[Chapter] | None = None,
        sink: NotificationSink | None = None,
        clock: Callable[[], datetime] = datetime.now,
    ):
        self.store = store
        self.sink = sink if sink is not None else NotificationSink()
        self.clock = clock
        self.ledger = ItemLedger.load(store)
        self.user_progress = load_user_progress(store)
        self.user_stats = load_user_stats(store)
        self.chapters: list[Chapter] = []
        self.item_map: dict[str, LearningItem] = {}
        self.set_curriculum(chapters or [])

    def set_curriculum(self, chapters: list[Chapter]) -> None:
        """Swap in a freshly loaded curriculum and rebuild the item lookup."""
        self.chapters = list(chapters)
        self.item_map = build_item_map(self.chapters)

    # --- notifications and achievements ---

    def _notify(self, achievement: Achievement) -> None:
        self.sink.add(achievement, self.clock().timestamp())

    def _unlock(self, achievement_ids: list[str]) -> list[str]:
        added = add_achievements(self.user_stats, achievement_ids)
        if not added:
            return []
        save_user_stats(self.store, self.user_stats)
        for achievement_id in added:
            logger.info("Achievement unlocked: %s", achievement_id)
            self._notify(ACHIEVEMENTS[achievement_id])
        return added

    def check_achievements(self, quiz_score: QuizScore | None = None) -> list[str]:
        return self._unlock(
            evaluate_achievements(self.user_progress, self.user_stats, quiz_score)
        )

    # --- XP ---

    def award_xp(self, amount, quiz_score: QuizScore | None = None) -> list[int]:
        """Add XP; returns the levels reached, one notification sent per level."""
        reached = apply_xp(self.user_progress, amount)
        save_user_progress(self.store, self.user_progress)
        for level in reached:
            self._notify(level_up_achievement(level))
        if reached:
            self.check_achievements(quiz_score)
        return reached

    def _now(self, now: datetime | None) -> datetime:
        return self.clock() if now is None else now

    # --- item ledger ---

    def lookup(self, item_id: str) -> ProgressItem | None:
        return self.ledger.lookup(item_id)

    def get_progress_item(self, item_id: str, now: datetime | None = None) -> ProgressItem:
        return self.ledger.get(item_id, self._now(now))

    def item_status(self, item_id: str, now: datetime | None = None) -> str:
        return self.ledger.status(item_id, self._now(now))

    def record_outcome(self, item_id: str, correct: bool, now: datetime | None = None) -> ProgressItem:
        item = self.ledger.record_outcome(item_id, correct, self._now(now))
        if correct:
            self.award_xp(XP_FOR_LEVEL_UP)
        return item

    def manual_set_status(self, item_id: str, status: str, now: datetime | None = None) -> ProgressItem:
        return self.ledger.manual_set_status(item_id, status, self._now(now))

    def due_items(self, now: datetime | None = None) -> list[LearningItem]:
        return self.ledger.due_items(self.item_map, self._now(now))

    review_items = due_items

    # --- quiz and practice results ---

    def record_quiz_result(self, score: int, total: int, results, now: datetime | None = None) -> None:
        """Apply a finished quiz.

        `results` holds one QuizAnswer (or {"itemId", "correct"} dict) per
        question that was tied to a curriculum item.
        """
        answers = [_as_answer(r) for r in results]
        now = self._now(now)
        quiz_score = QuizScore(score=score, total=total)
        self.award_xp(score * XP_FOR_QUIZ_CORRECT_ANSWER, quiz_score)
        for answer in answers:
            self.record_outcome(answer.item_id, answer.correct, now)
        self.check_achievements(quiz_score)

    def record_practice_result(self, correct: bool = True) -> list[int]:
        """Practice earns a little XP and leaves the SRS schedule alone."""
        if not correct:
            return []
        return self.award_xp(XP_FOR_PRACTICE_CORRECT)

    # --- chapters ---

    def chapter_progress(self, chapter: Chapter) -> ChapterProgress:
        return chapter_progress(self.ledger, chapter)

    def is_unlocked(self, chapter: Chapter) -> bool:
        return is_chapter_unlocked(self.ledger, chapter, self.chapters)

    # --- analytics ---

    def performance_snapshot(self) -> PerformanceData:
        return performance_snapshot(self.ledger, self.item_map)

    def summary(self) -> dict:
        return {
            "level": self.user_progress.level,
            "xp": self.user_progress.xp,
            "xp_to_next_level": self.user_progress.xp_to_next_level,
            "streak": self.user_stats.streak,
            "achievements": len(self.user_stats.achievements),
            "due": len(self.due_items()),
            "tracked": len(self.ledger),
        }

    # --- session lifecycle ---

    def check_daily_login(self, now: datetime | None = None) -> str:
        """Update the streak once per session. Skipped while the user is new."""
        if self.user_stats.is_new_user:
            return "skipped"
        outcome = check_daily_login(self.user_stats, self._now(now))
        if outcome == "unchanged":
            return outcome
        save_user_stats(self.store, self.user_stats)
        if outcome == "continued":
            self.check_achievements()
        return outcome

    def finish_assessment(self, results, now: datetime | None = None) -> bool:
        """Seed the ledger from the placement test. Runs once per user.

        Correct answers start at level 4, wrong ones at 0, each with a single
        history entry. Returns False if the assessment was already taken.
        """
        if not self.user_stats.is_new_user:
            logger.warning("Assessment already completed, ignoring results")
            return False
        now = self._now(now)
        answers = [_as_answer(r) for r in results]
        for answer in answers:
            self.ledger.seed(answer.item_id, answer.correct, now)
        self.ledger.save()
        self.user_stats.is_new_user = False
        self.user_stats.streak = 1
        self.user_stats.last_login = now
        save_user_stats(self.store, self.user_stats)
        logger.info("Assessment finished: %d items placed", len(self.ledger))
        return True


def open_engine(db_path: str, chapters: list[Chapter] | None = None, **kwargs) -> ProgressEngine:
    """Engine backed by a SQLite file."""
    return ProgressEngine(SqliteStore(db_path), chapters, **kwargs)
