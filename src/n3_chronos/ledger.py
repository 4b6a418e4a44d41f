"""Per-item spaced repetition ledger."""
import logging
from datetime import datetime

from n3_chronos.dates import add_days
from n3_chronos.models import LEARNING_STATUSES, History, LearningItem, ProgressItem
from n3_chronos.srs import (
    MASTERY_LEVEL, SRS_INTERVALS, assessment_level, is_mastered, srs_update,
)
from n3_chronos.store import ITEM_PROGRESS_KEY

logger = logging.getLogger(__name__)


def default_progress_item(item_id: str, now: datetime) -> ProgressItem:
    """The baseline state of an item nobody has answered yet."""
    return ProgressItem(id=item_id, srs_level=0, next_review=now)


class ItemLedger:
    """Progress records keyed by item id, in first-interaction order.

    An entry exists only once the item has been answered, seeded or manually
    marked; reads of anything else synthesize a default that is not stored.
    Every mutation is written back to the store. A failed write is logged by
    the store and the in-memory change stands.
    """

    def __init__(self, store, entries: dict[str, ProgressItem] | None = None):
        self.store = store
        self.entries = entries if entries is not None else {}

    @classmethod
    def load(cls, store) -> "ItemLedger":
        raw = store.load(ITEM_PROGRESS_KEY, {})
        if not isinstance(raw, dict):
            logger.warning("Item progress is not a mapping, starting empty")
            raw = {}
        entries = {}
        for item_id, data in raw.items():
            try:
                entries[item_id] = ProgressItem.from_dict({**data, "id": item_id})
            except (KeyError, TypeError, ValueError, AttributeError):
                logger.warning("Dropping malformed progress entry %s", item_id)
        return cls(store, entries)

    def save(self) -> bool:
        return self.store.save(
            ITEM_PROGRESS_KEY,
            {item_id: item.to_dict() for item_id, item in self.entries.items()},
        )

    def lookup(self, item_id: str) -> ProgressItem | None:
        return self.entries.get(item_id)

    def get(self, item_id: str, now: datetime) -> ProgressItem:
        return self.lookup(item_id) or default_progress_item(item_id, now)

    def __len__(self) -> int:
        return len(self.entries)

    def __iter__(self):
        return iter(self.entries.values())

    def record_outcome(self, item_id: str, correct: bool, now: datetime) -> ProgressItem:
        current = self.get(item_id, now)
        updated = srs_update(current.srs_level, correct)
        item = ProgressItem(
            id=item_id,
            srs_level=updated["srs_level"],
            next_review=add_days(now, updated["interval"]),
            last_correct=now if correct else current.last_correct,
            history=History(
                correct=current.history.correct + (1 if correct else 0),
                incorrect=current.history.incorrect + (0 if correct else 1),
            ),
        )
        self.entries[item_id] = item
        self.save()
        return item

    def manual_set_status(self, item_id: str, status: str, now: datetime) -> ProgressItem:
        """Override an item's schedule without touching its history.

        'mastered' lifts the item to at least the mastery level and schedules
        it at that level's interval; 'review' makes it due immediately.
        'new' and 'learning' leave the schedule alone.
        """
        if status not in LEARNING_STATUSES:
            raise ValueError(f"Unknown learning status: {status!r}")
        current = self.get(item_id, now)
        srs_level = current.srs_level
        next_review = current.next_review
        if status == "mastered":
            srs_level = max(MASTERY_LEVEL, srs_level)
            next_review = add_days(now, SRS_INTERVALS[srs_level])
        elif status == "review":
            next_review = now
        item = ProgressItem(
            id=item_id,
            srs_level=srs_level,
            next_review=next_review,
            last_correct=current.last_correct,
            history=History(current.history.correct, current.history.incorrect),
        )
        self.entries[item_id] = item
        self.save()
        return item

    def status(self, item_id: str, now: datetime) -> str:
        item = self.get(item_id, now)
        if is_mastered(item.srs_level):
            return "mastered"
        if item.srs_level > 0 and item.next_review <= now:
            return "review"
        if item.srs_level > 0:
            return "learning"
        return "new"

    def due_items(self, item_map: dict[str, LearningItem], now: datetime) -> list[LearningItem]:
        """Items due for review, lowest SRS level first.

        sorted() is stable, so equal levels keep ledger order. Ids missing
        from item_map (stale curriculum) are dropped.
        """
        due = sorted(
            (p for p in self.entries.values() if p.next_review <= now),
            key=lambda p: p.srs_level,
        )
        return [item_map[p.id] for p in due if p.id in item_map]

    def seed(self, item_id: str, correct: bool, now: datetime) -> ProgressItem:
        """Place an item from a placement test answer, replacing any record.

        Not persisted here; callers save() once the batch is seeded.
        """
        level = assessment_level(correct)
        item = ProgressItem(
            id=item_id,
            srs_level=level,
            next_review=add_days(now, SRS_INTERVALS[level]),
            last_correct=now if correct else None,
            history=History(correct=1 if correct else 0, incorrect=0 if correct else 1),
        )
        self.entries[item_id] = item
        return item
