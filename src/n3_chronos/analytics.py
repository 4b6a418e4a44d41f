"""Performance analytics over the whole ledger."""
from n3_chronos.ledger import ItemLedger
from n3_chronos.models import SKILLS, LearningItem, PerformanceData, WeakItem

WEAKEST_ITEMS_LIMIT = 5


def accuracy(correct: int, incorrect: int) -> float:
    total = correct + incorrect
    if total == 0:
        return 0.0
    return (correct / total) * 100


def get_weakest_items(
    ledger: ItemLedger,
    item_map: dict[str, LearningItem],
    limit: int = WEAKEST_ITEMS_LIMIT,
) -> list[WeakItem]:
    """Items with the worst correct/incorrect ratio, most mistakes first on ties.

    Only items answered wrong at least once and still in the curriculum are
    ranked, so stale ids never take up one of the `limit` slots.
    """
    candidates = [
        p for p in ledger
        if p.history.incorrect > 0 and p.id in item_map
    ]
    candidates.sort(key=lambda p: (p.history.correct / p.history.incorrect, -p.history.incorrect))
    return [WeakItem(item=item_map[p.id], progress=p) for p in candidates[:limit]]


def performance_snapshot(ledger: ItemLedger, item_map: dict[str, LearningItem]) -> PerformanceData:
    totals = {"correct": 0, "incorrect": 0}
    by_skill = {skill: {"correct": 0, "incorrect": 0} for skill in SKILLS}
    for progress in ledger:
        item = item_map.get(progress.id)
        if item is None:
            continue
        for bucket in (totals, by_skill[item.kind]):
            bucket["correct"] += progress.history.correct
            bucket["incorrect"] += progress.history.incorrect

    return PerformanceData(
        overall_accuracy=accuracy(totals["correct"], totals["incorrect"]),
        skill_accuracy={
            skill: accuracy(counts["correct"], counts["incorrect"])
            for skill, counts in by_skill.items()
        },
        weakest_items=get_weakest_items(ledger, item_map),
    )
