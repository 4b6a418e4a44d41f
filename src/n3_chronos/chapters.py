"""Chapter mastery and prerequisite gating."""
from n3_chronos.curriculum import find_chapter
from n3_chronos.ledger import ItemLedger
from n3_chronos.models import Chapter, ChapterProgress
from n3_chronos.srs import is_mastered

CHAPTER_UNLOCK_THRESHOLD = 0.75


def chapter_progress(ledger: ItemLedger, chapter: Chapter) -> ChapterProgress:
    items = chapter.items
    if not items:
        return ChapterProgress(mastered=0, total=0, percentage=0)
    mastered = 0
    for item in items:
        progress = ledger.lookup(item.id)
        if progress is not None and is_mastered(progress.srs_level):
            mastered += 1
    return ChapterProgress(mastered=mastered, total=len(items), percentage=mastered / len(items))


def is_chapter_unlocked(ledger: ItemLedger, chapter: Chapter, chapters: list[Chapter]) -> bool:
    """A chapter opens once every prerequisite is 75% mastered.

    A prerequisite that isn't in `chapters` keeps the chapter locked.
    """
    if not chapter.dependencies:
        return True
    for number in chapter.dependencies:
        dependency = find_chapter(chapters, number)
        if dependency is None:
            return False
        if chapter_progress(ledger, dependency).percentage < CHAPTER_UNLOCK_THRESHOLD:
            return False
    return True
