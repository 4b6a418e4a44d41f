"""Curriculum loading: chapters and their vocabulary, grammar and kanji items."""
import json
import logging
from pathlib import Path

import yaml

from n3_chronos.models import (
    Chapter, GrammarPoint, KanjiCharacter, LearningItem, VocabularyWord,
)

logger = logging.getLogger(__name__)

# Discriminating field -> item class, checked in this order
ITEM_VARIANTS = [
    ("word", VocabularyWord),
    ("grammar", GrammarPoint),
    ("kanji", KanjiCharacter),
]


def read_curriculum_file(file_path: str):
    """Read raw curriculum data from a JSON or YAML file."""
    path = Path(file_path)
    suffix = path.suffix.lower()
    if suffix == ".json":
        return json.loads(path.read_text(encoding="utf-8"))
    elif suffix in (".yaml", ".yml"):
        return yaml.safe_load(path.read_text(encoding="utf-8"))
    raise ValueError(f"Unsupported curriculum format: {suffix or path.name}")


def parse_item(raw: dict) -> LearningItem | None:
    """Resolve an item's variant from its discriminating field.

    Returns None for items without an id or without any known field.
    """
    if not isinstance(raw, dict) or not raw.get("id"):
        logger.warning("Skipping curriculum item without id: %r", raw)
        return None
    for key, cls in ITEM_VARIANTS:
        if key in raw:
            details = {k: v for k, v in raw.items() if k not in ("id", key)}
            return cls(str(raw["id"]), str(raw[key]), details)
    logger.warning("Skipping curriculum item %s: unknown item type", raw["id"])
    return None


def parse_chapter(raw: dict) -> Chapter:
    items = {}
    for section in ("vocabulary", "grammar", "kanji"):
        parsed = (parse_item(entry) for entry in raw.get(section) or [])
        items[section] = [item for item in parsed if item is not None]
    return Chapter(
        chapter=int(raw["chapter"]),
        title=raw.get("title", ""),
        dependencies=[int(d) for d in raw.get("dependencies") or []],
        **items,
    )


def parse_chapters(data) -> list[Chapter]:
    """Accept either {"chapters": [...]} or a bare list of chapters."""
    if isinstance(data, dict):
        data = data.get("chapters", [])
    return [parse_chapter(raw) for raw in data or []]


def load_curriculum(file_path: str) -> list[Chapter]:
    chapters = parse_chapters(read_curriculum_file(file_path))
    logger.info("Loaded %d chapters from %s", len(chapters), file_path)
    return chapters


def build_item_map(chapters: list[Chapter]) -> dict[str, LearningItem]:
    """Index every item by id. The first occurrence of a duplicate id wins."""
    item_map = {}
    for chapter in chapters:
        for item in chapter.items:
            item_map.setdefault(item.id, item)
    return item_map


def find_chapter(chapters: list[Chapter], number: int) -> Chapter | None:
    for chapter in chapters:
        if chapter.chapter == number:
            return chapter
    return None
