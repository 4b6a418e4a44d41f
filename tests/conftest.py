from datetime import datetime

import pytest

from n3_chronos.models import Chapter, GrammarPoint, KanjiCharacter, VocabularyWord
from n3_chronos.store import MemoryStore

NOW = datetime(2024, 3, 15, 12, 0, 0)


@pytest.fixture
def tmp_db(tmp_path):
    """Provide a temporary SQLite database path for tests."""
    db_path = str(tmp_path / "test_progress.db")
    return db_path


@pytest.fixture
def store():
    return MemoryStore()


@pytest.fixture
def now():
    return NOW


@pytest.fixture
def chapters():
    """Two chapters; chapter 2 depends on chapter 1."""
    return [
        Chapter(
            chapter=1,
            title="Greetings",
            vocabulary=[
                VocabularyWord("v1", "挨拶", {"furigana": "あいさつ", "meaning": "greeting"}),
                VocabularyWord("v2", "約束", {"furigana": "やくそく", "meaning": "promise"}),
            ],
            grammar=[GrammarPoint("g1", "〜ようにする", {"meaning": "try to"})],
            kanji=[KanjiCharacter("k1", "約", {"on_yomi": "ヤク", "meaning": "approximately"})],
        ),
        Chapter(
            chapter=2,
            title="Plans",
            vocabulary=[VocabularyWord("v3", "予定", {"meaning": "plan"})],
            dependencies=[1],
        ),
    ]
