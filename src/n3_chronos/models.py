"""Data classes for the learner's progress and the curriculum it refers to."""
from dataclasses import dataclass, field
from datetime import datetime
from typing import Optional

from n3_chronos.dates import parse_timestamp

VOCABULARY = "vocabulary"
GRAMMAR = "grammar"
KANJI = "kanji"
SKILLS = (VOCABULARY, GRAMMAR, KANJI)

LEARNING_STATUSES = ("new", "learning", "review", "mastered")


@dataclass
class VocabularyWord:
    id: str
    word: str
    details: dict = field(default_factory=dict)
    kind: str = field(default=VOCABULARY, init=False)

    @property
    def label(self) -> str:
        return self.word


@dataclass
class GrammarPoint:
    id: str
    grammar: str
    details: dict = field(default_factory=dict)
    kind: str = field(default=GRAMMAR, init=False)

    @property
    def label(self) -> str:
        return self.grammar


@dataclass
class KanjiCharacter:
    id: str
    kanji: str
    details: dict = field(default_factory=dict)
    kind: str = field(default=KANJI, init=False)

    @property
    def label(self) -> str:
        return self.kanji


LearningItem = VocabularyWord | GrammarPoint | KanjiCharacter


@dataclass
class Chapter:
    chapter: int
    title: str = ""
    vocabulary: list = field(default_factory=list)
    grammar: list = field(default_factory=list)
    kanji: list = field(default_factory=list)
    dependencies: list = field(default_factory=list)

    @property
    def items(self) -> list:
        return [*self.vocabulary, *self.grammar, *self.kanji]


@dataclass
class History:
    correct: int = 0
    incorrect: int = 0


@dataclass
class ProgressItem:
    id: str
    srs_level: int = 0
    next_review: datetime = field(default_factory=datetime.now)
    last_correct: Optional[datetime] = None
    history: History = field(default_factory=History)

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "srsLevel": self.srs_level,
            "nextReview": self.next_review.isoformat(),
            "lastCorrect": self.last_correct.isoformat() if self.last_correct else None,
            "history": {"correct": self.history.correct, "incorrect": self.history.incorrect},
        }

    @classmethod
    def from_dict(cls, data: dict) -> "ProgressItem":
        """Build from the persisted shape. Raises on anything malformed."""
        next_review = parse_timestamp(data["nextReview"])
        if next_review is None:
            raise ValueError(f"invalid nextReview: {data['nextReview']!r}")
        level = int(data["srsLevel"])
        if not 0 <= level <= 8:
            raise ValueError(f"srsLevel out of range: {level}")
        history = data.get("history") or {}
        correct = int(history.get("correct", 0))
        incorrect = int(history.get("incorrect", 0))
        if correct < 0 or incorrect < 0:
            raise ValueError(f"negative history counts: {history!r}")
        return cls(
            id=str(data["id"]),
            srs_level=level,
            next_review=next_review,
            last_correct=parse_timestamp(data.get("lastCorrect")),
            history=History(correct=correct, incorrect=incorrect),
        )


@dataclass
class UserProgress:
    level: int = 1
    xp: int = 0
    xp_to_next_level: int = 250

    def to_dict(self) -> dict:
        return {"level": self.level, "xp": self.xp, "xpToNextLevel": self.xp_to_next_level}

    @classmethod
    def from_dict(cls, data: dict) -> "UserProgress":
        return cls(
            level=int(data.get("level", 1)),
            xp=data.get("xp", 0),
            xp_to_next_level=data.get("xpToNextLevel", 250),
        )


@dataclass
class UserStats:
    streak: int = 0
    last_login: Optional[datetime] = None
    achievements: list = field(default_factory=list)
    is_new_user: bool = True

    def to_dict(self) -> dict:
        return {
            "streak": self.streak,
            "lastLogin": self.last_login.isoformat() if self.last_login else "",
            "achievements": list(self.achievements),
            "isNewUser": self.is_new_user,
        }

    @classmethod
    def from_dict(cls, data: dict) -> "UserStats":
        is_new_user = data.get("isNewUser", True)
        if not isinstance(is_new_user, bool):
            is_new_user = True
        return cls(
            streak=int(data.get("streak", 0)),
            last_login=parse_timestamp(data.get("lastLogin")),
            achievements=[str(a) for a in data.get("achievements", [])],
            is_new_user=is_new_user,
        )


@dataclass
class Achievement:
    id: str
    name: str
    description: str = ""


@dataclass
class Notification:
    id: str
    name: str
    description: str
    timestamp: float


@dataclass
class QuizAnswer:
    item_id: str
    correct: bool


@dataclass
class QuizScore:
    score: int
    total: int


@dataclass
class ChapterProgress:
    mastered: int
    total: int
    percentage: float


@dataclass
class WeakItem:
    item: LearningItem
    progress: ProgressItem


@dataclass
class PerformanceData:
    overall_accuracy: float = 0.0
    skill_accuracy: dict = field(default_factory=lambda: {s: 0.0 for s in SKILLS})
    weakest_items: list = field(default_factory=list)
