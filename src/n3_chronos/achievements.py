"""Achievement catalog and unlock rules."""
from n3_chronos.models import Achievement, QuizScore, UserProgress, UserStats

FIRST_STEP = "FIRST_STEP"
STREAK_3 = "STREAK_3"
PERFECT_QUIZ = "PERFECT_QUIZ"
LEVEL_5 = "LEVEL_5"

ACHIEVEMENTS = {
    FIRST_STEP: Achievement(FIRST_STEP, "First Step", "Get your first quiz answer right."),
    STREAK_3: Achievement(STREAK_3, "On Fire", "Keep a 3-day study streak."),
    PERFECT_QUIZ: Achievement(PERFECT_QUIZ, "Flawless", "Score full marks on a quiz."),
    LEVEL_5: Achievement(LEVEL_5, "Explorer", "Reach level 5."),
}


def level_up_achievement(level: int) -> Achievement:
    """Announcement for reaching a level. Never stored as unlocked."""
    return Achievement(f"LEVEL_{level}", f"Reached level {level}!", "Keep it up!")


def evaluate_achievements(
    progress: UserProgress,
    stats: UserStats,
    quiz_score: QuizScore | None = None,
) -> list[str]:
    """Achievement ids newly earned by this state, in catalog order."""
    earned = []
    if quiz_score is not None and quiz_score.score > 0:
        earned.append(FIRST_STEP)
    if stats.streak >= 3:
        earned.append(STREAK_3)
    if quiz_score is not None and quiz_score.total > 0 and quiz_score.score == quiz_score.total:
        earned.append(PERFECT_QUIZ)
    if progress.level >= 5:
        earned.append(LEVEL_5)
    return [a for a in earned if a not in stats.achievements]
