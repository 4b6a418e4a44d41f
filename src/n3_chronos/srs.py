"""Spaced repetition level rules."""

# Review interval in days for each SRS level 0..8
SRS_INTERVALS = [0, 1, 3, 7, 14, 30, 90, 180, 365]
MAX_SRS_LEVEL = len(SRS_INTERVALS) - 1
MASTERY_LEVEL = 5
ASSESSMENT_CORRECT_LEVEL = 4


def srs_update(srs_level: int, correct: bool) -> dict:
    """Calculate the next SRS level after an answer.

    Args:
        srs_level: Current level, 0 (new) to 8
        correct: Whether the answer was correct

    Returns:
        Dict with the new level and its review interval in days.
    """
    if correct:
        new_level = min(srs_level + 1, MAX_SRS_LEVEL)
    else:
        # Halve and floor; a miss demotes without resetting
        new_level = max(0, srs_level // 2)
    return {"srs_level": new_level, "interval": SRS_INTERVALS[new_level]}


def assessment_level(correct: bool) -> int:
    """Starting level for an item answered in the placement test."""
    return ASSESSMENT_CORRECT_LEVEL if correct else 0


def is_mastered(srs_level: int) -> bool:
    return srs_level >= MASTERY_LEVEL
