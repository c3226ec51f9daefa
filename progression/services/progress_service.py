"""
Progress service - Badge cycle progress and difficulty validation.
"""
from progression.constants import BADGE_CYCLE_LENGTH, DIFFICULTIES
from progression.exceptions import InvalidDifficultyError


def compute_progress(lifetime_count: int) -> dict:
    """
    Turn a cumulative badge count into a view of the current cycle.

    Args:
        lifetime_count: Games completed at one difficulty since the last award

    Returns:
        dict: Dictionary with keys:
            - current_count: int - Position within the current cycle (0-2)
            - remaining: int - Games left to complete the cycle (1-3)
            - total_earned: int - The lifetime count itself
    """
    if lifetime_count < 0:
        raise ValueError(f"lifetime_count must be non-negative, got {lifetime_count}")

    current = lifetime_count % BADGE_CYCLE_LENGTH
    return {
        'current_count': current,
        'remaining': BADGE_CYCLE_LENGTH - current,
        'total_earned': lifetime_count,
    }


def is_cycle_complete(lifetime_count: int) -> bool:
    """True when at least one full cycle has been completed and none is partially started."""
    return lifetime_count > 0 and lifetime_count % BADGE_CYCLE_LENGTH == 0


def validate_difficulty(difficulty) -> str:
    """
    Normalize a difficulty name.

    Raises:
        InvalidDifficultyError: If it is not easy, average or difficult
    """
    if not isinstance(difficulty, str):
        raise InvalidDifficultyError(difficulty)
    normalized = difficulty.strip().lower()
    if normalized not in DIFFICULTIES:
        raise InvalidDifficultyError(difficulty)
    return normalized
