"""
Custom exception classes for the progression app.

Each exception carries a machine-readable ``reason`` and the HTTP status the
API boundary responds with, so views can turn any of them into a structured
failure without inspecting the type.
"""


class ProgressionError(Exception):
    """Base exception class for all progression app exceptions."""
    reason = 'internal_error'
    status_code = 500
    default_message = "Progression operation failed"

    def __init__(self, message=None):
        super().__init__(message or self.default_message)

    @property
    def message(self):
        return str(self)


class NotFoundError(ProgressionError):
    """Raised when a player, reward or other target does not exist."""
    reason = 'not_found'
    status_code = 404
    default_message = "Not found"


class PlayerNotFoundError(NotFoundError):
    """Raised when no progression record exists for a player."""

    def __init__(self, player_id=None):
        self.player_id = player_id
        message = f"Player not found: {player_id}" if player_id else "Player not found"
        super().__init__(message)


class RewardNotFoundError(NotFoundError):
    """Raised when a reward does not exist or belongs to another player."""

    def __init__(self, reward_id=None):
        self.reward_id = reward_id
        super().__init__("Reward not found")


class InvalidStateError(ProgressionError):
    """Raised when a reward is not in a state that allows the transition."""
    reason = 'invalid_state'
    status_code = 400
    default_message = "Reward is not in a valid state for this action"

    def __init__(self, message=None, reward=None):
        self.reward = reward
        super().__init__(message)


class AlreadyRequestedError(InvalidStateError):
    """Raised when a reward has already been requested by the player."""
    reason = 'already_requested'

    def __init__(self, reward=None):
        super().__init__("Already requested, waiting for admin to confirm.", reward=reward)


class AlreadyClaimedError(InvalidStateError):
    """Raised when a reward has already been given out by an admin."""
    reason = 'already_claimed'

    def __init__(self, reward=None):
        super().__init__("Reward already given by admin.", reward=reward)


class NotEligibleError(ProgressionError):
    """Raised when the player has not completed a full badge cycle."""
    reason = 'not_eligible'
    status_code = 400

    def __init__(self, current_count=None):
        self.current_count = current_count
        super().__init__("Not eligible to claim reward. You need 3 badges first.")


class NothingToRequestError(ProgressionError):
    """Raised when a bulk request finds no unclaimed rewards."""
    reason = 'nothing_to_request'
    status_code = 404

    def __init__(self, difficulty=None):
        self.difficulty = difficulty
        super().__init__("No rewards to request for this difficulty")


class NothingToAwardError(ProgressionError):
    """Raised when an admin award finds no rewards that are not yet claimed."""
    reason = 'nothing_to_award'
    status_code = 404

    def __init__(self, difficulty=None):
        self.difficulty = difficulty
        super().__init__("No pending rewards found for this difficulty.")


class InvalidInputError(ProgressionError):
    """Raised when an operation receives malformed input."""
    reason = 'validation_error'
    status_code = 422
    default_message = "Invalid input"


class InvalidDifficultyError(InvalidInputError):
    """Raised when a difficulty is not one of easy/average/difficult."""

    def __init__(self, difficulty=None):
        self.difficulty = difficulty
        super().__init__(f"Invalid difficulty: {difficulty}")


class InvalidAmountError(InvalidInputError):
    """Raised when a star award amount is not a positive integer."""

    def __init__(self, amount=None):
        self.amount = amount
        super().__init__(f"Star amount must be a positive integer, got {amount!r}")


class UnauthorizedError(ProgressionError):
    """Raised when an administrative action has no authenticated admin actor."""
    reason = 'unauthorized'
    status_code = 401
    default_message = "Unauthorized."


class InternalError(ProgressionError):
    """Raised when the backing store fails or a concurrent update is detected."""


class ConcurrentUpdateError(InternalError):
    """Raised when a conditional counter update matched no row."""

    def __init__(self, model=None, key=None):
        self.model = model
        self.key = key
        super().__init__("The record changed while it was being updated. Please retry.")
