"""
Reward service - The reward ledger and its lifecycle transitions.

This service manages:
- Player requests for a single reward or every unclaimed reward of a difficulty
- Admin awards that claim every pending reward and commit the badge counters
- Grouped reward listings for the player views

Every transition is a conditional update on the reward state, issued while
the player's BadgeProgress row for that difficulty is locked. A transition
that matches no row did not happen.
"""
import logging

from django.db import transaction
from django.utils import timezone

from audit.constants import (
    ACTION_AWARD_BADGE, ACTION_REQUEST_REWARD, ACTION_REQUEST_REWARDS,
    TARGET_PLAYER, TARGET_REWARD,
)
from audit.services.audit_service import AuditActor, diff, record_on_commit
from progression.constants import (
    DIFFICULTIES, REWARD_CLAIMED, REWARD_REQUESTED, REWARD_UNCLAIMED,
)
from progression.exceptions import (
    AlreadyClaimedError, AlreadyRequestedError, NotEligibleError,
    NothingToAwardError, NothingToRequestError, PlayerNotFoundError, RewardNotFoundError,
    UnauthorizedError,
)
from progression.models import BadgeProgress, Reward
from progression.services.badge_service import BadgeProgressService
from progression.services.progress_service import is_cycle_complete, validate_difficulty

logger = logging.getLogger(__name__)


def _group_by_difficulty(rewards):
    grouped = {difficulty: [] for difficulty in DIFFICULTIES}
    for reward in rewards:
        grouped.setdefault(reward.difficulty, []).append(reward)
    return grouped


def _state_error(reward):
    if reward.state == REWARD_CLAIMED:
        return AlreadyClaimedError(reward)
    return AlreadyRequestedError(reward)


class RewardService:
    """Handles reward requests, admin awards and reward listings."""

    @staticmethod
    def get_player_reward(reward_id, player_id):
        """
        Fetch a reward that belongs to the player.

        Raises:
            RewardNotFoundError: If no such reward exists for this player
        """
        try:
            return Reward.objects.get(pk=reward_id, player_id=player_id)
        except (Reward.DoesNotExist, ValueError, TypeError):
            raise RewardNotFoundError(reward_id)

    @staticmethod
    def request_reward(reward_id, player_id):
        """
        Player asks for the prize of one completed cycle.

        Only records intent; official counters are untouched until an admin
        awards the reward.

        Args:
            reward_id: Reward primary key
            player_id: Player making the request

        Returns:
            Reward: The reward, now in the requested state

        Raises:
            RewardNotFoundError: Reward missing or owned by another player
            AlreadyClaimedError: Reward already given by an admin
            AlreadyRequestedError: Reward already waiting for an admin
            NotEligibleError: Lifetime count is 0 or not a multiple of 3
        """
        reward = RewardService.get_player_reward(reward_id, player_id)
        if reward.state != REWARD_UNCLAIMED:
            raise _state_error(reward)

        with transaction.atomic():
            progress = BadgeProgressService.lock_progress(player_id, reward.difficulty)

            # An admin award may have committed while we waited for the lock
            reward.refresh_from_db(fields=['state'])
            if reward.state != REWARD_UNCLAIMED:
                raise _state_error(reward)

            current_count = progress.lifetime_earned_count if progress else 0

            if not is_cycle_complete(current_count):
                raise NotEligibleError(current_count)

            now = timezone.now()
            updated = Reward.objects.filter(pk=reward.pk, state=REWARD_UNCLAIMED).update(
                state=REWARD_REQUESTED,
                requested_date=now,
                updated_at=now,
            )
            reward.refresh_from_db()
            if not updated:
                raise _state_error(reward)

            record_on_commit(
                AuditActor.for_player(player_id),
                ACTION_REQUEST_REWARD,
                TARGET_REWARD,
                target_id=reward.pk,
                target_label=reward.label,
                changes=diff({'state': REWARD_UNCLAIMED}, {'state': REWARD_REQUESTED}),
                details={'difficulty': reward.difficulty, 'badge_number': reward.badge_number},
            )

        logger.info(f"Reward requested by player {player_id}, difficulty: {reward.difficulty}")
        return reward

    @staticmethod
    def request_all_eligible_by_difficulty(player_id, difficulty):
        """
        Request every unclaimed reward of one difficulty.

        Unlike request_reward this does not re-check the cycle gate; it
        applies to the rewards that already exist in the unclaimed state.

        Returns:
            int: Number of rewards moved to requested

        Raises:
            NothingToRequestError: If there are no unclaimed rewards
        """
        difficulty = validate_difficulty(difficulty)

        with transaction.atomic():
            BadgeProgressService.lock_progress(player_id, difficulty)

            pending = Reward.objects.for_player(player_id).by_difficulty(difficulty)
            already_requested = pending.requested().count()
            now = timezone.now()
            count = pending.unclaimed().update(
                state=REWARD_REQUESTED,
                requested_date=now,
                updated_at=now,
            )
            if not count:
                raise NothingToRequestError(difficulty)

            record_on_commit(
                AuditActor.for_player(player_id),
                ACTION_REQUEST_REWARDS,
                TARGET_PLAYER,
                target_id=player_id,
                changes=diff(
                    {f'{difficulty}_requested': already_requested},
                    {f'{difficulty}_requested': already_requested + count},
                ),
                details={'difficulty': difficulty, 'requested_count': count},
            )

        logger.info(f"Player {player_id} requested {count} {difficulty} reward(s)")
        return count

    @staticmethod
    def award_by_difficulty(player_id, difficulty, admin, target_label=None):
        """
        Admin confirms the physical prize for every pending reward of a difficulty.

        Both unclaimed and requested rewards are awarded. The claim and the
        badge counter commit (official += n, cycle reset to 0) happen in one
        transaction.

        Args:
            player_id: Player receiving the prize
            difficulty: easy, average or difficult
            admin: AuditActor for the authenticated admin
            target_label: Optional player display name for the audit log

        Returns:
            dict: Dictionary with keys:
                - difficulty: str
                - rewards_awarded: int
                - official_total: int - Official badge count after the award
                - awarded_by: str - Admin display name

        Raises:
            UnauthorizedError: If admin is missing or not an admin actor
            PlayerNotFoundError: If the player has no badge progress at all
            NothingToAwardError: If every reward is already claimed
        """
        if admin is None or not getattr(admin, 'is_admin', False):
            raise UnauthorizedError()

        difficulty = validate_difficulty(difficulty)

        with transaction.atomic():
            progress = BadgeProgressService.lock_progress(player_id, difficulty)
            if progress is None and not BadgeProgress.objects.filter(player_id=player_id).exists():
                raise PlayerNotFoundError(player_id)

            now = timezone.now()
            awarded = Reward.objects.for_player(player_id).by_difficulty(difficulty).awardable().update(
                state=REWARD_CLAIMED,
                claimed_date=now,
                awarded_by_id=admin.actor_id,
                awarded_by_username=admin.display_name,
                updated_at=now,
            )
            if not awarded:
                raise NothingToAwardError(difficulty)

            before, progress = BadgeProgressService.commit_award(player_id, difficulty, awarded)
            official_field = f'{difficulty}_official_badge'

            record_on_commit(
                admin,
                ACTION_AWARD_BADGE,
                TARGET_PLAYER,
                target_id=player_id,
                target_label=target_label,
                changes={
                    'before': {'claimed': False, official_field: before[official_field]},
                    'after': {'claimed': True, official_field: progress.official_badge_count},
                },
                details={'difficulty': difficulty, 'rewards_awarded': awarded},
            )

        logger.info(
            f"Admin {admin.display_name} awarded {awarded} {difficulty} badge(s) to player {player_id}; "
            f"official total now {progress.official_badge_count}"
        )

        return {
            'difficulty': difficulty,
            'rewards_awarded': awarded,
            'official_total': progress.official_badge_count,
            'awarded_by': admin.display_name,
        }

    @staticmethod
    def requested_counts(player_id):
        """Rewards waiting for admin confirmation, per difficulty."""
        return Reward.objects.for_player(player_id).requested().counts_by_difficulty()

    @staticmethod
    def claimed_counts(player_id):
        """Rewards already confirmed by an admin, per difficulty."""
        return Reward.objects.for_player(player_id).claimed().counts_by_difficulty()

    @staticmethod
    def list_rewards_by_difficulty(player_id):
        """
        All rewards of a player, newest first, grouped by difficulty.

        Returns:
            dict: Dictionary with keys:
                - rewards: dict - difficulty -> list[Reward]
                - official_totals: dict - Official badge count per difficulty
                - requested: dict - Requested count per difficulty
        """
        rewards = Reward.objects.for_player(player_id).order_by('-earned_date', '-id')
        return {
            'rewards': _group_by_difficulty(rewards),
            'official_totals': BadgeProgressService.get_official_counts(player_id),
            'requested': RewardService.requested_counts(player_id),
        }

    @staticmethod
    def list_unclaimed_rewards(player_id):
        """
        Rewards the player has not requested yet, grouped by difficulty.

        Returns:
            dict: Dictionary with keys:
                - rewards: dict - difficulty -> list[Reward]
                - requested: dict - Requested count per difficulty
                - total_unclaimed: int
        """
        rewards = list(Reward.objects.for_player(player_id).unclaimed().order_by('earned_date', 'id'))
        return {
            'rewards': _group_by_difficulty(rewards),
            'requested': RewardService.requested_counts(player_id),
            'total_unclaimed': len(rewards),
        }
