"""
Badge progress service - Per-difficulty badge counters.

This service manages:
- Recording completed games and creating a reward at each finished cycle
- Committing an admin award to the official counters
- Building the per-player badge summary
"""
import logging

from django.db import transaction
from django.db.models import F, Max
from django.utils import timezone

from audit.constants import ACTION_RECORD_BADGE_PROGRESS, TARGET_PLAYER
from audit.services.audit_service import AuditActor, diff, record_on_commit
from progression.constants import BADGE_CYCLE_LENGTH, DIFFICULTIES
from progression.models import BadgeProgress, Reward
from progression.services.progress_service import compute_progress, validate_difficulty

logger = logging.getLogger(__name__)


class BadgeProgressService:
    """Handles badge counter mutations and summaries."""

    @staticmethod
    def lock_progress(player_id, difficulty, create=False):
        """
        Lock the BadgeProgress row for one player and difficulty.

        Every ledger and counter mutation for the pair goes through this lock,
        which serializes them. Must be called inside a transaction.

        Returns:
            BadgeProgress or None when the row does not exist and create is False
        """
        if create:
            BadgeProgress.objects.get_or_create(player_id=player_id, difficulty=difficulty)
        return (
            BadgeProgress.objects.select_for_update()
            .filter(player_id=player_id, difficulty=difficulty)
            .first()
        )

    @staticmethod
    def record_earned(player_id, difficulty):
        """
        Count one completed game toward the player's badge cycle.

        When the new count completes a cycle, a new unclaimed Reward is created
        with the next badge number for this player and difficulty.

        Returns:
            dict: Dictionary with keys:
                - progress: dict - compute_progress() view of the new count
                - reward: Reward or None - The reward created by this game
        """
        difficulty = validate_difficulty(difficulty)

        with transaction.atomic():
            progress = BadgeProgressService.lock_progress(player_id, difficulty, create=True)
            before = progress.snapshot()

            BadgeProgress.objects.filter(pk=progress.pk).update(
                lifetime_earned_count=F('lifetime_earned_count') + 1,
                updated_at=timezone.now(),
            )
            progress.refresh_from_db(fields=['lifetime_earned_count', 'official_badge_count', 'updated_at'])

            reward = None
            if progress.lifetime_earned_count % BADGE_CYCLE_LENGTH == 0:
                last_number = Reward.objects.filter(
                    player_id=player_id, difficulty=difficulty
                ).aggregate(last=Max('badge_number'))['last'] or 0
                reward = Reward.objects.create(
                    player_id=player_id,
                    difficulty=difficulty,
                    badge_number=last_number + 1,
                )

            record_on_commit(
                AuditActor.for_system('gameplay'),
                ACTION_RECORD_BADGE_PROGRESS,
                TARGET_PLAYER,
                target_id=player_id,
                changes=diff(before, progress.snapshot()),
                details={
                    'difficulty': difficulty,
                    'reward_id': reward.pk if reward else None,
                    'badge_number': reward.badge_number if reward else None,
                },
            )

        if reward:
            logger.info(
                f"Badge cycle completed for player {player_id} ({difficulty}): "
                f"reward #{reward.badge_number} created"
            )

        return {
            'progress': compute_progress(progress.lifetime_earned_count),
            'reward': reward,
        }

    @staticmethod
    @transaction.atomic
    def commit_award(player_id, difficulty, reward_count):
        """
        Apply an admin award to the counters.

        Adds reward_count to the official badge count and restarts the cycle
        by resetting the lifetime count to 0. Callers must invoke this inside
        the same transaction that marks the rewards claimed.

        Returns:
            tuple: (before_snapshot, BadgeProgress after the update)
        """
        if reward_count < 1:
            raise ValueError(f"reward_count must be positive, got {reward_count}")

        progress = BadgeProgressService.lock_progress(player_id, difficulty, create=True)
        before = progress.snapshot()

        BadgeProgress.objects.filter(pk=progress.pk).update(
            official_badge_count=F('official_badge_count') + reward_count,
            lifetime_earned_count=0,
            updated_at=timezone.now(),
        )
        progress.refresh_from_db(fields=['lifetime_earned_count', 'official_badge_count', 'updated_at'])

        return before, progress

    @staticmethod
    def get_summary(player_id):
        """
        Build the badge summary for a player.

        Requested counts are read live from the reward ledger. Players
        without any records get zeroed progress.

        Returns:
            dict: Dictionary with keys:
                - progress: dict - compute_progress() view per difficulty
                - official_badges: dict - Official badge count per difficulty
                - requested: dict - Rewards waiting for admin per difficulty
                - total_official_badges: int
                - total_requested: int
        """
        records = {
            record.difficulty: record
            for record in BadgeProgress.objects.filter(player_id=player_id)
        }
        requested = Reward.objects.for_player(player_id).requested().counts_by_difficulty()

        progress = {}
        official = {}
        for difficulty in DIFFICULTIES:
            record = records.get(difficulty)
            progress[difficulty] = compute_progress(record.lifetime_earned_count if record else 0)
            official[difficulty] = record.official_badge_count if record else 0

        return {
            'progress': progress,
            'official_badges': official,
            'requested': requested,
            'total_official_badges': sum(official.values()),
            'total_requested': sum(requested.values()),
        }

    @staticmethod
    def get_official_counts(player_id):
        """Official badge count per difficulty."""
        counts = {difficulty: 0 for difficulty in DIFFICULTIES}
        for record in BadgeProgress.objects.filter(player_id=player_id):
            counts[record.difficulty] = record.official_badge_count
        return counts
