"""
Star service - Star totals, tier lookups and tier milestones.

This service manages:
- Tier lookups against the single STAR_TIERS table
- Awarding stars and recording a milestone when the tier changes
- Star and milestone read views for a player
"""
import logging

from django.db import transaction
from django.db.models import F
from django.utils import timezone

from audit.constants import ACTION_AWARD_STARS, TARGET_PLAYER
from audit.services.audit_service import AuditActor, diff, record_on_commit
from progression.constants import STAR_TIERS
from progression.exceptions import ConcurrentUpdateError, InvalidAmountError
from progression.models import StarAccount, StarMilestone

logger = logging.getLogger(__name__)


def get_tier(stars: int):
    """
    Get the tier for a star total: the highest threshold not above it.

    The 0 threshold is a catch-all, so every non-negative total has a tier.
    """
    for tier in STAR_TIERS:
        if stars >= tier.threshold:
            return tier
    return STAR_TIERS[-1]


def get_next_tier(stars: int):
    """Get the lowest tier whose threshold is above the total, or None at max tier."""
    for tier in reversed(STAR_TIERS):
        if stars < tier.threshold:
            return tier
    return None


def get_progress_to_next_tier(stars: int):
    """
    Progress toward the next tier.

    Returns:
        dict or None: Dictionary with keys current, required, remaining and
        percentage (0-100, two decimals). None at max tier.
    """
    next_tier = get_next_tier(stars)
    if next_tier is None:
        return None

    return {
        'current': stars,
        'required': next_tier.threshold,
        'remaining': next_tier.threshold - stars,
        'percentage': min(100, round(stars / next_tier.threshold * 100, 2)),
    }


class StarService:
    """Handles star awards and star read views."""

    @staticmethod
    def award_stars(player_id, amount, game_type=None, difficulty=None, category=None):
        """
        Add stars to a player's total and record a milestone on a tier change.

        Awards for one player are serialized on the StarAccount row, and the
        total is written with a compare-and-swap on the value read under the
        lock. At most one milestone is recorded per award: a jump across
        several thresholds logs only the final tier reached.

        Args:
            player_id: Player receiving the stars
            amount: Positive integer number of stars
            game_type, difficulty, category: Optional gameplay context kept
                in the audit details

        Returns:
            dict: Dictionary with keys:
                - stars_earned: int
                - total_stars: int
                - previous_stars: int
                - new_milestone: dict or None - Tier reached by this award
                - current_tier: dict - Tier after the award

        Raises:
            InvalidAmountError: If amount is not a positive integer
            ConcurrentUpdateError: If the total changed between read and write
        """
        if isinstance(amount, bool) or not isinstance(amount, int) or amount < 1:
            raise InvalidAmountError(amount)

        with transaction.atomic():
            StarAccount.objects.get_or_create(player_id=player_id)
            account = StarAccount.objects.select_for_update().get(player_id=player_id)

            previous_stars = account.total_stars
            previous_tier = get_tier(previous_stars)
            new_total = previous_stars + amount

            updated = StarAccount.objects.filter(pk=account.pk, total_stars=previous_stars).update(
                total_stars=F('total_stars') + amount,
                updated_at=timezone.now(),
            )
            if not updated:
                raise ConcurrentUpdateError(model='StarAccount', key=player_id)

            new_tier = get_tier(new_total)
            milestone = None
            if new_tier.name != previous_tier.name:
                milestone = StarMilestone.objects.create(
                    player_id=player_id,
                    tier=new_tier.name,
                    icon=new_tier.icon,
                    prize=new_tier.prize,
                    stars_required=new_tier.threshold,
                    stars_at_achievement=new_total,
                )

            record_on_commit(
                AuditActor.for_player(player_id),
                ACTION_AWARD_STARS,
                TARGET_PLAYER,
                target_id=player_id,
                changes=diff(
                    {'total_stars': previous_stars, 'tier': previous_tier.name},
                    {'total_stars': new_total, 'tier': new_tier.name},
                ),
                details={
                    'stars_earned': amount,
                    'game_type': game_type,
                    'difficulty': difficulty,
                    'category': category,
                    'milestone': milestone.tier if milestone else None,
                },
            )

        if milestone:
            logger.info(f"Player {player_id} reached {milestone.tier} with {new_total} stars")

        return {
            'stars_earned': amount,
            'total_stars': new_total,
            'previous_stars': previous_stars,
            'new_milestone': milestone.as_dict() if milestone else None,
            'current_tier': new_tier.as_dict(),
        }

    @staticmethod
    def get_total_stars(player_id):
        account = StarAccount.objects.filter(player_id=player_id).first()
        return account.total_stars if account else 0

    @staticmethod
    def get_player_stars(player_id):
        """
        Star total, tier and progress for a player.

        Players without an account are reported with 0 stars.
        """
        stars = StarService.get_total_stars(player_id)
        next_tier = get_next_tier(stars)
        return {
            'total_stars': stars,
            'current_tier': get_tier(stars).as_dict(),
            'next_tier': next_tier.as_dict() if next_tier else None,
            'progress_to_next': get_progress_to_next_tier(stars),
        }

    @staticmethod
    def get_milestone_history(player_id):
        """Milestones reached by a player, newest first."""
        return list(StarMilestone.objects.filter(player_id=player_id).order_by('-achieved_at', '-id'))
