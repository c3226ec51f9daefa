from django.db import models
from django.utils import timezone

from progression.constants import (
    DIFFICULTY_CHOICES, REWARD_CLAIMED, REWARD_REQUESTED, REWARD_STATE_CHOICES, REWARD_UNCLAIMED,
)
from progression.managers import RewardManager


class BadgeProgress(models.Model):
    """
    Per-player, per-difficulty badge counters.

    lifetime_earned_count grows by one per qualifying game and is reset to 0
    when an admin awards the pending rewards. official_badge_count only ever
    grows, and only through an admin award.
    """
    player_id = models.CharField(max_length=64, db_index=True, help_text="Opaque player key from the player directory.")
    difficulty = models.CharField(max_length=10, choices=DIFFICULTY_CHOICES)
    lifetime_earned_count = models.PositiveIntegerField(default=0)
    official_badge_count = models.PositiveIntegerField(default=0)
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        ordering = ['player_id', 'difficulty']
        constraints = [
            models.UniqueConstraint(fields=['player_id', 'difficulty'], name='badgeprogress_player_difficulty_uniq'),
        ]
        verbose_name = "Badge Progress"
        verbose_name_plural = "Badge Progress"

    def __str__(self):
        return f"{self.player_id} - {self.difficulty}: {self.lifetime_earned_count} earned, {self.official_badge_count} official"

    def snapshot(self):
        """Counter values used for audit diffs."""
        return {
            f'{self.difficulty}_badge_count': self.lifetime_earned_count,
            f'{self.difficulty}_official_badge': self.official_badge_count,
        }


class Reward(models.Model):
    """
    A redeemable prize created each time a player completes a badge cycle.

    Lifecycle is one-directional: unclaimed -> requested -> claimed, or
    unclaimed -> claimed when an admin awards it directly.
    """
    player_id = models.CharField(max_length=64, db_index=True)
    difficulty = models.CharField(max_length=10, choices=DIFFICULTY_CHOICES)
    badge_number = models.PositiveIntegerField(help_text="Sequence number per player and difficulty, starting at 1.")
    earned_date = models.DateTimeField(default=timezone.now)
    state = models.CharField(max_length=10, choices=REWARD_STATE_CHOICES, default=REWARD_UNCLAIMED)
    requested_date = models.DateTimeField(null=True, blank=True)
    claimed_date = models.DateTimeField(null=True, blank=True)
    awarded_by_id = models.CharField(max_length=64, null=True, blank=True, help_text="Admin who confirmed the prize.")
    awarded_by_username = models.CharField(max_length=150, null=True, blank=True)
    updated_at = models.DateTimeField(auto_now=True)

    objects = RewardManager()

    class Meta:
        ordering = ['-earned_date', '-id']
        constraints = [
            models.UniqueConstraint(
                fields=['player_id', 'difficulty', 'badge_number'],
                name='reward_player_difficulty_number_uniq',
            ),
        ]
        indexes = [
            models.Index(fields=['player_id', 'difficulty', 'state'], name='reward_player_diff_state_idx'),
        ]

    def __str__(self):
        return f"{self.player_id} - {self.difficulty} #{self.badge_number} ({self.state})"

    @property
    def is_requested(self):
        return self.state == REWARD_REQUESTED

    @property
    def is_claimed(self):
        return self.state == REWARD_CLAIMED

    @property
    def label(self):
        return f"{self.difficulty} #{self.badge_number}"


class StarAccount(models.Model):
    """Cumulative star total for a player. Tiers are derived, never stored."""
    player_id = models.CharField(max_length=64, unique=True)
    total_stars = models.PositiveIntegerField(default=0)
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        ordering = ['-total_stars', 'id']
        indexes = [
            models.Index(fields=['-total_stars'], name='staraccount_total_idx'),
        ]

    def __str__(self):
        return f"{self.player_id}: {self.total_stars} stars"


class StarMilestone(models.Model):
    """
    A one-time record of a player reaching a new star tier.

    Append-only: rows are never updated or deleted through the instance API.
    """
    player_id = models.CharField(max_length=64, db_index=True)
    tier = models.CharField(max_length=20)
    icon = models.CharField(max_length=10, blank=True)
    prize = models.CharField(max_length=100, blank=True)
    stars_required = models.PositiveIntegerField(default=0)
    stars_at_achievement = models.PositiveIntegerField()
    achieved_at = models.DateTimeField(default=timezone.now)

    class Meta:
        ordering = ['-achieved_at', '-id']
        indexes = [
            models.Index(fields=['player_id', '-achieved_at'], name='starmilestone_player_idx'),
        ]

    def __str__(self):
        return f"{self.player_id} reached {self.tier} at {self.stars_at_achievement} stars"

    def save(self, *args, **kwargs):
        if not self._state.adding:
            raise ValueError("Star milestones are append-only")
        super().save(*args, **kwargs)

    def delete(self, *args, **kwargs):
        raise ValueError("Star milestones are append-only")

    def as_dict(self):
        return {
            'tier': self.tier,
            'icon': self.icon,
            'prize': self.prize,
            'stars_required': self.stars_required,
        }
