"""
Custom model managers and querysets for the progression app.
"""
from django.db import models
from django.db.models import Count

from progression.constants import (
    DIFFICULTIES, REWARD_CLAIMED, REWARD_REQUESTED, REWARD_UNCLAIMED,
)


class RewardQuerySet(models.QuerySet):
    """Custom queryset for Reward with lifecycle filters."""

    def for_player(self, player_id):
        return self.filter(player_id=player_id)

    def by_difficulty(self, difficulty):
        return self.filter(difficulty=difficulty)

    def unclaimed(self):
        """Rewards the player has not requested yet."""
        return self.filter(state=REWARD_UNCLAIMED)

    def requested(self):
        """Rewards requested by the player and waiting for admin confirmation."""
        return self.filter(state=REWARD_REQUESTED)

    def claimed(self):
        """Rewards an admin has confirmed (physical prize given)."""
        return self.filter(state=REWARD_CLAIMED)

    def awardable(self):
        """Rewards an admin may award: anything not already claimed."""
        return self.exclude(state=REWARD_CLAIMED)

    def counts_by_difficulty(self):
        """
        Count rewards per difficulty.

        Returns:
            dict: {'easy': int, 'average': int, 'difficult': int}
        """
        counts = {difficulty: 0 for difficulty in DIFFICULTIES}
        rows = self.order_by().values('difficulty').annotate(count=Count('id'))
        for row in rows:
            if row['difficulty'] in counts:
                counts[row['difficulty']] = row['count']
        return counts


class RewardManager(models.Manager):
    """Custom manager for Reward."""

    def get_queryset(self):
        return RewardQuerySet(self.model, using=self._db)

    def for_player(self, player_id):
        return self.get_queryset().for_player(player_id)

    def claimed(self):
        return self.get_queryset().claimed()
