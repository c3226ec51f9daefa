"""
Tests for BadgeProgressService.

Covers:
- Counting games and creating a reward per completed cycle
- Badge numbering per player and difficulty
- Committing admin awards to the counters
- The badge summary for new and existing players
"""
from django.test import TestCase

from audit.constants import ACTION_RECORD_BADGE_PROGRESS, ACTOR_SYSTEM
from audit.models import AuditLogEntry
from progression.constants import REWARD_REQUESTED, REWARD_UNCLAIMED
from progression.exceptions import InvalidDifficultyError
from progression.models import BadgeProgress, Reward
from progression.services.badge_service import BadgeProgressService


def play(player_id, difficulty, games):
    result = None
    for _ in range(games):
        result = BadgeProgressService.record_earned(player_id, difficulty)
    return result


class RecordEarnedTests(TestCase):
    """Tests for record_earned()."""

    def test_first_game_creates_progress(self):
        result = BadgeProgressService.record_earned('p1', 'easy')

        progress = BadgeProgress.objects.get(player_id='p1', difficulty='easy')
        self.assertEqual(progress.lifetime_earned_count, 1)
        self.assertEqual(progress.official_badge_count, 0)
        self.assertEqual(result['progress'], {'current_count': 1, 'remaining': 2, 'total_earned': 1})
        self.assertIsNone(result['reward'])

    def test_third_game_creates_reward(self):
        result = play('p1', 'easy', 3)

        reward = result['reward']
        self.assertIsNotNone(reward)
        self.assertEqual(reward.badge_number, 1)
        self.assertEqual(reward.state, REWARD_UNCLAIMED)
        self.assertEqual(result['progress']['current_count'], 0)
        self.assertEqual(Reward.objects.for_player('p1').count(), 1)

    def test_badge_numbers_are_sequential(self):
        play('p1', 'easy', 9)

        numbers = list(Reward.objects.for_player('p1').order_by('badge_number').values_list('badge_number', flat=True))
        self.assertEqual(numbers, [1, 2, 3])

    def test_difficulties_are_independent(self):
        play('p1', 'easy', 3)
        play('p1', 'difficult', 2)

        self.assertEqual(Reward.objects.for_player('p1').by_difficulty('easy').count(), 1)
        self.assertEqual(Reward.objects.for_player('p1').by_difficulty('difficult').count(), 0)

    def test_badge_numbers_continue_after_award(self):
        play('p1', 'easy', 3)
        BadgeProgressService.commit_award('p1', 'easy', 1)
        result = play('p1', 'easy', 3)

        self.assertEqual(result['reward'].badge_number, 2)

    def test_difficulty_is_normalized(self):
        BadgeProgressService.record_earned('p1', 'AVERAGE')
        self.assertTrue(BadgeProgress.objects.filter(player_id='p1', difficulty='average').exists())

    def test_invalid_difficulty(self):
        with self.assertRaises(InvalidDifficultyError):
            BadgeProgressService.record_earned('p1', 'legendary')
        self.assertFalse(BadgeProgress.objects.exists())

    def test_audit_entry_after_commit(self):
        with self.captureOnCommitCallbacks(execute=True):
            BadgeProgressService.record_earned('p1', 'easy')

        entry = AuditLogEntry.objects.get(action=ACTION_RECORD_BADGE_PROGRESS)
        self.assertEqual(entry.actor_type, ACTOR_SYSTEM)
        self.assertEqual(entry.target_id, 'p1')
        self.assertEqual(entry.changes, {
            'before': {'easy_badge_count': 0},
            'after': {'easy_badge_count': 1},
        })


class CommitAwardTests(TestCase):
    """Tests for commit_award()."""

    def test_adds_official_and_resets_cycle(self):
        play('p1', 'easy', 6)

        before, progress = BadgeProgressService.commit_award('p1', 'easy', 2)

        self.assertEqual(before, {'easy_badge_count': 6, 'easy_official_badge': 0})
        self.assertEqual(progress.lifetime_earned_count, 0)
        self.assertEqual(progress.official_badge_count, 2)

    def test_official_count_accumulates(self):
        BadgeProgressService.commit_award('p1', 'average', 1)
        _, progress = BadgeProgressService.commit_award('p1', 'average', 3)
        self.assertEqual(progress.official_badge_count, 4)

    def test_reward_count_must_be_positive(self):
        with self.assertRaises(ValueError):
            BadgeProgressService.commit_award('p1', 'easy', 0)


class SummaryTests(TestCase):
    """Tests for get_summary()."""

    def test_unknown_player_gets_zeroed_summary(self):
        summary = BadgeProgressService.get_summary('nobody')

        for difficulty in ('easy', 'average', 'difficult'):
            self.assertEqual(summary['progress'][difficulty], {'current_count': 0, 'remaining': 3, 'total_earned': 0})
            self.assertEqual(summary['official_badges'][difficulty], 0)
            self.assertEqual(summary['requested'][difficulty], 0)
        self.assertEqual(summary['total_official_badges'], 0)
        self.assertEqual(summary['total_requested'], 0)

    def test_summary_reflects_ledger(self):
        play('p1', 'easy', 7)
        play('p1', 'difficult', 3)
        Reward.objects.for_player('p1').by_difficulty('easy').filter(badge_number=1).update(state=REWARD_REQUESTED)
        BadgeProgressService.commit_award('p1', 'difficult', 1)

        summary = BadgeProgressService.get_summary('p1')

        self.assertEqual(summary['progress']['easy'], {'current_count': 1, 'remaining': 2, 'total_earned': 7})
        self.assertEqual(summary['requested'], {'easy': 1, 'average': 0, 'difficult': 0})
        self.assertEqual(summary['official_badges']['difficult'], 1)
        self.assertEqual(summary['total_official_badges'], 1)
        self.assertEqual(summary['total_requested'], 1)

    def test_official_counts(self):
        BadgeProgressService.commit_award('p1', 'easy', 2)
        self.assertEqual(BadgeProgressService.get_official_counts('p1'), {'easy': 2, 'average': 0, 'difficult': 0})
