"""
Tests for RewardService.

Covers:
- Single and bulk reward requests with their eligibility rules
- Admin awards over unclaimed and requested rewards
- Interleavings of player requests and admin awards
- Audit entries written after commit, and audit failure isolation
- Grouped reward listings
"""
from unittest.mock import patch

from django.contrib.auth import get_user_model
from django.test import TestCase

from audit.constants import (
    ACTION_AWARD_BADGE, ACTION_REQUEST_REWARD, ACTION_REQUEST_REWARDS, ACTOR_ADMIN, ACTOR_PLAYER,
)
from audit.models import AuditLogEntry
from audit.services.audit_service import AuditActor
from progression.constants import REWARD_CLAIMED, REWARD_REQUESTED, REWARD_UNCLAIMED
from progression.exceptions import (
    AlreadyClaimedError, AlreadyRequestedError, InvalidDifficultyError, NotEligibleError,
    NothingToAwardError, NothingToRequestError, PlayerNotFoundError, RewardNotFoundError,
    UnauthorizedError,
)
from progression.models import BadgeProgress, Reward
from progression.services.badge_service import BadgeProgressService
from progression.services.reward_service import RewardService

User = get_user_model()


class RewardServiceTestCase(TestCase):
    """Base test case with a staff user and a helper to play games."""

    def setUp(self):
        self.staff = User.objects.create_user(
            username='starbooks_admin',
            email='admin@example.com',
            password='testpass123',
            is_staff=True,
        )
        self.admin = AuditActor.for_admin(self.staff)

    def play(self, player_id, difficulty, games):
        for _ in range(games):
            BadgeProgressService.record_earned(player_id, difficulty)

    def progress(self, player_id, difficulty):
        return BadgeProgress.objects.get(player_id=player_id, difficulty=difficulty)


class RequestRewardTests(RewardServiceTestCase):
    """Tests for request_reward()."""

    def test_request_after_completed_cycle(self):
        self.play('p1', 'easy', 3)
        reward = Reward.objects.for_player('p1').get()

        result = RewardService.request_reward(reward.pk, 'p1')

        self.assertEqual(result.state, REWARD_REQUESTED)
        self.assertIsNotNone(result.requested_date)
        # Requests never touch the official counters
        self.assertEqual(self.progress('p1', 'easy').official_badge_count, 0)
        self.assertEqual(self.progress('p1', 'easy').lifetime_earned_count, 3)

    def test_not_eligible_mid_cycle(self):
        self.play('p1', 'easy', 5)
        reward = Reward.objects.for_player('p1').get()

        with self.assertRaises(NotEligibleError) as ctx:
            RewardService.request_reward(reward.pk, 'p1')

        self.assertEqual(ctx.exception.current_count, 5)
        reward.refresh_from_db()
        self.assertEqual(reward.state, REWARD_UNCLAIMED)

    def test_not_eligible_without_progress(self):
        reward = Reward.objects.create(player_id='p1', difficulty='easy', badge_number=1)

        with self.assertRaises(NotEligibleError):
            RewardService.request_reward(reward.pk, 'p1')

    def test_already_requested(self):
        self.play('p1', 'easy', 3)
        reward = Reward.objects.for_player('p1').get()
        RewardService.request_reward(reward.pk, 'p1')

        with self.assertRaises(AlreadyRequestedError) as ctx:
            RewardService.request_reward(reward.pk, 'p1')
        self.assertEqual(ctx.exception.message, "Already requested, waiting for admin to confirm.")

    def test_already_claimed(self):
        self.play('p1', 'easy', 3)
        reward = Reward.objects.for_player('p1').get()
        RewardService.award_by_difficulty('p1', 'easy', self.admin)

        with self.assertRaises(AlreadyClaimedError) as ctx:
            RewardService.request_reward(reward.pk, 'p1')
        self.assertEqual(ctx.exception.message, "Reward already given by admin.")

    def test_other_players_reward_is_not_found(self):
        self.play('p1', 'easy', 3)
        reward = Reward.objects.for_player('p1').get()

        with self.assertRaises(RewardNotFoundError):
            RewardService.request_reward(reward.pk, 'p2')

    def test_malformed_reward_id_is_not_found(self):
        with self.assertRaises(RewardNotFoundError):
            RewardService.request_reward('not-an-id', 'p1')

    def test_award_committed_while_waiting_for_lock(self):
        self.play('p1', 'easy', 3)
        reward = Reward.objects.for_player('p1').get()

        def claimed_on_reload(instance, *args, **kwargs):
            # The reload under the lock sees an admin award committed by another transaction
            instance.state = REWARD_CLAIMED

        with patch.object(Reward, 'refresh_from_db', autospec=True, side_effect=claimed_on_reload) as mock_reload:
            with self.captureOnCommitCallbacks(execute=True) as callbacks:
                with self.assertRaises(AlreadyClaimedError):
                    RewardService.request_reward(reward.pk, 'p1')

        mock_reload.assert_called_once()
        self.assertEqual(len(callbacks), 0)
        reward.refresh_from_db()
        self.assertEqual(reward.state, REWARD_UNCLAIMED)
        self.assertIsNone(reward.requested_date)
        progress = self.progress('p1', 'easy')
        self.assertEqual(progress.lifetime_earned_count, 3)
        self.assertEqual(progress.official_badge_count, 0)

    def test_audit_entry_after_commit(self):
        self.play('p1', 'easy', 3)
        reward = Reward.objects.for_player('p1').get()

        with self.captureOnCommitCallbacks(execute=True):
            RewardService.request_reward(reward.pk, 'p1')

        entry = AuditLogEntry.objects.get(action=ACTION_REQUEST_REWARD)
        self.assertEqual(entry.actor_type, ACTOR_PLAYER)
        self.assertEqual(entry.target_id, str(reward.pk))
        self.assertEqual(entry.target_label, 'easy #1')
        self.assertEqual(entry.changes, {'before': {'state': 'unclaimed'}, 'after': {'state': 'requested'}})

    def test_failed_request_writes_no_audit_entry(self):
        self.play('p1', 'easy', 4)
        reward = Reward.objects.for_player('p1').get()

        with self.captureOnCommitCallbacks(execute=True) as callbacks:
            with self.assertRaises(NotEligibleError):
                RewardService.request_reward(reward.pk, 'p1')

        self.assertEqual(len(callbacks), 0)


class RequestAllTests(RewardServiceTestCase):
    """Tests for request_all_eligible_by_difficulty()."""

    def test_requests_every_unclaimed_reward(self):
        self.play('p1', 'easy', 6)

        count = RewardService.request_all_eligible_by_difficulty('p1', 'easy')

        self.assertEqual(count, 2)
        states = set(Reward.objects.for_player('p1').values_list('state', flat=True))
        self.assertEqual(states, {REWARD_REQUESTED})

    def test_leaves_other_difficulties_alone(self):
        self.play('p1', 'easy', 3)
        self.play('p1', 'average', 3)

        RewardService.request_all_eligible_by_difficulty('p1', 'easy')

        self.assertEqual(Reward.objects.for_player('p1').by_difficulty('average').get().state, REWARD_UNCLAIMED)

    def test_nothing_to_request(self):
        self.play('p1', 'easy', 3)
        RewardService.request_all_eligible_by_difficulty('p1', 'easy')

        with self.assertRaises(NothingToRequestError):
            RewardService.request_all_eligible_by_difficulty('p1', 'easy')

    def test_invalid_difficulty(self):
        with self.assertRaises(InvalidDifficultyError):
            RewardService.request_all_eligible_by_difficulty('p1', 'hard')

    def test_audit_counts_include_earlier_requests(self):
        self.play('p1', 'easy', 3)
        first = Reward.objects.for_player('p1').get()
        RewardService.request_reward(first.pk, 'p1')
        self.play('p1', 'easy', 6)

        with self.captureOnCommitCallbacks(execute=True):
            count = RewardService.request_all_eligible_by_difficulty('p1', 'easy')

        self.assertEqual(count, 2)
        entry = AuditLogEntry.objects.get(action=ACTION_REQUEST_REWARDS)
        self.assertEqual(entry.changes, {
            'before': {'easy_requested': 1},
            'after': {'easy_requested': 3},
        })
        self.assertEqual(entry.details, {'difficulty': 'easy', 'requested_count': 2})


class AwardByDifficultyTests(RewardServiceTestCase):
    """Tests for award_by_difficulty()."""

    def test_request_then_award_scenario(self):
        self.play('p1', 'easy', 6)
        official_before = BadgeProgressService.get_summary('p1')['official_badges']['easy']

        self.assertEqual(RewardService.request_all_eligible_by_difficulty('p1', 'easy'), 2)
        result = RewardService.award_by_difficulty('p1', 'easy', self.admin)

        self.assertEqual(result['rewards_awarded'], 2)
        self.assertEqual(result['official_total'], official_before + 2)
        self.assertEqual(result['awarded_by'], 'starbooks_admin')
        for reward in Reward.objects.for_player('p1'):
            self.assertEqual(reward.state, REWARD_CLAIMED)
            self.assertIsNotNone(reward.claimed_date)
            self.assertEqual(reward.awarded_by_id, str(self.staff.pk))

        summary = BadgeProgressService.get_summary('p1')
        self.assertEqual(summary['progress']['easy'], {'current_count': 0, 'remaining': 3, 'total_earned': 0})
        self.assertEqual(summary['official_badges']['easy'], official_before + 2)
        self.assertEqual(summary['requested']['easy'], 0)

    def test_awards_unrequested_rewards_too(self):
        self.play('p1', 'average', 6)
        first = Reward.objects.for_player('p1').get(badge_number=1)
        Reward.objects.filter(pk=first.pk).update(state=REWARD_REQUESTED)

        result = RewardService.award_by_difficulty('p1', 'average', self.admin)

        self.assertEqual(result['rewards_awarded'], 2)
        self.assertEqual(self.progress('p1', 'average').official_badge_count, 2)

    def test_second_award_has_nothing_to_award(self):
        self.play('p1', 'easy', 3)
        RewardService.award_by_difficulty('p1', 'easy', self.admin)
        self.play('p1', 'easy', 2)

        with self.assertRaises(NothingToAwardError) as ctx:
            RewardService.award_by_difficulty('p1', 'easy', self.admin)

        self.assertEqual(ctx.exception.status_code, 404)
        progress = self.progress('p1', 'easy')
        self.assertEqual(progress.official_badge_count, 1)
        self.assertEqual(progress.lifetime_earned_count, 2)

    def test_unknown_player_is_not_found(self):
        with self.assertRaises(PlayerNotFoundError) as ctx:
            RewardService.award_by_difficulty('ghost', 'easy', self.admin)

        self.assertEqual(ctx.exception.reason, 'not_found')
        self.assertEqual(ctx.exception.status_code, 404)
        self.assertEqual(ctx.exception.player_id, 'ghost')
        self.assertFalse(BadgeProgress.objects.filter(player_id='ghost').exists())

    def test_known_player_without_progress_at_difficulty(self):
        self.play('p1', 'easy', 3)

        with self.assertRaises(NothingToAwardError):
            RewardService.award_by_difficulty('p1', 'difficult', self.admin)

    def test_missing_admin_is_unauthorized(self):
        self.play('p1', 'easy', 3)

        for admin in (None, AuditActor.for_player('p1')):
            with self.assertRaises(UnauthorizedError):
                RewardService.award_by_difficulty('p1', 'easy', admin)

        self.assertEqual(Reward.objects.for_player('p1').get().state, REWARD_UNCLAIMED)
        self.assertEqual(self.progress('p1', 'easy').official_badge_count, 0)

    def test_award_after_player_request_awards_once(self):
        self.play('p1', 'easy', 3)
        reward = Reward.objects.for_player('p1').get()

        RewardService.request_reward(reward.pk, 'p1')
        RewardService.award_by_difficulty('p1', 'easy', self.admin)
        with self.assertRaises(NothingToAwardError):
            RewardService.award_by_difficulty('p1', 'easy', self.admin)

        self.assertEqual(self.progress('p1', 'easy').official_badge_count, 1)

    def test_audit_entry_records_official_counts(self):
        self.play('p1', 'difficult', 3)

        with self.captureOnCommitCallbacks(execute=True):
            RewardService.award_by_difficulty('p1', 'difficult', self.admin, target_label='Player One')

        entry = AuditLogEntry.objects.get(action=ACTION_AWARD_BADGE)
        self.assertEqual(entry.actor_type, ACTOR_ADMIN)
        self.assertEqual(entry.actor_name, 'starbooks_admin')
        self.assertEqual(entry.target_label, 'Player One')
        self.assertEqual(entry.changes, {
            'before': {'claimed': False, 'difficult_official_badge': 0},
            'after': {'claimed': True, 'difficult_official_badge': 1},
        })
        self.assertEqual(entry.details, {'difficulty': 'difficult', 'rewards_awarded': 1})

    def test_audit_failure_does_not_undo_award(self):
        self.play('p1', 'easy', 3)

        with patch('audit.models.AuditLogEntry.objects.create', side_effect=RuntimeError('db down')):
            with self.assertLogs('audit.services.audit_service', level='ERROR'):
                with self.captureOnCommitCallbacks(execute=True):
                    result = RewardService.award_by_difficulty('p1', 'easy', self.admin)

        self.assertEqual(result['rewards_awarded'], 1)
        self.assertEqual(self.progress('p1', 'easy').official_badge_count, 1)
        self.assertFalse(AuditLogEntry.objects.exists())


class ListingTests(RewardServiceTestCase):
    """Tests for the grouped listings and per-state counts."""

    def setUp(self):
        super().setUp()
        self.play('p1', 'easy', 9)
        self.play('p1', 'difficult', 3)
        RewardService.award_by_difficulty('p1', 'difficult', self.admin)
        first = Reward.objects.for_player('p1').by_difficulty('easy').get(badge_number=1)
        Reward.objects.filter(pk=first.pk).update(state=REWARD_REQUESTED)

    def test_list_rewards_by_difficulty(self):
        listing = RewardService.list_rewards_by_difficulty('p1')

        self.assertEqual(set(listing['rewards'].keys()), {'easy', 'average', 'difficult'})
        self.assertEqual(len(listing['rewards']['easy']), 3)
        self.assertEqual(listing['rewards']['average'], [])
        self.assertEqual(listing['official_totals'], {'easy': 0, 'average': 0, 'difficult': 1})
        self.assertEqual(listing['requested']['easy'], 1)

    def test_list_unclaimed_rewards(self):
        listing = RewardService.list_unclaimed_rewards('p1')

        easy_numbers = [reward.badge_number for reward in listing['rewards']['easy']]
        self.assertEqual(easy_numbers, [2, 3])
        self.assertEqual(listing['rewards']['difficult'], [])
        self.assertEqual(listing['total_unclaimed'], 2)

    def test_state_counts(self):
        self.assertEqual(RewardService.requested_counts('p1'), {'easy': 1, 'average': 0, 'difficult': 0})
        self.assertEqual(RewardService.claimed_counts('p1'), {'easy': 0, 'average': 0, 'difficult': 1})
