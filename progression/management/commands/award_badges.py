from django.contrib.auth import get_user_model
from django.core.management.base import BaseCommand, CommandError

from audit.services.audit_service import AuditActor
from progression.constants import DIFFICULTIES
from progression.exceptions import NothingToAwardError, ProgressionError
from progression.models import Reward
from progression.services.reward_service import RewardService


class Command(BaseCommand):
    help = 'Award every pending reward of one or all difficulties to a player, as a staff user.'

    def add_arguments(self, parser):
        parser.add_argument('player_id', type=str, help='Player to award.')
        parser.add_argument('--admin', type=str, required=True, help='Username of the staff user confirming the prize.')
        parser.add_argument(
            '--difficulty',
            type=str,
            choices=DIFFICULTIES,
            help='Only award this difficulty (default: all).',
        )
        parser.add_argument('--label', type=str, help='Player display name for the audit log.')
        parser.add_argument(
            '--dry-run',
            action='store_true',
            help='Preview without writing to the database.',
        )

    def handle(self, *args, **options):
        player_id = options['player_id']
        dry_run = options['dry_run']
        difficulties = [options['difficulty']] if options['difficulty'] else list(DIFFICULTIES)

        User = get_user_model()
        try:
            user = User.objects.get(username=options['admin'])
        except User.DoesNotExist:
            raise CommandError(f'User "{options["admin"]}" not found.')
        if not user.is_staff:
            raise CommandError(f'User "{user.get_username()}" is not a staff user.')

        admin = AuditActor.for_admin(user)

        if dry_run:
            self.stdout.write(self.style.WARNING('Dry-run mode: no changes will be made.'))

        awarded_total = 0
        for difficulty in difficulties:
            if dry_run:
                pending = Reward.objects.for_player(player_id).by_difficulty(difficulty).awardable().count()
                self.stdout.write(f'  {difficulty}: would award {pending}')
                awarded_total += pending
                continue

            try:
                result = RewardService.award_by_difficulty(
                    player_id, difficulty, admin, target_label=options['label'],
                )
            except NothingToAwardError:
                self.stdout.write(f'  {difficulty}: nothing pending')
                continue
            except ProgressionError as e:
                raise CommandError(f'{difficulty}: {e.message}')

            awarded_total += result['rewards_awarded']
            self.stdout.write(self.style.SUCCESS(
                f"  {difficulty}: awarded {result['rewards_awarded']}, official total {result['official_total']}"
            ))

        self.stdout.write('')
        label = 'Would award' if dry_run else 'Awarded'
        self.stdout.write(self.style.SUCCESS(f'Done. {label}: {awarded_total}'))
