import django.utils.timezone
from django.db import migrations, models


class Migration(migrations.Migration):

    initial = True

    dependencies = []

    operations = [
        migrations.CreateModel(
            name='BadgeProgress',
            fields=[
                ('id', models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name='ID')),
                ('player_id', models.CharField(db_index=True, help_text='Opaque player key from the player directory.', max_length=64)),
                ('difficulty', models.CharField(choices=[('easy', 'Easy'), ('average', 'Average'), ('difficult', 'Difficult')], max_length=10)),
                ('lifetime_earned_count', models.PositiveIntegerField(default=0)),
                ('official_badge_count', models.PositiveIntegerField(default=0)),
                ('created_at', models.DateTimeField(auto_now_add=True)),
                ('updated_at', models.DateTimeField(auto_now=True)),
            ],
            options={
                'verbose_name': 'Badge Progress',
                'verbose_name_plural': 'Badge Progress',
                'ordering': ['player_id', 'difficulty'],
                'constraints': [
                    models.UniqueConstraint(fields=('player_id', 'difficulty'), name='badgeprogress_player_difficulty_uniq'),
                ],
            },
        ),
        migrations.CreateModel(
            name='Reward',
            fields=[
                ('id', models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name='ID')),
                ('player_id', models.CharField(db_index=True, max_length=64)),
                ('difficulty', models.CharField(choices=[('easy', 'Easy'), ('average', 'Average'), ('difficult', 'Difficult')], max_length=10)),
                ('badge_number', models.PositiveIntegerField(help_text='Sequence number per player and difficulty, starting at 1.')),
                ('earned_date', models.DateTimeField(default=django.utils.timezone.now)),
                ('state', models.CharField(choices=[('unclaimed', 'Unclaimed'), ('requested', 'Requested'), ('claimed', 'Claimed')], default='unclaimed', max_length=10)),
                ('requested_date', models.DateTimeField(blank=True, null=True)),
                ('claimed_date', models.DateTimeField(blank=True, null=True)),
                ('awarded_by_id', models.CharField(blank=True, help_text='Admin who confirmed the prize.', max_length=64, null=True)),
                ('awarded_by_username', models.CharField(blank=True, max_length=150, null=True)),
                ('updated_at', models.DateTimeField(auto_now=True)),
            ],
            options={
                'ordering': ['-earned_date', '-id'],
                'indexes': [
                    models.Index(fields=['player_id', 'difficulty', 'state'], name='reward_player_diff_state_idx'),
                ],
                'constraints': [
                    models.UniqueConstraint(fields=('player_id', 'difficulty', 'badge_number'), name='reward_player_difficulty_number_uniq'),
                ],
            },
        ),
        migrations.CreateModel(
            name='StarAccount',
            fields=[
                ('id', models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name='ID')),
                ('player_id', models.CharField(max_length=64, unique=True)),
                ('total_stars', models.PositiveIntegerField(default=0)),
                ('created_at', models.DateTimeField(auto_now_add=True)),
                ('updated_at', models.DateTimeField(auto_now=True)),
            ],
            options={
                'ordering': ['-total_stars', 'id'],
                'indexes': [
                    models.Index(fields=['-total_stars'], name='staraccount_total_idx'),
                ],
            },
        ),
        migrations.CreateModel(
            name='StarMilestone',
            fields=[
                ('id', models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name='ID')),
                ('player_id', models.CharField(db_index=True, max_length=64)),
                ('tier', models.CharField(max_length=20)),
                ('icon', models.CharField(blank=True, max_length=10)),
                ('prize', models.CharField(blank=True, max_length=100)),
                ('stars_required', models.PositiveIntegerField(default=0)),
                ('stars_at_achievement', models.PositiveIntegerField()),
                ('achieved_at', models.DateTimeField(default=django.utils.timezone.now)),
            ],
            options={
                'ordering': ['-achieved_at', '-id'],
                'indexes': [
                    models.Index(fields=['player_id', '-achieved_at'], name='starmilestone_player_idx'),
                ],
            },
        ),
    ]
