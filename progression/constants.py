"""
Constants and configuration values for the progression app.

This module centralizes the difficulty partition, the badge cycle length,
the star tier table and the accepted gameplay inputs.
"""
from dataclasses import dataclass

# Difficulties (badge progress partition key)
DIFFICULTY_EASY = 'easy'
DIFFICULTY_AVERAGE = 'average'
DIFFICULTY_DIFFICULT = 'difficult'

DIFFICULTIES = (DIFFICULTY_EASY, DIFFICULTY_AVERAGE, DIFFICULTY_DIFFICULT)

DIFFICULTY_CHOICES = [
    (DIFFICULTY_EASY, 'Easy'),
    (DIFFICULTY_AVERAGE, 'Average'),
    (DIFFICULTY_DIFFICULT, 'Difficult'),
]

# Completed games per badge cycle; each completed cycle creates one reward
BADGE_CYCLE_LENGTH = 3

# Reward lifecycle
REWARD_UNCLAIMED = 'unclaimed'
REWARD_REQUESTED = 'requested'
REWARD_CLAIMED = 'claimed'

REWARD_STATE_CHOICES = [
    (REWARD_UNCLAIMED, 'Unclaimed'),
    (REWARD_REQUESTED, 'Requested'),
    (REWARD_CLAIMED, 'Claimed'),
]

# Gameplay inputs accepted with a star award
GAME_TYPES = ('memory_match', 'puzzle', 'challenge', 'battle')


@dataclass(frozen=True)
class StarTier:
    name: str
    threshold: int
    icon: str
    prize: str
    color: str

    def as_dict(self):
        return {
            'tier': self.name,
            'threshold': self.threshold,
            'icon': self.icon,
            'prize': self.prize,
            'color': self.color,
        }


# Ordered from highest threshold to lowest. The 0 threshold is the catch-all.
STAR_TIERS = (
    StarTier('Diamond', 1000, '\U0001F48E', 'Diamond Badge Unlocked!', '#B9F2FF'),
    StarTier('Platinum', 500, '\U0001F3C6', 'Platinum Badge Unlocked!', '#E5E4E2'),
    StarTier('Gold', 250, '\U0001F947', 'Gold Badge Unlocked!', '#FFD700'),
    StarTier('Silver', 100, '\U0001F948', 'Silver Badge Unlocked!', '#C0C0C0'),
    StarTier('Bronze', 50, '\U0001F949', 'Bronze Badge Unlocked!', '#CD7F32'),
    StarTier('Beginner', 0, '⭐', 'Welcome to Starbooks Whiz!', '#FFFFFF'),
)
