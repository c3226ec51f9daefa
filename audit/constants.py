"""
Constants for the audit app: action kinds, their display labels,
actor types, and the keys never included in a change diff.
"""

# Action kinds
ACTION_RECORD_BADGE_PROGRESS = 'record_badge_progress'
ACTION_REQUEST_REWARD = 'request_reward'
ACTION_REQUEST_REWARDS = 'request_rewards'
ACTION_AWARD_BADGE = 'award_badge'
ACTION_AWARD_STARS = 'award_stars'

# Human-readable labels shown in the admin
ACTION_LABELS = {
    ACTION_RECORD_BADGE_PROGRESS: 'Recorded Badge Progress',
    ACTION_REQUEST_REWARD: 'Requested Reward',
    ACTION_REQUEST_REWARDS: 'Requested Rewards',
    ACTION_AWARD_BADGE: 'Awarded Badge',
    ACTION_AWARD_STARS: 'Awarded Stars',
}

# Actor types
ACTOR_ADMIN = 'admin'
ACTOR_PLAYER = 'player'
ACTOR_SYSTEM = 'system'

ACTOR_TYPE_CHOICES = [
    (ACTOR_ADMIN, 'Admin'),
    (ACTOR_PLAYER, 'Player'),
    (ACTOR_SYSTEM, 'System'),
]

# Target types
TARGET_PLAYER = 'player'
TARGET_REWARD = 'reward'

# Keys skipped when diffing snapshots
EXCLUDED_DIFF_KEYS = frozenset({'password', 'created_at', 'updated_at', 'id', 'pk', '_id'})


def get_action_label(action):
    """Label for an action kind, falling back to a title-cased version of the key."""
    return ACTION_LABELS.get(action) or action.replace('_', ' ').title()
