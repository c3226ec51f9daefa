from rest_framework import serializers

from progression.constants import DIFFICULTIES, GAME_TYPES
from progression.models import Reward, StarMilestone


class RewardSerializer(serializers.ModelSerializer):
    requested = serializers.BooleanField(source='is_requested', read_only=True)
    claimed = serializers.BooleanField(source='is_claimed', read_only=True)

    class Meta:
        model = Reward
        fields = [
            'id', 'difficulty', 'badge_number', 'state', 'requested', 'claimed',
            'earned_date', 'requested_date', 'claimed_date', 'awarded_by_username',
        ]
        read_only_fields = fields


class StarMilestoneSerializer(serializers.ModelSerializer):
    class Meta:
        model = StarMilestone
        fields = ['tier', 'icon', 'prize', 'stars_required', 'stars_at_achievement', 'achieved_at']
        read_only_fields = fields


def serialize_grouped_rewards(grouped):
    """Serialize a {difficulty: [Reward]} mapping."""
    return {
        difficulty: RewardSerializer(rewards, many=True).data
        for difficulty, rewards in grouped.items()
    }


class RewardRequestSerializer(serializers.Serializer):
    # Kept as a string; unknown or malformed ids are reported as not found
    reward_id = serializers.CharField(max_length=64, required=True)


class DifficultySerializer(serializers.Serializer):
    difficulty = serializers.CharField(max_length=20, required=True)


class AdminAwardSerializer(DifficultySerializer):
    player_label = serializers.CharField(max_length=150, required=False, allow_blank=True)


class StarAwardSerializer(serializers.Serializer):
    amount = serializers.IntegerField(required=True, min_value=1)
    game_type = serializers.ChoiceField(choices=GAME_TYPES, required=False)
    difficulty = serializers.CharField(max_length=20, required=False)
    category = serializers.CharField(max_length=100, required=False, allow_blank=True)

    def validate_difficulty(self, value):
        normalized = value.strip().lower()
        if normalized not in DIFFICULTIES:
            raise serializers.ValidationError("Difficulty must be one of EASY, AVERAGE or DIFFICULT.")
        return normalized
