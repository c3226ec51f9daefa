"""
Badge and reward API views.

Handles the player-facing endpoints for badge progress, the reward ledger
and reward requests. Service errors are returned as
{"success": false, "reason", "message"} with the mapped status.
"""
import logging

from django.conf import settings
from django.utils.decorators import method_decorator
from django_ratelimit.decorators import ratelimit
from rest_framework import status
from rest_framework.authentication import SessionAuthentication, TokenAuthentication
from rest_framework.response import Response
from rest_framework.views import APIView

from progression.exceptions import ProgressionError
from progression.services.badge_service import BadgeProgressService
from progression.services.reward_service import RewardService
from .serializers import (
    DifficultySerializer, RewardRequestSerializer, RewardSerializer, serialize_grouped_rewards,
)
from .utils import error_response, internal_error_response, validation_error_response

logger = logging.getLogger(__name__)

REWARD_REQUEST_RATE = getattr(settings, 'REWARD_REQUEST_RATE', '30/m')


class BadgeSummaryView(APIView):
    """Badge progress, official counts and pending requests for a player."""
    authentication_classes = [SessionAuthentication, TokenAuthentication]
    permission_classes = []

    def get(self, request, player_id):
        """
        GET /api/v1/players/<player_id>/badges/summary/
        """
        try:
            summary = BadgeProgressService.get_summary(player_id)
            return Response({'success': True, 'player_id': player_id, **summary})
        except ProgressionError as e:
            return error_response(e)
        except Exception:
            logger.exception(f"Badge summary error for player {player_id}")
            return internal_error_response()


class BadgeEarnedView(APIView):
    """Count one completed game toward a badge cycle."""
    authentication_classes = [SessionAuthentication, TokenAuthentication]
    permission_classes = []

    @method_decorator(ratelimit(key='ip', rate=REWARD_REQUEST_RATE, method='POST', block=True))
    def post(self, request, player_id):
        """
        POST /api/v1/players/<player_id>/badges/earned/
        Body: { difficulty }
        """
        serializer = DifficultySerializer(data=request.data)
        if not serializer.is_valid():
            return validation_error_response(serializer.errors)

        try:
            result = BadgeProgressService.record_earned(player_id, serializer.validated_data['difficulty'])
            reward = result['reward']
            return Response({
                'success': True,
                'progress': result['progress'],
                'reward': RewardSerializer(reward).data if reward else None,
            }, status=status.HTTP_201_CREATED if reward else status.HTTP_200_OK)
        except ProgressionError as e:
            return error_response(e)
        except Exception:
            logger.exception(f"Badge progress error for player {player_id}")
            return internal_error_response()


class RewardListView(APIView):
    """All rewards of a player, grouped by difficulty."""
    authentication_classes = [SessionAuthentication, TokenAuthentication]
    permission_classes = []

    def get(self, request, player_id):
        """
        GET /api/v1/players/<player_id>/rewards/
        """
        try:
            listing = RewardService.list_rewards_by_difficulty(player_id)
            return Response({
                'success': True,
                'rewards': serialize_grouped_rewards(listing['rewards']),
                'official_totals': listing['official_totals'],
                'requested': listing['requested'],
            })
        except ProgressionError as e:
            return error_response(e)
        except Exception:
            logger.exception(f"Reward list error for player {player_id}")
            return internal_error_response()


class UnclaimedRewardListView(APIView):
    """Rewards the player can still request."""
    authentication_classes = [SessionAuthentication, TokenAuthentication]
    permission_classes = []

    def get(self, request, player_id):
        """
        GET /api/v1/players/<player_id>/rewards/unclaimed/
        """
        try:
            listing = RewardService.list_unclaimed_rewards(player_id)
            return Response({
                'success': True,
                'rewards': serialize_grouped_rewards(listing['rewards']),
                'requested': listing['requested'],
                'total_unclaimed': listing['total_unclaimed'],
            })
        except ProgressionError as e:
            return error_response(e)
        except Exception:
            logger.exception(f"Unclaimed reward list error for player {player_id}")
            return internal_error_response()


class RewardRequestView(APIView):
    """Player requests the prize for one reward."""
    authentication_classes = [SessionAuthentication, TokenAuthentication]
    permission_classes = []

    @method_decorator(ratelimit(key='ip', rate=REWARD_REQUEST_RATE, method='POST', block=True))
    def post(self, request, player_id):
        """
        POST /api/v1/players/<player_id>/rewards/request/
        Body: { reward_id }
        """
        serializer = RewardRequestSerializer(data=request.data)
        if not serializer.is_valid():
            return validation_error_response(serializer.errors)

        try:
            reward = RewardService.request_reward(serializer.validated_data['reward_id'], player_id)
            return Response({
                'success': True,
                'message': 'Reward requested successfully. Waiting for admin confirmation.',
                'reward': RewardSerializer(reward).data,
            })
        except ProgressionError as e:
            return error_response(e)
        except Exception:
            logger.exception(f"Reward request error for player {player_id}")
            return internal_error_response()


class RewardRequestAllView(APIView):
    """Player requests every unclaimed reward of one difficulty."""
    authentication_classes = [SessionAuthentication, TokenAuthentication]
    permission_classes = []

    @method_decorator(ratelimit(key='ip', rate=REWARD_REQUEST_RATE, method='POST', block=True))
    def post(self, request, player_id):
        """
        POST /api/v1/players/<player_id>/rewards/request-all/
        Body: { difficulty }
        """
        serializer = DifficultySerializer(data=request.data)
        if not serializer.is_valid():
            return validation_error_response(serializer.errors)

        try:
            count = RewardService.request_all_eligible_by_difficulty(
                player_id, serializer.validated_data['difficulty'],
            )
            return Response({
                'success': True,
                'message': f'{count} reward(s) requested. Waiting for admin confirmation.',
                'requested_count': count,
            })
        except ProgressionError as e:
            return error_response(e)
        except Exception:
            logger.exception(f"Bulk reward request error for player {player_id}")
            return internal_error_response()
