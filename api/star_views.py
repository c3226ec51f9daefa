"""
Star API views: star awards, tier progress, milestones and rankings.
"""
import logging

from django.conf import settings
from django.utils.decorators import method_decorator
from django_ratelimit.decorators import ratelimit
from rest_framework.authentication import SessionAuthentication, TokenAuthentication
from rest_framework.response import Response
from rest_framework.views import APIView

from progression.exceptions import ProgressionError
from progression.services.leaderboard_service import compute_stars_leaderboard, get_player_rank
from progression.services.star_service import StarService
from .serializers import StarAwardSerializer, StarMilestoneSerializer
from .utils import error_response, internal_error_response, safe_int, validation_error_response

logger = logging.getLogger(__name__)


class PlayerStarsView(APIView):
    """Read or add to a player's star total."""
    authentication_classes = [SessionAuthentication, TokenAuthentication]
    permission_classes = []

    def get(self, request, player_id):
        """
        GET /api/v1/players/<player_id>/stars/
        """
        try:
            return Response({'success': True, 'player_id': player_id, **StarService.get_player_stars(player_id)})
        except ProgressionError as e:
            return error_response(e)
        except Exception:
            logger.exception(f"Star info error for player {player_id}")
            return internal_error_response()

    @method_decorator(ratelimit(key='ip', rate=getattr(settings, 'REWARD_REQUEST_RATE', '30/m'), method='POST', block=True))
    def post(self, request, player_id):
        """
        POST /api/v1/players/<player_id>/stars/
        Body: { amount, game_type (optional), difficulty (optional), category (optional) }
        """
        serializer = StarAwardSerializer(data=request.data)
        if not serializer.is_valid():
            return validation_error_response(serializer.errors)

        data = serializer.validated_data
        try:
            result = StarService.award_stars(
                player_id,
                data['amount'],
                game_type=data.get('game_type'),
                difficulty=data.get('difficulty'),
                category=data.get('category'),
            )
            return Response({'success': True, **result})
        except ProgressionError as e:
            return error_response(e)
        except Exception:
            logger.exception(f"Star award error for player {player_id}")
            return internal_error_response()


class MilestoneHistoryView(APIView):
    """Tier milestones reached by a player, newest first."""
    authentication_classes = [SessionAuthentication, TokenAuthentication]
    permission_classes = []

    def get(self, request, player_id):
        """
        GET /api/v1/players/<player_id>/stars/milestones/
        """
        try:
            milestones = StarService.get_milestone_history(player_id)
            return Response({
                'success': True,
                'milestones': StarMilestoneSerializer(milestones, many=True).data,
            })
        except ProgressionError as e:
            return error_response(e)
        except Exception:
            logger.exception(f"Milestone history error for player {player_id}")
            return internal_error_response()


class PlayerRankView(APIView):
    """Star rank and percentile of one player."""
    authentication_classes = [SessionAuthentication, TokenAuthentication]
    permission_classes = []

    def get(self, request, player_id):
        """
        GET /api/v1/players/<player_id>/stars/rank/
        """
        try:
            return Response({'success': True, 'player_id': player_id, **get_player_rank(player_id)})
        except ProgressionError as e:
            return error_response(e)
        except Exception:
            logger.exception(f"Rank lookup error for player {player_id}")
            return internal_error_response()


class StarLeaderboardView(APIView):
    """Players ranked by star total."""
    authentication_classes = [SessionAuthentication, TokenAuthentication]
    permission_classes = []

    def get(self, request):
        """
        GET /api/v1/stars/leaderboard/
        Query params:
            - limit (default: LEADERBOARD_DEFAULT_LIMIT, max: LEADERBOARD_MAX_LIMIT)
        """
        limit = safe_int(
            request.query_params.get('limit'),
            default=getattr(settings, 'LEADERBOARD_DEFAULT_LIMIT', 100),
        )
        try:
            rows = compute_stars_leaderboard(limit)
            return Response({'success': True, 'count': len(rows), 'leaderboard': rows})
        except Exception:
            logger.exception("Star leaderboard error")
            return internal_error_response()
