"""
Admin API views: confirming physical prizes for pending rewards.
"""
import logging

from rest_framework.authentication import SessionAuthentication, TokenAuthentication
from rest_framework.permissions import IsAdminUser, IsAuthenticated
from rest_framework.response import Response
from rest_framework.views import APIView

from audit.services.audit_service import AuditActor
from progression.exceptions import ProgressionError
from progression.services.reward_service import RewardService
from .serializers import AdminAwardSerializer
from .utils import error_response, internal_error_response, validation_error_response

logger = logging.getLogger(__name__)


class AdminAwardBadgesView(APIView):
    """Award every pending reward of one difficulty to a player."""
    authentication_classes = [SessionAuthentication, TokenAuthentication]
    permission_classes = [IsAuthenticated, IsAdminUser]

    def post(self, request, player_id):
        """
        POST /api/v1/admin/players/<player_id>/badges/award/
        Body: { difficulty, player_label (optional) }
        """
        serializer = AdminAwardSerializer(data=request.data)
        if not serializer.is_valid():
            return validation_error_response(serializer.errors)

        try:
            result = RewardService.award_by_difficulty(
                player_id,
                serializer.validated_data['difficulty'],
                AuditActor.for_admin(request.user),
                target_label=serializer.validated_data.get('player_label') or None,
            )
            return Response({
                'success': True,
                'message': f"{result['rewards_awarded']} badge(s) awarded.",
                **result,
            })
        except ProgressionError as e:
            return error_response(e)
        except Exception:
            logger.exception(f"Admin award error for player {player_id}")
            return internal_error_response()
