from django.urls import path

from .admin_views import AdminAwardBadgesView
from .star_views import MilestoneHistoryView, PlayerRankView, PlayerStarsView, StarLeaderboardView
from .views import (
    BadgeEarnedView, BadgeSummaryView, RewardListView, RewardRequestAllView,
    RewardRequestView, UnclaimedRewardListView,
)

app_name = 'api'

urlpatterns = [
    # Badges and rewards
    path('players/<str:player_id>/badges/summary/', BadgeSummaryView.as_view(), name='badge-summary'),
    path('players/<str:player_id>/badges/earned/', BadgeEarnedView.as_view(), name='badge-earned'),
    path('players/<str:player_id>/rewards/', RewardListView.as_view(), name='reward-list'),
    path('players/<str:player_id>/rewards/unclaimed/', UnclaimedRewardListView.as_view(), name='reward-unclaimed'),
    path('players/<str:player_id>/rewards/request/', RewardRequestView.as_view(), name='reward-request'),
    path('players/<str:player_id>/rewards/request-all/', RewardRequestAllView.as_view(), name='reward-request-all'),

    # Stars
    path('players/<str:player_id>/stars/', PlayerStarsView.as_view(), name='player-stars'),
    path('players/<str:player_id>/stars/milestones/', MilestoneHistoryView.as_view(), name='star-milestones'),
    path('players/<str:player_id>/stars/rank/', PlayerRankView.as_view(), name='star-rank'),
    path('stars/leaderboard/', StarLeaderboardView.as_view(), name='star-leaderboard'),

    # Admin
    path('admin/players/<str:player_id>/badges/award/', AdminAwardBadgesView.as_view(), name='admin-award-badges'),
]
