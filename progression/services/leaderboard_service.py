"""
Leaderboard service - Star rankings.

Rank is 1 + the number of players with a strictly greater star total, so
tied players share a rank. Rows with equal totals are listed in record
order, which keeps repeated reads stable.
"""
from django.conf import settings
from django.db.models import F, Window
from django.db.models.functions import Rank

from progression.models import StarAccount
from progression.services.star_service import StarService, get_tier


def _clamp_limit(limit):
    default = getattr(settings, 'LEADERBOARD_DEFAULT_LIMIT', 100)
    maximum = getattr(settings, 'LEADERBOARD_MAX_LIMIT', 500)
    if limit is None:
        return default
    return max(1, min(int(limit), maximum))


def compute_stars_leaderboard(limit=None) -> list[dict]:
    """
    Compute the star leaderboard.

    Args:
        limit: Maximum rows to return (clamped to 1..LEADERBOARD_MAX_LIMIT)

    Returns:
        list[dict]: List of dicts with keys:
            - rank: int - 1-based competition rank
            - player_id: str
            - stars: int
            - tier: str
            - tier_icon: str
            - tier_color: str
    """
    accounts = StarAccount.objects.annotate(
        rank=Window(Rank(), order_by=F('total_stars').desc())
    ).order_by('-total_stars', 'id')[:_clamp_limit(limit)]

    rows = []
    for account in accounts:
        tier = get_tier(account.total_stars)
        rows.append({
            'rank': account.rank,
            'player_id': account.player_id,
            'stars': account.total_stars,
            'tier': tier.name,
            'tier_icon': tier.icon,
            'tier_color': tier.color,
        })
    return rows


def get_player_rank(player_id) -> dict:
    """
    Rank and percentile of one player.

    Returns:
        dict: Dictionary with keys rank, total_players, stars, tier (dict)
        and percentile (0-100, two decimals). A player without an account
        is counted as a 0-star row.
    """
    stars = StarService.get_total_stars(player_id)
    rank = StarAccount.objects.filter(total_stars__gt=stars).count() + 1
    total_players = StarAccount.objects.count()
    if not StarAccount.objects.filter(player_id=player_id).exists():
        total_players += 1

    return {
        'rank': rank,
        'total_players': total_players,
        'stars': stars,
        'tier': get_tier(stars).as_dict(),
        'percentile': round((total_players - rank) / total_players * 100, 2) if total_players > 0 else 0,
    }
