"""
Service layer for player progression.

This package contains the badge cycle, reward ledger, star tier and
leaderboard logic used by the API views and management commands.
"""
