"""
Shared utilities for API views.
"""
from rest_framework import status
from rest_framework.response import Response


def safe_int(value, default=0):
    """Safely convert a query parameter to int, returning default on failure."""
    try:
        return int(value)
    except (TypeError, ValueError):
        return default


def error_response(exc):
    """Structured failure for a ProgressionError."""
    return Response(
        {'success': False, 'reason': exc.reason, 'message': exc.message},
        status=exc.status_code,
    )


def validation_error_response(errors):
    return Response(
        {'success': False, 'reason': 'validation_error', 'message': 'Invalid input.', 'errors': errors},
        status=status.HTTP_422_UNPROCESSABLE_ENTITY,
    )


def internal_error_response():
    return Response(
        {'success': False, 'reason': 'internal_error', 'message': 'Internal error.'},
        status=status.HTTP_500_INTERNAL_SERVER_ERROR,
    )
