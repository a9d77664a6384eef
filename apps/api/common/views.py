"""
Shared API views
"""
import logging

from django.http import JsonResponse
from django.db import connection, DatabaseError

logger = logging.getLogger(__name__)


def health_check(request):
    """
    Health check endpoint

    Returns:
        - 200: database reachable
        - 503: database connection failed
    """
    try:
        with connection.cursor() as cursor:
            cursor.execute("SELECT 1")

        return JsonResponse({
            "status": "healthy",
            "service": "trainhub-api",
            "database": "connected",
        }, status=200)
    except DatabaseError as e:
        logger.warning("[health_check] database unavailable: %s", e)
        return JsonResponse({
            "status": "unhealthy",
            "service": "trainhub-api",
            "database": "disconnected",
            "error": str(e),
        }, status=503)
