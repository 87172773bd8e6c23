"""
Core views providing infrastructure endpoints.

Not part of the registration domain. Used by container health checks and
load balancers to decide whether this instance can take traffic.
"""

import logging

from django.core.cache import cache
from django.db import DatabaseError, connection
from django.http import JsonResponse

logger = logging.getLogger(__name__)


def _database_ok() -> bool:
    try:
        with connection.cursor() as cursor:
            cursor.execute("SELECT 1")
            cursor.fetchone()
    except DatabaseError:
        logger.exception("Health check: database unreachable")
        return False
    return True


def _cache_ok() -> bool:
    try:
        cache.set("health_check", "ok", timeout=1)
        return cache.get("health_check") == "ok"
    except Exception:
        # django-redis surfaces connection failures as its own exception types
        logger.warning("Health check: cache unreachable", exc_info=True)
        return False


def health_check(request):
    """
    Report database and cache connectivity.

    The entry store lives in the database, so a database failure makes the
    instance unhealthy (503). The cache is optional and only reported.

    Example Response:
        {
            "status": "healthy",
            "database": "connected",
            "cache": "connected"
        }
    """
    database_ok = _database_ok()
    cache_ok = _cache_ok()

    body = {
        "status": "healthy" if database_ok else "unhealthy",
        "database": "connected" if database_ok else "disconnected",
        "cache": "connected" if cache_ok else "disconnected",
    }
    return JsonResponse(body, status=200 if database_ok else 503)
