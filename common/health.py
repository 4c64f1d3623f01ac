"""
Health Check Endpoints for the co-living admin

Provides endpoints for:
- Liveness checks (is the app running?)
- Readiness checks (can the app serve requests?)
- Deep health checks (database, cache, room inventory, member counts)
"""

import time
import logging
from django.http import JsonResponse
from django.db import connection, DatabaseError
from django.core.cache import cache
from django.core.exceptions import ImproperlyConfigured
from django.views.decorators.http import require_GET
from django.views.decorators.csrf import csrf_exempt

from rooms.inventory import get_room_inventory

logger = logging.getLogger(__name__)


def _check_database():
    with connection.cursor() as cursor:
        cursor.execute('SELECT 1')
        cursor.fetchone()


def _check_cache(cache_key):
    cache.set(cache_key, 'ok', 10)
    ok = cache.get(cache_key) == 'ok'
    cache.delete(cache_key)
    return ok


@csrf_exempt
@require_GET
def health_check(request):
    """
    Basic health check - returns 200 if app is running.
    Used by load balancers and container orchestration.
    """
    return JsonResponse({
        'status': 'healthy',
        'timestamp': time.time(),
    })


@csrf_exempt
@require_GET
def readiness_check(request):
    """
    Readiness check - verifies app can serve requests.
    Checks database and cache connectivity and that the room inventory loads.
    """
    checks = {
        'database': False,
        'cache': False,
        'room_inventory': False,
    }
    errors = []

    try:
        _check_database()
        checks['database'] = True
    except DatabaseError as e:
        errors.append(f'Database: {str(e)}')
        logger.error(f'Health check - Database error: {e}')

    try:
        checks['cache'] = _check_cache('health_check_test')
        if not checks['cache']:
            errors.append('Cache: Failed to read/write')
    except Exception as e:
        errors.append(f'Cache: {str(e)}')
        logger.error(f'Health check - Cache error: {e}')

    try:
        checks['room_inventory'] = get_room_inventory().room_count > 0
        if not checks['room_inventory']:
            errors.append('Room inventory: No rooms configured')
    except ImproperlyConfigured as e:
        errors.append(f'Room inventory: {str(e)}')
        logger.error(f'Health check - Room inventory error: {e}')

    all_healthy = all(checks.values())
    status_code = 200 if all_healthy else 503

    return JsonResponse({
        'status': 'ready' if all_healthy else 'not_ready',
        'timestamp': time.time(),
        'checks': checks,
        'errors': errors if errors else None,
    }, status=status_code)


@csrf_exempt
@require_GET
def deep_health_check(request):
    """
    Deep health check - comprehensive system status.
    Use sparingly as it may be resource intensive.
    """
    from members.models import Member
    from rent.models import PaymentRecord

    checks = {
        'database': {'status': False, 'latency_ms': None},
        'cache': {'status': False, 'latency_ms': None},
        'models': {'status': False, 'details': {}},
    }
    errors = []

    try:
        start = time.time()
        _check_database()
        checks['database'] = {'status': True, 'latency_ms': round((time.time() - start) * 1000, 2)}
    except DatabaseError as e:
        errors.append(f'Database: {str(e)}')
        logger.error(f'Deep health check - Database error: {e}')

    try:
        start = time.time()
        if _check_cache('deep_health_check_test'):
            checks['cache'] = {'status': True, 'latency_ms': round((time.time() - start) * 1000, 2)}
        else:
            errors.append('Cache: Read/write failed')
    except Exception as e:
        errors.append(f'Cache: {str(e)}')
        logger.error(f'Deep health check - Cache error: {e}')

    # Model checks (verify DB schema)
    try:
        checks['models'] = {'status': True, 'details': {
            'members': Member.objects.count(),
            'payment_records': PaymentRecord.objects.count(),
            'rooms': get_room_inventory().room_count,
        }}
    except DatabaseError as e:
        errors.append(f'Models: {str(e)}')
        logger.error(f'Deep health check - Model error: {e}')

    critical_checks = [checks['database']['status'], checks['cache']['status']]
    all_healthy = all(critical_checks)
    status_code = 200 if all_healthy else 503

    return JsonResponse({
        'status': 'healthy' if all_healthy else 'unhealthy',
        'timestamp': time.time(),
        'checks': checks,
        'errors': errors if errors else None,
        'version': '1.0.0',
    }, status=status_code)


def get_health_urls():
    """
    Returns URL patterns for health endpoints.
    Add to your urls.py:
        from common.health import get_health_urls
        urlpatterns += get_health_urls()
    """
    from django.urls import path

    return [
        path('health/', health_check, name='health_check'),
        path('health/ready/', readiness_check, name='readiness_check'),
        path('health/deep/', deep_health_check, name='deep_health_check'),
    ]
