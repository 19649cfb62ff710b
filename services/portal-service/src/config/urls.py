# services/portal-service/src/config/urls.py
"""
Portal Service URL Configuration
"""

from django.conf import settings
from django.urls import path, include
from django.http import JsonResponse
from django.db import connection


def health_check(request):
    """Basic health check endpoint."""
    return JsonResponse({
        'status': 'healthy',
        'service': settings.SERVICE_NAME,
        'version': settings.SERVICE_VERSION,
    })


def readiness_check(request):
    """Readiness check with database connectivity and credentials."""
    try:
        with connection.cursor() as cursor:
            cursor.execute('SELECT 1')
        db_status = 'connected'
    except Exception as e:
        db_status = f'error: {str(e)}'

    credentials_status = 'configured' if settings.PORTAL_SERVICE_KEY else 'missing'
    is_ready = db_status == 'connected' and credentials_status == 'configured'

    return JsonResponse({
        'status': 'ready' if is_ready else 'not_ready',
        'service': settings.SERVICE_NAME,
        'checks': {
            'database': db_status,
            'service_credentials': credentials_status,
        }
    }, status=200 if is_ready else 503)


urlpatterns = [
    path('health/', health_check, name='health_check'),
    path('ready/', readiness_check, name='readiness_check'),
    path('functions/v1/', include('apps.api.urls', namespace='api')),
]
