# services/portal-service/src/apps/core/apps.py
"""
Core Application Configuration
"""

from django.apps import AppConfig


class CoreConfig(AppConfig):
    default_auto_field = 'django.db.models.BigAutoField'
    name = 'apps.core'
    verbose_name = 'Pilot Portal'

    def ready(self):
        from apps.core import signals  # noqa
