# services/portal-service/src/apps/core/signals.py
"""
Django Signals for Portal Service

Connects every portal model to the realtime change stream.
"""

import logging
from django.db.models.signals import post_save, post_delete, pre_save

from shared.common.events import ChangeType

from .models import Pilot, Profile, Aircraft, Flight, SafetyReport, RouteTargetTime
from .events import publish_row_change, serialize_row

logger = logging.getLogger(__name__)

TRACKED_MODELS = (Pilot, Profile, Aircraft, Flight, SafetyReport, RouteTargetTime)


def capture_old_row(sender, instance, **kwargs):
    """Snapshot the stored row before an update."""
    instance._old_row = None
    if instance._state.adding:
        return
    try:
        previous = sender.objects.get(pk=instance.pk)
    except sender.DoesNotExist:
        return
    instance._old_row = serialize_row(previous)


def row_saved(sender, instance, created, **kwargs):
    change_type = ChangeType.INSERT if created else ChangeType.UPDATE
    publish_row_change(instance, change_type, old_row=getattr(instance, '_old_row', None))
    logger.debug(f"{change_type.value} {sender._meta.db_table} {instance.pk}")


def row_deleted(sender, instance, **kwargs):
    publish_row_change(instance, ChangeType.DELETE)
    logger.debug(f"DELETE {sender._meta.db_table} {instance.pk}")


for model in TRACKED_MODELS:
    pre_save.connect(capture_old_row, sender=model, dispatch_uid=f'{model.__name__}_capture_old_row')
    post_save.connect(row_saved, sender=model, dispatch_uid=f'{model.__name__}_row_saved')
    post_delete.connect(row_deleted, sender=model, dispatch_uid=f'{model.__name__}_row_deleted')
