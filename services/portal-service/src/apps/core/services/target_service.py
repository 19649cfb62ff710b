# services/portal-service/src/apps/core/services/target_service.py
"""
Route Target Time Service
"""

import uuid
import logging
from typing import Dict, Any

from django.db import transaction

from ..models import RouteTargetTime
from .exceptions import RouteTargetNotFoundError

logger = logging.getLogger(__name__)


class RouteTargetService:
    """Route target times used as route analytics baselines."""

    @classmethod
    def list_targets(cls):
        return RouteTargetTime.objects.all().order_by('route', '-updated_at')

    @classmethod
    def get_target(cls, target_id: uuid.UUID) -> RouteTargetTime:
        try:
            return RouteTargetTime.objects.get(id=target_id)
        except (RouteTargetTime.DoesNotExist, ValueError):
            raise RouteTargetNotFoundError(target_id)

    @classmethod
    @transaction.atomic
    def upsert_target(cls, target_data: Dict[str, Any]) -> RouteTargetTime:
        """Update the target named by ``id`` or create a new one."""
        target_id = target_data.pop('id', None)

        if target_id:
            target = cls.get_target(target_id)
            for field, value in target_data.items():
                setattr(target, field, value)
            target.save()
            logger.info(f"Route target {target.id} updated for {target.route}")
            return target

        target = RouteTargetTime.objects.create(**target_data)
        logger.info(f"Route target {target.id} created for {target.route}")
        return target

    @classmethod
    @transaction.atomic
    def delete_target(cls, target_id: uuid.UUID) -> None:
        target = cls.get_target(target_id)
        target.delete()
        logger.info(f"Route target {target_id} deleted")
