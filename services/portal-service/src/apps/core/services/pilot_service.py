# services/portal-service/src/apps/core/services/pilot_service.py
"""
Pilot Service

Pilot records, the admin flag lookup and admin access repair.
"""

import uuid
import logging
from typing import Dict, Any, Iterable, Optional, Tuple

from django.db import transaction

from ..models import Pilot, Profile
from .exceptions import PilotNotFoundError, PortalValidationError

logger = logging.getLogger(__name__)


def is_admin_identity(user_id: str = None, email: str = None) -> bool:
    """Authoritative admin check for an authenticated identity."""
    pilot = Pilot.for_identity(user_id=user_id, email=email)
    return bool(pilot and pilot.is_admin)


class PilotService:
    """
    Service class for pilot operations.
    """

    @classmethod
    def list_pilots(cls, include_hidden: bool = True):
        queryset = Pilot.objects.all().order_by('name')
        if not include_hidden:
            queryset = queryset.filter(is_hidden=False)
        return queryset

    @classmethod
    def get_pilot(cls, pilot_id: uuid.UUID) -> Pilot:
        try:
            return Pilot.objects.get(id=pilot_id)
        except (Pilot.DoesNotExist, ValueError):
            raise PilotNotFoundError(pilot_id)

    @classmethod
    def names_for(cls, pilot_ids: Iterable[Any]) -> Dict[str, str]:
        """Map pilot id to pilot name for the given ids."""
        ids = {str(pilot_id) for pilot_id in pilot_ids if pilot_id}
        if not ids:
            return {}
        return {
            str(pilot_id): name
            for pilot_id, name in Pilot.objects.filter(id__in=ids).values_list('id', 'name')
        }

    @classmethod
    @transaction.atomic
    def create_pilot(cls, pilot_data: Dict[str, Any]) -> Pilot:
        if not (pilot_data.get('name') or '').strip():
            raise PortalValidationError('Pilot name is required', field='name')

        pilot = Pilot.objects.create(**pilot_data)
        logger.info(f"Pilot {pilot.id} created")
        return pilot

    @classmethod
    @transaction.atomic
    def update_pilot(cls, pilot_id: uuid.UUID, pilot_data: Dict[str, Any]) -> Pilot:
        pilot = cls.get_pilot(pilot_id)

        if 'name' in pilot_data and not (pilot_data['name'] or '').strip():
            raise PortalValidationError('Pilot name cannot be empty', field='name')

        for field, value in pilot_data.items():
            setattr(pilot, field, value)
        pilot.save()

        logger.info(f"Pilot {pilot.id} updated: {', '.join(sorted(pilot_data))}")
        return pilot

    @classmethod
    @transaction.atomic
    def find_or_create_by_name(cls, name: str) -> Optional[Pilot]:
        """Reporter lookup for free-text reporter names."""
        name = (name or '').strip()
        if not name or name == 'Anonymous':
            return None

        pilot = Pilot.objects.filter(name=name).order_by('created_at').first()
        if pilot is None:
            pilot = Pilot.objects.create(name=name)
            logger.info(f"Pilot {pilot.id} created for reporter '{name}'")
        return pilot

    @classmethod
    @transaction.atomic
    def fix_admin_access(cls, email: str, user_id: str, name: str = None) -> Tuple[Pilot, bool]:
        """
        Ensure the pilot linked to ``user_id``/``email`` exists, is an admin
        and is linked from the user's profile.

        Returns:
            (pilot, created)
        """
        if not email or not user_id:
            raise PortalValidationError('Email and user_id are required')

        logger.info(f"Fixing admin access for email: {email}, user_id: {user_id}")

        pilot = Pilot.for_identity(user_id=user_id, email=email)
        created = pilot is None

        if created:
            pilot = Pilot.objects.create(
                name=name or email.split('@')[0],
                email=email,
                user_id=user_id,
                is_admin=True,
                is_hidden=False,
            )
        else:
            pilot.is_admin = True
            pilot.user_id = user_id
            pilot.email = email
            pilot.save()

        profile, _ = Profile.objects.get_or_create(user_id=user_id)
        if profile.pilot_id != pilot.id:
            profile.pilot = pilot
            profile.save()

        logger.info(f"Admin access {'granted' if created else 'confirmed'} for pilot {pilot.id}")
        return pilot, created
