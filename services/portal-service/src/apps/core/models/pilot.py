# services/portal-service/src/apps/core/models/pilot.py
"""
Pilot and Profile Models
"""

import uuid

from django.db import models
from django.db.models import Q


class Pilot(models.Model):
    """
    A pilot known to the portal.

    Pilots are hidden rather than deleted so that historical flights and
    safety reports keep a resolvable name.
    """

    id = models.UUIDField(
        primary_key=True,
        default=uuid.uuid4,
        editable=False
    )
    user_id = models.CharField(
        max_length=64,
        blank=True,
        null=True,
        db_index=True,
        help_text="Linked authentication user"
    )
    name = models.CharField(max_length=255)
    email = models.EmailField(blank=True, null=True, db_index=True)
    is_admin = models.BooleanField(default=False)
    is_hidden = models.BooleanField(default=False)

    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        db_table = 'pilots'
        ordering = ['name']

    def __str__(self):
        return self.name

    @classmethod
    def for_identity(cls, user_id=None, email=None):
        """Pilot linked to an auth user, matched by user id or email."""
        condition = Q()
        if user_id:
            condition |= Q(user_id=user_id)
        if email:
            condition |= Q(email__iexact=email)
        if not condition:
            return None
        return cls.objects.filter(condition).order_by('-is_admin', 'created_at').first()


class Profile(models.Model):
    """Links an authentication user to its pilot row."""

    id = models.UUIDField(
        primary_key=True,
        default=uuid.uuid4,
        editable=False
    )
    user_id = models.CharField(max_length=64, unique=True)
    pilot = models.ForeignKey(
        Pilot,
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name='profiles'
    )

    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        db_table = 'profiles'

    def __str__(self):
        return f"Profile({self.user_id})"
