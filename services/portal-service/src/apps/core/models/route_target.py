# services/portal-service/src/apps/core/models/route_target.py
"""
Route Target Time Model
"""

import uuid

from django.core.validators import MinValueValidator, MaxValueValidator
from django.db import models


class RouteTargetTime(models.Model):
    """
    Expected hobbs duration for a route.

    Aircraft, pilot, month and year are optional qualifiers; an empty
    qualifier matches anything.
    """

    id = models.UUIDField(
        primary_key=True,
        default=uuid.uuid4,
        editable=False
    )
    route = models.CharField(max_length=255, db_index=True)
    target_time = models.DecimalField(max_digits=6, decimal_places=2)
    aircraft_id = models.UUIDField(blank=True, null=True)
    pilot_id = models.UUIDField(blank=True, null=True)
    month = models.PositiveSmallIntegerField(
        blank=True,
        null=True,
        validators=[MinValueValidator(1), MaxValueValidator(12)]
    )
    year = models.PositiveIntegerField(blank=True, null=True)

    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        db_table = 'route_target_times'
        ordering = ['route', '-updated_at']

    def __str__(self):
        return f"{self.route}: {self.target_time}"
