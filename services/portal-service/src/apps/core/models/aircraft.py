# services/portal-service/src/apps/core/models/aircraft.py
"""
Aircraft Model
"""

import uuid
from decimal import Decimal

from django.db import models


class Aircraft(models.Model):
    """Fleet aircraft with the maintenance metadata shown on the portal."""

    id = models.UUIDField(
        primary_key=True,
        default=uuid.uuid4,
        editable=False
    )
    tail_number = models.CharField(max_length=20, unique=True)
    make = models.CharField(max_length=100)
    model = models.CharField(max_length=100)
    year = models.PositiveIntegerField(blank=True, null=True)
    type = models.CharField(max_length=50, blank=True, default='')
    category = models.CharField(max_length=50, blank=True, default='')

    # ==========================================================================
    # Maintenance
    # ==========================================================================
    tach_time = models.DecimalField(
        max_digits=10,
        decimal_places=1,
        default=Decimal('0.0')
    )
    oil_change = models.DateField(blank=True, null=True)
    last_annual = models.DateField(blank=True, null=True)

    ownership = models.CharField(max_length=100, blank=True, default='')
    image_url = models.URLField(max_length=500, blank=True, default='')
    last_flight = models.DateField(blank=True, null=True)

    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        db_table = 'aircraft'
        ordering = ['tail_number']

    def __str__(self):
        return f"{self.tail_number} ({self.make} {self.model})"
