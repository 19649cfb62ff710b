# services/portal-service/src/apps/core/models/flight.py
"""
Flight Model

One logged flight of one aircraft by one pilot.
"""

import uuid
from decimal import Decimal
from typing import List

from django.db import models


class Flight(models.Model):
    """
    Flight log entry.

    Tach readings must not run backwards. Hobbs time is recorded as entered
    and is not reconciled against the tach delta.
    """

    id = models.UUIDField(
        primary_key=True,
        default=uuid.uuid4,
        editable=False
    )
    aircraft_id = models.UUIDField(db_index=True)
    pilot_id = models.UUIDField(db_index=True)

    date = models.DateField(db_index=True)
    departure_time = models.TimeField(blank=True, null=True)

    # ==========================================================================
    # Times
    # ==========================================================================
    tach_start = models.DecimalField(max_digits=10, decimal_places=1)
    tach_end = models.DecimalField(max_digits=10, decimal_places=1)
    hobbs_time = models.DecimalField(
        max_digits=6,
        decimal_places=1,
        default=Decimal('0.0')
    )

    # ==========================================================================
    # Consumables and Load
    # ==========================================================================
    fuel_added = models.DecimalField(max_digits=8, decimal_places=1, blank=True, null=True)
    oil_added = models.DecimalField(max_digits=6, decimal_places=1, blank=True, null=True)
    passenger_count = models.PositiveIntegerField(blank=True, null=True)

    route = models.CharField(max_length=255, blank=True, default='')
    category = models.CharField(max_length=50, blank=True, default='')
    squawks = models.TextField(blank=True, default='')
    notes = models.TextField(blank=True, default='')

    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        db_table = 'flights'
        ordering = ['-date', '-created_at']
        indexes = [
            models.Index(fields=['aircraft_id', 'date']),
            models.Index(fields=['pilot_id', 'date']),
        ]

    def __str__(self):
        return f"Flight {self.date} ({self.route or 'no route'})"

    def validate_times(self) -> List[str]:
        """Validate tach readings, return list of errors"""
        errors = []

        if self.tach_start is not None and self.tach_end is not None:
            if self.tach_end < self.tach_start:
                errors.append("Tach end must be greater than or equal to tach start")

        if self.hobbs_time is not None and self.hobbs_time < 0:
            errors.append("Hobbs time cannot be negative")

        return errors
