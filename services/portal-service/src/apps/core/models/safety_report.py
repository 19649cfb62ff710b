# services/portal-service/src/apps/core/models/safety_report.py
"""
Safety Report Model
"""

import uuid

from django.db import models


class SafetyReport(models.Model):
    """
    A safety occurrence reported by a pilot.

    ``admin_review`` is stored as submitted; its shape is only validated
    when it is read back.
    """

    class Severity(models.TextChoices):
        LOW = 'low', 'Low'
        MEDIUM = 'medium', 'Medium'
        HIGH = 'high', 'High'
        CRITICAL = 'critical', 'Critical'

    class Status(models.TextChoices):
        SUBMITTED = 'submitted', 'Submitted'
        UNDER_REVIEW = 'under-review', 'Under Review'
        RESOLVED = 'resolved', 'Resolved'
        CLOSED = 'closed', 'Closed'

    id = models.UUIDField(
        primary_key=True,
        default=uuid.uuid4,
        editable=False
    )
    report_date = models.DateField(db_index=True)
    reporter_id = models.UUIDField(blank=True, null=True, db_index=True)
    reported_by = models.CharField(max_length=255, blank=True, default='')

    category = models.CharField(max_length=100)
    description = models.TextField()
    severity = models.CharField(
        max_length=20,
        choices=Severity.choices,
        default=Severity.LOW
    )
    status = models.CharField(
        max_length=20,
        choices=Status.choices,
        default=Status.SUBMITTED
    )
    actions = models.TextField(blank=True, default='')
    location = models.CharField(max_length=255, blank=True, default='')
    aircraft_id = models.UUIDField(blank=True, null=True, db_index=True)
    admin_review = models.JSONField(blank=True, null=True)

    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        db_table = 'safety_reports'
        ordering = ['-report_date', '-created_at']

    def __str__(self):
        return f"{self.category} ({self.severity}) {self.report_date}"

    @property
    def is_open(self) -> bool:
        return self.status in (self.Status.SUBMITTED, self.Status.UNDER_REVIEW)
