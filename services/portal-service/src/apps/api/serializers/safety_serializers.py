# services/portal-service/src/apps/api/serializers/safety_serializers.py
"""
Safety Report Serializers

Includes the admin review parse step: the stored review blob has no fixed
shape, so every read goes through ``AdminReviewSerializer.parse``.
"""

import json
import logging
import re
import uuid
from typing import Any, Dict, Optional

from rest_framework import serializers

from apps.core.models import SafetyReport

logger = logging.getLogger(__name__)

_CAMEL_BOUNDARY = re.compile(r'(?<!^)(?=[A-Z])')


def _snake_case(key: str) -> str:
    return _CAMEL_BOUNDARY.sub('_', key).lower()


class AdminReviewSerializer(serializers.Serializer):
    """Reviewer, review timestamp and notes of an admin safety review."""

    reviewed_by = serializers.CharField(required=False, allow_blank=True, default='')
    reviewed_at = serializers.CharField(required=False, allow_blank=True, allow_null=True, default=None)
    notes = serializers.CharField(required=False, allow_blank=True, default='')

    @classmethod
    def parse(cls, value: Any) -> Optional[Dict[str, Any]]:
        """
        Parse a stored or submitted review into
        ``{'reviewed_by', 'reviewed_at', 'notes'}``.

        Accepts a mapping or its JSON text, with snake_case or camelCase
        keys. Anything else, or a mapping with none of the review keys,
        yields None.
        """
        if value is None or value == '':
            return None

        if isinstance(value, (str, bytes)):
            try:
                value = json.loads(value)
            except (TypeError, ValueError):
                logger.warning("Discarding admin review: not valid JSON")
                return None

        if not isinstance(value, dict):
            logger.warning(f"Discarding admin review of type {type(value).__name__}")
            return None

        normalised = {_snake_case(str(key)): item for key, item in value.items()}
        if not set(normalised) & set(cls._declared_fields):
            logger.warning("Discarding admin review without review fields")
            return None

        serializer = cls(data=normalised)
        if not serializer.is_valid():
            logger.warning(f"Discarding malformed admin review: {serializer.errors}")
            return None

        return dict(serializer.validated_data)


class SafetyReportSerializer(serializers.ModelSerializer):
    """
    Safety report read view.

    Context:
        reporter_names: report id to reporter display name
        aircraft_details: tail number, make and model for a single report
    """

    admin_review = serializers.SerializerMethodField()

    class Meta:
        model = SafetyReport
        fields = [
            'id',
            'report_date',
            'reporter_id',
            'reported_by',
            'category',
            'description',
            'severity',
            'status',
            'actions',
            'location',
            'aircraft_id',
            'admin_review',
            'created_at',
            'updated_at',
        ]
        read_only_fields = fields

    def get_admin_review(self, obj) -> Optional[Dict[str, Any]]:
        return AdminReviewSerializer.parse(obj.admin_review)

    def to_representation(self, instance):
        data = super().to_representation(instance)
        reporter_name = self.context.get('reporter_names', {}).get(str(instance.id))
        if reporter_name:
            data['reporter_name'] = reporter_name
        if self.context.get('aircraft_details'):
            data['aircraft_details'] = self.context['aircraft_details']
        return data


class SafetyReportInputSerializer(serializers.Serializer):
    """
    Safety report form payload (camelCase keys).

    ``aircraftId`` of ``'none'`` or blank means no aircraft.
    """

    reportDate = serializers.DateField(source='report_date')
    reporterName = serializers.CharField(
        source='reported_by', required=False, allow_blank=True, allow_null=True, max_length=255
    )
    category = serializers.CharField(max_length=100)
    description = serializers.CharField()
    severity = serializers.ChoiceField(choices=SafetyReport.Severity.choices)
    status = serializers.ChoiceField(
        choices=SafetyReport.Status.choices, required=False, default=SafetyReport.Status.SUBMITTED
    )
    actions = serializers.CharField(required=False, allow_blank=True, allow_null=True, default='')
    location = serializers.CharField(required=False, allow_blank=True, allow_null=True, default='', max_length=255)
    aircraftId = serializers.CharField(source='aircraft_id', required=False, allow_blank=True, allow_null=True)
    adminReview = serializers.JSONField(source='admin_review', required=False, allow_null=True)

    def to_internal_value(self, data):
        # The original form also posted the reporter as ``reported_by``
        if isinstance(data, dict) and 'reporterName' not in data and data.get('reported_by'):
            data = {**data, 'reporterName': data['reported_by']}
        return super().to_internal_value(data)

    def validate_aircraftId(self, value):
        if value in (None, '', 'none'):
            return None
        try:
            return uuid.UUID(str(value))
        except ValueError:
            raise serializers.ValidationError('Invalid aircraft id')

    def validate_adminReview(self, value):
        if value is None:
            return None
        review = AdminReviewSerializer.parse(value)
        if review is None:
            raise serializers.ValidationError('Malformed admin review')
        return review

    def validate(self, attrs):
        for field in ('actions', 'location'):
            if field in attrs and attrs[field] is None:
                attrs[field] = ''
        if not attrs.get('reported_by', True):
            attrs.pop('reported_by')
        return attrs
