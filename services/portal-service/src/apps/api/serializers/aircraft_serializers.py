# services/portal-service/src/apps/api/serializers/aircraft_serializers.py
"""
Aircraft Serializers
"""

from rest_framework import serializers

from apps.core.models import Aircraft


class AircraftSerializer(serializers.ModelSerializer):
    """Aircraft read view."""

    class Meta:
        model = Aircraft
        fields = [
            'id',
            'tail_number',
            'make',
            'model',
            'year',
            'type',
            'category',
            'tach_time',
            'oil_change',
            'last_annual',
            'ownership',
            'image_url',
            'last_flight',
            'created_at',
            'updated_at',
        ]
        read_only_fields = fields


class AircraftWriteSerializer(serializers.ModelSerializer):
    """Aircraft create and update payload."""

    class Meta:
        model = Aircraft
        fields = [
            'tail_number',
            'make',
            'model',
            'year',
            'type',
            'category',
            'tach_time',
            'oil_change',
            'last_annual',
            'ownership',
            'image_url',
            'last_flight',
        ]

    def validate_tail_number(self, value):
        return value.strip().upper()
