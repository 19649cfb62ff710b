# services/portal-service/src/apps/api/serializers/target_serializers.py
"""
Route Target Time Serializers
"""

from rest_framework import serializers

from apps.core.models import RouteTargetTime


class RouteTargetTimeSerializer(serializers.ModelSerializer):
    """Route target read view."""

    class Meta:
        model = RouteTargetTime
        fields = [
            'id',
            'route',
            'target_time',
            'aircraft_id',
            'pilot_id',
            'month',
            'year',
            'created_at',
            'updated_at',
        ]
        read_only_fields = fields


class RouteTargetTimeWriteSerializer(serializers.ModelSerializer):
    """Upsert payload; ``id`` selects the target to update."""

    id = serializers.UUIDField(required=False, allow_null=True)

    class Meta:
        model = RouteTargetTime
        fields = [
            'id',
            'route',
            'target_time',
            'aircraft_id',
            'pilot_id',
            'month',
            'year',
        ]
        extra_kwargs = {
            'aircraft_id': {'required': False, 'allow_null': True},
            'pilot_id': {'required': False, 'allow_null': True},
            'month': {'required': False, 'allow_null': True},
            'year': {'required': False, 'allow_null': True},
        }

    def validate_route(self, value):
        value = value.strip()
        if not value:
            raise serializers.ValidationError('Route is required')
        return value

    def validate_target_time(self, value):
        if value <= 0:
            raise serializers.ValidationError('Target time must be positive')
        return value
