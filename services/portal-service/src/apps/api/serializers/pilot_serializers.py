# services/portal-service/src/apps/api/serializers/pilot_serializers.py
"""
Pilot Serializers
"""

from rest_framework import serializers

from apps.core.models import Pilot


class PilotSerializer(serializers.ModelSerializer):
    """Pilot read view."""

    class Meta:
        model = Pilot
        fields = [
            'id',
            'user_id',
            'name',
            'email',
            'is_admin',
            'is_hidden',
            'created_at',
            'updated_at',
        ]
        read_only_fields = fields


class PilotWriteSerializer(serializers.ModelSerializer):
    """Pilot create and update payload."""

    email = serializers.EmailField(required=False, allow_null=True, allow_blank=True)

    class Meta:
        model = Pilot
        fields = [
            'user_id',
            'name',
            'email',
            'is_admin',
            'is_hidden',
        ]

    def validate_email(self, value):
        return value or None
