# services/portal-service/src/apps/api/serializers/flight_serializers.py
"""
Flight Serializers

Read and write serializers for flight log entries.
"""

from rest_framework import serializers

from apps.core.models import Flight

OPTIONAL_TEXT_FIELDS = ('route', 'category', 'squawks', 'notes')


class FlightSerializer(serializers.ModelSerializer):
    """
    Flight read view.

    ``pilot_name`` comes from the ``pilot_names`` context mapping
    (pilot id to name) and is left out when the pilot is unknown.
    """

    class Meta:
        model = Flight
        fields = [
            'id',
            'aircraft_id',
            'pilot_id',
            'date',
            'departure_time',
            'tach_start',
            'tach_end',
            'hobbs_time',
            'fuel_added',
            'oil_added',
            'passenger_count',
            'route',
            'category',
            'squawks',
            'notes',
            'created_at',
            'updated_at',
        ]
        read_only_fields = fields

    def to_representation(self, instance):
        data = super().to_representation(instance)
        pilot_name = self.context.get('pilot_names', {}).get(str(instance.pilot_id))
        if pilot_name:
            data['pilot_name'] = pilot_name
        return data


class FlightWriteSerializer(serializers.ModelSerializer):
    """Flight create and update payload."""

    route = serializers.CharField(required=False, allow_blank=True, allow_null=True, max_length=255)
    category = serializers.CharField(required=False, allow_blank=True, allow_null=True, max_length=50)
    squawks = serializers.CharField(required=False, allow_blank=True, allow_null=True)
    notes = serializers.CharField(required=False, allow_blank=True, allow_null=True)
    hobbs_time = serializers.DecimalField(
        max_digits=6, decimal_places=1, required=False, allow_null=True
    )

    class Meta:
        model = Flight
        fields = [
            'aircraft_id',
            'pilot_id',
            'date',
            'departure_time',
            'tach_start',
            'tach_end',
            'hobbs_time',
            'fuel_added',
            'oil_added',
            'passenger_count',
            'route',
            'category',
            'squawks',
            'notes',
        ]
        extra_kwargs = {
            'departure_time': {'required': False, 'allow_null': True},
            'fuel_added': {'required': False, 'allow_null': True},
            'oil_added': {'required': False, 'allow_null': True},
            'passenger_count': {'required': False, 'allow_null': True},
        }

    def validate(self, attrs):
        for field in OPTIONAL_TEXT_FIELDS:
            if field in attrs and attrs[field] is None:
                attrs[field] = ''
        if 'hobbs_time' in attrs and attrs['hobbs_time'] is None:
            attrs['hobbs_time'] = 0

        tach_start = attrs.get('tach_start')
        tach_end = attrs.get('tach_end')
        if tach_start is not None and tach_end is not None and tach_end < tach_start:
            raise serializers.ValidationError({
                'tach_end': 'Tach end must be greater than or equal to tach start'
            })

        return attrs
