import bleach
from rest_framework import serializers

from facilities.models import Alert, GeofenceZone


def _clean(v):
    return bleach.clean((v or '').strip(), strip=True)


class AlertCreateSerializer(serializers.Serializer):
    organizationId = serializers.UUIDField(required=False)
    name = serializers.CharField(max_length=120, error_messages={'required': 'Alert name is required', 'blank': 'Alert name is required'})
    description = serializers.CharField(required=False, allow_blank=True)
    alertType = serializers.ChoiceField(choices=[t for t, _ in Alert.TYPE_CHOICES], default='System Alert')
    priority = serializers.ChoiceField(choices=[s for s, _ in Alert.SEVERITY_CHOICES], default='Medium')
    email = serializers.EmailField(required=False, allow_blank=True)
    phone = serializers.CharField(required=False, allow_blank=True, max_length=32)
    department = serializers.CharField(required=False, allow_blank=True, max_length=120)
    location = serializers.CharField(required=False, allow_blank=True, max_length=120)
    floor = serializers.CharField(required=False, allow_blank=True, max_length=32)
    room = serializers.CharField(required=False, allow_blank=True, max_length=32)
    zoneId = serializers.IntegerField(required=False, allow_null=True)

    def validate_name(self, v):
        return _clean(v)

    def validate_description(self, v):
        return _clean(v)


class AlertListQuerySerializer(serializers.Serializer):
    page = serializers.IntegerField(required=False, min_value=1, default=1)
    limit = serializers.IntegerField(required=False, min_value=1, max_value=100, default=20)
    status = serializers.ChoiceField(choices=[s for s, _ in Alert.STATUS_CHOICES], required=False)
    severity = serializers.ChoiceField(choices=[s for s, _ in Alert.SEVERITY_CHOICES], required=False)
    type = serializers.ChoiceField(choices=[t for t, _ in Alert.TYPE_CHOICES], required=False)
    organizationId = serializers.UUIDField(required=False)


class NotificationSettingsSerializer(serializers.Serializer):
    email = serializers.BooleanField(required=False)
    sms = serializers.BooleanField(required=False)
    push = serializers.BooleanField(required=False)
    sound = serializers.BooleanField(required=False)


class GeofenceZoneSerializer(serializers.Serializer):
    organizationId = serializers.UUIDField(required=False)
    name = serializers.CharField(max_length=120, error_messages={'required': 'Zone name is required', 'blank': 'Zone name is required'})
    type = serializers.ChoiceField(choices=[t for t, _ in GeofenceZone.ALERT_TYPE_CHOICES], required=False)
    location = serializers.CharField(required=False, allow_blank=True, max_length=120)
    floor = serializers.CharField(required=False, allow_blank=True, max_length=32)
    description = serializers.CharField(required=False, allow_blank=True)
    alertDescription = serializers.CharField(required=False, allow_blank=True, max_length=255)
    isActive = serializers.BooleanField(required=False)
    notifications = NotificationSettingsSerializer(required=False)

    def validate_name(self, v):
        return _clean(v)

    def validate_description(self, v):
        return _clean(v)
