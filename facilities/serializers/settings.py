import bleach
from rest_framework import serializers

from facilities.models import UserPreference
from facilities.services.reference import is_known_timezone


class ProfileSerializer(serializers.Serializer):
    firstName = serializers.CharField(required=False, allow_blank=True, max_length=150)
    lastName = serializers.CharField(required=False, allow_blank=True, max_length=150)
    email = serializers.EmailField(required=False, allow_blank=True)
    phone = serializers.CharField(required=False, allow_blank=True, max_length=32)
    jobTitle = serializers.CharField(required=False, allow_blank=True, max_length=120)

    def validate(self, attrs):
        return {k: bleach.clean(v.strip(), strip=True) for k, v in attrs.items()}


class PreferencesSerializer(serializers.Serializer):
    language = serializers.CharField(required=False, max_length=16)
    theme = serializers.ChoiceField(choices=[t for t, _ in UserPreference.THEME_CHOICES], required=False)
    timezone = serializers.CharField(required=False, max_length=64)
    dateFormat = serializers.ChoiceField(choices=['MM/DD/YYYY', 'DD/MM/YYYY', 'YYYY-MM-DD'], required=False)
    defaultPage = serializers.ChoiceField(
        choices=['dashboard', 'organizations', 'map-manager', 'analytics', 'alerts', 'settings'], required=False)

    def validate_timezone(self, v):
        if not is_known_timezone(v):
            raise serializers.ValidationError('Unknown timezone')
        return v


class NotificationPreferencesSerializer(serializers.Serializer):
    email = serializers.BooleanField(required=False)
    sms = serializers.BooleanField(required=False)
    push = serializers.BooleanField(required=False)
    sound = serializers.BooleanField(required=False)
    alertDigest = serializers.BooleanField(required=False)
