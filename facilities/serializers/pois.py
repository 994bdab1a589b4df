"""
Point-of-interest validation.

``PointOfInterestFormSerializer`` checks the raw, string-typed form values
the way the modal does; ``PointOfInterestSerializer`` validates the
assembled request payload.
"""
import bleach
from rest_framework import serializers

from facilities.models import PointOfInterest

STATUSES = [s for s, _ in PointOfInterest.STATUS_CHOICES]

LATITUDE_ERROR = 'Latitude must be between -90 and 90'
LONGITUDE_ERROR = 'Longitude must be between -180 and 180'


def _required(message):
    return {'required': message, 'blank': message, 'null': message}


def _coordinate_text(v, low, high, message):
    text = (v or '').strip() if isinstance(v, str) else v
    if text in ('', None):
        return ''
    try:
        num = float(text)
    except (TypeError, ValueError):
        raise serializers.ValidationError(message)
    if not low <= num <= high:
        raise serializers.ValidationError(message)
    return str(text)


class PointOfInterestFormSerializer(serializers.Serializer):
    organizationId = serializers.CharField(error_messages=_required('Organization is required'))
    name = serializers.CharField(max_length=120, error_messages=_required('Name is required'))
    category = serializers.CharField(error_messages=_required('Category is required'))
    building = serializers.CharField(error_messages=_required('Building is required'))
    floor = serializers.CharField(error_messages=_required('Floor is required'))
    status = serializers.CharField(error_messages=_required('Status is required'))
    email = serializers.EmailField(required=False, allow_blank=True, error_messages={'invalid': 'Enter a valid email'})
    latitude = serializers.CharField(required=False, allow_blank=True, allow_null=True)
    longitude = serializers.CharField(required=False, allow_blank=True, allow_null=True)

    def validate_latitude(self, v):
        return _coordinate_text(v, -90, 90, LATITUDE_ERROR)

    def validate_longitude(self, v):
        return _coordinate_text(v, -180, 180, LONGITUDE_ERROR)


class ContactSerializer(serializers.Serializer):
    phone = serializers.CharField(required=False, allow_blank=True, max_length=32)
    email = serializers.EmailField(required=False, allow_blank=True, error_messages={'invalid': 'Enter a valid email'})
    operatingHours = serializers.CharField(required=False, allow_blank=True, max_length=120)


class AccessibilitySerializer(serializers.Serializer):
    wheelchairAccessible = serializers.BooleanField(default=False)
    hearingLoop = serializers.BooleanField(default=False)
    visualAidSupport = serializers.BooleanField(default=False)


class CoordinatesSerializer(serializers.Serializer):
    latitude = serializers.FloatField(required=False, min_value=-90, max_value=90, error_messages={
        'min_value': LATITUDE_ERROR, 'max_value': LATITUDE_ERROR, 'invalid': LATITUDE_ERROR})
    longitude = serializers.FloatField(required=False, min_value=-180, max_value=180, error_messages={
        'min_value': LONGITUDE_ERROR, 'max_value': LONGITUDE_ERROR, 'invalid': LONGITUDE_ERROR})


class PointOfInterestSerializer(serializers.Serializer):
    organizationId = serializers.UUIDField(required=False)
    name = serializers.CharField(max_length=120, error_messages=_required('Name is required'))
    category = serializers.CharField(max_length=64, error_messages=_required('Category is required'))
    categoryType = serializers.CharField(required=False, allow_blank=True, max_length=64)
    building = serializers.CharField(max_length=120, error_messages=_required('Building is required'))
    floor = serializers.CharField(max_length=32, error_messages=_required('Floor is required'))
    roomNumber = serializers.CharField(required=False, allow_blank=True, max_length=32)
    description = serializers.CharField(required=False, allow_blank=True)
    tags = serializers.ListField(child=serializers.CharField(max_length=40), required=False)
    amenities = serializers.ListField(child=serializers.CharField(max_length=60), required=False)
    contact = ContactSerializer(required=False)
    accessibility = AccessibilitySerializer(required=False)
    status = serializers.ChoiceField(choices=STATUSES, required=False)
    mapCoordinates = CoordinatesSerializer(required=False)
    isActive = serializers.BooleanField(required=False)

    def validate_name(self, v):
        return bleach.clean(v.strip(), strip=True)

    def validate_description(self, v):
        return bleach.clean((v or '').strip(), strip=True)


class PointOfInterestListQuerySerializer(serializers.Serializer):
    page = serializers.IntegerField(required=False, min_value=1, default=1)
    limit = serializers.IntegerField(required=False, min_value=1, max_value=100, default=20)
    search = serializers.CharField(required=False, allow_blank=True)
    status = serializers.ChoiceField(choices=STATUSES, required=False)
    category = serializers.CharField(required=False, allow_blank=True)
