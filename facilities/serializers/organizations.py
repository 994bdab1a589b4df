import bleach
from rest_framework import serializers

from facilities.models import Organization, VenueTemplate
from facilities.services.reference import ORGANIZATION_TYPES, is_known_country, is_known_timezone


def _clean(v: str) -> str:
    return bleach.clean((v or '').strip(), strip=True)


class OrganizationSerializer(serializers.Serializer):
    organizationType = serializers.ChoiceField(choices=ORGANIZATION_TYPES, required=False)
    name = serializers.CharField(max_length=120, error_messages={
        'required': 'Organization name is required',
        'blank': 'Organization name is required',
        'max_length': 'Organization name cannot exceed 120 characters',
    })
    email = serializers.EmailField(required=False, allow_blank=True,
                                   error_messages={'invalid': 'Enter a valid email'})
    phone = serializers.CharField(required=False, allow_blank=True, max_length=32)
    country = serializers.CharField(required=False, allow_blank=True, max_length=80)
    city = serializers.CharField(required=False, allow_blank=True, max_length=120)
    timezone = serializers.CharField(required=False, allow_blank=True, max_length=64)
    address = serializers.CharField(required=False, allow_blank=True, max_length=255)
    venueTemplate = serializers.UUIDField(required=False, allow_null=True)
    isActive = serializers.BooleanField(required=False, allow_null=True)

    def validate_name(self, v):
        v = _clean(v)
        if len(v) < 2:
            raise serializers.ValidationError('Organization name must be at least 2 characters')
        return v

    def validate_phone(self, v):
        return _clean(v)

    def validate_address(self, v):
        return _clean(v)

    def validate_city(self, v):
        return _clean(v)

    def validate_country(self, v):
        v = (v or '').strip()
        if v and not is_known_country(v):
            raise serializers.ValidationError('Unknown country')
        return v

    def validate_timezone(self, v):
        v = (v or '').strip()
        if v and not is_known_timezone(v):
            raise serializers.ValidationError('Unknown timezone')
        return v

    def validate_venueTemplate(self, v):
        if v is None:
            return None
        template = VenueTemplate.objects.filter(id=v, is_active=True).first()
        if template is None:
            raise serializers.ValidationError('Venue template not found')
        return template


class OrganizationListQuerySerializer(serializers.Serializer):
    page = serializers.IntegerField(required=False, min_value=1, default=1)
    limit = serializers.IntegerField(required=False, min_value=1, max_value=100, default=10)
    search = serializers.CharField(required=False, allow_blank=True)
    organizationType = serializers.ChoiceField(choices=[t for t, _ in Organization.TYPE_CHOICES], required=False)
    isActive = serializers.BooleanField(required=False, allow_null=True, default=None)


class PageQuerySerializer(serializers.Serializer):
    page = serializers.IntegerField(required=False, min_value=1, default=1)
    limit = serializers.IntegerField(required=False, min_value=1, max_value=100, default=20)
