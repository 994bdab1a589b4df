import os

import bleach
from django.conf import settings
from rest_framework import serializers
from rest_framework.utils import html

from facilities.models import FloorPlan
from facilities.services.payloads import split_csv
from .pois import LATITUDE_ERROR, LONGITUDE_ERROR, _coordinate_text

STATUSES = [s for s, _ in FloorPlan.STATUS_CHOICES]
SORT_FIELDS = {'createdAt': 'created_at', 'updatedAt': 'updated_at', 'title': 'title', 'floorNumber': 'floor_number'}
UNSUPPORTED_FILE = 'Unsupported file format. Supported: PDF, PNG, JPG, SVG, DWG, CAD'


class TagsField(serializers.Field):
    """Tags given as a list, a comma separated string, or repeated form fields."""
    max_tag_length = 40

    def get_value(self, dictionary):
        if html.is_html_input(dictionary):
            if self.field_name not in dictionary:
                return serializers.empty
            return dictionary.getlist(self.field_name)
        return dictionary.get(self.field_name, serializers.empty)

    def to_internal_value(self, data):
        items = data if isinstance(data, (list, tuple)) else [data]
        tags: list[str] = []
        for item in items:
            if not isinstance(item, str):
                raise serializers.ValidationError('Tags must be text')
            tags.extend(split_csv(item))
        for tag in tags:
            if len(tag) > self.max_tag_length:
                raise serializers.ValidationError(f'Tag cannot exceed {self.max_tag_length} characters')
        return list(dict.fromkeys(tags))

    def to_representation(self, value):
        return list(value or [])


def validate_upload(f):
    """Accept by MIME type or by file extension; reject files over the size limit."""
    content_type = (getattr(f, 'content_type', '') or '').lower()
    ext = os.path.splitext(f.name or '')[1].lower()
    if content_type not in settings.FLOOR_PLAN_ALLOWED_TYPES and ext not in settings.FLOOR_PLAN_ALLOWED_EXTENSIONS:
        raise serializers.ValidationError(UNSUPPORTED_FILE)
    if f.size > settings.FLOOR_PLAN_MAX_MB * 1024 * 1024:
        raise serializers.ValidationError(f'File size must be less than {settings.FLOOR_PLAN_MAX_MB}MB')
    return f


class _FloorPlanFieldsMixin(serializers.Serializer):
    floorLabel = serializers.CharField(max_length=32, error_messages={'required': 'Floor is required', 'blank': 'Floor is required'})
    mapName = serializers.CharField(error_messages={'required': 'Map name is required', 'blank': 'Map name is required'})
    mapScale = serializers.RegexField(r'^1:\d+$', error_messages={
        'required': 'Map scale is required',
        'blank': 'Map scale is required',
        'invalid': 'Scale must be in format 1:XXX (e.g., 1:100)',
    })
    description = serializers.CharField(required=False, allow_blank=True, max_length=500,
                                        error_messages={'max_length': 'Description cannot exceed 500 characters'})
    latitude = serializers.CharField(required=False, allow_blank=True, allow_null=True)
    longitude = serializers.CharField(required=False, allow_blank=True, allow_null=True)
    tags = TagsField(required=False)

    def validate_mapName(self, v):
        v = bleach.clean(v.strip(), strip=True)
        if len(v) < 2:
            raise serializers.ValidationError('Map name must be at least 2 characters')
        if len(v) > 120:
            raise serializers.ValidationError('Map name cannot exceed 120 characters')
        return v

    def validate_description(self, v):
        return bleach.clean((v or '').strip(), strip=True)

    def validate_latitude(self, v):
        return _coordinate_text(v, -90, 90, LATITUDE_ERROR)

    def validate_longitude(self, v):
        return _coordinate_text(v, -180, 180, LONGITUDE_ERROR)


class FloorPlanCreateSerializer(_FloorPlanFieldsMixin):
    organizationId = serializers.UUIDField(error_messages={'required': 'Organization is required', 'null': 'Organization is required'})
    buildingId = serializers.IntegerField(error_messages={'required': 'Building is required', 'null': 'Building is required'})
    file = serializers.FileField(error_messages={'required': 'Please select a file to upload', 'empty': 'Please select a file to upload'})
    status = serializers.ChoiceField(choices=[FloorPlan.STATUS_DRAFT, FloorPlan.STATUS_PUBLISHED], required=False)
    isTemplate = serializers.BooleanField(required=False, default=False)
    versionNotes = serializers.CharField(required=False, allow_blank=True, allow_null=True, max_length=255)

    def validate_file(self, f):
        return validate_upload(f)


class FloorPlanUpdateSerializer(_FloorPlanFieldsMixin):
    buildingId = serializers.IntegerField(required=False)
    file = serializers.FileField(required=False)
    isTemplate = serializers.BooleanField(required=False)
    versionNotes = serializers.CharField(required=False, allow_blank=True, allow_null=True, max_length=255)

    def validate_file(self, f):
        return validate_upload(f)


class FloorPlanStatusSerializer(serializers.Serializer):
    status = serializers.ChoiceField(choices=STATUSES)


class FloorPlanListQuerySerializer(serializers.Serializer):
    page = serializers.IntegerField(required=False, min_value=1, default=1)
    limit = serializers.IntegerField(required=False, min_value=1, max_value=100, default=12)
    search = serializers.CharField(required=False, allow_blank=True)
    building = serializers.CharField(required=False, allow_blank=True)
    status = serializers.ChoiceField(choices=STATUSES, required=False)
    tag = serializers.CharField(required=False, allow_blank=True)
    floorLabel = serializers.CharField(required=False, allow_blank=True)
    sortBy = serializers.ChoiceField(choices=list(SORT_FIELDS), required=False, default='createdAt')
    sortOrder = serializers.ChoiceField(choices=['asc', 'desc'], required=False, default='desc')
    organizationId = serializers.UUIDField(required=False)
