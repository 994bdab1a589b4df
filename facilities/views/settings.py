"""
Per-user settings: profile, display preferences and notification channels.
"""
from __future__ import annotations

from django.conf import settings
from rest_framework.decorators import api_view, permission_classes
from rest_framework.permissions import IsAuthenticated

from ..models import UserPreference
from ..responses import envelope
from ..serializers.settings import NotificationPreferencesSerializer, PreferencesSerializer, ProfileSerializer
from ..services.audit import log_action

PROFILE_FIELDS = {
    'firstName': 'first_name',
    'lastName': 'last_name',
    'email': 'email',
    'phone': 'phone',
    'jobTitle': 'job_title',
}
PREFERENCE_FIELDS = {
    'language': 'language',
    'theme': 'theme',
    'timezone': 'timezone',
    'dateFormat': 'date_format',
    'defaultPage': 'default_page',
}
NOTIFICATION_FIELDS = {
    'email': 'notify_email',
    'sms': 'notify_sms',
    'push': 'notify_push',
    'sound': 'notify_sound',
    'alertDigest': 'alert_digest',
}


def _read(obj, fields: dict) -> dict:
    return {key: getattr(obj, attr) for key, attr in fields.items()}


def _write(obj, fields: dict, data: dict) -> list[str]:
    changed = []
    for key, attr in fields.items():
        if key in data:
            setattr(obj, attr, data[key])
            changed.append(attr)
    if changed:
        obj.save(update_fields=changed)
    return changed


def _preferences(user) -> UserPreference:
    prefs, _ = UserPreference.objects.get_or_create(user=user, defaults={'timezone': settings.DEFAULT_TIMEZONE})
    return prefs


def _profile(user) -> dict:
    data = _read(user, PROFILE_FIELDS)
    data.update({'id': user.id, 'username': user.username, 'role': user.role,
                 'organizationId': str(user.organization_id) if user.organization_id else None})
    return data


@api_view(['GET', 'PATCH'])
@permission_classes([IsAuthenticated])
def profile(request):
    user = request.user
    if request.method == 'PATCH':
        s = ProfileSerializer(data=request.data, partial=True)
        s.is_valid(raise_exception=True)
        changed = _write(user, PROFILE_FIELDS, s.validated_data)
        log_action(user=user, action='profile_updated', object_type='user', object_id=user.id,
                   detail={'fields': changed})
        return envelope({'profile': _profile(user)}, 'Profile updated successfully')
    return envelope({'profile': _profile(user)})


@api_view(['GET', 'PATCH'])
@permission_classes([IsAuthenticated])
def preferences(request):
    prefs = _preferences(request.user)
    if request.method == 'PATCH':
        s = PreferencesSerializer(data=request.data, partial=True)
        s.is_valid(raise_exception=True)
        _write(prefs, PREFERENCE_FIELDS, s.validated_data)
        return envelope({'preferences': _read(prefs, PREFERENCE_FIELDS)}, 'Preferences saved')
    return envelope({'preferences': _read(prefs, PREFERENCE_FIELDS)})


@api_view(['GET', 'PATCH'])
@permission_classes([IsAuthenticated])
def notifications(request):
    prefs = _preferences(request.user)
    if request.method == 'PATCH':
        s = NotificationPreferencesSerializer(data=request.data, partial=True)
        s.is_valid(raise_exception=True)
        _write(prefs, NOTIFICATION_FIELDS, s.validated_data)
        return envelope({'notifications': _read(prefs, NOTIFICATION_FIELDS)}, 'Notification settings saved')
    return envelope({'notifications': _read(prefs, NOTIFICATION_FIELDS)})
