from __future__ import annotations

from django.db.models import Count, F, Q, Sum
from django.utils import timezone
from rest_framework.exceptions import NotFound, PermissionDenied, ValidationError

from facilities.models import Alert, GeofenceZone, Organization
from facilities.permissions import can_write, scoped_organizations
from .audit import log_action

ALERT_TRANSITIONS = {
    Alert.STATUS_ACTIVE: {Alert.STATUS_ACKNOWLEDGED, Alert.STATUS_RESOLVED},
    Alert.STATUS_ACKNOWLEDGED: {Alert.STATUS_RESOLVED},
    Alert.STATUS_RESOLVED: set(),
}


def format_alert(alert: Alert) -> dict:
    return {
        'id': str(alert.id),
        'title': alert.title,
        'description': alert.description,
        'severity': alert.severity,
        'status': alert.status,
        'type': alert.alert_type,
        'location': alert.location,
        'floor': alert.floor,
        'room': alert.room,
        'department': alert.department,
        'zoneId': alert.zone_id,
        'timestamp': alert.created_at.isoformat(),
        'acknowledgedAt': alert.acknowledged_at.isoformat() if alert.acknowledged_at else None,
        'resolvedAt': alert.resolved_at.isoformat() if alert.resolved_at else None,
    }


def format_zone(zone: GeofenceZone) -> dict:
    return {
        'id': str(zone.id),
        'name': zone.name,
        'location': zone.location,
        'description': zone.description,
        'floor': zone.floor or None,
        'alertType': zone.alert_type,
        'alertDescription': zone.alert_description,
        'isActive': zone.is_active,
        'triggerCount': zone.trigger_count,
        'notifications': {
            'email': zone.notify_email,
            'sms': zone.notify_sms,
            'push': zone.notify_push,
            'sound': zone.notify_sound,
        },
    }


def list_alerts(organization: Organization, *, status='', severity='', alert_type=''):
    qs = Alert.objects.filter(organization=organization)
    if status:
        qs = qs.filter(status=status)
    if severity:
        qs = qs.filter(severity=severity)
    if alert_type:
        qs = qs.filter(alert_type=alert_type)
    return qs.order_by('-created_at', '-id')


def create_alert(user, organization: Organization, data: dict) -> Alert:
    if not can_write(user):
        raise PermissionDenied('You do not have permission to create alerts')
    zone = None
    if data.get('zoneId'):
        zone = GeofenceZone.objects.filter(id=data['zoneId'], organization=organization).first()
        if zone is None:
            raise ValidationError({'zoneId': ['Geofence zone not found']})
    alert = Alert.objects.create(
        organization=organization,
        title=data['name'],
        description=data.get('description', ''),
        alert_type=data.get('alertType', 'System Alert'),
        severity=data.get('priority', 'Medium'),
        contact_email=data.get('email', ''),
        contact_phone=data.get('phone', ''),
        department=data.get('department', ''),
        location=data.get('location', ''),
        floor=data.get('floor', ''),
        room=data.get('room', ''),
        zone=zone,
    )
    if zone is not None:
        GeofenceZone.objects.filter(id=zone.id).update(trigger_count=F('trigger_count') + 1)
    log_action(user=user, action='alert_created', organization=organization, object_type='alert',
               object_id=alert.id, detail={'title': alert.title, 'severity': alert.severity})
    return alert


def get_alert(user, alert_id) -> Alert:
    alert = Alert.objects.filter(id=alert_id, organization__in=scoped_organizations(user)).first()
    if alert is None:
        raise NotFound('Alert not found')
    return alert


def transition_alert(user, alert: Alert, new_status: str) -> Alert:
    if not can_write(user):
        raise PermissionDenied('You do not have permission to update alerts')
    if new_status not in ALERT_TRANSITIONS[alert.status]:
        raise ValidationError({'status': [f'Cannot change alert from {alert.status} to {new_status}']})
    now = timezone.now()
    alert.status = new_status
    fields = ['status']
    if new_status == Alert.STATUS_ACKNOWLEDGED:
        alert.acknowledged_at = now
        alert.acknowledged_by = user
        fields += ['acknowledged_at', 'acknowledged_by']
    else:
        alert.resolved_at = now
        fields.append('resolved_at')
    alert.save(update_fields=fields)
    log_action(user=user, action=f'alert_{new_status.lower()}', organization=alert.organization,
               object_type='alert', object_id=alert.id)
    return alert


def alert_stats(organization: Organization) -> dict:
    agg = Alert.objects.filter(organization=organization).aggregate(
        active=Count('id', filter=Q(status=Alert.STATUS_ACTIVE)),
        critical=Count('id', filter=Q(status=Alert.STATUS_ACTIVE, severity=Alert.SEVERITY_HIGH)),
        acknowledged=Count('id', filter=Q(status=Alert.STATUS_ACKNOWLEDGED)),
        resolved=Count('id', filter=Q(status=Alert.STATUS_RESOLVED)),
    )
    zones = GeofenceZone.objects.filter(organization=organization).aggregate(
        active=Count('id', filter=Q(is_active=True)),
        triggers=Sum('trigger_count'),
    )
    return {
        'stats': {
            'activeAlerts': agg['active'],
            'critical': agg['critical'],
            'geofenceZones': zones['active'],
            'zoneTriggers': zones['triggers'] or 0,
        },
        'overview': {
            'active': agg['active'],
            'acknowledged': agg['acknowledged'],
            'resolved': agg['resolved'],
        },
    }


ZONE_FIELDS = {
    'name': 'name', 'type': 'alert_type', 'location': 'location', 'floor': 'floor',
    'description': 'description', 'alertDescription': 'alert_description', 'isActive': 'is_active',
}
NOTIFY_FIELDS = {'email': 'notify_email', 'sms': 'notify_sms', 'push': 'notify_push', 'sound': 'notify_sound'}


def save_zone(user, zone: GeofenceZone, data: dict) -> GeofenceZone:
    if not can_write(user):
        raise PermissionDenied('You do not have permission to configure geofence zones')
    created = zone.pk is None
    for key, attr in ZONE_FIELDS.items():
        if key in data:
            setattr(zone, attr, data[key])
    for key, attr in NOTIFY_FIELDS.items():
        if key in data.get('notifications', {}):
            setattr(zone, attr, data['notifications'][key])
    zone.save()
    log_action(user=user, action='zone_created' if created else 'zone_updated', organization=zone.organization,
               object_type='geofence_zone', object_id=zone.id, detail={'name': zone.name})
    return zone


def get_zone(user, zone_id) -> GeofenceZone:
    zone = GeofenceZone.objects.filter(id=zone_id, organization__in=scoped_organizations(user)).first()
    if zone is None:
        raise NotFound('Geofence zone not found')
    return zone
