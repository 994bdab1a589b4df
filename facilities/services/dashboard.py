from typing import Optional

from django.conf import settings
from django.contrib.humanize.templatetags.humanize import naturaltime
from django.core.cache import cache

from facilities.models import Alert, Organization, SystemHealthCheck, VenueMetricSnapshot
from .organizations import percentage_change, recent_activities

STAT_FIELDS = {
    'activePatients': 'active_patients',
    'equipmentTracked': 'equipment_tracked',
    'navigationRequests': 'navigation_requests',
}


def cache_key(organization_id) -> str:
    return f'dashboard:org:{organization_id}'


def latest_snapshots(organization: Organization, count: int = 2) -> list[VenueMetricSnapshot]:
    return list(VenueMetricSnapshot.objects.filter(organization=organization).order_by('-created_at', '-id')[:count])


def health_status(health: int) -> str:
    if health >= 90:
        return 'Healthy'
    if health >= 70:
        return 'Warning'
    return 'Critical'


def format_health(check: SystemHealthCheck) -> dict:
    return {
        'name': check.name,
        'health': check.health,
        'status': health_status(check.health),
        'time': naturaltime(check.checked_at),
    }


def _stats(organization: Organization) -> dict:
    snapshots = latest_snapshots(organization)
    current: Optional[VenueMetricSnapshot] = snapshots[0] if snapshots else None
    previous: Optional[VenueMetricSnapshot] = snapshots[1] if len(snapshots) > 1 else None
    stats = {}
    for key, attr in STAT_FIELDS.items():
        now_value = getattr(current, attr, 0) if current else 0
        prev_value = getattr(previous, attr, 0) if previous else now_value
        stats[key] = now_value
        stats[f'{key}Change'] = percentage_change(now_value, prev_value)
    emergency = Alert.objects.filter(
        organization=organization, status=Alert.STATUS_ACTIVE, severity=Alert.SEVERITY_HIGH
    ).count()
    prev_emergency = previous.emergency_alerts if previous else emergency
    stats['emergencyAlerts'] = emergency
    stats['emergencyAlertsChange'] = percentage_change(emergency, prev_emergency)
    return stats


def build_dashboard(organization: Organization) -> dict:
    return {
        'stats': _stats(organization),
        'systemHealth': [format_health(c) for c in organization.health_checks.all()],
        'recentActivities': recent_activities(Organization.objects.filter(id=organization.id)),
    }


def dashboard_payload(organization: Organization) -> dict:
    """Dashboard data for one organization, cached for ``DASHBOARD_CACHE_SECONDS``."""
    ck = cache_key(organization.id)
    cached = cache.get(ck)
    if cached:
        return cached
    payload = build_dashboard(organization)
    cache.set(ck, payload, settings.DASHBOARD_CACHE_SECONDS)
    return payload


def refresh_dashboard(organization: Organization) -> str:
    ck = cache_key(organization.id)
    cache.set(ck, build_dashboard(organization), settings.DASHBOARD_CACHE_SECONDS)
    return ck
