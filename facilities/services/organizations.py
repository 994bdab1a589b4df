"""
Organization queries and mutations.
"""
from __future__ import annotations

import logging
import uuid
from datetime import timedelta
from typing import Optional

from django.contrib.humanize.templatetags.humanize import naturaltime
from django.db import transaction
from django.db.models import Count, Q
from django.utils import timezone
from rest_framework.exceptions import NotFound, PermissionDenied

from facilities.exceptions import MissingContextError
from facilities.models import ActivityEvent, Organization
from facilities.permissions import can_write, scoped_organizations
from .audit import log_action

logger = logging.getLogger(__name__)

ACTIVITY_COLORS = {
    'created': 'bg-blue-500',
    'updated': 'bg-green-500',
    'deactivated': 'bg-red-500',
}
ACTIVITY_TEXT = {
    'created': 'New hospital added: {name}',
    'updated': 'Hospital updated: {name}',
    'deactivated': 'Hospital deactivated: {name}',
}

FIELD_MAP = {
    'organizationType': 'organization_type',
    'name': 'name',
    'email': 'email',
    'phone': 'phone',
    'country': 'country',
    'city': 'city',
    'timezone': 'timezone',
    'address': 'address',
    'venueTemplate': 'venue_template',
    'isActive': 'is_active',
}


def _parse_uuid(value) -> Optional[uuid.UUID]:
    if isinstance(value, uuid.UUID):
        return value
    try:
        return uuid.UUID(str(value))
    except (TypeError, ValueError):
        return None


def resolve_organization(user, organization_id=None, *, request=None, write: bool = False) -> Organization:
    """Organization for the current call, checked against the user's scope.

    The id comes from ``organization_id``, the ``X-Organization-Id`` header
    or the user's own organization, in that order.
    """
    raw = organization_id or getattr(request, 'organization_id', None) or getattr(user, 'organization_id', None)
    if not raw:
        raise MissingContextError()
    org_id = _parse_uuid(raw)
    org = scoped_organizations(user).filter(id=org_id).first() if org_id else None
    if org is None:
        raise NotFound('Organization not found')
    if write and not can_write(user):
        raise PermissionDenied('You do not have permission to modify this organization')
    return org


def get_organization(user, organization_id) -> Organization:
    org_id = _parse_uuid(organization_id)
    org = (
        scoped_organizations(user).select_related('created_by', 'updated_by', 'venue_template').filter(id=org_id).first()
        if org_id else None
    )
    if org is None:
        raise NotFound('Organization not found')
    return org


def _person(user) -> Optional[dict]:
    if user is None:
        return None
    return {'id': user.id, 'firstName': user.first_name, 'lastName': user.last_name, 'email': user.email}


def format_organization(org: Organization, detail: bool = False) -> dict:
    data = {
        'id': str(org.id),
        'name': org.name,
        'organizationType': org.organization_type,
        'email': org.email,
        'phone': org.phone,
        'country': org.country,
        'city': org.city,
        'timezone': org.timezone,
        'address': org.address,
        'venueTemplate': str(org.venue_template_id) if org.venue_template_id else None,
        'isActive': org.is_active,
        'createdAt': org.created_at.isoformat() if org.created_at else None,
        'updatedAt': org.updated_at.isoformat() if org.updated_at else None,
    }
    if detail:
        data['createdBy'] = _person(org.created_by)
        data['updatedBy'] = _person(org.updated_by)
    return data


def list_organizations(user, *, search: str = '', organization_type: Optional[str] = None,
                       is_active: Optional[bool] = None):
    qs = scoped_organizations(user)
    if search:
        qs = qs.filter(Q(name__icontains=search) | Q(city__icontains=search) | Q(country__icontains=search))
    if organization_type:
        qs = qs.filter(organization_type=organization_type)
    if is_active is not None:
        qs = qs.filter(is_active=is_active)
    return qs.order_by('name')


def _apply(org: Organization, data: dict) -> list[str]:
    changed = []
    for key, attr in FIELD_MAP.items():
        if key not in data or data[key] is None:
            continue
        setattr(org, attr, data[key])
        changed.append(attr)
    return changed


@transaction.atomic
def create_organization(user, data: dict) -> Organization:
    if not can_write(user):
        raise PermissionDenied('You do not have permission to create organizations')
    org = Organization(created_by=user, updated_by=user)
    _apply(org, data)
    org.save()
    log_action(user=user, action='created', organization=org, object_type='organization',
               object_id=org.id, detail={'name': org.name})
    logger.info("Organization %s created by %s", org.id, user.username)
    return org


@transaction.atomic
def update_organization(user, org: Organization, data: dict) -> Organization:
    if not can_write(user):
        raise PermissionDenied('You do not have permission to modify this organization')
    was_active = org.is_active
    changed = _apply(org, data)
    org.updated_by = user
    org.save(update_fields=changed + ['updated_by', 'updated_at'])
    action = 'deactivated' if was_active and not org.is_active else 'updated'
    log_action(user=user, action=action, organization=org, object_type='organization',
               object_id=org.id, detail={'name': org.name, 'fields': changed})
    return org


def percentage_change(current: int, previous: int) -> float:
    if previous == 0:
        return 100.0 if current else 0.0
    return round((current - previous) / previous * 100, 1)


def format_percentage(value: float) -> str:
    sign = '+' if value > 0 else ''
    return f"{sign}{value:.1f}%"


def _metric(current: int, previous: int) -> dict:
    change = percentage_change(current, previous)
    return {'value': current, 'change': change, 'changeLabel': format_percentage(change)}


def _author(user) -> str:
    if user is None:
        return 'System'
    full = f"{user.first_name} {user.last_name}".strip()
    return full or user.username


def format_activity(event: ActivityEvent) -> dict:
    name = (event.detail or {}).get('name') or (event.organization.name if event.organization else '')
    template = ACTIVITY_TEXT.get(event.action, '{name}')
    return {
        'id': str(event.id),
        'type': event.action,
        'text': template.format(name=name),
        'author': _author(event.user),
        'time': naturaltime(event.created_at),
        'color': ACTIVITY_COLORS.get(event.action, 'bg-gray-500'),
        'createdAt': event.created_at.isoformat(),
    }


def recent_activities(organizations, limit: int = 4) -> list[dict]:
    events = (
        ActivityEvent.objects.filter(object_type='organization', organization__in=organizations)
        .select_related('user', 'organization')
        .order_by('-created_at', '-id')[:limit]
    )
    return [format_activity(e) for e in events]


def overview(user, now=None) -> dict:
    """Summary counts with week-over-week change, type distribution and recent activity."""
    now = now or timezone.now()
    week_ago = now - timedelta(days=7)
    qs = scoped_organizations(user)
    before = qs.filter(created_at__lte=week_ago)

    def counts(q):
        return q.aggregate(
            total=Count('id'),
            active=Count('id', filter=Q(is_active=True)),
            hospitals=Count('id', filter=Q(organization_type=Organization.TYPE_HOSPITAL)),
        )

    cur, prev = counts(qs), counts(before)
    total = cur['total'] or 0
    distribution = []
    for row in qs.values('organization_type').annotate(count=Count('id')).order_by('-count', 'organization_type'):
        distribution.append({
            'type': row['organization_type'],
            'count': row['count'],
            'percentage': round(row['count'] / total * 100, 1) if total else 0.0,
        })
    return {
        'summary': {
            'total': _metric(total, prev['total'] or 0),
            'active': _metric(cur['active'] or 0, prev['active'] or 0),
            'hospitals': _metric(cur['hospitals'] or 0, prev['hospitals'] or 0),
            'otherVenues': _metric(total - (cur['hospitals'] or 0), (prev['total'] or 0) - (prev['hospitals'] or 0)),
        },
        'distribution': distribution,
        'recentActivities': recent_activities(qs),
    }
