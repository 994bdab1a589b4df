"""
Floor plan lifecycle.

Plans move Draft -> Published/Archived, Published -> Disabled/Archived,
Disabled -> Published/Archived and Archived -> Draft.  Uploading a new
file for an existing plan bumps its version.
"""
from __future__ import annotations

import logging
import re
from typing import Optional

from django.db import transaction
from django.db.models import Count, Q
from django.utils import timezone
from rest_framework.exceptions import NotFound, PermissionDenied, ValidationError

from facilities.models import Building, FloorPlan, Organization
from facilities.permissions import can_write, scoped_organizations
from .audit import log_action

logger = logging.getLogger(__name__)

TRANSITIONS = {
    FloorPlan.STATUS_DRAFT: {FloorPlan.STATUS_PUBLISHED, FloorPlan.STATUS_ARCHIVED},
    FloorPlan.STATUS_PUBLISHED: {FloorPlan.STATUS_DISABLED, FloorPlan.STATUS_ARCHIVED},
    FloorPlan.STATUS_DISABLED: {FloorPlan.STATUS_PUBLISHED, FloorPlan.STATUS_ARCHIVED},
    FloorPlan.STATUS_ARCHIVED: {FloorPlan.STATUS_DRAFT},
}

_FLOOR_RE = re.compile(r'^(?:floor|level|l|f)?\s*(-?\d+)$', re.IGNORECASE)
_BASEMENT_RE = re.compile(r'^(?:b|basement)\s*(\d+)$', re.IGNORECASE)


def parse_floor_number(label: str) -> Optional[int]:
    """``"3"``, ``"L3"`` and ``"Floor 3"`` -> 3; ``"G"``/``"Ground"`` -> 0; ``"B1"`` -> -1."""
    text = (label or '').strip()
    if text.lower() in ('g', 'ground', 'ground floor', 'gf'):
        return 0
    m = _BASEMENT_RE.match(text)
    if m:
        return -int(m.group(1))
    m = _FLOOR_RE.match(text)
    if m:
        return int(m.group(1))
    return None


def _coordinate(text) -> Optional[float]:
    return float(text) if text not in ('', None) else None


def format_floor_plan(plan: FloorPlan, request=None) -> dict:
    file_url = None
    if plan.file:
        file_url = request.build_absolute_uri(plan.file.url) if request is not None else plan.file.url
    return {
        'id': str(plan.id),
        'title': plan.title,
        'floorLabel': plan.floor_label,
        'floorNumber': plan.floor_number,
        'status': plan.status,
        'building': {'id': str(plan.building_id), 'name': plan.building.name},
        'location': {'latitude': plan.latitude, 'longitude': plan.longitude},
        'metadata': {'scale': plan.scale or None, 'description': plan.description or None, 'tags': plan.tags},
        'media': {'fileUrl': file_url, 'fileKey': plan.file_key or None},
        'isTemplate': plan.is_template,
        'version': plan.version,
        'versionNotes': plan.version_notes,
        'publishedAt': plan.published_at.isoformat() if plan.published_at else None,
        'createdAt': plan.created_at.isoformat(),
        'updatedAt': plan.updated_at.isoformat(),
    }


def get_floor_plan(user, plan_id) -> FloorPlan:
    plan = (
        FloorPlan.objects.select_related('building', 'organization')
        .filter(id=plan_id, organization__in=scoped_organizations(user))
        .first()
    )
    if plan is None:
        raise NotFound('Floor plan not found')
    return plan


def _building_for(organization: Organization, building_id) -> Building:
    building = Building.objects.filter(id=building_id, organization=organization).first()
    if building is None:
        raise ValidationError({'buildingId': ['Building not found for this organization']})
    return building


def list_floor_plans(organizations, *, search='', building='', status='', tag='', floor_label='',
                     sort_by='created_at', descending=True):
    qs = FloorPlan.objects.filter(organization__in=organizations).select_related('building')
    if search:
        qs = qs.filter(Q(title__icontains=search) | Q(floor_label__icontains=search) | Q(description__icontains=search))
    if building:
        cond = Q(building__name__iexact=building)
        if building.isdigit():
            cond |= Q(building_id=int(building))
        qs = qs.filter(cond)
    if status:
        qs = qs.filter(status=status)
    if floor_label:
        qs = qs.filter(floor_label__iexact=floor_label)
    if tag:
        # JSONField __contains is unsupported on SQLite
        ids = [p.id for p in qs.only('id', 'tags') if tag.lower() in (t.lower() for t in p.tags or [])]
        qs = qs.filter(id__in=ids)
    order = f"-{sort_by}" if descending else sort_by
    return qs.order_by(order, 'title')


def stats(organizations) -> dict:
    agg = FloorPlan.objects.filter(organization__in=organizations).aggregate(
        total=Count('id'),
        published=Count('id', filter=Q(status=FloorPlan.STATUS_PUBLISHED)),
        drafted=Count('id', filter=Q(status=FloorPlan.STATUS_DRAFT)),
        disabled=Count('id', filter=Q(status=FloorPlan.STATUS_DISABLED)),
        archived=Count('id', filter=Q(status=FloorPlan.STATUS_ARCHIVED)),
    )
    return {
        'totalMaps': agg['total'],
        'publishedMaps': agg['published'],
        'draftedMaps': agg['drafted'],
        'disabledMaps': agg['disabled'],
        'archivedMaps': agg['archived'],
        'buildings': Building.objects.filter(organization__in=organizations).count(),
    }


def _floor_sort_key(label: str):
    number = parse_floor_number(label)
    return (number is None, number or 0, label)


def available_filters(organizations) -> dict:
    plans = FloorPlan.objects.filter(organization__in=organizations)
    tags: set[str] = set()
    for plan_tags in plans.values_list('tags', flat=True):
        tags.update(plan_tags or [])
    return {
        'buildings': [
            {'id': str(b.id), 'name': b.name, 'floors': b.floors}
            for b in Building.objects.filter(organization__in=organizations).order_by('name')
        ],
        'statuses': [s for s, _ in FloorPlan.STATUS_CHOICES],
        'tags': sorted(tags, key=str.casefold),
        'floorLabels': sorted(set(plans.values_list('floor_label', flat=True)), key=_floor_sort_key),
    }


@transaction.atomic
def create_floor_plan(user, organization: Organization, data: dict) -> FloorPlan:
    if not can_write(user):
        raise PermissionDenied('You do not have permission to upload floor plans')
    building = _building_for(organization, data['buildingId'])
    upload = data['file']
    status = data.get('status') or FloorPlan.STATUS_DRAFT
    plan = FloorPlan(
        organization=organization,
        building=building,
        title=data['mapName'],
        floor_label=data['floorLabel'].strip(),
        floor_number=parse_floor_number(data['floorLabel']),
        status=status,
        latitude=_coordinate(data.get('latitude')),
        longitude=_coordinate(data.get('longitude')),
        scale=data['mapScale'],
        description=data.get('description') or '',
        tags=data.get('tags') or [],
        is_template=data.get('isTemplate', False),
        version_notes=data.get('versionNotes') or None,
        published_at=timezone.now() if status == FloorPlan.STATUS_PUBLISHED else None,
        created_by=user,
    )
    plan.file.save(upload.name, upload, save=False)
    plan.file_key = plan.file.name
    plan.save()
    log_action(user=user, action='floor_plan_created', organization=organization, object_type='floor_plan',
               object_id=plan.id, detail={'title': plan.title, 'file': plan.file_key})
    return plan


@transaction.atomic
def update_floor_plan(user, plan: FloorPlan, data: dict) -> FloorPlan:
    if not can_write(user):
        raise PermissionDenied('You do not have permission to modify floor plans')
    if 'buildingId' in data:
        plan.building = _building_for(plan.organization, data['buildingId'])
    if 'mapName' in data:
        plan.title = data['mapName']
    if 'floorLabel' in data:
        plan.floor_label = data['floorLabel'].strip()
        plan.floor_number = parse_floor_number(plan.floor_label)
    if 'mapScale' in data:
        plan.scale = data['mapScale']
    if 'description' in data:
        plan.description = data['description']
    if 'latitude' in data:
        plan.latitude = _coordinate(data['latitude'])
    if 'longitude' in data:
        plan.longitude = _coordinate(data['longitude'])
    if 'tags' in data:
        plan.tags = data['tags']
    if 'isTemplate' in data:
        plan.is_template = data['isTemplate']
    if 'versionNotes' in data:
        plan.version_notes = data['versionNotes'] or None
    if data.get('file'):
        upload = data['file']
        plan.file.save(upload.name, upload, save=False)
        plan.file_key = plan.file.name
        plan.version += 1
    plan.save()
    log_action(user=user, action='floor_plan_updated', organization=plan.organization, object_type='floor_plan',
               object_id=plan.id, detail={'version': plan.version, 'fields': sorted(k for k in data if k != 'file')})
    return plan


def change_status(user, plan: FloorPlan, new_status: str) -> FloorPlan:
    if not can_write(user):
        raise PermissionDenied('You do not have permission to change floor plan status')
    if new_status == plan.status:
        return plan
    if new_status not in TRANSITIONS.get(plan.status, set()):
        raise ValidationError({'status': [f'Cannot change status from {plan.status} to {new_status}']})
    old = plan.status
    plan.status = new_status
    fields = ['status', 'updated_at']
    if new_status == FloorPlan.STATUS_PUBLISHED:
        plan.published_at = timezone.now()
        fields.append('published_at')
    plan.save(update_fields=fields)
    log_action(user=user, action='floor_plan_status', organization=plan.organization, object_type='floor_plan',
               object_id=plan.id, detail={'from': old, 'to': new_status})
    logger.info("Floor plan %s moved %s -> %s", plan.id, old, new_status)
    return plan


def format_building(building: Building) -> dict:
    return {
        'id': str(building.id),
        'name': building.name,
        'floors': building.floors,
        'floorPlans': getattr(building, 'plan_count', None),
    }
