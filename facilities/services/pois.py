from __future__ import annotations

import logging

from django.db.models import Q
from rest_framework.exceptions import NotFound, PermissionDenied

from facilities.models import Organization, PointOfInterest
from facilities.permissions import can_write, scoped_organizations
from .audit import log_action

logger = logging.getLogger(__name__)


def format_poi(poi: PointOfInterest) -> dict:
    coords = None
    if poi.latitude is not None or poi.longitude is not None:
        coords = {'latitude': poi.latitude, 'longitude': poi.longitude}
    return {
        'id': str(poi.id),
        'organization': {'id': str(poi.organization_id), 'name': poi.organization.name},
        'name': poi.name,
        'category': poi.category,
        'categoryType': poi.category_type or None,
        'building': poi.building,
        'floor': poi.floor,
        'roomNumber': poi.room_number or None,
        'description': poi.description or None,
        'tags': poi.tags,
        'amenities': poi.amenities,
        'contact': poi.contact,
        'accessibility': {
            'wheelchairAccessible': bool(poi.accessibility.get('wheelchairAccessible')),
            'hearingLoop': bool(poi.accessibility.get('hearingLoop')),
            'visualAidSupport': bool(poi.accessibility.get('visualAidSupport')),
        },
        'status': poi.status,
        'mapCoordinates': coords,
        'isActive': poi.is_active,
        'createdAt': poi.created_at.isoformat() if poi.created_at else None,
        'updatedAt': poi.updated_at.isoformat() if poi.updated_at else None,
    }


def list_pois(organization: Organization, *, search: str = '', status: str = '', category: str = ''):
    qs = PointOfInterest.objects.filter(organization=organization).select_related('organization')
    if search:
        qs = qs.filter(Q(name__icontains=search) | Q(building__icontains=search) | Q(room_number__icontains=search))
    if status:
        qs = qs.filter(status=status)
    if category:
        qs = qs.filter(category=category)
    return qs.order_by('name')


def get_poi(user, poi_id) -> PointOfInterest:
    poi = (
        PointOfInterest.objects.select_related('organization')
        .filter(id=poi_id, organization__in=scoped_organizations(user))
        .first()
    )
    if poi is None:
        raise NotFound('Point of interest not found')
    return poi


def _apply(poi: PointOfInterest, data: dict) -> None:
    simple = {
        'name': 'name', 'category': 'category', 'categoryType': 'category_type', 'building': 'building',
        'floor': 'floor', 'roomNumber': 'room_number', 'description': 'description', 'tags': 'tags',
        'amenities': 'amenities', 'status': 'status', 'isActive': 'is_active',
    }
    for key, attr in simple.items():
        if key in data:
            setattr(poi, attr, data[key])
    if 'contact' in data:
        poi.contact = dict(data['contact']) or None
    if 'accessibility' in data:
        poi.accessibility = dict(data['accessibility'])
    if 'mapCoordinates' in data:
        coords = data['mapCoordinates']
        poi.latitude = coords.get('latitude')
        poi.longitude = coords.get('longitude')


def create_poi(user, organization: Organization, data: dict) -> PointOfInterest:
    if not can_write(user):
        raise PermissionDenied('You do not have permission to add points of interest')
    poi = PointOfInterest(organization=organization, created_by=user)
    _apply(poi, data)
    poi.save()
    log_action(user=user, action='poi_created', organization=organization, object_type='poi',
               object_id=poi.id, detail={'name': poi.name})
    return poi


def update_poi(user, poi: PointOfInterest, data: dict) -> PointOfInterest:
    if not can_write(user):
        raise PermissionDenied('You do not have permission to modify points of interest')
    _apply(poi, data)
    poi.save()
    log_action(user=user, action='poi_updated', organization=poi.organization, object_type='poi',
               object_id=poi.id, detail={'name': poi.name, 'fields': sorted(data)})
    return poi
