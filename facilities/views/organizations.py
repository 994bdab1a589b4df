"""
Organization management views.

Listing is scoped to the caller's organizations; creating and editing
requires an administrative role.  Edits only carry the fields that have a
value, so blank form fields never overwrite stored data.
"""
from __future__ import annotations

from django.db.models import Count
from rest_framework import status
from rest_framework.decorators import api_view, permission_classes
from rest_framework.permissions import IsAuthenticated

from ..models import VenueTemplate
from ..permissions import IsAdminRole, ReadOnly
from ..responses import envelope, paginate
from ..serializers.organizations import (
    OrganizationListQuerySerializer,
    OrganizationSerializer,
    PageQuerySerializer,
)
from ..services import organizations as org_service
from ..services.floor_plans import format_building
from ..services.payloads import assemble_organization_payload


@api_view(['GET', 'POST'])
@permission_classes([IsAuthenticated, IsAdminRole | ReadOnly])
def organizations(request):
    """``GET`` lists organizations, ``POST`` creates one."""
    if request.method == 'GET':
        q = OrganizationListQuerySerializer(data=request.query_params)
        q.is_valid(raise_exception=True)
        vd = q.validated_data
        qs = org_service.list_organizations(
            request.user,
            search=(vd.get('search') or '').strip(),
            organization_type=vd.get('organizationType'),
            is_active=vd.get('isActive'),
        )
        items, pagination = paginate(qs, vd['page'], vd['limit'])
        return envelope({
            'organizations': [org_service.format_organization(o) for o in items],
            'pagination': pagination,
        })

    s = OrganizationSerializer(data=assemble_organization_payload(request.data))
    s.is_valid(raise_exception=True)
    org = org_service.create_organization(request.user, s.validated_data)
    return envelope({'organization': org_service.format_organization(org, detail=True)},
                    'Organization created successfully', status=status.HTTP_201_CREATED)


@api_view(['GET', 'PATCH', 'PUT'])
@permission_classes([IsAuthenticated, IsAdminRole | ReadOnly])
def organization_detail(request, pk):
    org = org_service.get_organization(request.user, pk)
    if request.method == 'GET':
        return envelope({'organization': org_service.format_organization(org, detail=True)})

    s = OrganizationSerializer(data=assemble_organization_payload(request.data), partial=True)
    s.is_valid(raise_exception=True)
    org = org_service.update_organization(request.user, org, s.validated_data)
    return envelope({'organization': org_service.format_organization(org, detail=True)},
                    'Organization updated successfully')


@api_view(['GET'])
@permission_classes([IsAuthenticated])
def organizations_overview(request):
    return envelope(org_service.overview(request.user))


@api_view(['GET'])
@permission_classes([IsAuthenticated])
def venue_templates(request):
    q = PageQuerySerializer(data=request.query_params)
    q.is_valid(raise_exception=True)
    qs = VenueTemplate.objects.filter(is_active=True).order_by('name')
    items, pagination = paginate(qs, q.validated_data['page'], q.validated_data['limit'])
    return envelope({
        'venueTemplates': [
            {'id': str(t.id), 'name': t.name, 'venueType': t.venue_type, 'description': t.description, 'config': t.config}
            for t in items
        ],
        'pagination': pagination,
    })


@api_view(['GET'])
@permission_classes([IsAuthenticated])
def organization_buildings(request, pk):
    org = org_service.get_organization(request.user, pk)
    buildings = org.buildings.annotate(plan_count=Count('floor_plans')).order_by('name')
    return envelope({
        'buildings': [format_building(b) for b in buildings],
    })
