"""
Map manager endpoints: floor plan listing, upload, edits and status changes.
"""
from __future__ import annotations

from rest_framework import status
from rest_framework.decorators import api_view, parser_classes, permission_classes
from rest_framework.parsers import FormParser, JSONParser, MultiPartParser
from rest_framework.permissions import IsAuthenticated

from ..permissions import IsAdminRole, ReadOnly, scoped_organizations
from ..responses import envelope, paginate
from ..serializers.floor_plans import (
    SORT_FIELDS,
    FloorPlanCreateSerializer,
    FloorPlanListQuerySerializer,
    FloorPlanStatusSerializer,
    FloorPlanUpdateSerializer,
)
from ..services import floor_plans as plan_service
from ..services.organizations import resolve_organization


@api_view(['GET', 'POST'])
@permission_classes([IsAuthenticated, IsAdminRole | ReadOnly])
@parser_classes([MultiPartParser, FormParser, JSONParser])
def floor_plans(request):
    if request.method == 'GET':
        q = FloorPlanListQuerySerializer(data=request.query_params)
        q.is_valid(raise_exception=True)
        vd = q.validated_data
        if vd.get('organizationId') or getattr(request, 'organization_id', None):
            orgs = [resolve_organization(request.user, vd.get('organizationId'), request=request)]
        else:
            orgs = scoped_organizations(request.user)
        qs = plan_service.list_floor_plans(
            orgs,
            search=(vd.get('search') or '').strip(),
            building=(vd.get('building') or '').strip(),
            status=vd.get('status', ''),
            tag=(vd.get('tag') or '').strip(),
            floor_label=(vd.get('floorLabel') or '').strip(),
            sort_by=SORT_FIELDS[vd['sortBy']],
            descending=vd['sortOrder'] == 'desc',
        )
        items, pagination = paginate(qs, vd['page'], vd['limit'])
        return envelope({
            'floorPlans': [plan_service.format_floor_plan(p, request) for p in items],
            'pagination': pagination,
            'stats': plan_service.stats(orgs),
            'availableFilters': plan_service.available_filters(orgs),
        })

    s = FloorPlanCreateSerializer(data=request.data)
    s.is_valid(raise_exception=True)
    organization = resolve_organization(request.user, s.validated_data['organizationId'], request=request, write=True)
    plan = plan_service.create_floor_plan(request.user, organization, s.validated_data)
    return envelope({'floorPlan': plan_service.format_floor_plan(plan, request)},
                    'Floor plan uploaded successfully', status=status.HTTP_201_CREATED)


@api_view(['GET', 'PATCH'])
@permission_classes([IsAuthenticated, IsAdminRole | ReadOnly])
@parser_classes([MultiPartParser, FormParser, JSONParser])
def floor_plan_detail(request, pk):
    plan = plan_service.get_floor_plan(request.user, pk)
    if request.method == 'GET':
        return envelope({'floorPlan': plan_service.format_floor_plan(plan, request)})

    s = FloorPlanUpdateSerializer(data=request.data, partial=True)
    s.is_valid(raise_exception=True)
    plan = plan_service.update_floor_plan(request.user, plan, s.validated_data)
    return envelope({'floorPlan': plan_service.format_floor_plan(plan, request)}, 'Floor plan updated successfully')


@api_view(['POST'])
@permission_classes([IsAuthenticated, IsAdminRole | ReadOnly])
def floor_plan_status(request, pk):
    plan = plan_service.get_floor_plan(request.user, pk)
    s = FloorPlanStatusSerializer(data=request.data)
    s.is_valid(raise_exception=True)
    plan = plan_service.change_status(request.user, plan, s.validated_data['status'])
    return envelope({'floorPlan': plan_service.format_floor_plan(plan, request)},
                    f'Floor plan {plan.status.lower()}')
