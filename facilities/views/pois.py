from __future__ import annotations

from rest_framework import status
from rest_framework.decorators import api_view, permission_classes
from rest_framework.permissions import IsAuthenticated

from ..permissions import IsAdminRole, ReadOnly
from ..responses import envelope, paginate
from ..serializers.pois import (
    PointOfInterestFormSerializer,
    PointOfInterestListQuerySerializer,
    PointOfInterestSerializer,
)
from ..services import pois as poi_service
from ..services.organizations import resolve_organization
from ..services.payloads import assemble_poi_payload, split_csv, strip_empty


@api_view(['GET', 'POST'])
@permission_classes([IsAuthenticated, IsAdminRole | ReadOnly])
def organization_pois(request, pk):
    """List the points of interest of an organization or add one from raw form values."""
    if request.method == 'GET':
        organization = resolve_organization(request.user, pk, request=request)
        q = PointOfInterestListQuerySerializer(data=request.query_params)
        q.is_valid(raise_exception=True)
        vd = q.validated_data
        qs = poi_service.list_pois(organization, search=(vd.get('search') or '').strip(),
                                   status=vd.get('status', ''), category=vd.get('category', ''))
        items, pagination = paginate(qs, vd['page'], vd['limit'])
        return envelope({'pointsOfInterest': [poi_service.format_poi(p) for p in items], 'pagination': pagination})

    values = request.data.dict() if hasattr(request.data, 'dict') else dict(request.data)
    values['organizationId'] = values.get('organizationId') or str(pk)
    form = PointOfInterestFormSerializer(data=values)
    form.is_valid(raise_exception=True)
    organization = resolve_organization(request.user, values['organizationId'], request=request, write=True)
    payload = assemble_poi_payload(values, marker=values.get('marker') or None, organization_id=str(pk))
    s = PointOfInterestSerializer(data=payload)
    s.is_valid(raise_exception=True)
    poi = poi_service.create_poi(request.user, organization, s.validated_data)
    return envelope({'pointOfInterest': poi_service.format_poi(poi)},
                    'Point of interest created successfully', status=status.HTTP_201_CREATED)


@api_view(['GET', 'PATCH', 'PUT'])
@permission_classes([IsAuthenticated, IsAdminRole | ReadOnly])
def poi_detail(request, pk):
    poi = poi_service.get_poi(request.user, pk)
    if request.method == 'GET':
        return envelope({'pointOfInterest': poi_service.format_poi(poi)})

    data = strip_empty(dict(request.data.items()))
    for key in ('tags', 'amenities'):
        if key in data:
            data[key] = split_csv(data[key])
    data.pop('organizationId', None)
    s = PointOfInterestSerializer(data=data, partial=True)
    s.is_valid(raise_exception=True)
    poi = poi_service.update_poi(request.user, poi, s.validated_data)
    return envelope({'pointOfInterest': poi_service.format_poi(poi)}, 'Point of interest updated successfully')
