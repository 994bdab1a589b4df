"""
Reference data for the dashboard's dropdowns.

Every endpoint answers with a select payload: normalized options, the
optional search applied and at most 500 entries.
"""
from __future__ import annotations

from rest_framework.decorators import api_view, permission_classes
from rest_framework.permissions import IsAuthenticated

from ..responses import envelope
from ..services import reference
from ..services.cascade import LOADING_PLACEHOLDER, NO_COUNTRY_PLACEHOLDER, READY_PLACEHOLDER
from ..services.organizations import resolve_organization
from ..services.selects import SelectState


def _select_payload(name, options, *, query='', searchable=True, placeholder='Select an option', value=''):
    select = SelectState(name, options, value=value, placeholder=placeholder, searchable=searchable)
    select.set_query(query)
    return select.as_dict()


@api_view(['GET'])
@permission_classes([IsAuthenticated])
def countries(request):
    q = request.query_params.get('q', '')
    options = [{'name': c['name'], 'value': c['name']} for c in reference.countries()]
    return envelope(_select_payload('country', options, query=q, placeholder='Select country'))


@api_view(['GET'])
@permission_classes([IsAuthenticated])
def cities(request):
    country = (request.query_params.get('country') or '').strip()
    current = (request.query_params.get('current') or '').strip()
    q = request.query_params.get('q', '')
    options = reference.city_options(country, current)
    placeholder = READY_PLACEHOLDER if options else NO_COUNTRY_PLACEHOLDER
    payload = _select_payload('city', options, query=q, placeholder=placeholder, value=current)
    payload['disabled'] = not options
    payload['loadingPlaceholder'] = LOADING_PLACEHOLDER
    return envelope(payload)


@api_view(['GET'])
@permission_classes([IsAuthenticated])
def timezones(request):
    q = request.query_params.get('q', '')
    current = (request.query_params.get('current') or '').strip()
    options = reference.timezone_options(current)
    return envelope(_select_payload('timezone', options, query=q, placeholder='Select timezone', value=current))


@api_view(['GET'])
@permission_classes([IsAuthenticated])
def organization_types(request):
    return envelope(_select_payload('organizationType', reference.ORGANIZATION_TYPES, searchable=False,
                                    placeholder='Select organization type'))


@api_view(['GET'])
@permission_classes([IsAuthenticated])
def poi_options(request):
    org_id = request.query_params.get('organizationId')
    organization = resolve_organization(request.user, org_id, request=request) if (
        org_id or getattr(request, 'organization_id', None) or request.user.organization_id) else None
    buildings, floors = reference.poi_building_and_floor_options(organization)
    return envelope({
        'categories': _select_payload('category', reference.POI_CATEGORIES, placeholder='Select category'),
        'categoryTypes': _select_payload('categoryType', reference.POI_CATEGORY_TYPES, searchable=False,
                                         placeholder='Select category type'),
        'statuses': _select_payload('status', reference.POI_STATUSES, searchable=False, value='Active',
                                    placeholder='Select status'),
        'buildings': _select_payload('building', buildings, placeholder='Select building'),
        'floors': _select_payload('floor', floors, placeholder='Select floor'),
    })
