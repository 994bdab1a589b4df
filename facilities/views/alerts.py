from __future__ import annotations

from rest_framework import status
from rest_framework.decorators import api_view, permission_classes
from rest_framework.permissions import IsAuthenticated

from ..models import Alert, GeofenceZone
from ..permissions import IsAdminRole, ReadOnly
from ..responses import envelope, paginate
from ..serializers.alerts import AlertCreateSerializer, AlertListQuerySerializer, GeofenceZoneSerializer
from ..services import alerts as alert_service
from ..services.organizations import resolve_organization


@api_view(['GET', 'POST'])
@permission_classes([IsAuthenticated, IsAdminRole | ReadOnly])
def alerts(request):
    """``GET`` lists alerts of the current organization, ``POST`` raises a new one."""
    if request.method == 'GET':
        q = AlertListQuerySerializer(data=request.query_params)
        q.is_valid(raise_exception=True)
        vd = q.validated_data
        organization = resolve_organization(request.user, vd.get('organizationId'), request=request)
        qs = alert_service.list_alerts(organization, status=vd.get('status', ''),
                                       severity=vd.get('severity', ''), alert_type=vd.get('type', ''))
        items, pagination = paginate(qs, vd['page'], vd['limit'])
        return envelope({'alerts': [alert_service.format_alert(a) for a in items], 'pagination': pagination})

    s = AlertCreateSerializer(data=request.data)
    s.is_valid(raise_exception=True)
    organization = resolve_organization(request.user, s.validated_data.get('organizationId'),
                                        request=request, write=True)
    alert = alert_service.create_alert(request.user, organization, s.validated_data)
    return envelope({'alert': alert_service.format_alert(alert)}, 'Alert created successfully',
                    status=status.HTTP_201_CREATED)


@api_view(['POST'])
@permission_classes([IsAuthenticated, IsAdminRole | ReadOnly])
def acknowledge_alert(request, pk):
    alert = alert_service.get_alert(request.user, pk)
    alert = alert_service.transition_alert(request.user, alert, Alert.STATUS_ACKNOWLEDGED)
    return envelope({'alert': alert_service.format_alert(alert)}, 'Alert acknowledged')


@api_view(['POST'])
@permission_classes([IsAuthenticated, IsAdminRole | ReadOnly])
def resolve_alert(request, pk):
    alert = alert_service.get_alert(request.user, pk)
    alert = alert_service.transition_alert(request.user, alert, Alert.STATUS_RESOLVED)
    return envelope({'alert': alert_service.format_alert(alert)}, 'Alert resolved')


@api_view(['GET'])
@permission_classes([IsAuthenticated])
def alerts_stats(request):
    organization = resolve_organization(request.user, request.query_params.get('organizationId'), request=request)
    return envelope(alert_service.alert_stats(organization))


@api_view(['GET', 'POST'])
@permission_classes([IsAuthenticated, IsAdminRole | ReadOnly])
def geofence_zones(request):
    if request.method == 'GET':
        organization = resolve_organization(request.user, request.query_params.get('organizationId'),
                                            request=request)
        zones = GeofenceZone.objects.filter(organization=organization).order_by('name')
        return envelope({'zones': [alert_service.format_zone(z) for z in zones]})

    s = GeofenceZoneSerializer(data=request.data)
    s.is_valid(raise_exception=True)
    organization = resolve_organization(request.user, s.validated_data.get('organizationId'),
                                        request=request, write=True)
    zone = alert_service.save_zone(request.user, GeofenceZone(organization=organization), s.validated_data)
    return envelope({'zone': alert_service.format_zone(zone)}, 'Geofence zone created successfully',
                    status=status.HTTP_201_CREATED)


@api_view(['PATCH'])
@permission_classes([IsAuthenticated, IsAdminRole | ReadOnly])
def geofence_zone_detail(request, pk):
    zone = alert_service.get_zone(request.user, pk)
    s = GeofenceZoneSerializer(data=request.data, partial=True)
    s.is_valid(raise_exception=True)
    zone = alert_service.save_zone(request.user, zone, s.validated_data)
    return envelope({'zone': alert_service.format_zone(zone)}, 'Geofence zone updated successfully')
