"""
Administrative dashboard endpoint.

Returns venue statistics, system health and recent activity for one
organization.  The payload is cached per organization and rewarmed by the
``refresh_caches`` management command.
"""
from __future__ import annotations

from rest_framework.decorators import api_view, permission_classes
from rest_framework.permissions import IsAuthenticated

from ..responses import envelope
from ..services.dashboard import dashboard_payload
from ..services.organizations import get_organization


@api_view(['GET'])
@permission_classes([IsAuthenticated])
def admin_dashboard(request, organization_id):
    organization = get_organization(request.user, organization_id)
    return envelope(dashboard_payload(organization))
