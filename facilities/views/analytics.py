"""
Analytics: data exports, generated reports and venue metric series.
"""
from __future__ import annotations

from django.http import FileResponse
from rest_framework import status
from rest_framework.decorators import api_view, permission_classes
from rest_framework.permissions import IsAuthenticated

from ..responses import envelope
from ..serializers.analytics import ExportRequestSerializer, ReportRequestSerializer, VenueAnalyticsQuerySerializer
from ..services import analytics
from ..services.organizations import get_organization, resolve_organization


def _download(report):
    return FileResponse(
        report.file.open('rb'),
        as_attachment=True,
        filename=report.file.name.rsplit('/', 1)[-1],
        content_type=analytics.CONTENT_TYPES.get(report.file_format, 'application/octet-stream'),
    )


@api_view(['GET'])
@permission_classes([IsAuthenticated])
def export_options(request):
    return envelope(analytics.export_options())


@api_view(['POST'])
@permission_classes([IsAuthenticated])
def exports(request):
    """Build an export for the selected category and stream it back as a file."""
    s = ExportRequestSerializer(data=request.data)
    s.is_valid(raise_exception=True)
    vd = s.validated_data
    organization = resolve_organization(request.user, vd.get('organizationId'), request=request)
    report = analytics.create_export(request.user, organization, vd['category'], vd['dateRange'], vd['format'])
    return _download(report)


exports.cls.throttle_scope = 'exports'


@api_view(['GET'])
@permission_classes([IsAuthenticated])
def report_templates(request):
    return envelope({'templates': analytics.report_templates()})


@api_view(['POST'])
@permission_classes([IsAuthenticated])
def reports(request):
    s = ReportRequestSerializer(data=request.data)
    s.is_valid(raise_exception=True)
    vd = s.validated_data
    organization = resolve_organization(request.user, vd.get('organizationId'), request=request)
    report = analytics.create_report(request.user, organization, vd['template'], vd['sections'],
                                     vd['dateRange'], vd['format'], title=(vd.get('title') or '').strip() or None)
    return envelope({'report': analytics.format_report(report)}, 'Report generated successfully',
                    status=status.HTTP_201_CREATED)


reports.cls.throttle_scope = 'exports'


@api_view(['GET'])
@permission_classes([IsAuthenticated])
def recent_reports(request):
    return envelope({'reports': [analytics.format_report(r) for r in analytics.recent_reports(request.user)]})


@api_view(['GET'])
@permission_classes([IsAuthenticated])
def report_download(request, pk):
    return _download(analytics.get_report(request.user, pk))


@api_view(['GET'])
@permission_classes([IsAuthenticated])
def venue_analytics(request, organization_id):
    q = VenueAnalyticsQuerySerializer(data=request.query_params)
    q.is_valid(raise_exception=True)
    organization = get_organization(request.user, organization_id)
    data = analytics.venue_series(organization, analytics.range_start(q.validated_data['range']))
    data['range'] = q.validated_data['range']
    return envelope(data)
