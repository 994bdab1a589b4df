"""
Data exports, generated reports and venue metric series.

Exports and reports are written to storage as ``GeneratedReport`` rows so
the recent-reports panel can list and re-download them.
"""
from __future__ import annotations

import csv
import io
import json
import logging
from datetime import timedelta
from typing import Optional

from django.core.files.base import ContentFile
from django.core.serializers.json import DjangoJSONEncoder
from django.db.models import Avg, Sum
from django.utils import timezone
from django.utils.text import slugify
from rest_framework.exceptions import NotFound

from facilities.models import (
    Alert,
    FloorPlan,
    GeneratedReport,
    GeofenceZone,
    Organization,
    PointOfInterest,
    VenueMetricSnapshot,
)
from facilities.permissions import scoped_organizations
from .alerts import alert_stats
from .audit import log_action
from .dashboard import health_status
from .floor_plans import stats as floor_plan_stats

logger = logging.getLogger(__name__)

DATA_CATEGORIES = [
    {'name': 'Floor Plans', 'value': 'floor_plans'},
    {'name': 'Points of Interest', 'value': 'points_of_interest'},
    {'name': 'Alerts', 'value': 'alerts'},
    {'name': 'Geofence Zones', 'value': 'geofence_zones'},
    {'name': 'Venue Metrics', 'value': 'venue_metrics'},
]
DATE_RANGES = [
    {'name': 'Last 7 days', 'value': 'last_7_days', 'days': 7},
    {'name': 'Last 30 days', 'value': 'last_30_days', 'days': 30},
    {'name': 'Last 90 days', 'value': 'last_90_days', 'days': 90},
    {'name': 'Last year', 'value': 'last_year', 'days': 365},
    {'name': 'All time', 'value': 'all_time', 'days': None},
]
EXPORT_FORMATS = ['csv', 'json']
REPORT_FORMATS = ['json', 'csv']
QUICK_EXPORTS = [
    {'title': 'Active alerts', 'category': 'alerts', 'dateRange': 'last_7_days', 'format': 'csv'},
    {'title': 'Published floor plans', 'category': 'floor_plans', 'dateRange': 'all_time', 'format': 'csv'},
    {'title': 'Monthly venue metrics', 'category': 'venue_metrics', 'dateRange': 'last_30_days', 'format': 'json'},
]
REPORT_TEMPLATES = [
    {
        'value': 'venue_performance',
        'name': 'Venue Performance',
        'description': 'Visitor activity, navigation usage and system health.',
        'category': 'Operations',
        'sections': ['summary', 'metrics', 'health'],
    },
    {
        'value': 'alert_summary',
        'name': 'Alert Summary',
        'description': 'Alert volumes by severity and geofence zone activity.',
        'category': 'Safety',
        'sections': ['summary', 'alerts', 'zones'],
    },
    {
        'value': 'asset_inventory',
        'name': 'Map & POI Inventory',
        'description': 'Floor plans by status and points of interest by category.',
        'category': 'Facilities',
        'sections': ['summary', 'floor_plans', 'points_of_interest'],
    },
]

CONTENT_TYPES = {'csv': 'text/csv', 'json': 'application/json'}


def range_start(date_range: str, now=None):
    now = now or timezone.now()
    days = next((r['days'] for r in DATE_RANGES if r['value'] == date_range), 30)
    return now - timedelta(days=days) if days else None


def export_options() -> dict:
    return {
        'dataCategories': DATA_CATEGORIES,
        'dateRanges': [{'name': r['name'], 'value': r['value']} for r in DATE_RANGES],
        'formats': EXPORT_FORMATS,
        'quickExports': QUICK_EXPORTS,
    }


def report_templates() -> list[dict]:
    return REPORT_TEMPLATES


def _since(qs, start, field='created_at'):
    return qs.filter(**{f'{field}__gte': start}) if start else qs


def export_rows(organization: Organization, category: str, start) -> list[dict]:
    if category == 'floor_plans':
        qs = _since(FloorPlan.objects.filter(organization=organization).select_related('building'), start)
        return [
            {'id': str(p.id), 'title': p.title, 'building': p.building.name, 'floorLabel': p.floor_label,
             'status': p.status, 'version': p.version, 'tags': ', '.join(p.tags), 'createdAt': p.created_at}
            for p in qs.order_by('created_at')
        ]
    if category == 'points_of_interest':
        qs = _since(PointOfInterest.objects.filter(organization=organization), start)
        return [
            {'id': str(p.id), 'name': p.name, 'category': p.category, 'building': p.building, 'floor': p.floor,
             'status': p.status, 'latitude': p.latitude, 'longitude': p.longitude, 'createdAt': p.created_at}
            for p in qs.order_by('created_at')
        ]
    if category == 'alerts':
        qs = _since(Alert.objects.filter(organization=organization), start)
        return [
            {'id': a.id, 'title': a.title, 'type': a.alert_type, 'severity': a.severity, 'status': a.status,
             'location': a.location, 'createdAt': a.created_at}
            for a in qs.order_by('created_at')
        ]
    if category == 'geofence_zones':
        qs = _since(GeofenceZone.objects.filter(organization=organization), start)
        return [
            {'id': z.id, 'name': z.name, 'alertType': z.alert_type, 'floor': z.floor, 'isActive': z.is_active,
             'triggerCount': z.trigger_count}
            for z in qs.order_by('name')
        ]
    if category == 'venue_metrics':
        return venue_series(organization, start)['series']
    raise ValueError(f"Unknown export category: {category}")


def _render(rows: list[dict], fmt: str) -> bytes:
    if fmt == 'json':
        return json.dumps(rows, cls=DjangoJSONEncoder, indent=2).encode('utf-8')
    buf = io.StringIO()
    if rows:
        writer = csv.DictWriter(buf, fieldnames=list(rows[0].keys()))
        writer.writeheader()
        for row in rows:
            writer.writerow({k: v.isoformat() if hasattr(v, 'isoformat') else v for k, v in row.items()})
    return buf.getvalue().encode('utf-8')


def _store(user, organization, *, kind, title, template, category, date_range, fmt, sections, content: bytes):
    stamp = timezone.now().strftime('%Y%m%d-%H%M%S')
    report = GeneratedReport(
        organization=organization, kind=kind, title=title, template=template, category=category,
        date_range=date_range, file_format=fmt, sections=sections, size=len(content), created_by=user,
    )
    report.file.save(f"{slugify(title) or kind}-{stamp}.{fmt}", ContentFile(content), save=False)
    report.save()
    log_action(user=user, action=f'{kind}_generated', organization=organization, object_type='report',
               object_id=report.id, detail={'title': title, 'format': fmt, 'size': report.size})
    logger.info("Generated %s %s (%d bytes)", kind, report.file.name, report.size)
    return report


def create_export(user, organization: Organization, category: str, date_range: str, fmt: str) -> GeneratedReport:
    rows = export_rows(organization, category, range_start(date_range))
    label = next(c['name'] for c in DATA_CATEGORIES if c['value'] == category)
    return _store(user, organization, kind=GeneratedReport.KIND_EXPORT, title=f"{label} export", template='',
                  category=category, date_range=date_range, fmt=fmt, sections=[], content=_render(rows, fmt))


def _report_section(organization: Organization, section: str, start) -> object:
    if section == 'summary':
        return {
            'organization': organization.name,
            'type': organization.organization_type,
            'generatedAt': timezone.now(),
            'rangeStart': start,
        }
    if section == 'metrics':
        agg = _since(VenueMetricSnapshot.objects.filter(organization=organization), start).aggregate(
            activePatients=Avg('active_patients'), navigationRequests=Sum('navigation_requests'),
            equipmentTracked=Avg('equipment_tracked'), emergencyAlerts=Sum('emergency_alerts'),
        )
        return {k: round(v, 1) if isinstance(v, float) else (v or 0) for k, v in agg.items()}
    if section == 'health':
        return [{'name': c.name, 'health': c.health, 'status': health_status(c.health)}
                for c in organization.health_checks.all()]
    if section == 'alerts':
        return alert_stats(organization)
    if section == 'zones':
        return export_rows(organization, 'geofence_zones', None)
    if section == 'floor_plans':
        return floor_plan_stats(Organization.objects.filter(id=organization.id))
    if section == 'points_of_interest':
        counts: dict[str, int] = {}
        for category in _since(PointOfInterest.objects.filter(organization=organization), start).values_list('category', flat=True):
            counts[category] = counts.get(category, 0) + 1
        return counts
    raise ValueError(f"Unknown report section: {section}")


def create_report(user, organization: Organization, template: str, sections: list[str], date_range: str,
                  fmt: str, title: Optional[str] = None) -> GeneratedReport:
    meta = next(t for t in REPORT_TEMPLATES if t['value'] == template)
    start = range_start(date_range)
    body = {section: _report_section(organization, section, start) for section in sections}
    if fmt == 'json':
        content = json.dumps(body, cls=DjangoJSONEncoder, indent=2).encode('utf-8')
    else:
        rows = []
        for section, value in body.items():
            items = value.items() if isinstance(value, dict) else enumerate(value)
            for key, item in items:
                rows.append({'section': section, 'key': key, 'value': json.dumps(item, cls=DjangoJSONEncoder)})
        content = _render(rows, 'csv')
    return _store(user, organization, kind=GeneratedReport.KIND_REPORT, title=title or meta['name'],
                  template=template, category=meta['category'], date_range=date_range, fmt=fmt,
                  sections=sections, content=content)


def format_report(report: GeneratedReport) -> dict:
    return {
        'id': report.id,
        'kind': report.kind,
        'title': report.title,
        'template': report.template or None,
        'category': report.category,
        'dateRange': report.date_range,
        'format': report.file_format,
        'sections': report.sections,
        'size': report.size,
        'createdAt': report.created_at.isoformat(),
        'downloadUrl': f'/api/analytics/reports/{report.id}/download',
    }


def recent_reports(user, limit: int = 10):
    return GeneratedReport.objects.filter(organization__in=scoped_organizations(user))[:limit]


def get_report(user, report_id) -> GeneratedReport:
    report = GeneratedReport.objects.filter(id=report_id, organization__in=scoped_organizations(user)).first()
    if report is None:
        raise NotFound('Report not found')
    return report


def venue_series(organization: Organization, start) -> dict:
    qs = _since(VenueMetricSnapshot.objects.filter(organization=organization), start).order_by('created_at', 'id')
    series = [
        {
            'date': s.created_at.date().isoformat(),
            'activePatients': s.active_patients,
            'equipmentTracked': s.equipment_tracked,
            'navigationRequests': s.navigation_requests,
            'emergencyAlerts': s.emergency_alerts,
        }
        for s in qs
    ]
    totals = {
        'navigationRequests': sum(p['navigationRequests'] for p in series),
        'emergencyAlerts': sum(p['emergencyAlerts'] for p in series),
        'peakActivePatients': max((p['activePatients'] for p in series), default=0),
    }
    return {'series': series, 'totals': totals}
