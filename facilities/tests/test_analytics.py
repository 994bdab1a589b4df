import csv
import io
import json

import pytest

from facilities.models import Alert, GeneratedReport, PointOfInterest, VenueMetricSnapshot

pytestmark = pytest.mark.django_db


def body(response) -> bytes:
    return b''.join(response.streaming_content)


def test_export_options(staff_client):
    r = staff_client.get('/api/analytics/export-options')
    data = r.data['data']
    assert {'name': 'Alerts', 'value': 'alerts'} in data['dataCategories']
    assert data['formats'] == ['csv', 'json']
    assert data['quickExports']


def test_csv_export_downloads_and_is_recorded(staff_client, organization):
    Alert.objects.create(organization=organization, title='Exit opened', severity='High')
    Alert.objects.create(organization=organization, title='Gateway offline')
    r = staff_client.post('/api/analytics/exports', {'category': 'alerts', 'dateRange': 'last_7_days'}, format='json')
    assert r.status_code == 200
    assert r['Content-Type'] == 'text/csv'
    assert 'attachment' in r['Content-Disposition']
    rows = list(csv.DictReader(io.StringIO(body(r).decode('utf-8'))))
    assert [row['title'] for row in rows] == ['Exit opened', 'Gateway offline']

    report = GeneratedReport.objects.get()
    assert report.kind == GeneratedReport.KIND_EXPORT
    assert report.title == 'Alerts export'
    assert report.organization == organization


def test_json_export_of_points_of_interest(staff_client, organization):
    PointOfInterest.objects.create(organization=organization, name='Cafe', category='Cafeteria',
                                   building='Main Building', floor='G', latitude=1.5, longitude=2.5)
    r = staff_client.post('/api/analytics/exports', {
        'category': 'points_of_interest', 'format': 'json', 'dateRange': 'all_time',
    }, format='json')
    assert r['Content-Type'] == 'application/json'
    rows = json.loads(body(r))
    assert rows[0]['name'] == 'Cafe' and rows[0]['latitude'] == 1.5


def test_export_requires_category(staff_client):
    r = staff_client.post('/api/analytics/exports', {}, format='json')
    assert r.status_code == 400
    assert r.data['data']['errors']['category'] == ['Select a data category']


def test_generate_report_and_list_recent(admin_client, organization):
    r = admin_client.post('/api/analytics/reports', {
        'template': 'alert_summary', 'title': 'Weekly safety',
    }, format='json')
    assert r.status_code == 201, r.data
    report = r.data['data']['report']
    assert report['title'] == 'Weekly safety'
    assert report['sections'] == ['summary', 'alerts', 'zones']
    assert report['format'] == 'json'

    r = admin_client.get('/api/analytics/reports/recent')
    assert [x['id'] for x in r.data['data']['reports']] == [report['id']]

    r = admin_client.get(report['downloadUrl'])
    assert r.status_code == 200
    content = json.loads(body(r))
    assert content['summary']['organization'] == organization.name
    assert content['alerts']['overview'] == {'active': 0, 'acknowledged': 0, 'resolved': 0}


def test_report_rejects_unknown_section(admin_client):
    r = admin_client.post('/api/analytics/reports', {
        'template': 'venue_performance', 'sections': ['summary', 'payroll'],
    }, format='json')
    assert r.status_code == 400
    assert 'sections' in r.data['data']['errors']


def test_report_of_other_organization_is_hidden(admin_client, super_client, other_organization):
    r = super_client.post('/api/analytics/reports', {
        'template': 'asset_inventory', 'organizationId': str(other_organization.id),
    }, format='json')
    assert r.status_code == 201, r.data
    r = admin_client.get(f"/api/analytics/reports/{r.data['data']['report']['id']}/download")
    assert r.status_code == 404


def test_venue_series(staff_client, organization):
    VenueMetricSnapshot.objects.create(organization=organization, active_patients=10, navigation_requests=5)
    VenueMetricSnapshot.objects.create(organization=organization, active_patients=25, navigation_requests=7,
                                       emergency_alerts=1)
    r = staff_client.get(f'/api/analytics/venue/{organization.id}', {'range': 'last_30_days'})
    data = r.data['data']
    assert data['range'] == 'last_30_days'
    assert [p['activePatients'] for p in data['series']] == [10, 25]
    assert data['totals'] == {'navigationRequests': 12, 'emergencyAlerts': 1, 'peakActivePatients': 25}


def test_report_templates(staff_client):
    r = staff_client.get('/api/analytics/report-templates')
    assert [t['value'] for t in r.data['data']['templates']] == ['venue_performance', 'alert_summary', 'asset_inventory']
