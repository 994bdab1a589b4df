import pytest

from facilities.models import Alert, GeofenceZone

pytestmark = pytest.mark.django_db


@pytest.fixture
def zone(organization):
    return GeofenceZone.objects.create(organization=organization, name='Pharmacy Storage',
                                       alert_type='Restricted', floor='B1')


def test_create_alert_counts_zone_trigger(admin_client, organization, zone):
    r = admin_client.post('/api/alerts', {
        'name': 'Door forced <b>open</b>', 'priority': 'High', 'alertType': 'Unauthorized Entry',
        'zoneId': zone.id, 'location': 'Storage', 'floor': 'B1',
    }, format='json')
    assert r.status_code == 201, r.data
    assert r.data['message'] == 'Alert created successfully'
    alert = Alert.objects.get()
    assert alert.title == 'Door forced open'
    assert alert.organization == organization
    assert alert.status == Alert.STATUS_ACTIVE
    zone.refresh_from_db()
    assert zone.trigger_count == 1


def test_create_alert_rejects_foreign_zone(admin_client, other_organization):
    foreign = GeofenceZone.objects.create(organization=other_organization, name='Loading Dock')
    r = admin_client.post('/api/alerts', {'name': 'Tag lost', 'zoneId': foreign.id}, format='json')
    assert r.status_code == 400
    assert 'zoneId' in r.data['data']['errors']


def test_alert_requires_organization_context(super_client):
    r = super_client.get('/api/alerts')
    assert r.status_code == 400
    assert r.data['message'] == 'Organization is required.'


def test_alert_lifecycle(admin_client, organization):
    alert = Alert.objects.create(organization=organization, title='Low battery on tag 12', severity='Low')
    r = admin_client.post(f'/api/alerts/{alert.id}/acknowledge')
    assert r.status_code == 200
    assert r.data['data']['alert']['status'] == 'Acknowledged'
    assert r.data['data']['alert']['acknowledgedAt']

    r = admin_client.post(f'/api/alerts/{alert.id}/acknowledge')
    assert r.status_code == 400

    r = admin_client.post(f'/api/alerts/{alert.id}/resolve')
    assert r.status_code == 200
    alert.refresh_from_db()
    assert alert.status == 'Resolved' and alert.resolved_at is not None

    r = admin_client.post(f'/api/alerts/{alert.id}/resolve')
    assert r.status_code == 400


def test_list_filters_and_stats(staff_client, organization, zone):
    Alert.objects.create(organization=organization, title='Exit opened', severity='High', alert_type='Emergency Exit')
    Alert.objects.create(organization=organization, title='Gateway offline', severity='Medium')
    Alert.objects.create(organization=organization, title='Old', severity='High', status='Resolved')

    r = staff_client.get('/api/alerts', {'status': 'Active', 'severity': 'High'})
    assert [a['title'] for a in r.data['data']['alerts']] == ['Exit opened']

    r = staff_client.get('/api/alerts/stats')
    data = r.data['data']
    assert data['stats'] == {'activeAlerts': 2, 'critical': 1, 'geofenceZones': 1, 'zoneTriggers': 0}
    assert data['overview'] == {'active': 2, 'acknowledged': 0, 'resolved': 1}


def test_staff_cannot_acknowledge(staff_client, organization):
    alert = Alert.objects.create(organization=organization, title='Exit opened')
    r = staff_client.post(f'/api/alerts/{alert.id}/acknowledge')
    assert r.status_code == 403


def test_alert_of_other_organization_is_hidden(admin_client, other_organization):
    alert = Alert.objects.create(organization=other_organization, title='Mall alarm')
    r = admin_client.post(f'/api/alerts/{alert.id}/resolve')
    assert r.status_code == 404


def test_geofence_zones(admin_client, zone):
    r = admin_client.post('/api/geofence-zones', {
        'name': 'Nursery', 'type': 'Alert', 'notifications': {'sms': True, 'email': False},
    }, format='json')
    assert r.status_code == 201, r.data
    created = GeofenceZone.objects.get(name='Nursery')
    assert created.notify_sms is True and created.notify_email is False
    assert created.notify_push is True

    r = admin_client.patch(f'/api/geofence-zones/{zone.id}', {'isActive': False}, format='json')
    assert r.status_code == 200, r.data
    zone.refresh_from_db()
    assert zone.is_active is False
    assert zone.name == 'Pharmacy Storage'

    r = admin_client.get('/api/geofence-zones')
    assert [z['name'] for z in r.data['data']['zones']] == ['Nursery', 'Pharmacy Storage']
