import pytest
from django.core.files.uploadedfile import SimpleUploadedFile

from facilities.models import FloorPlan
from facilities.services.floor_plans import parse_floor_number

pytestmark = pytest.mark.django_db

SVG = b'<svg xmlns="http://www.w3.org/2000/svg"></svg>'


def svg_upload(name='plan.svg', content=SVG, content_type='image/svg+xml'):
    return SimpleUploadedFile(name, content, content_type=content_type)


def upload(client, organization, building, **overrides):
    data = {
        'organizationId': str(organization.id),
        'buildingId': building.id,
        'floorLabel': 'Floor 3',
        'mapName': 'Main Building Level 3',
        'mapScale': '1:100',
        'description': 'Third floor wards',
        'tags': 'wards, icu',
        'file': svg_upload(),
    }
    data.update(overrides)
    return client.post('/api/floor-plans', data, format='multipart')


@pytest.mark.parametrize('label,number', [
    ('3', 3), ('L3', 3), ('Floor 3', 3), ('G', 0), ('Ground', 0), ('B1', -1), ('Mezzanine', None),
])
def test_parse_floor_number(label, number):
    assert parse_floor_number(label) == number


def test_upload_floor_plan(admin_client, organization, building):
    r = upload(admin_client, organization, building)
    assert r.status_code == 201, r.data
    plan = FloorPlan.objects.get()
    assert plan.floor_number == 3
    assert plan.status == FloorPlan.STATUS_DRAFT
    assert plan.tags == ['wards', 'icu']
    assert plan.version == 1
    assert plan.file_key == plan.file.name
    assert r.data['data']['floorPlan']['title'] == 'Main Building Level 3'


def test_upload_accepts_known_extension_with_generic_mime(admin_client, organization, building):
    r = upload(admin_client, organization, building,
               file=svg_upload('tower.dwg', b'AC1027', 'application/octet-stream'))
    assert r.status_code == 201, r.data


def test_upload_rejects_unknown_type(admin_client, organization, building):
    r = upload(admin_client, organization, building, file=svg_upload('notes.txt', b'hello', 'text/plain'))
    assert r.status_code == 400
    assert 'file' in r.data['data']['errors']
    assert not FloorPlan.objects.exists()


def test_upload_rejects_large_file(admin_client, organization, building, settings):
    settings.FLOOR_PLAN_MAX_MB = 1
    r = upload(admin_client, organization, building, file=svg_upload(content=b'0' * (1024 * 1024 + 1)))
    assert r.status_code == 400
    assert r.data['data']['errors']['file'] == ['File size must be less than 1MB']


@pytest.mark.parametrize('overrides,field', [
    ({'mapScale': '100'}, 'mapScale'),
    ({'mapName': 'A'}, 'mapName'),
    ({'description': 'x' * 501}, 'description'),
    ({'tags': 'ok, ' + 'x' * 41}, 'tags'),
    ({'latitude': '120'}, 'latitude'),
])
def test_upload_validation(admin_client, organization, building, overrides, field):
    r = upload(admin_client, organization, building, **overrides)
    assert r.status_code == 400
    assert field in r.data['data']['errors']


def test_status_transitions(admin_client, organization, building):
    upload(admin_client, organization, building)
    plan = FloorPlan.objects.get()
    url = f'/api/floor-plans/{plan.id}/status'

    r = admin_client.post(url, {'status': 'Disabled'}, format='json')
    assert r.status_code == 400

    r = admin_client.post(url, {'status': 'Published'}, format='json')
    assert r.status_code == 200
    plan.refresh_from_db()
    assert plan.status == 'Published' and plan.published_at is not None

    for step in ('Disabled', 'Archived', 'Draft'):
        r = admin_client.post(url, {'status': step}, format='json')
        assert r.status_code == 200, (step, r.data)


def test_replacing_file_bumps_version(admin_client, organization, building):
    upload(admin_client, organization, building)
    plan = FloorPlan.objects.get()
    r = admin_client.patch(f'/api/floor-plans/{plan.id}', {
        'file': svg_upload('plan-v2.svg'), 'versionNotes': 'Moved ICU',
    }, format='multipart')
    assert r.status_code == 200, r.data
    plan.refresh_from_db()
    assert plan.version == 2
    assert plan.version_notes == 'Moved ICU'

    admin_client.patch(f'/api/floor-plans/{plan.id}', {'mapName': 'Level 3 (renovated)'}, format='json')
    plan.refresh_from_db()
    assert plan.version == 2
    assert plan.title == 'Level 3 (renovated)'


def test_list_with_filters_stats_and_available_filters(staff_client, admin_client, organization, building):
    upload(admin_client, organization, building)
    upload(admin_client, organization, building, floorLabel='G', mapName='Lobby', tags='public')
    r = staff_client.get('/api/floor-plans', {'tag': 'ICU'})
    assert r.status_code == 200
    data = r.data['data']
    assert [p['title'] for p in data['floorPlans']] == ['Main Building Level 3']
    assert data['stats']['totalMaps'] == 2
    assert data['stats']['draftedMaps'] == 2
    assert data['stats']['buildings'] == 1
    assert data['availableFilters']['floorLabels'] == ['G', 'Floor 3']
    assert data['availableFilters']['tags'] == ['icu', 'public', 'wards']

    r = staff_client.get('/api/floor-plans', {'sortBy': 'floorNumber', 'sortOrder': 'asc'})
    assert [p['title'] for p in r.data['data']['floorPlans']] == ['Lobby', 'Main Building Level 3']


def test_staff_cannot_upload(staff_client, organization, building):
    r = upload(staff_client, organization, building)
    assert r.status_code == 403


def test_buildings_with_plan_counts(admin_client, organization, building):
    upload(admin_client, organization, building)
    r = admin_client.get(f'/api/organizations/{organization.id}/buildings')
    assert r.data['data']['buildings'] == [
        {'id': str(building.id), 'name': 'Main Building', 'floors': 4, 'floorPlans': 1},
    ]
