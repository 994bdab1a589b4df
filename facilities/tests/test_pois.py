import pytest

from facilities.models import PointOfInterest

pytestmark = pytest.mark.django_db


def form_values(**overrides):
    values = {
        'name': 'Main Pharmacy',
        'category': 'Pharmacy',
        'building': 'Main Building',
        'floor': '1',
        'status': 'Active',
        'tags': 'a, b ,, c',
        'amenities': 'wifi, seating',
        'latitude': '42.36',
        'longitude': '-71.06',
    }
    values.update(overrides)
    return values


def test_create_poi_from_form_values(admin_client, organization):
    r = admin_client.post(f'/api/organizations/{organization.id}/points-of-interest', form_values(), format='json')
    assert r.status_code == 201, r.data
    assert r.data['message'] == 'Point of interest created successfully'
    poi = PointOfInterest.objects.get(name='Main Pharmacy')
    assert poi.organization == organization
    assert poi.tags == ['a', 'b', 'c']
    assert poi.amenities == ['wifi', 'seating']
    assert (poi.latitude, poi.longitude) == (42.36, -71.06)
    assert poi.contact is None
    data = r.data['data']['pointOfInterest']
    assert data['mapCoordinates'] == {'latitude': 42.36, 'longitude': -71.06}
    assert data['organization'] == {'id': str(organization.id), 'name': organization.name}


def test_marker_wins_over_typed_coordinates(admin_client, organization):
    values = form_values(marker={'lat': 1.25, 'lng': 2.5})
    r = admin_client.post(f'/api/organizations/{organization.id}/points-of-interest', values, format='json')
    assert r.status_code == 201, r.data
    poi = PointOfInterest.objects.get()
    assert (poi.latitude, poi.longitude) == (1.25, 2.5)


def test_contact_included_when_any_part_present(admin_client, organization):
    r = admin_client.post(f'/api/organizations/{organization.id}/points-of-interest',
                          form_values(operatingHours='24/7'), format='json')
    assert r.status_code == 201
    assert PointOfInterest.objects.get().contact == {'operatingHours': '24/7'}


@pytest.mark.parametrize('overrides,field,message', [
    ({'name': ''}, 'name', 'Name is required'),
    ({'category': ''}, 'category', 'Category is required'),
    ({'latitude': '91'}, 'latitude', 'Latitude must be between -90 and 90'),
    ({'longitude': 'east'}, 'longitude', 'Longitude must be between -180 and 180'),
    ({'email': 'nope'}, 'email', 'Enter a valid email'),
])
def test_form_validation(admin_client, organization, overrides, field, message):
    r = admin_client.post(f'/api/organizations/{organization.id}/points-of-interest',
                          form_values(**overrides), format='json')
    assert r.status_code == 400
    assert r.data['data']['errors'][field] == [message]
    assert not PointOfInterest.objects.exists()


def test_list_and_filter(staff_client, organization):
    PointOfInterest.objects.create(organization=organization, name='Cafe', category='Cafeteria',
                                   building='Main Building', floor='G')
    PointOfInterest.objects.create(organization=organization, name='Lab', category='Laboratory',
                                   building='Main Building', floor='2', status='Maintenance')
    r = staff_client.get(f'/api/organizations/{organization.id}/points-of-interest')
    assert [p['name'] for p in r.data['data']['pointsOfInterest']] == ['Cafe', 'Lab']
    r = staff_client.get(f'/api/organizations/{organization.id}/points-of-interest', {'status': 'Maintenance'})
    assert [p['name'] for p in r.data['data']['pointsOfInterest']] == ['Lab']


def test_staff_cannot_create(staff_client, organization):
    r = staff_client.post(f'/api/organizations/{organization.id}/points-of-interest', form_values(), format='json')
    assert r.status_code == 403


def test_update_keeps_fields_without_value(admin_client, organization):
    poi = PointOfInterest.objects.create(organization=organization, name='Cafe', category='Cafeteria',
                                         building='Main Building', floor='G', room_number='G-12',
                                         tags=['food'])
    r = admin_client.patch(f'/api/points-of-interest/{poi.id}', {
        'name': 'Garden Cafe', 'roomNumber': '', 'tags': 'food, coffee', 'organizationId': '',
    }, format='json')
    assert r.status_code == 200, r.data
    assert r.data['message'] == 'Point of interest updated successfully'
    poi.refresh_from_db()
    assert poi.name == 'Garden Cafe'
    assert poi.room_number == 'G-12'
    assert poi.tags == ['food', 'coffee']


def test_poi_of_other_organization_is_hidden(admin_client, other_organization):
    poi = PointOfInterest.objects.create(organization=other_organization, name='Shop', category='Retail Store',
                                         building='Mall', floor='1')
    r = admin_client.get(f'/api/points-of-interest/{poi.id}')
    assert r.status_code == 404
