import asyncio
import threading
import uuid

import pytest
from channels.db import database_sync_to_async
from rest_framework.exceptions import NotFound

from facilities.models import Organization, PointOfInterest
from facilities.services import organizations as org_service
from facilities.services.cascade import LOADING_PLACEHOLDER, NO_COUNTRY_PLACEHOLDER, READY_PLACEHOLDER
from facilities.sessions import (
    BUSY_MESSAGE,
    READ_ONLY_MESSAGE,
    OrganizationFormSession,
    PointOfInterestFormSession,
    SessionError,
)

pytestmark = [pytest.mark.asyncio, pytest.mark.django_db(transaction=True)]

CITIES = {'CA': ['Toronto', 'Ottawa', 'Montreal'], 'US': ['Boston', 'Austin']}


def lookup(code):
    return CITIES.get(code, [])


class Updates:
    def __init__(self):
        self.count = 0

    async def __call__(self):
        self.count += 1


def org_session(user, updates=None):
    return OrganizationFormSession(user, on_update=updates, city_lookup=lookup)


async def test_country_choice_loads_cities_then_submits(admin_user):
    updates = Updates()
    session = org_session(admin_user, updates)
    await session.open('create')
    city = session.state()['selects']['city']
    assert city['placeholder'] == NO_COUNTRY_PLACEHOLDER
    assert city['disabled'] is True

    session.set_field('name', 'Northside Medical')
    assert session.select_choose('country', 'Canada')
    state = session.state()
    assert state['cityLoading'] is True
    assert state['selects']['city']['placeholder'] == LOADING_PLACEHOLDER

    await session.cascade.pending
    assert updates.count == 1
    city = session.state()['selects']['city']
    assert city['placeholder'] == READY_PLACEHOLDER
    assert [o['value'] for o in city['options']] == ['Montreal', 'Ottawa', 'Toronto']

    assert session.select_choose('city', 'Toronto')
    assert session.select_choose('timezone', 'America/Toronto')
    toast = await session.submit()
    assert toast == {'level': 'success', 'message': 'Organization created successfully'}
    assert session.is_open is False
    org = await database_sync_to_async(Organization.objects.get)(id=session.record_id)
    assert (org.country, org.city, org.timezone) == ('Canada', 'Toronto', 'America/Toronto')
    assert org.created_by_id == admin_user.id


async def test_changing_country_clears_city(admin_user, organization):
    session = org_session(admin_user)
    await session.open('edit', str(organization.id))
    assert session.values['country'] == 'United States'
    assert session.values['city'] == 'Boston'
    await session.cascade.pending

    session.select_choose('country', 'Canada')
    assert session.values['city'] == ''
    assert session.state()['selects']['city']['value'] == ''
    await session.cascade.pending
    assert session.cascade.options == ['Montreal', 'Ottawa', 'Toronto']


async def test_blur_shows_errors_only_for_touched_fields(admin_user):
    session = org_session(admin_user)
    await session.open('create')
    session.set_field('email', 'not-an-email')
    session.blur('email')
    state = session.state()
    assert state['errors'] == {'email': 'Enter a valid email'}
    session.blur('name')
    assert session.state()['errors']['name'] == 'Organization name is required'


async def test_validation_failure_keeps_form_open(admin_user):
    session = org_session(admin_user)
    await session.open('create')
    session.set_field('name', 'X')
    assert await session.submit() is None
    state = session.state()
    assert state['isOpen'] is True
    assert state['errors']['name'] == 'Organization name must be at least 2 characters'
    assert state['submitting'] is False


async def test_edit_sends_only_fields_with_value(admin_user, organization):
    session = org_session(admin_user)
    await session.open('edit', str(organization.id))
    session.set_field('phone', '')
    session.set_field('name', 'City General')
    toast = await session.submit()
    assert toast['message'] == 'Organization updated successfully'
    await database_sync_to_async(organization.refresh_from_db)()
    assert organization.name == 'City General'
    assert organization.phone == '+1 555 0100'


async def test_view_mode_is_read_only(admin_user, organization):
    session = org_session(admin_user)
    await session.open('view', str(organization.id))
    assert all(s['disabled'] for s in session.state()['selects'].values())
    assert session.state()['canSubmit'] is False
    session.set_field('name', 'Changed')
    assert session.values['name'] == organization.name
    with pytest.raises(SessionError, match=READ_ONLY_MESSAGE):
        await session.submit()


async def test_edits_are_rejected_while_submit_is_running(admin_user, monkeypatch):
    release = threading.Event()
    create = org_service.create_organization

    def slow_create(user, data):
        release.wait(5)
        return create(user, data)

    monkeypatch.setattr(org_service, 'create_organization', slow_create)
    session = org_session(admin_user)
    await session.open('create')
    session.set_field('name', 'Northside Medical')

    task = asyncio.ensure_future(session.start_submit())
    assert session.submitting is True
    assert session.state()['canSubmit'] is False
    with pytest.raises(SessionError, match=BUSY_MESSAGE):
        await session.submit()
    with pytest.raises(SessionError, match=BUSY_MESSAGE):
        session.set_field('address', '1 New Street')
    with pytest.raises(SessionError, match=BUSY_MESSAGE):
        session.select_choose('country', 'Canada')
    with pytest.raises(SessionError, match=BUSY_MESSAGE):
        session.blur('name')
    with pytest.raises(SessionError, match=BUSY_MESSAGE):
        await session.open('create')

    release.set()
    toast = await task
    assert toast == {'level': 'success', 'message': 'Organization created successfully'}
    org = await database_sync_to_async(Organization.objects.get)(id=session.record_id)
    assert (org.name, org.address, org.country) == ('Northside Medical', '', '')


async def test_failed_open_leaves_form_closed(admin_user, other_organization):
    session = org_session(admin_user)
    await session.open('create')
    with pytest.raises(NotFound):
        await session.open('edit', str(other_organization.id))
    assert session.state()['isOpen'] is False
    assert session.organization is None
    with pytest.raises(SessionError, match='The form is not open'):
        await session.submit()
    with pytest.raises(SessionError, match='The form is not open'):
        session.set_field('name', 'Hijacked')


async def test_failed_poi_open_leaves_form_closed(admin_user, organization):
    session = PointOfInterestFormSession(admin_user)
    await session.open('create', organization_id=str(organization.id))
    with pytest.raises(NotFound):
        await session.open('edit', str(uuid.uuid4()))
    assert session.is_open is False
    with pytest.raises(SessionError, match='The form is not open'):
        await session.submit()


async def test_create_form_starts_with_default_timezone(admin_user, organization, settings):
    settings.DEFAULT_TIMEZONE = 'Europe/London'
    session = org_session(admin_user)
    await session.open('create')
    state = session.state()
    assert state['values']['timezone'] == 'Europe/London'
    assert state['selects']['timezone']['displayValue'].endswith('Europe/London')

    await session.open('edit', str(organization.id))
    assert session.values['timezone'] == 'America/New_York'


async def test_unknown_field_and_select(admin_user):
    session = org_session(admin_user)
    with pytest.raises(SessionError):
        session.set_field('name', 'closed form')
    await session.open('create')
    with pytest.raises(SessionError):
        session.set_field('salary', 1)
    with pytest.raises(SessionError):
        session.set_field('country', 'Canada')
    with pytest.raises(SessionError):
        session.select_toggle('colour')


async def test_toggle_closes_other_dropdowns(admin_user):
    session = org_session(admin_user)
    await session.open('create')
    session.select_toggle('organizationType')
    session.select_toggle('country')
    selects = session.state()['selects']
    assert selects['country']['isOpen'] is True
    assert selects['organizationType']['isOpen'] is False
    session.select_search('country', 'canad')
    assert session.select_key('country', 'Enter') is True
    assert session.values['country'] == 'Canada'


async def test_poi_without_organization_shows_toast(super_user):
    session = PointOfInterestFormSession(super_user)
    await session.open('create')
    session.set_field('name', 'Lost Property')
    toast = await session.submit()
    assert toast == {'level': 'error', 'message': 'Organization is required.'}
    assert session.is_open is True


async def test_poi_create_uses_marker(admin_user, organization, building):
    session = PointOfInterestFormSession(admin_user)
    await session.open('create')
    assert session.values['organizationId'] == str(organization.id)
    assert [o['value'] for o in session.state()['selects']['building']['options']] == ['Main Building']

    session.set_field('name', 'Main Pharmacy')
    session.select_choose('category', 'Pharmacy')
    session.select_choose('building', 'Main Building')
    session.select_choose('floor', '1')
    session.set_field('latitude', '10')
    session.set_marker(42.5, -71.25)
    toast = await session.submit()
    assert toast == {'level': 'success', 'message': 'Point of interest created successfully'}
    poi = await database_sync_to_async(PointOfInterest.objects.get)(id=session.record_id)
    assert (poi.latitude, poi.longitude) == (42.5, -71.25)


async def test_poi_missing_fields_are_reported(admin_user, organization):
    session = PointOfInterestFormSession(admin_user)
    await session.open('create')
    assert await session.submit() is None
    errors = session.state()['errors']
    assert errors['name'] == 'Name is required'
    assert errors['category'] == 'Category is required'
    assert session.state()['selects']['category']['error'] == 'Category is required'
