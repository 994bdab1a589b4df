import threading

import pytest
from channels.db import database_sync_to_async
from channels.routing import URLRouter
from channels.testing import WebsocketCommunicator
from django.contrib.auth.models import AnonymousUser

from facilities.models import Organization
from facilities.realtime.routing import websocket_urlpatterns
from facilities.services import organizations as org_service

pytestmark = [pytest.mark.asyncio, pytest.mark.django_db(transaction=True)]

application = URLRouter(websocket_urlpatterns)


async def connect(path, user):
    communicator = WebsocketCommunicator(application, path)
    communicator.scope['user'] = user
    connected, code = await communicator.connect()
    return communicator, connected, code


async def send(communicator, **message):
    await communicator.send_json_to(message)
    return await communicator.receive_json_from(timeout=5)


@pytest.mark.parametrize('path', ['/ws/updates/', '/ws/forms/organization/', '/ws/forms/poi/'])
async def test_anonymous_socket_is_closed(path):
    _, connected, code = await connect(path, AnonymousUser())
    assert connected is False
    assert code == 4003


async def test_updates_socket_welcomes(admin_user):
    communicator, connected, _ = await connect('/ws/updates/', admin_user)
    assert connected
    assert await communicator.receive_json_from() == {'type': 'welcome', 'message': 'connected'}
    await communicator.disconnect()


async def test_organization_form_country_city_flow(admin_user):
    communicator, connected, _ = await connect('/ws/forms/organization/', admin_user)
    assert connected

    state = (await send(communicator, type='open', mode='create'))['data']
    assert state['isOpen'] is True
    assert state['selects']['city']['placeholder'] == 'Select a country first'

    await send(communicator, type='field.set', name='name', value='Northside Medical')
    loading = await send(communicator, type='select.choose', name='country', value='Canada')
    assert loading['data']['cityLoading'] is True
    assert loading['data']['selects']['city']['placeholder'] == 'Loading cities...'

    loaded = await communicator.receive_json_from(timeout=10)
    assert loaded['type'] == 'state'
    city = loaded['data']['selects']['city']
    assert city['placeholder'] == 'Select city'
    names = [o['value'] for o in city['options']]
    assert 'Toronto' in names
    assert names == sorted(names, key=str.casefold)

    await send(communicator, type='select.choose', name='city', value='Toronto')
    await communicator.send_json_to({'type': 'submit'})
    toast = await communicator.receive_json_from(timeout=5)
    assert toast == {'type': 'toast', 'level': 'success', 'message': 'Organization created successfully'}
    closed = await communicator.receive_json_from(timeout=5)
    assert closed['type'] == 'closed' and closed['data']['id']
    await communicator.disconnect()


async def test_poi_form_without_organization_toasts(super_user):
    communicator, _, _ = await connect('/ws/forms/poi/', super_user)
    await send(communicator, type='open')
    await send(communicator, type='field.set', name='name', value='Lost Property')
    await communicator.send_json_to({'type': 'submit'})
    toast = await communicator.receive_json_from(timeout=5)
    assert toast == {'type': 'toast', 'level': 'error', 'message': 'Organization is required.'}
    state = await communicator.receive_json_from(timeout=5)
    assert state['type'] == 'state' and state['data']['isOpen'] is True
    await communicator.disconnect()


async def test_bad_messages_are_answered_with_errors(admin_user):
    communicator, _, _ = await connect('/ws/forms/poi/', admin_user)
    await communicator.send_to(text_data='not json')
    assert (await communicator.receive_json_from())['message'] == 'Invalid JSON'

    reply = await send(communicator, type='launch')
    assert reply['code'] == 'unsupported_type'

    reply = await send(communicator, type='field.set', name='name', value='x')
    assert reply == {'type': 'error', 'code': 'rejected', 'message': 'The form is not open'}

    await send(communicator, type='open')
    reply = await send(communicator, type='marker.set', lat='north', lng=1)
    assert reply['message'] == 'Marker coordinates must be numbers'
    await communicator.disconnect()


async def test_view_mode_rejects_submit(admin_user, organization):
    communicator, _, _ = await connect('/ws/forms/organization/', admin_user)
    state = (await send(communicator, type='open', mode='view', id=str(organization.id)))['data']
    assert state['canSubmit'] is False
    pushed = await communicator.receive_json_from(timeout=10)
    assert pushed['data']['selects']['city']['disabled'] is True
    reply = await send(communicator, type='submit')
    assert reply == {'type': 'error', 'code': 'rejected', 'message': 'This form is read-only'}
    await communicator.disconnect()


async def test_open_missing_record_reports_not_found(admin_user, other_organization):
    communicator, _, _ = await connect('/ws/forms/organization/', admin_user)
    await send(communicator, type='open', mode='create')
    reply = await send(communicator, type='open', mode='edit', id=str(other_organization.id))
    assert reply == {'type': 'error', 'code': 'not_found', 'message': 'Organization not found'}
    reply = await send(communicator, type='submit')
    assert reply == {'type': 'error', 'code': 'rejected', 'message': 'The form is not open'}
    await communicator.disconnect()


async def test_form_is_locked_while_submit_runs(admin_user, monkeypatch):
    release = threading.Event()
    create = org_service.create_organization

    def slow_create(user, data):
        release.wait(5)
        return create(user, data)

    monkeypatch.setattr(org_service, 'create_organization', slow_create)
    communicator, _, _ = await connect('/ws/forms/organization/', admin_user)
    await send(communicator, type='open', mode='create')
    await send(communicator, type='field.set', name='name', value='Northside Medical')

    await communicator.send_json_to({'type': 'submit'})
    busy = {'type': 'error', 'code': 'rejected', 'message': 'A submission is already in progress'}
    assert await send(communicator, type='field.set', name='address', value='1 New Street') == busy
    assert await send(communicator, type='submit') == busy
    assert await send(communicator, type='close') == busy

    release.set()
    toast = await communicator.receive_json_from(timeout=5)
    assert toast == {'type': 'toast', 'level': 'success', 'message': 'Organization created successfully'}
    closed = await communicator.receive_json_from(timeout=5)
    assert closed['type'] == 'closed'
    org = await database_sync_to_async(Organization.objects.get)(id=closed['data']['id'])
    assert (org.name, org.address) == ('Northside Medical', '')
    await communicator.disconnect()
