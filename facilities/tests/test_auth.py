import pytest
from rest_framework.test import APIClient

from facilities.models import ActivityEvent

pytestmark = pytest.mark.django_db


def login(client, username='admin1', password='P@ssw0rd1'):
    return client.post('/api/auth/login', {'username': username, 'password': password}, format='json')


def test_login_issues_token_and_jwt_pair(admin_user, organization):
    client = APIClient()
    r = login(client)
    assert r.status_code == 200, r.data
    assert r.data['message'] == 'Login successful'
    data = r.data['data']
    assert data['token'] and data['access'] and data['refresh']
    assert data['user'] == {
        'id': admin_user.id, 'username': 'admin1', 'name': 'Alice Admin', 'email': '',
        'role': 'admin', 'organizationId': str(organization.id),
    }

    client.credentials(HTTP_AUTHORIZATION=f"Token {data['token']}")
    assert client.get('/api/organizations').status_code == 200

    jwt_client = APIClient()
    jwt_client.credentials(HTTP_AUTHORIZATION=f"Bearer {data['access']}")
    assert jwt_client.get('/api/organizations').status_code == 200


def test_bad_password_is_rejected_and_audited(admin_user):
    r = login(APIClient(), password='wrong')
    assert r.status_code == 400
    assert r.data['success'] is False
    assert r.data['message'] == 'Invalid username or password'
    event = ActivityEvent.objects.get(action='login')
    assert event.user is None
    assert event.detail['result'] == 'fail'
    assert event.detail['username'] == 'admin1'


def test_login_requires_fields():
    r = APIClient().post('/api/auth/login', {'username': ' '}, format='json')
    assert r.status_code == 400
    errors = r.data['data']['errors']
    assert errors['username'] == ['Username is required']
    assert errors['password'] == ['Password is required']


def test_refresh_and_logout(admin_user):
    client = APIClient()
    tokens = login(client).data['data']

    r = client.post('/api/auth/refresh', {'refresh': tokens['refresh']}, format='json')
    assert r.status_code == 200
    assert r.data['data']['access']

    client.credentials(HTTP_AUTHORIZATION=f"Token {tokens['token']}")
    r = client.post('/api/auth/logout', {'refresh': tokens['refresh']}, format='json')
    assert r.status_code == 200
    assert r.data['data'] == {'blacklisted': 1}

    r = APIClient().post('/api/auth/refresh', {'refresh': tokens['refresh']}, format='json')
    assert r.status_code == 401


def test_logout_without_refresh_blacklists_all(admin_user):
    client = APIClient()
    first = login(client).data['data']
    login(client)
    client.credentials(HTTP_AUTHORIZATION=f"Token {first['token']}")
    r = client.post('/api/auth/logout', {}, format='json')
    assert r.data['data'] == {'blacklisted': 2}


def test_refresh_with_garbage_token():
    r = APIClient().post('/api/auth/refresh', {'refresh': 'not-a-token'}, format='json')
    assert r.status_code == 401
    assert r.json()['success'] is False
