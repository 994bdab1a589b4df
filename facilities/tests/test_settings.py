import pytest

from facilities.models import ActivityEvent, UserPreference

pytestmark = pytest.mark.django_db


def test_profile_read_and_update(admin_client, admin_user, organization):
    r = admin_client.get('/api/settings/profile')
    profile = r.data['data']['profile']
    assert profile['firstName'] == 'Alice'
    assert profile['role'] == 'admin'
    assert profile['organizationId'] == str(organization.id)

    r = admin_client.patch('/api/settings/profile', {
        'jobTitle': ' Facilities <i>Lead</i> ', 'phone': '+1 555 0199',
    }, format='json')
    assert r.status_code == 200
    assert r.data['message'] == 'Profile updated successfully'
    admin_user.refresh_from_db()
    assert admin_user.job_title == 'Facilities Lead'
    assert admin_user.first_name == 'Alice'
    event = ActivityEvent.objects.get(action='profile_updated')
    assert sorted(event.detail['fields']) == ['job_title', 'phone']


def test_profile_rejects_bad_email(staff_client):
    r = staff_client.patch('/api/settings/profile', {'email': 'nope'}, format='json')
    assert r.status_code == 400
    assert 'email' in r.data['data']['errors']


def test_preferences_defaults_and_update(staff_client, staff_user):
    r = staff_client.get('/api/settings/preferences')
    assert r.data['data']['preferences'] == {
        'language': 'en', 'theme': 'system', 'timezone': 'America/New_York',
        'dateFormat': 'MM/DD/YYYY', 'defaultPage': 'dashboard',
    }
    r = staff_client.patch('/api/settings/preferences', {'theme': 'dark', 'timezone': 'Europe/Berlin'}, format='json')
    assert r.status_code == 200
    assert r.data['message'] == 'Preferences saved'
    prefs = UserPreference.objects.get(user=staff_user)
    assert (prefs.theme, prefs.timezone) == ('dark', 'Europe/Berlin')


def test_preferences_reject_unknown_timezone(staff_client):
    r = staff_client.patch('/api/settings/preferences', {'timezone': 'Mars/Olympus'}, format='json')
    assert r.status_code == 400
    assert r.data['data']['errors']['timezone'] == ['Unknown timezone']


def test_notification_settings(staff_client, staff_user):
    r = staff_client.patch('/api/settings/notifications', {'sms': True, 'sound': False}, format='json')
    assert r.status_code == 200
    assert r.data['message'] == 'Notification settings saved'
    assert r.data['data']['notifications'] == {
        'email': True, 'sms': True, 'push': True, 'sound': False, 'alertDigest': False,
    }


def test_settings_require_login(client):
    r = client.get('/api/settings/profile')
    assert r.status_code in (401, 403)
