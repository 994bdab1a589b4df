import pytest
from django.core.cache import cache
from rest_framework.test import APIClient

from facilities.models import Building, Organization, User


@pytest.fixture(autouse=True)
def _isolated(settings, tmp_path):
    """Fresh cache (throttle counters, dashboard payloads) and media dir per test."""
    settings.MEDIA_ROOT = str(tmp_path / 'media')
    cache.clear()
    yield
    cache.clear()


@pytest.fixture
def organization(db):
    return Organization.objects.create(
        name='City General Hospital', organization_type='Hospital', email='info@citygeneral.example.com',
        phone='+1 555 0100', country='United States', city='Boston', timezone='America/New_York',
    )


@pytest.fixture
def other_organization(db):
    return Organization.objects.create(name='Riverside Mall', organization_type='Shopping Mall',
                                       country='Germany', city='Berlin', timezone='Europe/Berlin')


@pytest.fixture
def building(organization):
    return Building.objects.create(organization=organization, name='Main Building', floors=4)


@pytest.fixture
def admin_user(organization):
    return User.objects.create_user(username='admin1', password='P@ssw0rd1', role='admin',
                                    organization=organization, first_name='Alice', last_name='Admin')


@pytest.fixture
def staff_user(organization):
    return User.objects.create_user(username='staff1', password='P@ssw0rd1', role='staff',
                                    organization=organization)


@pytest.fixture
def super_user(db):
    return User.objects.create_user(username='super', password='P@ssw0rd1', role='super')


def client_for(user) -> APIClient:
    client = APIClient()
    client.force_authenticate(user=user)
    return client


@pytest.fixture
def admin_client(admin_user):
    return client_for(admin_user)


@pytest.fixture
def staff_client(staff_user):
    return client_for(staff_user)


@pytest.fixture
def super_client(super_user):
    return client_for(super_user)
