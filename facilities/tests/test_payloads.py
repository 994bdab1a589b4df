import pytest

from facilities.exceptions import MissingContextError
from facilities.services.payloads import (
    assemble_organization_payload,
    assemble_poi_payload,
    split_csv,
    strip_empty,
)
from facilities.sessions import flatten_errors

ORG_ID = '6f1c8a52-5d0e-4c43-9c1e-3f6a2b7d9e10'


def test_split_csv():
    assert split_csv('a, b ,, c') == ['a', 'b', 'c']
    assert split_csv('') == []
    assert split_csv(None) == []
    assert split_csv([' x ', '', 'y']) == ['x', 'y']


def test_strip_empty_only_top_level():
    assert strip_empty({'a': '', 'b': None, 'c': 0, 'd': False, 'e': {'x': ''}}) == {'c': 0, 'd': False, 'e': {'x': ''}}


def test_poi_payload_marker_wins_over_typed_coordinates():
    values = {'organizationId': ORG_ID, 'name': 'Pharmacy', 'latitude': '1.5', 'longitude': '2.5'}
    payload = assemble_poi_payload(values, marker={'lat': 42.36, 'lng': -71.06})
    assert payload['mapCoordinates'] == {'latitude': 42.36, 'longitude': -71.06}


def test_poi_payload_typed_coordinates_and_omitted_groups():
    payload = assemble_poi_payload({'organizationId': ORG_ID, 'name': 'Cafe', 'latitude': '10', 'longitude': ''})
    assert payload['mapCoordinates'] == {'latitude': 10.0}
    assert 'contact' not in payload

    payload = assemble_poi_payload({'organizationId': ORG_ID, 'name': 'Cafe'})
    assert 'mapCoordinates' not in payload
    assert 'contact' not in payload
    assert 'roomNumber' not in payload


def test_poi_payload_contact_and_lists():
    payload = assemble_poi_payload({
        'organizationId': ORG_ID, 'name': ' Lab ', 'email': 'lab@example.com', 'tags': 'a, b ,, c',
        'amenities': 'wifi', 'wheelchairAccessible': 'true', 'hearingLoop': 'false',
    })
    assert payload['name'] == 'Lab'
    assert payload['contact'] == {'email': 'lab@example.com'}
    assert payload['tags'] == ['a', 'b', 'c']
    assert payload['amenities'] == ['wifi']
    assert payload['accessibility'] == {'wheelchairAccessible': True, 'hearingLoop': False,
                                        'visualAidSupport': False}
    assert payload['status'] == 'Active'
    assert payload['isActive'] is True


def test_poi_payload_uses_fallback_organization():
    assert assemble_poi_payload({'name': 'Cafe'}, organization_id=ORG_ID)['organizationId'] == ORG_ID


def test_poi_payload_requires_organization():
    with pytest.raises(MissingContextError) as exc:
        assemble_poi_payload({'name': 'Cafe'})
    assert str(exc.value.detail) == 'Organization is required.'


def test_organization_payload_drops_empty_fields():
    payload = assemble_organization_payload({'name': ' Northside ', 'phone': '', 'email': None, 'isActive': False,
                                             'unknown': 'x'})
    assert payload == {'name': 'Northside', 'isActive': False}


def test_flatten_errors_maps_nested_fields():
    errors = {'contact': {'email': ['Enter a valid email']}, 'name': ['Name is required', 'other'],
              'mapCoordinates': {'latitude': ['bad']}}
    assert flatten_errors(errors) == {'email': 'Enter a valid email', 'name': 'Name is required', 'latitude': 'bad'}
