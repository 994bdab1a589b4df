"""
Turn raw, string-typed form values into request payloads.
"""
from __future__ import annotations

from typing import Any, Mapping, Optional

from facilities.exceptions import MissingContextError


def split_csv(value) -> list[str]:
    """``"a, b ,, c"`` -> ``["a", "b", "c"]``; lists are trimmed the same way."""
    if not value:
        return []
    parts = value if isinstance(value, (list, tuple)) else str(value).split(',')
    return [p.strip() for p in (str(x) for x in parts) if p.strip()]


def strip_empty(payload: Mapping[str, Any]) -> dict:
    """Drop top-level keys whose value is ``""`` or ``None``."""
    return {k: v for k, v in payload.items() if v != '' and v is not None}


def _text(values: Mapping[str, Any], key: str) -> str:
    raw = values.get(key)
    return '' if raw is None else str(raw).strip()


def _coordinate(raw) -> Optional[float]:
    if raw is None:
        return None
    if isinstance(raw, (int, float)):
        return float(raw)
    text = str(raw).strip()
    if not text:
        return None
    try:
        return float(text)
    except ValueError:
        return None


def _flag(values: Mapping[str, Any], key: str, default: bool = False) -> bool:
    raw = values.get(key, default)
    if isinstance(raw, str):
        return raw.strip().lower() in ('true', '1', 'on', 'yes')
    return bool(raw)


def require_organization(values: Mapping[str, Any], fallback: Optional[str] = None) -> str:
    organization_id = _text(values, 'organizationId') or (str(fallback) if fallback else '')
    if not organization_id:
        raise MissingContextError()
    return organization_id


def assemble_poi_payload(values: Mapping[str, Any], *, marker: Optional[Mapping[str, float]] = None,
                         organization_id: Optional[str] = None) -> dict:
    """Build the point-of-interest request payload from form values.

    A map ``marker`` (``{"lat", "lng"}``) wins over the typed latitude and
    longitude.  ``contact`` and ``mapCoordinates`` are left out when none of
    their fields has a value.
    """
    effective_org = require_organization(values, organization_id)

    lat = marker.get('lat') if marker else None
    lng = marker.get('lng') if marker else None
    if lat is None:
        lat = _coordinate(values.get('latitude'))
    if lng is None:
        lng = _coordinate(values.get('longitude'))

    payload: dict[str, Any] = {
        'organizationId': effective_org,
        'name': _text(values, 'name'),
        'category': _text(values, 'category'),
        'categoryType': _text(values, 'categoryType') or None,
        'building': _text(values, 'building'),
        'floor': _text(values, 'floor'),
        'roomNumber': _text(values, 'roomNumber') or None,
        'description': _text(values, 'description') or None,
        'tags': split_csv(values.get('tags')),
        'amenities': split_csv(values.get('amenities')),
        'accessibility': {
            'wheelchairAccessible': _flag(values, 'wheelchairAccessible'),
            'hearingLoop': _flag(values, 'hearingLoop'),
            'visualAidSupport': _flag(values, 'visualAidSupport'),
        },
        'status': _text(values, 'status') or 'Active',
        'isActive': _flag(values, 'isActive', True),
    }

    phone, email, hours = _text(values, 'phone'), _text(values, 'email'), _text(values, 'operatingHours')
    if phone or email or hours:
        payload['contact'] = strip_empty({'phone': phone, 'email': email, 'operatingHours': hours})

    if lat is not None or lng is not None:
        payload['mapCoordinates'] = strip_empty({'latitude': lat, 'longitude': lng})

    return {k: v for k, v in payload.items() if v is not None}


def assemble_organization_payload(values: Mapping[str, Any]) -> dict:
    """Organization form values minus empty fields."""
    fields = ('organizationType', 'name', 'email', 'phone', 'country', 'city',
              'timezone', 'address', 'venueTemplate', 'isActive')
    cleaned = {}
    for key in fields:
        if key not in values:
            continue
        value = values[key]
        cleaned[key] = value.strip() if isinstance(value, str) else value
    return strip_empty(cleaned)
