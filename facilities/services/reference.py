"""
Country, city and timezone reference data.

Countries come from ``pycountry``, cities from ``geonamescache`` keyed by
ISO alpha-2 code and timezones from ``pytz``.  Lookups never raise to the
caller: unknown countries and failed lookups are logged and degrade to an
empty option list.
"""
from __future__ import annotations

import logging
from collections import defaultdict
from datetime import datetime
from functools import lru_cache
from typing import Callable, Iterable, Optional

import pycountry
import pytz
from django.conf import settings
from geonamescache import GeonamesCache

from facilities.models import Organization, PointOfInterest

logger = logging.getLogger(__name__)

ORGANIZATION_TYPES = [value for value, _ in Organization.TYPE_CHOICES]
POI_STATUSES = [value for value, _ in PointOfInterest.STATUS_CHOICES]
POI_CATEGORY_TYPES = ["Medical Services", "Passenger Amenities", "Dining", "Leisure", "Security"]
POI_CATEGORIES = [
    "Emergency Department",
    "Reception",
    "Pharmacy",
    "Laboratory",
    "Radiology",
    "Outpatient Clinic",
    "Cafeteria",
    "Restroom",
    "Information Desk",
    "Waiting Area",
    "Gate",
    "Check-in Counter",
    "Baggage Claim",
    "Retail Store",
    "Parking",
    "Elevator",
    "Security Office",
]
DEFAULT_BUILDINGS = ["Main Building", "North Wing", "South Wing", "East Wing", "West Wing"]
DEFAULT_FLOORS = ["B1", "Ground", "1", "2", "3", "4", "5"]


@lru_cache(maxsize=1)
def _geonames() -> GeonamesCache:
    return GeonamesCache(min_city_population=settings.REFERENCE_MIN_CITY_POPULATION)


@lru_cache(maxsize=1)
def _cities_by_country() -> dict[str, list[str]]:
    index: dict[str, list[str]] = defaultdict(list)
    for city in _geonames().get_cities().values():
        index[city['countrycode']].append(city['name'])
    return dict(index)


@lru_cache(maxsize=1)
def countries() -> list[dict]:
    """All countries as ``{name, code}``, sorted by name."""
    items = [{'name': c.name, 'code': c.alpha_2} for c in pycountry.countries]
    return sorted(items, key=lambda c: c['name'].casefold())


def country_code(name: str) -> Optional[str]:
    name = (name or '').strip()
    if not name:
        return None
    try:
        return pycountry.countries.lookup(name).alpha_2
    except LookupError:
        return None


def is_known_country(name: str) -> bool:
    return country_code(name) is not None


def cities_for_code(code: str) -> list[str]:
    return list(_cities_by_country().get(code.upper(), []))


def city_options(country: str, current_city: str = '',
                 lookup: Callable[[str], Iterable[str]] = cities_for_code) -> list[str]:
    """Deduplicated, sorted city names for ``country``.

    ``current_city`` is prepended when the loaded list does not contain it so
    that an existing record's city stays selectable.  An unknown country or a
    failed lookup yields an empty list.
    """
    current_city = (current_city or '').strip()
    code = country_code(country)
    if not code:
        if country:
            logger.warning("Country code not found for %r", country)
        return []
    try:
        raw = lookup(code) or []
        cities = sorted({c.strip() for c in raw if c and c.strip()}, key=lambda c: (c.casefold(), c))
    except Exception:
        logger.exception("Error loading cities for %s (%s)", country, code)
        return []
    if not cities:
        logger.warning("No cities found for country code %s (%s)", code, country)
    if current_city and current_city not in cities:
        cities.insert(0, current_city)
    return cities


def _gmt_label(zone: str, now: datetime) -> str:
    offset = now.astimezone(pytz.timezone(zone)).utcoffset()
    minutes = int(offset.total_seconds() // 60) if offset else 0
    sign = '+' if minutes >= 0 else '-'
    minutes = abs(minutes)
    return f"(GMT{sign}{minutes // 60:02d}:{minutes % 60:02d}) {zone}"


def timezone_options(current: str = '', now: Optional[datetime] = None) -> list[dict]:
    """Timezone select options, e.g. ``(GMT-05:00) America/New_York``.

    A ``current`` zone missing from the list is prepended as-is.
    """
    now = now or datetime.now(pytz.UTC)
    options = [{'name': _gmt_label(zone, now), 'value': zone} for zone in pytz.common_timezones]
    if current and not any(o['value'] == current for o in options):
        options.insert(0, {'name': current, 'value': current})
    return options


def is_known_timezone(zone: str) -> bool:
    return zone in pytz.all_timezones_set


def poi_building_and_floor_options(organization: Optional[Organization]) -> tuple[list[str], list[str]]:
    """Building and floor choices for the POI form of ``organization``."""
    if organization is None:
        return list(DEFAULT_BUILDINGS), list(DEFAULT_FLOORS)
    buildings = list(organization.buildings.order_by('name').values_list('name', 'floors'))
    if not buildings:
        return list(DEFAULT_BUILDINGS), list(DEFAULT_FLOORS)
    top = max(floors for _, floors in buildings)
    floors = ["Ground"] + [str(n) for n in range(1, top + 1)]
    return [name for name, _ in buildings], floors
