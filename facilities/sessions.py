"""
Server-side state of the organization and point-of-interest modal forms.

A form session belongs to one WebSocket connection.  It keeps the raw
field values, per-field errors and touched flags, the dropdown states and
(for organizations) the country -> city cascade.  ``submit`` assembles the
payload, validates it with the REST serializers and calls the same
services the REST views use; the outcome comes back as a toast.

Only one submit may be in flight per session.
"""
from __future__ import annotations

import logging
from typing import Any, Awaitable, Callable, Optional

from asgiref.sync import sync_to_async
from django.conf import settings
from rest_framework.exceptions import APIException, ValidationError

from .exceptions import MissingContextError
from .serializers.organizations import OrganizationSerializer
from .serializers.pois import PointOfInterestFormSerializer, PointOfInterestSerializer
from .services import organizations as org_service
from .services import pois as poi_service
from .services import reference
from .services.cascade import CityCascade
from .services.payloads import assemble_organization_payload, assemble_poi_payload, require_organization, strip_empty
from .services.selects import SelectState

logger = logging.getLogger(__name__)

MODE_CREATE = 'create'
MODE_EDIT = 'edit'
MODE_VIEW = 'view'
MODES = (MODE_CREATE, MODE_EDIT, MODE_VIEW)

TOAST_SUCCESS = 'success'
TOAST_ERROR = 'error'

BUSY_MESSAGE = 'A submission is already in progress'
READ_ONLY_MESSAGE = 'This form is read-only'

# Nested payload errors are reported on the form field that produced them.
ERROR_FIELD_ALIASES = {
    'contact.phone': 'phone',
    'contact.email': 'email',
    'contact.operatingHours': 'operatingHours',
    'mapCoordinates.latitude': 'latitude',
    'mapCoordinates.longitude': 'longitude',
}


class SessionError(Exception):
    """A client message the session cannot act on."""


def flatten_errors(errors, prefix: str = '') -> dict[str, str]:
    """``{'contact': {'email': ['...']}}`` -> ``{'email': '...'}``; first message per field."""
    flat: dict[str, str] = {}
    if isinstance(errors, dict):
        for key, value in errors.items():
            path = f'{prefix}.{key}' if prefix else str(key)
            for name, message in flatten_errors(value, path).items():
                flat.setdefault(name, message)
    elif isinstance(errors, (list, tuple)):
        if errors:
            if isinstance(errors[0], (dict, list, tuple)):
                return flatten_errors(errors[0], prefix)
            flat[ERROR_FIELD_ALIASES.get(prefix, prefix or 'nonFieldErrors')] = str(errors[0])
    else:
        flat[ERROR_FIELD_ALIASES.get(prefix, prefix or 'nonFieldErrors')] = str(errors)
    return flat


class FormSession:
    kind = ''
    fields: tuple = ()
    create_message = ''
    update_message = ''
    failure_message = ''

    def __init__(self, user, *, on_update: Optional[Callable[[], Awaitable[None]]] = None):
        self.user = user
        self.on_update = on_update
        self.mode = MODE_CREATE
        self.record_id: Optional[str] = None
        self.values: dict[str, Any] = {name: '' for name in self.fields}
        self.errors: dict[str, str] = {}
        self.touched: set[str] = set()
        self.selects: dict[str, SelectState] = {}
        self.submitting = False
        self.is_open = False

    # -- lifecycle -----------------------------------------------------

    async def open(self, mode: str = MODE_CREATE, record_id: Optional[str] = None, **context) -> None:
        if mode not in MODES:
            raise SessionError(f'Unknown mode: {mode}')
        if mode != MODE_CREATE and not record_id:
            raise SessionError('An id is required to edit or view a record')
        if self.submitting:
            raise SessionError(BUSY_MESSAGE)
        # Stays closed until the record has loaded.
        self.close()
        self.mode = mode
        self.record_id = str(record_id) if record_id else None
        self.values = {name: '' for name in self.fields}
        self.errors = {}
        self.touched = set()
        await self.load(**context)
        self.is_open = True
        if self.read_only:
            for select in self.selects.values():
                select.disabled = True

    async def load(self, **context) -> None:
        raise NotImplementedError

    def close(self) -> None:
        self.is_open = False
        for select in self.selects.values():
            select.close()

    @property
    def read_only(self) -> bool:
        return self.mode == MODE_VIEW

    # -- field events --------------------------------------------------

    def _require_open(self) -> None:
        if not self.is_open:
            raise SessionError('The form is not open')

    def _require_idle(self) -> None:
        self._require_open()
        if self.submitting:
            raise SessionError(BUSY_MESSAGE)

    def set_field(self, name: str, value: Any) -> None:
        self._require_idle()
        if name not in self.fields:
            raise SessionError(f'Unknown field: {name}')
        if name in self.selects:
            raise SessionError(f'{name} is chosen from a dropdown')
        if self.read_only:
            return
        self.values[name] = value
        self.errors.pop(name, None)

    def blur(self, name: str) -> None:
        self._require_idle()
        if name not in self.fields:
            raise SessionError(f'Unknown field: {name}')
        self.touched.add(name)
        self.errors = self.validate()

    def select(self, name: str) -> SelectState:
        self._require_idle()
        try:
            return self.selects[name]
        except KeyError:
            raise SessionError(f'Unknown dropdown: {name}') from None

    def select_toggle(self, name: str) -> None:
        target = self.select(name)
        for other in self.selects.values():
            if other is not target:
                other.close()
        target.toggle()

    def select_outside(self) -> None:
        self._require_idle()
        for select in self.selects.values():
            select.click_outside()

    def select_key(self, name: str, key: str) -> bool:
        return self.select(name).press_key(key)

    def select_search(self, name: str, query: str) -> None:
        self.select(name).set_query(query)

    def select_choose(self, name: str, value: Any) -> bool:
        return self.select(name).choose(value)

    def _select_changed(self, name: str) -> Callable[[Any], None]:
        def changed(value):
            self.values[name] = value
            self.errors.pop(name, None)
            self.touched.add(name)
            self.on_select_change(name, value)
        return changed

    def on_select_change(self, name: str, value: Any) -> None:
        pass

    def _add_select(self, name: str, options, **kwargs) -> SelectState:
        select = SelectState(name, options, on_change=self._select_changed(name), **kwargs)
        self.selects[name] = select
        return select

    # -- validation and submit -----------------------------------------

    def validate(self) -> dict[str, str]:
        """Client-side checks that need no database access."""
        return {}

    def _sync_select_errors(self) -> None:
        for name, select in self.selects.items():
            select.error = self.errors.get(name)
            select.touched = name in self.touched
            select.value = self.values.get(name, select.value)

    def save(self):
        raise NotImplementedError

    def submit_guard(self) -> None:
        """Raise :class:`SessionError` when a submit would be rejected right now."""
        self._require_open()
        if self.read_only:
            raise SessionError(READ_ONLY_MESSAGE)
        if self.submitting:
            raise SessionError(BUSY_MESSAGE)

    def start_submit(self) -> Awaitable[Optional[dict]]:
        """Mark the session busy and return the pending save.

        Field and dropdown events are rejected from this call until the save
        finishes.
        """
        self.submit_guard()
        self.submitting = True
        return self._run_submit()

    async def submit(self) -> Optional[dict]:
        """Validate and save; returns the toast to show, or ``None`` on validation errors."""
        return await self.start_submit()

    async def _run_submit(self) -> Optional[dict]:
        try:
            await sync_to_async(self.save)()
        except MissingContextError as e:
            return {'level': TOAST_ERROR, 'message': str(e.detail)}
        except ValidationError as e:
            self.errors = flatten_errors(e.detail)
            self.touched.update(self.errors)
            return None
        except APIException as e:
            logger.warning("%s form submit rejected: %s", self.kind, e.detail)
            return {'level': TOAST_ERROR, 'message': str(e.detail) or self.failure_message}
        except Exception:
            logger.exception("%s form submit failed", self.kind)
            return {'level': TOAST_ERROR, 'message': self.failure_message}
        finally:
            self.submitting = False
        message = self.update_message if self.mode == MODE_EDIT else self.create_message
        self.close()
        return {'level': TOAST_SUCCESS, 'message': message}

    # -- rendering -----------------------------------------------------

    def state(self) -> dict:
        self._sync_select_errors()
        return {
            'form': self.kind,
            'mode': self.mode,
            'id': self.record_id,
            'isOpen': self.is_open,
            'values': dict(self.values),
            'errors': {k: v for k, v in self.errors.items() if k in self.touched},
            'touched': sorted(self.touched),
            'selects': {name: select.as_dict() for name, select in self.selects.items()},
            'submitting': self.submitting,
            'canSubmit': self.is_open and not self.read_only and not self.submitting,
        }


class OrganizationFormSession(FormSession):
    kind = 'organization'
    fields = ('organizationType', 'name', 'email', 'phone', 'country', 'city',
              'timezone', 'address', 'venueTemplate', 'isActive')
    create_message = 'Organization created successfully'
    update_message = 'Organization updated successfully'
    failure_message = 'Failed to save organization'

    def __init__(self, user, *, on_update=None, city_lookup=reference.cities_for_code):
        super().__init__(user, on_update=on_update)
        self.cascade = CityCascade(city_lookup, on_loaded=self._cities_loaded)
        self.organization = None

    async def load(self, **context) -> None:
        self.values['organizationType'] = reference.ORGANIZATION_TYPES[0]
        self.values['isActive'] = True
        self.values['timezone'] = settings.DEFAULT_TIMEZONE
        self.organization = None
        if self.mode != MODE_CREATE:
            self.organization = await sync_to_async(org_service.get_organization)(
                self.user, self.record_id)
            data = org_service.format_organization(self.organization)
            for name in self.fields:
                value = data.get(name)
                self.values[name] = '' if value is None else value

        self.selects = {}
        self._add_select('organizationType', reference.ORGANIZATION_TYPES, value=self.values['organizationType'],
                         label='Organization Type', placeholder='Select organization type', required=True)
        self._add_select('country', [c['name'] for c in reference.countries()], value=self.values['country'],
                         label='Country', placeholder='Select country', searchable=True)
        self._add_select('city', [], value=self.values['city'], label='City', searchable=True)
        self._add_select('timezone', reference.timezone_options(self.values['timezone']),
                         value=self.values['timezone'], label='Timezone', placeholder='Select timezone',
                         searchable=True)

        self.cascade.view_mode = self.mode == MODE_VIEW
        self.cascade.open(self.values['country'], self.values['city'])
        self.cascade.apply_to(self.selects['city'])

    def on_select_change(self, name: str, value: Any) -> None:
        if name == 'country':
            self.values['city'] = ''
            self.errors.pop('city', None)
            self.cascade.select_country(value)
            self.cascade.apply_to(self.selects['city'])
        elif name == 'city':
            self.cascade.select_city(value)

    async def _cities_loaded(self, cascade: CityCascade) -> None:
        if not self.is_open:
            return
        cascade.apply_to(self.selects['city'])
        if self.on_update is not None:
            await self.on_update()

    def close(self) -> None:
        super().close()
        pending = self.cascade.pending
        if pending is not None:
            pending.cancel()

    def _payload(self) -> dict:
        return assemble_organization_payload(self.values)

    def validate(self) -> dict[str, str]:
        payload = self._payload()
        payload.pop('venueTemplate', None)
        s = OrganizationSerializer(data=payload, partial=self.mode == MODE_EDIT)
        s.is_valid()
        return flatten_errors(s.errors)

    def save(self):
        s = OrganizationSerializer(data=self._payload(), partial=self.mode == MODE_EDIT)
        s.is_valid(raise_exception=True)
        if self.mode == MODE_EDIT:
            return org_service.update_organization(self.user, self.organization, s.validated_data)
        self.organization = org_service.create_organization(self.user, s.validated_data)
        self.record_id = str(self.organization.id)
        return self.organization

    def state(self) -> dict:
        data = super().state()
        data['cityLoading'] = self.cascade.loading
        return data


class PointOfInterestFormSession(FormSession):
    kind = 'poi'
    fields = ('organizationId', 'name', 'category', 'categoryType', 'building', 'floor', 'roomNumber',
              'description', 'tags', 'amenities', 'phone', 'email', 'operatingHours',
              'wheelchairAccessible', 'hearingLoop', 'visualAidSupport', 'status',
              'latitude', 'longitude', 'isActive')
    create_message = 'Point of interest created successfully'
    update_message = 'Point of interest updated successfully'
    failure_message = 'Failed to save point of interest. Please try again.'

    def __init__(self, user, *, on_update=None):
        super().__init__(user, on_update=on_update)
        self.marker: Optional[dict] = None
        self.poi = None

    async def load(self, organization_id: Optional[str] = None, **context) -> None:
        self.marker = None
        self.poi = None
        self.values.update({'status': 'Active', 'isActive': True, 'wheelchairAccessible': False,
                            'hearingLoop': False, 'visualAidSupport': False})
        self.values['organizationId'] = str(organization_id or self.user.organization_id or '')
        if self.mode != MODE_CREATE:
            self.poi, data = await sync_to_async(self._load_poi)()
            self._fill(data)
        buildings, floors = await sync_to_async(self._building_options)()

        self.selects = {}
        self._add_select('category', reference.POI_CATEGORIES, value=self.values['category'], label='Category',
                         placeholder='Select category', searchable=True, required=True)
        self._add_select('categoryType', reference.POI_CATEGORY_TYPES, value=self.values['categoryType'],
                         label='Category Type', placeholder='Select category type')
        self._add_select('building', buildings, value=self.values['building'], label='Building',
                         placeholder='Select building', searchable=True, required=True)
        self._add_select('floor', floors, value=self.values['floor'], label='Floor',
                         placeholder='Select floor', required=True)
        self._add_select('status', reference.POI_STATUSES, value=self.values['status'], label='Status',
                         placeholder='Select status', required=True)

    def _load_poi(self):
        poi = poi_service.get_poi(self.user, self.record_id)
        return poi, poi_service.format_poi(poi)

    def _building_options(self):
        organization = None
        if self.values['organizationId']:
            organization = org_service.resolve_organization(self.user, self.values['organizationId'])
        return reference.poi_building_and_floor_options(organization)

    def _fill(self, data: dict) -> None:
        contact = data.get('contact') or {}
        coords = data.get('mapCoordinates') or {}
        flat = dict(data, **data['accessibility'])
        flat.update({
            'organizationId': data['organization']['id'],
            'tags': ', '.join(data['tags'] or []),
            'amenities': ', '.join(data['amenities'] or []),
            'phone': contact.get('phone'),
            'email': contact.get('email'),
            'operatingHours': contact.get('operatingHours'),
            'latitude': coords.get('latitude'),
            'longitude': coords.get('longitude'),
        })
        for name in self.fields:
            value = flat.get(name)
            self.values[name] = '' if value is None else (str(value) if name in ('latitude', 'longitude') else value)

    def set_marker(self, lat, lng) -> None:
        self._require_idle()
        if self.read_only:
            return
        try:
            self.marker = {'lat': float(lat), 'lng': float(lng)}
        except (TypeError, ValueError):
            raise SessionError('Marker coordinates must be numbers') from None
        for name in ('latitude', 'longitude'):
            self.errors.pop(name, None)

    def validate(self) -> dict[str, str]:
        form = PointOfInterestFormSerializer(data=self._form_values())
        form.is_valid()
        return flatten_errors(form.errors)

    def _form_values(self) -> dict:
        values = dict(self.values)
        if self.marker:
            values['latitude'] = str(self.marker['lat'])
            values['longitude'] = str(self.marker['lng'])
        return values

    def save(self):
        organization_id = require_organization(self.values)
        form = PointOfInterestFormSerializer(data=self._form_values())
        form.is_valid(raise_exception=True)
        payload = assemble_poi_payload(self.values, marker=self.marker, organization_id=organization_id)

        if self.mode == MODE_EDIT:
            payload = strip_empty(payload)
            payload.pop('organizationId', None)
            s = PointOfInterestSerializer(data=payload, partial=True)
            s.is_valid(raise_exception=True)
            return poi_service.update_poi(self.user, self.poi, s.validated_data)

        s = PointOfInterestSerializer(data=payload)
        s.is_valid(raise_exception=True)
        organization = org_service.resolve_organization(self.user, organization_id, write=True)
        self.poi = poi_service.create_poi(self.user, organization, s.validated_data)
        self.record_id = str(self.poi.id)
        return self.poi

    def state(self) -> dict:
        data = super().state()
        data['marker'] = self.marker
        return data


SESSION_CLASSES = {
    OrganizationFormSession.kind: OrganizationFormSession,
    PointOfInterestFormSession.kind: PointOfInterestFormSession,
}
