"""
Country -> city dependent select.

Choosing a country clears the city and schedules the city list load on the
next event-loop tick; the lookup itself runs in a worker thread.  Every load
request bumps a generation counter and a finished load whose generation is
no longer current is dropped, so a quick A -> B selection always ends with
B's cities.
"""
from __future__ import annotations

import asyncio
import logging
from typing import Awaitable, Callable, Iterable, Optional

from asgiref.sync import sync_to_async

from .reference import cities_for_code, city_options, country_code
from .selects import SelectState

logger = logging.getLogger(__name__)

LOADING_PLACEHOLDER = "Loading cities..."
READY_PLACEHOLDER = "Select city"
NO_COUNTRY_PLACEHOLDER = "Select a country first"


class CityCascade:
    def __init__(self, lookup: Callable[[str], Iterable[str]] = cities_for_code, *, view_mode: bool = False,
                 on_loaded: Optional[Callable[["CityCascade"], Awaitable[None]]] = None):
        self.country = ''
        self.city = ''
        self.options: list[str] = []
        self.loading = False
        self.view_mode = view_mode
        self.on_loaded = on_loaded
        self._lookup = lookup
        self._loaded_country = ''
        self._generation = 0
        self._task: Optional[asyncio.Task] = None

    @property
    def generation(self) -> int:
        return self._generation

    @property
    def pending(self) -> Optional[asyncio.Task]:
        return self._task if self._task is not None and not self._task.done() else None

    def open(self, country: str = '', city: str = '') -> Optional[asyncio.Task]:
        """Start a form session, keeping an existing record's city selectable."""
        self.country = (country or '').strip()
        self.city = (city or '').strip()
        self._loaded_country = ''
        self.options = []
        return self.load(self.country, self.city)

    def select_country(self, name: str) -> Optional[asyncio.Task]:
        self.country = (name or '').strip()
        self.city = ''
        return self.load(self.country)

    def select_city(self, name: str) -> None:
        self.city = name or ''

    def load(self, country: str, current_city: str = '') -> Optional[asyncio.Task]:
        if not country:
            self._invalidate()
            self.options = []
            self._loaded_country = ''
            return None

        if country_code(country) is None:
            self._invalidate()
            self.options = city_options(country, current_city, self._lookup)
            self._loaded_country = country
            return None

        if self._loaded_country == country and self.options:
            return None

        self._invalidate()
        generation = self._generation
        self.loading = True
        self.options = []
        self._loaded_country = country
        self._task = asyncio.ensure_future(self._deferred_load(generation, country, current_city))
        return self._task

    def _invalidate(self) -> None:
        self._generation += 1
        self.loading = False

    async def _deferred_load(self, generation: int, country: str, current_city: str) -> bool:
        await asyncio.sleep(0)
        options = await sync_to_async(city_options, thread_sensitive=False)(country, current_city, self._lookup)
        if generation != self._generation:
            logger.debug("Dropping stale city list for %s (generation %s, now %s)",
                         country, generation, self._generation)
            return False
        self.options = options
        self.loading = False
        if self.on_loaded is not None:
            await self.on_loaded(self)
        return True

    @property
    def placeholder(self) -> str:
        if self.loading:
            return LOADING_PLACEHOLDER
        if self.options:
            return READY_PLACEHOLDER
        return NO_COUNTRY_PLACEHOLDER

    @property
    def disabled(self) -> bool:
        return self.loading or not self.options or self.view_mode

    def apply_to(self, select: SelectState) -> SelectState:
        """Copy the cascade's city options and flags onto the city dropdown."""
        select.set_options(self.options)
        select.placeholder = self.placeholder
        select.disabled = self.disabled
        select.value = self.city
        if select.disabled:
            select.close()
        return select
