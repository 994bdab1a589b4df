import asyncio
import threading

import pytest

from facilities.services.cascade import (
    LOADING_PLACEHOLDER,
    NO_COUNTRY_PLACEHOLDER,
    READY_PLACEHOLDER,
    CityCascade,
)
from facilities.services.selects import SelectState

CITIES = {
    'CA': ['Toronto', 'Ottawa', 'Montreal', 'Toronto'],
    'US': ['Boston', 'Austin'],
}


class Lookup:
    def __init__(self, table=CITIES):
        self.table = table
        self.calls = []

    def __call__(self, code):
        self.calls.append(code)
        return self.table.get(code, [])


@pytest.mark.asyncio
async def test_select_country_loads_sorted_cities():
    lookup = Lookup()
    cascade = CityCascade(lookup)
    assert cascade.placeholder == NO_COUNTRY_PLACEHOLDER
    assert cascade.disabled

    task = cascade.select_country('Canada')
    assert cascade.loading
    assert cascade.placeholder == LOADING_PLACEHOLDER
    assert cascade.disabled
    assert lookup.calls == []  # deferred to a later tick

    assert await task is True
    assert cascade.options == ['Montreal', 'Ottawa', 'Toronto']
    assert not cascade.loading
    assert cascade.placeholder == READY_PLACEHOLDER
    assert not cascade.disabled


@pytest.mark.asyncio
async def test_select_country_clears_city():
    cascade = CityCascade(Lookup())
    await cascade.open('Canada', 'Toronto')
    assert cascade.city == 'Toronto'
    await cascade.select_country('United States')
    assert cascade.city == ''
    assert cascade.options == ['Austin', 'Boston']


@pytest.mark.asyncio
async def test_open_keeps_current_city_selectable():
    cascade = CityCascade(Lookup())
    await cascade.open('Canada', 'Springfield')
    assert cascade.options[0] == 'Springfield'


@pytest.mark.asyncio
async def test_same_country_is_not_reloaded():
    lookup = Lookup()
    cascade = CityCascade(lookup)
    await cascade.select_country('Canada')
    assert cascade.load('Canada') is None
    assert lookup.calls == ['CA']


@pytest.mark.asyncio
async def test_empty_result_is_retried():
    lookup = Lookup({})
    cascade = CityCascade(lookup)
    await cascade.select_country('Canada')
    assert cascade.options == []
    await cascade.load('Canada')
    assert lookup.calls == ['CA', 'CA']


@pytest.mark.asyncio
async def test_stale_load_is_discarded():
    release = threading.Event()

    def lookup(code):
        if code == 'CA':
            release.wait(5)
        return CITIES[code]

    cascade = CityCascade(lookup)
    first = cascade.select_country('Canada')
    second = cascade.select_country('United States')
    assert await second is True
    release.set()
    assert await first is False
    assert cascade.country == 'United States'
    assert cascade.options == ['Austin', 'Boston']
    assert not cascade.loading


@pytest.mark.asyncio
async def test_unknown_or_empty_country_loads_nothing():
    lookup = Lookup()
    cascade = CityCascade(lookup)
    assert cascade.select_country('Atlantis') is None
    assert cascade.options == []
    assert cascade.select_country('') is None
    assert cascade.placeholder == NO_COUNTRY_PLACEHOLDER
    assert lookup.calls == []


@pytest.mark.asyncio
async def test_clearing_country_invalidates_pending_load():
    cascade = CityCascade(Lookup())
    task = cascade.select_country('Canada')
    cascade.select_country('')
    assert await task is False
    assert cascade.options == []


@pytest.mark.asyncio
async def test_view_mode_disables_city_and_on_loaded_runs():
    loaded = []

    async def on_loaded(c):
        loaded.append(list(c.options))

    cascade = CityCascade(Lookup(), view_mode=True, on_loaded=on_loaded)
    await cascade.open('United States', 'Boston')
    assert cascade.disabled
    assert loaded == [['Austin', 'Boston']]

    select = SelectState('city', [], searchable=True)
    select.is_open = True
    cascade.apply_to(select)
    assert select.disabled and not select.is_open
    assert select.value == 'Boston'
    assert select.display_value == 'Boston'


@pytest.mark.asyncio
async def test_pending_task_property():
    cascade = CityCascade(Lookup())
    task = cascade.select_country('Canada')
    assert cascade.pending is task
    await task
    await asyncio.sleep(0)
    assert cascade.pending is None
