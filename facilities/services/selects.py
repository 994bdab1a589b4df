"""
Searchable dropdown state.

Option lists arrive in several shapes (plain strings, ``{name, value,
icon}`` mappings, model-derived tuples); they are normalized once into
:class:`SelectOption` and everything downstream works on that.  The same
:class:`SelectState` backs the reference-data endpoints and the
WebSocket form sessions.
"""
from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Callable, Iterable, Mapping, Optional

MAX_RENDERED_OPTIONS = 500
TRUNCATED_HEADER = f"Showing first {MAX_RENDERED_OPTIONS} options. Use search to find more."
EMPTY_SEARCH_TEXT = "No options found"
EMPTY_TEXT = "No options available"


@dataclass(frozen=True)
class SelectOption:
    name: str
    value: Any
    icon: Optional[str] = None

    def as_dict(self) -> dict:
        data = {'name': self.name, 'value': self.value}
        if self.icon:
            data['icon'] = self.icon
        return data


def normalize_option(raw) -> SelectOption:
    if isinstance(raw, SelectOption):
        return raw
    if isinstance(raw, str):
        return SelectOption(name=raw, value=raw)
    if isinstance(raw, Mapping):
        name = str(raw.get('name', ''))
        value = raw.get('value')
        return SelectOption(name=name, value=name if value is None else value, icon=raw.get('icon'))
    raise TypeError(f"Unsupported option type: {type(raw).__name__}")


def normalize_options(raw: Iterable) -> list[SelectOption]:
    return [normalize_option(item) for item in (raw or ())]


def filter_options(options: Iterable[SelectOption], query: str = '', searchable: bool = False) -> list[SelectOption]:
    """Case-insensitive substring match on the display name, capped at 500 entries.

    The cap applies whether or not a query was given.
    """
    needle = (query or '').strip().casefold()
    if searchable and needle:
        matched = [o for o in options if needle in o.name.casefold()]
    else:
        matched = list(options)
    return matched[:MAX_RENDERED_OPTIONS]


class SelectState:
    """Open/close, search and selection state of one dropdown."""

    def __init__(self, name: str, options: Iterable = (), *, value: Any = '', label: str = '',
                 placeholder: str = 'Select an option', searchable: bool = False, disabled: bool = False,
                 required: bool = False, on_change: Optional[Callable[[Any], None]] = None):
        self.name = name
        self.label = label
        self.placeholder = placeholder
        self.searchable = searchable
        self.disabled = disabled
        self.required = required
        self.on_change = on_change
        self.options = normalize_options(options)
        self.value = value
        self.is_open = False
        self.query = ''
        self.error: Optional[str] = None
        self.touched = False

    def set_options(self, options: Iterable) -> None:
        self.options = normalize_options(options)

    @property
    def visible_options(self) -> list[SelectOption]:
        return filter_options(self.options, self.query, self.searchable)

    @property
    def selected(self) -> Optional[SelectOption]:
        for option in self.options:
            if option.value == self.value:
                return option
        return None

    def toggle(self) -> None:
        if self.disabled:
            return
        if self.is_open:
            self.close()
        else:
            self.is_open = True

    def close(self) -> None:
        self.is_open = False
        self.query = ''

    def click_outside(self) -> None:
        if self.is_open:
            self.close()

    def set_query(self, query: str) -> None:
        if self.disabled or not self.searchable:
            return
        self.query = query or ''

    def press_key(self, key: str) -> bool:
        """Handle a key press while open; returns True when a value was committed."""
        if self.disabled or not self.is_open:
            return False
        if key == 'Escape':
            self.close()
        elif key == 'Enter' and self.searchable:
            matches = self.visible_options
            if matches:
                self._commit(matches[0])
                return True
        return False

    def choose(self, value: Any) -> bool:
        if self.disabled:
            return False
        for option in self.options:
            if option.value == value:
                self._commit(option)
                return True
        return False

    def _commit(self, option: SelectOption) -> None:
        self.value = option.value
        self.close()
        if self.on_change is not None:
            self.on_change(option.value)

    @property
    def display_value(self) -> str:
        option = self.selected
        if option is not None:
            return option.name
        if self.value not in ('', None):
            return str(self.value)
        return self.placeholder

    @property
    def empty_text(self) -> str:
        return EMPTY_SEARCH_TEXT if self.query.strip() else EMPTY_TEXT

    @property
    def header(self) -> str:
        if not self.searchable and len(self.options) > MAX_RENDERED_OPTIONS:
            return TRUNCATED_HEADER
        return self.placeholder

    @property
    def error_message(self) -> Optional[str]:
        if self.error and self.touched:
            return self.error
        return None

    def as_dict(self) -> dict:
        visible = self.visible_options
        return {
            'name': self.name,
            'label': self.label,
            'value': self.value,
            'displayValue': self.display_value,
            'placeholder': self.placeholder,
            'header': self.header,
            'isOpen': self.is_open,
            'query': self.query,
            'searchable': self.searchable,
            'disabled': self.disabled,
            'required': self.required,
            'options': [o.as_dict() for o in visible],
            'totalOptions': len(self.options),
            'emptyText': self.empty_text if not visible else None,
            'error': self.error_message,
        }
