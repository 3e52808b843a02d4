"""Generic property storage shared by domain objects.

A ``PropertyContainer`` holds a fixed set of named properties with defaults.
Once the owning object has been read from storage, writes are tracked as
pending changes until ``apply_changes`` merges them into the stored data.

Reads take an access context:

- ``view`` returns the value passed through any registered view filters.
- ``edit`` returns the raw value.
"""

import copy
from collections.abc import Callable
from enum import Enum
from typing import Any

ViewFilter = Callable[[Any], Any]


class PropContext(str, Enum):
    VIEW = "view"
    EDIT = "edit"


class PropertyContainer:
    """Typed get/set with change tracking and view-context filters."""

    def __init__(self, defaults: dict[str, Any]):
        self._default_data = copy.deepcopy(defaults)
        self._data = copy.deepcopy(defaults)
        self._changes: dict[str, Any] = {}
        self._object_read = False
        self._view_filters: dict[str, list[ViewFilter]] = {}

    @property
    def object_read(self) -> bool:
        return self._object_read

    def set_object_read(self, read: bool = True) -> None:
        self._object_read = read

    def keys(self) -> list[str]:
        return list(self._data)

    def get(self, prop: str, context: PropContext | str = PropContext.VIEW) -> Any:
        if prop not in self._data:
            raise KeyError(prop)
        value = self._changes[prop] if prop in self._changes else self._data[prop]
        if PropContext(context) == PropContext.VIEW:
            for view_filter in self._view_filters.get(prop, []):
                value = view_filter(value)
        return value

    def set(self, prop: str, value: Any) -> None:
        if prop not in self._data:
            raise KeyError(prop)
        if not self._object_read:
            self._data[prop] = value
            return
        if value != self._data[prop] or prop in self._changes:
            self._changes[prop] = value

    def get_changes(self) -> dict[str, Any]:
        return dict(self._changes)

    def apply_changes(self) -> None:
        self._data.update(self._changes)
        self._changes = {}

    def set_defaults(self) -> None:
        self._data = copy.deepcopy(self._default_data)
        self._changes = {}
        self._object_read = False

    def add_view_filter(self, prop: str, view_filter: ViewFilter) -> None:
        if prop not in self._data:
            raise KeyError(prop)
        self._view_filters.setdefault(prop, []).append(view_filter)
