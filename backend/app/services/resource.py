"""Billable resource and its activity ledger."""

from __future__ import annotations

import logging
from collections.abc import Iterable, Mapping
from datetime import datetime
from typing import Any, Protocol

from pydantic import TypeAdapter
from pydantic import ValidationError as PydanticValidationError

from app.core.clock import Clock, utc_now
from app.core.exceptions import ValidationError
from app.core.properties import PropContext, PropertyContainer, ViewFilter
from app.core.timestamps import to_datetime, to_timestamp
from app.services.usage_accountant import days_active

logger = logging.getLogger(__name__)

DEFAULT_DATA: dict[str, Any] = {
    "date_created": None,
    "external_id": 0,
    "subscription_id": 0,
    "is_pre_paid": True,
    "is_prorated": False,
    "activation_timestamps": [],
    "deactivation_timestamps": [],
}

_bool_adapter: TypeAdapter[bool] = TypeAdapter(bool)


class ResourceStore(Protocol):
    def read(self, resource: Resource) -> None: ...

    def persist(self, resource: Resource) -> int: ...


def _to_identifier(value: Any, prop: str) -> int:
    if isinstance(value, bool):
        raise ValidationError(f"Invalid {prop}: {value!r}")
    try:
        identifier = int(value)
    except (TypeError, ValueError) as e:
        raise ValidationError(f"Invalid {prop}: {value!r}") from e
    if identifier < 0:
        raise ValidationError(f"Invalid {prop}: {value!r}")
    return identifier


def _to_flag(value: Any, prop: str) -> bool:
    try:
        return _bool_adapter.validate_python(value)
    except PydanticValidationError as e:
        raise ValidationError(f"Invalid {prop}: {value!r}") from e


def _to_timestamps(timestamps: Iterable[Any], prop: str) -> list[int]:
    if isinstance(timestamps, str | bytes) or not isinstance(timestamps, Iterable):
        raise ValidationError(f"{prop} must be a sequence of instants")
    return [to_timestamp(ts) for ts in timestamps]


class Resource:
    """A billable resource linked to a subscription.

    Records every activation and deactivation so the days it was active in
    any billing window can be counted. Construct with no identifier for a
    new resource, or with an identifier (or another ``Resource``) and a store
    to load an existing one.

    Each ``activate``/``deactivate`` call appends to the full sequence and
    persists it. That read-append-persist is not atomic: callers mutating the
    same resource concurrently must serialize on the resource id.
    """

    def __init__(
        self,
        resource: int | str | Resource | None = None,
        *,
        store: ResourceStore | None = None,
        clock: Clock = utc_now,
        view_filters: Mapping[str, Iterable[ViewFilter]] | None = None,
    ):
        self.props = PropertyContainer(DEFAULT_DATA)
        self.store = store
        self.clock = clock
        self._id = 0

        for prop, filters in (view_filters or {}).items():
            for view_filter in filters:
                self.props.add_view_filter(prop, view_filter)

        if isinstance(resource, Resource):
            resource_id = resource.get_id()
        elif resource is None:
            resource_id = 0
        else:
            resource_id = _to_identifier(resource, "id")

        if resource_id > 0:
            if store is None:
                raise ValueError(f"Cannot load resource {resource_id} without a store")
            self.set_id(resource_id)
            store.read(self)
        else:
            self.props.set_object_read(True)

    def __repr__(self) -> str:
        return f"<Resource id={self._id} subscription_id={self.get_subscription_id('edit')}>"

    # Ledger

    def activate(self) -> None:
        """Record the resource's activation."""
        timestamps = self.get_activation_timestamps(PropContext.EDIT)
        timestamps.append(to_timestamp(self.clock()))
        self.set_activation_timestamps(timestamps)
        self._persist_event("activated")

    def deactivate(self) -> None:
        """Record the resource's deactivation."""
        timestamps = self.get_deactivation_timestamps(PropContext.EDIT)
        timestamps.append(to_timestamp(self.clock()))
        self.set_deactivation_timestamps(timestamps)
        self._persist_event("deactivated")

    def has_been_activated(self) -> bool:
        return len(self.get_activation_timestamps()) > 0

    def get_days_active(self, from_timestamp: Any, to_timestamp: Any = None) -> int:
        """Days this resource was active between two instants (end defaults to now)."""
        return days_active(self, from_timestamp, to_timestamp, clock=self.clock)

    def _persist_event(self, event: str) -> None:
        if self.store is None:
            logger.debug("Resource is detached, %s event kept in memory", event)
            return
        self.save()
        logger.info("Resource %d %s", self._id, event)

    # Persistence

    def save(self) -> int:
        """Persist through the store, assigning an id on first save.

        Raises:
            ValueError: If the resource has no store.
        """
        if self.store is None:
            raise ValueError("Resource has no store to persist to")
        if self.get_date_created(PropContext.EDIT) is None:
            self.set_date_created(self.clock())
        self._id = self.store.persist(self)
        return self._id

    def get_data(self, context: PropContext | str = PropContext.VIEW) -> dict[str, Any]:
        data = {prop: self.props.get(prop, context) for prop in self.props.keys()}
        data["id"] = self._id
        return data

    def get_changes(self) -> dict[str, Any]:
        return self.props.get_changes()

    def apply_changes(self) -> None:
        self.props.apply_changes()

    # Getters

    def get_id(self) -> int:
        return self._id

    def get_date_created(self, context: PropContext | str = PropContext.VIEW) -> datetime | None:
        return self.props.get("date_created", context)

    def get_external_id(self, context: PropContext | str = PropContext.VIEW) -> int:
        """ID of the object outside the billing system this resource is linked to."""
        return self.props.get("external_id", context)

    def get_subscription_id(self, context: PropContext | str = PropContext.VIEW) -> int:
        return self.props.get("subscription_id", context)

    def get_is_pre_paid(self, context: PropContext | str = PropContext.VIEW) -> bool:
        """Whether the resource is paid for before each billing period.

        A post-paid resource is charged after its benefit has been consumed,
        which allows its cost to be prorated to the days it was active.
        """
        return self.props.get("is_pre_paid", context)

    def get_is_prorated(self, context: PropContext | str = PropContext.VIEW) -> bool:
        """Whether the cost is apportioned to the days active in each period."""
        return self.props.get("is_prorated", context)

    def get_activation_timestamps(self, context: PropContext | str = PropContext.VIEW) -> list[int]:
        return list(self.props.get("activation_timestamps", context))

    def get_deactivation_timestamps(
        self, context: PropContext | str = PropContext.VIEW
    ) -> list[int]:
        return list(self.props.get("deactivation_timestamps", context))

    # Setters

    def set_id(self, resource_id: int) -> None:
        self._id = _to_identifier(resource_id, "id")

    def set_date_created(self, date: Any) -> None:
        """Set the creation instant.

        Accepts epoch seconds, an ISO-8601 string or a datetime. Values
        without an offset are read in the site timezone. None clears it.
        """
        self.props.set("date_created", None if date is None else to_datetime(date))

    def set_external_id(self, external_id: Any) -> None:
        self.props.set("external_id", _to_identifier(external_id, "external_id"))

    def set_subscription_id(self, subscription_id: Any) -> None:
        self.props.set("subscription_id", _to_identifier(subscription_id, "subscription_id"))

    def set_is_pre_paid(self, is_pre_paid: Any) -> None:
        self.props.set("is_pre_paid", _to_flag(is_pre_paid, "is_pre_paid"))

    def set_is_prorated(self, is_prorated: Any) -> None:
        self.props.set("is_prorated", _to_flag(is_prorated, "is_prorated"))

    def set_activation_timestamps(self, timestamps: Iterable[Any]) -> None:
        """Replace the whole activation history. Order is not checked."""
        self.props.set(
            "activation_timestamps", _to_timestamps(timestamps, "activation_timestamps")
        )

    def set_deactivation_timestamps(self, timestamps: Iterable[Any]) -> None:
        """Replace the whole deactivation history. Order is not checked."""
        self.props.set(
            "deactivation_timestamps", _to_timestamps(timestamps, "deactivation_timestamps")
        )
