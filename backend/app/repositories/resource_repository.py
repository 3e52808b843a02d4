from __future__ import annotations

import logging
from datetime import UTC, datetime
from typing import TYPE_CHECKING

from sqlalchemy.orm import Session

from app.core.exceptions import NotFoundError
from app.core.properties import PropContext
from app.models.resource import ResourceRecord

if TYPE_CHECKING:
    from app.services.resource import Resource

logger = logging.getLogger(__name__)


def _as_utc(value: datetime | None) -> datetime | None:
    # SQLite drops tzinfo; stored values are UTC
    if value is None or value.tzinfo is not None:
        return value
    return value.replace(tzinfo=UTC)


class ResourceRepository:
    """SQL-backed store for resources.

    ``read`` hydrates a ``Resource`` from its row and ``persist`` writes every
    field back, creating the row on first save.
    """

    def __init__(self, db: Session):
        self.db = db

    def get_by_id(self, resource_id: int) -> ResourceRecord | None:
        return self.db.query(ResourceRecord).filter(ResourceRecord.id == resource_id).first()

    def exists(self, resource_id: int) -> bool:
        return self.get_by_id(resource_id) is not None

    def get_ids_by_subscription_id(self, subscription_id: int) -> list[int]:
        rows = (
            self.db.query(ResourceRecord.id)
            .filter(ResourceRecord.subscription_id == subscription_id)
            .order_by(ResourceRecord.id)
            .all()
        )
        return [int(row.id) for row in rows]

    def read(self, resource: Resource) -> None:
        """Populate a resource from its stored record.

        Raises:
            NotFoundError: If no record exists for the resource's id.
        """
        record = self.get_by_id(resource.get_id())
        if not record:
            raise NotFoundError(f"Resource {resource.get_id()} not found")

        resource.props.set_defaults()
        resource.set_date_created(_as_utc(record.date_created))  # type: ignore[arg-type]
        resource.set_external_id(record.external_id)
        resource.set_subscription_id(record.subscription_id)
        resource.set_is_pre_paid(record.is_pre_paid)
        resource.set_is_prorated(record.is_prorated)
        resource.set_activation_timestamps(record.activation_timestamps or [])
        resource.set_deactivation_timestamps(record.deactivation_timestamps or [])
        resource.props.set_object_read(True)

    def persist(self, resource: Resource) -> int:
        """Write all fields of a resource, returning its id."""
        created = resource.get_id() == 0
        if created:
            record = ResourceRecord()
            self.db.add(record)
        else:
            existing = self.get_by_id(resource.get_id())
            if not existing:
                raise NotFoundError(f"Resource {resource.get_id()} not found")
            record = existing

        record.date_created = resource.get_date_created(PropContext.EDIT)  # type: ignore[assignment]
        record.external_id = resource.get_external_id(PropContext.EDIT)  # type: ignore[assignment]
        record.subscription_id = resource.get_subscription_id(PropContext.EDIT)  # type: ignore[assignment]
        record.is_pre_paid = resource.get_is_pre_paid(PropContext.EDIT)  # type: ignore[assignment]
        record.is_prorated = resource.get_is_prorated(PropContext.EDIT)  # type: ignore[assignment]
        record.activation_timestamps = resource.get_activation_timestamps(PropContext.EDIT)  # type: ignore[assignment]
        record.deactivation_timestamps = resource.get_deactivation_timestamps(PropContext.EDIT)  # type: ignore[assignment]
        self.db.commit()
        self.db.refresh(record)

        resource.apply_changes()
        if created:
            logger.info("Created resource %d for subscription %d", record.id, record.subscription_id)
        return int(record.id)

    def delete(self, resource_id: int) -> bool:
        record = self.get_by_id(resource_id)
        if not record:
            return False
        self.db.delete(record)
        self.db.commit()
        logger.info("Deleted resource %d", resource_id)
        return True
