from datetime import datetime

from pydantic import BaseModel, Field


class ResourceCreate(BaseModel):
    external_id: int = Field(default=0, ge=0)
    subscription_id: int = Field(default=0, ge=0)
    is_pre_paid: bool = True
    is_prorated: bool = False
    date_created: datetime | int | None = None


class ResourceUpdate(BaseModel):
    external_id: int | None = Field(default=None, ge=0)
    subscription_id: int | None = Field(default=None, ge=0)
    is_pre_paid: bool | None = None
    is_prorated: bool | None = None


class ResourceResponse(BaseModel):
    id: int
    external_id: int
    subscription_id: int
    date_created: datetime | None
    is_pre_paid: bool
    is_prorated: bool
    activation_timestamps: list[int]
    deactivation_timestamps: list[int]


class DaysActiveResponse(BaseModel):
    resource_id: int
    from_timestamp: int
    to_timestamp: int
    days_active: int
