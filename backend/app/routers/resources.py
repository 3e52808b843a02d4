from fastapi import APIRouter, Depends, HTTPException, Query, Response
from sqlalchemy.orm import Session

from app.core.clock import Clock, utc_now
from app.core.database import get_db
from app.core.exceptions import NotFoundError, ValidationError
from app.core.timestamps import to_timestamp
from app.repositories.resource_repository import ResourceRepository
from app.schemas.resource import (
    DaysActiveResponse,
    ResourceCreate,
    ResourceResponse,
    ResourceUpdate,
)
from app.services.resource import Resource

router = APIRouter()


def get_clock() -> Clock:
    return utc_now


def _load_resource(resource_id: int, db: Session, clock: Clock) -> Resource:
    if resource_id <= 0:
        raise HTTPException(status_code=404, detail="Resource not found")
    try:
        return Resource(resource_id, store=ResourceRepository(db), clock=clock)
    except NotFoundError as e:
        raise HTTPException(status_code=404, detail=str(e)) from e


def _to_response(resource: Resource) -> ResourceResponse:
    return ResourceResponse.model_validate(resource.get_data())


@router.get(
    "/",
    response_model=list[ResourceResponse],
    summary="List resources",
    description="List the resources linked to a subscription.",
)
async def list_resources(
    subscription_id: int = Query(..., ge=0),
    db: Session = Depends(get_db),
    clock: Clock = Depends(get_clock),
) -> list[ResourceResponse]:
    repo = ResourceRepository(db)
    return [
        _to_response(Resource(resource_id, store=repo, clock=clock))
        for resource_id in repo.get_ids_by_subscription_id(subscription_id)
    ]


@router.get(
    "/{resource_id}",
    response_model=ResourceResponse,
    summary="Get resource",
    responses={404: {"description": "Resource not found"}},
)
async def get_resource(
    resource_id: int,
    db: Session = Depends(get_db),
    clock: Clock = Depends(get_clock),
) -> ResourceResponse:
    return _to_response(_load_resource(resource_id, db, clock))


@router.post(
    "/",
    response_model=ResourceResponse,
    status_code=201,
    summary="Create resource",
    responses={422: {"description": "Validation error"}},
)
async def create_resource(
    data: ResourceCreate,
    db: Session = Depends(get_db),
    clock: Clock = Depends(get_clock),
) -> ResourceResponse:
    resource = Resource(store=ResourceRepository(db), clock=clock)
    try:
        for key, value in data.model_dump(exclude_none=True).items():
            getattr(resource, f"set_{key}")(value)
    except ValidationError as e:
        raise HTTPException(status_code=422, detail=str(e)) from e
    resource.save()
    return _to_response(resource)


@router.patch(
    "/{resource_id}",
    response_model=ResourceResponse,
    summary="Update resource",
    responses={
        404: {"description": "Resource not found"},
        422: {"description": "Validation error"},
    },
)
async def update_resource(
    resource_id: int,
    data: ResourceUpdate,
    db: Session = Depends(get_db),
    clock: Clock = Depends(get_clock),
) -> ResourceResponse:
    resource = _load_resource(resource_id, db, clock)
    try:
        for key, value in data.model_dump(exclude_unset=True, exclude_none=True).items():
            getattr(resource, f"set_{key}")(value)
    except ValidationError as e:
        raise HTTPException(status_code=422, detail=str(e)) from e
    resource.save()
    return _to_response(resource)


@router.delete(
    "/{resource_id}",
    status_code=204,
    summary="Delete resource",
    responses={404: {"description": "Resource not found"}},
)
async def delete_resource(
    resource_id: int,
    db: Session = Depends(get_db),
) -> Response:
    repo = ResourceRepository(db)
    if not repo.delete(resource_id):
        raise HTTPException(status_code=404, detail="Resource not found")
    return Response(status_code=204)


@router.post(
    "/{resource_id}/activate",
    response_model=ResourceResponse,
    summary="Activate resource",
    description="Record an activation at the current instant.",
    responses={404: {"description": "Resource not found"}},
)
async def activate_resource(
    resource_id: int,
    db: Session = Depends(get_db),
    clock: Clock = Depends(get_clock),
) -> ResourceResponse:
    resource = _load_resource(resource_id, db, clock)
    resource.activate()
    return _to_response(resource)


@router.post(
    "/{resource_id}/deactivate",
    response_model=ResourceResponse,
    summary="Deactivate resource",
    description="Record a deactivation at the current instant.",
    responses={404: {"description": "Resource not found"}},
)
async def deactivate_resource(
    resource_id: int,
    db: Session = Depends(get_db),
    clock: Clock = Depends(get_clock),
) -> ResourceResponse:
    resource = _load_resource(resource_id, db, clock)
    resource.deactivate()
    return _to_response(resource)


@router.get(
    "/{resource_id}/days_active",
    response_model=DaysActiveResponse,
    summary="Get days active",
    description=(
        "Count the whole days the resource was active between two instants. "
        "Instants are epoch seconds or ISO-8601 strings; the end defaults to now."
    ),
    responses={
        404: {"description": "Resource not found"},
        422: {"description": "Invalid instant"},
    },
)
async def get_days_active(
    resource_id: int,
    from_timestamp: str = Query(...),
    to_timestamp_: str | None = Query(default=None, alias="to_timestamp"),
    db: Session = Depends(get_db),
    clock: Clock = Depends(get_clock),
) -> DaysActiveResponse:
    resource = _load_resource(resource_id, db, clock)
    try:
        start = to_timestamp(from_timestamp)
        end = to_timestamp(clock() if to_timestamp_ is None else to_timestamp_)
    except ValidationError as e:
        raise HTTPException(status_code=422, detail=str(e)) from e
    return DaysActiveResponse(
        resource_id=resource.get_id(),
        from_timestamp=start,
        to_timestamp=end,
        days_active=resource.get_days_active(start, end),
    )
