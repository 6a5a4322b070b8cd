"""
API router for activity endpoints.
"""
from typing import Annotated, List, Literal, Optional
from fastapi import APIRouter, Path, Query, status

from farmledger.api.dependencies import FarmServiceDep
from farmledger.api.v1.models.requests import ActivityRequest
from farmledger.domain.models import Activity


router = APIRouter(
    prefix="/activities",
    tags=["activities"],
)

ActivityId = Annotated[str, Path(description="Unique identifier for the activity")]


@router.get(
    "",
    response_model=List[Activity],
    summary="List activities",
    description="""
    List activities in stored order (newest entries first).

    - `view=history`: completed activities, newest date first
    - `view=planning`: planned activities, newest date first
    """,
)
async def list_activities(
    farm_service: FarmServiceDep,
    view: Annotated[Optional[Literal["history", "planning"]], Query()] = None,
    plot_id: Annotated[Optional[str], Query()] = None,
) -> List[Activity]:
    return farm_service.list_activities(view=view, plot_id=plot_id)


@router.post(
    "",
    response_model=Activity,
    status_code=status.HTTP_201_CREATED,
    summary="Record or schedule an activity",
    description="""
    The total cost is labor cost plus every product line priced at the
    product's current price. It is stored and not recomputed later.
    """,
)
async def create_activity(body: ActivityRequest, farm_service: FarmServiceDep) -> Activity:
    return await farm_service.create_activity(**body.model_dump())


@router.get("/{activity_id}", response_model=Activity, summary="Get an activity")
async def get_activity(activity_id: ActivityId, farm_service: FarmServiceDep) -> Activity:
    return farm_service.get_activity(activity_id)


@router.put(
    "/{activity_id}",
    response_model=Activity,
    summary="Replace an activity",
    description="Use this to move an activity between planned and completed.",
)
async def update_activity(
    activity_id: ActivityId,
    body: ActivityRequest,
    farm_service: FarmServiceDep,
) -> Activity:
    return await farm_service.update_activity(activity_id, **body.model_dump())


@router.post(
    "/{activity_id}/duplicate",
    response_model=Activity,
    status_code=status.HTTP_201_CREATED,
    summary="Duplicate an activity to today",
)
async def duplicate_activity(activity_id: ActivityId, farm_service: FarmServiceDep) -> Activity:
    return await farm_service.duplicate_activity(activity_id)


@router.delete(
    "/{activity_id}",
    status_code=status.HTTP_204_NO_CONTENT,
    summary="Delete an activity",
)
async def delete_activity(activity_id: ActivityId, farm_service: FarmServiceDep) -> None:
    await farm_service.delete_activity(activity_id)
