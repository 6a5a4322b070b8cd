"""
API router for harvest endpoints.
"""
from typing import Annotated, List, Optional
from fastapi import APIRouter, Path, Query, status

from farmledger.api.dependencies import FarmServiceDep
from farmledger.api.v1.models.requests import HarvestRequest
from farmledger.api.v1.models.responses import ClassificationOptionsResponse
from farmledger.domain.models import Harvest


router = APIRouter(
    prefix="/harvests",
    tags=["harvests"],
)

HarvestId = Annotated[str, Path(description="Unique identifier for the harvest")]


@router.get("", response_model=List[Harvest], summary="List harvests")
async def list_harvests(
    farm_service: FarmServiceDep,
    plot_id: Annotated[Optional[str], Query()] = None,
) -> List[Harvest]:
    return farm_service.list_harvests(plot_id=plot_id)


@router.get(
    "/classification-options",
    response_model=ClassificationOptionsResponse,
    summary="Suggested classifications for a plot's crop",
)
async def classification_options(
    plot_id: Annotated[str, Query(description="Plot the harvest belongs to")],
    farm_service: FarmServiceDep,
) -> ClassificationOptionsResponse:
    return ClassificationOptionsResponse(
        plot_id=plot_id,
        options=farm_service.classification_options(plot_id),
    )


@router.post(
    "",
    response_model=Harvest,
    status_code=status.HTTP_201_CREATED,
    summary="Record a harvest",
    description="Revenue is quantity times unit price; the crop is copied from the plot.",
)
async def create_harvest(body: HarvestRequest, farm_service: FarmServiceDep) -> Harvest:
    return await farm_service.create_harvest(**body.model_dump())


@router.get("/{harvest_id}", response_model=Harvest, summary="Get a harvest")
async def get_harvest(harvest_id: HarvestId, farm_service: FarmServiceDep) -> Harvest:
    return farm_service.get_harvest(harvest_id)


@router.put("/{harvest_id}", response_model=Harvest, summary="Replace a harvest")
async def update_harvest(
    harvest_id: HarvestId,
    body: HarvestRequest,
    farm_service: FarmServiceDep,
) -> Harvest:
    return await farm_service.update_harvest(harvest_id, **body.model_dump())


@router.delete(
    "/{harvest_id}",
    status_code=status.HTTP_204_NO_CONTENT,
    summary="Delete a harvest",
)
async def delete_harvest(harvest_id: HarvestId, farm_service: FarmServiceDep) -> None:
    await farm_service.delete_harvest(harvest_id)
