"""
API router for plot endpoints.
"""
from typing import Annotated, List
from fastapi import APIRouter, Path, status

from farmledger.api.dependencies import FarmServiceDep
from farmledger.api.v1.models.requests import PlotRequest
from farmledger.domain.models import Plot


router = APIRouter(
    prefix="/plots",
    tags=["plots"],
)

PlotId = Annotated[str, Path(description="Unique identifier for the plot")]


@router.get("", response_model=List[Plot], summary="List plots")
async def list_plots(farm_service: FarmServiceDep) -> List[Plot]:
    return farm_service.list_plots()


@router.post(
    "",
    response_model=Plot,
    status_code=status.HTTP_201_CREATED,
    summary="Create a plot",
)
async def create_plot(body: PlotRequest, farm_service: FarmServiceDep) -> Plot:
    return await farm_service.create_plot(**body.model_dump())


@router.get("/{plot_id}", response_model=Plot, summary="Get a plot")
async def get_plot(plot_id: PlotId, farm_service: FarmServiceDep) -> Plot:
    return farm_service.get_plot(plot_id)


@router.put("/{plot_id}", response_model=Plot, summary="Replace a plot")
async def update_plot(
    plot_id: PlotId,
    body: PlotRequest,
    farm_service: FarmServiceDep,
) -> Plot:
    return await farm_service.update_plot(plot_id, **body.model_dump())


@router.delete(
    "/{plot_id}",
    status_code=status.HTTP_204_NO_CONTENT,
    summary="Delete a plot",
    description="""
    Delete a plot. Activities and harvests that reference it are kept;
    reports show them under an unknown plot.
    """,
)
async def delete_plot(plot_id: PlotId, farm_service: FarmServiceDep) -> None:
    await farm_service.delete_plot(plot_id)
