"""
API router for the configurable option lists.
"""
from fastapi import APIRouter

from farmledger.api.dependencies import FarmServiceDep
from farmledger.api.v1.models.requests import CatalogEntryRequest
from farmledger.api.v1.models.responses import CatalogResponse


router = APIRouter(
    prefix="/catalog",
    tags=["catalog"],
)


@router.get("/activity-types", response_model=CatalogResponse, summary="List activity types")
async def list_activity_types(farm_service: FarmServiceDep) -> CatalogResponse:
    return CatalogResponse(items=farm_service.list_activity_types())


@router.post("/activity-types", response_model=CatalogResponse, summary="Add an activity type")
async def add_activity_type(
    body: CatalogEntryRequest,
    farm_service: FarmServiceDep,
) -> CatalogResponse:
    return CatalogResponse(items=await farm_service.add_activity_type(body.name))


@router.get("/categories", response_model=CatalogResponse, summary="List product categories")
async def list_categories(farm_service: FarmServiceDep) -> CatalogResponse:
    return CatalogResponse(items=farm_service.list_categories())


@router.post("/categories", response_model=CatalogResponse, summary="Add a product category")
async def add_category(
    body: CatalogEntryRequest,
    farm_service: FarmServiceDep,
) -> CatalogResponse:
    return CatalogResponse(items=await farm_service.add_category(body.name))
