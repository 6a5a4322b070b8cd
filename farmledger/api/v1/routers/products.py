"""
API router for product (input inventory) endpoints.
"""
from typing import Annotated, List
from fastapi import APIRouter, Path, status

from farmledger.api.dependencies import FarmServiceDep
from farmledger.api.v1.models.requests import ProductRequest
from farmledger.domain.models import Product


router = APIRouter(
    prefix="/products",
    tags=["products"],
)

ProductId = Annotated[str, Path(description="Unique identifier for the product")]


@router.get("", response_model=List[Product], summary="List products")
async def list_products(farm_service: FarmServiceDep) -> List[Product]:
    return farm_service.list_products()


@router.post(
    "",
    response_model=Product,
    status_code=status.HTTP_201_CREATED,
    summary="Create a product",
)
async def create_product(body: ProductRequest, farm_service: FarmServiceDep) -> Product:
    return await farm_service.create_product(**body.model_dump())


@router.get("/{product_id}", response_model=Product, summary="Get a product")
async def get_product(product_id: ProductId, farm_service: FarmServiceDep) -> Product:
    return farm_service.get_product(product_id)


@router.put(
    "/{product_id}",
    response_model=Product,
    summary="Replace a product",
    description="Price changes apply to activities saved from now on only.",
)
async def update_product(
    product_id: ProductId,
    body: ProductRequest,
    farm_service: FarmServiceDep,
) -> Product:
    return await farm_service.update_product(product_id, **body.model_dump())


@router.delete(
    "/{product_id}",
    status_code=status.HTTP_204_NO_CONTENT,
    summary="Delete a product",
)
async def delete_product(product_id: ProductId, farm_service: FarmServiceDep) -> None:
    await farm_service.delete_product(product_id)
