"""
API request models using Pydantic.

Bodies accept either camelCase (as the dashboard sends them) or snake_case.
"""
from datetime import date as Date
from typing import List, Optional

from pydantic import BaseModel, Field
from pydantic.alias_generators import to_camel

from farmledger.domain.models import ActivityItem, ActivityStatus, UnitType


class RequestModel(BaseModel):
    """Base for request bodies."""

    class Config:
        populate_by_name = True
        alias_generator = to_camel


class PlotRequest(RequestModel):
    """Create or replace a plot."""
    name: str = Field(min_length=1)
    crop: str = Field(default="Manga", min_length=1)
    area: float = Field(gt=0, description="Area in hectares")


class ProductRequest(RequestModel):
    """Create or replace a product."""
    name: str = Field(min_length=1)
    price_per_unit: float = Field(ge=0)
    unit: UnitType = UnitType.UNIT
    category: str = Field(default="Outros", min_length=1)
    stock_quantity: Optional[float] = None


class ActivityRequest(RequestModel):
    """Record, schedule or replace an activity."""
    plot_id: str
    date: Date
    type: str = Field(default="Outros", min_length=1)
    status: ActivityStatus = ActivityStatus.COMPLETED
    description: str = ""
    labor_cost: float = Field(default=0.0, ge=0)
    products_used: List[ActivityItem] = Field(default_factory=list)


class HarvestRequest(RequestModel):
    """Record or replace a harvest."""
    plot_id: str
    date: Date
    quantity: float = Field(ge=0)
    unit_price: float = Field(ge=0)
    unit: UnitType = UnitType.KG
    classification: Optional[str] = None


class CatalogEntryRequest(RequestModel):
    """A new activity type or product category."""
    name: str = Field(min_length=1)
