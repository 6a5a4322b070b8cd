"""
Domain models for farm records and derived financial figures.

These models represent the core domain entities and should be independent
of any infrastructure concerns (row-store clients, HTTP, files, etc.).
Records are immutable: an edit produces a new record with the same id.
Field names are camelCase on the wire and in the persisted snapshot.
"""
from datetime import date as Date
from enum import Enum
from typing import List, Optional

from pydantic import BaseModel, Field
from pydantic.alias_generators import to_camel


DEFAULT_ACTIVITY_TYPES = [
    "Adubação",
    "Poda",
    "Desponte",
    "Toalet/Limpeza",
    "Pulverização",
    "Outros",
]

DEFAULT_CATEGORIES = ["Fertilizante", "Defensivo", "Adubo", "Outros"]

DEFAULT_CROPS = ["Manga", "Goiaba", "Outros"]

DEFAULT_CLASSIFICATION = "Padrão"


class UnitType(str, Enum):
    """Unit of measure, stored with its short token."""
    KG = "kg"
    LITER = "L"
    UNIT = "un"
    SACK = "sc"
    BOX = "cx"


class ActivityStatus(str, Enum):
    """Whether an activity happened or is only scheduled."""
    COMPLETED = "completed"
    PLANNED = "planned"


class FarmRecord(BaseModel):
    """Base for every persisted or derived farm value."""

    class Config:
        frozen = True
        populate_by_name = True
        alias_generator = to_camel


class Plot(FarmRecord):
    """A parcel of farmed land."""
    id: str
    name: str
    crop: str = Field(description="Free-text crop label, e.g. Manga or Goiaba")
    area: float = Field(gt=0, description="Area in hectares")


class Product(FarmRecord):
    """An input or material that activities consume."""
    id: str
    name: str
    price_per_unit: float = Field(ge=0)
    unit: UnitType = UnitType.UNIT
    category: str = "Outros"
    stock_quantity: Optional[float] = Field(
        default=None,
        description="Units on hand; None when stock is not tracked",
    )


class ActivityItem(FarmRecord):
    """One product line consumed by an activity."""
    product_id: str
    quantity: float = Field(ge=0)


class Activity(FarmRecord):
    """A recorded or scheduled management action on a plot."""
    id: str
    plot_id: str
    date: Date
    type: str
    status: ActivityStatus = ActivityStatus.COMPLETED
    description: str = ""
    labor_cost: float = Field(ge=0)
    products_used: List[ActivityItem] = Field(default_factory=list)
    total_cost: float = Field(
        description="Labor plus product cost, priced when the activity was saved"
    )


class Harvest(FarmRecord):
    """A yield/sale event producing revenue."""
    id: str
    plot_id: str
    date: Date
    crop_type: str = Field(description="Snapshot of the plot's crop at harvest time")
    classification: str = DEFAULT_CLASSIFICATION
    quantity: float = Field(ge=0)
    unit: UnitType = UnitType.KG
    unit_price: float = Field(ge=0)
    total_revenue: float


class FarmSnapshot(FarmRecord):
    """The whole dataset, persisted as one JSON object."""
    plots: List[Plot] = Field(default_factory=list)
    products: List[Product] = Field(default_factory=list)
    activities: List[Activity] = Field(default_factory=list)
    harvests: List[Harvest] = Field(default_factory=list)
    activity_types: List[str] = Field(default_factory=lambda: list(DEFAULT_ACTIVITY_TYPES))
    categories: List[str] = Field(default_factory=lambda: list(DEFAULT_CATEGORIES))


# ============================================================
# Derived values
# ============================================================

class PlotSummary(FarmRecord):
    """Cost, revenue and profit of a single plot."""
    plot_id: str
    plot_name: Optional[str] = Field(
        default=None,
        description="None when the plot reference no longer resolves",
    )
    cost: float = 0.0
    revenue: float = 0.0
    profit: float = 0.0


class FinancialSummary(FarmRecord):
    """Farm-wide totals with a per-plot breakdown."""
    total_revenue: float = 0.0
    total_cost: float = 0.0
    net_profit: float = 0.0
    plot_summaries: List[PlotSummary] = Field(default_factory=list)


class ServiceCostRow(FarmRecord):
    """Completed activity costs bucketed by activity type."""
    type: str
    count: int = 0
    labor: float = 0.0
    products: float = 0.0
    total: float = 0.0


class ClassificationTotal(FarmRecord):
    """Harvested quantity for one classification label."""
    classification: str
    quantity: float = 0.0


class HarvestStatistics(FarmRecord):
    """Volume and revenue over a set of harvests."""
    total_volume: float = 0.0
    total_revenue: float = 0.0
    by_classification: List[ClassificationTotal] = Field(default_factory=list)


class TimelineGroup(FarmRecord):
    """Activities sharing one calendar date."""
    date: Date
    activities: List[Activity] = Field(default_factory=list)


class PlotReport(FarmRecord):
    """Printable report for a single plot."""
    plot: Plot
    summary: PlotSummary
    service_costs: List[ServiceCostRow] = Field(default_factory=list)
    statement: List[Activity] = Field(
        default_factory=list,
        description="Completed activities, newest first",
    )
    harvests: HarvestStatistics = Field(default_factory=HarvestStatistics)
