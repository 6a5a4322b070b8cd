"""
Domain service: Rules for building farm records from user input.

Costs and revenues are computed once, when a record is saved, and stored on
the record. Later price changes never flow back into saved activities.
"""
import logging
import time
from typing import Iterable, Optional

from farmledger.domain.models import (
    Activity,
    ActivityItem,
    ActivityStatus,
    DEFAULT_CLASSIFICATION,
    Harvest,
    Plot,
    Product,
)

logger = logging.getLogger(__name__)


CROP_CLASSIFICATIONS = {
    "manga": ["Exportação", "Mercado", "Arrastão"],
    "goiaba": ["Verde", "Madura", "Polpa"],
}

GENERIC_CLASSIFICATIONS = ["Padrão", "Segunda", "Descarte"]


def new_record_id(existing_ids: Iterable[str] = ()) -> str:
    """
    Generate a fresh record id from the current time in milliseconds.

    Args:
        existing_ids: Ids already used in the target collection

    Returns:
        A timestamp token not present in existing_ids
    """
    taken = set(existing_ids)
    token = int(time.time() * 1000)
    while str(token) in taken:
        token += 1
    return str(token)


def products_cost(
    items: Iterable[ActivityItem],
    products: Iterable[Product],
) -> float:
    """
    Price a list of product lines at current product prices.

    A line whose product no longer exists is priced at zero.
    """
    prices = {product.id: product.price_per_unit for product in products}
    cost = 0.0
    for item in items:
        price = prices.get(item.product_id)
        if price is None:
            logger.warning(f"Product {item.product_id} not found, line priced at 0")
            continue
        cost += item.quantity * price
    return cost


def activity_total_cost(
    labor_cost: float,
    items: Iterable[ActivityItem],
    products: Iterable[Product],
) -> float:
    """Labor cost plus the snapshot cost of every product line."""
    return labor_cost + products_cost(items, products)


def build_activity(
    activity_id: str,
    plot_id: str,
    date,
    type: str,
    status: ActivityStatus,
    description: str,
    labor_cost: float,
    items: list[ActivityItem],
    products: Iterable[Product],
) -> Activity:
    """Build an activity with its total cost priced at save time."""
    return Activity(
        id=activity_id,
        plot_id=plot_id,
        date=date,
        type=type,
        status=status,
        description=description,
        labor_cost=labor_cost,
        products_used=items,
        total_cost=activity_total_cost(labor_cost, items, products),
    )


def build_harvest(
    harvest_id: str,
    plot: Plot,
    date,
    classification: Optional[str],
    quantity: float,
    unit,
    unit_price: float,
) -> Harvest:
    """Build a harvest, snapshotting the plot's crop and pricing the revenue."""
    return Harvest(
        id=harvest_id,
        plot_id=plot.id,
        date=date,
        crop_type=plot.crop or "Outros",
        classification=classification or DEFAULT_CLASSIFICATION,
        quantity=quantity,
        unit=unit,
        unit_price=unit_price,
        total_revenue=quantity * unit_price,
    )


def classification_options(plot: Optional[Plot]) -> list[str]:
    """
    Suggested harvest classifications for a plot's crop.

    These are suggestions for input forms only; harvests accept any label.
    """
    if plot is None:
        return []
    crop = plot.crop.lower()
    for keyword, options in CROP_CLASSIFICATIONS.items():
        if keyword in crop:
            return list(options)
    return list(GENERIC_CLASSIFICATIONS)


def consumes_stock(previous: Optional[Activity], current: Activity) -> bool:
    """An activity draws stock when it becomes completed."""
    if current.status != ActivityStatus.COMPLETED:
        return False
    return previous is None or previous.status != ActivityStatus.COMPLETED


def apply_stock_consumption(
    products: list[Product],
    items: Iterable[ActivityItem],
) -> list[Product]:
    """
    Decrement tracked stock by the quantities consumed.

    Products without a tracked stock are left alone. Stock is allowed to
    go negative.
    """
    consumed: dict[str, float] = {}
    for item in items:
        consumed[item.product_id] = consumed.get(item.product_id, 0.0) + item.quantity

    updated = []
    for product in products:
        if product.stock_quantity is not None and product.id in consumed:
            product = product.model_copy(
                update={"stock_quantity": product.stock_quantity - consumed[product.id]}
            )
        updated.append(product)
    return updated
