"""
Application service: Owner of the farm state.

Holds the single in-memory snapshot, applies edits by replacement and
persists every change through the configured record store. Reports are
delegated to the pure aggregation functions.
"""
import asyncio
import logging
from datetime import date
from typing import Callable, Iterable, List, Optional, Tuple, TypeVar

from farmledger.domain.models import (
    Activity,
    ActivityItem,
    ActivityStatus,
    FarmSnapshot,
    FinancialSummary,
    Harvest,
    HarvestStatistics,
    Plot,
    PlotReport,
    PlotSummary,
    Product,
    ServiceCostRow,
    TimelineGroup,
    UnitType,
)
from farmledger.infrastructure.insight_client import InsightClient
from farmledger.infrastructure.record_store import RecordStore
from farmledger.services.domain import financial_aggregator, record_builder

logger = logging.getLogger(__name__)

R = TypeVar("R", Plot, Product, Activity, Harvest)
T = TypeVar("T")

ACTIVITY_VIEWS = {
    "history": ActivityStatus.COMPLETED,
    "planning": ActivityStatus.PLANNED,
}


class RecordNotFoundError(Exception):
    """Raised when a record id does not exist in its collection."""

    def __init__(self, kind: str, record_id: str):
        super().__init__(f"{kind} '{record_id}' not found")
        self.kind = kind
        self.record_id = record_id


def _find(records: Iterable[R], record_id: str) -> Optional[R]:
    return next((r for r in records if r.id == record_id), None)


def _require(kind: str, records: Iterable[R], record_id: str) -> R:
    record = _find(records, record_id)
    if record is None:
        raise RecordNotFoundError(kind, record_id)
    return record


def _require_plot_reference(snapshot: FarmSnapshot, plot_id: str) -> Plot:
    plot = _find(snapshot.plots, plot_id)
    if plot is None:
        raise ValueError(f"Plot '{plot_id}' does not exist")
    return plot


def _replace(records: List[R], record: R) -> List[R]:
    return [record if r.id == record.id else r for r in records]


def _without(records: List[R], record_id: str) -> List[R]:
    return [r for r in records if r.id != record_id]


def _newest_first(records: Iterable[R]) -> List[R]:
    return sorted(records, key=lambda r: r.date, reverse=True)


def _with_category(snapshot: FarmSnapshot, category: str) -> List[str]:
    if category in snapshot.categories:
        return list(snapshot.categories)
    return [*snapshot.categories, category]


class FarmService:
    """
    Application service for farm records and reports.

    Every mutation builds a new snapshot, saves it and only then makes it
    current, so a failed save leaves the in-memory state untouched.
    """

    def __init__(
        self,
        store: RecordStore,
        snapshot: Optional[FarmSnapshot] = None,
        today: Callable[[], date] = date.today,
    ):
        """
        Initialize the service with dependencies.

        Args:
            store: Record store used to persist snapshots
            snapshot: Initial state (defaults to an empty farm)
            today: Clock used when duplicating activities
        """
        self.store = store
        self._state = snapshot or FarmSnapshot()
        self._today = today
        self._lock = asyncio.Lock()

    @property
    def state(self) -> FarmSnapshot:
        return self._state

    async def load(self) -> FarmSnapshot:
        """
        Replace the in-memory state with the stored snapshot.

        Raises:
            PersistenceError: If the store cannot be read
        """
        snapshot = await self.store.load()
        self._state = snapshot or FarmSnapshot()
        logger.info(
            f"Loaded farm state: {len(self._state.plots)} plots, "
            f"{len(self._state.activities)} activities, "
            f"{len(self._state.harvests)} harvests"
        )
        return self._state

    async def _commit(self, build: Callable[[FarmSnapshot], Tuple[FarmSnapshot, T]]) -> T:
        """
        Apply one change while holding the state lock.

        The builder receives the current snapshot and returns the next one
        together with the value handed back to the caller. Lookups and
        validation happen inside the builder so they see the state that is
        saved. Returning the same snapshot skips the save.
        """
        async with self._lock:
            snapshot, result = build(self._state)
            if snapshot is not self._state:
                await self.store.save(snapshot)
                self._state = snapshot
            return result

    # ============================================================
    # Plots
    # ============================================================

    def list_plots(self) -> List[Plot]:
        return list(self._state.plots)

    def get_plot(self, plot_id: str) -> Plot:
        return _require("Plot", self._state.plots, plot_id)

    async def create_plot(self, name: str, crop: str, area: float) -> Plot:
        def build(s: FarmSnapshot):
            plot = Plot(
                id=record_builder.new_record_id(p.id for p in s.plots),
                name=name,
                crop=crop,
                area=area,
            )
            return s.model_copy(update={"plots": [*s.plots, plot]}), plot

        plot = await self._commit(build)
        logger.info(f"Created plot {plot.id} ({plot.name})")
        return plot

    async def update_plot(self, plot_id: str, name: str, crop: str, area: float) -> Plot:
        plot = Plot(id=plot_id, name=name, crop=crop, area=area)

        def build(s: FarmSnapshot):
            _require("Plot", s.plots, plot_id)
            return s.model_copy(update={"plots": _replace(s.plots, plot)}), plot

        return await self._commit(build)

    async def delete_plot(self, plot_id: str) -> None:
        """Delete a plot. Activities and harvests keep their reference to it."""
        def build(s: FarmSnapshot):
            _require("Plot", s.plots, plot_id)
            return s.model_copy(update={"plots": _without(s.plots, plot_id)}), None

        await self._commit(build)
        logger.info(f"Deleted plot {plot_id}")

    # ============================================================
    # Products
    # ============================================================

    def list_products(self) -> List[Product]:
        return list(self._state.products)

    def get_product(self, product_id: str) -> Product:
        return _require("Product", self._state.products, product_id)

    async def create_product(
        self,
        name: str,
        price_per_unit: float,
        unit: UnitType = UnitType.UNIT,
        category: str = "Outros",
        stock_quantity: Optional[float] = None,
    ) -> Product:
        def build(s: FarmSnapshot):
            product = Product(
                id=record_builder.new_record_id(p.id for p in s.products),
                name=name,
                price_per_unit=price_per_unit,
                unit=unit,
                category=category,
                stock_quantity=stock_quantity,
            )
            return s.model_copy(update={
                "products": [*s.products, product],
                "categories": _with_category(s, category),
            }), product

        product = await self._commit(build)
        logger.info(f"Created product {product.id} ({product.name})")
        return product

    async def update_product(
        self,
        product_id: str,
        name: str,
        price_per_unit: float,
        unit: UnitType = UnitType.UNIT,
        category: str = "Outros",
        stock_quantity: Optional[float] = None,
    ) -> Product:
        """Update a product. Saved activities keep the price they were costed at."""
        product = Product(
            id=product_id,
            name=name,
            price_per_unit=price_per_unit,
            unit=unit,
            category=category,
            stock_quantity=stock_quantity,
        )

        def build(s: FarmSnapshot):
            _require("Product", s.products, product_id)
            return s.model_copy(update={
                "products": _replace(s.products, product),
                "categories": _with_category(s, category),
            }), product

        return await self._commit(build)

    async def delete_product(self, product_id: str) -> None:
        def build(s: FarmSnapshot):
            _require("Product", s.products, product_id)
            return s.model_copy(update={"products": _without(s.products, product_id)}), None

        await self._commit(build)

    # ============================================================
    # Activities
    # ============================================================

    def list_activities(
        self,
        view: Optional[str] = None,
        plot_id: Optional[str] = None,
    ) -> List[Activity]:
        """
        List activities.

        Args:
            view: "history" (completed) or "planning" (planned); sorted
                newest first. Without a view the stored order is kept.
            plot_id: Restrict to one plot

        Raises:
            ValueError: If the view name is unknown
        """
        activities = list(self._state.activities)
        if plot_id is not None:
            activities = [a for a in activities if a.plot_id == plot_id]
        if view is None:
            return activities
        if view not in ACTIVITY_VIEWS:
            raise ValueError(f"Unknown activity view '{view}'")
        status = ACTIVITY_VIEWS[view]
        return _newest_first(a for a in activities if a.status == status)

    def get_activity(self, activity_id: str) -> Activity:
        return _require("Activity", self._state.activities, activity_id)

    def _save_activity(
        self,
        snapshot: FarmSnapshot,
        activity: Activity,
        previous: Optional[Activity],
    ) -> FarmSnapshot:
        if previous is None:
            activities = [activity, *snapshot.activities]
        else:
            activities = _replace(snapshot.activities, activity)

        products = snapshot.products
        if record_builder.consumes_stock(previous, activity):
            products = record_builder.apply_stock_consumption(products, activity.products_used)

        activity_types = list(snapshot.activity_types)
        if activity.type not in activity_types:
            activity_types.append(activity.type)

        return snapshot.model_copy(update={
            "activities": activities,
            "products": products,
            "activity_types": activity_types,
        })

    async def create_activity(
        self,
        plot_id: str,
        date: date,
        type: str,
        labor_cost: float,
        status: ActivityStatus = ActivityStatus.COMPLETED,
        description: str = "",
        products_used: Optional[List[ActivityItem]] = None,
    ) -> Activity:
        """
        Record or schedule an activity, costed at current product prices.

        Raises:
            ValueError: If the plot does not exist
        """
        items = [ActivityItem.model_validate(i) for i in products_used or []]

        def build(s: FarmSnapshot):
            _require_plot_reference(s, plot_id)
            activity = record_builder.build_activity(
                activity_id=record_builder.new_record_id(a.id for a in s.activities),
                plot_id=plot_id,
                date=date,
                type=type,
                status=status,
                description=description,
                labor_cost=labor_cost,
                items=items,
                products=s.products,
            )
            return self._save_activity(s, activity, None), activity

        activity = await self._commit(build)
        logger.info(f"Created {activity.status.value} activity {activity.id} "
                    f"({activity.type}, total={activity.total_cost})")
        return activity

    async def update_activity(
        self,
        activity_id: str,
        plot_id: str,
        date: date,
        type: str,
        labor_cost: float,
        status: ActivityStatus = ActivityStatus.COMPLETED,
        description: str = "",
        products_used: Optional[List[ActivityItem]] = None,
    ) -> Activity:
        """
        Replace an activity, re-costing it at current product prices.

        Any status change is allowed in either direction.

        Raises:
            RecordNotFoundError: If the activity does not exist
            ValueError: If the plot does not exist
        """
        items = [ActivityItem.model_validate(i) for i in products_used or []]

        def build(s: FarmSnapshot):
            previous = _require("Activity", s.activities, activity_id)
            _require_plot_reference(s, plot_id)
            activity = record_builder.build_activity(
                activity_id=activity_id,
                plot_id=plot_id,
                date=date,
                type=type,
                status=status,
                description=description,
                labor_cost=labor_cost,
                items=items,
                products=s.products,
            )
            return self._save_activity(s, activity, previous), (previous, activity)

        previous, activity = await self._commit(build)
        if previous.status != activity.status:
            logger.info(f"Activity {activity_id} moved from {previous.status.value} "
                        f"to {activity.status.value}")
        return activity

    async def duplicate_activity(self, activity_id: str) -> Activity:
        """Copy an activity to today's date under a new id."""
        source = self.get_activity(activity_id)
        return await self.create_activity(
            plot_id=source.plot_id,
            date=self._today(),
            type=source.type,
            labor_cost=source.labor_cost,
            status=source.status,
            description=source.description,
            products_used=list(source.products_used),
        )

    async def delete_activity(self, activity_id: str) -> None:
        def build(s: FarmSnapshot):
            _require("Activity", s.activities, activity_id)
            return s.model_copy(update={"activities": _without(s.activities, activity_id)}), None

        await self._commit(build)

    # ============================================================
    # Harvests
    # ============================================================

    def list_harvests(self, plot_id: Optional[str] = None) -> List[Harvest]:
        harvests = list(self._state.harvests)
        if plot_id is not None:
            harvests = [h for h in harvests if h.plot_id == plot_id]
        return harvests

    def get_harvest(self, harvest_id: str) -> Harvest:
        return _require("Harvest", self._state.harvests, harvest_id)

    def classification_options(self, plot_id: str) -> List[str]:
        return record_builder.classification_options(_find(self._state.plots, plot_id))

    async def create_harvest(
        self,
        plot_id: str,
        date: date,
        quantity: float,
        unit_price: float,
        unit: UnitType = UnitType.KG,
        classification: Optional[str] = None,
    ) -> Harvest:
        """
        Record a harvest, snapshotting the plot's crop.

        Raises:
            ValueError: If the plot does not exist
        """
        def build(s: FarmSnapshot):
            harvest = record_builder.build_harvest(
                harvest_id=record_builder.new_record_id(h.id for h in s.harvests),
                plot=_require_plot_reference(s, plot_id),
                date=date,
                classification=classification,
                quantity=quantity,
                unit=unit,
                unit_price=unit_price,
            )
            return s.model_copy(update={"harvests": [harvest, *s.harvests]}), harvest

        harvest = await self._commit(build)
        logger.info(f"Created harvest {harvest.id} (revenue={harvest.total_revenue})")
        return harvest

    async def update_harvest(
        self,
        harvest_id: str,
        plot_id: str,
        date: date,
        quantity: float,
        unit_price: float,
        unit: UnitType = UnitType.KG,
        classification: Optional[str] = None,
    ) -> Harvest:
        def build(s: FarmSnapshot):
            _require("Harvest", s.harvests, harvest_id)
            harvest = record_builder.build_harvest(
                harvest_id=harvest_id,
                plot=_require_plot_reference(s, plot_id),
                date=date,
                classification=classification,
                quantity=quantity,
                unit=unit,
                unit_price=unit_price,
            )
            return s.model_copy(update={"harvests": _replace(s.harvests, harvest)}), harvest

        return await self._commit(build)

    async def delete_harvest(self, harvest_id: str) -> None:
        def build(s: FarmSnapshot):
            _require("Harvest", s.harvests, harvest_id)
            return s.model_copy(update={"harvests": _without(s.harvests, harvest_id)}), None

        await self._commit(build)

    # ============================================================
    # Catalog
    # ============================================================

    def list_activity_types(self) -> List[str]:
        return list(self._state.activity_types)

    def list_categories(self) -> List[str]:
        return list(self._state.categories)

    async def add_activity_type(self, name: str) -> List[str]:
        def build(s: FarmSnapshot):
            if name in s.activity_types:
                return s, list(s.activity_types)
            activity_types = [*s.activity_types, name]
            return s.model_copy(update={"activity_types": activity_types}), activity_types

        return await self._commit(build)

    async def add_category(self, name: str) -> List[str]:
        def build(s: FarmSnapshot):
            if name in s.categories:
                return s, list(s.categories)
            categories = _with_category(s, name)
            return s.model_copy(update={"categories": categories}), categories

        return await self._commit(build)

    # ============================================================
    # Reports
    # ============================================================

    def financial_summary(self) -> FinancialSummary:
        return financial_aggregator.compute_financial_summary(
            self._state.plots,
            self._state.activities,
            self._state.harvests,
        )

    def service_costs(
        self,
        start_date: Optional[date] = None,
        end_date: Optional[date] = None,
        plot_id: Optional[str] = None,
    ) -> List[ServiceCostRow]:
        return financial_aggregator.service_cost_breakdown(
            self._state.activities,
            start_date=start_date,
            end_date=end_date,
            plot_id=plot_id,
        )

    def harvest_statistics(
        self,
        plot_id: Optional[str] = None,
        start_date: Optional[date] = None,
        end_date: Optional[date] = None,
    ) -> HarvestStatistics:
        return financial_aggregator.harvest_statistics(
            self._state.harvests,
            plot_id=plot_id,
            start_date=start_date,
            end_date=end_date,
        )

    def timeline(self, year: int, month: int, plot_id: Optional[str] = None) -> List[TimelineGroup]:
        return financial_aggregator.group_activities_by_date(
            self._state.activities, year, month, plot_id=plot_id,
        )

    def plot_report(self, plot_id: str) -> PlotReport:
        """
        Build the printable report for one plot.

        Service costs are listed in the order their types first appear in
        the plot's activities, as on the printed sheet.

        Raises:
            RecordNotFoundError: If the plot does not exist
        """
        state = self._state
        plot = _require("Plot", state.plots, plot_id)
        summary = next(
            (p for p in self.financial_summary().plot_summaries if p.plot_id == plot_id),
            PlotSummary(plot_id=plot_id, plot_name=plot.name),
        )
        completed = [
            a for a in state.activities
            if a.plot_id == plot_id and a.status == ActivityStatus.COMPLETED
        ]
        return PlotReport(
            plot=plot,
            summary=summary,
            service_costs=financial_aggregator.service_cost_breakdown(
                state.activities, plot_id=plot_id, sort_by_total=False,
            ),
            statement=_newest_first(completed),
            harvests=self.harvest_statistics(plot_id=plot_id),
        )

    async def insights(self, client: InsightClient) -> str:
        """Ask the insight generator for an HTML analysis of the current state."""
        return await client.generate_insights(
            summary=self.financial_summary(),
            activities=list(self._state.activities),
            harvests=list(self._state.harvests),
            plots=list(self._state.plots),
        )

    # ============================================================
    # Backup
    # ============================================================

    def backup(self) -> FarmSnapshot:
        return self._state

    async def restore(self, snapshot: FarmSnapshot) -> FarmSnapshot:
        """Replace the whole dataset with a backup and persist it."""
        restored = await self._commit(lambda s: (snapshot, snapshot))
        logger.info(f"Restored backup with {len(snapshot.plots)} plots")
        return restored
