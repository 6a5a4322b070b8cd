"""
Domain service: Financial aggregation over farm records.

Turns the plot, activity and harvest collections into the figures consumed
by the dashboard, the printable reports and the calendar:
- Farm-wide and per-plot cost/revenue/profit
- Completed activity cost grouped by activity type
- Harvest volume and revenue, split by classification
- Activities grouped by day for a calendar month

Every function here is pure and total. Empty inputs give zeroed output and
dangling plot references are absorbed rather than raised.
"""
from datetime import date
from typing import Iterable, Optional
import logging

from farmledger.domain.models import (
    Activity,
    ActivityStatus,
    ClassificationTotal,
    FinancialSummary,
    Harvest,
    HarvestStatistics,
    Plot,
    PlotSummary,
    ServiceCostRow,
    TimelineGroup,
)

logger = logging.getLogger(__name__)


def _in_range(
    day: date,
    start_date: Optional[date],
    end_date: Optional[date],
) -> bool:
    """Inclusive date-range check; a missing bound is open."""
    if start_date is not None and day < start_date:
        return False
    if end_date is not None and day > end_date:
        return False
    return True


def compute_financial_summary(
    plots: Optional[Iterable[Plot]] = None,
    activities: Optional[Iterable[Activity]] = None,
    harvests: Optional[Iterable[Harvest]] = None,
) -> FinancialSummary:
    """
    Compute farm-wide and per-plot cost, revenue and profit.

    Only completed activities count as cost; every harvest counts as
    revenue. Each plot gets a row even with no records. Amounts that
    point at an unknown plot still count towards the totals and get
    their own row, appended in the order they are first seen.

    Args:
        plots: Current plots
        activities: All activities (planned ones are ignored)
        harvests: All harvests

    Returns:
        FinancialSummary whose per-plot rows add up to the totals
    """
    plots = list(plots or [])
    names = {plot.id: plot.name for plot in plots}

    # plot_id -> [cost, revenue]; insertion order drives the output order
    accumulators: dict[str, list[float]] = {plot.id: [0.0, 0.0] for plot in plots}
    total_cost = 0.0
    total_revenue = 0.0

    for activity in activities or []:
        if activity.status != ActivityStatus.COMPLETED:
            continue
        total_cost += activity.total_cost
        if activity.plot_id not in accumulators:
            logger.debug(f"Activity {activity.id} references unknown plot {activity.plot_id}")
        accumulators.setdefault(activity.plot_id, [0.0, 0.0])[0] += activity.total_cost

    for harvest in harvests or []:
        total_revenue += harvest.total_revenue
        if harvest.plot_id not in accumulators:
            logger.debug(f"Harvest {harvest.id} references unknown plot {harvest.plot_id}")
        accumulators.setdefault(harvest.plot_id, [0.0, 0.0])[1] += harvest.total_revenue

    plot_summaries = [
        PlotSummary(
            plot_id=plot_id,
            plot_name=names.get(plot_id),
            cost=cost,
            revenue=revenue,
            profit=revenue - cost,
        )
        for plot_id, (cost, revenue) in accumulators.items()
    ]

    return FinancialSummary(
        total_revenue=total_revenue,
        total_cost=total_cost,
        net_profit=total_revenue - total_cost,
        plot_summaries=plot_summaries,
    )


def service_cost_breakdown(
    activities: Optional[Iterable[Activity]] = None,
    start_date: Optional[date] = None,
    end_date: Optional[date] = None,
    plot_id: Optional[str] = None,
    sort_by_total: bool = True,
) -> list[ServiceCostRow]:
    """
    Group completed activity costs by activity type.

    The product share of each activity is taken as total cost minus labor
    cost, exactly as stored. It is not clamped, so an activity whose labor
    was edited upwards after saving yields a negative product share.

    Args:
        activities: All activities
        start_date: Inclusive lower bound on the activity date
        end_date: Inclusive upper bound on the activity date
        plot_id: Restrict to a single plot
        sort_by_total: Order rows by total; when False, rows keep the
            order in which their types were first seen

    Returns:
        One row per activity type, most expensive first by default. Ties
        keep the order in which the types were first seen.
    """
    buckets: dict[str, dict] = {}

    for activity in activities or []:
        if activity.status != ActivityStatus.COMPLETED:
            continue
        if plot_id is not None and activity.plot_id != plot_id:
            continue
        if not _in_range(activity.date, start_date, end_date):
            continue

        bucket = buckets.setdefault(
            activity.type,
            {"count": 0, "labor": 0.0, "products": 0.0, "total": 0.0},
        )
        bucket["count"] += 1
        bucket["labor"] += activity.labor_cost
        bucket["products"] += activity.total_cost - activity.labor_cost
        bucket["total"] += activity.total_cost

    rows = [ServiceCostRow(type=activity_type, **data) for activity_type, data in buckets.items()]
    if not sort_by_total:
        return rows
    return sorted(rows, key=lambda row: row.total, reverse=True)


def harvest_statistics(
    harvests: Optional[Iterable[Harvest]] = None,
    plot_id: Optional[str] = None,
    start_date: Optional[date] = None,
    end_date: Optional[date] = None,
) -> HarvestStatistics:
    """
    Sum harvested volume and revenue, with quantity split by classification.

    Quantities are added as-is regardless of their unit of measure.
    """
    total_volume = 0.0
    total_revenue = 0.0
    by_classification: dict[str, float] = {}

    for harvest in harvests or []:
        if plot_id is not None and harvest.plot_id != plot_id:
            continue
        if not _in_range(harvest.date, start_date, end_date):
            continue
        total_volume += harvest.quantity
        total_revenue += harvest.total_revenue
        by_classification[harvest.classification] = (
            by_classification.get(harvest.classification, 0.0) + harvest.quantity
        )

    return HarvestStatistics(
        total_volume=total_volume,
        total_revenue=total_revenue,
        by_classification=[
            ClassificationTotal(classification=label, quantity=quantity)
            for label, quantity in by_classification.items()
        ],
    )


def group_activities_by_date(
    activities: Optional[Iterable[Activity]],
    year: int,
    month: int,
    plot_id: Optional[str] = None,
) -> list[TimelineGroup]:
    """
    Group one calendar month of activities by day.

    Both planned and completed activities are included. Days come out in
    ascending order so the result reads like a monthly calendar page;
    activities within a day keep their original list order.
    """
    grouped: dict[date, list[Activity]] = {}

    for activity in activities or []:
        if activity.date.year != year or activity.date.month != month:
            continue
        if plot_id is not None and activity.plot_id != plot_id:
            continue
        grouped.setdefault(activity.date, []).append(activity)

    return [
        TimelineGroup(date=day, activities=grouped[day])
        for day in sorted(grouped)
    ]
