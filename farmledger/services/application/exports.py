"""
Application service: CSV exports of activity and harvest lists.
"""
import csv
import io
from datetime import date
from typing import Iterable, Optional

from farmledger.domain.models import Activity, Harvest, Plot

UNKNOWN_PLOT = "Unknown"

ACTIVITY_COLUMNS = [
    "date", "plot", "type", "status", "description",
    "labor_cost", "products_cost", "total_cost",
]

HARVEST_COLUMNS = [
    "date", "plot", "crop_type", "classification",
    "quantity", "unit", "unit_price", "total_revenue",
]


def _plot_names(plots: Iterable[Plot]) -> dict:
    return {plot.id: plot.name for plot in plots}


def _within(day: date, start_date: Optional[date], end_date: Optional[date]) -> bool:
    return (start_date is None or day >= start_date) and (end_date is None or day <= end_date)


def activities_to_csv(
    activities: Iterable[Activity],
    plots: Iterable[Plot],
    start_date: Optional[date] = None,
    end_date: Optional[date] = None,
) -> str:
    """Render activities as CSV, resolving plot names."""
    names = _plot_names(plots)
    buffer = io.StringIO()
    writer = csv.writer(buffer)
    writer.writerow(ACTIVITY_COLUMNS)
    for activity in activities:
        if not _within(activity.date, start_date, end_date):
            continue
        writer.writerow([
            activity.date.isoformat(),
            names.get(activity.plot_id, UNKNOWN_PLOT),
            activity.type,
            activity.status.value,
            activity.description,
            f"{activity.labor_cost:.2f}",
            f"{activity.total_cost - activity.labor_cost:.2f}",
            f"{activity.total_cost:.2f}",
        ])
    return buffer.getvalue()


def harvests_to_csv(
    harvests: Iterable[Harvest],
    plots: Iterable[Plot],
    start_date: Optional[date] = None,
    end_date: Optional[date] = None,
) -> str:
    """Render harvests as CSV, resolving plot names."""
    names = _plot_names(plots)
    buffer = io.StringIO()
    writer = csv.writer(buffer)
    writer.writerow(HARVEST_COLUMNS)
    for harvest in harvests:
        if not _within(harvest.date, start_date, end_date):
            continue
        writer.writerow([
            harvest.date.isoformat(),
            names.get(harvest.plot_id, UNKNOWN_PLOT),
            harvest.crop_type,
            harvest.classification,
            harvest.quantity,
            harvest.unit.value,
            f"{harvest.unit_price:.2f}",
            f"{harvest.total_revenue:.2f}",
        ])
    return buffer.getvalue()


def export_filename(kind: str, today: date) -> str:
    return f"{kind}-{today.isoformat()}.csv"
