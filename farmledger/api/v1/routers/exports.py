"""
API router for CSV exports and JSON backup/restore.
"""
from datetime import date
from typing import Annotated, Literal, Optional
from fastapi import APIRouter, Query
from fastapi.responses import Response

from farmledger.api.dependencies import FarmServiceDep
from farmledger.domain.models import FarmSnapshot
from farmledger.services.application import exports


router = APIRouter(
    prefix="/exports",
    tags=["exports"],
)

CSV_MEDIA_TYPE = "text/csv; charset=utf-8"


def _csv_response(content: str, filename: str) -> Response:
    return Response(
        content=content,
        media_type=CSV_MEDIA_TYPE,
        headers={"Content-Disposition": f'attachment; filename="{filename}"'},
    )


@router.get("/activities.csv", summary="Export activities as CSV")
async def export_activities(
    farm_service: FarmServiceDep,
    view: Annotated[Optional[Literal["history", "planning"]], Query()] = None,
    plot_id: Annotated[Optional[str], Query()] = None,
    start_date: Annotated[Optional[date], Query()] = None,
    end_date: Annotated[Optional[date], Query()] = None,
) -> Response:
    content = exports.activities_to_csv(
        farm_service.list_activities(view=view, plot_id=plot_id),
        farm_service.list_plots(),
        start_date=start_date,
        end_date=end_date,
    )
    return _csv_response(content, exports.export_filename("activities", date.today()))


@router.get("/harvests.csv", summary="Export harvests as CSV")
async def export_harvests(
    farm_service: FarmServiceDep,
    plot_id: Annotated[Optional[str], Query()] = None,
    start_date: Annotated[Optional[date], Query()] = None,
    end_date: Annotated[Optional[date], Query()] = None,
) -> Response:
    content = exports.harvests_to_csv(
        farm_service.list_harvests(plot_id=plot_id),
        farm_service.list_plots(),
        start_date=start_date,
        end_date=end_date,
    )
    return _csv_response(content, exports.export_filename("harvests", date.today()))


@router.get("/backup", response_model=FarmSnapshot, summary="Download a full JSON backup")
async def download_backup(farm_service: FarmServiceDep) -> FarmSnapshot:
    return farm_service.backup()


@router.post(
    "/backup",
    response_model=FarmSnapshot,
    summary="Restore a full JSON backup",
    description="Replaces every collection with the uploaded snapshot.",
)
async def restore_backup(body: FarmSnapshot, farm_service: FarmServiceDep) -> FarmSnapshot:
    return await farm_service.restore(body)
