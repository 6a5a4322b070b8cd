"""
API router for financial reports and insights.
"""
from datetime import date
from typing import Annotated, List, Optional
from fastapi import APIRouter, Path, Query, Request

from farmledger.api.dependencies import FarmServiceDep, InsightClientDep
from farmledger.api.v1.models.responses import InsightsResponse
from farmledger.domain.models import (
    FinancialSummary,
    HarvestStatistics,
    PlotReport,
    ServiceCostRow,
    TimelineGroup,
)
from farmledger.middleware.rate_limit import INSIGHT_RATE_LIMIT, limiter


router = APIRouter(
    prefix="/reports",
    tags=["reports"],
)

StartDate = Annotated[Optional[date], Query(description="Inclusive start date")]
EndDate = Annotated[Optional[date], Query(description="Inclusive end date")]
PlotFilter = Annotated[Optional[str], Query(description="Restrict to one plot")]


@router.get(
    "/summary",
    response_model=FinancialSummary,
    summary="Farm-wide financial summary",
    description="""
    Revenue, cost and profit for the whole farm and for each plot.

    - Only completed activities count as cost
    - Every harvest counts as revenue
    - Amounts on deleted plots are kept under a row with no plot name
    """,
    responses={
        200: {
            "description": "Summary computed from the current records",
            "content": {
                "application/json": {
                    "example": {
                        "totalRevenue": 9000.0,
                        "totalCost": 1500.0,
                        "netProfit": 7500.0,
                        "plotSummaries": [
                            {"plotId": "1", "plotName": "Plot 01 - Palmer", "cost": 1500.0,
                             "revenue": 9000.0, "profit": 7500.0},
                        ]
                    }
                }
            }
        },
    }
)
async def get_summary(farm_service: FarmServiceDep) -> FinancialSummary:
    return farm_service.financial_summary()


@router.get(
    "/service-costs",
    response_model=List[ServiceCostRow],
    summary="Completed activity cost by activity type",
)
async def get_service_costs(
    farm_service: FarmServiceDep,
    start_date: StartDate = None,
    end_date: EndDate = None,
    plot_id: PlotFilter = None,
) -> List[ServiceCostRow]:
    return farm_service.service_costs(start_date=start_date, end_date=end_date, plot_id=plot_id)


@router.get(
    "/harvests",
    response_model=HarvestStatistics,
    summary="Harvest volume, revenue and classification split",
)
async def get_harvest_statistics(
    farm_service: FarmServiceDep,
    plot_id: PlotFilter = None,
    start_date: StartDate = None,
    end_date: EndDate = None,
) -> HarvestStatistics:
    return farm_service.harvest_statistics(plot_id=plot_id, start_date=start_date, end_date=end_date)


@router.get(
    "/timeline",
    response_model=List[TimelineGroup],
    summary="Activities of one month grouped by day",
)
async def get_timeline(
    farm_service: FarmServiceDep,
    year: Annotated[int, Query(ge=1, le=9999)],
    month: Annotated[int, Query(ge=1, le=12)],
    plot_id: PlotFilter = None,
) -> List[TimelineGroup]:
    return farm_service.timeline(year, month, plot_id=plot_id)


@router.get(
    "/plots/{plot_id}",
    response_model=PlotReport,
    summary="Printable report for one plot",
)
async def get_plot_report(
    plot_id: Annotated[str, Path(description="Unique identifier for the plot")],
    farm_service: FarmServiceDep,
) -> PlotReport:
    return farm_service.plot_report(plot_id)


@router.post(
    "/insights",
    response_model=InsightsResponse,
    summary="Generate an AI analysis of the farm",
    description="""
    Sends the financial summary, the plots and the most recent activities
    and harvests to the text-generation service. A fixed message is
    returned when the service is unavailable.
    """,
    responses={
        429: {
            "description": "Rate limit exceeded",
        },
    }
)
@limiter.limit(INSIGHT_RATE_LIMIT)
async def generate_insights(
    request: Request,
    farm_service: FarmServiceDep,
    insight_client: InsightClientDep,
) -> InsightsResponse:
    html = await farm_service.insights(insight_client)
    return InsightsResponse(html=html)
