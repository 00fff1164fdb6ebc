"""API for business reports: summaries, breakdowns, trends and downloadable documents."""

from fastapi import APIRouter, Depends, Header, Query
from fastapi.responses import Response
from sqlalchemy.ext.asyncio import AsyncSession

from stoneledger.core.database.session import get_db
from stoneledger.modules.reports.schemas import (
    CsvKind,
    DateFilterOptionsResponse,
    MaterialBreakdownResponse,
    MonthlyTrendResponse,
    RenderedReport,
    ReportSummaryResponse,
    ResolvedRange,
    TimezoneOption,
)
from stoneledger.modules.reports.service import ReportsService
from stoneledger.shared.schemas.base import ApiResponse

router = APIRouter(prefix="/reports", tags=["Reports"])


class ReportQuery:
    """Query parameters shared by every organization report."""

    def __init__(
        self,
        organization_id: str = Query(..., description="Organization (tenant) id."),
        filter_type: str = Query(
            "custom",
            description="today, yesterday, this_week, last_week, this_month, last_month, "
            "this_year, last_7_days, last_30_days or custom.",
        ),
        start_date: str | None = Query(None, description="YYYY-MM-DD, required for custom."),
        end_date: str | None = Query(None, description="YYYY-MM-DD, required for custom."),
        timezone: str | None = Query(None, description="Zone name; defaults to the business zone."),
        x_timezone: str | None = Header(None),
    ):
        self.organization_id = organization_id
        self.filter_type = filter_type
        self.start_date = start_date
        self.end_date = end_date
        self.timezone = timezone or x_timezone

    def resolve(self, service: ReportsService) -> ResolvedRange:
        return service.resolve_range(self.filter_type, self.timezone, self.start_date, self.end_date)


def _attachment(report: RenderedReport, date_range: ResolvedRange) -> Response:
    headers = {
        "Content-Disposition": f'attachment; filename="{report.filename}"',
        "X-Report-Timezone": date_range.timezone,
    }
    if report.degraded:
        headers["X-Report-Degraded"] = "true"
        headers["X-Report-Warning"] = report.warning or ""
    return Response(content=report.content, media_type=report.media_type, headers=headers)


@router.get("/summary", response_model=ApiResponse[ReportSummaryResponse])
async def get_report_summary(
    params: ReportQuery = Depends(),
    db: AsyncSession = Depends(get_db),
):
    """Aggregates, counts and net figure for one organization and date filter."""
    service = ReportsService(db)
    date_range = params.resolve(service)
    data = await service.summary(params.organization_id, date_range)
    return ApiResponse(data=data)


@router.get("/pdf")
async def download_report_pdf(
    params: ReportQuery = Depends(),
    db: AsyncSession = Depends(get_db),
):
    """
    Business report as PDF.

    If the PDF engine fails the same document is returned as HTML with
    `X-Report-Degraded: true`. A render timeout returns 504.
    """
    service = ReportsService(db)
    date_range = params.resolve(service)
    report = await service.pdf_report(params.organization_id, date_range)
    return _attachment(report, date_range)


@router.get("/csv")
async def download_report_csv(
    params: ReportQuery = Depends(),
    type: CsvKind = Query(CsvKind.ALL, description="sales, rawstone, expenses or all."),
    db: AsyncSession = Depends(get_db),
):
    """Report line items as CSV; `all` concatenates the three tables."""
    service = ReportsService(db)
    date_range = params.resolve(service)
    report = await service.csv_report(params.organization_id, date_range, type)
    return _attachment(report, date_range)


@router.get("/material-breakdown", response_model=ApiResponse[MaterialBreakdownResponse])
async def get_material_breakdown(
    params: ReportQuery = Depends(),
    db: AsyncSession = Depends(get_db),
):
    """Sales and raw-material totals per material type, largest first."""
    service = ReportsService(db)
    date_range = params.resolve(service)
    data = await service.material_breakdown(params.organization_id, date_range)
    return ApiResponse(data=data)


@router.get("/monthly-trend", response_model=ApiResponse[MonthlyTrendResponse])
async def get_monthly_trend(
    organization_id: str = Query(...),
    year: int = Query(..., ge=1970, le=9999),
    timezone: str | None = Query(None),
    x_timezone: str | None = Header(None),
    db: AsyncSession = Depends(get_db),
):
    """Twelve local months of sales, raw-material and expense totals."""
    service = ReportsService(db)
    data = await service.monthly_trend(organization_id, year, timezone or x_timezone)
    return ApiResponse(data=data)


@router.get("/date-filters", response_model=ApiResponse[DateFilterOptionsResponse])
async def get_date_filters(
    timezone: str | None = Query(None),
    x_timezone: str | None = Header(None),
    db: AsyncSession = Depends(get_db),
):
    """Every non-custom filter resolved for the requested zone."""
    service = ReportsService(db)
    return ApiResponse(data=service.date_filter_options(timezone or x_timezone))


@router.get("/timezones", response_model=ApiResponse[list[TimezoneOption]])
async def get_timezones():
    """Supported zone abbreviations with their fixed offsets."""
    return ApiResponse(data=ReportsService.timezones())
