"""Service for business reports: range resolution, aggregation, compilation and rendering."""

from datetime import datetime

import structlog
from sqlalchemy.ext.asyncio import AsyncSession

from stoneledger.core.config import settings
from stoneledger.modules.organizations.repository import OrganizationRepository
from stoneledger.modules.reports.aggregator import FactAggregator
from stoneledger.modules.reports.compiler import ReportCompiler
from stoneledger.modules.reports.date_range import DateRangeResolver
from stoneledger.modules.reports.renderer import ReportRenderer, report_renderer
from stoneledger.modules.reports.repositories import LedgerFactRepository
from stoneledger.modules.reports.schemas import (
    CsvKind,
    DateFilterOption,
    DateFilterOptionsResponse,
    DateFilterType,
    FactKind,
    MaterialBreakdownResponse,
    MonthlyTrendResponse,
    RenderedReport,
    ReportBundle,
    ReportSummaryResponse,
    ResolvedRange,
    TimezoneOption,
)
from stoneledger.shared.utils.timezones import format_offset, list_timezones, offset_minutes

logger = structlog.get_logger()


class ReportsService:
    """
    Runs the report pipeline for one request.

    Steps are strictly sequential: resolve range, aggregate, compile, render.
    Range validation happens before any database access.
    """

    def __init__(self, db: AsyncSession, renderer: ReportRenderer | None = None):
        self.db = db
        self.resolver = DateRangeResolver(default_timezone=settings.default_timezone)
        self.aggregator = FactAggregator(LedgerFactRepository(db), OrganizationRepository(db))
        self.compiler = ReportCompiler(
            currency_symbol=settings.currency_symbol,
            row_limit=settings.report_row_limit,
        )
        self.renderer = renderer or report_renderer

    def resolve_range(
        self,
        filter_type: str | DateFilterType,
        timezone_name: str | None = None,
        start_date: str | None = None,
        end_date: str | None = None,
        now: datetime | None = None,
    ) -> ResolvedRange:
        return self.resolver.resolve(filter_type, timezone_name, start_date, end_date, now=now)

    async def build_bundle(self, organization_id: str, date_range: ResolvedRange) -> ReportBundle:
        result = await self.aggregator.aggregate(organization_id, date_range)
        return self.compiler.compile(result.organization, date_range, result)

    async def summary(self, organization_id: str, date_range: ResolvedRange) -> ReportSummaryResponse:
        bundle = await self.build_bundle(organization_id, date_range)
        return self.compiler.summarize(bundle)

    async def pdf_report(self, organization_id: str, date_range: ResolvedRange) -> RenderedReport:
        bundle = await self.build_bundle(organization_id, date_range)
        return await self.renderer.render_pdf(bundle)

    async def csv_report(self, organization_id: str, date_range: ResolvedRange, kind: CsvKind) -> RenderedReport:
        bundle = await self.build_bundle(organization_id, date_range)
        return self.renderer.render_csv(bundle, kind)

    async def material_breakdown(
        self, organization_id: str, date_range: ResolvedRange
    ) -> MaterialBreakdownResponse:
        result = await self.aggregator.aggregate(organization_id, date_range)
        return MaterialBreakdownResponse(
            organization=result.organization,
            range=date_range,
            sales=list(result.by_material[FactKind.SALES]),
            raw_material=list(result.by_material[FactKind.RAW_MATERIAL]),
        )

    async def monthly_trend(
        self, organization_id: str, year: int, timezone_name: str | None = None
    ) -> MonthlyTrendResponse:
        year_range = self.resolver.year_range(year, timezone_name)
        organization, rows = await self.aggregator.monthly_trend(organization_id, year_range)
        return MonthlyTrendResponse(
            organization=organization,
            year=year,
            timezone=year_range.timezone,
            rows=rows,
        )

    def date_filter_options(
        self, timezone_name: str | None = None, now: datetime | None = None
    ) -> DateFilterOptionsResponse:
        ranges = self.resolver.available_filters(timezone_name, now=now)
        zone = ranges[0].timezone
        return DateFilterOptionsResponse(
            timezone=zone,
            utc_offset=format_offset(offset_minutes(zone)),
            filters=[
                DateFilterOption(
                    filter_type=r.filter_type,
                    label=r.label,
                    start_date=r.start_date,
                    end_date=r.end_date,
                    start_utc=r.start_utc,
                    end_utc=r.end_utc,
                )
                for r in ranges
            ],
        )

    @staticmethod
    def timezones() -> list[TimezoneOption]:
        return [TimezoneOption(**zone) for zone in list_timezones()]
