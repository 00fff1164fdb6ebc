"""Schemas for the report pipeline: resolved ranges, facts, buckets, bundles and API responses."""

from datetime import date, datetime, timezone
from decimal import Decimal
from enum import StrEnum

from pydantic import field_validator

from stoneledger.shared.schemas.base import BaseSchema, FrozenSchema


class DateFilterType(StrEnum):
    """Symbolic date filters accepted from clients."""

    TODAY = "today"
    YESTERDAY = "yesterday"
    THIS_WEEK = "this_week"
    LAST_WEEK = "last_week"
    THIS_MONTH = "this_month"
    LAST_MONTH = "last_month"
    THIS_YEAR = "this_year"
    LAST_7_DAYS = "last_7_days"
    LAST_30_DAYS = "last_30_days"
    CUSTOM = "custom"


class FactKind(StrEnum):
    """Record kinds that feed a report."""

    SALES = "sales"
    RAW_MATERIAL = "raw_material"
    EXPENSES = "expenses"


class CsvKind(StrEnum):
    """CSV sub-kinds; ALL concatenates the three tables under section headers."""

    SALES = "sales"
    RAWSTONE = "rawstone"
    EXPENSES = "expenses"
    ALL = "all"


def _as_utc(value: datetime) -> datetime:
    # SQLite hands back naive values; everything is stored in UTC.
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc)


class ResolvedRange(FrozenSchema):
    """Inclusive UTC instant range for one local-calendar filter."""

    filter_type: DateFilterType
    timezone: str
    offset_minutes: int
    start_utc: datetime
    end_utc: datetime
    # Local calendar days the range covers
    start_date: date
    end_date: date
    label: str


class OrganizationMeta(FrozenSchema):
    id: str
    name: str
    location: str | None = None


class EntryFact(FrozenSchema):
    """One sales or raw-material truck entry."""

    id: str
    kind: FactKind
    truck_number: str
    truck_name: str | None = None
    material_type: str | None = None
    units: Decimal
    rate_per_unit: Decimal
    total_amount: Decimal
    occurred_at: datetime
    author_id: str | None = None
    notes: str | None = None

    @field_validator("occurred_at")
    @classmethod
    def ensure_utc(cls, value: datetime) -> datetime:
        return _as_utc(value)

    @classmethod
    def from_entry(cls, entry, kind: FactKind) -> "EntryFact":
        return cls(
            id=entry.id,
            kind=kind,
            truck_number=entry.truck_number,
            truck_name=entry.truck_name,
            material_type=entry.material_type,
            units=Decimal(str(entry.units if entry.units is not None else 0)),
            rate_per_unit=Decimal(str(entry.rate_per_unit if entry.rate_per_unit is not None else 0)),
            total_amount=Decimal(str(entry.total_amount if entry.total_amount is not None else 0)),
            occurred_at=entry.entry_date,
            author_id=entry.user_id,
            notes=entry.notes,
        )


class ExpenseFact(FrozenSchema):
    """One miscellaneous expense."""

    id: str
    kind: FactKind = FactKind.EXPENSES
    category: str
    description: str | None = None
    amount: Decimal
    occurred_at: datetime
    author_id: str | None = None
    notes: str | None = None

    @field_validator("occurred_at")
    @classmethod
    def ensure_utc(cls, value: datetime) -> datetime:
        return _as_utc(value)

    @classmethod
    def from_expense(cls, expense) -> "ExpenseFact":
        return cls(
            id=expense.id,
            category=expense.expenses_name,
            description=expense.others,
            amount=Decimal(str(expense.amount if expense.amount is not None else 0)),
            occurred_at=expense.date,
            author_id=expense.user_id,
            notes=expense.notes,
        )


class AggregateBucket(FrozenSchema):
    """Count, units and amount for one grouping key (None = whole kind)."""

    kind: FactKind
    group_key: str | None = None
    count: int = 0
    unit_total: Decimal = Decimal("0")
    amount_total: Decimal = Decimal("0")


class AggregateResult(FrozenSchema):
    """Everything the aggregator computed for one organization and range."""

    organization: OrganizationMeta
    range: ResolvedRange
    totals: dict[FactKind, AggregateBucket]
    by_material: dict[FactKind, tuple[AggregateBucket, ...]]
    by_month: dict[FactKind, tuple[AggregateBucket, ...]]
    net_figure: Decimal
    sales_facts: tuple[EntryFact, ...]
    raw_material_facts: tuple[EntryFact, ...]
    expense_facts: tuple[ExpenseFact, ...]


class ReportDisplay(FrozenSchema):
    """Pre-formatted strings for headers and the executive summary."""

    currency_symbol: str
    range_label: str
    period: str
    generated_at: str
    sales_amount: str
    raw_material_amount: str
    expense_amount: str
    net_figure: str
    sales_compact: str
    raw_material_compact: str
    expense_compact: str
    net_compact: str
    sales_units: str
    raw_material_units: str
    is_loss: bool


class ReportBundle(FrozenSchema):
    """Point-in-time snapshot for rendering one report in any format."""

    organization: OrganizationMeta
    range: ResolvedRange
    sales_facts: tuple[EntryFact, ...]
    raw_material_facts: tuple[EntryFact, ...]
    expense_facts: tuple[ExpenseFact, ...]
    buckets: dict[FactKind, AggregateBucket]
    material_breakdown: dict[FactKind, tuple[AggregateBucket, ...]]
    monthly_breakdown: dict[FactKind, tuple[AggregateBucket, ...]]
    net_figure: Decimal
    # Cap on line items per table in the document; CSV exports always carry every fact
    row_limit: int | None = None
    omitted_rows: dict[FactKind, int]
    display: ReportDisplay
    generated_at: datetime


class RenderedReport(BaseSchema):
    """Bytes ready to send as an attachment."""

    content: bytes
    media_type: str
    filename: str
    degraded: bool = False
    warning: str | None = None


# --- API responses ---


class ReportCounts(BaseSchema):
    sales: int
    raw_material: int
    expenses: int


class ReportAggregates(BaseSchema):
    sales: AggregateBucket
    raw_material: AggregateBucket
    expenses: AggregateBucket


class ReportSummaryResponse(BaseSchema):
    """Programmatic (non-file) view of a report."""

    organization: OrganizationMeta
    range: ResolvedRange
    aggregates: ReportAggregates
    counts: ReportCounts
    net_figure: Decimal
    display: ReportDisplay


class MaterialBreakdownResponse(BaseSchema):
    organization: OrganizationMeta
    range: ResolvedRange
    sales: list[AggregateBucket]
    raw_material: list[AggregateBucket]


class MonthlyTrendRow(BaseSchema):
    """One local calendar month of a yearly trend."""

    month: str  # YYYY-MM
    label: str  # Jan, Feb, ...
    sales_amount: Decimal
    raw_material_amount: Decimal
    expense_amount: Decimal
    sales_units: Decimal
    raw_material_units: Decimal
    net_figure: Decimal


class MonthlyTrendResponse(BaseSchema):
    organization: OrganizationMeta
    year: int
    timezone: str
    rows: list[MonthlyTrendRow]


class DateFilterOption(BaseSchema):
    filter_type: DateFilterType
    label: str
    start_date: date
    end_date: date
    start_utc: datetime
    end_utc: datetime


class DateFilterOptionsResponse(BaseSchema):
    timezone: str
    utc_offset: str
    filters: list[DateFilterOption]


class TimezoneOption(BaseSchema):
    abbreviation: str
    timezone: str
    offset_minutes: int
    utc_offset: str
