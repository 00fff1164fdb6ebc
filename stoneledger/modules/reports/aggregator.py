"""Organization-scoped aggregation of sales, raw-material and expense facts."""

import time
from collections import defaultdict
from collections.abc import Iterable, Sequence
from datetime import date, datetime, timedelta
from decimal import Decimal
from typing import Any

import structlog

from stoneledger.core.exceptions import OrganizationNotFoundError
from stoneledger.modules.entries.models import EntryType
from stoneledger.modules.reports.repositories import FactRepository, OrganizationLookup
from stoneledger.modules.reports.schemas import (
    AggregateBucket,
    AggregateResult,
    EntryFact,
    ExpenseFact,
    FactKind,
    MonthlyTrendRow,
    OrganizationMeta,
    ResolvedRange,
)

logger = structlog.get_logger()

ENTRY_KINDS = {
    EntryType.SALES.value: FactKind.SALES,
    EntryType.RAW_STONE.value: FactKind.RAW_MATERIAL,
}

UNKNOWN_MATERIAL = "Unknown"

Fact = EntryFact | ExpenseFact


def fact_amount(fact: Fact) -> Decimal:
    if isinstance(fact, ExpenseFact):
        return fact.amount
    return fact.total_amount


def fact_units(fact: Fact) -> Decimal:
    if isinstance(fact, ExpenseFact):
        return Decimal("0")
    return fact.units


def month_key(occurred_at: datetime, tz_offset_minutes: int) -> str:
    """Local calendar month (YYYY-MM) of a UTC instant."""
    return (occurred_at + timedelta(minutes=tz_offset_minutes)).strftime("%Y-%m")


def summarize(kind: FactKind, facts: Iterable[Fact], group_key: str | None = None) -> AggregateBucket:
    count = 0
    units = Decimal("0")
    amount = Decimal("0")
    for fact in facts:
        count += 1
        units += fact_units(fact)
        amount += fact_amount(fact)
    return AggregateBucket(
        kind=kind,
        group_key=group_key,
        count=count,
        unit_total=units,
        amount_total=amount,
    )


def group_by_material(kind: FactKind, facts: Iterable[EntryFact]) -> tuple[AggregateBucket, ...]:
    """One bucket per material type, largest amount first (ties by name)."""
    groups: dict[str, list[EntryFact]] = defaultdict(list)
    for fact in facts:
        groups[fact.material_type or UNKNOWN_MATERIAL].append(fact)
    buckets = [summarize(kind, rows, group_key=material) for material, rows in groups.items()]
    return tuple(sorted(buckets, key=lambda b: (-b.amount_total, b.group_key)))


def group_by_month(
    kind: FactKind,
    facts: Iterable[Fact],
    tz_offset_minutes: int,
    months: Sequence[str] | None = None,
) -> tuple[AggregateBucket, ...]:
    """
    One bucket per local calendar month, in month order.

    With `months`, exactly those keys are returned (zero-filled); facts outside them are ignored.
    """
    groups: dict[str, list[Fact]] = defaultdict(list)
    for fact in facts:
        groups[month_key(fact.occurred_at, tz_offset_minutes)].append(fact)
    keys = list(months) if months is not None else sorted(groups)
    return tuple(summarize(kind, groups.get(key, ()), group_key=key) for key in keys)


def months_of_year(year: int) -> list[str]:
    return [f"{year:04d}-{month:02d}" for month in range(1, 13)]


class FactAggregator:
    """
    Reads facts through the collaborator interfaces and computes exact Decimal sums.

    Never writes. Every query is scoped by organization id and by the inclusive
    UTC range; aggregation always sees the complete set (no pagination here).
    """

    def __init__(self, facts: FactRepository, organizations: OrganizationLookup):
        self.facts = facts
        self.organizations = organizations

    async def get_organization(self, organization_id: str) -> OrganizationMeta:
        organization = await self.organizations.find_by_id(organization_id)
        if organization is None:
            logger.warning("report_organization_not_found", organization_id=organization_id)
            raise OrganizationNotFoundError(organization_id)
        return OrganizationMeta(
            id=str(organization.id),
            name=organization.name,
            location=getattr(organization, "location", None),
        )

    async def fetch_facts(
        self,
        organization_id: str,
        date_range: ResolvedRange,
    ) -> tuple[list[EntryFact], list[EntryFact], list[ExpenseFact]]:
        """Sales, raw-material and expense facts of one organization within the range."""
        entries = await self.facts.find_sales_and_raw_material(
            organization_id, date_range.start_utc, date_range.end_utc
        )
        expenses = await self.facts.find_expenses(
            organization_id, date_range.start_utc, date_range.end_utc
        )

        sales: list[EntryFact] = []
        raw_material: list[EntryFact] = []
        for entry in self._owned_by(organization_id, entries):
            kind = ENTRY_KINDS.get(entry.entry_type)
            if kind is None:
                logger.warning("report_entry_type_skipped", entry_id=entry.id, entry_type=entry.entry_type)
                continue
            fact = EntryFact.from_entry(entry, kind)
            if not self._in_range(fact.occurred_at, date_range):
                continue
            (sales if kind == FactKind.SALES else raw_material).append(fact)

        expense_facts = [
            fact
            for fact in (ExpenseFact.from_expense(e) for e in self._owned_by(organization_id, expenses))
            if self._in_range(fact.occurred_at, date_range)
        ]
        return sales, raw_material, expense_facts

    async def aggregate(self, organization_id: str, date_range: ResolvedRange) -> AggregateResult:
        started = time.monotonic()
        organization = await self.get_organization(organization_id)
        sales, raw_material, expenses = await self.fetch_facts(organization_id, date_range)

        totals = {
            FactKind.SALES: summarize(FactKind.SALES, sales),
            FactKind.RAW_MATERIAL: summarize(FactKind.RAW_MATERIAL, raw_material),
            FactKind.EXPENSES: summarize(FactKind.EXPENSES, expenses),
        }
        net_figure = (
            totals[FactKind.SALES].amount_total
            - totals[FactKind.RAW_MATERIAL].amount_total
            - totals[FactKind.EXPENSES].amount_total
        )
        offset = date_range.offset_minutes
        result = AggregateResult(
            organization=organization,
            range=date_range,
            totals=totals,
            by_material={
                FactKind.SALES: group_by_material(FactKind.SALES, sales),
                FactKind.RAW_MATERIAL: group_by_material(FactKind.RAW_MATERIAL, raw_material),
            },
            by_month={
                FactKind.SALES: group_by_month(FactKind.SALES, sales, offset),
                FactKind.RAW_MATERIAL: group_by_month(FactKind.RAW_MATERIAL, raw_material, offset),
                FactKind.EXPENSES: group_by_month(FactKind.EXPENSES, expenses, offset),
            },
            net_figure=net_figure,
            sales_facts=tuple(sales),
            raw_material_facts=tuple(raw_material),
            expense_facts=tuple(expenses),
        )
        logger.info(
            "report_aggregated",
            organization_id=organization_id,
            filter_type=date_range.filter_type.value,
            timezone=date_range.timezone,
            sales_count=len(sales),
            raw_material_count=len(raw_material),
            expense_count=len(expenses),
            net_figure=str(net_figure),
            duration_ms=round((time.monotonic() - started) * 1000, 1),
        )
        return result

    async def monthly_trend(
        self,
        organization_id: str,
        year_range: ResolvedRange,
    ) -> tuple[OrganizationMeta, list[MonthlyTrendRow]]:
        """Twelve zero-filled local months of the year covered by `year_range`."""
        organization = await self.get_organization(organization_id)
        sales, raw_material, expenses = await self.fetch_facts(organization_id, year_range)

        months = months_of_year(year_range.start_date.year)
        offset = year_range.offset_minutes
        sales_by_month = group_by_month(FactKind.SALES, sales, offset, months)
        raw_by_month = group_by_month(FactKind.RAW_MATERIAL, raw_material, offset, months)
        expenses_by_month = group_by_month(FactKind.EXPENSES, expenses, offset, months)

        rows = []
        for key, s, r, e in zip(months, sales_by_month, raw_by_month, expenses_by_month):
            rows.append(
                MonthlyTrendRow(
                    month=key,
                    label=f"{date.fromisoformat(key + '-01'):%b}",
                    sales_amount=s.amount_total,
                    raw_material_amount=r.amount_total,
                    expense_amount=e.amount_total,
                    sales_units=s.unit_total,
                    raw_material_units=r.unit_total,
                    net_figure=s.amount_total - r.amount_total - e.amount_total,
                )
            )
        return organization, rows

    @staticmethod
    def _owned_by(organization_id: str, rows: Sequence[Any]) -> list[Any]:
        owned = [r for r in rows if str(getattr(r, "organization_id", organization_id)) == str(organization_id)]
        if len(owned) != len(rows):
            logger.error(
                "report_foreign_rows_dropped",
                organization_id=organization_id,
                dropped=len(rows) - len(owned),
            )
        return owned

    @staticmethod
    def _in_range(occurred_at: datetime, date_range: ResolvedRange) -> bool:
        return date_range.start_utc <= occurred_at <= date_range.end_utc
