"""Assemble a ReportBundle from aggregation output. Pure: no I/O."""

from datetime import datetime, timezone

from stoneledger.modules.reports.schemas import (
    AggregateResult,
    FactKind,
    OrganizationMeta,
    ReportAggregates,
    ReportBundle,
    ReportCounts,
    ReportDisplay,
    ReportSummaryResponse,
    ResolvedRange,
)
from stoneledger.shared.utils.money import (
    format_compact_currency,
    format_full_currency,
    format_quantity,
    round_money,
)
from stoneledger.shared.utils.timezones import to_local


def format_period(date_range: ResolvedRange) -> str:
    """'04 Mar 2024 - 10 Mar 2024' in local calendar days."""
    return f"{date_range.start_date:%d %b %Y} - {date_range.end_date:%d %b %Y}"


def format_local_timestamp(moment: datetime, tz_offset_minutes: int) -> str:
    return f"{to_local(moment, tz_offset_minutes):%d %b %Y, %H:%M}"


class ReportCompiler:
    """
    Builds the immutable ReportBundle handed to the renderer.

    Owns the amount formatting used by every output: full-document bands for the
    executive summary, compact bands for dashboard-style figures. `row_limit`
    caps the line items the document shows per kind; the bundle keeps every
    fact so totals and CSV exports stay complete.
    """

    def __init__(self, currency_symbol: str = "₹", row_limit: int | None = None):
        self.currency_symbol = currency_symbol
        self.row_limit = row_limit

    def compile(
        self,
        organization: OrganizationMeta,
        date_range: ResolvedRange,
        result: AggregateResult,
        generated_at: datetime | None = None,
    ) -> ReportBundle:
        generated_at = generated_at or datetime.now(timezone.utc)
        totals = result.totals

        omitted = {
            FactKind.SALES: self._omitted(result.sales_facts),
            FactKind.RAW_MATERIAL: self._omitted(result.raw_material_facts),
            FactKind.EXPENSES: self._omitted(result.expense_facts),
        }

        return ReportBundle(
            organization=organization,
            range=date_range,
            sales_facts=tuple(result.sales_facts),
            raw_material_facts=tuple(result.raw_material_facts),
            expense_facts=tuple(result.expense_facts),
            buckets=dict(totals),
            material_breakdown=dict(result.by_material),
            monthly_breakdown=dict(result.by_month),
            net_figure=result.net_figure,
            row_limit=self.row_limit,
            omitted_rows=omitted,
            display=self.build_display(date_range, result, generated_at),
            generated_at=generated_at,
        )

    def build_display(
        self,
        date_range: ResolvedRange,
        result: AggregateResult,
        generated_at: datetime,
    ) -> ReportDisplay:
        sales = result.totals[FactKind.SALES]
        raw_material = result.totals[FactKind.RAW_MATERIAL]
        expenses = result.totals[FactKind.EXPENSES]
        return ReportDisplay(
            currency_symbol=self.currency_symbol,
            range_label=date_range.label,
            period=format_period(date_range),
            generated_at=format_local_timestamp(generated_at, date_range.offset_minutes),
            sales_amount=format_full_currency(sales.amount_total),
            raw_material_amount=format_full_currency(raw_material.amount_total),
            expense_amount=format_full_currency(expenses.amount_total),
            net_figure=format_full_currency(result.net_figure),
            sales_compact=format_compact_currency(sales.amount_total),
            raw_material_compact=format_compact_currency(raw_material.amount_total),
            expense_compact=format_compact_currency(expenses.amount_total),
            net_compact=format_compact_currency(result.net_figure),
            sales_units=format_quantity(sales.unit_total),
            raw_material_units=format_quantity(raw_material.unit_total),
            is_loss=result.net_figure < 0,
        )

    def summarize(self, bundle: ReportBundle) -> ReportSummaryResponse:
        """Programmatic summary: organization, range, aggregates, counts."""
        buckets = bundle.buckets
        return ReportSummaryResponse(
            organization=bundle.organization,
            range=bundle.range,
            aggregates=ReportAggregates(
                sales=buckets[FactKind.SALES],
                raw_material=buckets[FactKind.RAW_MATERIAL],
                expenses=buckets[FactKind.EXPENSES],
            ),
            counts=ReportCounts(
                sales=buckets[FactKind.SALES].count,
                raw_material=buckets[FactKind.RAW_MATERIAL].count,
                expenses=buckets[FactKind.EXPENSES].count,
            ),
            net_figure=round_money(bundle.net_figure),
            display=bundle.display,
        )

    def _omitted(self, facts: tuple) -> int:
        if self.row_limit is None:
            return 0
        return max(len(facts) - self.row_limit, 0)
