"""Tests for ReportCompiler: bundle assembly, display strings, summaries."""

from datetime import datetime, timezone
from decimal import Decimal

from stoneledger.modules.entries.models import EntryType
from stoneledger.modules.reports.compiler import ReportCompiler, format_period
from stoneledger.modules.reports.date_range import DateRangeResolver
from stoneledger.modules.reports.schemas import FactKind
from tests.modules.reports.factories import build_bundle, fake_entry, fake_expense

GENERATED = datetime(2024, 3, 10, 6, 45, tzinfo=timezone.utc)


def utc(*args) -> datetime:
    return datetime(*args, tzinfo=timezone.utc)


class TestCompile:
    async def test_bundle_carries_facts_and_totals(self):
        bundle = await build_bundle(
            entries=[
                fake_entry(EntryType.SALES, "100.50", utc(2024, 3, 2)),
                fake_entry(EntryType.SALES, "200.25", utc(2024, 3, 3)),
                fake_entry(EntryType.RAW_STONE, "50.00", utc(2024, 3, 4)),
            ],
            expenses=[fake_expense("30.75", utc(2024, 3, 5))],
            generated_at=GENERATED,
        )

        assert len(bundle.sales_facts) == 2
        assert len(bundle.raw_material_facts) == 1
        assert len(bundle.expense_facts) == 1
        assert bundle.net_figure == Decimal("220.00")
        assert bundle.buckets[FactKind.SALES].amount_total == Decimal("300.75")
        assert bundle.omitted_rows == {FactKind.SALES: 0, FactKind.RAW_MATERIAL: 0, FactKind.EXPENSES: 0}
        assert bundle.generated_at == GENERATED

    async def test_display_strings(self):
        bundle = await build_bundle(
            entries=[
                fake_entry(EntryType.SALES, "12500000.00", utc(2024, 3, 2), units="250"),
                fake_entry(EntryType.RAW_STONE, "250000.00", utc(2024, 3, 4), units="10"),
            ],
            expenses=[fake_expense("1500.00", utc(2024, 3, 5))],
            generated_at=GENERATED,
        )
        display = bundle.display

        assert display.currency_symbol == "₹"
        assert display.sales_amount == "1.25 Cr"
        assert display.raw_material_amount == "2,50,000"
        assert display.expense_amount == "1,500"
        assert display.sales_compact == "1.25 Cr"
        assert display.raw_material_compact == "2.5 L"
        assert display.expense_compact == "2 K"
        assert display.sales_units == "250"
        assert display.period == "01 Mar 2024 - 31 Mar 2024"
        assert display.range_label == "Custom Range (Mar 1, 2024 - Mar 31, 2024)"
        assert display.generated_at == "10 Mar 2024, 06:45"
        assert display.is_loss is False

    async def test_loss_flag(self):
        bundle = await build_bundle(expenses=[fake_expense("10.00", utc(2024, 3, 5))])
        assert bundle.net_figure == Decimal("-10.00")
        assert bundle.display.is_loss is True
        assert bundle.display.net_figure == "-10"

    async def test_row_limit_keeps_totals(self):
        entries = [
            fake_entry(EntryType.SALES, f"{i}.00", utc(2024, 3, i), entry_id=f"s{i}") for i in range(1, 6)
        ]
        bundle = await build_bundle(entries=entries, row_limit=2)

        assert [f.id for f in bundle.sales_facts] == ["s1", "s2", "s3", "s4", "s5"]
        assert bundle.row_limit == 2
        assert bundle.omitted_rows[FactKind.SALES] == 3
        assert bundle.omitted_rows[FactKind.EXPENSES] == 0
        assert bundle.buckets[FactKind.SALES].count == 5
        assert bundle.buckets[FactKind.SALES].amount_total == Decimal("15.00")

    async def test_empty_period(self):
        bundle = await build_bundle()
        assert bundle.sales_facts == ()
        assert bundle.net_figure == Decimal("0")
        assert bundle.display.net_figure == "0"


class TestSummarize:
    async def test_summary_counts_and_net(self):
        bundle = await build_bundle(
            entries=[fake_entry(EntryType.SALES, "100.50", utc(2024, 3, 2))],
            expenses=[fake_expense("0.50", utc(2024, 3, 5))],
        )
        summary = ReportCompiler().summarize(bundle)

        assert summary.counts.sales == 1
        assert summary.counts.raw_material == 0
        assert summary.counts.expenses == 1
        assert summary.net_figure == Decimal("100.00")
        assert summary.organization.name == "Sri Ganesh Crusher"
        assert summary.aggregates.sales.amount_total == Decimal("100.50")


def test_format_period_uses_local_days():
    r = DateRangeResolver().resolve("today", "Asia/Kolkata", now=utc(2024, 3, 10, 20, 0))
    assert format_period(r) == "11 Mar 2024 - 11 Mar 2024"
