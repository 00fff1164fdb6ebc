"""CSV tables for report bundles. Deterministic, in-process, standard CSV quoting."""

import csv
from collections.abc import Iterable
from io import StringIO

from stoneledger.modules.reports.schemas import CsvKind, EntryFact, ExpenseFact, ReportBundle
from stoneledger.shared.utils.money import format_quantity, round_money
from stoneledger.shared.utils.timezones import local_date

SALES_HEADERS = [
    "Date",
    "Vehicle Number",
    "Material Type",
    "Quantity (Loads)",
    "Rate per Load",
    "Total Amount",
    "Customer Name",
    "Remarks",
]

RAW_STONE_HEADERS = SALES_HEADERS[:6] + ["Supplier Name", "Remarks"]

EXPENSE_HEADERS = ["Date", "Description", "Amount", "Category", "Remarks"]

SECTION_TITLES = {
    CsvKind.SALES: "SALES TRANSACTIONS",
    CsvKind.RAWSTONE: "RAW STONE PURCHASES",
    CsvKind.EXPENSES: "EXPENSES",
}


def _writer(out: StringIO):
    return csv.writer(out, lineterminator="\n")


def build_entries_csv(facts: Iterable[EntryFact], headers: list[str], tz_offset_minutes: int = 0) -> str:
    """Header row plus one row per truck entry. Amounts are exact decimals with two places."""
    out = StringIO()
    writer = _writer(out)
    writer.writerow(headers)
    for fact in facts:
        writer.writerow([
            local_date(fact.occurred_at, tz_offset_minutes),
            fact.truck_number,
            fact.material_type or "",
            format_quantity(fact.units),
            str(round_money(fact.rate_per_unit)),
            str(round_money(fact.total_amount)),
            fact.truck_name or "",
            fact.notes or "",
        ])
    return out.getvalue()


def build_expenses_csv(facts: Iterable[ExpenseFact], tz_offset_minutes: int = 0) -> str:
    out = StringIO()
    writer = _writer(out)
    writer.writerow(EXPENSE_HEADERS)
    for fact in facts:
        writer.writerow([
            local_date(fact.occurred_at, tz_offset_minutes),
            fact.description or fact.category,
            str(round_money(fact.amount)),
            fact.category,
            fact.notes or "",
        ])
    return out.getvalue()


def build_report_csv(bundle: ReportBundle, kind: CsvKind) -> str:
    """
    CSV text for one sub-kind of a report.

    `all` concatenates the three tables, each under its section title and
    separated by a blank line.
    """
    offset = bundle.range.offset_minutes
    tables = {
        CsvKind.SALES: lambda: build_entries_csv(bundle.sales_facts, SALES_HEADERS, offset),
        CsvKind.RAWSTONE: lambda: build_entries_csv(bundle.raw_material_facts, RAW_STONE_HEADERS, offset),
        CsvKind.EXPENSES: lambda: build_expenses_csv(bundle.expense_facts, offset),
    }
    if kind != CsvKind.ALL:
        return tables[kind]()
    sections = [f"{SECTION_TITLES[k]}\n{tables[k]()}" for k in (CsvKind.SALES, CsvKind.RAWSTONE, CsvKind.EXPENSES)]
    return "\n".join(sections)
