"""Render report bundles to PDF (with HTML fallback) and CSV."""

import re

import structlog

from stoneledger.core.exceptions import RenderTimeoutError
from stoneledger.core.pdf import PDFService, pdf_service
from stoneledger.modules.reports.csv_export import build_report_csv
from stoneledger.modules.reports.schemas import CsvKind, FactKind, RenderedReport, ReportBundle, ResolvedRange

logger = structlog.get_logger()

REPORT_TEMPLATE = "report.html"

DEGRADED_BANNER = "PDF unavailable, here is the equivalent content. Use your browser's print option to save it as PDF."
DEGRADED_WARNING = "PDF generation failed; the report was returned as HTML."

FILENAME_LABELS = {
    CsvKind.SALES: "Sales",
    CsvKind.RAWSTONE: "RawStone",
    CsvKind.EXPENSES: "Expenses",
    CsvKind.ALL: "Report",
}

_UNSAFE_FILENAME = re.compile(r"[^\w.-]+", flags=re.ASCII)


def build_filename(organization_name: str, label: str, date_range: ResolvedRange, extension: str) -> str:
    """`{org}_{label}_{start}_to_{end}.{ext}` with anything outside [A-Za-z0-9_.-] replaced by '_'."""
    org = _UNSAFE_FILENAME.sub("_", organization_name).strip("_") or "organization"
    return f"{org}_{label}_{date_range.start_date.isoformat()}_to_{date_range.end_date.isoformat()}.{extension}"


def _shown(facts: tuple, row_limit: int | None) -> tuple:
    return facts if row_limit is None else facts[:row_limit]


class ReportRenderer:
    """
    Turns a ReportBundle into a downloadable artifact.

    PDF conversion goes through PDFService (one engine process per call). A
    render timeout is raised to the caller as RenderTimeoutError; any other
    engine failure returns the same document as HTML with a banner and
    `degraded=True`.
    """

    def __init__(self, pdf: PDFService | None = None):
        self.pdf = pdf or pdf_service

    def render_html(self, bundle: ReportBundle, banner: str | None = None) -> str:
        return self.pdf.render_html(REPORT_TEMPLATE, self._context(bundle, banner))

    async def render_pdf(self, bundle: ReportBundle) -> RenderedReport:
        log = logger.bind(organization_id=bundle.organization.id, filter_type=bundle.range.filter_type.value)
        html = self.render_html(bundle)
        try:
            content = await self.pdf.html_to_pdf(html)
        except RenderTimeoutError as e:
            log.warning("report_pdf_timeout", timeout_seconds=e.details.get("timeout_seconds"))
            raise
        except Exception as e:
            log.error("report_pdf_degraded", error=str(e), error_type=type(e).__name__, exc_info=True)
            fallback = self.render_html(bundle, banner=DEGRADED_BANNER)
            return RenderedReport(
                content=fallback.encode("utf-8"),
                media_type="text/html; charset=utf-8",
                filename=build_filename(bundle.organization.name, "Report", bundle.range, "html"),
                degraded=True,
                warning=DEGRADED_WARNING,
            )

        log.info("report_pdf_rendered", size=len(content))
        return RenderedReport(
            content=content,
            media_type="application/pdf",
            filename=build_filename(bundle.organization.name, "Report", bundle.range, "pdf"),
        )

    def render_csv_text(self, bundle: ReportBundle, kind: CsvKind) -> str:
        return build_report_csv(bundle, kind)

    def render_csv(self, bundle: ReportBundle, kind: CsvKind) -> RenderedReport:
        text = self.render_csv_text(bundle, kind)
        logger.info(
            "report_csv_rendered",
            organization_id=bundle.organization.id,
            csv_type=kind.value,
            size=len(text),
        )
        return RenderedReport(
            content=text.encode("utf-8"),
            media_type="text/csv; charset=utf-8",
            filename=build_filename(bundle.organization.name, FILENAME_LABELS[kind], bundle.range, "csv"),
        )

    def _context(self, bundle: ReportBundle, banner: str | None) -> dict:
        entry_sections = [
            {
                "title": "Sales Transactions",
                "party_label": "Customer",
                "facts": _shown(bundle.sales_facts, bundle.row_limit),
                "bucket": bundle.buckets[FactKind.SALES],
                "materials": bundle.material_breakdown.get(FactKind.SALES, ()),
                "omitted": bundle.omitted_rows.get(FactKind.SALES, 0),
                "empty_text": "No sales transactions recorded for this period",
            },
            {
                "title": "Raw Material Purchases",
                "party_label": "Supplier",
                "facts": _shown(bundle.raw_material_facts, bundle.row_limit),
                "bucket": bundle.buckets[FactKind.RAW_MATERIAL],
                "materials": bundle.material_breakdown.get(FactKind.RAW_MATERIAL, ()),
                "omitted": bundle.omitted_rows.get(FactKind.RAW_MATERIAL, 0),
                "empty_text": "No raw material purchases recorded for this period",
            },
        ]
        return {
            "organization": bundle.organization,
            "range": bundle.range,
            "display": bundle.display,
            "buckets": {kind.value: bucket for kind, bucket in bundle.buckets.items()},
            "entry_sections": entry_sections,
            "expense_facts": _shown(bundle.expense_facts, bundle.row_limit),
            "omitted_expenses": bundle.omitted_rows.get(FactKind.EXPENSES, 0),
            "banner": banner,
        }


report_renderer = ReportRenderer()
