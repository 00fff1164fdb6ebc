"""Tests for ReportRenderer: PDF path, degraded HTML fallback, CSV artifacts, filenames."""

from datetime import date, datetime, timezone

import pytest
from markupsafe import escape

from stoneledger.core.exceptions import RenderEngineError, RenderTimeoutError
from stoneledger.core.pdf import PDFService
from stoneledger.modules.entries.models import EntryType
from stoneledger.modules.reports.renderer import DEGRADED_BANNER, ReportRenderer, build_filename
from stoneledger.modules.reports.schemas import CsvKind, DateFilterType, ResolvedRange
from tests.modules.reports.factories import build_bundle, fake_entry, fake_expense

FAKE_PDF = b"%PDF-1.4 fake pdf content"


def utc(*args) -> datetime:
    return datetime(*args, tzinfo=timezone.utc)


class ConvertFailingEngine:
    """Launches fine, then fails while converting to a document."""

    def __init__(self, error: Exception):
        self.error = error
        self.closed = 0
        self.html: str | None = None

    async def launch(self) -> None:
        pass

    async def render(self, html: str) -> bytes:
        self.html = html
        raise self.error

    async def close(self) -> None:
        self.closed += 1


class WorkingEngine(ConvertFailingEngine):
    def __init__(self):
        super().__init__(RenderEngineError("unused"))

    async def render(self, html: str) -> bytes:
        self.html = html
        return FAKE_PDF


def _renderer(engine) -> ReportRenderer:
    return ReportRenderer(PDFService(engine_factory=lambda: engine))


async def _bundle():
    return await build_bundle(
        entries=[
            fake_entry(EntryType.SALES, "100.50", utc(2024, 3, 2), material_type="20mm"),
            fake_entry(EntryType.RAW_STONE, "50.00", utc(2024, 3, 3), truck_name="Quarry <North>"),
        ],
        expenses=[fake_expense("30.75", utc(2024, 3, 4), category="Diesel")],
    )


class TestRenderPdf:
    async def test_pdf_success(self):
        engine = WorkingEngine()
        report = await _renderer(engine).render_pdf(await _bundle())

        assert report.content == FAKE_PDF
        assert report.media_type == "application/pdf"
        assert report.filename == "Sri_Ganesh_Crusher_Report_2024-03-01_to_2024-03-31.pdf"
        assert report.degraded is False
        assert engine.closed == 1
        assert "Executive Summary" in engine.html
        assert str(escape(DEGRADED_BANNER)) not in engine.html

    async def test_engine_failure_degrades_to_html(self):
        engine = ConvertFailingEngine(RenderEngineError("renderer crashed"))
        report = await _renderer(engine).render_pdf(await _bundle())

        assert engine.closed == 1
        assert report.degraded is True
        assert report.warning
        assert report.media_type.startswith("text/html")
        assert report.filename.endswith(".html")
        html = report.content.decode("utf-8")
        assert str(escape(DEGRADED_BANNER)) in html
        assert "Sales Transactions" in html

    async def test_unexpected_error_also_degrades(self):
        engine = ConvertFailingEngine(RuntimeError("protocol error"))
        report = await _renderer(engine).render_pdf(await _bundle())
        assert report.degraded is True
        assert engine.closed == 1

    async def test_render_timeout_propagates(self):
        engine = ConvertFailingEngine(RenderTimeoutError(90))
        with pytest.raises(RenderTimeoutError):
            await _renderer(engine).render_pdf(await _bundle())
        assert engine.closed == 1


class TestRenderHtml:
    async def test_document_content(self):
        html = _renderer(WorkingEngine()).render_html(await _bundle())

        assert "Sri Ganesh Crusher" in html
        assert "Raw Material Purchases" in html
        assert "Other Expenses" in html
        assert "100.5" in html
        assert "Diesel" in html
        assert "02/03/2024" in html
        # Autoescaped
        assert "Quarry &lt;North&gt;" in html

    async def test_empty_sections_show_placeholder(self):
        html = _renderer(WorkingEngine()).render_html(await build_bundle())
        assert "No sales transactions recorded for this period" in html
        assert "No raw material purchases recorded for this period" in html
        assert "No other expenses recorded for this period" in html

    async def test_omitted_rows_note(self):
        bundle = await build_bundle(
            entries=[fake_entry(EntryType.SALES, "1.00", utc(2024, 3, d), entry_id=f"s{d}") for d in range(1, 4)],
            row_limit=1,
        )
        html = _renderer(WorkingEngine()).render_html(bundle)
        assert "2 more rows not shown" in html
        assert "01/03/2024" in html
        assert "03/03/2024" not in html


class TestRenderCsv:
    @pytest.mark.parametrize(
        "kind, label",
        [
            (CsvKind.SALES, "Sales"),
            (CsvKind.RAWSTONE, "RawStone"),
            (CsvKind.EXPENSES, "Expenses"),
            (CsvKind.ALL, "Report"),
        ],
    )
    async def test_csv_filenames(self, kind, label):
        report = _renderer(WorkingEngine()).render_csv(await _bundle(), kind)
        assert report.filename == f"Sri_Ganesh_Crusher_{label}_2024-03-01_to_2024-03-31.csv"
        assert report.media_type.startswith("text/csv")
        assert report.content.decode("utf-8")


class TestBuildFilename:
    def _range(self) -> ResolvedRange:
        return ResolvedRange(
            filter_type=DateFilterType.TODAY,
            timezone="UTC",
            offset_minutes=0,
            start_utc=utc(2024, 3, 10),
            end_utc=utc(2024, 3, 10, 23, 59, 59, 999000),
            start_date=date(2024, 3, 10),
            end_date=date(2024, 3, 10),
            label="Today (Mar 10, 2024)",
        )

    def test_unsafe_characters_replaced(self):
        name = build_filename('Rao & Sons / "Blue" Metals', "Sales", self._range(), "csv")
        assert name == "Rao_Sons_Blue_Metals_Sales_2024-03-10_to_2024-03-10.csv"

    def test_non_ascii_name(self):
        name = build_filename("ஸ்ரீ Crusher", "Report", self._range(), "pdf")
        assert name == "Crusher_Report_2024-03-10_to_2024-03-10.pdf"
