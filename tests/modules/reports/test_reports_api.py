"""Tests for Reports API: summary, documents, breakdowns and error envelopes."""

import csv
from datetime import datetime, timezone
from decimal import Decimal
from io import StringIO

import pytest
from httpx import AsyncClient
from sqlalchemy.ext.asyncio import AsyncSession

from stoneledger.core.exceptions import RenderEngineError, RenderTimeoutError
from stoneledger.core.pdf import PDFService
from stoneledger.modules.entries.models import EntryType
from stoneledger.modules.reports import service as reports_service_module
from stoneledger.modules.reports.renderer import ReportRenderer
from tests.modules.reports.factories import create_entry, create_expense, create_organization

FAKE_PDF = b"%PDF-1.4 fake pdf content"

MARCH = {"filter_type": "custom", "start_date": "2024-03-01", "end_date": "2024-03-31", "timezone": "UTC"}


def utc(*args) -> datetime:
    return datetime(*args, tzinfo=timezone.utc)


class StubEngine:
    def __init__(self, error: Exception | None = None):
        self.error = error
        self.closed = 0

    async def launch(self) -> None:
        pass

    async def render(self, html: str) -> bytes:
        if self.error:
            raise self.error
        return FAKE_PDF

    async def close(self) -> None:
        self.closed += 1


@pytest.fixture
def use_engine(monkeypatch):
    """Route report PDFs through a stub engine instead of a WeasyPrint process."""

    def install(engine: StubEngine) -> StubEngine:
        renderer = ReportRenderer(PDFService(engine_factory=lambda: engine))
        monkeypatch.setattr(reports_service_module, "report_renderer", renderer)
        return engine

    return install


async def _seed(db_session: AsyncSession):
    org = await create_organization(db_session, name="Sri Ganesh Crusher")
    other = await create_organization(db_session, name="Other Org")
    await create_entry(db_session, org, EntryType.SALES, "100.50", utc(2024, 3, 2, 10), material_type="20mm")
    await create_entry(db_session, org, EntryType.SALES, "200.25", utc(2024, 3, 5, 10), material_type="40mm")
    await create_entry(db_session, org, EntryType.RAW_STONE, "50.00", utc(2024, 3, 3, 8))
    await create_expense(db_session, org, "30.75", utc(2024, 3, 4, 9))
    await create_entry(db_session, other, EntryType.SALES, "9999.00", utc(2024, 3, 5, 10))
    await db_session.commit()
    return org


class TestSummary:
    async def test_summary(self, client: AsyncClient, db_session: AsyncSession):
        org = await _seed(db_session)
        response = await client.get("/api/v1/reports/summary", params={"organization_id": org.id, **MARCH})

        assert response.status_code == 200
        body = response.json()
        assert body["success"] is True
        data = body["data"]
        assert data["organization"]["name"] == "Sri Ganesh Crusher"
        assert Decimal(data["net_figure"]) == Decimal("220.00")
        assert data["counts"] == {"sales": 2, "raw_material": 1, "expenses": 1}
        assert Decimal(data["aggregates"]["sales"]["amount_total"]) == Decimal("300.75")
        assert data["range"]["start_utc"].startswith("2024-03-01T00:00:00")
        assert data["display"]["range_label"] == "Custom Range (Mar 1, 2024 - Mar 31, 2024)"

    async def test_timezone_header(self, client: AsyncClient, db_session: AsyncSession):
        org = await _seed(db_session)
        params = {"organization_id": org.id, "filter_type": "custom", "start_date": "2024-03-01", "end_date": "2024-03-31"}
        response = await client.get("/api/v1/reports/summary", params=params, headers={"X-Timezone": "IST"})
        assert response.status_code == 200
        assert response.json()["data"]["range"]["timezone"] == "Asia/Kolkata"

    async def test_unknown_organization_is_404(self, client: AsyncClient):
        response = await client.get("/api/v1/reports/summary", params={"organization_id": "nope", **MARCH})
        assert response.status_code == 404
        body = response.json()
        assert body["success"] is False
        assert body["errors"][0]["field"] == "organization_id"

    async def test_invalid_filter_is_400(self, client: AsyncClient):
        response = await client.get(
            "/api/v1/reports/summary", params={"organization_id": "x", "filter_type": "fortnight"}
        )
        assert response.status_code == 400
        body = response.json()
        assert "fortnight" in body["message"]
        assert body["errors"][0]["field"] == "filter_type"

    async def test_missing_bounds_is_400(self, client: AsyncClient):
        response = await client.get(
            "/api/v1/reports/summary", params={"organization_id": "x", "start_date": "2024-03-01"}
        )
        assert response.status_code == 400
        assert response.json()["errors"][0]["field"] == "end_date"

    async def test_first_calendar_day_in_ist_is_400(self, client: AsyncClient):
        response = await client.get(
            "/api/v1/reports/summary",
            params={"organization_id": "x", "start_date": "0001-01-01", "end_date": "0001-01-10", "timezone": "IST"},
        )
        assert response.status_code == 400
        assert response.json()["errors"][0]["field"] == "start_date"

    async def test_inverted_range_is_400(self, client: AsyncClient):
        response = await client.get(
            "/api/v1/reports/summary",
            params={"organization_id": "x", "start_date": "2024-03-10", "end_date": "2024-03-01"},
        )
        assert response.status_code == 400
        assert response.json()["errors"][0]["field"] == "end_date"

    async def test_organization_id_required(self, client: AsyncClient):
        response = await client.get("/api/v1/reports/summary", params={"filter_type": "today"})
        assert response.status_code == 422


class TestPdf:
    async def test_pdf_download(self, client: AsyncClient, db_session: AsyncSession, use_engine):
        engine = use_engine(StubEngine())
        org = await _seed(db_session)
        response = await client.get("/api/v1/reports/pdf", params={"organization_id": org.id, **MARCH})

        assert response.status_code == 200
        assert response.headers["content-type"] == "application/pdf"
        assert response.content == FAKE_PDF
        assert (
            response.headers["content-disposition"]
            == 'attachment; filename="Sri_Ganesh_Crusher_Report_2024-03-01_to_2024-03-31.pdf"'
        )
        assert "x-report-degraded" not in response.headers
        assert response.headers["x-report-timezone"] == "UTC"
        assert engine.closed == 1

    async def test_pdf_degraded(self, client: AsyncClient, db_session: AsyncSession, use_engine):
        engine = use_engine(StubEngine(RenderEngineError("browser crashed")))
        org = await _seed(db_session)
        response = await client.get("/api/v1/reports/pdf", params={"organization_id": org.id, **MARCH})

        assert response.status_code == 200
        assert response.headers["content-type"].startswith("text/html")
        assert response.headers["x-report-degraded"] == "true"
        assert response.headers["x-report-warning"]
        assert ".html" in response.headers["content-disposition"]
        assert "PDF unavailable" in response.text
        assert engine.closed == 1

    async def test_pdf_timeout_is_504(self, client: AsyncClient, db_session: AsyncSession, use_engine):
        engine = use_engine(StubEngine(RenderTimeoutError(90)))
        org = await _seed(db_session)
        response = await client.get("/api/v1/reports/pdf", params={"organization_id": org.id, **MARCH})

        assert response.status_code == 504
        assert response.json()["success"] is False
        assert "try again" in response.json()["message"].lower()
        assert engine.closed == 1


class TestCsv:
    async def test_sales_csv(self, client: AsyncClient, db_session: AsyncSession):
        org = await _seed(db_session)
        response = await client.get(
            "/api/v1/reports/csv", params={"organization_id": org.id, "type": "sales", **MARCH}
        )

        assert response.status_code == 200
        assert response.headers["content-type"].startswith("text/csv")
        assert "Sri_Ganesh_Crusher_Sales_2024-03-01_to_2024-03-31.csv" in response.headers["content-disposition"]
        rows = list(csv.reader(StringIO(response.text)))
        assert len(rows) == 3
        assert sorted(Decimal(r[5]) for r in rows[1:]) == [Decimal("100.50"), Decimal("200.25")]

    async def test_all_csv(self, client: AsyncClient, db_session: AsyncSession):
        org = await _seed(db_session)
        response = await client.get("/api/v1/reports/csv", params={"organization_id": org.id, **MARCH})

        assert response.status_code == 200
        assert "_Report_" in response.headers["content-disposition"]
        assert "SALES TRANSACTIONS" in response.text
        assert "RAW STONE PURCHASES" in response.text
        assert "EXPENSES" in response.text
        assert "9999" not in response.text

    async def test_invalid_type_is_422(self, client: AsyncClient):
        response = await client.get(
            "/api/v1/reports/csv", params={"organization_id": "x", "type": "pdf", **MARCH}
        )
        assert response.status_code == 422


class TestBreakdowns:
    async def test_material_breakdown(self, client: AsyncClient, db_session: AsyncSession):
        org = await _seed(db_session)
        response = await client.get(
            "/api/v1/reports/material-breakdown", params={"organization_id": org.id, **MARCH}
        )

        assert response.status_code == 200
        sales = response.json()["data"]["sales"]
        assert [b["group_key"] for b in sales] == ["40mm", "20mm"]

    async def test_monthly_trend(self, client: AsyncClient, db_session: AsyncSession):
        org = await _seed(db_session)
        response = await client.get(
            "/api/v1/reports/monthly-trend", params={"organization_id": org.id, "year": 2024, "timezone": "UTC"}
        )

        assert response.status_code == 200
        rows = response.json()["data"]["rows"]
        assert len(rows) == 12
        assert Decimal(rows[2]["net_figure"]) == Decimal("220.00")
        assert Decimal(rows[0]["sales_amount"]) == Decimal("0")

    async def test_monthly_trend_past_calendar_end_is_400(self, client: AsyncClient, db_session: AsyncSession):
        org = await _seed(db_session)
        response = await client.get(
            "/api/v1/reports/monthly-trend", params={"organization_id": org.id, "year": 9999, "timezone": "EST"}
        )

        assert response.status_code == 400
        assert response.json()["errors"][0]["field"] == "end_date"

    async def test_date_filters(self, client: AsyncClient):
        response = await client.get("/api/v1/reports/date-filters", params={"timezone": "IST"})

        assert response.status_code == 200
        data = response.json()["data"]
        assert data["timezone"] == "Asia/Kolkata"
        assert data["utc_offset"] == "+05:30"
        tokens = [f["filter_type"] for f in data["filters"]]
        assert "custom" not in tokens
        assert len(tokens) == 9

    async def test_timezones(self, client: AsyncClient):
        response = await client.get("/api/v1/reports/timezones")

        assert response.status_code == 200
        zones = {z["abbreviation"]: z for z in response.json()["data"]}
        assert zones["IST"]["offset_minutes"] == 330
        assert zones["EST"]["timezone"] == "America/New_York"


async def test_health(client: AsyncClient):
    response = await client.get("/health")
    assert response.status_code == 200
