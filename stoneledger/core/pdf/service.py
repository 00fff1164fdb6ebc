"""PDF generation service: Jinja2 HTML templates rendered through a per-document engine process."""

import time
from collections.abc import Callable
from pathlib import Path

import structlog
from jinja2 import Environment, FileSystemLoader

from stoneledger.core.config import settings
from stoneledger.core.exceptions import RenderEngineError
from stoneledger.core.pdf.engine import RenderEngine, WeasyPrintProcessEngine
from stoneledger.shared.utils.money import format_full_currency, format_quantity
from stoneledger.shared.utils.timezones import local_date

logger = structlog.get_logger()

TEMPLATE_DIR = Path(__file__).resolve().parent.parent.parent / "templates" / "pdf"

PDF_MAGIC = b"%PDF"

EngineFactory = Callable[[], RenderEngine]


def default_engine_factory() -> RenderEngine:
    return WeasyPrintProcessEngine(
        page_size=settings.pdf_page_size,
        margin=settings.pdf_margin,
        startup_timeout=settings.pdf_startup_timeout_seconds,
        render_timeout=settings.pdf_render_timeout_seconds,
        interpreter_flags=settings.pdf_engine_flags,
    )


class PDFService:
    """
    Render HTML from templates and convert it to PDF.

    Each conversion launches a fresh engine from `engine_factory` and always
    releases it, whether conversion succeeds, fails or is cancelled.
    """

    def __init__(self, engine_factory: EngineFactory | None = None, template_dir: Path = TEMPLATE_DIR) -> None:
        self._engine_factory = engine_factory or default_engine_factory
        self._env = Environment(
            loader=FileSystemLoader(str(template_dir)),
            autoescape=True,
        )
        self._env.filters["full_currency"] = format_full_currency
        self._env.filters["quantity"] = format_quantity
        self._env.filters["local_date"] = local_date

    def render_html(self, template_name: str, context: dict) -> str:
        template = self._env.get_template(template_name)
        return template.render(**context)

    async def html_to_pdf(self, html: str) -> bytes:
        """Convert HTML to PDF bytes. Raises RenderTimeoutError or RenderEngineError."""
        engine = self._engine_factory()
        started = time.monotonic()
        try:
            logger.info("pdf_engine_launching", engine=type(engine).__name__)
            await engine.launch()
            logger.info("pdf_render_started", html_size=len(html))
            pdf = await engine.render(html)
        finally:
            await self._release(engine)

        if not pdf.startswith(PDF_MAGIC):
            raise RenderEngineError("PDF engine returned output that is not a PDF document")
        logger.info(
            "pdf_render_completed",
            size=len(pdf),
            duration_ms=round((time.monotonic() - started) * 1000, 1),
        )
        return pdf

    async def _release(self, engine: RenderEngine) -> None:
        try:
            await engine.close()
        except Exception as e:
            # A failed close must not mask the render outcome.
            logger.error("pdf_engine_close_failed", error=str(e), exc_info=True)
        else:
            logger.info("pdf_engine_closed")


pdf_service = PDFService()
