from stoneledger.core.pdf.engine import RenderEngine, WeasyPrintProcessEngine
from stoneledger.core.pdf.service import PDFService, pdf_service

__all__ = ["pdf_service", "PDFService", "RenderEngine", "WeasyPrintProcessEngine"]
