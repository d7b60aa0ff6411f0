"""
Document text extraction for PDF and DOCX uploads with OCR fallback.

Produces the flat text a template is segmented from.  PDF pages are read
with PyMuPDF and joined by blank lines; pages without a text layer are
rendered and passed through Tesseract when OCR is enabled.  DOCX files are
read paragraph by paragraph with python-docx, followed by table rows.
"""
from __future__ import annotations

import io
import logging
from typing import List, Optional

import fitz  # PyMuPDF
import pytesseract
from docx import Document as DocxDocument
from PIL import Image

from app.config import settings
from app.exceptions import CorruptDocument, UnsupportedFormat
from app.models.domain import DocumentType

logger = logging.getLogger(__name__)


def resolve_document_type(declared_type: str) -> DocumentType:
    """
    Map an extension or type name (".pdf", "PDF", "docx") to a DocumentType.

    Raises:
        UnsupportedFormat: Anything other than pdf/docx.
    """
    ft = (declared_type or "").lower().lstrip(".")
    try:
        return DocumentType(ft)
    except ValueError:
        raise UnsupportedFormat(
            f"Unsupported file type: {declared_type!r}. "
            f"Accepted: {', '.join(t.value for t in DocumentType)}"
        ) from None


class DocumentTextExtractor:
    """Extracts plain text from PDF and DOCX bytes."""

    def __init__(self, ocr_enabled: Optional[bool] = None) -> None:
        self.ocr_enabled = settings.OCR_ENABLED if ocr_enabled is None else ocr_enabled
        if self.ocr_enabled and settings.TESSERACT_CMD:
            pytesseract.pytesseract.tesseract_cmd = settings.TESSERACT_CMD

    async def extract(self, data: bytes, declared_type: str) -> str:
        """
        Return the plain text of a document.

        Args:
            data:          Raw file bytes.
            declared_type: Extension with or without dot, e.g. ".pdf" or "docx".

        Raises:
            UnsupportedFormat: Type is not pdf/docx.
            CorruptDocument:   Password-protected or unreadable file.
        """
        doc_type = resolve_document_type(declared_type)
        if doc_type is DocumentType.PDF:
            return await self._extract_pdf(data)
        return await self._extract_docx(data)

    # ------------------------------------------------------------------
    # PDF
    # ------------------------------------------------------------------

    async def _extract_pdf(self, data: bytes) -> str:
        try:
            doc = fitz.open(stream=data, filetype="pdf")
        except Exception as exc:
            raise CorruptDocument(f"Cannot open PDF file: {exc}") from exc

        try:
            if doc.needs_pass:
                raise CorruptDocument(
                    "PDF is password-protected. Please provide an unlocked copy."
                )

            page_texts: List[str] = []
            for page in doc:
                text = page.get_text("text").strip()
                if not text and self.ocr_enabled:
                    # Image-only page: full-page OCR
                    text = (await self._ocr_page(page)).strip()
                if text:
                    page_texts.append(text)
        except CorruptDocument:
            raise
        except Exception as exc:
            raise CorruptDocument(f"Cannot read PDF file: {exc}") from exc
        finally:
            doc.close()

        logger.info(f"Extracted {len(page_texts)} text page(s) from PDF")
        return "\n\n".join(page_texts)

    async def _ocr_page(self, page: fitz.Page) -> str:
        """Render an entire page at 2× scale and run Tesseract OCR."""
        try:
            pix = page.get_pixmap(matrix=fitz.Matrix(2, 2))
            img = Image.open(io.BytesIO(pix.tobytes("png")))
            return pytesseract.image_to_string(img)
        except Exception as exc:
            logger.warning(f"Full-page OCR failed on page {page.number + 1}: {exc}")
            return ""

    # ------------------------------------------------------------------
    # DOCX
    # ------------------------------------------------------------------

    async def _extract_docx(self, data: bytes) -> str:
        try:
            doc = DocxDocument(io.BytesIO(data))
        except Exception as exc:
            raise CorruptDocument(f"Cannot open DOCX file: {exc}") from exc

        parts: List[str] = []
        for para in doc.paragraphs:
            text = para.text.strip()
            if text:
                parts.append(text)

        for table in doc.tables:
            for row in table.rows:
                cells = [cell.text.strip() for cell in row.cells]
                non_empty = [c for c in cells if c]
                if non_empty:
                    parts.append(" | ".join(non_empty))

        logger.info(f"Extracted {len(parts)} paragraph/table line(s) from DOCX")
        return "\n".join(parts)
