"""Text extraction from uploaded PDF and Word documents."""

import io
import logging
import os
import re
from typing import List

import pypdfium2 as pdfium
from docx import Document
from docx.table import Table

from formintake.errors import ExternalServiceError

logger = logging.getLogger(__name__)

IMAGE_EXTENSIONS = {".jpg", ".jpeg", ".png", ".gif", ".bmp", ".tiff"}
DOCUMENT_EXTENSIONS = {".pdf", ".doc", ".docx"}
SUPPORTED_EXTENSIONS = IMAGE_EXTENSIONS | DOCUMENT_EXTENSIONS


def file_extension(filename: str) -> str:
    return os.path.splitext(filename or "")[1].lower()


def is_image(filename: str) -> bool:
    return file_extension(filename) in IMAGE_EXTENSIONS


def is_document(filename: str) -> bool:
    return file_extension(filename) in DOCUMENT_EXTENSIONS


class DocumentProcessingService:
    """Service for pulling plain text out of uploaded documents."""

    @staticmethod
    def extract_text(data: bytes, filename: str) -> str:
        """
        Extract text from a PDF, DOCX or DOC upload.

        Raises ExternalServiceError when the file cannot be read or its
        type is not a document type.
        """
        extension = file_extension(filename)
        if extension == ".pdf":
            return DocumentProcessingService._extract_pdf(data)
        if extension == ".docx":
            return DocumentProcessingService._extract_docx(data)
        if extension == ".doc":
            return DocumentProcessingService._extract_doc(data)
        raise ExternalServiceError(f"Document type not supported: {extension or filename}")

    @staticmethod
    def _extract_pdf(data: bytes) -> str:
        try:
            pdf_doc = pdfium.PdfDocument(data)
        except pdfium.PdfiumError as e:
            logger.error(f"Error opening PDF: {e}")
            raise ExternalServiceError("Failed to extract text from PDF document") from e

        parts: List[str] = []
        try:
            for page_index in range(len(pdf_doc)):
                page = pdf_doc[page_index]
                textpage = page.get_textpage()
                page_text = textpage.get_text_range()
                textpage.close()
                page.close()
                if page_text and page_text.strip():
                    parts.append(f"--- Page {page_index + 1} ---\n{page_text.strip()}\n")
        finally:
            pdf_doc.close()

        text = "\n".join(parts)
        logger.info(f"Extracted {len(text)} characters from PDF document")
        return text

    @staticmethod
    def _table_lines(table: Table) -> List[str]:
        lines = ["--- Table ---"]
        for row in table.rows:
            cells = [
                " ".join(p.text for p in cell.paragraphs if p.text.strip())
                for cell in row.cells
            ]
            if any(c.strip() for c in cells):
                lines.append(" | ".join(cells))
        lines.append("")
        return lines

    @staticmethod
    def _extract_docx(data: bytes) -> str:
        try:
            doc = Document(io.BytesIO(data))
        except Exception as e:
            logger.error(f"Error opening DOCX: {e}")
            raise ExternalServiceError("Failed to extract text from DOCX document") from e

        # Paragraphs first, then every table
        lines = [p.text for p in doc.paragraphs if p.text.strip()]
        for table in doc.tables:
            lines.extend(DocumentProcessingService._table_lines(table))

        text = "\n".join(lines)
        logger.info(f"Extracted {len(text)} characters from DOCX document")
        return text

    @staticmethod
    def _extract_doc(data: bytes) -> str:
        """Best-effort scrape of readable runs from a legacy binary .doc."""
        logger.warning("DOC format extraction is approximate; convert to DOCX for better results")
        raw = data.decode("utf-8", errors="ignore")

        chars = []
        in_text = False
        for c in raw:
            if c.isalnum() or c.isspace() or (c.isprintable() and not c.isalnum() and c.isascii()):
                chars.append(c)
                in_text = True
            elif in_text:
                chars.append(" ")
                in_text = False

        text = re.sub(r"\s+", " ", "".join(chars)).strip()
        logger.info(f"Extracted {len(text)} characters from DOC document (basic extraction)")
        return text
