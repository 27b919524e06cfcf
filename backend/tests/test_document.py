import io

import pytest
from docx import Document

from formintake.errors import ExternalServiceError
from formintake.services.document import (
    DocumentProcessingService,
    file_extension,
    is_document,
    is_image,
)


def _docx_bytes():
    doc = Document()
    doc.add_paragraph("Employee Enrollment")
    doc.add_paragraph("   ")
    doc.add_paragraph("Full name: ________")
    table = doc.add_table(rows=2, cols=2)
    table.cell(0, 0).text = "Plan"
    table.cell(0, 1).text = "Tier"
    table.cell(1, 0).text = "Medical"
    table.cell(1, 1).text = "Family"
    buffer = io.BytesIO()
    doc.save(buffer)
    return buffer.getvalue()


def test_file_type_helpers():
    assert file_extension("Scan.PNG") == ".png"
    assert file_extension("noext") == ""
    assert is_image("photo.jpeg")
    assert is_document("form.docx")
    assert not is_image("form.pdf")
    assert not is_document("notes.txt")


def test_docx_paragraphs_then_tables():
    text = DocumentProcessingService.extract_text(_docx_bytes(), "enrollment.docx")

    lines = text.split("\n")
    assert lines[:2] == ["Employee Enrollment", "Full name: ________"]
    assert "--- Table ---" in lines
    assert lines.index("--- Table ---") > 1
    assert "Plan | Tier" in lines
    assert "Medical | Family" in lines


def test_corrupt_docx_is_an_external_service_error():
    with pytest.raises(ExternalServiceError):
        DocumentProcessingService.extract_text(b"not a zip file", "broken.docx")


def test_corrupt_pdf_is_an_external_service_error():
    with pytest.raises(ExternalServiceError):
        DocumentProcessingService.extract_text(b"%PDF-garbage", "broken.pdf")


def test_doc_extraction_keeps_readable_runs():
    data = b"\x00\x01Name:\x00\x00 Jane   Doe\x02\x03Signature"

    text = DocumentProcessingService.extract_text(data, "legacy.doc")

    assert "Name:" in text
    assert "Jane Doe" in text
    assert "Signature" in text
    assert "\x00" not in text


def test_non_document_type_is_rejected():
    with pytest.raises(ExternalServiceError):
        DocumentProcessingService.extract_text(b"\x89PNG", "scan.png")
