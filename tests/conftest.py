"""Shared fixtures building real document payloads for the extractors."""
from __future__ import annotations

import io
import zipfile
from typing import Dict, Iterable, Mapping, Sequence

import pytest
import xlwt
from docx import Document
from openpyxl import Workbook

from dealspace.main import app

_SLIDE_TEMPLATE = (
    '<?xml version="1.0" encoding="UTF-8" standalone="yes"?>'
    '<p:sld xmlns:a="http://schemas.openxmlformats.org/drawingml/2006/main" '
    'xmlns:p="http://schemas.openxmlformats.org/presentationml/2006/main">'
    "<p:cSld><p:spTree>{runs}</p:spTree></p:cSld></p:sld>"
)


def build_pptx(slides: Mapping[int, Sequence[str]]) -> bytes:
    """Zip archive with one ``ppt/slides/slideN.xml`` part per entry."""

    buffer = io.BytesIO()
    with zipfile.ZipFile(buffer, "w") as archive:
        archive.writestr("[Content_Types].xml", "<Types/>")
        for number, texts in slides.items():
            runs = "".join(f"<p:sp><a:p><a:r><a:t>{text}</a:t></a:r></a:p></p:sp>" for text in texts)
            archive.writestr(f"ppt/slides/slide{number}.xml", _SLIDE_TEMPLATE.format(runs=runs))
        archive.writestr("ppt/slides/_rels/slide1.xml.rels", "<Relationships/>")
    return buffer.getvalue()


def build_xlsx(sheets: Dict[str, Iterable[Sequence[object]]]) -> bytes:
    workbook = Workbook()
    workbook.remove(workbook.active)
    for title, rows in sheets.items():
        worksheet = workbook.create_sheet(title=title)
        for row in rows:
            worksheet.append(list(row))
    buffer = io.BytesIO()
    workbook.save(buffer)
    return buffer.getvalue()


def build_xls(sheets: Dict[str, Iterable[Sequence[object]]]) -> bytes:
    """Legacy BIFF workbook, as saved by older Excel versions."""

    workbook = xlwt.Workbook()
    for title, rows in sheets.items():
        worksheet = workbook.add_sheet(title)
        for row_index, row in enumerate(rows):
            for col_index, value in enumerate(row):
                worksheet.write(row_index, col_index, value)
    buffer = io.BytesIO()
    workbook.save(buffer)
    return buffer.getvalue()


def build_docx(paragraphs: Sequence[str]) -> bytes:
    document = Document()
    for paragraph in paragraphs:
        document.add_paragraph(paragraph)
    buffer = io.BytesIO()
    document.save(buffer)
    return buffer.getvalue()


@pytest.fixture
def pdf_bytes() -> bytes:
    # Minimal PDF document with extractable text "Hello PDF"
    return (
        b"%PDF-1.4\n"
        b"1 0 obj\n<< /Type /Catalog /Pages 2 0 R >>\nendobj\n"
        b"2 0 obj\n<< /Type /Pages /Kids [3 0 R] /Count 1 >>\nendobj\n"
        b"3 0 obj\n<< /Type /Page /Parent 2 0 R /MediaBox [0 0 200 200] "
        b"/Contents 4 0 R /Resources << /Font << /F1 5 0 R >> >> >>\nendobj\n"
        b"4 0 obj\n<< /Length 53 >>\nstream\nBT /F1 12 Tf 72 120 Td (Hello PDF) Tj ET\nendstream\nendobj\n"
        b"5 0 obj\n<< /Type /Font /Subtype /Type1 /BaseFont /Helvetica >>\nendobj\n"
        b"xref\n0 6\n0000000000 65535 f \n0000000010 00000 n \n0000000059 00000 n \n0000000110 00000 n \n"
        b"0000000276 00000 n \n0000000393 00000 n \ntrailer\n<< /Size 6 /Root 1 0 R >>\nstartxref\n452\n%%EOF\n"
    )


@pytest.fixture(autouse=True)
def _clear_dependency_overrides():
    yield
    app.dependency_overrides.clear()
