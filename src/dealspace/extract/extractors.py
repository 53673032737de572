"""Extractors turning raw document bytes into :class:`ExtractedContent`."""
from __future__ import annotations

import csv
import html
import io
import json
import logging
import math
import re
import zipfile
import xml.etree.ElementTree as ET
from typing import Dict, Iterable, List, Optional, Sequence

import xlrd
from docx import Document as DocxDocument
from openpyxl import load_workbook
from pdfminer.high_level import extract_text as pdf_extract_text
from PyPDF2 import PdfReader

from .format_detection import ExtractionStrategy, detect_strategy
from .models import ExtractedContent, PageContent, SheetContent, SlideContent

LOGGER = logging.getLogger(__name__)

BINARY_PLACEHOLDER_PREFIX = "[Binary file:"
PDF_FALLBACK_PAGE_CHARS = 3000
BINARY_CONTROL_RATIO = 0.10

_WORD_NAMESPACE = "{http://schemas.openxmlformats.org/wordprocessingml/2006/main}"
_SLIDE_PATH_RE = re.compile(r"^ppt/slides/slide(\d+)\.xml$")
_TEXT_RUN_RE = re.compile(r"<a:t(?:\s[^>]*)?>(.*?)</a:t>", re.DOTALL)


def binary_placeholder(file_name: str) -> str:
    return f"{BINARY_PLACEHOLDER_PREFIX} {file_name} - content type not supported]"


def approximate_pages(text: str, page_count: Optional[int]) -> List[PageContent]:
    """Split ``text`` into contiguous, equally sized chunks, one per page.

    This is a length-based approximation: real page boundaries are not
    recovered. When ``page_count`` is unknown, one page per 3000 characters
    is assumed. Empty slices are skipped.
    """

    if not text:
        return []
    if not page_count or page_count < 1:
        page_count = math.ceil(len(text) / PDF_FALLBACK_PAGE_CHARS)
    chars_per_page = math.ceil(len(text) / page_count)

    pages: List[PageContent] = []
    for index in range(page_count):
        chunk = text[index * chars_per_page : (index + 1) * chars_per_page]
        if chunk:
            pages.append(PageContent(page_number=index + 1, text=chunk))
    return pages


def control_character_ratio(text: str) -> float:
    """Fraction of ASCII control characters 0x00-0x08 and 0x0E-0x1F in ``text``."""

    if not text:
        return 0.0
    control = sum(1 for char in text if ord(char) <= 0x08 or 0x0E <= ord(char) <= 0x1F)
    return control / len(text)


def _legacy_cell(value: object) -> object:
    # xlrd reports every number as a float
    if isinstance(value, float) and value.is_integer():
        return int(value)
    return value


class ContentExtractor:
    """Base extractor; subclasses implement :meth:`_extract`.

    :meth:`extract` never raises. Parse failures are logged and replaced with
    a placeholder result flagged as ``degraded``.
    """

    kind = "File"

    def extract(self, data: bytes, file_name: str) -> ExtractedContent:
        try:
            return self._extract(data, file_name)
        except Exception as error:
            LOGGER.warning(
                "%s extraction failed for %s: %s", self.kind, file_name, error, exc_info=True
            )
            return self.placeholder()

    def placeholder(self) -> ExtractedContent:
        return ExtractedContent(text=f"[{self.kind} content could not be extracted]", degraded=True)

    def _extract(self, data: bytes, file_name: str) -> ExtractedContent:  # pragma: no cover - abstract
        raise NotImplementedError


class TextExtractor(ContentExtractor):
    """Plain text, markdown and CSV files, decoded verbatim."""

    kind = "Text"

    def _extract(self, data: bytes, file_name: str) -> ExtractedContent:
        return ExtractedContent(text=data.decode("utf-8", errors="replace"))


class PDFExtractor(ContentExtractor):
    """Extract PDF text and approximate its pagination."""

    kind = "PDF"

    def _extract(self, data: bytes, file_name: str) -> ExtractedContent:
        text = pdf_extract_text(io.BytesIO(data)) or ""
        if not text.strip():
            LOGGER.info("PDF %s yielded no text", file_name)
            return self.placeholder()

        page_count = self._count_pages(data, file_name)
        pages = approximate_pages(text, page_count)
        LOGGER.debug(
            "PDF %s: %s chars over %s reported pages -> %s chunks",
            file_name,
            len(text),
            page_count,
            len(pages),
        )
        return ExtractedContent(text=text, pages=pages)

    @staticmethod
    def _count_pages(data: bytes, file_name: str) -> Optional[int]:
        try:
            return len(PdfReader(io.BytesIO(data)).pages)
        except Exception as error:
            LOGGER.info("Page count unavailable for %s (%s); using length heuristic", file_name, error)
            return None


class DocxExtractor(ContentExtractor):
    """Extract raw text from Microsoft Word documents."""

    kind = "Word document"

    def _extract(self, data: bytes, file_name: str) -> ExtractedContent:
        try:
            document = DocxDocument(io.BytesIO(data))
        except Exception as error:
            LOGGER.warning(
                "python-docx failed to parse %s (%s); reading the XML payload directly",
                file_name,
                error,
            )
            return ExtractedContent(text=self._fallback_text(data))

        text_parts = [paragraph.text for paragraph in document.paragraphs if paragraph.text]
        for table in document.tables:
            for row in table.rows:
                cells = [cell.text.strip() for cell in row.cells]
                if any(cells):
                    text_parts.append(" | ".join(cells))
        return ExtractedContent(text="\n\n".join(text_parts))

    @staticmethod
    def _fallback_text(data: bytes) -> str:
        with zipfile.ZipFile(io.BytesIO(data)) as archive:
            xml_bytes = archive.read("word/document.xml")
        root = ET.fromstring(xml_bytes)
        paragraphs = []
        for paragraph in root.iter(f"{_WORD_NAMESPACE}p"):
            runs = [node.text for node in paragraph.iter(f"{_WORD_NAMESPACE}t") if node.text]
            if runs:
                paragraphs.append("".join(runs))
        return "\n\n".join(paragraphs)


class SpreadsheetExtractor(ContentExtractor):
    """Render every worksheet as CSV, preserving workbook order."""

    kind = "Spreadsheet"

    def _extract(self, data: bytes, file_name: str) -> ExtractedContent:
        if file_name.lower().endswith(".xls"):
            sheets = self._read_legacy_workbook(data)
        else:
            sheets = self._read_workbook(data)

        text = "\n\n".join(f"### Sheet: {sheet.sheet_name}\n{sheet.text}" for sheet in sheets)
        return ExtractedContent(text=text, sheets=sheets)

    def _read_workbook(self, data: bytes) -> List[SheetContent]:
        workbook = load_workbook(io.BytesIO(data), read_only=True, data_only=True)
        try:
            return [
                SheetContent(
                    sheet_name=worksheet.title,
                    text=self._rows_to_csv(worksheet.iter_rows(values_only=True)),
                )
                for worksheet in workbook.worksheets
            ]
        finally:
            workbook.close()

    def _read_legacy_workbook(self, data: bytes) -> List[SheetContent]:
        """Read a BIFF ``.xls`` workbook, which openpyxl cannot open."""

        book = xlrd.open_workbook(file_contents=data, on_demand=True)
        try:
            return [
                SheetContent(
                    sheet_name=sheet.name,
                    text=self._rows_to_csv(
                        [_legacy_cell(value) for value in sheet.row_values(index)]
                        for index in range(sheet.nrows)
                    ),
                )
                for sheet in book.sheets()
            ]
        finally:
            book.release_resources()

    @staticmethod
    def _rows_to_csv(rows: Iterable[Sequence[object]]) -> str:
        buffer = io.StringIO()
        writer = csv.writer(buffer, lineterminator="\n")
        for row in rows:
            writer.writerow(["" if value is None else value for value in row])
        return buffer.getvalue().rstrip("\n")


class PresentationExtractor(ContentExtractor):
    """Pull text runs out of the slide XML parts of a PPTX archive."""

    kind = "Presentation"

    def _extract(self, data: bytes, file_name: str) -> ExtractedContent:
        slides: List[SlideContent] = []
        with zipfile.ZipFile(io.BytesIO(data)) as archive:
            slide_paths = []
            for name in archive.namelist():
                match = _SLIDE_PATH_RE.match(name)
                if match:
                    slide_paths.append((int(match.group(1)), name))
            slide_paths.sort()

            for slide_number, path in slide_paths:
                try:
                    xml_text = archive.read(path).decode("utf-8", errors="replace")
                except Exception as error:
                    LOGGER.warning("Could not read %s from %s: %s", path, file_name, error)
                    continue
                runs = [html.unescape(run) for run in _TEXT_RUN_RE.findall(xml_text)]
                content = " ".join(run for run in runs if run.strip()).strip()
                if content:
                    slides.append(SlideContent(slide_number=slide_number, text=content))

        if not slides:
            LOGGER.info("Presentation %s yielded no text", file_name)
            return self.placeholder()
        text = "\n\n".join(slide.text for slide in slides)
        return ExtractedContent(text=text, slides=slides)


class JSONExtractor(ContentExtractor):
    """Pretty-print JSON documents, falling back to their raw text."""

    kind = "JSON"

    def _extract(self, data: bytes, file_name: str) -> ExtractedContent:
        raw = data.decode("utf-8")
        try:
            parsed = json.loads(raw)
        except ValueError:
            LOGGER.info("JSON document %s is not valid JSON; using raw text", file_name)
            return ExtractedContent(text=raw)
        return ExtractedContent(text=json.dumps(parsed, indent=2, ensure_ascii=False))


class GenericProbeExtractor(ContentExtractor):
    """Decode unknown files as text unless they look binary."""

    kind = "File"

    def _extract(self, data: bytes, file_name: str) -> ExtractedContent:
        text = data.decode("utf-8", errors="replace")
        ratio = control_character_ratio(text)
        if ratio > BINARY_CONTROL_RATIO:
            LOGGER.info("Treating %s as binary (control ratio %.2f)", file_name, ratio)
            return ExtractedContent(text=binary_placeholder(file_name))
        return ExtractedContent(text=text)


EXTRACTORS: Dict[ExtractionStrategy, ContentExtractor] = {
    ExtractionStrategy.PLAIN_TEXT: TextExtractor(),
    ExtractionStrategy.PDF: PDFExtractor(),
    ExtractionStrategy.WORD_DOC: DocxExtractor(),
    ExtractionStrategy.SPREADSHEET: SpreadsheetExtractor(),
    ExtractionStrategy.PRESENTATION: PresentationExtractor(),
    ExtractionStrategy.JSON: JSONExtractor(),
    ExtractionStrategy.GENERIC_PROBE: GenericProbeExtractor(),
}


def extract_content(file_name: str, data: bytes) -> ExtractedContent:
    """Pick the extractor for ``file_name`` and run it over ``data``."""

    return EXTRACTORS[detect_strategy(file_name)].extract(data, file_name)
