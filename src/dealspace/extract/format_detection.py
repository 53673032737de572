"""Map document file names to an extraction strategy."""
from __future__ import annotations

from enum import Enum


class ExtractionStrategy(str, Enum):
    """Extraction strategies selected by file name suffix."""

    PLAIN_TEXT = "plain_text"
    PDF = "pdf"
    WORD_DOC = "word_doc"
    SPREADSHEET = "spreadsheet"
    PRESENTATION = "presentation"
    JSON = "json"
    GENERIC_PROBE = "generic_probe"


class DocumentFormatDetector:
    """Detects the extraction strategy from the file name alone.

    Byte content is never inspected, so a mislabeled extension is processed as
    if it were genuine. Unknown suffixes route to :attr:`ExtractionStrategy.GENERIC_PROBE`.
    """

    _SUFFIX_PRIORITY: tuple[tuple[tuple[str, ...], ExtractionStrategy], ...] = (
        ((".txt", ".md", ".csv"), ExtractionStrategy.PLAIN_TEXT),
        ((".pdf",), ExtractionStrategy.PDF),
        ((".docx",), ExtractionStrategy.WORD_DOC),
        ((".xlsx", ".xls"), ExtractionStrategy.SPREADSHEET),
        ((".pptx",), ExtractionStrategy.PRESENTATION),
        ((".json",), ExtractionStrategy.JSON),
    )

    @classmethod
    def detect(cls, file_name: str) -> ExtractionStrategy:
        lowered = (file_name or "").lower()
        for suffixes, strategy in cls._SUFFIX_PRIORITY:
            if lowered.endswith(suffixes):
                return strategy
        return ExtractionStrategy.GENERIC_PROBE


def detect_strategy(file_name: str) -> ExtractionStrategy:
    """Shorthand for :meth:`DocumentFormatDetector.detect`."""

    return DocumentFormatDetector.detect(file_name)
