"""Format detection and per-format text extraction."""

from .extractors import BINARY_PLACEHOLDER_PREFIX, extract_content
from .format_detection import DocumentFormatDetector, ExtractionStrategy, detect_strategy
from .models import ExtractedContent, PageContent, SheetContent, SlideContent

__all__ = [
    "BINARY_PLACEHOLDER_PREFIX",
    "DocumentFormatDetector",
    "ExtractedContent",
    "ExtractionStrategy",
    "PageContent",
    "SheetContent",
    "SlideContent",
    "detect_strategy",
    "extract_content",
]
