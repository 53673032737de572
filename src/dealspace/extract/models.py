"""Data models produced by the document extractors."""
from __future__ import annotations

from dataclasses import dataclass
from typing import List, Optional


@dataclass(slots=True)
class PageContent:
    """Approximated page of a paginated document."""

    page_number: int
    text: str


@dataclass(slots=True)
class SheetContent:
    """CSV rendering of a single worksheet."""

    sheet_name: str
    text: str


@dataclass(slots=True)
class SlideContent:
    """Text runs of one slide, numbered as in the source archive."""

    slide_number: int
    text: str


@dataclass(slots=True)
class ExtractedContent:
    """Parsing result for one document.

    ``text`` is always populated and is the fallback when no structure is
    available. At most one of ``pages``, ``sheets`` and ``slides`` is set.
    ``degraded`` marks placeholder results produced after a parse failure.
    """

    text: str
    pages: Optional[List[PageContent]] = None
    sheets: Optional[List[SheetContent]] = None
    slides: Optional[List[SlideContent]] = None
    degraded: bool = False

    def __post_init__(self) -> None:
        populated = [field for field in (self.pages, self.sheets, self.slides) if field is not None]
        if len(populated) > 1:
            raise ValueError("pages, sheets and slides are mutually exclusive")

    @property
    def structure(self) -> str:
        if self.pages is not None:
            return "pages"
        if self.sheets is not None:
            return "sheets"
        if self.slides is not None:
            return "slides"
        return "text"

    @property
    def segment_count(self) -> int:
        for field in (self.pages, self.sheets, self.slides):
            if field is not None:
                return len(field)
        return 0

    @property
    def has_text(self) -> bool:
        """True when the document contributed real, non-placeholder content."""

        return not self.degraded and bool(self.text.strip())
