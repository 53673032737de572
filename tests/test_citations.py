import pytest

from dealspace.citations import SourceCitation, format_sources, recover_citations


def test_sheet_citation_with_quoted_name() -> None:
    answer = "Revenue grew 12% (Budget.xlsx, Sheet 'Q1 Revenue')."

    assert recover_citations(answer, ["Budget.xlsx"]) == [
        SourceCitation(document_name="Budget.xlsx", location="Sheet: Q1 Revenue")
    ]


def test_page_and_slide_citations() -> None:
    answer = (
        "The facility is 12M (Credit Memo.pdf, Page 3).\n"
        "Headcount is 40 according to pitch.PPTX slide 7."
    )

    citations = recover_citations(answer, ["Credit Memo.pdf", "Pitch.pptx", "Unused.docx"])

    assert citations == [
        SourceCitation(document_name="Credit Memo.pdf", location="Page 3"),
        SourceCitation(document_name="Pitch.pptx", location="Slide 7"),
    ]


def test_document_named_without_location() -> None:
    citations = recover_citations("See notes.txt for details.", ["notes.txt"])

    assert format_sources(citations) == ["notes.txt"]


def test_location_of_one_document_is_not_attributed_to_another() -> None:
    answer = "Figures come from Budget.xlsx and Deck.pptx, Slide 2."

    citations = recover_citations(answer, ["Budget.xlsx", "Deck.pptx"])

    assert citations == [
        SourceCitation(document_name="Budget.xlsx"),
        SourceCitation(document_name="Deck.pptx", location="Slide 2"),
    ]


def test_sheet_with_colon_form() -> None:
    citations = recover_citations("[Budget.xlsx - Sheet: Opex 2024]", ["Budget.xlsx"])

    assert format_sources(citations) == ["Budget.xlsx (Sheet: Opex 2024)"]


@pytest.mark.parametrize(
    "answer",
    [
        "Budget.xlsx, Sheet: Q1 Revenue shows growth of 12%.",
        "See Budget.xlsx, Sheet: Q1 Revenue. Growth was 12%.",
    ],
)
def test_unquoted_sheet_name_stops_before_following_prose(answer: str) -> None:
    citations = recover_citations(answer, ["Budget.xlsx"])

    assert citations == [SourceCitation(document_name="Budget.xlsx", location="Sheet: Q1 Revenue")]


def test_duplicate_names_collapse_into_one_citation() -> None:
    citations = recover_citations("As Report.pdf page 2 shows", ["Report.pdf", "Report.pdf"])

    assert citations == [SourceCitation(document_name="Report.pdf", location="Page 2")]


def test_no_citations_when_nothing_matches() -> None:
    assert recover_citations("I could not find that in the documents.", ["a.pdf"]) == []


def test_abbreviated_page_reference() -> None:
    citations = recover_citations("Protein is 3-4 g/kg [Handbook.pdf, p.44]", ["Handbook.pdf"])

    assert format_sources(citations) == ["Handbook.pdf (Page 44)"]
