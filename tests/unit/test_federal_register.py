"""Unit tests for Federal Register normalization and date parsing."""

import pytest
import sys
from pathlib import Path

# Add src to path
sys.path.insert(0, str(Path(__file__).parent.parent.parent / "src"))

from ccl.collection.federal_register import normalize_federal_register_document, resolve_effective_on
from ccl.utils.dates import normalize_iso_date, parse_effective_date_text


RAW_DOCUMENT = {
    "document_number": "2024-12345",
    "title": "Revisions to the Commerce Control List",
    "html_url": "https://www.federalregister.gov/documents/2024/01/05/2024-12345",
    "publication_date": "2024-01-05",
    "effective_on": None,
    "dates": "<p>This rule is effective January 10, 2024. Comments due March 1, 2024.</p>",
    "type": "Rule",
    "action": "Interim final rule.",
    "signing_date": "2024-01-02",
    "agencies": [{"name": "Industry and Security Bureau"}, {"raw_name": "COMMERCE"}],
    "citation": "89 FR 1234",
    "docket_ids": ["Docket No. 240102-0001"],
    "cfr_references": [
        {"title": 15, "part": "774", "chapter": "VII"},
        {"title": 15, "part": "740", "chapter": "VII"},
    ],
}


class TestDateParsing:
    """Tests for free-text date extraction."""

    @pytest.mark.parametrize("value,expected", [
        ("2024-01-05", "2024-01-05"),
        (" 2024-01-05 ", "2024-01-05"),
        ("2024-02-30", None),
        ("January 5, 2024", None),
        (None, None),
    ])
    def test_normalize_iso(self, value, expected):
        assert normalize_iso_date(value) == expected

    @pytest.mark.parametrize("text,expected", [
        ("Effective date: This rule is effective January 5, 2024.", "2024-01-05"),
        ("Effective Sept. 3, 2023 and Aug. 1, 2023", "2023-08-01"),
        ("effective 1/5/2024", "2024-01-05"),
        ("effective 2024-03-01, with compliance by 2024-06-01", "2024-03-01"),
        ("The mayor 12, 2024 spoke", None),
        ("no dates here", None),
    ])
    def test_effective_date_text(self, text, expected):
        assert parse_effective_date_text(text) == expected


class TestNormalizeDocument:
    """Tests for building the document value object."""

    def test_fields(self):
        document = normalize_federal_register_document(RAW_DOCUMENT, {"6", "1"})

        assert document.document_number == "2024-12345"
        assert document.effective_on == "2024-01-10"
        assert document.supplements == ["1", "6"]
        assert document.agencies == ["Industry and Security Bureau"]
        assert document.cfr_references == [{"title": 15, "part": "774", "chapter": "VII"}]
        assert document.docket_ids == ["Docket No. 240102-0001"]

    def test_serialized_aliases(self):
        data = normalize_federal_register_document(RAW_DOCUMENT, ["5"]).to_dict()

        assert data["documentNumber"] == "2024-12345"
        assert data["htmlUrl"].startswith("https://www.federalregister.gov/")
        assert data["effectiveOn"] == "2024-01-10"
        assert data["supplements"] == ["5"]

    def test_effective_on_precedence(self):
        assert resolve_effective_on({"effective_on": "2024-02-01", "dates": "May 1, 2024"}) == "2024-02-01"
        assert resolve_effective_on({"effective_date": "June 3, 2024", "publication_date": "2024-05-01"}) == "2024-06-03"
        assert resolve_effective_on({"publication_date": "2024-05-01"}) == "2024-05-01"
        assert resolve_effective_on({}) is None
