"""Normalization of Federal Register API documents."""

import logging
from typing import Iterable, Optional

from ..config import CCL_PART_NUMBER
from ..parser.models import FederalRegisterDocument
from ..utils.dates import normalize_iso_date, parse_effective_date_text

logger = logging.getLogger(__name__)


def resolve_effective_on(raw: dict) -> Optional[str]:
    """Effective date: ``effective_on``, then dates in the text fields, then publication."""
    direct = normalize_iso_date(raw.get("effective_on"))
    if direct:
        return direct

    for source in (raw.get("effective_date"), raw.get("dates")):
        parsed = parse_effective_date_text(source)
        if parsed:
            return parsed

    return normalize_iso_date(raw.get("publication_date"))


def normalize_federal_register_document(
    raw: dict,
    supplements: Iterable[str],
    part_number: str = CCL_PART_NUMBER,
) -> FederalRegisterDocument:
    """Build a :class:`FederalRegisterDocument` from a raw API result."""
    cfr_references = [
        reference for reference in raw.get("cfr_references") or []
        if isinstance(reference, dict) and str(reference.get("part")) == str(part_number)
    ]
    agencies = [
        agency["name"] for agency in raw.get("agencies") or []
        if isinstance(agency, dict) and agency.get("name")
    ]

    document = FederalRegisterDocument(
        document_number=raw.get("document_number") or None,
        title=raw.get("title") or None,
        html_url=raw.get("html_url") or None,
        publication_date=raw.get("publication_date") or None,
        effective_on=resolve_effective_on(raw),
        type=raw.get("type") or None,
        action=raw.get("action") or None,
        signing_date=raw.get("signing_date") or None,
        supplements=sorted({str(number) for number in supplements}),
        agencies=agencies,
        citation=raw.get("citation") or None,
        docket_ids=list(raw.get("docket_ids") or []),
        cfr_references=cfr_references,
    )
    logger.debug(f"Normalized Federal Register document {document.document_number}")
    return document
