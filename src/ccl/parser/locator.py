"""Locate the Part and its supplements inside a Title XML document."""

import logging
import re
from dataclasses import dataclass
from typing import Iterable, List, Optional

from bs4 import BeautifulSoup, Tag

from ..exceptions import StructuralNotFoundError
from ..utils.text import element_text

logger = logging.getLogger(__name__)

DIV_PATTERN = re.compile(r"^DIV\d+$")

SUPPLEMENT_TYPES = {"SUPPLEMENT", "APPENDIX"}

SUPPLEMENT_NUMBER_PATTERN = re.compile(r"Supplement\s+No\.?\s*(\d+)", re.IGNORECASE)
BARE_NUMBER_PATTERN = re.compile(r"^\s*(\d+)\s*$")
SINGLE_DIGIT_PATTERN = re.compile(r"(?:^|\D)(\d)(?:\D|$)")


@dataclass
class LocatedSupplement:
    """A supplement element with its resolved number and heading."""

    number: str
    heading: Optional[str]
    element: Tag


def _is_div(tag: Tag, div_type: str) -> bool:
    return (
        isinstance(tag, Tag)
        and bool(DIV_PATTERN.match(tag.name or ""))
        and (tag.get("TYPE") or "").upper() == div_type
    )


def find_part(soup: BeautifulSoup, part_number: str) -> Tag:
    """Return the Part division, e.g. ``<DIV5 TYPE="PART" N="774">``."""
    part = soup.find(lambda tag: _is_div(tag, "PART") and tag.get("N") == str(part_number))
    if part is None:
        raise StructuralNotFoundError(f"Part {part_number} not found in document")
    return part


def supplement_heading(element: Tag) -> Optional[str]:
    head = element.find("HEAD", recursive=False)
    if head is None:
        return None
    return element_text(head) or None


def determine_supplement_number(attribute: Optional[str], heading: Optional[str]) -> Optional[str]:
    """Supplement number from the ``N`` attribute or heading text.

    Tried in order: a bare numeric attribute, "Supplement No. N" in the
    attribute, then in the heading, then a lone digit in either.
    """
    strategies = [
        (attribute, BARE_NUMBER_PATTERN),
        (attribute, SUPPLEMENT_NUMBER_PATTERN),
        (heading, SUPPLEMENT_NUMBER_PATTERN),
        (attribute, SINGLE_DIGIT_PATTERN),
        (heading, SINGLE_DIGIT_PATTERN),
    ]
    for value, pattern in strategies:
        if not value:
            continue
        match = pattern.search(value)
        if match:
            return str(int(match.group(1)))
    return None


def locate_supplements(part: Tag, target_numbers: Iterable[str]) -> List[LocatedSupplement]:
    """Direct supplement children of ``part`` whose number is targeted, in document order."""
    targets = {str(number) for number in target_numbers}
    located = []

    for child in part.find_all(recursive=False):
        if not any(_is_div(child, div_type) for div_type in SUPPLEMENT_TYPES):
            continue

        heading = supplement_heading(child)
        number = determine_supplement_number(child.get("N"), heading)
        if number is None:
            logger.debug(f"Skipping supplement without a number: {heading!r}")
            continue
        if number not in targets:
            continue

        located.append(LocatedSupplement(number=number, heading=heading, element=child))

    if not located:
        logger.warning(f"No target supplements ({', '.join(sorted(targets))}) found in Part {part.get('N')}")
    else:
        logger.info(f"Located supplements: {[supplement.number for supplement in located]}")

    return located
