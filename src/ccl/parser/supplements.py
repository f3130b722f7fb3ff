"""Per-supplement parsing strategies.

Supplement No. 1 (the CCL proper) is split into one segment per ECCN heading
and each segment is built into an outline tree. Supplement No. 5 is a table
whose rows are grouped by the ECCN that opens them. Supplements No. 6 and 7
are lists in which any paragraph naming ECCNs opens a new group.
"""

import logging
import re
from collections import Counter
from dataclasses import dataclass, field
from typing import Callable, Dict, List, Optional, Tuple

from bs4 import NavigableString, Tag
from bs4.element import PreformattedString

from ..utils.text import element_text, normalize_text
from .flattener import flatten_tree
from .hierarchy import build_eccn_tree, build_leaf_tree
from .locator import LocatedSupplement
from .models import CclSupplement, ContentBlock, EccnEntry, SupplementMetadata, SupplementRef
from .patterns import ECCN_HEADING_PATTERN, ECCN_ID_PATTERN, extract_eccn_codes, match_eccn_heading
from .shorthand import expand_shorthand_references

logger = logging.getLogger(__name__)

HEADING_TAG_PATTERN = re.compile(r"^HD(\d*)$")
HEADING_SOURCE_PATTERN = re.compile(r"^HD(\d)$")

# Headings at or above this level are navigation, never ECCN content
NAVIGATION_LEVEL = 2


def heading_level(element: Tag) -> int:
    """Outline level of an ``HD`` element, 0 for anything else.

    ``HD1``..``HD6`` carry the level in the tag name; a plain ``HD`` takes it
    from ``SOURCE`` (``HED`` is level 1, ``HD2`` level 2).
    """
    match = HEADING_TAG_PATTERN.match((element.name or "").upper())
    if not match:
        return 0
    if match.group(1):
        return int(match.group(1))
    source = HEADING_SOURCE_PATTERN.match((element.get("SOURCE") or "").upper())
    return int(source.group(1)) if source else 1


class HeadingTrail:
    """Most recent heading text at each level."""

    def __init__(self):
        self.levels: List[Optional[str]] = []

    def update(self, level: int, text: str):
        del self.levels[level:]
        while len(self.levels) < level:
            self.levels.append(None)
        self.levels[level - 1] = text or None

    def crumbs(self) -> List[str]:
        return [text for text in self.levels if text]


@dataclass
class EccnSegment:
    """Elements belonging to one ECCN heading."""

    code: str
    heading: Optional[str]
    breadcrumbs: List[str]
    nodes: List = field(default_factory=list)


def eccn_heading_from_element(element: Tag) -> Optional[Tuple[str, str]]:
    """``(code, heading)`` when the element opens an ECCN.

    Bold text is preferred over the whole element, so ``<P><B>3B001
    Equipment</B> ...</P>`` yields the bold heading only.
    """
    target = element.find(["B", "STRONG"], recursive=False)
    found = match_eccn_heading(element_text(target if target is not None else element))
    if found:
        return found

    element_id = element.get("ID")
    if element_id and ECCN_ID_PATTERN.match(element_id):
        return element_id.upper(), element_text(element) or element_id.upper()
    return None


def _meaningful(node) -> bool:
    if isinstance(node, PreformattedString):
        return False
    if isinstance(node, NavigableString):
        return bool(normalize_text(str(node)))
    return isinstance(node, Tag)


def segment_by_eccn(element: Tag) -> List[EccnSegment]:
    """Split a supplement's children into ECCN segments, sorted by code.

    A repeated ECCN heading is treated as content of the segment it appears in.
    """
    segments: List[EccnSegment] = []
    seen = set()
    trail = HeadingTrail()
    current: Optional[EccnSegment] = None

    for node in element.children:
        if not _meaningful(node):
            continue

        if isinstance(node, NavigableString):
            if current:
                current.nodes.append(node)
            continue

        level = heading_level(node)
        if level:
            trail.update(level, element_text(node))
            if current is None or level <= NAVIGATION_LEVEL:
                continue

        found = None if level else eccn_heading_from_element(node)
        if found and found[0] not in seen:
            code, heading = found
            seen.add(code)
            current = EccnSegment(code=code, heading=heading, breadcrumbs=trail.crumbs(), nodes=[node])
            segments.append(current)
            continue

        if current:
            current.nodes.append(node)

    return sorted(segments, key=lambda segment: segment.code)


def summarize(located: LocatedSupplement, entries: List[EccnEntry]) -> CclSupplement:
    """Wrap entries with per-category counts."""
    category_counts = Counter(entry.category or "unknown" for entry in entries)
    return CclSupplement(
        number=located.number,
        heading=located.heading,
        eccns=entries,
        metadata=SupplementMetadata(
            eccn_count=len(entries),
            category_counts=dict(category_counts),
        ),
    )


def _reference(located: LocatedSupplement) -> SupplementRef:
    return SupplementRef(number=located.number, heading=located.heading)


def parse_outline_supplement(located: LocatedSupplement) -> CclSupplement:
    """Supplement No. 1: every ECCN heading opens an outline tree."""
    supplement = _reference(located)
    entries: List[EccnEntry] = []

    for segment in segment_by_eccn(located.element):
        tree = build_eccn_tree(segment.code, segment.heading, segment.nodes)
        entries.extend(flatten_tree(tree, supplement, segment.breadcrumbs))

    logger.info(f"Supplement {located.number}: {len(entries)} entries")
    return summarize(located, entries)


def _table_rows(table: Tag) -> List[Tag]:
    body = table.find("TBODY", recursive=False)
    if body is not None:
        return body.find_all(["TR", "ROW"], recursive=False)
    return table.find_all(["TR", "ROW"])


def parse_table_supplement(located: LocatedSupplement) -> CclSupplement:
    """Supplement No. 5: table rows grouped under the ECCN that opens them."""
    table = located.element.find(["TABLE", "GPOTABLE"])
    if table is None:
        logger.warning(f"Supplement {located.number}: no table found")
        return summarize(located, [])

    header = table.find(["THEAD", "BOXHD"], recursive=False)
    header_html = str(header).strip() if header is not None else ""

    groups: List[Tuple[str, str, List[Tag]]] = []
    for row in _table_rows(table):
        # Cells joined with spaces
        text = element_text(row, separator=" ")
        match = ECCN_HEADING_PATTERN.match(text) if text else None
        if match:
            groups.append((match.group(1), text, [row]))
        elif groups:
            groups[-1][2].append(row)

    supplement = _reference(located)
    entries: List[EccnEntry] = []
    for code, heading, rows in groups:
        rows_html = "".join(str(row).strip() for row in rows)
        table_html = (
            f'<table class="supplement-table supplement-{located.number}-table">'
            f"{header_html}<tbody>{rows_html}</tbody></table>"
        )
        block = ContentBlock(type="html", tag="TABLE", html=expand_shorthand_references(table_html))
        entries.extend(flatten_tree(build_leaf_tree(code, heading, [block]), supplement))

    logger.info(f"Supplement {located.number}: {len(entries)} entries")
    return summarize(located, entries)


def parse_list_supplement(located: LocatedSupplement) -> CclSupplement:
    """Supplements No. 6 and 7: paragraphs naming ECCNs open a group for each code."""
    supplement = _reference(located)
    entries: List[EccnEntry] = []
    seen = set()
    trail = HeadingTrail()
    groups: List[Tuple[List[str], str, List[str], List]] = []

    for node in located.element.children:
        if not _meaningful(node):
            continue

        if isinstance(node, NavigableString):
            if groups:
                groups[-1][3].append(node)
            continue

        level = heading_level(node)
        if level:
            trail.update(level, element_text(node))
            groups.append(([], "", [], []))
            continue

        codes = extract_eccn_codes(element_text(node))
        if codes:
            groups.append((codes, element_text(node), trail.crumbs(), [node]))
        elif groups:
            groups[-1][3].append(node)

    for codes, heading, breadcrumbs, nodes in groups:
        for code in codes:
            if code in seen:
                continue
            seen.add(code)
            tree = build_eccn_tree(code, heading, nodes)
            entries.extend(flatten_tree(tree, supplement, breadcrumbs))

    logger.info(f"Supplement {located.number}: {len(entries)} entries")
    return summarize(located, entries)


SUPPLEMENT_PARSERS: Dict[str, Callable[[LocatedSupplement], CclSupplement]] = {
    "1": parse_outline_supplement,
    "5": parse_table_supplement,
    "6": parse_list_supplement,
    "7": parse_list_supplement,
}


def parse_supplement(located: LocatedSupplement) -> CclSupplement:
    """Dispatch on supplement number; unknown numbers use the outline strategy."""
    parser = SUPPLEMENT_PARSERS.get(located.number, parse_outline_supplement)
    return parser(located)
