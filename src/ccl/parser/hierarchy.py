"""Enumerator hierarchy builder.

Turns the flat run of elements that follows an ECCN heading into an outline
tree. Each paragraph is placed by, in order: its ID attribute, a compound
enumerator (``f.4.a.``), a leading code reference (``3B001.d.1``) and finally
a bare enumerator (``d.``) resolved against the stack of open levels.
Paragraphs that match none of these are prose and stay with the node they
follow.
"""

import logging
import re
from typing import Iterable, List, Optional

from bs4 import NavigableString, Tag
from bs4.element import PreformattedString

from ..utils.text import element_text, normalize_text
from .grouping import PARAGRAPH_TAGS, detect_grouping
from .models import ContentBlock
from .patterns import (
    FIRST_OF_KIND,
    classify_enumerator,
    extract_code_reference,
    extract_compound_enumerator,
    extract_leading_enumerator,
    extract_path_from_id,
    is_code_only,
    is_successor,
    normalize_enumerator,
    strip_leading_enumerators,
)
from .shorthand import expand_shorthand_references
from .tree import EccnTree

logger = logging.getLogger(__name__)

# Kept whole as a single content block
CONTAINER_TAGS = {"NOTE", "NOTES", "TABLE", "GPOTABLE", "UL", "OL", "DL", "EXTRACT", "FTNT"}

HEADING_TAG_PATTERN = re.compile(r"^HD\d*$")

NOTE_TEXT_PATTERN = re.compile(r"^(?:technical\s+)?notes?\b|^n\.\s?b\.", re.IGNORECASE)


def build_content_block(element) -> Optional[ContentBlock]:
    """Render an element or bare string as a content block.

    Shorthand references are expanded in ``html`` only. ``text`` keeps the
    wording as printed, since headings and enumerators are read from it.
    """
    if isinstance(element, PreformattedString):
        return None

    if isinstance(element, NavigableString):
        text = normalize_text(str(element))
        return ContentBlock(type="text", text=text) if text else None

    markup = str(element).strip()
    if not markup:
        return None

    return ContentBlock(
        type="html",
        tag=element.name.upper(),
        html=expand_shorthand_references(markup),
        text=element_text(element) or None,
        id=element.get("ID") or element.get("id") or None,
    )


def paragraph_heading(text: Optional[str]) -> Optional[str]:
    """Heading a paragraph contributes, or None for notes and bare markers."""
    if not text or is_code_only(text):
        return None
    heading = strip_leading_enumerators(text)
    if not heading or NOTE_TEXT_PATTERN.match(heading):
        return None
    return heading


def first_heading(*candidates: Optional[str]) -> Optional[str]:
    """First candidate that yields a usable heading."""
    for candidate in candidates:
        heading = paragraph_heading(candidate)
        if heading:
            return heading
    return None


class EnumeratorStack:
    """Open enumerator levels below the ECCN root.

    ``kinds`` holds the possible enumerator kinds for each open level, so an
    ambiguous ``i`` stays a letter or a roman numeral until a later sibling
    settles it.
    """

    def __init__(self):
        self.path: List[str] = []
        self.kinds: List[set] = []

    def reset(self, path: List[str]):
        """Adopt a path placed by ID, compound enumerator or code reference."""
        previous = dict(enumerate(zip(self.path, self.kinds)))
        self.path = list(path)
        self.kinds = []
        for depth, segment in enumerate(path):
            known = previous.get(depth)
            if known and known[0] == segment:
                self.kinds.append(known[1])
            else:
                self.kinds.append(set(classify_enumerator(segment)))

    def place(self, token: str) -> List[str]:
        """Path for a bare enumerator such as ``d.``.

        A bare enumerator closes every deeper level when it continues an
        open one, so ``d.`` after ``c.4.c.3.`` lands at ``d``.
        """
        kinds = classify_enumerator(token)
        segment = normalize_enumerator(token)

        for depth, (existing, open_kinds) in enumerate(zip(self.path, self.kinds)):
            for kind in kinds:
                if kind in open_kinds and is_successor(existing, token, kind):
                    return self._settle(depth, segment, kind)

        for kind in kinds:
            if segment == FIRST_OF_KIND[kind]:
                return self._settle(len(self.path), segment, kind)

        for depth in reversed(range(len(self.path))):
            shared = [kind for kind in kinds if kind in self.kinds[depth]]
            if shared:
                return self._settle(depth, segment, shared[0])

        return self._settle(len(self.path), segment, kinds[0] if kinds else None)

    def _settle(self, depth: int, segment: str, kind: Optional[str]) -> List[str]:
        self.path = self.path[:depth] + [segment]
        self.kinds = self.kinds[:depth] + [{kind} if kind else set()]
        return list(self.path)


class EccnTreeBuilder:
    """Single pass over the elements of one ECCN."""

    def __init__(self, code: str, heading: Optional[str] = None):
        self.code = code
        self.tree = EccnTree(code, heading)
        self.stack = EnumeratorStack()
        self.current = EccnTree.ROOT
        self.pending_heading: Optional[int] = None

    def build(self, nodes: Iterable) -> EccnTree:
        for node in nodes:
            self._consume(node)
        flagged = detect_grouping(self.tree)
        logger.debug(f"{self.code}: {len(self.tree)} nodes, {flagged} requiring all children")
        return self.tree

    def _consume(self, node):
        if isinstance(node, Tag):
            self._consume_element(node)
            return
        block = build_content_block(node)
        if block:
            self.tree.node(self.current).content.append(block)

    def _consume_element(self, element: Tag):
        tag = element.name.upper()
        id_path = extract_path_from_id(element.get("ID") or element.get("id"), self.code)

        if tag in PARAGRAPH_TAGS:
            self._consume_paragraph(element, id_path)
        elif tag in CONTAINER_TAGS or HEADING_TAG_PATTERN.match(tag) or id_path is not None:
            self._consume_container(element, id_path)
        else:
            for child in element.children:
                self._consume(child)

    def _consume_container(self, element: Tag, id_path: Optional[List[str]]):
        block = build_content_block(element)
        if block is None:
            return
        # Notes carry the ID of the node they annotate without moving the stack
        target = self.tree.ensure_path(id_path) if id_path is not None else self.current
        self.tree.node(target).content.append(block)

    def _consume_paragraph(self, element: Tag, id_path: Optional[List[str]]):
        block = build_content_block(element)
        if block is None:
            return

        path = self.resolve_path(id_path, block.text)
        if path is None:
            node = self.tree.node(self.current)
            node.content.append(block)
            if self.pending_heading == self.current and node.heading is None:
                node.heading = first_heading(block.text)
                if node.heading:
                    self.pending_heading = None
            return

        index = self.tree.ensure_path(path)
        node = self.tree.node(index)
        node.content.append(block)
        self.current = index

        if index == EccnTree.ROOT:
            return
        if node.heading is None:
            node.heading = first_heading(block.text)
        self.pending_heading = index if node.heading is None else None

    def resolve_path(self, id_path: Optional[List[str]], text: Optional[str]) -> Optional[List[str]]:
        """Outline path for a paragraph, or None when it is prose."""
        for path in (
            id_path,
            extract_compound_enumerator(text),
            extract_code_reference(text, self.code),
        ):
            if path is not None:
                self.stack.reset(path)
                return path

        token = extract_leading_enumerator(text)
        if token is None:
            return None
        # Parenthesized clauses without an ID are inline prose subdivisions
        if text.lstrip().startswith("("):
            return None
        return self.stack.place(token)


def build_eccn_tree(code: str, heading: Optional[str], nodes: Iterable) -> EccnTree:
    """Build the outline tree for one ECCN from the elements after its heading."""
    return EccnTreeBuilder(code, heading).build(nodes)


def build_leaf_tree(code: str, heading: Optional[str], blocks: List[ContentBlock]) -> EccnTree:
    """Tree with a single root node carrying ``blocks``, for tabular supplements."""
    tree = EccnTree(code, heading)
    tree.root.content.extend(blocks)
    detect_grouping(tree)
    return tree
