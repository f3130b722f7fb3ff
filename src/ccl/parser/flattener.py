"""Flatten outline trees into addressable ECCN entries."""

import logging
from typing import List, Optional

from ..utils.text import normalize_text, strip_trailing_punctuation
from .models import ContentBlock, EccnEntry, EccnNode, SupplementRef
from .patterns import derive_eccn_title, strip_leading_enumerators
from .tree import EccnTree

logger = logging.getLogger(__name__)


def node_label(identifier: Optional[str], heading: Optional[str]) -> Optional[str]:
    """``"3B001.d – Control systems"``, or just the identifier when untitled."""
    title = derive_eccn_title(identifier, heading)
    if identifier and title and title != identifier:
        return f"{identifier} – {title}"
    return identifier or title


def comparable_text(text: Optional[str]) -> str:
    """Text reduced for heading comparison: no enumerators, trailing punctuation or case."""
    return strip_trailing_punctuation(strip_leading_enumerators(normalize_text(text))).casefold()


def remove_duplicate_heading(heading: Optional[str], content: List[ContentBlock]) -> List[ContentBlock]:
    """Drop the first block when it only repeats the heading."""
    if not heading or not content:
        return list(content)
    first = content[0]
    if comparable_text(first.text) and comparable_text(first.text) == comparable_text(heading):
        return list(content[1:])
    return list(content)


def serialize_node(tree: EccnTree, index: int, bound: bool = False) -> EccnNode:
    """Nested display form of ``index`` and everything below it."""
    node = tree.node(index)
    children = [
        serialize_node(tree, child, bound=node.requires_all_children)
        for child in node.children
    ]
    content = remove_duplicate_heading(node.heading, node.content)

    return EccnNode(
        identifier=node.identifier,
        label=node_label(node.identifier, node.heading),
        heading=node.heading,
        content=content or None,
        children=children or None,
        is_eccn=bool(node.identifier),
        bound_to_parent=bound,
        require_all_children=True if node.requires_all_children else None,
    )


def build_breadcrumbs(tree: EccnTree, index: int, trail: List[str]) -> List[str]:
    """Heading trail followed by the ancestor headings, outermost first."""
    crumbs = [crumb for crumb in trail if crumb]
    for ancestor in reversed(tree.ancestors(index)):
        node = tree.node(ancestor)
        crumb = node.heading or node.identifier
        if crumb:
            crumbs.append(crumb)
    return crumbs


def nearest_standalone_ancestor(tree: EccnTree, index: int) -> Optional[str]:
    """Identifier of the closest ancestor that has its own entry."""
    for ancestor in tree.ancestors(index):
        if not tree.is_bound(ancestor):
            return tree.node(ancestor).identifier
    return None


def flatten_tree(
    tree: EccnTree,
    supplement: SupplementRef,
    trail: Optional[List[str]] = None,
) -> List[EccnEntry]:
    """One entry per node, in document order, skipping bound children."""
    trail = trail or []
    entries = []

    for index in tree.walk():
        if tree.is_bound(index):
            continue

        node = tree.node(index)
        code = node.identifier
        child_eccns = [] if node.requires_all_children else [
            tree.node(child).identifier for child in node.children
        ]

        entries.append(EccnEntry(
            eccn=code,
            heading=node.heading,
            title=derive_eccn_title(code, node.heading),
            category=code[0] if code else None,
            group=code[:2] if code else None,
            breadcrumbs=build_breadcrumbs(tree, index, trail),
            supplement=supplement,
            structure=serialize_node(tree, index),
            parent_eccn=nearest_standalone_ancestor(tree, index),
            child_eccns=child_eccns,
        ))

    logger.debug(f"{tree.code}: flattened {len(entries)} entries")
    return entries
