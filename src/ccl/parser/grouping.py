"""Detection of "all of the following" requirement groups."""

import re
from typing import Optional

from .tree import EccnTree

ALL_OF_THE_FOLLOWING = re.compile(r"\ball\s+of\s+the\s+following\b", re.IGNORECASE)

# Enumerator line plus the paragraph right after it
LEADING_BLOCKS_CHECKED = 2

PARAGRAPH_TAGS = {"P", "FP", "LI"}


def has_grouping_phrase(text: Optional[str]) -> bool:
    return bool(text) and bool(ALL_OF_THE_FOLLOWING.search(text))


def mark_requires_all_children(tree: EccnTree, index: int, text: Optional[str]) -> bool:
    """Flag node ``index`` when ``text`` carries grouping language."""
    if not has_grouping_phrase(text):
        return False
    tree.node(index).requires_all_children = True
    return True


def detect_grouping(tree: EccnTree) -> int:
    """Flag every node whose own text asks for all of its children.

    Looks at the heading and the first paragraph blocks, so the phrase is
    found whether it sits on the enumerator line or in the paragraph split
    off right after it. Returns the number of flagged nodes.
    """
    flagged = 0
    for index in tree.walk():
        node = tree.node(index)
        candidates = [node.heading]
        paragraphs = [
            block for block in node.content
            if block.type == "text" or (block.tag or "").upper() in PARAGRAPH_TAGS
        ]
        candidates.extend(block.text for block in paragraphs[:LEADING_BLOCKS_CHECKED])

        if any(mark_requires_all_children(tree, index, text) for text in candidates):
            flagged += 1
    return flagged
