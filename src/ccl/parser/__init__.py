"""Structural parsing module for the Commerce Control List."""

from .models import (
    CclDataset,
    CclSupplement,
    ContentBlock,
    EccnEntry,
    EccnNode,
    FederalRegisterDocument,
    ParsedPart,
    SupplementMetadata,
    SupplementRef,
    VersionSummary,
)
from .patterns import extract_eccn_codes, roman_to_int
from .shorthand import expand_shorthand, expand_shorthand_references
from .tree import EccnTree
from .hierarchy import build_eccn_tree
from .grouping import mark_requires_all_children
from .flattener import flatten_tree
from .ccl_parser import CclPartParser, parse_ccl_file, parse_part

__all__ = [
    "CclDataset",
    "CclSupplement",
    "ContentBlock",
    "EccnEntry",
    "EccnNode",
    "FederalRegisterDocument",
    "ParsedPart",
    "SupplementMetadata",
    "SupplementRef",
    "VersionSummary",
    "extract_eccn_codes",
    "roman_to_int",
    "expand_shorthand",
    "expand_shorthand_references",
    "EccnTree",
    "build_eccn_tree",
    "mark_requires_all_children",
    "flatten_tree",
    "CclPartParser",
    "parse_ccl_file",
    "parse_part",
]
