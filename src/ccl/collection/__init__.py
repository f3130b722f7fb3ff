"""Data collection module for eCFR snapshots and Federal Register documents."""

from .ecfr import EcfrClient
from .federal_register import normalize_federal_register_document, resolve_effective_on
from .versions import VersionStore, version_file_name

__all__ = [
    "EcfrClient",
    "normalize_federal_register_document",
    "resolve_effective_on",
    "VersionStore",
    "version_file_name",
]
