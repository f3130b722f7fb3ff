"""Custom exceptions for the CCL parser."""


class CclError(Exception):
    """Base exception for CCL operations."""


class StructuralNotFoundError(CclError):
    """Expected top-level sectioning element is missing from the document."""


class UnrecognizedShorthandError(CclError):
    """Shorthand range token does not match any known pattern."""


class FetchError(CclError):
    """Error while downloading data from the eCFR."""

    def __init__(self, message: str, status_code: int | None = None, body: str | None = None):
        super().__init__(message)
        self.status_code = status_code
        self.body = body
