"""Text processing utilities."""

import re
import unicodedata


def normalize_text(text: str | None) -> str:
    """Normalize text by removing extra whitespace and normalizing unicode.

    Args:
        text: Text to normalize

    Returns:
        Normalized text
    """
    if not text:
        return ""

    # Normalize unicode (turns non-breaking spaces into plain spaces)
    text = unicodedata.normalize("NFKC", text)

    # Replace multiple whitespace with single space
    text = re.sub(r"\s+", " ", text)

    return text.strip()


def strip_trailing_punctuation(text: str) -> str:
    """Remove trailing punctuation and dashes."""
    return re.sub(r"[\s.,;:–—-]+$", "", text)


def strip_leading_punctuation(text: str) -> str:
    """Remove leading punctuation and dashes."""
    return re.sub(r"^[\s.,;:–—-]+", "", text)


def element_text(element, separator: str = "") -> str:
    """Collapsed text content of a BeautifulSoup element or string."""
    if element is None:
        return ""
    if isinstance(element, str):
        return normalize_text(element)
    return normalize_text(element.get_text(separator))
