"""Regex patterns and enumerator helpers for CCL parsing."""

import re
from typing import List, Optional, Tuple

from ..utils.text import normalize_text, strip_leading_punctuation

# ECCN at the start of a heading: one digit, one uppercase letter, three digits
ECCN_HEADING_PATTERN = re.compile(r"^(\d[A-Z]\d{3})(?=$|[\s.\-–—:;(\[])")

# An ID attribute that is nothing but an ECCN ("3B001", "3b001")
ECCN_ID_PATTERN = re.compile(r"^\d[A-Za-z]\d{3}$")

# An ECCN with any dotted suffix, anywhere in text
ECCN_CODE_PATTERN = re.compile(r"\d[A-Z]\d{3}(?:\.[A-Za-z0-9]+)*")

# Paragraph text that carries nothing but a code reference
CODE_ONLY_PATTERN = re.compile(r"^(?:ECCN\s+)?\d[A-Z]\d{3}(?:\.[A-Za-z0-9]+)*[\s.,;:]*$", re.IGNORECASE)

# "f.4.a." / "c.4.c.3." at the start of a paragraph
COMPOUND_ENUMERATOR_PATTERN = re.compile(
    r"^\(?((?:[a-z]{1,2}|\d{1,3})(?:\.(?:[a-z]{1,2}|\d{1,3}))+)[.)]?(?=\s|$)"
)

# Single enumerators, most specific first
ENUMERATOR_PATTERNS = [
    re.compile(r"^\(([ivx]{1,6})\)", re.IGNORECASE),
    re.compile(r"^\(([a-z]{1,2})\)", re.IGNORECASE),
    re.compile(r"^\((\d{1,3})\)"),
    re.compile(r"^([a-z]{1,2})[.)](?=\s|$|\()"),
    re.compile(r"^(\d{1,3})[.)](?=\s|$|\()"),
    re.compile(r"^([A-Z]{1,2})[.)](?=\s|$|\()"),
]

LEADING_PAREN_ENUMERATOR = re.compile(r"^\(([a-z0-9]{1,4}|[ivxlcdm]{1,5})\)[-\s–—:;.,]*", re.IGNORECASE)
LEADING_DOT_ENUMERATOR = re.compile(r"^([a-z]{1,2}|\d{1,3}|[ivx]{1,5})\.[-\s–—:;.,]*")

ROMAN_PATTERN = re.compile(r"^(?=[ivxl])(l?x{0,3})(ix|iv|v?i{0,3})$")

FIRST_OF_KIND = {"letter": "a", "digit": "1", "roman": "i", "upper": "a"}


def roman_to_int(roman: str) -> int:
    """Convert Roman numeral to integer."""
    values = {'I': 1, 'V': 5, 'X': 10, 'L': 50, 'C': 100, 'D': 500, 'M': 1000}
    result = 0
    prev = 0
    for char in reversed(roman.upper()):
        curr = values.get(char, 0)
        if curr < prev:
            result -= curr
        else:
            result += curr
        prev = curr
    return result


def is_roman(token: str) -> bool:
    return bool(token) and bool(ROMAN_PATTERN.match(token.lower()))


def alpha_index(token: str) -> Optional[int]:
    """Position of a letter enumerator: a=1 ... z=26, aa=27 ... zz=52."""
    token = token.lower()
    if len(token) == 1 and token.isalpha():
        return ord(token) - ord("a") + 1
    if len(token) == 2 and token.isalpha() and token[0] == token[1]:
        return 26 + ord(token[0]) - ord("a") + 1
    return None


def alpha_token(index: int) -> Optional[str]:
    """Inverse of :func:`alpha_index`."""
    if 1 <= index <= 26:
        return chr(ord("a") + index - 1)
    if 27 <= index <= 52:
        return chr(ord("a") + index - 27) * 2
    return None


def classify_enumerator(token: str) -> List[str]:
    """Possible enumerator kinds for a token, most likely first.

    Single ``i``/``v``/``x`` and doubled ``ii``/``xx`` are ambiguous between
    letters and roman numerals; the caller resolves them from context.
    """
    if not token:
        return []
    if token.isdigit():
        return ["digit"]
    if token.isupper():
        return ["upper"] if alpha_index(token) else []
    lower = token.lower()
    if lower in ("i", "v", "x"):
        return ["letter", "roman"]
    if lower in ("ii", "xx"):
        return ["roman", "letter"]
    if alpha_index(lower):
        return ["letter"]
    if is_roman(lower):
        return ["roman"]
    return []


def enumerator_value(token: str, kind: str) -> Optional[int]:
    """Ordinal value of a token read as ``kind``."""
    if kind == "digit":
        return int(token) if token.isdigit() else None
    if kind in ("letter", "upper"):
        return alpha_index(token)
    if kind == "roman":
        return roman_to_int(token) if is_roman(token) else None
    return None


def is_successor(previous: str, token: str, kind: str) -> bool:
    """True when ``token`` directly follows ``previous`` in ``kind`` order."""
    prev_value = enumerator_value(previous, kind)
    value = enumerator_value(token, kind)
    if prev_value is None or value is None:
        return False
    return value == prev_value + 1


def normalize_enumerator(token: str) -> str:
    """Path segment form of an enumerator: digits unpadded, letters lowercase."""
    if token.isdigit():
        return token.lstrip("0") or "0"
    return token.lower()


def extract_leading_enumerator(text: Optional[str]) -> Optional[str]:
    """Return the single enumerator a paragraph opens with, e.g. ``(a)`` → ``a``."""
    if not text:
        return None
    normalized = text.lstrip()
    for pattern in ENUMERATOR_PATTERNS:
        match = pattern.match(normalized)
        if match and classify_enumerator(match.group(1)):
            return match.group(1)
    return None


def extract_compound_enumerator(text: Optional[str]) -> Optional[List[str]]:
    """Return path segments for a compound enumerator such as ``f.4.a.``.

    Segments must alternate between letters and numbers, which keeps
    abbreviations like ``e.g.`` out.
    """
    if not text:
        return None
    match = COMPOUND_ENUMERATOR_PATTERN.match(text.lstrip())
    if not match:
        return None

    segments = match.group(1).split(".")
    for previous, current in zip(segments, segments[1:]):
        if previous.isdigit() == current.isdigit():
            return None
    return [normalize_enumerator(segment) for segment in segments]


def extract_code_reference(text: Optional[str], base_code: str) -> Optional[List[str]]:
    """Path segments of a leading ``<base_code>.x.y`` reference, if any."""
    if not text or not base_code:
        return None
    stripped = strip_leading_enumerators(text)
    pattern = re.compile(
        rf"^(?:ECCN\s+)?{re.escape(base_code)}((?:\.[A-Za-z0-9]+)+)",
        re.IGNORECASE,
    )
    match = pattern.match(stripped)
    if not match:
        return None
    tokens = [normalize_enumerator(part) for part in match.group(1).split(".") if part]
    return tokens or None


def extract_path_from_id(element_id: Optional[str], base_code: str) -> Optional[List[str]]:
    """Split an ID such as ``3b001d1ii`` into path segments ``["d", "1", "ii"]``.

    Returns ``[]`` when the ID is the base code itself and None when it does not
    refer to the base code or names a note.
    """
    if not element_id or not base_code:
        return None

    normalized_id = str(element_id).lower()
    normalized_code = re.sub(r"[^a-z0-9]", "", base_code.lower())
    index = normalized_id.rfind(normalized_code)
    if index == -1:
        return None

    suffix = normalized_id[index + len(normalized_code):]
    if not suffix:
        return []

    suffix = re.sub(r"[^a-z0-9]+", "", suffix)
    if not suffix or suffix.startswith("note"):
        return None

    tokens = re.findall(r"[0-9]+|[a-z]+", suffix)
    tokens = [normalize_enumerator(token) for token in tokens if not re.match(r"^note\d*$", token)]
    return tokens or None


def strip_leading_enumerators(text: Optional[str]) -> str:
    """Drop leading ``(a)``, ``4.``, ``f.4.a.`` markers, keeping the prose."""
    working = normalize_text(text)
    if not working:
        return ""

    changed = True
    while changed:
        changed = False
        for pattern in (LEADING_PAREN_ENUMERATOR, LEADING_DOT_ENUMERATOR):
            match = pattern.match(working)
            if match:
                candidate = working[match.end():].strip()
                if candidate:
                    working = candidate
                    changed = True
                    break
    return working


def is_code_only(text: Optional[str]) -> bool:
    """True when text carries only enumerators and a code reference."""
    stripped = strip_leading_enumerators(text)
    if not stripped:
        return True
    for pattern in (LEADING_PAREN_ENUMERATOR, LEADING_DOT_ENUMERATOR):
        if pattern.fullmatch(stripped):
            return True
    return bool(CODE_ONLY_PATTERN.match(stripped))


def derive_eccn_title(eccn: Optional[str], heading: Optional[str]) -> Optional[str]:
    """Heading with a leading ``<code>`` or ``ECCN <code>`` prefix removed."""
    if not heading:
        return None
    normalized = normalize_text(heading)
    if not normalized:
        return None
    if eccn:
        prefix = re.compile(rf"^(?:ECCN\s+)?{re.escape(eccn)}\s*[-–—]?\s*", re.IGNORECASE)
        normalized = prefix.sub("", normalized)
    return strip_leading_punctuation(normalized).strip() or None


def _sanitize_code(code: str) -> str:
    return re.sub(r"[\s).,;:–—'\"“”-]+$", "", code)


def _sanitize_suffix(suffix: str) -> Optional[str]:
    trimmed = re.sub(r"^[\s,;:–—-]*", "", suffix)
    trimmed = _sanitize_code(trimmed)
    if not trimmed:
        return None
    return trimmed if trimmed.startswith(".") else f".{trimmed}"


def extract_eccn_codes(text: Optional[str]) -> List[str]:
    """Find every ECCN named in text, including trailing ``and .b`` continuations.

    ``"3A090.a and .b"`` yields ``["3A090.a", "3A090.b"]``.
    """
    if not text:
        return []

    codes: List[str] = []
    seen = set()

    for match in ECCN_CODE_PATTERN.finditer(text):
        full_code = _sanitize_code(match.group(0))
        if full_code and full_code not in seen:
            seen.add(full_code)
            codes.append(full_code)

        root = full_code.split(".")[0]
        position = match.end()
        while position < len(text):
            tail = text[position:]
            prefix = re.match(r"[\s,]*(?:and|or|to|through)?\s*", tail)
            after = tail[prefix.end():]
            segment = re.match(r"\.[A-Za-z0-9]+(?:\.[A-Za-z0-9]+)*|[A-Za-z](?:\.[A-Za-z0-9]+)+", after)
            if not segment:
                break

            suffix = _sanitize_suffix(segment.group(0))
            if suffix:
                derived = f"{root}{suffix}"
                if derived not in seen:
                    seen.add(derived)
                    codes.append(derived)
            position += prefix.end() + segment.end()

    return codes


def match_eccn_heading(text: Optional[str]) -> Optional[Tuple[str, str]]:
    """Return ``(code, heading)`` when text opens with an ECCN."""
    heading = normalize_text(text)
    if not heading:
        return None
    match = ECCN_HEADING_PATTERN.match(heading)
    if not match:
        return None
    return match.group(1), heading
