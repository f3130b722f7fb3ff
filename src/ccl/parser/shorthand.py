"""Expansion of shorthand ECCN references.

License tables abbreviate sibling references, e.g.::

    NS applies to 3B001.a.1 to a.3, b, e, f.2 to f.4, g to j

Each comma-separated token is a bare segment (``b``), a range (``a.1 to a.3``)
or a letter range (``g to j``), all relative to the anchor code. The
expander rewrites such runs into the full identifier list. Tokens it cannot
interpret are kept verbatim.
"""

import logging
import re
from typing import List, Optional, Tuple, Union

from ..exceptions import UnrecognizedShorthandError
from .patterns import alpha_index, alpha_token

logger = logging.getLogger(__name__)

MAX_RANGE_SIZE = 52

ANCHOR_PATTERN = re.compile(r"(?<![A-Za-z0-9.])(\d[A-Z]\d{3})((?:\.[a-z0-9]+)*)")

TAIL_ITEM_PATTERN = re.compile(
    r"(?:\s+(?:to|through)\s+|\s*,\s*(?:(?:and|or)\s+)?|\s+(?:and|or)\s+)"
    r"(?:[a-z]{1,2}|\d{1,3})(?:\.[a-z0-9]+)*"
    r"(?![A-Za-z0-9])(?!\.[A-Za-z0-9])"
    r"(?=\s*(?:$|[,;:)<]|\.(?![A-Za-z0-9]))|\s+(?:to|through|and|or)\s)"
)

ITEM_SEPARATOR = re.compile(r"\s*,\s*|\s+(?:and|or)\s+")
RANGE_SEPARATOR = re.compile(r"\s+(?:to|through)\s+")
SEGMENT_PATTERN = re.compile(r"^(?:[a-z]{1,2}|\d{1,3})(?:\.[a-z0-9]+)*$")

Piece = Union[List[str], str]


def expand_numeric_range(prefix: str, start: int, end: int) -> List[str]:
    """``(3B001.f, 2, 4)`` → ``3B001.f.2``, ``3B001.f.3``, ``3B001.f.4``."""
    start, end = int(start), int(end)
    if end < start or end - start + 1 > MAX_RANGE_SIZE:
        raise UnrecognizedShorthandError(f"Numeric range {start} to {end} under {prefix}")
    return [f"{prefix}.{number}" for number in range(start, end + 1)]


def expand_alpha_range(prefix: str, start: str, end: str) -> List[str]:
    """``(3B001, g, j)`` → ``3B001.g``, ``3B001.h``, ``3B001.i``, ``3B001.j``."""
    first = alpha_index(start)
    last = alpha_index(end)
    if first is None or last is None or last < first or last - first + 1 > MAX_RANGE_SIZE:
        raise UnrecognizedShorthandError(f"Letter range {start} to {end} under {prefix}")
    return [f"{prefix}.{alpha_token(index)}" for index in range(first, last + 1)]


def tokenize_shorthand(text: str) -> List[Tuple[str, Optional[str], str]]:
    """Split shorthand into ``(start, end, raw)`` items; ``end`` is None for singles."""
    items = []
    for raw in ITEM_SEPARATOR.split(text.strip()):
        part = re.sub(r"^(?:and|or)\s+", "", raw.strip())
        bounds = RANGE_SEPARATOR.split(part)
        if len(bounds) == 1:
            items.append((bounds[0], None, part))
        elif len(bounds) == 2:
            items.append((bounds[0], bounds[1], part))
        else:
            items.append((part, "", part))
    return items


def _join(base_code: str, segments: List[str]) -> str:
    return ".".join([base_code] + segments)


def _resolve_single(token: str, base_code: str, previous: Optional[List[str]]) -> List[str]:
    if not token:
        return []
    if not SEGMENT_PATTERN.match(token):
        raise UnrecognizedShorthandError(f"Token {token!r} under {base_code}")
    segments = token.split(".")
    if segments[0].isdigit() and previous:
        return previous[:-1] + segments
    return segments


def _expand_range(base_code: str, start: List[str], end_token: str) -> List[str]:
    if not start or not SEGMENT_PATTERN.match(end_token):
        raise UnrecognizedShorthandError(f"Range to {end_token!r} under {base_code}")

    end = end_token.split(".")
    if len(end) < len(start):
        end = start[: len(start) - len(end)] + end
    if len(end) != len(start) or start[:-1] != end[:-1]:
        raise UnrecognizedShorthandError(f"Range {start} to {end} under {base_code}")

    prefix = _join(base_code, start[:-1])
    first, last = start[-1], end[-1]
    if first.isdigit() and last.isdigit():
        return expand_numeric_range(prefix, int(first), int(last))
    if first.isalpha() and last.isalpha():
        return expand_alpha_range(prefix, first, last)
    raise UnrecognizedShorthandError(f"Mixed range {first} to {last} under {base_code}")


def expand_shorthand_pieces(shorthand: str, base_code: str) -> List[Piece]:
    """Expand each shorthand item; unparseable items come back as their raw text."""
    pieces: List[Piece] = []
    previous: Optional[List[str]] = None

    for start_token, end_token, raw in tokenize_shorthand(shorthand):
        try:
            start = _resolve_single(start_token, base_code, previous)
            if end_token is None:
                pieces.append([_join(base_code, start)])
                previous = start
                continue
            if end_token == "":
                raise UnrecognizedShorthandError(f"Token {raw!r} under {base_code}")
            expanded = _expand_range(base_code, start, end_token)
            pieces.append(expanded)
            previous = expanded[-1][len(base_code) + 1:].split(".")
        except UnrecognizedShorthandError as exc:
            logger.debug(f"Leaving shorthand unexpanded: {exc}")
            pieces.append(raw)

    return pieces


def expand_shorthand(shorthand: str, base_code: str) -> List[str]:
    """Expand shorthand such as ``"a.1 to a.3, b"`` relative to ``base_code``.

    Returns the full identifiers in order, with duplicates removed.
    Unrecognized items are returned unchanged.
    """
    result: List[str] = []
    seen = set()
    for piece in expand_shorthand_pieces(shorthand, base_code):
        values = piece if isinstance(piece, list) else [piece]
        for value in values:
            if value not in seen:
                seen.add(value)
                result.append(value)
    return result


def _render(pieces: List[Piece], base_code: str, anchor_text: str) -> str:
    rendered = []
    seen = set()
    for index, piece in enumerate(pieces):
        if isinstance(piece, str):
            # The first item carries the anchor code itself
            rendered.append(f"{base_code}.{piece}" if index == 0 and piece else piece or anchor_text)
            continue
        for identifier in piece:
            if identifier not in seen:
                seen.add(identifier)
                rendered.append(identifier)
    return ", ".join(rendered)


def expand_shorthand_references(markup: Optional[str]) -> Optional[str]:
    """Rewrite every shorthand run in rendered markup with its expanded list."""
    if not markup:
        return markup

    output = []
    position = 0

    for anchor in ANCHOR_PATTERN.finditer(markup):
        if anchor.start() < position:
            continue

        end = anchor.end()
        while True:
            item = TAIL_ITEM_PATTERN.match(markup, end)
            if not item:
                break
            end = item.end()

        if end == anchor.end():
            continue

        base_code = anchor.group(1)
        shorthand = anchor.group(2).lstrip(".") + markup[anchor.end():end]
        pieces = expand_shorthand_pieces(shorthand, base_code)
        # A bare code followed by an unreadable item is left as written
        if not anchor.group(2) and isinstance(pieces[0], str) and pieces[0]:
            continue

        output.append(markup[position:anchor.start()])
        output.append(_render(pieces, base_code, anchor.group(0)))
        position = end

    if not output:
        return markup

    output.append(markup[position:])
    return "".join(output)
