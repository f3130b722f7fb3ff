"""Structural parser for Part 774 of the Export Administration Regulations."""

import json
import logging
from pathlib import Path
from typing import Iterable, Optional

from bs4 import BeautifulSoup

from ..config import CCL_PART_NUMBER, CCL_TARGET_SUPPLEMENTS
from .locator import find_part, locate_supplements
from .models import ParsedPart
from .supplements import parse_supplement

logging.basicConfig(level=logging.INFO)
logger = logging.getLogger(__name__)


class CclPartParser:
    """Parser for the Commerce Control List supplements of one Part."""

    def __init__(
        self,
        part_number: str = CCL_PART_NUMBER,
        target_supplements: Optional[Iterable[str]] = None,
    ):
        self.part_number = str(part_number)
        self.target_supplements = frozenset(
            str(number) for number in (target_supplements or CCL_TARGET_SUPPLEMENTS)
        )

    def parse(self, xml: str | bytes) -> ParsedPart:
        """Parse a full Title XML document."""
        if isinstance(xml, str):
            xml = xml.encode("utf-8")
        soup = BeautifulSoup(xml, "lxml-xml")

        part = find_part(soup, self.part_number)
        supplements = [
            parse_supplement(located)
            for located in locate_supplements(part, self.target_supplements)
        ]

        counts = {
            "supplements": len(supplements),
            "eccns": sum(len(supplement.eccns) for supplement in supplements),
        }
        logger.info(f"Parsing complete: {counts}")

        return ParsedPart(supplements=supplements, counts=counts)

    def parse_file(self, filepath: str | Path) -> ParsedPart:
        """Parse a Title XML file from disk."""
        filepath = Path(filepath)
        logger.info(f"Parsing: {filepath}")
        return self.parse(filepath.read_bytes())


def parse_part(
    xml: str | bytes,
    part_number: str = CCL_PART_NUMBER,
    target_supplements: Optional[Iterable[str]] = None,
) -> ParsedPart:
    """Parse the target supplements of ``part_number`` out of a Title XML document."""
    return CclPartParser(part_number, target_supplements).parse(xml)


def parse_ccl_file(input_file: str | Path, output_file: str | Path) -> ParsedPart:
    """Parse a Title XML file and save the result as JSON."""
    parser = CclPartParser()
    result = parser.parse_file(input_file)

    output_path = Path(output_file)
    output_path.parent.mkdir(parents=True, exist_ok=True)

    with open(output_path, 'w', encoding='utf-8') as f:
        json.dump(result.to_dict(), f, ensure_ascii=False, indent=2)

    logger.info(f"Saved parsed CCL to: {output_path}")

    return result
