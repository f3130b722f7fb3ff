"""Local configuration for the CCL parser."""

import os
from pathlib import Path


DEFAULT_DATA_DIR = "data"
DEFAULT_PART_NUMBER = "774"
DEFAULT_TITLE_NUMBER = 15
DEFAULT_TARGET_SUPPLEMENTS = "1,5,6,7"
DEFAULT_ECFR_BASE_URL = "https://www.ecfr.gov/api/versioner/v1"
DEFAULT_USER_AGENT = "ccl-parser/0.1 (+https://www.ecfr.gov)"

CCL_DATA_DIR = Path(os.getenv("CCL_DATA_DIR", DEFAULT_DATA_DIR)).expanduser()
CCL_PART_NUMBER = os.getenv("CCL_PART_NUMBER", DEFAULT_PART_NUMBER)
CCL_TITLE_NUMBER = int(os.getenv("CCL_TITLE_NUMBER", str(DEFAULT_TITLE_NUMBER)))
CCL_TARGET_SUPPLEMENTS = frozenset(
    number.strip()
    for number in os.getenv("CCL_TARGET_SUPPLEMENTS", DEFAULT_TARGET_SUPPLEMENTS).split(",")
    if number.strip()
)
ECFR_BASE_URL = os.getenv("ECFR_BASE_URL", DEFAULT_ECFR_BASE_URL).rstrip("/")
ECFR_USER_AGENT = os.getenv("ECFR_USER_AGENT", DEFAULT_USER_AGENT)
