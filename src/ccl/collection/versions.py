"""Dated store of parsed CCL snapshots.

Each parsed snapshot is saved as ``ccl-<date>.json`` in the data directory.
Concurrent loads of the same date share a single download and parse.
"""

import json
import logging
import threading
from concurrent.futures import Future
from datetime import datetime, timezone
from pathlib import Path
from typing import Dict, List, Optional

from pydantic import ValidationError

from ..config import CCL_DATA_DIR
from ..parser.ccl_parser import CclPartParser
from ..parser.models import CclDataset, VersionSummary
from .ecfr import EcfrClient

logging.basicConfig(level=logging.INFO)
logger = logging.getLogger(__name__)

FILE_PREFIX = "ccl-"
FILE_SUFFIX = ".json"


def version_file_name(date: str) -> str:
    return f"{FILE_PREFIX}{date}{FILE_SUFFIX}"


class VersionStore:
    """Disk cache of :class:`CclDataset` objects keyed by snapshot date."""

    def __init__(
        self,
        data_dir: str | Path = CCL_DATA_DIR,
        client: Optional[EcfrClient] = None,
        parser: Optional[CclPartParser] = None,
    ):
        self.data_dir = Path(data_dir)
        self.client = client or EcfrClient()
        self.parser = parser or CclPartParser()
        self._lock = threading.Lock()
        self._in_flight: Dict[str, Future] = {}
        self._default_date: Optional[str] = None

    def path_for(self, date: str) -> Path:
        return self.data_dir / version_file_name(date)

    def read_cached(self, date: str) -> Optional[CclDataset]:
        """Stored dataset for ``date``, or None when missing or unreadable."""
        path = self.path_for(date)
        if not path.exists():
            return None
        try:
            with open(path, 'r', encoding='utf-8') as f:
                return CclDataset.model_validate(json.load(f))
        except (OSError, ValueError, ValidationError) as e:
            logger.warning(f"Failed to read cached version for {date}: {e}")
            return None

    def load_version(self, date: str, force: bool = False) -> CclDataset:
        """Return the dataset for ``date``, downloading and parsing it if needed.

        Callers asking for a date that is already being loaded wait for that
        load instead of starting another one.
        """
        if not date:
            raise ValueError("A version date (YYYY-MM-DD) is required")

        if not force:
            cached = self.read_cached(date)
            if cached is not None:
                return cached

        with self._lock:
            future = self._in_flight.get(date)
            owner = future is None
            if owner:
                future = Future()
                self._in_flight[date] = future

        if not owner:
            logger.info(f"Waiting for in-flight load of {date}")
            return future.result()

        try:
            dataset = self._fetch_and_persist(date)
        except Exception as e:
            future.set_exception(e)
            raise
        else:
            future.set_result(dataset)
            return dataset
        finally:
            with self._lock:
                self._in_flight.pop(date, None)

    def load_default_version(self, force: bool = False) -> CclDataset:
        """Load the snapshot the eCFR reports as current."""
        if self._default_date is None:
            self._default_date = self.client.fetch_default_date()
        return self.load_version(self._default_date, force=force)

    def _fetch_and_persist(self, date: str) -> CclDataset:
        xml = self.client.fetch_title_xml(date)
        parsed = self.parser.parse(xml)

        dataset = CclDataset(
            version=date,
            source_url=self.client.title_xml_url(date),
            date=date,
            fetched_at=datetime.now(timezone.utc).isoformat(),
            supplements=parsed.supplements,
            counts=parsed.counts,
        )

        self.data_dir.mkdir(parents=True, exist_ok=True)
        path = self.path_for(date)
        with open(path, 'w', encoding='utf-8') as f:
            json.dump(dataset.to_dict(), f, ensure_ascii=False, indent=2)

        logger.info(f"Saved {dataset.counts.get('eccns', 0)} ECCNs for {date} to: {path}")
        return dataset

    def list_versions(self) -> List[VersionSummary]:
        """Summaries of every stored dataset, newest first."""
        if not self.data_dir.exists():
            return []

        summaries = []
        for path in self.data_dir.glob(f"{FILE_PREFIX}*{FILE_SUFFIX}"):
            try:
                with open(path, 'r', encoding='utf-8') as f:
                    data = json.load(f)
                summaries.append(VersionSummary.model_validate(data))
            except (OSError, ValueError, ValidationError) as e:
                logger.warning(f"Failed to read stored version {path.name}: {e}")

        return sorted(summaries, key=lambda summary: summary.date, reverse=True)
