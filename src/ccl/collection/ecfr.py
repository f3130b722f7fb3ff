"""eCFR client with rate limiting and error handling."""

import logging
import time
from typing import Optional

import requests
from requests.adapters import HTTPAdapter
from urllib3.util.retry import Retry

from ..config import CCL_TITLE_NUMBER, ECFR_BASE_URL, ECFR_USER_AGENT
from ..exceptions import FetchError

logging.basicConfig(level=logging.INFO)
logger = logging.getLogger(__name__)


class EcfrClient:
    """Client for the eCFR versioner API."""

    def __init__(
        self,
        base_url: str = ECFR_BASE_URL,
        title_number: int = CCL_TITLE_NUMBER,
        delay_seconds: float = 1.0,
        user_agent: str = ECFR_USER_AGENT,
        max_retries: int = 3,
        attempts: int = 3,
    ):
        self.base_url = base_url.rstrip("/")
        self.title_number = title_number
        self.delay_seconds = delay_seconds
        self.attempts = attempts
        self.session = requests.Session()

        # Configure retries
        retry_strategy = Retry(
            total=max_retries,
            backoff_factor=2,
            status_forcelist=[429, 500, 502, 503, 504],
        )
        adapter = HTTPAdapter(max_retries=retry_strategy)
        self.session.mount("http://", adapter)
        self.session.mount("https://", adapter)

        self.session.headers.update({
            "User-Agent": user_agent,
            "Accept-Encoding": "gzip, deflate",
            "Connection": "keep-alive",
        })
        self._last_request_time = 0.0

    def title_xml_url(self, date: str) -> str:
        return f"{self.base_url}/full/{date}/title-{self.title_number}?format=xml"

    def titles_url(self) -> str:
        return f"{self.base_url}/titles?format=json"

    def _rate_limit(self):
        """Enforce rate limiting between requests."""
        elapsed = time.time() - self._last_request_time
        if elapsed < self.delay_seconds:
            time.sleep(self.delay_seconds - elapsed)
        self._last_request_time = time.time()

    def fetch(self, url: str, accept: str, timeout: int = 120) -> requests.Response:
        """GET ``url``, retrying transport errors; raises :class:`FetchError`."""
        self._rate_limit()
        last_error: Optional[Exception] = None

        for attempt in range(self.attempts):
            try:
                logger.info(f"Fetching: {url} (attempt {attempt + 1})")
                response = self.session.get(url, headers={"Accept": accept}, timeout=timeout)
            except requests.RequestException as e:
                last_error = e
                logger.warning(f"Attempt {attempt + 1} failed for {url}: {e}")
                if attempt < self.attempts - 1:
                    time.sleep(5 * (attempt + 1))  # Wait before retry
                continue

            if not response.ok:
                body = self._safe_body(response)
                logger.error(f"Failed to fetch {url}: {response.status_code} {response.reason}")
                raise FetchError(
                    f"Failed to download {url} ({response.status_code} {response.reason}): {body}",
                    status_code=response.status_code,
                    body=body,
                )
            return response

        logger.error(f"Failed to fetch {url} after {self.attempts} attempts: {last_error}")
        raise FetchError(f"Failed to download {url}: {last_error}")

    @staticmethod
    def _safe_body(response: requests.Response) -> str:
        try:
            return response.text
        except (requests.RequestException, UnicodeDecodeError):
            return "<unavailable>"

    def fetch_title_xml(self, date: str) -> str:
        """Full title XML for the snapshot on ``date`` (YYYY-MM-DD)."""
        if not date:
            raise ValueError("A version date (YYYY-MM-DD) is required")
        response = self.fetch(self.title_xml_url(date), accept="application/xml")
        return response.text

    def fetch_default_date(self) -> str:
        """The title's "up to date as of" date, used when no date is given."""
        response = self.fetch(self.titles_url(), accept="application/json")
        try:
            payload = response.json()
        except ValueError as e:
            raise FetchError(f"Titles metadata is not valid JSON: {e}") from e

        for title in payload.get("titles") or []:
            if str(title.get("number")) == str(self.title_number):
                date = title.get("up_to_date_as_of")
                if date:
                    return date
        raise FetchError(f"Title {self.title_number} metadata not found in response")
