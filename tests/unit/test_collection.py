"""Unit tests for the eCFR client and the version store."""

import json
import sys
import threading
from pathlib import Path
from unittest.mock import MagicMock, patch

import pytest
import requests

# Add src to path
sys.path.insert(0, str(Path(__file__).parent.parent.parent / "src"))

from ccl.collection.ecfr import EcfrClient
from ccl.collection.versions import VersionStore, version_file_name
from ccl.exceptions import FetchError


TITLE_XML = """<?xml version="1.0" encoding="UTF-8"?>
<ROOT>
  <DIV5 TYPE="PART" N="774">
    <DIV9 TYPE="SUPPLEMENT" N="1">
      <HEAD>Supplement No. 1 to Part 774—The Commerce Control List</HEAD>
      <P><B>3B001 Equipment</B></P>
      <P ID="3b001a"><E T="03">a.</E> Equipment designed for epitaxial growth</P>
    </DIV9>
  </DIV5>
</ROOT>"""


def make_response(status_code=200, text="", json_data=None, reason="OK"):
    response = MagicMock()
    response.status_code = status_code
    response.ok = status_code < 400
    response.reason = reason
    response.text = text
    response.json.return_value = json_data
    return response


@pytest.fixture
def client():
    return EcfrClient(base_url="https://ecfr.example/api/versioner/v1", delay_seconds=0)


class TestEcfrClient:
    """Tests for eCFR requests."""

    def test_urls(self, client):
        assert client.title_xml_url("2024-01-05") == (
            "https://ecfr.example/api/versioner/v1/full/2024-01-05/title-15?format=xml"
        )
        assert client.titles_url() == "https://ecfr.example/api/versioner/v1/titles?format=json"

    def test_fetch_title_xml(self, client):
        with patch.object(client.session, "get", return_value=make_response(text=TITLE_XML)) as get:
            assert client.fetch_title_xml("2024-01-05") == TITLE_XML

        _, kwargs = get.call_args
        assert kwargs["headers"] == {"Accept": "application/xml"}

    def test_http_error_carries_status_and_body(self, client):
        error = make_response(status_code=404, text="not found", reason="Not Found")
        with patch.object(client.session, "get", return_value=error):
            with pytest.raises(FetchError) as excinfo:
                client.fetch_title_xml("1999-01-01")

        assert excinfo.value.status_code == 404
        assert excinfo.value.body == "not found"

    def test_transport_errors_retried(self, client):
        failures = [requests.ConnectionError("boom")] * 3
        with patch.object(client.session, "get", side_effect=failures) as get, \
                patch("ccl.collection.ecfr.time.sleep"):
            with pytest.raises(FetchError):
                client.fetch_title_xml("2024-01-05")

        assert get.call_count == 3

    def test_default_date(self, client):
        payload = {"titles": [
            {"number": 14, "up_to_date_as_of": "2024-01-01"},
            {"number": 15, "up_to_date_as_of": "2024-01-03"},
        ]}
        with patch.object(client.session, "get", return_value=make_response(json_data=payload)):
            assert client.fetch_default_date() == "2024-01-03"

    def test_default_date_missing_title(self, client):
        with patch.object(client.session, "get", return_value=make_response(json_data={"titles": []})):
            with pytest.raises(FetchError, match="Title 15"):
                client.fetch_default_date()

    def test_date_required(self, client):
        with pytest.raises(ValueError):
            client.fetch_title_xml("")


class TestVersionStore:
    """Tests for the dated snapshot store."""

    def make_store(self, tmp_path, xml=TITLE_XML):
        client = MagicMock(spec=EcfrClient)
        client.fetch_title_xml.return_value = xml
        client.title_xml_url.side_effect = lambda date: f"https://ecfr.example/full/{date}/title-15?format=xml"
        client.fetch_default_date.return_value = "2024-01-05"
        return VersionStore(data_dir=tmp_path, client=client), client

    def test_load_persists_dataset(self, tmp_path):
        store, client = self.make_store(tmp_path)
        dataset = store.load_version("2024-01-05")

        assert dataset.version == "2024-01-05"
        assert dataset.counts == {"supplements": 1, "eccns": 2}
        assert dataset.fetched_at

        saved = json.loads((tmp_path / version_file_name("2024-01-05")).read_text(encoding="utf-8"))
        assert saved["date"] == "2024-01-05"
        assert saved["sourceUrl"].endswith("title-15?format=xml")
        assert saved["supplements"][0]["eccns"][1]["eccn"] == "3B001.a"

    def test_cached_version_reused(self, tmp_path):
        store, client = self.make_store(tmp_path)
        store.load_version("2024-01-05")
        store.load_version("2024-01-05")

        assert client.fetch_title_xml.call_count == 1

    def test_force_reloads(self, tmp_path):
        store, client = self.make_store(tmp_path)
        store.load_version("2024-01-05")
        store.load_version("2024-01-05", force=True)

        assert client.fetch_title_xml.call_count == 2

    def test_unreadable_cache_refetched(self, tmp_path):
        store, client = self.make_store(tmp_path)
        (tmp_path / version_file_name("2024-01-05")).write_text("{not json", encoding="utf-8")

        dataset = store.load_version("2024-01-05")

        assert dataset.counts["eccns"] == 2
        assert client.fetch_title_xml.call_count == 1

    def test_concurrent_loads_share_one_parse(self, tmp_path):
        store, client = self.make_store(tmp_path)
        release = threading.Event()
        started = threading.Event()

        def slow_fetch(date):
            started.set()
            release.wait(timeout=5)
            return TITLE_XML

        client.fetch_title_xml.side_effect = slow_fetch
        results = []

        def load():
            results.append(store.load_version("2024-01-05", force=True))

        first = threading.Thread(target=load)
        first.start()
        started.wait(timeout=5)

        second = threading.Thread(target=load)
        second.start()
        # The second caller must be waiting on the first one's load
        second.join(timeout=0.2)
        assert second.is_alive()

        release.set()
        first.join(timeout=5)
        second.join(timeout=5)

        assert client.fetch_title_xml.call_count == 1
        assert len(results) == 2
        assert results[0] is results[1]

    def test_failure_propagates_and_clears(self, tmp_path):
        store, client = self.make_store(tmp_path)
        client.fetch_title_xml.side_effect = FetchError("down", status_code=503)

        with pytest.raises(FetchError):
            store.load_version("2024-01-05")

        client.fetch_title_xml.side_effect = None
        client.fetch_title_xml.return_value = TITLE_XML
        assert store.load_version("2024-01-05").counts["eccns"] == 2

    def test_list_versions_newest_first(self, tmp_path):
        store, client = self.make_store(tmp_path)
        store.load_version("2023-06-01")
        store.load_version("2024-01-05")
        (tmp_path / "ccl-broken.json").write_text("[]", encoding="utf-8")

        summaries = store.list_versions()

        assert [summary.date for summary in summaries] == ["2024-01-05", "2023-06-01"]
        assert summaries[0].counts == {"supplements": 1, "eccns": 2}

    def test_default_version(self, tmp_path):
        store, client = self.make_store(tmp_path)
        assert store.load_default_version().date == "2024-01-05"
        client.fetch_default_date.assert_called_once()
