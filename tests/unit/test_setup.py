"""Tests to validate the project setup."""

import sys
import importlib
from pathlib import Path

# Add src to path
sys.path.insert(0, str(Path(__file__).parent.parent.parent / "src"))


def test_python_version():
    """Ensure Python 3.10+ is being used."""
    assert sys.version_info >= (3, 10), "Python 3.10+ required"


def test_dependencies_installed():
    """Ensure all required packages are installed."""
    required = [
        "requests",
        "urllib3",
        "bs4",
        "lxml",
        "pydantic",
        "dateutil",
        "dotenv",
    ]
    missing = []
    for pkg in required:
        try:
            importlib.import_module(pkg)
        except ImportError:
            missing.append(pkg)

    if missing:
        raise AssertionError(f"Missing packages: {', '.join(missing)}")


def test_lxml_xml_builder_available():
    """The XML tree builder keeps tag case, which the parser relies on."""
    from bs4 import BeautifulSoup

    soup = BeautifulSoup(b'<ROOT><DIV5 TYPE="PART" N="774"/></ROOT>', "lxml-xml")
    assert soup.find("DIV5") is not None


def test_package_imports():
    from ccl import __version__
    from ccl.parser import parse_part
    from ccl.collection import VersionStore

    assert __version__
    assert callable(parse_part)
    assert VersionStore is not None
