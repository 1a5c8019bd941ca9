"""Shared pytest fixtures for rae_dle tests."""

from pathlib import Path

import pytest

from rae_dle import parse


@pytest.fixture
def fixtures_dir() -> Path:
    """Return the path to the test fixtures directory."""
    return Path(__file__).parent / "fixtures"


@pytest.fixture
def found_html(fixtures_dir: Path) -> str:
    """Load found_page.html fixture."""
    return (fixtures_dir / "found_page.html").read_text(encoding="utf-8")


@pytest.fixture
def ambiguous_html(fixtures_dir: Path) -> str:
    """Load ambiguous_page.html fixture."""
    return (fixtures_dir / "ambiguous_page.html").read_text(encoding="utf-8")


@pytest.fixture
def not_found_html(fixtures_dir: Path) -> str:
    """Load not_found_page.html fixture."""
    return (fixtures_dir / "not_found_page.html").read_text(encoding="utf-8")


@pytest.fixture
def results_from():
    """Build a results container around a fragment of entry markup."""

    def _results_from(inner: str):
        soup = parse.parse_document(f'<div id="resultados">{inner}</div>')
        return parse.find_results(soup)

    return _results_from


@pytest.fixture(autouse=True)
def clean_unhandled_styles():
    """Keep the module-level style tracking isolated between tests."""
    parse.unhandled_styles.clear()
    yield
    parse.unhandled_styles.clear()
