"""Shared pytest fixtures for NewsMapper tests.

- Fixture data lives in tests/fixtures/ as static CSV/JSON files
- mock_gdelt_client returns fixture text without HTTP calls
- gdelt_http_mock patches requests.Session.get for client-level tests
- No real external HTTP calls are made in any test
"""

from __future__ import annotations

from pathlib import Path
from unittest.mock import MagicMock, patch

import pytest

_FIXTURES_DIR = Path(__file__).parent / "fixtures"


# ── Raw fixture data loaders ─────────────────────────────────────────────────────

@pytest.fixture(scope="session")
def tone_csv_raw() -> str:
    """TimelineTone CSV: 30 days at -2.0 with four -9.0 spikes and some junk rows."""
    return (_FIXTURES_DIR / "sample_timeline_tone.csv").read_text(encoding="utf-8")


@pytest.fixture(scope="session")
def volume_buckets_raw() -> str:
    """Bucketed volume CSV: closed, open, unknown and zero-count buckets."""
    return (_FIXTURES_DIR / "sample_volume_buckets.csv").read_text(encoding="utf-8")


@pytest.fixture(scope="session")
def timeline_json_raw() -> str:
    """DOC 2.0 JSON timeline with an Average Tone and an Article Count series."""
    return (_FIXTURES_DIR / "sample_timeline_tone.json").read_text(encoding="utf-8")


# ── Model object fixtures ────────────────────────────────────────────────────────

@pytest.fixture(scope="session")
def tone_series(tone_csv_raw):
    """Parsed observations from the tone CSV fixture."""
    from newsmapper.analysis.timeseries_parser import parse_tone_csv

    return parse_tone_csv(tone_csv_raw)


# ── Config fixture ───────────────────────────────────────────────────────────────

@pytest.fixture
def test_config(monkeypatch):
    """NewsMapperConfig isolated from the developer's environment and .env file."""
    for var in ("NEWSMAPPER_DEFAULT_QUERY", "NEWSMAPPER_LEXICON_PATH", "LOG_LEVEL",
                "GDELT_REQUEST_TIMEOUT"):
        monkeypatch.delenv(var, raising=False)

    from config.settings import NewsMapperConfig

    return NewsMapperConfig(
        gdelt_stagger_seconds=0.0,
        gdelt_backoff_base=0.0,
        gdelt_max_retries=1,
        log_level="WARNING",
    )


# ── Mock GDELT client ────────────────────────────────────────────────────────────

@pytest.fixture
def mock_gdelt_client(tone_csv_raw):
    """Mock GDELTClient whose fetch_tone_timeline() returns the tone CSV fixture."""
    from newsmapper.clients.gdelt_client import GDELTClient

    client = MagicMock(spec=GDELTClient)
    client.fetch_tone_timeline.return_value = tone_csv_raw
    return client


# ── Response mock helper for GDELT HTTP tests ────────────────────────────────────

@pytest.fixture
def gdelt_http_mock():
    """Context manager that patches requests.Session.get with a configurable response.

    Usage:
        def test_something(gdelt_http_mock):
            with gdelt_http_mock(status_code=200, text="Date,Series,Value") as mock_get:
                ...
    """
    import requests

    class _HttpMockContext:
        def __call__(self, status_code: int = 200, text: str = "{}"):
            mock_resp = MagicMock()
            mock_resp.status_code = status_code
            mock_resp.text = text
            return patch.object(
                requests.Session, "get", return_value=mock_resp
            )

    return _HttpMockContext()
