"""GDELT DOC 2.0 / GEO 2.0 REST client for NewsMapper.

Handles all HTTP communication with GDELT: URL construction for the three
viewer modes, rate-limit detection, exponential backoff retry, and safe JSON
parsing. No analysis happens here — callers get raw text or parsed JSON.

Known GDELT API gotchas:
- Responses occasionally contain HTTP header blocks instead of JSON bodies.
  Always use _safe_parse_json() — never resp.json() directly.
- Unofficial rate limit: stagger submissions by >= 0.75 seconds.
- The query must be percent-encoded; an empty query is rejected upstream.
"""

from __future__ import annotations

import json
import logging
import threading
import time
from typing import Any, Dict, Optional
from urllib.parse import quote, urlencode

import requests
from requests import Session
from requests.adapters import HTTPAdapter

from config.defaults import (
    GDELT_BACKOFF_BASE,
    GDELT_MAX_RETRIES,
    GDELT_REQUEST_TIMEOUT,
    GDELT_STAGGER_SECONDS,
    HEADLINES_MAX_RECORDS,
)

logger = logging.getLogger(__name__)

DOC_BASE_URL = "https://api.gdeltproject.org/api/v2/doc/doc"
GEO_BASE_URL = "https://api.gdeltproject.org/api/v2/geo/geo"

# Known HTTP header line prefixes that GDELT occasionally returns in response bodies
_HTTP_HEADER_PREFIXES = (
    "HTTP/",
    "Date:",
    "Content-Type:",
    "Server:",
    "Transfer-Encoding:",
    "Connection:",
    "Cache-Control:",
    "X-",
    "Vary:",
    "Access-Control:",
)


def _build_url(base_url: str, params: Dict[str, Any]) -> str:
    """Percent-encode parameters the way encodeURIComponent does (spaces -> %20)."""
    return f"{base_url}?{urlencode(params, quote_via=quote)}"


def build_map_url(query: str, timespan: str) -> str:
    """GEO 2.0 PointData URL for the map viewer."""
    return _build_url(GEO_BASE_URL, {"query": query, "mode": "PointData", "timespan": timespan})


def build_headlines_url(query: str, timespan: str, max_records: int = HEADLINES_MAX_RECORDS) -> str:
    """DOC 2.0 ArtList URL for the headline viewer, machine-translated by default."""
    return _build_url(
        DOC_BASE_URL,
        {
            "query": query,
            "mode": "ArtList",
            "maxrecords": max_records,
            "timespan": timespan,
            "trans": "googtrans",
        },
    )


def build_sentiment_url(query: str, timespan: str) -> str:
    """DOC 2.0 TimelineTone URL for the embedded sentiment chart."""
    return _build_url(
        DOC_BASE_URL,
        {
            "query": query,
            "mode": "TimelineTone",
            "timelinesmooth": 0,
            "timespan": timespan,
            "timezoom": "yes",
            "FORMAT": "html",
        },
    )


def build_tone_data_url(query: str, timespan: str, fmt: str = "csv") -> str:
    """DOC 2.0 TimelineTone data URL (csv or json) for sentiment analysis."""
    return _build_url(
        DOC_BASE_URL,
        {"query": query, "mode": "TimelineTone", "timespan": timespan, "format": fmt},
    )


def build_volume_url(query: str, timespan: str) -> str:
    """DOC 2.0 TimelineVolInfo URL (coverage volume with top articles)."""
    return _build_url(DOC_BASE_URL, {"query": query, "mode": "TimelineVolInfo", "timespan": timespan})


def _safe_parse_json(text: str) -> Optional[Any]:
    """Defensive JSON parser that handles GDELT HTTP header bleed-through.

    Args:
        text: Raw response text from GDELT.

    Returns:
        Parsed Python object, or None on failure.
    """
    if not text or not text.strip():
        return None

    lines = text.split("\n")
    json_start = 0
    for i, line in enumerate(lines):
        stripped = line.strip()
        if stripped.startswith(_HTTP_HEADER_PREFIXES):
            json_start = i + 1
        elif stripped.startswith("{") or stripped.startswith("["):
            json_start = i
            break

    if json_start > 0:
        text = "\n".join(lines[json_start:]).strip()
        if not text:
            logger.warning("GDELT response body contained only HTTP headers")
            return None

    try:
        return json.loads(text)
    except json.JSONDecodeError:
        pass

    logger.debug("GDELT unparseable response body: %.200s", text)
    logger.warning("Failed to parse GDELT response body (length=%d)", len(text))
    return None


class GDELTClient:
    """Client for the GDELT DOC 2.0 and GEO 2.0 REST APIs.

    Args:
        max_retries: Maximum retry attempts on transient HTTP errors.
        backoff_base: Base seconds for exponential backoff (doubles per attempt).
        request_timeout: HTTP request timeout in seconds.
        stagger_seconds: Minimum seconds between successive API calls.
    """

    def __init__(
        self,
        max_retries: int = GDELT_MAX_RETRIES,
        backoff_base: float = GDELT_BACKOFF_BASE,
        request_timeout: int = GDELT_REQUEST_TIMEOUT,
        stagger_seconds: float = GDELT_STAGGER_SECONDS,
    ) -> None:
        self.max_retries = max_retries
        self.backoff_base = backoff_base
        self.request_timeout = request_timeout
        self.stagger_seconds = stagger_seconds
        self._last_request_time: float = 0.0
        self._request_lock: threading.Lock = threading.Lock()

        self._session = Session()
        adapter = HTTPAdapter(max_retries=0)   # We handle retries manually
        self._session.mount("https://", adapter)
        self._session.mount("http://", adapter)

    @classmethod
    def from_config(cls, config: Any) -> "GDELTClient":
        """Build a client from a NewsMapperConfig."""
        return cls(
            max_retries=config.gdelt_max_retries,
            backoff_base=config.gdelt_backoff_base,
            request_timeout=config.gdelt_request_timeout,
            stagger_seconds=config.gdelt_stagger_seconds,
        )

    def _enforce_stagger(self) -> None:
        """Enforce minimum delay between API submissions (thread-safe)."""
        with self._request_lock:
            now = time.monotonic()
            elapsed = now - self._last_request_time
            if elapsed < self.stagger_seconds:
                time.sleep(self.stagger_seconds - elapsed)
            self._last_request_time = time.monotonic()

    def _get_with_retry(self, url: str) -> Optional[str]:
        """Execute an HTTP GET with exponential backoff retry.

        Args:
            url: URL to fetch.

        Returns:
            Response text on success, None on exhausted retries.
        """
        for attempt in range(self.max_retries + 1):
            self._enforce_stagger()
            try:
                resp = self._session.get(url, timeout=self.request_timeout)

                if resp.status_code == 429:
                    wait = self.backoff_base * (2 ** attempt)
                    logger.warning("GDELT rate limit (429) — backing off %.1fs", wait)
                    time.sleep(wait)
                    continue

                if resp.status_code in (500, 502, 503, 504):
                    wait = self.backoff_base * (attempt + 1)
                    logger.warning(
                        "GDELT server error %d — retrying in %.1fs (attempt %d/%d)",
                        resp.status_code,
                        wait,
                        attempt + 1,
                        self.max_retries,
                    )
                    time.sleep(wait)
                    continue

                if resp.status_code != 200:
                    logger.warning("GDELT returned HTTP %d for URL: %s", resp.status_code, url)
                    return None

                return resp.text

            except requests.exceptions.Timeout:
                wait = self.backoff_base * (2 ** attempt)
                logger.warning(
                    "GDELT request timeout — retrying in %.1fs (attempt %d/%d)",
                    wait,
                    attempt + 1,
                    self.max_retries,
                )
                time.sleep(wait)
            except requests.exceptions.ConnectionError as exc:
                wait = self.backoff_base * (2 ** attempt)
                logger.warning(
                    "GDELT connection error: %s — retrying in %.1fs (attempt %d/%d)",
                    exc,
                    wait,
                    attempt + 1,
                    self.max_retries,
                )
                time.sleep(wait)
            except requests.exceptions.RequestException as exc:
                logger.error("GDELT request failed permanently: %s", exc)
                return None

        logger.error("GDELT: exhausted %d retries for URL: %s", self.max_retries, url)
        return None

    def fetch_text(self, url: str) -> Optional[str]:
        """Fetch a GDELT URL and return the raw body, or None on failure."""
        logger.debug("GDELT fetch: %.160s", url)
        return self._get_with_retry(url)

    def fetch_json(self, url: str) -> Optional[Any]:
        """Fetch a GDELT URL and return the parsed JSON body, or None."""
        raw = self.fetch_text(url)
        if raw is None:
            return None
        parsed = _safe_parse_json(raw)
        if parsed is None:
            logger.warning("GDELT returned unparseable body for URL: %.160s", url)
        return parsed

    def fetch_tone_timeline(self, query: str, timespan: str, fmt: str = "csv") -> Optional[str]:
        """Fetch the TimelineTone series for a query as raw text.

        Args:
            query: Compiled GDELT query (must be non-empty).
            timespan: GDELT TIMESPAN code.
            fmt: "csv" or "json".

        Returns:
            Raw response text, or None on transport failure.
        """
        return self.fetch_text(build_tone_data_url(query, timespan, fmt))

    def count_articles(self, query: str, timespan: str) -> Optional[int]:
        """Probe whether a query returns any articles (0 or 1), None on failure."""
        url = _build_url(
            DOC_BASE_URL,
            {"query": query, "mode": "ArtList", "maxrecords": 1, "format": "json", "timespan": timespan},
        )
        data = self.fetch_json(url)
        if not isinstance(data, dict):
            return None
        return len(data.get("articles") or [])

    def count_map_points(self, query: str, timespan: str) -> Optional[int]:
        """Number of GeoJSON features the map viewer would plot, None on failure."""
        url = _build_url(
            GEO_BASE_URL,
            {"query": query, "mode": "PointData", "format": "geojson", "timespan": timespan},
        )
        data = self.fetch_json(url)
        if not isinstance(data, dict):
            return None
        return len(data.get("features") or [])

    def close(self) -> None:
        """Close the underlying HTTP session."""
        self._session.close()

    def __enter__(self) -> "GDELTClient":
        return self

    def __exit__(self, *args: Any) -> None:
        self.close()
