"""Integration tests for the NewsMapper pipeline and CLI.

These tests exercise multiple modules working together end-to-end, using
fixture data rather than real API calls. They verify that:

- Facets compile to a query that reaches the client unchanged
- The default query replaces an empty facet selection
- Transport failure and empty data produce distinct unsuccessful reports
- Viewer sections combine titles, timespans and endpoint URLs
- The CLI prints queries and reports for live and offline runs

No real HTTP calls are made: the client is a MagicMock or requests.Session.get
is patched.
"""

from __future__ import annotations

import importlib.util
import json
from pathlib import Path
from urllib.parse import parse_qs, urlparse

import pytest

from newsmapper.analysis.timeseries_parser import TimeseriesFormat
from newsmapper.analysis.tone_analyzer import INSUFFICIENT_DATA_ERROR
from newsmapper.models.events import ToneClass
from newsmapper.models.query import FacetState
from newsmapper.pipeline import (
    FETCH_FAILED_ERROR,
    analyze_text,
    build_viewer_sections,
    resolve_query,
    run_sentiment_analysis,
)

_ROOT = Path(__file__).resolve().parent.parent.parent
_FIXTURES_DIR = Path(__file__).resolve().parent.parent / "fixtures"


def _load_cli():
    spec = importlib.util.spec_from_file_location("run_analysis", _ROOT / "scripts" / "run_analysis.py")
    module = importlib.util.module_from_spec(spec)
    spec.loader.exec_module(module)
    return module


# ── Query resolution ─────────────────────────────────────────────────────────────

class TestResolveQuery:
    def test_facets_compile(self):
        """A non-empty selection is compiled by the query builder."""
        assert resolve_query(FacetState(resource="Coal", country="Mali"), "x") == "Mali AND coal"

    def test_default_substituted(self):
        """An empty selection falls back to the default query."""
        assert resolve_query(FacetState(region="Global"), "petroleum OR lng") == "petroleum OR lng"


# ── Sentiment pipeline ───────────────────────────────────────────────────────────

class TestRunSentimentAnalysis:
    def test_end_to_end_with_mock_client(self, test_config, mock_gdelt_client):
        """Facets → query → fetch → parse → analyze produces a full report."""
        facets = FacetState(resource="Oil & Gas", region="Global", country="Mali")
        report = run_sentiment_analysis(facets, "1y", test_config, mock_gdelt_client)

        mock_gdelt_client.fetch_tone_timeline.assert_called_once_with(
            "Mali AND (oil OR gas)", "1y", "csv"
        )
        assert report.success
        assert report.timespan == "1y"
        assert report.data_points == 30
        assert report.classification.overall is ToneClass.MODERATELY_NEGATIVE
        assert report.episodic_spikes.has_episodic_spikes

    def test_default_query_and_timespan(self, test_config, mock_gdelt_client):
        """Empty facets use the default query; no timespan uses the configured one."""
        run_sentiment_analysis(FacetState(), None, test_config, mock_gdelt_client)
        mock_gdelt_client.fetch_tone_timeline.assert_called_once_with(
            test_config.default_query, test_config.sentiment_timespan, "csv"
        )

    def test_transport_failure(self, test_config, mock_gdelt_client):
        """A None response is reported as a fetch failure."""
        mock_gdelt_client.fetch_tone_timeline.return_value = None
        report = run_sentiment_analysis(FacetState(resource="Coal"), "7d", test_config, mock_gdelt_client)
        assert not report.success
        assert report.error == FETCH_FAILED_ERROR
        assert report.timespan == "7d"

    def test_empty_data(self, test_config, mock_gdelt_client):
        """A header-only CSV is reported as insufficient data."""
        mock_gdelt_client.fetch_tone_timeline.return_value = "Date,Series,Value\n"
        report = run_sentiment_analysis(FacetState(resource="Coal"), "7d", test_config, mock_gdelt_client)
        assert not report.success
        assert report.error == INSUFFICIENT_DATA_ERROR

    def test_lexicon_file_used(self, test_config, mock_gdelt_client, tmp_path):
        """A configured lexicon file replaces the embedded table."""
        path = tmp_path / "lexicon.yaml"
        path.write_text("resources:\n  Coal: (coal OR lignite)\n", encoding="utf-8")
        test_config.lexicon_path = str(path)

        run_sentiment_analysis(FacetState(resource="Coal"), "1y", test_config, mock_gdelt_client)
        assert mock_gdelt_client.fetch_tone_timeline.call_args[0][0] == "(coal OR lignite)"

    def test_bad_lexicon_file_raises(self, test_config, mock_gdelt_client, tmp_path):
        """An unreadable lexicon file is a configuration error."""
        test_config.lexicon_path = str(tmp_path / "missing.yaml")
        with pytest.raises(ValueError):
            run_sentiment_analysis(FacetState(resource="Coal"), "1y", test_config, mock_gdelt_client)

    def test_owned_client_over_http(self, test_config, gdelt_http_mock, tone_csv_raw):
        """Without a client the pipeline builds one and fetches the CSV timeline."""
        with gdelt_http_mock(200, tone_csv_raw) as mock_get:
            report = run_sentiment_analysis(FacetState(resource="LNG"), "30d", test_config)

        assert report.success
        assert mock_get.call_count == 1
        params = {k: v[0] for k, v in parse_qs(urlparse(mock_get.call_args[0][0]).query).items()}
        assert params["query"] == "lng"
        assert params["mode"] == "TimelineTone"
        assert params["format"] == "csv"
        assert params["timespan"] == "30d"


class TestAnalyzeText:
    def test_volume_buckets_use_config(self, test_config, volume_buckets_raw):
        """Bucket replication follows the configured cap."""
        test_config.max_bucket_replication = 2
        report = analyze_text(volume_buckets_raw, TimeseriesFormat.VOLUME_BUCKETS, "1d", test_config)
        assert report.success
        assert report.data_points == 7

    def test_json_timeline(self, test_config, timeline_json_raw):
        """JSON timelines are analyzed like CSV ones."""
        report = analyze_text(timeline_json_raw, TimeseriesFormat.TIMELINE_JSON, "7d", test_config)
        assert report.data_points == 4
        assert report.classification.overall is ToneClass.MODERATELY_NEGATIVE


# ── Viewer sections ──────────────────────────────────────────────────────────────

class TestViewerSections:
    def test_sections(self, test_config):
        """Each section carries its title, timespan and endpoint URL."""
        facets = FacetState(resource="Coal", region="Africa")
        sections = build_viewer_sections(facets, test_config)

        assert set(sections) == {"map", "headlines", "sentiment"}
        assert sections["map"]["title"] == "News Map: Coal, Africa - today"
        assert sections["headlines"]["title"] == "Headlines: Coal, Africa - today"
        assert sections["sentiment"]["title"] == "Sentiment: Coal, Africa (1y)"
        assert "/api/v2/geo/geo?" in sections["map"]["url"]
        assert "mode=ArtList" in sections["headlines"]["url"]
        assert "mode=TimelineTone" in sections["sentiment"]["url"]
        for section in sections.values():
            assert "Africa%20AND%20coal" in section["url"]

    def test_section_timespans_independent(self, test_config):
        """Changing one section's timespan leaves the others alone."""
        test_config.headlines_timespan = "7d"
        sections = build_viewer_sections(FacetState(), test_config)
        assert sections["headlines"]["timespan"] == "7d"
        assert sections["map"]["timespan"] == "1d"
        assert sections["headlines"]["title"] == "Headlines: All News - past week"


# ── CLI ──────────────────────────────────────────────────────────────────────────

class TestCli:
    @pytest.fixture
    def cli(self, test_config, monkeypatch):
        module = _load_cli()
        monkeypatch.setattr(module, "configure_logging", lambda **kwargs: None)
        monkeypatch.setattr(module, "NewsMapperConfig", lambda: test_config)
        return module

    def test_query_only(self, cli, capsys):
        """--query-only prints the compiled query and section URLs."""
        code = cli.main(["--resource", "Oil & Gas", "--country", "Mali", "--query-only"])
        out = capsys.readouterr().out.splitlines()
        assert code == 0
        assert out[0] == "Mali AND (oil OR gas)"
        assert any(line.startswith("News Map: Oil & Gas, Mali") for line in out)

    def test_query_only_json(self, cli, capsys):
        """--query-only --json emits the query and sections as JSON."""
        cli.main(["--custom", "gold, Mali", "--query-only", "--json"])
        data = json.loads(capsys.readouterr().out)
        assert data["query"] == "(gold OR Mali)"
        assert data["sections"]["sentiment"]["title"] == "Sentiment: gold, Mali (1y)"

    def test_input_file_text(self, cli, capsys):
        """--input-file analyzes a saved timeline offline."""
        code = cli.main(["--input-file", str(_FIXTURES_DIR / "sample_timeline_tone.csv"), "--timespan", "1y"])
        out = capsys.readouterr().out
        assert code == 0
        assert "Classification: Moderately Negative" in out
        assert "Analysis based on 30 data points" in out

    def test_input_file_json_format(self, cli, capsys):
        """--format selects the parser and --json the report shape."""
        code = cli.main([
            "--input-file", str(_FIXTURES_DIR / "sample_volume_buckets.csv"),
            "--format", "volume_buckets",
            "--json",
        ])
        data = json.loads(capsys.readouterr().out)
        assert code == 0
        assert data["dataPoints"] == 17

    def test_input_file_without_data(self, cli, capsys, tmp_path):
        """An empty timeline exits non-zero with the insufficient-data message."""
        path = tmp_path / "empty.csv"
        path.write_text("Date,Series,Value\n", encoding="utf-8")
        code = cli.main(["--input-file", str(path)])
        assert code == 1
        assert INSUFFICIENT_DATA_ERROR in capsys.readouterr().out

    def test_missing_input_file(self, cli, tmp_path):
        """An unreadable input file exits with code 2."""
        assert cli.main(["--input-file", str(tmp_path / "nope.csv")]) == 2

    def test_live_run(self, cli, capsys, gdelt_http_mock, tone_csv_raw):
        """Without --input-file the CLI fetches through the GDELT client."""
        with gdelt_http_mock(200, tone_csv_raw) as mock_get:
            code = cli.main(["--resource", "Coal", "--json"])
        data = json.loads(capsys.readouterr().out)
        assert code == 0
        assert mock_get.call_count == 1
        assert data["timespan"] == "1y"
        assert data["classification"]["overall"] == "Moderately Negative"
