"""Unit tests for newsmapper.analysis.timeseries_parser.

Covers:
- bucket_midpoint: closed, open-below, open-above and unknown labels
- parse_tone_csv: fixture parsing, malformed-row skipping, BOM handling
- parse_volume_buckets_csv: replication, capping, unknown labels
- parse_timeline_json: series selection, date normalization, bad values
- parse_timeseries: dispatch, blank input, unknown format
"""

from __future__ import annotations

import pytest

from newsmapper.analysis.timeseries_parser import (
    TimeseriesFormat,
    bucket_midpoint,
    parse_timeline_json,
    parse_timeseries,
    parse_tone_csv,
    parse_volume_buckets_csv,
)

_HEADER = "Date,Series,Value\n"


class TestBucketMidpoint:
    @pytest.mark.parametrize(
        "label, expected",
        [
            ("5 to 10", 7.5),
            ("-10 to -5", -7.5),
            ("-1 to 1", 0.0),
            ("< -10", -12.5),
            ("value < -10", -12.5),
            ("> 10", 12.5),
            ("  5   to   10 ", 7.5),
        ],
    )
    def test_known_labels(self, label, expected):
        """Closed ranges map to midpoints; open ranges to bound ± half width."""
        assert bucket_midpoint(label) == pytest.approx(expected)

    def test_custom_half_width(self):
        """The open-bucket offset is configurable."""
        assert bucket_midpoint("> 10", half_width=5.0) == pytest.approx(15.0)

    @pytest.mark.parametrize("label", ["", "Average Tone", "5 - 10", "between 1 and 2"])
    def test_unknown_labels(self, label):
        """Unrecognized labels yield None."""
        assert bucket_midpoint(label) is None


class TestParseToneCsv:
    def test_fixture(self, tone_csv_raw):
        """The fixture yields 30 observations; junk rows are skipped."""
        series = parse_tone_csv(tone_csv_raw)
        assert len(series) == 30
        assert series[0].timestamp == "2024-01-01"
        assert series[0].value == pytest.approx(-2.0)
        assert series[0].label == "Average Tone"
        assert series[-1].timestamp == "2024-01-30"
        assert [o.value for o in series].count(-9.0) == 4

    def test_header_row_dropped(self):
        """The first non-blank row is the header and never becomes data."""
        assert parse_tone_csv("Date,Series,Value\n") == []

    def test_malformed_rows_skipped(self):
        """Short rows, empty dates and non-numeric values are dropped."""
        raw = _HEADER + "2024-01-01,Tone\n,Tone,1.0\n2024-01-02,Tone,abc\n2024-01-03,Tone,nan\n2024-01-04,Tone,1.5\n"
        series = parse_tone_csv(raw)
        assert [(o.timestamp, o.value) for o in series] == [("2024-01-04", 1.5)]

    def test_bom_stripped(self):
        """A UTF-8 byte-order mark before the header is ignored."""
        series = parse_tone_csv("\ufeff" + _HEADER + "2024-01-01,Tone,-3.25\n")
        assert len(series) == 1
        assert series[0].value == pytest.approx(-3.25)

    def test_quoted_fields(self):
        """CSV quoting is honoured."""
        series = parse_tone_csv(_HEADER + '"2024-01-01","Average Tone","-1.5"\n')
        assert series[0].value == pytest.approx(-1.5)


class TestParseVolumeBuckets:
    def test_single_bucket_replication(self):
        """'5 to 10' with volume 3 yields exactly 3 observations at 7.5."""
        series = parse_volume_buckets_csv(_HEADER + "2024-01-01,5 to 10,3\n")
        assert len(series) == 3
        assert all(o.value == pytest.approx(7.5) for o in series)
        assert all(o.timestamp == "2024-01-01" for o in series)

    def test_replication_capped(self):
        """Counts above the cap emit only max_replication observations."""
        series = parse_volume_buckets_csv(_HEADER + "2024-01-01,< -10,500\n", max_replication=4)
        assert len(series) == 4
        assert series[0].value == pytest.approx(-12.5)

    def test_fixture(self, volume_buckets_raw):
        """Fixture: 3 + 3 + 10 (capped) + 1; unknown and zero buckets emit nothing."""
        series = parse_volume_buckets_csv(volume_buckets_raw)
        values = [o.value for o in series]
        assert len(values) == 17
        assert values.count(-7.5) == 3
        assert values.count(7.5) == 3
        assert values.count(-12.5) == 10
        assert values.count(12.5) == 1

    def test_fractional_count_truncated(self):
        """Fractional counts are truncated to whole observations."""
        assert len(parse_volume_buckets_csv(_HEADER + "2024-01-01,0 to 2,2.9\n")) == 2


class TestParseTimelineJson:
    def test_fixture_first_series(self, timeline_json_raw):
        """The first series is used by default; bad points are skipped."""
        series = parse_timeline_json(timeline_json_raw)
        assert [o.timestamp for o in series] == [
            "2024-01-01",
            "2024-01-02",
            "2024-01-03 12:00:00",
            "2024-01-05",
        ]
        assert [o.value for o in series] == pytest.approx([-1.25, -1.5, -2.0, -0.75])
        assert all(o.label == "Average Tone" for o in series)

    def test_named_series(self, timeline_json_raw):
        """A named series can be selected."""
        series = parse_timeline_json(timeline_json_raw, series="Article Count")
        assert [o.value for o in series] == [120.0, 95.0]

    def test_missing_series(self, timeline_json_raw):
        """An absent series yields an empty list."""
        assert parse_timeline_json(timeline_json_raw, series="Nope") == []

    def test_decoded_dict_accepted(self):
        """An already-decoded payload is accepted."""
        payload = {"timeline": [{"series": "Tone", "data": [{"date": "2024-02-01", "value": 1}]}]}
        series = parse_timeline_json(payload)
        assert series[0].timestamp == "2024-02-01"
        assert series[0].value == 1.0

    @pytest.mark.parametrize("payload", ["not json", "{}", "[]", None, '{"timeline": "x"}'])
    def test_bad_payloads(self, payload):
        """Unusable payloads yield an empty list rather than raising."""
        assert parse_timeline_json(payload) == []


class TestParseTimeseries:
    def test_dispatch_tone(self, tone_csv_raw):
        """TONE dispatches to the tone CSV parser."""
        assert len(parse_timeseries(tone_csv_raw, TimeseriesFormat.TONE)) == 30

    def test_dispatch_by_string_value(self, volume_buckets_raw):
        """The format may be given by its string value."""
        assert len(parse_timeseries(volume_buckets_raw, "volume_buckets")) == 17

    def test_dispatch_json(self, timeline_json_raw):
        """TIMELINE_JSON dispatches to the JSON parser."""
        assert len(parse_timeseries(timeline_json_raw, TimeseriesFormat.TIMELINE_JSON)) == 4

    def test_replication_options_forwarded(self, volume_buckets_raw):
        """Bucket options reach the volume parser."""
        series = parse_timeseries(volume_buckets_raw, "volume_buckets", max_replication=1)
        assert len(series) == 4

    @pytest.mark.parametrize("raw", [None, "", "   \n"])
    def test_blank_input(self, raw):
        """Blank input yields an empty list."""
        assert parse_timeseries(raw) == []

    def test_unknown_format_raises(self):
        """An unknown format is a programmer error."""
        with pytest.raises(ValueError):
            parse_timeseries("a,b,c", "xml")
