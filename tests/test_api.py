"""Tests for the public entry points."""

import pytest
from concurrent.futures import ThreadPoolExecutor
from datetime import datetime, timedelta, timezone
from unittest.mock import patch

from fuzzydate import (
    FixedClock,
    FuzzyDateConfig,
    LexError,
    ParseError,
    RangeError,
    aware_parse,
    debug_parse,
    parse,
    parse_phrase,
)


class TestAwareParse:
    """Tests for aware_parse with explicit anchors."""

    def setup_method(self):
        """Set up test fixtures."""
        self.anchor = datetime(2025, 11, 24, 9, 30)
        self.zone = "America/New_York"

    def test_weekday_composition(self):
        """Test the headline example."""
        result = aware_parse("five days after this friday", self.anchor, self.zone)
        assert result.replace(tzinfo=None) == datetime(2025, 12, 3, 9, 30)
        assert result.utcoffset() == timedelta(hours=-5)

    def test_tomorrow_at_noon(self):
        """Test a date and time phrase."""
        result = aware_parse("tomorrow at noon", self.anchor, self.zone)
        assert result.isoformat() == "2025-11-25T12:00:00-05:00"

    def test_result_is_aware(self):
        """Test every result carries a timezone."""
        for phrase in ["now", "today", "next week", "3 weeks ago", "Dec 25"]:
            assert aware_parse(phrase, self.anchor, self.zone).tzinfo is not None

    @pytest.mark.parametrize("days", [0, 1, 7, 30, 365])
    def test_days_ago_moves_absolute_instant(self, days):
        """Test "N days ago" is exactly N * 24 hours before the anchor."""
        anchor = datetime(2025, 11, 24, 9, 30, tzinfo=timezone.utc)
        result = aware_parse(f"{days} days ago", anchor)
        assert anchor - result == timedelta(days=days)

    def test_iso_literal_is_stable(self):
        """Test an ISO literal with an offset ignores the anchor."""
        expected = datetime(2024, 3, 5, 10, 0, tzinfo=timezone(timedelta(hours=2)))
        for anchor in [datetime(1990, 1, 1), datetime(2025, 11, 24, 9, 30)]:
            assert aware_parse("2024-03-05T10:00:00+02:00", anchor, self.zone) == expected

    def test_isoformat_round_trip(self):
        """Test that an ISO rendering parses back to the same instant."""
        result = aware_parse("five days after this friday", self.anchor, self.zone)
        assert aware_parse(result.isoformat(), datetime(2000, 1, 1), "UTC") == result

    def test_round_trip_with_seconds_offset(self):
        """Test local mean time offsets keep their seconds through a round trip."""
        result = aware_parse("march 3 1850 at noon", self.anchor, self.zone)
        assert result.utcoffset() == -timedelta(hours=4, minutes=56, seconds=2)
        assert result.isoformat().endswith("-04:56:02")
        assert aware_parse(result.isoformat(), datetime(2000, 1, 1), "UTC") == result

    def test_month_clamp(self):
        """Test month arithmetic clamps the day."""
        result = aware_parse("in 1 month", datetime(2024, 1, 31, 10, 0), self.zone)
        assert result.date().isoformat() == "2024-02-29"

    def test_two_digit_year(self):
        """Test month-first numeric dates with two-digit years."""
        assert aware_parse("5/2/22", self.anchor, self.zone).date().isoformat() == "2022-05-02"

    def test_bytes_input(self):
        """Test UTF-8 bytes are accepted."""
        assert aware_parse(b"tomorrow at noon", self.anchor, self.zone) == aware_parse(
            "tomorrow at noon", self.anchor, self.zone
        )

    def test_whole_phrase_is_consumed(self):
        """Test trailing words fail instead of being ignored."""
        with pytest.raises(ParseError):
            aware_parse("tomorrow at noon please", self.anchor, self.zone)

    def test_invalid_day(self):
        """Test a day that does not exist."""
        with pytest.raises(RangeError):
            aware_parse("february 30", self.anchor, self.zone)

    def test_invalid_hour(self):
        """Test an hour outside the 12-hour clock."""
        with pytest.raises(RangeError):
            aware_parse("13pm", self.anchor, self.zone)

    def test_dst_gap(self):
        """Test a wall clock skipped by DST."""
        with pytest.raises(RangeError):
            aware_parse("tomorrow at 2:30am", datetime(2025, 3, 8, 12, 0), self.zone)

    def test_lex_error(self):
        """Test control characters fail in the tokenizer."""
        with pytest.raises(LexError):
            aware_parse("today\x00", self.anchor, self.zone)

    def test_errors_are_value_errors(self):
        """Test every pipeline error can be caught as ValueError."""
        with pytest.raises(ValueError):
            aware_parse("gibberish", self.anchor, self.zone)

    def test_ignores_environment(self, monkeypatch):
        """Test configuration from the environment is not consulted."""
        monkeypatch.setenv("FUZZYDATE_WEEK_START", "6")
        result = aware_parse("this monday", datetime(2025, 11, 30, 9, 0), self.zone)
        assert result.date().isoformat() == "2025-11-24"

    def test_concurrent_calls(self):
        """Test concurrent calls return the same results as sequential ones."""
        phrases = ["tomorrow at noon", "3 weeks ago", "next friday", "5/2/22", "in two hours"] * 20
        expected = [aware_parse(p, self.anchor, self.zone) for p in phrases]
        with ThreadPoolExecutor(max_workers=8) as executor:
            results = list(executor.map(lambda p: aware_parse(p, self.anchor, self.zone), phrases))
        assert results == expected


class TestParse:
    """Tests for parse with a clock."""

    def test_fixed_clock(self, clean_env):
        """Test the anchor comes from the clock."""
        clock = FixedClock(datetime(2025, 11, 24, 9, 30), "America/New_York")
        result = parse("tomorrow", clock=clock)
        assert result.replace(tzinfo=None) == datetime(2025, 11, 25, 9, 30)

    def test_system_clock_used_by_default(self, clean_env):
        """Test the default clock is a SystemClock in the configured zone."""
        fixed = FixedClock(datetime(2025, 11, 24, 12, 0), "UTC")
        with patch("fuzzydate.api.SystemClock") as mock_clock:
            mock_clock.return_value = fixed
            result = parse("now")
        mock_clock.assert_called_once_with(None)
        assert result == fixed.now()

    def test_iso_literal_and_round_trip(self, clean_env):
        """Test parse agrees with aware_parse on ISO literals and re-parses its own output."""
        expected = datetime(2024, 3, 5, 10, 0, tzinfo=timezone(timedelta(hours=2)))
        assert parse("2024-03-05T10:00:00+02:00") == expected

        result = parse("next friday at 5pm")
        assert parse(result.isoformat()) == result

    def test_timezone_from_environment(self, clean_env, monkeypatch):
        """Test FUZZYDATE_TIMEZONE selects the clock zone."""
        monkeypatch.setenv("FUZZYDATE_TIMEZONE", "Asia/Tokyo")
        result = parse("now")
        assert result.utcoffset() == timedelta(hours=9)

    def test_explicit_config_wins(self, clean_env, monkeypatch):
        """Test an explicit config is used instead of the environment."""
        monkeypatch.setenv("FUZZYDATE_TIMEZONE", "Asia/Tokyo")
        result = parse("now", config=FuzzyDateConfig(timezone="UTC"))
        assert result.utcoffset() == timedelta(0)


class TestParsePhrase:
    """Tests for parse_phrase."""

    def test_returns_tree(self):
        """Test the tree is returned without resolution."""
        assert parse_phrase("3 weeks ago").describe() == "-3 week"


class TestDebugParse:
    """Tests for debug_parse."""

    def setup_method(self):
        """Set up test fixtures."""
        self.anchor = datetime(2025, 11, 24, 9, 30, tzinfo=timezone.utc)

    def test_success_trace(self):
        """Test a successful run records every stage."""
        trace = debug_parse("tomorrow at noon", self.anchor)
        assert trace.stage == "resolve"
        assert [t.lexeme for t in trace.tokens] == ["tomorrow", "at", "noon"]
        assert trace.tree.describe() == "tomorrow -> noon"
        assert trace.result == datetime(2025, 11, 25, 12, 0, tzinfo=timezone.utc)
        assert trace.error is None

    def test_parse_failure_trace(self):
        """Test a parse failure is reported instead of raised."""
        trace = debug_parse("tomorrow at noon xyz", self.anchor)
        assert trace.stage == "parse"
        assert trace.tokens is not None
        assert trace.tree is None
        assert trace.error.error_code == "parse_error"
        assert trace.error.position == 17

    def test_lex_failure_trace(self):
        """Test a tokenizer failure stops before parsing."""
        trace = debug_parse("noon\x07", self.anchor)
        assert trace.stage == "tokenize"
        assert trace.tokens is None
        assert trace.error.error_code == "lex_error"

    def test_range_failure_trace(self):
        """Test a resolution failure keeps the tree."""
        trace = debug_parse("february 30", self.anchor)
        assert trace.stage == "resolve"
        assert trace.tree is not None
        assert trace.result is None
        assert trace.error.error_code == "range_error"

    def test_trace_serializes(self):
        """Test the trace dumps to JSON-compatible data."""
        data = debug_parse("3 weeks ago", self.anchor).model_dump(mode="json")
        assert data["phrase"] == "3 weeks ago"
        assert data["tree"]["parts"][0] == {"kind": "relative_offset", "quantity": -3, "unit": "week"}
