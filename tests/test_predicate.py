"""
Tests for the default atomic predicate.
"""

import pytest

from backend.filterquery import FilterQueryPredicate, ParsingError, TraceEvent


class TestIsValid:
    """Tests for FilterQueryPredicate.is_valid."""

    def test_simple_comparison(self):
        """Test a plain comparison is valid."""
        assert FilterQueryPredicate.is_valid("Level==Error") is True

    def test_whitespace_around_operator(self):
        """Test whitespace is allowed around the operator."""
        assert FilterQueryPredicate.is_valid("Level == Error") is True

    def test_all_operators(self):
        """Test every comparison operator is accepted."""
        for op in ["==", "!=", ">=", "<=", ">", "<"]:
            assert FilterQueryPredicate.is_valid(f"Count{op}5") is True

    def test_quoted_value(self):
        """Test quoted values may contain spaces and parentheses."""
        assert FilterQueryPredicate.is_valid('Message=="disk full (C:)"') is True

    def test_rejects_combination(self):
        """Test that combined conditions are not one predicate."""
        assert FilterQueryPredicate.is_valid("Level==Error && Source==Net") is False
        assert FilterQueryPredicate.is_valid("Level==Error AND Source==Net") is False

    def test_rejects_parentheses(self):
        """Test that grouped text is not one predicate."""
        assert FilterQueryPredicate.is_valid("(Level==Error)") is False

    def test_rejects_surrounding_whitespace(self):
        """Test leading and trailing whitespace is rejected."""
        assert FilterQueryPredicate.is_valid(" Level==Error") is False
        assert FilterQueryPredicate.is_valid("Level==Error ") is False

    def test_rejects_empty(self):
        """Test empty text is rejected."""
        assert FilterQueryPredicate.is_valid("") is False

    def test_build_invalid_raises(self):
        """Test building from invalid text raises ParsingError."""
        with pytest.raises(ParsingError) as exc_info:
            FilterQueryPredicate.build("Level")
        assert exc_info.value.expression == "Level"


class TestMatch:
    """Tests for predicate matching."""

    def test_text_equality_ignores_case(self):
        """Test text comparison is case-insensitive."""
        predicate = FilterQueryPredicate.build("Level==error")
        assert predicate.match_properties({"Level": "ERROR"}, "Log") is True
        assert predicate.match_properties({"Level": "Warning"}, "Log") is False

    def test_numeric_comparison(self):
        """Test numbers compare numerically rather than as text."""
        predicate = FilterQueryPredicate.build("Count<10")
        assert predicate.match_properties({"Count": "9"}, "Log") is True
        assert predicate.match_properties({"Count": "10"}, "Log") is False

    def test_numeric_against_text_falls_back(self):
        """Test a non-numeric actual value is compared as text."""
        predicate = FilterQueryPredicate.build("Count==5")
        assert predicate.match_properties({"Count": "five"}, "Log") is False

    def test_nan_compares_as_text(self):
        """Test NaN is matched as text rather than as a number."""
        predicate = FilterQueryPredicate.build("Value==NaN")
        assert predicate.match_properties({"Value": "NaN"}, "Log") is True
        assert predicate.match_properties({"Value": "nan"}, "Log") is True
        assert FilterQueryPredicate.build("Value!=NaN").match_properties(
            {"Value": "NaN"}, "Log"
        ) is False

    def test_infinity_and_underscores_compare_as_text(self):
        """Test only plain decimal literals are treated as numbers."""
        assert FilterQueryPredicate.build("Value==inf").match_properties(
            {"Value": "INF"}, "Log"
        ) is True
        assert FilterQueryPredicate.build("Count==1_000").match_properties(
            {"Count": "1000"}, "Log"
        ) is False
        assert FilterQueryPredicate.build("Count==1e3").match_properties(
            {"Count": "1000"}, "Log"
        ) is True

    def test_nan_payload_value(self):
        """Test a float NaN in the payload is not compared numerically."""
        predicate = FilterQueryPredicate.build("Value!=5")
        assert predicate.match_properties({"Value": float("nan")}, "Log") is True
        assert FilterQueryPredicate.build("Value==nan").match_properties(
            {"Value": float("nan")}, "Log"
        ) is True

    def test_not_equal(self):
        """Test the != operator."""
        predicate = FilterQueryPredicate.build("Source!=Net")
        assert predicate.match_properties({"Source": "Disk"}, "Log") is True
        assert predicate.match_properties({"Source": "net"}, "Log") is False

    def test_missing_property_never_matches(self):
        """Test a missing property does not match, even for !=."""
        predicate = FilterQueryPredicate.build("Source!=Net")
        assert predicate.match_properties({}, "Log") is False

    def test_property_name_case_insensitive(self):
        """Test property names fall back to a case-insensitive lookup."""
        predicate = FilterQueryPredicate.build("level==Error")
        assert predicate.match_properties({"Level": "Error"}, "Log") is True

    def test_event_name(self):
        """Test EventName compares against the event name."""
        predicate = FilterQueryPredicate.build("EventName==GC/Start")
        assert predicate.match_properties({}, "GC/Start") is True
        assert predicate.match_properties({"EventName": "GC/Start"}, "GC/Stop") is False

    def test_quoted_value_match(self):
        """Test quoted values are matched without their quotes."""
        predicate = FilterQueryPredicate.build('Message=="disk full"')
        assert predicate.match_properties({"Message": "Disk Full"}, "Log") is True

    def test_match_event(self):
        """Test matching a TraceEvent uses payload and process fields."""
        predicate = FilterQueryPredicate.build("ProcessID==42")
        event = TraceEvent("Log", {"Level": "Error"}, process_id=42)
        assert predicate.match(event) is True
        assert predicate.match(TraceEvent("Log", {"Level": "Error"})) is False


class TestScan:
    """Tests for FilterQueryPredicate.scan."""

    def test_stops_at_operator(self):
        """Test the scan ends where the predicate ends."""
        assert FilterQueryPredicate.scan("Level==Error && X==1", 0) == 12
        assert FilterQueryPredicate.scan("Level==Error&&X==1", 14) == 18

    def test_stops_at_parenthesis(self):
        """Test a closing parenthesis ends an unquoted value."""
        assert FilterQueryPredicate.scan("(A==1)", 1) == 5

    def test_quoted_value(self):
        """Test a quoted value is scanned whole."""
        assert FilterQueryPredicate.scan('M=="a b" || x', 0) == 8

    def test_no_predicate(self):
        """Test None when no predicate starts at the position."""
        assert FilterQueryPredicate.scan("&& A==1", 0) is None
        assert FilterQueryPredicate.scan("Level", 0) is None

    def test_agrees_with_is_valid(self):
        """Test the scanned text is the longest valid prefix."""
        text = "Count >= 10 || Message==\"x (y)\")"
        for start in (0, 15):
            end = FilterQueryPredicate.scan(text, start)
            assert FilterQueryPredicate.is_valid(text[start:end]) is True
            assert not any(
                FilterQueryPredicate.is_valid(text[start:longer])
                for longer in range(end + 1, len(text) + 1)
            )


class TestTraceEvent:
    """Tests for TraceEvent."""

    def test_properties_merge(self):
        """Test well-known fields are merged into the payload."""
        event = TraceEvent(
            "Log", {"Level": "Error"}, process_name="svc", process_id=7, thread_id=9
        )
        props = event.properties()
        assert props == {
            "Level": "Error",
            "ProcessName": "svc",
            "ProcessID": 7,
            "ThreadID": 9,
        }

    def test_properties_skip_unset(self):
        """Test unset fields are not added."""
        assert TraceEvent("Log", {"A": "1"}).properties() == {"A": "1"}
