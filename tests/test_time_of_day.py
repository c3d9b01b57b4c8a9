"""
Tests for time-of-day parsing.
"""

import pendulum
import pytest

from careslots.domain.exceptions import InvalidTimeFormatError
from careslots.domain.time_of_day import TimeOfDay, parse_time_string


class TestParseTimeString:
    """Tests for parse_time_string."""

    def test_parse_valid_time(self):
        """Test that a zero-padded time parses to hour and minute."""
        assert parse_time_string("09:05") == TimeOfDay(hour=9, minute=5)

    def test_parse_boundaries(self):
        """Test the first and last minute of the day."""
        assert parse_time_string("00:00") == TimeOfDay(0, 0)
        assert parse_time_string("23:59") == TimeOfDay(23, 59)

    @pytest.mark.parametrize(
        "text",
        ["25:00", "9:5", "24:00", "12:60", "0905", "09:05 ", " 09:05", "", "09:05:00", "ab:cd", "09:05\n"],
    )
    def test_invalid_formats_raise(self, text):
        """Test that anything but strict HH:MM is rejected."""
        with pytest.raises(InvalidTimeFormatError, match="Invalid time format"):
            parse_time_string(text)

    def test_non_string_raises(self):
        """Test that non-string input is rejected rather than coerced."""
        with pytest.raises(InvalidTimeFormatError):
            parse_time_string(None)

    def test_error_is_value_error(self):
        """Test that callers can catch format errors as ValueError."""
        with pytest.raises(ValueError):
            parse_time_string("7pm")


class TestTimeOfDay:
    """Tests for the TimeOfDay value."""

    def test_out_of_range_rejected(self):
        with pytest.raises(InvalidTimeFormatError):
            TimeOfDay(hour=24, minute=0)

    def test_ordering_and_str(self):
        assert TimeOfDay(9, 0) < TimeOfDay(9, 30) < TimeOfDay(10, 0)
        assert str(TimeOfDay(9, 5)) == "09:05"
        assert TimeOfDay(10, 30).minutes_since_midnight() == 630

    def test_on_date(self):
        """Test placing a time of day on a date in a timezone."""
        placed = TimeOfDay(9, 30).on(pendulum.date(2024, 11, 25), "Europe/Berlin")

        assert placed == pendulum.datetime(2024, 11, 25, 9, 30, tz="Europe/Berlin")
        assert placed.timezone_name == "Europe/Berlin"
