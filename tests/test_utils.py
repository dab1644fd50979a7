"""Unit tests for utility functions."""
import pytest
from workout_runner.utils import format_elapsed, to_number


class TestUtils:
    """Test cases for utility functions."""

    def test_to_number_valid(self):
        """Test to_number with valid input."""
        assert to_number("10") == 10.0
        assert to_number("0") == 0.0
        assert to_number(" 7.5 ") == 7.5
        assert to_number(3) == 3.0

    def test_to_number_invalid(self):
        """Test to_number with invalid input."""
        assert to_number("abc") is None
        assert to_number("") is None
        assert to_number(None) is None
        assert to_number(False) is None
        assert to_number("NaN") is None
        assert to_number(float("inf")) is None

    @pytest.mark.parametrize(
        "seconds,expected",
        [
            (0, "00:00"),
            (59, "00:59"),
            (61, "01:01"),
            (3599, "59:59"),
            (3600, "01:00:00"),
            (3725, "01:02:05"),
        ],
    )
    def test_format_elapsed(self, seconds, expected):
        assert format_elapsed(seconds) == expected
