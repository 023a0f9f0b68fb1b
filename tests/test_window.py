"""Tests for search window resolution."""

from datetime import date

import pytest
from pydantic import ValidationError

from src.participation.models import SearchWindow
from src.participation.window import WindowError, day_bounds, resolve_window


class TestDayBounds:
    def test_utc_day(self):
        assert day_bounds(date(2025, 11, 10)) == (1762732800, 1762819199)


class TestResolveWindow:
    """Tests for resolve_window."""

    def test_updated_date(self):
        window, label = resolve_window("8742044", updated_date="2025-11-10")

        assert (window.since, window.before) == (1762732800, 1762819199)
        assert label == "2025-11-10"

    def test_updated_date_wins_over_bounds(self):
        window, label = resolve_window(
            "8742044", updated_date="2025-11-10", updated_since="1", updated_before="2"
        )

        assert window.since == 1762732800
        assert label == "2025-11-10"

    def test_epoch_bounds(self):
        window, label = resolve_window(
            8742044, updated_since="1762740000", updated_before="1762826399"
        )

        assert window.admin_id == "8742044"
        assert (window.since, window.before) == (1762740000, 1762826399)
        assert label == "2025-11-10"

    def test_millisecond_bounds(self):
        window, _ = resolve_window("1", updated_since="1762740000000", updated_before="1762826399000")

        assert (window.since, window.before) == (1762740000, 1762826399)

    def test_datetime_string_bounds(self):
        """The audit page sends 'YYYY-MM-DD HH:MM:SS'."""
        window, _ = resolve_window(
            "1", updated_since="2025-11-06 00:00:00", updated_before="2025-11-10 23:59:59"
        )

        assert window.since == 1762387200
        assert window.before == 1762819199

    def test_defaults_to_today(self):
        window, label = resolve_window("1", today=date(2025, 11, 10))

        assert label == "2025-11-10"
        assert window.since == 1762732800

    def test_lone_bound_falls_back_to_today(self):
        window, label = resolve_window("1", updated_since="1762740000", today=date(2025, 11, 10))

        assert window.since == 1762732800

    def test_bad_date(self):
        with pytest.raises(WindowError, match="YYYY-MM-DD"):
            resolve_window("1", updated_date="10/11/2025")

    def test_bad_bound(self):
        with pytest.raises(WindowError):
            resolve_window("1", updated_since="soon", updated_before="1762826399")

    def test_inverted_bounds(self):
        with pytest.raises(WindowError, match="earlier than"):
            resolve_window("1", updated_since="1762826399", updated_before="1762740000")

    def test_blank_admin(self):
        with pytest.raises(WindowError):
            resolve_window("  ", updated_date="2025-11-10")


class TestSearchWindow:
    def test_equal_bounds_rejected(self):
        with pytest.raises(ValidationError):
            SearchWindow(admin_id="1", since=10, before=10)
