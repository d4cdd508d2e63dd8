"""Tests for clock selection"""
from types import SimpleNamespace
from unittest.mock import patch

from telemetry.clock import has_precision_timing, precision_ms, select_clock, wall_ms


class TestClockSelection:
    """Precision clock with wall-clock fallback"""

    @patch("telemetry.clock.time.get_clock_info")
    def test_precision_clock_selected(self, mock_info):
        mock_info.return_value = SimpleNamespace(monotonic=True, resolution=1e-9)

        assert has_precision_timing() is True
        assert select_clock() is precision_ms

    @patch("telemetry.clock.time.get_clock_info")
    def test_coarse_clock_falls_back(self, mock_info):
        mock_info.return_value = SimpleNamespace(monotonic=True, resolution=0.015)

        assert select_clock() is wall_ms

    @patch("telemetry.clock.time.get_clock_info", side_effect=ValueError("unknown clock"))
    def test_unavailable_clock_falls_back(self, mock_info):
        assert has_precision_timing() is False
        assert select_clock() is wall_ms

    def test_clocks_report_milliseconds(self):
        first = precision_ms()
        second = precision_ms()

        assert second >= first
        assert wall_ms() > 1e12
