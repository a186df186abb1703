"""Tests for progress tracking utilities."""

import pytest

from project_insights.cli.utils.progress import ProgressTracker


class FakeClock:
    def __init__(self):
        self.now = 0.0

    def __call__(self):
        return self.now


class TestProgressTracker:
    """Tests for ProgressTracker class."""

    @pytest.fixture
    def lines(self):
        return []

    @pytest.fixture
    def clock(self):
        return FakeClock()

    @pytest.fixture
    def tracker(self, lines, clock):
        return ProgressTracker(["Loading records", "Calculating"], echo=lines.append, clock=clock)

    def test_initial_message(self, tracker):
        assert tracker.get_current_message() == "[1/2] Loading records"
        assert not tracker.is_complete()

    def test_stage_with_elapsed_time(self, tracker, lines, clock):
        tracker.start()
        clock.now = 1.5
        tracker.advance("Loaded 3 projects")

        assert lines == ["[1/2] Loading records", "  Loaded 3 projects (1.5s)"]
        assert tracker.get_current_message() == "[2/2] Calculating"

    def test_advance_without_start(self, tracker, lines):
        tracker.advance("Loaded 3 projects")

        assert lines == ["  Loaded 3 projects"]

    def test_silent_advance(self, tracker, lines):
        tracker.start()
        tracker.advance()
        tracker.advance()

        assert lines == ["[1/2] Loading records"]
        assert tracker.is_complete()
        assert tracker.get_current_message() == "[2/2] Complete"

    def test_defaults_to_click_echo(self, capsys):
        ProgressTracker(["Only stage"]).start()

        assert capsys.readouterr().out == "[1/1] Only stage\n"
