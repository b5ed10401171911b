"""Tests for the skip filter."""

from calendar_colorizer.calendar.events import EventColor, GuestStatus
from calendar_colorizer.rules.skip import should_skip


class TestShouldSkip:
    """Tests for should_skip."""

    def test_colored_accepted_event_is_skipped(self, make_event) -> None:
        """An event already colored External is left alone."""
        event = make_event(color=EventColor.EXTERNAL, my_status=GuestStatus.ACCEPTED)
        assert should_skip(event) is True

    def test_tentative_event_is_not_skipped(self, make_event) -> None:
        """Tentative events are re-evaluated every run."""
        event = make_event(color=EventColor.TENTATIVE, my_status=GuestStatus.ACCEPTED)
        assert should_skip(event) is False

    def test_declined_uncolored_event_is_skipped(self, make_event) -> None:
        event = make_event(color=None, my_status=GuestStatus.DECLINED)
        assert should_skip(event) is True

    def test_declined_tentative_event_is_skipped(self, make_event) -> None:
        event = make_event(color=EventColor.TENTATIVE, my_status=GuestStatus.DECLINED)
        assert should_skip(event) is True

    def test_uncolored_event_is_not_skipped(self, make_event) -> None:
        for status in (GuestStatus.ACCEPTED, GuestStatus.UNKNOWN, GuestStatus.NOT_APPLICABLE):
            assert should_skip(make_event(my_status=status)) is False

    def test_default_color_counts_as_colored(self, make_event) -> None:
        """A Default color was written deliberately and is kept."""
        assert should_skip(make_event(color=EventColor.DEFAULT)) is True
