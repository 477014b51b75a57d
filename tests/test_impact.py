"""
Unit tests for the completion impact classifier.
"""

from datetime import datetime, timedelta, timezone

from tasktrail.schemas.activity import ImpactType
from tasktrail.services.impact_service import classify_completion, late_label

DUE = datetime(2024, 3, 10, 17, 0, 0)


class TestClassifyCompletion:
    """Tests for on-time / late verdicts."""

    def test_no_due_date_returns_none(self):
        """A task without a deadline gets no verdict."""
        assert classify_completion(None, DUE) is None

    def test_completed_exactly_at_due_is_on_time(self):
        """Completing at the due instant is on time."""
        impact = classify_completion(DUE, DUE)

        assert impact.type == ImpactType.ON_TIME
        assert impact.label == "On Time"

    def test_completed_early_is_on_time(self):
        impact = classify_completion(DUE, DUE - timedelta(days=3))

        assert impact.type == ImpactType.ON_TIME

    def test_one_second_late_is_one_day(self):
        """Any lateness rounds up to a whole day."""
        impact = classify_completion(DUE, DUE + timedelta(seconds=1))

        assert impact.type == ImpactType.LATE
        assert impact.label == "1 Day Late"

    def test_exactly_one_day_late(self):
        impact = classify_completion(DUE, DUE + timedelta(days=1))

        assert impact.label == "1 Day Late"

    def test_just_over_one_day_is_two_days(self):
        """The label pluralizes once the count passes one."""
        impact = classify_completion(DUE, DUE + timedelta(days=1, milliseconds=1))

        assert impact.label == "2 Days Late"

    def test_a_day_and_a_half_is_two_days(self):
        impact = classify_completion(DUE, DUE + timedelta(days=1, hours=12))

        assert impact.label == "2 Days Late"

    def test_aware_datetimes_are_compared_in_utc(self):
        """An aware completion time is normalized before comparing with a naive due date."""
        completed = datetime(2024, 3, 10, 19, 0, tzinfo=timezone(timedelta(hours=3)))  # 16:00 UTC
        impact = classify_completion(DUE, completed)

        assert impact.type == ImpactType.ON_TIME


class TestLateLabel:

    def test_singular(self):
        assert late_label(1) == "1 Day Late"

    def test_plural(self):
        assert late_label(5) == "5 Days Late"
