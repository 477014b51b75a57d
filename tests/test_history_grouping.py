"""
Unit tests for history filtering, grouping and CSV export.

Tests:
- Grouping by actor, entity and time proximity
- Search and actor filters
- Action sentences
- CSV export rows and filename
"""

import csv
import io
import uuid
from datetime import date, datetime, timedelta, timezone

from tasktrail.models.activity import ActivityLog, Actions, EntityTypes
from tasktrail.models.user import User
from tasktrail.schemas.activity import ActivityEntry, ActivityUser
from tasktrail.services.history_grouping import (
    build_entry,
    describe_action,
    export_csv,
    export_filename,
    filter_entries,
    group_entries,
)

BASE = datetime(2024, 5, 1, 9, 0, 0, tzinfo=timezone.utc)
ALICE = uuid.uuid4()
BOB = uuid.uuid4()
TASK_A = uuid.uuid4()
TASK_B = uuid.uuid4()


def make_entry(user_id, entity_id, at, action=Actions.UPDATE_TASK, text="Updated title", name=None):
    return ActivityEntry(
        id=uuid.uuid4(),
        user_id=user_id,
        user=ActivityUser(id=user_id, name=name or ("Alice" if user_id == ALICE else "Bob")),
        action=action,
        entity_type=EntityTypes.TASK,
        entity_id=entity_id,
        details=text,
        text=text,
        created_at=at,
        summary=f"{action} {text}",
    )


class TestGroupEntries:
    """Tests for collapsing runs of entries."""

    def test_same_actor_same_entity_within_window_is_one_group(self):
        """Three close entries by one user on one task form a single group."""
        entries = [
            make_entry(ALICE, TASK_A, BASE + timedelta(minutes=6)),
            make_entry(ALICE, TASK_A, BASE + timedelta(minutes=3)),
            make_entry(ALICE, TASK_A, BASE),
        ]

        groups = group_entries(entries)

        assert len(groups) == 1
        assert len(groups[0].items) == 3
        assert groups[0].id == entries[0].id

    def test_other_actor_in_the_middle_splits_groups(self):
        """A different user between two entries breaks the run into three groups."""
        entries = [
            make_entry(ALICE, TASK_A, BASE + timedelta(minutes=2)),
            make_entry(BOB, TASK_A, BASE + timedelta(minutes=1)),
            make_entry(ALICE, TASK_A, BASE),
        ]

        groups = group_entries(entries)

        assert [len(group.items) for group in groups] == [1, 1, 1]
        assert [group.user_id for group in groups] == [ALICE, BOB, ALICE]

    def test_other_entity_splits_groups(self):
        entries = [
            make_entry(ALICE, TASK_A, BASE + timedelta(minutes=1)),
            make_entry(ALICE, TASK_B, BASE),
        ]

        assert len(group_entries(entries)) == 2

    def test_exactly_ten_minutes_apart_merges(self):
        entries = [
            make_entry(ALICE, TASK_A, BASE + timedelta(minutes=10)),
            make_entry(ALICE, TASK_A, BASE),
        ]

        assert len(group_entries(entries)) == 1

    def test_ten_minutes_one_second_apart_does_not_merge(self):
        entries = [
            make_entry(ALICE, TASK_A, BASE + timedelta(minutes=10, seconds=1)),
            make_entry(ALICE, TASK_A, BASE),
        ]

        assert len(group_entries(entries)) == 2

    def test_run_is_measured_between_neighbours(self):
        """Each entry is compared with the one merged just before it."""
        entries = [
            make_entry(ALICE, TASK_A, BASE + timedelta(minutes=16)),
            make_entry(ALICE, TASK_A, BASE + timedelta(minutes=8)),
            make_entry(ALICE, TASK_A, BASE),
        ]

        groups = group_entries(entries)

        assert len(groups) == 1

    def test_start_and_end_are_chronological(self):
        """With newest-first input, start_time is still the earliest item."""
        entries = [
            make_entry(ALICE, TASK_A, BASE + timedelta(minutes=5)),
            make_entry(ALICE, TASK_A, BASE),
        ]

        group = group_entries(entries)[0]

        assert group.start_time == BASE
        assert group.end_time == BASE + timedelta(minutes=5)

    def test_custom_window(self):
        entries = [
            make_entry(ALICE, TASK_A, BASE + timedelta(minutes=3)),
            make_entry(ALICE, TASK_A, BASE),
        ]

        assert len(group_entries(entries, window=timedelta(minutes=2))) == 2

    def test_empty_input(self):
        assert group_entries([]) == []

    def test_labels(self):
        """A single entry shows its sentence; a run shows a count."""
        single = group_entries([make_entry(ALICE, TASK_A, BASE)])[0]
        run = group_entries([
            make_entry(ALICE, TASK_A, BASE + timedelta(minutes=1)),
            make_entry(ALICE, TASK_A, BASE),
        ])[0]

        assert single.is_single
        assert single.label == single.items[0].summary
        assert not run.is_single
        assert run.label == "2 updates"


class TestFilterEntries:
    """Tests for the search and actor filters."""

    def test_search_matches_action_case_insensitively(self):
        entries = [
            make_entry(ALICE, TASK_A, BASE, action=Actions.DELETE_TASK, text="Task deleted"),
            make_entry(ALICE, TASK_A, BASE, action=Actions.CREATE_TASK, text="Write report"),
        ]

        matched = filter_entries(entries, search="delete")

        assert [entry.action for entry in matched] == [Actions.DELETE_TASK]

    def test_search_matches_details_text(self):
        entries = [
            make_entry(ALICE, TASK_A, BASE, text="Quarterly REPORT"),
            make_entry(ALICE, TASK_A, BASE, text="Something else"),
        ]

        assert len(filter_entries(entries, search="report")) == 1

    def test_search_matches_entity_type(self):
        entries = [make_entry(ALICE, TASK_A, BASE, action="X", text="y")]

        assert len(filter_entries(entries, search="task")) == 1

    def test_actor_filter(self):
        entries = [make_entry(ALICE, TASK_A, BASE), make_entry(BOB, TASK_A, BASE)]

        matched = filter_entries(entries, user_id=BOB)

        assert [entry.user_id for entry in matched] == [BOB]

    def test_empty_search_keeps_everything(self):
        entries = [make_entry(ALICE, TASK_A, BASE), make_entry(BOB, TASK_B, BASE)]

        assert len(filter_entries(entries, search="")) == 2
        assert len(filter_entries(entries, search=None)) == 2

    def test_spaces_in_search_are_matched_literally(self):
        """Surrounding spaces are part of the term: " report" needs a space before the word."""
        entries = [
            make_entry(ALICE, TASK_A, BASE, action="X", text="Monthly report"),
            make_entry(ALICE, TASK_A, BASE, action="X", text="report draft"),
        ]

        matched = filter_entries(entries, search=" Report")

        assert [entry.text for entry in matched] == ["Monthly report"]


class TestDescribeAction:

    def test_status_change(self):
        sentence = describe_action(Actions.UPDATE_STATUS, "Maha", old_value="NEW", new_value="COMPLETED")

        assert sentence == "Maha changed status from NEW to COMPLETED"

    def test_created_task_uses_text(self):
        assert describe_action(Actions.CREATE_TASK, "Maha", text="Write report") == 'Maha created task "Write report"'

    def test_unknown_action_is_generic(self):
        assert describe_action("ARCHIVE_BOARD", "Maha") == "Maha performed archive board"


class TestBuildEntry:

    def test_unknown_actor(self):
        """A log row whose author no longer exists renders as Unknown."""
        log = ActivityLog(
            id=uuid.uuid4(),
            user_id=uuid.uuid4(),
            action=Actions.CREATE_TASK,
            entity_type=EntityTypes.TASK,
            entity_id=TASK_A,
            details="Write report",
            created_at=BASE,
        )

        entry = build_entry(log)

        assert entry.user.name == "Unknown"
        assert entry.summary == 'Unknown created task "Write report"'

    def test_impact_is_parsed(self):
        user = User(id=ALICE, email="alice@example.com", name="Alice")
        log = ActivityLog(
            id=uuid.uuid4(),
            user_id=ALICE,
            action=Actions.UPDATE_STATUS,
            entity_type=EntityTypes.TASK,
            entity_id=TASK_A,
            details='{"text":"Status updated to COMPLETED","impact":{"type":"LATE","label":"1 Day Late"}}',
            field="status",
            old_value="NEW",
            new_value="COMPLETED",
            created_at=BASE,
        )

        entry = build_entry(log, user)

        assert entry.text == "Status updated to COMPLETED"
        assert entry.impact.label == "1 Day Late"
        assert entry.user.name == "Alice"


class TestExportCsv:
    """Tests for the CSV download."""

    def test_header_and_rows(self):
        entry = make_entry(ALICE, TASK_A, BASE, action=Actions.CREATE_TASK, text="Plan, then build")

        rows = list(csv.reader(io.StringIO(export_csv([entry]))))

        assert rows[0] == ["Date", "User", "Action", "Target", "Details"]
        assert rows[1] == [
            BASE.isoformat(),
            "Alice",
            Actions.CREATE_TASK,
            f"TASK: {TASK_A}",
            "Plan, then build",
        ]

    def test_one_row_per_entry(self):
        entries = [
            make_entry(ALICE, TASK_A, BASE + timedelta(minutes=1)),
            make_entry(ALICE, TASK_A, BASE),
        ]

        rows = list(csv.reader(io.StringIO(export_csv(entries))))

        assert len(rows) == 3

    def test_filename(self):
        assert export_filename(date(2024, 5, 1)) == "audit-log-2024-05-01.csv"
