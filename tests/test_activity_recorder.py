"""
Tests for the activity recorder.
"""

import logging
import uuid
from datetime import datetime, timedelta, timezone

from tasktrail.core.timeutils import utcnow, to_utc
from tasktrail.models.activity import Actions, EntityTypes
from tasktrail.models.task import Task
from tasktrail.models.project import Project
from tasktrail.repositories.activity_repo import ActivityLogRepository
from tasktrail.schemas.activity import Impact, ImpactType
from tasktrail.services.activity_service import ActivityService
from tasktrail.services.history_service import HistoryService


async def _make_task(session, creator_id, title="Write report"):
    task = Task(title=title, creator_id=creator_id)
    session.add(task)
    await session.commit()
    await session.refresh(task)
    return task


class TestRecord:
    """Tests for appending log entries."""

    async def test_explicit_details_are_stored(self, session, manager):
        """Given details are written unchanged with the transition fields."""
        task = await _make_task(session, manager.id)
        service = ActivityService(session)

        await service.record(
            manager.id, Actions.UPDATE_TASK, EntityTypes.TASK, task.id,
            details="Updated title", field="title", old_value="Old", new_value="New"
        )

        logs = await ActivityLogRepository(session).list_all()
        assert len(logs) == 1
        assert logs[0].details == "Updated title"
        assert (logs[0].field, logs[0].old_value, logs[0].new_value) == ("title", "Old", "New")

    async def test_task_title_is_resolved_when_details_missing(self, session, manager):
        task = await _make_task(session, manager.id, title="Quarterly plan")

        await ActivityService(session).record(manager.id, Actions.CREATE_TASK, EntityTypes.TASK, task.id)

        logs = await ActivityLogRepository(session).list_all()
        assert logs[0].details == "Quarterly plan"

    async def test_missing_task_resolves_placeholder(self, session, manager):
        await ActivityService(session).record(manager.id, Actions.DELETE_TASK, EntityTypes.TASK, uuid.uuid4())

        logs = await ActivityLogRepository(session).list_all()
        assert logs[0].details == "Unknown Task"

    async def test_missing_project_resolves_placeholder(self, session, manager):
        await ActivityService(session).record(manager.id, Actions.DELETE_PROJECT, EntityTypes.PROJECT, uuid.uuid4())

        logs = await ActivityLogRepository(session).list_all()
        assert logs[0].details == "Unknown Project"

    async def test_request_entity_keeps_empty_details(self, session, manager):
        await ActivityService(session).record(manager.id, Actions.CANCEL_REQUEST, EntityTypes.REQUEST, uuid.uuid4())

        logs = await ActivityLogRepository(session).list_all()
        assert logs[0].details is None

    async def test_cross_references_follow_entity_type(self, session, manager):
        """task_id is set for task entries, project_id for project entries."""
        task = await _make_task(session, manager.id)
        project = Project(title="Launch", creator_id=manager.id)
        session.add(project)
        await session.commit()
        await session.refresh(project)
        service = ActivityService(session)

        await service.record(manager.id, Actions.CREATE_TASK, EntityTypes.TASK, task.id)
        await service.record(manager.id, Actions.CREATE_PROJECT, EntityTypes.PROJECT, project.id)

        repo = ActivityLogRepository(session)
        task_log = (await repo.get_by_entity(EntityTypes.TASK, task.id))[0]
        project_log = (await repo.get_by_entity(EntityTypes.PROJECT, project.id))[0]
        assert (task_log.task_id, task_log.project_id) == (task.id, None)
        assert (project_log.task_id, project_log.project_id) == (None, project.id)

    async def test_impact_is_wrapped_in_envelope(self, session, manager):
        task = await _make_task(session, manager.id)
        impact = Impact(type=ImpactType.LATE, label="2 Days Late")

        await ActivityService(session).record(
            manager.id, Actions.UPDATE_STATUS, EntityTypes.TASK, task.id,
            details="Status updated to COMPLETED", impact=impact
        )

        logs = await ActivityLogRepository(session).list_all()
        assert logs[0].details == (
            '{"text":"Status updated to COMPLETED","impact":{"type":"LATE","label":"2 Days Late"}}'
        )

    async def test_identical_calls_are_not_deduplicated(self, session, manager):
        """Two identical calls append two rows."""
        task = await _make_task(session, manager.id)
        service = ActivityService(session)
        repo = ActivityLogRepository(session)
        before = await repo.count()

        for _ in range(2):
            await service.record(manager.id, Actions.ADD_NOTE, EntityTypes.TASK, task.id, details="Manager note added")

        assert await repo.count() == before + 2

    async def test_store_failure_is_swallowed_and_logged(self, session, manager, caplog, monkeypatch):
        """A failing write never reaches the caller."""
        actor_id = manager.id
        service = ActivityService(session)

        async def broken_log(**kwargs):
            raise RuntimeError("database is gone")

        monkeypatch.setattr(service.activity_repo, "log", broken_log)

        with caplog.at_level(logging.ERROR, logger="tasktrail.services.activity_service"):
            result = await service.record(actor_id, Actions.CREATE_TASK, EntityTypes.REQUEST, uuid.uuid4())

        assert result is None
        assert "Failed to log activity" in caplog.text
        assert await ActivityLogRepository(session).count() == 0

    async def test_datetime_values_are_stored_as_iso(self, session, manager):
        task = await _make_task(session, manager.id)
        due = datetime(2024, 6, 1, 12, 0, tzinfo=timezone.utc)

        await ActivityService(session).record(
            manager.id, Actions.UPDATE_TASK, EntityTypes.TASK, task.id,
            details="Updated due_date", field="due_date", old_value=None, new_value=due
        )

        logs = await ActivityLogRepository(session).list_all()
        assert logs[0].old_value is None
        assert logs[0].new_value == "2024-06-01T12:00:00+00:00"


class TestTimestamps:
    """Tests for how entry times are written and read back."""

    async def test_created_at_round_trips_as_utc(self, session, manager):
        """A recorded entry is stored and comes back as the same UTC instant."""
        task = await _make_task(session, manager.id)
        before = utcnow()

        await ActivityService(session).record(manager.id, Actions.CREATE_TASK, EntityTypes.TASK, task.id)

        after = utcnow()
        session.expire_all()
        logs = await ActivityLogRepository(session).list_all()
        assert len(logs) == 1
        stored = to_utc(logs[0].created_at)
        assert before <= stored <= after

        entries = await HistoryService(session).list_entries(manager)
        assert entries[0].created_at == stored
        assert entries[0].created_at.utcoffset() == timedelta(0)

    def test_utcnow_is_aware(self):
        assert utcnow().tzinfo is not None

    def test_to_utc_converts_offsets(self):
        naive = datetime(2024, 6, 1, 12, 0)
        riyadh = datetime(2024, 6, 1, 15, 0, tzinfo=timezone(timedelta(hours=3)))

        assert to_utc(naive) == datetime(2024, 6, 1, 12, 0, tzinfo=timezone.utc)
        assert to_utc(riyadh) == datetime(2024, 6, 1, 12, 0, tzinfo=timezone.utc)
        assert to_utc(riyadh).tzinfo == timezone.utc
        assert to_utc(None) is None
