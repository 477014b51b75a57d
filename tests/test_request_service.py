"""
Tests for work requests: raising, deciding and cancelling.
"""

import pytest
from fastapi import HTTPException

from tasktrail.models.activity import Actions, EntityTypes
from tasktrail.models.notification import NotificationTypes
from tasktrail.models.request import RequestStatus
from tasktrail.models.task import TaskPriority
from tasktrail.repositories.activity_repo import ActivityLogRepository
from tasktrail.repositories.notification_repo import NotificationRepository
from tasktrail.schemas.request import RequestCreate, RequestDecision
from tasktrail.services.request_service import RequestService
from tasktrail.services.task_service import TaskService


async def request_log(session, request_id):
    logs = await ActivityLogRepository(session).get_by_entity(EntityTypes.REQUEST, request_id)
    return logs[0] if logs else None


class TestCreateAndList:

    async def test_managers_are_notified(self, session, manager, member, make_user):
        second_manager = await make_user("Omar", role="MANAGER")
        service = RequestService(session)

        request = await service.create(member, RequestCreate(title="New laptop", is_urgent=True))

        assert request.status == RequestStatus.PENDING
        for manager_id in (manager.id, second_manager.id):
            notes = await NotificationRepository(session).get_latest(manager_id, 10)
            assert notes[0].type == NotificationTypes.REQUEST
            assert notes[0].message == "URGENT: New request from Faris"

    async def test_members_only_see_their_own(self, session, manager, member, other_member):
        service = RequestService(session)
        await service.create(member, RequestCreate(title="Mine"))
        await service.create(other_member, RequestCreate(title="Theirs"))

        assert [r.title for r in await service.list(member)] == ["Mine"]
        assert len(await service.list(manager)) == 2


class TestDecide:
    """Tests for approving and rejecting."""

    async def test_approval_creates_assigned_task(self, session, manager, member):
        service = RequestService(session)
        request = await service.create(member, RequestCreate(title="Fix login", is_urgent=True))

        decided, task_id = await service.decide(
            manager, request.id, RequestDecision(status=RequestStatus.APPROVED, comment="Go ahead")
        )

        assert decided.status == RequestStatus.APPROVED
        assert decided.manager_comment == "Go ahead"
        task = await TaskService(session).get(task_id)
        assert (task.title, task.assignee_id, task.priority) == ("Fix login", member.id, TaskPriority.URGENT)

        log = await request_log(session, request.id)
        assert log.action == Actions.APPROVE_REQUEST
        assert log.details == f"Converted to Task {task_id} | Comment: Go ahead"

        notes = await NotificationRepository(session).get_latest(member.id, 10)
        assert notes[0].type == NotificationTypes.REQUEST_UPDATE
        assert notes[0].message == 'Your request "Fix login" was approved: Go ahead'

    async def test_rejection_without_comment(self, session, manager, member):
        service = RequestService(session)
        request = await service.create(member, RequestCreate(title="Day off"))

        decided, task_id = await service.decide(manager, request.id, RequestDecision(status=RequestStatus.REJECTED))

        assert task_id is None
        assert decided.status == RequestStatus.REJECTED
        log = await request_log(session, request.id)
        assert (log.action, log.details) == (Actions.REJECT_REQUEST, "Rejected: No reason")

    async def test_cannot_decide_twice(self, session, manager, member):
        service = RequestService(session)
        request = await service.create(member, RequestCreate(title="Once"))
        await service.decide(manager, request.id, RequestDecision(status=RequestStatus.REJECTED))

        with pytest.raises(HTTPException) as exc:
            await service.decide(manager, request.id, RequestDecision(status=RequestStatus.APPROVED))
        assert exc.value.status_code == 409

    async def test_member_cannot_decide(self, session, member, other_member):
        service = RequestService(session)
        request = await service.create(member, RequestCreate(title="Self approve"))

        with pytest.raises(HTTPException) as exc:
            await service.decide(other_member, request.id, RequestDecision(status=RequestStatus.APPROVED))
        assert exc.value.status_code == 403

    async def test_invalid_decision(self, session, manager, member):
        service = RequestService(session)
        request = await service.create(member, RequestCreate(title="Maybe"))

        with pytest.raises(HTTPException) as exc:
            await service.decide(manager, request.id, RequestDecision(status="MAYBE"))
        assert exc.value.status_code == 422


class TestCancel:

    async def test_requester_cancels_pending(self, session, member):
        service = RequestService(session)
        request = await service.create(member, RequestCreate(title="Never mind"))
        request_id = request.id

        await service.cancel(member, request_id)

        log = await request_log(session, request_id)
        assert (log.action, log.details) == (Actions.CANCEL_REQUEST, "Cancelled request: Never mind")
        assert await service.list(member) == []

    async def test_only_requester_can_cancel(self, session, member, other_member):
        service = RequestService(session)
        request = await service.create(member, RequestCreate(title="Mine"))

        with pytest.raises(HTTPException) as exc:
            await service.cancel(other_member, request.id)
        assert exc.value.status_code == 403

    async def test_decided_request_cannot_be_cancelled(self, session, manager, member):
        service = RequestService(session)
        request = await service.create(member, RequestCreate(title="Done deal"))
        await service.decide(manager, request.id, RequestDecision(status=RequestStatus.APPROVED))

        with pytest.raises(HTTPException) as exc:
            await service.cancel(member, request.id)
        assert exc.value.status_code == 409
