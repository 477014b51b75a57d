"""
Request service - work requests raised by members and decided by managers.
"""
import logging
import uuid
from typing import Optional, List, Tuple

from sqlmodel.ext.asyncio.session import AsyncSession

from tasktrail.core.exceptions import raise_not_found, raise_forbidden, raise_conflict, raise_invalid_choice
from tasktrail.core.permissions import is_manager, require_manager
from tasktrail.core.timeutils import to_utc
from tasktrail.models.activity import Actions, EntityTypes
from tasktrail.models.notification import NotificationTypes
from tasktrail.models.request import Request, RequestStatus
from tasktrail.models.task import TaskPriority, TaskStatus
from tasktrail.models.user import User
from tasktrail.repositories.request_repo import RequestRepository
from tasktrail.repositories.task_repo import TaskRepository
from tasktrail.repositories.user_repo import UserRepository
from tasktrail.schemas.request import RequestCreate, RequestDecision
from tasktrail.services.activity_service import ActivityService
from tasktrail.services.notification_service import NotificationService

logger = logging.getLogger(__name__)


class RequestService:
    """Service for request operations."""

    def __init__(self, session: AsyncSession):
        self.session = session
        self.request_repo = RequestRepository(session)
        self.task_repo = TaskRepository(session)
        self.user_repo = UserRepository(session)
        self.activity = ActivityService(session)
        self.notifications = NotificationService(session)

    async def get(self, request_id: uuid.UUID) -> Request:
        request = await self.request_repo.get(request_id)
        if not request:
            raise_not_found("Request", str(request_id))
        return request

    async def list(self, user: User) -> List[Request]:
        """Managers see every request; members see their own."""
        if is_manager(user):
            return await self.request_repo.list()
        return await self.request_repo.get_by_requester(user.id)

    async def create(self, user: User, request_data: RequestCreate) -> Request:
        """Raise a request and notify every manager."""
        requester_id, requester_name = user.id, user.name
        data = request_data.model_dump()
        data["due_date"] = to_utc(data["due_date"])
        data["requester_id"] = requester_id
        data["status"] = RequestStatus.PENDING

        request = await self.request_repo.create(data)
        request_id, is_urgent = request.id, request.is_urgent
        logger.info(f"Request {request_id} raised by {requester_id}")

        prefix = "URGENT: " if is_urgent else ""
        managers = await self.user_repo.list_managers()
        for manager_id in [manager.id for manager in managers]:
            await self.notifications.notify(
                manager_id,
                NotificationTypes.REQUEST,
                f"{prefix}New request from {requester_name}",
                request_id
            )

        return await self.get(request_id)

    async def decide(
        self,
        user: User,
        request_id: uuid.UUID,
        decision: RequestDecision
    ) -> Tuple[Request, Optional[uuid.UUID]]:
        """
        Approve or reject a pending request.
        Approval turns the request into a task assigned to the requester.
        Returns the request and the id of the created task, if any.
        """
        require_manager(user, "Only managers can decide requests")
        if decision.status not in RequestStatus.DECISIONS:
            raise_invalid_choice("decision", decision.status, RequestStatus.DECISIONS)

        request = await self.get(request_id)
        if request.status != RequestStatus.PENDING:
            raise_conflict(f"Request is already {request.status}")

        actor_id = user.id
        comment = decision.comment or None
        title, description = request.title, request.description
        requester_id, is_urgent, due_date = request.requester_id, request.is_urgent, request.due_date

        await self.request_repo.update(request_id, {
            "status": decision.status,
            "manager_comment": comment,
        })
        logger.info(f"Request {request_id} {decision.status} by {actor_id}")

        task_id = None
        if decision.status == RequestStatus.APPROVED:
            task = await self.task_repo.create({
                "title": title,
                "description": description,
                "priority": TaskPriority.URGENT if is_urgent else TaskPriority.MEDIUM,
                "status": TaskStatus.NEW,
                "creator_id": actor_id,
                "assignee_id": requester_id,
                "due_date": due_date,
            })
            task_id = task.id
            await self.activity.record(actor_id, Actions.CREATE_TASK, EntityTypes.TASK, task_id, details=title)

            details = f"Converted to Task {task_id}"
            if comment:
                details += f" | Comment: {comment}"
            await self.activity.record(actor_id, Actions.APPROVE_REQUEST, EntityTypes.REQUEST, request_id, details=details)
        else:
            await self.activity.record(
                actor_id, Actions.REJECT_REQUEST, EntityTypes.REQUEST, request_id,
                details=f"Rejected: {comment or 'No reason'}"
            )

        message = f'Your request "{title}" was {decision.status.lower()}'
        if comment:
            message += f": {comment}"
        await self.notifications.notify(requester_id, NotificationTypes.REQUEST_UPDATE, message, task_id or request_id)

        return await self.get(request_id), task_id

    async def cancel(self, user: User, request_id: uuid.UUID) -> None:
        """Withdraw one's own pending request."""
        request = await self.get(request_id)
        if request.requester_id != user.id:
            raise_forbidden("Only the requester can cancel this request")
        if request.status != RequestStatus.PENDING:
            raise_conflict("Only pending requests can be cancelled")

        actor_id, title = user.id, request.title
        await self.request_repo.delete(request_id)
        await self.activity.record(
            actor_id, Actions.CANCEL_REQUEST, EntityTypes.REQUEST, request_id,
            details=f"Cancelled request: {title}"
        )
        logger.info(f"Request {request_id} cancelled by {actor_id}")
