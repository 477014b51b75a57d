"""
Role checks shared by the services.
Managers run the team; members work on what is assigned to them.
"""
from tasktrail.core.exceptions import raise_forbidden
from tasktrail.models.user import User, Roles
from tasktrail.models.task import Task


def is_manager(user: User) -> bool:
    return user.role == Roles.MANAGER


def require_manager(user: User, message: str = "Only managers can do this") -> None:
    """Raise 403 unless the user is a manager."""
    if not is_manager(user):
        raise_forbidden(message)


def can_edit_task(user: User, task: Task) -> bool:
    """Managers may edit any task; members only the ones assigned to them."""
    return is_manager(user) or task.assignee_id == user.id
