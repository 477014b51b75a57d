"""
Activity log model - audit trail for all actions.
The log is the only history of tasks and projects; rows are appended and never edited.
"""
import uuid
from datetime import datetime
from typing import Optional

from sqlmodel import SQLModel, Field

from tasktrail.core.timeutils import utcnow, UTC_DATETIME


class ActivityLog(SQLModel, table=True):
    """
    Activity log for tracking every mutating action.
    Used for the audit trail, the grouped history timeline and manager statistics.

    user_id, entity_id, task_id and project_id are soft references: deleting the
    user or the entity leaves the history intact.
    """
    __tablename__ = "activity_log"

    id: uuid.UUID = Field(default_factory=uuid.uuid4, primary_key=True)
    user_id: uuid.UUID = Field(index=True)

    # Action details
    action: str = Field(index=True)  # CREATE_TASK, UPDATE_STATUS, ...
    entity_type: str = Field(index=True)  # TASK, PROJECT, REQUEST
    entity_id: uuid.UUID = Field(index=True)

    # Plain text, or a JSON envelope {"text": ..., "impact": {...}}
    details: Optional[str] = None

    # Single attribute transition, absent for create/delete style actions
    field: Optional[str] = None
    old_value: Optional[str] = None
    new_value: Optional[str] = None

    # Cross references derived from entity_type
    task_id: Optional[uuid.UUID] = Field(default=None, index=True)
    project_id: Optional[uuid.UUID] = Field(default=None, index=True)

    created_at: datetime = Field(default_factory=utcnow, sa_type=UTC_DATETIME, index=True)


class EntityTypes:
    TASK = "TASK"
    PROJECT = "PROJECT"
    REQUEST = "REQUEST"


# Action constants for consistency
class Actions:
    # Task actions
    CREATE_TASK = "CREATE_TASK"
    UPDATE_TASK = "UPDATE_TASK"
    UPDATE_STATUS = "UPDATE_STATUS"
    DELETE_TASK = "DELETE_TASK"
    DUPLICATE_TASK = "DUPLICATE_TASK"
    REASSIGN_TASK = "REASSIGN_TASK"
    ADD_NOTE = "ADD_NOTE"
    ADD_COMMENT = "ADD_COMMENT"

    # Project actions
    CREATE_PROJECT = "CREATE_PROJECT"
    UPDATE_PROJECT = "UPDATE_PROJECT"
    ADD_MEMBER = "ADD_MEMBER"
    REMOVE_MEMBER = "REMOVE_MEMBER"
    DELETE_PROJECT = "DELETE_PROJECT"

    # Request actions
    APPROVE_REQUEST = "APPROVE_REQUEST"
    REJECT_REQUEST = "REJECT_REQUEST"
    CANCEL_REQUEST = "CANCEL_REQUEST"


# Sentence templates for the history timeline.
# Placeholders: user, text, field, old_value, new_value
ACTION_TEMPLATES = {
    Actions.CREATE_TASK: '{user} created task "{text}"',
    Actions.UPDATE_TASK: '{user} changed {field} from "{old_value}" to "{new_value}"',
    Actions.UPDATE_STATUS: "{user} changed status from {old_value} to {new_value}",
    Actions.DELETE_TASK: "{user} deleted a task",
    Actions.DUPLICATE_TASK: "{user} duplicated a task",
    Actions.REASSIGN_TASK: "{user} reassigned a task to {new_value}",
    Actions.ADD_NOTE: "{user} added a manager note",
    Actions.ADD_COMMENT: "{user} commented on a task",
    Actions.CREATE_PROJECT: '{user} created project "{text}"',
    Actions.UPDATE_PROJECT: "{user} updated project details",
    Actions.ADD_MEMBER: "{user} added a member to a project",
    Actions.REMOVE_MEMBER: "{user} removed a member from a project",
    Actions.DELETE_PROJECT: "{user} deleted a project",
    Actions.APPROVE_REQUEST: "{user} approved a request",
    Actions.REJECT_REQUEST: "{user} rejected a request",
    Actions.CANCEL_REQUEST: "{user} cancelled a request",
}
