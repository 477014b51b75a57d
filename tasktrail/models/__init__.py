# Models package - database tables
from tasktrail.models.user import User
from tasktrail.models.project import Project, ProjectMember
from tasktrail.models.task import Task, Comment, ManagerNote
from tasktrail.models.request import Request
from tasktrail.models.notification import Notification
from tasktrail.models.activity import ActivityLog
