"""
Completion impact - on-time / late verdict for a task reaching COMPLETED.
"""
from datetime import datetime, timedelta
from typing import Optional

from tasktrail.core.timeutils import to_utc
from tasktrail.schemas.activity import Impact, ImpactType

_DAY = timedelta(days=1)


def late_label(days: int) -> str:
    return f"{days} Day{'s' if days > 1 else ''} Late"


def classify_completion(
    due_date: Optional[datetime],
    completed_at: datetime
) -> Optional[Impact]:
    """
    Classify a completion against the task's due date.

    Returns None when the task has no due date. Completing exactly at the due
    instant is on time; any lateness counts as whole days rounded up.
    """
    if due_date is None:
        return None

    due = to_utc(due_date)
    done = to_utc(completed_at)

    if done > due:
        elapsed = done - due
        # Ceiling division on timedeltas stays exact at microsecond resolution
        days = -(-elapsed // _DAY)
        return Impact(type=ImpactType.LATE, label=late_label(days))

    return Impact(type=ImpactType.ON_TIME, label="On Time")
