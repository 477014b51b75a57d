"""
History grouping - turns raw log rows into the timeline shown on the history page.

Everything here is pure: entries in, views out. Filtering runs before grouping,
and the CSV export uses the filtered entries before they are grouped.
"""
import csv
import io
from datetime import date, timedelta
from typing import Iterable, List, Optional
import uuid

from tasktrail.core.timeutils import to_utc
from tasktrail.models.activity import ActivityLog, ACTION_TEMPLATES
from tasktrail.models.user import User
from tasktrail.schemas.activity import (
    ActivityEntry,
    ActivityUser,
    LogGroup,
    StructuredDetails,
    parse_details,
)

DEFAULT_GROUP_WINDOW = timedelta(minutes=10)

CSV_FIELDS = ["Date", "User", "Action", "Target", "Details"]


def describe_action(
    action: str,
    user_name: str,
    text: str = "",
    field: Optional[str] = None,
    old_value: Optional[str] = None,
    new_value: Optional[str] = None
) -> str:
    """One sentence for a log row, e.g. 'Maha changed status from NEW to COMPLETED'."""
    template = ACTION_TEMPLATES.get(action)
    if template is None:
        return f"{user_name} performed {action.replace('_', ' ').lower()}"
    return template.format(
        user=user_name,
        text=text or "",
        field=field or "details",
        old_value=old_value if old_value is not None else "none",
        new_value=new_value if new_value is not None else "none",
    )


def build_entry(log: ActivityLog, user: Optional[User] = None) -> ActivityEntry:
    """Attach the resolved actor and the parsed details to a log row."""
    actor = ActivityUser(id=user.id, name=user.name, avatar_url=user.avatar_url) if user else ActivityUser()
    parsed = parse_details(log.details)
    return ActivityEntry(
        id=log.id,
        user_id=log.user_id,
        user=actor,
        action=log.action,
        entity_type=log.entity_type,
        entity_id=log.entity_id,
        details=log.details,
        text=parsed.text,
        impact=parsed.impact if isinstance(parsed, StructuredDetails) else None,
        field=log.field,
        old_value=log.old_value,
        new_value=log.new_value,
        task_id=log.task_id,
        project_id=log.project_id,
        created_at=to_utc(log.created_at),
        summary=describe_action(
            log.action, actor.name, parsed.text, log.field, log.old_value, log.new_value
        ),
    )


def filter_entries(
    entries: Iterable[ActivityEntry],
    search: Optional[str] = None,
    user_id: Optional[uuid.UUID] = None
) -> List[ActivityEntry]:
    """
    Keep entries matching the search term and the actor filter.
    The search is a case-insensitive substring match on action, entity type
    and the display text of the details.
    """
    term = (search or "").lower()
    matched = []
    for entry in entries:
        if user_id is not None and entry.user_id != user_id:
            continue
        if term and not (
            term in entry.action.lower()
            or term in entry.entity_type.lower()
            or term in entry.text.lower()
        ):
            continue
        matched.append(entry)
    return matched


def _belongs(last: ActivityEntry, entry: ActivityEntry, window: timedelta) -> bool:
    return (
        entry.user_id == last.user_id
        and entry.entity_type == last.entity_type
        and entry.entity_id == last.entity_id
        and abs(entry.created_at - last.created_at) <= window
    )


def _close(items: List[ActivityEntry]) -> LogGroup:
    first = items[0]
    times = [item.created_at for item in items]
    return LogGroup(
        id=first.id,
        user_id=first.user_id,
        user=first.user,
        entity_type=first.entity_type,
        entity_id=first.entity_id,
        items=items,
        start_time=min(times),
        end_time=max(times),
    )


def group_entries(
    entries: Iterable[ActivityEntry],
    window: timedelta = DEFAULT_GROUP_WINDOW
) -> List[LogGroup]:
    """
    Collapse runs of entries by the same actor on the same entity.

    Entries are taken in the order given (the log is read newest first). Each
    entry is compared with the entry merged just before it, so a long run of
    closely spaced edits stays one group even if it spans more than the window.
    """
    groups = []
    current: List[ActivityEntry] = []

    for entry in entries:
        if current and _belongs(current[-1], entry, window):
            current.append(entry)
            continue
        if current:
            groups.append(_close(current))
        current = [entry]

    if current:
        groups.append(_close(current))
    return groups


def export_csv(entries: Iterable[ActivityEntry]) -> str:
    """Export log entries to CSV format, one row per entry."""
    output = io.StringIO()
    writer = csv.DictWriter(output, fieldnames=CSV_FIELDS)
    writer.writeheader()

    for entry in entries:
        writer.writerow({
            "Date": entry.created_at.isoformat(),
            "User": entry.user.name,
            "Action": entry.action,
            "Target": f"{entry.entity_type}: {entry.entity_id}",
            "Details": entry.text,
        })

    return output.getvalue()


def export_filename(today: date) -> str:
    return f"audit-log-{today.isoformat()}.csv"
