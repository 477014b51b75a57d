"""
Activity log schemas.
Covers the details envelope stored on each log row and the history views built from the log.
"""
import json
import uuid
from datetime import datetime
from enum import Enum
from typing import Annotated, List, Literal, Optional, Union

from pydantic import BaseModel, Field, ValidationError, computed_field


class ImpactType(str, Enum):
    LATE = "LATE"
    ON_TIME = "ON_TIME"
    RISK_HIGH = "RISK_HIGH"
    RISK_RESOLVED = "RISK_RESOLVED"


class Impact(BaseModel):
    """Verdict attached to a task transition, frozen in the log when recorded."""
    type: ImpactType
    label: str


# Details envelope
class PlainDetails(BaseModel):
    kind: Literal["plain"] = "plain"
    text: str = ""


class StructuredDetails(BaseModel):
    kind: Literal["structured"] = "structured"
    text: str
    impact: Impact


Details = Annotated[Union[PlainDetails, StructuredDetails], Field(discriminator="kind")]


def serialize_details(text: Optional[str], impact: Optional[Impact] = None) -> Optional[str]:
    """
    Build the stored details column.
    Without impact the text is stored as is; with impact it becomes a compact
    JSON object {"text": ..., "impact": {"type": ..., "label": ...}}.
    """
    if impact is None:
        return text
    envelope = {
        "text": text,
        "impact": {"type": impact.type.value, "label": impact.label},
    }
    return json.dumps(envelope, separators=(",", ":"), ensure_ascii=False)


def parse_details(raw: Optional[str]) -> Details:
    """
    Read the stored details column back.

    Anything that is not a JSON object is plain text, including strings that
    merely start with "{" but fail to parse.
    """
    if raw is None:
        return PlainDetails(text="")
    if not raw.startswith("{"):
        return PlainDetails(text=raw)

    try:
        parsed = json.loads(raw)
    except ValueError:
        return PlainDetails(text=raw)
    if not isinstance(parsed, dict):
        return PlainDetails(text=raw)

    text = parsed.get("text") or "No details"
    if not isinstance(text, str):
        text = str(text)

    impact = parsed.get("impact")
    if not impact:
        return PlainDetails(text=text)
    try:
        return StructuredDetails(text=text, impact=Impact.model_validate(impact))
    except ValidationError:
        return PlainDetails(text=text)


def details_text(raw: Optional[str]) -> str:
    """Display text of a stored details column."""
    return parse_details(raw).text


def details_impact(raw: Optional[str]) -> Optional[Impact]:
    parsed = parse_details(raw)
    return parsed.impact if isinstance(parsed, StructuredDetails) else None


# History views
class ActivityUser(BaseModel):
    """Actor as shown next to a log row."""
    id: Optional[uuid.UUID] = None
    name: str = "Unknown"
    avatar_url: Optional[str] = None


class ActivityEntry(BaseModel):
    """One log row with its actor resolved and its details parsed."""
    id: uuid.UUID
    user_id: uuid.UUID
    user: ActivityUser
    action: str
    entity_type: str
    entity_id: uuid.UUID
    details: Optional[str] = None
    text: str = ""
    impact: Optional[Impact] = None
    field: Optional[str] = None
    old_value: Optional[str] = None
    new_value: Optional[str] = None
    task_id: Optional[uuid.UUID] = None
    project_id: Optional[uuid.UUID] = None
    created_at: datetime
    summary: str = ""


class LogGroup(BaseModel):
    """
    Run of consecutive entries by one actor on one entity.
    start_time and end_time are the earliest and latest item timestamps.
    """
    id: uuid.UUID
    user_id: uuid.UUID
    user: ActivityUser
    entity_type: str
    entity_id: uuid.UUID
    items: List[ActivityEntry]
    start_time: datetime
    end_time: datetime

    @computed_field
    @property
    def is_single(self) -> bool:
        return len(self.items) == 1

    @computed_field
    @property
    def label(self) -> str:
        """Row caption: the event itself, or "N updates" for a collapsed run."""
        if self.is_single:
            return self.items[0].summary
        return f"{len(self.items)} updates"


class Contributor(BaseModel):
    user_id: uuid.UUID
    name: str = "Unknown"
    avatar_url: Optional[str] = None
    count: int


class HistoryStats(BaseModel):
    """Rolling window statistics for the manager dashboard."""
    total_activities: int = 0
    top_contributors: List[Contributor] = []
    late_completions: int = 0


class CompletionMetrics(BaseModel):
    completed: int = 0
    on_time: int = 0
    late: int = 0
    on_time_rate: int = 0
    late_rate: int = 0
