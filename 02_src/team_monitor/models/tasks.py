"""Task data models."""

from enum import Enum
from typing import Any

from pydantic import ConfigDict, Field

from .base import RecordModel
from .errors import RecordParseError


class TaskStatus(str, Enum):
    """Task lifecycle states."""

    PENDING = "pending"
    IN_PROGRESS = "in_progress"
    COMPLETED = "completed"
    DELETED = "deleted"


class Task(RecordModel):
    """A unit of work tracked for a team, one file per task."""

    model_config = ConfigDict(populate_by_name=True, extra="ignore")

    id: str
    subject: str = ""
    status: TaskStatus
    description: str = ""
    active_form: str | None = Field(default=None, alias="activeForm")
    owner: str | None = None
    blocks: list[str] = Field(default_factory=list)
    blocked_by: list[str] = Field(default_factory=list, alias="blockedBy")
    metadata: dict[str, Any] | None = None

    @classmethod
    def from_dict(cls, data: Any, task_id: str) -> "Task":
        """Build a Task; ``task_id`` comes from the file name and wins over any ``id`` field."""
        if not isinstance(data, dict):
            raise RecordParseError("task must be a JSON object")
        return super().from_dict({**data, "id": task_id})
