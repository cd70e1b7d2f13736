"""Task Models - Shape of the tasks owned by the remote service.

The gateway forwards task payloads untouched; these models exist for the CLI,
which renders remote results as tables. Unknown fields are kept so newer remote
versions do not break rendering.
"""

from __future__ import annotations

from enum import Enum
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, ValidationError


class TaskStatus(str, Enum):
    """Remote task status values."""

    OPEN = "open"
    IN_PROGRESS = "in_progress"
    COMPLETED = "completed"


class Task(BaseModel):
    """A task as returned by the remote API."""

    model_config = ConfigDict(extra="allow", coerce_numbers_to_str=True)

    id: str
    userID: str | None = None
    repoURL: str | None = None
    title: str = ""
    description: str | None = None
    status: TaskStatus | str = Field(default=TaskStatus.OPEN, union_mode="left_to_right")
    dependsOn: list[str] = Field(default_factory=list)
    parentID: str | None = None
    createdAt: str | None = None
    updatedAt: str | None = None
    deletedAt: str | None = None

    @property
    def is_deleted(self) -> bool:
        """True when the remote soft-deleted this task."""
        return self.deletedAt is not None

    @property
    def status_value(self) -> str:
        return self.status.value if isinstance(self.status, TaskStatus) else str(self.status)


def tasks_from_data(data: Any) -> list[Task]:
    """Extract tasks from the ``data`` member of a remote envelope.

    Accepts a bare list, a single task object, or an object wrapping the list
    under ``tasks`` or ``items``. Entries without an ``id``, or that do not fit
    the model, are skipped.
    """
    if isinstance(data, dict):
        for key in ("tasks", "items"):
            if isinstance(data.get(key), list):
                data = data[key]
                break
        else:
            data = [data]

    if not isinstance(data, list):
        return []

    tasks = []
    for item in data:
        if not isinstance(item, dict) or "id" not in item:
            continue
        try:
            tasks.append(Task.model_validate(item))
        except ValidationError:
            continue
    return tasks
