"""Route Translator - Local REST operations to remote RPC calls.

Each builder returns a ``RemoteCall`` (method name plus params) and performs
no I/O, so the whole mapping is testable without a server or network.

Params never contain a key the caller did not supply. A body key that is
missing is dropped; a body key explicitly set to JSON ``null`` is forwarded as
``null``, because the remote treats "absent" and "null" differently.
"""

from __future__ import annotations

import re
from collections.abc import Mapping
from dataclasses import dataclass, field
from typing import Any

DEFAULT_LIST_LIMIT = 100
DEFAULT_CREATE_STATUS = "open"

# Body fields forwarded on create and update, in outbound order.
TASK_FIELDS: tuple[str, ...] = (
    "title",
    "description",
    "status",
    "repoURL",
    "dependsOn",
    "parentID",
)

_LEADING_INT = re.compile(r"^\s*([+-]?\d+)")


class _Absent:
    """Marker for a field the caller did not send."""

    def __repr__(self) -> str:
        return "ABSENT"

    def __bool__(self) -> bool:
        return False


ABSENT: Any = _Absent()


@dataclass(frozen=True)
class RemoteCall:
    """A remote method invocation and the local status code for success."""

    method: str
    params: dict[str, Any] = field(default_factory=dict)
    success_status: int = 200


# =============================================================================
# Helpers
# =============================================================================


def strip_absent(params: Mapping[str, Any]) -> dict[str, Any]:
    """Return a copy of ``params`` without keys whose value is ``ABSENT``."""
    return {key: value for key, value in params.items() if value is not ABSENT}


def parse_limit(raw: str | None) -> int:
    """Parse the ``limit`` query parameter.

    Leading digits are honoured (``"25abc"`` is 25). Anything without leading
    digits, and a limit of 0, fall back to ``DEFAULT_LIST_LIMIT``.
    """
    if raw is None:
        return DEFAULT_LIST_LIMIT
    match = _LEADING_INT.match(raw)
    if not match:
        return DEFAULT_LIST_LIMIT
    return int(match.group(1)) or DEFAULT_LIST_LIMIT


def parse_ready(raw: str | None) -> bool:
    """Only the literal string ``"true"`` enables the ready filter."""
    return raw == "true"


def _is_blank(value: Any) -> bool:
    """Missing, null, empty string, zero and false all mean "not given".

    Empty lists and objects are values and are forwarded.
    """
    if value is ABSENT or value is None:
        return True
    if isinstance(value, (str, int, float)):
        return not value
    return False


def _task_fields(body: Mapping[str, Any]) -> dict[str, Any]:
    return {name: body.get(name, ABSENT) for name in TASK_FIELDS}


# =============================================================================
# Operation Builders
# =============================================================================


def list_tasks_call(
    limit: str | None = None,
    status: str | None = None,
    repo_url: str | None = None,
    ready: str | None = None,
) -> RemoteCall:
    """``GET /api/tasks`` from raw query string values."""
    params: dict[str, Any] = {"limit": parse_limit(limit)}
    if status:
        params["status"] = status
    if repo_url:
        params["repoURL"] = repo_url
    if parse_ready(ready):
        params["ready"] = True
    return RemoteCall("listTasks", params)


def get_task_call(task_id: str) -> RemoteCall:
    """``GET /api/tasks/{id}``."""
    return RemoteCall("getTask", {"taskID": task_id})


def create_task_call(body: Mapping[str, Any]) -> RemoteCall:
    """``POST /api/tasks``. ``status`` defaults to ``"open"`` when not given."""
    fields = _task_fields(body)
    if _is_blank(fields["status"]):
        fields["status"] = DEFAULT_CREATE_STATUS
    return RemoteCall("createTask", strip_absent(fields), success_status=201)


def update_task_call(task_id: str, body: Mapping[str, Any]) -> RemoteCall:
    """``PUT /api/tasks/{id}``. No defaults are applied."""
    params = {"taskID": task_id, **_task_fields(body)}
    return RemoteCall("updateTask", strip_absent(params))


def delete_task_call(task_id: str) -> RemoteCall:
    """``DELETE /api/tasks/{id}``. The remote performs a soft delete."""
    return RemoteCall("deleteTask", {"taskID": task_id})
