"""Task API routes.

Each handler translates the local request into a ``RemoteCall`` and forwards
it through the ``RemoteClient`` stored on ``app.state``. Successful responses
echo the remote envelope unchanged. Errors are raised, not rendered here; the
handlers in ``server.py`` turn them into ``{"ok": false, "error": ...}`` bodies.
"""

from __future__ import annotations

import re
from datetime import datetime, timezone
from typing import Any

from fastapi import APIRouter, Request
from fastapi.responses import JSONResponse

from ..core.exceptions import InvalidRequestBodyError
from ..core.remote import RemoteClient, loads_json
from ..core.translator import (
    RemoteCall,
    create_task_call,
    delete_task_call,
    get_task_call,
    list_tasks_call,
    update_task_call,
)

router = APIRouter(prefix="/api")

# Allowed verbs for the known task paths, used for explicit 405 answers.
_COLLECTION_PATH = re.compile(r"^/api/tasks/?$")
_ITEM_PATH = re.compile(r"^/api/tasks/[^/]+/?$")
_HEALTH_PATH = re.compile(r"^/api/health/?$")
COLLECTION_METHODS = ("GET", "POST", "OPTIONS")
ITEM_METHODS = ("GET", "PUT", "DELETE", "OPTIONS")
HEALTH_METHODS = ("GET", "OPTIONS")
_ALLOWED_METHODS = (
    (_COLLECTION_PATH, COLLECTION_METHODS),
    (_ITEM_PATH, ITEM_METHODS),
    (_HEALTH_PATH, HEALTH_METHODS),
)


# =============================================================================
# Helpers
# =============================================================================


def utc_timestamp() -> str:
    """Current UTC time as ISO-8601 with milliseconds and a ``Z`` suffix."""
    now = datetime.now(timezone.utc)
    return now.isoformat(timespec="milliseconds").replace("+00:00", "Z")


async def read_json_body(request: Request) -> dict[str, Any]:
    """Parse the request body as a JSON object. An empty body is ``{}``.

    Raises:
        InvalidRequestBodyError: If the body is not valid JSON or not an object.
    """
    raw = await request.body()
    if not raw.strip():
        return {}
    try:
        body = loads_json(raw)
    except ValueError as e:
        raise InvalidRequestBodyError(str(e)) from e
    if not isinstance(body, dict):
        raise InvalidRequestBodyError(f"Expected a JSON object, got {type(body).__name__}")
    return body


async def forward(request: Request, call: RemoteCall) -> JSONResponse:
    """Send a translated call to the remote and echo its envelope."""
    remote: RemoteClient = request.app.state.remote_client
    envelope = await remote.call(call.method, call.params)
    return JSONResponse(envelope.raw, status_code=call.success_status)


def error_body(message: str) -> dict[str, Any]:
    return {"ok": False, "error": message}


# =============================================================================
# Health
# =============================================================================


@router.get("/health")
@router.get("/health/", include_in_schema=False)
async def health() -> dict[str, Any]:
    """Liveness check. Does not contact the remote."""
    return {"ok": True, "timestamp": utc_timestamp()}


# =============================================================================
# Tasks
# =============================================================================


@router.get("/tasks")
@router.get("/tasks/", include_in_schema=False)
async def list_tasks(
    request: Request,
    limit: str | None = None,
    status: str | None = None,
    repoURL: str | None = None,  # noqa: N803
    ready: str | None = None,
) -> JSONResponse:
    """List tasks. Query values are passed raw so malformed ones fall back to defaults."""
    return await forward(
        request, list_tasks_call(limit=limit, status=status, repo_url=repoURL, ready=ready)
    )


@router.post("/tasks")
@router.post("/tasks/", include_in_schema=False)
async def create_task(request: Request) -> JSONResponse:
    body = await read_json_body(request)
    return await forward(request, create_task_call(body))


@router.get("/tasks/{task_id}")
@router.get("/tasks/{task_id}/", include_in_schema=False)
async def get_task(request: Request, task_id: str) -> JSONResponse:
    return await forward(request, get_task_call(task_id))


@router.put("/tasks/{task_id}")
@router.put("/tasks/{task_id}/", include_in_schema=False)
async def update_task(request: Request, task_id: str) -> JSONResponse:
    body = await read_json_body(request)
    return await forward(request, update_task_call(task_id, body))


@router.delete("/tasks/{task_id}")
@router.delete("/tasks/{task_id}/", include_in_schema=False)
async def delete_task(request: Request, task_id: str) -> JSONResponse:
    return await forward(request, delete_task_call(task_id))


# =============================================================================
# Unmatched API paths
# =============================================================================


@router.api_route(
    "/{rest:path}",
    methods=["GET", "HEAD", "POST", "PUT", "PATCH", "DELETE"],
    include_in_schema=False,
)
async def unmatched_api_route(request: Request, rest: str) -> JSONResponse:
    """Answer API paths no handler claims: 405 on known task paths, else 404."""
    path = request.url.path
    for pattern, allowed in _ALLOWED_METHODS:
        if pattern.match(path):
            return JSONResponse(
                error_body("Method Not Allowed"),
                status_code=405,
                headers={"Allow": ", ".join(allowed)},
            )
    return JSONResponse(error_body("Not Found"), status_code=404)
