"""FastAPI app factory and server runner.

The app has three layers:

- an HTTP middleware that answers every ``OPTIONS`` request with 204, stamps
  the CORS headers on every response, and turns any unexpected exception into
  a JSON 500;
- exception handlers mapping ``GatewayError`` subclasses to status codes via
  ``status_code_for()``;
- the task router, then a catch-all that serves the static front-end.
"""

from __future__ import annotations

import logging
from collections.abc import Awaitable, Callable

import httpx
from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse, PlainTextResponse, Response
from starlette.exceptions import HTTPException as StarletteHTTPException

from .. import __version__
from ..core.config import GatewayConfig
from ..core.credentials import CredentialResolver
from ..core.exceptions import GatewayError, StaticFileNotFoundError, status_code_for
from ..core.logger import configure_logging
from ..core.remote import RemoteClient
from .routes import error_body, router
from .static import read_static_file

logger = logging.getLogger(__name__)

CORS_HEADERS: dict[str, str] = {
    "Access-Control-Allow-Origin": "*",
    "Access-Control-Allow-Methods": "GET, POST, PUT, DELETE, OPTIONS",
    "Access-Control-Allow-Headers": "Content-Type, Authorization",
}


def render_error(error: Exception) -> Response:
    """Render an error as the response a local client sees."""
    if isinstance(error, StaticFileNotFoundError):
        return PlainTextResponse("Not Found", status_code=404)

    status_code = status_code_for(error)
    message = error.message if isinstance(error, GatewayError) else str(error)
    if status_code >= 500:
        logger.error(f"Error: {error}", exc_info=not isinstance(error, GatewayError))
    else:
        logger.warning(f"Error: {error}")
    return JSONResponse(error_body(message), status_code=status_code)


def create_app(
    config: GatewayConfig | None = None,
    remote_client: RemoteClient | None = None,
    credentials: CredentialResolver | None = None,
    transport: httpx.AsyncBaseTransport | None = None,
) -> FastAPI:
    """Create the gateway application.

    Args:
        config: Gateway settings. Defaults to ``GatewayConfig.from_env()``.
        remote_client: Prebuilt remote client. Built from ``config`` when omitted.
        credentials: Credential resolver used when building the remote client.
        transport: httpx transport used when building the remote client.

    Returns:
        The configured FastAPI app.
    """
    config = config or GatewayConfig.from_env()
    remote_client = remote_client or RemoteClient.from_config(
        config, credentials=credentials, transport=transport
    )

    app = FastAPI(
        title="Amp Task Gateway",
        version=__version__,
        description="Local REST interface for Amp tasks.",
        docs_url="/api/docs",
        redoc_url=None,
        openapi_url="/api/openapi.json",
    )
    app.state.config = config
    app.state.remote_client = remote_client

    @app.middleware("http")
    async def cors_and_errors(
        request: Request, call_next: Callable[[Request], Awaitable[Response]]
    ) -> Response:
        if request.method == "OPTIONS":
            response: Response = Response(status_code=204)
        else:
            try:
                response = await call_next(request)
            except Exception as e:
                response = render_error(e)
        response.headers.update(CORS_HEADERS)
        return response

    @app.exception_handler(GatewayError)
    async def gateway_error_handler(request: Request, exc: GatewayError) -> Response:
        return render_error(exc)

    @app.exception_handler(StarletteHTTPException)
    async def http_error_handler(request: Request, exc: StarletteHTTPException) -> Response:
        return JSONResponse(
            error_body(str(exc.detail)),
            status_code=exc.status_code,
            headers=getattr(exc, "headers", None),
        )

    app.include_router(router)

    @app.api_route("/{full_path:path}", methods=["GET", "HEAD"], include_in_schema=False)
    def static_files(full_path: str) -> Response:
        content, mime_type = read_static_file(config.static_dir, full_path)
        return Response(content=content, media_type=mime_type)

    return app


def run_server(config: GatewayConfig | None = None) -> None:
    """Run the gateway with uvicorn until interrupted."""
    import uvicorn

    config = config or GatewayConfig.from_env()
    configure_logging(config.log_level)
    logger.info(f"Serving on http://{config.host}:{config.port}")
    uvicorn.run(
        create_app(config),
        host=config.host,
        port=config.port,
        log_level=config.log_level.lower(),
    )
