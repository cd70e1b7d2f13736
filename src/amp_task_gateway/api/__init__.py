"""REST API layer for the task gateway.

This module provides the FastAPI app that exposes Amp tasks as local REST
endpoints and serves the bundled front-end.

Usage:
    from amp_task_gateway.api import create_app

    app = create_app()

    # Or run directly
    from amp_task_gateway.api import run_server

    run_server()
"""

from amp_task_gateway.api.server import CORS_HEADERS, create_app, run_server

__all__ = ["CORS_HEADERS", "create_app", "run_server"]
