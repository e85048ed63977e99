"""Streamable HTTP binding for serverless hosting.

Stateless JSON mode: every POST /mcp is self-contained, so the app can run
behind any request/response runtime. Misconfiguration short-circuits every
request with a 500 before the MCP layer is reached.
"""

from __future__ import annotations

import logging
from typing import Optional

from starlette.applications import Starlette
from starlette.middleware.base import BaseHTTPMiddleware, RequestResponseEndpoint
from starlette.middleware.cors import CORSMiddleware
from starlette.requests import Request
from starlette.responses import JSONResponse, Response

from . import __version__
from .config import Settings
from .core.clients.estimates import EstimatesClient
from .core.errors import ConfigurationError
from .server import SERVER_NAME, configuration_error_payload, create_server

logger = logging.getLogger(__name__)


class ConfigGuardMiddleware(BaseHTTPMiddleware):
    """Reject requests with a 500 while connection settings are missing."""

    def __init__(self, app, settings: Settings):
        super().__init__(app)
        self.settings = settings

    async def dispatch(self, request: Request, call_next: RequestResponseEndpoint) -> Response:
        if request.method == "OPTIONS":
            return Response(status_code=200)

        try:
            self.settings.require()
        except ConfigurationError as exc:
            return JSONResponse(configuration_error_payload(exc), status_code=500)

        try:
            return await call_next(request)
        except Exception as exc:
            logger.error("Handler error: %s", exc, exc_info=True)
            return JSONResponse(
                {"error": "Server initialization failed", "message": str(exc)},
                status_code=500,
            )


def create_http_app(settings: Settings, client: Optional[EstimatesClient] = None) -> Starlette:
    """Build the ASGI app: MCP at /mcp, health at /health, CORS on everything."""
    mcp = create_server(settings, client, stateless_http=True, json_response=True)

    @mcp.custom_route("/health", methods=["GET"])
    async def health(request: Request) -> Response:
        return JSONResponse({"status": "ok", "server": SERVER_NAME, "version": __version__})

    app = mcp.streamable_http_app()
    # Added last so it wraps the guard and answers preflight first.
    app.add_middleware(ConfigGuardMiddleware, settings=settings)
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_allow_origins,
        allow_methods=["GET", "POST", "OPTIONS"],
        allow_headers=["Content-Type", "Authorization", "Mcp-Session-Id", "Mcp-Protocol-Version"],
        expose_headers=["Mcp-Session-Id"],
    )
    return app
