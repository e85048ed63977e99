"""FunctionPoint Estimates MCP Server.

FastMCP server exposing the GetAllEstimates tool over stdio or Streamable HTTP.
Run: estimates-mcp [--transport stdio|http]
"""

from __future__ import annotations

import argparse
import json
import logging
from typing import Any, Optional

from mcp.server.fastmcp import FastMCP
from mcp.server.transport_security import TransportSecuritySettings
from mcp.types import CallToolResult, TextContent, ToolAnnotations

from . import __version__
from .config import Settings, configure_logging, load_settings
from .core.clients.estimates import EstimatesClient
from .core.errors import ConfigurationError

logger = logging.getLogger(__name__)

SERVER_NAME = "FunctionPoint-Estimates-API-Server"
TOOL_NAME = "GetAllEstimates"

READ_ONLY = ToolAnnotations(readOnlyHint=True, destructiveHint=False, idempotentHint=True, openWorldHint=True)

TOOL_DESCRIPTION = (
    "Retrieve all estimates from FunctionPoint API. This tool fetches estimate data and can accept "
    "optional filters to narrow down results. Use this tool when users ask about estimates, project "
    "estimates, or need to see estimate information."
)


def _text_result(payload: Any, is_error: bool = False) -> CallToolResult:
    text = json.dumps(payload, indent=2, ensure_ascii=False)
    return CallToolResult(content=[TextContent(type="text", text=text)], isError=is_error)


def configuration_error_payload(exc: ConfigurationError) -> dict:
    return {"error": "Missing required environment variables", "details": str(exc)}


def create_server(
    settings: Settings,
    client: Optional[EstimatesClient] = None,
    *,
    stateless_http: bool = False,
    json_response: bool = False,
) -> FastMCP:
    """Build a FastMCP server with the estimates tool registered once."""
    client = client or EstimatesClient(settings)

    mcp = FastMCP(
        SERVER_NAME,
        instructions="MCP server for retrieving estimates from FunctionPoint API with filtering capabilities.",
        host=settings.host,
        port=settings.port,
        log_level=settings.log_level,
        stateless_http=stateless_http,
        json_response=json_response,
        # Host checks belong to the hosting platform; origins go through CORS.
        transport_security=TransportSecuritySettings(enable_dns_rebinding_protection=False),
    )

    @mcp.tool(name=TOOL_NAME, description=TOOL_DESCRIPTION, annotations=READ_ONLY)
    async def get_all_estimates(filters: Optional[dict[str, Any]] = None) -> CallToolResult:
        """Optional filters (status, client_id, project_id, ...) become upstream query parameters."""
        try:
            result = await client.fetch_estimates(filters or {})
        except ConfigurationError as exc:
            logger.error("Estimates request rejected: %s", exc)
            return _text_result(configuration_error_payload(exc), is_error=True)
        except Exception as exc:
            logger.error("Tool execution error: %s", exc, exc_info=True)
            return _text_result({"error": "Internal server error", "message": str(exc)}, is_error=True)

        if result.ok:
            return _text_result(result.data)
        return _text_result({"error": "Failed to fetch estimates", "details": result.details()}, is_error=True)

    return mcp


def main(argv: Optional[list[str]] = None):
    """Entry point for the CLI command."""
    settings = load_settings()

    parser = argparse.ArgumentParser(prog="estimates-mcp", description="FunctionPoint estimates MCP server")
    parser.add_argument("--transport", choices=["stdio", "http"], default=settings.transport)
    parser.add_argument("--host", default=settings.host)
    parser.add_argument("--port", type=int, default=settings.port)
    parser.add_argument("--version", action="version", version=f"%(prog)s {__version__}")
    args = parser.parse_args(argv)

    settings = settings.model_copy(update={"transport": args.transport, "host": args.host, "port": args.port})
    configure_logging(settings.log_level)
    logger.info("Starting %s %s (transport: %s)", SERVER_NAME, __version__, settings.transport)
    if not settings.is_configured:
        logger.warning("%s not set; every tool call will return a configuration error", ", ".join(settings.missing()))

    if settings.transport == "http":
        import uvicorn

        from .http_app import create_http_app

        uvicorn.run(create_http_app(settings), host=settings.host, port=settings.port, log_level=settings.log_level.lower())
    else:
        create_server(settings).run()


if __name__ == "__main__":
    main()
