"""ASGI entry point: ``uvicorn estimates_mcp.asgi:app`` or a serverless Python runtime."""

from .config import configure_logging, load_settings
from .http_app import create_http_app

settings = load_settings()
configure_logging(settings.log_level)

app = create_http_app(settings)
