"""FunctionPoint estimates API client.

Endpoint: GET {base_url}/estimates?page=1&itemsPerPage=20[&filter=value...]
Auth: Bearer token. Responses are JSON-LD and passed through untouched.
"""

from __future__ import annotations

import asyncio
import json
import logging
from typing import TYPE_CHECKING, Any, Mapping, Optional

import httpx

from ..errors import TransportError, UpstreamError
from ..models import EstimatesFailure, EstimatesSuccess, QueryRequest, ToolResult

if TYPE_CHECKING:
    from ...config import Settings

logger = logging.getLogger(__name__)

LD_JSON = "application/ld+json"
PAGINATION_KEYS = {"page": "page", "itemsPerPage": "items_per_page"}


def _param_value(value: Any) -> str:
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, (dict, list, tuple)):
        return json.dumps(value, separators=(",", ":"))
    return str(value)


def build_query(filters: Optional[Mapping[str, Any]], base_url: str) -> QueryRequest:
    """Build the estimates query from optional caller filters.

    Starts from page=1 and itemsPerPage=20. Entries whose value is None or an
    empty string are dropped; the rest are appended in iteration order. A
    filter named after a pagination key replaces that default instead of
    repeating it.
    """
    pagination: dict[str, str] = {}
    extra: list[tuple[str, str]] = []

    for key, value in (filters or {}).items():
        if value is None or value == "":
            continue
        key = str(key)
        if key in PAGINATION_KEYS:
            pagination[PAGINATION_KEYS[key]] = _param_value(value)
        else:
            extra.append((key, _param_value(value)))

    return QueryRequest(base_url=base_url, filters=tuple(extra), **pagination)


def _response_body(response: httpx.Response) -> Any:
    if not response.content:
        return None
    try:
        return response.json()
    except ValueError:
        return response.text


class EstimatesClient:
    """Issues one authenticated GET per call and normalizes the outcome.

    ``transport`` lets callers swap the network layer, e.g. for
    ``httpx.MockTransport`` in tests.
    """

    def __init__(self, settings: Settings, transport: Optional[httpx.AsyncBaseTransport] = None):
        self.settings = settings
        self._transport = transport

    def _headers(self) -> dict[str, str]:
        return {
            "Accept": LD_JSON,
            "Authorization": f"Bearer {self.settings.api_key.get_secret_value()}",
            "Content-Type": LD_JSON,
        }

    async def _get(self, url: str) -> Any:
        """GET the URL and return the decoded body, or raise a typed error."""
        timeout = self.settings.timeout
        async with httpx.AsyncClient(
            timeout=httpx.Timeout(timeout),
            transport=self._transport,
        ) as client:
            try:
                response = await asyncio.wait_for(client.get(url, headers=self._headers()), timeout)
            except (asyncio.TimeoutError, httpx.TimeoutException) as exc:
                detail = str(exc)
                message = f"Request timed out after {timeout:g}s" + (f": {detail}" if detail else "")
                raise TransportError(message, timed_out=True) from exc
            except httpx.HTTPError as exc:
                raise TransportError(str(exc) or exc.__class__.__name__) from exc

        try:
            response.raise_for_status()
        except httpx.HTTPStatusError as exc:
            raise UpstreamError(
                f"Request failed with status code {response.status_code}",
                status=response.status_code,
                status_text=response.reason_phrase or None,
                body=_response_body(response),
            ) from exc
        return _response_body(response)

    async def fetch_estimates(self, filters: Optional[Mapping[str, Any]] = None) -> ToolResult:
        """Fetch one page of estimates.

        Raises ConfigurationError before any network I/O when the base URL or
        credential is missing. Every other failure comes back as an
        EstimatesFailure; there are no retries.
        """
        self.settings.require()
        query = build_query(filters, self.settings.base_url)

        try:
            data = await self._get(query.url)
        except UpstreamError as exc:
            logger.error("Error fetching estimates: %s", exc)
            return EstimatesFailure(
                message=str(exc),
                status=exc.status,
                status_text=exc.status_text,
                body=exc.body,
            )
        except TransportError as exc:
            logger.error("Error fetching estimates: %s", exc)
            return EstimatesFailure(message=str(exc))

        return EstimatesSuccess(data=data, source_url=query.url)
