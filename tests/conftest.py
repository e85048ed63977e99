from __future__ import annotations

import json

import httpx
import pytest
from pydantic import SecretStr

from estimates_mcp.config import Settings
from estimates_mcp.core.clients.estimates import EstimatesClient

BASE_URL = "https://fp.example.test/api"
API_KEY = "test-token"

ENV_KEYS = [
    "FUNCTIONPOINT_BASE_URL",
    "FUNCTIONPOINT_API_KEY",
    "FUNCTIONPOINT_TIMEOUT",
    "MCP_TRANSPORT",
    "HOST",
    "PORT",
    "CORS_ALLOW_ORIGINS",
    "LOG_LEVEL",
]


@pytest.fixture
def anyio_backend():
    return "asyncio"


@pytest.fixture
def clean_env(monkeypatch, tmp_path):
    # keep a stray .env in the working directory out of the picture
    monkeypatch.chdir(tmp_path)
    for key in ENV_KEYS:
        # set first so teardown also drops anything load_dotenv adds
        monkeypatch.setenv(key, "")
        monkeypatch.delenv(key)
    return monkeypatch


@pytest.fixture
def settings() -> Settings:
    return Settings(base_url=BASE_URL, api_key=SecretStr(API_KEY), timeout=2.0)


class FakeUpstream:
    """Records every request and answers with a fixed status and body."""

    def __init__(self, status: int = 200, body=None, handler=None):
        self.status = status
        self.body = {"hydra:member": []} if body is None else body
        self.requests: list[httpx.Request] = []
        self._handler = handler

    async def __call__(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        if self._handler is not None:
            return await self._handler(request)
        if isinstance(self.body, (dict, list)):
            return httpx.Response(self.status, content=json.dumps(self.body).encode(), headers={"Content-Type": "application/ld+json"})
        return httpx.Response(self.status, text=self.body)

    @property
    def calls(self) -> int:
        return len(self.requests)

    def transport(self) -> httpx.MockTransport:
        return httpx.MockTransport(self)


@pytest.fixture
def upstream() -> FakeUpstream:
    return FakeUpstream()


@pytest.fixture
def make_client(settings):
    def _make(fake: FakeUpstream, **overrides) -> EstimatesClient:
        config = settings.model_copy(update=overrides) if overrides else settings
        return EstimatesClient(config, transport=fake.transport())

    return _make
