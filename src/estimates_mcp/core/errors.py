"""Error taxonomy for the estimates adapter.

Transport and upstream errors never leave the client: they are converted
into an ``EstimatesFailure``. Configuration errors short-circuit a request
before any network I/O.
"""

from __future__ import annotations

from typing import Any, Optional


class EstimatesError(Exception):
    """Base class for all adapter errors."""


class ConfigurationError(EstimatesError):
    """Required connection settings are missing."""

    def __init__(self, missing: list[str]):
        self.missing = missing
        super().__init__(" and ".join(missing) + " must be set")


class TransportError(EstimatesError):
    """Network failure or timeout reaching the upstream API."""

    def __init__(self, message: str, timed_out: bool = False):
        self.timed_out = timed_out
        super().__init__(message)


class UpstreamError(EstimatesError):
    """Upstream answered with a non-2xx status."""

    def __init__(
        self,
        message: str,
        status: int,
        status_text: Optional[str] = None,
        body: Any = None,
    ):
        self.status = status
        self.status_text = status_text
        self.body = body
        super().__init__(message)
