"""Pydantic data models: the request and result envelopes.

The upstream payload itself is opaque: it is carried through verbatim and
never parsed into a schema here.
"""

from __future__ import annotations

from typing import Annotated, Any, Literal, Optional, Union
from urllib.parse import urlencode

from pydantic import BaseModel, ConfigDict, Field

ESTIMATES_PATH = "/estimates"
DEFAULT_PAGE = 1
DEFAULT_ITEMS_PER_PAGE = 20

FilterSet = dict[str, Any]


class QueryRequest(BaseModel):
    """An outbound GET against the estimates collection."""

    model_config = ConfigDict(frozen=True)

    base_url: str
    path: str = ESTIMATES_PATH
    page: str = str(DEFAULT_PAGE)
    items_per_page: str = str(DEFAULT_ITEMS_PER_PAGE)
    filters: tuple[tuple[str, str], ...] = ()

    @property
    def params(self) -> list[tuple[str, str]]:
        return [("page", self.page), ("itemsPerPage", self.items_per_page), *self.filters]

    @property
    def query_string(self) -> str:
        return urlencode(self.params)

    @property
    def url(self) -> str:
        return f"{self.base_url.rstrip('/')}{self.path}?{self.query_string}"


class EstimatesSuccess(BaseModel):
    """Upstream answered 2xx."""

    model_config = ConfigDict(populate_by_name=True)

    kind: Literal["success"] = "success"
    data: Any = Field(description="Upstream response body, untouched")
    source_url: str = Field(alias="sourceUrl", description="URL that produced the data")

    @property
    def ok(self) -> bool:
        return True


class EstimatesFailure(BaseModel):
    """Network error, timeout, or non-2xx answer from upstream."""

    model_config = ConfigDict(populate_by_name=True)

    kind: Literal["failure"] = "failure"
    message: str
    status: Optional[int] = None
    status_text: Optional[str] = Field(None, alias="statusText")
    body: Any = None

    @property
    def ok(self) -> bool:
        return False

    def details(self) -> dict[str, Any]:
        """Wire form used inside the tool error payload."""
        return self.model_dump(by_alias=True, exclude_none=True, exclude={"kind"})


ToolResult = Annotated[Union[EstimatesSuccess, EstimatesFailure], Field(discriminator="kind")]
