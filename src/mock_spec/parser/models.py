"""Resolved data models for a mock server spec.

The parser turns a YAML/JSON document into these models. Every ``$ref`` is
already replaced by the definition it points to, so consumers never see
references.
"""

from typing import Any

from pydantic import BaseModel, Field

CONTENT_TYPES = {
    "json": "application/json",
    "xml": "application/xml",
}


class Step(BaseModel):
    """A single operation of a filter, e.g. ``uppercase`` or ``replace``."""

    operation: str
    parameters: dict[str, Any] = {}  # non-object values are stored as {"value": v}


class Check(BaseModel):
    """A single predicate applied to a condition source value."""

    name: str
    parameters: dict[str, Any] = {}


class Filter(BaseModel):
    """A pipeline of steps applied to a request parameter.

    The result always lands in the normalized parameters namespace, under
    ``target`` when set and under ``source`` otherwise.
    """

    source: str
    target: str = ""
    steps: list[Step] = []

    @property
    def destination(self) -> str:
        return self.target or self.source


class Condition(BaseModel):
    """A predicate tree node.

    Exactly one shape is populated: ``any`` (OR of nested conditions),
    ``all`` (AND of nested conditions) or ``source`` with ``checks``.
    """

    any: list["Condition"] = []
    all: list["Condition"] = []
    source: str = ""
    checks: list[Check] = []

    @property
    def kind(self) -> str:
        if self.any:
            return "any"
        if self.all:
            return "all"
        return "source"


class Response(BaseModel):
    status: int = 0
    format: str = ""  # raw / json / xml
    body: str = ""
    headers: dict[str, list[str]] = {}

    @property
    def content_type(self) -> str | None:
        return CONTENT_TYPES.get(self.format)


class Endpoint(BaseModel):
    """A matching rule. Sub-endpoints are only checked when the parent matches."""

    model_config = {"populate_by_name": True}

    description: str = ""
    host: str = ""
    method: str = ""
    path: str = ""
    body_format: str = Field(default="", alias="bodyFormat")
    filters: list[Filter] = []
    conditions: list[Condition] = []  # all must hold
    endpoints: list["Endpoint"] = []
    response: Response | None = None


class Definitions(BaseModel):
    """Named, reusable fragments, one namespace per kind."""

    steps: dict[str, list[Step]] = {}
    filters: dict[str, list[Filter]] = {}
    conditions: dict[str, list[Condition]] = {}
    responses: dict[str, Response] = {}


class Spec(BaseModel):
    definitions: Definitions = Field(default_factory=Definitions)
    endpoints: list[Endpoint] = []

    def walk_endpoints(self):
        """Yield every endpoint, parents before their sub-endpoints."""
        stack = list(reversed(self.endpoints))
        while stack:
            endpoint = stack.pop()
            yield endpoint
            stack.extend(reversed(endpoint.endpoints))


Condition.model_rebuild()
Endpoint.model_rebuild()
