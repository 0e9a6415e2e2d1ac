"""Entity builders.

Each builder applies one entity's grammar to a mapping node. Shapes are told
apart by probing for fields, in a fixed order, since documents carry no type
tag. Builders return lists because a ``$ref`` may expand to several entities.
"""

from contextlib import contextmanager
from typing import Any, Callable, Iterator

from .errors import (
    AmbiguousDefinition,
    IncompleteEndpoint,
    InvalidShape,
    MissingRequiredField,
    SpecError,
    TooDeeplyNested,
    TypeMismatch,
)
from .extract import (
    fill_int,
    fill_strings,
    get_mapping,
    get_sequence,
    get_string,
    is_mapping,
    is_sequence,
)
from .models import Check, Condition, Endpoint, Filter, Response, Step

REF = "$ref"
DEFAULT_MAX_DEPTH = 64


def _parameters(value: Any) -> dict[str, Any]:
    if is_mapping(value):
        return dict(value)
    return {"value": value}


def _single_key(node: dict, what: str) -> tuple[str, Any]:
    if len(node) != 1:
        raise AmbiguousDefinition(what, list(node))
    return next(iter(node.items()))


class EntityBuilder:
    """Builds typed entities from document nodes, resolving references through a registry.

    The builder tracks where it is in the document so errors can point at the
    failing node, and counts nesting of conditions and endpoints to refuse
    documents deeper than ``max_depth``.
    """

    def __init__(self, registry, max_depth: int = DEFAULT_MAX_DEPTH):
        self.registry = registry
        self.max_depth = max_depth
        self._path: list[str] = []
        self._depth = 0
        self._peak = 0

    @property
    def height(self) -> int:
        """Deepest nesting reached since the last relocation."""
        return self._peak

    @property
    def location(self) -> str:
        parts = []
        for segment in self._path:
            if parts and not segment.startswith("["):
                parts.append(".")
            parts.append(segment)
        return "".join(parts)

    @contextmanager
    def at(self, *segments: str) -> Iterator[None]:
        self._path.extend(segments)
        try:
            yield
        except SpecError as exc:
            exc.locate(self.location)
            raise
        finally:
            del self._path[len(self._path) - len(segments):]

    @contextmanager
    def relocated(self, *segments: str) -> Iterator[None]:
        """Build from another place in the document, e.g. a definition reached by $ref.

        Nesting is counted from zero there, so a definition has the same
        height wherever it is first referenced.
        """
        saved = self._path, self._depth, self._peak
        self._path, self._depth, self._peak = [], 0, 0
        try:
            with self.at(*segments):
                yield
        finally:
            self._path, self._depth, self._peak = saved

    @contextmanager
    def nested(self) -> Iterator[None]:
        self._depth += 1
        try:
            self._reach(self._depth)
            yield
        finally:
            self._depth -= 1

    def _reach(self, level: int) -> None:
        if level > self.max_depth:
            raise TooDeeplyNested(self.max_depth)
        self._peak = max(self._peak, level)

    def referenced(self, namespace: str, name: str):
        """Look up a definition and account for its nesting at the reference site."""
        value = self.registry.lookup(namespace, name)
        self._reach(self._depth + self.registry.height(namespace, name))
        return value

    def each(self, items: list, what: str, build: Callable[[dict], list]) -> list:
        """Build every item of a list, flattening the entities each item expands to."""
        result = []
        for index, item in enumerate(items):
            with self.at(f"[{index}]"):
                if not is_mapping(item):
                    raise InvalidShape(f"each {what} must be an object")
                result.extend(build(item))
        return result

    def steps(self, node: dict) -> list[Step]:
        key, value = _single_key(node, "step item")
        if key == REF:
            return list(self.referenced("steps", self._ref(node)))
        return [Step(operation=key, parameters=_parameters(value))]

    def check(self, node: dict) -> list[Check]:
        name, value = _single_key(node, "check item")
        if name == REF:
            raise InvalidShape("checks cannot reference definitions")
        return [Check(name=name, parameters=_parameters(value))]

    def filters(self, node: dict) -> list[Filter]:
        ref = self._ref(node)
        if ref is not None:
            return list(self.referenced("filters", ref))

        fields = {}
        fill_strings(fields, node, "source", "target")
        if not fields.get("source"):
            raise MissingRequiredField("filter", "source")

        raw_steps = get_sequence(node, "steps")
        if raw_steps:
            with self.at("steps"):
                fields["steps"] = self.each(raw_steps, "step item", self.steps)

        return [Filter(**fields)]

    def conditions(self, node: dict) -> list[Condition]:
        ref = self._ref(node)
        if ref is not None:
            return list(self.referenced("conditions", ref))

        for kind in ("any", "all"):
            nested = get_sequence(node, kind)
            if nested is None:
                continue
            with self.at(kind), self.nested():
                if not nested:
                    raise MissingRequiredField("condition", kind, f"condition '{kind}' must have at least one item")
                children = self.each(nested, "condition item", self.conditions)
            return [Condition(**{kind: children})]

        fields = {}
        fill_strings(fields, node, "source")
        if not fields.get("source"):
            raise MissingRequiredField("condition", "source")

        raw_checks = get_sequence(node, "checks")
        if not raw_checks:
            raise MissingRequiredField("condition", "checks", "condition must have at least one check")
        with self.at("checks"):
            fields["checks"] = self.each(raw_checks, "check item", self.check)

        return [Condition(**fields)]

    def response(self, node: dict) -> Response:
        ref = self._ref(node)
        if ref is not None:
            return self.referenced("responses", ref)

        fields = {}
        fill_strings(fields, node, "format", "body")
        fill_int(fields, node, "status")

        raw_headers = get_mapping(node, "headers")
        if raw_headers is not None:
            headers = {}
            for name, values in raw_headers.items():
                if not is_sequence(values) or not all(isinstance(v, str) for v in values):
                    raise TypeMismatch(f"headers.{name}", "an array of strings")
                headers[name] = list(values)
            fields["headers"] = headers

        return Response(**fields)

    def endpoint(self, node: dict) -> list[Endpoint]:
        fields = {}
        fill_strings(fields, node, "description", "host", "method", "path", "bodyFormat")

        raw_filters = get_sequence(node, "filters")
        if raw_filters:
            with self.at("filters"):
                fields["filters"] = self.each(raw_filters, "filter item", self.filters)

        raw_conditions = get_sequence(node, "conditions")
        if raw_conditions:
            with self.at("conditions"):
                fields["conditions"] = self.each(raw_conditions, "condition item", self.conditions)

        raw_endpoints = get_sequence(node, "endpoints")
        if raw_endpoints:
            with self.at("endpoints"), self.nested():
                fields["endpoints"] = self.each(raw_endpoints, "endpoint", self.endpoint)

        raw_response = get_mapping(node, "response")
        if raw_response is not None:
            with self.at("response"):
                fields["response"] = self.response(raw_response)

        if not fields.get("endpoints") and fields.get("response") is None:
            raise IncompleteEndpoint()

        return [Endpoint(**fields)]

    def _ref(self, node: dict) -> str | None:
        return get_string(node, REF)
