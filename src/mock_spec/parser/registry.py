"""Definition registry.

Definitions are registered raw and built lazily on first lookup, then
memoized. A reference to a sibling definition therefore resolves no matter
where the two appear in the document, and a chain of references that loops
back on itself is reported as a CyclicDefinition instead of recursing.
"""

import logging

from .builders import DEFAULT_MAX_DEPTH, EntityBuilder
from .errors import CyclicDefinition, InvalidShape, MissingRequiredField, TypeMismatch, UnknownDefinition
from .extract import get_mapping, is_mapping, is_sequence
from .models import Condition, Definitions, Filter, Response, Step

logger = logging.getLogger(__name__)

NAMESPACES = ("steps", "filters", "conditions", "responses")


class DefinitionRegistry:
    """Answers ``$ref`` lookups for the four definition namespaces."""

    def __init__(self, raw_definitions: dict | None = None, max_depth: int = DEFAULT_MAX_DEPTH):
        self.builder = EntityBuilder(self, max_depth=max_depth)
        self._raw: dict[str, dict] = {}
        self._built: dict[str, dict] = {namespace: {} for namespace in NAMESPACES}
        self._heights: dict[tuple[str, str], int] = {}
        self._resolving: list[tuple[str, str]] = []

        raw_definitions = raw_definitions or {}
        for namespace in NAMESPACES:
            with self.builder.relocated("definitions"):
                self._raw[namespace] = get_mapping(raw_definitions, namespace) or {}

    def resolve_all(self) -> Definitions:
        """Build every registered definition, in document order within each namespace."""
        resolved = {}
        for namespace in NAMESPACES:
            resolved[namespace] = {name: self.lookup(namespace, name) for name in self._raw[namespace]}
        return Definitions(**resolved)

    def steps(self, name: str) -> list[Step]:
        return self.lookup("steps", name)

    def filters(self, name: str) -> list[Filter]:
        return self.lookup("filters", name)

    def conditions(self, name: str) -> list[Condition]:
        return self.lookup("conditions", name)

    def response(self, name: str) -> Response:
        return self.lookup("responses", name)

    def lookup(self, namespace: str, name: str):
        """Return the definition ``name`` from ``namespace``, building it on first use."""
        built = self._built[namespace]
        if name in built:
            return built[name]
        if name not in self._raw[namespace]:
            raise UnknownDefinition(namespace, name)

        key = (namespace, name)
        if key in self._resolving:
            start = self._resolving.index(key)
            chain = [n for _, n in self._resolving[start:]] + [name]
            raise CyclicDefinition(namespace, chain)

        logger.debug("Resolving definition %s (%s)", name, namespace)
        self._resolving.append(key)
        try:
            with self.builder.relocated("definitions", namespace, name):
                value = self._build(namespace, name, self._raw[namespace][name])
                self._heights[key] = self.builder.height
        finally:
            self._resolving.pop()

        built[name] = value
        return value

    def height(self, namespace: str, name: str) -> int:
        """Nesting levels a resolved definition adds where it is referenced."""
        return self._heights[(namespace, name)]

    def _build(self, namespace: str, name: str, node):
        if namespace == "responses":
            if not is_mapping(node):
                raise InvalidShape("each response must be an object")
            return self.builder.response(node)

        if not is_sequence(node):
            raise TypeMismatch(name, f"an array of {namespace[:-1]} items")
        if not node:
            raise MissingRequiredField(namespace, name, f"definition '{name}' must have at least one item")

        build = {
            "steps": self.builder.steps,
            "filters": self.builder.filters,
            "conditions": self.builder.conditions,
        }[namespace]
        return self.builder.each(node, f"{namespace[:-1]} item", build)
