"""Errors raised while decoding and resolving a mock server spec.

Every error derives from SpecError. Builders attach the location of the
failing node, so messages read like ``condition must have a source
(at endpoints[0].conditions[1])``.
"""


class SpecError(Exception):
    """Base class for all spec parsing errors."""

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message
        self.location: str | None = None

    def locate(self, location: str) -> None:
        """Record where the error happened, unless a deeper level already did."""
        if self.location is None and location:
            self.location = location

    def __str__(self) -> str:
        if self.location:
            return f"{self.message} (at {self.location})"
        return self.message


class DecodeError(SpecError):
    """The input is not well-formed YAML/JSON."""


class InvalidShape(SpecError):
    """A node that must be an object is something else."""


class TypeMismatch(SpecError):
    def __init__(self, field: str, expected: str):
        super().__init__(f"expected '{field}' to be {expected}")
        self.field = field
        self.expected = expected


class MissingRequiredField(SpecError):
    def __init__(self, entity: str, field: str, message: str | None = None):
        super().__init__(message or f"{entity} must have a {field}")
        self.entity = entity
        self.field = field


class IncompleteEndpoint(MissingRequiredField):
    def __init__(self):
        super().__init__(
            "endpoint",
            "endpoints or response",
            "endpoint must have either sub-endpoints or a response",
        )


class AmbiguousDefinition(SpecError):
    """An object that must carry exactly one key carries some other number."""

    def __init__(self, what: str, keys: list[str]):
        super().__init__(f"{what} must have exactly one key, got {len(keys)}: {', '.join(keys) or '-'}")
        self.keys = keys


class UnknownDefinition(SpecError):
    def __init__(self, namespace: str, name: str):
        super().__init__(f"unknown definition: {name} ({namespace})")
        self.namespace = namespace
        self.name = name


class CyclicDefinition(SpecError):
    def __init__(self, namespace: str, chain: list[str]):
        super().__init__(f"circular definition in {namespace}: {' -> '.join(chain)}")
        self.namespace = namespace
        self.chain = chain


class TooDeeplyNested(SpecError):
    def __init__(self, limit: int):
        super().__init__(f"spec is nested deeper than {limit} levels")
        self.limit = limit
