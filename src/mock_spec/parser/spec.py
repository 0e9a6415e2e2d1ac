"""Mock server spec parser.

Decodes a YAML (or JSON) document and resolves it into a Spec: the
``definitions`` block is registered first, then ``endpoints`` are built
against it. Unrecognized top-level fields are ignored.
"""

import logging
import re
from pathlib import Path

import yaml

from .builders import DEFAULT_MAX_DEPTH
from .errors import DecodeError, InvalidShape, TooDeeplyNested
from .extract import get_mapping, get_sequence, is_mapping
from .models import Spec
from .registry import NAMESPACES, DefinitionRegistry

logger = logging.getLogger(__name__)

BOOL_TAG = "tag:yaml.org,2002:bool"


class SpecLoader(yaml.SafeLoader):
    """SafeLoader with YAML 1.2 booleans: only true/false, so yes/no/on/off stay strings."""


SpecLoader.yaml_implicit_resolvers = {
    first: [(tag, regexp) for tag, regexp in resolvers if tag != BOOL_TAG]
    for first, resolvers in yaml.SafeLoader.yaml_implicit_resolvers.items()
}
SpecLoader.add_implicit_resolver(
    BOOL_TAG,
    re.compile(r"^(?:true|True|TRUE|false|False|FALSE)$"),
    list("tTfF"),
)


def parse_file(file_path: Path, max_depth: int = DEFAULT_MAX_DEPTH) -> Spec:
    """Read a spec file and parse it. I/O errors are raised unchanged."""
    content = Path(file_path).read_bytes()
    return parse(content, max_depth=max_depth)


def parse(content: str | bytes, max_depth: int = DEFAULT_MAX_DEPTH) -> Spec:
    """Parse a spec document and resolve all references to definitions."""
    try:
        document = yaml.load(content, Loader=SpecLoader)
    except yaml.YAMLError as e:
        raise DecodeError(str(e)) from e
    except RecursionError as e:
        raise TooDeeplyNested(max_depth) from e

    if not is_mapping(document):
        raise InvalidShape("spec must be an object")

    try:
        spec = _resolve(document, max_depth)
    except RecursionError as e:
        # max_depth is above what the interpreter stack allows
        raise TooDeeplyNested(max_depth) from e

    logger.debug(
        "Parsed spec: %d endpoints, %d definitions",
        len(spec.endpoints),
        sum(len(getattr(spec.definitions, namespace)) for namespace in NAMESPACES),
    )
    return spec


def _resolve(document: dict, max_depth: int) -> Spec:
    registry = DefinitionRegistry(get_mapping(document, "definitions"), max_depth=max_depth)
    definitions = registry.resolve_all()

    endpoints = []
    raw_endpoints = get_sequence(document, "endpoints")
    if raw_endpoints:
        with registry.builder.at("endpoints"):
            endpoints = registry.builder.each(raw_endpoints, "endpoint", registry.builder.endpoint)

    return Spec(definitions=definitions, endpoints=endpoints)
