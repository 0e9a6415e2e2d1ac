"""CLI entry point for mock-spec."""

import json
import logging
from pathlib import Path

import click
import yaml

from mock_spec.parser.builders import DEFAULT_MAX_DEPTH
from mock_spec.parser.errors import SpecError
from mock_spec.parser.models import Spec
from mock_spec.parser.registry import NAMESPACES
from mock_spec.parser.spec import parse_file

# deeper nesting runs into the interpreter recursion limit first
MAX_DEPTH_LIMIT = 200


def _load(spec_path: Path, max_depth: int) -> Spec:
    try:
        return parse_file(spec_path, max_depth=max_depth)
    except SpecError as e:
        raise click.ClickException(f"{spec_path}: {e}") from e


@click.group()
@click.option("-v", "--verbose", is_flag=True, help="Log parser activity to stderr.")
def main(verbose: bool):
    """Mock Spec — validate and inspect declarative mock server specs."""
    if verbose:
        logging.basicConfig(level=logging.DEBUG, format="%(levelname)s %(name)s: %(message)s")


@main.command()
@click.argument("spec_path", type=click.Path(exists=True, dir_okay=False, path_type=Path))
@click.option("--max-depth", default=DEFAULT_MAX_DEPTH, show_default=True, type=click.IntRange(min=1, max=MAX_DEPTH_LIMIT), help="Maximum nesting of conditions and endpoints.")
def check(spec_path: Path, max_depth: int):
    """Parse a spec and print a summary of what it defines."""
    spec = _load(spec_path, max_depth)

    endpoints = list(spec.walk_endpoints())
    click.echo(f"{spec_path}: OK")
    click.echo(f"Found {len(endpoints)} endpoints ({len(spec.endpoints)} top-level).")
    for namespace in NAMESPACES:
        names = getattr(spec.definitions, namespace)
        click.echo(f"  {namespace}: {len(names)}" + (f" ({', '.join(names)})" if names else ""))


@main.command()
@click.argument("spec_path", type=click.Path(exists=True, dir_okay=False, path_type=Path))
@click.option("--format", "fmt", default="yaml", type=click.Choice(["yaml", "json"]), help="Output format.")
@click.option("--max-depth", default=DEFAULT_MAX_DEPTH, show_default=True, type=click.IntRange(min=1, max=MAX_DEPTH_LIMIT), help="Maximum nesting of conditions and endpoints.")
def show(spec_path: Path, fmt: str, max_depth: int):
    """Print the spec with every reference resolved."""
    spec = _load(spec_path, max_depth)
    data = spec.model_dump(mode="json", by_alias=True)

    if fmt == "json":
        click.echo(json.dumps(data, indent=2, ensure_ascii=False))
    else:
        click.echo(yaml.safe_dump(data, sort_keys=False, allow_unicode=True), nl=False)
