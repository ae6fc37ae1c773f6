"""Command-line interface for inspecting side inputs."""

import json
import logging
import struct
import sys

import click

from sideinput_pipeline.coders.coders import CODER_REGISTRY, create_coder
from sideinput_pipeline.config.resolver_config import ResolverConfig
from sideinput_pipeline.errors import SideInputError
from sideinput_pipeline.resolver import SideInputResolver
from sideinput_pipeline.sharding.shard_reader import write_record_shard
from sideinput_pipeline.sources.descriptors import SideInputDescriptor, SideInputKind
from sideinput_pipeline.utils.helpers import format_number, setup_logging, take

logger = logging.getLogger(__name__)


def _format_value(value) -> str:
    try:
        return json.dumps(value)
    except TypeError:
        return repr(value)


def _parse_value(text: str):
    try:
        return json.loads(text)
    except json.JSONDecodeError:
        return text


@click.group()
@click.option("--verbose", "-v", is_flag=True, help="Enable verbose output")
def main(verbose: bool):
    """Side Input Pipeline - resolve broadcast inputs from sharded storage."""
    level = "DEBUG" if verbose else "INFO"
    setup_logging(level)


@main.command()
@click.argument("descriptor_path", type=click.Path(exists=True))
@click.option("--config", "-c", type=click.Path(exists=True), default=None, help="Config file")
@click.option("--coder", default=None, help="Coder name (overrides config)")
@click.option("--base-dir", default=None, help="Directory shard locations are relative to")
@click.option("--limit", "-n", type=int, default=20, help="Max collection elements to print")
def resolve(descriptor_path: str, config: str, coder: str, base_dir: str, limit: int):
    """Resolve a side input descriptor and print its value."""
    try:
        resolver_config = ResolverConfig.from_yaml(config) if config else ResolverConfig()
        if coder:
            resolver_config.coder = coder
        if base_dir:
            resolver_config.reader.base_dir = base_dir

        descriptor = SideInputDescriptor.from_yaml(descriptor_path)
        resolver = SideInputResolver.from_config(resolver_config)
        value = resolver.resolve(descriptor)

        if SideInputKind.parse(descriptor.kind) is SideInputKind.SINGLETON:
            click.echo(_format_value(value))
            return

        count = 0
        for element in take(value, limit):
            click.echo(_format_value(element))
            count += 1
        click.echo(f"({format_number(count)} elements shown)")
    except (SideInputError, ValueError, TypeError) as e:
        click.echo(f"Error: {e}", err=True)
        sys.exit(1)


@main.command("list-coders")
def list_coders():
    """List available coders."""
    click.echo("\nAvailable Coders:")
    click.echo("-" * 60)

    for name, coder_cls in CODER_REGISTRY.items():
        desc = (coder_cls.__doc__ or "").strip().splitlines()[0]
        click.echo(f"  {name:20} {desc}")

    click.echo()


@main.command("write-shard")
@click.argument("output", type=click.Path())
@click.argument("values", nargs=-1)
@click.option("--coder", default="json", help="Coder used to encode the values")
def write_shard(output: str, values: tuple[str, ...], coder: str):
    """Encode VALUES into a length-prefixed record shard at OUTPUT."""
    try:
        element_coder = create_coder(coder)
        count = write_record_shard(output, (element_coder.encode(_parse_value(v)) for v in values))
    except (ValueError, TypeError, struct.error) as e:
        click.echo(f"Error: {e}", err=True)
        sys.exit(1)

    click.echo(f"Wrote {format_number(count)} records to {output}")


if __name__ == "__main__":
    main()
