"""cli commands for IDE build numbers"""

import sys

import click

from pluginuploader.versioning import BuildNumber, BuildNumberFormatError

from .utils.logging import log_error

_RELATIONS = {-1: "<", 0: "==", 1: ">"}


@click.group(name="build-number")
def build_number():
    """Work with IDE build numbers."""


@build_number.command(name="compare")
@click.argument("first")
@click.argument("second")
def compare(first: str, second: str):
    """Compare two build numbers, for example 241.* and 241.14494.240."""
    try:
        a = BuildNumber.parse(first)
        b = BuildNumber.parse(second)
    except BuildNumberFormatError as e:
        log_error(str(e), e)
        sys.exit(1)
    click.echo(f"{a} {_RELATIONS[a.compare_to(b)]} {b}")


@build_number.command(name="show")
@click.argument("version")
def show(version: str):
    """Show how a build number is read, with its neighbouring builds."""
    try:
        parsed = BuildNumber.parse(version)
    except BuildNumberFormatError as e:
        log_error(str(e), e)
        sys.exit(1)
    click.echo(f"build number:  {parsed}")
    click.echo(f"product code:  {parsed.product_code or '-'}")
    click.echo(f"baseline:      {parsed.baseline_version}")
    click.echo(f"snapshot:      {'yes' if parsed.is_snapshot else 'no'}")
    click.echo(f"previous:      {parsed.minus_one()}")
    click.echo(f"next:          {parsed.plus_one()}")
