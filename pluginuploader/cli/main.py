"""plugin-uploader CLI"""

import click

from pluginuploader import __version__

from .build_number import build_number
from .catalog import catalog
from .debug import add_debug_option
from .publish import publish


@click.group()
@click.version_option(__version__, prog_name="plugin-uploader")
@click.pass_context
def cli(ctx):
    """
    Publish IDE plugins to a custom plugin repository.
    """
    ctx.ensure_object(dict)


cli.add_command(publish)
cli.add_command(catalog)
cli.add_command(build_number)

add_debug_option(cli)

if __name__ == "__main__":
    cli(obj={})
