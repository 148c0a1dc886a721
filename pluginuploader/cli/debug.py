import click

from .utils.logging import configure_logging

DEBUG_KEY = "DEBUG"


def _debug_option() -> click.Option:
    return click.Option(
        ["--debug/--no-debug"],
        is_eager=True,
        expose_value=False,
        callback=_set_debug,
        help="Enable debug mode",
    )


def add_debug_option(cmd: click.Command) -> click.Command:
    """Add a --debug/--no-debug option to a command or group and all its subcommands."""
    if not any(param.name == "debug" for param in cmd.params):
        cmd.params.insert(0, _debug_option())
    if isinstance(cmd, click.Group):
        for subcommand in cmd.commands.values():
            add_debug_option(subcommand)
    return cmd


def _set_debug(ctx: click.Context, param, value: bool) -> bool:
    root_ctx = ctx.find_root()
    root_ctx.ensure_object(dict)
    root_ctx.obj.setdefault(DEBUG_KEY, False)

    # debug mode enabled on a parent command stays on for its subcommands
    if value or ctx.parent is None:
        root_ctx.obj[DEBUG_KEY] = value

    configure_logging(root_ctx.obj[DEBUG_KEY])
    return root_ctx.obj[DEBUG_KEY]
