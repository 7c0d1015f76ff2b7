import logging

import click

from kitsync.cli.output import user_output
from kitsync.context import create_context
from kitsync.error_boundary import cli_error_boundary
from kitsync.version import __version__

CONTEXT_SETTINGS = dict(help_option_names=["-h", "--help"])

DEBUG_LOG_FORMAT = "[DEBUG %(name)s:%(lineno)d] %(message)s"

# Track whether commands are registered
_commands_registered = False


class LazyGroup(click.Group):
    """Click Group that lazily loads commands."""

    def list_commands(self, ctx):
        """List available commands, registering them if needed."""
        if not _commands_registered:
            _register_commands()
        return super().list_commands(ctx)

    def get_command(self, ctx, cmd_name):
        """Get a command by name, registering if needed."""
        if not _commands_registered:
            _register_commands()
        return super().get_command(ctx, cmd_name)


@click.command(cls=LazyGroup, invoke_without_command=True, context_settings=CONTEXT_SETTINGS)
@click.version_option(version=__version__)
@click.option("--debug", is_flag=True, help="Show debug logging and full stack traces")
@click.pass_context
def cli(ctx: click.Context, debug: bool) -> None:
    """Install AI-assistant kits across coding tools without clobbering your edits."""
    if debug:
        logging.basicConfig(level=logging.DEBUG, format=DEBUG_LOG_FORMAT, force=True)
    else:
        logging.basicConfig(level=logging.WARNING, format="%(levelname)s: %(message)s")

    # Tests inject a prebuilt context through CliRunner.invoke(obj=...)
    if ctx.obj is None:
        ctx.obj = create_context(debug=debug)

    if ctx.invoked_subcommand is None:
        user_output(ctx.get_help())


def _register_commands() -> None:
    """Register all commands with the CLI group."""
    global _commands_registered

    if _commands_registered:
        return

    from kitsync.commands.cleanup import cleanup_skills
    from kitsync.commands.config import config_group
    from kitsync.commands.install import install, plan
    from kitsync.commands.registry import registry_group
    from kitsync.commands.status import status
    from kitsync.commands.uninstall import uninstall, uninstall_legacy

    cli.add_command(install)
    cli.add_command(plan)
    cli.add_command(uninstall)
    cli.add_command(uninstall_legacy)
    cli.add_command(cleanup_skills)
    cli.add_command(status)

    # Register command groups
    cli.add_command(config_group)
    cli.add_command(registry_group)

    _commands_registered = True


def main() -> None:
    """Entry point with error boundary."""
    cli_error_boundary(cli)()
