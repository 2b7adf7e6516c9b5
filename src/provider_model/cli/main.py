"""Main CLI entry point for the provider model.

This module provides the main CLI group that organizes all commands under
the `provider-model` command namespace. Commands are imported only when
invoked, which keeps `provider-model --help` fast.
"""

import importlib
import sys

import click

from provider_model import __version__


class LazyGroup(click.Group):
    """Click group that lazily loads subcommands only when invoked."""

    # command name -> (module path, attribute name)
    COMMANDS = {
        "list": ("provider_model.cli.providers_cmd", "list_providers"),
        "show": ("provider_model.cli.providers_cmd", "show_provider"),
        "check": ("provider_model.cli.providers_cmd", "check_providers"),
    }

    def get_command(self, ctx, cmd_name):
        """Lazily import and return the command when it's invoked."""
        if cmd_name not in self.COMMANDS:
            return None

        module_path, attr = self.COMMANDS[cmd_name]
        mod = importlib.import_module(module_path)
        return getattr(mod, attr)

    def list_commands(self, ctx):
        """Return list of available commands (for --help)."""
        return list(self.COMMANDS)


@click.group(cls=LazyGroup)
@click.version_option(version=__version__, prog_name="provider-model")
def cli():
    """Provider Model CLI - inspect configured provider sections.

    Use 'provider-model COMMAND --help' for more information on a specific command.

    Examples:

    \b
      provider-model list greeters
      provider-model show greeters spanish --config ./config.yml
      provider-model check greeters
    """


def main():
    """Entry point for the provider-model CLI."""
    try:
        cli()
    except KeyboardInterrupt:
        click.echo("\nInterrupted", err=True)
        sys.exit(130)


if __name__ == "__main__":
    main()
