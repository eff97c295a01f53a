"""Custom Click group with automatic help display on errors.

This module provides a custom Click Group class that shows the help of the
command that failed to parse, so a mistyped option is followed by the list of
valid ones.
"""

import sys
from typing import Any

import click


class IpaCkGroup(click.Group):
    """Click group that auto-displays contextual help on usage errors."""

    def main(self, *args: Any, **kwargs: Any) -> Any:
        """Override main to display help on usage errors."""
        try:
            return super().main(*args, **kwargs)
        except click.exceptions.UsageError as e:
            return self._show_usage_error(e, e.ctx)

    def invoke(self, ctx: click.Context) -> Any:
        """Invoke subcommands, showing subcommand help on usage errors."""
        try:
            return super().invoke(ctx)
        except click.exceptions.UsageError as e:
            return self._show_usage_error(e, e.ctx or ctx)

    @staticmethod
    def _show_usage_error(error: click.exceptions.UsageError, ctx: click.Context | None) -> None:
        click.echo(f"Error: {error.format_message()}", err=True)
        exit_code = getattr(error, "exit_code", 2)

        if ctx:
            click.echo("")
            click.echo(ctx.get_help())
            # ctx.exit() keeps CliRunner happy
            ctx.exit(exit_code)
        sys.exit(exit_code)


__all__ = ["IpaCkGroup"]
