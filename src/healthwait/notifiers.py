"""Notification handlers for watch results."""

import click

from .config import DisplayConfig


class ConsoleNotifier:
    """Prints status lines to stdout/stderr, coloured unless monochrome."""

    def __init__(self, usage: str | None = None):
        # Shown ahead of request validation errors
        self.usage = usage

    def notify(self, message: str, display: DisplayConfig, ok: bool = True) -> None:
        """
        Print a status notification.

        Positive lines go to stdout in green, negative ones to stderr in red.
        Nothing is printed when display.quiet is set.
        """
        if display.quiet:
            return
        click.secho(
            message,
            fg="green" if ok else "red",
            err=not ok,
            color=False if display.monochrome else None,
        )

    def error(self, message: str, display: DisplayConfig, show_usage: bool = False) -> None:
        """Print an error to stderr. Not affected by quiet."""
        color = False if display.monochrome else None
        if show_usage and self.usage:
            click.echo(self.usage, err=True, color=color)
        click.secho(f"Error: {message}", fg="red", err=True, color=color)
