"""Main entry point for the healthwait CLI."""

import os
import signal
import sys

import click

from .cli import cli
from .errors import WatchInterruptedError


def reraise_signal(signum: int) -> int:
    """
    Terminate with the signal's default action.

    Returns the shell-style status only if the signal did not end the process.
    """
    signal.signal(signum, signal.SIG_DFL)
    os.kill(os.getpid(), signum)
    return 128 + signum


def main(args: list[str] | None = None) -> int:
    """
    Main entry point for the healthwait CLI.

    Args:
        args: Command-line arguments. Defaults to sys.argv[1:]

    Returns:
        int: Exit code (0 when healthy, 1 otherwise)
    """
    if args is None:
        args = sys.argv[1:]

    try:
        return cli.main(args=args, prog_name="healthwait", standalone_mode=False)
    except click.ClickException as e:
        e.show()
        return 1
    except click.Abort:
        click.echo("Aborted!", err=True)
        return 1
    except WatchInterruptedError as e:
        return reraise_signal(e.signum)


if __name__ == "__main__":
    sys.exit(main())
