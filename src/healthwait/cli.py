"""healthwait CLI - block until a container's health check settles."""

import click

from . import __version__
from .config import DisplayConfig, load_config
from .errors import ConfigError
from .logging import setup_logging
from .notifiers import ConsoleNotifier
from .source import EventSource
from .watcher import HealthWatcher


def _show_help(ctx: click.Context, param: click.Parameter, value: bool) -> None:
    """Print help and exit 1; asking for help never counts as a passed gate."""
    if not value or ctx.resilient_parsing:
        return
    click.echo(ctx.get_help())
    ctx.exit(1)


@click.command(context_settings={"help_option_names": []})
@click.argument("container")
@click.option(
    "-h", "--help", is_flag=True, expose_value=False, is_eager=True,
    callback=_show_help, help="Show this message and exit (status 1).",
)
@click.option("-m", "--monochrome", is_flag=True, help="Disable coloured output")
@click.option("-q", "--quiet", is_flag=True, help="Suppress status messages (errors still shown)")
@click.option("-s", "--since", type=str, metavar="TIMESTAMP",
              help="Unix timestamp to read events from (default: now)")
@click.option("-t", "--timeout", type=str, metavar="SECONDS",
              help="Seconds to wait, 0 to wait forever (default: 10)")
@click.option("-r", "--runtime", type=str,
              help="Container runtime: docker, podman, or a path to its executable")
@click.version_option(version=__version__, prog_name="healthwait")
@click.pass_context
def cli(ctx, container, monochrome, quiet, since, timeout, runtime):
    """Wait until CONTAINER reports a healthy health check.

    Exits 0 once the container is healthy; exits 1 if it turns unhealthy,
    the timeout passes first, or the arguments are invalid.
    """
    notifier = ConsoleNotifier(usage=ctx.get_usage())

    try:
        config = load_config()
    except ConfigError as e:
        setup_logging().error(str(e))
        notifier.error(str(e), DisplayConfig(quiet=quiet, monochrome=monochrome))
        return 1

    logger = setup_logging(config.log_level)

    display = DisplayConfig(quiet=quiet, monochrome=monochrome or config.monochrome)
    source = EventSource(runtime=runtime or config.runtime, logger=logger)
    watcher = HealthWatcher(source=source, notifier=notifier, logger=logger)

    return watcher.run(
        container,
        since=since,
        timeout=timeout if timeout is not None else config.timeout,
        display=display,
    )
