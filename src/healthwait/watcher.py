"""Health watcher state machine."""

import logging
import signal
import subprocess
import threading
from collections.abc import Iterable, Iterator
from contextlib import ExitStack, contextmanager
from enum import Enum, auto
from typing import Optional

from .config import DisplayConfig
from .errors import InvalidRequestError, ResourceUnavailableError, WatchInterruptedError
from .events import Outcome, classify_line
from .notifiers import ConsoleNotifier
from .request import DEFAULT_TIMEOUT, WatchRequest, build_request
from .source import EventSource, LineSource


class State(Enum):
    """Watcher states."""
    INITIALIZING = auto()
    WATCHING = auto()
    DONE = auto()
    FAILED = auto()


# Signals that end a watch early
INTERRUPT_SIGNALS = tuple(
    getattr(signal, name)
    for name in ("SIGINT", "SIGTERM", "SIGHUP")
    if hasattr(signal, name)
)


@contextmanager
def interruption_guard() -> Iterator[None]:
    """
    Raise WatchInterruptedError on termination signals while active.

    Handlers can only be installed from the main thread; elsewhere this
    does nothing and signals keep their existing behaviour.
    """
    if threading.current_thread() is not threading.main_thread():
        yield
        return

    received = []

    def handle_signal(signum, frame):
        received.append(signum)
        # Repeats land while cleanup is running and must not abort it
        if len(received) == 1:
            raise WatchInterruptedError(signum)

    previous = {}
    try:
        for signum in INTERRUPT_SIGNALS:
            previous[signum] = signal.signal(signum, handle_signal)
        yield
    finally:
        for signum, handler in previous.items():
            signal.signal(signum, handler if handler is not None else signal.SIG_DFL)


class HealthWatcher:
    """Waits for a container to report a terminal health status.

    The event source does the filtering and enforces the deadline through its
    own time window; the watcher only classifies lines and owns cleanup.
    End-of-stream without a terminal status is reported as a timeout, whatever
    made the stream end.
    """

    def __init__(
        self,
        source: Optional[LineSource] = None,
        notifier: Optional[ConsoleNotifier] = None,
        logger: Optional[logging.Logger] = None,
    ):
        if logger is None:
            from .logging import setup_logging

            logger = setup_logging()
        self.logger = logger
        self.source = source or EventSource(logger=logger)
        self.notifier = notifier or ConsoleNotifier()
        self.state = State.INITIALIZING
        self.outcome: Optional[Outcome] = None

    def run(
        self,
        container: str,
        *,
        since: int | str | None = None,
        timeout: int | str | None = DEFAULT_TIMEOUT,
        display: Optional[DisplayConfig] = None,
    ) -> int:
        """
        Validate inputs, watch, and return the process exit code.

        Returns 0 when the container became healthy and 1 for every other
        terminal result, including rejected input.
        """
        display = display or DisplayConfig()
        self.state = State.INITIALIZING
        self.outcome = None

        try:
            request = build_request(container, since=since, timeout=timeout, display=display)
        except InvalidRequestError as e:
            self._fail(str(e), display, show_usage=True)
            return 1

        try:
            outcome = self.watch(request)
        except ResourceUnavailableError as e:
            self._fail(str(e), display)
            return 1

        return outcome.exit_code

    def watch(self, request: WatchRequest) -> Outcome:
        """
        Block until a terminal health status arrives or the stream ends.

        Raises:
            ResourceUnavailableError: If the event source cannot be started
            WatchInterruptedError: If a termination signal arrives mid-watch
        """
        self.state = State.WATCHING
        self.outcome = None
        self.logger.info(
            f"Watching {request.container} (since={request.window.since}, "
            f"until={request.window.until})"
        )

        try:
            with ExitStack() as stack:
                stack.enter_context(interruption_guard())

                # Channel first: an interruption before spawn has no process to stop
                channel = self.source.open_channel(request.container)
                stack.enter_context(channel)

                lines, process = self.source.start(request.container, request.window, channel)
                stack.callback(self.source.stop, process)

                outcome = self._consume(request, lines)
                if outcome is Outcome.TIMED_OUT:
                    self._log_source_exit(request, process)
        except WatchInterruptedError as e:
            self.logger.warning(f"Watch of {request.container} interrupted by signal {e.signum}")
            raise

        self.state = State.DONE
        self.outcome = outcome
        self.logger.info(f"Watch of {request.container} finished: {outcome.value}")
        self._announce(request, outcome)
        return outcome

    def _consume(self, request: WatchRequest, lines: Iterable[str]) -> Outcome:
        """Read lines until a terminal status or end-of-stream."""
        announced_starting = False

        for line in lines:
            status = classify_line(line)
            if status is None:
                self.logger.debug(f"Ignoring event line: {line!r}")
                continue

            self.logger.info(f"{request.container} reported {status.value}")
            if status.is_terminal:
                return Outcome.from_status(status)

            if not announced_starting:
                self.notifier.notify(
                    f"Container {request.container} health check is starting",
                    request.display,
                )
                announced_starting = True

        return Outcome.TIMED_OUT

    def _log_source_exit(self, request: WatchRequest, process: subprocess.Popen) -> None:
        try:
            returncode = process.wait(timeout=1)
        except subprocess.TimeoutExpired:
            returncode = None

        if returncode == 0:
            self.logger.info(f"Event stream for {request.container} closed")
        else:
            self.logger.warning(
                f"Event source for {request.container} ended with status {returncode}"
            )

    def _announce(self, request: WatchRequest, outcome: Outcome) -> None:
        container = request.container
        if outcome is Outcome.HEALTHY:
            self.notifier.notify(f"Container {container} is healthy", request.display)
        elif outcome is Outcome.UNHEALTHY:
            self.notifier.notify(f"Container {container} is unhealthy", request.display, ok=False)
        elif request.has_deadline:
            self.notifier.notify(
                f"Timed out after {request.timeout}s waiting for container {container} "
                "to become healthy",
                request.display,
                ok=False,
            )
        else:
            self.notifier.notify(
                f"Event stream for container {container} ended before it became healthy",
                request.display,
                ok=False,
            )

    def _fail(self, message: str, display: DisplayConfig, show_usage: bool = False) -> None:
        self.state = State.FAILED
        self.logger.error(f"Watch failed: {message}")
        self.notifier.error(message, display, show_usage=show_usage)
