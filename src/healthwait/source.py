"""Event source adapter: runs the container runtime's event stream."""

import logging
import os
import subprocess
import uuid
from collections.abc import Iterator
from dataclasses import dataclass
from pathlib import Path
from shutil import which
from typing import Protocol

from .errors import ResourceUnavailableError
from .request import TimeWindow


@dataclass(frozen=True)
class RuntimeProfile:
    """How a container runtime is asked for health events."""

    name: str
    executable: str
    status_format: str


# Both formats render one "health_status: <state>" line per event
RUNTIME_PROFILES = {
    "docker": RuntimeProfile("docker", "docker", "{{.Status}}"),
    "podman": RuntimeProfile("podman", "podman", "health_status: {{.HealthStatus}}"),
}

# Seconds to wait after SIGTERM before falling back to SIGKILL
KILL_TIMEOUT = 5.0


def get_runtime_profile(runtime: str) -> RuntimeProfile:
    """
    Resolve a runtime name or executable path to a profile.

    A known name ("docker", "podman") maps to its profile. Anything else is
    treated as a path to a docker-compatible executable, unless its file
    name is a known runtime.

    Args:
        runtime: Runtime name or path to its executable

    Returns:
        RuntimeProfile: Profile with the executable to launch
    """
    if runtime in RUNTIME_PROFILES:
        return RUNTIME_PROFILES[runtime]

    base = RUNTIME_PROFILES.get(Path(runtime).name, RUNTIME_PROFILES["docker"])
    return RuntimeProfile(base.name, runtime, base.status_format)


def get_runtime_exe(profile: RuntimeProfile) -> str:
    """Find the runtime executable."""
    exe = which(profile.executable)
    if not exe:
        raise ResourceUnavailableError(f"{profile.executable} not found in PATH")
    return exe


class EventChannel:
    """
    Exclusively owned pipe carrying event lines from the source process.

    The write end is handed to the subordinate process; the read end is
    consumed line by line. Nothing is created on disk.
    """

    def __init__(self, name: str, read_fd: int, write_fd: int):
        self.name = name
        self._write_fd: int | None = write_fd
        self._reader = os.fdopen(read_fd, "r", encoding="utf-8", errors="replace")

    @classmethod
    def open(cls, container: str) -> "EventChannel":
        """
        Create a new channel for one watch.

        Raises:
            ResourceUnavailableError: If the pipe cannot be created
        """
        name = f"healthwait-{container}-{uuid.uuid4().hex[:10]}"
        try:
            read_fd, write_fd = os.pipe()
        except OSError as e:
            raise ResourceUnavailableError(f"Failed to create event channel {name}: {e}") from e

        try:
            return cls(name, read_fd, write_fd)
        except BaseException:
            os.close(read_fd)
            os.close(write_fd)
            raise

    @property
    def write_fd(self) -> int:
        if self._write_fd is None:
            raise ResourceUnavailableError(f"Event channel {self.name} has no write end")
        return self._write_fd

    @property
    def closed(self) -> bool:
        return self._reader.closed

    def release_writer(self) -> None:
        """Close our copy of the write end so EOF follows the writer's exit."""
        if self._write_fd is not None:
            fd, self._write_fd = self._write_fd, None
            os.close(fd)

    def lines(self) -> Iterator[str]:
        """Yield lines in arrival order, blocking until each is available."""
        for line in iter(self._reader.readline, ""):
            yield line.rstrip("\r\n")

    def close(self) -> None:
        """Close both ends. Safe to call more than once."""
        self.release_writer()
        self._reader.close()

    def __enter__(self) -> "EventChannel":
        return self

    def __exit__(self, *args) -> None:
        self.close()

    def __repr__(self) -> str:
        state = "closed" if self.closed else "open"
        return f"<EventChannel {self.name} [{state}]>"


class LineSource(Protocol):
    """Interface for anything that streams health event lines."""

    def open_channel(self, container: str) -> EventChannel:
        """
        Create the channel the source will write into.

        Raises:
            ResourceUnavailableError: If the channel cannot be created
        """
        ...

    def start(
        self, container: str, window: TimeWindow, channel: EventChannel
    ) -> tuple[Iterator[str], subprocess.Popen]:
        """
        Begin streaming events for a container.

        Args:
            container: Container name or id
            window: Time bounds for the events to emit
            channel: Channel to write lines into

        Returns:
            tuple: (lazy blocking line iterator, process handle)

        Raises:
            ResourceUnavailableError: If the source cannot be started
        """
        ...

    def stop(self, process: subprocess.Popen | None) -> None:
        """
        Terminate the source process if it is still running.

        Must be safe to call repeatedly and after the process exited.
        """
        ...


class EventSource:
    """Runs `<runtime> events` filtered to one container's health events."""

    def __init__(
        self,
        runtime: str = "docker",
        kill_timeout: float = KILL_TIMEOUT,
        logger: logging.Logger | None = None,
    ):
        if logger is None:
            from .logging import setup_logging

            logger = setup_logging()
        self.logger = logger
        self.profile = get_runtime_profile(runtime)
        self.kill_timeout = kill_timeout
        self._exe: str | None = None

    def _get_exe(self) -> str:
        if self._exe is None:
            self._exe = get_runtime_exe(self.profile)
        return self._exe

    def build_command(self, container: str, window: TimeWindow) -> list[str]:
        """Build the events command line."""
        cmd = [
            self._get_exe(),
            "events",
            "--filter",
            "event=health_status",
            "--filter",
            f"container={container}",
        ]

        cmd += ["--since", str(window.since)]
        if window.until is not None:
            cmd += ["--until", str(window.until)]

        cmd += ["--format", self.profile.status_format]
        return cmd

    def open_channel(self, container: str) -> EventChannel:
        channel = EventChannel.open(container)
        self.logger.debug(f"Opened event channel {channel.name}")
        return channel

    def start(
        self, container: str, window: TimeWindow, channel: EventChannel
    ) -> tuple[Iterator[str], subprocess.Popen]:
        cmd = self.build_command(container, window)
        self.logger.info(f"Starting event source: {' '.join(cmd)}")

        try:
            process = subprocess.Popen(
                cmd,
                stdin=subprocess.DEVNULL,
                stdout=channel.write_fd,
                stderr=subprocess.DEVNULL,
            )
        except OSError as e:
            raise ResourceUnavailableError(
                f"Failed to start {self.profile.name} events for {container}: {e}"
            ) from e
        finally:
            # The child holds its own copy; ours must go for EOF to reach the reader
            channel.release_writer()

        self.logger.info(f"Event source running with PID {process.pid} on {channel.name}")
        return channel.lines(), process

    def stop(self, process: subprocess.Popen | None) -> None:
        if process is None or process.pid <= 1:
            return

        if process.poll() is not None:
            self.logger.debug(
                f"Event source PID {process.pid} already exited ({process.returncode})"
            )
            return

        try:
            process.terminate()
        except ProcessLookupError:
            return

        try:
            process.wait(timeout=self.kill_timeout)
        except subprocess.TimeoutExpired:
            self.logger.warning(
                f"Event source PID {process.pid} ignored SIGTERM, killing"
            )
            self._kill(process)
        except BaseException:
            # Interrupted while waiting: the process must not outlive us
            self.logger.warning(f"Killing event source PID {process.pid} after interrupted stop")
            self._kill(process)
            raise

        self.logger.info(f"Stopped event source PID {process.pid}")

    def _kill(self, process: subprocess.Popen) -> None:
        try:
            process.kill()
        except ProcessLookupError:
            return
        process.wait()
