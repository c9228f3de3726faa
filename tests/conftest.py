"""Pytest configuration and fixtures for healthwait tests."""

import logging
from pathlib import Path

import pytest


FAKE_RUNTIME_SCRIPT = """#!/bin/sh
# Stand-in for `docker events`: replays <container>.events from the fixture
# directory, then keeps the stream open if <container>.hold exists. With
# <container>.ignore-term present the held stream ignores SIGTERM.
for arg in "$@"; do
    case "$arg" in
        container=*) container="${{arg#container=}}" ;;
    esac
done
echo "$@" > "{events_dir}/$container.args"
if [ -f "{events_dir}/$container.events" ]; then
    cat "{events_dir}/$container.events"
fi
if [ -f "{events_dir}/$container.ignore-term" ]; then
    trap "" TERM
fi
if [ -f "{events_dir}/$container.hold" ]; then
    exec sleep 30
fi
"""


@pytest.fixture(autouse=True)
def tmp_home(tmp_path, monkeypatch):
    """
    Mock home directory so tests never touch the real config or log file.

    Args:
        tmp_path: Pytest temporary directory
        monkeypatch: Pytest monkeypatch fixture

    Yields:
        Path: Temporary home directory
    """
    home = tmp_path / "home"
    home.mkdir()
    monkeypatch.setenv("HOME", str(home))
    monkeypatch.delenv("HEALTHWAIT_CONFIG", raising=False)
    monkeypatch.delenv("HEALTHWAIT_LOG", raising=False)
    monkeypatch.delenv("HEALTHWAIT_LOG_LEVEL", raising=False)
    yield home


@pytest.fixture
def logger():
    """Logger without handlers, for components that accept one."""
    test_logger = logging.getLogger("healthwait.tests")
    test_logger.handlers = []
    return test_logger


@pytest.fixture
def events_dir(tmp_path):
    """Directory the fake runtime reads its scripted events from."""
    directory = tmp_path / "events"
    directory.mkdir()
    return directory


@pytest.fixture
def fake_runtime(tmp_path, events_dir):
    """
    Executable that behaves like `docker events` for scripted containers.

    Yields:
        Path: Path to the fake runtime executable
    """
    script = tmp_path / "fake-docker"
    script.write_text(FAKE_RUNTIME_SCRIPT.format(events_dir=events_dir))
    script.chmod(0o755)
    yield script


@pytest.fixture
def script_events(events_dir):
    """
    Script the events the fake runtime emits for a container.

    Returns:
        Callable: script(container, lines, hold=False, ignore_term=False)
    """

    def script(
        container: str, lines: list[str], hold: bool = False, ignore_term: bool = False
    ) -> Path:
        events_file = events_dir / f"{container}.events"
        events_file.write_text("".join(f"{line}\n" for line in lines))
        if hold:
            (events_dir / f"{container}.hold").touch()
        if ignore_term:
            (events_dir / f"{container}.ignore-term").touch()
        return events_file

    return script
