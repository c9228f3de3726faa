"""Watch request construction and validation."""

import re
import time
from dataclasses import dataclass, field

from .config import DisplayConfig
from .errors import InvalidRequestError


# Timeout must be a plain non-negative integer: no sign, no decimals
TIMEOUT_PATTERN = re.compile(r"[0-9]+")

# Unix seconds in 10-digit epoch form
SINCE_PATTERN = re.compile(r"[0-9]{10}")

DEFAULT_TIMEOUT = 10


@dataclass(frozen=True)
class TimeWindow:
    """The [since, until] bound passed to the event source."""

    since: int
    until: int | None = None

    def validate(self) -> tuple[bool, str | None]:
        """
        Validate window ordering.

        Returns:
            tuple[bool, str | None]: (is_valid, error_message)
        """
        if self.until is not None and self.since > self.until:
            return False, (
                f"since ({self.since}) is later than the deadline ({self.until})"
            )
        return True, None


@dataclass(frozen=True)
class WatchRequest:
    """Immutable, validated input for a single watch."""

    container: str
    since: int
    timeout: int
    window: TimeWindow
    display: DisplayConfig = field(default_factory=DisplayConfig)

    @property
    def has_deadline(self) -> bool:
        return self.timeout > 0


def parse_timeout(value: int | str | None) -> int:
    """
    Parse a timeout given in seconds.

    Args:
        value: Seconds as an int or all-digit string. None means the default.

    Returns:
        int: Timeout in seconds, 0 meaning no deadline

    Raises:
        InvalidRequestError: If value is not a non-negative integer
    """
    if value is None:
        return DEFAULT_TIMEOUT
    text = str(value) if not isinstance(value, bool) else ""
    if not TIMEOUT_PATTERN.fullmatch(text):
        raise InvalidRequestError(
            f"Invalid timeout {value!r}: must be a non-negative integer number of seconds"
        )
    return int(text)


def parse_since(value: int | str | None, now: int) -> int:
    """
    Parse the start-of-window timestamp.

    Args:
        value: Unix seconds as a 10-digit int or string. None means now.
        now: Current Unix time in seconds

    Returns:
        int: Start-of-window timestamp

    Raises:
        InvalidRequestError: If value is not a 10-digit epoch timestamp
    """
    if value is None:
        return now
    text = str(value) if not isinstance(value, bool) else ""
    if not SINCE_PATTERN.fullmatch(text):
        raise InvalidRequestError(
            f"Invalid since timestamp {value!r}: must be Unix seconds (10 digits)"
        )
    return int(text)


def build_request(
    container: str,
    since: int | str | None = None,
    timeout: int | str | None = DEFAULT_TIMEOUT,
    display: DisplayConfig | None = None,
    now: int | None = None,
) -> WatchRequest:
    """
    Validate raw inputs and build a WatchRequest.

    Args:
        container: Container name or id
        since: Start-of-window timestamp, defaults to now
        timeout: Deadline in seconds, 0 for none
        display: Notification display settings
        now: Current Unix time, defaults to time.time()

    Returns:
        WatchRequest: The validated request

    Raises:
        InvalidRequestError: If any value is malformed or the window is inverted
    """
    if not isinstance(container, str) or not container.strip():
        raise InvalidRequestError("Container name or id is required")

    if now is None:
        now = int(time.time())

    timeout_seconds = parse_timeout(timeout)
    since_ts = parse_since(since, now)

    until = now + timeout_seconds if timeout_seconds > 0 else None
    window = TimeWindow(since=since_ts, until=until)

    is_valid, error = window.validate()
    if not is_valid:
        raise InvalidRequestError(f"Invalid time window: {error}")

    return WatchRequest(
        container=container.strip(),
        since=since_ts,
        timeout=timeout_seconds,
        window=window,
        display=display or DisplayConfig(),
    )
