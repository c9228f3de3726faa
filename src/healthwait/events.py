"""Health status events and watch outcomes."""

from enum import Enum
from typing import Optional


# Every health event line the source emits starts with this
STATUS_PREFIX = "health_status: "


class HealthStatus(Enum):
    """Health states a container reports through its event stream."""
    STARTING = "starting"
    HEALTHY = "healthy"
    UNHEALTHY = "unhealthy"

    @property
    def is_terminal(self) -> bool:
        return self is not HealthStatus.STARTING


class Outcome(Enum):
    """Terminal result of a watch."""
    HEALTHY = "healthy"
    UNHEALTHY = "unhealthy"
    TIMED_OUT = "timed_out"

    @property
    def exit_code(self) -> int:
        return 0 if self is Outcome.HEALTHY else 1

    @classmethod
    def from_status(cls, status: HealthStatus) -> "Outcome":
        """Map a terminal health status to its outcome."""
        if status is HealthStatus.HEALTHY:
            return cls.HEALTHY
        if status is HealthStatus.UNHEALTHY:
            return cls.UNHEALTHY
        raise ValueError(f"{status.value} is not a terminal health status")


def classify_line(line: str) -> Optional[HealthStatus]:
    """
    Classify one event line.

    The whole line must be exactly ``health_status: <state>``; only the line
    terminator is stripped. Anything else is ignored by returning None.
    """
    line = line.rstrip("\r\n")
    if not line.startswith(STATUS_PREFIX):
        return None
    suffix = line[len(STATUS_PREFIX):]
    try:
        return HealthStatus(suffix)
    except ValueError:
        return None
