"""Custom exception types for the healthwait watcher."""


class HealthwaitError(Exception):
    """Base exception for all healthwait errors."""

    pass


class ConfigError(HealthwaitError):
    """Raised when the configuration file cannot be loaded or is invalid."""

    pass


class InvalidRequestError(HealthwaitError):
    """Raised when a watch request has a malformed timeout or time window."""

    pass


class ResourceUnavailableError(HealthwaitError):
    """Raised when the event channel or the event source process cannot be created."""

    pass


class WatchInterruptedError(HealthwaitError):
    """Raised when a signal asks a running watch to stop."""

    def __init__(self, signum: int):
        super().__init__(f"Watch interrupted by signal {signum}")
        self.signum = signum
