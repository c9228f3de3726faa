"""healthwait - wait for a container health check to settle."""

from importlib.metadata import PackageNotFoundError, version

try:
    __version__ = version("healthwait")
except PackageNotFoundError:
    __version__ = "dev"

__all__ = ["__version__"]
