"""skillsense: context-aware skill activation for AI coding sessions."""

from importlib.metadata import PackageNotFoundError, version

try:
    __version__ = version("skillsense")
except PackageNotFoundError:
    __version__ = "0.0.0-dev"
