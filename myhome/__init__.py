"""Domain types and calculations for the MiVivienda loan simulation wizard.

This module also exposes the package version for runtime display."""

from importlib import metadata

__all__ = ["__version__"]

try:
    __version__ = metadata.version("myhome-simulator")
except metadata.PackageNotFoundError:  # running from a source checkout
    __version__ = "0.1.0"
