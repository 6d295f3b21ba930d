"""refgen - Reference wrapper and JSON codec generator for Go-style declarations."""

from importlib.metadata import PackageNotFoundError, version

try:
    __version__ = version(__name__)
except PackageNotFoundError:
    __version__ = "0.0.0+local"
