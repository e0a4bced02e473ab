"""Gateway settings service: settings accessors, tunnel info, and logout."""
from importlib.metadata import PackageNotFoundError, version

try:
    __version__ = version("gateway-settings")
except PackageNotFoundError:  # pragma: no cover
    __version__ = "0.0.0"
