"""
gf-patterns - save, list and replay named invocations of grep-like search tools.
"""

from importlib.metadata import PackageNotFoundError, version

try:
    __version__ = version("gf-patterns")
except PackageNotFoundError:  # pragma: no cover - fallback for source checkouts
    __version__ = "0.0.0"

__all__ = ["__version__"]
