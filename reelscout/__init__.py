"""ReelScout launcher: the ASGI app plus the ``reelscout`` server command."""

from __future__ import annotations

from importlib.metadata import PackageNotFoundError, version

from app.main import app, create_app

try:
    __version__ = version("reelscout")
except PackageNotFoundError:  # plain checkout without an install
    __version__ = "0.0.0"

__all__ = ["__version__", "app", "create_app"]
