"""HTTP transport for the board."""

from .api import create_app

__all__ = ["create_app"]
