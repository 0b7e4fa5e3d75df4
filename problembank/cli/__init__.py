"""Command-line interface for the problem bank."""

from .app import app

__all__ = ["app"]
