"""Utilities used by the tandem CLI."""

from ._app import app, create_app, main

__all__ = ["app", "create_app", "main"]
