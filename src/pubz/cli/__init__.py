"""pubz command-line interface."""

from pubz.cli.app import app, main

__all__ = ["app", "main"]
