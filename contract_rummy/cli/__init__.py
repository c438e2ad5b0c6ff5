"""Command line interface for the contract rummy engine."""

from .main import app, main

__all__ = ["app", "main"]
