"""Command-line interface for VersaTools."""

from .main import cli

__all__ = ["cli"]
