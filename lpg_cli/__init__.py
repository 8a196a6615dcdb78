"""
LPG CLI - Command Line Interface Package

This package provides the ``lpg`` command for building language
identification profiles.

Modules:
    cli: Main CLI application
"""

from lpg_cli.cli import main, cli

__version__ = "1.0.0"

__all__ = [
    "main",
    "cli",
]
