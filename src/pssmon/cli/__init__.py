"""
Command-line interface for the pssmon package.

This module provides the main CLI entry point for the monitoring application.
"""

from .main import main, main_cli

__all__ = [
    "main",
    "main_cli",
]
