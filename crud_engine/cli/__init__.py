"""
Command-line interface for CRUD_ENGINE.

Usage:
    crud-engine validate models/Task.json
    crud-engine list --models-dir models
    crud-engine show Task --format pretty
"""

from .main import cli

__all__ = ["cli"]
