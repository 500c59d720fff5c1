"""
CLI commands for Heracles.
"""

from heracles.cli.serve import serve_command
from heracles.cli.validate import validate_command

__all__ = [
    "serve_command",
    "validate_command",
]
