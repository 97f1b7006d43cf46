"""
CLI tools for elvdoc.

This module provides the `elvdoc` command:
- pack: Build an archive from a directory
- validate: Check archives
- show: Inspect an archive

Invariants:
    - Tools only use the public archive and codec APIs
    - Exit codes are stable for scripting
"""

from .cli import main, setup_logging

__all__ = ["main", "setup_logging"]
