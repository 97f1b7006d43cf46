"""
Error types for elvdoc.

This module defines all exception types raised when building or reading
elv archives:
- ElvDocError: Base exception
- AssetReadError: A source asset could not be read
- ArchiveWriteError: The destination archive could not be written
- ArchiveReadError: An archive could not be decoded
- ConfigError: config.yaml is malformed or misses required fields
- InvalidArchiveError: A built archive failed validation

Validation (elvdoc.validate) never raises any of these; it returns False.

Invariants:
    - All errors inherit from ElvDocError
    - Errors carry the path of the failing step in details
    - The underlying OSError or parser error is chained as __cause__
"""

from __future__ import annotations

from typing import Any, Dict, List, Optional


class ElvDocError(Exception):
    """Base exception for all elvdoc errors.

    Attributes:
        message: Error message
        code: Error code for programmatic handling
        details: Additional error context
    """

    def __init__(
        self,
        message: str,
        code: Optional[str] = None,
        details: Optional[Dict[str, Any]] = None,
    ) -> None:
        super().__init__(message)
        self.message = message
        self.code = code or "ELVDOC_ERROR"
        self.details = details or {}


class AssetReadError(ElvDocError):
    """A source asset could not be read.

    Raised when:
    - The file does not exist
    - The file is not readable
    - The file is not valid UTF-8 text
    """

    def __init__(
        self,
        path: str,
        role: Optional[str] = None,
        reason: Optional[str] = None,
    ) -> None:
        msg = f"Cannot read {role or 'asset'} file '{path}'"
        if reason:
            msg += f": {reason}"
        super().__init__(
            msg,
            code="ASSET_READ_ERROR",
            details={"path": path, "role": role},
        )
        self.path = path
        self.role = role


class ArchiveWriteError(ElvDocError):
    """The destination archive could not be created or written."""

    def __init__(self, path: str, reason: Optional[str] = None) -> None:
        msg = f"Cannot write archive '{path}'"
        if reason:
            msg += f": {reason}"
        super().__init__(
            msg,
            code="ARCHIVE_WRITE_ERROR",
            details={"path": path},
        )
        self.path = path


class ArchiveReadError(ElvDocError):
    """An archive could not be decoded into a bundle.

    Raised when:
    - The file cannot be opened
    - The stream is not gzip or not tar
    - One of the four bundle entries is missing
    """

    def __init__(self, path: str, reason: str) -> None:
        super().__init__(
            f"Cannot read archive '{path}': {reason}",
            code="ARCHIVE_READ_ERROR",
            details={"path": path, "reason": reason},
        )
        self.path = path
        self.reason = reason


class ConfigError(ElvDocError):
    """config.yaml is not a well-formed elvdoc configuration."""

    def __init__(self, message: str, errors: Optional[List[str]] = None) -> None:
        super().__init__(
            message,
            code="CONFIG_ERROR",
            details={"errors": errors or []},
        )
        self.errors = errors or []


class InvalidArchiveError(ElvDocError):
    """A freshly built archive did not pass validation."""

    def __init__(self, path: str) -> None:
        super().__init__(
            f"Archive '{path}' failed validation",
            code="INVALID_ARCHIVE",
            details={"path": path},
        )
        self.path = path
