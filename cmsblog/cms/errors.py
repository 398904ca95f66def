from __future__ import annotations


class CMSError(Exception):
    """Raised when the content API cannot be reached or answers with an error."""

    def __init__(self, message: str, status_code: int | None = None):
        super().__init__(message)
        self.status_code = status_code


class BlockedURLError(ValueError):
    """Raised when a URL fails the outbound request safety checks."""
