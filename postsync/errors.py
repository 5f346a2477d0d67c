"""Error taxonomy for postsync."""

from __future__ import annotations


class Unauthorized(Exception):
    """Webhook token did not match the configured secret."""


class StoreError(Exception):
    """Wraps a failed file-store call with the operation that failed."""

    def __init__(self, operation: str, cause: Exception | None = None, detail: str = "") -> None:
        self.operation = operation
        message = f"{operation} failed"
        if detail:
            message = f"{message}: {detail}"
        elif cause is not None:
            message = f"{message}: {cause}"
        super().__init__(message)
        if cause is not None:
            self.__cause__ = cause


class Conflict(StoreError):
    """A file already exists at the target path."""


class StaleVersion(StoreError):
    """The caller's version token (file sha or head hash) is out of date."""


class TransientIOError(StoreError):
    """Network, timeout or provider fault. The whole event may be retried."""
