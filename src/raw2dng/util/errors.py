from __future__ import annotations

class Raw2DngError(Exception):
    """Base exception for the application."""

class UserCancelledError(Raw2DngError):
    """Raised when user cancels an in-progress batch."""

class BatchEmptyError(Raw2DngError):
    """Raised when a batch has no RAW files to convert."""

class AccessDeniedError(Raw2DngError):
    """Raised when scoped access to an input or the output folder is refused."""

class ReadError(Raw2DngError):
    """Raised when an input file cannot be read before conversion."""

class ConversionFailedError(Raw2DngError):
    """Raised when the converter reports a non-empty error for a file."""

class DngLabError(Raw2DngError):
    """Raised when the dnglab tool cannot be invoked."""

class OutputCollisionError(Raw2DngError):
    """Raised when two inputs in one batch map to the same DNG path."""
