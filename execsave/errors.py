"""
Error taxonomy for execsave.

Filesystem failures raised while processing one document are classified
into PERMISSION_DENIED, NOT_FOUND or UNEXPECTED. They never escape the
pipeline; the classification decides which message the user sees.
"""

import errno
from dataclasses import dataclass
from enum import Enum
from typing import Any, Optional


class ExecSaveError(Exception):
    """Base class for errors raised by execsave."""


class ConfigError(ExecSaveError):
    """Raised for invalid configuration values supplied in code."""


class BridgeError(ExecSaveError):
    """Raised when the editor bridge cannot accept work."""


class ErrorKind(Enum):
    """User-facing category of a processing failure."""
    PERMISSION_DENIED = "permission_denied"
    NOT_FOUND = "not_found"
    UNEXPECTED = "unexpected"


@dataclass(frozen=True)
class ClassifiedError:
    """A processing failure mapped to its user-facing category.

    Attributes:
        kind: Category of the failure
        detail: Underlying message, kept for UNEXPECTED failures
        error_type: Type name of the original error value
    """
    kind: ErrorKind
    detail: Optional[str] = None
    error_type: Optional[str] = None


_PERMISSION_ERRNOS = {errno.EACCES, errno.EPERM}


def classify_error(error: Any) -> ClassifiedError:
    """Classify a failure raised by stat or chmod.

    Args:
        error: The raised exception, or any other value a host passed along

    Returns:
        ClassifiedError describing the failure
    """
    error_type = type(error).__name__

    if isinstance(error, PermissionError):
        return ClassifiedError(ErrorKind.PERMISSION_DENIED, error_type=error_type)
    if isinstance(error, FileNotFoundError):
        return ClassifiedError(ErrorKind.NOT_FOUND, error_type=error_type)

    code = getattr(error, "errno", None)
    if code in _PERMISSION_ERRNOS:
        return ClassifiedError(ErrorKind.PERMISSION_DENIED, error_type=error_type)
    if code == errno.ENOENT:
        return ClassifiedError(ErrorKind.NOT_FOUND, error_type=error_type)

    return ClassifiedError(ErrorKind.UNEXPECTED, detail=str(error), error_type=error_type)
