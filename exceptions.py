"""Exception classes for srvbase.

All exceptions inherit from SrvbaseError and carry a code, a message and
optional details. The ``fatal`` attribute tells callers whether the
pipeline must stop or may report and continue.
"""

from typing import Any

from enums import ErrorKind


class SrvbaseError(Exception):
    """Base exception for all srvbase errors."""

    fatal: bool = True

    def __init__(
        self,
        code: str,
        message: str,
        details: dict[str, Any] | None = None,
    ) -> None:
        self.code = code
        self.message = message
        self.details = details or {}
        super().__init__(message)

    def __repr__(self) -> str:
        return f"{self.__class__.__name__}(code={self.code!r}, message={self.message!r})"


class PrivilegeError(SrvbaseError):
    """Raised when the process is not running as root."""


class OSDetectionError(SrvbaseError):
    """Raised when /etc/os-release is missing or unreadable."""


class UnsupportedReleaseError(SrvbaseError):
    """Raised when no official mirror layout is known for the host release."""


class InputRequiredError(SrvbaseError):
    """Raised when required operator input is left empty."""


class ValidationError(SrvbaseError):
    """Raised when operator input is present but malformed."""


class SystemOperationError(SrvbaseError):
    """Raised when an OS-level operation fails.

    Recoverable by default: the pipeline reports it and continues.
    """

    fatal = False
    kind: ErrorKind = ErrorKind.COMMAND_FAILED


class PermissionDeniedError(SystemOperationError):
    """Raised when a configuration file cannot be written."""

    fatal = True
    kind = ErrorKind.PERMISSION_DENIED


class ServiceUnavailableError(SystemOperationError):
    """Raised when a systemd unit cannot be enabled, started or restarted."""

    kind = ErrorKind.SERVICE_UNAVAILABLE


class NotFoundError(SystemOperationError):
    """Raised when a required command or file does not exist."""

    kind = ErrorKind.NOT_FOUND


class CommandFailedError(SystemOperationError):
    """Raised when a command exits non-zero or times out."""

    kind = ErrorKind.COMMAND_FAILED
