"""Error taxonomy shared by the store adapter, env codec and CLI."""

from enum import Enum

from botocore.exceptions import ClientError

UNKNOWN_ERROR = "Unknown error"


class ErrorKind(str, Enum):
    """Broad category of a failure, so callers can branch without parsing text."""

    CONFIGURATION = "configuration"
    TRANSPORT = "transport"
    FORMAT = "format"
    FILESYSTEM = "filesystem"


class SecretsError(Exception):
    """Raised by every core operation; ``message`` is always non-empty."""

    def __init__(self, kind: ErrorKind, message: str):
        super().__init__(message)
        self.kind = kind
        self.message = message

    @classmethod
    def wrap(cls, kind: ErrorKind, operation: str, exc: BaseException) -> "SecretsError":
        """Build ``Failed to <operation>: <message>`` from an underlying failure."""
        return cls(kind, f"Failed to {operation}: {error_message(exc)}")

    def __str__(self) -> str:
        return self.message


def error_message(exc: BaseException) -> str:
    """
    Extract a human-readable message from an arbitrary exception.

    botocore ``ClientError`` carries the service message in its response
    payload; anything else falls back to ``str(exc)``. An empty result maps to
    ``"Unknown error"``.
    """
    message = None
    if isinstance(exc, ClientError):
        message = exc.response.get("Error", {}).get("Message")
    elif isinstance(exc, SecretsError):
        message = exc.message
    else:
        message = str(exc)

    if not message or not message.strip():
        return UNKNOWN_ERROR
    return message
