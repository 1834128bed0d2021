"""Typed results returned by every backend adapter.

Adapters never raise for transport problems. They hand back a
``BackendResult`` whose error is either recoverable (the caller may fall
back to local data) or fatal (the caller must surface the message).
"""

from dataclasses import dataclass
from enum import Enum
from typing import Any


class ErrorKind(Enum):
    UNAVAILABLE = "unavailable"  # network error, timeout, 5xx, malformed body
    UNAUTHORIZED = "unauthorized"  # 401, stale or expired session


@dataclass(frozen=True)
class RecoverableError:
    kind: ErrorKind
    message: str


@dataclass(frozen=True)
class FatalError:
    message: str
    status_code: int | None = None


@dataclass(frozen=True)
class BackendResult:
    """Outcome of one backend call: a value, or exactly one error."""

    value: Any = None
    error: RecoverableError | FatalError | None = None

    @classmethod
    def success(cls, value: Any = None) -> "BackendResult":
        return cls(value=value)

    @classmethod
    def unavailable(cls, message: str) -> "BackendResult":
        return cls(error=RecoverableError(kind=ErrorKind.UNAVAILABLE, message=message))

    @classmethod
    def unauthorized(cls, message: str = "Session expired") -> "BackendResult":
        return cls(error=RecoverableError(kind=ErrorKind.UNAUTHORIZED, message=message))

    @classmethod
    def rejected(cls, message: str, status_code: int | None = 400) -> "BackendResult":
        return cls(error=FatalError(message=message, status_code=status_code))

    @property
    def ok(self) -> bool:
        return self.error is None

    @property
    def recoverable(self) -> bool:
        return isinstance(self.error, RecoverableError)

    @property
    def fatal(self) -> bool:
        return isinstance(self.error, FatalError)


def classify_status(status_code: int, message: str) -> BackendResult:
    """Map a non-2xx HTTP status to the matching error result."""
    if status_code == 401:
        return BackendResult.unauthorized(message or "Session expired")
    if status_code >= 500:
        return BackendResult.unavailable(message or f"Server error ({status_code})")
    return BackendResult.rejected(message or f"Request failed ({status_code})", status_code=status_code)
