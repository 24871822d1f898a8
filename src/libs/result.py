"""
Result type used as the return convention of every use case.

A use case either returns ``Return.ok(value)`` or ``Return.err(Error(code, message))``;
callers branch on ``is_ok()`` / ``is_err()`` instead of catching exceptions.
"""

from dataclasses import dataclass
from typing import Generic, Optional, TypeVar

T = TypeVar("T")


@dataclass(frozen=True)
class Error:
    """Machine-readable error code plus a human readable message"""

    code: str
    message: str = ""


@dataclass(frozen=True)
class Result(Generic[T]):
    value: Optional[T] = None
    error: Optional[Error] = None

    def is_ok(self) -> bool:
        return self.error is None

    def is_err(self) -> bool:
        return self.error is not None

    def unwrap_or(self, default: T) -> T:
        """Value on success, ``default`` on error"""
        return self.value if self.is_ok() else default


class Return:
    """Constructors for Result"""

    @staticmethod
    def ok(value: T = None) -> Result[T]:
        return Result(value=value)

    @staticmethod
    def err(error: Error) -> Result:
        return Result(error=error)
