"""Error taxonomy for the console.

All three are recoverable: the client raises them, the controller catches
them and hands them back inside a ``Result``.
"""
from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Optional


class ConsoleError(Exception):
    """Base class for every failure the console reports to the operator."""

    def __init__(self, message: str, status_code: int | None = None):
        super().__init__(message)
        self.message = message
        self.status_code = status_code  # HTTP status when the server answered


class AuthError(ConsoleError):
    """Bad credentials or connection failure during login or registration."""


class FetchError(ConsoleError):
    """The order snapshot could not be retrieved or parsed."""


class UpdateError(ConsoleError):
    """A status change or order deletion was not acknowledged."""


@dataclass(frozen=True)
class Result:
    """Outcome of a console operation.

    ``ok`` is False both when the operation failed (``error`` is set) and when
    it was skipped on purpose, e.g. the operator declined a confirmation.
    """
    ok: bool
    value: Any = None
    error: Optional[ConsoleError] = None
    message: str = ""

    @classmethod
    def success(cls, value: Any = None, message: str = "") -> "Result":
        return cls(ok=True, value=value, message=message)

    @classmethod
    def failure(cls, error: ConsoleError) -> "Result":
        return cls(ok=False, error=error, message=error.message)

    @classmethod
    def skipped(cls, message: str) -> "Result":
        return cls(ok=False, message=message)
