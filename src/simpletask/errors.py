"""Recoverable tree conditions and the result type the manager reports them with."""

from dataclasses import dataclass
from enum import StrEnum


class ErrorKind(StrEnum):
    INVALID_PRIORITY = "invalid_priority"
    INVALID_CONVERSION = "invalid_conversion"
    OUT_OF_RANGE = "out_of_range"
    INVALID_TARGET = "invalid_target"


class TreeError(Exception):
    """Base class for conditions raised by the node store.

    None of these are fatal: the manager catches them and reports an Outcome.
    """

    kind: ErrorKind


class InvalidPriorityError(TreeError):
    kind = ErrorKind.INVALID_PRIORITY


class InvalidConversionError(TreeError):
    kind = ErrorKind.INVALID_CONVERSION


class OutOfRangeError(TreeError):
    kind = ErrorKind.OUT_OF_RANGE


class InvalidTargetError(TreeError):
    kind = ErrorKind.INVALID_TARGET


@dataclass(frozen=True)
class Outcome:
    """Result of a manager operation. Truthy on success."""

    error: ErrorKind | None = None
    message: str = ""

    @property
    def ok(self) -> bool:
        return self.error is None

    def __bool__(self) -> bool:
        return self.ok

    @classmethod
    def success(cls) -> "Outcome":
        return cls()

    @classmethod
    def failure(cls, error: ErrorKind, message: str = "") -> "Outcome":
        return cls(error=error, message=message)

    @classmethod
    def from_error(cls, exc: TreeError) -> "Outcome":
        return cls(error=exc.kind, message=str(exc))
