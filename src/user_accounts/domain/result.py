"""Outcome wrapper returned by every user account operation."""

from __future__ import annotations

from dataclasses import dataclass
from enum import StrEnum
from typing import Generic, TypeVar

T = TypeVar("T")


class ErrorCause(StrEnum):
    """Failure causes reported by user account operations."""

    INVALID_INPUT = "invalid_input"
    ADMIN_CONFLICT = "admin_conflict"
    LOGIN_CONFLICT_INFLIGHT = "login_conflict_inflight"
    LOGIN_CONFLICT_PERSISTED = "login_conflict_persisted"
    NOT_FOUND = "not_found"
    STORE_ERROR = "store_error"


@dataclass(frozen=True)
class Result(Generic[T]):
    """Either a success with an optional value or a failure with cause and message.

    Use `Result.success` / `Result.failure` instead of the constructor.
    """

    value: T | None = None
    cause: ErrorCause | None = None
    message: str | None = None

    def __post_init__(self) -> None:
        if (self.cause is None) != (self.message is None):
            raise ValueError("failure results require both cause and message")
        if self.cause is not None and self.value is not None:
            raise ValueError("failure results cannot carry a value")

    @classmethod
    def success(cls, value: T | None = None) -> Result[T]:
        return cls(value=value)

    @classmethod
    def failure(cls, cause: ErrorCause, message: str) -> Result[T]:
        if not message:
            raise ValueError("failure message cannot be blank")
        return cls(cause=cause, message=message)

    @property
    def succeeded(self) -> bool:
        return self.cause is None

    @property
    def failed(self) -> bool:
        return self.cause is not None
