"""Failure classification for verification runs."""

from enum import Enum


class FailureKind(str, Enum):
    EMPTY_INPUT = "empty_input"
    SIZE_EXCEEDED = "size_exceeded"
    SAFETY_BLOCKED = "safety_blocked"
    NORMALIZATION_ERROR = "normalization_error"
    NO_CALLABLES = "no_callables"
    SANDBOX_CONSTRUCTION = "sandbox_construction"
    CALLABLE_NOT_FOUND = "callable_not_found"
    CALLABLE_NOT_CALLABLE = "callable_not_callable"
    INVOCATION_ERROR = "invocation_error"
    REJECTION_ERROR = "rejection_error"
    TIMEOUT = "timeout"
    INTERNAL = "internal"

    @property
    def is_run_level(self) -> bool:
        return self not in _PER_CASE


_PER_CASE = frozenset(
    {
        FailureKind.CALLABLE_NOT_FOUND,
        FailureKind.CALLABLE_NOT_CALLABLE,
        FailureKind.INVOCATION_ERROR,
        FailureKind.REJECTION_ERROR,
    }
)


class RunFailure(Exception):
    """A run-level failure that aborts the run before any case is graded."""

    def __init__(self, kind: FailureKind, message: str) -> None:
        super().__init__(message)
        self.kind: FailureKind = kind
        self.message: str = message


class CaseFailure(Exception):
    """A per-case failure recorded on that case's result only."""

    def __init__(self, kind: FailureKind, message: str) -> None:
        super().__init__(message)
        self.kind: FailureKind = kind
        self.message: str = message
