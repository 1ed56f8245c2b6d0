"""
Classifier utilities shared by the sandbox and the evaluator.

Predicates that normalize heterogeneous runtime values, and helpers that turn
arbitrary failure values into a single presentable message.
"""

from __future__ import annotations

import inspect
import re
from collections.abc import Mapping
from types import BuiltinFunctionType, FunctionType, MethodType, ModuleType

MAX_MESSAGE_LENGTH = 500
UNKNOWN_ERROR = "Unknown error occurred"

_WINDOWS_PATH = re.compile(r"[A-Za-z]:[\\/][^\s:]+")
_POSIX_PATH = re.compile(r"/[^\s:]+/[^\s:]+")


def is_callable(value: object) -> bool:
    return callable(value)


def is_awaitable(value: object) -> bool:
    return inspect.isawaitable(value)


def is_sequence(value: object) -> bool:
    """Ordered sequences are lists and tuples; strings never count."""
    return isinstance(value, (list, tuple))


def is_record(value: object) -> bool:
    """Mappings, or plain objects compared by their instance attributes."""
    if isinstance(value, Mapping):
        return True
    if isinstance(value, (type, ModuleType, FunctionType, MethodType, BuiltinFunctionType)):
        return False
    return hasattr(value, "__dict__")


def as_record(value: object) -> Mapping[object, object] | None:
    if isinstance(value, Mapping):
        return value
    if is_record(value):
        return vars(value)
    return None


def get_error_message(error: object) -> str:
    """Extract a printable message from any failure value."""
    if isinstance(error, BaseException):
        message = str(error)
        name = error.__class__.__name__
        return f"{name}: {message}" if message else name

    message = getattr(error, "message", None)
    if message is not None:
        return str(message)

    if isinstance(error, str):
        return error

    return UNKNOWN_ERROR


def sanitize_error_message(message: str) -> str:
    """Redact filesystem paths and truncate overly long messages."""
    sanitized = _WINDOWS_PATH.sub("[path]", message)
    sanitized = _POSIX_PATH.sub("[path]", sanitized)

    if len(sanitized) > MAX_MESSAGE_LENGTH:
        sanitized = sanitized[: MAX_MESSAGE_LENGTH - 3] + "..."

    return sanitized
