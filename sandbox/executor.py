"""
In-process sandbox executor for untrusted snippets.
"""

from __future__ import annotations

import ast
import json
import logging
import re
import sys
import time
from collections.abc import Callable, Iterable, Iterator, Sequence
from contextlib import contextmanager
from types import CodeType, FrameType
from typing import Any

from sandbox import policy
from sandbox.classify import get_error_message, is_callable

logger = logging.getLogger(__name__)

SNIPPET_FILENAME = "<snippet>"

DEFAULT_CAPABILITY_MARKERS = [
    "socket",
    "urllib",
    "requests",
    "http",
    "subprocess",
    "open",
    "sqlite3",
    "threading",
    "multiprocessing",
    "os",
    "open_connection",
    "start_server",
    "create_connection",
]

CallableTable = dict[str, Callable[..., Any] | None]


class SandboxConstructionError(Exception):
    """The snippet could not be turned into executable statements."""


class ExecutionDeadlineExceeded(BaseException):
    """Raised inside snippet frames once the run deadline has passed.

    Derives from BaseException so `except Exception` in a snippet cannot
    swallow it.
    """


class CapturedConsole:
    """Stand-in for print() that records output instead of writing it."""

    def __init__(self) -> None:
        self.lines: list[str] = []

    @staticmethod
    def _render(value: object) -> str:
        if isinstance(value, (dict, list)):
            try:
                return json.dumps(value, indent=2)
            except (TypeError, ValueError):
                return str(value)
        return str(value)

    def print(
        self,
        *args: object,
        sep: str | None = " ",
        end: str | None = "\n",
        file: object = None,
        flush: bool = False,
    ) -> None:
        line = (" " if sep is None else sep).join(self._render(arg) for arg in args)
        if file is not None:
            line = f"ERROR: {line}"
        self.lines.append(line)


@contextmanager
def runaway_guard(deadline: float | None) -> Iterator[None]:
    """Raise ExecutionDeadlineExceeded in snippet frames after `deadline`.

    `deadline` is a time.monotonic() value. Only frames compiled from snippet
    source are traced, and only on the current thread. Python disables a trace
    hook once it raises, so this interrupts a runaway loop once.

    A snippet that catches the exception (`except BaseException:` or a bare
    `except:`) and keeps looping is not stopped again: the hook is already
    gone, and control never returns to the caller to re-arm it. Such a worker
    keeps running as a daemon thread until the process exits. The timeout race
    in the runner still reports the run as timed out.
    """
    if deadline is None:
        yield
        return

    def _check() -> None:
        if time.monotonic() >= deadline:
            raise ExecutionDeadlineExceeded("Execution deadline exceeded")

    def _local_trace(frame: FrameType, event: str, arg: object) -> Callable[..., object] | None:
        _check()
        return _local_trace

    def _global_trace(frame: FrameType, event: str, arg: object) -> Callable[..., object] | None:
        if frame.f_code.co_filename != SNIPPET_FILENAME:
            return None
        _check()
        return _local_trace

    previous = sys.gettrace()
    sys.settrace(_global_trace)
    try:
        yield
    finally:
        sys.settrace(previous)


class SandboxExecutor:
    """
    Evaluate a normalized snippet once into a fresh namespace and collect
    the callables it declares.

    Each executor owns its namespace and console; build a new one per run.
    """

    def __init__(
        self,
        allowed_modules: Iterable[str] | None = None,
        blocked_modules: Iterable[str] | None = None,
        capability_markers: Iterable[str] | None = None,
    ) -> None:
        self.allowed_modules: list[str] = list(allowed_modules or policy.ALLOWED_MODULES)
        self.blocked_modules: list[str] = list(blocked_modules or policy.BLOCKED_MODULES)
        self.capability_markers: list[str] = list(
            DEFAULT_CAPABILITY_MARKERS if capability_markers is None else capability_markers
        )
        self.console: CapturedConsole = CapturedConsole()
        self.namespace: dict[str, object] = {}

    def populate(self, code: str, names: Sequence[str]) -> CallableTable:
        """Run the snippet and map each extracted name to a callable or None."""
        try:
            statements = self._construct(code)
        except Exception as exc:  # noqa: BLE001 - classified below
            message = get_error_message(exc)
            source = getattr(exc, "text", None) or ""
            if self._mentions_unavailable_capability(f"{message}\n{source}"):
                logger.info(f"Snippet depends on an unavailable capability: {message}")
                return {}
            raise SandboxConstructionError(message) from exc

        self.namespace = self._build_namespace()
        for statement in statements:
            try:
                exec(statement, self.namespace)
            except (Exception, SystemExit) as exc:
                # Later declarations must still be defined.
                logger.debug(f"Snippet statement failed during evaluation: {get_error_message(exc)}")

        table: CallableTable = {}
        for name in names:
            value = self.namespace.get(name)
            table[name] = value if is_callable(value) else None
        return table

    def _construct(self, code: str) -> list[CodeType]:
        tree = ast.parse(code, filename=SNIPPET_FILENAME)
        statements: list[CodeType] = []
        for node in tree.body:
            module = ast.Module(body=[node], type_ignores=[])
            try:
                statements.append(compile(module, SNIPPET_FILENAME, "exec"))
            except SyntaxError as exc:
                # Errors raised while compiling a tree carry no source line.
                if not exc.text:
                    exc.text = ast.get_source_segment(code, node)
                raise
        return statements

    def _build_namespace(self) -> dict[str, object]:
        guard = policy.build_import_guard(
            allowed_modules=self.allowed_modules,
            blocked_modules=self.blocked_modules,
        )
        restricted = policy.build_restricted_builtins(
            import_guard=guard,
            print_fn=self.console.print,
            blocked_names=self.blocked_modules,
        )
        return {"__builtins__": restricted, "__name__": "__snippet__"}

    def _mentions_unavailable_capability(self, message: str) -> bool:
        return any(
            re.search(rf"\b{re.escape(marker)}\b", message) for marker in self.capability_markers
        )
