"""
Sandbox policy definitions and import/builtin guards.
"""

from __future__ import annotations

import builtins
from collections.abc import Callable, Iterable, Sequence
from types import ModuleType
from typing import cast

BLOCKED_MODULES = [
    "os",
    "sys",
    "subprocess",
    "socket",
    "urllib",
    "requests",
    "http",
    "ctypes",
    "importlib",
    "threading",
    "multiprocessing",
    "sqlite3",
    "shutil",
    "pathlib",
    "__import__",
    "eval",
    "exec",
    "compile",
    "open",
    "file",
    "input",
    "raw_input",
    "breakpoint",
    "exit",
    "quit",
]

ALLOWED_MODULES = [
    "math",
    "random",
    "itertools",
    "functools",
    "collections",
    "typing",
    "dataclasses",
    "enum",
    "re",
    "string",
    "heapq",
    "bisect",
    "operator",
    "copy",
    "json",
    "datetime",
    "decimal",
    "fractions",
    "statistics",
    "abc",
    "asyncio",
]

ImportHook = Callable[
    [str, dict[str, object] | None, dict[str, object] | None, Sequence[str], int],
    ModuleType,
]


class SandboxPolicyError(RuntimeError):
    """Raised when a snippet touches a capability the sandbox withholds."""


def _normalize_modules(modules: Iterable[str] | None) -> set[str]:
    return {name for name in (modules or [])}


def build_import_guard(
    allowed_modules: Iterable[str] | None = None,
    blocked_modules: Iterable[str] | None = None,
) -> ImportHook:
    """
    Build a restricted __import__ hook that only allows allowlisted modules
    and explicitly blocks denied modules.
    """
    allowed = _normalize_modules(allowed_modules or ALLOWED_MODULES)
    blocked = _normalize_modules(blocked_modules or BLOCKED_MODULES)
    original_import = cast(ImportHook, builtins.__import__)

    def guarded_import(
        name: str,
        globals: dict[str, object] | None = None,
        locals: dict[str, object] | None = None,
        fromlist: Sequence[str] = (),
        level: int = 0,
    ) -> ModuleType:
        if level:
            raise ImportError("Relative imports are not available in the sandbox")
        root = name.split(".")[0]
        if root in blocked or name in blocked:
            raise ImportError(f"Import of '{root}' blocked by sandbox policy")
        if root not in allowed:
            raise ImportError(f"Import of '{root}' is not allowlisted")
        return original_import(name, globals, locals, fromlist, level)

    return guarded_import


def _blocked_builtin(name: str) -> Callable[..., None]:
    def _blocked(*_args: object, **_kwargs: object) -> None:
        raise SandboxPolicyError(f"'{name}' is blocked by sandbox policy")

    _blocked.__name__ = name
    return _blocked


def build_restricted_builtins(
    import_guard: ImportHook,
    print_fn: Callable[..., None],
    blocked_names: Iterable[str] | None = None,
) -> dict[str, object]:
    """
    Return a private copy of the builtins namespace for one evaluation.

    Dangerous builtins like open/eval/exec/compile/input are replaced with
    stubs that raise. The interpreter-wide builtins module is never modified.
    """
    blocked = _normalize_modules(blocked_names or BLOCKED_MODULES)
    blocked.discard("__import__")

    namespace = dict(vars(builtins))
    for name in blocked:
        if name in namespace:
            namespace[name] = _blocked_builtin(name)

    namespace["__import__"] = import_guard
    namespace["print"] = print_fn
    return namespace
