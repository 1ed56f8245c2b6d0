"""
Normalization of annotated snippets into directly runnable Python.

Static annotations are erased (class-level field annotations are kept as
strings so dataclass-style declarations still work) and enum declarations
are lowered to plain classes whose members are their literal values. No type
checking is performed: a snippet with wrong annotations still runs.
"""

from __future__ import annotations

import ast
import logging
import re
from dataclasses import dataclass

from sandbox.classify import get_error_message

logger = logging.getLogger(__name__)

ENUM_BASES = frozenset({"Enum", "IntEnum", "StrEnum", "Flag", "IntFlag"})
ENUM_HELPERS = frozenset({"auto", "unique", "verify"})
ENUM_NOTE = "Note: Enum declarations are supported and are lowered to plain classes."

_ENUM_TOKEN = re.compile(r"\b(?:enum|Enum|IntEnum|StrEnum|Flag|IntFlag)\b")


@dataclass(frozen=True)
class NormalizationResult:
    code: str
    error: str | None = None

    @property
    def ok(self) -> bool:
        return self.error is None


def _is_enum_base(node: ast.expr) -> bool:
    if isinstance(node, ast.Name):
        return node.id in ENUM_BASES
    if isinstance(node, ast.Attribute):
        return node.attr in ENUM_BASES and isinstance(node.value, ast.Name) and node.value.id == "enum"
    return False


def _is_helper(node: ast.expr, name: str) -> bool:
    if isinstance(node, ast.Call):
        node = node.func
    if isinstance(node, ast.Name):
        return node.id == name
    if isinstance(node, ast.Attribute):
        return node.attr == name
    return False


class _AnnotationEraser(ast.NodeTransformer):
    def __init__(self) -> None:
        self._class_depth = 0

    def _erase_signature(self, node: ast.FunctionDef | ast.AsyncFunctionDef) -> None:
        node.returns = None
        args = node.args
        for arg in [*args.posonlyargs, *args.args, *args.kwonlyargs]:
            arg.annotation = None
        if args.vararg is not None:
            args.vararg.annotation = None
        if args.kwarg is not None:
            args.kwarg.annotation = None

    def visit_FunctionDef(self, node: ast.FunctionDef) -> ast.AST:
        self._erase_signature(node)
        depth, self._class_depth = self._class_depth, 0
        self.generic_visit(node)
        self._class_depth = depth
        return node

    def visit_AsyncFunctionDef(self, node: ast.AsyncFunctionDef) -> ast.AST:
        self._erase_signature(node)
        depth, self._class_depth = self._class_depth, 0
        self.generic_visit(node)
        self._class_depth = depth
        return node

    def visit_ClassDef(self, node: ast.ClassDef) -> ast.AST:
        self._class_depth += 1
        self.generic_visit(node)
        self._class_depth -= 1
        if any(_is_enum_base(base) for base in node.bases):
            return _lower_enum(node)
        return node

    def visit_AnnAssign(self, node: ast.AnnAssign) -> ast.AST | None:
        if self._class_depth:
            # Field declarations drive dataclasses and NamedTuples.
            node.annotation = ast.Constant(value=ast.unparse(node.annotation))
            return node
        if node.value is None:
            return None
        return ast.copy_location(ast.Assign(targets=[node.target], value=node.value), node)

    def visit_Module(self, node: ast.Module) -> ast.AST:
        self.generic_visit(node)
        # `import enum` stays only while something still refers to the module.
        if not any(isinstance(child, ast.Name) and child.id == "enum" for child in ast.walk(node)):
            node.body = [stmt for stmt in map(_without_enum_import, node.body) if stmt is not None]
        return node

    def visit_ImportFrom(self, node: ast.ImportFrom) -> ast.AST | None:
        if node.module == "__future__":
            return None
        if node.module == "enum":
            names = [alias for alias in node.names if alias.name not in ENUM_BASES | ENUM_HELPERS]
            if not names:
                return None
            node.names = names
        return node


def _without_enum_import(stmt: ast.stmt) -> ast.stmt | None:
    if not isinstance(stmt, ast.Import):
        return stmt
    names = [alias for alias in stmt.names if not (alias.name == "enum" and alias.asname is None)]
    if not names:
        return None
    stmt.names = names
    return stmt


def _lower_enum(node: ast.ClassDef) -> ast.ClassDef:
    string_valued = any(
        (isinstance(base, ast.Name) and base.id == "StrEnum")
        or (isinstance(base, ast.Attribute) and base.attr == "StrEnum")
        for base in node.bases
    )
    last_value: int = 0
    body: list[ast.stmt] = []
    for stmt in node.body:
        if isinstance(stmt, ast.Assign) and len(stmt.targets) == 1 and isinstance(stmt.targets[0], ast.Name):
            member = stmt.targets[0].id
            if _is_helper(stmt.value, "auto"):
                if string_valued:
                    stmt.value = ast.Constant(value=member.lower())
                else:
                    last_value += 1
                    stmt.value = ast.Constant(value=last_value)
            elif isinstance(stmt.value, ast.Constant) and isinstance(stmt.value.value, int):
                last_value = stmt.value.value
        body.append(stmt)

    node.bases = []
    node.keywords = []
    node.decorator_list = [
        deco for deco in node.decorator_list if not any(_is_helper(deco, name) for name in ENUM_HELPERS)
    ]
    node.body = body or [ast.Pass()]
    return node


def _fill_empty_bodies(tree: ast.AST) -> None:
    for node in ast.walk(tree):
        body = getattr(node, "body", None)
        if isinstance(body, list) and not body and not isinstance(node, ast.Module):
            body.append(ast.Pass())


def _format_diagnostic(exc: BaseException) -> str:
    if isinstance(exc, SyntaxError):
        location = ""
        if exc.lineno is not None:
            location = f" (line {exc.lineno}, column {exc.offset or 0})"
        return f"Compilation error: {exc.__class__.__name__}: {exc.msg}{location}"
    return f"Compilation error: {get_error_message(exc)}"


def normalize(code: str) -> NormalizationResult:
    """Convert an annotated snippet into plain runnable Python."""
    try:
        tree = ast.parse(code, filename="<snippet>")
        tree = _AnnotationEraser().visit(tree)
        _fill_empty_bodies(tree)
        ast.fix_missing_locations(tree)
        return NormalizationResult(code=ast.unparse(tree))
    except Exception as exc:  # noqa: BLE001 - any parser failure becomes a diagnostic
        message = _format_diagnostic(exc)
        if _ENUM_TOKEN.search(message) or _ENUM_TOKEN.search(code):
            message = f"{message}\n{ENUM_NOTE}"
        logger.debug(f"Normalization failed: {message}")
        return NormalizationResult(code="", error=message)
