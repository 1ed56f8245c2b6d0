"""Lexical discovery of declared callables in normalized snippet source."""

from __future__ import annotations

import re

# Works on ast.unparse output: assignments render as "name = value",
# keyword arguments as "name=value", dict keys with single quotes.
_FUNCTION_PATTERN = re.compile(
    r"(?:\bdef\s+(\w+)\s*[\[(])"
    r"|(?:^[ \t]*(\w+)\s+=\s+lambda\b)"
    r"|(?:['\"](\w+)['\"]\s*:\s*lambda\b)",
    re.MULTILINE,
)


def extract_function_names(code: str) -> list[str]:
    """Return declared callable names in order of first occurrence.

    Nested declarations are not distinguished from top-level ones.
    """
    names: list[str] = []
    for match in _FUNCTION_PATTERN.finditer(code):
        name = match.group(1) or match.group(2) or match.group(3)
        if name and name not in names:
            names.append(name)
    return names
