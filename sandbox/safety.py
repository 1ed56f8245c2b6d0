"""
Static safety screening of raw snippet text.

Runs before normalization and before anything is executed. The scan is purely
lexical: false negatives are accepted, and the rule table is configurable.
"""

from __future__ import annotations

import logging
import re
from collections.abc import Sequence
from functools import lru_cache
from typing import Literal

from pydantic import BaseModel, field_validator

from evaluator.schemas import SafetyAnalysisResult

logger = logging.getLogger(__name__)

Severity = Literal["blocking", "advisory"]


class PatternRule(BaseModel):
    """One entry of the safety rule table."""

    name: str
    pattern: str
    severity: Severity
    message: str
    # Rule only fires when this pattern is absent from the whole snippet.
    unless: str | None = None

    @field_validator("pattern", "unless")
    @classmethod
    def pattern_compiles(cls, value: str | None) -> str | None:
        if value is not None:
            try:
                re.compile(value)
            except re.error as exc:
                raise ValueError(f"Invalid rule pattern {value!r}: {exc}") from exc
        return value

    def matches(self, code: str) -> bool:
        if not _compiled(self.pattern).search(code):
            return False
        if self.unless is not None and _compiled(self.unless).search(code):
            return False
        return True


@lru_cache(maxsize=256)
def _compiled(pattern: str) -> re.Pattern[str]:
    return re.compile(pattern)


_SIX_DIGITS = r"\d(?:_?\d){5,}"

DEFAULT_RULES: list[PatternRule] = [
    PatternRule(
        name="eval",
        pattern=r"(?<![\w.])eval\s*\(",
        severity="blocking",
        message="Use of eval() detected - this is a security risk",
    ),
    PatternRule(
        name="exec",
        pattern=r"(?<![\w.])exec\s*\(",
        severity="blocking",
        message="Use of exec() detected - this is a security risk",
    ),
    PatternRule(
        name="compile",
        pattern=r"(?<![\w.])compile\s*\(",
        severity="blocking",
        message="Use of compile() detected - this is a security risk",
    ),
    PatternRule(
        name="function_type",
        pattern=r"\b(?:FunctionType|CodeType|LambdaType)\s*\(",
        severity="blocking",
        message="Construction of a function from a code object detected - this is a security risk",
    ),
    PatternRule(
        name="class_reassignment",
        pattern=r"\.__class__\s*=(?!=)",
        severity="blocking",
        message="__class__ reassignment detected - this is a security risk",
    ),
    PatternRule(
        name="dunder_escape",
        pattern=r"__(?:bases|mro|subclasses|globals|builtins|code)__",
        severity="blocking",
        message="Interpreter internals access detected (__bases__, __subclasses__, __globals__, ...) - this is a security risk",
    ),
    PatternRule(
        name="string_dunder_access",
        pattern=r"(?:\[\s*|getattr\s*\([^()]*?,\s*)['\"]__\w+__['\"]",
        severity="blocking",
        message="Dunder attribute lookup by string detected - potential sandbox escape",
    ),
    PatternRule(
        name="module_reexport",
        # Allowlisted modules hold references to blocked ones (random._os, asyncio.subprocess).
        pattern=(
            r"\.(?:_os|_sys|_socket|subprocess|create_subprocess_\w+)\b"
            r"|\bfrom\s+asyncio\s+import\b[^\n]*\b(?:subprocess|create_subprocess_\w+)\b"
        ),
        severity="blocking",
        message="Access to a blocked module through an allowed one detected - potential sandbox escape",
    ),
    PatternRule(
        name="namespace_write",
        pattern=r"\b(?:globals|vars|locals)\s*\(\s*\)\s*\[[^\]]*\]\s*=(?!=)",
        severity="advisory",
        message="Direct write into a namespace dictionary detected - be careful with dynamic names",
    ),
    PatternRule(
        name="sys_modules",
        pattern=r"\bsys\.modules\b",
        severity="advisory",
        message="sys.modules manipulation detected - this can cause issues",
    ),
    PatternRule(
        name="stream_reassignment",
        pattern=r"\bsys\.(?:stdout|stderr|stdin|path)\s*=(?!=)",
        severity="advisory",
        message="sys stream or path reassignment detected",
    ),
    PatternRule(
        name="while_true",
        pattern=r"\bwhile\s*\(?\s*(?:True|1)\s*\)?\s*:",
        severity="advisory",
        message="Potential infinite loop detected (while True without break)",
        unless=r"\bbreak\b",
    ),
    PatternRule(
        name="endless_for",
        pattern=r"\bfor\s+[^:]+\s+in\s+(?:itertools\.)?(?:count|cycle|repeat)\s*\([^)]*\)\s*:",
        severity="advisory",
        message="Potential infinite loop detected (for over an endless iterator without break)",
        unless=r"\bbreak\b",
    ),
    PatternRule(
        name="large_allocation",
        pattern=(
            rf"\]\s*\*\s*{_SIX_DIGITS}\b"
            rf"|\b(?:bytearray|bytes)\s*\(\s*{_SIX_DIGITS}\s*\)"
        ),
        severity="advisory",
        message="Large array allocation detected - may cause memory issues",
    ),
]


def analyze_code_safety(
    code: str,
    rules: Sequence[PatternRule] | None = None,
) -> SafetyAnalysisResult:
    """Classify a snippet as blocked or passable-with-warnings."""
    issues: list[str] = []
    warnings: list[str] = []

    for rule in DEFAULT_RULES if rules is None else rules:
        if not rule.matches(code):
            continue
        if rule.severity == "blocking":
            issues.append(rule.message)
        else:
            warnings.append(rule.message)

    if issues:
        logger.debug(f"Safety analysis blocked snippet: {issues}")

    return SafetyAnalysisResult(safe=not issues, issues=issues, warnings=warnings)
