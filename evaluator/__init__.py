"""
Evaluator Module

Grading of sandboxed callables against catalog test cases.

This module provides:
- Test case and result schemas
- Failure taxonomy (run-level vs per-case)
- Deep structural equality with NaN handling
- Description-based routing between several callables
- Sequential per-case harness with partial-failure isolation
"""

__version__ = "0.1.0"

from .comparator import deep_equal
from .failures import FailureKind
from .harness import TestHarness
from .resolver import resolve_function_name
from .schemas import RunResult, SafetyAnalysisResult, TestCase, TestResult

__all__ = [
    "deep_equal",
    "FailureKind",
    "TestHarness",
    "resolve_function_name",
    "RunResult",
    "SafetyAnalysisResult",
    "TestCase",
    "TestResult",
]
