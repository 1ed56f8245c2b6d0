"""Per-case invocation and grading of discovered callables."""

from __future__ import annotations

import asyncio
import copy
import logging
from collections.abc import Callable, Sequence
from typing import Any

from sandbox.classify import (
    get_error_message,
    is_awaitable,
    is_callable,
    is_sequence,
    sanitize_error_message,
)

from .comparator import deep_equal
from .failures import CaseFailure, FailureKind
from .resolver import CallableTable, resolve_function_name
from .schemas import TestCase, TestResult

logger = logging.getLogger(__name__)


class TestHarness:
    """Invoke the resolved callable for each test case and compare results.

    Cases run one at a time in input order and share the snippet namespace,
    so state kept by the snippet carries over from one case to the next. A
    failing case never aborts the remaining ones.
    """

    __test__ = False

    def __init__(
        self,
        table: CallableTable,
        extracted: Sequence[str],
        function_name: str | None = None,
    ) -> None:
        self.table: CallableTable = table
        self.extracted: list[str] = list(extracted)
        self.function_name: str | None = function_name

    async def run_all(self, test_cases: Sequence[TestCase]) -> list[TestResult]:
        results: list[TestResult] = []
        for test_case in test_cases:
            results.append(await self.run_case(test_case))
        return results

    async def run_case(self, test_case: TestCase) -> TestResult:
        try:
            func = self._lookup(test_case)
            actual = await self._invoke(func, test_case.input)
            passed = self._compare(actual, test_case.expected_output)
        except CaseFailure as exc:
            return self._failed(test_case, exc.kind, exc.message)
        except (Exception, SystemExit) as exc:
            return self._failed(test_case, FailureKind.INVOCATION_ERROR, get_error_message(exc))

        logger.debug(f"Case {test_case.description or test_case.input!r}: passed={passed}")
        return TestResult(
            passed=passed,
            input=test_case.input,
            expected_output=test_case.expected_output,
            actual_output=actual,
            description=test_case.description,
        )

    def _lookup(self, test_case: TestCase) -> Callable[..., Any]:
        name = resolve_function_name(test_case, self.table, self.extracted, self.function_name)
        if name is None:
            raise CaseFailure(FailureKind.CALLABLE_NOT_FOUND, "No function available to test")
        if name not in self.table:
            raise CaseFailure(FailureKind.CALLABLE_NOT_FOUND, f"Function '{name}' is not defined")
        func = self.table[name]
        if func is None or not is_callable(func):
            raise CaseFailure(
                FailureKind.CALLABLE_NOT_CALLABLE,
                f"Function '{name}' is not callable (it may depend on an unavailable capability)",
            )
        return func

    async def _invoke(self, func: Callable[..., Any], value: object) -> object:
        # Catalog inputs stay untouched even if the snippet mutates its arguments.
        argument = copy.deepcopy(value)
        args = list(argument) if is_sequence(argument) else [argument]  # type: ignore[call-overload]

        result = func(*args)
        if not is_awaitable(result):
            return result

        try:
            return await result
        except (Exception, SystemExit, asyncio.CancelledError) as exc:
            raise CaseFailure(
                FailureKind.REJECTION_ERROR,
                f"Promise rejected: {get_error_message(exc)}",
            ) from exc

    @staticmethod
    def _compare(actual: object, expected: object) -> bool:
        # The actual value is snippet-made; its hooks may raise while being read.
        try:
            return deep_equal(actual, expected)
        except (Exception, SystemExit) as exc:
            raise CaseFailure(
                FailureKind.INVOCATION_ERROR,
                f"Comparison failed: {get_error_message(exc)}",
            ) from exc

    @staticmethod
    def _failed(test_case: TestCase, kind: FailureKind, message: str) -> TestResult:
        return TestResult(
            passed=False,
            input=test_case.input,
            expected_output=test_case.expected_output,
            actual_output=None,
            error=sanitize_error_message(message),
            description=test_case.description,
            failure=kind,
        )
