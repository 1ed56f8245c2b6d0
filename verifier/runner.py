"""Verification runner orchestrating all components."""

from __future__ import annotations

import asyncio
import logging
import threading
import time
from collections.abc import Mapping, Sequence

from evaluator.failures import FailureKind, RunFailure
from evaluator.harness import TestHarness
from evaluator.schemas import RunResult, SafetyAnalysisResult, TestCase
from sandbox.classify import get_error_message, sanitize_error_message
from sandbox.executor import (
    ExecutionDeadlineExceeded,
    SandboxConstructionError,
    SandboxExecutor,
    runaway_guard,
)
from sandbox.extract import extract_function_names
from sandbox.normalize import normalize
from sandbox.safety import analyze_code_safety as _analyze

from verifier.config import VerifierConfig

logger = logging.getLogger(__name__)

NO_FUNCTION_MESSAGE = (
    "Could not find function to test. Make sure your function is defined and named correctly."
)

TestCaseLike = TestCase | Mapping[str, object]


def analyze_code_safety(code: str, config: VerifierConfig | None = None) -> SafetyAnalysisResult:
    """Pre-flight safety check that never executes the snippet."""
    config = config or VerifierConfig()
    try:
        return _analyze(code or "", config.rules)
    except Exception as exc:  # noqa: BLE001 - entry points never raise
        logger.exception("Safety analysis failed")
        message = sanitize_error_message(f"Safety analysis failed: {get_error_message(exc)}")
        return SafetyAnalysisResult(safe=False, issues=[message], warnings=[])


class VerificationRun:
    """One verification of a snippet against a sequence of test cases.

    Holds the executor (namespace and captured console) for this run only.
    """

    def __init__(
        self,
        code: str,
        test_cases: Sequence[TestCase],
        function_name: str | None,
        config: VerifierConfig,
        deadline: float | None = None,
    ) -> None:
        self.code = code
        self.test_cases = list(test_cases)
        self.function_name = function_name
        self.config = config
        self.deadline = deadline
        self.executor = SandboxExecutor(
            allowed_modules=config.allowed_modules,
            blocked_modules=config.blocked_modules,
            capability_markers=config.capability_markers,
        )

    def check_size(self) -> None:
        if not self.code or not self.code.strip():
            raise RunFailure(FailureKind.EMPTY_INPUT, "No code provided")
        if len(self.code.encode("utf-8")) > self.config.max_code_size:
            raise RunFailure(
                FailureKind.SIZE_EXCEEDED,
                f"Code exceeds maximum size of {self.config.max_code_size} bytes",
            )

    def check_safety(self) -> None:
        analysis = _analyze(self.code, self.config.rules)
        if not analysis.safe:
            logger.warning(f"Snippet blocked by safety analysis: {analysis.issues}")
            raise RunFailure(
                FailureKind.SAFETY_BLOCKED,
                f"Code safety check failed: {'; '.join(analysis.issues)}",
            )
        for warning in analysis.warnings:
            logger.info(f"Safety warning: {warning}")

    def normalize(self) -> str:
        normalized = normalize(self.code)
        if normalized.error is not None:
            raise RunFailure(FailureKind.NORMALIZATION_ERROR, normalized.error)
        return normalized.code

    async def execute(self) -> RunResult:
        start = time.perf_counter()
        try:
            self.check_size()
            self.check_safety()
            code = self.normalize()

            names = extract_function_names(code)
            if not names:
                raise RunFailure(FailureKind.NO_CALLABLES, NO_FUNCTION_MESSAGE)

            with runaway_guard(self.deadline if self.config.halt_runaway else None):
                try:
                    table = self.executor.populate(code, names)
                except SandboxConstructionError as exc:
                    raise RunFailure(FailureKind.SANDBOX_CONSTRUCTION, f"Execution error: {exc}") from exc

                harness = TestHarness(table, names, self.function_name)
                results = await harness.run_all(self.test_cases)
        except RunFailure as failure:
            return RunResult.failed(
                failure.kind,
                sanitize_error_message(failure.message),
                runtime_ms=(time.perf_counter() - start) * 1000,
            )

        console = list(self.executor.console.lines)
        return RunResult(
            all_passed=all(result.passed for result in results),
            results=results,
            error=sanitize_error_message("\n".join(console)) if console else None,
            console=console,
            runtime_ms=(time.perf_counter() - start) * 1000,
        )


def _timeout_result(config: VerifierConfig, runtime_ms: float) -> RunResult:
    return RunResult.failed(
        FailureKind.TIMEOUT,
        f"Execution timed out after {config.timeout_ms}ms",
        runtime_ms=runtime_ms,
    )


def run_tests(
    code: str,
    test_cases: Sequence[TestCaseLike],
    function_name: str | None = None,
    config: VerifierConfig | None = None,
) -> RunResult:
    """Verify a snippet against test cases.

    The run executes on a dedicated daemon thread with its own event loop and
    races a wall-clock timer. On timeout the worker is abandoned and a timeout
    result is returned immediately. Never raises.
    """
    config = config or VerifierConfig()
    start = time.perf_counter()

    try:
        cases = [case if isinstance(case, TestCase) else TestCase.from_dict(case) for case in test_cases]
    except Exception as exc:  # noqa: BLE001 - entry points never raise
        return RunResult.failed(
            FailureKind.INTERNAL,
            sanitize_error_message(f"Invalid test cases: {get_error_message(exc)}"),
        )

    deadline = time.monotonic() + config.timeout_seconds
    outcome: list[RunResult] = []

    def _work() -> None:
        run = VerificationRun(code, cases, function_name, config, deadline=deadline)
        try:
            outcome.append(asyncio.run(run.execute()))
        except ExecutionDeadlineExceeded:
            outcome.append(_timeout_result(config, (time.perf_counter() - start) * 1000))
        except BaseException as exc:  # noqa: BLE001 - capture all worker errors
            logger.exception("Unexpected failure during verification run")
            outcome.append(
                RunResult.failed(
                    FailureKind.INTERNAL,
                    sanitize_error_message(get_error_message(exc)) or "Unknown error occurred",
                    runtime_ms=(time.perf_counter() - start) * 1000,
                )
            )

    worker = threading.Thread(target=_work, name="snippet-run", daemon=True)
    worker.start()
    worker.join(config.timeout_seconds)

    runtime_ms = (time.perf_counter() - start) * 1000
    if worker.is_alive() or not outcome:
        logger.warning(f"Verification run timed out after {config.timeout_ms}ms")
        return _timeout_result(config, runtime_ms)

    result = outcome[0]
    logger.info(
        f"Verification run finished: all_passed={result.all_passed} "
        f"cases={len(result.results)} failure={result.failure.value if result.failure else None}"
    )
    return result
