import pytest
from pydantic import ValidationError

from evaluator.failures import FailureKind
from evaluator.schemas import RunResult, TestCase, TestResult


def test_test_case_accepts_camel_case_alias():
    case = TestCase.from_dict({"input": [1, 2], "expectedOutput": 3, "description": "add"})
    assert case.expected_output == 3
    assert case.to_dict() == {"input": [1, 2], "expected_output": 3, "description": "add"}


def test_test_case_is_frozen():
    case = TestCase(input=1, expected_output=1)
    with pytest.raises(ValidationError):
        case.input = 2


def test_run_result_json_round_trip():
    result = RunResult(
        all_passed=False,
        results=[
            TestResult(passed=True, input=[1], expected_output=1, actual_output=1),
            TestResult(
                passed=False,
                input=[0],
                expected_output=1,
                error="ValueError: bad",
                failure=FailureKind.INVOCATION_ERROR,
            ),
        ],
        console=["hello"],
        error="hello",
    )

    restored = RunResult.from_json(result.to_json())

    assert restored.to_dict() == result.to_dict()
    assert restored.results[1].failure is FailureKind.INVOCATION_ERROR


def test_failed_constructor():
    result = RunResult.failed(FailureKind.TIMEOUT, "Execution timed out after 10ms")
    assert result.all_passed is False
    assert result.results == []
    assert result.error == "Execution timed out after 10ms"


def test_failure_levels():
    assert FailureKind.TIMEOUT.is_run_level
    assert FailureKind.SAFETY_BLOCKED.is_run_level
    assert not FailureKind.REJECTION_ERROR.is_run_level
    assert not FailureKind.CALLABLE_NOT_FOUND.is_run_level
