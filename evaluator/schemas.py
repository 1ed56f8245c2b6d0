from __future__ import annotations

from collections.abc import Mapping
from typing import Any, TypeVar

from pydantic import BaseModel, ConfigDict, Field, model_validator

from .failures import FailureKind

TBaseSchema = TypeVar("TBaseSchema", bound="BaseSchema")


class BaseSchema(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    def to_json(self) -> str:
        return self.model_dump_json()

    def to_dict(self) -> dict[str, object]:
        return self.model_dump()

    @classmethod
    def from_json(cls: type[TBaseSchema], data: str) -> TBaseSchema:
        return cls.model_validate_json(data)

    @classmethod
    def from_dict(cls: type[TBaseSchema], data: Mapping[str, object]) -> TBaseSchema:
        return cls.model_validate(data)


class TestCase(BaseSchema):
    """One input/expected-output pair supplied by the problem catalog."""

    __test__ = False

    model_config = ConfigDict(populate_by_name=True, frozen=True)

    input: Any = None
    expected_output: Any = Field(default=None, alias="expectedOutput")
    description: str | None = None


class SafetyAnalysisResult(BaseSchema):
    safe: bool
    issues: list[str] = Field(default_factory=list)
    warnings: list[str] = Field(default_factory=list)


class TestResult(BaseSchema):
    __test__ = False

    passed: bool
    input: Any = None
    expected_output: Any = None
    actual_output: Any = None
    error: str | None = None
    description: str | None = None
    failure: FailureKind | None = None


class RunResult(BaseSchema):
    all_passed: bool
    results: list[TestResult] = Field(default_factory=list)
    error: str | None = None
    failure: FailureKind | None = None
    console: list[str] = Field(default_factory=list)
    runtime_ms: float = 0.0

    @model_validator(mode="after")
    def fatal_runs_have_no_results(self) -> RunResult:
        if self.failure is not None and self.failure.is_run_level:
            if self.results or self.all_passed:
                raise ValueError("A failed run carries no results and never passes")
        return self

    @classmethod
    def failed(cls, kind: FailureKind, message: str, runtime_ms: float = 0.0) -> RunResult:
        return cls(all_passed=False, results=[], error=message, failure=kind, runtime_ms=runtime_ms)
