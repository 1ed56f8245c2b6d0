"""CLI interface for verifying snippets."""

from __future__ import annotations

import json
import logging
from pathlib import Path
from typing import Any, NoReturn, Optional

import typer
import yaml

from sandbox.normalize import normalize as normalize_code
from verifier.config import VerifierConfig, load_config
from verifier.runner import analyze_code_safety, run_tests

app = typer.Typer(help="Snippet verification CLI")


@app.callback()
def main(
    log_level: str = typer.Option("WARNING", "--log-level", help="Logging level"),
) -> None:
    """Verify learner snippets against fixed test cases."""
    logging.basicConfig(
        level=getattr(logging, log_level.upper(), logging.WARNING),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )


def _fail(message: str) -> NoReturn:
    typer.secho(f"❌ {message}", fg=typer.colors.RED, err=True)
    raise typer.Exit(1)


def _read_snippet(snippet_path: str) -> str:
    path = Path(snippet_path)
    if not path.exists():
        _fail(f"Snippet not found: {snippet_path}")
    return path.read_text(encoding="utf-8")


def _load_cases(cases_path: str) -> list[dict[str, Any]]:
    path = Path(cases_path)
    if not path.exists():
        _fail(f"Test cases not found: {cases_path}")

    with open(path, "r", encoding="utf-8") as f:
        try:
            data = yaml.safe_load(f)
        except yaml.YAMLError as e:
            _fail(f"Invalid test case file: {e}")

    if isinstance(data, dict):
        data = data.get("test_cases", data.get("testCases"))
    if not isinstance(data, list):
        _fail(f"Expected a list of test cases in {cases_path}")
    return data


def _load_config(config_path: Optional[str]) -> VerifierConfig:
    if config_path is None:
        return VerifierConfig()
    try:
        return load_config(config_path)
    except FileNotFoundError as e:
        _fail(f"Config file not found: {e}")
    except ValueError as e:
        _fail(f"Invalid config: {e}")


@app.command()
def run(
    snippet_path: str = typer.Argument(..., help="Path to the snippet to verify"),
    cases_path: str = typer.Argument(..., help="YAML or JSON file with test cases"),
    function: Optional[str] = typer.Option(None, "--function", "-f", help="Name of the function under test"),
    config_path: Optional[str] = typer.Option(None, "--config", help="Path to verifier YAML config"),
    as_json: bool = typer.Option(False, "--json", help="Print the full result as JSON"),
) -> None:
    """Run a snippet against its test cases."""
    code = _read_snippet(snippet_path)
    cases = _load_cases(cases_path)
    config = _load_config(config_path)

    result = run_tests(code, cases, function_name=function, config=config)

    if as_json:
        typer.echo(json.dumps(result.to_dict(), default=repr, indent=2))
        raise typer.Exit(0 if result.all_passed else 1)

    if result.failure is not None and result.failure.is_run_level:
        _fail(f"{result.failure.value}: {result.error}")

    for index, case in enumerate(result.results, start=1):
        label = case.description or f"case {index}"
        if case.passed:
            typer.secho(f"  ✅ {label}", fg=typer.colors.GREEN)
        else:
            typer.secho(f"  ❌ {label}", fg=typer.colors.RED)
            if case.error:
                typer.echo(f"     error:    {case.error}")
            else:
                typer.echo(f"     expected: {case.expected_output!r}")
                typer.echo(f"     actual:   {case.actual_output!r}")

    if result.console:
        typer.secho("\n📋 Console output:", fg=typer.colors.BLUE)
        for line in result.console:
            typer.echo(f"   {line}")

    passed = sum(1 for case in result.results if case.passed)
    summary = f"\n{passed}/{len(result.results)} passed in {result.runtime_ms:.1f}ms"
    if result.all_passed:
        typer.secho(summary, fg=typer.colors.GREEN)
    else:
        typer.secho(summary, fg=typer.colors.RED)
        raise typer.Exit(1)


@app.command()
def analyze(
    snippet_path: str = typer.Argument(..., help="Path to the snippet to analyze"),
    config_path: Optional[str] = typer.Option(None, "--config", help="Path to verifier YAML config"),
) -> None:
    """Check a snippet for dangerous patterns without running it."""
    code = _read_snippet(snippet_path)
    config = _load_config(config_path)

    analysis = analyze_code_safety(code, config)

    for issue in analysis.issues:
        typer.secho(f"  ❌ {issue}", fg=typer.colors.RED)
    for warning in analysis.warnings:
        typer.secho(f"  ⚠️  {warning}", fg=typer.colors.YELLOW)

    if not analysis.safe:
        typer.secho("Snippet blocked", fg=typer.colors.RED, err=True)
        raise typer.Exit(1)
    typer.secho("✅ No blocking issues found", fg=typer.colors.GREEN)


@app.command()
def normalize(
    snippet_path: str = typer.Argument(..., help="Path to the snippet to normalize"),
) -> None:
    """Print the snippet with annotations erased and enums lowered."""
    code = _read_snippet(snippet_path)
    result = normalize_code(code)
    if result.error is not None:
        _fail(result.error)
    typer.echo(result.code)


if __name__ == "__main__":
    app()
