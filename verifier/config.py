"""Verifier configuration with YAML support."""

from __future__ import annotations

from pathlib import Path

import yaml
from pydantic import Field

from evaluator.schemas import BaseSchema
from sandbox import policy
from sandbox.executor import DEFAULT_CAPABILITY_MARKERS
from sandbox.safety import DEFAULT_RULES, PatternRule


class VerifierConfig(BaseSchema):
    """Externally supplied limits and rule tables for verification runs."""

    # Wall-clock budget for a whole run
    timeout_ms: int = Field(default=10_000, gt=0)

    # Limit on snippet size, counted in UTF-8 bytes
    max_code_size: int = Field(default=50_000, gt=0)

    # Callers should wait this long between submissions; not enforced here
    min_run_interval_ms: int = Field(default=1_000, ge=0)

    rules: list[PatternRule] = Field(default_factory=lambda: [rule.model_copy() for rule in DEFAULT_RULES])
    capability_markers: list[str] = Field(default_factory=lambda: list(DEFAULT_CAPABILITY_MARKERS))
    allowed_modules: list[str] = Field(default_factory=lambda: list(policy.ALLOWED_MODULES))
    blocked_modules: list[str] = Field(default_factory=lambda: list(policy.BLOCKED_MODULES))

    # Interrupt snippet frames still running after the deadline
    halt_runaway: bool = True

    @property
    def timeout_seconds(self) -> float:
        return self.timeout_ms / 1000


def load_config(yaml_path: str | Path) -> VerifierConfig:
    """Load verifier configuration from YAML file.

    Args:
        yaml_path: Path to YAML configuration file

    Returns:
        VerifierConfig instance

    Raises:
        FileNotFoundError: If YAML file doesn't exist
        ValueError: If YAML is invalid or contains bad values
    """
    yaml_path = Path(yaml_path)

    if not yaml_path.exists():
        raise FileNotFoundError(f"Config file not found: {yaml_path}")

    with open(yaml_path, "r", encoding="utf-8") as f:
        try:
            data = yaml.safe_load(f)
        except yaml.YAMLError as e:
            raise ValueError(f"Invalid YAML in {yaml_path}: {e}") from e

    if data is None:
        return VerifierConfig()
    if not isinstance(data, dict):
        raise ValueError(f"Expected a mapping in {yaml_path}")

    try:
        return VerifierConfig.from_dict(data)
    except Exception as e:
        raise ValueError(f"Invalid configuration in {yaml_path}: {e}") from e


def save_config(config: VerifierConfig, yaml_path: str | Path) -> None:
    """Save verifier configuration to YAML file.

    Args:
        config: VerifierConfig to save
        yaml_path: Path where to save YAML file
    """
    yaml_path = Path(yaml_path)
    yaml_path.parent.mkdir(parents=True, exist_ok=True)

    data = config.to_dict()

    with open(yaml_path, "w", encoding="utf-8") as f:
        yaml.dump(data, f, default_flow_style=False, sort_keys=False, indent=2)
