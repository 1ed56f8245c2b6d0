"""
Verifier Module

Public entry points and configuration.

This module provides:
- run_tests: verify a snippet against catalog test cases
- analyze_code_safety: pre-flight safety check without execution
- YAML-based configuration loading
- CLI for verifying snippets from files
"""

__version__ = "0.1.0"

from .config import VerifierConfig, load_config, save_config
from .runner import analyze_code_safety, run_tests

__all__ = [
    "VerifierConfig",
    "load_config",
    "save_config",
    "analyze_code_safety",
    "run_tests",
]
