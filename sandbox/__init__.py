"""
Sandbox Module

In-process execution environment for untrusted learner snippets.

This module provides:
- Static safety screening of raw snippet text
- Normalization of annotated snippets into plain runnable Python
- Lexical discovery of declared callables
- Guarded single-pass evaluation into a fresh namespace
- Import restrictions and allowlisting
- Best-effort security (documented limitations)

WARNING: This sandbox is NOT a security boundary. It runs snippets inside the
host process and provides defense-in-depth heuristics only.
"""

__version__ = "0.1.0"
