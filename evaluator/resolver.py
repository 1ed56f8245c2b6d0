"""Pick which discovered callable a test case should invoke."""

from __future__ import annotations

from collections.abc import Callable, Mapping, Sequence

from sandbox.classify import is_callable

from .schemas import TestCase

CallableTable = Mapping[str, Callable[..., object] | None]


def resolve_function_name(
    test_case: TestCase,
    table: CallableTable,
    extracted: Sequence[str],
    explicit_name: str | None = None,
) -> str | None:
    """Resolve the callable name for one test case.

    Priority: explicit name, description prefix (case-insensitive) matching a
    callable entry, first callable entry, first extracted name. A description
    that matches nothing falls back silently to the first callable.
    """
    if explicit_name:
        return explicit_name

    available = [name for name, func in table.items() if is_callable(func)]

    description = (test_case.description or "").lower()
    if description:
        prefixed = [name for name in available if description.startswith(name.lower())]
        if prefixed:
            # "addAll ..." must route to addAll, not add
            return max(prefixed, key=len)

    if available:
        return available[0]

    if extracted:
        return extracted[0]

    return None
