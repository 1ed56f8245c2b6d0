"""Deep structural equality used to grade actual against expected output."""

from __future__ import annotations

import math
import numbers

from sandbox.classify import as_record, is_sequence


def _is_number(value: object) -> bool:
    return isinstance(value, numbers.Number) and not isinstance(value, bool)


def _is_nan(value: object) -> bool:
    return isinstance(value, float) and math.isnan(value)


def _leaf_equal(a: object, b: object) -> bool:
    if _is_nan(a) and _is_nan(b):
        return True
    try:
        return bool(a == b)
    except Exception:  # noqa: BLE001 - foreign __eq__ may raise
        return False


def deep_equal(a: object, b: object) -> bool:
    """Compare two values structurally.

    NaN equals NaN. Lists and tuples compare element-wise with each other but
    never with a non-sequence. Mappings and plain objects compare by key set
    and values. Booleans are never equal to numbers.

    Nested values are walked with an explicit stack, so a linked list
    thousands of nodes deep compares without hitting the recursion limit.
    A pair of containers already under comparison is assumed equal, which
    keeps cyclic structures from looping.
    """
    pending: list[tuple[object, object]] = [(a, b)]
    visited: set[tuple[int, int]] = set()

    while pending:
        left, right = pending.pop()
        if left is right:
            continue

        if isinstance(left, bool) != isinstance(right, bool):
            return False

        if _is_number(left) and _is_number(right):
            if not _leaf_equal(left, right):
                return False
            continue

        if is_sequence(left) != is_sequence(right):
            return False

        if is_sequence(left):
            left_items, right_items = list(left), list(right)  # type: ignore[call-overload]
            if len(left_items) != len(right_items):
                return False
            if not _first_visit(visited, left, right):
                continue
            pending.extend(reversed(list(zip(left_items, right_items))))
            continue

        record_left = as_record(left)
        record_right = as_record(right)
        if (record_left is None) != (record_right is None):
            return False

        if record_left is not None and record_right is not None:
            if set(record_left.keys()) != set(record_right.keys()):
                return False
            if not _first_visit(visited, left, right):
                continue
            pending.extend(
                (record_left[key], record_right[key]) for key in reversed(list(record_left))
            )
            continue

        if not _leaf_equal(left, right):
            return False

    return True


def _first_visit(visited: set[tuple[int, int]], left: object, right: object) -> bool:
    pair = (id(left), id(right))
    if pair in visited:
        return False
    visited.add(pair)
    return True
