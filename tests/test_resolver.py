from evaluator.resolver import resolve_function_name
from evaluator.schemas import TestCase


def _add(a, b):
    return a + b


def _add_all(*values):
    return sum(values)


def _mul(a, b):
    return a * b


TABLE = {"add": _add, "addAll": _add_all, "mul": _mul, "broken": None}
NAMES = list(TABLE)


def test_explicit_name_wins():
    case = TestCase(input=[1, 2], expected_output=2, description="add two numbers")
    assert resolve_function_name(case, TABLE, NAMES, explicit_name="mul") == "mul"


def test_explicit_name_is_returned_even_when_unknown():
    case = TestCase(input=[1], expected_output=1)
    assert resolve_function_name(case, TABLE, NAMES, explicit_name="missing") == "missing"


def test_description_prefix_is_case_insensitive():
    case = TestCase(input=[2, 3], expected_output=6, description="MUL: multiplies")
    assert resolve_function_name(case, TABLE, NAMES) == "mul"


def test_longest_matching_prefix_wins():
    case = TestCase(input=[1, 2, 3], expected_output=6, description="addAll sums everything")
    assert resolve_function_name(case, TABLE, NAMES) == "addAll"


def test_description_never_routes_to_sentinel():
    case = TestCase(input=[], expected_output=None, description="broken thing")
    assert resolve_function_name(case, TABLE, NAMES) == "add"


def test_unmatched_description_falls_back_to_first_callable():
    case = TestCase(input=[1, 2], expected_output=3, description="sums two values")
    assert resolve_function_name(case, TABLE, NAMES) == "add"


def test_falls_back_to_first_extracted_name():
    case = TestCase(input=1, expected_output=1)
    assert resolve_function_name(case, {"ghost": None}, ["ghost"]) == "ghost"


def test_nothing_to_resolve():
    case = TestCase(input=1, expected_output=1)
    assert resolve_function_name(case, {}, []) is None
