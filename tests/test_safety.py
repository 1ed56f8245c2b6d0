import pytest
from pydantic import ValidationError

from sandbox.safety import DEFAULT_RULES, PatternRule, analyze_code_safety


def test_clean_code_is_safe():
    result = analyze_code_safety("def add(a, b):\n    return a + b\n")
    assert result.safe is True
    assert result.issues == []
    assert result.warnings == []


@pytest.mark.parametrize(
    "code",
    [
        "eval('1 + 1')",
        "exec('x = 1')",
        "compile('x', 'f', 'exec')",
        "FunctionType(code, {})",
        "().__class__.__bases__[0].__subclasses__()",
        "obj.__class__ = Other",
        "getattr(obj, '__dict__')",
        "vars(obj)['__dict__']",
        "f.__globals__",
    ],
)
def test_blocking_patterns(code):
    result = analyze_code_safety(code)
    assert result.safe is False
    assert result.issues


@pytest.mark.parametrize(
    "code",
    [
        "import re\npattern = re.compile(r'a+')",
        "from ast import literal_eval\nliteral_eval('[1]')",
        "name = self.__class__.__name__",
        "model.eval()",
    ],
)
def test_lookalikes_are_not_blocked(code):
    assert analyze_code_safety(code).safe is True


def test_eval_message_is_reported():
    result = analyze_code_safety("def f(s):\n    return eval(s)\n")
    assert result.issues == ["Use of eval() detected - this is a security risk"]


def test_while_true_without_break_warns():
    result = analyze_code_safety("def spin():\n    while True:\n        pass\n")
    assert result.safe is True
    assert any("infinite loop" in w for w in result.warnings)


def test_while_true_with_break_does_not_warn():
    code = "def spin():\n    while True:\n        break\n"
    assert analyze_code_safety(code).warnings == []


def test_endless_iterator_without_break_warns():
    code = "import itertools\nfor i in itertools.count():\n    pass\n"
    assert any("infinite loop" in w for w in analyze_code_safety(code).warnings)


@pytest.mark.parametrize(
    "code",
    ["grid = [0] * 1000000", "grid = [0] * 1_000_000", "buf = bytearray(100000)"],
)
def test_large_allocation_warns(code):
    result = analyze_code_safety(code)
    assert result.safe is True
    assert "Large array allocation detected - may cause memory issues" in result.warnings


def test_small_allocation_does_not_warn():
    assert analyze_code_safety("grid = [0] * 99999").warnings == []


def test_namespace_write_warns():
    result = analyze_code_safety("globals()['x'] = 1")
    assert result.safe is True
    assert len(result.warnings) == 1


def test_custom_rule_table():
    rules = [
        PatternRule(name="sleep", pattern=r"\bsleep\(", severity="blocking", message="no sleeping"),
    ]
    result = analyze_code_safety("time.sleep(1)\neval('1')", rules)
    assert result.issues == ["no sleeping"]


def test_invalid_rule_pattern_rejected():
    with pytest.raises(ValidationError):
        PatternRule(name="bad", pattern="(", severity="advisory", message="bad")


def test_default_rules_have_both_severities():
    severities = {rule.severity for rule in DEFAULT_RULES}
    assert severities == {"blocking", "advisory"}


@pytest.mark.parametrize(
    "code",
    [
        "import random\nrandom._os.system('ls')",
        "import asyncio\nasyncio.subprocess.PIPE",
        "import asyncio\nproc = await asyncio.create_subprocess_shell('ls')",
        "from asyncio import sleep, subprocess",
    ],
)
def test_blocked_module_reached_through_allowed_one(code):
    result = analyze_code_safety(code)
    assert result.safe is False
    assert result.issues == [
        "Access to a blocked module through an allowed one detected - potential sandbox escape"
    ]


def test_ordinary_os_names_are_not_module_access():
    code = "def total(costs):\n    return sum(c.cost for c in costs)\n"
    assert analyze_code_safety(code).safe is True
