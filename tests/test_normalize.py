from sandbox.normalize import ENUM_NOTE, normalize


def test_signature_annotations_are_erased():
    result = normalize("def add(a: int, b: int) -> int:\n    return a + b\n")
    assert result.ok
    assert result.error is None
    assert result.code == "def add(a, b):\n    return a + b"


def test_annotations_naming_undefined_types_are_erased():
    code = "def load(item: Widget, *rest: Gadget, **extra: Gizmo) -> Missing:\n    return item\n"
    result = normalize(code)
    assert result.code == "def load(item, *rest, **extra):\n    return item"


def test_annotated_assignment_keeps_value():
    result = normalize("limit: int = 5\n")
    assert result.code == "limit = 5"


def test_bare_declaration_is_dropped():
    result = normalize("def f():\n    total: int\n")
    assert result.code == "def f():\n    pass"


def test_class_field_annotations_become_strings():
    code = "from dataclasses import dataclass\n\n@dataclass\nclass Point:\n    x: int\n    y: Coordinate = 0\n"
    result = normalize(code)
    assert "x: 'int'" in result.code
    assert "y: 'Coordinate' = 0" in result.code


def test_future_import_is_removed():
    result = normalize("from __future__ import annotations\n\ndef f():\n    return 1\n")
    assert "__future__" not in result.code


def test_enum_is_lowered_to_plain_class():
    code = """
from enum import Enum, auto

class Color(Enum):
    RED = auto()
    GREEN = auto()
    BLUE = 10
    PURPLE = auto()

def favorite():
    return Color.BLUE
"""
    result = normalize(code)
    assert result.ok
    assert "import" not in result.code
    assert "class Color:" in result.code
    assert "RED = 1" in result.code
    assert "GREEN = 2" in result.code
    assert "BLUE = 10" in result.code
    assert "PURPLE = 11" in result.code


def test_str_enum_auto_uses_lowercase_name():
    code = "import enum\n\nclass Mode(enum.StrEnum):\n    FAST = enum.auto()\n"
    result = normalize(code)
    assert "class Mode:" in result.code
    assert "FAST = 'fast'" in result.code


def test_unique_decorator_is_dropped():
    code = "from enum import IntEnum, unique\n\n@unique\nclass Level(IntEnum):\n    LOW = 1\n"
    result = normalize(code)
    assert "@unique" not in result.code
    assert "class Level:" in result.code


def test_syntax_error_becomes_diagnostic():
    result = normalize("def broken(:\n    pass\n")
    assert not result.ok
    assert result.code == ""
    assert result.error is not None
    assert result.error.startswith("Compilation error: SyntaxError")
    assert "line 1" in result.error
    assert ENUM_NOTE not in result.error


def test_enum_failure_gets_supported_note():
    result = normalize("enum Direction { Up, Down }\n")
    assert result.code == ""
    assert result.error is not None
    assert ENUM_NOTE in result.error


def test_null_bytes_become_diagnostic():
    result = normalize("def f():\n    return 1\x00\n")
    assert result.code == ""
    assert result.error is not None
    assert result.error.startswith("Compilation error:")


def test_plain_enum_import_is_removed_after_lowering():
    code = "import enum, math\n\nclass Mode(enum.Enum):\n    FAST = 1\n"
    result = normalize(code)
    assert "import math" in result.code
    assert "enum" not in result.code


def test_enum_import_kept_while_still_referenced():
    code = "import enum\n\nclass Mode(enum.Enum):\n    FAST = 1\n\nMeta = enum.EnumMeta\n"
    result = normalize(code)
    assert result.code.startswith("import enum")
