"""Value model for expression evaluation.

Expression values are plain Python data: ``None``, ``bool``, ``int`` or
``float``, ``str``, ``list`` and ``dict``. This module holds the rules that
give that closed set its expression-language meaning: kind tags, truthiness,
number and string coercion, loose equality, and canonical JSON text.

Numbers are doubles. The parser and ``fromJSON`` produce ``float``; integers
from a host context are accepted and converted when used as numbers, turning
into infinities when they exceed the double range.

``bool`` is a subclass of ``int`` in Python, so every check here tests for
booleans before numbers.
"""

from __future__ import annotations

import json
import math
import re
from typing import Any, Literal

from ghexpr.expressions.errors import ExpressionTypeError

__all__ = [
    "ValueKind",
    "kind_of",
    "is_number",
    "is_truthy",
    "to_number",
    "to_string",
    "format_number",
    "loose_equals",
    "to_json",
    "to_plain",
]

ValueKind = Literal["null", "boolean", "number", "string", "array", "object"]

_NUMBER_TEXT = re.compile(r"[+-]?(?:\d+\.?\d*|\.\d+)(?:[eE][+-]?\d+)?")
_HEX_TEXT = re.compile(r"[+-]?0[xX][0-9a-fA-F]+")


def kind_of(value: Any) -> ValueKind:
    """Return the type tag of a value.

    Returns:
        One of "null", "boolean", "number", "string", "array", "object".

    Raises:
        ExpressionTypeError: If the value is not part of the value model.
    """
    if value is None:
        return "null"
    if isinstance(value, bool):
        return "boolean"
    if isinstance(value, (int, float)):
        return "number"
    if isinstance(value, str):
        return "string"
    if isinstance(value, (list, tuple)):
        return "array"
    if isinstance(value, dict):
        return "object"
    raise ExpressionTypeError(f"Unsupported value of type {type(value).__name__}")


def is_number(value: Any) -> bool:
    return isinstance(value, (int, float)) and not isinstance(value, bool)


def is_truthy(value: Any) -> bool:
    """Coerce any value to a boolean.

    Booleans are themselves; numbers are falsy only for 0 and NaN; strings
    only when empty; null is falsy; arrays and objects are always truthy,
    even when empty.
    """
    if value is None:
        return False
    if isinstance(value, bool):
        return value
    if is_number(value):
        number = to_number(value)
        return not (number == 0 or math.isnan(number))
    if isinstance(value, str):
        return value != ""
    return True


def to_number(value: Any) -> float:
    """Coerce a scalar value to a number.

    Null is 0, booleans are 1/0, strings are parsed after trimming
    whitespace (empty is 0, unparsable is NaN).

    Raises:
        ExpressionTypeError: For arrays and objects.
    """
    if value is None:
        return 0.0
    if isinstance(value, bool):
        return 1.0 if value else 0.0
    if isinstance(value, float):
        return value
    if isinstance(value, int):
        return _int_to_float(value)
    if isinstance(value, str):
        text = value.strip()
        if not text:
            return 0.0
        if _NUMBER_TEXT.fullmatch(text):
            return float(text)
        if _HEX_TEXT.fullmatch(text):
            return _int_to_float(int(text, 16))
        return math.nan
    raise ExpressionTypeError(f"Cannot convert {kind_of(value)} to number")


def _int_to_float(value: int) -> float:
    # Integers beyond the double range saturate to infinity
    try:
        return float(value)
    except OverflowError:
        return math.inf if value > 0 else -math.inf


def format_number(value: int | float) -> str:
    """Render a number as its shortest round-trip decimal text."""
    if isinstance(value, int):
        if abs(value) < 2**53:
            return str(value)
        value = _int_to_float(value)
    if math.isnan(value):
        return "NaN"
    if math.isinf(value):
        return "Infinity" if value > 0 else "-Infinity"
    if value.is_integer() and abs(value) < 1e21:
        return str(int(value))
    return repr(value)


def to_string(value: Any) -> str:
    """Coerce a scalar value to a string.

    Raises:
        ExpressionTypeError: For arrays and objects, which only ``toJSON``
            can turn into text.
    """
    if value is None:
        return ""
    if isinstance(value, bool):
        return "true" if value else "false"
    if is_number(value):
        return format_number(value)
    if isinstance(value, str):
        return value
    raise ExpressionTypeError(
        f"Cannot convert {kind_of(value)} to string; use toJSON() instead"
    )


def loose_equals(left: Any, right: Any) -> bool:
    """Compare two values the way ``==`` does.

    Null equals only null. For two scalars, a number on either side coerces
    the other side to a number; otherwise both are compared as strings.
    Arrays and objects are equal only to a structurally equal value of the
    same kind.
    """
    if left is None or right is None:
        return left is None and right is None

    left_kind = kind_of(left)
    right_kind = kind_of(right)
    if left_kind in ("array", "object") or right_kind in ("array", "object"):
        if left_kind != right_kind:
            return False
        if left_kind == "array":
            return len(left) == len(right) and all(
                loose_equals(a, b) for a, b in zip(left, right)
            )
        return left.keys() == right.keys() and all(
            loose_equals(left[key], right[key]) for key in left
        )

    if left_kind == "number" or right_kind == "number":
        return to_number(left) == to_number(right)
    return to_string(left) == to_string(right)


def to_plain(value: Any) -> Any:
    """Copy a value into a form ``json.dumps`` renders canonically.

    Integral numbers become ``int`` so they print without a fraction, and
    NaN or infinities become null.
    """
    if is_number(value) and not isinstance(value, float):
        value = _int_to_float(value)
    if isinstance(value, float):
        if math.isnan(value) or math.isinf(value):
            return None
        if value.is_integer() and abs(value) < 1e21:
            return int(value)
        return value
    if isinstance(value, (list, tuple)):
        return [to_plain(item) for item in value]
    if isinstance(value, dict):
        return {str(key): to_plain(item) for key, item in value.items()}
    kind_of(value)
    return value


def to_json(value: Any) -> str:
    """Serialize a value to compact JSON, preserving object key order."""
    return json.dumps(
        to_plain(value),
        ensure_ascii=False,
        separators=(",", ":"),
        allow_nan=False,
    )
