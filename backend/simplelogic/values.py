"""Typed values flowing through Simple Logic conditions and variables.

Script text and the variable store only ever hold strings. Conditions,
however, compare strings, numbers and booleans, so every operand is
resolved into a `Value` carrying an explicit kind. The coercion rules used
by comparisons live here as plain functions instead of relying on Python's
own mixed-type behaviour:

- `infer_literal` turns a script token into a typed value,
- `coerce_stored` turns a raw stored string into a typed value,
- `loose_equals` and `compare` implement equality and ordering.
"""

import math
import re
from dataclasses import dataclass
from typing import Optional, Union

STRING = "string"
NUMBER = "number"
BOOLEAN = "boolean"

# A finite decimal number, optionally signed, with an optional exponent.
# Python's float() also accepts "nan", "inf" and "1_000", which we do not.
NUMBER_RE = re.compile(r"^[+-]?(?:\d+(?:\.\d*)?|\.\d+)(?:[eE][+-]?\d+)?$")


@dataclass(frozen=True)
class Value:
    """A tagged script value.

    Attributes:
        kind: one of `STRING`, `NUMBER` or `BOOLEAN`.
        data: the Python payload (`str`, `float` or `bool`).
    """

    kind: str
    data: Union[str, float, bool]

    @classmethod
    def string(cls, text: str) -> "Value":
        return cls(STRING, text)

    @classmethod
    def number(cls, num: float) -> "Value":
        return cls(NUMBER, float(num))

    @classmethod
    def boolean(cls, flag: bool) -> "Value":
        return cls(BOOLEAN, bool(flag))

    def text(self) -> str:
        """Return the string form used for output, storage and substring tests."""
        if self.kind == BOOLEAN:
            return "true" if self.data else "false"
        if self.kind == NUMBER:
            return format_number(self.data)  # type: ignore[arg-type]
        return str(self.data)

    def to_store(self) -> str:
        """Return the raw string written to the variable store.

        The result reads back through `coerce_stored` as a value of the same
        kind (except strings that happen to look like numbers or booleans).
        """
        return self.text()


ZERO = Value.number(0)


def format_number(num: float) -> str:
    """Format a float the short way: `5.0` -> `"5"`, `2.5` -> `"2.5"`."""
    if math.isnan(num):
        return "NaN"
    if math.isinf(num):
        return "Infinity" if num > 0 else "-Infinity"
    if num.is_integer():
        return str(int(num))
    return repr(num)


def parse_number(text: str) -> Optional[float]:
    """Return `text` as a float if it is a finite decimal literal, else None."""
    candidate = text.strip()
    if not NUMBER_RE.match(candidate):
        return None
    num = float(candidate)
    if not math.isfinite(num):
        return None
    return num


def parse_boolean(text: str) -> Optional[bool]:
    lowered = text.lower()
    if lowered == "true":
        return True
    if lowered == "false":
        return False
    return None


def is_quoted(text: str) -> bool:
    return len(text) >= 2 and text.startswith('"') and text.endswith('"')


def strip_quotes(text: str) -> str:
    """Remove one layer of surrounding double quotes, if present."""
    if is_quoted(text):
        return text[1:-1]
    return text


def infer_literal(raw: str) -> Value:
    """Infer a typed value from script text.

    Quoted text becomes a string with the quotes removed, numeric text a
    number and `true`/`false` (any case) a boolean. Anything else is kept
    as a plain string.
    """
    if is_quoted(raw):
        return Value.string(raw[1:-1])
    num = parse_number(raw)
    if num is not None:
        return Value.number(num)
    flag = parse_boolean(raw)
    if flag is not None:
        return Value.boolean(flag)
    return Value.string(raw)


def coerce_stored(raw: Optional[str]) -> Optional[Value]:
    """Coerce a raw stored string on read.

    Returns None for an absent key so callers can decide on the default.
    """
    if raw is None:
        return None
    num = parse_number(raw)
    if num is not None:
        return Value.number(num)
    flag = parse_boolean(raw.strip())
    if flag is not None:
        return Value.boolean(flag)
    return Value.string(raw)


def to_number(value: Value) -> float:
    """Numeric conversion used when comparing values of different kinds.

    Booleans map to 1/0, blank strings to 0 and any other non-numeric
    string to NaN, which makes every comparison against it false.
    """
    if value.kind == NUMBER:
        return value.data  # type: ignore[return-value]
    if value.kind == BOOLEAN:
        return 1.0 if value.data else 0.0
    text = str(value.data).strip()
    if not text:
        return 0.0
    num = parse_number(text)
    return math.nan if num is None else num


def loose_equals(left: Value, right: Value) -> bool:
    """Equality that converts differing kinds toward numbers before comparing."""
    if left.kind == right.kind:
        return left.data == right.data
    return to_number(left) == to_number(right)


def compare(left: Value, right: Value, op: str) -> bool:
    """Ordering comparison for `>`, `<`, `>=` and `<=`.

    Two strings compare lexicographically; every other pairing compares
    numerically.
    """
    if left.kind == STRING and right.kind == STRING:
        a, b = left.data, right.data
    else:
        a, b = to_number(left), to_number(right)
    if op == ">":
        return a > b
    if op == "<":
        return a < b
    if op == ">=":
        return a >= b
    if op == "<=":
        return a <= b
    return False
