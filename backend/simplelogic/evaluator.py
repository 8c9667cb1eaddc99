"""Condition evaluator for Simple Logic `IF` / `ELSE IF` lines.

A condition is exactly one binary comparison, `LEFT OP RIGHT`. There is no
precedence, no grouping and no AND/OR. The evaluator is permissive on
purpose: a condition it cannot make sense of evaluates to False instead of
raising, so a typo in a script simply takes the false branch. Only failures
of the variable lookup (i.e. the store) are allowed to propagate.
"""

import logging
import random
import re
from typing import Callable, List, Optional, Tuple

from .values import (
    ZERO,
    Value,
    compare,
    infer_literal,
    is_quoted,
    loose_equals,
    parse_boolean,
    parse_number,
)

logger = logging.getLogger(__name__)

Lookup = Callable[[str], Optional[Value]]

# quoted literal | operator run | bare token (anything else that is not whitespace)
TOKEN_RE = re.compile(r'"([^"]*)"|([=<>!]+)|([^\s"=<>!]+)')
# {{name}} and {{getvar::name}} wrappers around a variable reference
VAR_OPEN_RE = re.compile(r"^\{\{\s*(?:getvar::)?", re.IGNORECASE)
VAR_CLOSE_RE = re.compile(r"\}\}$")

ORDERING_OPS = (">", "<", ">=", "<=")
EQUALITY_OPS = ("==", "=")
SUBSTRING_OPS = ("CONTAINS", "HAS")


def tokenize(expression: str) -> List[Tuple[str, str]]:
    """Split a condition into (kind, raw) tokens.

    `kind` is "string", "op" or "word". The raw text of a string token keeps
    its quotes so operand resolution can tell literals from references.
    """
    tokens: List[Tuple[str, str]] = []
    for m in TOKEN_RE.finditer(expression):
        if m.group(1) is not None:
            tokens.append(("string", m.group(0)))
        elif m.group(2) is not None:
            tokens.append(("op", m.group(2)))
        else:
            tokens.append(("word", m.group(3)))
    return tokens


def variable_name(raw: str) -> str:
    """Strip an optional `{{...}}` / `{{getvar::...}}` wrapper from a reference."""
    if not raw.startswith("{{"):
        return raw
    return VAR_CLOSE_RE.sub("", VAR_OPEN_RE.sub("", raw)).strip()


def resolve_operand(raw: str, lookup: Lookup, rng=None) -> Value:
    """Resolve one raw operand token into a typed value.

    Resolution order: quoted string, number, boolean, `RANDOM`, then a
    variable reference. Unknown variables resolve to 0.
    """
    if is_quoted(raw) or parse_number(raw) is not None or parse_boolean(raw) is not None:
        return infer_literal(raw)
    if raw.upper() == "RANDOM":
        # fresh draw per operand
        return Value.number((rng or random).random())
    found = lookup(variable_name(raw))
    if found is None:
        return ZERO
    return found


def apply_operator(op: str, left: Value, right: Value) -> bool:
    """Apply a comparison operator; unknown operators are simply false."""
    if op in ORDERING_OPS:
        return compare(left, right, op)
    if op in EQUALITY_OPS:
        return loose_equals(left, right)
    if op == "!=":
        return not loose_equals(left, right)
    if op.upper() in SUBSTRING_OPS:
        return right.text().lower() in left.text().lower()
    return False


def evaluate(expression: str, lookup: Lookup, rng=None) -> bool:
    """Evaluate a single `LEFT OP RIGHT` condition to a boolean.

    Args:
        expression: condition text after the `IF ` / `ELSE IF ` keyword.
        lookup: returns the typed value of a variable, or None if unset.
        rng: optional object with a `random()` method used for `RANDOM`;
            defaults to the `random` module.

    Returns:
        The comparison result. Malformed conditions give False.
    """
    tokens = tokenize(expression)
    # a reference that expanded to nothing leaves the operator first
    if tokens and tokens[0][0] == "op":
        tokens.insert(0, ("word", "0"))
    if len(tokens) < 3:
        logger.debug("malformed condition %r evaluates false", expression)
        return False

    left_raw, op, right_raw = tokens[0][1], tokens[1][1], tokens[2][1]
    left = resolve_operand(left_raw, lookup, rng)
    right = resolve_operand(right_raw, lookup, rng)
    result = apply_operator(op, left, right)
    logger.debug("condition %r: %r %s %r -> %s", expression, left, op, right, result)
    return result
