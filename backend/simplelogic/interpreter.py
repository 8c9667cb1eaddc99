"""Simple Logic block interpreter.

Scripts are line oriented:

    IF mood == "happy"
      SAY "Glad to hear it!"
    ELSE IF mood CONTAINS "sad"
      SAY "Cheer up."
    ELSE
      SAY "Hm."
    END
    SETVAR visits 3
    SET last_mood = "happy"

There is no upfront parse into a tree. Lines are walked one at a time while
a stack of `Frame` records tracks, for every open `IF ... END` block, whether
the current branch is suppressed and whether some branch at that level has
already matched. `IF` pushes a frame, `END` pops one, `ELSE IF` / `ELSE`
toggle the top frame. Output of `SAY` lines is accumulated and returned as a
single trimmed string.

The interpreter never raises because of script text: an `ELSE` with no open
`IF` becomes an inline error marker, everything else that is malformed is a
silent no-op. Failures of the injected collaborators (variable store,
substitution, last-message source) propagate to the caller.
"""

import logging
import re
from dataclasses import dataclass
from typing import Callable, List, Optional, Tuple

from .evaluator import evaluate
from .store import VariableStore
from .values import Value, coerce_stored, infer_literal, strip_quotes

logger = logging.getLogger(__name__)

ELSE_IF_ERROR = "[Error: ELSE IF without IF]"
ELSE_ERROR = "[Error: ELSE without IF]"
LAST_MESSAGE = "LAST_MESSAGE"

# Directive prefixes in matching priority order; the first match wins.
# END is matched against the whole line instead (see `match_directive`).
DIRECTIVES = (
    ("IF", "IF "),
    ("ELSE_IF", "ELSE IF "),
    ("ELSE", "ELSE"),
    ("END", "END"),
    ("SAY", "SAY "),
    ("SET", "SET "),
    ("SETVAR", "SETVAR "),
)
STRUCTURAL = ("IF", "ELSE_IF", "ELSE", "END")

LINE_SPLIT_RE = re.compile(r"\r?\n")


@dataclass
class Frame:
    """State of one open conditional block.

    Attributes:
        suppressed: lines in the current branch must not run.
        any_branch_matched: some IF/ELSE IF/ELSE branch at this level has
            already been taken, so later branches stay closed.
    """

    suppressed: bool = False
    any_branch_matched: bool = False


def split_lines(script: str) -> List[str]:
    """Split script text into trimmed, non-empty lines."""
    lines = (raw.strip() for raw in LINE_SPLIT_RE.split(script or ""))
    return [line for line in lines if line]


def match_directive(line: str) -> Optional[Tuple[str, str]]:
    """Match a line against the directive prefixes, case-insensitively.

    Returns (directive, argument_text) or None for lines that are not
    directives. The argument text is sliced from the original line so its
    case is preserved.
    """
    upper = line.upper()
    for name, prefix in DIRECTIVES:
        if name == "END":
            if upper == "END":
                return name, ""
            continue
        if upper.startswith(prefix):
            return name, line[len(prefix):]
    return None


def _no_substitution(line: str) -> str:
    return line


def _no_last_message() -> str:
    return ""


class Interpreter:
    """Runs Simple Logic scripts against an injected variable store.

    Args:
        store: object with `get(name) -> Optional[str]` and
            `set(name, value: str)`.
        substitute: expands host placeholders in a line before it is
            matched; defaults to the identity.
        last_message: returns the most recent chat message used for
            `LAST_MESSAGE` in conditions; defaults to an empty string.
        rng: object with a `random()` method used for `RANDOM` operands.

    An instance holds no per-run state, so the same interpreter can run any
    number of scripts; every `run` call builds its own lines, frames and
    output buffer.
    """

    def __init__(
        self,
        store: VariableStore,
        substitute: Optional[Callable[[str], str]] = None,
        last_message: Optional[Callable[[], str]] = None,
        rng=None,
    ):
        self.store = store
        self.substitute = substitute or _no_substitution
        self.last_message = last_message or _no_last_message
        self.rng = rng

    # --- Variables -----------------------------------------------------
    def lookup(self, name: str) -> Optional[Value]:
        """Read a variable through the store, coercing its raw string value."""
        return coerce_stored(self.store.get(name))

    # --- Entry point ---------------------------------------------------
    def run(self, script: str) -> str:
        """Execute `script` and return the accumulated `SAY` output, trimmed."""
        stack: List[Frame] = [Frame()]
        output: List[str] = []

        for raw in split_lines(script):
            if stack[-1].suppressed:
                # dead branch: only track block structure, run nothing
                matched = match_directive(raw)
                if matched and matched[0] in STRUCTURAL:
                    self._dispatch(matched, stack, output, expand=True)
                continue
            line = self.substitute(raw).strip()
            matched = match_directive(line)
            if matched is None:
                logger.debug("ignoring unknown line %r", line)
                continue
            self._dispatch(matched, stack, output, expand=False)

        return "".join(output).strip()

    def _dispatch(
        self,
        matched: Tuple[str, str],
        stack: List[Frame],
        output: List[str],
        *,
        expand: bool,
    ) -> None:
        """Route a matched directive to its handler.

        `expand` is True when the line was matched without substitution, in
        which case conditions are substituted right before evaluation.
        """
        directive, arg = matched
        if directive == "IF":
            self._handle_if(arg, stack, expand)
        elif directive == "ELSE_IF":
            self._handle_else_if(arg, stack, output, expand)
        elif directive == "ELSE":
            self._handle_else(stack, output)
        elif directive == "END":
            self._handle_end(stack)
        elif directive == "SAY":
            self._handle_say(arg, output)
        elif directive == "SET":
            self._handle_set(arg)
        elif directive == "SETVAR":
            self._handle_setvar(arg)

    # --- Conditions ----------------------------------------------------
    def _condition(self, text: str, expand: bool) -> bool:
        if expand:
            text = self.substitute(text)
        if LAST_MESSAGE in text:
            message = (self.last_message() or "").replace('"', "'")
            text = text.replace(LAST_MESSAGE, f'"{message}"')
        return evaluate(text.strip(), self.lookup, self.rng)

    # --- Control flow --------------------------------------------------
    def _handle_if(self, cond: str, stack: List[Frame], expand: bool) -> None:
        if stack[-1].suppressed:
            # nothing inside a dead branch may ever activate
            stack.append(Frame(suppressed=True, any_branch_matched=True))
            return
        result = self._condition(cond, expand)
        logger.debug("IF %r -> %s (depth %d)", cond, result, len(stack))
        stack.append(Frame(suppressed=not result, any_branch_matched=result))

    def _handle_else_if(self, cond: str, stack: List[Frame], output: List[str], expand: bool) -> None:
        if len(stack) <= 1:
            logger.warning("ELSE IF without IF")
            output.append(ELSE_IF_ERROR)
            return
        frame, parent = stack[-1], stack[-2]
        if parent.suppressed:
            frame.suppressed = True
            frame.any_branch_matched = True
            return
        if frame.any_branch_matched:
            frame.suppressed = True
            return
        result = self._condition(cond, expand)
        logger.debug("ELSE IF %r -> %s (depth %d)", cond, result, len(stack) - 1)
        frame.suppressed = not result
        if result:
            frame.any_branch_matched = True

    def _handle_else(self, stack: List[Frame], output: List[str]) -> None:
        if len(stack) <= 1:
            logger.warning("ELSE without IF")
            output.append(ELSE_ERROR)
            return
        frame, parent = stack[-1], stack[-2]
        if parent.suppressed:
            frame.suppressed = True
            frame.any_branch_matched = True
            return
        if frame.any_branch_matched:
            frame.suppressed = True
        else:
            frame.suppressed = False
            frame.any_branch_matched = True

    def _handle_end(self, stack: List[Frame]) -> None:
        # the base frame stays; a stray END is ignored
        if len(stack) > 1:
            stack.pop()

    # --- Commands ------------------------------------------------------
    def _handle_say(self, arg: str, output: List[str]) -> None:
        output.append(strip_quotes(arg.strip()) + " ")

    def _handle_set(self, arg: str) -> None:
        """`SET name = value` stores the value as a raw string."""
        parts = arg.split("=")
        if len(parts) != 2:
            logger.debug("ignoring malformed SET %r", arg)
            return
        name = parts[0].strip()
        if not name:
            return
        value = strip_quotes(parts[1].strip())
        logger.debug("SET %s = %r", name, value)
        self.store.set(name, value)

    def _handle_setvar(self, arg: str) -> None:
        """`SETVAR name value` infers the value's type before storing it."""
        parts = arg.strip().split(None, 1)
        if len(parts) != 2:
            logger.debug("ignoring malformed SETVAR %r", arg)
            return
        name, raw_value = parts
        value = infer_literal(raw_value.strip())
        logger.debug("SETVAR %s = %r", name, value)
        self.store.set(name, value.to_store())


def run(
    script: str,
    store: VariableStore,
    substitute: Optional[Callable[[str], str]] = None,
    last_message: Optional[Callable[[], str]] = None,
    rng=None,
) -> str:
    """Run `script` once with a throwaway `Interpreter`."""
    return Interpreter(store, substitute, last_message, rng).run(script)
