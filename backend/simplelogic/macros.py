"""Host-side glue: placeholder substitution and the `{{logic::...}}` handler.

`MacroSubstituter` is the text-substitution capability handed to the
interpreter. `logic_macro` is what a host calls when it meets a
`{{logic::...}}` macro: it normalizes the macro arguments, runs the script
and turns any collaborator failure into a single `[Logic Error: ...]` string.
"""

import logging
import re
from typing import Any, Dict, Optional

from .interpreter import Interpreter
from .store import VariableStore

logger = logging.getLogger(__name__)

PLACEHOLDER_RE = re.compile(r"\{\{\s*([^{}]*?)\s*\}\}")
GETVAR_PREFIX = "getvar::"


class MacroSubstituter:
    """Expand `{{getvar::name}}` and `{{param}}` placeholders in a line.

    Unknown placeholders are left as they are, so a line without any known
    reference comes back unchanged.

    Args:
        store: variable store used for `{{getvar::name}}`.
        params: host values such as `user` or `char`, matched
            case-insensitively.
    """

    def __init__(self, store: VariableStore, params: Optional[Dict[str, str]] = None):
        self.store = store
        self.params = {k.lower(): v for k, v in (params or {}).items()}

    def _replace(self, m: re.Match) -> str:
        body = m.group(1)
        if body.lower().startswith(GETVAR_PREFIX):
            value = self.store.get(body[len(GETVAR_PREFIX):].strip())
            return "" if value is None else value
        key = body.lower()
        if key in self.params:
            return str(self.params[key])
        return m.group(0)

    def __call__(self, line: str) -> str:
        if "{{" not in line:
            return line
        return PLACEHOLDER_RE.sub(self._replace, line)


def macro_script(data: Any) -> str:
    """Extract the script text from macro arguments.

    Hosts pass either the raw string or an object whose `args` is a list
    (first item is the script) or a string. Anything else yields "".
    """
    if isinstance(data, dict):
        args = data.get("args")
        if isinstance(args, (list, tuple)) and args:
            data = args[0]
        elif isinstance(args, str):
            data = args
        else:
            data = ""
    if not isinstance(data, str):
        return ""
    return data


def logic_macro(data: Any, interpreter: Interpreter) -> str:
    """Run the script carried by a `{{logic::...}}` macro.

    Returns the script output, "" when there is no script, or
    `[Logic Error: <message>]` when running it raised.
    """
    script = macro_script(data)
    if not script:
        return ""
    try:
        return interpreter.run(script)
    except Exception as e:
        logger.error("Simple Logic error: %s", e, exc_info=True)
        return f"[Logic Error: {e}]"
