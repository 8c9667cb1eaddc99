"""Variable stores the interpreter reads and writes through.

The interpreter never owns variables. It is handed an object with
`get(name) -> Optional[str]` and `set(name, value: str)`; values are stored
as raw strings and coerced into typed values on read (see
`values.coerce_stored`).
"""

import threading
from typing import Dict, Optional, Protocol

from .. import db


class VariableStore(Protocol):
    def get(self, name: str) -> Optional[str]:
        ...

    def set(self, name: str, value: str) -> None:
        ...


class MemoryVariableStore:
    """Dict-backed store, used by tests and embedding hosts.

    Reads and writes take a lock so overlapping script runs in a threaded
    host see last-write-wins rather than a torn dict.
    """

    def __init__(self, initial: Optional[Dict[str, str]] = None):
        self._values: Dict[str, str] = dict(initial or {})
        self._lock = threading.Lock()

    def get(self, name: str) -> Optional[str]:
        with self._lock:
            return self._values.get(name)

    def set(self, name: str, value: str) -> None:
        with self._lock:
            self._values[name] = value

    def snapshot(self) -> Dict[str, str]:
        with self._lock:
            return dict(self._values)


class SqliteVariableStore:
    """Store backed by the `Variables` table in `backend.db`.

    Every call opens its own connection, so sqlite serializes concurrent
    writers for us. Database errors propagate to the caller.
    """

    def get(self, name: str) -> Optional[str]:
        return db.get_variable(name)

    def set(self, name: str, value: str) -> None:
        db.set_variable(name, value)
