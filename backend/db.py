import os
import sqlite3
from pathlib import Path
from typing import Any, Dict, List, Optional

# Default location of the variables database; SIMPLELOGIC_DB_PATH overrides it
DEFAULT_DB_PATH = Path(__file__).parent / 'simplelogic.db'


def db_path() -> Path:
    """Return the database file path, honouring `SIMPLELOGIC_DB_PATH`.

    The environment is read on every call so tests can point the application
    at a temporary file after import.
    """
    return Path(os.environ.get('SIMPLELOGIC_DB_PATH') or DEFAULT_DB_PATH)


def get_conn():
    """Return a new sqlite3 connection configured to return rows as dict-like objects.

    We create a fresh connection per-call. Script runs touch only a handful
    of variables, so there is no need for a pool here.
    """
    conn = sqlite3.connect(str(db_path()))
    conn.row_factory = sqlite3.Row
    return conn


def init_db():
    """Ensure the database file and the variables table exist.

    This is idempotent and safe to call at application startup.
    """
    db_path().parent.mkdir(parents=True, exist_ok=True)
    conn = get_conn()
    cur = conn.cursor()
    cur.execute('''
    CREATE TABLE IF NOT EXISTS Variables (
      name TEXT PRIMARY KEY,
      value TEXT NOT NULL,
      updated_at TIMESTAMP DEFAULT CURRENT_TIMESTAMP
    )
    ''')
    conn.commit()
    conn.close()


def get_variable(name: str) -> Optional[str]:
    """Fetch the raw string value of a variable, or None if it is unset."""
    conn = get_conn()
    cur = conn.cursor()
    cur.execute('SELECT value FROM Variables WHERE name = ?', (name,))
    row = cur.fetchone()
    conn.close()
    return row['value'] if row else None


def set_variable(name: str, value: str) -> None:
    """Insert or overwrite a variable. Last write wins."""
    conn = get_conn()
    cur = conn.cursor()
    cur.execute(
        """
        INSERT INTO Variables (name, value) VALUES (?, ?)
        ON CONFLICT(name) DO UPDATE SET
            value = excluded.value,
            updated_at = CURRENT_TIMESTAMP
        """,
        (name, value),
    )
    conn.commit()
    conn.close()


def delete_variable(name: str) -> bool:
    """Remove a variable, returning True if a row was deleted."""
    conn = get_conn()
    cur = conn.cursor()
    cur.execute('DELETE FROM Variables WHERE name = ?', (name,))
    deleted = cur.rowcount > 0
    conn.commit()
    conn.close()
    return deleted


def list_variables() -> List[Dict[str, Any]]:
    """Return all variables (name, value, updated_at) ordered by name.

    The returned items are plain dictionaries suitable for JSON serialization.
    """
    conn = get_conn()
    cur = conn.cursor()
    cur.execute('SELECT name, value, updated_at FROM Variables ORDER BY name')
    rows = cur.fetchall()
    conn.close()
    return [dict(r) for r in rows]
