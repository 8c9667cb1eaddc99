"""FastAPI application entrypoints for Simple Logic.

This module exposes HTTP endpoints for running scripts and inspecting the
global variables they read and write. Handlers are kept small: each `/run`
request constructs a fresh `Interpreter` over the sqlite-backed variable
store, so no per-run state is shared between requests. Only the variables
themselves are shared, and concurrent writes to them are last-write-wins.
"""

import logging
import os
import time
from typing import Dict, Optional

from fastapi import FastAPI
from pydantic import BaseModel

from .. import db
from ..simplelogic.interpreter import Interpreter
from ..simplelogic.macros import MacroSubstituter, logic_macro
from ..simplelogic.store import SqliteVariableStore

logging.getLogger("backend").setLevel(
    os.environ.get("SIMPLELOGIC_LOG_LEVEL", "WARNING").upper()
)
logger = logging.getLogger(__name__)

app = FastAPI(title="Simple Logic API", version="0.1")


@app.on_event('startup')
def startup():
    """FastAPI startup event: initialize the database connection/schema."""
    db.init_db()


class RunRequest(BaseModel):
    """Pydantic model for the `/run` request body.

    Fields:
        script: Simple Logic source text (one directive per line).
        last_message: optional text substituted for `LAST_MESSAGE` in conditions.
        params: optional placeholder values such as `user` or `char`.
    """
    script: str
    last_message: Optional[str] = None
    params: Optional[Dict[str, str]] = None


def build_interpreter(req: RunRequest) -> Interpreter:
    """Wire a per-request interpreter to the shared variable store."""
    store = SqliteVariableStore()
    message = req.last_message or ""
    return Interpreter(
        store,
        substitute=MacroSubstituter(store, req.params),
        last_message=lambda: message,
    )


@app.post("/run")
async def run_script(req: RunRequest):
    """Handle a script execution request.

    Store failures never escape as a 500: `logic_macro` replaces the whole
    output with a `[Logic Error: ...]` string, matching what an embedding
    host shows in place of the macro.
    """
    start = time.time()
    output = logic_macro(req.script, build_interpreter(req))
    duration_ms = int((time.time() - start) * 1000)
    logger.debug("ran script (%d chars) in %d ms", len(req.script), duration_ms)
    return {"output": output, "duration_ms": duration_ms}


class SetVariableRequest(BaseModel):
    value: str


@app.get('/variables')
async def list_variables():
    return db.list_variables()


@app.get('/variables/{name}')
async def get_variable(name: str):
    value = db.get_variable(name)
    if value is None:
        return {'error': 'not found'}
    return {'name': name, 'value': value}


@app.put('/variables/{name}')
async def set_variable(name: str, req: SetVariableRequest):
    try:
        db.set_variable(name, req.value)
    except Exception as e:
        return {'error': str(e)}
    return {'name': name, 'value': req.value}


@app.delete('/variables/{name}')
async def delete_variable(name: str):
    return {'deleted': db.delete_variable(name)}
