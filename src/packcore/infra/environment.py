"""
infra.environment — Scoped process environment for debugger runs.

A database installation usually exports ``LD_LIBRARY_PATH`` and its own
``PYTHONHOME`` / ``PYTHONPATH``.  gdb inherits them, loads the wrong
libraries or Python, and reports a bogus library map.  The context
manager below clears them for the duration of the ``with`` block and
restores the exact previous state on every exit path.
"""

from __future__ import annotations

import os
from contextlib import contextmanager
from typing import Dict, Iterator, Optional

from ..core.log import debug_print

SCRUBBED_VARS = ("LD_LIBRARY_PATH", "PYTHONHOME", "PYTHONPATH")
SYSTEM_BIN = "/usr/bin"


def _snapshot() -> Dict[str, Optional[str]]:
    return {name: os.environ.get(name) for name in SCRUBBED_VARS + ("PATH",)}


def _restore(saved: Dict[str, Optional[str]]) -> None:
    for name, value in saved.items():
        if value is None:
            os.environ.pop(name, None)
        else:
            os.environ[name] = value


@contextmanager
def debugger_environment() -> Iterator[Dict[str, Optional[str]]]:
    """
    Clear library-search and interpreter variables and put ``/usr/bin``
    first on ``PATH``.

    Yields the saved values.  Variables that were unset before entry are
    unset again on exit (not set to an empty string).
    """
    saved = _snapshot()
    try:
        for name in SCRUBBED_VARS:
            os.environ.pop(name, None)
        old_path = saved["PATH"]
        os.environ["PATH"] = f"{SYSTEM_BIN}:{old_path}" if old_path else SYSTEM_BIN
        debug_print("environment", f"scrubbed {', '.join(SCRUBBED_VARS)} for debugger")
        yield saved
    finally:
        _restore(saved)
        debug_print("environment", "restored debugger environment")
