"""
infra.tools — External tool discovery and invocation.

``detect_capabilities`` probes ``$PATH`` once per run and returns a typed
``ToolCapabilities``; stages ask it for tool paths instead of probing on
their own.  ``run_tool`` is the single place a subprocess is started, so
every external call shares the same bounded timeout.
"""

from __future__ import annotations

import shutil
import subprocess
from typing import Dict, List, Optional, Sequence, Tuple

from ..core.config import Config
from ..core.log import debug_print
from ..core.models import Tool, ToolCapabilities


def tool_command(tool: Tool, cfg: Config) -> str:
    """Configured command name for ``tool``."""
    return {
        Tool.FILE: cfg.file_cmd,
        Tool.LDD: cfg.ldd_cmd,
        Tool.GDB: cfg.gdb_cmd,
        Tool.TAR: cfg.tar_cmd,
        Tool.LSB_RELEASE: cfg.lsb_release_cmd,
        Tool.UNAME: cfg.uname_cmd,
    }[tool]


def detect_capabilities(cfg: Config) -> ToolCapabilities:
    """Look up every known tool on ``$PATH``."""
    paths: Dict[Tool, Optional[str]] = {}
    for tool in Tool:
        found = shutil.which(tool_command(tool, cfg))
        debug_print("tools", f"{tool.value}: {found or 'not found'}")
        paths[tool] = found
    return ToolCapabilities(paths=paths)


def run_tool(
    cmd: Sequence[str],
    *,
    timeout: int,
    cwd: Optional[str] = None,
) -> Tuple[int, str, str]:
    """
    Run an external command and capture its output.

    Returns ``(returncode, stdout, stderr)``.  A timeout or a failure to
    start the process is reported as returncode ``-1`` with the reason in
    ``stderr``.
    """
    argv: List[str] = [str(c) for c in cmd]
    debug_print("tools", f"running {argv} (timeout={timeout}s)")
    try:
        result = subprocess.run(
            argv,
            capture_output=True,
            text=True,
            errors="replace",
            timeout=timeout,
            cwd=cwd,
        )
    except subprocess.TimeoutExpired:
        return -1, "", f"'{argv[0]}' timed out after {timeout}s"
    except OSError as exc:
        return -1, "", f"could not execute '{argv[0]}': {exc}"
    return result.returncode, result.stdout, result.stderr
