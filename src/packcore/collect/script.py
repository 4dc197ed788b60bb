"""
collect.script — ``runGDB.sh`` launcher generation.

The script is run from inside the extracted bundle.  It points gdb's
sysroot at the bundle directory so every library resolves to its
deep-copied version rather than whatever the analysis host has.
"""

from __future__ import annotations

import os
from pathlib import Path

from ..core.config import Config
from ..core.errors import ArtifactIOError
from ..core.log import debug_print
from ..infra.environment import SCRUBBED_VARS

SCRIPT_NAME = "runGDB.sh"


def render_gdb_script(binary_name: str, core_name: str, debugger: str = "/usr/bin/gdb") -> str:
    lines = ["#!/bin/bash"]
    lines += [f"unset {name}" for name in SCRUBBED_VARS]
    lines.append("curDIR=`pwd`")
    lines.append(
        f'{debugger} --eval-command="set sysroot $curDIR" '
        f'--eval-command="core {core_name}" {binary_name}'
    )
    return "\n".join(lines) + "\n"


def generate_gdb_script(staging: Path, binary_name: str, core_name: str, cfg: Config) -> Path:
    """Write an executable ``runGDB.sh`` into ``staging``."""
    path = Path(staging) / SCRIPT_NAME
    try:
        path.write_text(render_gdb_script(binary_name, core_name, cfg.script_debugger))
    except OSError as e:
        raise ArtifactIOError(f"Could not create file '{path}': {e}", path=str(path)) from e
    try:
        os.chmod(path, 0o755)
    except OSError as e:
        raise ArtifactIOError(f"Could not chmod file '{path}': {e}", path=str(path)) from e
    debug_print("script", f"wrote {path}")
    return path
