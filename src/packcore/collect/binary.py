"""
collect.binary — Core identification and executable resolution.

The ``file`` utility describes a core roughly as::

    core.1234: ELF 64-bit LSB core file, x86-64, version 1 (SYSV),
    SVR4-style, from 'postgres: checkpointer', real uid: 1000, ...,
    execfn: '/usr/local/gpdb/bin/postgres', platform: 'x86_64'

The program name is the first word inside the first pair of quotes.
"""

from __future__ import annotations

import os
import re
import shutil
from pathlib import Path
from typing import Optional

from ..core.config import Config
from ..core.errors import ConfigurationError
from ..core.log import debug_print
from ..core.models import BinarySource, CoreArtifact, ExecutableRef, Tool, ToolCapabilities
from ..infra.tools import run_tool

_CORE_MARKERS = ("LSB core file", "MSB core file")
_EXECFN_RE = re.compile(r"execfn:\s*'([^']+)'")


def identify_file(path: Path, caps: ToolCapabilities, cfg: Config) -> str:
    """Return the ``file`` description of ``path``."""
    file_cmd = caps.require(Tool.FILE)
    rc, out, err = run_tool([file_cmd, str(path)], timeout=cfg.tool_timeout)
    if rc != 0:
        raise ConfigurationError(f"Failed executing '{file_cmd} {path}': {err.strip() or rc}")
    output = out.strip()
    debug_print("binary", f"'file' returned: {output}")
    return output


def is_core(file_output: str) -> bool:
    return any(marker in file_output for marker in _CORE_MARKERS)


def parse_binary_name(file_output: str) -> str:
    """Extract the program name from a ``file`` core description."""
    start = file_output.find("'")
    if start == -1:
        return ""
    end = file_output.find("'", start + 1)
    if end == -1:
        end = len(file_output)
    quoted = file_output[start + 1:end].strip()
    if not quoted:
        return ""
    name = quoted.split()[0]
    if name.endswith(":"):
        name = name[:-1]
    return name


def parse_execfn(file_output: str) -> Optional[str]:
    match = _EXECFN_RE.search(file_output)
    return match.group(1) if match else None


def find_binary(file_output: str) -> str:
    """
    Locate the executable named in a core description.

    The parsed name is looked up on ``$PATH``; when that fails and the
    description carries an ``execfn`` that exists on disk, that path is
    used instead.
    """
    name = parse_binary_name(file_output)
    debug_print("binary", f"parsed binary name from file output: {name!r}")
    if name:
        found = shutil.which(name)
        if found:
            return os.path.abspath(found)

    execfn = parse_execfn(file_output)
    if execfn and os.path.isfile(execfn) and os.access(execfn, os.X_OK):
        debug_print("binary", f"falling back to execfn {execfn}")
        return os.path.abspath(execfn)

    raise ConfigurationError(
        f"Unable to find binary name '{name}'",
        hint="Source the database environment or pass --binary",
    )


def resolve_explicit_binary(binary: str) -> str:
    found = shutil.which(binary)
    if not found:
        raise ConfigurationError(
            f"Unable to find binary '{binary}' specified on command line",
            hint="Pass an absolute path or a program name on PATH",
        )
    return os.path.abspath(found)


def load_core(core: str, caps: ToolCapabilities, cfg: Config) -> CoreArtifact:
    """Validate the core path and confirm it is a core dump."""
    if not core:
        raise ConfigurationError("No core file specified")
    path = Path(core)
    if not path.exists():
        raise ConfigurationError(f"Corefile '{core}' does not exist")
    path = Path(os.path.abspath(path))
    debug_print("binary", f"core file full path: {path}")

    output = identify_file(path, caps, cfg)
    if not is_core(output):
        raise ConfigurationError(f"File '{path}' does not appear to be a core", hint=output or None)
    return CoreArtifact(path=path, file_output=output)


def resolve_binary(core: CoreArtifact, binary: Optional[str]) -> ExecutableRef:
    if binary:
        return ExecutableRef(path=Path(resolve_explicit_binary(binary)), source=BinarySource.EXPLICIT)
    return ExecutableRef(path=Path(find_binary(core.file_output)), source=BinarySource.DETECTED)
