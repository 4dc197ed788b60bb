"""
collect.resolver — Shared library resolution for a crashed binary.

Two strategies, chosen by which tools exist rather than by a flag:

    gdb   ``info sharedlibrary`` against the binary *and* the core.  Sees
          everything the loader had mapped at crash time, including
          libraries opened with dlopen().
    ldd   Static dependency listing of the binary alone.  Seeded with a
          few runtime-loaded shims that ldd never reports.

The gdb strategy wins whenever gdb is installed and a core is given.
"""

from __future__ import annotations

import os
import re
from pathlib import Path
from typing import List, Optional, Tuple

from ..core.config import Config
from ..core.errors import ResolutionError, ToolUnavailableError
from ..core.log import console, debug_print, warn
from ..core.models import LibraryResolution, ResolverKind, Tool, ToolCapabilities
from ..infra.environment import debugger_environment
from ..infra.tools import run_tool

# ``libfoo.so.1 => /usr/lib64/libfoo.so.1 (0x00007f...)``
_LDD_ARROW_RE = re.compile(r"=> (\S+)(?:\s|$)")
# ``/lib64/ld-linux-x86-64.so.2 (0x00007f...)`` (program interpreter)
_LDD_INTERP_RE = re.compile(r"^\s*(/\S+)\s+\(0x[0-9a-fA-F]+\)")
# glibc ldd prints ``libfoo.so.1 => not found``; only the first word is matched.
_LDD_NOT_FOUND = "not"

# ``0x00007ffff7fc5090  0x00007ffff7fee315  Yes  /lib64/ld-linux-x86-64.so.2``
_GDB_MAPPED_RE = re.compile(r"^0x[0-9a-f]+.*\s(/.*)$")
# ``                                        No   /opt/lib/libgone.so``
_GDB_UNMAPPED_RE = re.compile(r"^\s+(?:Yes|No)(?:\s+\(\*\))?\s+(/.*)$")

MISSING_HINT = "Please check environment or run with '--ignore-missing'"


# ── Strategy selection ────────────────────────────────────────────────


def select_strategy(caps: ToolCapabilities, core_file: Optional[Path]) -> ResolverKind:
    """Pick the highest-fidelity resolver the host supports."""
    if core_file is not None and caps.has(Tool.GDB):
        return ResolverKind.GDB
    if caps.has(Tool.LDD):
        return ResolverKind.LDD
    raise ToolUnavailableError(
        "gdb/ldd",
        "Could not find gdb or ldd. Cannot collect artifacts",
        hint="Install gdb (preferred) or make ldd available on PATH",
    )


# ── Output parsers ────────────────────────────────────────────────────


def parse_ldd_output(text: str) -> Tuple[List[str], List[str]]:
    """
    Parse ``ldd`` output into ``(libraries, missing)``.

    Lines without an arrow target (``linux-vdso.so.1 (0x...)``) are
    skipped, except the program interpreter which is listed by path.
    """
    libraries: List[str] = []
    missing: List[str] = []
    for line in text.splitlines():
        match = _LDD_ARROW_RE.search(line)
        if match is None:
            interp = _LDD_INTERP_RE.match(line)
            if interp:
                libraries.append(interp.group(1))
            continue
        target = match.group(1)
        debug_print("resolver", f"library location parsed: {target!r}")
        if target == _LDD_NOT_FOUND:
            missing.append(line[:line.index(" =>")].strip())
        else:
            libraries.append(target)
    return libraries, missing


def parse_gdb_output(text: str) -> List[str]:
    """Return every absolute path listed by ``info sharedlibrary``."""
    paths: List[str] = []
    for line in text.splitlines():
        match = _GDB_MAPPED_RE.match(line) or _GDB_UNMAPPED_RE.match(line)
        if match is None:
            continue
        path = match.group(1).strip()
        debug_print("resolver", f"library location parsed: {path!r}")
        paths.append(path)
    return paths


def split_existing(paths: List[str]) -> Tuple[List[str], List[str]]:
    """Partition paths into ``(present, missing)`` on the local filesystem."""
    present: List[str] = []
    missing: List[str] = []
    for path in paths:
        (present if os.path.exists(path) else missing).append(path)
    return present, missing


# ── Strategies ────────────────────────────────────────────────────────


def resolve_with_gdb(binary: Path, core_file: Path, caps: ToolCapabilities, cfg: Config) -> LibraryResolution:
    gdb = caps.require(Tool.GDB)
    console.print(f"[dim]→ running gdb on core {core_file} with {binary}[/]")
    cmd = [gdb, "--batch", "--ex", "info sharedlibrary", str(binary), str(core_file)]
    with debugger_environment():
        rc, out, err = run_tool(cmd, timeout=cfg.tool_timeout)
    if rc != 0:
        raise ResolutionError(
            f"Error executing {cmd}: {err.strip() or f'exit status {rc}'}",
            output=out + err,
        )
    debug_print("resolver", f"gdb output\n{out}")
    present, missing = split_existing(parse_gdb_output(out))
    return LibraryResolution(kind=ResolverKind.GDB, libraries=present, missing=missing, raw_output=out)


def resolve_with_ldd(binary: Path, caps: ToolCapabilities, cfg: Config) -> LibraryResolution:
    ldd = caps.require(Tool.LDD)
    libraries = [lib for lib in cfg.static_libraries if os.path.exists(lib)]

    console.print(f"[dim]→ running ldd on {binary}[/]")
    cmd = [ldd, str(binary)]
    rc, out, err = run_tool(cmd, timeout=cfg.tool_timeout)
    if rc != 0:
        raise ResolutionError(
            f"Error executing {cmd}: {err.strip() or f'exit status {rc}'}",
            output=out + err,
        )
    debug_print("resolver", f"ldd output\n{out}")
    found, missing = parse_ldd_output(out)
    libraries.extend(found)
    return LibraryResolution(kind=ResolverKind.LDD, libraries=libraries, missing=missing, raw_output=out)


def apply_missing_policy(resolution: LibraryResolution, tolerate_missing: bool) -> LibraryResolution:
    """Fail on unresolved libraries unless the operator tolerates them."""
    if not resolution.missing:
        return resolution
    if not tolerate_missing:
        raise ResolutionError(
            "Unable to find libraries:",
            missing=resolution.missing,
            output=resolution.raw_output,
            hint=MISSING_HINT,
        )
    for lib in resolution.missing:
        warn(f"Unable to find library: {lib}")
    return resolution


def resolve_libraries(
    binary: Path,
    core_file: Optional[Path],
    caps: ToolCapabilities,
    cfg: Config,
    *,
    tolerate_missing: bool = False,
) -> LibraryResolution:
    """
    Resolve the shared libraries needed to debug ``binary``.

    Raises ``ToolUnavailableError`` when neither gdb nor ldd exists and
    ``ResolutionError`` on tool failure or untolerated missing libraries.
    """
    kind = select_strategy(caps, core_file)
    debug_print("resolver", f"using {kind.value} strategy")
    if kind is ResolverKind.GDB:
        resolution = resolve_with_gdb(binary, core_file, caps, cfg)  # type: ignore[arg-type]
    else:
        resolution = resolve_with_ldd(binary, caps, cfg)
    console.print(
        f"  [dim]{len(resolution.unique_libraries())} libraries resolved, "
        f"{len(resolution.missing)} missing[/]"
    )
    return apply_missing_policy(resolution, tolerate_missing)
