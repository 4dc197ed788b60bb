"""
collect.platform — Best-effort OS identification snapshot.

Nothing here may abort a collection: each step logs its failure and
moves on, so packaging still succeeds on an unrecognised platform.
"""

from __future__ import annotations

import glob
import os
import shutil
from pathlib import Path
from typing import List

from ..core.config import Config
from ..core.errors import ArtifactIOError
from ..core.log import debug_print, warn
from ..core.models import Tool, ToolCapabilities
from ..infra.tools import run_tool
from .copier import copy_file_path

LSB_RELEASE_OUT = "lsb_release.out"
UNAME_OUT = "uname.out"


def _write_command_output(cmd: List[str], dest: Path, cfg: Config) -> bool:
    rc, out, err = run_tool(cmd, timeout=cfg.tool_timeout)
    if rc != 0:
        warn(f"Failed executing command: {cmd}: {err.strip() or rc}")
        return False
    try:
        dest.write_text(out)
    except OSError as e:
        warn(f"Could not create file '{dest}': {e}")
        return False
    return True


def _snapshot_distribution(staging: Path, caps: ToolCapabilities, cfg: Config) -> List[str]:
    lsb_release = caps.path(Tool.LSB_RELEASE)
    if lsb_release:
        dest = staging / LSB_RELEASE_OUT
        if _write_command_output([lsb_release, "-a"], dest, cfg):
            return [str(dest)]
        return []

    written = []
    for release_file in sorted(glob.glob(cfg.release_glob)):
        if not os.path.isfile(release_file):
            continue
        try:
            written.append(str(copy_file_path(release_file, staging)))
        except ArtifactIOError as e:
            warn(str(e))
    return written


def _snapshot_appliance_version(staging: Path, cfg: Config) -> List[str]:
    version_file = cfg.appliance_version_file
    if not os.path.isfile(version_file):
        return []
    try:
        return [shutil.copy2(version_file, staging)]
    except OSError as e:
        warn(f"Failed copying file '{version_file}': {e}")
        return []


def _snapshot_kernel(staging: Path, caps: ToolCapabilities, cfg: Config) -> List[str]:
    uname = caps.path(Tool.UNAME)
    if not uname:
        warn("uname not found, kernel release not recorded")
        return []
    dest = staging / UNAME_OUT
    return [str(dest)] if _write_command_output([uname, "-r"], dest, cfg) else []


def write_platform_info(staging: Path, caps: ToolCapabilities, cfg: Config) -> List[str]:
    """Record distribution, appliance version and kernel release in ``staging``."""
    written: List[str] = []
    written += _snapshot_distribution(staging, caps, cfg)
    written += _snapshot_appliance_version(staging, cfg)
    written += _snapshot_kernel(staging, caps, cfg)
    debug_print("platform", f"platform files: {written}")
    return [str(p) for p in written]
