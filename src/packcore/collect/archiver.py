"""
collect.archiver — Compress the verified staging directory.
"""

from __future__ import annotations

import shutil
from pathlib import Path

from ..core.config import Config
from ..core.errors import ArchiveError
from ..core.log import debug_print, warn
from ..core.models import Tool, ToolCapabilities
from ..infra.tools import run_tool

ARCHIVE_SUFFIX = ".tar.gz"


def archive_path_for(staging: Path) -> Path:
    staging = Path(staging)
    return staging.parent / f"{staging.name}{ARCHIVE_SUFFIX}"


def create_archive(staging: Path, caps: ToolCapabilities, cfg: Config) -> Path:
    """
    ``tar czf`` the staging directory next to itself.

    The archive holds a single top-level directory named after staging.
    """
    tar = caps.require(Tool.TAR)
    staging = Path(staging)
    archive = archive_path_for(staging)
    cmd = [tar, "czf", str(archive), "-C", str(staging.parent), staging.name]
    debug_print("archiver", f"creating tar bundle {cmd}")
    rc, _, err = run_tool(cmd, timeout=cfg.tool_timeout)
    if rc != 0 or not archive.exists():
        # a failed tar may leave a truncated file under the final bundle name
        archive.unlink(missing_ok=True)
        raise ArchiveError(f"Failed executing {cmd}: {err.strip() or f'exit status {rc}'}")
    return archive


def remove_staging(staging: Path) -> bool:
    """Delete the staging tree; failures are logged, never raised."""
    staging = Path(staging)
    if not staging.exists():
        return True
    debug_print("archiver", f"removing temp directory {staging}")
    try:
        shutil.rmtree(staging)
    except OSError as e:
        warn(f"Could not remove temp directory '{staging}': {e}")
        return False
    return True
