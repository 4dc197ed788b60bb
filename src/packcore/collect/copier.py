"""
collect.copier — Copy artifacts into the staging directory.

Shallow copies land in the staging root (binary, core).  Deep copies
recreate the source's absolute directory under staging (libraries), so
gdb's ``set sysroot <staging>`` finds each library at the exact path the
crashed process used.
"""

from __future__ import annotations

import os
import shutil
from pathlib import Path
from typing import Iterable, List

from ..core.errors import ArtifactIOError
from ..core.log import debug_print
from ..core.models import CopyMode


def deep_destination(staging: Path, src: str) -> Path:
    """Directory under ``staging`` that mirrors the directory of ``src``.

    The leading ``/`` is stripped before joining, otherwise ``Path``
    would discard ``staging`` for the absolute source directory.
    """
    src_dir = os.path.dirname(src.strip())
    return Path(staging) / src_dir.lstrip("/")


def artifact_location(staging: Path, src: str, mode: CopyMode) -> Path:
    """Where ``src`` ends up inside ``staging`` for a given copy mode."""
    name = os.path.basename(src.strip())
    if mode is CopyMode.DEEP:
        return deep_destination(staging, src) / name
    return Path(staging) / name


def copy_file(src: str, dest_dir: Path) -> Path:
    """Copy ``src`` into ``dest_dir``, following symlinks."""
    src = src.strip()
    debug_print("copier", f"copying {src} to {dest_dir}")
    try:
        return Path(shutil.copy2(src, dest_dir))
    except OSError as e:
        raise ArtifactIOError(f"Failed copying file '{src}': {e}", path=src) from e


def copy_file_path(src: str, staging: Path) -> Path:
    """Deep-copy ``src`` under ``staging``."""
    dest_dir = deep_destination(staging, src)
    debug_print("copier", f"deep copying {src} to {dest_dir}")
    try:
        os.makedirs(dest_dir, mode=0o755, exist_ok=True)
    except OSError as e:
        raise ArtifactIOError(f"Could not create directory '{dest_dir}': {e}", path=str(dest_dir)) from e
    return copy_file(src, dest_dir)


def copy_files(paths: Iterable[str], staging: Path, mode: CopyMode) -> List[Path]:
    """Copy every path; the first failure aborts with ``ArtifactIOError``."""
    copied = []
    for path in paths:
        if mode is CopyMode.DEEP:
            copied.append(copy_file_path(path, staging))
        else:
            copied.append(copy_file(path, staging))
    return copied
