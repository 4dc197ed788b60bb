"""
collect.integrity — Post-copy verification of the staging directory.

Runs after every artifact has been copied and before anything is
archived.  All problems are gathered into a single ``IntegrityError`` so
the operator sees the full list at once.
"""

from __future__ import annotations

import os
from pathlib import Path
from typing import List, Optional, Sequence

from ..core.errors import IntegrityError
from ..core.log import debug_print
from ..core.models import CopyMode, ResolverKind
from .copier import artifact_location
from .script import SCRIPT_NAME


def find_missing_artifacts(
    staging: Path,
    core_file: Optional[str],
    binary: str,
    libraries: Sequence[str],
) -> List[str]:
    """Return a human-readable entry for every expected artifact not in ``staging``."""
    staging = Path(staging)
    if not staging.is_dir():
        return [f"packcore directory: {staging}"]

    missing: List[str] = []
    if core_file and not artifact_location(staging, core_file, CopyMode.SHALLOW).exists():
        missing.append(f"core file: {core_file}")
    if not artifact_location(staging, binary, CopyMode.SHALLOW).exists():
        missing.append(f"binary: {binary}")

    for lib in libraries:
        if not artifact_location(staging, lib, CopyMode.DEEP).exists():
            missing.append(f"library: {lib.strip()}")

    outputs = [kind.output_filename for kind in ResolverKind]
    if not any(os.path.exists(staging / name) for name in outputs):
        missing.append(f"resolver output: one of {', '.join(sorted(outputs))}")

    if not (staging / SCRIPT_NAME).exists():
        missing.append(f"launcher script: {SCRIPT_NAME}")
    return missing


def verify_bundle(
    staging: Path,
    core_file: Optional[str],
    binary: str,
    libraries: Sequence[str],
) -> None:
    """Raise ``IntegrityError`` unless ``staging`` is complete."""
    missing = find_missing_artifacts(staging, core_file, binary, libraries)
    if missing:
        raise IntegrityError(missing)
    debug_print("integrity", f"{staging} verified: {len(libraries)} libraries present")
