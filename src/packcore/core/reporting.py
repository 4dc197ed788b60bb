"""
core.reporting — Bundle manifest persistence.

The manifest travels inside the archive so whoever opens the bundle can
see how it was produced.  It uses a standard JSON *envelope*::

    {
        "packcore_manifest": true,
        "version": "1.0",
        "generated_at": "2026-…",
        "host": "<hostname>",
        "data": { … }
    }
"""

from __future__ import annotations

import json
import socket
from datetime import datetime, timezone
from pathlib import Path
from typing import Any, Dict, List, Optional

from pydantic import BaseModel

from .errors import ArtifactIOError
from .models import CoreArtifact, ExecutableRef, LibraryResolution

MANIFEST_NAME = "packcore_manifest.json"


def _serialize(data: Any) -> Any:
    if isinstance(data, BaseModel):
        return data.model_dump(mode="json")
    if isinstance(data, dict):
        return {k: _serialize(v) for k, v in data.items()}
    if isinstance(data, list):
        return [_serialize(item) for item in data]
    if isinstance(data, Path):
        return str(data)
    return data


def manifest_envelope(data: Dict[str, Any]) -> Dict[str, Any]:
    """Wrap manifest data with timestamp and host metadata."""
    return {
        "packcore_manifest": True,
        "version": "1.0",
        "generated_at": datetime.now(timezone.utc).isoformat(),
        "host": socket.gethostname(),
        "data": _serialize(data),
    }


def save_manifest(
    staging: Path,
    *,
    core: CoreArtifact,
    binary: ExecutableRef,
    resolution: LibraryResolution,
    platform_files: Optional[List[str]] = None,
) -> Path:
    """Write ``packcore_manifest.json`` into the staging directory."""
    data = {
        "core": core,
        "binary": binary,
        "resolver": resolution.kind.value,
        "libraries": resolution.unique_libraries(),
        "missing_libraries": resolution.missing,
        "platform_files": platform_files or [],
    }
    path = staging / MANIFEST_NAME
    try:
        path.write_text(json.dumps(manifest_envelope(data), indent=2, default=str))
    except OSError as e:
        raise ArtifactIOError(f"Could not write manifest '{path}': {e}", path=str(path)) from e
    return path
