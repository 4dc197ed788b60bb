"""
core.models — Data models shared by the collection pipeline.

Every stage speaks through these Pydantic models so that a run can be
serialized into the bundle manifest as-is.
"""

from __future__ import annotations

from enum import Enum
from pathlib import Path
from typing import Dict, List, Optional

from pydantic import BaseModel, Field

from .errors import ToolUnavailableError


# ── Tools ─────────────────────────────────────────────────────────────


class Tool(str, Enum):
    """External programs packcore may call."""

    FILE = "file"
    LDD = "ldd"
    GDB = "gdb"
    TAR = "tar"
    LSB_RELEASE = "lsb_release"
    UNAME = "uname"


class ToolCapabilities(BaseModel):
    """Absolute paths of the tools found on ``$PATH`` (``None`` if absent)."""

    paths: Dict[Tool, Optional[str]] = Field(default_factory=dict)

    def has(self, tool: Tool) -> bool:
        return bool(self.paths.get(tool))

    def path(self, tool: Tool) -> Optional[str]:
        return self.paths.get(tool)

    def require(self, tool: Tool) -> str:
        """Return the tool path or raise ``ToolUnavailableError``."""
        found = self.paths.get(tool)
        if not found:
            raise ToolUnavailableError(
                tool.value,
                hint=f"Install '{tool.value}' or add it to PATH and retry",
            )
        return found


# ── Inputs ────────────────────────────────────────────────────────────


class CoreArtifact(BaseModel):
    """The dump being packaged. Never modified."""

    path: Path
    file_output: str = ""

    @property
    def name(self) -> str:
        return self.path.name


class BinarySource(str, Enum):
    EXPLICIT = "explicit"
    DETECTED = "detected"


class ExecutableRef(BaseModel):
    """The program that produced the core."""

    path: Path
    source: BinarySource = BinarySource.DETECTED

    @property
    def name(self) -> str:
        return self.path.name


# ── Resolution ────────────────────────────────────────────────────────


class ResolverKind(str, Enum):
    """Which strategy produced the library list."""

    GDB = "gdb"
    LDD = "ldd"

    @property
    def output_filename(self) -> str:
        """Name of the raw tool output file stored in the bundle."""
        return f"{self.value}_output"


class LibraryResolution(BaseModel):
    """Shared libraries needed to debug a binary."""

    kind: ResolverKind
    libraries: List[str] = Field(default_factory=list)
    missing: List[str] = Field(default_factory=list)
    raw_output: str = ""

    def unique_libraries(self) -> List[str]:
        """Libraries in first-seen order with duplicates dropped."""
        seen: set[str] = set()
        ordered = []
        for lib in self.libraries:
            if lib not in seen:
                seen.add(lib)
                ordered.append(lib)
        return ordered


# ── Staging ───────────────────────────────────────────────────────────


class CopyMode(str, Enum):
    SHALLOW = "shallow"   # straight into the staging root
    DEEP = "deep"         # under the source's absolute directory


class PipelineState(str, Enum):
    """Per-run collection states, in order."""

    START = "start"
    DIRECTORY_PREPARED = "directory_prepared"
    RESOLVED = "resolved"
    PLATFORM_SNAPSHOTTED = "platform_snapshotted"
    ARTIFACTS_COPIED = "artifacts_copied"
    SCRIPT_GENERATED = "script_generated"
    VERIFIED = "verified"
    ARCHIVED = "archived"
    CLEANED_UP = "cleaned_up"


class CollectOptions(BaseModel):
    """Operator choices for one ``collect`` run."""

    core: str
    binary: Optional[str] = None
    keep_staging: bool = False
    ignore_missing: bool = False
    assume_yes: bool = False


class PackcoreResult(BaseModel):
    """Outcome of a successful run."""

    archive: Path
    staging: Path
    staging_kept: bool = False
    core: CoreArtifact
    binary: ExecutableRef
    resolution: LibraryResolution
    platform_files: List[str] = Field(default_factory=list)
    state: PipelineState = PipelineState.START
