"""
core — Shared models, configuration, logging, and error types.

This package is the foundation layer with zero intra-project dependencies
(i.e., nothing in ``core`` imports from ``infra``, ``collect``, etc.).
"""

from .config import Config, load_config
from .errors import (
    ArchiveError,
    ArtifactIOError,
    CollectionCancelled,
    ConfigurationError,
    IntegrityError,
    PackcoreError,
    ResolutionError,
    ToolUnavailableError,
)
from .models import (
    BinarySource,
    CollectOptions,
    CopyMode,
    CoreArtifact,
    ExecutableRef,
    LibraryResolution,
    PackcoreResult,
    PipelineState,
    ResolverKind,
    Tool,
    ToolCapabilities,
)
from .reporting import MANIFEST_NAME, save_manifest

__all__ = [
    "Config",
    "load_config",
    "PackcoreError",
    "ConfigurationError",
    "ToolUnavailableError",
    "ResolutionError",
    "ArtifactIOError",
    "IntegrityError",
    "ArchiveError",
    "CollectionCancelled",
    "BinarySource",
    "CollectOptions",
    "CopyMode",
    "CoreArtifact",
    "ExecutableRef",
    "LibraryResolution",
    "PackcoreResult",
    "PipelineState",
    "ResolverKind",
    "Tool",
    "ToolCapabilities",
    "MANIFEST_NAME",
    "save_manifest",
]
