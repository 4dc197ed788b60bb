"""
collect.pipeline — One collection run, from core file to archive.

States, in order::

    start → directory_prepared → resolved → platform_snapshotted
          → artifacts_copied → script_generated → verified → archived
          → cleaned_up

Any stage may raise a ``PackcoreError``.  Once the staging directory
exists, every exit path removes it again unless the operator asked to
keep it.
"""

from __future__ import annotations

from pathlib import Path
from typing import Callable, List, Optional

from ..core.config import Config, load_config
from ..core.errors import ArtifactIOError, CollectionCancelled
from ..core.log import console, debug_print, warn
from ..core.models import (
    CollectOptions,
    CopyMode,
    CoreArtifact,
    ExecutableRef,
    LibraryResolution,
    PackcoreResult,
    PipelineState,
    ToolCapabilities,
)
from ..core.reporting import save_manifest
from ..infra.preflight import check_install_root
from ..infra.tools import detect_capabilities
from .archiver import create_archive, remove_staging
from .binary import load_core, resolve_binary
from .copier import copy_file, copy_files
from .integrity import verify_bundle
from .platform import write_platform_info
from .resolver import resolve_libraries
from .script import generate_gdb_script

# (question, default answer) -> answer
ConfirmFn = Callable[[str, bool], bool]


def _use_default(question: str, default: bool) -> bool:
    return default


def _assume_yes(question: str, default: bool) -> bool:
    return True


def staging_path_for(core: CoreArtifact, cfg: Config) -> Path:
    return Path(cfg.work_dir) / f"{cfg.staging_prefix}{core.name}"


class CollectionRun:
    """Drives a single core through every packaging stage."""

    def __init__(
        self,
        core: CoreArtifact,
        binary: ExecutableRef,
        caps: ToolCapabilities,
        cfg: Config,
        options: CollectOptions,
        confirm: Optional[ConfirmFn] = None,
    ) -> None:
        self.core = core
        self.binary = binary
        self.caps = caps
        self.cfg = cfg
        self.options = options
        self.confirm = confirm or _use_default
        self.staging = staging_path_for(core, cfg)
        self.state = PipelineState.START

    def _advance(self, state: PipelineState) -> None:
        debug_print("pipeline", f"{self.state.value} -> {state.value}")
        self.state = state

    # ── Stages ────────────────────────────────────────────────────────

    def prepare_directory(self) -> None:
        console.print(f"[dim]→ creating temp directory {self.staging}[/]")
        if self.staging.exists():
            question = f"Temp directory '{self.staging}' already exists... Delete it?"
            if not self.confirm(question, False):
                raise CollectionCancelled(
                    f"Keeping existing temp directory '{self.staging}', nothing collected",
                    exit_code=0,
                )
            if not remove_staging(self.staging):
                raise ArtifactIOError(f"Not able to remove directory '{self.staging}'", path=str(self.staging))
        try:
            self.staging.mkdir(mode=0o755)
        except OSError as e:
            raise ArtifactIOError(f"Not able to create directory '{self.staging}': {e}", path=str(self.staging)) from e
        self._advance(PipelineState.DIRECTORY_PREPARED)

    def resolve(self) -> LibraryResolution:
        resolution = resolve_libraries(
            self.binary.path,
            self.core.path,
            self.caps,
            self.cfg,
            tolerate_missing=self.options.ignore_missing,
        )
        output_file = self.staging / resolution.kind.output_filename
        console.print(f"[dim]→ writing {resolution.kind.value} output[/]")
        try:
            output_file.write_text(resolution.raw_output)
        except OSError as e:
            raise ArtifactIOError(
                f"Failed to write file {output_file} ({resolution.kind.value} command output): {e}",
                path=str(output_file),
            ) from e
        self._advance(PipelineState.RESOLVED)
        return resolution

    def snapshot_platform(self) -> List[str]:
        console.print("[dim]→ writing platform info[/]")
        files = write_platform_info(self.staging, self.caps, self.cfg)
        self._advance(PipelineState.PLATFORM_SNAPSHOTTED)
        return files

    def copy_artifacts(self, resolution: LibraryResolution) -> None:
        console.print("[dim]→ copying libraries[/]")
        copy_files(resolution.unique_libraries(), self.staging, CopyMode.DEEP)
        console.print(f"[dim]→ copying core {self.core.path}[/]")
        copy_file(str(self.core.path), self.staging)
        console.print(f"[dim]→ copying binary {self.binary.path}[/]")
        copy_file(str(self.binary.path), self.staging)
        self._advance(PipelineState.ARTIFACTS_COPIED)

    def generate_script(self) -> None:
        console.print("[dim]→ generating gdb script[/]")
        generate_gdb_script(self.staging, self.binary.name, self.core.name, self.cfg)
        self._advance(PipelineState.SCRIPT_GENERATED)

    def verify(self, resolution: LibraryResolution) -> None:
        console.print("[dim]→ checking collected files[/]")
        verify_bundle(
            self.staging,
            str(self.core.path),
            str(self.binary.path),
            resolution.unique_libraries(),
        )
        self._advance(PipelineState.VERIFIED)

    def archive(self) -> Path:
        archive = create_archive(self.staging, self.caps, self.cfg)
        self._advance(PipelineState.ARCHIVED)
        return archive

    def cleanup(self) -> None:
        if self.options.keep_staging:
            console.print(f"[dim]Keeping temp directory {self.staging}[/]")
            return
        remove_staging(self.staging)
        self._advance(PipelineState.CLEANED_UP)

    # ── Driver ────────────────────────────────────────────────────────

    def run(self) -> PackcoreResult:
        self.prepare_directory()
        try:
            resolution = self.resolve()
            platform_files = self.snapshot_platform()
            self.copy_artifacts(resolution)
            self.generate_script()
            save_manifest(
                self.staging,
                core=self.core,
                binary=self.binary,
                resolution=resolution,
                platform_files=platform_files,
            )
            self.verify(resolution)
            archive = self.archive()
        finally:
            self.cleanup()

        return PackcoreResult(
            archive=archive,
            staging=self.staging,
            staging_kept=self.options.keep_staging,
            core=self.core,
            binary=self.binary,
            resolution=resolution,
            platform_files=platform_files,
            state=self.state,
        )


def pack_core_file(
    core: CoreArtifact,
    binary: ExecutableRef,
    caps: ToolCapabilities,
    cfg: Config,
    options: CollectOptions,
    confirm: Optional[ConfirmFn] = None,
) -> PackcoreResult:
    """Package an already validated core and binary."""
    return CollectionRun(core, binary, caps, cfg, options, confirm).run()


def collect_core(
    options: CollectOptions,
    cfg: Optional[Config] = None,
    confirm: Optional[ConfirmFn] = None,
    caps: Optional[ToolCapabilities] = None,
) -> PackcoreResult:
    """
    Validate the inputs and package a core file.

    1. Preflight: warn (and ask) when the installation root is not set
    2. Load the core and confirm it is a core dump
    3. Resolve the binary (explicit, or parsed from the core)
    4. Run the collection pipeline
    """
    cfg = cfg or load_config()
    if options.assume_yes:
        confirm = _assume_yes
    confirm = confirm or _use_default

    problem = check_install_root(cfg)
    if problem:
        warn(f"Detected problem with ${cfg.install_root_var} environmental variable: {problem}")
        if not confirm("Continue executing packcore?", True):
            raise CollectionCancelled("Canceling packcore due to user request")

    caps = caps or detect_capabilities(cfg)
    core = load_core(options.core, caps, cfg)
    debug_print("pipeline", f"confirmed {core.path} looks like a core file")
    binary = resolve_binary(core, options.binary)
    debug_print("pipeline", f"binary full path {binary.path}")
    return pack_core_file(core, binary, caps, cfg, options, confirm)
