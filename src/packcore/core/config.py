"""
core.config — Centralised configuration management.

Loads settings from environment variables and .env files.
Every other module accesses configuration through ``Config``.
"""

from __future__ import annotations

import os
from pathlib import Path
from typing import List

from dotenv import load_dotenv
from pydantic import BaseModel, Field

_env_loaded = False


def _load_dotenv() -> None:
    """Load .env from the project root and other standard paths.

    Search order:
        1. ``<project-root>/.env``  (two levels above ``src/packcore``)
        2. ``$CWD/.env``
        3. ``~/.env``

    Existing environment variables always win over file values.
    """
    global _env_loaded
    if _env_loaded:
        return

    _pkg_root = Path(__file__).resolve().parent.parent          # src/packcore
    _project_root = _pkg_root.parent.parent

    search = [
        _project_root / ".env",
        Path.cwd() / ".env",
        Path.home() / ".env",
    ]
    for p in search:
        if p.exists():
            load_dotenv(p, override=False)
    _env_loaded = True


def _env_flag(name: str) -> bool:
    return os.environ.get(name, "").lower() in ("1", "true", "yes")


class Config(BaseModel):
    """
    Runtime configuration for a collection run.

    Create via ``load_config()`` which pre-loads the env file.
    """

    # ── Output ───────────────────────────────────────────────────────
    work_dir: Path = Field(default_factory=Path.cwd, description="Where staging and the archive are created")
    staging_prefix: str = "packcore-"

    # ── External tools ───────────────────────────────────────────────
    file_cmd: str = "file"
    ldd_cmd: str = "ldd"
    gdb_cmd: str = "gdb"
    tar_cmd: str = "tar"
    lsb_release_cmd: str = "lsb_release"
    uname_cmd: str = "uname"
    tool_timeout: int = Field(default=300, gt=0, description="Seconds before any external tool is abandoned")

    # ── Library resolution ───────────────────────────────────────────
    static_libraries: List[str] = Field(
        default_factory=lambda: [
            "/lib64/libgcc_s.so.1",
            "/lib64/libnss_files.so.2",
            "/lib/libgcc_s.so.1",
            "/lib/libnss_files.so.2",
        ],
        description="Runtime-loaded shims that ldd does not report",
    )

    # ── Platform snapshot ────────────────────────────────────────────
    release_glob: str = "/etc/*release"
    appliance_version_file: str = "/etc/gpdb-appliance-version"

    # ── Launcher script ──────────────────────────────────────────────
    script_debugger: str = "/usr/bin/gdb"

    # ── Preflight ────────────────────────────────────────────────────
    install_root_var: str = "GPHOME"

    # ── Debug ────────────────────────────────────────────────────────
    debug: bool = False


def load_config(**overrides: object) -> Config:
    """
    Load ``Config`` from environment, applying optional overrides.

    Call this once at startup; pass the returned object to subsystems.
    """
    _load_dotenv()
    defaults: dict = {
        "debug": _env_flag("PACKCORE_DEBUG"),
    }
    timeout = os.environ.get("PACKCORE_TOOL_TIMEOUT")
    if timeout:
        defaults["tool_timeout"] = int(timeout)
    work_dir = os.environ.get("PACKCORE_WORK_DIR")
    if work_dir:
        defaults["work_dir"] = Path(work_dir)
    root_var = os.environ.get("PACKCORE_INSTALL_ROOT_VAR")
    if root_var:
        defaults["install_root_var"] = root_var
    defaults.update(overrides)
    return Config(**defaults)  # type: ignore[arg-type]
