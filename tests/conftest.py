import os
import shutil
from pathlib import Path

import pytest

from packcore.core.config import load_config
from packcore.core.models import Tool, ToolCapabilities


def make_file(path: Path, content: str = "data", executable: bool = False) -> Path:
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(content)
    if executable:
        os.chmod(path, 0o755)
    return path


@pytest.fixture
def cfg(tmp_path):
    out = tmp_path / "out"
    out.mkdir()
    return load_config(
        work_dir=out,
        static_libraries=[],
        release_glob=str(tmp_path / "etc" / "*release"),
        appliance_version_file=str(tmp_path / "etc" / "appliance-version"),
        tool_timeout=5,
    )


@pytest.fixture
def ldd_caps():
    """ldd present, gdb absent; tar from the host when it has one."""
    return ToolCapabilities(paths={
        Tool.FILE: "/usr/bin/file",
        Tool.LDD: "/usr/bin/ldd",
        Tool.GDB: None,
        Tool.TAR: shutil.which("tar"),
        Tool.LSB_RELEASE: None,
        Tool.UNAME: None,
    })


@pytest.fixture
def staging(tmp_path):
    d = tmp_path / "packcore-core.1"
    d.mkdir()
    return d
