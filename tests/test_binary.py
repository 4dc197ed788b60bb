from pathlib import Path

import pytest

from packcore.collect import binary as binary_mod
from packcore.collect.binary import (
    find_binary,
    is_core,
    load_core,
    parse_binary_name,
    parse_execfn,
    resolve_binary,
    resolve_explicit_binary,
)
from packcore.core.errors import ConfigurationError, ToolUnavailableError
from packcore.core.models import BinarySource, CoreArtifact, Tool, ToolCapabilities

from .conftest import make_file

CORE_OUTPUT = (
    "/data/core.1234: ELF 64-bit LSB core file, x86-64, version 1 (SYSV), "
    "SVR4-style, from 'postgres'"
)
MODERN_OUTPUT = (
    "core.99: ELF 64-bit LSB core file, x86-64, version 1 (SYSV), SVR4-style, "
    "from 'postgres: checkpointer', real uid: 1000, effective uid: 1000, "
    "execfn: '/opt/gpdb/bin/postgres', platform: 'x86_64'"
)


def test_is_core():
    assert is_core(CORE_OUTPUT)
    assert is_core("core: ELF 64-bit MSB core file, 64-bit PowerPC")
    assert not is_core("postgres: ELF 64-bit LSB executable, x86-64")


def test_parse_binary_name():
    assert parse_binary_name(CORE_OUTPUT) == "postgres"
    assert parse_binary_name(MODERN_OUTPUT) == "postgres"
    assert parse_binary_name("core: ELF 64-bit LSB core file, from 'gpmmon: -D /data'") == "gpmmon"
    assert parse_binary_name("core: ELF 64-bit LSB core file") == ""


def test_parse_execfn():
    assert parse_execfn(MODERN_OUTPUT) == "/opt/gpdb/bin/postgres"
    assert parse_execfn(CORE_OUTPUT) is None


def test_find_binary_uses_search_path(tmp_path, monkeypatch):
    exe = make_file(tmp_path / "bin" / "postgres", "#!/bin/sh\n", executable=True)
    monkeypatch.setenv("PATH", str(exe.parent))
    assert find_binary(CORE_OUTPUT) == str(exe)


def test_find_binary_falls_back_to_execfn(tmp_path, monkeypatch):
    exe = make_file(tmp_path / "opt" / "postgres", "#!/bin/sh\n", executable=True)
    monkeypatch.setenv("PATH", str(tmp_path / "empty"))
    output = f"core: ELF 64-bit LSB core file, from 'postgres: writer', execfn: '{exe}'"
    assert find_binary(output) == str(exe)


def test_find_binary_unresolvable(tmp_path, monkeypatch):
    monkeypatch.setenv("PATH", str(tmp_path))
    with pytest.raises(ConfigurationError) as exc:
        find_binary(CORE_OUTPUT)
    assert "postgres" in str(exc.value)
    assert "--binary" in str(exc.value)


def test_resolve_explicit_binary(tmp_path):
    exe = make_file(tmp_path / "postgres", "#!/bin/sh\n", executable=True)
    assert resolve_explicit_binary(str(exe)) == str(exe)
    with pytest.raises(ConfigurationError):
        resolve_explicit_binary(str(tmp_path / "nope"))


def _file_caps():
    return ToolCapabilities(paths={Tool.FILE: "/usr/bin/file"})


def test_load_core(tmp_path, cfg, monkeypatch):
    core = make_file(tmp_path / "core.1234", "core")
    monkeypatch.setattr(binary_mod, "run_tool", lambda cmd, **kw: (0, CORE_OUTPUT + "\n", ""))
    artifact = load_core(str(core), _file_caps(), cfg)
    assert artifact.path == core
    assert artifact.path.is_absolute()
    assert artifact.file_output == CORE_OUTPUT


def test_load_core_rejects_non_core(tmp_path, cfg, monkeypatch):
    exe = make_file(tmp_path / "postgres", "elf")
    monkeypatch.setattr(
        binary_mod, "run_tool",
        lambda cmd, **kw: (0, "postgres: ELF 64-bit LSB executable", ""),
    )
    with pytest.raises(ConfigurationError, match="does not appear to be a core"):
        load_core(str(exe), _file_caps(), cfg)


def test_load_core_missing_inputs(tmp_path, cfg):
    with pytest.raises(ConfigurationError, match="No core file specified"):
        load_core("", _file_caps(), cfg)
    with pytest.raises(ConfigurationError, match="does not exist"):
        load_core(str(tmp_path / "core.missing"), _file_caps(), cfg)


def test_load_core_requires_file_tool(tmp_path, cfg):
    core = make_file(tmp_path / "core.1", "core")
    with pytest.raises(ToolUnavailableError):
        load_core(str(core), ToolCapabilities(), cfg)


def test_resolve_binary_sources(tmp_path, monkeypatch):
    exe = make_file(tmp_path / "bin" / "postgres", "#!/bin/sh\n", executable=True)
    monkeypatch.setenv("PATH", str(exe.parent))
    core = CoreArtifact(path=tmp_path / "core.1", file_output=CORE_OUTPUT)

    detected = resolve_binary(core, None)
    assert detected.source is BinarySource.DETECTED
    assert detected.path == Path(exe)

    explicit = resolve_binary(core, "postgres")
    assert explicit.source is BinarySource.EXPLICIT
    assert explicit.name == "postgres"
