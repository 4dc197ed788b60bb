import os
import shutil
import tarfile

import pytest

from packcore.collect import binary as binary_mod
from packcore.collect import resolver
from packcore.collect.pipeline import collect_core, pack_core_file
from packcore.core.errors import CollectionCancelled, ResolutionError
from packcore.core.models import (
    BinarySource,
    CollectOptions,
    CoreArtifact,
    ExecutableRef,
    PipelineState,
)
from packcore.core.reporting import MANIFEST_NAME

from .conftest import make_file

needs_tar = pytest.mark.skipif(shutil.which("tar") is None, reason="tar not installed")


@pytest.fixture
def crash(tmp_path):
    """A fake core, binary and two resolvable libraries on disk."""
    core = make_file(tmp_path / "cores" / "core.1234", "CORE")
    exe = make_file(tmp_path / "gpdb" / "bin" / "postgres", "#!/bin/sh\n", executable=True)
    libs = [
        make_file(tmp_path / "sysroot" / "usr" / "lib64" / "libpq.so.5", "pq"),
        make_file(tmp_path / "sysroot" / "lib64" / "libc.so.6", "c"),
    ]
    return core, exe, [str(lib) for lib in libs]


def _ldd_text(libs, missing=()):
    lines = [f"\t{lib.rsplit('/', 1)[1]} => {lib} (0x00007f0000000000)" for lib in libs]
    lines += [f"\t{name} => not found" for name in missing]
    return "\n".join(lines) + "\n"


def _artifacts(crash):
    core, exe, _ = crash
    return (
        CoreArtifact(path=core, file_output="core.1234: ELF 64-bit LSB core file, from 'postgres'"),
        ExecutableRef(path=exe, source=BinarySource.EXPLICIT),
    )


def _members(archive):
    with tarfile.open(archive) as tar:
        return set(tar.getnames())


@needs_tar
def test_full_run_reaches_archived(crash, cfg, ldd_caps, monkeypatch):
    _, _, libs = crash
    monkeypatch.setattr(resolver, "run_tool", lambda cmd, **kw: (0, _ldd_text(libs), ""))
    core, exe = _artifacts(crash)

    result = pack_core_file(core, exe, ldd_caps, cfg, CollectOptions(core=str(core.path)))

    assert result.archive == cfg.work_dir / "packcore-core.1234.tar.gz"
    assert result.archive.exists()
    assert result.state is PipelineState.CLEANED_UP
    assert not result.staging.exists()

    members = _members(result.archive)
    for name in ("core.1234", "postgres", "ldd_output", "runGDB.sh", MANIFEST_NAME):
        assert f"packcore-core.1234/{name}" in members
    for lib in libs:
        assert f"packcore-core.1234/{lib.lstrip('/')}" in members


def test_missing_library_aborts_before_copying(crash, cfg, ldd_caps, monkeypatch):
    _, _, libs = crash
    monkeypatch.setattr(
        resolver, "run_tool",
        lambda cmd, **kw: (0, _ldd_text(libs, missing=["libgone.so.2"]), ""),
    )
    core, exe = _artifacts(crash)

    with pytest.raises(ResolutionError) as exc:
        pack_core_file(core, exe, ldd_caps, cfg, CollectOptions(core=str(core.path)))

    assert exc.value.missing == ["libgone.so.2"]
    assert not (cfg.work_dir / "packcore-core.1234").exists()
    assert not (cfg.work_dir / "packcore-core.1234.tar.gz").exists()


@needs_tar
def test_tolerated_missing_library_archives_resolvable_subset(crash, cfg, ldd_caps, monkeypatch):
    _, _, libs = crash
    monkeypatch.setattr(
        resolver, "run_tool",
        lambda cmd, **kw: (0, _ldd_text(libs, missing=["libgone.so.2", "libalso.so.1"]), ""),
    )
    core, exe = _artifacts(crash)
    options = CollectOptions(core=str(core.path), ignore_missing=True)

    result = pack_core_file(core, exe, ldd_caps, cfg, options)

    assert result.resolution.missing == ["libgone.so.2", "libalso.so.1"]
    members = _members(result.archive)
    libraries = {m for m in members if ".so" in m.rsplit("/", 1)[-1]}
    assert libraries == {f"packcore-core.1234/{lib.lstrip('/')}" for lib in libs}


@needs_tar
def test_keep_staging(crash, cfg, ldd_caps, monkeypatch):
    _, _, libs = crash
    monkeypatch.setattr(resolver, "run_tool", lambda cmd, **kw: (0, _ldd_text(libs), ""))
    core, exe = _artifacts(crash)

    result = pack_core_file(core, exe, ldd_caps, cfg, CollectOptions(core=str(core.path), keep_staging=True))

    assert result.staging_kept
    assert result.state is PipelineState.ARCHIVED
    assert (result.staging / "runGDB.sh").exists()
    assert (result.staging / libs[0].lstrip("/")).exists()


def test_declined_rerun_changes_nothing(crash, cfg, ldd_caps, monkeypatch):
    calls = []
    monkeypatch.setattr(resolver, "run_tool", lambda cmd, **kw: calls.append(cmd) or (0, "", ""))
    staging = cfg.work_dir / "packcore-core.1234"
    marker = make_file(staging / "previous_run", "keep me")
    core, exe = _artifacts(crash)
    questions = []

    def decline(question, default):
        questions.append((question, default))
        return False

    with pytest.raises(CollectionCancelled) as exc:
        pack_core_file(core, exe, ldd_caps, cfg, CollectOptions(core=str(core.path)), confirm=decline)

    assert exc.value.exit_code == 0
    assert questions and questions[0][1] is False
    assert marker.read_text() == "keep me"
    assert sorted(p.name for p in staging.iterdir()) == ["previous_run"]
    assert not (cfg.work_dir / "packcore-core.1234.tar.gz").exists()
    assert calls == []


@needs_tar
def test_accepted_rerun_replaces_staging(crash, cfg, ldd_caps, monkeypatch):
    _, _, libs = crash
    monkeypatch.setattr(resolver, "run_tool", lambda cmd, **kw: (0, _ldd_text(libs), ""))
    make_file(cfg.work_dir / "packcore-core.1234" / "stale", "old")
    core, exe = _artifacts(crash)

    result = pack_core_file(
        core, exe, ldd_caps, cfg, CollectOptions(core=str(core.path)), confirm=lambda q, d: True,
    )
    assert "packcore-core.1234/stale" not in _members(result.archive)


@needs_tar
def test_collect_core_detects_binary(crash, cfg, ldd_caps, monkeypatch):
    core_path, exe, libs = crash
    monkeypatch.setenv("GPHOME", str(exe.parent.parent))
    monkeypatch.setenv("PATH", f"{exe.parent}{os.pathsep}{os.environ['PATH']}")
    monkeypatch.setattr(
        binary_mod, "run_tool",
        lambda cmd, **kw: (0, f"{core_path}: ELF 64-bit LSB core file, x86-64, from 'postgres: writer'\n", ""),
    )
    monkeypatch.setattr(resolver, "run_tool", lambda cmd, **kw: (0, _ldd_text(libs), ""))

    result = collect_core(CollectOptions(core=str(core_path)), cfg, caps=ldd_caps)

    assert result.binary.path == exe
    assert result.binary.source is BinarySource.DETECTED
    assert result.archive.exists()


def test_collect_core_preflight_declined(crash, cfg, ldd_caps, monkeypatch):
    core_path, _, _ = crash
    monkeypatch.delenv("GPHOME", raising=False)

    with pytest.raises(CollectionCancelled, match="user request") as exc:
        collect_core(CollectOptions(core=str(core_path)), cfg, confirm=lambda q, d: False, caps=ldd_caps)
    assert exc.value.exit_code == 1
