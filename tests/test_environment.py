import os

import pytest

from packcore.infra.environment import debugger_environment
from packcore.infra.preflight import check_install_root


def test_variables_cleared_inside_and_restored_after(monkeypatch):
    monkeypatch.setenv("LD_LIBRARY_PATH", "/opt/gpdb/lib")
    monkeypatch.setenv("PYTHONPATH", "/opt/gpdb/lib/python")
    monkeypatch.delenv("PYTHONHOME", raising=False)
    monkeypatch.setenv("PATH", "/opt/gpdb/bin")

    with debugger_environment() as saved:
        assert "LD_LIBRARY_PATH" not in os.environ
        assert "PYTHONPATH" not in os.environ
        assert os.environ["PATH"] == "/usr/bin:/opt/gpdb/bin"
        assert saved["LD_LIBRARY_PATH"] == "/opt/gpdb/lib"

    assert os.environ["LD_LIBRARY_PATH"] == "/opt/gpdb/lib"
    assert os.environ["PYTHONPATH"] == "/opt/gpdb/lib/python"
    assert "PYTHONHOME" not in os.environ
    assert os.environ["PATH"] == "/opt/gpdb/bin"


def test_restored_when_block_raises(monkeypatch):
    monkeypatch.setenv("PYTHONHOME", "/opt/python")
    monkeypatch.setenv("PATH", "/bin")

    with pytest.raises(RuntimeError):
        with debugger_environment():
            os.environ["PYTHONHOME"] = "/somewhere/else"
            raise RuntimeError("boom")

    assert os.environ["PYTHONHOME"] == "/opt/python"
    assert os.environ["PATH"] == "/bin"


def test_check_install_root(tmp_path, cfg, monkeypatch):
    monkeypatch.delenv("GPHOME", raising=False)
    assert "not set" in check_install_root(cfg)

    monkeypatch.setenv("GPHOME", str(tmp_path / "missing"))
    assert "not a directory" in check_install_root(cfg)

    monkeypatch.setenv("GPHOME", str(tmp_path))
    assert check_install_root(cfg) is None
