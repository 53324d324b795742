"""Tests for invocation settings resolution."""
from pathlib import Path

from hcdev.config import DevConfig, build_config, resolve_dev_path, resolve_root_path


def test_dev_path_defaults_to_cwd(tmp_path):
    assert resolve_dev_path(None) == Path.cwd()


def test_dev_path_flag_wins(tmp_path):
    assert resolve_dev_path(str(tmp_path / "app")) == tmp_path / "app"


def test_root_path_flag_beats_holopath(tmp_path):
    env = {"HOLOPATH": str(tmp_path / "env")}
    assert resolve_root_path(str(tmp_path / "flag"), env) == tmp_path / "flag"


def test_root_path_from_holopath(tmp_path):
    env = {"HOLOPATH": str(tmp_path / "env")}
    assert resolve_root_path(None, env) == tmp_path / "env"


def test_root_path_default_is_in_home(tmp_path):
    assert resolve_root_path(None, {}) == tmp_path / "home" / ".holochaindev"


def test_root_path_reads_process_environment(tmp_path, monkeypatch):
    monkeypatch.setenv("HOLOPATH", str(tmp_path / "from-env"))
    assert resolve_root_path(None) == tmp_path / "from-env"


def test_build_config_probes_the_app(app_path, tmp_path):
    config = build_config(str(app_path), str(tmp_path / "root"))
    assert config.name == "myapp"
    assert config.app_initialized is True
    assert config.chain_path == tmp_path / "root" / "myapp"


def test_build_config_plain_directory(tmp_path):
    config = build_config(None, None)
    assert config.dev_path == tmp_path
    assert config.app_initialized is False


def test_with_dev_path_renames():
    config = DevConfig(dev_path=Path("/work"), root_path=Path("/root"), name="work", app_initialized=False)
    moved = config.with_dev_path(Path("/work/blog"))
    assert moved.name == "blog"
    assert moved.root_path == Path("/root")
    assert config.name == "work"
