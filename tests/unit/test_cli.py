"""Tests for the command router."""
import logging
import os

import pytest

from hcdev import cli
from hcdev import scripts
from hcdev.scripts import app_init
from hcdev.serve import serve_chain
from hcdev.telemetry import configure_logging


@pytest.fixture
def hcdev(root_path):
    """Run hcdev with the test service root, collecting Error lines."""
    errors = []

    def run(*argv, path=None):
        base = ["--execpath", str(root_path)]
        if path is not None:
            base += ["--path", str(path)]
        status = cli.main(base + list(argv), output_sink=errors.append)
        return status, errors

    return run


@pytest.fixture
def no_blocking_server(monkeypatch):
    """Serve without blocking or starting threads. Returns the started servers."""
    started = []

    class FakeServer:
        def __init__(self, chain, port):
            self.chain, self.port = chain, port

        def start(self):
            started.append(self)
            self.chain.close()

    def serve(config, service, args):
        serve_chain(config, service, args, server_factory=FakeServer, spawn=lambda target, name: None)

    monkeypatch.setattr(cli, "serve_chain", serve)
    return started


def test_no_command_prints_help(capsys, root_path):
    assert cli.main([]) == 0
    assert "usage: hcdev" in capsys.readouterr().out
    assert not root_path.exists()


def test_version(capsys):
    with pytest.raises(SystemExit) as exc:
        cli.main(["--version"])
    assert exc.value.code == 0
    assert "holochain 0.0.1" in capsys.readouterr().out


def test_bad_flags_exit_with_argparse_status():
    with pytest.raises(SystemExit) as exc:
        cli.main(["--bogus", "test"])
    assert exc.value.code == 2


def test_first_run_bootstraps_the_service_root(hcdev, app_path, root_path, capsys):
    status, errors = hcdev("test", path=app_path)
    assert (status, errors) == (0, [])
    out = capsys.readouterr().out.splitlines()
    assert out[0] == "Holochain dev service initialized:"
    assert out[1] == f"    {root_path} directory created"
    assert out[5] == f"Copying chain to: {root_path}"


def test_second_run_is_quiet(hcdev, app_path, capsys):
    hcdev("test", path=app_path)
    capsys.readouterr()
    hcdev("t", "notes", path=app_path)
    assert "initialized" not in capsys.readouterr().out


def test_failures_become_one_error_line(hcdev, app_path):
    (app_path / "test" / "notes.json").write_text(
        '[{"zome": "notes", "fn_name": "hello", "input": "", "output": "bye"}]'
    )
    status, errors = hcdev("test", path=app_path)
    assert status == 1
    assert len(errors) == 1
    assert errors[0].startswith("Error: Test: notes.json:0")
    assert "Expected: bye" in errors[0]


def test_test_argument_count(hcdev, app_path):
    status, errors = hcdev("test", "a", "b", "c", path=app_path)
    assert status == 1
    assert errors == ["Error: test: expected 0 args (run all stand-alone tests), "
                      "1 arg (a single stand-alone test) or 2 args (scenario and role)"]


def test_scenario_role_through_the_alias(hcdev, app_path):
    assert hcdev("t", "chat", "bob", path=app_path) == (0, [])


def test_undecodable_test_file_is_reported(hcdev, app_path):
    (app_path / "test" / "bad.json").write_bytes(b'{"tests": "\xff\xfe"}')
    status, errors = hcdev("test", path=app_path)
    assert status == 1
    assert len(errors) == 1
    assert errors[0].startswith("Error: unable to read test file bad.json")


def test_undecodable_dna_is_reported(hcdev, app_path):
    (app_path / "dna" / "dna.json").write_bytes(b'{"name": "\xff"}')
    status, errors = hcdev("test", path=app_path)
    assert status == 1
    assert errors[0].startswith("Error: staging myapp failed: unable to read dna.json")


def test_bad_root_is_a_bootstrap_error(tmp_path, app_path):
    blocker = tmp_path / "file-root"
    blocker.write_text("not a directory")
    errors = []
    status = cli.main(["--execpath", str(blocker), "--path", str(app_path), "test"], output_sink=errors.append)
    assert status == 1
    assert errors[0].startswith("Error: unable to set up service root")


def test_root_from_holopath(monkeypatch, tmp_path, app_path):
    monkeypatch.setenv("HOLOPATH", str(tmp_path / "env-root"))
    assert cli.main(["--path", str(app_path), "test", "notes"]) == 0
    assert (tmp_path / "env-root" / "system.toml").is_file()
    assert (tmp_path / "env-root" / "myapp" / "dna" / "dna.json").is_file()


def test_debug_flag(monkeypatch, hcdev, app_path):
    monkeypatch.setenv("DEBUG", "0")
    hcdev("--debug", "test", "notes", path=app_path)
    assert os.environ["DEBUG"] == "1"
    assert logging.getLogger("hcdev").level == logging.DEBUG

    monkeypatch.setenv("DEBUG", "0")
    configure_logging()
    assert logging.getLogger("hcdev").level == logging.WARNING


class TestInit:
    @pytest.fixture(autouse=True)
    def in_process_scripts(self, monkeypatch):
        real_init_app = cli.init_app

        def run_script(script, *args):
            assert script == scripts.APP_INIT
            return app_init.main(list(args))

        monkeypatch.setattr(
            cli, "init_app",
            lambda config, service, names, strategy: real_init_app(config, service, names, strategy, run_script=run_script),
        )

    def test_init_creates_the_app(self, hcdev, tmp_path, capsys):
        status, errors = hcdev("init", "blog", path=tmp_path)
        assert (status, errors) == (0, [])
        assert (tmp_path / "blog" / ".hc").is_dir()
        assert "initializing empty application template" in capsys.readouterr().out

    def test_fresh_app_tests_pass(self, hcdev, tmp_path):
        assert hcdev("init", "demo", path=tmp_path) == (0, [])
        assert hcdev("test", path=tmp_path / "demo") == (0, [])

    def test_init_inside_an_app_is_refused(self, hcdev, app_path):
        status, errors = hcdev("i", "--clone", "x", "--scaffold", "y", "blog", path=app_path)
        assert status == 1
        assert errors == ["Error: current directory is an initialized app, apps shouldn't be nested"]

    def test_conflicting_strategies(self, hcdev, tmp_path):
        status, errors = hcdev("init", "--interactive", "--clone", "src", "blog", path=tmp_path)
        assert status == 1
        assert errors == ["Error: options are mutually exclusive, please choose just one."]

    def test_missing_clone_source(self, hcdev, tmp_path):
        status, errors = hcdev("init", "--clone", str(tmp_path / "nowhere"), "blog", path=tmp_path)
        assert status == 1
        assert "nowhere" in errors[0]


class TestScenario:
    def test_requires_an_initialized_app(self, hcdev, tmp_path):
        assert hcdev("scenario", "chat", path=tmp_path) == (1, ["Error: please initialize this app with 'hcdev init'"])

    def test_requires_a_scenario_name(self, hcdev, app_path):
        assert hcdev("s", path=app_path) == (1, ["Error: missing scenario name argument"])

    def test_failing_runner(self, hcdev, app_path, monkeypatch):
        real = cli.run_scenario_command
        monkeypatch.setattr(cli, "run_scenario_command", lambda config, args: real(config, args, run_script=lambda *a: 2))
        assert hcdev("scenario", "chat", path=app_path) == (1, ["Error: test_scenario exited with status 2"])


class TestWeb:
    def test_default_port(self, hcdev, app_path, no_blocking_server, capsys):
        assert hcdev("web", path=app_path) == (0, [])
        assert no_blocking_server[0].port == 4141
        assert "on port:4141" in capsys.readouterr().out

    @pytest.mark.parametrize("command", ["web", "serve", "w"])
    def test_port_argument(self, hcdev, app_path, no_blocking_server, capsys, command):
        assert hcdev(command, "9090", path=app_path) == (0, [])
        assert "on port:9090" in capsys.readouterr().out

    def test_port_from_service_config(self, hcdev, app_path, root_path, no_blocking_server, capsys):
        hcdev("test", "notes", path=app_path)
        (root_path / "system.toml").write_text("default_port = 5151\n")
        assert hcdev("web", path=app_path) == (0, [])
        assert no_blocking_server[0].port == 5151
        assert "on port:5151" in capsys.readouterr().out

    def test_bad_port(self, hcdev, app_path, no_blocking_server):
        assert hcdev("web", "99999", path=app_path) == (1, ["Error: invalid port: 99999"])
        assert no_blocking_server == []
