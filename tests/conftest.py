"""
Pytest configuration and shared fixtures for hcdev tests.
"""
import json
import logging
from pathlib import Path

import pytest

from hcdev.config import DevConfig
from hcdev.holo.agent import Agent
from hcdev.holo.service import ServiceConfig, Service, init_service

APP_NAME = "myapp"
IDENTITY = "test@example.com"

NOTES_DNA = {
    "version": 1,
    "uuid": "6d4cbf18-3ad5-4c8e-9a5f-2b1f5f4e7a10",
    "name": APP_NAME,
    "properties": {"description": "a notes app", "language": "en"},
    "zomes": [
        {
            "name": "notes",
            "description": "notes zome",
            "entries": [{"name": "note"}],
            "functions": [
                {"name": "add_note", "calling_type": "json", "exposure": "public"},
                {"name": "get_note", "calling_type": "json", "exposure": "public"},
                {"name": "hello", "calling_type": "string", "exposure": "public"},
                {"name": "whoami", "calling_type": "json", "exposure": "public"},
                {"name": "language", "calling_type": "json", "exposure": "public"},
                {"name": "info", "calling_type": "json", "exposure": "public"},
                {"name": "add_post", "calling_type": "json", "exposure": "public"},
                {"name": "fail", "calling_type": "json", "exposure": "public"},
                {"name": "secret", "calling_type": "json", "exposure": "zome"},
            ],
        }
    ],
}

NOTES_CODE = '''
def add_note(ctx, payload):
    return ctx.commit("note", payload)


def get_note(ctx, payload):
    return ctx.get(payload)


def hello(ctx, payload):
    return "hello from " + ctx.app_name


def whoami(ctx, payload):
    return ctx.app_agent_id


def language(ctx, payload):
    return ctx.get_property("language")


def info(ctx, payload):
    ctx.debug("info requested")
    return {"dna": ctx.app_dna_hash, "key": ctx.app_key_hash}


def add_post(ctx, payload):
    return ctx.commit("post", payload)


def fail(ctx, payload):
    raise ValueError("always fails")


def secret(ctx, payload):
    return "hidden"
'''

NOTES_TESTS = {
    "tests": [
        {"convey": "hello names the app", "zome": "notes", "fn_name": "hello", "input": "", "output": "hello from myapp"},
        {"convey": "add a note", "zome": "notes", "fn_name": "add_note", "input": {"text": "hi"}, "regexp": "^Qm"},
        {"convey": "agent is the dev agent", "zome": "notes", "fn_name": "whoami", "input": None, "output": IDENTITY},
        {"convey": "errors are expected", "zome": "notes", "fn_name": "fail", "input": None, "err": "always fails"},
    ]
}

SCENARIO_ROLE = [
    {"convey": "hello", "zome": "notes", "fn_name": "hello", "input": "", "output": "hello from myapp"},
]


def write_json(path: Path, data) -> Path:
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(json.dumps(data, indent=2))
    return path


def write_notes_app(app_path: Path) -> Path:
    """Write a complete app (dna, zome code, tests, a scenario and a ui) into app_path."""
    write_json(app_path / "dna" / "dna.json", dict(NOTES_DNA, name=app_path.name))
    (app_path / "dna" / "notes").mkdir(parents=True)
    (app_path / "dna" / "notes" / "notes.py").write_text(NOTES_CODE)
    write_json(app_path / "test" / "notes.json", NOTES_TESTS)
    write_json(app_path / "test" / "chat" / "_config.json", {"duration": 0})
    write_json(app_path / "test" / "chat" / "alice.json", SCENARIO_ROLE)
    write_json(app_path / "test" / "chat" / "bob.json", SCENARIO_ROLE)
    (app_path / "ui").mkdir(parents=True)
    (app_path / "ui" / "index.html").write_text("<h1>notes</h1>")
    (app_path / ".hc").mkdir()
    return app_path


def build_chain(root_path: Path, app_path: Path, name: str, agent: Agent):
    """Clone app_path into root_path/name as agent's chain and load it."""
    service = Service(root_path, ServiceConfig())
    service.clone(app_path, root_path / name, agent, new_chain=False)
    return service.load(name)


# =============================================================================
# Fixtures
# =============================================================================


@pytest.fixture(autouse=True)
def isolated_env(tmp_path, monkeypatch):
    """Keep every test away from the real home directory and environment."""
    monkeypatch.setenv("HOME", str(tmp_path / "home"))
    monkeypatch.delenv("HOLOPATH", raising=False)
    monkeypatch.delenv("DEBUG", raising=False)
    monkeypatch.chdir(tmp_path)
    yield
    logging.getLogger("hcdev").handlers.clear()


@pytest.fixture
def root_path(tmp_path):
    """A service root path that does not exist yet."""
    return tmp_path / "root"


@pytest.fixture
def service(root_path):
    """An initialized service root."""
    return init_service(root_path, IDENTITY)


@pytest.fixture
def app_path(tmp_path):
    """A complete, initialized dev app named myapp."""
    return write_notes_app(tmp_path / "dev" / APP_NAME)


@pytest.fixture
def dev_config(app_path, root_path):
    """Invocation settings for running hcdev inside the sample app."""
    return DevConfig(dev_path=app_path, root_path=root_path, name=APP_NAME, app_initialized=True)


@pytest.fixture
def agent():
    return Agent.generate(IDENTITY)


@pytest.fixture
def chain(tmp_path, app_path, agent):
    """A generated, active chain of the sample app."""
    chain = build_chain(tmp_path / "chains", app_path, APP_NAME, agent)
    chain.gen_chain()
    chain.activate()
    yield chain
    chain.close()


@pytest.fixture
def lines():
    """An output sink collecting lines."""
    return []


@pytest.fixture
def notes_app():
    """Factory writing the sample app into a given directory."""
    return write_notes_app


@pytest.fixture
def chain_factory():
    """Factory cloning an app into a root and loading it as a chain."""
    return build_chain
