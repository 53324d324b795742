"""Tests for agent identity and key persistence."""
import os
import stat

import pytest

from hcdev.holo.agent import AGENT_FILE_NAME, PRIV_KEY_FILE_NAME, Agent, load_agent
from hcdev.holo.errors import AgentError


def test_save_and_load_keeps_the_key(tmp_path):
    agent = Agent.generate("alice@example.com")
    agent.save(tmp_path)

    loaded = load_agent(tmp_path)
    assert loaded.identity == "alice@example.com"
    assert loaded.public_key == agent.public_key


def test_private_key_is_owner_only(tmp_path):
    Agent.generate("alice@example.com").save(tmp_path)
    mode = stat.S_IMODE(os.stat(tmp_path / PRIV_KEY_FILE_NAME).st_mode)
    assert mode == 0o600


def test_signatures_verify(tmp_path):
    agent = Agent.generate("alice@example.com")
    signature = agent.sign(b"entry")
    assert agent.verify(b"entry", signature)
    assert not agent.verify(b"other", signature)
    assert not Agent.generate("bob@example.com").verify(b"entry", signature)


def test_missing_agent_file(tmp_path):
    with pytest.raises(AgentError, match="agent file not found"):
        load_agent(tmp_path)


def test_corrupt_key(tmp_path):
    (tmp_path / AGENT_FILE_NAME).write_text("alice@example.com")
    (tmp_path / PRIV_KEY_FILE_NAME).write_text("c2hvcnQ=")
    with pytest.raises(AgentError, match="invalid private key"):
        load_agent(tmp_path)


def test_undecodable_agent_file(tmp_path):
    Agent.generate("alice@example.com").save(tmp_path)
    (tmp_path / AGENT_FILE_NAME).write_bytes(b"\xff\xfe")
    with pytest.raises(AgentError, match="invalid agent file"):
        load_agent(tmp_path)
