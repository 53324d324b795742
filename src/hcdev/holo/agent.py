"""
Agent: the signing identity that authors entries in a chain.

An agent is an identity string (usually an email address) plus an Ed25519
signing key. On disk it is two files in a directory:

    agent.txt   the identity
    priv.key    base64 encoded 32 byte seed (mode 0600)

The same layout is used for the service root (the default dev agent) and
for every chain directory.
"""
from __future__ import annotations

import base64
import os
from dataclasses import dataclass
from pathlib import Path

import nacl.encoding
import nacl.exceptions
import nacl.signing

from .errors import AgentError

AGENT_FILE_NAME = "agent.txt"
PRIV_KEY_FILE_NAME = "priv.key"


@dataclass
class Agent:
    """An identity with its signing key."""

    identity: str
    signing_key: nacl.signing.SigningKey

    @classmethod
    def generate(cls, identity: str) -> "Agent":
        """Create an agent with a fresh key pair."""
        return cls(identity=identity, signing_key=nacl.signing.SigningKey.generate())

    @property
    def verify_key(self) -> nacl.signing.VerifyKey:
        return self.signing_key.verify_key

    @property
    def public_key(self) -> str:
        """Base64 encoded public key, used as the agent's key hash."""
        return self.verify_key.encode(encoder=nacl.encoding.Base64Encoder).decode("ascii")

    def sign(self, data: bytes) -> str:
        """Sign data, returning the base64 signature."""
        signed = self.signing_key.sign(data)
        return base64.b64encode(signed.signature).decode("ascii")

    def verify(self, data: bytes, signature: str) -> bool:
        """Check a signature made by this agent."""
        try:
            self.verify_key.verify(data, base64.b64decode(signature))
        except (nacl.exceptions.BadSignatureError, ValueError):
            return False
        return True

    def save(self, directory: Path | str) -> None:
        """Write agent.txt and priv.key into directory."""
        directory = Path(directory)
        directory.mkdir(parents=True, exist_ok=True)

        (directory / AGENT_FILE_NAME).write_text(self.identity, encoding="utf-8")

        key_path = directory / PRIV_KEY_FILE_NAME
        seed = base64.b64encode(bytes(self.signing_key)).decode("ascii")
        key_path.write_text(seed, encoding="utf-8")
        os.chmod(key_path, 0o600)


def load_agent(directory: Path | str) -> Agent:
    """
    Load the agent stored in directory.

    Raises:
        AgentError: if either file is missing or the key is malformed
    """
    directory = Path(directory)
    agent_path = directory / AGENT_FILE_NAME
    key_path = directory / PRIV_KEY_FILE_NAME

    if not agent_path.exists():
        raise AgentError(f"agent file not found: {agent_path}")
    if not key_path.exists():
        raise AgentError(f"private key not found: {key_path}")

    try:
        identity = agent_path.read_text(encoding="utf-8").strip()
    except UnicodeDecodeError as e:
        raise AgentError(f"invalid agent file {agent_path}: {e}") from e
    try:
        seed = base64.b64decode(key_path.read_text(encoding="utf-8").strip())
        signing_key = nacl.signing.SigningKey(seed)
    except (ValueError, TypeError, nacl.exceptions.CryptoError) as e:
        raise AgentError(f"invalid private key in {key_path}: {e}") from e

    return Agent(identity=identity, signing_key=signing_key)
