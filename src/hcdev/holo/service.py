"""
Service: the local registry of chains and the default agent.

A service root directory looks like::

    <root>/
        system.toml     service defaults
        agent.txt       default agent identity
        priv.key        default agent key
        <name>/         one directory per chain

The module also knows what an app (dev) directory is: any directory with a
``.hc`` control directory in it.
"""
from __future__ import annotations

import shutil
from pathlib import Path

from pydantic import BaseModel, ValidationError

from ..telemetry import get_logger
from .agent import Agent, load_agent
from .chain import CHAIN_DNA_DIR, CHAIN_TEST_DIR, CHAIN_UI_DIR, Holochain
from .dna import load_dna, save_dna
from .errors import HoloError

try:
    import tomllib
except ImportError:
    import tomli as tomllib  # type: ignore[import-not-found]

logger = get_logger(__name__)

SYS_FILE_NAME = "system.toml"
APP_CONTROL_DIR = ".hc"
DEFAULT_DIRECTORY_NAME = ".holochain"


class ServiceConfig(BaseModel):
    """Defaults stored in system.toml."""

    default_port: int = 4141

    def to_toml(self) -> str:
        lines = []
        for key, value in self.model_dump().items():
            if isinstance(value, bool):
                lines.append(f"{key} = {'true' if value else 'false'}")
            elif isinstance(value, int):
                lines.append(f"{key} = {value}")
            else:
                lines.append(f'{key} = "{value}"')
        return "\n".join(lines) + "\n"


class Service:
    def __init__(self, root_path: Path | str, config: ServiceConfig):
        self.root_path = Path(root_path)
        self.config = config

    def chain_path(self, name: str) -> Path:
        return self.root_path / name

    def clone(
        self,
        src_path: Path | str,
        dest_path: Path | str,
        agent: Agent,
        new_chain: bool,
        save_agent: bool = True,
    ) -> Holochain:
        """
        Copy an app directory into dest_path as a chain owned by agent.

        The dna, ui and test directories are copied (missing ones are
        created empty), the DNA is rewritten as dna.json and, unless save_agent
        is false, the agent is saved next to them. Dev app copies skip the
        agent so no private key lands in a source tree. A new chain gets a
        fresh DNA uuid, so it is a different network from its source;
        otherwise the DNA, and therefore its hash, is kept.

        Raises:
            HoloError: if dest_path already exists or the source DNA is invalid
        """
        src_path = Path(src_path)
        dest_path = Path(dest_path)
        if dest_path.exists():
            raise HoloError(f"{dest_path} already exists")

        dna = load_dna(src_path / CHAIN_DNA_DIR, default_name=dest_path.name)
        if new_chain:
            dna.new_uuid()

        for sub in (CHAIN_DNA_DIR, CHAIN_UI_DIR, CHAIN_TEST_DIR):
            src_sub = src_path / sub
            if src_sub.is_dir():
                shutil.copytree(src_sub, dest_path / sub)
            else:
                (dest_path / sub).mkdir(parents=True)

        save_dna(dna, dest_path / CHAIN_DNA_DIR)
        if save_agent:
            agent.save(dest_path)
        logger.debug("cloned %s to %s (new chain: %s)", src_path, dest_path, new_chain)
        return Holochain(dest_path.name, dest_path, dna, agent)

    def load(self, name: str) -> Holochain:
        """
        Load a chain from the service root and import its zome code.

        Raises:
            HoloError: if the chain directory, its DNA or its agent is missing
        """
        path = self.chain_path(name)
        if not path.is_dir():
            raise HoloError(f"no chain named {name} in {self.root_path}")
        dna = load_dna(path / CHAIN_DNA_DIR)
        agent = load_agent(path)
        chain = Holochain(name, path, dna, agent)
        chain.prepare()
        return chain

    def gen_chain(self, name: str) -> Holochain:
        """Load a chain and write its genesis entries."""
        chain = self.load(name)
        chain.gen_chain()
        return chain


def is_initialized(root_path: Path | str) -> bool:
    return (Path(root_path) / SYS_FILE_NAME).is_file()


def init_service(root_path: Path | str, identity: str) -> Service:
    """
    Create a service root: directory, default config, default agent.

    Raises:
        HoloError: if the root is already initialized
    """
    root_path = Path(root_path)
    if is_initialized(root_path):
        raise HoloError(f"service already initialized at {root_path}")
    root_path.mkdir(parents=True, exist_ok=True)

    config = ServiceConfig()
    (root_path / SYS_FILE_NAME).write_text(config.to_toml(), encoding="utf-8")
    Agent.generate(identity).save(root_path)
    return Service(root_path, config)


def load_service(root_path: Path | str) -> Service:
    """
    Load an existing service root.

    Raises:
        HoloError: if system.toml is missing or invalid
    """
    root_path = Path(root_path)
    sys_file = root_path / SYS_FILE_NAME
    if not sys_file.is_file():
        raise HoloError(f"service not initialized at {root_path}")
    try:
        with open(sys_file, "rb") as f:
            data = tomllib.load(f)
        config = ServiceConfig.model_validate(data)
    except (tomllib.TOMLDecodeError, ValidationError) as e:
        raise HoloError(f"corrupt service config {sys_file}: {e}") from e
    return Service(root_path, config)


def is_app_dir(path: Path | str) -> bool:
    """True if path is an initialized app directory."""
    return (Path(path) / APP_CONTROL_DIR).is_dir()
