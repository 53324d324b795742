"""
holo: a local holochain runtime.

The operation surface the hcdev commands build on: service roots, agents,
chain clone/load/generate, stand-alone and scenario tests, activation,
gossip and the web server.
"""
from __future__ import annotations

from ..telemetry import configure_logging
from .agent import AGENT_FILE_NAME, Agent, load_agent
from .chain import CHAIN_DNA_DIR, CHAIN_TEST_DIR, CHAIN_UI_DIR, Holochain
from .dna import DNA, load_dna
from .errors import AgentError, ChainError, DNAError, HoloError, ZomeError
from .service import (
    APP_CONTROL_DIR,
    DEFAULT_DIRECTORY_NAME,
    SYS_FILE_NAME,
    Service,
    init_service,
    is_app_dir,
    is_initialized,
    load_service,
)
from .web import WebServer

VERSION_STR = "0.0.1"


def initialize() -> None:
    """Set up process-wide runtime state. Safe to call more than once."""
    configure_logging()


__all__ = [
    "VERSION_STR",
    "initialize",
    "Agent",
    "load_agent",
    "AGENT_FILE_NAME",
    "DNA",
    "load_dna",
    "Holochain",
    "CHAIN_DNA_DIR",
    "CHAIN_UI_DIR",
    "CHAIN_TEST_DIR",
    "Service",
    "SYS_FILE_NAME",
    "APP_CONTROL_DIR",
    "DEFAULT_DIRECTORY_NAME",
    "init_service",
    "load_service",
    "is_initialized",
    "is_app_dir",
    "WebServer",
    "HoloError",
    "AgentError",
    "ChainError",
    "DNAError",
    "ZomeError",
]
