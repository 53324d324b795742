"""
Configuration: the resolved settings of one hcdev invocation.

Resolution order:
    dev path:  --path flag, else the current working directory
    root path: --execpath flag, else $HOLOPATH, else ~/.holochaindev
"""

from __future__ import annotations

import os
from dataclasses import dataclass, replace
from pathlib import Path
from typing import Mapping, Optional

from .holo.service import DEFAULT_DIRECTORY_NAME, is_app_dir

DEFAULT_PORT = 4141
DEFAULT_AGENT_IDENTITY = "test@example.com"
HOLOPATH_ENV = "HOLOPATH"
GOSSIP_INTERVAL = 2.0


@dataclass(frozen=True)
class DevConfig:
    """Settings resolved once before any command runs."""

    dev_path: Path
    root_path: Path
    name: str
    app_initialized: bool

    def with_dev_path(self, dev_path: Path) -> "DevConfig":
        """Copy with a new dev path and the name derived from it."""
        return replace(self, dev_path=dev_path, name=dev_path.name)

    @property
    def chain_path(self) -> Path:
        """Where the runtime copy of the app is staged."""
        return self.root_path / self.name


def resolve_dev_path(explicit: Optional[str]) -> Path:
    """
    Resolve the app source directory.

    1. Explicit --path flag
    2. Current working directory
    """
    if explicit:
        return Path(explicit).expanduser().absolute()
    return Path.cwd()


def resolve_root_path(explicit: Optional[str], env: Optional[Mapping[str, str]] = None) -> Path:
    """
    Resolve the service root directory.

    1. Explicit --execpath flag
    2. Environment variable HOLOPATH
    3. Default: ~/.holochaindev
    """
    if explicit:
        return Path(explicit).expanduser().absolute()

    env_root = (env if env is not None else os.environ).get(HOLOPATH_ENV)
    if env_root:
        return Path(env_root).expanduser().absolute()

    return Path.home() / f"{DEFAULT_DIRECTORY_NAME}dev"


def build_config(
    dev_path_flag: Optional[str],
    root_path_flag: Optional[str],
    env: Optional[Mapping[str, str]] = None,
) -> DevConfig:
    """Resolve both paths and probe the dev path for an initialized app."""
    dev_path = resolve_dev_path(dev_path_flag)
    return DevConfig(
        dev_path=dev_path,
        root_path=resolve_root_path(root_path_flag, env),
        name=dev_path.name,
        app_initialized=is_app_dir(dev_path),
    )
