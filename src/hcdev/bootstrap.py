"""
Bootstrap: make sure the dev service root exists.

First run in a root path creates it (directory, defaults, key pair, default
agent) and says so; every later run just loads it. Exactly one of the two
happens per invocation.
"""

from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path
from typing import Callable

from . import holo
from .errors import BootstrapError


@dataclass(frozen=True)
class ServiceRoot:
    """A loaded (or just created) service root."""

    root_path: Path
    service: holo.Service
    created: bool


def ensure_service(
    root_path: Path,
    default_identity: str,
    output_sink: Callable[[str], None] = print,
) -> ServiceRoot:
    """
    Create the service root at root_path if needed, otherwise load it.

    Args:
        root_path: service root directory
        default_identity: identity of the default agent on creation
        output_sink: where the creation report goes

    Raises:
        BootstrapError: on any I/O or corrupt state; not retried
    """
    try:
        if not holo.is_initialized(root_path):
            service = holo.init_service(root_path, default_identity)
            output_sink("Holochain dev service initialized:")
            output_sink(f"    {root_path} directory created")
            output_sink(f"    defaults stored to {holo.SYS_FILE_NAME}")
            output_sink("    key-pair generated")
            output_sink(f"    default agent stored to {holo.AGENT_FILE_NAME}")
            return ServiceRoot(root_path=root_path, service=service, created=True)

        service = holo.load_service(root_path)
        return ServiceRoot(root_path=root_path, service=service, created=False)
    except (holo.HoloError, OSError) as e:
        raise BootstrapError(f"unable to set up service root {root_path}: {e}") from e
