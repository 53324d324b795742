"""
Staging: copy the dev app into the service root and load it.

Every test and serve run stages from scratch, so the instance it runs always
matches the dev sources on disk exactly. There is no incremental sync and no
rollback: if staging fails after the old copy is removed, the copy is simply
absent until the next run.

Precondition: nothing else is using ``<root>/<name>`` while staging runs.
Two invocations staging the same app into the same root race each other.
"""

from __future__ import annotations

import shutil
from typing import Callable

from . import holo
from .config import DevConfig
from .errors import StagingError


def stage(
    config: DevConfig,
    service: holo.Service,
    output_sink: Callable[[str], None] = print,
) -> holo.Holochain:
    """
    Replace the runtime copy of the app and load it.

    Steps, in order:
        1. remove <root>/<name> (fine if absent)
        2. load the dev agent from <root>
        3. clone the dev app into <root>/<name> as a redeploy
        4. load the copy by name

    Raises:
        StagingError: wrapping whatever failed
    """
    dest = config.chain_path
    output_sink(f"Copying chain to: {config.root_path}")
    try:
        if dest.is_dir() and not dest.is_symlink():
            shutil.rmtree(dest)
        elif dest.exists() or dest.is_symlink():
            dest.unlink()
        agent = holo.load_agent(config.root_path)
        service.clone(config.dev_path, dest, agent, new_chain=False)
        return service.load(config.name)
    except (holo.HoloError, OSError) as e:
        raise StagingError(f"staging {config.name} failed: {e}") from e
