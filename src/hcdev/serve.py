"""
Serve orchestrator: the ``web`` (alias ``serve``) command.

Stages the app, generates and activates the chain, starts the two gossip
loops in background threads and then serves the chain over HTTP until the
process is stopped. Nothing here stops the loops or the server.
"""

from __future__ import annotations

import threading
from typing import Callable, Sequence

from . import holo
from .config import DEFAULT_PORT, GOSSIP_INTERVAL, DevConfig
from .errors import UsageError
from .staging import stage


def resolve_port(args: Sequence[str], default: int = DEFAULT_PORT) -> int:
    """First positional argument if given, else the default port."""
    if not args:
        return default
    try:
        port = int(args[0])
    except ValueError:
        raise UsageError(f"invalid port: {args[0]}") from None
    if not 0 < port < 65536:
        raise UsageError(f"invalid port: {args[0]}")
    return port


def spawn_daemon(target: Callable[[], None], name: str) -> threading.Thread:
    thread = threading.Thread(target=target, name=name, daemon=True)
    thread.start()
    return thread


def serve_chain(
    config: DevConfig,
    service: holo.Service,
    args: Sequence[str],
    output_sink: Callable[[str], None] = print,
    server_factory: Callable[[holo.Holochain, int], holo.WebServer] = holo.WebServer,
    spawn: Callable[[Callable[[], None], str], object] = spawn_daemon,
) -> None:
    """
    Stage, activate and serve the app. Blocks while the server runs.

    The chain is materialized twice: stage() loads the fresh copy, then
    gen_chain() loads the same files again and writes the genesis entries.
    The first instance is dropped. On a freshly staged copy gen_chain always
    finds an ungenerated chain, so the second load is harmless; it would
    fail with "chain already started" only if staging had kept an old store.

    Raises:
        UsageError: bad port (before anything is staged)
        StagingError: staging failed
        HoloError: genesis or activation failed
    """
    port = resolve_port(args, service.config.default_port)

    stage(config, service, output_sink)
    chain = service.gen_chain(config.name)

    output_sink(f"Serving holochain with DNA hash:{chain.dna_hash()} on port:{port}")

    chain.activate()

    dht = chain.dht()
    spawn(dht.handle_gossip_withs, "gossip-handler")
    spawn(lambda: dht.gossip(GOSSIP_INTERVAL), "gossip")

    server_factory(chain, port).start()
