"""
DHT: the chain's peer exchange subsystem.

Gossip is pull based. Every period a node asks each known peer for the
entries it has not yet seen from that peer; the peer answers from its own
request queue. Peers here are other in-process DHT instances, which is all
a local dev node ever talks to.

Both loops run until stop() is called or the process exits.
"""
from __future__ import annotations

import queue
import threading
from dataclasses import dataclass
from typing import TYPE_CHECKING, Any, Dict, List

from ..telemetry import get_logger

if TYPE_CHECKING:
    from .chain import Holochain

logger = get_logger(__name__)


@dataclass
class GossipRequest:
    """A peer asking for our puts after sequence number ``since``."""

    requester: "DHT"
    since: int


class DHT:
    def __init__(self, chain: "Holochain"):
        self._chain = chain
        self._requests: "queue.Queue[GossipRequest]" = queue.Queue()
        self._peers: Dict[str, "DHT"] = {}
        self._stopped = threading.Event()
        self.rounds = 0
        self.handled = 0

    @property
    def node_id(self) -> str:
        return self._chain.agent.public_key

    def add_peer(self, peer: "DHT") -> None:
        self._peers[peer.node_id] = peer
        self._chain.store.add_peer(peer.node_id)

    def peers(self) -> List[str]:
        return self._chain.store.peers()

    # =========================================================================
    # Requests from peers
    # =========================================================================

    def request_gossip(self, request: GossipRequest) -> None:
        """Queue a gossip request from a peer."""
        self._requests.put(request)

    def handle_gossip_with(self, request: GossipRequest) -> int:
        """Answer one request. Returns the number of entries sent."""
        puts = self._chain.store.puts_since(request.since)
        request.requester.receive_puts(self.node_id, puts)
        self.handled += 1
        return len(puts)

    def handle_gossip_withs(self) -> None:
        """Answer gossip requests as they arrive."""
        while not self._stopped.is_set():
            try:
                request = self._requests.get(timeout=0.5)
            except queue.Empty:
                continue
            try:
                sent = self.handle_gossip_with(request)
                logger.debug("gossip with %s: sent %d puts", request.requester.node_id[:8], sent)
            except Exception as e:
                logger.warning("gossip request from %s failed: %s", request.requester.node_id[:8], e)

    # =========================================================================
    # Outgoing gossip
    # =========================================================================

    def receive_puts(self, peer_id: str, puts: List[Dict[str, Any]]) -> None:
        """Hold the entries a peer sent us and remember how far we got."""
        last = self._chain.store.gossiped_to(peer_id)
        for put in puts:
            self._chain.store.put(put["hash"], put["type"], put["entry"], source=peer_id)
            last = max(last, put["seq"])
        self._chain.store.update_peer(peer_id, last)

    def gossip_once(self) -> int:
        """Ask every known peer for gossip. Returns the number of peers asked."""
        asked = 0
        for peer_id in self.peers():
            peer = self._peers.get(peer_id)
            if peer is None:
                continue
            peer.request_gossip(GossipRequest(requester=self, since=self._chain.store.gossiped_to(peer_id)))
            asked += 1
        self.rounds += 1
        return asked

    def gossip(self, interval: float) -> None:
        """Gossip with all peers every ``interval`` seconds."""
        while not self._stopped.is_set():
            try:
                asked = self.gossip_once()
                logger.debug("gossip round %d: asked %d peers", self.rounds, asked)
            except Exception as e:
                logger.warning("gossip round failed: %s", e)
            self._stopped.wait(interval)

    def stop(self) -> None:
        self._stopped.set()
