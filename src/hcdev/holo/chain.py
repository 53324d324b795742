"""
Holochain: one runnable chain instance.

A chain instance is a directory holding a copy of an app (dna, ui, test),
the agent that runs it, and once generated, its local store::

    <root>/<name>/
        dna/ ui/ test/
        agent.txt priv.key
        db/chain.db

Lifecycle: load (read DNA, import zome code) -> gen_chain (genesis entries)
-> activate (open the store for calls and gossip).
"""
from __future__ import annotations

import json
import shutil
from pathlib import Path
from typing import Any, Dict, List, Optional, Tuple

from ..telemetry import get_logger
from .agent import Agent
from .dht import DHT
from .dna import DNA, Exposure
from .errors import ChainError, ZomeError
from .store import ChainStore, Header, entry_hash
from .tester import run_all, run_one, run_scenario
from .zome import ZomeContext, ZomeModule, load_zomes

logger = get_logger(__name__)

CHAIN_DNA_DIR = "dna"
CHAIN_UI_DIR = "ui"
CHAIN_TEST_DIR = "test"
CHAIN_DB_DIR = "db"
CHAIN_DB_FILE = "chain.db"

DNA_ENTRY_TYPE = "%dna"
AGENT_ENTRY_TYPE = "%agent"


class Holochain:
    def __init__(self, name: str, root_path: Path | str, dna: DNA, agent: Agent):
        self.name = name
        self.root_path = Path(root_path)
        self.dna = dna
        self.agent = agent
        self._zomes: Optional[Dict[str, ZomeModule]] = None
        self._store: Optional[ChainStore] = None
        self._active = False
        self._dht: Optional[DHT] = None

    def __repr__(self) -> str:
        return f"Holochain(name={self.name!r}, root_path={str(self.root_path)!r})"

    # =========================================================================
    # Paths and identity
    # =========================================================================

    def dna_path(self) -> Path:
        return self.root_path / CHAIN_DNA_DIR

    def ui_path(self) -> Path:
        return self.root_path / CHAIN_UI_DIR

    def test_path(self) -> Path:
        return self.root_path / CHAIN_TEST_DIR

    def db_path(self) -> Path:
        return self.root_path / CHAIN_DB_DIR / CHAIN_DB_FILE

    def dna_hash(self) -> str:
        return self.dna.hash()

    @property
    def active(self) -> bool:
        return self._active

    # =========================================================================
    # Lifecycle
    # =========================================================================

    def prepare(self) -> None:
        """Import the code of every zome in the DNA."""
        self._zomes = load_zomes(self.dna_path(), self.dna.zomes, self.dna_hash()[2:14])

    def started(self) -> bool:
        """True once genesis entries have been written."""
        if self._store is not None:
            return self._store.count() > 0
        if not self.db_path().exists():
            return False
        store = ChainStore(self.db_path())
        try:
            return store.count() > 0
        finally:
            store.close()

    def gen_chain(self) -> Header:
        """
        Write the genesis entries: the DNA, then the agent's key.

        Raises:
            ChainError: if the chain already has genesis entries
        """
        if self.started():
            raise ChainError("chain already started")
        if self._zomes is None:
            self.prepare()

        self._open_store()
        self.commit(DNA_ENTRY_TYPE, json.loads(self.dna.canonical_json()))
        header = self.commit(AGENT_ENTRY_TYPE, {"identity": self.agent.identity, "key": self.agent.public_key})
        logger.debug("genesis for %s: dna %s", self.name, self.dna_hash())
        return header

    def activate(self) -> None:
        """
        Open the chain's store so it can take calls and gossip.

        Raises:
            ChainError: if the chain has not been generated
        """
        if not self.started():
            raise ChainError(f"chain {self.name} not generated, call gen_chain first")
        if self._zomes is None:
            self.prepare()
        self._open_store()
        self._active = True
        logger.debug("chain %s active", self.name)

    def reset(self) -> None:
        """Drop the chain's local store, returning it to the ungenerated state."""
        self.close()
        shutil.rmtree(self.root_path / CHAIN_DB_DIR, ignore_errors=True)

    def close(self) -> None:
        if self._store is not None:
            self._store.close()
            self._store = None
        self._active = False
        self._dht = None

    def _open_store(self) -> ChainStore:
        if self._store is None:
            self._store = ChainStore(self.db_path())
        return self._store

    @property
    def store(self) -> ChainStore:
        if self._store is None:
            raise ChainError(f"chain {self.name} has no open store")
        return self._store

    # =========================================================================
    # Entries and calls
    # =========================================================================

    def commit(self, entry_type: str, entry: Any) -> Header:
        """Sign and append an entry to the source chain."""
        hash_ = entry_hash(entry_type, entry)
        signature = self.agent.sign(hash_.encode("utf-8"))
        return self.store.append(entry_type, entry, signature, hash_)

    def get(self, hash_: str) -> Optional[Dict[str, Any]]:
        return self.store.get(hash_)

    def call(self, zome_name: str, fn_name: str, payload: Any, exposure: Optional[Exposure] = None) -> Any:
        """
        Call a zome function.

        Args:
            zome_name: zome to call into
            fn_name: declared function name
            payload: argument for the function
            exposure: if given, the function must be declared with this exposure

        Raises:
            ChainError: if the chain is not active
            ZomeError: unknown zome or function, or insufficient exposure
        """
        if not self._active:
            raise ChainError(f"chain {self.name} not active")
        assert self._zomes is not None

        module = self._zomes.get(zome_name)
        if module is None:
            raise ZomeError(f"unknown zome: {zome_name}")
        fn_def = module.zome.get_function(fn_name)
        if fn_def is None:
            raise ZomeError(f"unknown function: {zome_name}/{fn_name}")
        if exposure is not None and fn_def.exposure != exposure:
            raise ZomeError(f"function {zome_name}/{fn_name} is not {exposure.value}")

        return module.call(ZomeContext(self, module.zome), fn_name, payload)

    def dht(self) -> DHT:
        """The chain's peer exchange subsystem."""
        if self._dht is None:
            self._dht = DHT(self)
        return self._dht

    # =========================================================================
    # Tests
    # =========================================================================

    def test(self) -> List[Exception]:
        """Run every stand-alone test file in the test directory."""
        return run_all(self)

    def test_one(self, name: str) -> List[Exception]:
        """Run the stand-alone test file ``<name>.json``."""
        return run_one(self, name)

    def test_scenario(self, scenario_dir: Path | str, role: str) -> Tuple[Optional[Exception], List[Exception]]:
        """Run one role of a scenario test."""
        return run_scenario(self, Path(scenario_dir), role)
