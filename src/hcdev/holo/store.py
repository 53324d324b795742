"""
ChainStore: the local persistent state of a chain instance.

One sqlite database per chain (``<chain>/db/chain.db``) holding:

    entries   the source chain, one row per committed entry, in order
    dht       entries this node holds for the network (own and gossiped)
    peers     known peers and how far we have gossiped with them

The store is shared by the web server's worker threads and the gossip
threads, so every access goes through one lock.
"""
from __future__ import annotations

import hashlib
import json
import sqlite3
import threading
from dataclasses import dataclass
from datetime import datetime, timezone
from pathlib import Path
from typing import Any, Dict, List, Optional


def entry_hash(entry_type: str, entry: Any) -> str:
    """Content address of an entry."""
    payload = json.dumps({"type": entry_type, "entry": entry}, sort_keys=True, separators=(",", ":"))
    return "Qm" + hashlib.sha256(payload.encode("utf-8")).hexdigest()


@dataclass
class Header:
    """A committed source chain entry."""

    idx: int
    hash: str
    entry_type: str
    entry: Any
    prev_hash: Optional[str]
    signature: str
    timestamp: str

    def to_dict(self) -> Dict[str, Any]:
        return {
            "idx": self.idx,
            "hash": self.hash,
            "entry_type": self.entry_type,
            "entry": self.entry,
            "prev_hash": self.prev_hash,
            "signature": self.signature,
            "timestamp": self.timestamp,
        }


class ChainStore:
    def __init__(self, path: Path | str) -> None:
        self._path = str(path)
        Path(self._path).parent.mkdir(parents=True, exist_ok=True)
        self._lock = threading.Lock()
        self._conn = sqlite3.connect(self._path, check_same_thread=False)
        self._conn.row_factory = sqlite3.Row
        self._ensure_schema()

    @property
    def path(self) -> str:
        return self._path

    def _ensure_schema(self) -> None:
        with self._lock:
            cur = self._conn.cursor()
            cur.execute(
                """
                CREATE TABLE IF NOT EXISTS entries (
                    idx INTEGER PRIMARY KEY,
                    hash TEXT NOT NULL,
                    entry_type TEXT NOT NULL,
                    entry_json TEXT NOT NULL,
                    prev_hash TEXT,
                    signature TEXT NOT NULL,
                    timestamp TEXT NOT NULL
                )
                """
            )
            cur.execute(
                """
                CREATE INDEX IF NOT EXISTS idx_entries_hash
                ON entries(hash)
                """
            )
            cur.execute(
                """
                CREATE TABLE IF NOT EXISTS dht (
                    seq INTEGER PRIMARY KEY AUTOINCREMENT,
                    hash TEXT NOT NULL UNIQUE,
                    entry_type TEXT NOT NULL,
                    entry_json TEXT NOT NULL,
                    source TEXT NOT NULL
                )
                """
            )
            cur.execute(
                """
                CREATE TABLE IF NOT EXISTS peers (
                    peer_id TEXT PRIMARY KEY,
                    gossiped_to INTEGER NOT NULL DEFAULT 0,
                    last_seen TEXT
                )
                """
            )
            self._conn.commit()

    # =========================================================================
    # Source chain
    # =========================================================================

    def append(self, entry_type: str, entry: Any, signature: str, hash_: str) -> Header:
        """Append an entry to the source chain and publish it to the local DHT."""
        with self._lock:
            cur = self._conn.cursor()
            cur.execute("SELECT idx, hash FROM entries ORDER BY idx DESC LIMIT 1")
            top = cur.fetchone()
            idx = top["idx"] + 1 if top else 0
            prev_hash = top["hash"] if top else None
            timestamp = datetime.now(timezone.utc).isoformat()
            entry_json = json.dumps(entry)
            cur.execute(
                """
                INSERT INTO entries (idx, hash, entry_type, entry_json, prev_hash, signature, timestamp)
                VALUES (?, ?, ?, ?, ?, ?, ?)
                """,
                (idx, hash_, entry_type, entry_json, prev_hash, signature, timestamp),
            )
            cur.execute(
                """
                INSERT OR IGNORE INTO dht (hash, entry_type, entry_json, source)
                VALUES (?, ?, ?, 'self')
                """,
                (hash_, entry_type, entry_json),
            )
            self._conn.commit()
        return Header(idx, hash_, entry_type, entry, prev_hash, signature, timestamp)

    def headers(self) -> List[Header]:
        with self._lock:
            rows = self._conn.execute("SELECT * FROM entries ORDER BY idx").fetchall()
        return [self._row_to_header(row) for row in rows]

    def top(self) -> Optional[Header]:
        with self._lock:
            row = self._conn.execute("SELECT * FROM entries ORDER BY idx DESC LIMIT 1").fetchone()
        return self._row_to_header(row) if row else None

    def count(self) -> int:
        with self._lock:
            return self._conn.execute("SELECT COUNT(*) FROM entries").fetchone()[0]

    @staticmethod
    def _row_to_header(row: sqlite3.Row) -> Header:
        return Header(
            idx=row["idx"],
            hash=row["hash"],
            entry_type=row["entry_type"],
            entry=json.loads(row["entry_json"]),
            prev_hash=row["prev_hash"],
            signature=row["signature"],
            timestamp=row["timestamp"],
        )

    # =========================================================================
    # DHT
    # =========================================================================

    def get(self, hash_: str) -> Optional[Dict[str, Any]]:
        """Look an entry up by hash in the local DHT."""
        with self._lock:
            row = self._conn.execute(
                "SELECT entry_type, entry_json, source FROM dht WHERE hash = ?", (hash_,)
            ).fetchone()
        if row is None:
            return None
        return {"type": row["entry_type"], "entry": json.loads(row["entry_json"]), "source": row["source"]}

    def put(self, hash_: str, entry_type: str, entry: Any, source: str) -> bool:
        """Hold an entry received from a peer. Returns False if already held."""
        with self._lock:
            cur = self._conn.execute(
                """
                INSERT OR IGNORE INTO dht (hash, entry_type, entry_json, source)
                VALUES (?, ?, ?, ?)
                """,
                (hash_, entry_type, json.dumps(entry), source),
            )
            self._conn.commit()
            return cur.rowcount > 0

    def puts_since(self, seq: int) -> List[Dict[str, Any]]:
        """DHT entries added after sequence number seq, oldest first."""
        with self._lock:
            rows = self._conn.execute(
                "SELECT seq, hash, entry_type, entry_json FROM dht WHERE seq > ? ORDER BY seq", (seq,)
            ).fetchall()
        return [
            {"seq": r["seq"], "hash": r["hash"], "type": r["entry_type"], "entry": json.loads(r["entry_json"])}
            for r in rows
        ]

    # =========================================================================
    # Peers
    # =========================================================================

    def add_peer(self, peer_id: str) -> None:
        with self._lock:
            self._conn.execute("INSERT OR IGNORE INTO peers (peer_id) VALUES (?)", (peer_id,))
            self._conn.commit()

    def peers(self) -> List[str]:
        with self._lock:
            rows = self._conn.execute("SELECT peer_id FROM peers ORDER BY peer_id").fetchall()
        return [r["peer_id"] for r in rows]

    def gossiped_to(self, peer_id: str) -> int:
        with self._lock:
            row = self._conn.execute("SELECT gossiped_to FROM peers WHERE peer_id = ?", (peer_id,)).fetchone()
        return row["gossiped_to"] if row else 0

    def update_peer(self, peer_id: str, gossiped_to: int) -> None:
        with self._lock:
            self._conn.execute(
                """
                INSERT INTO peers (peer_id, gossiped_to, last_seen) VALUES (?, ?, ?)
                ON CONFLICT(peer_id) DO UPDATE SET gossiped_to = excluded.gossiped_to,
                                                   last_seen = excluded.last_seen
                """,
                (peer_id, gossiped_to, datetime.now(timezone.utc).isoformat()),
            )
            self._conn.commit()

    def close(self) -> None:
        with self._lock:
            self._conn.close()
