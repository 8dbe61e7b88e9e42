"""
Vault Store - snapshot persistence for the ledger
=================================================

[PERSISTENCE] The ledger is stored as one opaque blob:
- a JSON array of block dicts in index order
- under a single key in a key/value table
- overwritten wholesale after every successful mutation

[STORAGE]
- SQLite (aiosqlite) key/value table
- Optional JSON backup, written atomically (temp file + rename)

Schema versioning is not attempted: a blob that cannot be decoded is the
caller's problem, load_chain() only guarantees it returns a list or None.
"""

import json
import logging
import time
from pathlib import Path
from typing import Any, Dict, List, Optional

import aiosqlite

from config import config

logger = logging.getLogger(__name__)


class VaultStore:
    """
    Key/value snapshot store.

    [USAGE]
    ```python
    store = VaultStore("vault.db")
    await store.initialize()

    await store.save_chain(chain.to_snapshot())
    data = await store.load_chain()
    ```
    """

    def __init__(
        self,
        db_path: Optional[str] = None,
        backup_path: Optional[str] = None,
        snapshot_key: Optional[str] = None,
    ):
        """
        Args:
            db_path: SQLite database path (":memory:" is not useful here,
                     every call opens its own connection)
            backup_path: JSON backup path. Defaults to <db>_backup.json when
                         config.persistence.json_backup is on
            snapshot_key: Key of the chain snapshot
        """
        self.db_path = str(db_path or config.persistence.database_path)
        if backup_path is None and config.persistence.json_backup:
            backup_path = self.db_path.replace(".db", "") + "_backup.json"
        self.backup_path = backup_path
        self.snapshot_key = snapshot_key or config.persistence.snapshot_key
        self._initialized = False

    async def initialize(self) -> None:
        """Create the key/value table if needed."""
        async with aiosqlite.connect(self.db_path) as db:
            await db.execute("""
                CREATE TABLE IF NOT EXISTS kv (
                    key TEXT PRIMARY KEY,
                    value TEXT NOT NULL,
                    updated_at REAL
                )
            """)
            await db.commit()

        self._initialized = True
        logger.info(f"[STORE] Initialized: {self.db_path}")

    def _require_initialized(self) -> None:
        if not self._initialized:
            raise RuntimeError("VaultStore.initialize() must be awaited first")

    # --- Key/value ---

    async def put(self, key: str, value: str) -> None:
        self._require_initialized()
        async with aiosqlite.connect(self.db_path) as db:
            await db.execute(
                "INSERT OR REPLACE INTO kv (key, value, updated_at) VALUES (?, ?, ?)",
                (key, value, time.time()),
            )
            await db.commit()

    async def get(self, key: str) -> Optional[str]:
        self._require_initialized()
        async with aiosqlite.connect(self.db_path) as db:
            async with db.execute("SELECT value FROM kv WHERE key = ?", (key,)) as cursor:
                row = await cursor.fetchone()
        return row[0] if row else None

    async def delete(self, key: str) -> bool:
        self._require_initialized()
        async with aiosqlite.connect(self.db_path) as db:
            cursor = await db.execute("DELETE FROM kv WHERE key = ?", (key,))
            await db.commit()
            return cursor.rowcount > 0

    # --- Chain snapshot ---

    async def save_chain(self, blocks: List[Dict[str, Any]]) -> None:
        """
        Overwrite the stored snapshot.

        Raises:
            aiosqlite.Error / OSError: storage failure
        """
        blob = json.dumps(blocks, separators=(",", ":"))
        await self.put(self.snapshot_key, blob)

        if self.backup_path:
            self._save_json_backup(blocks)

        logger.debug(f"[STORE] Saved snapshot: {len(blocks)} blocks")

    async def load_chain(self) -> Optional[List[Dict[str, Any]]]:
        """
        Stored snapshot, the JSON backup if the database has none, or None.

        Raises:
            ValueError: the stored blob is not a JSON array
        """
        blob = await self.get(self.snapshot_key)
        if blob is None:
            return self._load_json_backup()

        data = json.loads(blob)
        if not isinstance(data, list):
            raise ValueError("Stored snapshot is not a list of blocks")
        logger.info(f"[STORE] Loaded snapshot: {len(data)} blocks")
        return data

    async def clear(self) -> None:
        await self.delete(self.snapshot_key)

    # --- JSON backup ---

    def _save_json_backup(self, blocks: List[Dict[str, Any]]) -> None:
        backup = {"saved_at": time.time(), "blocks": blocks}
        temp_path = Path(self.backup_path + ".tmp")
        with open(temp_path, "w") as f:
            json.dump(backup, f, indent=2)
        temp_path.replace(self.backup_path)

    def _load_json_backup(self) -> Optional[List[Dict[str, Any]]]:
        if not self.backup_path or not Path(self.backup_path).exists():
            return None
        with open(self.backup_path, "r") as f:
            backup = json.load(f)
        blocks = backup.get("blocks")
        if not isinstance(blocks, list):
            raise ValueError("JSON backup has no block list")
        logger.info(f"[STORE] Loaded JSON backup: {len(blocks)} blocks")
        return blocks
