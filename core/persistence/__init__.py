"""
Persistence Module
==================
Ledger snapshot storage (aiosqlite key/value table + optional JSON backup).
"""

from .vault_store import VaultStore

__all__ = [
    "VaultStore",
]
