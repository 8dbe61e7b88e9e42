"""
SecureVault Configuration
=========================
Centralized configuration for every vault module.

Values are read from the environment once at import time. The console
entry point loads a `.env` file (python-dotenv) before importing this
module, so `.env` overrides apply there as well.
"""

from dataclasses import dataclass, field
from typing import Dict

import os


def _env_int(name: str, default: int) -> int:
    raw = os.getenv(name, "").strip()
    try:
        return int(raw) if raw else default
    except ValueError:
        return default


# ============================================================================
# Environment overrides
# ============================================================================

VAULT_DIFFICULTY: int = _env_int("VAULT_DIFFICULTY", 4)
VAULT_DB_PATH: str = os.getenv("VAULT_DB_PATH", "vault.db").strip() or "vault.db"
VAULT_LOG_LEVEL: str = os.getenv("VAULT_LOG_LEVEL", "INFO").upper()
VAULT_JSON_BACKUP: bool = os.getenv("VAULT_JSON_BACKUP", "False").lower() == "true"


@dataclass
class LedgerConfig:
    """Proof-of-work ledger settings."""

    # Required number of leading zero hex digits in every block hash
    difficulty: int = VAULT_DIFFICULTY

    # Sentinel payload and previous hash of block 0
    genesis_data: str = "Genesis Block"
    genesis_previous_hash: str = "0"


@dataclass
class CryptoConfig:
    """Cryptography settings."""

    # Size of random proof seeds (bytes). 32 bytes = 256 bits
    seed_bytes: int = 32

    # Signatures: Ed25519 (PyNaCl SigningKey/VerifyKey)
    # Digest: SHA-256, lowercase hex


@dataclass
class PersistenceConfig:
    """Snapshot store settings."""

    # SQLite database holding the key/value table
    database_path: str = VAULT_DB_PATH

    # Key under which the serialized chain is stored
    snapshot_key: str = "securevault-blockchain"

    # Also write a human-readable JSON copy next to the database
    json_backup: bool = VAULT_JSON_BACKUP


@dataclass
class ProofConfig:
    """Zero-knowledge claim settings."""

    # Bounds used when a range request omits them
    default_range_min: int = 0
    default_range_max: int = 100

    # Citizenship value that can be proven
    citizenship_label: str = "Malaysian Citizen"

    # Fixed tags mixed into boolean claim proofs
    claim_tags: Dict[str, str] = field(default_factory=lambda: {
        "citizenship": "MALAYSIAN_CITIZEN",
        "residency": "MALAYSIAN_RESIDENT",
        "vaccination_status": "COVID_VACCINATED",
        "no_criminal_record": "CLEAN_RECORD",
    })


@dataclass
class LoggingConfig:
    """Logging settings."""

    level: str = VAULT_LOG_LEVEL
    format: str = "%(asctime)s [%(levelname)s] %(name)s: %(message)s"
    datefmt: str = "%Y-%m-%d %H:%M:%S"

    # Number of formatted records kept for the activity feed
    activity_buffer: int = 1000


@dataclass
class Config:
    """Root configuration."""

    ledger: LedgerConfig = field(default_factory=LedgerConfig)
    crypto: CryptoConfig = field(default_factory=CryptoConfig)
    persistence: PersistenceConfig = field(default_factory=PersistenceConfig)
    proofs: ProofConfig = field(default_factory=ProofConfig)
    logging: LoggingConfig = field(default_factory=LoggingConfig)


# Global configuration instance
config = Config()
