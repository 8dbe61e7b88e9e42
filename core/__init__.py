"""
Core Vault Module
=================
Leaf components every other module builds on:
- crypto: SHA-256 digest, hash chains, Ed25519 key pair / sign / verify
- errors: CryptoFailure, PreconditionError, InvalidReference
- events: in-process async event bus
- logger: logging setup and activity feed handler
- persistence: aiosqlite snapshot store
"""

from .errors import VaultError, CryptoFailure, PreconditionError, InvalidReference
from .crypto import (
    KeyPair,
    digest,
    hash_chain,
    generate_key_pair,
    generate_seed,
    load_verify_key,
    sign,
    verify,
)
from .events import EventBus, event_bus

__all__ = [
    "VaultError",
    "CryptoFailure",
    "PreconditionError",
    "InvalidReference",
    "KeyPair",
    "digest",
    "hash_chain",
    "generate_key_pair",
    "generate_seed",
    "load_verify_key",
    "sign",
    "verify",
    "EventBus",
    "event_bus",
]
