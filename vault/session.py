"""
Vault Session
=============

[VAULT] The boundary the UI, storage and console talk to. One session owns:
- the in-memory key pair (generated at initialize(), never persisted)
- the Blockchain
- the attribute -> block index map of active credentials

[CONCURRENCY] Mutations serialize on an asyncio.Lock and mine in a worker
thread, so the event loop stays responsive while a nonce is searched.
The snapshot is written only after the in-memory append succeeded.

[USAGE]
```python
session = VaultSession(store=VaultStore("vault.db"))
await session.initialize()

block = await session.add_credential_set(
    [("fullName", "AHMAD BIN ABDULLAH"), ("icNumber", "901231-14-5677", True)],
    subject_label="SMARTID-MY-901231145677",
)
assert session.verify_attribute(block.index, "fullName", "AHMAD BIN ABDULLAH")
```
"""

import asyncio
import logging
from typing import Dict, Iterable, List, Optional, Tuple, Union

import aiosqlite

from core.crypto import KeyPair, generate_key_pair
from core.errors import CryptoFailure
from core.events import EventBus, event_bus
from core.persistence import VaultStore
from ledger.block import Block, BlockPayload, MultiCredentialPayload, SingleCredentialPayload
from ledger.chain import Blockchain
from ledger.credentials import CredentialSpec, build_record
import zkp

logger = logging.getLogger(__name__)

CredentialInput = Union[CredentialSpec, Tuple[str, str], Tuple[str, str, bool]]


def _as_spec(item: CredentialInput) -> CredentialSpec:
    if isinstance(item, CredentialSpec):
        return item
    return CredentialSpec(*item)


class VaultSession:
    """
    One vault session: key pair + ledger + optional snapshot store.
    """

    # Proof engine. Stateless, callable without initialize()
    prove_threshold = staticmethod(zkp.prove_threshold)
    verify_threshold = staticmethod(zkp.verify_threshold)
    prove_range = staticmethod(zkp.prove_range)
    verify_range = staticmethod(zkp.verify_range)
    prove_age_over_18 = staticmethod(zkp.prove_age_over_18)
    prove_age_over_21 = staticmethod(zkp.prove_age_over_21)
    prove_age_in_range = staticmethod(zkp.prove_age_in_range)
    prove_citizenship = staticmethod(zkp.prove_citizenship)
    prove_residency = staticmethod(zkp.prove_residency)
    prove_income_threshold = staticmethod(zkp.prove_income_threshold)
    prove_vaccination_status = staticmethod(zkp.prove_vaccination_status)
    prove_no_criminal_record = staticmethod(zkp.prove_no_criminal_record)
    verify_claim = staticmethod(zkp.verify_claim)

    def __init__(
        self,
        store: Optional[VaultStore] = None,
        difficulty: Optional[int] = None,
        bus: Optional[EventBus] = None,
    ):
        """
        Args:
            store: Snapshot store, None keeps the ledger in memory only
            difficulty: Proof-of-work difficulty (config.ledger.difficulty if None)
            bus: Event bus for ledger_updated notifications
        """
        self.store = store
        self.difficulty = difficulty
        self.bus = bus or event_bus

        # Created by initialize(): loaded from the store or freshly mined
        self.blockchain: Optional[Blockchain] = None
        self.key_pair: Optional[KeyPair] = None

        self._credentials: Dict[str, int] = {}
        self._lock = asyncio.Lock()

    @property
    def initialized(self) -> bool:
        return self.key_pair is not None

    @property
    def credentials(self) -> Dict[str, int]:
        """Active attribute -> block index."""
        return dict(self._credentials)

    async def initialize(self) -> KeyPair:
        """
        Generate the session key pair and load the stored ledger.
        Calling it again returns the existing key pair.
        """
        if self.key_pair is not None:
            return self.key_pair

        key_pair = await asyncio.to_thread(generate_key_pair)

        blockchain = None
        if self.store is not None:
            await self.store.initialize()
            blockchain = await self._load_snapshot()
        if blockchain is None:
            blockchain = await asyncio.to_thread(Blockchain, self.difficulty)

        self.blockchain = blockchain
        self.key_pair = key_pair
        self._credentials = self.blockchain.credential_index()
        logger.info(
            f"[VAULT] Session ready: {len(self.blockchain)} blocks, "
            f"{len(self._credentials)} active attributes"
        )
        return key_pair

    async def _load_snapshot(self) -> Optional[Blockchain]:
        """Stored ledger, or None when there is none or it cannot be decoded."""
        try:
            data = await self.store.load_chain()
            if not data:
                return None
            blockchain = Blockchain.from_snapshot(data, difficulty=self.difficulty)
        except (ValueError, KeyError, TypeError) as e:
            logger.error(f"[VAULT] Error loading ledger from storage: {e}")
            return None

        if not blockchain.validate():
            logger.warning("[VAULT] Stored ledger failed validation")
        return blockchain

    def _require_key_pair(self) -> KeyPair:
        if self.key_pair is None:
            raise CryptoFailure("Vault not initialized: no session key pair")
        return self.key_pair

    def _require_blockchain(self) -> Blockchain:
        if self.blockchain is None:
            raise CryptoFailure("Vault not initialized: no ledger loaded")
        return self.blockchain

    # --- Mutations ---

    async def add_credential(self, attribute: str, value: str, double_hash: bool = False) -> Block:
        """Sign one attribute and append it as a single-credential block."""
        key_pair = self._require_key_pair()
        record = build_record(attribute, value, key_pair.signing_key, double_hash)
        return await self._append(SingleCredentialPayload(record=record))

    async def add_credential_set(
        self,
        records: Iterable[CredentialInput],
        subject_label: Optional[str] = None,
    ) -> Block:
        """Sign every attribute of a set and append them as one block."""
        key_pair = self._require_key_pair()
        specs = [_as_spec(item) for item in records]
        if not specs:
            raise ValueError("Credential set is empty")

        built = tuple(
            build_record(spec.attribute, spec.value, key_pair.signing_key, spec.double_hash)
            for spec in specs
        )
        return await self._append(MultiCredentialPayload(records=built, subject_label=subject_label))

    async def revoke_block(self, index: int) -> Block:
        """
        Raises:
            CryptoFailure: session not initialized
            InvalidReference: index missing or genesis
        """
        self._require_key_pair()
        blockchain = self._require_blockchain()
        async with self._lock:
            block = await asyncio.to_thread(blockchain.revoke, index)
            self._credentials = blockchain.credential_index()
            await self._after_mutation(block)
        return block

    async def _append(self, payload: BlockPayload) -> Block:
        blockchain = self._require_blockchain()
        async with self._lock:
            block = await asyncio.to_thread(blockchain.append, payload)
            self._credentials = blockchain.credential_index()
            await self._after_mutation(block)
        return block

    async def _after_mutation(self, block: Block) -> None:
        if self.store is not None:
            try:
                await self.store.save_chain(self.blockchain.to_snapshot())
            except (aiosqlite.Error, OSError) as e:
                logger.error(f"[VAULT] Failed to persist ledger after block #{block.index}: {e}")
                raise

        if self.bus.subscriber_count("ledger_updated"):
            await self.bus.broadcast("ledger_updated", {"index": block.index, "kind": block.kind})

    # --- Verification / queries ---

    def verify_attribute(self, index: int, attribute: str, value: str) -> bool:
        """
        Check `value` against `attribute` in block `index`.

        Raises:
            CryptoFailure: session not initialized
        """
        key_pair = self._require_key_pair()
        blockchain = self._require_blockchain()
        return blockchain.verify_attribute_value(index, attribute, value, key_pair.verify_key)

    def verify_credential_value(self, attribute: str, value: str) -> bool:
        """Same as verify_attribute, locating the block through the credential map."""
        key_pair = self._require_key_pair()
        blockchain = self._require_blockchain()
        index = self._credentials.get(attribute)
        if index is None:
            return False
        return blockchain.verify_attribute_value(index, attribute, value, key_pair.verify_key)

    def get_credential_block(self, attribute: str) -> Optional[Block]:
        index = self._credentials.get(attribute)
        if index is None:
            return None
        return self._require_blockchain().get_block(index)

    def is_ledger_valid(self) -> bool:
        return self._require_blockchain().validate()

    def list_blocks(self) -> List[Block]:
        return list(self._require_blockchain().blocks)

    def get_block(self, index: int) -> Optional[Block]:
        return self._require_blockchain().get_block(index)

    def is_revoked(self, index: int) -> bool:
        return self._require_blockchain().is_revoked(index)
