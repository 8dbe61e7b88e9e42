"""
Blockchain - append-only credential ledger
==========================================

[LEDGER] A single authority's local log:
- Block 0 is a mined genesis sentinel with previous_hash "0"
- Every later block links to its predecessor by hash and is mined
- Nothing is ever edited in place; revocation appends a marker block

[CONCURRENCY] append() holds an exclusive lock from reading the tail to
appending the mined block, so two callers can never mine two blocks that
claim the same index or previous hash.
"""

import logging
import threading
from dataclasses import dataclass
from typing import Any, Dict, Iterable, List, Optional, Tuple

from config import config
from core.crypto import PublicKeyLike
from core.errors import InvalidReference
from ledger.block import (
    Block,
    BlockPayload,
    GenesisPayload,
    RevocationMarker,
    find_record,
    meets_difficulty,
    mine_block,
    now_ms,
    payload_records,
)
from ledger.credentials import verify_record

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class IntegrityViolation:
    """First problem found while walking the chain."""

    index: int
    reason: str  # genesis | index | linkage | hash_mismatch | difficulty
    detail: str = ""


class Blockchain:
    """
    Proof-of-work ledger of credential blocks.

    [USAGE]
    ```python
    chain = Blockchain(difficulty=4)
    block = chain.append(MultiCredentialPayload(records, "SMARTID-MY-..."))
    chain.revoke(block.index)
    assert chain.is_revoked(block.index)
    assert chain.validate()
    ```
    """

    def __init__(self, difficulty: Optional[int] = None, blocks: Optional[Iterable[Block]] = None):
        self.difficulty = config.ledger.difficulty if difficulty is None else difficulty
        if self.difficulty < 0:
            raise ValueError(f"difficulty must be >= 0, got {self.difficulty}")
        self._lock = threading.Lock()

        if blocks is None:
            self._blocks: List[Block] = [self._create_genesis()]
        else:
            self._blocks = list(blocks)

    def _create_genesis(self) -> Block:
        genesis = mine_block(
            index=0,
            timestamp=now_ms(),
            payload=GenesisPayload(),
            previous_hash=config.ledger.genesis_previous_hash,
            difficulty=self.difficulty,
        )
        logger.info(f"[LEDGER] Genesis block mined: {genesis.hash[:16]}...")
        return genesis

    # --- Snapshot ---

    @classmethod
    def from_snapshot(cls, data: List[Dict[str, Any]], difficulty: Optional[int] = None) -> "Blockchain":
        """
        Load a serialized array of blocks verbatim. No validation happens
        here: call validate() to check what was loaded.
        """
        blocks = [Block.from_dict(item) for item in data]
        if not blocks:
            return cls(difficulty=difficulty)
        return cls(difficulty=difficulty, blocks=blocks)

    def to_snapshot(self) -> List[Dict[str, Any]]:
        return [block.to_dict() for block in self.blocks]

    # --- Read access ---

    @property
    def blocks(self) -> Tuple[Block, ...]:
        """Read-only snapshot in insertion order."""
        return tuple(self._blocks)

    @property
    def last_block(self) -> Block:
        return self._blocks[-1]

    def __len__(self) -> int:
        return len(self._blocks)

    def get_block(self, index: int) -> Optional[Block]:
        """Block at `index`, or None when out of range."""
        if index < 0 or index >= len(self._blocks):
            return None
        return self._blocks[index]

    # --- Mutation ---

    def append(self, payload: BlockPayload) -> Block:
        """
        Mine `payload` onto the tail and append it.

        Either the block is fully mined, hashed and linked, or nothing is
        appended.
        """
        if isinstance(payload, GenesisPayload):
            raise ValueError("Genesis payload is only valid at index 0")

        with self._lock:
            last = self._blocks[-1]
            block = mine_block(
                index=last.index + 1,
                timestamp=now_ms(),
                payload=payload,
                previous_hash=last.hash,
                difficulty=self.difficulty,
            )
            self._blocks.append(block)

        logger.info(
            f"[LEDGER] Appended block #{block.index} ({block.kind}) "
            f"hash={block.hash[:16]}... nonce={block.nonce}"
        )
        return block

    def revoke(self, target_index: int) -> Block:
        """
        Append a revocation marker for `target_index`.

        Raises:
            InvalidReference: target missing or genesis
        """
        if target_index == 0:
            raise InvalidReference("Genesis block cannot be revoked", target_index)
        if self.get_block(target_index) is None:
            raise InvalidReference(f"No block at index {target_index}", target_index)

        block = self.append(RevocationMarker(target_index=target_index))
        logger.info(f"[LEDGER] Block #{target_index} revoked by block #{block.index}")
        return block

    # --- Queries ---

    def is_revoked(self, index: int) -> bool:
        """True iff a later block is a revocation marker targeting `index`."""
        if index < 0:
            return False
        for block in self._blocks[index + 1:]:
            payload = block.payload
            if isinstance(payload, RevocationMarker) and payload.target_index == index:
                return True
        return False

    def verify_attribute_value(
        self,
        index: int,
        attribute: str,
        candidate_value: str,
        public_key: PublicKeyLike,
    ) -> bool:
        """
        Check `candidate_value` against the signature stored for `attribute`
        in block `index`.

        Revoked, missing block or missing attribute -> False.

        Raises:
            CryptoFailure: malformed public key
        """
        block = self.get_block(index)
        if block is None or self.is_revoked(index):
            return False

        record = find_record(block.payload, attribute)
        if record is None:
            return False

        return verify_record(record, candidate_value, public_key)

    def credential_index(self) -> Dict[str, int]:
        """
        Attribute -> index of the newest active block that carries it.

        Uses the same rule as is_revoked(): only markers at later positions count.
        """
        index_map: Dict[str, int] = {}
        for position, block in enumerate(self._blocks):
            if self.is_revoked(position):
                continue
            for record in payload_records(block.payload):
                index_map[record.attribute] = block.index
        return index_map

    # --- Validation ---

    def find_integrity_violation(self) -> Optional[IntegrityViolation]:
        """Walk from block 0 and report the first broken invariant, if any."""
        blocks = self._blocks
        if not blocks:
            return IntegrityViolation(0, "genesis", "chain is empty")

        genesis = blocks[0]
        if (
            genesis.index != 0
            or not isinstance(genesis.payload, GenesisPayload)
            or genesis.payload.data != config.ledger.genesis_data
            or genesis.previous_hash != config.ledger.genesis_previous_hash
        ):
            return IntegrityViolation(0, "genesis", "block 0 is not the genesis sentinel")

        for position, block in enumerate(blocks):
            if block.index != position:
                return IntegrityViolation(position, "index", f"stored index {block.index}")

            if position > 0:
                if isinstance(block.payload, GenesisPayload):
                    return IntegrityViolation(position, "genesis", "genesis payload after index 0")
                if block.previous_hash != blocks[position - 1].hash:
                    return IntegrityViolation(position, "linkage", "previous_hash mismatch")

            if block.compute_hash() != block.hash:
                return IntegrityViolation(position, "hash_mismatch", "stored hash differs")

            if not meets_difficulty(block.hash, self.difficulty):
                return IntegrityViolation(
                    position, "difficulty", f"fewer than {self.difficulty} leading zeros"
                )

        return None

    def validate(self) -> bool:
        """True only if every block passes every integrity check."""
        violation = self.find_integrity_violation()
        if violation is not None:
            logger.warning(
                f"[LEDGER] Integrity check failed at #{violation.index}: "
                f"{violation.reason} ({violation.detail})"
            )
            return False
        return True
