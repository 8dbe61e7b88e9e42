"""
Blocks and Payloads
===================

[LEDGER] A block is content-addressed and mined:

    hash = SHA256( [index, timestamp, payload, previous_hash] ‖ nonce )

where the bracketed part is canonical JSON (sorted keys, compact
separators, ASCII) and the nonce is appended in decimal. A hash is valid
when it starts with `difficulty` zero hex digits.

Payloads are a closed set of variants, tagged by `kind`:
- genesis          - sentinel, index 0 only
- revocation       - marks an earlier block as revoked
- credential       - one credential record (legacy single-field block)
- credential_set   - all records of one identity, optional subject label
"""

import json
import logging
import time
from dataclasses import dataclass, field
from typing import Any, ClassVar, Dict, Optional, Tuple, Union

from config import config
from core.crypto import digest
from ledger.credentials import CredentialRecord

logger = logging.getLogger(__name__)


# ============================================================================
# Payload variants
# ============================================================================

@dataclass(frozen=True)
class GenesisPayload:
    """Fixed sentinel payload of block 0."""

    KIND: ClassVar[str] = "genesis"

    data: str = field(default_factory=lambda: config.ledger.genesis_data)

    def to_dict(self) -> Dict[str, Any]:
        return {"kind": self.KIND, "data": self.data}


@dataclass(frozen=True)
class RevocationMarker:
    """Invalidates the block at `target_index` without touching it."""

    KIND: ClassVar[str] = "revocation"

    target_index: int

    def to_dict(self) -> Dict[str, Any]:
        return {"kind": self.KIND, "target_index": self.target_index}


@dataclass(frozen=True)
class SingleCredentialPayload:
    """One credential record."""

    KIND: ClassVar[str] = "credential"

    record: CredentialRecord

    def to_dict(self) -> Dict[str, Any]:
        return {"kind": self.KIND, "record": self.record.to_dict()}


@dataclass(frozen=True)
class MultiCredentialPayload:
    """A whole credential set (e.g. every field of one identity)."""

    KIND: ClassVar[str] = "credential_set"

    records: Tuple[CredentialRecord, ...]
    subject_label: Optional[str] = None

    def to_dict(self) -> Dict[str, Any]:
        data: Dict[str, Any] = {
            "kind": self.KIND,
            "records": [r.to_dict() for r in self.records],
        }
        if self.subject_label is not None:
            data["subject_label"] = self.subject_label
        return data


BlockPayload = Union[
    GenesisPayload,
    RevocationMarker,
    SingleCredentialPayload,
    MultiCredentialPayload,
]


def payload_from_dict(data: Dict[str, Any]) -> BlockPayload:
    """Rebuild a payload from its tagged dict form."""
    kind = data.get("kind")
    if kind == GenesisPayload.KIND:
        return GenesisPayload(data=data["data"])
    if kind == RevocationMarker.KIND:
        return RevocationMarker(target_index=int(data["target_index"]))
    if kind == SingleCredentialPayload.KIND:
        return SingleCredentialPayload(record=CredentialRecord.from_dict(data["record"]))
    if kind == MultiCredentialPayload.KIND:
        return MultiCredentialPayload(
            records=tuple(CredentialRecord.from_dict(r) for r in data["records"]),
            subject_label=data.get("subject_label"),
        )
    raise ValueError(f"Unknown payload kind: {kind!r}")


def payload_records(payload: BlockPayload) -> Tuple[CredentialRecord, ...]:
    """Credential records carried by a payload (empty for genesis/revocation)."""
    if isinstance(payload, SingleCredentialPayload):
        return (payload.record,)
    if isinstance(payload, MultiCredentialPayload):
        return payload.records
    if isinstance(payload, (GenesisPayload, RevocationMarker)):
        return ()
    raise TypeError(f"Unknown payload type: {type(payload).__name__}")


def find_record(payload: BlockPayload, attribute: str) -> Optional[CredentialRecord]:
    for record in payload_records(payload):
        if record.attribute == attribute:
            return record
    return None


# ============================================================================
# Hashing / mining
# ============================================================================

def block_header(index: int, timestamp: int, payload: BlockPayload, previous_hash: str) -> str:
    """Canonical text of everything a block hash covers except the nonce."""
    return json.dumps(
        [index, timestamp, payload.to_dict(), previous_hash],
        sort_keys=True,
        separators=(",", ":"),
    )


def compute_block_hash(
    index: int,
    timestamp: int,
    payload: BlockPayload,
    previous_hash: str,
    nonce: int,
) -> str:
    return digest(block_header(index, timestamp, payload, previous_hash) + str(nonce))


def meets_difficulty(block_hash: str, difficulty: int) -> bool:
    """True if the hash has at least `difficulty` leading zero hex digits."""
    return block_hash.startswith("0" * difficulty)


def now_ms() -> int:
    return int(time.time() * 1000)


@dataclass(frozen=True)
class Block:
    """
    One mined ledger entry.

    [LEDGER] Immutable once appended. Revocation is another block.
    """

    index: int
    timestamp: int
    payload: BlockPayload
    previous_hash: str
    hash: str
    nonce: int

    @property
    def kind(self) -> str:
        return self.payload.KIND

    def compute_hash(self) -> str:
        """Recompute the hash from the stored fields."""
        return compute_block_hash(
            self.index, self.timestamp, self.payload, self.previous_hash, self.nonce
        )

    def to_dict(self) -> Dict[str, Any]:
        return {
            "index": self.index,
            "timestamp": self.timestamp,
            "payload": self.payload.to_dict(),
            "previous_hash": self.previous_hash,
            "hash": self.hash,
            "nonce": self.nonce,
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "Block":
        return cls(
            index=int(data["index"]),
            timestamp=int(data["timestamp"]),
            payload=payload_from_dict(data["payload"]),
            previous_hash=data["previous_hash"],
            hash=data["hash"],
            nonce=int(data["nonce"]),
        )


def mine_block(
    index: int,
    timestamp: int,
    payload: BlockPayload,
    previous_hash: str,
    difficulty: int,
) -> Block:
    """
    Proof-of-work search: try nonces from 0 upward until the hash meets the
    difficulty. Unbounded; about 16**difficulty attempts on average.
    """
    header = block_header(index, timestamp, payload, previous_hash)
    started = time.perf_counter()
    nonce = 0
    block_hash = digest(header + str(nonce))
    while not meets_difficulty(block_hash, difficulty):
        nonce += 1
        block_hash = digest(header + str(nonce))

    logger.debug(
        f"[LEDGER] Mined block #{index} ({payload.KIND}) nonce={nonce} "
        f"in {time.perf_counter() - started:.3f}s"
    )
    return Block(
        index=index,
        timestamp=timestamp,
        payload=payload,
        previous_hash=previous_hash,
        hash=block_hash,
        nonce=nonce,
    )
