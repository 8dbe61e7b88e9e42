"""
Ledger Module
=============
Append-only, proof-of-work credential ledger:
- CredentialRecord: hashed + signed identity attribute
- Block / payload variants: genesis, revocation, credential, credential_set
- Blockchain: mining, linkage, revocation, validation
"""

from .credentials import (
    CredentialRecord,
    CredentialSpec,
    build_record,
    verify_record,
    signing_message,
)
from .block import (
    Block,
    BlockPayload,
    GenesisPayload,
    RevocationMarker,
    SingleCredentialPayload,
    MultiCredentialPayload,
    compute_block_hash,
    meets_difficulty,
    mine_block,
    payload_from_dict,
    payload_records,
)
from .chain import Blockchain, IntegrityViolation

__all__ = [
    "CredentialRecord",
    "CredentialSpec",
    "build_record",
    "verify_record",
    "signing_message",
    "Block",
    "BlockPayload",
    "GenesisPayload",
    "RevocationMarker",
    "SingleCredentialPayload",
    "MultiCredentialPayload",
    "compute_block_hash",
    "meets_difficulty",
    "mine_block",
    "payload_from_dict",
    "payload_records",
    "Blockchain",
    "IntegrityViolation",
]
