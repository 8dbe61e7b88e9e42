"""
Credential Records
==================

A credential record binds one identity attribute to its value twice:
- hashed_value: digest(value), or digest(digest(value)) for sensitive
  fields such as IC numbers. Used for tamper detection and display.
- signature: Ed25519 over (attribute, value) in plaintext. Used for
  authenticity. It does not depend on how many times the value was hashed.
"""

import json
from dataclasses import dataclass
from typing import Any, Dict, Optional

from nacl.signing import SigningKey

from core.crypto import PublicKeyLike, digest, sign, verify


def signing_message(attribute: str, value: str) -> bytes:
    """Canonical bytes for attribute ‖ value."""
    data = {"attribute": attribute, "value": value}
    return json.dumps(data, sort_keys=True, separators=(",", ":")).encode("utf-8")


@dataclass(frozen=True)
class CredentialSpec:
    """Input for one field of a credential set."""

    attribute: str
    value: str
    double_hash: bool = False


@dataclass(frozen=True)
class CredentialRecord:
    """Hashed + signed attribute as stored inside a block."""

    attribute: str
    hashed_value: str
    signature: str
    # Plaintext kept for local presentation only. Never used for verification.
    display_value: Optional[str] = None

    def to_dict(self) -> Dict[str, Any]:
        data = {
            "attribute": self.attribute,
            "hashed_value": self.hashed_value,
            "signature": self.signature,
        }
        if self.display_value is not None:
            data["display_value"] = self.display_value
        return data

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "CredentialRecord":
        return cls(
            attribute=data["attribute"],
            hashed_value=data["hashed_value"],
            signature=data["signature"],
            display_value=data.get("display_value"),
        )


def hash_value(value: str, double_hash: bool = False) -> str:
    hashed = digest(value)
    return digest(hashed) if double_hash else hashed


def build_record(
    attribute: str,
    value: str,
    private_key: SigningKey,
    double_hash: bool = False,
) -> CredentialRecord:
    """
    Build a credential record for (attribute, value).

    Raises:
        CryptoFailure: signing key absent or malformed
    """
    return CredentialRecord(
        attribute=attribute,
        hashed_value=hash_value(value, double_hash),
        signature=sign(private_key, signing_message(attribute, value)),
        display_value=value,
    )


def verify_record(record: CredentialRecord, value: str, public_key: PublicKeyLike) -> bool:
    """Check a candidate plaintext against the record's signature."""
    return verify(public_key, signing_message(record.attribute, value), record.signature)
