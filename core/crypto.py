"""
Digest and Signature Primitives
===============================

[SECURITY] Everything the vault signs, hashes or chains goes through here:
- digest(): SHA-256 over canonical bytes, lowercase hex output
- hash_chain(): digest applied n times to a hex seed
- KeyPair / sign / verify: Ed25519 through PyNaCl

The key pair lives only in memory and the signing key has no export. A
session that ends loses the ability to sign. Verification
with the public half keeps working.
"""

from __future__ import annotations

import base64
import binascii
import hashlib
import logging
import os
from dataclasses import dataclass
from typing import Union

from nacl.encoding import Base64Encoder
from nacl.exceptions import BadSignatureError, CryptoError
from nacl.signing import SigningKey, VerifyKey

from config import config
from core.errors import CryptoFailure

logger = logging.getLogger(__name__)

# Ed25519 signature size (bytes)
SIGNATURE_SIZE = 64

# Ed25519 public key size (bytes)
PUBLIC_KEY_SIZE = 32

PublicKeyLike = Union[VerifyKey, bytes, str]


# ============================================================================
# Hashing
# ============================================================================

def digest(data: Union[bytes, str]) -> str:
    """SHA-256 of `data` as 64 lowercase hex chars. Strings are UTF-8 encoded."""
    if isinstance(data, str):
        data = data.encode("utf-8")
    return hashlib.sha256(data).hexdigest()


def hash_chain(seed: str, n: int) -> str:
    """
    Apply `digest` to `seed` n times.

    Each step hashes the hex text produced by the previous one, so
    hash_chain(hash_chain(s, a), b) == hash_chain(s, a + b).
    """
    if n < 0:
        raise ValueError(f"hash chain length must be >= 0, got {n}")
    result = seed
    for _ in range(n):
        result = digest(result)
    return result


def generate_seed(n_bytes: int = 0) -> str:
    """Fresh random seed from the OS CSPRNG, hex encoded."""
    return os.urandom(n_bytes or config.crypto.seed_bytes).hex()


# ============================================================================
# Key Pair
# ============================================================================

@dataclass(frozen=True)
class KeyPair:
    """
    Session signing key pair (Ed25519).

    [SECURITY] The signing half is never written anywhere. Pass the key pair
    (or one of its halves) explicitly to every sign/verify call.
    """

    signing_key: SigningKey
    verify_key: VerifyKey

    @classmethod
    def generate(cls) -> "KeyPair":
        """Create a fresh key pair from the OS random source."""
        signing_key = SigningKey.generate()
        return cls(signing_key=signing_key, verify_key=signing_key.verify_key)

    @classmethod
    def from_seed(cls, seed: bytes) -> "KeyPair":
        """Deterministic key pair from a 32 byte seed."""
        if not isinstance(seed, bytes) or len(seed) != 32:
            raise CryptoFailure("Seed must be exactly 32 bytes")
        signing_key = SigningKey(seed)
        return cls(signing_key=signing_key, verify_key=signing_key.verify_key)

    @property
    def public_key_b64(self) -> str:
        """Base64 of the verify key (44 chars)."""
        return self.verify_key.encode(encoder=Base64Encoder).decode("ascii")

    def __repr__(self) -> str:
        return f"KeyPair(public={self.public_key_b64})"


def generate_key_pair() -> KeyPair:
    key_pair = KeyPair.generate()
    logger.info(f"[CRYPTO] Generated session key pair: {key_pair.public_key_b64[:16]}...")
    return key_pair


def load_verify_key(public_key: PublicKeyLike) -> VerifyKey:
    """
    Normalize a public key given as VerifyKey, raw 32 bytes or base64 text.

    Raises:
        CryptoFailure: key absent or malformed
    """
    if isinstance(public_key, VerifyKey):
        return public_key
    if public_key is None:
        raise CryptoFailure("Public key is missing")
    try:
        if isinstance(public_key, bytes):
            if len(public_key) != PUBLIC_KEY_SIZE:
                raise CryptoFailure(
                    f"Public key must be {PUBLIC_KEY_SIZE} bytes, got {len(public_key)}"
                )
            return VerifyKey(public_key)
        if isinstance(public_key, str):
            return VerifyKey(public_key.encode("ascii"), encoder=Base64Encoder)
    except (CryptoError, ValueError, TypeError, binascii.Error) as e:
        raise CryptoFailure(f"Malformed public key: {e}") from e
    raise CryptoFailure(f"Unsupported public key type: {type(public_key).__name__}")


# ============================================================================
# Sign / Verify
# ============================================================================

def sign(private_key: SigningKey, message: bytes) -> str:
    """
    Sign `message` and return the detached signature as base64.

    Raises:
        CryptoFailure: key absent/malformed or message not bytes
    """
    if not isinstance(private_key, SigningKey):
        raise CryptoFailure("Signing key is missing or malformed")
    if not isinstance(message, bytes):
        raise CryptoFailure("Message to sign must be bytes")
    try:
        signed = private_key.sign(message)
    except CryptoError as e:
        raise CryptoFailure(f"Signing failed: {e}") from e
    return base64.b64encode(signed.signature).decode("ascii")


def verify(public_key: PublicKeyLike, message: bytes, signature: Union[str, bytes]) -> bool:
    """
    Check a detached signature. Pure predicate.

    Returns False for any modified message or signature, including
    signatures that are not valid base64 or have the wrong length.

    Raises:
        CryptoFailure: public key absent or malformed
    """
    verify_key = load_verify_key(public_key)
    if not isinstance(message, bytes):
        raise CryptoFailure("Message to verify must be bytes")

    if isinstance(signature, str):
        try:
            raw = base64.b64decode(signature.encode("ascii"), validate=True)
        except (binascii.Error, ValueError):
            return False
    elif isinstance(signature, bytes):
        raw = signature
    else:
        return False

    if len(raw) != SIGNATURE_SIZE:
        return False

    try:
        verify_key.verify(message, raw)
        return True
    except BadSignatureError:
        return False
