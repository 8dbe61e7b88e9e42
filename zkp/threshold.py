"""
Hash-Chain Threshold Proofs
===========================

[ZKP] Prove "value >= threshold" without revealing the value.

Prover (knows value v, public threshold t, secret seed S):
    proof      = H^(1 + v - t)(S)
    commitment = H^(v + 1)(S)

Verifier (knows proof, commitment, t):
    H^t(proof) == commitment

because H^t(H^(1 + v - t)(S)) = H^(v + 1)(S). The verifier learns only
whether the check passes.

[RANGE] "min <= v <= max" is two threshold proofs over independent seeds:
- lower: v >= min, as above
- upper: the reflected value r = 2*max - v against threshold max.
  r >= max  <=>  v <= max. Its proof element is H^(max - v + 1)(S_u) and its
  commitment H^(2*max - v + 1)(S_u).

The commitment must come from a party the verifier trusts (an issuer).
A prover that picks its own commitment can satisfy any threshold.
"""

import logging
from dataclasses import dataclass
from typing import Any, Dict, Optional

from core.crypto import digest, generate_seed, hash_chain
from core.errors import PreconditionError

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ThresholdProof:
    """Hash-chain proof that a hidden value meets a threshold."""

    proof: str
    encrypted_threshold_value: str
    # Prover side secret. Never part of what is handed to a verifier.
    seed: str = ""

    def public_dict(self) -> Dict[str, Any]:
        """What a verifier receives."""
        return {
            "proof": self.proof,
            "encrypted_threshold_value": self.encrypted_threshold_value,
        }

    def to_dict(self) -> Dict[str, Any]:
        data = self.public_dict()
        data["seed"] = self.seed
        return data

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "ThresholdProof":
        return cls(
            proof=data["proof"],
            encrypted_threshold_value=data["encrypted_threshold_value"],
            seed=data.get("seed", ""),
        )


# Age proofs are the original use of the construction
AgeProof = ThresholdProof


@dataclass(frozen=True)
class RangeProof:
    """Pair of independent threshold proofs for min <= v <= max."""

    lower: ThresholdProof
    upper: ThresholdProof

    def public_dict(self) -> Dict[str, Any]:
        return {"lower": self.lower.public_dict(), "upper": self.upper.public_dict()}

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "RangeProof":
        return cls(
            lower=ThresholdProof.from_dict(data["lower"]),
            upper=ThresholdProof.from_dict(data["upper"]),
        )


@dataclass(frozen=True)
class RangeVerification:
    lower_bound_valid: bool
    upper_bound_valid: bool

    @property
    def valid(self) -> bool:
        return self.lower_bound_valid and self.upper_bound_valid


def prove_threshold(actual_value: int, min_threshold: int, seed: Optional[str] = None) -> ThresholdProof:
    """
    Build a proof that `actual_value >= min_threshold`.

    Raises:
        PreconditionError: the claim does not hold (or a value is negative)
    """
    if actual_value < 0 or min_threshold < 0:
        raise PreconditionError("Threshold proofs need non-negative values")
    if actual_value < min_threshold:
        raise PreconditionError(
            f"Cannot prove value >= {min_threshold}: actual value too low"
        )

    seed_value = seed if seed is not None else generate_seed()
    proof = hash_chain(seed_value, 1 + actual_value - min_threshold)
    encrypted = hash_chain(seed_value, actual_value + 1)

    logger.debug(f"[ZKP] Threshold proof built for >= {min_threshold}")
    return ThresholdProof(proof=proof, encrypted_threshold_value=encrypted, seed=seed_value)


def verify_threshold(proof: str, encrypted_threshold_value: str, min_threshold: int) -> bool:
    """H^min_threshold(proof) == encrypted_threshold_value."""
    if min_threshold < 0 or not proof or not encrypted_threshold_value:
        return False
    return hash_chain(proof, min_threshold) == encrypted_threshold_value


def prove_range(
    actual_value: int,
    min_value: int,
    max_value: int,
    seed: Optional[str] = None,
) -> RangeProof:
    """
    Build a proof that `min_value <= actual_value <= max_value`.

    Raises:
        PreconditionError: value outside the range, or min > max
    """
    if min_value > max_value:
        raise PreconditionError(f"Empty range {min_value}-{max_value}")
    if actual_value < min_value or actual_value > max_value:
        raise PreconditionError(
            f"Cannot prove value in range {min_value}-{max_value}: value outside range"
        )

    seed_value = seed if seed is not None else generate_seed()
    # Sub-seeds keep the two chains unlinkable to each other
    lower_seed = digest(f"{seed_value}:lower")
    upper_seed = digest(f"{seed_value}:upper")

    lower = prove_threshold(actual_value, min_value, lower_seed)
    upper = prove_threshold(2 * max_value - actual_value, max_value, upper_seed)
    return RangeProof(lower=lower, upper=upper)


def verify_range(range_proof: RangeProof, min_value: int, max_value: int) -> RangeVerification:
    """Check both bounds independently."""
    return RangeVerification(
        lower_bound_valid=verify_threshold(
            range_proof.lower.proof,
            range_proof.lower.encrypted_threshold_value,
            min_value,
        ),
        upper_bound_valid=verify_threshold(
            range_proof.upper.proof,
            range_proof.upper.encrypted_threshold_value,
            max_value,
        ),
    )


def explain_threshold_proof(actual_value: int, min_threshold: int) -> str:
    """Human readable walk-through of the arithmetic for one proof."""
    k = 1 + actual_value - min_threshold
    total = actual_value + 1
    return f"""
Zero-Knowledge Threshold Proof
==============================

Given:
- Actual value: {actual_value} (PRIVATE - never revealed)
- Threshold: {min_threshold} (PUBLIC)
- Random seed: S (from trusted issuer)

Prover computes:
1. Proof      = hash^{k}(S)
2. Commitment = hash^{total}(S)

Verifier receives the proof, the commitment and the threshold {min_threshold}
and checks:
    hash^{min_threshold}(Proof) == Commitment ?

Math check:
hash^{min_threshold}(Proof) = hash^{min_threshold}(hash^{k}(S))
                   = hash^{min_threshold + k}(S)
                   = hash^{total}(S)
                   = Commitment

If the check passes, value >= {min_threshold} is proven and the verifier
learns nothing about the actual value.
"""
