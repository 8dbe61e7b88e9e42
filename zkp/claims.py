"""
MyKad Claim Proofs
==================

[ZKP] Named claims a Malaysian identity holder can prove to a verifier.

Numeric claims (age, income) use the hash-chain threshold construction
from zkp.threshold.

[LIMITATION] Boolean claims (citizenship, residency, vaccination, no
criminal record) are tamper-evident commitments, not zero-knowledge
proofs:

    commitment = H(label ‖ seed)
    proof      = H(seed ‖ fixed_tag)

A verifier cannot recompute either value without the seed, so
verify_claim() only checks that both are well-formed digests of the
requested kind. They assert that the issuer saw a true fact when the
proof was generated. Nothing more.
"""

import datetime
import json
import logging
import re
from dataclasses import dataclass
from enum import Enum
from typing import Any, Dict, Optional

from config import config
from core.crypto import digest, generate_seed, hash_chain
from core.errors import PreconditionError
from identity.mykad import MALAYSIAN_STATES
from zkp.threshold import RangeProof, prove_range, prove_threshold, verify_range

logger = logging.getLogger(__name__)

_DIGEST_RE = re.compile(r"^[0-9a-f]{64}$")


class ClaimKind(str, Enum):
    AGE_OVER_18 = "age_over_18"
    AGE_OVER_21 = "age_over_21"
    AGE_RANGE = "age_range"
    CITIZENSHIP = "citizenship"
    RESIDENCY = "residency"
    INCOME_THRESHOLD = "income_threshold"
    VACCINATION_STATUS = "vaccination_status"
    NO_CRIMINAL_RECORD = "no_criminal_record"


BOOLEAN_CLAIMS = frozenset({
    ClaimKind.CITIZENSHIP,
    ClaimKind.RESIDENCY,
    ClaimKind.VACCINATION_STATUS,
    ClaimKind.NO_CRIMINAL_RECORD,
})


@dataclass(frozen=True)
class ClaimProof:
    """Proof for one named claim, as handed to a verifier."""

    kind: ClaimKind
    proof: str
    commitment: str
    description: str

    def to_dict(self) -> Dict[str, Any]:
        return {
            "kind": self.kind.value,
            "proof": self.proof,
            "commitment": self.commitment,
            "description": self.description,
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "ClaimProof":
        return cls(
            kind=ClaimKind(data["kind"]),
            proof=data["proof"],
            commitment=data["commitment"],
            description=data.get("description", ""),
        )


@dataclass(frozen=True)
class ClaimRequest:
    """What a verifier asks for."""

    kind: ClaimKind
    threshold: Optional[int] = None
    min_value: Optional[int] = None
    max_value: Optional[int] = None


@dataclass(frozen=True)
class ClaimInfo:
    what_you_prove: str
    what_stays_hidden: str
    real_world_use: str


CLAIM_INFO: Dict[ClaimKind, ClaimInfo] = {
    ClaimKind.AGE_OVER_18: ClaimInfo(
        "Over 18 years old",
        "Exact birthdate and current age",
        "Loan apps, alcohol purchases, adult services, online platforms",
    ),
    ClaimKind.AGE_OVER_21: ClaimInfo(
        "Over 21 years old",
        "Exact birthdate and current age",
        "Gambling licenses, certain financial services, casino entry",
    ),
    ClaimKind.AGE_RANGE: ClaimInfo(
        "Age within specified range (e.g., 18-60)",
        "Exact age and birthdate",
        "Employment eligibility, senior citizen benefits, insurance",
    ),
    ClaimKind.CITIZENSHIP: ClaimInfo(
        "Malaysian citizen status",
        "Full address, IC number, personal details",
        "Government benefits, voting eligibility, public services",
    ),
    ClaimKind.RESIDENCY: ClaimInfo(
        "Malaysian resident",
        "Full address and exact location",
        "State benefits, regional programs, local services",
    ),
    ClaimKind.INCOME_THRESHOLD: ClaimInfo(
        "Income above RM X threshold",
        "Exact salary and employer details",
        "Social assistance, credit checks, loan applications",
    ),
    ClaimKind.VACCINATION_STATUS: ClaimInfo(
        "Vaccinated against COVID-19",
        "Full medical history and vaccination details",
        "Healthcare access, travel clearance, event entry",
    ),
    ClaimKind.NO_CRIMINAL_RECORD: ClaimInfo(
        "Clean record / No convictions",
        "Full history and background details",
        "Employment screening, travel visas, professional licenses",
    ),
}


def get_claim_info(kind: ClaimKind) -> ClaimInfo:
    return CLAIM_INFO[ClaimKind(kind)]


def _current_year(current_year: Optional[int]) -> int:
    return current_year if current_year is not None else datetime.date.today().year


# ============================================================================
# Numeric claims
# ============================================================================

def _prove_age_over(kind: ClaimKind, minimum: int, birth_year: int, current_year: Optional[int]) -> ClaimProof:
    age = _current_year(current_year) - birth_year
    if age < minimum:
        raise PreconditionError(f"Cannot prove age over {minimum} - requirement not met")

    age_proof = prove_threshold(age, minimum)
    logger.info(f"[ZKP] Proof generated: {kind.value}")
    return ClaimProof(
        kind=kind,
        proof=age_proof.proof,
        commitment=age_proof.encrypted_threshold_value,
        description=f"Proven: Age ≥ {minimum} years (without revealing exact age)",
    )


def prove_age_over_18(birth_year: int, current_year: Optional[int] = None) -> ClaimProof:
    """Used for alcohol, adult services, loans."""
    return _prove_age_over(ClaimKind.AGE_OVER_18, 18, birth_year, current_year)


def prove_age_over_21(birth_year: int, current_year: Optional[int] = None) -> ClaimProof:
    """Used for certain licenses, gambling."""
    return _prove_age_over(ClaimKind.AGE_OVER_21, 21, birth_year, current_year)


def prove_age_in_range(
    birth_year: int,
    min_age: int,
    max_age: int,
    current_year: Optional[int] = None,
) -> ClaimProof:
    """
    Age range proof. The proof field carries both bound proofs as JSON,
    the commitment is the lower bound commitment.
    """
    age = _current_year(current_year) - birth_year
    if age < min_age or age > max_age:
        raise PreconditionError(f"Cannot prove age in range {min_age}-{max_age}")

    range_proof = prove_range(age, min_age, max_age)
    logger.info(f"[ZKP] Proof generated: {ClaimKind.AGE_RANGE.value}")
    return ClaimProof(
        kind=ClaimKind.AGE_RANGE,
        proof=json.dumps(range_proof.public_dict(), sort_keys=True, separators=(",", ":")),
        commitment=range_proof.lower.encrypted_threshold_value,
        description=f"Proven: Age between {min_age}-{max_age} years (exact age hidden)",
    )


def prove_income_threshold(actual_income: int, threshold_income: int) -> ClaimProof:
    """Same construction as age, over whole Ringgit."""
    actual = int(actual_income)
    threshold = int(threshold_income)
    if actual < threshold:
        raise PreconditionError(f"Cannot prove income ≥ RM{threshold} - actual income too low")

    income_proof = prove_threshold(actual, threshold)
    logger.info(f"[ZKP] Proof generated: {ClaimKind.INCOME_THRESHOLD.value}")
    return ClaimProof(
        kind=ClaimKind.INCOME_THRESHOLD,
        proof=income_proof.proof,
        commitment=income_proof.encrypted_threshold_value,
        description=f"Proven: Income ≥ RM{threshold} (exact salary hidden)",
    )


# ============================================================================
# Boolean claims
# ============================================================================

def _commit(kind: ClaimKind, label: str, description: str) -> ClaimProof:
    seed = generate_seed()
    tag = config.proofs.claim_tags[kind.value]
    logger.info(f"[ZKP] Commitment generated: {kind.value}")
    return ClaimProof(
        kind=kind,
        proof=digest(seed + tag),
        commitment=digest(label + seed),
        description=description,
    )


def prove_citizenship(citizenship: str) -> ClaimProof:
    """Used for voting, government benefits."""
    if citizenship != config.proofs.citizenship_label:
        raise PreconditionError("Cannot prove Malaysian citizenship - user is not a citizen")
    return _commit(
        ClaimKind.CITIZENSHIP,
        citizenship,
        "Proven: Malaysian Citizen (without revealing full identity details)",
    )


def prove_residency(state: str, ic_number: str) -> ClaimProof:
    """Used for state benefits. The state itself stays hidden."""
    if state not in MALAYSIAN_STATES:
        raise PreconditionError(f"Cannot prove residency - unknown state {state!r}")
    return _commit(
        ClaimKind.RESIDENCY,
        state + ic_number,
        "Proven: Malaysian Resident (state hidden)",
    )


def prove_vaccination_status(is_vaccinated: bool) -> ClaimProof:
    if not is_vaccinated:
        raise PreconditionError("Cannot prove vaccination - user is not vaccinated")
    return _commit(
        ClaimKind.VACCINATION_STATUS,
        "VACCINATED",
        "Proven: Vaccinated (without revealing medical history)",
    )


def prove_no_criminal_record(has_criminal_record: bool) -> ClaimProof:
    if has_criminal_record:
        raise PreconditionError("Cannot prove no criminal record - user has record")
    return _commit(
        ClaimKind.NO_CRIMINAL_RECORD,
        "NO_RECORD",
        "Proven: No Criminal Record (without revealing full history)",
    )


# ============================================================================
# Verification
# ============================================================================

def _is_digest(value: str) -> bool:
    return isinstance(value, str) and bool(_DIGEST_RE.match(value))


def _verify_age_range(claim_proof: ClaimProof, request: ClaimRequest) -> bool:
    try:
        range_proof = RangeProof.from_dict(json.loads(claim_proof.proof))
    except (ValueError, KeyError, TypeError):
        return False

    if range_proof.lower.encrypted_threshold_value != claim_proof.commitment:
        return False

    min_value = request.min_value if request.min_value is not None else config.proofs.default_range_min
    max_value = request.max_value if request.max_value is not None else config.proofs.default_range_max
    return verify_range(range_proof, min_value, max_value).valid


def verify_claim(claim_proof: ClaimProof, request: ClaimRequest) -> bool:
    """Dispatch on claim kind. A kind mismatch is always rejected."""
    if claim_proof.kind != request.kind:
        return False

    kind = claim_proof.kind
    if kind == ClaimKind.AGE_OVER_18:
        return hash_chain(claim_proof.proof, 18) == claim_proof.commitment
    if kind == ClaimKind.AGE_OVER_21:
        return hash_chain(claim_proof.proof, 21) == claim_proof.commitment
    if kind == ClaimKind.AGE_RANGE:
        return _verify_age_range(claim_proof, request)
    if kind == ClaimKind.INCOME_THRESHOLD:
        if request.threshold is None or request.threshold < 0:
            return False
        return hash_chain(claim_proof.proof, request.threshold) == claim_proof.commitment
    if kind in BOOLEAN_CLAIMS:
        return _is_digest(claim_proof.proof) and _is_digest(claim_proof.commitment)
    raise TypeError(f"Unknown claim kind: {kind!r}")
