"""
Zero-Knowledge Proof Module
===========================
- threshold: hash-chain proofs for value >= threshold and ranges
- claims: named MyKad claims (age, income, citizenship, ...) and verify_claim
"""

from .threshold import (
    ThresholdProof,
    AgeProof,
    RangeProof,
    RangeVerification,
    prove_threshold,
    verify_threshold,
    prove_range,
    verify_range,
    explain_threshold_proof,
)
from .claims import (
    ClaimKind,
    ClaimProof,
    ClaimRequest,
    ClaimInfo,
    get_claim_info,
    prove_age_over_18,
    prove_age_over_21,
    prove_age_in_range,
    prove_citizenship,
    prove_residency,
    prove_income_threshold,
    prove_vaccination_status,
    prove_no_criminal_record,
    verify_claim,
)

__all__ = [
    "ThresholdProof",
    "AgeProof",
    "RangeProof",
    "RangeVerification",
    "prove_threshold",
    "verify_threshold",
    "prove_range",
    "verify_range",
    "explain_threshold_proof",
    "ClaimKind",
    "ClaimProof",
    "ClaimRequest",
    "ClaimInfo",
    "get_claim_info",
    "prove_age_over_18",
    "prove_age_over_21",
    "prove_age_in_range",
    "prove_citizenship",
    "prove_residency",
    "prove_income_threshold",
    "prove_vaccination_status",
    "prove_no_criminal_record",
    "verify_claim",
]
