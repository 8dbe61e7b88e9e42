"""
Claim Proof Unit Tests
======================

[UNIT] Tests for zkp/claims.py named MyKad claims.
"""

import json

import pytest


CURRENT_YEAR = 2024


# ============================================================================
# Age claims
# ============================================================================

class TestAgeClaims:

    def test_age_over_18(self):
        from zkp.claims import ClaimKind, ClaimRequest, prove_age_over_18, verify_claim

        claim = prove_age_over_18(1990, current_year=CURRENT_YEAR)

        assert claim.kind == ClaimKind.AGE_OVER_18
        assert verify_claim(claim, ClaimRequest(ClaimKind.AGE_OVER_18))

    def test_age_over_21(self):
        from zkp.claims import ClaimKind, ClaimRequest, prove_age_over_21, verify_claim

        claim = prove_age_over_21(2000, current_year=CURRENT_YEAR)
        assert verify_claim(claim, ClaimRequest(ClaimKind.AGE_OVER_21))

    def test_underage_refused(self):
        from core.errors import PreconditionError
        from zkp.claims import prove_age_over_18, prove_age_over_21

        with pytest.raises(PreconditionError):
            prove_age_over_18(2010, current_year=CURRENT_YEAR)
        with pytest.raises(PreconditionError):
            prove_age_over_21(2005, current_year=CURRENT_YEAR)

    def test_age_18_proof_does_not_pass_as_21(self):
        from zkp.claims import ClaimKind, ClaimProof, ClaimRequest, prove_age_over_18, verify_claim

        claim = prove_age_over_18(1990, current_year=CURRENT_YEAR)
        relabeled = ClaimProof(ClaimKind.AGE_OVER_21, claim.proof, claim.commitment, claim.description)

        assert not verify_claim(relabeled, ClaimRequest(ClaimKind.AGE_OVER_21))

    def test_kind_mismatch(self):
        from zkp.claims import ClaimKind, ClaimRequest, prove_age_over_18, verify_claim

        claim = prove_age_over_18(1990, current_year=CURRENT_YEAR)
        assert not verify_claim(claim, ClaimRequest(ClaimKind.AGE_OVER_21))

    def test_age_in_range(self):
        from zkp.claims import ClaimKind, ClaimRequest, prove_age_in_range, verify_claim

        claim = prove_age_in_range(1990, 18, 60, current_year=CURRENT_YEAR)
        request = ClaimRequest(ClaimKind.AGE_RANGE, min_value=18, max_value=60)

        assert verify_claim(claim, request)
        assert "seed" not in claim.proof

    def test_age_in_range_default_bounds(self):
        """Request without bounds is checked against 0-100."""
        from zkp.claims import ClaimKind, ClaimRequest, prove_age_in_range, verify_claim

        claim = prove_age_in_range(1990, 0, 100, current_year=CURRENT_YEAR)
        assert verify_claim(claim, ClaimRequest(ClaimKind.AGE_RANGE))

    def test_age_out_of_range_refused(self):
        from core.errors import PreconditionError
        from zkp.claims import prove_age_in_range

        with pytest.raises(PreconditionError):
            prove_age_in_range(1950, 18, 60, current_year=CURRENT_YEAR)

    def test_age_range_bad_proof_json(self):
        from zkp.claims import ClaimKind, ClaimProof, ClaimRequest, verify_claim

        claim = ClaimProof(ClaimKind.AGE_RANGE, "not json", "c" * 64, "")
        assert not verify_claim(claim, ClaimRequest(ClaimKind.AGE_RANGE))

    def test_age_range_commitment_must_match(self):
        from zkp.claims import ClaimKind, ClaimProof, ClaimRequest, prove_age_in_range, verify_claim

        claim = prove_age_in_range(1990, 18, 60, current_year=CURRENT_YEAR)
        swapped = ClaimProof(claim.kind, claim.proof, "0" * 64, claim.description)

        assert not verify_claim(swapped, ClaimRequest(ClaimKind.AGE_RANGE, min_value=18, max_value=60))
        assert set(json.loads(claim.proof)) == {"lower", "upper"}


# ============================================================================
# Income
# ============================================================================

class TestIncomeClaim:

    def test_income_threshold(self):
        from zkp.claims import ClaimKind, ClaimRequest, prove_income_threshold, verify_claim

        claim = prove_income_threshold(5000, 3000)

        assert verify_claim(claim, ClaimRequest(ClaimKind.INCOME_THRESHOLD, threshold=3000))
        assert not verify_claim(claim, ClaimRequest(ClaimKind.INCOME_THRESHOLD, threshold=3001))

    def test_income_without_threshold(self):
        from zkp.claims import ClaimKind, ClaimRequest, prove_income_threshold, verify_claim

        claim = prove_income_threshold(5000, 3000)
        assert not verify_claim(claim, ClaimRequest(ClaimKind.INCOME_THRESHOLD))

    def test_income_too_low(self):
        from core.errors import PreconditionError
        from zkp.claims import prove_income_threshold

        with pytest.raises(PreconditionError):
            prove_income_threshold(2000, 3000)


# ============================================================================
# Boolean commitments
# ============================================================================

class TestBooleanClaims:

    def test_citizenship(self):
        from zkp.claims import ClaimKind, ClaimRequest, prove_citizenship, verify_claim

        claim = prove_citizenship("Malaysian Citizen")
        assert verify_claim(claim, ClaimRequest(ClaimKind.CITIZENSHIP))

    def test_non_citizen_refused(self):
        from core.errors import PreconditionError
        from zkp.claims import prove_citizenship

        with pytest.raises(PreconditionError):
            prove_citizenship("Permanent Resident")

    def test_residency(self):
        from zkp.claims import ClaimKind, ClaimRequest, prove_residency, verify_claim

        claim = prove_residency("Selangor", "901231-14-5677")

        assert verify_claim(claim, ClaimRequest(ClaimKind.RESIDENCY))
        assert "Selangor" not in claim.proof + claim.commitment + claim.description

    def test_unknown_state_refused(self):
        from core.errors import PreconditionError
        from zkp.claims import prove_residency

        with pytest.raises(PreconditionError):
            prove_residency("Atlantis", "901231-14-5677")

    def test_vaccination(self):
        from core.errors import PreconditionError
        from zkp.claims import ClaimKind, ClaimRequest, prove_vaccination_status, verify_claim

        assert verify_claim(prove_vaccination_status(True), ClaimRequest(ClaimKind.VACCINATION_STATUS))
        with pytest.raises(PreconditionError):
            prove_vaccination_status(False)

    def test_no_criminal_record(self):
        from core.errors import PreconditionError
        from zkp.claims import ClaimKind, ClaimRequest, prove_no_criminal_record, verify_claim

        assert verify_claim(prove_no_criminal_record(False), ClaimRequest(ClaimKind.NO_CRIMINAL_RECORD))
        with pytest.raises(PreconditionError):
            prove_no_criminal_record(True)

    def test_malformed_commitment_rejected(self):
        from zkp.claims import ClaimKind, ClaimProof, ClaimRequest, verify_claim

        claim = ClaimProof(ClaimKind.CITIZENSHIP, "a" * 64, "not-a-digest", "")
        assert not verify_claim(claim, ClaimRequest(ClaimKind.CITIZENSHIP))


# ============================================================================
# Serialization / info
# ============================================================================

class TestClaimMisc:

    def test_claim_dict_roundtrip(self):
        from zkp.claims import ClaimProof, prove_citizenship

        claim = prove_citizenship("Malaysian Citizen")
        assert ClaimProof.from_dict(claim.to_dict()) == claim

    def test_claim_info_for_every_kind(self):
        from zkp.claims import ClaimKind, get_claim_info

        for kind in ClaimKind:
            info = get_claim_info(kind)
            assert info.what_you_prove
            assert info.what_stays_hidden

    def test_claim_info_by_value(self):
        from zkp.claims import get_claim_info

        assert get_claim_info("age_over_18").what_you_prove == "Over 18 years old"
