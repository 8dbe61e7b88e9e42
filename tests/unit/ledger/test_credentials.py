"""
Credential Record Unit Tests
============================

[UNIT] Tests for ledger/credentials.py.
"""

import pytest


class TestSigningMessage:

    def test_canonical_form(self):
        from ledger.credentials import signing_message

        assert signing_message("fullName", "AHMAD") == b'{"attribute":"fullName","value":"AHMAD"}'

    def test_attribute_is_bound(self):
        """Same value under another attribute is another message."""
        from ledger.credentials import signing_message

        assert signing_message("city", "Ipoh") != signing_message("state", "Ipoh")


class TestCredentialRecord:

    def test_build_single_hash(self, key_pair):
        from core.crypto import digest
        from ledger.credentials import build_record

        record = build_record("fullName", "AHMAD BIN ABDULLAH", key_pair.signing_key)

        assert record.attribute == "fullName"
        assert record.hashed_value == digest("AHMAD BIN ABDULLAH")
        assert record.display_value == "AHMAD BIN ABDULLAH"

    def test_build_double_hash(self, key_pair):
        from core.crypto import digest
        from ledger.credentials import build_record

        record = build_record("icNumber", "901231-14-5677", key_pair.signing_key, double_hash=True)

        assert record.hashed_value == digest(digest("901231-14-5677"))

    def test_signature_independent_of_hashing(self, key_pair):
        """Double hashing changes hashed_value only, verification is the same."""
        from ledger.credentials import build_record, verify_record

        single = build_record("icNumber", "901231-14-5677", key_pair.signing_key)
        double = build_record("icNumber", "901231-14-5677", key_pair.signing_key, double_hash=True)

        assert single.hashed_value != double.hashed_value
        assert verify_record(single, "901231-14-5677", key_pair.verify_key)
        assert verify_record(double, "901231-14-5677", key_pair.verify_key)

    def test_verify_wrong_value(self, key_pair):
        from ledger.credentials import build_record, verify_record

        record = build_record("fullName", "AHMAD", key_pair.signing_key)
        assert not verify_record(record, "AHMED", key_pair.verify_key)

    def test_verify_wrong_key(self, key_pair, other_key_pair):
        from ledger.credentials import build_record, verify_record

        record = build_record("fullName", "AHMAD", key_pair.signing_key)
        assert not verify_record(record, "AHMAD", other_key_pair.verify_key)

    def test_build_without_key(self):
        from core.errors import CryptoFailure
        from ledger.credentials import build_record

        with pytest.raises(CryptoFailure):
            build_record("fullName", "AHMAD", None)

    def test_to_dict_from_dict(self, key_pair):
        from ledger.credentials import CredentialRecord, build_record

        record = build_record("city", "Ipoh", key_pair.signing_key)
        data = record.to_dict()

        assert set(data) == {"attribute", "hashed_value", "signature", "display_value"}
        assert CredentialRecord.from_dict(data) == record

    def test_to_dict_omits_missing_display_value(self):
        from ledger.credentials import CredentialRecord

        record = CredentialRecord(attribute="a", hashed_value="h", signature="s")
        assert "display_value" not in record.to_dict()
