"""Unit tests for vendor password encryption"""

import json
from uuid import uuid4

import pytest

from organizer.secure_access.vault import VaultError, VendorVault


@pytest.fixture
def vault() -> VendorVault:
    return VendorVault(pepper="unit-test-pepper")


class TestVendorVault:

    def test_round_trip(self, vault):
        org_id = uuid4()
        stored = vault.encrypt("BlueRiver-2025", org_id)

        assert "BlueRiver-2025" not in stored
        assert vault.decrypt(stored, org_id) == "BlueRiver-2025"

    def test_envelope_format(self, vault):
        envelope = json.loads(vault.encrypt("Atlas#Vault9", uuid4()))
        assert set(envelope) == {"v", "n", "c"}
        assert envelope["v"] == 1

    def test_nonce_is_random(self, vault):
        org_id = uuid4()
        assert vault.encrypt("same", org_id) != vault.encrypt("same", org_id)

    def test_other_organization_cannot_decrypt(self, vault):
        stored = vault.encrypt("CedarAccess!", uuid4())

        with pytest.raises(VaultError):
            vault.decrypt(stored, uuid4())

    def test_other_key_cannot_decrypt(self, vault):
        org_id = uuid4()
        stored = vault.encrypt("CedarAccess!", org_id)

        with pytest.raises(VaultError):
            VendorVault(pepper="another-pepper").decrypt(stored, org_id)

    def test_tampered_ciphertext(self, vault):
        org_id = uuid4()
        envelope = json.loads(vault.encrypt("CedarAccess!", org_id))
        envelope["c"] = envelope["c"][:-4] + ("AAAA" if envelope["c"][-4:] != "AAAA" else "BBBB")

        with pytest.raises(VaultError):
            vault.decrypt(json.dumps(envelope), org_id)

    def test_malformed_envelope(self, vault):
        with pytest.raises(VaultError):
            vault.decrypt("not json", uuid4())

    def test_unsupported_version(self, vault):
        org_id = uuid4()
        envelope = json.loads(vault.encrypt("x", org_id))
        envelope["v"] = 2

        with pytest.raises(VaultError, match="Unsupported"):
            vault.decrypt(json.dumps(envelope), org_id)
