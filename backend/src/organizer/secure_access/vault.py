"""Vendor password encryption using AES-256-GCM.

Security considerations:
- AES-256-GCM authenticated encryption
- Key derived from SECRET_PEPPER with HKDF, under an info string separate
  from every other use of the pepper
- A fresh random 96-bit nonce per encryption
- The owning organization is bound as associated data, so a ciphertext
  copied into another tenant's row fails to decrypt
"""

import base64
import json
import os
from dataclasses import dataclass
from typing import Optional
from uuid import UUID

from cryptography.exceptions import InvalidTag
from cryptography.hazmat.primitives import hashes
from cryptography.hazmat.primitives.ciphers.aead import AESGCM
from cryptography.hazmat.primitives.kdf.hkdf import HKDF

from ..config import get_settings


class VaultError(Exception):
    """Raised when a stored secret cannot be decrypted."""
    pass


@dataclass
class EncryptedSecret:
    """Serialized envelope stored in secure_access_vendors.password_encrypted.

    Attributes:
        version: Envelope format version
        nonce: Base64-encoded nonce
        ciphertext: Base64-encoded ciphertext and tag
    """
    version: int
    nonce: str
    ciphertext: str

    def to_json(self) -> str:
        return json.dumps({"v": self.version, "n": self.nonce, "c": self.ciphertext})

    @classmethod
    def from_json(cls, data: str) -> "EncryptedSecret":
        parsed = json.loads(data)
        return cls(version=parsed["v"], nonce=parsed["n"], ciphertext=parsed["c"])


def org_context(org_id: UUID) -> bytes:
    return f"secure_access_vendor:{org_id}".encode()


class VendorVault:
    """Encrypts and decrypts vendor passwords.

    Example:
        vault = VendorVault()
        stored = vault.encrypt("BlueRiver-2025", org_id)
        assert vault.decrypt(stored, org_id) == "BlueRiver-2025"
    """

    HKDF_INFO = b"organizer-vendor-password-v1"

    def __init__(self, pepper: Optional[str] = None):
        material = (pepper or get_settings().SECRET_PEPPER).encode()
        self._key = HKDF(
            algorithm=hashes.SHA256(),
            length=32,
            salt=None,
            info=self.HKDF_INFO,
        ).derive(material)

    def encrypt(self, plaintext: str, org_id: UUID) -> str:
        """Encrypt a password and return the JSON envelope for storage."""
        nonce = os.urandom(12)
        ciphertext = AESGCM(self._key).encrypt(nonce, plaintext.encode("utf-8"), org_context(org_id))
        return EncryptedSecret(
            version=1,
            nonce=base64.b64encode(nonce).decode(),
            ciphertext=base64.b64encode(ciphertext).decode(),
        ).to_json()

    def decrypt(self, stored: str, org_id: UUID) -> str:
        """Decrypt a stored envelope.

        Raises:
            VaultError: If the envelope is malformed, was encrypted under a
                different key, belongs to another organization, or was tampered with
        """
        try:
            envelope = EncryptedSecret.from_json(stored)
        except (ValueError, KeyError, TypeError) as e:
            raise VaultError(f"Malformed secret envelope: {e}")

        if envelope.version != 1:
            raise VaultError(f"Unsupported encryption version: {envelope.version}")

        try:
            plaintext = AESGCM(self._key).decrypt(
                base64.b64decode(envelope.nonce),
                base64.b64decode(envelope.ciphertext),
                org_context(org_id),
            )
        except (InvalidTag, ValueError) as e:
            raise VaultError("Decryption failed - invalid key, wrong organization or tampered data") from e

        return plaintext.decode("utf-8")


_vault: Optional[VendorVault] = None


def get_vault() -> VendorVault:
    """Get or create the module-level vault."""
    global _vault
    if _vault is None:
        _vault = VendorVault()
    return _vault
