"""AES-256-GCM envelope decryption for CinemaOS responses.

Key = PBKDF2-HMAC-SHA256(fixed secret, per-response salt, 100k rounds).
The provider sends a 16-byte GCM nonce; it is used as-is.
"""

from __future__ import annotations

import os

import structlog
from cryptography.exceptions import InvalidTag
from cryptography.hazmat.primitives import hashes
from cryptography.hazmat.primitives.ciphers import Cipher, algorithms, modes
from cryptography.hazmat.primitives.kdf.pbkdf2 import PBKDF2HMAC

from cinestream.domain.entities.stream import EncryptedEnvelope
from cinestream.domain.exceptions import DecryptionError

log = structlog.get_logger(__name__)

ENVELOPE_SECRET = "a1b2c3d4e4f6477658455678901477567890abcdef1234567890abcdef123456"
KDF_ITERATIONS = 100_000
KEY_LENGTH = 32
NONCE_LENGTH = 16
SALT_LENGTH = 16


def _from_hex(value: str, field_name: str) -> bytes:
    try:
        return bytes.fromhex(value)
    except ValueError as exc:
        raise DecryptionError(f"malformed hex in {field_name}") from exc


class EnvelopeCrypto:
    """Derives the per-response key and opens/seals envelopes."""

    def __init__(
        self,
        *,
        secret: str = ENVELOPE_SECRET,
        iterations: int = KDF_ITERATIONS,
    ) -> None:
        self._secret = secret.encode("utf-8")
        self._iterations = iterations

    def derive_key(self, salt: bytes) -> bytes:
        kdf = PBKDF2HMAC(
            algorithm=hashes.SHA256(),
            length=KEY_LENGTH,
            salt=salt,
            iterations=self._iterations,
        )
        return kdf.derive(self._secret)

    def decrypt(self, envelope: EncryptedEnvelope) -> str:
        """Return the UTF-8 plaintext of *envelope*.

        Raises:
            DecryptionError: Malformed hex, unusable nonce/tag length,
                tag verification failure or non-UTF-8 plaintext.
        """
        ciphertext = _from_hex(envelope.ciphertext, "encrypted")
        iv = _from_hex(envelope.iv, "cin")
        tag = _from_hex(envelope.auth_tag, "mao")
        salt = _from_hex(envelope.salt, "salt")

        key = self.derive_key(salt)
        try:
            decryptor = Cipher(algorithms.AES(key), modes.GCM(iv, tag)).decryptor()
            plaintext = decryptor.update(ciphertext) + decryptor.finalize()
        except InvalidTag as exc:
            raise DecryptionError("authentication tag mismatch") from exc
        except ValueError as exc:
            raise DecryptionError(f"invalid cipher parameters: {exc}") from exc

        try:
            text = plaintext.decode("utf-8")
        except UnicodeDecodeError as exc:
            raise DecryptionError("plaintext is not valid UTF-8") from exc

        log.debug(
            "cinemaos_envelope_decrypted",
            ciphertext_bytes=len(ciphertext),
            iv_bytes=len(iv),
        )
        return text

    def seal(
        self,
        plaintext: str,
        *,
        salt: bytes | None = None,
        iv: bytes | None = None,
    ) -> EncryptedEnvelope:
        """Encrypt *plaintext* into an envelope the provider would send."""
        salt = salt if salt is not None else os.urandom(SALT_LENGTH)
        iv = iv if iv is not None else os.urandom(NONCE_LENGTH)

        key = self.derive_key(salt)
        encryptor = Cipher(algorithms.AES(key), modes.GCM(iv)).encryptor()
        ciphertext = encryptor.update(plaintext.encode("utf-8")) + encryptor.finalize()
        return EncryptedEnvelope(
            ciphertext=ciphertext.hex(),
            iv=iv.hex(),
            auth_tag=encryptor.tag.hex(),
            salt=salt.hex(),
        )
