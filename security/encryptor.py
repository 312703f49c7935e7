"""AES-CBC encryption of token payload material."""

from __future__ import annotations

import base64
import binascii

from cryptography.exceptions import UnsupportedAlgorithm
from cryptography.hazmat.primitives import padding
from cryptography.hazmat.primitives.ciphers import Cipher, algorithms, modes

from .errors import (
    AlgorithmUnavailableError,
    BlockSizeMismatchError,
    InvalidKeyError,
    InvalidParametersError,
    PaddingMismatchError,
)

BLOCK_SIZE_BYTES = algorithms.AES.block_size // 8


class Encryptor:
    """Reversible encryption with a process-wide key and initialization vector."""

    def __init__(self, key: bytes, iv: bytes):
        try:
            algorithm = algorithms.AES(key)
        except ValueError as exc:
            raise InvalidKeyError(f"Invalid AES key size ({len(key) * 8} bits).") from exc

        if len(iv) != BLOCK_SIZE_BYTES:
            raise InvalidParametersError(
                f"Initialization vector must be {BLOCK_SIZE_BYTES} bytes, got {len(iv)}."
            )

        try:
            self._cipher = Cipher(algorithm, modes.CBC(iv))
        except UnsupportedAlgorithm as exc:
            raise AlgorithmUnavailableError("AES-CBC is not supported by the crypto backend.") from exc
        except ValueError as exc:
            raise InvalidParametersError(str(exc)) from exc

    @classmethod
    def from_hex(cls, key_hex: str, iv_hex: str) -> "Encryptor":
        """Build an encryptor from hex-encoded key material."""

        try:
            key = bytes.fromhex(key_hex)
            iv = bytes.fromhex(iv_hex)
        except (TypeError, ValueError) as exc:
            raise InvalidParametersError("Key material must be hex encoded.") from exc
        return cls(key, iv)

    def encrypt(self, plaintext: str) -> str:
        """Encrypt ``plaintext`` and return url-safe base64 ciphertext."""

        padder = padding.PKCS7(algorithms.AES.block_size).padder()
        padded = padder.update(plaintext.encode("utf-8")) + padder.finalize()

        encryptor = self._cipher.encryptor()
        ciphertext = encryptor.update(padded) + encryptor.finalize()
        return base64.urlsafe_b64encode(ciphertext).decode("ascii")

    def decrypt(self, token: str) -> str:
        """Reverse :meth:`encrypt`."""

        try:
            ciphertext = base64.urlsafe_b64decode(token.encode("ascii"))
        except (binascii.Error, UnicodeEncodeError, ValueError) as exc:
            raise InvalidParametersError("Ciphertext is not valid base64.") from exc

        if not ciphertext or len(ciphertext) % BLOCK_SIZE_BYTES:
            raise BlockSizeMismatchError(
                f"Ciphertext length {len(ciphertext)} is not a multiple of {BLOCK_SIZE_BYTES}."
            )

        decryptor = self._cipher.decryptor()
        padded = decryptor.update(ciphertext) + decryptor.finalize()

        unpadder = padding.PKCS7(algorithms.AES.block_size).unpadder()
        try:
            data = unpadder.update(padded) + unpadder.finalize()
        except ValueError as exc:
            raise PaddingMismatchError("Decrypted data has invalid padding.") from exc

        try:
            return data.decode("utf-8")
        except UnicodeDecodeError as exc:
            raise InvalidKeyError("Decrypted data is not text; the key does not match.") from exc
