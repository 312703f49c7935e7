"""Exceptions raised by the hashing, encryption and token primitives."""


class SecurityError(Exception):
    """Base class for infrastructure failures in the security layer."""


class AlgorithmUnavailableError(SecurityError):
    """A hash or cipher primitive could not be resolved."""


class EncryptionError(SecurityError):
    """Base class for symmetric encryption failures."""


class InvalidParametersError(EncryptionError):
    """The initialization vector or the encoded input is malformed."""


class PaddingMismatchError(EncryptionError):
    """Decrypted data does not carry valid PKCS7 padding."""


class BlockSizeMismatchError(EncryptionError):
    """Ciphertext length is not a multiple of the cipher block size."""


class InvalidKeyError(EncryptionError):
    """The key is unusable or does not match the ciphertext."""
