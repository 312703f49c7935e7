"""Credential hashing, payload encryption and token handling."""

from .encryptor import Encryptor
from .errors import (
    AlgorithmUnavailableError,
    BlockSizeMismatchError,
    EncryptionError,
    InvalidKeyError,
    InvalidParametersError,
    PaddingMismatchError,
    SecurityError,
)
from .hashing import hash_password
from .tokens import TokenClass, TokenProvider, TokenValidationResult, TokenValidationType

__all__ = [
    "AlgorithmUnavailableError",
    "BlockSizeMismatchError",
    "EncryptionError",
    "Encryptor",
    "InvalidKeyError",
    "InvalidParametersError",
    "PaddingMismatchError",
    "SecurityError",
    "TokenClass",
    "TokenProvider",
    "TokenValidationResult",
    "TokenValidationType",
    "hash_password",
]
