from __future__ import annotations
import hashlib
from .keccakhash import (
    KeccakHash,
    Shake,
    UnsupportedOutputSize,
    keccak,
    keccak256,
    shake,
)
from .ecc import (
    KeyPair,
    MissingKey,
    InvalidKey,
    InvalidDigest,
    InvalidSignature,
    sign,
    recover_public_key,
    verify_signature,
)

__all__ = [
    "KeccakHash",
    "Shake",
    "KeyPair",
    "keccak",
    "keccak256",
    "shake",
    "sha256",
    "double_sha256",
    "sign",
    "recover_public_key",
    "verify_signature",
    "UnsupportedOutputSize",
    "MissingKey",
    "InvalidKey",
    "InvalidDigest",
    "InvalidSignature",
]


def sha256(data: bytes) -> bytes:
    return hashlib.sha256(data).digest()


def double_sha256(data: bytes) -> bytes:
    return hashlib.sha256(hashlib.sha256(data).digest()).digest()
