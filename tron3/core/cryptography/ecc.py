from __future__ import annotations
import coincurve  # type: ignore
from typing import Optional

#: order of the secp256k1 group
SECP256K1_N = 0xFFFFFFFFFFFFFFFFFFFFFFFFFFFFFFFEBAAEDCE6AF48A03BBFD25E8CD0364141

PRIVATE_KEY_SIZE = 32
DIGEST_SIZE = 32
SIGNATURE_SIZE = 65


class MissingKey(ValueError):
    """Raised when a signing operation is attempted without a private key."""


class InvalidKey(ValueError):
    """Raised when the private key is not a valid secp256k1 scalar."""


class InvalidDigest(ValueError):
    """Raised when the data to sign or verify is not a 32 byte digest."""


class InvalidSignature(ValueError):
    """Raised when a signature cannot be parsed or no public key can be recovered from it."""


def _validate_private_key(private_key: Optional[bytes]) -> bytes:
    if private_key is None or len(private_key) == 0:
        raise MissingKey("Missing private key")
    if isinstance(private_key, str):
        try:
            private_key = bytes.fromhex(private_key)
        except ValueError:
            raise InvalidKey("Private key is not valid hex")
    if len(private_key) != PRIVATE_KEY_SIZE:
        raise InvalidKey(
            f"Private key must be {PRIVATE_KEY_SIZE} bytes, got {len(private_key)}"
        )
    if not 0 < int.from_bytes(private_key, "big") < SECP256K1_N:
        raise InvalidKey("Private key is out of range for the secp256k1 curve")
    return bytes(private_key)


def _validate_digest(digest: bytes) -> None:
    if len(digest) != DIGEST_SIZE:
        raise InvalidDigest(
            f"Expected a {DIGEST_SIZE} byte digest, got {len(digest)} bytes"
        )


class KeyPair:
    """
    A secp256k1 private key with its derived public key.

    The private key is kept only for the lifetime of the object. Nothing in this package persists it.
    """

    def __init__(self, private_key: bytes):
        """
        Args:
            private_key: 32 byte private key, or its hex representation.

        Raises:
            MissingKey: if no key is supplied.
            InvalidKey: if the key has the wrong length or is out of range.
        """
        self.private_key = _validate_private_key(private_key)
        self._key = coincurve.PrivateKey(self.private_key)
        #: 65 byte uncompressed public key (0x04 || X || Y)
        self.public_key: bytes = self._key.public_key.format(compressed=False)

    def __eq__(self, other):
        if not isinstance(other, type(self)):
            return False
        return self.private_key == other.private_key

    def __repr__(self):
        return f"<{self.__class__.__name__} at {hex(id(self))}> {self.public_key.hex()}"

    @property
    def compressed_public_key(self) -> bytes:
        return self._key.public_key.format(compressed=True)

    @classmethod
    def generate(cls) -> KeyPair:
        """Create a key pair from a newly generated random private key."""
        return cls(coincurve.PrivateKey().secret)

    def sign(self, digest: bytes) -> bytes:
        return sign(digest, self.private_key)


def sign(digest: bytes, private_key: bytes) -> bytes:
    """
    Sign a 32 byte digest with ECDSA over secp256k1.

    The nonce is derived deterministically (RFC 6979) and the `s` value is normalized to the lower half of the curve
    order, so the same key and digest always produce the same signature.

    Args:
        digest: the 32 byte message digest. It is signed as is, no additional hashing is performed.
        private_key: the 32 byte private key.

    Raises:
        MissingKey: if no key is supplied.
        InvalidKey: if the key has the wrong length or is out of range.
        InvalidDigest: if `digest` is not 32 bytes.

    Returns:
        65 bytes `r || s || recovery_id`.
    """
    key = _validate_private_key(private_key)
    _validate_digest(digest)
    return coincurve.PrivateKey(key).sign_recoverable(bytes(digest), hasher=None)


def recover_public_key(digest: bytes, signature: bytes) -> bytes:
    """
    Recover the uncompressed public key that created `signature` over `digest`.

    Args:
        digest: the 32 byte message digest.
        signature: 65 bytes `r || s || recovery_id`. A recovery id of 27 or 28 is accepted as well.

    Raises:
        InvalidDigest: if `digest` is not 32 bytes.
        InvalidSignature: if the signature is malformed or no key can be recovered.
    """
    _validate_digest(digest)
    if len(signature) != SIGNATURE_SIZE:
        raise InvalidSignature(
            f"Expected a {SIGNATURE_SIZE} byte signature, got {len(signature)} bytes"
        )
    recovery_id = signature[64]
    if recovery_id >= 27:
        recovery_id -= 27
    if recovery_id > 3:
        raise InvalidSignature(f"Invalid recovery id {signature[64]}")
    try:
        public_key = coincurve.PublicKey.from_signature_and_message(
            bytes(signature[:64]) + bytes([recovery_id]), bytes(digest), hasher=None
        )
    except ValueError as e:
        raise InvalidSignature(f"Cannot recover public key: {e}") from e
    return public_key.format(compressed=False)


def verify_signature(digest: bytes, signature: bytes, public_key: bytes) -> bool:
    """
    Test if `signature` over `digest` was created by the private key belonging to `public_key`.

    Args:
        digest: the 32 byte message digest.
        signature: 65 bytes `r || s || recovery_id`.
        public_key: compressed or uncompressed public key.

    Raises:
        InvalidDigest: if `digest` is not 32 bytes.
        ValueError: if `public_key` has an invalid format.
    """
    expected = coincurve.PublicKey(bytes(public_key)).format(compressed=False)
    try:
        recovered = recover_public_key(digest, signature)
    except InvalidSignature:
        return False
    return recovered == expected
