from __future__ import annotations
from typing import Optional
from tron3 import wallet_logger as logger
from tron3.core import cryptography
from tron3.wallet import utils as walletutils
from tron3.wallet.types import TronAddress


class Account:
    """
    Container class for handling key material. Can be used to sign transaction identifiers.

    The private key is held only in memory for the lifetime of the object and is never persisted.
    """

    def __init__(
        self,
        private_key: Optional[bytes] = None,
        watch_only: bool = False,
        address: Optional[walletutils.AddressLike] = None,
        label: Optional[str] = None,
    ):
        """
        Args:
            private_key: the 32 byte private key. A new key is generated if omitted and `watch_only` is False.
            watch_only: create an account without key material. Requires `address`.
            address: the address to watch. Ignored for accounts with key material.
            label: optional human readable name.

        Raises:
            ValueError: if `watch_only` is set without an address.
            InvalidAddress: if `address` is not valid.
            InvalidKey: if `private_key` is not a valid secp256k1 key.
        """
        self.label = label
        self._key_pair: Optional[cryptography.KeyPair] = None
        if watch_only:
            if address is None:
                raise ValueError("Creating a watch only account requires an address")
            self._raw_address = walletutils.to_raw(address)
        else:
            if private_key is None:
                self._key_pair = cryptography.KeyPair.generate()
            else:
                self._key_pair = cryptography.KeyPair(private_key)
            self._raw_address = walletutils.public_key_to_address(
                self._key_pair.public_key
            )

    def __eq__(self, other) -> bool:
        if not isinstance(other, type(self)):
            return False
        return self._raw_address == other._raw_address

    def __repr__(self):
        return f"<{self.__class__.__name__} at {hex(id(self))}> {self.address}"

    @property
    def address(self) -> TronAddress:
        """Base58check address."""
        return walletutils.to_checksummed(self._raw_address)

    @property
    def raw_address(self) -> bytes:
        return self._raw_address

    @property
    def hex_address(self) -> str:
        return self._raw_address.hex()

    @property
    def public_key(self) -> Optional[bytes]:
        """Uncompressed public key, or None for watch only accounts."""
        if self._key_pair is None:
            return None
        return self._key_pair.public_key

    @property
    def is_watchonly(self) -> bool:
        return self._key_pair is None

    def sign(self, digest: bytes) -> bytes:
        """
        Sign a 32 byte digest using the secp256k1 curve.

        Args:
            digest: the digest to sign, i.e. a transaction identifier.

        Raises:
            MissingKey: if the account is watch only.
            InvalidDigest: if `digest` is not 32 bytes.

        Returns:
            65 byte recoverable signature.
        """
        if self._key_pair is None:
            raise cryptography.MissingKey(
                "Cannot sign using a watch only account"
            )
        return self._key_pair.sign(digest)

    @classmethod
    def create_new(cls, label: Optional[str] = None) -> Account:
        """
        Instantiate and return a new account with a randomly generated private key.
        """
        acc = cls(label=label)
        logger.debug(f"Created new account {acc.address}")
        return acc

    @classmethod
    def from_private_key(cls, private_key: bytes, label: Optional[str] = None) -> Account:
        """
        Instantiate and return an account from a given private key.

        Args:
            private_key: 32 bytes, or its hex representation.
            label: optional human readable name.
        """
        return cls(private_key=private_key, label=label)

    @classmethod
    def watch_only(cls, address: walletutils.AddressLike) -> Account:
        """
        Instantiate and return a watch only account from any address form.

        Args:
            address: raw, hex or base58check address.
        """
        return cls(watch_only=True, address=address)
