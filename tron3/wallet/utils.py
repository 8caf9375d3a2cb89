"""
TRON address utilities.

An address can be expressed in 3 forms

* raw: 21 bytes, network prefix followed by the 20 byte account identifier.
* hex: the raw bytes in lowercase hex (42 characters, starting with '41').
* base58check: the human readable form starting with 'T'.

All functions accept any of these forms and normalize them through `to_raw()`.
"""
from __future__ import annotations
import base58
from typing import Union
from tron3 import settings
from tron3.core import cryptography
from tron3.core.utils import strip_hex_prefix
from tron3.wallet.types import TronAddress

#: number of bytes of a raw address including the network prefix
ADDRESS_SIZE = 21
#: upper bound of the base58check form, 25 bytes never encode to more characters
ADDRESS_B58_MAX_LENGTH = 35

AddressLike = Union[bytes, bytearray, str]


class InvalidAddress(ValueError):
    """
    Raised when an address is malformed, has the wrong network prefix or fails checksum verification.
    """


def _address_prefix() -> int:
    return settings.settings.network.address_prefix


def _validate_raw(data: bytes) -> bytes:
    if len(data) != ADDRESS_SIZE:
        raise InvalidAddress(
            f"The address is wrong, because data (address value in bytes) length should be "
            f"{ADDRESS_SIZE}, got {len(data)}"
        )
    if data[0] != _address_prefix():
        raise InvalidAddress(
            f"The address prefix is not {_address_prefix():#04x}, got {data[0]:#04x}"
        )
    return bytes(data)


def _is_hex_shape(value: str) -> bool:
    if len(value) != ADDRESS_SIZE * 2:
        return False
    try:
        bytes.fromhex(value)
    except ValueError:
        return False
    return True


def to_raw(address: AddressLike) -> bytes:
    """
    Normalize an address to its 21 raw bytes.

    A raw address is validated and returned unchanged. A hex address (with or without `0x`) is validated and
    converted. Anything else is decoded as base58check.

    Args:
        address: raw bytes, hex or base58check address.

    Raises:
        InvalidAddress: if the length, network prefix, alphabet or checksum is not valid.
    """
    if isinstance(address, (bytes, bytearray)):
        return _validate_raw(address)
    if not isinstance(address, str):
        raise InvalidAddress(
            f"Unsupported address type {type(address).__name__}, expected str or bytes"
        )

    stripped = strip_hex_prefix(address)
    if _is_hex_shape(stripped):
        return _validate_raw(bytes.fromhex(stripped))

    if len(address) > ADDRESS_B58_MAX_LENGTH:
        raise InvalidAddress(
            f"The address is wrong, expected at most {ADDRESS_B58_MAX_LENGTH} base58 characters or "
            f"{ADDRESS_SIZE * 2} hex characters, got {len(address)} characters"
        )
    try:
        data = base58.b58decode_check(address)
    except ValueError as e:
        raise InvalidAddress(f"The address is wrong, {e}") from e
    return _validate_raw(data)


def to_checksummed(address: AddressLike) -> TronAddress:
    """
    Convert an address to its base58check form.

    Args:
        address: raw bytes, hex or base58check address.

    Raises:
        InvalidAddress: if the address is not valid.
    """
    return base58.b58encode_check(to_raw(address)).decode("utf-8")


def to_hex(address: AddressLike) -> str:
    """
    Convert an address to its lowercase hex form.

    Raises:
        InvalidAddress: if the address is not valid.
    """
    return to_raw(address).hex()


def public_key_to_address(public_key: bytes) -> bytes:
    """
    Derive the raw address belonging to a public key.

    Args:
        public_key: 65 byte uncompressed (0x04 prefixed) or 64 byte public key.

    Raises:
        ValueError: if the public key does not have a supported length.
    """
    if len(public_key) == 65 and public_key[0] == 0x04:
        public_key = public_key[1:]
    if len(public_key) != 64:
        raise ValueError(
            f"Expected a 64 or 65 byte uncompressed public key, got {len(public_key)} bytes"
        )
    digest = cryptography.keccak256(bytes(public_key))
    return bytes([_address_prefix()]) + digest[-20:]


def is_valid_address(address: AddressLike) -> bool:
    """
    Test if the provided address is a valid address.

    Args:
        address: an address.
    """
    try:
        validate_address(address)
    except InvalidAddress:
        return False
    return True


def validate_address(address: AddressLike) -> None:
    """
    Validate a given address. If address is not valid an exception will be raised.

    Args:
        address: an address.

    Raises:
        InvalidAddress: if the length, network prefix, alphabet or checksum is not valid.
    """
    to_raw(address)
