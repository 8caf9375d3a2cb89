"""
Conversion helpers shared across the package.
"""
from __future__ import annotations
from decimal import Decimal, ROUND_DOWN, InvalidOperation
from typing import Union
from tron3 import settings


def to_sun(amount: Union[int, str, Decimal]) -> int:
    """
    Convert an amount in TRX to its integer SUN representation.

    Fractions smaller than 1 SUN are truncated. Floats are refused as they cannot represent most decimal amounts
    exactly; pass a `str` or `Decimal` instead.

    Args:
        amount: the amount in TRX.

    Raises:
        ValueError: if `amount` is a float or cannot be interpreted as a decimal number.
    """
    if isinstance(amount, float):
        raise ValueError(
            "Float amounts are not supported. Use an int, str or Decimal instead"
        )
    try:
        value = Decimal(amount)
    except InvalidOperation:
        raise ValueError(f"{amount} is not a valid amount")
    if not value.is_finite():
        raise ValueError(f"{amount} is not a valid amount")
    sun = value * settings.settings.network.sun_per_trx
    return int(sun.quantize(Decimal(1), rounding=ROUND_DOWN))


def from_sun(amount: int) -> Decimal:
    """
    Convert an amount in SUN to TRX.
    """
    return Decimal(amount) / Decimal(settings.settings.network.sun_per_trx)


def to_hex(data: bytes) -> str:
    return data.hex()


def strip_hex_prefix(value: str) -> str:
    """Remove an optional `0x` or `0X` prefix."""
    if value[:2] in ("0x", "0X"):
        return value[2:]
    return value


def hex_to_bytes(value: str) -> bytes:
    """
    Convert a hex string, optionally prefixed with `0x`, to bytes.

    Raises:
        ValueError: if `value` is not valid hex.
    """
    return bytes.fromhex(strip_hex_prefix(value))


def utf8_to_hex(value: str) -> str:
    return value.encode("utf-8").hex()


def hex_to_utf8(value: str) -> str:
    """
    Decode a hex string into UTF-8 text. Invalid byte sequences are replaced.
    """
    return hex_to_bytes(value).decode("utf-8", errors="replace")
