"""
Encoding and decoding of function call data in the 32 byte word ABI format.

Static values are written inline in the head section. Dynamic values (`bytes`, `string`, `T[]` and fixed arrays of
dynamic values) are written to the tail section and referenced from the head by their byte offset.
"""
from __future__ import annotations
from collections.abc import Sequence
from typing import NamedTuple, Optional, Any
from tron3 import settings
from tron3.contracts import abi
from tron3.wallet import utils as walletutils

WORD_SIZE = 32


class ArityMismatch(ValueError):
    """
    Raised when the number of arguments does not match the number of function inputs.
    """


class AbiEncodingError(ValueError):
    """
    Raised when a value cannot be encoded as the requested ABI type.
    """


class AbiDecodingError(ValueError):
    """
    Raised when call data or return data does not match the expected ABI types.
    """


class AbiType(NamedTuple):
    #: elementary base name, e.g. `uint`, `bytes` or `address`. Empty for arrays.
    base: str
    #: bit size for integers, byte size for fixed bytes, otherwise 0
    size: int = 0
    #: element type for arrays
    element: Optional[AbiType] = None
    #: length of a fixed size array. None for dynamic arrays.
    length: Optional[int] = None

    @property
    def is_array(self) -> bool:
        return self.element is not None

    @property
    def is_dynamic(self) -> bool:
        if self.element is not None:
            return self.length is None or self.element.is_dynamic
        return self.base in ("bytes", "string") and self.size == 0

    @property
    def head_size(self) -> int:
        """Number of bytes the type takes in the head section."""
        if self.is_dynamic:
            return WORD_SIZE
        if self.element is not None:
            return self.length * self.element.head_size  # type: ignore
        return WORD_SIZE


def parse_type(type_: str) -> AbiType:
    """
    Parse a type tag.

    Raises:
        AbiEncodingError: if the type is not supported.
    """
    if type_.endswith("]"):
        idx = type_.rfind("[")
        if idx <= 0:
            raise AbiEncodingError(f"Invalid array type {type_}")
        inner = parse_type(type_[:idx])
        dim = type_[idx + 1 : -1]
        if dim == "":
            return AbiType("", element=inner)
        if not dim.isdigit() or int(dim) == 0:
            raise AbiEncodingError(f"Invalid array length in {type_}")
        return AbiType("", element=inner, length=int(dim))

    if type_ in ("bool", "address", "string"):
        return AbiType(type_)
    if type_ == "trcToken":
        return AbiType("uint", 256)
    if type_ == "bytes":
        return AbiType("bytes")
    if type_.startswith("bytes"):
        size = type_[5:]
        if size.isdigit() and 1 <= int(size) <= 32:
            return AbiType("bytes", int(size))
        raise AbiEncodingError(f"Invalid fixed bytes type {type_}")
    for base in ("uint", "int"):
        if type_.startswith(base):
            size = type_[len(base) :]
            if size == "":
                return AbiType(base, 256)
            if size.isdigit() and 8 <= int(size) <= 256 and int(size) % 8 == 0:
                return AbiType(base, int(size))
            raise AbiEncodingError(f"Invalid integer type {type_}")
    raise AbiEncodingError(f"Unsupported ABI type {type_}")


def _encode_uint(value: int) -> bytes:
    return value.to_bytes(WORD_SIZE, "big")


def _pad_right(data: bytes) -> bytes:
    remainder = len(data) % WORD_SIZE
    if remainder:
        data += b"\x00" * (WORD_SIZE - remainder)
    return data


def _to_bytes(value: Any, type_name: str) -> bytes:
    if isinstance(value, (bytes, bytearray)):
        return bytes(value)
    if isinstance(value, str):
        try:
            return bytes.fromhex(value[2:] if value[:2] in ("0x", "0X") else value)
        except ValueError:
            raise AbiEncodingError(f"Value {value!r} for type {type_name} is not valid hex")
    raise AbiEncodingError(
        f"Expected bytes or a hex string for type {type_name}, got {type(value).__name__}"
    )


def _encode_single(t: AbiType, value: Any) -> bytes:
    if t.element is not None:
        if not isinstance(value, Sequence) or isinstance(value, (str, bytes)):
            raise AbiEncodingError(
                f"Expected a list for an array type, got {type(value).__name__}"
            )
        if t.length is None:
            return _encode_uint(len(value)) + _encode_tuple(
                [t.element] * len(value), value
            )
        if len(value) != t.length:
            raise AbiEncodingError(
                f"Expected {t.length} array elements, got {len(value)}"
            )
        return _encode_tuple([t.element] * t.length, value)

    if t.base in ("uint", "int"):
        if isinstance(value, bool) or not isinstance(value, int):
            raise AbiEncodingError(
                f"Expected an int for type {t.base}{t.size}, got {type(value).__name__}"
            )
        if t.base == "uint":
            lower, upper = 0, 2**t.size - 1
        else:
            lower, upper = -(2 ** (t.size - 1)), 2 ** (t.size - 1) - 1
        if not lower <= value <= upper:
            raise AbiEncodingError(
                f"Value {value} out of range for type {t.base}{t.size}, expected {lower} <= value <= {upper}"
            )
        return (value % 2**256).to_bytes(WORD_SIZE, "big")
    if t.base == "bool":
        if value not in (True, False):
            raise AbiEncodingError(f"Expected a bool, got {value!r}")
        return _encode_uint(int(value))
    if t.base == "address":
        try:
            raw = walletutils.to_raw(value)
        except walletutils.InvalidAddress as e:
            raise AbiEncodingError(f"Invalid address argument: {e}") from e
        return raw[1:].rjust(WORD_SIZE, b"\x00")
    if t.base == "string":
        if not isinstance(value, str):
            raise AbiEncodingError(f"Expected a str, got {type(value).__name__}")
        data = value.encode("utf-8")
        return _encode_uint(len(data)) + _pad_right(data)
    if t.base == "bytes":
        data = _to_bytes(value, "bytes" if t.size == 0 else f"bytes{t.size}")
        if t.size == 0:
            return _encode_uint(len(data)) + _pad_right(data)
        if len(data) > t.size:
            raise AbiEncodingError(
                f"Value of {len(data)} bytes too long for type bytes{t.size}"
            )
        return data.ljust(WORD_SIZE, b"\x00")
    raise AbiEncodingError(f"Unsupported ABI type {t.base}")  # pragma: no cover


def _encode_tuple(types: Sequence[AbiType], values: Sequence[Any]) -> bytes:
    heads = []
    tails = []
    offset = sum(map(lambda t: t.head_size, types))
    for t, v in zip(types, values):
        encoded = _encode_single(t, v)
        if t.is_dynamic:
            heads.append(_encode_uint(offset))
            tails.append(encoded)
            offset += len(encoded)
        else:
            heads.append(encoded)
    return b"".join(heads) + b"".join(tails)


def encode_abi(types: Sequence[str], values: Sequence[Any]) -> bytes:
    """
    Encode `values` as the ABI types listed in `types`.

    Raises:
        ArityMismatch: if the number of values does not match the number of types.
        AbiEncodingError: if a type is not supported or a value does not fit its type.
    """
    if len(types) != len(values):
        raise ArityMismatch(
            f"Count of params and abi inputs must be identical, expected {len(types)} got {len(values)}"
        )
    return _encode_tuple(list(map(parse_type, types)), values)


def _read_word(data: bytes, position: int) -> bytes:
    if position < 0 or position + WORD_SIZE > len(data):
        raise AbiDecodingError(
            f"Cannot read 32 byte word at offset {position}, data is only {len(data)} bytes"
        )
    return data[position : position + WORD_SIZE]


def _read_uint(data: bytes, position: int) -> int:
    return int.from_bytes(_read_word(data, position), "big")


def _decode_single(t: AbiType, data: bytes, position: int) -> Any:
    if t.element is not None:
        if t.length is None:
            count = _read_uint(data, position)
            if count * WORD_SIZE > len(data) - position - WORD_SIZE:
                raise AbiDecodingError(f"Array length {count} exceeds available data")
            return _decode_tuple([t.element] * count, data, position + WORD_SIZE)
        return _decode_tuple([t.element] * t.length, data, position)

    if t.base in ("bytes", "string") and t.size == 0:
        length = _read_uint(data, position)
        start = position + WORD_SIZE
        if start + length > len(data):
            raise AbiDecodingError(
                f"Dynamic value of {length} bytes exceeds available data"
            )
        value = data[start : start + length]
        if t.base == "string":
            try:
                return value.decode("utf-8")
            except UnicodeDecodeError as e:
                raise AbiDecodingError(f"String value is not valid UTF-8: {e}") from e
        return value

    word = _read_word(data, position)
    if t.base == "uint":
        return int.from_bytes(word, "big") & (2**t.size - 1)
    if t.base == "int":
        value = int.from_bytes(word, "big", signed=True)
        # narrow to the declared width
        value &= 2**t.size - 1
        if value >= 2 ** (t.size - 1):
            value -= 2**t.size
        return value
    if t.base == "bool":
        value = int.from_bytes(word, "big")
        if value > 1:
            raise AbiDecodingError(f"Invalid boolean word {word.hex()}")
        return value == 1
    if t.base == "address":
        raw = bytes([settings.settings.network.address_prefix]) + word[-20:]
        return walletutils.to_checksummed(raw)
    if t.base == "bytes":
        return word[: t.size]
    raise AbiDecodingError(f"Unsupported ABI type {t.base}")  # pragma: no cover


def _decode_tuple(types: Sequence[AbiType], data: bytes, base: int) -> list:
    values = []
    position = base
    for t in types:
        if t.is_dynamic:
            offset = _read_uint(data, position)
            values.append(_decode_single(t, data, base + offset))
        else:
            values.append(_decode_single(t, data, position))
        position += t.head_size
    return values


def decode_abi(types: Sequence[str], data: bytes) -> list:
    """
    Decode `data` as the ABI types listed in `types`.

    Addresses are returned in base58check form, integers as `int`, fixed and dynamic bytes as `bytes`.

    Raises:
        AbiEncodingError: if a type is not supported.
        AbiDecodingError: if the data is truncated or malformed.
    """
    return _decode_tuple(list(map(parse_type, types)), bytes(data), 0)


def encode_parameters(fn: abi.AbiFunction, args: Sequence[Any]) -> bytes:
    """
    Encode the arguments of a function call, without the selector.

    Args:
        fn: the function to encode arguments for.
        args: one value per function input.

    Raises:
        ArityMismatch: if `len(args)` does not equal the number of inputs.
        AbiEncodingError: if a value does not fit its type.
    """
    if len(args) != len(fn.inputs):
        raise ArityMismatch(
            f"Count of params and abi inputs must be identical, {fn.name} expects "
            f"{len(fn.inputs)} got {len(args)}"
        )
    return encode_abi(list(map(lambda p: p.type, fn.inputs)), args)


def decode_parameters(fn: abi.AbiFunction, data: bytes) -> list:
    """
    Decode the return data of a function call according to its outputs.

    Raises:
        AbiDecodingError: if the data does not match the function outputs.
    """
    return decode_abi(list(map(lambda p: p.type, fn.outputs)), data)


def encode_call(fn: abi.AbiFunction, args: Sequence[Any]) -> bytes:
    """
    Encode the full call data: the 4 byte selector followed by the encoded arguments.
    """
    return fn.selector_id() + encode_parameters(fn, args)
