"""
Pure Python Keccak sponge construction.

The network uses the original Keccak submission (padding domain byte 0x01) and not the final FIPS-202 SHA-3
(domain byte 0x06), which is why the `hashlib.sha3_*` functions cannot be used. The SHAKE extendable output
functions on the other hand are the FIPS-202 variants (domain byte 0x1F).

See:
    https://keccak.team/keccak_specs_summary.html
    https://nvlpubs.nist.gov/nistpubs/FIPS/NIST.FIPS.202.pdf
"""
from __future__ import annotations
from typing import Union

__all__ = [
    "KeccakHash",
    "Shake",
    "UnsupportedOutputSize",
    "keccak",
    "keccak256",
    "shake",
    "SUPPORTED_OUTPUT_BITS",
    "SUPPORTED_SECURITY_LEVELS",
]

#: digest widths supported by `keccak()`
SUPPORTED_OUTPUT_BITS = (224, 256, 384, 512)
#: security levels supported by `shake()`
SUPPORTED_SECURITY_LEVELS = (128, 256)

_KECCAK_DOMAIN = 0x01
_SHAKE_DOMAIN = 0x1F
_STATE_BYTES = 200
_MASK64 = (1 << 64) - 1

# rotation offsets indexed by x + 5*y
_ROTATIONS = [
    0,  1,  62, 28, 27,
    36, 44, 6,  55, 20,
    3,  10, 43, 25, 39,
    41, 45, 15, 21, 8,
    18, 2,  61, 56, 14,
]  # fmt: skip

_ROUND_CONSTANTS = [
    0x0000000000000001,
    0x0000000000008082,
    0x800000000000808A,
    0x8000000080008000,
    0x000000000000808B,
    0x0000000080000001,
    0x8000000080008081,
    0x8000000000008009,
    0x000000000000008A,
    0x0000000000000088,
    0x0000000080008009,
    0x000000008000000A,
    0x000000008000808B,
    0x800000000000008B,
    0x8000000000008089,
    0x8000000000008003,
    0x8000000000008002,
    0x8000000000000080,
    0x000000000000800A,
    0x800000008000000A,
    0x8000000080008081,
    0x8000000000008080,
    0x0000000080000001,
    0x8000000080008008,
]


class UnsupportedOutputSize(ValueError):
    """
    Raised when a digest width or SHAKE security level is requested that is not supported.
    """


def _rotl64(value: int, n: int) -> int:
    return ((value << n) | (value >> (64 - n))) & _MASK64


def _keccak_f1600(lanes: list[int]) -> None:
    """Apply the 24 round permutation in place."""
    for rc in _ROUND_CONSTANTS:
        # theta
        c = [
            lanes[x] ^ lanes[x + 5] ^ lanes[x + 10] ^ lanes[x + 15] ^ lanes[x + 20]
            for x in range(5)
        ]
        d = [c[(x - 1) % 5] ^ _rotl64(c[(x + 1) % 5], 1) for x in range(5)]
        for i in range(25):
            lanes[i] ^= d[i % 5]
        # rho and pi
        b = [0] * 25
        for y in range(5):
            for x in range(5):
                b[y + 5 * ((2 * x + 3 * y) % 5)] = _rotl64(
                    lanes[x + 5 * y], _ROTATIONS[x + 5 * y]
                )
        # chi
        for y in range(5):
            row = 5 * y
            for x in range(5):
                lanes[row + x] = b[row + x] ^ (
                    ~b[row + (x + 1) % 5] & b[row + (x + 2) % 5]
                )
        # iota
        lanes[0] ^= rc


class _Sponge:
    def __init__(self, rate: int, domain: int):
        self._rate = rate
        self._domain = domain
        self._lanes = [0] * 25
        self._buffer = bytearray()

    @property
    def block_size(self) -> int:
        return self._rate

    def _absorb_block(self, block: Union[bytes, bytearray]) -> None:
        for i in range(self._rate // 8):
            self._lanes[i] ^= int.from_bytes(block[8 * i : 8 * i + 8], "little")
        _keccak_f1600(self._lanes)

    def update(self, data: Union[bytes, bytearray, memoryview]) -> None:
        """
        Feed more data into the sponge.
        """
        self._buffer.extend(data)
        rate = self._rate
        offset = 0
        while len(self._buffer) - offset >= rate:
            self._absorb_block(self._buffer[offset : offset + rate])
            offset += rate
        if offset:
            del self._buffer[:offset]

    def _copy_into(self, other: _Sponge) -> None:
        other._lanes = list(self._lanes)
        other._buffer = bytearray(self._buffer)

    def _squeeze(self, length: int) -> bytes:
        # work on a copy so the object can be updated after producing output
        lanes = list(self._lanes)
        block = bytearray(self._buffer)
        block.append(self._domain)
        block.extend(b"\x00" * (self._rate - len(block)))
        block[-1] |= 0x80
        for i in range(self._rate // 8):
            lanes[i] ^= int.from_bytes(block[8 * i : 8 * i + 8], "little")
        _keccak_f1600(lanes)

        output = bytearray()
        while True:
            for i in range(self._rate // 8):
                output.extend(lanes[i].to_bytes(8, "little"))
            if len(output) >= length:
                return bytes(output[:length])
            _keccak_f1600(lanes)


class KeccakHash(_Sponge):
    """
    Incremental Keccak hash object with a `hashlib` like interface.

    Example:
    ::

        h = KeccakHash(output_bits=256)
        h.update(b"transfer(address,uint256)")
        selector = h.digest()[:4]
    """

    def __init__(self, data: bytes = b"", output_bits: int = 256):
        """
        Args:
            data: optional initial data.
            output_bits: digest width. One of 224, 256, 384 or 512.

        Raises:
            UnsupportedOutputSize: if `output_bits` is not one of the supported widths.
        """
        if output_bits not in SUPPORTED_OUTPUT_BITS:
            raise UnsupportedOutputSize(
                f"Unsupported Keccak output size {output_bits}. Expected one of {SUPPORTED_OUTPUT_BITS}"
            )
        super(KeccakHash, self).__init__(
            _STATE_BYTES - 2 * (output_bits // 8), _KECCAK_DOMAIN
        )
        self.output_bits = output_bits
        if data:
            self.update(data)

    @property
    def name(self) -> str:
        return f"keccak-{self.output_bits}"

    @property
    def digest_size(self) -> int:
        return self.output_bits // 8

    def digest(self) -> bytes:
        return self._squeeze(self.digest_size)

    def hexdigest(self) -> str:
        return self.digest().hex()

    def copy(self) -> KeccakHash:
        h = KeccakHash(output_bits=self.output_bits)
        self._copy_into(h)
        return h


class Shake(_Sponge):
    """
    Incremental SHAKE extendable output function.
    """

    def __init__(self, data: bytes = b"", security_level: int = 128):
        """
        Args:
            data: optional initial data.
            security_level: 128 or 256.

        Raises:
            UnsupportedOutputSize: if `security_level` is not supported.
        """
        if security_level not in SUPPORTED_SECURITY_LEVELS:
            raise UnsupportedOutputSize(
                f"Unsupported SHAKE security level {security_level}. Expected one of {SUPPORTED_SECURITY_LEVELS}"
            )
        super(Shake, self).__init__(
            _STATE_BYTES - 2 * (security_level // 8), _SHAKE_DOMAIN
        )
        self.security_level = security_level
        if data:
            self.update(data)

    @property
    def name(self) -> str:
        return f"shake_{self.security_level}"

    def digest(self, length: int) -> bytes:
        """
        Args:
            length: number of output bytes.
        """
        if length < 0:
            raise ValueError(f"Output length cannot be negative, got {length}")
        return self._squeeze(length)

    def hexdigest(self, length: int) -> str:
        return self.digest(length).hex()

    def copy(self) -> Shake:
        h = Shake(security_level=self.security_level)
        self._copy_into(h)
        return h


def keccak(data: bytes, output_bits: int = 256) -> bytes:
    """
    Compute the Keccak digest of `data`.

    Args:
        data: the message to hash.
        output_bits: digest width. One of 224, 256, 384 or 512.

    Raises:
        UnsupportedOutputSize: if `output_bits` is not one of the supported widths.
    """
    return KeccakHash(data, output_bits).digest()


def keccak256(data: bytes) -> bytes:
    return KeccakHash(data, 256).digest()


def shake(data: bytes, security_level: int, output_bits: int) -> bytes:
    """
    Compute a SHAKE extendable output of `output_bits` bits.

    Args:
        data: the message to hash.
        security_level: 128 or 256.
        output_bits: requested output length in bits. Must be a positive multiple of 8.

    Raises:
        UnsupportedOutputSize: if `security_level` is not supported or `output_bits` is not a positive multiple of 8.
    """
    if output_bits <= 0 or output_bits % 8 != 0:
        raise UnsupportedOutputSize(
            f"SHAKE output length must be a positive multiple of 8 bits, got {output_bits}"
        )
    return Shake(data, security_level).digest(output_bits // 8)
