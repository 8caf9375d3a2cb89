"""
Protocol buffers wire format reader and writer.

Transactions are identified by the SHA-256 digest of their protobuf encoded `raw_data`, so the encoding must match
the node byte for byte: fields are written in ascending field number order and fields holding their default value
(0, empty bytes, empty string) are omitted, exactly as proto3 does.
"""
from __future__ import annotations
import abc
from enum import IntEnum
from io import BytesIO, SEEK_END
from typing import Union, Type, TypeVar, Iterator, Tuple

ISerializable_T = TypeVar("ISerializable_T", bound="ISerializable")

__all__ = ["ISerializable", "BinaryReader", "BinaryWriter", "WireType"]

_UINT64_MASK = (1 << 64) - 1


class WireType(IntEnum):
    VARINT = 0
    I64 = 1
    LEN = 2
    I32 = 5


class ISerializable(abc.ABC):
    """
    An interface like class supporting the protobuf wire format.
    """

    @abc.abstractmethod
    def serialize(self, writer: BinaryWriter) -> None:
        """
        Serialize the object into a binary stream.

        Args:
            writer: instance.
        """

    @abc.abstractmethod
    def deserialize(self, reader: BinaryReader) -> None:
        """
        Deserialize the object from a binary stream.

        Args:
            reader: instance.
        """

    @classmethod
    def deserialize_from_bytes(
        cls: Type[ISerializable_T], data: Union[bytes, bytearray]
    ) -> ISerializable_T:
        """
        Parse data into an object instance.

        Args:
            data: protobuf encoded bytes.

        Returns:
            a deserialized instance of the class.
        """
        with BinaryReader(data) as br:
            payload = cls._serializable_init()
            payload.deserialize(br)
            return payload

    def to_array(self) -> bytes:
        """Serialize the object into a bytearray."""
        with BinaryWriter() as bw:
            self.serialize(bw)
            return bw.to_array()

    def __len__(self):
        """Return the length of the object in number of bytes."""
        return len(self.to_array())

    @classmethod
    def _serializable_init(cls):
        """
        If the interface inheritor has mandatory arguments, override this function and provide dummy values. These
        values will be overwritten by the deserialize_from_bytes method that relies on this function for class
        instantiation.
        """
        return cls()


class BinaryReader(object):
    """
    A convenience class for reading protobuf encoded data from byte streams.

    Context manager support is available to ensure proper cleanup of resources.

    Example:
    ::

        with BinaryReader(b'\\x08\\x96\\x01') as br:
            for field, wire_type, value in br.read_fields():
                ...
    """

    def __init__(self, stream: Union[bytes, bytearray]) -> None:
        """
        Create an instance.

        Args:
            stream: a stream to operate on.
        """
        super(BinaryReader, self).__init__()
        self._stream = BytesIO(stream)

    def __enter__(self):
        return self

    def __exit__(self, *args, **kwargs):
        self.close()

    def __len__(self):
        io = self._stream
        cur_pos = io.tell()
        io.seek(0, SEEK_END)
        full_size = io.tell()
        io.seek(cur_pos)
        return full_size

    def at_end(self) -> bool:
        return self._stream.tell() >= len(self)

    def read_byte(self) -> int:
        """
        Read a single byte.

        Raises:
            ValueError: if 1 byte of data cannot be read from the stream.
        """
        value = self._stream.read(1)
        if len(value) != 1:
            raise ValueError("Could not read byte from empty stream")
        return value[0]

    def read_bytes(self, length: int) -> bytes:
        """
        Read the specified number of bytes from the stream.

        Raises:
            ValueError: if `length` bytes of data cannot be read from the stream.
        """
        value = self._stream.read(length)
        if len(value) != length:
            raise ValueError(
                f"Could not read {length} bytes from stream. Only found {len(value)} bytes of data"
            )
        return value

    def read_varint(self) -> int:
        """
        Read an unsigned base 128 varint.

        Raises:
            ValueError: if the varint is truncated or longer than 10 bytes.
        """
        result = 0
        for shift in range(0, 70, 7):
            b = self.read_byte()
            result |= (b & 0x7F) << shift
            if not b & 0x80:
                return result & _UINT64_MASK
        raise ValueError("Invalid format - varint exceeds 10 bytes")

    def read_int64(self) -> int:
        """
        Read a varint and interpret it as a two's complement signed 64 bit integer.
        """
        value = self.read_varint()
        if value >= 1 << 63:
            value -= 1 << 64
        return value

    def read_tag(self) -> Tuple[int, WireType]:
        """
        Read a field key.

        Raises:
            ValueError: if the wire type is not supported.
        """
        key = self.read_varint()
        field = key >> 3
        if field == 0:
            raise ValueError("Invalid format - field number 0 is not allowed")
        try:
            wire_type = WireType(key & 0x7)
        except ValueError:
            raise ValueError(f"Unsupported wire type {key & 0x7} for field {field}")
        return field, wire_type

    def read_length_delimited(self) -> bytes:
        length = self.read_varint()
        return self.read_bytes(length)

    def read_fields(self) -> Iterator[Tuple[int, WireType, Union[int, bytes]]]:
        """
        Iterate over all remaining fields of the message.

        Varint fields yield their unsigned value, all other wire types yield their raw bytes.
        """
        while not self.at_end():
            field, wire_type = self.read_tag()
            if wire_type == WireType.VARINT:
                yield field, wire_type, self.read_varint()
            elif wire_type == WireType.LEN:
                yield field, wire_type, self.read_length_delimited()
            elif wire_type == WireType.I64:
                yield field, wire_type, self.read_bytes(8)
            else:
                yield field, wire_type, self.read_bytes(4)

    def close(self) -> None:
        self._stream.close()


class BinaryWriter(object):
    """
    A convenience class for writing protobuf encoded data.

    Context manager support is available to ensure proper cleanup of resources.

    Example:
    ::

        with BinaryWriter() as bw:
            bw.write_uint64_field(1, 150)
            data = bw.to_array()
    """

    def __init__(self, stream: Union[bytes, bytearray] = None) -> None:
        """
        Create an instance.

        Args:
            stream: a stream to operate on.
        """
        super(BinaryWriter, self).__init__()
        if stream is None:
            self._stream = BytesIO()
        else:
            self._stream = BytesIO(stream)

    def __enter__(self):
        return self

    def __exit__(self, *args, **kwargs):
        self.close()

    def write_bytes(self, value: Union[bytes, bytearray]) -> int:
        """
        Write raw bytes to the stream.

        Returns:
            the number of bytes written.
        """
        return self._stream.write(value)

    def write_varint(self, value: int) -> int:
        """
        Write an integer as base 128 varint. Negative values are written as their 64 bit two's complement,
        taking 10 bytes.

        Raises:
            ValueError: if the value does not fit in 64 bits.
        """
        if not -(1 << 63) <= value <= _UINT64_MASK:
            raise ValueError(f"Value {value} does not fit in 64 bits")
        value &= _UINT64_MASK
        data = bytearray()
        while True:
            to_write = value & 0x7F
            value >>= 7
            if value:
                data.append(to_write | 0x80)
            else:
                data.append(to_write)
                break
        return self.write_bytes(data)

    def write_tag(self, field: int, wire_type: WireType) -> int:
        return self.write_varint((field << 3) | int(wire_type))

    def write_uint64_field(self, field: int, value: int) -> None:
        """
        Write a varint field. Nothing is written for 0.
        """
        if value:
            self.write_tag(field, WireType.VARINT)
            self.write_varint(value)

    # int64, enums and bool share the varint encoding
    write_int64_field = write_uint64_field

    def write_bool_field(self, field: int, value: bool) -> None:
        self.write_uint64_field(field, int(value))

    def write_bytes_field(self, field: int, value: bytes) -> None:
        """
        Write a length delimited field. Nothing is written for empty data.
        """
        if value:
            self.write_tag(field, WireType.LEN)
            self.write_varint(len(value))
            self.write_bytes(value)

    def write_string_field(self, field: int, value: str) -> None:
        self.write_bytes_field(field, value.encode("utf-8"))

    def write_message_field(self, field: int, value: ISerializable) -> None:
        """
        Write an embedded message. Unlike scalar fields an embedded message is written even if it is empty.
        """
        data = value.to_array()
        self.write_tag(field, WireType.LEN)
        self.write_varint(len(data))
        self.write_bytes(data)

    def to_array(self) -> bytes:
        """
        Return the written data.
        """
        return self._stream.getvalue()

    def close(self) -> None:
        self._stream.close()
