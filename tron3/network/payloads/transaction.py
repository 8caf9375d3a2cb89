from __future__ import annotations
import hashlib
from copy import deepcopy
from typing import Optional, Union
from jsonschema import validate  # type: ignore
from tron3.core import serialization, interfaces
from tron3.network.payloads import contracts

__all__ = ["Contract", "OpaqueContract", "TransactionRaw", "Transaction"]


class OpaqueContract:
    """
    A contract parameter of a type this package does not model. The encoded value is preserved as is.
    """

    def __init__(self, contract_type: int, type_url: str, value: bytes):
        self.TYPE = contract_type
        self.type_url = type_url
        self.value = value

    def __eq__(self, other):
        if not isinstance(other, type(self)):
            return False
        return (
            self.TYPE == other.TYPE
            and self.type_url == other.type_url
            and self.value == other.value
        )

    def to_array(self) -> bytes:
        return self.value

    def to_json(self) -> dict:
        return {"raw": self.value.hex()}


ContractParameterLike = Union[contracts.ContractParameter, OpaqueContract]


class _Any(serialization.ISerializable):
    """google.protobuf.Any"""

    def __init__(self, type_url: str = "", value: bytes = b""):
        self.type_url = type_url
        self.value = value

    def serialize(self, writer: serialization.BinaryWriter) -> None:
        writer.write_string_field(1, self.type_url)
        writer.write_bytes_field(2, self.value)

    def deserialize(self, reader: serialization.BinaryReader) -> None:
        for number, _, value in reader.read_fields():
            if number == 1:
                self.type_url = value.decode("utf-8")  # type: ignore
            elif number == 2:
                self.value = value  # type: ignore


class Contract(serialization.ISerializable, interfaces.IJson):
    """
    A single operation inside a transaction, wrapping the typed contract parameter.
    """

    def __init__(
        self, parameter: Optional[ContractParameterLike] = None, permission_id: int = 0
    ):
        self.parameter = parameter
        #: the account permission used for signing. 0 is the owner permission.
        self.permission_id = permission_id

    def __eq__(self, other):
        if not isinstance(other, type(self)):
            return False
        return (
            self.parameter == other.parameter
            and self.permission_id == other.permission_id
        )

    @property
    def type(self) -> int:
        if self.parameter is None:
            raise ValueError("Contract has no parameter")
        return int(self.parameter.TYPE)

    def serialize(self, writer: serialization.BinaryWriter) -> None:
        if self.parameter is None:
            raise ValueError("Cannot serialize a contract without parameter")
        writer.write_int64_field(1, self.type)
        writer.write_message_field(
            2, _Any(self.parameter.type_url, self.parameter.to_array())
        )
        writer.write_int64_field(5, self.permission_id)

    def deserialize(self, reader: serialization.BinaryReader) -> None:
        contract_type = 0
        any_ = _Any()
        self.permission_id = 0
        for number, _, value in reader.read_fields():
            if number == 1:
                contract_type = value  # type: ignore
            elif number == 2:
                any_ = _Any.deserialize_from_bytes(value)  # type: ignore
            elif number == 5:
                self.permission_id = value  # type: ignore
        cls = contracts.get_parameter_class(contract_type)
        if cls is None:
            self.parameter = OpaqueContract(contract_type, any_.type_url, any_.value)
        else:
            self.parameter = cls.deserialize_from_bytes(any_.value)

    def to_json(self) -> dict:
        """Convert object into JSON representation."""
        if self.parameter is None:
            raise ValueError("Cannot convert a contract without parameter")
        try:
            type_name = contracts.ContractType(self.type).to_protocol_name()
        except ValueError:
            type_name = str(self.type)
        json = {
            "parameter": {
                "value": self.parameter.to_json(),
                "type_url": self.parameter.type_url,
            },
            "type": type_name,
        }
        if self.permission_id:
            json["Permission_id"] = self.permission_id
        return json

    @classmethod
    def from_json(cls, json: dict) -> Contract:
        """
        Parse object out of JSON data.

        Raises:
            KeyError: if the data supplied does not contain the necessary keys.
            ValueError: if the contract type is not supported.
        """
        contract_type = contracts.ContractType.from_protocol_name(json["type"])
        param_cls = contracts.get_parameter_class(contract_type)
        if param_cls is None:
            raise ValueError(f"Unsupported contract type {json['type']}")
        return cls(
            param_cls.from_json(json["parameter"]["value"]),
            json.get("Permission_id", 0),
        )


class TransactionRaw(serialization.ISerializable, interfaces.IJson):
    """
    The signed portion of a transaction. Its protobuf encoding is hashed into the transaction identifier.
    """

    def __init__(
        self,
        contract: Optional[list[Contract]] = None,
        ref_block_bytes: bytes = b"",
        ref_block_hash: bytes = b"",
        expiration: int = 0,
        timestamp: int = 0,
        fee_limit: int = 0,
        data: bytes = b"",
        ref_block_num: int = 0,
    ):
        self.contract = contract if contract else []
        #: bytes 6 and 7 of the big endian reference block number
        self.ref_block_bytes = ref_block_bytes
        self.ref_block_num = ref_block_num
        #: bytes 8 to 15 of the reference block id
        self.ref_block_hash = ref_block_hash
        #: milliseconds since epoch after which the network rejects the transaction
        self.expiration = expiration
        #: milliseconds since epoch of creation
        self.timestamp = timestamp
        #: maximum SUN to burn for energy. Only used for smart contract transactions.
        self.fee_limit = fee_limit
        #: optional note attached to the transaction
        self.data = data

    def __eq__(self, other):
        if not isinstance(other, type(self)):
            return False
        return self.to_array() == other.to_array()

    def serialize(self, writer: serialization.BinaryWriter) -> None:
        writer.write_bytes_field(1, self.ref_block_bytes)
        writer.write_int64_field(3, self.ref_block_num)
        writer.write_bytes_field(4, self.ref_block_hash)
        writer.write_int64_field(8, self.expiration)
        writer.write_bytes_field(10, self.data)
        for c in self.contract:
            writer.write_message_field(11, c)
        writer.write_int64_field(14, self.timestamp)
        writer.write_int64_field(18, self.fee_limit)

    def deserialize(self, reader: serialization.BinaryReader) -> None:
        self.__init__()  # type: ignore
        for number, _, value in reader.read_fields():
            if number == 1:
                self.ref_block_bytes = value  # type: ignore
            elif number == 3:
                self.ref_block_num = value  # type: ignore
            elif number == 4:
                self.ref_block_hash = value  # type: ignore
            elif number == 8:
                self.expiration = value  # type: ignore
            elif number == 10:
                self.data = value  # type: ignore
            elif number == 11:
                self.contract.append(Contract.deserialize_from_bytes(value))  # type: ignore
            elif number == 14:
                self.timestamp = value  # type: ignore
            elif number == 18:
                self.fee_limit = value  # type: ignore

    def to_json(self) -> dict:
        """Convert object into JSON representation."""
        json: dict = {"contract": list(map(lambda c: c.to_json(), self.contract))}
        json["ref_block_bytes"] = self.ref_block_bytes.hex()
        json["ref_block_hash"] = self.ref_block_hash.hex()
        json["expiration"] = self.expiration
        if self.fee_limit:
            json["fee_limit"] = self.fee_limit
        if self.data:
            json["data"] = self.data.hex()
        json["timestamp"] = self.timestamp
        return json

    @classmethod
    def from_json(cls, json: dict) -> TransactionRaw:
        """Create object from JSON."""
        return cls(
            contract=list(map(lambda c: Contract.from_json(c), json["contract"])),
            ref_block_bytes=bytes.fromhex(json.get("ref_block_bytes", "")),
            ref_block_hash=bytes.fromhex(json.get("ref_block_hash", "")),
            expiration=json.get("expiration", 0),
            timestamp=json.get("timestamp", 0),
            fee_limit=json.get("fee_limit", 0),
            data=bytes.fromhex(json.get("data", "")),
            ref_block_num=json.get("ref_block_num", 0),
        )


class Transaction(serialization.ISerializable, interfaces.IJson):
    """
    A transaction as accepted by the node's `wallet/broadcasttransaction` endpoint.
    """

    json_schema = {
        "type": "object",
        "properties": {
            "txID": {"type": "string", "pattern": "^[0-9a-fA-F]{64}$"},
            "raw_data": {"type": "object"},
            "raw_data_hex": {"type": "string", "pattern": "^([0-9a-fA-F]{2})*$"},
            "signature": {
                "type": "array",
                "items": {"type": "string", "pattern": "^[0-9a-fA-F]{130}$"},
            },
            "visible": {"type": "boolean"},
        },
        "anyOf": [{"required": ["raw_data"]}, {"required": ["raw_data_hex"]}],
    }

    def __init__(
        self,
        raw_data: Optional[TransactionRaw] = None,
        signatures: Optional[list[bytes]] = None,
        txid: Optional[bytes] = None,
    ):
        self.raw_data = raw_data
        #: 65 byte signatures in signing order
        self.signatures = signatures if signatures else []
        #: SHA-256 digest of the encoded `raw_data`
        self.txid = txid

    def __eq__(self, other):
        if other is None:
            return False
        if type(self) != type(other):
            return False
        return self.to_array() == other.to_array()

    def __deepcopy__(self, memodict={}):
        # not the best, but faster than letting deepcopy() do introspection
        tx = Transaction.deserialize_from_bytes(self.to_array())
        tx.txid = self.txid
        return tx

    def __repr__(self):
        txid = self.txid.hex() if self.txid else None
        return f"<{self.__class__.__name__} at {hex(id(self))}> {txid}"

    def compute_txid(self) -> bytes:
        """
        Calculate the transaction identifier over the current `raw_data`.

        Raises:
            ValueError: if the transaction has no `raw_data`.
        """
        if self.raw_data is None:
            raise ValueError("Cannot compute transaction id without raw_data")
        return hashlib.sha256(self.raw_data.to_array()).digest()

    def copy(self) -> Transaction:
        return deepcopy(self)

    @property
    def is_signed(self) -> bool:
        return len(self.signatures) > 0

    def serialize(self, writer: serialization.BinaryWriter) -> None:
        if self.raw_data is not None:
            writer.write_message_field(1, self.raw_data)
        for s in self.signatures:
            writer.write_bytes_field(2, s)

    def deserialize(self, reader: serialization.BinaryReader) -> None:
        self.raw_data = None
        self.signatures = []
        self.txid = None
        for number, _, value in reader.read_fields():
            if number == 1:
                self.raw_data = TransactionRaw.deserialize_from_bytes(value)  # type: ignore
            elif number == 2:
                self.signatures.append(value)  # type: ignore
        if self.raw_data is not None:
            self.txid = self.compute_txid()

    def to_json(self) -> dict:
        """Convert object into JSON representation."""
        if self.raw_data is None:
            raise ValueError("Cannot convert a transaction without raw_data")
        json: dict = {"visible": False}
        if self.txid is not None:
            json["txID"] = self.txid.hex()
        json["raw_data"] = self.raw_data.to_json()
        json["raw_data_hex"] = self.raw_data.to_array().hex()
        if self.signatures:
            json["signature"] = list(map(lambda s: s.hex(), self.signatures))
        return json

    @classmethod
    def from_json(cls, json: dict) -> Transaction:
        """
        Create object from JSON.

        `raw_data_hex` is used when present as it is the exact encoding the node hashed. Otherwise `raw_data` is
        parsed and encoded.

        Raises:
            jsonschema.ValidationError: if the data supplied does not have the correct format.
        """
        validate(json, schema=cls.json_schema)
        if "raw_data_hex" in json:
            raw = TransactionRaw.deserialize_from_bytes(
                bytes.fromhex(json["raw_data_hex"])
            )
        else:
            raw = TransactionRaw.from_json(json["raw_data"])
        txid = bytes.fromhex(json["txID"]) if "txID" in json else None
        signatures = list(map(lambda s: bytes.fromhex(s), json.get("signature", [])))
        return cls(raw, signatures, txid)
