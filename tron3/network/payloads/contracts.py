"""
Typed contract messages that make up the operation section of a transaction.

Each message lists its protobuf fields declaratively; (de)serialization and the JSON representation used by the
node's HTTP API (`visible: false`, i.e. addresses and bytes in hex) are derived from that list.
"""
from __future__ import annotations
from enum import IntEnum
from typing import NamedTuple, Optional, Type, Any
from tron3.core import serialization, interfaces
from tron3.wallet import utils as walletutils

TYPE_URL_PREFIX = "type.googleapis.com/protocol."


class ContractType(IntEnum):
    ACCOUNT_CREATE = 0
    TRANSFER = 1
    TRANSFER_ASSET = 2
    ASSET_ISSUE = 6
    PARTICIPATE_ASSET_ISSUE = 9
    FREEZE_BALANCE = 11
    UNFREEZE_BALANCE = 12
    UPDATE_ASSET = 15
    TRIGGER_SMART_CONTRACT = 31
    UPDATE_SETTING = 33
    UPDATE_ENERGY_LIMIT = 45

    def to_protocol_name(self) -> str:
        """Return the message name as used by the node, e.g. `TransferContract`."""
        if self == ContractType.TRIGGER_SMART_CONTRACT:
            return "TriggerSmartContract"
        return "".join(map(lambda p: p.title(), self.name.split("_"))) + "Contract"

    @classmethod
    def from_protocol_name(cls, name: str) -> ContractType:
        for t in cls:
            if t.to_protocol_name() == name:
                return t
        raise ValueError(f"{name} cannot be converted to {cls.__name__}")


class ResourceCode(IntEnum):
    BANDWIDTH = 0
    ENERGY = 1

    @classmethod
    def from_string(cls, value: str) -> ResourceCode:
        try:
            return cls[value.upper()]
        except KeyError:
            raise ValueError(
                f"{value} is not a valid resource, expected BANDWIDTH or ENERGY"
            )


class Field(NamedTuple):
    number: int
    name: str
    #: one of `address`, `bytes`, `string`, `int`, `enum`, `messages`
    kind: str
    #: enum class for `enum` fields, message class for `messages` fields
    type: Optional[Type[Any]] = None


def _default(f: Field):
    if f.kind in ("address", "bytes"):
        return b""
    if f.kind == "string":
        return ""
    if f.kind == "messages":
        return []
    if f.kind == "enum":
        return f.type(0)  # type: ignore
    return 0


class Message(serialization.ISerializable, interfaces.IJson):
    """
    Base class for protobuf messages described by a field list.
    """

    fields: tuple[Field, ...] = ()

    def __eq__(self, other):
        if type(self) != type(other):
            return False
        return all(
            map(lambda f: getattr(self, f.name) == getattr(other, f.name), self.fields)
        )

    def __repr__(self):
        return f"<{self.__class__.__name__} at {hex(id(self))}>"

    def serialize(self, writer: serialization.BinaryWriter) -> None:
        for f in sorted(self.fields, key=lambda f: f.number):
            value = getattr(self, f.name)
            if f.kind in ("address", "bytes"):
                writer.write_bytes_field(f.number, value)
            elif f.kind == "string":
                writer.write_string_field(f.number, value)
            elif f.kind == "messages":
                for item in value:
                    writer.write_message_field(f.number, item)
            else:
                writer.write_int64_field(f.number, int(value))

    def deserialize(self, reader: serialization.BinaryReader) -> None:
        by_number = {f.number: f for f in self.fields}
        for f in self.fields:
            setattr(self, f.name, _default(f))
        for number, wire_type, value in reader.read_fields():
            f = by_number.get(number)
            if f is None:
                continue
            expected = (
                serialization.WireType.VARINT
                if f.kind in ("int", "enum")
                else serialization.WireType.LEN
            )
            if wire_type != expected:
                raise ValueError(
                    f"Invalid format - field {f.name} of {self.__class__.__name__} has wire type "
                    f"{wire_type.name}, expected {expected.name}"
                )
            if f.kind in ("address", "bytes"):
                setattr(self, f.name, value)
            elif f.kind == "string":
                setattr(self, f.name, value.decode("utf-8"))  # type: ignore
            elif f.kind == "messages":
                getattr(self, f.name).append(f.type.deserialize_from_bytes(value))  # type: ignore
            elif f.kind == "enum":
                setattr(self, f.name, f.type(value))  # type: ignore
            else:
                v = int(value)  # type: ignore
                setattr(self, f.name, v - (1 << 64) if v >= 1 << 63 else v)

    def to_json(self) -> dict:
        """
        Convert object into JSON representation. Fields holding their default value are omitted.
        """
        json: dict = {}
        for f in self.fields:
            value = getattr(self, f.name)
            if value == _default(f):
                continue
            if f.kind in ("address", "bytes"):
                json[f.name] = value.hex()
            elif f.kind == "messages":
                json[f.name] = list(map(lambda m: m.to_json(), value))
            elif f.kind == "enum":
                json[f.name] = value.name
            else:
                json[f.name] = value
        return json

    @classmethod
    def from_json(cls, json: dict):
        """
        Parse object out of JSON data.

        Args:
            json: a dictionary. Addresses may be given in hex or base58check form, bytes in hex.

        Raises:
            ValueError: if a value cannot be converted.
        """
        obj = cls._serializable_init()
        for f in cls.fields:
            if f.name not in json:
                setattr(obj, f.name, _default(f))
                continue
            value = json[f.name]
            if f.kind == "address":
                setattr(obj, f.name, walletutils.to_raw(value))
            elif f.kind == "bytes":
                setattr(obj, f.name, bytes.fromhex(value))
            elif f.kind == "messages":
                setattr(obj, f.name, list(map(lambda m: f.type.from_json(m), value)))  # type: ignore
            elif f.kind == "enum":
                setattr(obj, f.name, f.type[value] if isinstance(value, str) else f.type(value))  # type: ignore
            else:
                setattr(obj, f.name, value)
        return obj


class ContractParameter(Message):
    """
    Base class for the operation specific messages carried in a transaction.
    """

    TYPE: ContractType

    @property
    def type_url(self) -> str:
        return TYPE_URL_PREFIX + self.TYPE.to_protocol_name()

    @property
    def owner(self) -> bytes:
        return getattr(self, "owner_address")


class TransferContract(ContractParameter):
    """Transfer of TRX."""

    TYPE = ContractType.TRANSFER
    fields = (
        Field(1, "owner_address", "address"),
        Field(2, "to_address", "address"),
        Field(3, "amount", "int"),
    )

    def __init__(
        self, owner_address: bytes = b"", to_address: bytes = b"", amount: int = 0
    ):
        self.owner_address = owner_address
        self.to_address = to_address
        #: amount in SUN
        self.amount = amount


class TransferAssetContract(ContractParameter):
    """Transfer of a TRC-10 token."""

    TYPE = ContractType.TRANSFER_ASSET
    fields = (
        Field(1, "asset_name", "bytes"),
        Field(2, "owner_address", "address"),
        Field(3, "to_address", "address"),
        Field(4, "amount", "int"),
    )

    def __init__(
        self,
        asset_name: bytes = b"",
        owner_address: bytes = b"",
        to_address: bytes = b"",
        amount: int = 0,
    ):
        #: the token id encoded as UTF-8, e.g. b"1000001"
        self.asset_name = asset_name
        self.owner_address = owner_address
        self.to_address = to_address
        self.amount = amount


class ParticipateAssetIssueContract(ContractParameter):
    """Purchase of a TRC-10 token during its sale window."""

    TYPE = ContractType.PARTICIPATE_ASSET_ISSUE
    fields = (
        Field(1, "owner_address", "address"),
        Field(2, "to_address", "address"),
        Field(3, "asset_name", "bytes"),
        Field(4, "amount", "int"),
    )

    def __init__(
        self,
        owner_address: bytes = b"",
        to_address: bytes = b"",
        asset_name: bytes = b"",
        amount: int = 0,
    ):
        #: the buyer
        self.owner_address = owner_address
        #: the issuer
        self.to_address = to_address
        self.asset_name = asset_name
        #: amount of SUN spent
        self.amount = amount


class FrozenSupply(Message):
    fields = (
        Field(1, "frozen_amount", "int"),
        Field(2, "frozen_days", "int"),
    )

    def __init__(self, frozen_amount: int = 0, frozen_days: int = 0):
        self.frozen_amount = frozen_amount
        self.frozen_days = frozen_days


class AssetIssueContract(ContractParameter):
    """Issuance of a new TRC-10 token."""

    TYPE = ContractType.ASSET_ISSUE
    fields = (
        Field(1, "owner_address", "address"),
        Field(2, "name", "bytes"),
        Field(3, "abbr", "bytes"),
        Field(4, "total_supply", "int"),
        Field(5, "frozen_supply", "messages", FrozenSupply),
        Field(6, "trx_num", "int"),
        Field(7, "precision", "int"),
        Field(8, "num", "int"),
        Field(9, "start_time", "int"),
        Field(10, "end_time", "int"),
        Field(16, "vote_score", "int"),
        Field(20, "description", "bytes"),
        Field(21, "url", "bytes"),
        Field(22, "free_asset_net_limit", "int"),
        Field(23, "public_free_asset_net_limit", "int"),
    )

    def __init__(
        self,
        owner_address: bytes = b"",
        name: bytes = b"",
        abbr: bytes = b"",
        total_supply: int = 0,
        frozen_supply: Optional[list[FrozenSupply]] = None,
        trx_num: int = 0,
        precision: int = 0,
        num: int = 0,
        start_time: int = 0,
        end_time: int = 0,
        vote_score: int = 0,
        description: bytes = b"",
        url: bytes = b"",
        free_asset_net_limit: int = 0,
        public_free_asset_net_limit: int = 0,
    ):
        self.owner_address = owner_address
        self.name = name
        self.abbr = abbr
        self.total_supply = total_supply
        self.frozen_supply = frozen_supply if frozen_supply else []
        #: SUN paid for `num` tokens
        self.trx_num = trx_num
        self.precision = precision
        self.num = num
        #: sale window in milliseconds since epoch
        self.start_time = start_time
        self.end_time = end_time
        self.vote_score = vote_score
        self.description = description
        self.url = url
        self.free_asset_net_limit = free_asset_net_limit
        self.public_free_asset_net_limit = public_free_asset_net_limit


class UpdateAssetContract(ContractParameter):
    TYPE = ContractType.UPDATE_ASSET
    fields = (
        Field(1, "owner_address", "address"),
        Field(2, "description", "bytes"),
        Field(3, "url", "bytes"),
        Field(4, "new_limit", "int"),
        Field(5, "new_public_limit", "int"),
    )

    def __init__(
        self,
        owner_address: bytes = b"",
        description: bytes = b"",
        url: bytes = b"",
        new_limit: int = 0,
        new_public_limit: int = 0,
    ):
        self.owner_address = owner_address
        self.description = description
        self.url = url
        self.new_limit = new_limit
        self.new_public_limit = new_public_limit


class FreezeBalanceContract(ContractParameter):
    """Stake TRX to obtain bandwidth or energy."""

    TYPE = ContractType.FREEZE_BALANCE
    fields = (
        Field(1, "owner_address", "address"),
        Field(2, "frozen_balance", "int"),
        Field(3, "frozen_duration", "int"),
        Field(10, "resource", "enum", ResourceCode),
        Field(15, "receiver_address", "address"),
    )

    def __init__(
        self,
        owner_address: bytes = b"",
        frozen_balance: int = 0,
        frozen_duration: int = 0,
        resource: ResourceCode = ResourceCode.BANDWIDTH,
        receiver_address: bytes = b"",
    ):
        self.owner_address = owner_address
        self.frozen_balance = frozen_balance
        #: in days
        self.frozen_duration = frozen_duration
        self.resource = resource
        #: delegate the resource to another account. Empty for the owner itself.
        self.receiver_address = receiver_address


class UnfreezeBalanceContract(ContractParameter):
    TYPE = ContractType.UNFREEZE_BALANCE
    fields = (
        Field(1, "owner_address", "address"),
        Field(10, "resource", "enum", ResourceCode),
        Field(13, "receiver_address", "address"),
    )

    def __init__(
        self,
        owner_address: bytes = b"",
        resource: ResourceCode = ResourceCode.BANDWIDTH,
        receiver_address: bytes = b"",
    ):
        self.owner_address = owner_address
        self.resource = resource
        self.receiver_address = receiver_address


class TriggerSmartContract(ContractParameter):
    """Call of a smart contract function."""

    TYPE = ContractType.TRIGGER_SMART_CONTRACT
    fields = (
        Field(1, "owner_address", "address"),
        Field(2, "contract_address", "address"),
        Field(3, "call_value", "int"),
        Field(4, "data", "bytes"),
        Field(5, "call_token_value", "int"),
        Field(6, "token_id", "int"),
    )

    def __init__(
        self,
        owner_address: bytes = b"",
        contract_address: bytes = b"",
        call_value: int = 0,
        data: bytes = b"",
        call_token_value: int = 0,
        token_id: int = 0,
    ):
        self.owner_address = owner_address
        self.contract_address = contract_address
        #: SUN sent along with the call
        self.call_value = call_value
        #: selector followed by the ABI encoded arguments
        self.data = data
        self.call_token_value = call_token_value
        self.token_id = token_id


class UpdateSettingContract(ContractParameter):
    TYPE = ContractType.UPDATE_SETTING
    fields = (
        Field(1, "owner_address", "address"),
        Field(2, "contract_address", "address"),
        Field(3, "consume_user_resource_percent", "int"),
    )

    def __init__(
        self,
        owner_address: bytes = b"",
        contract_address: bytes = b"",
        consume_user_resource_percent: int = 0,
    ):
        self.owner_address = owner_address
        self.contract_address = contract_address
        self.consume_user_resource_percent = consume_user_resource_percent


class UpdateEnergyLimitContract(ContractParameter):
    TYPE = ContractType.UPDATE_ENERGY_LIMIT
    fields = (
        Field(1, "owner_address", "address"),
        Field(2, "contract_address", "address"),
        Field(3, "origin_energy_limit", "int"),
    )

    def __init__(
        self,
        owner_address: bytes = b"",
        contract_address: bytes = b"",
        origin_energy_limit: int = 0,
    ):
        self.owner_address = owner_address
        self.contract_address = contract_address
        self.origin_energy_limit = origin_energy_limit


_registry: dict[ContractType, Type[ContractParameter]] = {
    c.TYPE: c
    for c in (
        TransferContract,
        TransferAssetContract,
        AssetIssueContract,
        ParticipateAssetIssueContract,
        FreezeBalanceContract,
        UnfreezeBalanceContract,
        UpdateAssetContract,
        TriggerSmartContract,
        UpdateSettingContract,
        UpdateEnergyLimitContract,
    )
}


def get_parameter_class(contract_type: int) -> Optional[Type[ContractParameter]]:
    """
    Return the message class for a contract type or `None` if the type is not supported.
    """
    try:
        return _registry.get(ContractType(contract_type))
    except ValueError:
        return None
