"""
Smart contract Application Binary Interface classes.

Both the node's ABI format (as returned by `wallet/getcontract`, capitalized `type` and `stateMutability` values,
wrapped in an `entrys` object) and the Solidity compiler format (a plain list of lower case entries) are accepted.
"""
from __future__ import annotations
from collections.abc import Sequence
from enum import Enum
from typing import Optional, Union
from jsonschema import validate  # type: ignore
from tron3.core import cryptography, interfaces


class FunctionNotFound(ValueError):
    """
    Raised when a function name cannot be resolved against an ABI.
    """


class AbiEntryType(Enum):
    FUNCTION = "function"
    CONSTRUCTOR = "constructor"
    FALLBACK = "fallback"
    RECEIVE = "receive"
    EVENT = "event"
    ERROR = "error"

    @classmethod
    def from_string(cls, value: str) -> AbiEntryType:
        try:
            return cls(value.lower())
        except ValueError:
            raise ValueError(f"{value} is not a valid ABI entry type")


class StateMutability(Enum):
    PURE = "pure"
    VIEW = "view"
    NONPAYABLE = "nonpayable"
    PAYABLE = "payable"

    @classmethod
    def from_string(cls, value: str) -> StateMutability:
        try:
            return cls(value.lower())
        except ValueError:
            raise ValueError(f"{value} is not a valid state mutability")


_parameter_schema = {
    "type": "object",
    "properties": {
        "name": {"type": "string"},
        "type": {"type": "string", "minLength": 1},
        "indexed": {"type": "boolean"},
    },
    "required": ["type"],
}


class AbiParameter(interfaces.IJson):
    """
    A typed parameter of a contract function or event.
    """

    json_schema = _parameter_schema

    def __init__(self, type: str, name: str = "", indexed: bool = False):
        """
        Args:
            type: the canonical type tag, e.g. `address`, `uint256` or `bytes32[]`.
            name: the human-readable identifier. Can be empty.
            indexed: for event parameters only, whether the value is part of the log topics.
        """
        self.type = type
        self.name = name
        self.indexed = indexed

    def __eq__(self, other):
        if not isinstance(other, type(self)):
            return False
        return (
            self.type == other.type
            and self.name == other.name
            and self.indexed == other.indexed
        )

    def __repr__(self):
        return f"<{self.__class__.__name__} at {hex(id(self))}> {self.type} {self.name}"

    @property
    def canonical_type(self) -> str:
        """The type as used in a selector. `uint` and `int` are aliases for their 256 bit variants."""
        return canonical_type(self.type)

    def to_json(self) -> dict:
        """
        Convert object into JSON representation.
        """
        json: dict = {"name": self.name, "type": self.type}
        if self.indexed:
            json["indexed"] = True
        return json

    @classmethod
    def from_json(cls, json: dict) -> AbiParameter:
        """
        Parse object out of JSON data.

        Args:
            json: a dictionary.

        Raises:
            jsonschema.ValidationError: if the data supplied does not have the correct format.
        """
        validate(json, schema=cls.json_schema)
        return cls(
            type=json["type"],
            name=json.get("name", ""),
            indexed=json.get("indexed", False),
        )


def canonical_type(type_: str) -> str:
    """
    Normalize a type tag to the form used in function selectors.
    """
    suffix = ""
    idx = type_.find("[")
    if idx != -1:
        type_, suffix = type_[:idx], type_[idx:]
    if type_ in ("uint", "int"):
        type_ += "256"
    return type_ + suffix


class AbiFunction(interfaces.IJson):
    """
    Description of a single ABI entry such as a callable function or an event.
    """

    json_schema = {
        "type": "object",
        "properties": {
            "name": {"type": "string"},
            "type": {"type": "string"},
            "inputs": {"type": "array", "items": _parameter_schema},
            "outputs": {"type": "array", "items": _parameter_schema},
            "stateMutability": {"type": "string"},
            "constant": {"type": "boolean"},
            "payable": {"type": "boolean"},
            "anonymous": {"type": "boolean"},
        },
    }

    def __init__(
        self,
        name: str,
        inputs: Sequence[AbiParameter] = (),
        outputs: Sequence[AbiParameter] = (),
        state_mutability: StateMutability = StateMutability.NONPAYABLE,
        type: AbiEntryType = AbiEntryType.FUNCTION,
    ):
        """
        Args:
            name: the human-readable identifier of the function.
            inputs: the ordered list of parameters the function takes.
            outputs: the ordered list of values the function returns.
            state_mutability: whether the function reads, writes or accepts value.
            type: the kind of ABI entry.
        """
        self.name = name
        self.inputs = tuple(inputs)
        self.outputs = tuple(outputs)
        self.state_mutability = state_mutability
        self.type = type

    def __eq__(self, other):
        if not isinstance(other, type(self)):
            return False
        return (
            self.name == other.name
            and self.inputs == other.inputs
            and self.outputs == other.outputs
            and self.state_mutability == other.state_mutability
            and self.type == other.type
        )

    def __repr__(self):
        return f"<{self.__class__.__name__} at {hex(id(self))}> {self.build_selector()}"

    @property
    def is_constant(self) -> bool:
        """True if calling the function cannot change contract state."""
        return self.state_mutability in (StateMutability.PURE, StateMutability.VIEW)

    def build_selector(self) -> str:
        """
        Return the function signature used for the selector, e.g. `transfer(address,uint256)`.
        """
        types = ",".join(map(lambda p: p.canonical_type, self.inputs))
        return f"{self.name}({types})"

    def selector_id(self) -> bytes:
        """
        Return the 4 byte function identifier that prefixes encoded call data.
        """
        return cryptography.keccak256(self.build_selector().encode("utf-8"))[:4]

    def to_json(self) -> dict:
        """
        Convert object into JSON representation.
        """
        return {
            "name": self.name,
            "type": self.type.value,
            "inputs": list(map(lambda p: p.to_json(), self.inputs)),
            "outputs": list(map(lambda p: p.to_json(), self.outputs)),
            "stateMutability": self.state_mutability.value,
        }

    @classmethod
    def from_json(cls, json: dict) -> AbiFunction:
        """
        Parse object out of JSON data.

        Args:
            json: a dictionary.

        Raises:
            jsonschema.ValidationError: if the data supplied does not have the correct format.
            ValueError: if the entry type or state mutability is unknown.
        """
        validate(json, schema=cls.json_schema)
        if "stateMutability" in json:
            mutability = StateMutability.from_string(json["stateMutability"])
        elif json.get("constant", False):
            mutability = StateMutability.VIEW
        elif json.get("payable", False):
            mutability = StateMutability.PAYABLE
        else:
            mutability = StateMutability.NONPAYABLE

        return cls(
            name=json.get("name", ""),
            inputs=list(map(lambda p: AbiParameter.from_json(p), json.get("inputs", []))),
            outputs=list(
                map(lambda p: AbiParameter.from_json(p), json.get("outputs", []))
            ),
            state_mutability=mutability,
            type=AbiEntryType.from_string(json.get("type", "function")),
        )


def resolve(functions: Sequence[AbiFunction], name: str) -> AbiFunction:
    """
    Find the first function with an exact name match.

    Overloads are not distinguished; the first entry with the name wins.

    Args:
        functions: the ABI entries to search.
        name: the function name.

    Raises:
        FunctionNotFound: if no function entry carries `name`.
    """
    for f in functions:
        if f.type == AbiEntryType.FUNCTION and f.name == name:
            return f
    raise FunctionNotFound(f"Function {name} not defined in ABI")


class ContractABI(interfaces.IJson):
    """
    The smart contract application binary interface describes the callable functions and events of a contract.
    """

    def __init__(self, entries: Sequence[AbiFunction]):
        """
        Args:
            entries: all entries of the ABI in declaration order.
        """
        self.entries = tuple(entries)

    def __eq__(self, other):
        if not isinstance(other, type(self)):
            return False
        return self.entries == other.entries

    def __len__(self):
        return len(self.entries)

    @property
    def functions(self) -> list[AbiFunction]:
        return [e for e in self.entries if e.type == AbiEntryType.FUNCTION]

    @property
    def events(self) -> list[AbiFunction]:
        return [e for e in self.entries if e.type == AbiEntryType.EVENT]

    def resolve(self, name: str) -> AbiFunction:
        """
        Return the first function named `name`.

        Raises:
            FunctionNotFound: if the ABI has no such function.
        """
        return resolve(self.entries, name)

    def get_function(self, name: str) -> Optional[AbiFunction]:
        """
        Return the first function named `name` or `None` otherwise.
        """
        try:
            return self.resolve(name)
        except FunctionNotFound:
            return None

    def to_json(self) -> dict:
        """
        Convert object into the node's JSON representation.
        """
        return {"entrys": list(map(lambda e: e.to_json(), self.entries))}

    @classmethod
    def from_json(cls, json: Union[dict, list]) -> ContractABI:
        """
        Parse object out of JSON data.

        Args:
            json: a node ABI object (`{"entrys": [...]}`) or a list of entries.

        Raises:
            KeyError: if a node ABI object does not contain the `entrys` key.
            jsonschema.ValidationError: if an entry does not have the correct format.
        """
        if isinstance(json, dict):
            # a contract without functions is returned as an empty object
            entries = json["entrys"] if len(json) > 0 else []
        else:
            entries = json
        return cls(list(map(lambda e: AbiFunction.from_json(e), entries)))
