from __future__ import annotations
from dataclasses import dataclass
from jsonschema import validate  # type: ignore
from tron3 import settings
from tron3.core import interfaces


@dataclass(frozen=True)
class BlockReference(interfaces.IJson):
    """
    The recent block a transaction is anchored to. The network only accepts transactions that reference one of the
    last 65536 blocks, which protects against replay on a forked chain.
    """

    #: block height
    number: int
    #: 32 byte block id, the first 8 bytes of which hold the block height
    block_id: bytes
    #: block production time in milliseconds since epoch
    timestamp: int

    json_schema = {
        "type": "object",
        "properties": {
            "blockID": {"type": "string", "pattern": "^[0-9a-fA-F]{64}$"},
            "block_header": {
                "type": "object",
                "properties": {
                    "raw_data": {
                        "type": "object",
                        "properties": {
                            "number": {"type": "integer", "minimum": 0},
                            "timestamp": {"type": "integer", "minimum": 0},
                        },
                        "required": ["number", "timestamp"],
                    }
                },
                "required": ["raw_data"],
            },
        },
        "required": ["blockID", "block_header"],
    }

    def __post_init__(self):
        if len(self.block_id) != 32:
            raise ValueError(
                f"Block id must be 32 bytes, got {len(self.block_id)} bytes"
            )
        if self.number < 0:
            raise ValueError(f"Block number cannot be negative, got {self.number}")

    @property
    def ref_block_bytes(self) -> bytes:
        return self.number.to_bytes(8, "big")[6:8]

    @property
    def ref_block_hash(self) -> bytes:
        return self.block_id[8:16]

    @property
    def expiration(self) -> int:
        """Default expiration for transactions referencing this block."""
        return self.timestamp + settings.settings.network.expiration_ms

    def to_json(self) -> dict:
        """Convert object into JSON representation, a subset of a `wallet/getnowblock` response."""
        return {
            "blockID": self.block_id.hex(),
            "block_header": {
                "raw_data": {"number": self.number, "timestamp": self.timestamp}
            },
        }

    @classmethod
    def from_json(cls, json: dict) -> BlockReference:
        """
        Create object from a `wallet/getnowblock` or `wallet/getblockbynum` response.

        Raises:
            jsonschema.ValidationError: if the data supplied does not have the correct format.
        """
        validate(json, schema=cls.json_schema)
        raw = json["block_header"]["raw_data"]
        return cls(raw["number"], bytes.fromhex(json["blockID"]), raw["timestamp"])
