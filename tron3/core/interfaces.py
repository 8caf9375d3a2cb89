from __future__ import annotations
import abc
import orjson as json  # type: ignore
from typing import Union


class IJson(abc.ABC):
    @abc.abstractmethod
    def to_json(self) -> dict:
        """Convert object into JSON representation."""

    @classmethod
    @abc.abstractmethod
    def from_json(cls, json: dict):
        """Create object from JSON"""

    @classmethod
    def from_json_string(cls, data: Union[str, bytes]):
        """
        Create object from a JSON encoded string as returned by a node's HTTP API.

        Raises:
            ValueError: if `data` is not valid JSON.
        """
        try:
            parsed = json.loads(data)
        except json.JSONDecodeError as e:
            raise ValueError(f"Invalid JSON data: {e}") from e
        return cls.from_json(parsed)

    def to_json_string(self) -> str:
        """Convert object into a compact JSON string."""
        return json.dumps(self.to_json()).decode("utf-8")
