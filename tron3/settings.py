"""
Network constants shared by the builders and codecs.

Only protocol level values live here. Keys, default sender addresses or any other account data are always passed
explicitly to the functions that need them.
"""
from __future__ import annotations
import json
from types import SimpleNamespace
from jsonschema import validate  # type: ignore


class IndexableNamespace(SimpleNamespace):
    def __len__(self):
        return len(self.__dict__)

    def __getitem__(self, key):
        return self.__dict__[key]

    def __contains__(self, key):
        return key in self.__dict__

    def get(self, key, default=None):
        return self.__dict__.get(key, default)


class Settings(IndexableNamespace):
    default_settings = {
        "network": {
            "address_prefix": 0x41,
            "sun_per_trx": 1_000_000,
            "fee_limit_max": 1_000_000_000,
            "min_freeze_duration": 3,
            "expiration_ms": 60_000,
            "origin_energy_limit_max": 10_000_000,
            "user_fee_percentage_max": 100,
        },
    }

    json_schema = {
        "type": "object",
        "properties": {
            "network": {
                "type": "object",
                "properties": {
                    "address_prefix": {"type": "integer", "minimum": 0, "maximum": 255},
                    "sun_per_trx": {"type": "integer", "minimum": 1},
                    "fee_limit_max": {"type": "integer", "minimum": 0},
                    "min_freeze_duration": {"type": "integer", "minimum": 0},
                    "expiration_ms": {"type": "integer", "minimum": 1},
                    "origin_energy_limit_max": {"type": "integer", "minimum": 1},
                    "user_fee_percentage_max": {"type": "integer", "minimum": 0},
                },
            }
        },
    }

    @classmethod
    def from_json(cls, json: dict):
        validate(json, schema=cls.json_schema)
        o = cls(**json)
        o._convert(o.__dict__, o.__dict__)
        return o

    @classmethod
    def from_file(cls, path_to_json: str):
        """
        Load settings from a JSON file. Values missing from the file are taken from `default_settings`.

        Raises:
            jsonschema.ValidationError: if a value has the wrong type or is out of range.
        """
        with open(path_to_json, "r") as f:
            data = json.load(f)
        merged = {"network": dict(cls.default_settings["network"])}
        merged["network"].update(data.get("network", {}))
        return cls.from_json(merged)

    def register(self, json: dict):
        validate(json, schema=self.json_schema)
        for k, v in json.items():
            current = self.__dict__.get(k)
            if isinstance(v, dict) and isinstance(current, IndexableNamespace):
                current.__dict__.update(v)
            else:
                self.__dict__.update({k: v})
        self._convert(self.__dict__, self.__dict__)

    def _convert(self, what: dict, where: dict):
        # turn all _dictionary what into IndexableNamespaces
        to_update = []
        for k, v in what.items():
            if isinstance(v, dict):
                to_update.append((k, IndexableNamespace(**v)))

        for k, v in to_update:
            if isinstance(where, dict):
                where.update({k: v})
            else:
                where.__dict__.update({k: v})
            self._convert(where[k].__dict__, where[k].__dict__)

    def reset_settings_to_default(self):
        self.__dict__.clear()
        self.__dict__.update(self.from_json(self.default_settings).__dict__)


settings = Settings.from_json(Settings.default_settings)
