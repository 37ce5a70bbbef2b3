"""Serialization utilities."""

from dataclasses import asdict
from datetime import datetime
from enum import Enum


def _to_json_value(value):
    if isinstance(value, datetime):
        return value.isoformat()
    if isinstance(value, Enum):
        return value.value
    return value


def serialize_dataclass(obj) -> dict:
    """Serialize a dataclass to dict, converting datetimes and enums to strings."""
    data = asdict(obj)
    for key, value in data.items():
        if isinstance(value, dict):
            data[key] = {k: _to_json_value(v) for k, v in value.items()}
        else:
            data[key] = _to_json_value(value)
    return data
