"""Decode the connection descriptor carried by the first input row."""

from __future__ import annotations

import json
import logging
from typing import Any, Sequence

from search_extract.errors import ConfigurationError
from search_extract.models import ConnectionDescriptor

logger = logging.getLogger(__name__)

# Wire key -> ConnectionDescriptor attribute
DESCRIPTOR_KEYS = {
    "consumerKey": "consumer_key",
    "consumerSecret": "consumer_secret",
    "applicationName": "application_name",
    "endPointAuthUrl": "auth_endpoint_url",
    "endPointUrl": "search_endpoint_url",
    "searchTerm": "search_term",
}


def decode_descriptor(payload: Any) -> ConnectionDescriptor:
    """Decode a JSON connection payload into a ConnectionDescriptor.

    Args:
        payload: JSON text, bytes, or an already-decoded mapping.

    Returns:
        ConnectionDescriptor with every parameter set.

    Raises:
        ConfigurationError: If the payload is missing, not a JSON object, or
            any required key is absent or blank.
    """
    if payload is None:
        raise ConfigurationError("No connection parameters in input row")

    if isinstance(payload, dict):
        data = payload
    else:
        try:
            if isinstance(payload, bytes):
                payload = payload.decode("utf-8")
            data = json.loads(str(payload))
        except UnicodeDecodeError as exc:
            raise ConfigurationError(f"Connection parameters are not valid UTF-8: {exc}") from exc
        except (json.JSONDecodeError, RecursionError) as exc:
            raise ConfigurationError(f"Connection parameters are not valid JSON: {exc}") from exc

    if not isinstance(data, dict):
        raise ConfigurationError("Connection parameters must be a JSON object")

    missing = []
    values = {}
    for wire_key, attr in DESCRIPTOR_KEYS.items():
        value = data.get(wire_key)
        if not isinstance(value, str) or not value.strip():
            missing.append(wire_key)
            continue
        values[attr] = value

    if missing:
        raise ConfigurationError(f"Missing connection parameters: {', '.join(missing)}")

    descriptor = ConnectionDescriptor(**values)
    logger.debug("Decoded connection parameters for application %s", descriptor.application_name)
    return descriptor


def descriptor_from_row(row: Sequence[Any]) -> ConnectionDescriptor:
    """Decode the descriptor from field 0 of an input row."""
    if not row:
        raise ConfigurationError("Input row has no fields; expected connection parameters in field 0")
    return decode_descriptor(row[0])
