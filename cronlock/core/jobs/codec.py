"""Job configuration codec for the runner command line.

A configuration travels to a launched runner as one argv string of the form
``key=value&key=value``; each value is JSON so nested lists (class arguments)
and typed scalars survive the trip. Key order does not matter.
"""

import json
from typing import Any
from urllib.parse import parse_qsl, urlencode

from cronlock.core.common.exceptions import ConfigError


def encode_config(config: dict[str, Any]) -> str:
    """
    Encode a JSON-shaped configuration mapping.

    Raises:
        ConfigError: A value cannot be represented as JSON
    """
    try:
        pairs = [(key, json.dumps(value)) for key, value in sorted(config.items())]
    except TypeError as e:
        raise ConfigError(f"Configuration is not encodable: {e}") from e
    return urlencode(pairs)


def decode_config(encoded: str) -> dict[str, Any]:
    """
    Decode a string produced by ``encode_config``.

    Raises:
        ConfigError: Malformed input
    """
    config: dict[str, Any] = {}
    try:
        for key, raw in parse_qsl(encoded, keep_blank_values=True, strict_parsing=bool(encoded)):
            config[key] = json.loads(raw)
    except ValueError as e:
        raise ConfigError(f"Malformed job configuration: {e}") from e
    return config
