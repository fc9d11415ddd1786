"""YAML configuration loader for the SSRP client.

Example file:

    ssrp:
      timeout: 5
      multicast_hops: 1
      encoding: cp1252
"""

from dataclasses import dataclass, fields
from pathlib import Path
from typing import Union

import yaml

from ..codec import DEFAULT_ENCODING
from ..messages.schema import SSRP_UDP_PORT


@dataclass
class ClientConfig:
    """Configuration for SSRP exchanges."""
    timeout: float = 1.0
    multicast_hops: int = 1
    port: int = SSRP_UDP_PORT
    encoding: str = DEFAULT_ENCODING
    buffer_size: int = 65535


_FIELD_TYPES = {
    "timeout": (int, float),
    "multicast_hops": (int,),
    "port": (int,),
    "encoding": (str,),
    "buffer_size": (int,),
}


def load_config(file_path: Union[str, Path]) -> ClientConfig:
    """Load a ClientConfig from a YAML file.

    Args:
        file_path: Path to the YAML config file.

    Returns:
        Parsed ClientConfig. Missing keys keep their defaults.

    Raises:
        FileNotFoundError: If the config file doesn't exist.
        ValueError: If the YAML is malformed or has unknown keys.
    """
    file_path = Path(file_path)

    if not file_path.exists():
        raise FileNotFoundError(f"Config file not found: {file_path}")

    with open(file_path, "r", encoding="utf-8") as f:
        try:
            data = yaml.safe_load(f)
        except yaml.YAMLError as e:
            raise ValueError(f"Malformed YAML in {file_path}: {e}") from e

    if data is None:
        return ClientConfig()

    return parse_config_data(data, source=str(file_path))


def parse_config_data(data: dict, source: str = "<inline>") -> ClientConfig:
    """Parse a ClientConfig from a dictionary (already loaded YAML).

    A top-level 'ssrp' section is used when present.

    Raises:
        ValueError: If keys are unknown or values have the wrong type.
    """
    if not isinstance(data, dict):
        raise ValueError(f"Config must be a YAML mapping, got {type(data).__name__}")

    if "ssrp" in data:
        data = data["ssrp"]
        if not isinstance(data, dict):
            raise ValueError(f"'ssrp' must be a mapping in {source}")

    known = {f.name for f in fields(ClientConfig)}
    unknown = sorted(set(data) - known)
    if unknown:
        raise ValueError(f"Unknown config keys {', '.join(unknown)} in {source}")

    for key, value in data.items():
        # bool is an int subclass
        if isinstance(value, bool) or not isinstance(value, _FIELD_TYPES[key]):
            raise ValueError(
                f"Invalid type for '{key}' in {source}: {type(value).__name__}"
            )

    return ClientConfig(**data)
