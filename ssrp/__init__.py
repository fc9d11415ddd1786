"""SQL Server Resolution Protocol (SSRP) client."""

from .codec import Codec
from .config import ClientConfig, load_config
from .discovery import SSRPClient
from .errors import ArgumentError, EncodingError, ParseError, SSRPError
from .messages import (
    Instance,
    SSRP_PROTOCOL_VERSION,
    SSRP_UDP_PORT,
    ViaListener,
    parse_instance_list,
    parse_port,
)

__version__ = "0.1.0"

__all__ = [
    "Codec",
    "ClientConfig",
    "load_config",
    "SSRPClient",
    "ArgumentError",
    "EncodingError",
    "ParseError",
    "SSRPError",
    "Instance",
    "SSRP_PROTOCOL_VERSION",
    "SSRP_UDP_PORT",
    "ViaListener",
    "parse_instance_list",
    "parse_port",
]
