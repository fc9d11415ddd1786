"""Messages module - SSRP wire format."""

from .schema import (
    CollectPolicy,
    Instance,
    Request,
    RequestKind,
    SSRP_PROTOCOL_VERSION,
    SSRP_UDP_PORT,
    ViaListener,
)
from .builder import (
    build_list_response,
    build_port_response,
    build_request,
    check_instance_name,
    format_instance,
)
from .parser import ResponseParser, parse_instance_list, parse_port

__all__ = [
    "CollectPolicy",
    "Instance",
    "Request",
    "RequestKind",
    "SSRP_PROTOCOL_VERSION",
    "SSRP_UDP_PORT",
    "ViaListener",
    "build_list_response",
    "build_port_response",
    "build_request",
    "check_instance_name",
    "format_instance",
    "ResponseParser",
    "parse_instance_list",
    "parse_port",
]
