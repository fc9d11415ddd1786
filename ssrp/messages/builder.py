"""SSRP message builders.

Client requests:
- CLNT_BCAST_EX   [0x02]
- CLNT_UCAST_EX   [0x03]
- CLNT_UCAST_INST [0x04] + instance + [0x00]
- CLNT_UCAST_DAC  [0x0F, 0x01] + instance + [0x00]

Server responses (SVR_RESP) are built too, for responders and tests.
"""

import struct
from typing import Iterable, Optional

from ..codec import Codec, default_codec
from ..errors import ArgumentError
from .schema import (
    Instance,
    MAX_INSTANCE_NAME_BYTES,
    Request,
    RequestKind,
    SSRP_PROTOCOL_VERSION,
    SVR_RESP,
)


def check_instance_name(instance: str, codec: Optional[Codec] = None) -> None:
    """Check that an instance name fits in a client request.

    Raises:
        ArgumentError: If the name is longer than 32 encoded bytes.
        EncodingError: If the name cannot be encoded.
    """
    codec = codec or default_codec
    if codec.byte_length(instance) > MAX_INSTANCE_NAME_BYTES:
        raise ArgumentError(
            f"instance must not be greater than {MAX_INSTANCE_NAME_BYTES} bytes in length"
        )


def build_request(request: Request, codec: Optional[Codec] = None) -> bytes:
    """Build the datagram for a client request.

    Args:
        request: Request descriptor.
        codec: Codec for the instance name. Default: cp1252.

    Returns:
        Raw request bytes.

    Raises:
        ArgumentError: If the instance name is missing or too long.
        EncodingError: If the instance name cannot be encoded.
    """
    codec = codec or default_codec
    message = bytearray([request.kind])

    if request.kind in (RequestKind.UNICAST_INSTANCE, RequestKind.UNICAST_DAC):
        if request.instance is None:
            raise ArgumentError(f"{request.kind.name} requires an instance name")
        check_instance_name(request.instance, codec)
        if request.kind is RequestKind.UNICAST_DAC:
            message.append(SSRP_PROTOCOL_VERSION)
        message += codec.encode(request.instance)
        message.append(0x00)

    return bytes(message)


def format_instance(instance: Instance) -> str:
    """Format an instance as a RESP_DATA record, without the ';;' terminator."""
    parts = [
        "ServerName", instance.server,
        "InstanceName", instance.name,
        "IsClustered", "Yes" if instance.is_clustered else "No",
        "Version", instance.version,
    ]
    if instance.np_pipe_name is not None:
        parts += ["np", instance.np_pipe_name]
    if instance.tcp_port is not None:
        parts += ["tcp", str(instance.tcp_port)]
    if instance.via_netbios is not None:
        via = [instance.via_netbios]
        via += [f"{listener.nic}:{listener.port}" for listener in instance.via_listeners]
        parts += ["via", ",".join(via)]
    if instance.rpc_computer_name is not None:
        parts += ["rpc", instance.rpc_computer_name]
    if instance.spx_service_name is not None:
        parts += ["spx", instance.spx_service_name]
    if instance.adsp_object_name is not None:
        parts += ["adsp", instance.adsp_object_name]
    if instance.bv_item_name is not None:
        parts += ["bv", instance.bv_item_name, instance.bv_group_name or "",
                  instance.bv_org_name or ""]
    return ";".join(parts)


def build_list_response(
    instances: Iterable[Instance], codec: Optional[Codec] = None
) -> bytes:
    """Build an SVR_RESP datagram carrying an instance list.

    Raises:
        ValueError: If the payload does not fit the 16-bit size field.
        EncodingError: If a field cannot be encoded.
    """
    codec = codec or default_codec
    payload = codec.encode("".join(f"{format_instance(i)};;" for i in instances))
    if len(payload) > 0xFFFF:
        raise ValueError(f"Response payload too large: {len(payload)} bytes")
    return struct.pack("<BH", SVR_RESP, len(payload)) + payload


def build_port_response(port: int) -> bytes:
    """Build an SVR_RESP datagram carrying a DAC port.

    Raises:
        ValueError: If port is outside 0-65535.
    """
    if not 0 <= port <= 0xFFFF:
        raise ValueError(f"Invalid port: {port}")
    return struct.pack("<BHBH", SVR_RESP, 6, SSRP_PROTOCOL_VERSION, port)
