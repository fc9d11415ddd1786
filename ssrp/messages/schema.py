"""SSRP message data models.

Defines the request kinds, the per-kind collection policy and the
records produced from server responses.
"""

import ipaddress
from dataclasses import dataclass
from enum import Enum, IntEnum
from typing import Any, Optional, Union

IPAddress = Union[ipaddress.IPv4Address, ipaddress.IPv6Address]

# SSRP protocol version.
SSRP_PROTOCOL_VERSION = 0x01

# SSRP UDP port number.
SSRP_UDP_PORT = 1434

# Server response marker.
SVR_RESP = 0x05

# Longest instance name a client may send, in encoded bytes.
MAX_INSTANCE_NAME_BYTES = 32


class CollectPolicy(str, Enum):
    """How long an exchange keeps listening for replies."""
    UNTIL_TIMEOUT = "until_timeout"
    UNTIL_FIRST_RESULT = "until_first_result"
    FIRST_REPLY = "first_reply"


class RequestKind(IntEnum):
    """Client request message types."""
    BROADCAST_ALL = 0x02    # CLNT_BCAST_EX
    UNICAST_ALL = 0x03      # CLNT_UCAST_EX
    UNICAST_INSTANCE = 0x04  # CLNT_UCAST_INST
    UNICAST_DAC = 0x0F      # CLNT_UCAST_DAC

    @property
    def policy(self) -> CollectPolicy:
        return _POLICIES[self]

    @property
    def expects_port(self) -> bool:
        """Whether the reply is a DAC port rather than an instance list."""
        return self is RequestKind.UNICAST_DAC


_POLICIES = {
    RequestKind.BROADCAST_ALL: CollectPolicy.UNTIL_TIMEOUT,
    RequestKind.UNICAST_ALL: CollectPolicy.UNTIL_TIMEOUT,
    RequestKind.UNICAST_INSTANCE: CollectPolicy.UNTIL_FIRST_RESULT,
    RequestKind.UNICAST_DAC: CollectPolicy.FIRST_REPLY,
}


@dataclass(frozen=True)
class Request:
    """A single SSRP request, consumed once by an exchange."""
    kind: RequestKind
    address: IPAddress
    instance: Optional[str] = None


@dataclass(frozen=True)
class ViaListener:
    """Virtual Interface Architecture (VIA) listener identifier."""
    nic: str
    port: int

    def __str__(self) -> str:
        return f"ViaListener: nic={self.nic}, port={self.port}"


@dataclass(frozen=True)
class Instance:
    """Information about a SQL Server instance and how to connect to it."""
    server: str
    name: str
    is_clustered: bool
    version: str
    np_pipe_name: Optional[str] = None
    tcp_port: Optional[int] = None
    via_netbios: Optional[str] = None
    via_listeners: tuple[ViaListener, ...] = ()
    rpc_computer_name: Optional[str] = None
    spx_service_name: Optional[str] = None
    adsp_object_name: Optional[str] = None
    bv_item_name: Optional[str] = None
    bv_group_name: Optional[str] = None
    bv_org_name: Optional[str] = None

    def to_dict(self) -> dict[str, Any]:
        """Convert instance to dictionary for serialization."""
        data: dict[str, Any] = {
            "server": self.server,
            "name": self.name,
            "is_clustered": self.is_clustered,
            "version": self.version,
        }
        optional = {
            "np_pipe_name": self.np_pipe_name,
            "tcp_port": self.tcp_port,
            "via_netbios": self.via_netbios,
            "rpc_computer_name": self.rpc_computer_name,
            "spx_service_name": self.spx_service_name,
            "adsp_object_name": self.adsp_object_name,
            "bv_item_name": self.bv_item_name,
            "bv_group_name": self.bv_group_name,
            "bv_org_name": self.bv_org_name,
        }
        data.update({k: v for k, v in optional.items() if v is not None})
        if self.via_netbios is not None:
            data["via_listeners"] = [
                {"nic": listener.nic, "port": listener.port}
                for listener in self.via_listeners
            ]
        return data

    def __str__(self) -> str:
        text = (
            f"Instance: server={self.server}, name={self.name}"
            f", isClustered={str(self.is_clustered).lower()}, version={self.version}"
        )
        if self.np_pipe_name is not None:
            text += f", np.pipeName={self.np_pipe_name}"
        if self.tcp_port is not None:
            text += f", tcp.port={self.tcp_port}"
        if self.via_netbios is not None:
            listeners = ", ".join(str(listener) for listener in self.via_listeners)
            text += f", via.netbios={self.via_netbios}, via.listeners=[{listeners}]"
        if self.rpc_computer_name is not None:
            text += f", rpc.computerName={self.rpc_computer_name}"
        if self.spx_service_name is not None:
            text += f", spx.serviceName={self.spx_service_name}"
        if self.adsp_object_name is not None:
            text += f", adsp.objectName={self.adsp_object_name}"
        if self.bv_item_name is not None:
            text += (
                f", bv.itemName={self.bv_item_name}"
                f", bv.groupName={self.bv_group_name}"
                f", bv.orgName={self.bv_org_name}"
            )
        return text
