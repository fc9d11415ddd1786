"""SSRP client.

Retrieves the list of SQL Server instances on the network, or installed
on a single machine, with their network protocol connection information.
Also retrieves the TCP port of the dedicated administrator connection
(DAC) endpoint of an instance.

    client = SSRPClient()
    for instance in client.list_all_instances("255.255.255.255"):
        print(instance)
"""

import ipaddress
import logging
from typing import Optional, Union

from ..codec import Codec
from ..config.loader import ClientConfig
from ..errors import ArgumentError
from ..messages.builder import check_instance_name
from ..messages.schema import Instance, IPAddress, Request, RequestKind
from .exchange import Exchange, SocketFactory

AddressLike = Union[str, IPAddress]


class SSRPClient:
    """SQL Server Resolution Protocol client."""

    def __init__(
        self,
        config: Optional[ClientConfig] = None,
        logger: Optional[logging.Logger] = None,
        socket_factory: Optional[SocketFactory] = None,
    ):
        """Initialize client.

        Args:
            config: Client configuration. Default: 1s timeout, 1 multicast hop.
            logger: Logger for parser warnings and trace events.
            socket_factory: Callable(family, type) returning a UDP socket.
        """
        self.config = config or ClientConfig()
        self.logger = logger
        self._socket_factory = socket_factory

    @property
    def timeout(self) -> float:
        """Seconds to wait for replies from the server(s). Default: 1."""
        return self.config.timeout

    @timeout.setter
    def timeout(self, value: float) -> None:
        self.config.timeout = value

    @property
    def multicast_hops(self) -> int:
        """Maximum hops for multicast requests. Default: 1, the local network."""
        return self.config.multicast_hops

    @multicast_hops.setter
    def multicast_hops(self, value: int) -> None:
        self.config.multicast_hops = value

    def list_all_instances(self, address: AddressLike) -> list[Instance]:
        """List all SQL Server instances on the network.

        Replies are collected until the timeout expires.

        Args:
            address: IPv4 broadcast or IPv6 multicast address.

        Returns:
            Instances from every valid reply, in arrival order.
        """
        target = _coerce_address(address, "address")
        return self._run(Request(RequestKind.BROADCAST_ALL, target))

    def list_instances(
        self, server: AddressLike, instance: Optional[str] = None
    ) -> list[Instance]:
        """List the SQL Server instances installed on a server.

        Args:
            server: Server address.
            instance: If given, only this instance is requested and the
                first valid reply ends the wait.

        Returns:
            Instances reported by the server; empty if it did not answer.

        Raises:
            ArgumentError: If server is invalid or instance exceeds 32 bytes.
            EncodingError: If instance cannot be encoded.
        """
        target = _coerce_address(server, "server")
        if instance is None:
            return self._run(Request(RequestKind.UNICAST_ALL, target))

        check_instance_name(instance, self._codec())
        return self._run(Request(RequestKind.UNICAST_INSTANCE, target, instance))

    def get_dac_port(self, server: AddressLike, instance: str) -> Optional[int]:
        """Get the TCP port of an instance's DAC endpoint.

        Args:
            server: Server address.
            instance: Instance name.

        Returns:
            The DAC TCP port, or None if it could not be retrieved.

        Raises:
            ArgumentError: If an argument is missing or instance exceeds 32 bytes.
            EncodingError: If instance cannot be encoded.
        """
        target = _coerce_address(server, "server")
        if instance is None:
            raise ArgumentError("instance must be not null")

        check_instance_name(instance, self._codec())
        return self._run(Request(RequestKind.UNICAST_DAC, target, instance))

    def _codec(self) -> Codec:
        return Codec(self.config.encoding)

    def _run(self, request: Request):
        exchange = Exchange(
            request,
            config=self.config,
            codec=self._codec(),
            log=self.logger,
            socket_factory=self._socket_factory,
        )
        return exchange.run()


def _coerce_address(address: Optional[AddressLike], name: str) -> IPAddress:
    if address is None:
        raise ArgumentError(f"{name} must be not null")
    if isinstance(address, (ipaddress.IPv4Address, ipaddress.IPv6Address)):
        return address
    try:
        return ipaddress.ip_address(address)
    except ValueError as e:
        raise ArgumentError(f"Invalid {name}: {address!r}") from e
