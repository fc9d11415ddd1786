"""SSRP request/response exchange over UDP.

One exchange sends one request and listens for replies until its
collection policy is satisfied or the deadline passes:

- UNTIL_TIMEOUT       CLNT_BCAST_EX, CLNT_UCAST_EX
- UNTIL_FIRST_RESULT  CLNT_UCAST_INST
- FIRST_REPLY         CLNT_UCAST_DAC
"""

import logging
import socket
import struct
from enum import Enum
from typing import Callable, Optional, Union

from ..codec import Codec
from ..config.loader import ClientConfig
from ..messages.builder import build_request
from ..messages.parser import ResponseParser
from ..messages.schema import CollectPolicy, Instance, Request, RequestKind
from .timeout_handler import Deadline

logger = logging.getLogger(__name__)

SocketFactory = Callable[[int, int], socket.socket]

ExchangeResult = Union[list[Instance], int, None]


class ExchangeState(str, Enum):
    IDLE = "idle"
    SENT = "sent"
    COLLECTING = "collecting"
    COMPLETED = "completed"


class Exchange:
    """Drives a single SSRP request over its own UDP socket."""

    def __init__(
        self,
        request: Request,
        config: Optional[ClientConfig] = None,
        codec: Optional[Codec] = None,
        log: Optional[logging.Logger] = None,
        socket_factory: Optional[SocketFactory] = None,
    ):
        """Initialize exchange.

        Args:
            request: Request to send.
            config: Client configuration. Default: ClientConfig().
            codec: Codec for wire text. Default: codec named by config.
            log: Logger for trace and warning events.
            socket_factory: Callable(family, type) returning a socket.
        """
        self.request = request
        self.config = config or ClientConfig()
        self.codec = codec or Codec(self.config.encoding)
        self.log = log or logger
        self.parser = ResponseParser(self.codec, self.log)
        self.state = ExchangeState.IDLE
        self._socket_factory = socket_factory or socket.socket
        self._sock: Optional[socket.socket] = None

    @property
    def policy(self) -> CollectPolicy:
        return self.request.kind.policy

    def run(self) -> ExchangeResult:
        """Send the request and collect replies.

        Returns:
            For list requests, the instances received (possibly empty).
            For DAC requests, the port or None.

        Raises:
            ArgumentError: If the request cannot be built.
            EncodingError: If the instance name cannot be encoded.
            OSError: If the socket cannot be opened or the send fails.
        """
        if self.state is not ExchangeState.IDLE:
            raise RuntimeError("Exchange can only be run once")

        payload = build_request(self.request, self.codec)
        self._sock = self._create_socket()

        try:
            self._configure_multicast(self._sock)

            target = (str(self.request.address), self.config.port)
            self._sock.sendto(payload, target)
            self.state = ExchangeState.SENT
            self.log.debug(
                "Sent %s (%d bytes) to %s:%d",
                self.request.kind.name, len(payload), *target,
            )

            deadline = Deadline(self.config.timeout)
            deadline.start()
            return self._collect(deadline)
        finally:
            self.close()

    def _create_socket(self) -> socket.socket:
        """Create a UDP socket bound to the wildcard address of the target's family."""
        if self.request.address.version == 4:
            sock = self._socket_factory(socket.AF_INET, socket.SOCK_DGRAM)
            host = "0.0.0.0"
        else:
            sock = self._socket_factory(socket.AF_INET6, socket.SOCK_DGRAM)
            host = "::"

        try:
            sock.bind((host, 0))
        except OSError:
            sock.close()
            raise
        return sock

    def _configure_multicast(self, sock: socket.socket) -> None:
        if self.request.kind is not RequestKind.BROADCAST_ALL:
            return

        address = self.request.address
        if address.version == 4:
            sock.setsockopt(socket.SOL_SOCKET, socket.SO_BROADCAST, 1)
        elif address.is_multicast:
            sock.setsockopt(
                socket.IPPROTO_IPV6, socket.IPV6_MULTICAST_HOPS,
                self.config.multicast_hops,
            )
            mreq = address.packed + struct.pack("@I", 0)
            sock.setsockopt(socket.IPPROTO_IPV6, socket.IPV6_JOIN_GROUP, mreq)

    def _collect(self, deadline: Deadline) -> ExchangeResult:
        self.state = ExchangeState.COLLECTING
        expects_port = self.request.kind.expects_port
        instances: list[Instance] = []

        while not deadline.is_expired:
            remaining = deadline.remaining
            if remaining <= 0:
                break
            self._sock.settimeout(remaining)

            try:
                data, sender = self._sock.recvfrom(self.config.buffer_size)
            except socket.timeout:
                break
            except ConnectionResetError:
                # ICMP port unreachable from a previous send (Windows)
                self.log.debug("Connection reset while waiting for replies")
                continue

            self.log.debug("Received %d bytes from %s", len(data), sender[0])

            if expects_port:
                return self.parser.parse_port(data)

            result = self.parser.parse_instance_list(data)
            if result is None:
                continue

            instances.extend(result)
            if self.policy is CollectPolicy.UNTIL_FIRST_RESULT:
                return instances

        self.log.debug(
            "%s timed out after %.1fs", self.request.kind.name, deadline.elapsed
        )
        return None if expects_port else instances

    def close(self) -> None:
        """Close the UDP socket."""
        if self._sock is not None:
            try:
                self._sock.close()
            finally:
                self._sock = None
                self.state = ExchangeState.COMPLETED

    def __enter__(self):
        return self

    def __exit__(self, *args):
        self.close()
