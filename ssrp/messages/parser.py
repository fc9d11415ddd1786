"""SSRP server response parser.

Parses SVR_RESP datagrams into instance lists or DAC port numbers.

Invalid messages are discarded: the public functions never raise, they
log the reason at DEBUG level and return None. Field-length violations
that the protocol tolerates are logged at WARNING level.

Turn logging on with:

    logging.basicConfig(level=logging.DEBUG)
"""

import logging
import re
import struct
from typing import Callable, Optional, TypeVar

from ..codec import Codec, default_codec
from ..errors import EncodingError, ParseError
from .schema import Instance, SSRP_PROTOCOL_VERSION, SVR_RESP, ViaListener

T = TypeVar("T")

logger = logging.getLogger(__name__)

# Tokens.
SEMICOLON = ";"
SEMICOLONS = ";;"
SERVER_NAME = "ServerName"
INSTANCE_NAME = "InstanceName"
IS_CLUSTERED = "IsClustered"
VERSION = "Version"
NP_INFO = "np"
TCP_INFO = "tcp"
VIA_INFO = "via"
RPC_INFO = "rpc"
SPX_INFO = "spx"
ADSP_INFO = "adsp"
BV_INFO = "bv"

# A RESP_DATA record, including its ';;' terminator.
MAX_INSTANCE_BYTES = 1024

PORT_RESPONSE_SIZE = 6

_VERSION_RE = re.compile(r"[0-9.]+")
_DIGITS_RE = re.compile(r"[0-9]+")


class ResponseParser:
    """Parses SVR_RESP messages with a given codec and logger."""

    def __init__(
        self,
        codec: Optional[Codec] = None,
        log: Optional[logging.Logger] = None,
    ):
        self.codec = codec or default_codec
        self.log = log or logger

    def parse_instance_list(self, data: Optional[bytes]) -> Optional[list[Instance]]:
        """Parse an instance list response.

        Returns:
            Instances in message order, or None if the message is invalid.
        """
        return self._discard_invalid(self._parse_list, data)

    def parse_port(self, data: Optional[bytes]) -> Optional[int]:
        """Parse a DAC port response.

        Returns:
            The DAC TCP port, or None if the message is invalid.
        """
        return self._discard_invalid(self._parse_port, data)

    def _discard_invalid(
        self, parse: Callable[[bytes], T], data: Optional[bytes]
    ) -> Optional[T]:
        try:
            return parse(data)
        except (ParseError, EncodingError) as e:
            self.log.debug("Discarded response: %s", e)
        return None

    def _parse_list(self, data: Optional[bytes]) -> list[Instance]:
        if data is None:
            raise ParseError("Invalid null response")
        if len(data) < 3:
            raise ParseError(f"Invalid response length: {len(data)}")
        if data[0] != SVR_RESP:
            raise ParseError(f"Invalid response type: {data[0]}")

        (size,) = struct.unpack_from("<H", data, 1)
        if size == 0 or 3 + size > len(data):
            raise ParseError(f"Invalid data size: {size}")

        return self._parse_instances(self.codec.decode(data[3:3 + size]))

    def _parse_port(self, data: Optional[bytes]) -> int:
        if data is None:
            raise ParseError("Invalid null response")
        if len(data) != PORT_RESPONSE_SIZE:
            raise ParseError(f"Invalid response length: {len(data)}")
        if data[0] != SVR_RESP:
            raise ParseError(f"Invalid response type: {data[0]}")

        size, version, port = struct.unpack_from("<HBH", data, 1)
        if size != PORT_RESPONSE_SIZE:
            raise ParseError(f"Invalid data size: {size}")
        if version != SSRP_PROTOCOL_VERSION:
            raise ParseError(f"Invalid protocol version: {version}")

        return port

    def _parse_instances(self, text: str) -> list[Instance]:
        instances = []

        start = 0
        while True:
            end = text.find(SEMICOLONS, start)
            if end == -1:
                raise ParseError(f"Missing token: '{SEMICOLONS}'")

            record = text[start:end]
            if self.codec.byte_length(record) + len(SEMICOLONS) > MAX_INSTANCE_BYTES:
                raise ParseError(f"Instance greater than {MAX_INSTANCE_BYTES} bytes")

            instances.append(self._parse_instance(record))

            start = end + len(SEMICOLONS)
            if start == len(text):
                return instances

    def _parse_instance(self, record: str) -> Instance:
        parts = record.split(SEMICOLON)
        if len(parts) < 8:
            raise ParseError("Unexpected end of message")

        _expect_token(parts[0], SERVER_NAME)
        server = parts[1]
        if self.codec.byte_length(server) > 255:
            raise ParseError("SERVERNAME greater than 255 bytes")

        _expect_token(parts[2], INSTANCE_NAME)
        name = parts[3]
        if self.codec.byte_length(name) > 255:
            raise ParseError("INSTANCENAME greater than 255 bytes")
        if len(name) > 16:
            self._warning("INSTANCENAME greater than 16 characters")

        _expect_token(parts[4], IS_CLUSTERED)
        if parts[5] not in ("Yes", "No"):
            raise ParseError("Invalid YES_OR_NO value")

        _expect_token(parts[6], VERSION)
        version = parts[7]
        if not version:
            raise ParseError("VERSION_STRING is empty")
        if self.codec.byte_length(version) > 16:
            raise ParseError("VERSION_STRING greater than 16 bytes")
        if not _VERSION_RE.fullmatch(version):
            raise ParseError("VERSION_STRING doesn't match [0-9.]+")

        info = self._parse_info(parts)

        return Instance(
            server=server,
            name=name,
            is_clustered=parts[5] == "Yes",
            version=version,
            **info,
        )

    def _parse_info(self, parts: list[str]) -> dict:
        """Parse the optional protocol info that follows the version."""
        info: dict = {}
        seen: set[str] = set()
        fields = iter(parts[8:])

        for token in fields:
            if token in seen:
                raise ParseError(f"'{token}' listed more than once")
            seen.add(token)

            if token == NP_INFO:
                info["np_pipe_name"] = _next(fields)

            elif token == TCP_INFO:
                info["tcp_port"] = _parse_port_number(_next(fields), "TCP_PORT")

            elif token == VIA_INFO:
                netbios, listeners = self._parse_via(_next(fields))
                info["via_netbios"] = netbios
                info["via_listeners"] = listeners

            elif token == RPC_INFO:
                value = _next(fields)
                if len(value) > 127:
                    self._warning("COMPUTERNAME greater than 127 characters")
                info["rpc_computer_name"] = value

            elif token == SPX_INFO:
                value = _next(fields)
                if self.codec.byte_length(value) > 1024:
                    raise ParseError("SERVICENAME greater than 1024 bytes")
                if len(value) > 127:
                    self._warning("SERVICENAME greater than 127 characters")
                info["spx_service_name"] = value

            elif token == ADSP_INFO:
                value = _next(fields)
                if len(value) > 127:
                    self._warning("ADSPOBJECTNAME greater than 127 characters")
                info["adsp_object_name"] = value

            elif token == BV_INFO:
                for key, label in (
                    ("bv_item_name", "ITEMNAME"),
                    ("bv_group_name", "GROUPNAME"),
                    ("bv_org_name", "ORGNAME"),
                ):
                    value = _next(fields)
                    if len(value) > 127:
                        self._warning(f"{label} greater than 127 characters")
                    info[key] = value

            else:
                raise ParseError(f"Unknown protocol identifier: '{token}'")

        return info

    def _parse_via(self, value: str) -> tuple[str, tuple[ViaListener, ...]]:
        if self.codec.byte_length(value) > 128:
            self._warning("VIA_INFO greater than 128 bytes")

        netbios, *entries = value.split(",")
        if not entries:
            raise ParseError("Invalid VIA_PARAMETERS value")
        if self.codec.byte_length(netbios) > 15:
            raise ParseError("NETBIOS greater than 15 bytes")

        listeners = []
        for entry in entries:
            listener = entry.split(":")
            if len(listener) != 2:
                raise ParseError("Invalid VIALISTENINFO value")
            nic, port = listener
            listeners.append(ViaListener(nic=nic, port=_parse_port_number(port, "VIAPORT")))

        return netbios, tuple(listeners)

    def _warning(self, message: str) -> None:
        self.log.warning(message)


def _expect_token(value: str, token: str) -> None:
    if value != token:
        raise ParseError(f"Missing token: '{token}'")


def _next(fields) -> str:
    try:
        return next(fields)
    except StopIteration:
        raise ParseError("Unexpected end of message") from None


def _parse_port_number(value: str, label: str) -> int:
    if not _DIGITS_RE.fullmatch(value):
        raise ParseError(f"Invalid {label} value")
    port = int(value)
    if port > 0xFFFF:
        raise ParseError(f"Invalid {label} value")
    return port


def parse_instance_list(
    data: Optional[bytes],
    codec: Optional[Codec] = None,
    log: Optional[logging.Logger] = None,
) -> Optional[list[Instance]]:
    """Parse an instance list response; None if the message is invalid."""
    return ResponseParser(codec, log).parse_instance_list(data)


def parse_port(
    data: Optional[bytes],
    log: Optional[logging.Logger] = None,
) -> Optional[int]:
    """Parse a DAC port response; None if the message is invalid."""
    return ResponseParser(log=log).parse_port(data)
