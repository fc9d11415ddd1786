"""Exception types raised by the SSRP client."""


class SSRPError(Exception):
    """Base class for SSRP client errors."""


class ArgumentError(SSRPError, ValueError):
    """Invalid caller input, raised before any network activity."""


class EncodingError(SSRPError, ValueError):
    """Text that cannot be represented in the wire codepage."""


class ParseError(SSRPError, ValueError):
    """Malformed server message.

    Only raised inside the parser; the public parse functions turn it
    into a ``None`` result.
    """
