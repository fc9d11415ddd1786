"""Conversion between text and the single-byte codepage used on the wire.

SSRP strings are MBCS encoded with the server's ANSI codepage. Python has
no notion of "the current codepage" on every platform, so the codepage is
configurable and defaults to Windows-1252.
"""

import codecs

from .errors import EncodingError

DEFAULT_ENCODING = "cp1252"


class Codec:
    """Encodes and decodes wire text with a fixed codepage."""

    def __init__(self, encoding: str = DEFAULT_ENCODING):
        """Initialize codec.

        Args:
            encoding: Python codec name. Default: cp1252.

        Raises:
            LookupError: If the codec is unknown.
        """
        self.encoding = codecs.lookup(encoding).name

    def encode(self, text: str) -> bytes:
        """Encode text to wire bytes.

        Raises:
            EncodingError: If a character has no representation in the codepage.
        """
        try:
            return text.encode(self.encoding)
        except UnicodeEncodeError as e:
            raise EncodingError(
                f"Cannot encode {text!r} with {self.encoding}: {e.reason}"
            ) from e

    def decode(self, data: bytes) -> str:
        """Decode wire bytes to text. Unmapped bytes become U+FFFD."""
        return bytes(data).decode(self.encoding, errors="replace")

    def byte_length(self, text: str) -> int:
        """Length of text in encoded bytes."""
        return len(self.encode(text))

    def __repr__(self) -> str:
        return f"Codec({self.encoding!r})"


default_codec = Codec()


def encode(text: str) -> bytes:
    return default_codec.encode(text)


def decode(data: bytes) -> str:
    return default_codec.decode(data)


def byte_length(text: str) -> int:
    return default_codec.byte_length(text)
