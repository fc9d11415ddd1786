"""Discovery module - SSRP exchanges over UDP."""

from .client import SSRPClient
from .exchange import Exchange, ExchangeState
from .timeout_handler import Deadline

__all__ = [
    "SSRPClient",
    "Exchange",
    "ExchangeState",
    "Deadline",
]
