"""Config module - client settings."""

from .loader import ClientConfig, load_config, parse_config_data
from .validator import ValidationError, ValidationResult, validate_config

__all__ = [
    "ClientConfig",
    "load_config",
    "parse_config_data",
    "ValidationError",
    "ValidationResult",
    "validate_config",
]
