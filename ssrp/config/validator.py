"""Config validator for the SSRP client.

Validates a ClientConfig against protocol and socket limits.
"""

import codecs
from dataclasses import dataclass, field

from .loader import ClientConfig

# Timeouts above this are allowed but almost always a mistake.
LONG_TIMEOUT = 60.0


@dataclass
class ValidationError:
    """A single validation error."""
    path: str
    message: str
    severity: str = "error"  # "error" or "warning"


@dataclass
class ValidationResult:
    """Result of config validation."""
    valid: bool
    errors: list[ValidationError] = field(default_factory=list)
    warnings: list[ValidationError] = field(default_factory=list)

    def __str__(self) -> str:
        if self.valid:
            msg = "Valid"
            if self.warnings:
                msg += f" ({len(self.warnings)} warnings)"
            return msg
        return f"Invalid: {len(self.errors)} errors, {len(self.warnings)} warnings"


def validate_config(config: ClientConfig) -> ValidationResult:
    """Validate a ClientConfig.

    Checks:
    - timeout is positive
    - multicast_hops fits an IPv6 hop limit (1-255)
    - port is a valid UDP port
    - encoding is a known single-byte codec
    - buffer_size can hold a port response

    Args:
        config: Config to validate.

    Returns:
        ValidationResult with errors and warnings.
    """
    errors: list[ValidationError] = []
    warnings: list[ValidationError] = []

    if config.timeout <= 0:
        errors.append(ValidationError(
            path="timeout",
            message=f"Timeout must be positive, got {config.timeout}.",
        ))
    elif config.timeout > LONG_TIMEOUT:
        warnings.append(ValidationError(
            path="timeout",
            message=f"Timeout of {config.timeout}s is unusually long.",
            severity="warning",
        ))

    if not 1 <= config.multicast_hops <= 255:
        errors.append(ValidationError(
            path="multicast_hops",
            message=f"multicast_hops must be between 1 and 255, got {config.multicast_hops}.",
        ))

    if not 1 <= config.port <= 65535:
        errors.append(ValidationError(
            path="port",
            message=f"port must be between 1 and 65535, got {config.port}.",
        ))

    _validate_encoding(config, errors)

    if config.buffer_size < 6:
        errors.append(ValidationError(
            path="buffer_size",
            message=f"buffer_size must be at least 6, got {config.buffer_size}.",
        ))

    return ValidationResult(
        valid=len(errors) == 0,
        errors=errors,
        warnings=warnings,
    )


def _validate_encoding(config: ClientConfig, errors: list[ValidationError]) -> None:
    try:
        codecs.lookup(config.encoding)
    except LookupError:
        errors.append(ValidationError(
            path="encoding",
            message=f"Unknown encoding '{config.encoding}'.",
        ))
        return

    # MBCS on the wire is one byte per character for the protocol's tokens.
    if len("ServerName".encode(config.encoding)) != len("ServerName"):
        errors.append(ValidationError(
            path="encoding",
            message=f"Encoding '{config.encoding}' is not ASCII compatible.",
        ))
