"""Type-safe enumerations for srvbase.

All categorical values use enum types for type safety and consistency.
"""

from enum import Enum


class TransportMode(str, Enum):
    """DNS-over-TLS mode written to resolved.conf.

    OPPORTUNISTIC: Every selected provider has a TLS server name
    DISABLED: At least one provider (custom) lacks one, so the whole
        document falls back to plain DNS
    """

    OPPORTUNISTIC = "opportunistic"
    DISABLED = "no"


class ErrorKind(str, Enum):
    """Classification of failed OS operations."""

    PERMISSION_DENIED = "permission_denied"
    SERVICE_UNAVAILABLE = "service_unavailable"
    NOT_FOUND = "not_found"
    COMMAND_FAILED = "command_failed"


class IPv6Action(str, Enum):
    """Operations offered by the IPv6 tool."""

    STATUS = "status"
    ENABLE = "enable"
    DISABLE = "disable"
