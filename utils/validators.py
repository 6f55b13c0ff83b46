"""Input validation utilities.

Provides validation for IP addresses and host names typed by the operator.
"""

import ipaddress
import re

import config

# RFC 1123 label, lowercase only (hostnamectl normalizes to lowercase)
_HOSTNAME_LABEL = re.compile(r"^[a-z0-9]([-a-z0-9]*[a-z0-9])?$")
_DNS_LABEL = re.compile(r"^[a-z0-9]([-a-z0-9]*[a-z0-9])?$", re.IGNORECASE)


def is_valid_ipv4(address: str | None) -> bool:
    """Validate IPv4 address.

    Args:
        address: IPv4 address string or None

    Returns:
        True if valid IPv4 address, False otherwise.
    """
    if not address:
        return False
    try:
        ipaddress.IPv4Address(address)
        return True
    except ValueError:
        return False


def is_valid_ipv6(address: str | None) -> bool:
    """Validate IPv6 address.

    Strips zone identifier (e.g., %eth0) before validation.

    Args:
        address: IPv6 address string or None

    Returns:
        True if valid IPv6 address, False otherwise.
    """
    if not address:
        return False

    # Strip zone identifier (fe80::1%eth0 → fe80::1)
    address = address.split("%")[0]

    try:
        ipaddress.IPv6Address(address)
        return True
    except ValueError:
        return False


def is_valid_ip(address: str | None) -> bool:
    """Validate IPv4 or IPv6 address."""
    return is_valid_ipv4(address) or is_valid_ipv6(address)


def validate_hostname(name: str | None) -> bool:
    """Validate a machine hostname (single RFC 1123 label).

    Must:
        - Start and end with a lowercase letter or digit
        - Contain only lowercase letters, digits and hyphens
        - Be at most 63 characters

    Args:
        name: Candidate hostname

    Returns:
        True if valid, False otherwise.
    """
    if not name or len(name) > config.HOSTNAME_MAX_LENGTH:
        return False
    return bool(_HOSTNAME_LABEL.match(name))


def is_valid_dns_name(name: str | None) -> bool:
    """Validate a fully qualified DNS name (e.g. a DNS-over-TLS server name).

    Args:
        name: Candidate name, optionally with a trailing dot

    Returns:
        True if every label is valid and the total length is at most 253.
    """
    if not name:
        return False

    name = name.rstrip(".")
    if not name or len(name) > 253:
        return False

    labels = name.split(".")
    if len(labels) < 2:
        return False

    return all(
        len(label) <= config.HOSTNAME_MAX_LENGTH and _DNS_LABEL.match(label)
        for label in labels
    )
