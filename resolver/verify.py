"""Post-configuration DNS verification.

Each check is reported independently. Nothing here raises: state has
already been mutated, so a failed check becomes a warning, not an abort.
"""

import re
import socket

import config
from logging_config import get_logger
from models import HealthCheck, VerificationReport
from utils import command_succeeds, run_command
from utils.services import is_active

logger = get_logger(__name__)

# "Current DNS Server: ...", "resolv.conf mode: stub" (IPv6 has no colon-space)
_KEY_LINE = re.compile(r"^[A-Za-z][\w .-]*:(\s|$)")


def check_daemon_active() -> HealthCheck:
    """systemctl is-active systemd-resolved."""
    if is_active(config.RESOLVED_SERVICE):
        return HealthCheck("systemd-resolved active", True, "systemd-resolved is active")
    logger.warning("systemd-resolved is not running")
    return HealthCheck("systemd-resolved active", False, "systemd-resolved is not running")


def check_status_query() -> HealthCheck:
    """resolvectl status answers."""
    if command_succeeds([config.RESOLVED_CONTROL_COMMAND, "status"]):
        return HealthCheck("resolvectl status", True, "resolvectl is working")
    logger.warning("resolvectl status check failed")
    return HealthCheck("resolvectl status", False, "resolvectl status check failed")


def check_resolution(name: str = config.RESOLUTION_TEST_NAME) -> HealthCheck:
    """Resolve a well-known name through the system resolver."""
    try:
        results = socket.getaddrinfo(name, None)
    except (socket.gaierror, OSError) as e:
        logger.warning("DNS resolution test for %s failed: %s", name, e)
        return HealthCheck("name resolution", False, f"Could not resolve {name}")

    addresses = sorted({info[4][0] for info in results})
    logger.debug("%s resolved to %s", name, addresses)
    return HealthCheck(
        "name resolution",
        True,
        f"{name} resolved to {', '.join(addresses[:3])}",
    )


def verify_dns() -> VerificationReport:
    """Run all verification checks.

    Returns:
        VerificationReport with active, status and resolution checks.
    """
    return VerificationReport(
        checks=[
            check_daemon_active(),
            check_status_query(),
            check_resolution(),
        ]
    )


def parse_dns_servers(output: str) -> list[str]:
    """Parse every DNS Servers section from ``resolvectl status`` output.

    Addresses may sit on the header line or on indented continuation
    lines; a new key or an unindented line ends the section. DoT names
    (addr#name) are kept.

    Args:
        output: Full resolvectl status output

    Returns:
        Servers in order of appearance, deduplicated.
    """
    servers: list[str] = []
    in_section = False

    for line in output.splitlines():
        stripped = line.strip()
        if stripped.startswith("DNS Servers:"):
            in_section = True
            tokens = stripped.split(":", 1)[1].split()
        elif in_section and line[:1].isspace() and stripped and not _KEY_LINE.match(stripped):
            tokens = stripped.split()
        else:
            in_section = False
            continue

        for token in tokens:
            if token not in servers:
                servers.append(token)

    return servers


def current_dns_servers() -> list[str]:
    """DNS servers systemd-resolved reports (informational)."""
    output = run_command([config.RESOLVED_CONTROL_COMMAND, "status"])
    if not output:
        return []
    return parse_dns_servers(output)
