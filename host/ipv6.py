"""IPv6 status, persistent disable and re-enable."""

import re
import time

import requests

import config
from exceptions import SystemOperationError
from logging_config import get_logger
from models import IPv6Status, SystemPaths
from utils import atomic_write, read_text, remove_path, run_checked, run_command
from utils.services import restart_if_active

logger = get_logger(__name__)

_SYSCTL_LINE = re.compile(r"^\s*net\.ipv6\.conf\.\S+\.disable_ipv6\s*=")


def ipv6_disabled() -> bool:
    """Return True if IPv6 is disabled on all interfaces."""
    output = run_command(["sysctl", "-n", config.IPV6_SYSCTL_KEYS[0]])
    return output is not None and output.strip() == "1"


def parse_global_ipv6_addresses(output: str) -> list[str]:
    """Extract global IPv6 addresses from ``ip -6 addr show`` output.

    Link-local, temporary and deprecated addresses are skipped.
    """
    addresses: list[str] = []
    for line in output.split("\n"):
        line = line.strip()
        if not line.startswith("inet6 "):
            continue
        if "scope global" not in line:
            continue
        if "temporary" in line or "deprecated" in line:
            continue

        match = re.search(r"inet6\s+([0-9a-f:]+)", line)
        if match and match.group(1) not in addresses:
            addresses.append(match.group(1))

    return addresses


def global_ipv6_addresses() -> list[str]:
    """Query global IPv6 addresses on all interfaces."""
    output = run_command(["ip", "-6", "addr", "show", "scope", "global"])
    if not output:
        return []
    return parse_global_ipv6_addresses(output)


def get_ipv6_status(paths: SystemPaths) -> IPv6Status:
    """Collect the current IPv6 state."""
    disabled = ipv6_disabled()
    return IPv6Status(
        disabled=disabled,
        addresses=[] if disabled else global_ipv6_addresses(),
        drop_in_present=paths.ipv6_sysctl_conf.exists(),
    )


def render_disable_config() -> str:
    """Render the sysctl drop-in that disables IPv6 persistently."""
    lines = ["# Disable IPv6 - managed by srvbase"]
    lines.extend(f"{key} = 1" for key in config.IPV6_SYSCTL_KEYS)
    return "\n".join(lines) + "\n"


def strip_sysctl_ipv6(content: str) -> str:
    """Drop disable_ipv6 assignments from sysctl.conf content."""
    kept = [line for line in content.splitlines() if not _SYSCTL_LINE.match(line)]
    if not kept:
        return ""
    return "\n".join(kept) + "\n"


def disable_ipv6(paths: SystemPaths) -> IPv6Status:
    """Disable IPv6 now and across reboots.

    Raises:
        PermissionDeniedError: The drop-in cannot be written.
    """
    atomic_write(paths.ipv6_sysctl_conf, render_disable_config(), mode=0o644)
    logger.info("Wrote %s", paths.ipv6_sysctl_conf)

    try:
        run_checked(["sysctl", "-p", str(paths.ipv6_sysctl_conf)])
    except SystemOperationError as e:
        logger.warning("Failed to apply %s: %s", paths.ipv6_sysctl_conf, e.message)

    status = get_ipv6_status(paths)
    if not status.disabled:
        logger.warning("IPv6 still enabled; a reboot may be required")
    return status


def enable_ipv6(paths: SystemPaths, probe: bool = True) -> IPv6Status:
    """Re-enable IPv6 and remove persistent disable settings.

    Process:
        1. Remove the sysctl drop-in
        2. Set every disable_ipv6 key to 0
        3. Strip disable_ipv6 lines from sysctl.conf
        4. Restart whichever network services are running
        5. Wait for addresses to settle, then verify

    Args:
        paths: File locations
        probe: Also test outbound IPv6 connectivity

    Raises:
        PermissionDeniedError: A sysctl file cannot be changed.
    """
    if remove_path(paths.ipv6_sysctl_conf):
        logger.info("Removed %s", paths.ipv6_sysctl_conf)

    for key in config.IPV6_SYSCTL_KEYS:
        try:
            run_checked(["sysctl", "-w", f"{key}=0"])
        except SystemOperationError as e:
            logger.warning("Failed to set %s: %s", key, e.message)

    content = read_text(paths.sysctl_conf)
    if content is not None:
        cleaned = strip_sysctl_ipv6(content)
        if cleaned != content:
            atomic_write(paths.sysctl_conf, cleaned)
            logger.info("Removed IPv6 disable settings from %s", paths.sysctl_conf)

    for unit in config.NETWORK_SERVICES:
        if restart_if_active(unit):
            logger.info("Restarted %s", unit)

    time.sleep(config.IPV6_SETTLE_SECONDS)

    status = get_ipv6_status(paths)
    if status.disabled:
        logger.warning("IPv6 still disabled; a reboot may be required")
    elif probe:
        status.connectivity = probe_ipv6_connectivity()
    return status


def probe_ipv6_connectivity(url: str = config.IPV6_PROBE_URL, timeout: int = config.TIMEOUT_SECONDS) -> bool:
    """Single attempt IPv6 request (fail-fast).

    Returns:
        True if an IPv6-only endpoint answered.
    """
    try:
        response = requests.get(url, timeout=timeout)
        response.raise_for_status()
        return True
    except requests.RequestException as e:
        logger.debug("IPv6 connectivity probe failed: %s", e)
        return False
