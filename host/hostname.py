"""Hostname resolution fix and hostname change.

/etc/hosts is rewritten as a pure function of its current content, so
running a fix twice leaves the file unchanged the second time.
"""

import socket

import config
from exceptions import ValidationError
from logging_config import get_logger
from models import HostnameStatus, SystemPaths
from utils import (
    atomic_write,
    backup_file,
    command_exists,
    read_text,
    run_checked,
    sanitize_for_log,
    validate_hostname,
)

logger = get_logger(__name__)

_LOOPBACK_V4 = "127.0.0.1"
_LOOPBACK_V6 = "::1"


def get_current_hostname() -> str:
    """Return the kernel hostname."""
    return socket.gethostname()


def check_hostname_resolution(hostname: str) -> HostnameStatus:
    """Resolve hostname through NSS (hosts file, then DNS).

    Args:
        hostname: Name to resolve

    Returns:
        HostnameStatus with the first address, if any.
    """
    try:
        results = socket.getaddrinfo(hostname, None)
    except (socket.gaierror, OSError) as e:
        logger.debug("Hostname %s does not resolve: %s", sanitize_for_log(hostname), e)
        return HostnameStatus(hostname=hostname, resolves=False)

    if not results:
        return HostnameStatus(hostname=hostname, resolves=False)

    address = results[0][4][0]
    return HostnameStatus(hostname=hostname, resolves=True, address=address)


def update_hosts_content(
    content: str,
    hostname: str,
    old_names: tuple[str, ...] = (),
) -> str:
    """Return hosts content mapping hostname to 127.0.1.1.

    Process:
        1. Drop hostname and old names as aliases on 127.0.0.1 / ::1 lines
           (lines left with no names are removed)
        2. Rewrite an existing 127.0.1.1 line to carry only hostname
        3. Otherwise insert the 127.0.1.1 line after the last 127.0.0.1
           line, or at the top

    Args:
        content: Current /etc/hosts content
        hostname: Name that must resolve locally
        old_names: Previous hostnames to forget

    Returns:
        New content.
    """
    names = {hostname, *old_names}
    entry = f"{config.HOSTNAME_LOOPBACK}\t{hostname}"

    lines: list[str] = []
    has_entry = False
    for line in content.splitlines():
        body, _, comment = line.partition("#")
        fields = body.split()

        if fields and fields[0] == config.HOSTNAME_LOOPBACK:
            if not has_entry:
                lines.append(entry)
                has_entry = True
            continue

        if len(fields) >= 2 and fields[0] in (_LOOPBACK_V4, _LOOPBACK_V6):
            aliases = [name for name in fields[1:] if name not in names]
            if len(aliases) != len(fields) - 1:
                if not aliases:
                    continue
                line = "\t".join([fields[0], " ".join(aliases)])
                if comment:
                    line = f"{line} #{comment}"

        lines.append(line)

    if not has_entry:
        insert_at = 0
        for index, line in enumerate(lines):
            if line.split()[:1] == [_LOOPBACK_V4]:
                insert_at = index + 1
        lines.insert(insert_at, entry)

    return "\n".join(lines) + "\n"


def _rewrite_hosts(paths: SystemPaths, hostname: str, old_names: tuple[str, ...] = ()) -> bool:
    """Back up and rewrite /etc/hosts if its content must change."""
    content = read_text(paths.hosts) or ""
    desired = update_hosts_content(content, hostname, old_names)
    if desired == content:
        logger.debug("%s already maps %s", paths.hosts, sanitize_for_log(hostname))
        return False

    backup = backup_file(paths.hosts)
    if backup:
        logger.info("Backed up %s to %s", paths.hosts, backup)
    atomic_write(paths.hosts, desired)
    logger.info("Updated %s with hostname %s", paths.hosts, sanitize_for_log(hostname))
    return True


def fix_hostname_resolution(
    paths: SystemPaths,
    hostname: str | None = None,
) -> HostnameStatus:
    """Make the current hostname resolve to a loopback address.

    Returns:
        Resolution status after the fix.

    Raises:
        PermissionDeniedError: /etc/hosts cannot be written.
    """
    hostname = hostname or get_current_hostname()
    _rewrite_hosts(paths, hostname)

    status = check_hostname_resolution(hostname)
    if not status.resolves:
        logger.error("Failed to fix hostname resolution for %s", sanitize_for_log(hostname))
    return status


def set_system_hostname(new_hostname: str, paths: SystemPaths) -> None:
    """Set the hostname via hostnamectl, or /etc/hostname without systemd.

    Raises:
        CommandFailedError: hostnamectl or hostname failed.
        PermissionDeniedError: /etc/hostname cannot be written.
    """
    if command_exists("hostnamectl"):
        run_checked(["hostnamectl", "set-hostname", new_hostname])
        logger.info("Set hostname using hostnamectl")
        return

    atomic_write(paths.hostname, f"{new_hostname}\n")
    run_checked(["hostname", new_hostname])
    logger.info("Updated %s and current hostname", paths.hostname)


def change_hostname(new_hostname: str, paths: SystemPaths) -> HostnameStatus:
    """Change the hostname and keep /etc/hosts consistent.

    Args:
        new_hostname: Requested name (case-insensitive)
        paths: File locations

    Returns:
        Resolution status of the new hostname.

    Raises:
        ValidationError: Name is not a valid RFC 1123 label.
        CommandFailedError: Hostname could not be set.
        PermissionDeniedError: A file could not be written.
    """
    new_hostname = new_hostname.strip().lower()
    if not validate_hostname(new_hostname):
        raise ValidationError(
            code="invalid_hostname",
            message=(
                "Invalid hostname: use lowercase letters, digits and hyphens, "
                f"not starting or ending with a hyphen, at most {config.HOSTNAME_MAX_LENGTH} characters"
            ),
            details={"hostname": new_hostname},
        )

    old_hostname = get_current_hostname()
    set_system_hostname(new_hostname, paths)

    old_names = (old_hostname,) if old_hostname != new_hostname else ()
    _rewrite_hosts(paths, new_hostname, old_names)

    if get_current_hostname() != new_hostname:
        logger.warning("Hostname verification mismatch (this may require a reboot)")

    return check_hostname_resolution(new_hostname)
