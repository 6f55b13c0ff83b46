"""systemd unit and apt package helpers.

Probes return booleans; mutations raise SystemOperationError subclasses
so callers can decide whether a failure is fatal.
"""

import config
from exceptions import CommandFailedError, ServiceUnavailableError
from logging_config import get_logger
from utils.system import command_succeeds, run_checked

logger = get_logger(__name__)

_APT_ENV = {"DEBIAN_FRONTEND": "noninteractive"}


def is_active(unit: str) -> bool:
    """Return True if the systemd unit is active."""
    return command_succeeds(["systemctl", "is-active", "--quiet", unit])


def unmask(unit: str) -> bool:
    """Unmask a unit (best effort: it may never have been masked)."""
    ok = command_succeeds(["systemctl", "unmask", unit])
    if not ok:
        logger.debug("systemctl unmask %s failed (ignored)", unit)
    return ok


def enable_and_start(unit: str) -> None:
    """Enable the unit at boot and start it now.

    Raises:
        ServiceUnavailableError: enable or start failed.
    """
    run_checked(["systemctl", "enable", unit], error_cls=ServiceUnavailableError)
    run_checked(["systemctl", "start", unit], error_cls=ServiceUnavailableError)


def restart(unit: str) -> None:
    """Restart the unit.

    Raises:
        ServiceUnavailableError: restart failed.
    """
    run_checked(["systemctl", "restart", unit], error_cls=ServiceUnavailableError)


def restart_if_active(unit: str) -> bool:
    """Restart the unit only if it is running; failures are ignored.

    Returns:
        True if the unit was restarted.
    """
    if not is_active(unit):
        return False
    return command_succeeds(["systemctl", "restart", unit])


def package_installed(package: str) -> bool:
    """Return True if dpkg knows the package as installed."""
    return command_succeeds(["dpkg", "-s", package])


def update_package_index() -> None:
    """Refresh the APT package index.

    Raises:
        CommandFailedError: apt-get failed or timed out.
    """
    run_checked(
        ["apt-get", "update", "-qq"],
        timeout=config.PACKAGE_TIMEOUT_SECONDS,
        error_cls=CommandFailedError,
        env=_APT_ENV,
    )


def install_package(package: str) -> None:
    """Install a package with apt-get (refreshes the index first).

    Raises:
        CommandFailedError: apt-get failed or timed out.
    """
    logger.info("Installing %s...", package)
    update_package_index()
    run_checked(
        ["apt-get", "install", "-y", package],
        timeout=config.PACKAGE_TIMEOUT_SECONDS,
        error_cls=CommandFailedError,
        env=_APT_ENV,
    )


def remove_package(package: str) -> None:
    """Remove a package with apt-get.

    Raises:
        CommandFailedError: apt-get failed or timed out.
    """
    logger.info("Removing %s...", package)
    run_checked(
        ["apt-get", "remove", "-y", package],
        timeout=config.PACKAGE_TIMEOUT_SECONDS,
        error_cls=CommandFailedError,
        env=_APT_ENV,
    )
