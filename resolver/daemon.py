"""systemd-resolved installation and configuration.

Failure semantics follow a best-effort, verify-at-the-end approach:
package and service failures are reported and the pipeline continues;
only an inability to write configuration files is fatal.
"""

import time
from collections.abc import Callable
from typing import Any

import config
from exceptions import PermissionDeniedError, SystemOperationError
from logging_config import get_logger
from models import DaemonOutcome, OSRelease, ResolverConfig, Selection, SystemPaths
from utils import (
    atomic_write,
    clear_immutable,
    command_exists,
    command_succeeds,
    remove_path,
)
from utils.services import (
    enable_and_start,
    install_package,
    package_installed,
    remove_package,
    restart,
    unmask,
)

logger = get_logger(__name__)


def render_resolver_config(selection: Selection) -> str:
    """Render resolved.conf content for a selection."""
    return ResolverConfig.from_selection(selection).render()


def ensure_daemon_installed() -> bool:
    """Install systemd-resolved if resolvectl is missing.

    Returns:
        True if a package was installed, False if already present.

    Raises:
        CommandFailedError: apt-get failed.
    """
    if command_exists(config.RESOLVED_CONTROL_COMMAND):
        return False

    logger.info("%s not found, installing %s...", config.RESOLVED_CONTROL_COMMAND, config.RESOLVED_PACKAGE)
    install_package(config.RESOLVED_PACKAGE)
    return True


def remove_legacy_resolver_package(os_release: OSRelease, paths: SystemPaths) -> bool:
    """Uninstall resolvconf on the legacy release and drop its stale resolv.conf.

    Returns:
        True if the package was removed.

    Raises:
        CommandFailedError: apt-get remove failed.
        PermissionDeniedError: resolv.conf could not be removed.
    """
    if not os_release.is_legacy_resolver_release:
        return False
    if not package_installed(config.LEGACY_RESOLVER_PACKAGE):
        return False

    logger.info(
        "Detected '%s' on %s %s, uninstalling...",
        config.LEGACY_RESOLVER_PACKAGE,
        os_release.id,
        os_release.version_id,
    )
    remove_package(config.LEGACY_RESOLVER_PACKAGE)
    clear_immutable(paths.resolv_conf)
    remove_path(paths.resolv_conf)
    return True


def enable_daemon() -> None:
    """Unmask (best effort), enable and start systemd-resolved.

    Raises:
        ServiceUnavailableError: enable or start failed.
    """
    unmask(config.RESOLVED_SERVICE)
    enable_and_start(config.RESOLVED_SERVICE)


def write_resolver_config(resolver_config: ResolverConfig, paths: SystemPaths) -> None:
    """Replace resolved.conf entirely with the rendered config.

    Raises:
        PermissionDeniedError: File cannot be written.
    """
    atomic_write(paths.resolved_conf, resolver_config.render())
    logger.info("Wrote %s", paths.resolved_conf)


def link_resolv_conf(paths: SystemPaths) -> None:
    """Point /etc/resolv.conf at the daemon's stub file.

    Clears an immutable attribute first; it is not restored, since the
    symlink must stay writable.

    Raises:
        PermissionDeniedError: File cannot be unlocked, removed or linked.
    """
    clear_immutable(paths.resolv_conf)
    remove_path(paths.resolv_conf)
    try:
        paths.resolv_conf.symlink_to(paths.stub_resolv_conf)
    except PermissionError as e:
        raise PermissionDeniedError(
            code="symlink_denied",
            message=f"Cannot link {paths.resolv_conf}: {e}",
            details={"path": str(paths.resolv_conf)},
        ) from e
    logger.info("Linked %s -> %s", paths.resolv_conf, paths.stub_resolv_conf)


def restart_daemon() -> None:
    """Restart systemd-resolved.

    Raises:
        ServiceUnavailableError: restart failed.
    """
    restart(config.RESOLVED_SERVICE)


def wait_until_ready(
    timeout: float = config.READY_TIMEOUT_SECONDS,
    max_interval: float = config.READY_MAX_INTERVAL_SECONDS,
) -> bool:
    """Poll ``resolvectl status`` until it answers or timeout elapses.

    Backoff doubles from RETRY_BACKOFF_FACTOR up to max_interval.

    Returns:
        True once the daemon answers, False if it never did.
    """
    deadline = time.monotonic() + timeout
    attempt = 0

    while True:
        if command_succeeds([config.RESOLVED_CONTROL_COMMAND, "status"]):
            logger.debug("Daemon ready after %d polls", attempt + 1)
            return True

        remaining = deadline - time.monotonic()
        if remaining <= 0:
            logger.warning("systemd-resolved not ready after %.0fs", timeout)
            return False

        delay = min(config.RETRY_BACKOFF_FACTOR * (2**attempt), max_interval, remaining)
        time.sleep(delay)
        attempt += 1


def _attempt(
    step: str,
    warnings: list[str],
    func: Callable[..., Any],
    *args: Any,
) -> Any:
    """Run a recoverable step, recording a warning instead of raising.

    Fatal errors (e.g. PermissionDeniedError) still propagate.
    """
    try:
        return func(*args)
    except SystemOperationError as e:
        if e.fatal:
            raise
        logger.warning("%s failed: %s", step, e.message)
        warnings.append(f"{step}: {e.message}")
        return None


def configure_daemon(
    selection: Selection,
    paths: SystemPaths,
    os_release: OSRelease,
) -> DaemonOutcome:
    """Install, enable and configure systemd-resolved for a selection.

    Steps:
        1. Install the daemon if missing
        2. Remove the legacy resolver package (legacy release only)
        3. Unmask, enable and start the service
        4. Write resolved.conf (full replacement)
        5. Re-point /etc/resolv.conf at the stub file
        6. Restart and wait until the daemon answers

    Raises:
        PermissionDeniedError: A config file could not be written.
    """
    resolver_config = ResolverConfig.from_selection(selection)
    outcome = DaemonOutcome(config=resolver_config, ready=False)

    if _attempt("Install systemd-resolved", outcome.warnings, ensure_daemon_installed):
        outcome.actions.append(f"Installed {config.RESOLVED_PACKAGE}")

    if _attempt(
        "Remove legacy resolver package",
        outcome.warnings,
        remove_legacy_resolver_package,
        os_release,
        paths,
    ):
        outcome.actions.append(f"Uninstalled {config.LEGACY_RESOLVER_PACKAGE}")

    logger.info("Enabling and starting %s...", config.RESOLVED_SERVICE)
    _attempt("Enable systemd-resolved", outcome.warnings, enable_daemon)

    write_resolver_config(resolver_config, paths)
    outcome.actions.append(f"Wrote {paths.resolved_conf}")

    link_resolv_conf(paths)
    outcome.actions.append(f"Linked {paths.resolv_conf} to {paths.stub_resolv_conf}")

    _attempt("Restart systemd-resolved", outcome.warnings, restart_daemon)
    outcome.ready = wait_until_ready()
    if not outcome.ready:
        outcome.warnings.append("systemd-resolved did not become ready in time")

    return outcome
