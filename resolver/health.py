"""DNS health check.

Read-only: captures the DNS-related system state in one pass and
evaluates three independent checks against it. Called both before
reconfiguration (to decide whether it is needed) and after.
"""

import config
from logging_config import get_logger
from models import HealthCheck, HealthReport, SystemDNSState, SystemPaths
from utils import is_executable, is_immutable, read_text
from utils.services import is_active

logger = get_logger(__name__)

CHECK_DAEMON = "systemd-resolved status"
CHECK_DHCLIENT = "dhclient.conf configuration"
CHECK_HOOK = "if-up.d conflict script"


def read_system_state(paths: SystemPaths) -> SystemDNSState:
    """Capture current DNS-related system state.

    Args:
        paths: File locations to inspect

    Returns:
        SystemDNSState snapshot.
    """
    target = None
    if paths.resolv_conf.is_symlink():
        target = str(paths.resolv_conf.readlink())

    state = SystemDNSState(
        daemon_active=is_active(config.RESOLVED_SERVICE),
        dhclient_content=read_text(paths.dhclient_conf),
        hook_executable=is_executable(paths.hook_script),
        resolv_conf_target=target,
        resolv_conf_immutable=is_immutable(paths.resolv_conf),
    )
    logger.debug("System DNS state: %s", state)
    return state


def dhclient_has_overrides(content: str | None) -> bool:
    """True if every override directive starts some line of content."""
    if content is None:
        return False
    lines = content.splitlines()
    return all(
        any(line.startswith(directive) for line in lines)
        for directive in config.DHCLIENT_DIRECTIVES
    )


def run_health_check(state: SystemDNSState) -> HealthReport:
    """Evaluate the three DNS health checks.

    Checks:
        1. Resolution daemon is active
        2. dhclient.conf exists and carries both override directives
        3. if-up.d hook is absent or non-executable

    Args:
        state: Snapshot from read_system_state

    Returns:
        HealthReport with one HealthCheck per check.
    """
    report = HealthReport()

    if state.daemon_active:
        report.checks.append(HealthCheck(CHECK_DAEMON, True, "Running"))
    else:
        report.checks.append(
            HealthCheck(CHECK_DAEMON, False, "Service not running or unresponsive")
        )

    if state.dhclient_content is None:
        report.checks.append(HealthCheck(CHECK_DHCLIENT, False, "dhclient.conf not found"))
    elif dhclient_has_overrides(state.dhclient_content):
        report.checks.append(HealthCheck(CHECK_DHCLIENT, True, "Properly configured"))
    else:
        report.checks.append(
            HealthCheck(CHECK_DHCLIENT, False, "'ignore' parameters not found")
        )

    if state.hook_executable:
        report.checks.append(
            HealthCheck(CHECK_HOOK, False, "Script exists and is executable")
        )
    else:
        report.checks.append(HealthCheck(CHECK_HOOK, True, "No conflicts"))

    for check in report.failed:
        logger.debug("Health check failed: %s (%s)", check.name, check.detail)

    return report


def check_system_health(paths: SystemPaths) -> HealthReport:
    """Read system state and run the health checks."""
    return run_health_check(read_system_state(paths))
