"""Orchestrator for the DNS reconfiguration workflow.

Coordinates the resolver modules in a fixed order:
health check → provider selection → conflict removal →
daemon configuration → verification.
"""

import sys
from typing import TextIO

import config
from display import print_health_report, print_verification_report
from logging_config import get_logger
from models import DNSSetupResult, SystemPaths
from prompts import Prompter
from resolver import (
    check_system_health,
    configure_daemon,
    current_dns_servers,
    remove_conflicts,
    select_providers,
    verify_dns,
)
from utils import command_exists
from utils.osinfo import read_os_release

logger = get_logger(__name__)


def check_dependencies() -> bool:
    """Check all required system commands exist.

    Returns:
        True if all dependencies present, False otherwise.

    Logs:
        ERROR for each missing command with install hint.
    """
    missing = []

    for cmd in config.REQUIRED_COMMANDS:
        if not command_exists(cmd):
            missing.append(cmd)
            logger.error("Error: Missing required command: %s", cmd)
            package = config.COMMAND_PACKAGES.get(cmd)
            if package:
                logger.error("  Install: sudo apt install %s", package)

    return not missing


def run_dns_setup(
    prompter: Prompter,
    ipv6: bool = False,
    paths: SystemPaths | None = None,
    file: TextIO | None = None,
) -> DNSSetupResult | None:
    """Run the DNS workflow end to end.

    Process:
        1. Identify the host OS (fatal if impossible)
        2. Health check; if it passes, ask whether to force a rerun
        3. Select providers (before any mutation, since the custom
           provider prompt may abort)
        4. Remove conflicting DNS sources
        5. Configure systemd-resolved
        6. Verify

    Args:
        prompter: Source of operator answers
        ipv6: Include IPv6 endpoints
        paths: File locations (default: real system paths)
        file: Output stream for status lines (default: sys.stdout)

    Returns:
        DNSSetupResult, or None if the system was healthy and the
        operator declined to rerun.

    Raises:
        OSDetectionError: /etc/os-release missing or invalid.
        InputRequiredError: Custom provider left without IPv4 servers.
        PermissionDeniedError: A config file could not be written.
    """
    if paths is None:
        paths = SystemPaths()
    if file is None:
        file = sys.stdout

    # Step 1: Identify host OS
    os_release = read_os_release(paths.os_release)
    logger.info("Detected: %s %s", os_release.id, os_release.version_id)

    # Step 2: Health check
    health = check_system_health(paths)
    print_health_report(health, file=file)

    if health.passed:
        print("No action needed. System is already properly configured.", file=file)
        if not prompter.confirm(
            "Do you want to force rerun the DNS configuration anyway?", default=True
        ):
            print("Exiting without changes.", file=file)
            return None
        logger.info("Forcing DNS reconfiguration as requested")

    # Step 3: Provider selection
    selection = select_providers(prompter, ipv6, file=file)

    # Step 4: Remove conflict sources
    print("\n--- Removing DNS conflict sources ---", file=file)
    actions = remove_conflicts(paths)

    # Step 5: Configure systemd-resolved
    print("--- Configuring systemd-resolved ---", file=file)
    outcome = configure_daemon(selection, paths, os_release)
    actions.extend(outcome.actions)
    for action in actions:
        print(f"  {action}", file=file)

    # Step 6: Verify
    verification = verify_dns()
    print_verification_report(verification, file=file)

    servers = current_dns_servers()
    if servers:
        print(f"  Active DNS servers: {', '.join(servers)}", file=file)

    return DNSSetupResult(
        selection=selection,
        config=outcome.config,
        health=health,
        verification=verification,
        actions=actions,
        warnings=outcome.warnings,
    )
