#!/usr/bin/env python3
"""Srvbase - Debian/Ubuntu server baseline tool.

Main entry point for the srvbase command-line tool.
"""

import argparse
import sys
import traceback
from pathlib import Path

from config import TOOL_NAME, VERSION, ExitCode
from display import (
    print_apt_sources_result,
    print_dns_summary,
    print_hostname_status,
    print_ipv6_status,
)
from enums import IPv6Action
from exceptions import (
    InputRequiredError,
    OSDetectionError,
    PermissionDeniedError,
    PrivilegeError,
    SrvbaseError,
    ValidationError,
)
from host import (
    change_hostname,
    check_hostname_resolution,
    disable_ipv6,
    enable_ipv6,
    fix_hostname_resolution,
    get_current_hostname,
    get_ipv6_status,
    plan_sources,
    reset_apt_sources,
)
from logging_config import get_logger, setup_logging
from models import SystemPaths
from orchestrator import check_dependencies, run_dns_setup
from prompts import ConsolePrompter, Prompter
from utils import require_root, sanitize_for_log
from utils.osinfo import read_os_release


def parse_arguments(argv: list[str] | None = None) -> argparse.Namespace:
    """Parse command-line arguments.

    Returns:
        Parsed arguments namespace.

    Exits:
        Code 4 if invalid argument combinations.
    """
    parser = argparse.ArgumentParser(
        description="Server baseline tool for Debian and Ubuntu",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  srvbase dns                 # Reconfigure DNS (IPv4 only)
  srvbase dns -6              # Reconfigure DNS with IPv6 servers
  srvbase hostname --fix      # Make the hostname resolve locally
  srvbase hostname --set web1 # Change the hostname
  srvbase ipv6 disable        # Disable IPv6 persistently
  srvbase apt-sources         # Reset APT sources to the official mirrors
  srvbase -v --log-file debug.log dns  # Log to file

Exit codes:
  0 - Success
  1 - General error
  2 - Missing dependencies
  3 - Permission denied
  4 - Invalid arguments
        """,
    )

    parser.add_argument(
        "-v",
        "--verbose",
        action="store_true",
        help="Enable debug logging",
    )

    parser.add_argument(
        "--log-file",
        type=Path,
        metavar="PATH",
        help="Write logs to file",
    )

    parser.add_argument(
        "--version",
        action="version",
        version=f"{TOOL_NAME} {VERSION}",
    )

    subparsers = parser.add_subparsers(dest="command", metavar="COMMAND")
    subparsers.required = True

    dns = subparsers.add_parser("dns", help="Reconfigure system DNS via systemd-resolved")
    dns.add_argument(
        "-6",
        "--ipv6",
        action="store_true",
        help="Include IPv6 DNS servers",
    )

    hostname = subparsers.add_parser("hostname", help="Check, fix or change the hostname")
    hostname.add_argument(
        "--fix",
        action="store_true",
        help="Make the current hostname resolve to 127.0.1.1",
    )
    hostname.add_argument(
        "--set",
        dest="new_hostname",
        metavar="NAME",
        help="Change the hostname",
    )

    ipv6 = subparsers.add_parser("ipv6", help="Show, enable or disable IPv6")
    ipv6.add_argument(
        "action",
        choices=[action.value for action in IPv6Action],
        help="Action to perform",
    )

    apt_sources = subparsers.add_parser(
        "apt-sources", help="Reset APT sources to the official mirrors"
    )
    apt_sources.add_argument(
        "--no-update",
        action="store_true",
        help="Skip apt-get update after rewriting the sources",
    )

    args = parser.parse_args(argv)

    # Validation: --fix and --set are exclusive
    if args.command == "hostname" and args.fix and args.new_hostname:
        print("Error: --fix and --set cannot be combined", file=sys.stderr)
        sys.exit(ExitCode.INVALID_ARGUMENTS)

    return args


def run_hostname(args: argparse.Namespace, prompter: Prompter, paths: SystemPaths) -> ExitCode:
    """Show, fix or change the hostname."""
    if args.new_hostname:
        current = get_current_hostname()
        print(f"Current hostname: {current}")
        if not prompter.confirm(f"Change hostname to '{args.new_hostname}'?", default=False):
            print("Hostname change cancelled.")
            return ExitCode.SUCCESS
        status = change_hostname(args.new_hostname, paths)
    elif args.fix:
        status = fix_hostname_resolution(paths)
    else:
        status = check_hostname_resolution(get_current_hostname())

    print_hostname_status(status)
    if (args.fix or args.new_hostname) and not status.resolves:
        return ExitCode.GENERAL_ERROR
    return ExitCode.SUCCESS


def run_ipv6(args: argparse.Namespace, prompter: Prompter, paths: SystemPaths) -> ExitCode:
    """Show, enable or disable IPv6."""
    action = IPv6Action(args.action)
    status = get_ipv6_status(paths)

    if action == IPv6Action.DISABLE:
        if status.disabled:
            print("IPv6 is already disabled.")
        elif not prompter.confirm("Disable IPv6 on all interfaces?", default=False):
            print("Exiting without changes.")
            return ExitCode.SUCCESS
        else:
            status = disable_ipv6(paths)
    elif action == IPv6Action.ENABLE:
        if not status.disabled and not status.drop_in_present:
            print("IPv6 is already enabled.")
        else:
            status = enable_ipv6(paths)

    print_ipv6_status(status)
    if status.connectivity is not None:
        result = "working" if status.connectivity else "not available"
        print(f"  IPv6 connectivity: {result}")

    if action == IPv6Action.DISABLE and not status.disabled:
        return ExitCode.GENERAL_ERROR
    if action == IPv6Action.ENABLE and status.disabled:
        return ExitCode.GENERAL_ERROR
    return ExitCode.SUCCESS


def run_apt_sources(args: argparse.Namespace, prompter: Prompter, paths: SystemPaths) -> ExitCode:
    """Reset APT sources after confirmation."""
    os_release = read_os_release(paths.os_release)
    print(f"Detected: {os_release.id} {os_release.version_id} ({os_release.codename})")

    # Fails on unsupported releases before asking
    plan_sources(os_release, paths)
    if not prompter.confirm(
        "Reset APT sources to the official mirrors? "
        "Third-party sources in sources.list.d will be removed.",
        default=False,
    ):
        print("Exiting without changes.")
        return ExitCode.SUCCESS

    result = reset_apt_sources(paths, os_release, update_index=not args.no_update)
    print_apt_sources_result(result)
    if not result.verified:
        return ExitCode.GENERAL_ERROR
    return ExitCode.SUCCESS


def run_dns(args: argparse.Namespace, prompter: Prompter, paths: SystemPaths) -> ExitCode:
    """Run the DNS workflow and print its summary."""
    result = run_dns_setup(prompter, ipv6=args.ipv6, paths=paths)
    if result is None:
        return ExitCode.SUCCESS

    print_dns_summary(result)
    if not result.verification.passed:
        return ExitCode.GENERAL_ERROR
    return ExitCode.SUCCESS


def main(argv: list[str] | None = None) -> None:
    """Main execution flow.

    Exit codes:
        0: Success
        1: General error
        2: Missing dependencies
        3: Permission denied
        4: Invalid arguments
    """
    args = parse_arguments(argv)

    # Setup logging (must be called before any logger usage)
    setup_logging(
        verbose=args.verbose,
        log_file=args.log_file,
        use_colors=True,  # Always enabled
    )

    logger = get_logger(__name__)

    try:
        require_root()

        # Check dependencies
        if not check_dependencies():
            logger.error("Missing required dependencies - cannot continue")
            sys.exit(ExitCode.MISSING_DEPENDENCIES)

        prompter = ConsolePrompter()
        paths = SystemPaths()

        if args.command == "dns":
            code = run_dns(args, prompter, paths)
        elif args.command == "hostname":
            code = run_hostname(args, prompter, paths)
        elif args.command == "ipv6":
            code = run_ipv6(args, prompter, paths)
        else:
            code = run_apt_sources(args, prompter, paths)

        sys.exit(code)

    except KeyboardInterrupt:
        logger.error("Interrupted by user")
        sys.exit(ExitCode.GENERAL_ERROR)
    except (PrivilegeError, PermissionDeniedError) as e:
        logger.error("%s", sanitize_for_log(e.message))
        sys.exit(ExitCode.PERMISSION_DENIED)
    except (InputRequiredError, ValidationError) as e:
        logger.error("%s", sanitize_for_log(e.message))
        sys.exit(ExitCode.INVALID_ARGUMENTS)
    except OSDetectionError as e:
        logger.error("Cannot detect operating system: %s", sanitize_for_log(e.message))
        sys.exit(ExitCode.GENERAL_ERROR)
    except SrvbaseError as e:
        logger.error("Error during execution: %s", sanitize_for_log(e.message))
        if args.verbose:
            traceback.print_exc()
        sys.exit(ExitCode.GENERAL_ERROR)
    except (OSError, ValueError, RuntimeError) as e:
        logger.error("Error during execution: %s", sanitize_for_log(str(e)))
        if args.verbose:
            traceback.print_exc()
        sys.exit(ExitCode.GENERAL_ERROR)


if __name__ == "__main__":
    main()
