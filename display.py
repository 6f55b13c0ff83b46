"""Operator-facing status output.

Every check and phase prints one human-readable line with a success or
warning marker. Logging stays for diagnostics; this module is what the
operator reads.
"""

import sys
from typing import TextIO

from config import Color
from enums import TransportMode
from models import (
    AptSourcesResult,
    DNSSetupResult,
    HealthCheck,
    HealthReport,
    HostnameStatus,
    IPv6Status,
)

RULE_WIDTH = 40


def _marker(passed: bool) -> str:
    if passed:
        return f"{Color.GREEN}✓{Color.RESET}"
    return f"{Color.YELLOW}!{Color.RESET}"


def _banner(title: str, file: TextIO, color: str = "") -> None:
    reset = Color.RESET if color else ""
    print(f"{color}{'=' * RULE_WIDTH}{reset}", file=file)
    print(f"{color}{title}{reset}", file=file)
    print(f"{color}{'=' * RULE_WIDTH}{reset}", file=file)


def format_check(index: int, check: HealthCheck) -> str:
    """Format one check as a numbered status line."""
    return f"{index}. {check.name}... {_marker(check.passed)} {check.detail}"


def print_health_report(report: HealthReport, file: TextIO | None = None) -> None:
    """Print the pre-configuration health check."""
    if file is None:
        file = sys.stdout

    print("\n--- Starting comprehensive system DNS health check ---", file=file)
    for index, check in enumerate(report.checks, start=1):
        print(format_check(index, check), file=file)

    print("", file=file)
    if report.passed:
        print(f"{Color.GREEN}==> All checks passed! DNS configuration is healthy.{Color.RESET}", file=file)
    else:
        print(
            f"{Color.YELLOW}--> One or more checks failed. "
            f"Running full purification and hardening process...{Color.RESET}",
            file=file,
        )


def print_verification_report(report: HealthReport, file: TextIO | None = None) -> None:
    """Print post-configuration verification results."""
    if file is None:
        file = sys.stdout

    print("\n--- Verifying DNS configuration ---", file=file)
    for index, check in enumerate(report.checks, start=1):
        print(format_check(index, check), file=file)


def print_dns_summary(result: DNSSetupResult, file: TextIO | None = None) -> None:
    """Print which providers and security features ended up active.

    Always printed, even when some verification checks failed.
    """
    if file is None:
        file = sys.stdout

    dot = result.config.dns_over_tls == TransportMode.OPPORTUNISTIC

    print("", file=file)
    if result.verification.passed and not result.warnings:
        _banner("DNS setup completed successfully!", file, Color.GREEN)
    else:
        _banner("DNS setup completed with warnings", file, Color.YELLOW)
        for warning in result.warnings:
            print(f"  {_marker(False)} {warning}", file=file)
        for check in result.verification.failed:
            print(f"  {_marker(False)} {check.detail}", file=file)

    print("\nYour system is now using:", file=file)
    for name in result.selection.names:
        suffix = " (DNS-over-TLS)" if dot else ""
        print(f"  • {name} DNS{suffix}", file=file)
    if result.selection.used_default:
        print("  (default selection)", file=file)

    print("\nSecurity features enabled:", file=file)
    print(f"  • DNSSEC: {'Yes' if result.config.dnssec == 'yes' else 'No'}", file=file)
    if dot:
        print("  • DNS-over-TLS: Opportunistic", file=file)
    else:
        print("  • DNS-over-TLS: Disabled (custom DNS without DoT support)", file=file)
    if result.selection.ipv6:
        print("  • IPv6 support: Enabled", file=file)
    else:
        print("  • IPv6 support: Disabled (use -6 flag to enable)", file=file)
    print("", file=file)


def print_hostname_status(status: HostnameStatus, file: TextIO | None = None) -> None:
    """Print whether the hostname resolves, and to what."""
    if file is None:
        file = sys.stdout

    print(f"\nCurrent hostname: {status.hostname}", file=file)
    if not status.resolves:
        print(f"{_marker(False)} Hostname does NOT resolve", file=file)
    elif status.is_local:
        print(f"{_marker(True)} Hostname resolves to {status.address} (localhost)", file=file)
    else:
        print(f"{_marker(False)} Hostname resolves to {status.address} (not localhost)", file=file)


def print_ipv6_status(status: IPv6Status, file: TextIO | None = None) -> None:
    """Print current IPv6 state and global addresses."""
    if file is None:
        file = sys.stdout

    print("\nCurrent IPv6 Status:", file=file)
    if status.disabled:
        print(f"  Status: {Color.RED}DISABLED{Color.RESET}", file=file)
    else:
        print(f"  Status: {Color.GREEN}ENABLED{Color.RESET}", file=file)

    if status.drop_in_present:
        print("  Persistent disable configuration is installed", file=file)

    if status.addresses:
        print("  IPv6 addresses detected:", file=file)
        for address in status.addresses:
            print(f"    {address}", file=file)


def print_apt_sources_result(result: AptSourcesResult, file: TextIO | None = None) -> None:
    """Print what the APT sources reset changed and what APT now uses."""
    if file is None:
        file = sys.stdout

    if result.backup_dir is not None:
        print(f"\nBackup location: {result.backup_dir}", file=file)

    if result.removed_total:
        print(f"{_marker(True)} Removed {result.removed_total} file(s) from sources.list.d", file=file)
    else:
        print("No third-party sources found in sources.list.d", file=file)

    for path in result.written:
        print(f"{_marker(True)} Wrote {path}", file=file)

    if result.index_updated:
        print(f"{_marker(True)} APT cache updated", file=file)
    else:
        print(f"{_marker(False)} APT cache not updated", file=file)

    if result.entries:
        print("\nActive sources.list entries:", file=file)
        for entry in result.entries:
            print(f"  {entry}", file=file)
    if result.sources_files:
        print("\nDEB822 source files:", file=file)
        for name in result.sources_files:
            print(f"  • {name}", file=file)

    print("", file=file)
    release = f"{result.os_release.id} {result.os_release.version_id}"
    if result.verified:
        _banner("APT sources reset successfully!", file, Color.GREEN)
        print(f"Your system is now using official {release} repositories", file=file)
    else:
        _banner("No APT sources found!", file, Color.RED)
