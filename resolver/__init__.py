"""DNS reconfiguration modules for srvbase.

Provides the provider catalog and selection, health checks, conflict
removal, systemd-resolved configuration and verification.
"""

from .conflicts import remove_conflicts, rewrite_dhclient_config
from .daemon import configure_daemon, render_resolver_config, wait_until_ready
from .health import check_system_health, read_system_state, run_health_check
from .selection import build_selection, parse_selection, select_providers
from .verify import current_dns_servers, verify_dns

__all__ = [
    # Health
    "read_system_state",
    "run_health_check",
    "check_system_health",
    # Selection
    "parse_selection",
    "build_selection",
    "select_providers",
    # Conflicts
    "rewrite_dhclient_config",
    "remove_conflicts",
    # Daemon
    "render_resolver_config",
    "configure_daemon",
    "wait_until_ready",
    # Verification
    "verify_dns",
    "current_dns_servers",
]
