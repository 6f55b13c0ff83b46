"""Host baseline tools: APT sources, hostname resolution and IPv6 toggle."""

from .apt_sources import plan_sources, reset_apt_sources
from .hostname import (
    change_hostname,
    check_hostname_resolution,
    fix_hostname_resolution,
    get_current_hostname,
    update_hosts_content,
)
from .ipv6 import disable_ipv6, enable_ipv6, get_ipv6_status, probe_ipv6_connectivity

__all__ = [
    # APT sources
    "plan_sources",
    "reset_apt_sources",
    # Hostname
    "get_current_hostname",
    "check_hostname_resolution",
    "update_hosts_content",
    "fix_hostname_resolution",
    "change_hostname",
    # IPv6
    "get_ipv6_status",
    "disable_ipv6",
    "enable_ipv6",
    "probe_ipv6_connectivity",
]
