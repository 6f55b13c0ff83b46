"""Configuration constants for srvbase.

All configurable values stored here for easy customization.
Single source of truth for all constants and configuration.
"""

from enum import IntEnum, StrEnum

# Required system commands
REQUIRED_COMMANDS: list[str] = ["systemctl", "ip", "sysctl", "dpkg"]

# Package that provides each required command
COMMAND_PACKAGES: dict[str, str] = {
    "systemctl": "systemd",
    "ip": "iproute2",
    "sysctl": "procps",
    "dpkg": "dpkg",
}

# Timeout and Retry
TIMEOUT_SECONDS: int = 10
PACKAGE_TIMEOUT_SECONDS: int = 600  # apt-get transactions can be slow
RETRY_BACKOFF_FACTOR: float = 0.25

# Daemon readiness polling (replaces a fixed settle delay)
READY_TIMEOUT_SECONDS: float = 15.0
READY_MAX_INTERVAL_SECONDS: float = 2.0

# Network reload settle delay after enabling IPv6
IPV6_SETTLE_SECONDS: float = 2.0

# Resolution daemon
RESOLVED_SERVICE: str = "systemd-resolved"
RESOLVED_PACKAGE: str = "systemd-resolved"
RESOLVED_CONTROL_COMMAND: str = "resolvectl"
STUB_LISTENER_ADDRESS: str = "127.0.0.53"

# Legacy resolver-management package (conflicts with systemd-resolved)
LEGACY_RESOLVER_PACKAGE: str = "resolvconf"

# Releases that still ship the legacy package by default.
# Maps os-release ID to VERSION_ID.
LEGACY_RESOLVER_RELEASES: dict[str, str] = {
    "debian": "11",
    "ubuntu": "22.04",
}

# DHCP client override directives
DHCLIENT_DIRECTIVES: tuple[str, ...] = (
    "supersede domain-name-servers",
    "prepend domain-name-servers",
)
DHCLIENT_MARKER: str = "# DNS override configuration - added by srvbase"

# Legacy /etc/network/interfaces directives that bypass the daemon
LEGACY_INTERFACE_DIRECTIVES: tuple[str, ...] = (
    "dns-nameservers",
    "dns-search",
)

# Verification
RESOLUTION_TEST_NAME: str = "google.com"

# IPv6 toggle
IPV6_SYSCTL_KEYS: tuple[str, ...] = (
    "net.ipv6.conf.all.disable_ipv6",
    "net.ipv6.conf.default.disable_ipv6",
    "net.ipv6.conf.lo.disable_ipv6",
)
IPV6_PROBE_URL: str = "https://v6.ipinfo.io/json"
NETWORK_SERVICES: tuple[str, ...] = ("networking", "NetworkManager")

# Hostname
LOCAL_ADDRESSES: frozenset[str] = frozenset({"127.0.0.1", "127.0.1.1", "::1"})
HOSTNAME_LOOPBACK: str = "127.0.1.1"
HOSTNAME_MAX_LENGTH: int = 63

# APT mirror reset
DEBIAN_MIRROR: str = "http://deb.debian.org/debian/"
DEBIAN_SECURITY_MIRROR: str = "http://deb.debian.org/debian-security"
UBUNTU_MIRROR: str = "http://archive.ubuntu.com/ubuntu/"
UBUNTU_SECURITY_MIRROR: str = "http://security.ubuntu.com/ubuntu/"
UBUNTU_COMPONENTS: str = "main restricted universe multiverse"
UBUNTU_KEYRING: str = "/usr/share/keyrings/ubuntu-archive-keyring.gpg"
# Removed from sources.list.d before the official sources are written
APT_STALE_SUFFIXES: tuple[str, ...] = (".list", ".sources", ".list.save", ".distUpgrade", ".gpg")

# Backup suffix (strftime format)
BACKUP_TIMESTAMP_FORMAT: str = "%Y%m%d_%H%M%S"


# Exit Codes (Professional: Use IntEnum)
class ExitCode(IntEnum):
    """Standard exit codes for srvbase.

    Using IntEnum provides:
    - Type safety
    - Prevents magic numbers
    - Standard Python pattern for exit codes
    """

    SUCCESS = 0
    GENERAL_ERROR = 1
    MISSING_DEPENDENCIES = 2
    PERMISSION_DENIED = 3
    INVALID_ARGUMENTS = 4


# ANSI Color Codes (StrEnum for type safety and enum benefits)
class Color(StrEnum):
    """ANSI color codes for status markers."""

    GREEN = "\033[92m"
    RED = "\033[91m"
    YELLOW = "\033[93m"
    RESET = "\033[0m"


# Tool Metadata
VERSION: str = "1.0.0"
TOOL_NAME: str = "srvbase"
