"""Data models for DNS, hostname and IPv6 configuration.

Providers, selections and rendered configs are frozen dataclasses: they are
computed fresh on every run and threaded through the pipeline as values.
Live system state is captured in plain dataclasses read in one pass.
"""

from dataclasses import dataclass, field, replace
from pathlib import Path

import config
from enums import TransportMode


@dataclass(frozen=True)
class Provider:
    """A named DNS service offering.

    tls_name is the server identity used to authenticate DNS-over-TLS
    sessions with every endpoint of this provider.
    """

    name: str
    ipv4: tuple[str, ...]
    ipv6: tuple[str, ...] = ()
    tls_name: str | None = None

    def endpoints(self) -> list[str]:
        """Render endpoints in resolved.conf syntax (addr#tls_name).

        IPv4 endpoints come first, then IPv6.
        """
        addresses = list(self.ipv4) + list(self.ipv6)
        if not self.tls_name:
            return addresses
        return [f"{address}#{self.tls_name}" for address in addresses]

    def without_ipv6(self) -> "Provider":
        """Return a copy with IPv6 endpoints removed."""
        return replace(self, ipv6=())


@dataclass(frozen=True)
class Selection:
    """Ordered, deduplicated list of chosen providers.

    The first provider is primary; the rest are fallback.
    """

    providers: tuple[Provider, ...]
    ipv6: bool = False
    used_default: bool = False

    def __post_init__(self) -> None:
        if not self.providers:
            raise ValueError("Selection must contain at least one provider")
        names = [p.name for p in self.providers]
        if len(names) != len(set(names)):
            raise ValueError(f"Duplicate providers in selection: {names}")

    @property
    def primary(self) -> Provider:
        return self.providers[0]

    @property
    def fallback(self) -> tuple[Provider, ...]:
        return self.providers[1:]

    @property
    def names(self) -> list[str]:
        return [p.name for p in self.providers]

    @property
    def dns_over_tls(self) -> bool:
        """True only if every selected provider has a TLS server name."""
        return all(p.tls_name for p in self.providers)


@dataclass(frozen=True)
class ResolverConfig:
    """Generated systemd-resolved configuration document."""

    dns: str
    fallback_dns: str
    dns_over_tls: TransportMode
    dnssec: str = "yes"

    @classmethod
    def from_selection(cls, selection: Selection) -> "ResolverConfig":
        """Derive config fields from a selection.

        DNS-over-TLS is all-or-nothing for the whole document.
        """
        fallback: list[str] = []
        for provider in selection.fallback:
            fallback.extend(provider.endpoints())

        mode = (
            TransportMode.OPPORTUNISTIC
            if selection.dns_over_tls
            else TransportMode.DISABLED
        )
        return cls(
            dns=" ".join(selection.primary.endpoints()),
            fallback_dns=" ".join(fallback),
            dns_over_tls=mode,
        )

    def render(self) -> str:
        """Render the full resolved.conf document."""
        lines = [
            "[Resolve]",
            f"DNS={self.dns}",
            f"FallbackDNS={self.fallback_dns}",
            "Domains=~.",
            f"DNSSEC={self.dnssec}",
            f"DNSOverTLS={self.dns_over_tls.value}",
            "Cache=yes",
            "CacheFromLocalhost=no",
            "DNSStubListener=yes",
            f"DNSStubListenerExtra={config.STUB_LISTENER_ADDRESS}",
            "ReadEtcHosts=yes",
            "ResolveUnicastSingleLabel=no",
        ]
        return "\n".join(lines) + "\n"


@dataclass(frozen=True)
class SystemPaths:
    """Every file the tools inspect or modify.

    Defaults are the real system locations; tests point them elsewhere.
    """

    dhclient_conf: Path = Path("/etc/dhcp/dhclient.conf")
    hook_script: Path = Path("/etc/network/if-up.d/resolved")
    interfaces: Path = Path("/etc/network/interfaces")
    resolved_conf: Path = Path("/etc/systemd/resolved.conf")
    resolv_conf: Path = Path("/etc/resolv.conf")
    stub_resolv_conf: Path = Path("/run/systemd/resolve/stub-resolv.conf")
    os_release: Path = Path("/etc/os-release")
    hosts: Path = Path("/etc/hosts")
    hostname: Path = Path("/etc/hostname")
    ipv6_sysctl_conf: Path = Path("/etc/sysctl.d/99-disable-ipv6.conf")
    sysctl_conf: Path = Path("/etc/sysctl.conf")
    apt_sources_list: Path = Path("/etc/apt/sources.list")
    apt_sources_dir: Path = Path("/etc/apt/sources.list.d")

    @classmethod
    def under(cls, root: Path) -> "SystemPaths":
        """Rebase every default path under root (used by tests)."""
        defaults = cls()
        rebased = {
            name: root / str(path).lstrip("/")
            for name, path in vars(defaults).items()
        }
        return cls(**rebased)


@dataclass
class SystemDNSState:
    """Snapshot of DNS-related system state.

    Read as one unit by the health checker and never mutated in place.
    """

    daemon_active: bool
    dhclient_content: str | None  # None if the file is absent
    hook_executable: bool
    resolv_conf_target: str | None  # Symlink target or None
    resolv_conf_immutable: bool = False


@dataclass
class HealthCheck:
    """Outcome of a single check."""

    name: str
    passed: bool
    detail: str


@dataclass
class HealthReport:
    """Aggregate of independent checks."""

    checks: list[HealthCheck] = field(default_factory=list)

    @property
    def passed(self) -> bool:
        return all(check.passed for check in self.checks)

    @property
    def failed(self) -> list[HealthCheck]:
        return [check for check in self.checks if not check.passed]


@dataclass
class VerificationReport(HealthReport):
    """Post-configuration checks (daemon active, status query, resolution)."""


@dataclass
class DaemonOutcome:
    """Result of configuring systemd-resolved.

    warnings collects recoverable failures (package install, service
    start) that were reported but did not stop the pipeline.
    """

    config: ResolverConfig
    ready: bool
    actions: list[str] = field(default_factory=list)
    warnings: list[str] = field(default_factory=list)


@dataclass
class DNSSetupResult:
    """Everything a DNS run produced, for the final summary."""

    selection: Selection
    config: ResolverConfig
    health: HealthReport
    verification: VerificationReport
    actions: list[str] = field(default_factory=list)
    warnings: list[str] = field(default_factory=list)


@dataclass
class OSRelease:
    """Minimal view of /etc/os-release."""

    id: str
    version_id: str
    codename: str = ""

    @property
    def is_legacy_resolver_release(self) -> bool:
        """True on the release that still ships resolvconf by default."""
        return config.LEGACY_RESOLVER_RELEASES.get(self.id) == self.version_id


@dataclass
class HostnameStatus:
    """Result of resolving the machine's hostname."""

    hostname: str
    resolves: bool
    address: str | None = None

    @property
    def is_local(self) -> bool:
        return self.address in config.LOCAL_ADDRESSES


@dataclass
class IPv6Status:
    """Current IPv6 state of the host."""

    disabled: bool
    addresses: list[str] = field(default_factory=list)
    drop_in_present: bool = False
    connectivity: bool | None = None  # None when not probed


@dataclass
class AptSourcesResult:
    """Outcome of resetting the APT sources to the official mirrors."""

    os_release: OSRelease
    backup_dir: Path | None
    written: list[Path] = field(default_factory=list)
    removed: dict[str, int] = field(default_factory=dict)
    index_updated: bool = False
    entries: list[str] = field(default_factory=list)
    sources_files: list[str] = field(default_factory=list)

    @property
    def removed_total(self) -> int:
        return sum(self.removed.values())

    @property
    def verified(self) -> bool:
        """True if APT ends up with at least one active source."""
        return bool(self.entries or self.sources_files)
