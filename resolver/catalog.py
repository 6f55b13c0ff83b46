"""Built-in DNS provider catalog.

Catalog entries are immutable and addressed by their 1-based menu index.
The custom provider takes the index after the last built-in entry and is
only ever constructed at runtime.
"""

from models import Provider

CATALOG: tuple[Provider, ...] = (
    Provider(
        name="Cloudflare",
        ipv4=("1.1.1.1", "1.0.0.1"),
        ipv6=("2606:4700:4700::1111", "2606:4700:4700::1001"),
        tls_name="cloudflare-dns.com",
    ),
    Provider(
        name="Google",
        ipv4=("8.8.8.8", "8.8.4.4"),
        ipv6=("2001:4860:4860::8888", "2001:4860:4860::8844"),
        tls_name="dns.google",
    ),
    Provider(
        name="Quad9",
        ipv4=("9.9.9.9", "149.112.112.112"),
        ipv6=("2620:fe::fe", "2620:fe::9"),
        tls_name="dns.quad9.net",
    ),
    Provider(
        name="OpenDNS",
        ipv4=("208.67.222.222", "208.67.220.220"),
        ipv6=("2620:119:35::35", "2620:119:53::53"),
        tls_name="dns.opendns.com",
    ),
    Provider(
        name="AdGuard",
        ipv4=("94.140.14.14", "94.140.15.15"),
        ipv6=("2a10:50c0::ad1:ff", "2a10:50c0::ad2:ff"),
        tls_name="dns.adguard.com",
    ),
    Provider(
        name="CleanBrowsing",
        ipv4=("185.228.168.9", "185.228.169.9"),
        ipv6=("2a0d:2a00:1::", "2a0d:2a00:2::"),
        tls_name="family-filter-dns.cleanbrowsing.org",
    ),
)

CUSTOM_INDEX: int = len(CATALOG) + 1
CUSTOM_NAME: str = "Custom"

# Cloudflare, Google, AdGuard
DEFAULT_SELECTION_INDICES: tuple[int, ...] = (1, 2, 5)


def get_provider(index: int) -> Provider | None:
    """Return the built-in provider at a 1-based index, or None."""
    if 1 <= index <= len(CATALOG):
        return CATALOG[index - 1]
    return None


def is_known_index(index: int) -> bool:
    """True for built-in indices and the custom index."""
    return get_provider(index) is not None or index == CUSTOM_INDEX


def describe_catalog() -> list[str]:
    """Menu lines for the selection prompt."""
    lines = []
    for index, provider in enumerate(CATALOG, start=1):
        lines.append(
            f"  {index}) {provider.name} ({', '.join(provider.ipv4)})"
            f" - DoT: {provider.tls_name}"
        )
    lines.append(f"  {CUSTOM_INDEX}) {CUSTOM_NAME} DNS (define your own)")
    return lines
