"""Provider selection.

Turns the operator's space-separated menu indices into a Selection.
Unknown tokens are dropped silently; an empty result falls back to the
default selection instead of failing.
"""

import sys
from typing import Callable, TextIO

from exceptions import InputRequiredError
from logging_config import get_logger
from models import Provider, Selection
from prompts import Prompter
from resolver.catalog import (
    CUSTOM_INDEX,
    CUSTOM_NAME,
    DEFAULT_SELECTION_INDICES,
    describe_catalog,
    get_provider,
    is_known_index,
)
from utils import is_valid_dns_name, is_valid_ipv4, is_valid_ipv6, sanitize_for_log

logger = get_logger(__name__)


def parse_selection(text: str) -> list[int]:
    """Parse menu indices, keeping first-occurrence order.

    Args:
        text: Free text such as "3 1 2"

    Returns:
        Known indices, deduplicated.
    """
    indices: list[int] = []
    for token in text.split():
        if not (token.isascii() and token.isdigit()):
            logger.debug("Ignoring selection token %s", sanitize_for_log(token))
            continue
        index = int(token)
        if not is_known_index(index):
            logger.debug("Ignoring unknown provider index %d", index)
            continue
        if index not in indices:
            indices.append(index)
    return indices


def _split_addresses(
    text: str,
    validator: Callable[[str], bool],
    family: str,
) -> tuple[str, ...]:
    """Split a space-separated address list, dropping invalid entries."""
    valid = []
    for token in text.split():
        if validator(token):
            valid.append(token)
        else:
            logger.warning("Ignoring invalid %s address: %s", family, sanitize_for_log(token))
    return tuple(valid)


def prompt_custom_provider(prompter: Prompter, ipv6: bool) -> Provider:
    """Ask the operator to define a custom provider.

    Args:
        prompter: Source of answers
        ipv6: Also ask for IPv6 endpoints

    Returns:
        Runtime-only Provider named "Custom".

    Raises:
        InputRequiredError: No valid IPv4 endpoint was given.
    """
    ipv4_text = prompter.ask(
        "IPv4 DNS servers (space-separated, e.g. '1.1.1.1 1.0.0.1')"
    )
    ipv4 = _split_addresses(ipv4_text, is_valid_ipv4, "IPv4")
    if not ipv4:
        raise InputRequiredError(
            code="custom_ipv4_required",
            message="IPv4 DNS servers are required for custom DNS",
        )

    ipv6_endpoints: tuple[str, ...] = ()
    if ipv6:
        ipv6_text = prompter.ask("IPv6 DNS servers (space-separated, optional)")
        ipv6_endpoints = _split_addresses(ipv6_text, is_valid_ipv6, "IPv6")

    tls_name: str | None = prompter.ask(
        "DNS-over-TLS hostname (e.g. 'dns.example.com', empty if not supported)"
    ) or None
    if tls_name and not is_valid_dns_name(tls_name):
        logger.warning(
            "Ignoring invalid DNS-over-TLS hostname: %s", sanitize_for_log(tls_name)
        )
        tls_name = None

    if tls_name is None:
        logger.info("Custom DNS configured without DNS-over-TLS support")

    return Provider(
        name=CUSTOM_NAME,
        ipv4=ipv4,
        ipv6=ipv6_endpoints,
        tls_name=tls_name,
    )


def default_selection(ipv6: bool) -> Selection:
    """The fixed fallback selection: Cloudflare, Google, AdGuard."""
    return build_selection(DEFAULT_SELECTION_INDICES, ipv6, used_default=True)


def build_selection(
    indices: list[int] | tuple[int, ...],
    ipv6: bool,
    custom: Provider | None = None,
    used_default: bool = False,
) -> Selection:
    """Build a Selection from parsed indices.

    The first valid index becomes primary. IPv6 endpoints are stripped
    entirely when ipv6 is False. The custom index is honoured only when
    a custom provider is supplied.

    Args:
        indices: Menu indices in operator order
        ipv6: Keep IPv6 endpoints
        custom: Provider built by prompt_custom_provider
        used_default: Mark the result as the default fallback

    Returns:
        Non-empty Selection.
    """
    providers: list[Provider] = []
    seen: set[str] = set()

    for index in indices:
        provider = custom if index == CUSTOM_INDEX else get_provider(index)
        if provider is None or provider.name in seen:
            continue
        seen.add(provider.name)
        providers.append(provider if ipv6 else provider.without_ipv6())

    if not providers:
        logger.warning("No valid selection made. Using default: Cloudflare, Google, AdGuard.")
        return default_selection(ipv6)

    return Selection(providers=tuple(providers), ipv6=ipv6, used_default=used_default)


def resolve_selection(text: str, prompter: Prompter, ipv6: bool) -> Selection:
    """Turn raw selection text into a Selection, prompting for custom DNS.

    Raises:
        InputRequiredError: Custom provider chosen without IPv4 endpoints.
    """
    indices = parse_selection(text)
    custom = None
    if CUSTOM_INDEX in indices:
        custom = prompt_custom_provider(prompter, ipv6)
    return build_selection(indices, ipv6, custom=custom)


def select_providers(
    prompter: Prompter,
    ipv6: bool,
    file: TextIO | None = None,
) -> Selection:
    """Show the catalog and ask the operator to choose providers.

    A blank answer selects the default providers.

    Raises:
        InputRequiredError: Custom provider chosen without IPv4 endpoints.
    """
    if file is None:
        file = sys.stdout

    print("\nAvailable DNS providers:", file=file)
    for line in describe_catalog():
        print(line, file=file)
    print("\nEnter your choices separated by spaces (e.g., '1 2 3').", file=file)
    print("The first choice will be your primary DNS provider.", file=file)

    text = prompter.ask("Selection (empty for Cloudflare, Google, AdGuard)")
    if not text.strip():
        logger.info("Using default selection: Cloudflare, Google, AdGuard")
        return default_selection(ipv6)

    selection = resolve_selection(text, prompter, ipv6)
    logger.info("Selected providers: %s", ", ".join(selection.names))
    return selection
