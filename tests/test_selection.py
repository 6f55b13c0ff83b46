"""Tests for resolver/catalog.py and resolver/selection.py.

Tests menu parsing, default fallback, custom providers and IPv6 gating.
"""

import io

import pytest

from exceptions import InputRequiredError
from models import ResolverConfig
from resolver.catalog import (
    CATALOG,
    CUSTOM_INDEX,
    DEFAULT_SELECTION_INDICES,
    describe_catalog,
    get_provider,
    is_known_index,
)
from resolver.selection import (
    build_selection,
    default_selection,
    parse_selection,
    prompt_custom_provider,
    resolve_selection,
    select_providers,
)


class TestCatalog:
    """Tests for the provider catalog."""

    def test_six_providers_then_custom(self):
        assert len(CATALOG) == 6
        assert CUSTOM_INDEX == 7

    def test_every_provider_supports_dot(self):
        for provider in CATALOG:
            assert provider.tls_name
            assert len(provider.ipv4) == 2
            assert len(provider.ipv6) == 2

    def test_get_provider_is_one_based(self):
        assert get_provider(1).name == "Cloudflare"
        assert get_provider(6).name == "CleanBrowsing"
        assert get_provider(0) is None
        assert get_provider(7) is None

    def test_known_index_includes_custom(self):
        assert is_known_index(7)
        assert not is_known_index(8)

    def test_default_is_cloudflare_google_adguard(self):
        names = [get_provider(i).name for i in DEFAULT_SELECTION_INDICES]
        assert names == ["Cloudflare", "Google", "AdGuard"]

    def test_describe_catalog(self):
        lines = describe_catalog()
        assert len(lines) == 7
        assert "Cloudflare" in lines[0]
        assert "Custom" in lines[-1]


class TestParseSelection:
    """Tests for parse_selection function."""

    def test_keeps_operator_order(self):
        assert parse_selection("3 1 2") == [3, 1, 2]

    def test_drops_unknown_tokens(self):
        assert parse_selection("9 10 abc -1 2") == [2]

    def test_deduplicates(self):
        assert parse_selection("1 1 2 1") == [1, 2]

    def test_non_ascii_digits_dropped(self):
        """Test digit-like tokens int() cannot parse are dropped, not raised."""
        assert parse_selection("² 1") == [1]
        assert parse_selection("٣ ① 2") == [2]

    def test_empty(self):
        assert parse_selection("") == []
        assert parse_selection("   ") == []


class TestBuildSelection:
    """Tests for build_selection function."""

    def test_primary_is_first_index(self):
        selection = build_selection([3, 1, 2], ipv6=False)
        assert selection.names == ["Quad9", "Cloudflare", "Google"]
        assert selection.primary.name == "Quad9"

    def test_invalid_only_falls_back_to_default(self):
        """Test "9 10" yields the default selection instead of failing."""
        selection = build_selection(parse_selection("9 10"), ipv6=False)
        assert selection.names == ["Cloudflare", "Google", "AdGuard"]
        assert selection.used_default is True

    def test_ipv6_stripped_when_flag_unset(self):
        selection = build_selection([1, 2], ipv6=False)
        assert all(p.ipv6 == () for p in selection.providers)

    def test_ipv6_kept_when_flag_set(self):
        selection = build_selection([1], ipv6=True)
        assert selection.primary.ipv6 == ("2606:4700:4700::1111", "2606:4700:4700::1001")
        assert selection.ipv6 is True

    def test_custom_index_without_provider_ignored(self):
        selection = build_selection([7, 2], ipv6=False)
        assert selection.names == ["Google"]

    def test_default_selection(self):
        assert default_selection(False).used_default is True


class TestCustomProvider:
    """Tests for prompt_custom_provider function."""

    def test_custom_without_dot(self, make_prompter):
        """Test an empty DoT answer gives a provider without TLS name."""
        prompter = make_prompter(answers=["10.0.0.53 10.0.0.54", ""])
        provider = prompt_custom_provider(prompter, ipv6=False)
        assert provider.name == "Custom"
        assert provider.ipv4 == ("10.0.0.53", "10.0.0.54")
        assert provider.tls_name is None
        # No IPv6 question without the flag
        assert len(prompter.questions) == 2

    def test_custom_with_ipv6_and_dot(self, make_prompter):
        prompter = make_prompter(answers=["10.0.0.53", "fd00::53", "dns.example.com"])
        provider = prompt_custom_provider(prompter, ipv6=True)
        assert provider.ipv6 == ("fd00::53",)
        assert provider.tls_name == "dns.example.com"

    def test_invalid_addresses_dropped(self, make_prompter):
        prompter = make_prompter(answers=["10.0.0.53 999.1.1.1 nope", ""])
        provider = prompt_custom_provider(prompter, ipv6=False)
        assert provider.ipv4 == ("10.0.0.53",)

    def test_missing_ipv4_aborts(self, make_prompter):
        prompter = make_prompter(answers=[""])
        with pytest.raises(InputRequiredError) as exc_info:
            prompt_custom_provider(prompter, ipv6=False)
        assert exc_info.value.fatal is True

    def test_invalid_dot_name_ignored(self, make_prompter):
        prompter = make_prompter(answers=["10.0.0.53", "not a name"])
        provider = prompt_custom_provider(prompter, ipv6=False)
        assert provider.tls_name is None


class TestResolveSelection:
    """Tests for resolve_selection function."""

    def test_custom_primary_disables_dot(self, make_prompter):
        """Test "7 1" with a custom server lacking DoT."""
        prompter = make_prompter(answers=["10.0.0.53", ""])
        selection = resolve_selection("7 1", prompter, ipv6=False)
        assert selection.names == ["Custom", "Cloudflare"]
        assert selection.dns_over_tls is False

    def test_order_drives_rendered_config(self, prompter):
        """Test "3 1 2" puts Quad9 in DNS and Cloudflare then Google in FallbackDNS."""
        selection = resolve_selection("3 1 2", prompter, ipv6=False)
        text = ResolverConfig.from_selection(selection).render()

        assert "DNS=9.9.9.9#dns.quad9.net 149.112.112.112#dns.quad9.net\n" in text
        assert (
            "FallbackDNS=1.1.1.1#cloudflare-dns.com 1.0.0.1#cloudflare-dns.com "
            "8.8.8.8#dns.google 8.8.4.4#dns.google\n"
        ) in text
        assert "DNSOverTLS=opportunistic\n" in text

    def test_custom_only_without_dot(self, make_prompter):
        """Test a lone custom server without a DoT name renders plain DNS."""
        prompter = make_prompter(answers=["203.0.113.5", ""])
        selection = resolve_selection("7", prompter, ipv6=False)
        text = ResolverConfig.from_selection(selection).render()

        assert selection.names == ["Custom"]
        assert "DNS=203.0.113.5\n" in text
        assert "FallbackDNS=\n" in text
        assert "DNSOverTLS=no\n" in text

    def test_no_custom_prompt_without_index(self, make_prompter):
        prompter = make_prompter()
        resolve_selection("1 2", prompter, ipv6=False)
        assert prompter.questions == []


class TestSelectProviders:
    """Tests for select_providers function."""

    def test_blank_answer_uses_default(self, make_prompter):
        out = io.StringIO()
        prompter = make_prompter(answers=["   "])
        selection = select_providers(prompter, ipv6=False, file=out)
        assert selection.names == ["Cloudflare", "Google", "AdGuard"]
        assert selection.used_default is True
        assert "Available DNS providers" in out.getvalue()

    def test_empty_answer_marks_default(self, make_prompter):
        """Test an empty answer is not replaced by prompt-supplied indices."""
        prompter = make_prompter(answers=[""])
        selection = select_providers(prompter, ipv6=False, file=io.StringIO())
        assert selection.names == ["Cloudflare", "Google", "AdGuard"]
        assert selection.used_default is True

    def test_scripted_answer(self, make_prompter):
        out = io.StringIO()
        prompter = make_prompter(answers=["2 4"])
        selection = select_providers(prompter, ipv6=False, file=out)
        assert selection.names == ["Google", "OpenDNS"]
