"""Tests for orchestrator.py.

Tests dependency checking and the DNS workflow end to end, with systemd,
apt and resolver probes patched out and files kept in a temp directory.
"""

import io
from unittest.mock import patch

import pytest

from config import REQUIRED_COMMANDS
from enums import TransportMode
from exceptions import InputRequiredError, OSDetectionError
from models import HealthCheck, HealthReport, VerificationReport
from orchestrator import check_dependencies, run_dns_setup

STOCK_DHCLIENT = "send host-name = gethostname();\n"
OS_RELEASE = 'ID=debian\nVERSION_ID="12"\nVERSION_CODENAME=bookworm\n'


def healthy_report() -> HealthReport:
    return HealthReport(checks=[HealthCheck("systemd-resolved status", True, "Running")])


def unhealthy_report() -> HealthReport:
    return HealthReport(
        checks=[HealthCheck("systemd-resolved status", False, "Service not running or unresponsive")]
    )


def passing_verification() -> VerificationReport:
    return VerificationReport(checks=[HealthCheck("name resolution", True, "ok")])


@pytest.fixture
def host(paths):
    """A Debian 12 host with stock dhclient config and an executable hook."""
    paths.os_release.write_text(OS_RELEASE)
    paths.dhclient_conf.write_text(STOCK_DHCLIENT)
    paths.hook_script.write_text("#!/bin/sh\n")
    paths.hook_script.chmod(0o755)
    paths.resolv_conf.write_text("nameserver 192.0.2.1\n")
    return paths


@pytest.fixture
def daemon_side_effects():
    """Patch service control used while configuring the daemon."""
    with patch("orchestrator.current_dns_servers", return_value=[]), \
         patch("resolver.daemon.command_exists", return_value=True), \
         patch("resolver.daemon.unmask"), \
         patch("resolver.daemon.enable_and_start"), \
         patch("resolver.daemon.restart"), \
         patch("resolver.daemon.clear_immutable", return_value=False), \
         patch("resolver.daemon.command_succeeds", return_value=True):
        yield


class TestCheckDependencies:
    """Tests for check_dependencies function."""

    @patch("orchestrator.command_exists")
    def test_all_dependencies_present(self, mock_exists) -> None:
        """Test when all required commands exist."""
        mock_exists.return_value = True

        assert check_dependencies() is True
        assert mock_exists.call_count == len(REQUIRED_COMMANDS)

    @patch("orchestrator.command_exists")
    def test_missing_dependency_logs_hint(self, mock_exists, caplog) -> None:
        """Test a missing command logs an install hint."""
        mock_exists.side_effect = lambda cmd: cmd != "ip"

        assert check_dependencies() is False
        assert "Missing required command: ip" in caplog.text
        assert "sudo apt install iproute2" in caplog.text


class TestRunDnsSetup:
    """Tests for run_dns_setup function."""

    @patch("orchestrator.check_system_health")
    def test_healthy_decline_changes_nothing(self, mock_health, host, make_prompter) -> None:
        """Test declining a forced rerun leaves every file untouched."""
        mock_health.return_value = healthy_report()
        before = {p: p.read_bytes() for p in (host.dhclient_conf, host.resolv_conf)}
        prompter = make_prompter(confirms=[False])
        out = io.StringIO()

        result = run_dns_setup(prompter, paths=host, file=out)

        assert result is None
        assert "Exiting without changes." in out.getvalue()
        assert {p: p.read_bytes() for p in before} == before
        assert not host.resolved_conf.exists()
        assert host.hook_script.stat().st_mode & 0o111

    @patch("orchestrator.verify_dns")
    @patch("orchestrator.check_system_health")
    def test_cloudflare_google_end_to_end(
        self, mock_health, mock_verify, host, make_prompter, daemon_side_effects
    ) -> None:
        """Test selection "1 2" on an unhealthy host."""
        mock_health.return_value = unhealthy_report()
        mock_verify.return_value = passing_verification()
        prompter = make_prompter(answers=["1 2"])

        result = run_dns_setup(prompter, paths=host, file=io.StringIO())

        assert result is not None
        assert result.selection.names == ["Cloudflare", "Google"]
        assert result.config.dns_over_tls == TransportMode.OPPORTUNISTIC

        resolved = host.resolved_conf.read_text()
        assert "DNS=1.1.1.1#cloudflare-dns.com 1.0.0.1#cloudflare-dns.com\n" in resolved
        assert "FallbackDNS=8.8.8.8#dns.google 8.8.4.4#dns.google\n" in resolved
        assert "DNSOverTLS=opportunistic\n" in resolved

        assert host.resolv_conf.readlink() == host.stub_resolv_conf
        assert "supersede domain-name-servers 127.0.0.53;" in host.dhclient_conf.read_text()
        assert not host.hook_script.stat().st_mode & 0o111

    @patch("orchestrator.verify_dns")
    @patch("orchestrator.check_system_health")
    def test_healthy_forced_rerun(
        self, mock_health, mock_verify, host, make_prompter, daemon_side_effects
    ) -> None:
        """Test confirming a rerun on a healthy host configures anyway."""
        mock_health.return_value = healthy_report()
        mock_verify.return_value = passing_verification()
        prompter = make_prompter(confirms=[True])

        result = run_dns_setup(prompter, paths=host, file=io.StringIO())

        assert result is not None
        assert result.selection.names == ["Cloudflare", "Google", "AdGuard"]
        assert host.resolved_conf.exists()

    @patch("orchestrator.check_system_health")
    def test_custom_without_ipv4_aborts_before_changes(
        self, mock_health, host, make_prompter
    ) -> None:
        """Test selection happens before any file is modified."""
        mock_health.return_value = unhealthy_report()
        prompter = make_prompter(answers=["7", ""])

        with pytest.raises(InputRequiredError):
            run_dns_setup(prompter, paths=host, file=io.StringIO())

        assert host.dhclient_conf.read_text() == STOCK_DHCLIENT
        assert not host.resolved_conf.exists()

    def test_missing_os_release_is_fatal(self, paths, make_prompter) -> None:
        with pytest.raises(OSDetectionError):
            run_dns_setup(make_prompter(), paths=paths, file=io.StringIO())
