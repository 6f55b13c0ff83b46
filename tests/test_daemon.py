"""Tests for resolver/daemon.py.

systemctl, apt-get and resolvectl are patched out; file operations run
against a temp directory.
"""

from unittest.mock import MagicMock, call, patch

import pytest

from enums import TransportMode
from exceptions import CommandFailedError, PermissionDeniedError, ServiceUnavailableError
from resolver.daemon import (
    configure_daemon,
    ensure_daemon_installed,
    link_resolv_conf,
    remove_legacy_resolver_package,
    render_resolver_config,
    wait_until_ready,
)


@pytest.fixture
def services():
    """Patch every systemd/apt side effect used by the daemon module."""
    with patch("resolver.daemon.command_exists", return_value=True) as exists, \
         patch("resolver.daemon.install_package") as install, \
         patch("resolver.daemon.package_installed", return_value=False) as installed, \
         patch("resolver.daemon.remove_package") as remove, \
         patch("resolver.daemon.unmask") as unmask, \
         patch("resolver.daemon.enable_and_start") as enable, \
         patch("resolver.daemon.restart") as restart, \
         patch("resolver.daemon.clear_immutable", return_value=False) as immutable, \
         patch("resolver.daemon.command_succeeds", return_value=True) as succeeds:
        mocks = MagicMock()
        mocks.command_exists = exists
        mocks.install_package = install
        mocks.package_installed = installed
        mocks.remove_package = remove
        mocks.unmask = unmask
        mocks.enable_and_start = enable
        mocks.restart = restart
        mocks.clear_immutable = immutable
        mocks.command_succeeds = succeeds
        yield mocks


class TestRenderResolverConfig:
    """Tests for render_resolver_config function."""

    def test_render(self, cloudflare_google):
        text = render_resolver_config(cloudflare_google)
        assert "DNS=1.1.1.1#cloudflare-dns.com 1.0.0.1#cloudflare-dns.com\n" in text
        assert "FallbackDNS=8.8.8.8#dns.google 8.8.4.4#dns.google\n" in text


class TestEnsureDaemonInstalled:
    """Tests for ensure_daemon_installed function."""

    def test_already_installed(self, services):
        assert ensure_daemon_installed() is False
        services.install_package.assert_not_called()

    def test_installs_when_missing(self, services):
        services.command_exists.return_value = False
        assert ensure_daemon_installed() is True
        services.install_package.assert_called_once_with("systemd-resolved")


class TestRemoveLegacyResolverPackage:
    """Tests for remove_legacy_resolver_package function."""

    def test_skipped_on_current_release(self, services, debian12, paths):
        services.package_installed.return_value = True
        assert remove_legacy_resolver_package(debian12, paths) is False
        services.remove_package.assert_not_called()

    def test_skipped_when_not_installed(self, services, ubuntu2204, paths):
        assert remove_legacy_resolver_package(ubuntu2204, paths) is False

    def test_removes_package_and_resolv_conf(self, services, ubuntu2204, paths):
        services.package_installed.return_value = True
        paths.resolv_conf.write_text("nameserver 192.0.2.1\n")

        assert remove_legacy_resolver_package(ubuntu2204, paths) is True

        services.remove_package.assert_called_once_with("resolvconf")
        assert not paths.resolv_conf.exists()


class TestLinkResolvConf:
    """Tests for link_resolv_conf function."""

    def test_replaces_regular_file(self, services, paths):
        paths.resolv_conf.write_text("nameserver 192.0.2.1\n")
        link_resolv_conf(paths)
        assert paths.resolv_conf.is_symlink()
        assert paths.resolv_conf.readlink() == paths.stub_resolv_conf

    def test_replaces_dangling_symlink(self, services, paths):
        paths.resolv_conf.symlink_to(paths.hosts.parent / "missing")
        link_resolv_conf(paths)
        assert paths.resolv_conf.readlink() == paths.stub_resolv_conf

    def test_immutable_failure_is_fatal(self, services, paths):
        services.clear_immutable.side_effect = PermissionDeniedError(
            code="chattr_failed", message="locked"
        )
        with pytest.raises(PermissionDeniedError):
            link_resolv_conf(paths)


class TestWaitUntilReady:
    """Tests for wait_until_ready function."""

    @patch("resolver.daemon.time.sleep")
    def test_polls_with_backoff(self, mock_sleep, services):
        services.command_succeeds.side_effect = [False, False, True]
        assert wait_until_ready(timeout=30, max_interval=2.0) is True
        assert mock_sleep.call_args_list == [call(0.25), call(0.5)]

    @patch("resolver.daemon.time.sleep")
    def test_gives_up_after_timeout(self, mock_sleep, services):
        services.command_succeeds.return_value = False
        assert wait_until_ready(timeout=0) is False
        mock_sleep.assert_not_called()


class TestConfigureDaemon:
    """Tests for configure_daemon function."""

    def test_writes_config_and_links(self, services, cloudflare_google, debian12, paths):
        outcome = configure_daemon(cloudflare_google, paths, debian12)

        assert outcome.ready is True
        assert outcome.warnings == []
        assert outcome.config.dns_over_tls == TransportMode.OPPORTUNISTIC
        assert paths.resolved_conf.read_text() == outcome.config.render()
        assert paths.resolv_conf.readlink() == paths.stub_resolv_conf
        services.unmask.assert_called_once_with("systemd-resolved")
        services.restart.assert_called_once_with("systemd-resolved")

    def test_service_failure_is_a_warning(self, services, cloudflare_google, debian12, paths):
        """Test the pipeline continues when the service cannot start."""
        services.enable_and_start.side_effect = ServiceUnavailableError(
            code="command_failed", message="start failed"
        )
        outcome = configure_daemon(cloudflare_google, paths, debian12)

        assert any("start failed" in w for w in outcome.warnings)
        assert paths.resolved_conf.exists()

    def test_install_failure_is_a_warning(self, services, cloudflare_google, debian12, paths):
        services.command_exists.return_value = False
        services.install_package.side_effect = CommandFailedError(
            code="command_failed", message="apt-get failed"
        )
        outcome = configure_daemon(cloudflare_google, paths, debian12)
        assert outcome.warnings[0].startswith("Install systemd-resolved")

    def test_write_failure_is_fatal(self, services, cloudflare_google, debian12, paths):
        with patch(
            "resolver.daemon.atomic_write",
            side_effect=PermissionDeniedError(code="write_denied", message="read-only"),
        ):
            with pytest.raises(PermissionDeniedError):
                configure_daemon(cloudflare_google, paths, debian12)

    @patch("resolver.daemon.wait_until_ready", return_value=False)
    def test_not_ready_is_a_warning(self, mock_wait, services, cloudflare_google, debian12, paths):
        outcome = configure_daemon(cloudflare_google, paths, debian12)
        assert outcome.ready is False
        assert "did not become ready" in outcome.warnings[-1]
