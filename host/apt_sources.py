"""APT sources reset.

Replaces the host's package sources with the official mirrors for its
release. Debian and older Ubuntu releases get a one-line sources.list;
Ubuntu 24.04 and later get a DEB822 ubuntu.sources file. Third-party
entries in sources.list.d are backed up and removed.
"""

from datetime import datetime
from pathlib import Path

import config
from exceptions import CommandFailedError, NotFoundError, UnsupportedReleaseError
from logging_config import get_logger
from models import AptSourcesResult, OSRelease, SystemPaths
from utils import atomic_write, copy_into, read_text, remove_path
from utils.osinfo import read_os_release
from utils.services import update_package_index

logger = get_logger(__name__)

# VERSION_ID -> (codename, components)
DEBIAN_RELEASES: dict[str, tuple[str, str]] = {
    "11": ("bullseye", "main contrib non-free"),
    "12": ("bookworm", "main contrib non-free non-free-firmware"),
    "13": ("trixie", "main contrib non-free non-free-firmware"),
}

# VERSION_ID -> (codename, release title)
UBUNTU_RELEASES: dict[str, tuple[str, str]] = {
    "20.04": ("focal", "20.04 LTS (Focal Fossa)"),
    "22.04": ("jammy", "22.04 LTS (Jammy Jellyfish)"),
    "24.04": ("noble", "24.04 LTS (Noble Numbat)"),
    "24.10": ("oracular", "24.10 (Oracular Oriole)"),
}

UBUNTU_DEB822_RELEASES: frozenset[str] = frozenset({"24.04", "24.10"})
UBUNTU_SOURCES_NAME = "ubuntu.sources"
UBUNTU_SOURCES_LIST_NOTE = "# This system uses /etc/apt/sources.list.d/ubuntu.sources\n"


def _deb_pair(uri: str, suite: str, components: str) -> list[str]:
    return [
        f"deb {uri} {suite} {components}",
        f"deb-src {uri} {suite} {components}",
    ]


def render_debian_sources(version_id: str) -> str:
    """Render the one-line sources.list for a Debian release.

    Raises:
        UnsupportedReleaseError: No mirror layout for this version.
    """
    if version_id not in DEBIAN_RELEASES:
        raise UnsupportedReleaseError(
            code="unsupported_release",
            message=f"Unsupported Debian version: {version_id}",
            details={"id": "debian", "version_id": version_id},
        )

    codename, components = DEBIAN_RELEASES[version_id]
    lines = [f"# Debian {version_id} ({codename.capitalize()}) - Official Sources", ""]
    lines += ["# Main repository"]
    lines += _deb_pair(config.DEBIAN_MIRROR, codename, components)
    lines += ["", "# Security updates"]
    lines += _deb_pair(config.DEBIAN_SECURITY_MIRROR, f"{codename}-security", components)
    lines += ["", "# Updates repository"]
    lines += _deb_pair(config.DEBIAN_MIRROR, f"{codename}-updates", components)
    return "\n".join(lines) + "\n"


def _ubuntu_release(version_id: str) -> tuple[str, str]:
    if version_id not in UBUNTU_RELEASES:
        raise UnsupportedReleaseError(
            code="unsupported_release",
            message=f"Unsupported Ubuntu version: {version_id}",
            details={"id": "ubuntu", "version_id": version_id},
        )
    return UBUNTU_RELEASES[version_id]


def render_ubuntu_sources(version_id: str) -> str:
    """Render the one-line sources.list for an Ubuntu release.

    Raises:
        UnsupportedReleaseError: No mirror layout for this version.
    """
    codename, title = _ubuntu_release(version_id)
    components = config.UBUNTU_COMPONENTS
    lines = [f"# Ubuntu {title} - Official Sources", ""]
    lines += ["# Main repositories"]
    lines += _deb_pair(config.UBUNTU_MIRROR, codename, components)
    lines += ["", "# Security updates"]
    lines += _deb_pair(config.UBUNTU_SECURITY_MIRROR, f"{codename}-security", components)
    lines += ["", "# Updates"]
    lines += _deb_pair(config.UBUNTU_MIRROR, f"{codename}-updates", components)
    lines += ["", "# Backports"]
    lines += _deb_pair(config.UBUNTU_MIRROR, f"{codename}-backports", components)
    return "\n".join(lines) + "\n"


def render_ubuntu_deb822(version_id: str) -> str:
    """Render ubuntu.sources in DEB822 format.

    Raises:
        UnsupportedReleaseError: No mirror layout for this version.
    """
    codename, title = _ubuntu_release(version_id)
    stanzas = [
        (config.UBUNTU_MIRROR, f"{codename} {codename}-updates {codename}-backports"),
        (config.UBUNTU_SECURITY_MIRROR, f"{codename}-security"),
    ]
    lines = [f"# Ubuntu {title} - Official Sources", "# DEB822 format"]
    for uri, suites in stanzas:
        lines += [
            "",
            "Types: deb deb-src",
            f"URIs: {uri}",
            f"Suites: {suites}",
            f"Components: {config.UBUNTU_COMPONENTS}",
            f"Signed-By: {config.UBUNTU_KEYRING}",
        ]
    return "\n".join(lines) + "\n"


def plan_sources(os_release: OSRelease, paths: SystemPaths) -> dict[Path, str]:
    """Map each file to write onto its content for the host release.

    Raises:
        UnsupportedReleaseError: Unknown distribution or version.
    """
    version_id = os_release.version_id
    if os_release.id == "debian":
        return {paths.apt_sources_list: render_debian_sources(version_id)}

    if os_release.id == "ubuntu":
        if version_id in UBUNTU_DEB822_RELEASES:
            deb822 = paths.apt_sources_dir / UBUNTU_SOURCES_NAME
            return {
                deb822: render_ubuntu_deb822(version_id),
                paths.apt_sources_list: UBUNTU_SOURCES_LIST_NOTE,
            }
        return {paths.apt_sources_list: render_ubuntu_sources(version_id)}

    raise UnsupportedReleaseError(
        code="unsupported_os",
        message=f"Unsupported OS: {os_release.id}",
        details={"id": os_release.id},
    )


def backup_sources(paths: SystemPaths, now: datetime | None = None) -> Path | None:
    """Copy sources.list and sources.list.d into a timestamped directory.

    Returns:
        Backup directory, or None if there was nothing to back up.
    """
    sources = [p for p in (paths.apt_sources_list, paths.apt_sources_dir) if p.exists()]
    if not sources:
        return None

    stamp = (now or datetime.now()).strftime(config.BACKUP_TIMESTAMP_FORMAT)
    backup_dir = paths.apt_sources_list.with_name(
        f"{paths.apt_sources_list.name}.backup_{stamp}"
    )
    copy_into(sources, backup_dir)
    logger.info("Backed up APT sources to %s", backup_dir)
    return backup_dir


def clean_sources_dir(paths: SystemPaths) -> dict[str, int]:
    """Remove stale source, key and backup files from sources.list.d.

    Also removes the sources.list.save left behind by release upgrades.

    Returns:
        Removed file count per suffix (suffixes with no match omitted).
    """
    removed: dict[str, int] = {}
    if paths.apt_sources_dir.is_dir():
        for path in sorted(paths.apt_sources_dir.rglob("*")):
            if not path.is_file() and not path.is_symlink():
                continue
            suffix = next(
                (s for s in config.APT_STALE_SUFFIXES if path.name.endswith(s)), None
            )
            if suffix is not None and remove_path(path):
                removed[suffix] = removed.get(suffix, 0) + 1
                logger.debug("Removed %s", path)

    save = paths.apt_sources_list.with_name(f"{paths.apt_sources_list.name}.save")
    if remove_path(save):
        removed[".save"] = removed.get(".save", 0) + 1

    return removed


def read_active_sources(paths: SystemPaths) -> tuple[list[str], list[str]]:
    """Return the active sources.list entries and the DEB822 file names."""
    content = read_text(paths.apt_sources_list) or ""
    entries = [
        line.strip()
        for line in content.splitlines()
        if line.strip() and not line.lstrip().startswith("#")
    ]

    sources_files: list[str] = []
    if paths.apt_sources_dir.is_dir():
        sources_files = sorted(p.name for p in paths.apt_sources_dir.glob("*.sources"))

    return entries, sources_files


def reset_apt_sources(
    paths: SystemPaths,
    os_release: OSRelease | None = None,
    update_index: bool = True,
    now: datetime | None = None,
) -> AptSourcesResult:
    """Point APT at the official mirrors for the host release.

    The release is checked before anything is touched. A failing
    `apt-get update` is reported, not raised.

    Raises:
        OSDetectionError: /etc/os-release missing or invalid.
        UnsupportedReleaseError: No mirror layout for the release.
        PermissionDeniedError: Backup or rewrite not permitted.
    """
    if os_release is None:
        os_release = read_os_release(paths.os_release)

    planned = plan_sources(os_release, paths)

    backup_dir = backup_sources(paths, now)
    removed = clean_sources_dir(paths)

    written: list[Path] = []
    for path, content in planned.items():
        atomic_write(path, content, mode=0o644)
        written.append(path)
        logger.info("Wrote %s", path)

    index_updated = False
    if update_index:
        try:
            update_package_index()
            index_updated = True
        except (CommandFailedError, NotFoundError) as e:
            logger.warning("APT update reported errors: %s", e.message)

    entries, sources_files = read_active_sources(paths)
    if not entries and not sources_files:
        logger.error("No APT sources found after reset")

    return AptSourcesResult(
        os_release=os_release,
        backup_dir=backup_dir,
        written=written,
        removed=removed,
        index_updated=index_updated,
        entries=entries,
        sources_files=sources_files,
    )
