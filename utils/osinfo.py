"""Host OS identification from /etc/os-release."""

from pathlib import Path

from exceptions import OSDetectionError
from models import OSRelease
from utils.files import read_text


def parse_os_release(content: str) -> dict[str, str]:
    """Parse KEY=VALUE lines, stripping surrounding quotes."""
    fields: dict[str, str] = {}
    for line in content.splitlines():
        line = line.strip()
        if not line or line.startswith("#") or "=" not in line:
            continue
        key, value = line.split("=", 1)
        fields[key.strip()] = value.strip().strip("\"'")
    return fields


def read_os_release(path: Path) -> OSRelease:
    """Read the host OS identity.

    Raises:
        OSDetectionError: File missing or lacks ID.
    """
    content = read_text(path)
    if content is None:
        raise OSDetectionError(
            code="os_release_missing",
            message=f"Cannot detect OS version: {path} not found",
            details={"path": str(path)},
        )

    fields = parse_os_release(content)
    if not fields.get("ID"):
        raise OSDetectionError(
            code="os_release_invalid",
            message=f"Cannot detect OS version: no ID in {path}",
            details={"path": str(path)},
        )

    return OSRelease(
        id=fields["ID"],
        version_id=fields.get("VERSION_ID", ""),
        codename=fields.get("VERSION_CODENAME", ""),
    )
