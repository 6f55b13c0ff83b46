"""File helpers for configuration rewrites.

Every rewrite goes to a temp file in the target's directory and is then
renamed over the original, so a config file is never left truncated.
"""

import os
import shutil
import stat
import tempfile
from datetime import datetime
from pathlib import Path

import config
from exceptions import PermissionDeniedError, SystemOperationError
from logging_config import get_logger
from utils.system import run_checked, run_command

logger = get_logger(__name__)


def read_text(path: Path) -> str | None:
    """Read a text file.

    Returns:
        File content, or None if the file does not exist.

    Raises:
        PermissionDeniedError: File exists but cannot be read.
    """
    try:
        return path.read_text(encoding="utf-8")
    except FileNotFoundError:
        return None
    except PermissionError as e:
        raise PermissionDeniedError(
            code="read_denied",
            message=f"Cannot read {path}: {e}",
            details={"path": str(path)},
        ) from e


def atomic_write(path: Path, content: str, mode: int | None = None) -> None:
    """Replace path with content atomically.

    The existing file mode is preserved unless mode is given; new files
    default to 0644.

    Raises:
        PermissionDeniedError: Directory or file not writable.
    """
    if mode is None:
        try:
            mode = stat.S_IMODE(path.stat().st_mode)
        except FileNotFoundError:
            mode = 0o644

    tmp_name = None
    try:
        path.parent.mkdir(parents=True, exist_ok=True)
        fd, tmp_name = tempfile.mkstemp(
            prefix=f".{path.name}.", suffix=".tmp", dir=path.parent
        )
        with os.fdopen(fd, "w", encoding="utf-8") as f:
            f.write(content)
            f.flush()
            os.fsync(f.fileno())
        os.chmod(tmp_name, mode)
        os.replace(tmp_name, path)
        tmp_name = None
    except PermissionError as e:
        raise PermissionDeniedError(
            code="write_denied",
            message=f"Cannot write {path}: {e}",
            details={"path": str(path)},
        ) from e
    finally:
        if tmp_name is not None:
            Path(tmp_name).unlink(missing_ok=True)

    logger.debug("Wrote %s (%d bytes)", path, len(content))


def backup_file(path: Path, now: datetime | None = None) -> Path | None:
    """Copy path to path.backup_<timestamp>.

    Returns:
        Backup path, or None if path does not exist.

    Raises:
        PermissionDeniedError: Backup cannot be written.
    """
    if not path.exists():
        return None

    stamp = (now or datetime.now()).strftime(config.BACKUP_TIMESTAMP_FORMAT)
    backup = path.with_name(f"{path.name}.backup_{stamp}")
    try:
        shutil.copy2(path, backup)
    except PermissionError as e:
        raise PermissionDeniedError(
            code="backup_denied",
            message=f"Cannot back up {path}: {e}",
            details={"path": str(path)},
        ) from e

    logger.debug("Backed up %s to %s", path, backup)
    return backup


def copy_into(sources: list[Path], dest_dir: Path) -> list[Path]:
    """Copy files and directories into dest_dir, keeping their names.

    Missing sources are skipped.

    Returns:
        Paths created under dest_dir.

    Raises:
        PermissionDeniedError: Copy cannot be written.
    """
    copied: list[Path] = []
    try:
        dest_dir.mkdir(parents=True, exist_ok=True)
        for source in sources:
            target = dest_dir / source.name
            if source.is_dir():
                shutil.copytree(source, target, symlinks=True, dirs_exist_ok=True)
            elif source.exists():
                shutil.copy2(source, target)
            else:
                continue
            copied.append(target)
    except PermissionError as e:
        raise PermissionDeniedError(
            code="backup_denied",
            message=f"Cannot back up into {dest_dir}: {e}",
            details={"path": str(dest_dir)},
        ) from e

    return copied


def is_executable(path: Path) -> bool:
    """True if path is a regular file with any execute bit set."""
    try:
        st = path.stat()
    except FileNotFoundError:
        return False
    return stat.S_ISREG(st.st_mode) and bool(st.st_mode & 0o111)


def remove_execute(path: Path) -> bool:
    """Clear every execute bit on path (chmod -x).

    Returns:
        True if permissions changed, False if the file is absent or
        already non-executable.

    Raises:
        PermissionDeniedError: chmod not permitted.
    """
    if not is_executable(path):
        return False

    try:
        current = stat.S_IMODE(path.stat().st_mode)
        path.chmod(current & ~0o111)
    except PermissionError as e:
        raise PermissionDeniedError(
            code="chmod_denied",
            message=f"Cannot change permissions on {path}: {e}",
            details={"path": str(path)},
        ) from e

    return True


def remove_path(path: Path) -> bool:
    """Remove a file or symlink (dangling links included).

    Returns:
        True if something was removed.

    Raises:
        PermissionDeniedError: Removal not permitted.
    """
    if not path.is_symlink() and not path.exists():
        return False

    try:
        path.unlink()
    except FileNotFoundError:
        return False
    except PermissionError as e:
        raise PermissionDeniedError(
            code="remove_denied",
            message=f"Cannot remove {path}: {e}",
            details={"path": str(path)},
        ) from e

    return True


def is_immutable(path: Path) -> bool:
    """True if lsattr reports the immutable attribute on path."""
    if path.is_symlink() or not path.exists():
        return False

    output = run_command(["lsattr", "-d", str(path)])
    if not output:
        return False

    # Format: "----i---------e------- /etc/resolv.conf"
    flags = output.split()[0]
    return "i" in flags


def clear_immutable(path: Path) -> bool:
    """Clear the immutable attribute (chattr -i) if set.

    Returns:
        True if the attribute was set and has been cleared.

    Raises:
        PermissionDeniedError: chattr failed, so the file stays locked.
    """
    if not is_immutable(path):
        return False

    try:
        run_checked(["chattr", "-i", str(path)])
    except SystemOperationError as e:
        raise PermissionDeniedError(
            code="chattr_failed",
            message=f"Cannot clear immutable attribute on {path}: {e.message}",
            details={"path": str(path)},
        ) from e

    logger.info("Cleared immutable attribute on %s", path)
    return True
