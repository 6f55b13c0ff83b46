"""System command execution utilities.

Provides safe command execution with timeout protection.
Never uses shell=True to prevent command injection.

Two styles are offered:
    run_command / command_succeeds: probes, never raise
    run_checked: mutations, raise a classified SystemOperationError
"""

import os
import re
import shutil
import subprocess
from typing import Any

import config
from exceptions import CommandFailedError, NotFoundError, PrivilegeError, SystemOperationError


def run_command(cmd: list[str], timeout: float | None = None) -> str | None:
    """Execute system command safely.

    Security:
        - NEVER shell=True
        - Timeout: 10 seconds unless overridden

    Args:
        cmd: Command as list (e.g., ["resolvectl", "status"])
        timeout: Seconds before the command is killed

    Returns:
        Command output (stripped) or None on error.
    """
    try:
        result = subprocess.run(
            cmd,
            capture_output=True,
            text=True,
            timeout=timeout or config.TIMEOUT_SECONDS,
            check=False,  # Don't raise on non-zero exit
            shell=False,  # CRITICAL: Never use shell=True
        )

        if result.returncode == 0:
            return result.stdout.strip()

        return None

    except subprocess.TimeoutExpired:
        return None
    except FileNotFoundError:
        return None
    except (OSError, ValueError, RuntimeError):
        return None


def command_succeeds(cmd: list[str], timeout: float | None = None) -> bool:
    """Return True if the command runs and exits zero.

    Used for probes such as ``systemctl is-active --quiet``.
    """
    return run_command(cmd, timeout=timeout) is not None


def run_checked(
    cmd: list[str],
    timeout: float | None = None,
    error_cls: type[SystemOperationError] = CommandFailedError,
    env: dict[str, str] | None = None,
) -> str:
    """Execute a command that must succeed.

    Args:
        cmd: Command as list
        timeout: Seconds before the command is killed
        error_cls: Exception type raised on non-zero exit or timeout
        env: Extra environment variables merged over os.environ

    Returns:
        Command output (stripped).

    Raises:
        NotFoundError: Executable does not exist.
        error_cls: Command failed or timed out.
    """
    full_env = {**os.environ, **env} if env else None
    command_text = sanitize_for_log(" ".join(cmd))

    try:
        result = subprocess.run(
            cmd,
            capture_output=True,
            text=True,
            timeout=timeout or config.TIMEOUT_SECONDS,
            check=False,
            shell=False,
            env=full_env,
        )
    except FileNotFoundError as e:
        raise NotFoundError(
            code="command_not_found",
            message=f"Command not found: {cmd[0]}",
            details={"cmd": cmd},
        ) from e
    except subprocess.TimeoutExpired as e:
        raise error_cls(
            code="command_timeout",
            message=f"Command timed out: {command_text}",
            details={"cmd": cmd, "timeout": e.timeout},
        ) from e
    except OSError as e:
        raise error_cls(
            code="command_error",
            message=f"Command could not run: {command_text}: {e}",
            details={"cmd": cmd},
        ) from e

    if result.returncode != 0:
        raise error_cls(
            code="command_failed",
            message=f"Command failed ({result.returncode}): {command_text}",
            details={
                "cmd": cmd,
                "returncode": result.returncode,
                "stderr": sanitize_for_log(result.stderr or ""),
            },
        )

    return result.stdout.strip()


def command_exists(cmd: str) -> bool:
    """Check if command exists in PATH.

    Args:
        cmd: Command name (e.g., "resolvectl", "hostnamectl")

    Returns:
        True if command is available, False otherwise.
    """
    return shutil.which(cmd) is not None


def require_root() -> None:
    """Refuse to continue without root privileges.

    Raises:
        PrivilegeError: Effective UID is not 0.
    """
    if os.geteuid() != 0:
        raise PrivilegeError(
            code="not_root",
            message="This tool must be run as root",
        )


def sanitize_for_log(value: Any) -> str:
    """Sanitize values before logging to prevent log injection.

    Removes:
        - Newlines
        - ANSI escape codes
        - Control characters

    Max length: 200 characters

    Args:
        value: Value to sanitize (any type, will be converted to string)

    Returns:
        Sanitized string safe for logging.
    """
    text = str(value)

    # Remove newlines
    text = text.replace("\n", " ").replace("\r", " ")

    # Remove ANSI escape codes
    text = re.sub(r"\x1b\[[0-9;]*m", "", text)

    # Remove control characters
    text = "".join(c for c in text if c.isprintable() or c.isspace())

    # Truncate
    if len(text) > 200:
        text = text[:197] + "..."

    return text
