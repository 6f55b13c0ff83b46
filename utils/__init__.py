"""Utilities package for srvbase.

Provides system command execution, file rewrites, service control and
input validation.
"""

from .files import (
    atomic_write,
    backup_file,
    clear_immutable,
    copy_into,
    is_executable,
    is_immutable,
    read_text,
    remove_execute,
    remove_path,
)
from .system import (
    command_exists,
    command_succeeds,
    require_root,
    run_checked,
    run_command,
    sanitize_for_log,
)
from .validators import (
    is_valid_dns_name,
    is_valid_ip,
    is_valid_ipv4,
    is_valid_ipv6,
    validate_hostname,
)

__all__ = [
    # System
    "run_command",
    "run_checked",
    "command_succeeds",
    "command_exists",
    "require_root",
    "sanitize_for_log",
    # Files
    "read_text",
    "atomic_write",
    "backup_file",
    "copy_into",
    "is_executable",
    "is_immutable",
    "clear_immutable",
    "remove_execute",
    "remove_path",
    # Validators
    "is_valid_ipv4",
    "is_valid_ipv6",
    "is_valid_ip",
    "is_valid_dns_name",
    "validate_hostname",
]
