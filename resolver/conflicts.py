"""DNS conflict removal.

Makes systemd-resolved the only authority for DNS by neutralising the
other places DNS servers come from. Every step is idempotent: desired
file content is computed as a pure function of current content, then
written atomically only if it differs.
"""

import config
from logging_config import get_logger
from models import SystemPaths
from utils import atomic_write, read_text, remove_execute

logger = get_logger(__name__)


def rewrite_dhclient_config(content: str) -> str:
    """Return dhclient.conf content with exactly one override block.

    Removes any existing override directives (and our marker comment),
    then appends the canonical block pointing DHCP DNS at the stub
    listener.

    Args:
        content: Current dhclient.conf content

    Returns:
        New content; rewriting the result again yields the same text.
    """
    lines = [
        line
        for line in content.splitlines()
        if not line.startswith(config.DHCLIENT_DIRECTIVES)
        and line.strip() != config.DHCLIENT_MARKER
    ]

    while lines and not lines[-1].strip():
        lines.pop()

    block = [
        config.DHCLIENT_MARKER,
        *(f"{directive} {config.STUB_LISTENER_ADDRESS};" for directive in config.DHCLIENT_DIRECTIVES),
    ]
    if lines:
        block.insert(0, "")

    return "\n".join(lines + block) + "\n"


def configure_dhclient(paths: SystemPaths) -> bool:
    """Ensure dhclient defers DNS to the local stub listener.

    Returns:
        True if the file was rewritten, False if it was absent or already
        in the desired state.

    Raises:
        PermissionDeniedError: File cannot be written.
    """
    content = read_text(paths.dhclient_conf)
    if content is None:
        logger.info("%s not found, skipping DHCP client override", paths.dhclient_conf)
        return False

    desired = rewrite_dhclient_config(content)
    if desired == content:
        logger.debug("%s already configured", paths.dhclient_conf)
        return False

    atomic_write(paths.dhclient_conf, desired)
    logger.info("Added 'ignore' directives to %s", paths.dhclient_conf)
    return True


def disable_hook_script(paths: SystemPaths) -> bool:
    """Remove execute permission from the if-up.d resolved hook.

    Returns:
        True if permissions changed; absence is not an error.

    Raises:
        PermissionDeniedError: chmod not permitted.
    """
    changed = remove_execute(paths.hook_script)
    if changed:
        logger.info("Removed execute permission from %s", paths.hook_script)
    return changed


def comment_legacy_nameservers(content: str) -> str:
    """Comment out per-interface DNS directives in /etc/network/interfaces.

    Indentation is kept; lines already commented are left alone.
    """
    result = []
    for line in content.splitlines():
        stripped = line.lstrip()
        if stripped.startswith(config.LEGACY_INTERFACE_DIRECTIVES):
            indent = line[: len(line) - len(stripped)]
            line = f"{indent}# {stripped}"
        result.append(line)

    text = "\n".join(result)
    if content.endswith("\n"):
        text += "\n"
    return text


def disable_legacy_interface_dns(paths: SystemPaths) -> bool:
    """Apply comment_legacy_nameservers to the interfaces file if present.

    Returns:
        True if the file was rewritten.

    Raises:
        PermissionDeniedError: File cannot be written.
    """
    content = read_text(paths.interfaces)
    if content is None:
        return False

    desired = comment_legacy_nameservers(content)
    if desired == content:
        return False

    atomic_write(paths.interfaces, desired)
    logger.info("Commented out legacy DNS directives in %s", paths.interfaces)
    return True


def remove_conflicts(paths: SystemPaths) -> list[str]:
    """Run every conflict-removal step.

    Returns:
        Human-readable list of changes made (empty if already clean).

    Raises:
        PermissionDeniedError: A config file could not be written (fatal).
    """
    actions = []

    if configure_dhclient(paths):
        actions.append(f"Added 'ignore' directives to {paths.dhclient_conf}")

    if disable_hook_script(paths):
        actions.append(f"Removed execute permission from {paths.hook_script}")

    if disable_legacy_interface_dns(paths):
        actions.append(f"Commented out legacy DNS directives in {paths.interfaces}")

    return actions
