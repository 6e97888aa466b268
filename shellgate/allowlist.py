"""
Fixed registry of the external programs the gateway may run.
"""

# SPDX-License-Identifier: GPL-3.0-or-later

from __future__ import annotations

from dataclasses import dataclass
from types import MappingProxyType
from typing import Dict, FrozenSet, Mapping, Optional


@dataclass(frozen=True)
class AllowlistEntry:
    """A program basename the gateway is allowed to execute."""
    name: str
    category: str
    privileged: bool = True


def _entries(category: str, *names: str, privileged: bool = True) -> Dict[str, AllowlistEntry]:
    return {name: AllowlistEntry(name, category, privileged) for name in names}


# Basenames only; which binary runs is left to PATH. Anything that can
# spawn a shell or interpret code (sh, interpreters, env, xargs, find,
# awk, sed) is deliberately absent.
_ALLOWED_COMMANDS: Dict[str, AllowlistEntry] = {
    **_entries(
        "file",
        "ls", "cat", "pwd", "echo", "head", "tail", "wc", "du", "df",
        "stat", "file", "mkdir", "touch", "cp", "mv", "rm", "rmdir",
        "chmod", "chown", "which",
    ),
    **_entries(
        "info",
        "whoami", "id", "date", "uname", "uptime", "hostname", "arch",
        "nproc", "ps", "free", "printenv",
    ),
    **_entries("text", "grep", "sort", "uniq", "cut", "tr", "tee"),
    **_entries("network", "ping", "netstat", "ifconfig", "ip"),
    # Fetchers write arbitrary files; never as root
    **_entries("network", "curl", "wget", privileged=False),
    **_entries("package", "pkg", "apt", "apt-get", "dpkg"),
}

ALLOWED_COMMANDS: Mapping[str, AllowlistEntry] = MappingProxyType(_ALLOWED_COMMANDS)

# Consulted only by the package install policy
ALLOWED_PACKAGE_MANAGERS: FrozenSet[str] = frozenset({
    "pkg", "apt", "apt-get", "pacman", "yum", "dpkg",
})


def base_command(command: Optional[str]) -> str:
    """
    Return the first whitespace-delimited token of a command string.

    Args:
        command: Possibly multi-token command string

    Returns:
        The program token, or an empty string
    """
    if not command:
        return ""
    parts = command.split()
    return parts[0] if parts else ""


def get_entry(program: str) -> Optional[AllowlistEntry]:
    """Look up the allowlist entry for a program basename."""
    return ALLOWED_COMMANDS.get(program)


def is_allowlisted(program: str, privileged: bool = False) -> bool:
    """
    Check whether a program may run, optionally with privileges.

    Args:
        program: Program basename
        privileged: Whether the program is about to run through ``su``

    Returns:
        True if the program is allowlisted for that mode
    """
    entry = ALLOWED_COMMANDS.get(program)
    if entry is None:
        return False
    return entry.privileged or not privileged


def is_package_manager_allowed(manager: str) -> bool:
    """Check a package manager against the package-manager allowlist."""
    return manager in ALLOWED_PACKAGE_MANAGERS


def commands_by_category() -> Dict[str, list[str]]:
    """Group allowlisted program names by category, sorted."""
    grouped: Dict[str, list[str]] = {}
    for entry in ALLOWED_COMMANDS.values():
        grouped.setdefault(entry.category, []).append(entry.name)
    return {category: sorted(names) for category, names in sorted(grouped.items())}
