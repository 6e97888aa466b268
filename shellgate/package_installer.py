"""
Package install policy: maps a source tag to a package manager and runs the
install as root.
"""

# SPDX-License-Identifier: GPL-3.0-or-later

from __future__ import annotations

from typing import Dict, Optional, Tuple

from .allowlist import is_package_manager_allowed
from .exceptions import PackagePolicyError
from .executor import ExecutionEngine
from .models import ExecutionResult
from .utils.logger import get_logger, log_security_event
from .utils.validators import validate_package_name

logger = get_logger(__name__)

DEFAULT_PACKAGE_MANAGER = "pkg"

SOURCE_PACKAGE_MANAGERS: Dict[str, str] = {
    "apt": "apt-get",
    "ubuntu": "apt-get",
    "debian": "apt-get",
    "pacman": "pacman",
    "arch": "pacman",
    "yum": "yum",
    "rpm": "yum",
}

INSTALL_SUBCOMMANDS: Dict[str, str] = {
    "apt-get": "install -y",
    "pacman": "-S --noconfirm",
    "yum": "install -y",
    "pkg": "install -y",
}

INVALID_PACKAGE_NAME = ("Invalid package name. Only alphanumeric characters, "
                        "dashes, and underscores are allowed.")
MANAGER_NOT_ALLOWED = "Package manager not allowed"


def resolve_package_manager(source: Optional[str]) -> Tuple[str, str]:
    """
    Pick the package manager and install subcommand for a source tag.

    Args:
        source: Source tag such as "debian" or "arch"; unknown tags and None
            fall back to ``pkg``

    Returns:
        Tuple of (manager, install subcommand)
    """
    manager = SOURCE_PACKAGE_MANAGERS.get(source or "", DEFAULT_PACKAGE_MANAGER)
    return manager, INSTALL_SUBCOMMANDS[manager]


def build_install_command(package_name: str, source: Optional[str] = None) -> str:
    """
    Build the install command string for the privileged shell.

    The string is handed to ``su -c`` as one token; the package-name pattern
    is what keeps it injection-free.

    Args:
        package_name: Package to install
        source: Source tag selecting the package manager

    Returns:
        Command string such as ``apt-get install -y curl``

    Raises:
        PackagePolicyError: If the name or the selected manager is not permitted
    """
    if not validate_package_name(package_name):
        log_security_event(
            "INVALID_PACKAGE_NAME",
            {"package": package_name, "source": source},
            severity="warning"
        )
        raise PackagePolicyError(INVALID_PACKAGE_NAME)

    manager, subcommand = resolve_package_manager(source)
    if not is_package_manager_allowed(manager):
        log_security_event(
            "PACKAGE_MANAGER_NOT_ALLOWED",
            {"manager": manager, "source": source},
            severity="warning"
        )
        raise PackagePolicyError(MANAGER_NOT_ALLOWED)

    return f"{manager} {subcommand} {package_name}"


class PackageInstaller:
    """Installs packages through the privileged shell."""

    def __init__(self, engine: Optional[ExecutionEngine] = None) -> None:
        """
        Initialize the installer.

        Args:
            engine: Execution engine used to spawn ``su``
        """
        self.engine = engine or ExecutionEngine()

    def install_package(self, package_name: str, source: Optional[str] = None) -> ExecutionResult:
        """
        Install a package as root.

        Policy violations return an exit-code-1 result without spawning
        anything.

        Args:
            package_name: Package to install
            source: Source tag selecting the package manager

        Returns:
            ExecutionResult instance
        """
        try:
            command = build_install_command(package_name, source)
        except PackagePolicyError as e:
            return ExecutionResult.failure(str(e))

        log_security_event(
            "PACKAGE_INSTALL",
            {"package": package_name, "command": command},
            severity="info"
        )
        logger.info(f"Installing {package_name} with: {command}")

        return self.engine.run_privileged(command, failure_prefix="Package installation failed: ")
