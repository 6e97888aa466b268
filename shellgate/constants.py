"""
Application constants for the Shell Gateway.
"""

# SPDX-License-Identifier: GPL-3.0-or-later

import os
from pathlib import Path

# Application info
APP_NAME = "Shell Gateway"
APP_VERSION = "1.3.0"
APP_USER_AGENT = f"ShellGateway/{APP_VERSION}"

# File permissions (octal)
CONFIG_DIR_PERMISSIONS = 0o700  # rwx------
CONFIG_FILE_PERMISSIONS = 0o600  # rw-------
LOG_DIR_PERMISSIONS = 0o700     # rwx------

# Characters that must never appear in a command or argument
DANGEROUS_CHARS_PATTERN = r'[;&|`$<>(){}\[\]\n\r]'

# Package names accepted by the install policy
PACKAGE_NAME_PATTERN = r'^[A-Za-z0-9_-]+$'

# Environment injected into unprivileged processes
DEFAULT_TERM = "xterm-256color"
DEFAULT_LANG = "en_US.UTF-8"

# Privilege escalation
PRIVILEGE_COMMAND = "su"
PRIVILEGE_FLAG = "-c"
ROOT_PROBE_COMMAND = "echo test"

# Limits
MAX_READ_FILE_SIZE = 10 * 1024 * 1024  # 10MB
MAX_CONFIG_FILE_SIZE = 1024 * 1024     # 1MB
DOWNLOAD_CHUNK_SIZE = 4096
MAX_DOWNLOAD_REDIRECTS = 3

# Network timeouts (seconds)
DOWNLOAD_TIMEOUT = 30

# Session layout under the application root
HOME_SUBDIRECTORIES = ("bin", "tmp", "downloads", ".config")
LINUX_SUBDIRECTORIES = (
    "bin",
    "etc",
    "tmp",
    "var/log",
    "var/tmp",
    "usr/bin",
    "usr/lib",
    "usr/share",
    "opt",
    "root",
)
DEFAULT_LINUX_USER = "cvj"
DEFAULT_HOSTNAME = "terminalos"


# Paths
def get_config_dir() -> Path:
    """Get the configuration directory path."""
    return Path.home() / ".config" / "shellgate"


def get_data_dir() -> Path:
    """Get the app-private data directory that holds the sandboxed tree."""
    override = os.environ.get("SHELLGATE_ROOT")
    if override:
        return Path(override)
    return Path.home() / ".local" / "share" / "shellgate"


def get_default_config_path() -> Path:
    """Get the default configuration file path."""
    override = os.environ.get("SHELLGATE_CONFIG")
    if override:
        return Path(override)
    return get_config_dir() / "config.json"


def get_log_dir() -> Path:
    """Get the log directory path."""
    return get_config_dir() / "logs"
